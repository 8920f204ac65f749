[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "darkweave"
version = "0.1.0"
description = "NumPy toolkit for small networks: activations, vector helpers, col2im, box geometry, NMS, detection output and CPU layers"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "neural-network",
    "activation-functions",
    "col2im",
    "object-detection",
    "non-maximum-suppression",
    "numpy",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
darkweave = "darkweave.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["darkweave"]

[tool.hatch.build.targets.sdist]
include = [
    "darkweave",
    "tests",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"
