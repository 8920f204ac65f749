"""NumPy building blocks for small networks: activations, vector helpers, col2im, boxes, detection output and layers."""

__version__ = "0.1.0"