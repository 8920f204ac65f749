"""A layer that measures the squared error between its input and the truth."""

from __future__ import annotations

import sys
from enum import Enum

import numpy as np

from .blas import axpy, dot
from .state import NetworkState

SECRET_NUM = -1234.0
"""Truth value marking an output that a masked cost ignores."""


class CostType(Enum):
    """Kinds of cost a cost layer can compute."""

    SSE = "sse"
    MASKED = "masked"


def get_cost_type(s: str) -> CostType:
    """Look up a cost type by name, falling back to SSE with a warning."""
    try:
        return CostType(s)
    except ValueError:
        print(f"Couldn't find cost function {s}, going with SSE", file=sys.stderr)
        return CostType.SSE


def get_cost_string(a: CostType) -> str:
    """Return the configuration name of a cost type."""
    return a.value


def _flat(arr: np.ndarray, n: int, name: str) -> np.ndarray:
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"{name} must be a numpy array")
    flat = arr.reshape(-1)
    if flat.size < n:
        raise ValueError(f"{name} holds {flat.size} values, needs {n}")
    return flat[:n]


class CostLayer:
    """Sum of squared differences between input and truth.

    ``delta`` holds truth minus input after a forward pass and ``output``
    the resulting cost.
    """

    def __init__(self, batch: int, inputs: int, cost_type: CostType = CostType.SSE,
                 scale: float = 1.0) -> None:
        if batch <= 0 or inputs <= 0:
            raise ValueError("batch and inputs must be positive")
        print(f"Cost Layer: {inputs} inputs", file=sys.stderr)
        self.batch = batch
        self.inputs = inputs
        self.outputs = inputs
        self.cost_type = cost_type
        self.scale = scale
        self.delta = np.zeros(inputs * batch, dtype=np.float32)
        self.output = 0.0

    def resize(self, inputs: int) -> None:
        """Change the number of inputs per example, keeping what fits of delta."""
        if inputs <= 0:
            raise ValueError("inputs must be positive")
        new_delta = np.zeros(inputs * self.batch, dtype=np.float32)
        keep = min(new_delta.size, self.delta.size)
        new_delta[:keep] = self.delta[:keep]
        self.inputs = inputs
        self.outputs = inputs
        self.delta = new_delta

    def forward(self, state: NetworkState) -> float:
        """Compute delta and the cost; without truth nothing changes."""
        if state.truth is None:
            return self.output
        n = self.batch * self.inputs
        truth = _flat(state.truth, n, "truth")
        inp = _flat(state.input, n, "input")
        if self.cost_type is CostType.MASKED:
            inp[truth == SECRET_NUM] = SECRET_NUM
        self.delta[...] = truth - inp
        self.output = dot(self.delta, self.delta)
        return self.output

    def backward(self, state: NetworkState) -> None:
        """Add the scaled delta into the upstream delta."""
        if state.delta is None:
            raise ValueError("the state has no delta to accumulate into")
        target = _flat(state.delta, self.batch * self.inputs, "delta")
        axpy(self.scale, self.delta, target)