"""A layer that averages each channel over its whole spatial extent."""

from __future__ import annotations

import sys

import numpy as np

from .state import NetworkState


class AvgPoolLayer:
    """Global average pooling: one output per channel and example."""

    def __init__(self, batch: int, w: int, h: int, c: int) -> None:
        if min(batch, w, h, c) <= 0:
            raise ValueError("batch, w, h and c must be positive")
        print(f"Avgpool Layer: {w} x {h} x {c} image", file=sys.stderr)
        self.batch = batch
        self.w = w
        self.h = h
        self.c = c
        self.out_w = 1
        self.out_h = 1
        self.out_c = c
        self.outputs = c
        self.inputs = h * w * c
        self.output = np.zeros(self.outputs * batch, dtype=np.float32)
        self.delta = np.zeros(self.outputs * batch, dtype=np.float32)

    def resize(self, w: int, h: int) -> None:
        """Change the spatial size of the input."""
        self.w = w
        self.h = h

    def _blocks(self, arr: np.ndarray, name: str) -> np.ndarray:
        if not isinstance(arr, np.ndarray):
            raise TypeError(f"{name} must be a numpy array")
        spatial = self.h * self.w
        n = self.batch * self.c * spatial
        flat = arr.reshape(-1)
        if flat.size < n:
            raise ValueError(f"{name} holds {flat.size} values, needs {n}")
        return flat[:n].reshape(self.batch, self.c, spatial)

    def forward(self, state: NetworkState) -> np.ndarray:
        """Average every channel of the input; return the output."""
        blocks = self._blocks(state.input, "input")
        self.output[...] = blocks.mean(axis=2).reshape(-1)
        return self.output

    def backward(self, state: NetworkState) -> None:
        """Spread each output delta evenly over the channel's input positions."""
        if state.delta is None:
            raise ValueError("the state has no delta to accumulate into")
        blocks = self._blocks(state.delta, "delta")
        share = self.delta.reshape(self.batch, self.c) / (self.h * self.w)
        blocks += share[:, :, None]