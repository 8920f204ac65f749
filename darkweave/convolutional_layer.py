"""A two-dimensional convolutional layer's parameters, shapes and updates."""

from __future__ import annotations

import math
import sys
from typing import Optional

import numpy as np

from .activations import Activation
from .blas import axpy, scal


def _blocks(arr: np.ndarray, name: str, batch: int, n: int, size: int) -> np.ndarray:
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"{name} must be a numpy array")
    if not arr.flags.c_contiguous:
        raise ValueError(f"{name} must be contiguous")
    flat = arr.reshape(-1)
    needed = batch * n * size
    if flat.size < needed:
        raise ValueError(f"{name} holds {flat.size} values, needs {needed}")
    return flat[:needed].reshape(batch, n, size)


def add_bias(output, biases, batch, n, size):
    """Add one bias per filter to every spatial position, in place."""
    blocks = _blocks(output, "output", batch, n, size)
    blocks += np.asarray(biases)[:n][None, :, None]
    return output


def scale_bias(output, scales, batch, n, size):
    """Multiply every spatial position by its filter's scale, in place."""
    blocks = _blocks(output, "output", batch, n, size)
    blocks *= np.asarray(scales)[:n][None, :, None]
    return output


def backward_bias(bias_updates, delta, batch, n, size):
    """Accumulate each filter's summed delta into bias_updates, in place."""
    blocks = _blocks(np.ascontiguousarray(delta), "delta", batch, n, size)
    bias_updates[:n] += blocks.sum(axis=(0, 2))
    return bias_updates


def _resized(old: np.ndarray, size: int) -> np.ndarray:
    new = np.zeros(size, dtype=np.float32)
    keep = min(size, old.size)
    new[:keep] = old[:keep]
    return new


class ConvolutionalLayer:
    """Convolution with n filters of size x size over c input channels.

    Filters are stored with shape (n, c, size, size). A true ``pad`` pads by
    size // 2 so that the output is ceil(input / stride) wide and high.
    """

    def __init__(self, batch: int, h: int, w: int, c: int, n: int, size: int,
                 stride: int, pad: bool, activation: Activation = Activation.LEAKY,
                 batch_normalize: bool = False,
                 rng: Optional[np.random.Generator] = None) -> None:
        if min(batch, h, w, c, n, size, stride) <= 0:
            raise ValueError("batch, h, w, c, n, size and stride must be positive")
        rng = rng if rng is not None else np.random.default_rng()
        self.batch = batch
        self.h = h
        self.w = w
        self.c = c
        self.n = n
        self.size = size
        self.stride = stride
        self.pad = bool(pad)
        self.activation = activation
        self.batch_normalize = bool(batch_normalize)

        shape = (n, c, size, size)
        scale = math.sqrt(2.0 / (size * size * c))
        self.filters = (2 * scale * rng.random(shape) - scale).astype(np.float32)
        self.filter_updates = np.zeros(shape, dtype=np.float32)
        self.biases = np.zeros(n, dtype=np.float32)
        self.bias_updates = np.zeros(n, dtype=np.float32)

        self.out_c = n
        self._set_output_shape()
        self.col_image = np.zeros(self._col_size(), dtype=np.float32)
        self.output = np.zeros(batch * self.outputs, dtype=np.float32)
        self.delta = np.zeros(batch * self.outputs, dtype=np.float32)

        if self.batch_normalize:
            self.scales: Optional[np.ndarray] = np.ones(n, dtype=np.float32)
            self.scale_updates: Optional[np.ndarray] = np.zeros(n, dtype=np.float32)
            self.mean: Optional[np.ndarray] = np.zeros(n, dtype=np.float32)
            self.variance: Optional[np.ndarray] = np.zeros(n, dtype=np.float32)
            self.rolling_mean: Optional[np.ndarray] = np.zeros(n, dtype=np.float32)
            self.rolling_variance: Optional[np.ndarray] = np.zeros(n, dtype=np.float32)
        else:
            self.scales = None
            self.scale_updates = None
            self.mean = None
            self.variance = None
            self.rolling_mean = None
            self.rolling_variance = None

        print(
            f"Convolutional Layer: {h} x {w} x {c} image, {n} filters -> "
            f"{self.out_h} x {self.out_w} x {n} image",
            file=sys.stderr,
        )

    def _out_size(self, extent: int) -> int:
        extent -= 1 if self.pad else self.size
        return int(extent / self.stride) + 1

    def out_height(self) -> int:
        """Height of the output feature map."""
        return self._out_size(self.h)

    def out_width(self) -> int:
        """Width of the output feature map."""
        return self._out_size(self.w)

    def _set_output_shape(self) -> None:
        out_h = self.out_height()
        out_w = self.out_width()
        if out_h <= 0 or out_w <= 0:
            raise ValueError("the filter is larger than the unpadded input")
        self.out_h = out_h
        self.out_w = out_w
        self.outputs = out_h * out_w * self.out_c
        self.inputs = self.w * self.h * self.c

    def _col_size(self) -> int:
        return self.out_h * self.out_w * self.size * self.size * self.c

    def resize(self, w: int, h: int) -> None:
        """Change the input size, recomputing output shape and buffers."""
        if w <= 0 or h <= 0:
            raise ValueError("w and h must be positive")
        old_w, old_h = self.w, self.h
        self.w, self.h = w, h
        try:
            self._set_output_shape()
        except ValueError:
            self.w, self.h = old_w, old_h
            raise
        self.col_image = _resized(self.col_image, self._col_size())
        self.output = _resized(self.output, self.batch * self.outputs)
        self.delta = _resized(self.delta, self.batch * self.outputs)

    def update(self, batch: int, learning_rate: float, momentum: float,
               decay: float) -> None:
        """Apply accumulated updates with momentum and weight decay."""
        axpy(learning_rate / batch, self.bias_updates, self.biases)
        scal(momentum, self.bias_updates)

        axpy(-decay * batch, self.filters, self.filter_updates)
        axpy(learning_rate / batch, self.filter_updates, self.filters)
        scal(momentum, self.filter_updates)

    def denormalize(self) -> None:
        """Fold the rolling batch-normalisation statistics into filters and biases."""
        if self.scales is None or self.rolling_mean is None or self.rolling_variance is None:
            raise ValueError("the layer has no batch-normalisation parameters")
        factor = self.scales / np.sqrt(self.rolling_variance + 0.00001)
        self.filters *= factor[:, None, None, None]
        self.biases -= self.rolling_mean * factor

    def get_filter(self, i: int) -> np.ndarray:
        """Filter i as a (c, size, size) view into the layer's filters."""
        if not 0 <= i < self.n:
            raise IndexError(f"filter {i} out of range for {self.n} filters")
        return self.filters[i]

    def rgbgr_filters(self) -> None:
        """Swap the first and third channel of every three-channel filter."""
        if self.c == 3:
            self.filters[:, [0, 2]] = self.filters[:, [2, 0]]

    def rescale_filters(self, scale: float, trans: float) -> None:
        """Adapt three-channel filters to inputs mapped by x * scale + trans."""
        if self.c != 3:
            return
        self.filters *= scale
        sums = self.filters.reshape(self.n, -1).sum(axis=1)
        self.biases += sums * trans