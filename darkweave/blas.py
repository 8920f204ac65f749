"""Vector primitives and batch statistics on flat float arrays."""

from __future__ import annotations

import numpy as np


def _flat_view(arr: np.ndarray, name: str) -> np.ndarray:
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"{name} must be a numpy array")
    if not arr.flags.c_contiguous:
        raise ValueError(f"{name} must be contiguous")
    return arr.reshape(-1)


def _blocks(x: np.ndarray, name: str, batch: int, filters: int, spatial: int) -> np.ndarray:
    flat = _flat_view(x, name)
    n = batch * filters * spatial
    if flat.size < n:
        raise ValueError(f"{name} holds {flat.size} values, needs {n}")
    return flat[:n].reshape(batch, filters, spatial)


def _same_shape(x: np.ndarray, y: np.ndarray) -> None:
    if np.shape(x) != np.shape(y):
        raise ValueError(f"shape mismatch: {np.shape(x)} and {np.shape(y)}")


def shortcut_cpu(out, w, h, c, batch, sample, add, stride, c2):
    """Add a (possibly rescaled) feature map into another, in place."""
    out_flat = _flat_view(out, "out")
    add_flat = _flat_view(add, "add")
    channels = np.arange(min(c, c2))
    rows = np.arange(h // sample)
    cols = np.arange(w // sample)
    add_w = w * stride // sample
    add_h = h * stride // sample
    out_offsets = (
        cols[None, None, :] * sample
        + w * (rows[None, :, None] * sample + h * channels[:, None, None])
    )
    add_offsets = (
        cols[None, None, :] * stride
        + add_w * (rows[None, :, None] * stride + add_h * channels[:, None, None])
    )
    for b in range(batch):
        add_base = b * w * stride // sample * h * stride // sample * c2
        out_flat[out_offsets + w * h * c * b] += add_flat[add_offsets + add_base]
    return out


def mean_cpu(x, batch, filters, spatial):
    """Per-filter mean over batch and spatial positions."""
    block = _blocks(x, "x", batch, filters, spatial)
    dtype = np.result_type(block.dtype, np.float32)
    return (block.sum(axis=(0, 2)) / (batch * spatial)).astype(dtype)


def variance_cpu(x, mean, batch, filters, spatial):
    """Per-filter (biased) variance around the given means."""
    block = _blocks(x, "x", batch, filters, spatial)
    mean = np.asarray(mean)[:filters]
    dtype = np.result_type(block.dtype, np.float32)
    squared = (block - mean[None, :, None]) ** 2
    return (squared.sum(axis=(0, 2)) / (batch * spatial)).astype(dtype)


def normalize_cpu(x, mean, variance, batch, filters, spatial):
    """Normalise x in place to zero mean and unit variance per filter."""
    block = _blocks(x, "x", batch, filters, spatial)
    mean = np.asarray(mean)[:filters]
    std = np.sqrt(np.asarray(variance)[:filters])
    with np.errstate(divide="ignore", invalid="ignore"):
        block[...] = (block - mean[None, :, None]) / std[None, :, None]
    return x


def axpy(alpha, x, y):
    """y += alpha * x, in place."""
    _same_shape(x, y)
    y += alpha * np.asarray(x)
    return y


def scal(alpha, x):
    """x *= alpha, in place."""
    x *= alpha
    return x


def fill(alpha, x):
    """Set every element of x to alpha."""
    x[...] = alpha
    return x


def copy(x, y):
    """Copy x into y."""
    _same_shape(x, y)
    y[...] = x
    return y


def mul(x, y):
    """y *= x, elementwise and in place."""
    _same_shape(x, y)
    y *= np.asarray(x)
    return y


def power(alpha, x, y):
    """y = x ** alpha, elementwise."""
    _same_shape(x, y)
    y[...] = np.power(np.asarray(x, dtype=np.float64), alpha)
    return y


def dot(x, y):
    """Dot product of two equally long vectors."""
    _same_shape(x, y)
    return float(np.dot(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)))