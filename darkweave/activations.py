"""Activation functions and their gradients."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Callable

import numpy as np


class Activation(Enum):
    """Activation functions a layer can apply to its output."""

    LOGISTIC = "logistic"
    RELU = "relu"
    RELIE = "relie"
    LINEAR = "linear"
    RAMP = "ramp"
    TANH = "tanh"
    PLSE = "plse"
    LEAKY = "leaky"
    ELU = "elu"


_Fn = Callable[[np.ndarray], np.ndarray]


def _plse(x: np.ndarray) -> np.ndarray:
    return np.where(x < -4, 0.01 * (x + 4), np.where(x > 4, 0.01 * (x - 4) + 1, 0.125 * x + 0.5))


_ACTIVATE: dict[Activation, _Fn] = {
    Activation.LINEAR: lambda x: x,
    Activation.LOGISTIC: lambda x: 1.0 / (1.0 + np.exp(-x)),
    Activation.RELU: lambda x: x * (x > 0),
    Activation.ELU: lambda x: np.where(x >= 0, x, np.expm1(x)),
    Activation.RELIE: lambda x: x * (x > 0),
    Activation.RAMP: lambda x: x * (x > 0) + 0.1 * x,
    Activation.LEAKY: lambda x: np.where(x > 0, x, 0.1 * x),
    Activation.TANH: np.tanh,
    Activation.PLSE: _plse,
}

# Gradients are expressed in terms of the activation's output, not its input.
_GRADIENT: dict[Activation, _Fn] = {
    Activation.LINEAR: lambda y: np.ones_like(y),
    Activation.LOGISTIC: lambda y: (1 - y) * y,
    Activation.RELU: lambda y: (y > 0) * 1.0,
    Activation.ELU: lambda y: (y >= 0) + (y < 0) * (y + 1),
    Activation.RELIE: lambda y: np.where(y > 0, 1.0, 0.01),
    Activation.RAMP: lambda y: (y > 0) + 0.1,
    Activation.LEAKY: lambda y: np.where(y > 0, 1.0, 0.1),
    Activation.TANH: lambda y: 1 - y * y,
    Activation.PLSE: lambda y: np.where((y < 0) | (y > 1), 0.01, 0.125),
}


def get_activation(s: str) -> Activation:
    """Look up an activation by name, falling back to ReLU with a warning."""
    try:
        return Activation(s)
    except ValueError:
        print(f"Couldn't find activation function {s}, going with ReLU", file=sys.stderr)
        return Activation.RELU


def get_activation_string(a: Activation) -> str:
    """Return the configuration name of an activation."""
    return a.value


def activate(x: float, a: Activation) -> float:
    """Apply an activation to a single value."""
    with np.errstate(over="ignore", invalid="ignore"):
        return float(_ACTIVATE[a](np.float64(x)))


def gradient(x: float, a: Activation) -> float:
    """Gradient of an activation, given the activation's output value."""
    return float(_GRADIENT[a](np.float64(x)))


def activate_array(x: np.ndarray, a: Activation) -> np.ndarray:
    """Apply an activation to every element of an array in place and return it."""
    if not isinstance(x, np.ndarray):
        raise TypeError("activate_array needs a numpy array")
    with np.errstate(over="ignore", invalid="ignore"):
        x[...] = _ACTIVATE[a](x)
    return x


def gradient_array(x: np.ndarray, a: Activation, delta: np.ndarray) -> np.ndarray:
    """Multiply delta in place by the activation gradient at outputs x."""
    if not isinstance(delta, np.ndarray):
        raise TypeError("gradient_array needs a numpy array for delta")
    x = np.asarray(x)
    if x.shape != delta.shape:
        raise ValueError(f"shape mismatch: {x.shape} and {delta.shape}")
    delta *= _GRADIENT[a](x)
    return delta