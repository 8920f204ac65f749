"""The data a layer sees during a forward or backward pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


def _as_array(value):
    if value is None or isinstance(value, np.ndarray):
        return value
    return np.asarray(value, dtype=np.float32)


@dataclass
class NetworkState:
    """Input, expected output, upstream delta and mode for one pass."""

    input: np.ndarray
    truth: Optional[np.ndarray] = None
    delta: Optional[np.ndarray] = None
    train: bool = False

    def __post_init__(self) -> None:
        self.input = _as_array(self.input)
        self.truth = _as_array(self.truth)
        self.delta = _as_array(self.delta)