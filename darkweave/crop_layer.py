"""A layer that crops, optionally flips, and rescales its input images."""

from __future__ import annotations

import random
import sys
from typing import Optional

import numpy as np

from .state import NetworkState


class CropLayer:
    """Crop a crop_height x crop_width window out of each image.

    In training the window is placed at random and may be mirrored; otherwise
    it is centred. Values are mapped from [0, 1] to [-1, 1] unless
    ``noadjust`` is set.
    """

    def __init__(self, batch: int, h: int, w: int, c: int, crop_height: int,
                 crop_width: int, flip: bool, angle: float, saturation: float,
                 exposure: float, rng: Optional[random.Random] = None) -> None:
        if min(batch, h, w, c, crop_height, crop_width) <= 0:
            raise ValueError("sizes must be positive")
        if crop_height > h or crop_width > w:
            raise ValueError("the crop is larger than the image")
        print(f"Crop Layer: {h} x {w} -> {crop_height} x {crop_width} x {c} image",
              file=sys.stderr)
        self.batch = batch
        self.h = h
        self.w = w
        self.c = c
        self.flip = bool(flip)
        self.angle = angle
        self.saturation = saturation
        self.exposure = exposure
        self.noadjust = False
        self.crop_width = crop_width
        self.crop_height = crop_height
        self.out_w = crop_width
        self.out_h = crop_height
        self.out_c = c
        self.inputs = w * h * c
        self.outputs = crop_width * crop_height * c
        self.output = np.zeros(self.outputs * batch, dtype=np.float32)
        self._rng = rng if rng is not None else random.Random()

    def forward(self, state: NetworkState) -> np.ndarray:
        """Crop every image of the batch into the output; return it."""
        if not isinstance(state.input, np.ndarray):
            raise TypeError("input must be a numpy array")
        n = self.batch * self.inputs
        flat = state.input.reshape(-1)
        if flat.size < n:
            raise ValueError(f"input holds {flat.size} values, needs {n}")

        flip = self.flip and self._rng.randrange(2) == 1
        dh = self._rng.randrange(self.h - self.crop_height + 1)
        dw = self._rng.randrange(self.w - self.crop_width + 1)
        scale, trans = (1.0, 0.0) if self.noadjust else (2.0, -1.0)
        if not state.train:
            flip = False
            dh = (self.h - self.crop_height) // 2
            dw = (self.w - self.crop_width) // 2

        images = flat[:n].reshape(self.batch, self.c, self.h, self.w)
        rows = images[:, :, dh:dh + self.crop_height, :]
        if flip:
            window = rows[..., self.w - dw - self.crop_width:self.w - dw][..., ::-1]
        else:
            window = rows[..., dw:dw + self.crop_width]
        self.output[...] = (window * scale + trans).reshape(-1)
        return self.output