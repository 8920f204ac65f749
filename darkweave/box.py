"""Axis-aligned boxes given by centre and size, their overlap measures and NMS."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import MutableSequence, Sequence


@dataclass
class Box:
    """A box given by its centre (x, y), width w and height h."""

    x: float
    y: float
    w: float
    h: float


@dataclass
class DBox:
    """Partial derivatives with respect to a box's x, y, w and h."""

    dx: float = 0.0
    dy: float = 0.0
    dw: float = 0.0
    dh: float = 0.0


def float_to_box(f: Sequence[float]) -> Box:
    """Build a box from the first four values of a sequence: x, y, w, h."""
    if len(f) < 4:
        raise ValueError(f"a box needs four values, got {len(f)}")
    return Box(float(f[0]), float(f[1]), float(f[2]), float(f[3]))


def overlap(x1: float, w1: float, x2: float, w2: float) -> float:
    """Length shared by two centred intervals; negative when they are apart."""
    left = max(x1 - w1 / 2, x2 - w2 / 2)
    right = min(x1 + w1 / 2, x2 + w2 / 2)
    return right - left


def box_intersection(a: Box, b: Box) -> float:
    """Area of the intersection of two boxes."""
    w = overlap(a.x, a.w, b.x, b.w)
    h = overlap(a.y, a.h, b.y, b.h)
    if w < 0 or h < 0:
        return 0.0
    return w * h


def box_union(a: Box, b: Box) -> float:
    """Area of the union of two boxes."""
    return a.w * a.h + b.w * b.h - box_intersection(a, b)


def box_iou(a: Box, b: Box) -> float:
    """Intersection over union; NaN when both boxes have no area."""
    u = box_union(a, b)
    i = box_intersection(a, b)
    if u == 0:
        return math.nan
    return i / u


def box_rmse(a: Box, b: Box) -> float:
    """Euclidean distance between two boxes seen as 4-vectors."""
    return math.sqrt(
        (a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.w - b.w) ** 2 + (a.h - b.h) ** 2
    )


def _axis_derivative(c1: float, s1: float, c2: float, s2: float) -> tuple[float, float]:
    d_centre = 0.0
    d_size = 0.0
    lo1, lo2 = c1 - s1 / 2, c2 - s2 / 2
    hi1, hi2 = c1 + s1 / 2, c2 + s2 / 2
    if lo1 > lo2:
        d_centre -= 1
        d_size += 0.5
    if hi1 < hi2:
        d_centre += 1
        d_size += 0.5
    if lo1 > hi2:
        d_centre, d_size = -1.0, 0.0
    if hi1 < lo2:
        d_centre, d_size = 1.0, 0.0
    return d_centre, d_size


def derivative(a: Box, b: Box) -> DBox:
    """Derivative of the one-dimensional overlaps with respect to box a."""
    dx, dw = _axis_derivative(a.x, a.w, b.x, b.w)
    dy, dh = _axis_derivative(a.y, a.h, b.y, b.h)
    return DBox(dx=dx, dy=dy, dw=dw, dh=dh)


def dintersect(a: Box, b: Box) -> DBox:
    """Derivative of the intersection area with respect to box a."""
    w = overlap(a.x, a.w, b.x, b.w)
    h = overlap(a.y, a.h, b.y, b.h)
    d = derivative(a, b)
    return DBox(dx=d.dx * h, dy=d.dy * w, dw=d.dw * h, dh=d.dh * w)


def dunion(a: Box, b: Box) -> DBox:
    """Derivative of the union area with respect to box a."""
    di = dintersect(a, b)
    return DBox(dx=-di.dx, dy=-di.dy, dw=a.h - di.dw, dh=a.w - di.dh)


def diou(a: Box, b: Box) -> DBox:
    """Step that moves box a towards box b: the coordinate differences b - a."""
    return DBox(dx=b.x - a.x, dy=b.y - a.y, dw=b.w - a.w, dh=b.h - a.h)


def _check_sizes(boxes: Sequence[Box], probs: Sequence) -> None:
    if len(boxes) != len(probs):
        raise ValueError(f"{len(boxes)} boxes but {len(probs)} rows of probabilities")


def do_nms_sort(boxes: Sequence[Box], probs: MutableSequence, thresh: float):
    """Per class, zero the scores of boxes overlapping a better-scoring box.

    probs holds one row of class scores per box and is changed in place.
    """
    _check_sizes(boxes, probs)
    if not len(boxes):
        return probs
    classes = len(probs[0])
    for k in range(classes):
        order = sorted(range(len(boxes)), key=lambda idx: -probs[idx][k])
        for pos, i in enumerate(order):
            if probs[i][k] == 0:
                continue
            a = boxes[i]
            for j in order[pos + 1:]:
                if box_iou(a, boxes[j]) > thresh:
                    probs[j][k] = 0
    return probs


def do_nms(boxes: Sequence[Box], probs: MutableSequence, thresh: float):
    """For each overlapping pair of boxes keep, per class, only the higher score.

    probs holds one row of class scores per box and is changed in place.
    """
    _check_sizes(boxes, probs)
    total = len(boxes)
    for i in range(total):
        classes = len(probs[i])
        if not any(probs[i][k] > 0 for k in range(classes)):
            continue
        for j in range(i + 1, total):
            if box_iou(boxes[i], boxes[j]) > thresh:
                for k in range(classes):
                    if probs[i][k] < probs[j][k]:
                        probs[i][k] = 0
                    else:
                        probs[j][k] = 0
    return probs


def encode_box(b: Box, anchor: Box) -> Box:
    """Express a box relative to an anchor: offsets scaled, sizes as log2 ratios."""
    return Box(
        x=(b.x - anchor.x) / anchor.w,
        y=(b.y - anchor.y) / anchor.h,
        w=math.log2(b.w / anchor.w),
        h=math.log2(b.h / anchor.h),
    )


def decode_box(b: Box, anchor: Box) -> Box:
    """Invert encode_box: recover an absolute box from its anchor-relative form."""
    return Box(
        x=b.x * anchor.w + anchor.x,
        y=b.y * anchor.h + anchor.y,
        w=2.0 ** b.w * anchor.w,
        h=2.0 ** b.h * anchor.h,
    )