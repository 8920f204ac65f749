"""Turning grid-detector output into boxes and COCO result records."""

from __future__ import annotations

import re
from typing import Sequence, TextIO

import numpy as np

from .box import Box

COCO_CLASSES: tuple[str, ...] = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear",
    "hair drier", "toothbrush",
)

COCO_IDS: tuple[int, ...] = (
    1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22,
    23, 24, 25, 27, 28, 31, 32, 33, 34, 35, 36, 37, 38, 39, 40, 41, 42, 43, 44,
    46, 47, 48, 49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64,
    65, 67, 70, 72, 73, 74, 75, 76, 77, 78, 79, 80, 81, 82, 84, 85, 86, 87, 88,
    89, 90,
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def convert_coco_detections(predictions, classes, num, square, side, w, h, thresh,
                            only_objectness):
    """Decode a side x side grid of predictions into boxes and class scores.

    The prediction vector holds, in order, per-cell class probabilities,
    per-box objectness scales and per-box coordinates (x, y, w, h).
    Returns a list of side*side*num boxes and an array of their class scores,
    with scores at or below thresh set to zero. With only_objectness the first
    column holds the raw objectness instead.
    """
    preds = np.asarray(predictions, dtype=np.float64).reshape(-1)
    cells = side * side
    needed = cells * (classes + num * 5)
    if preds.size < needed:
        raise ValueError(f"predictions hold {preds.size} values, need {needed}")

    class_probs = preds[: cells * classes].reshape(cells, classes)
    scales = preds[cells * classes: cells * (classes + num)].reshape(cells, num)
    coord_start = cells * (classes + num)
    coords = preds[coord_start: coord_start + cells * num * 4].reshape(cells, num, 4)

    cell_index = np.arange(cells)
    rows = (cell_index // side)[:, None]
    cols = (cell_index % side)[:, None]
    exponent = 2 if square else 1

    xs = (coords[..., 0] + cols) / side * w
    ys = (coords[..., 1] + rows) / side * h
    ws = coords[..., 2] ** exponent * w
    hs = coords[..., 3] ** exponent * h

    boxes = [
        Box(float(x), float(y), float(bw), float(bh))
        for x, y, bw, bh in zip(xs.ravel(), ys.ravel(), ws.ravel(), hs.ravel())
    ]

    probs = scales[:, :, None] * class_probs[:, None, :]
    probs = np.where(probs > thresh, probs, 0.0).reshape(cells * num, classes)
    if only_objectness and classes > 0:
        probs[:, 0] = scales.ravel()
    return boxes, probs


def print_cocos(fp: TextIO, image_id: int, boxes: Sequence[Box], probs, w, h) -> int:
    """Write one COCO result record per non-zero class score; return the count.

    Boxes are clipped to the w x h image and written as [x, y, width, height]
    from the top-left corner.
    """
    if len(boxes) != len(probs):
        raise ValueError(f"{len(boxes)} boxes but {len(probs)} rows of probabilities")
    written = 0
    for b, row in zip(boxes, probs):
        xmin = max(b.x - b.w / 2.0, 0.0)
        ymin = max(b.y - b.h / 2.0, 0.0)
        xmax = min(b.x + b.w / 2.0, w)
        ymax = min(b.y + b.h / 2.0, h)
        bw = xmax - xmin
        bh = ymax - ymin
        for j, score in enumerate(row):
            if not score:
                continue
            if j >= len(COCO_IDS):
                raise ValueError(f"class {j} has no COCO category id")
            fp.write(
                f'{{"image_id":{image_id}, "category_id":{COCO_IDS[j]}, '
                f'"bbox":[{xmin:f}, {ymin:f}, {bw:f}, {bh:f}], "score":{float(score):f}}},\n'
            )
            written += 1
    return written


def get_coco_image_id(filename: str) -> int:
    """Image id from a COCO file name: the number after the last underscore."""
    underscore = filename.rfind("_")
    if underscore < 0:
        raise ValueError(f"no image id in {filename!r}")
    match = _LEADING_INT.match(filename, underscore + 1)
    return int(match.group(1)) if match else 0