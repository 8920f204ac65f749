import io
import json

import numpy as np
import pytest

from darkweave.box import Box
from darkweave.detections import (
    COCO_CLASSES,
    COCO_IDS,
    convert_coco_detections,
    get_coco_image_id,
    print_cocos,
)


def _single_cell(cls0, cls1, scale, x, y, bw, bh):
    return [cls0, cls1, scale, x, y, bw, bh]


def test_first_and_last_classes_map_to_their_ids():
    out = io.StringIO()
    width = len(COCO_CLASSES)
    probs = [[0.4] + [0.0] * (width - 2) + [0.6]]
    count = print_cocos(out, 5, [Box(5, 5, 2, 2)], probs, 10, 10)
    assert count == 2
    records = [json.loads(line.rstrip(",")) for line in out.getvalue().splitlines()]
    assert [r["category_id"] for r in records] == [1, 90]


def test_single_cell_box_geometry():
    preds = _single_cell(0.5, 0.25, 0.8, 0.5, 0.5, 0.4, 0.4)
    boxes, probs = convert_coco_detections(preds, 2, 1, False, 1, 1, 1, 0.0, False)
    assert len(boxes) == 1
    assert boxes[0].x == pytest.approx(0.5)
    assert boxes[0].y == pytest.approx(0.5)
    assert boxes[0].w == pytest.approx(0.4)
    assert probs.shape == (1, 2)


def test_square_flag_squares_sizes():
    preds = _single_cell(0.5, 0.25, 0.8, 0.5, 0.5, 0.4, 0.3)
    plain, _ = convert_coco_detections(preds, 2, 1, False, 1, 1, 1, 0.0, False)
    squared, _ = convert_coco_detections(preds, 2, 1, True, 1, 1, 1, 0.0, False)
    assert squared[0].w == pytest.approx(plain[0].w ** 2)
    assert squared[0].h == pytest.approx(plain[0].h ** 2)


def test_scores_are_objectness_times_class_and_thresholded():
    preds = _single_cell(0.5, 0.25, 0.8, 0.5, 0.5, 0.4, 0.4)
    _, low = convert_coco_detections(preds, 2, 1, False, 1, 1, 1, 0.0, False)
    assert low[0, 0] == pytest.approx(preds[2] * preds[0])
    assert low[0, 1] == pytest.approx(preds[2] * preds[1])
    thresh = (low[0, 0] + low[0, 1]) / 2
    _, high = convert_coco_detections(preds, 2, 1, False, 1, 1, 1, thresh, False)
    assert high[0, 0] == pytest.approx(low[0, 0])
    assert high[0, 1] == 0


def test_only_objectness_puts_scale_in_first_column():
    preds = _single_cell(0.5, 0.25, 0.8, 0.5, 0.5, 0.4, 0.4)
    _, probs = convert_coco_detections(preds, 2, 1, False, 1, 1, 1, 0.9, True)
    assert probs[0, 0] == pytest.approx(0.8)
    assert probs[0, 1] == 0


def test_cell_offsets_and_image_scaling():
    side, classes, num = 2, 1, 1
    cells = side * side
    class_part = [1.0] * cells
    scale_part = [1.0] * cells
    coord_part = [0.0, 0.0, 1.0, 1.0] * cells
    preds = np.array(class_part + scale_part + coord_part)
    boxes, probs = convert_coco_detections(preds, classes, num, False, side, 100, 50, 0.0, False)
    assert len(boxes) == cells
    # Row-major cells: column advances first.
    assert [b.x for b in boxes] == pytest.approx([0, 50, 0, 50])
    assert [b.y for b in boxes] == pytest.approx([0, 0, 25, 25])
    assert all(b.w == pytest.approx(100) and b.h == pytest.approx(50) for b in boxes)
    assert probs.shape == (cells, classes)


def test_short_predictions_raise():
    with pytest.raises(ValueError):
        convert_coco_detections([0.1, 0.2], 2, 1, False, 1, 1, 1, 0.0, False)


def test_print_cocos_pins_record_format():
    out = io.StringIO()
    probs = [[0.5] + [0.0] * 79]
    count = print_cocos(out, 7, [Box(5, 5, 4, 4)], probs, 10, 10)
    assert count == 1
    assert out.getvalue() == (
        '{"image_id":7, "category_id":1, "bbox":'
        '[3.000000, 3.000000, 4.000000, 4.000000], "score":0.500000},\n'
    )


def test_print_cocos_skips_zero_scores_and_maps_ids():
    out = io.StringIO()
    probs = [[0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.7]]
    count = print_cocos(out, 3, [Box(5, 5, 2, 2)], probs, 10, 10)
    assert count == 1
    record = json.loads(out.getvalue().rstrip().rstrip(","))
    assert record["category_id"] == COCO_IDS[11]
    assert record["image_id"] == 3


def test_print_cocos_clips_to_image():
    out = io.StringIO()
    boxes = [Box(0, 0, 4, 4), Box(10, 10, 4, 4)]
    probs = [[0.9], [0.9]]
    assert print_cocos(out, 1, boxes, probs, 10, 10) == 2
    for line in out.getvalue().splitlines():
        x, y, bw, bh = json.loads(line.rstrip(","))["bbox"]
        assert x >= 0 and y >= 0
        assert x + bw <= 10 + 1e-6 and y + bh <= 10 + 1e-6
        assert bw == pytest.approx(2) and bh == pytest.approx(2)


def test_print_cocos_size_mismatch():
    with pytest.raises(ValueError):
        print_cocos(io.StringIO(), 1, [Box(0, 0, 1, 1)], [], 10, 10)


def test_print_cocos_class_without_id():
    probs = [[0.0] * 80 + [0.5]]
    with pytest.raises(ValueError):
        print_cocos(io.StringIO(), 1, [Box(1, 1, 1, 1)], probs, 10, 10)


def test_detections_round_trip_into_records():
    preds = _single_cell(0.5, 0.25, 0.8, 0.5, 0.5, 0.4, 0.4)
    boxes, probs = convert_coco_detections(preds, 2, 1, False, 1, 20, 20, 0.0, False)
    out = io.StringIO()
    count = print_cocos(out, 9, boxes, probs, 20, 20)
    records = [json.loads(line.rstrip(",")) for line in out.getvalue().splitlines()]
    assert count == len(records) == 2
    assert [r["score"] for r in records] == pytest.approx(list(probs[0]), abs=1e-6)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("COCO_val2014_000000000042.jpg", 42),
        ("/data/coco/images/COCO_val2014_000000581929.jpg", 581929),
        ("prefix_abc.jpg", 0),
    ],
)
def test_get_coco_image_id(name, expected):
    assert get_coco_image_id(name) == expected


def test_get_coco_image_id_without_underscore():
    with pytest.raises(ValueError):
        get_coco_image_id("image.jpg")