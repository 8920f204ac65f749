# darkweave

A compact, NumPy-based toolkit with the building blocks of small
convolutional networks and grid object detectors, on the CPU:

- **Activations** (`darkweave.activations`): logistic, relu, relie, linear,
  ramp, tanh, plse, leaky and elu as the `Activation` enum, with
  `activate`, `gradient`, `activate_array` and `gradient_array`.
  Gradients are taken at the activation's *output* value.
- **Vector helpers** (`darkweave.blas`): `axpy`, `scal`, `fill`, `copy`,
  `mul`, `power`, `dot`, the per-filter statistics `mean_cpu`,
  `variance_cpu` and `normalize_cpu`, and `shortcut_cpu` for adding one
  feature map into another.
- **Column-to-image** (`darkweave.col2im`): `col2im` scatters a column
  buffer back into an image, summing overlaps.
- **Pass state** (`darkweave.state`): `NetworkState`, holding `input`,
  `truth`, `delta` and `train` for one forward or backward pass.
- **Box geometry** (`darkweave.box`): `Box`, `DBox`, IoU, RMSE,
  intersection and union with their derivatives, anchor encoding and
  decoding, and two flavours of non-maximum suppression.
- **Detection output** (`darkweave.detections`): turning grid predictions
  into boxes and class scores and writing COCO result records.
- **Layers**: `CostLayer`, `AvgPoolLayer`, `CropLayer` and
  `ConvolutionalLayer`.

## Installation

```
pip install darkweave
```

For running the test suite:

```
pip install "darkweave[test]"
pytest
```

## Quick tour

### Activations

```python
from darkweave.activations import Activation, activate, get_activation, get_activation_string

act = get_activation("leaky")
assert act is Activation.LEAKY
print(get_activation_string(act))   # "leaky"
print(activate(-2.0, act))          # about -0.2
```

An unknown name falls back to ReLU, with a warning on standard error.
`activate_array` and `gradient_array` work in place on NumPy arrays and
return them.

### Boxes and non-maximum suppression

Boxes are given by their centre, width and height.

```python
from darkweave.box import Box, box_iou, encode_box, decode_box

a = Box(0.0, 0.0, 1.0, 1.0)
b = Box(0.5, 0.0, 1.0, 1.0)
print(box_iou(a, b))                # about 0.333

anchor = Box(0.5, 0.5, 0.25, 0.25)
restored = decode_box(encode_box(a, anchor), anchor)
```

`do_nms(boxes, probs, thresh)` and `do_nms_sort(boxes, probs, thresh)`
take one row of class scores per box and change it in place: scores of
boxes overlapping a stronger box by more than `thresh` IoU are set to zero.
`do_nms_sort` works class by class in order of descending score.
`diou(a, b)` returns the coordinate differences `b - a`.

### Detection results

```python
import io
from darkweave.detections import convert_coco_detections, print_cocos, get_coco_image_id

boxes, probs = convert_coco_detections(predictions, classes=80, num=2, square=True,
                                       side=7, w=640, h=480, thresh=0.01,
                                       only_objectness=False)
out = io.StringIO()
count = print_cocos(out, get_coco_image_id("COCO_val2014_000000000042.jpg"),
                    boxes, probs, 640, 480)
```

The prediction vector holds per-cell class probabilities, then per-box
objectness scales, then per-box coordinates. Scores at or below `thresh`
are zeroed. `print_cocos` clips each box to the image, writes one record
per non-zero score and returns how many it wrote. `get_coco_image_id`
reads the number after the last underscore (`42` above) and raises
`ValueError` when there is no underscore. The class names and category
ids are in `COCO_CLASSES` and `COCO_IDS`.

### Layers

Layers work on flat `float32` arrays and take a `NetworkState`:

- `CostLayer(batch, inputs, cost_type, scale)`: `forward` stores
  `truth - input` in `delta` and returns the sum of squares (nothing
  changes without truth); `backward` adds `scale * delta` into the state's
  delta. With `CostType.MASKED`, inputs whose truth is `SECRET_NUM` are
  ignored. `get_cost_type` and `get_cost_string` map names to types.
- `AvgPoolLayer(batch, w, h, c)`: one average per channel; `backward`
  spreads each delta evenly back over the channel.
- `CropLayer(batch, h, w, c, crop_height, crop_width, flip, angle,
  saturation, exposure, rng=None)`: a random, possibly mirrored crop in
  training and a centred one otherwise, mapping `[0, 1]` to `[-1, 1]`
  unless `noadjust` is set.
- `ConvolutionalLayer(batch, h, w, c, n, size, stride, pad, activation,
  batch_normalize, rng=None)`: filters of shape `(n, c, size, size)`,
  output shape (`out_height`, `out_width`), `resize`, momentum SGD with
  weight decay through `update(batch, learning_rate, momentum, decay)`,
  `denormalize` to fold batch-normalisation statistics into the weights,
  `get_filter`, `rgbgr_filters` and `rescale_filters`. The module also has
  `add_bias`, `scale_bias` and `backward_bias`.

## Command line

The package installs a `darkweave` command. Its `change` subcommand
rescales the learning rate stored as a float at the start of a weights
file, in place:

```
darkweave change backup/net.weights 0.1
darkweave change backup/net.weights 1 0.001
```

The new rate is `rate * scale + add`; `add` defaults to 0.

## What it does not do

- There is no matrix multiply, and `ConvolutionalLayer` has no forward or
  backward pass; there is no fully connected layer.
- There is no network container, configuration parser or weights reader
  and writer, so networks cannot be built from files, trained or run.
- There are no training, validation, prediction or ranking commands and
  no image loading or display; the command line offers only `change`.