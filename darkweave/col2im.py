"""Scatter column buffers back into an image, summing overlaps."""

from __future__ import annotations

import numpy as np


def col2im(data_col, channels, height, width, ksize, stride, pad, data_im):
    """Accumulate a column buffer into data_im in place and return data_im.

    A true pad flag pads by ksize // 2 and keeps the output size at
    ceil(size / stride); otherwise no padding is applied.
    """
    if pad:
        height_col = 1 + (height - 1) // stride
        width_col = 1 + (width - 1) // stride
        pad = ksize // 2
    else:
        height_col = (height - ksize) // stride + 1
        width_col = (width - ksize) // stride + 1
        pad = 0

    col_size = channels * ksize * ksize * height_col * width_col
    col_flat = np.asarray(data_col).reshape(-1)
    if col_flat.size < col_size:
        raise ValueError(f"data_col holds {col_flat.size} values, needs {col_size}")
    if not isinstance(data_im, np.ndarray) or not data_im.flags.c_contiguous:
        raise ValueError("data_im must be a contiguous numpy array")
    im_flat = data_im.reshape(-1)
    im_size = channels * height * width
    if im_flat.size < im_size:
        raise ValueError(f"data_im holds {im_flat.size} values, needs {im_size}")

    cols = col_flat[:col_size].reshape(channels, ksize, ksize, height_col, width_col)
    im = im_flat[:im_size].reshape(channels, height, width)
    out_rows = np.arange(height_col) * stride - pad
    out_cols = np.arange(width_col) * stride - pad

    for h_offset in range(ksize):
        rows = out_rows + h_offset
        row_ok = (rows >= 0) & (rows < height)
        for w_offset in range(ksize):
            cs = out_cols + w_offset
            col_ok = (cs >= 0) & (cs < width)
            block = cols[:, h_offset, w_offset][:, row_ok][:, :, col_ok]
            im[:, rows[row_ok][:, None], cs[col_ok][None, :]] += block
    return data_im