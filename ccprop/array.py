from typing import Optional

import numpy as np
import numpy.typing as npt
import fastremap

from .encoder import colorize
from .lib import NONE

class LabelArray:
  """
  A finished (width, height) labeling with helpers for
  inspecting its components.
  """
  def __init__(self, labels:np.ndarray):
    labels = np.asarray(labels)
    if labels.ndim != 2:
      raise ValueError(f"Labels must be a 2D (width, height) array. Got shape: {labels.shape}")
    if not np.issubdtype(labels.dtype, np.signedinteger):
      raise TypeError(f"Labels must be a signed integer type. Got: {labels.dtype}")
    self.data = labels
    self.shape = labels.shape
    self._uniq = None

  @property
  def width(self) -> int:
    return self.shape[0]

  @property
  def height(self) -> int:
    return self.shape[1]

  @property
  def size(self) -> int:
    return self.width * self.height

  @property
  def dtype(self):
    return self.data.dtype

  def __array__(self, dtype=None, copy=None):
    if dtype is None or np.dtype(dtype) == self.data.dtype:
      if copy:
        return self.data.copy()
      return self.data
    if copy is False:
      raise ValueError(f"Cannot convert {self.data.dtype} labels to {dtype} without a copy.")
    return self.data.astype(dtype)

  def __getitem__(self, slcs):
    return self.data[slcs]

  def foreground(self) -> npt.NDArray[np.bool_]:
    return self.data != NONE

  def labels(self) -> np.ndarray:
    """Sorted unique labels, excluding NONE."""
    if self._uniq is None:
      fg = self.data[self.foreground()]
      if fg.size == 0:
        self._uniq = np.zeros((0,), dtype=self.dtype)
      else:
        self._uniq = fastremap.unique(fg)
    return self._uniq

  def num_components(self) -> int:
    return len(self.labels())

  def contains(self, label:int) -> bool:
    uniq = self.labels()
    idx = np.searchsorted(uniq, label)
    return bool(idx < len(uniq) and uniq[idx] == label)

  def component(self, label:int) -> npt.NDArray[np.bool_]:
    """Binary image of the pixels carrying label."""
    if label == NONE or not self.contains(label):
      raise ValueError(f"Label {label} not contained in image.")
    return self.data == label

  def pixel_counts(self, label:Optional[int] = None):
    """Pixel count per label, or of a single label."""
    if label is not None:
      return int(np.count_nonzero(self.component(label)))
    fg = self.data[self.foreground()]
    if fg.size == 0:
      return {}
    uniq, cts = fastremap.unique(fg, return_counts=True)
    return { int(u): int(c) for u, c in zip(uniq, cts) }

  def colorize(self) -> npt.NDArray[np.uint8]:
    return colorize(self.data)

  def __repr__(self):
    return f"LabelArray(shape={self.shape}, dtype={self.dtype})"
