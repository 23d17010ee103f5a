from typing import Iterator, Optional, Tuple

import numpy as np
import numpy.typing as npt

from .lib import NONE, check_bounds, check_dimension, compute_dtype

# (dx, dy) for the 3x3 neighborhood, self included
OFFSETS = tuple(
  (dx, dy)
  for dy in (-1, 0, 1)
  for dx in (-1, 0, 1)
)

class Grid:
  """
  A W x H pixel grid.

  Grid shaped arrays are indexed arr[x,y] and stored in
  Fortran order so that the flat (order="F") position of
  (x,y) is its linear index y * W + x.
  """
  def __init__(self, width:int, height:int, mask:Optional[np.ndarray] = None):
    self.width = check_dimension("width", width)
    self.height = check_dimension("height", height)
    self.mask = None
    if mask is not None:
      mask = self.reshape(mask, "mask")
      if mask.dtype != bool:
        mask = (mask != 0)
      mask = np.array(mask, dtype=bool, order="F", copy=True)
      mask.setflags(write=False)
      self.mask = mask

  @classmethod
  def from_mask(
    kls,
    mask:np.ndarray,
    width:Optional[int] = None,
    height:Optional[int] = None,
  ) -> "Grid":
    """
    Build a grid from a foreground mask. If width and height
    are omitted, they are taken from a 2D (W,H) mask. Otherwise
    the mask must agree with them.
    """
    mask = np.asarray(mask)
    if width is None and height is None:
      if mask.ndim != 2:
        raise ValueError(f"Cannot infer dimensions from a {mask.ndim}D mask.")
      width, height = mask.shape
    elif width is None or height is None:
      raise ValueError("width and height must be specified together.")
    return Grid(width, height, mask)

  @property
  def shape(self) -> Tuple[int,int]:
    return (self.width, self.height)

  @property
  def size(self) -> int:
    return self.width * self.height

  @property
  def dtype(self) -> np.dtype:
    """Working dtype that also holds size (one past the last index)."""
    return compute_dtype(self.size)

  def reshape(self, arr:np.ndarray, name:str = "array") -> np.ndarray:
    """
    Accepts a (W,H) array or a flat array of W*H elements
    indexed by linear index and returns a (W,H) view.
    """
    arr = np.asarray(arr)
    if arr.ndim == 1 and arr.size == self.size:
      return arr.reshape(self.shape, order="F")
    if arr.shape != self.shape:
      raise ValueError(
        f"{name} shape {arr.shape} does not match "
        f"(width, height) = {self.shape}."
      )
    return arr

  def check_labels(self, labels:np.ndarray, name:str = "labels") -> np.ndarray:
    """
    Validate a label buffer and return it as a (W,H) view.

    Every label must be NONE or a linear index, and every
    foreground label must point at a foreground pixel so the
    chain chase never reaches a background cell.
    """
    labels = self.reshape(labels, name)
    if not np.issubdtype(labels.dtype, np.signedinteger):
      raise TypeError(f"{name} must be a signed integer type. Got: {labels.dtype}")

    flat = labels.ravel(order="F")
    if flat.size == 0:
      return labels

    lo, hi = flat.min(), flat.max()
    if lo < NONE or hi >= self.size:
      raise ValueError(
        f"{name} must be NONE ({NONE}) or a linear index in [0, {self.size}). "
        f"Got range: [{lo}, {hi}]"
      )

    targets = flat[flat != NONE]
    dangling = (flat[targets] == NONE)
    if np.any(dangling):
      raise ValueError(
        f"{name} contains foreground labels that point at background pixels: "
        f"{np.unique(targets[dangling]).tolist()[:10]}"
      )
    return labels

  def flat(self, arr:np.ndarray) -> np.ndarray:
    return self.reshape(arr).ravel(order="F")

  def index(self, x:int, y:int) -> int:
    check_bounds(x, 0, self.width - 1)
    check_bounds(y, 0, self.height - 1)
    return int(y) * self.width + int(x)

  def coordinates(self, i:int) -> Tuple[int,int]:
    check_bounds(i, 0, self.size - 1)
    y, x = divmod(int(i), self.width)
    return (x, y)

  def neighbors(self, x:int, y:int) -> Iterator[int]:
    """
    Linear indices of the 3x3 neighborhood of (x,y),
    including (x,y) itself. Positions outside the grid
    are skipped.
    """
    check_bounds(x, 0, self.width - 1)
    check_bounds(y, 0, self.height - 1)
    for dx, dy in OFFSETS:
      nx, ny = x + dx, y + dy
      if 0 <= nx < self.width and 0 <= ny < self.height:
        yield ny * self.width + nx

  def shifts(self) -> Iterator[Tuple[tuple, tuple]]:
    """
    For each 3x3 offset yield a (dst, src) pair of slices
    such that arr[src] holds the neighbor of arr[dst] at
    that offset. Only the overlap is covered, so cells on
    the border have no counterpart for offsets that point
    off the grid.
    """
    sx, sy = self.shape
    for dx, dy in OFFSETS:
      dst = (
        slice(max(0, -dx), sx - max(0, dx)),
        slice(max(0, -dy), sy - max(0, dy)),
      )
      src = (
        slice(max(0, dx), sx - max(0, -dx)),
        slice(max(0, dy), sy - max(0, -dy)),
      )
      yield (dst, src)

  def neighborhood_min(
    self,
    values:np.ndarray,
    ignore:np.ndarray,
  ) -> npt.NDArray[np.integer]:
    """
    Minimum of values over the 3x3 neighborhood of every cell.
    Cells flagged in ignore do not contribute. Where nothing
    contributes, the result is self.size.
    """
    values = self.reshape(values, "values")
    ignore = self.reshape(ignore, "ignore")

    dtype = self.dtype
    work = np.where(ignore, dtype(self.size), values.astype(dtype, copy=False))
    work = np.asfortranarray(work)
    out = work.copy(order="F")
    for dst, src in self.shifts():
      np.minimum(out[dst], work[src], out=out[dst])
    return out

  def __repr__(self):
    return f"Grid(width={self.width}, height={self.height})"
