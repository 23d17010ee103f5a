"""
The propagation pass written one pixel at a time.

This is the form the pass takes on a GPU or in a threaded
build: each pixel reads only the previous generation and
writes only minimums into the current one, so pixels can be
visited in any order (or concurrently, given an atomic min)
without changing the result. It is much slower than the
vectorized ccprop.propagate and exists to state the per-pixel
contract directly.
"""
from typing import Iterable, Optional

import numpy as np

from .grid import Grid
from .lib import NONE, check_count

def nearest_label(prev_flat:np.ndarray, grid:Grid, x:int, y:int) -> int:
  """Smallest foreground label in the 3x3 neighborhood of (x,y)."""
  g = NONE
  for q in grid.neighbors(x, y):
    label = prev_flat[q]
    if label != NONE and (g == NONE or label < g):
      g = label
  return int(g)

def chase(prev_flat:np.ndarray, g:int, hop_budget:int) -> int:
  for _ in range(hop_budget):
    g = prev_flat[g]
  return int(g)

def atomic_min(out:np.ndarray, i:int, value:int) -> None:
  if value < out[i]:
    out[i] = value

def propagate_pixel(
  prev_flat:np.ndarray,
  out:np.ndarray,
  grid:Grid,
  i:int,
  hop_budget:int,
) -> None:
  """
  Update for one pixel. out must start as a copy of prev_flat
  and may already hold writes from other pixels of this pass.
  """
  h = int(prev_flat[i])
  if h == NONE:
    return

  x, y = grid.coordinates(i)
  g = nearest_label(prev_flat, grid, x, y)
  g = chase(prev_flat, g, hop_budget)

  atomic_min(out, h, g)
  atomic_min(out, i, g)

def propagate_sequential(
  prev:np.ndarray,
  width:int,
  height:int,
  hop_budget:int,
  order:Optional[Iterable[int]] = None,
) -> np.ndarray:
  """
  Run one propagation pass pixel by pixel.

  order: the linear indices to visit, defaults to raster
    order. Any permutation of range(width * height) gives
    the same result.
  """
  grid = Grid(width, height)
  hop_budget = check_count("hop_budget", hop_budget, 0)
  prev_flat = grid.flat(grid.check_labels(prev, "prev"))
  out = prev_flat.copy()

  if order is None:
    order = range(grid.size)

  for i in order:
    propagate_pixel(prev_flat, out, grid, int(i), hop_budget)

  return out.reshape(grid.shape, order="F")
