"""
Sequential 8-connected labeling used to check the
propagation results.

Each component is labeled with the smallest linear index
it contains, which is also the label the propagation passes
converge to, so a fully converged result equals this one
element for element.
"""
import numpy as np

from .grid import Grid
from .lib import NONE, label_dtype

# neighbors already visited in a raster scan
PREVIOUS_NEIGHBORS = ( (-1,-1), (0,-1), (1,-1), (-1,0) )

class MinRootForest:
  """
  Union-find over linear indices where every root is the
  smallest index of its set. Parents only ever decrease,
  the same monotone rule the propagation passes follow.
  """
  def __init__(self, size:int):
    self.parent = np.full((size,), NONE, dtype=np.int64)

  def __len__(self) -> int:
    return int(np.count_nonzero(self.parent != NONE))

  def add(self, i:int) -> None:
    if self.parent[i] == NONE:
      self.parent[i] = i

  def root(self, i:int) -> int:
    if self.parent[i] == NONE:
      raise KeyError(i)
    # path halving
    while self.parent[i] != i:
      self.parent[i] = self.parent[self.parent[i]]
      i = self.parent[i]
    return int(i)

  def merge(self, i:int, j:int) -> int:
    """Join the sets of i and j and return the new root."""
    self.add(i)
    self.add(j)
    a, b = self.root(i), self.root(j)
    lo, hi = min(a, b), max(a, b)
    self.parent[hi] = lo
    return lo

def connected_components(mask:np.ndarray) -> np.ndarray:
  """8 connected CCL of a (W,H) binary image."""
  grid = Grid.from_mask(mask)
  mask = grid.mask
  sx, sy = grid.shape

  forest = MinRootForest(grid.size)
  out = np.full(grid.shape, NONE, dtype=label_dtype(sx, sy), order="F")

  for y in range(sy):
    for x in range(sx):
      if not mask[x,y]:
        continue
      i = grid.index(x, y)
      forest.add(i)
      for dx, dy in PREVIOUS_NEIGHBORS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < sx and 0 <= ny < sy and mask[nx,ny]:
          forest.merge(i, grid.index(nx, ny))

  for y in range(sy):
    for x in range(sx):
      if mask[x,y]:
        out[x,y] = forest.root(grid.index(x, y))

  return out

def same_partition(a:np.ndarray, b:np.ndarray) -> bool:
  """
  True if two labelings split the pixels into the same
  components, whatever the label values are.
  """
  a = np.asarray(a)
  b = np.asarray(b)
  if a.shape != b.shape:
    return False

  a = a.ravel(order="F")
  b = b.ravel(order="F")

  fg = (a != NONE)
  if np.any(fg != (b != NONE)):
    return False

  a = a[fg]
  b = b[fg]
  if a.size == 0:
    return True

  pairs = np.unique(np.stack([ a, b ], axis=1), axis=0)
  return (
    len(pairs) == len(np.unique(a))
    and len(pairs) == len(np.unique(b))
  )

def is_converged(labels:np.ndarray, mask:np.ndarray) -> bool:
  """True if labels equal the minimum-index labeling of mask."""
  return bool(np.array_equal(np.asarray(labels), connected_components(mask)))
