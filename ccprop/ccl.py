from typing import Iterator, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor
import multiprocessing as mp

import numpy as np
import numpy.typing as npt
from tqdm import tqdm

from .grid import Grid
from .lib import (
  NONE, DEFAULT_PASS_COUNT, DEFAULT_HOP_BUDGET,
  label_dtype, check_count,
)

LabelGrid = npt.NDArray[np.signedinteger]

def initialize(mask:np.ndarray, width:int, height:int) -> LabelGrid:
  """
  Compute generation 0 of the labeling.

  Every foreground pixel is labeled with its own linear
  index (y * width + x), every background pixel with NONE.

  mask: (width, height) boolean array (or a flat array of
    width * height elements in linear index order). Non-boolean
    masks count nonzero pixels as foreground.

  Returns: (width, height) Fortran ordered signed integer array
  """
  grid = Grid(width, height, mask)
  return prepare(grid)

def prepare(grid:Grid) -> LabelGrid:
  labels = np.arange(grid.size, dtype=label_dtype(grid.width, grid.height))
  labels[~grid.flat(grid.mask)] = NONE
  return labels.reshape(grid.shape, order="F")

def propagate(
  prev:LabelGrid,
  width:int,
  height:int,
  hop_budget:int,
  parallel:int = 1,
) -> LabelGrid:
  """
  Compute the next generation from the previous one.

  For each foreground pixel i with label h, the smallest label
  in its 3x3 neighborhood is followed through prev for exactly
  hop_budget steps, giving g. Then label[h] and label[i] are
  lowered to g if g is smaller. prev is never modified.

  hop_budget: number of pointer jumps per pixel per pass. Chains
    longer than this are shortened further in later passes.
  parallel: number of workers that share the pixels of the pass
    (0 = num cores). The result is identical for every value.

  Returns: (width, height) Fortran ordered signed integer array
  """
  grid = Grid(width, height)
  hop_budget = check_count("hop_budget", hop_budget, 0)
  prev = grid.check_labels(prev, "prev")
  return step(grid, prev, hop_budget, parallel)

def step(
  grid:Grid,
  prev:LabelGrid,
  hop_budget:int,
  parallel:int = 1,
) -> LabelGrid:
  prev_flat = grid.flat(prev)
  background = (prev_flat == NONE)

  nearest = grid.neighborhood_min(prev_flat, background).ravel(order="F")
  pixels = np.flatnonzero(~background)

  if parallel <= 0:
    parallel = mp.cpu_count()

  chunks = [
    chunk for chunk in np.array_split(pixels, parallel)
    if chunk.size > 0
  ]

  def merge(chunk:np.ndarray) -> np.ndarray:
    out = prev_flat.copy()
    merge_roots(prev_flat, nearest, chunk, hop_budget, out)
    return out

  if len(chunks) <= 1:
    out = merge(pixels)
  else:
    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
      buffers = list(executor.map(merge, chunks))
    out = buffers[0]
    for buf in buffers[1:]:
      np.minimum(out, buf, out=out)

  return out.reshape(grid.shape, order="F")

def merge_roots(
  prev_flat:np.ndarray,
  nearest:np.ndarray,
  pixels:np.ndarray,
  hop_budget:int,
  out:np.ndarray,
) -> None:
  """
  Chase and merge for the given foreground pixels, writing
  into out. Only minimums are ever written, so out may have
  received writes from other pixels before or after.
  """
  if pixels.size == 0:
    return

  g = nearest[pixels].astype(prev_flat.dtype, copy=False)
  for _ in range(hop_budget):
    g = prev_flat[g]

  roots = prev_flat[pixels]
  # unbuffered: repeated roots each receive their minimum
  np.minimum.at(out, roots, g)
  np.minimum.at(out, pixels, g)

def generations(
  mask:np.ndarray,
  width:int,
  height:int,
  pass_count:int = DEFAULT_PASS_COUNT,
  hop_budget:int = DEFAULT_HOP_BUDGET,
  parallel:int = 1,
  progress:bool = False,
) -> Iterator[LabelGrid]:
  """
  Iterate over every generation of the labeling, starting
  with generation 0 and ending with generation pass_count - 1.

  Each yielded array is read-only. A generation is complete
  before the next one is computed from it.
  """
  grid = Grid(width, height, mask)
  pass_count = check_count("pass_count", pass_count, 1)
  hop_budget = check_count("hop_budget", hop_budget, 0)
  return _passes(grid, pass_count, hop_budget, parallel, progress, freeze=True)

def _passes(
  grid:Grid,
  pass_count:int,
  hop_budget:int,
  parallel:int,
  progress:bool,
  freeze:bool,
) -> Iterator[LabelGrid]:
  labels = prepare(grid)
  if freeze:
    labels.setflags(write=False)
  yield labels

  for _ in tqdm(range(1, pass_count), disable=(not progress), desc="Propagation"):
    labels = step(grid, labels, hop_budget, parallel)
    if freeze:
      labels.setflags(write=False)
    yield labels

def run_passes(
  mask:np.ndarray,
  width:int,
  height:int,
  pass_count:int = DEFAULT_PASS_COUNT,
  hop_budget:int = DEFAULT_HOP_BUDGET,
  parallel:int = 1,
  progress:bool = False,
) -> LabelGrid:
  """
  Label the 8-connected components of a binary image.

  mask: (width, height) boolean array, foreground is True
  pass_count: number of generations, including generation 0.
    pass_count - 1 propagation passes are run. No convergence
    check is made, so too few passes (or too small a hop_budget)
    may leave a component split across several labels.
  hop_budget: pointer jumps per pixel per pass
  parallel: workers per pass (0 = num cores)
  progress: show a progress bar over the passes

  Returns: (width, height) signed integer array. Background
    is NONE (-1). Pixels of the same component share a label.
  """
  grid = Grid(width, height, mask)
  pass_count = check_count("pass_count", pass_count, 1)
  hop_budget = check_count("hop_budget", hop_budget, 0)

  for labels in _passes(grid, pass_count, hop_budget, parallel, progress, freeze=False):
    pass
  return labels

def run_until_stable(
  mask:np.ndarray,
  width:int,
  height:int,
  hop_budget:int = DEFAULT_HOP_BUDGET,
  max_passes:Optional[int] = None,
  parallel:int = 1,
) -> Tuple[LabelGrid, int]:
  """
  Propagate until a pass leaves every label unchanged.

  A pass that changes nothing means every component carries
  a single label. max_passes bounds the number of generations
  and defaults to width * height + 1, which always suffices.

  Returns: (labels, number of generations computed)
  """
  grid = Grid(width, height, mask)
  hop_budget = check_count("hop_budget", hop_budget, 0)
  if max_passes is None:
    max_passes = grid.size + 1
  max_passes = check_count("max_passes", max_passes, 1)

  labels = prepare(grid)
  count = 1
  while count < max_passes:
    nxt = step(grid, labels, hop_budget, parallel)
    count += 1
    if np.array_equal(nxt, labels):
      return (nxt, count)
    labels = nxt

  return (labels, count)
