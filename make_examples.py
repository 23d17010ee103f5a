"""
Generate example masks in examples/.

zspiral-N: a zig-zag spiral, one long 8-connected curve that
  needs many passes (or a large hop budget) to label fully.
blobs-N: random noise, many small components.
"""
import os
import sys

import numpy as np
from PIL import Image

import ccprop

def draw_line(img, x0, y0, x1, y1):
  """Inclusive axis aligned line on a (W,H) image."""
  if x0 != x1 and y0 != y1:
    raise ValueError(f"Only axis aligned lines are supported. Got: ({x0},{y0}) ({x1},{y1})")
  xs, xe = sorted((x0, x1))
  ys, ye = sorted((y0, y1))
  img[xs:xe+1, ys:ye+1] = True

def zigzag_spiral(n:int = 20) -> np.ndarray:
  size = n * 10 + 2
  img = np.zeros((size, size), dtype=bool, order="F")
  e = size - 2

  x, y, length = 1, 1, size - 2
  first = True

  while length >= 5:
    if first:
      first = False
    else:
      draw_line(img, x-2, y+2, x-2, y)
      draw_line(img, x-2, y, x, y)
      draw_line(img, x, y, x, y+2)

    for i in range(0, length - 4, 4):
      draw_line(img, x+i, y+2, x+i+2, y+2)
      draw_line(img, x+i+2, y+2, x+i+2, y)
      draw_line(img, x+i+2, y, x+i+4, y)
      draw_line(img, x+i+4, y, x+i+4, y+2)

      draw_line(img, e-(y+2), x+i, e-(y+2), x+i+2)
      draw_line(img, e-(y+2), x+i+2, e-y, x+i+2)
      draw_line(img, e-y, x+i+2, e-y, x+i+4)
      draw_line(img, e-y, x+i+4, e-(y+2), x+i+4)

      draw_line(img, e-(x+i), e-(y+2), e-(x+i+2), e-(y+2))
      draw_line(img, e-(x+i+2), e-(y+2), e-(x+i+2), e-y)
      draw_line(img, e-(x+i+2), e-y, e-(x+i+4), e-y)
      draw_line(img, e-(x+i+4), e-y, e-(x+i+4), e-(y+2))

      if i >= length - 8:
        break

      draw_line(img, y+2, e-(x+i), y+2, e-(x+i+2))
      draw_line(img, y+2, e-(x+i+2), y, e-(x+i+2))
      draw_line(img, y, e-(x+i+2), y, e-(x+i+4))
      draw_line(img, y, e-(x+i+4), y+2, e-(x+i+4))

    length -= 8
    x += 4
    y += 4

  return img

def random_blobs(shape, density:float = 0.3, seed:int = 0) -> np.ndarray:
  rng = np.random.default_rng(seed)
  return np.asfortranarray(rng.random(shape) < density)

def save_mask(mask, path):
  np.save(path + ".npy", mask)
  img = Image.fromarray((mask.T * 255).astype(np.uint8))
  img.save(path + ".png")

if __name__ == "__main__":
  n = int(sys.argv[1]) if len(sys.argv) > 1 else 20
  os.makedirs("examples", exist_ok=True)

  spiral = zigzag_spiral(n)
  save_mask(spiral, f"examples/zspiral-{spiral.shape[0]}")
  print(f"Generated zigzag spiral image {spiral.shape[0]} * {spiral.shape[1]}")

  for i, size in enumerate([ 64, 256, 1024 ]):
    blobs = random_blobs((size, size), seed=i)
    save_mask(blobs, f"examples/blobs-{size}")
    print(f"Generated random blobs {size} * {size}: {ccprop.LabelArray(ccprop.run_until_stable(blobs, size, size)[0]).num_components()} components")
