import numpy as np
import numpy.typing as npt

from .lib import NONE

BACKGROUND_COLOR = 0x000000

# linear congruential hash spreads neighboring labels apart
HASH_MULTIPLIER = 1103515245
HASH_INCREMENT = 12345

def label_colors(labels:np.ndarray) -> npt.NDArray[np.uint32]:
  """
  Pseudo-color each label as a 0xRRGGBB integer.
  NONE maps to black. Equal labels get equal colors.
  """
  labels = np.asarray(labels)
  background = (labels == NONE)

  # unsigned arithmetic wraps instead of overflowing
  rgb = np.where(background, 0, labels).astype(np.uint64)
  rgb = (rgb * np.uint64(HASH_MULTIPLIER) + np.uint64(HASH_INCREMENT)) & np.uint64(0xFFFFFF)
  rgb = rgb.astype(np.uint32)
  rgb[background] = BACKGROUND_COLOR
  return rgb

def colorize(labels:np.ndarray) -> npt.NDArray[np.uint8]:
  """
  Convert a (W,H) label grid into an (H,W,3) RGB image array
  as expected by image libraries.
  """
  labels = np.asarray(labels)
  if labels.ndim != 2:
    raise ValueError(f"Labels must be a 2D (width, height) array. Got shape: {labels.shape}")

  rgb = label_colors(labels).T
  image = np.empty(rgb.shape + (3,), dtype=np.uint8)
  image[..., 0] = ((rgb >> 16) & 0xFF).astype(np.uint8)
  image[..., 1] = ((rgb >> 8) & 0xFF).astype(np.uint8)
  image[..., 2] = (rgb & 0xFF).astype(np.uint8)
  return image
