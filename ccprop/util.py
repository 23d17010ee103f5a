from typing import Union

import io
import os
import gzip
import lzma

import numpy as np
from PIL import Image, UnidentifiedImageError

from .array import LabelArray
from .encoder import colorize
from .lib import DEFAULT_CHANNEL, DEFAULT_THRESHOLD

NUMPY_MAGIC = b'\x93NUMPY'

class FormatError(Exception):
  pass

def _load(filelike) -> bytes:
  if hasattr(filelike, 'read'):
    binary = filelike.read()
  elif (
    isinstance(filelike, str)
    and os.path.splitext(filelike)[1] == '.gz'
  ):
    with gzip.open(filelike, 'rb') as f:
      binary = f.read()
  elif (
    isinstance(filelike, str)
    and os.path.splitext(filelike)[1] in ('.lzma', '.xz')
  ):
    with lzma.open(filelike, 'rb') as f:
      binary = f.read()
  else:
    with open(filelike, 'rb') as f:
      binary = f.read()

  return binary

def _open_for_writing(filelike):
  if (
    isinstance(filelike, str)
    and os.path.splitext(filelike)[1] == '.gz'
  ):
    return gzip.open(filelike, 'wb')
  elif (
    isinstance(filelike, str)
    and os.path.splitext(filelike)[1] in ('.lzma', '.xz')
  ):
    return lzma.open(filelike, 'wb')
  return open(filelike, 'wb')

def load_numpy(filelike) -> np.ndarray:
  f = io.BytesIO(_load(filelike))
  return np.load(f)

def threshold_image(
  image:np.ndarray,
  channel:int = DEFAULT_CHANNEL,
  threshold:int = DEFAULT_THRESHOLD,
) -> np.ndarray:
  """
  Convert a decoded (height, width[, channels]) image into a
  (width, height) foreground mask: pixel[channel] > threshold.
  Single channel images ignore channel.
  """
  image = np.asarray(image)
  if image.ndim == 3:
    if not (0 <= channel < image.shape[2]):
      raise ValueError(f"Channel {channel} does not exist in an image with {image.shape[2]} channels.")
    image = image[:,:,channel]
  elif image.ndim != 2:
    raise ValueError(f"Expected a 2D or 3D image. Got shape: {image.shape}")

  # (H,W) C order transposes to (W,H) Fortran order without a copy
  return (image > threshold).T

def load_mask(
  filelike,
  channel:int = DEFAULT_CHANNEL,
  threshold:int = DEFAULT_THRESHOLD,
) -> np.ndarray:
  """
  Load a (width, height) foreground mask from a file path or
  file-like object.

  Numpy files (.npy, optionally .gz, .xz or .lzma compressed)
  must contain a 2D (width, height) array, nonzero pixels are
  foreground. Anything else is decoded as an image and
  thresholded with threshold_image.
  """
  binary = _load(filelike)

  if binary[:len(NUMPY_MAGIC)] == NUMPY_MAGIC:
    arr = np.load(io.BytesIO(binary))
    if arr.ndim != 2:
      raise FormatError(f"Mask must be a 2D (width, height) array. Got shape: {arr.shape}")
    return np.asfortranarray(arr != 0)

  try:
    img = Image.open(io.BytesIO(binary))
    img.load()
  except UnidentifiedImageError:
    raise FormatError(f"{filelike} is not a numpy file or a readable image.")
  except OSError as err:
    raise FormatError(f"{filelike} could not be decoded: {err}")

  if img.mode == "1":
    img = img.convert("L")
  elif img.mode not in ("L", "I", "I;16", "F"):
    img = img.convert("RGB")

  return threshold_image(np.array(img), channel=channel, threshold=threshold)

def save_labels(
  labels:Union[np.ndarray, LabelArray],
  filelike,
):
  """Save a label grid as a numpy file. .gz/.xz/.lzma suffixes compress."""
  labels = np.asarray(labels)
  if hasattr(filelike, 'write'):
    np.save(filelike, labels)
    return

  f = _open_for_writing(filelike)
  try:
    np.save(f, labels)
  finally:
    f.close()

def save_image(
  labels:Union[np.ndarray, LabelArray],
  filelike,
  format:str = "PNG",
):
  """Save a label grid as a pseudo-colored image."""
  img = Image.fromarray(colorize(np.asarray(labels)))
  if isinstance(filelike, str):
    img.save(filelike)
  else:
    img.save(filelike, format=format)
