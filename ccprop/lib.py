import numpy as np

# background / unassigned, disjoint from every linear index
NONE = -1

DEFAULT_PASS_COUNT = 11
DEFAULT_HOP_BUDGET = 6

# mask production from a decoded image: green channel > 127
DEFAULT_CHANNEL = 1
DEFAULT_THRESHOLD = 127

def compute_byte_width(x) -> int:
  """Bytes needed by a signed integer to hold x."""
  byte_width = 8
  if x <= np.iinfo(np.int8).max:
    byte_width = 1
  elif x <= np.iinfo(np.int16).max:
    byte_width = 2
  elif x <= np.iinfo(np.int32).max:
    byte_width = 4

  return byte_width

width2dtype = {
  1: np.int8,
  2: np.int16,
  4: np.int32,
  8: np.int64,
}

def compute_dtype(x) -> np.dtype:
  return width2dtype[compute_byte_width(x)]

def label_dtype(width:int, height:int) -> np.dtype:
  """Narrowest signed type able to hold every linear index and NONE."""
  return compute_dtype(max(width * height - 1, 0))

def check_dimension(name:str, val) -> int:
  if isinstance(val, (bool, np.bool_)) or not isinstance(val, (int, np.integer)):
    raise ValueError(f"{name} must be an integer. Got: {val!r}")
  if val <= 0:
    raise ValueError(f"{name} must be positive. Got: {val}")
  return int(val)

def check_count(name:str, val, low:int) -> int:
  if isinstance(val, (bool, np.bool_)) or not isinstance(val, (int, np.integer)):
    raise ValueError(f"{name} must be an integer. Got: {val!r}")
  if val < low:
    raise ValueError(f"{name} must be at least {low}. Got: {val}")
  return int(val)

def check_bounds(val, low, high):
  if val > high or val < low:
    raise ValueError(f'Value {val} cannot be outside of inclusive range {low} to {high}')
  return val
