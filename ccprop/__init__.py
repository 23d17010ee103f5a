"""Connected component labeling by label propagation.

ccprop labels the 8-connected foreground regions of a
binary image (e.g. thresholded fiducial markers or blobs)
with an algorithm built for massively parallel execution.

Generation 0 labels every foreground pixel with its own
linear index (y * width + x) and every background pixel
with NONE (-1). Each following pass reads only the previous
generation. Every foreground pixel takes the smallest label
in its 3x3 neighborhood, follows that label through the
previous generation for a fixed number of hops (bounded
pointer jumping), and then lowers both its own label and
the label of its current root to the result.

The only write ever performed is "take the minimum", so
the pixels of a pass can be processed in any order or by
any number of workers without locks and the outcome is the
same. After enough passes every component carries the
smallest linear index it contains. The number of passes and
the hop budget are explicit parameters; no convergence
check is made by run_passes.

Method: Naoki Shibata, Shinya Yamamoto. "GPGPU-Assisted
Subpixel Tracking Method for Fiducial Markers". Journal of
Information Processing, Vol.22 (2014), No.1, pp.19-28.
"""
from .lib import NONE, DEFAULT_PASS_COUNT, DEFAULT_HOP_BUDGET
from .grid import Grid
from .ccl import (
	initialize, propagate, run_passes,
	generations, run_until_stable,
)
from .kernel import propagate_sequential
from .reference import connected_components, same_partition, is_converged
from .array import LabelArray
from .encoder import colorize, label_colors
from .util import (
	FormatError, load_mask, threshold_image,
	save_labels, save_image, load_numpy,
)
