import os
import sys

import click
import numpy as np

import ccprop
from ccprop.lib import (
	DEFAULT_PASS_COUNT, DEFAULT_HOP_BUDGET,
	DEFAULT_CHANNEL, DEFAULT_THRESHOLD,
)

@click.command()
@click.option('-n', "--passes", default=DEFAULT_PASS_COUNT, type=click.IntRange(min=1), help="Number of generations to compute, including the initial one.", show_default=True)
@click.option('-c', "--hop-budget", default=DEFAULT_HOP_BUDGET, type=click.IntRange(min=0), help="Pointer jumps per pixel per pass.", show_default=True)
@click.option('-j', "--parallel", default=1, help="Number of workers per pass. 0 = num cores.", show_default=True)
@click.option("--channel", default=DEFAULT_CHANNEL, type=click.IntRange(min=0), help="Image channel that is thresholded to produce the mask.", show_default=True)
@click.option("--threshold", default=DEFAULT_THRESHOLD, help="Pixels with channel value above this are foreground.", show_default=True)
@click.option('-s', "--until-stable", default=False, is_flag=True, help="Ignore --passes and propagate until labels stop changing.", show_default=True)
@click.option('-o', "--output", default=None, help="Output path. Only valid with a single source.")
@click.option("--npy", default=False, is_flag=True, help="Write the raw labels as a numpy file instead of a color image.", show_default=True)
@click.option('-i', "--info", default=False, is_flag=True, help="Print mask dimensions and the number of components.", show_default=True)
@click.option('-t', "--check", default=False, is_flag=True, help="Compare the result against a sequential reference labeling.", show_default=True)
@click.option("--progress", default=False, is_flag=True, help="Show a progress bar over the passes.", show_default=True)
@click.argument("source", nargs=-1)
def main(
	passes, hop_budget, parallel,
	channel, threshold, until_stable,
	output, npy, info, check, progress, source,
):
	"""
	Label the 8-connected components of binary images.

	Each SOURCE is an image (thresholded on --channel) or a 2D
	(width, height) numpy mask. Results are written next to the
	source as SOURCE.labels.png (or .labels.npy with --npy).
	"""
	for i in range(len(source)):
		if source[i] == "-":
			source = source[:i] + tuple(line.strip() for line in sys.stdin.readlines()) + source[i+1:]

	if output is not None and len(source) > 1:
		print("ccprop: --output can only be used with a single source.")
		sys.exit(1)

	for src in source:
		mask = read_mask(src, channel, threshold)
		if mask is None:
			continue

		width, height = mask.shape

		try:
			if until_stable:
				labels, computed = ccprop.run_until_stable(
					mask, width, height,
					hop_budget=hop_budget, parallel=parallel,
				)
			else:
				labels = ccprop.run_passes(
					mask, width, height,
					pass_count=passes, hop_budget=hop_budget,
					parallel=parallel, progress=progress,
				)
				computed = passes
		except ValueError as err:
			print(f"ccprop: {src}: {err}")
			continue

		if info:
			print_info(src, mask, labels, computed)
		if check:
			check_labels(src, mask, labels)
		if info or check:
			continue

		dest = output or destination(src, npy)
		write_labels(labels, dest, npy)

def read_mask(src, channel, threshold):
	try:
		return ccprop.load_mask(src, channel=channel, threshold=threshold)
	except FileNotFoundError:
		print(f"ccprop: File \"{src}\" does not exist.")
	except ccprop.FormatError as err:
		print("ccprop:", err)
	except ValueError as err:
		print(f"ccprop: {src}: {err}")
	except OSError as err:
		print(f"ccprop: Unable to read \"{src}\": {err.strerror or err}")
	return None

def print_info(src, mask, labels, computed):
	arr = ccprop.LabelArray(labels)
	print(f"Filename: {src}")
	print(f"width: {arr.width}")
	print(f"height: {arr.height}")
	print(f"foreground: {int(np.count_nonzero(mask))}")
	print(f"passes: {computed}")
	print(f"num_components: {arr.num_components()}")
	print()

def check_labels(src, mask, labels):
	print(f"checking {src}...")
	expected = ccprop.connected_components(mask)

	if np.array_equal(labels, expected):
		print("labels ok. (converged)")
	elif ccprop.same_partition(labels, expected):
		print("labels ok. (same components, not fully flattened)")
	else:
		found = ccprop.LabelArray(labels).num_components()
		wanted = ccprop.LabelArray(expected).num_components()
		print(f"labels not converged. {found} labels for {wanted} components, increase --passes or --hop-budget.")

	print("done.")

def destination(src:str, npy:bool) -> str:
	base = src
	for suffix in (".gz", ".xz", ".lzma"):
		base = removesuffix(base, suffix)
	base, _ = os.path.splitext(base)
	return base + (".labels.npy" if npy else ".labels.png")

def write_labels(labels, dest, npy):
	try:
		if npy:
			ccprop.save_labels(labels, dest)
		else:
			ccprop.save_image(labels, dest)
	except (OSError, ValueError) as err:
		print(f"ccprop: Unable to write {dest}. Aborting.")
		sys.exit(1)

def removesuffix(x:str, suffix:str) -> str:
  if x.endswith(suffix):
    x = x[:-len(suffix)]
  return x
