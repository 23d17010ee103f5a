import ccprop

import numpy as np

import time

def run_sample(mask, pass_count, hop_budget, parallel):
  width, height = mask.shape

  s = time.time()
  labels = ccprop.initialize(mask, width, height)
  times = [ time.time() - s ]

  for i in range(1, pass_count):
    s = time.time()
    labels = ccprop.propagate(labels, width, height, hop_budget, parallel=parallel)
    times.append(time.time() - s)

  mpxs = lambda t: mask.size / t / 1e6

  for i, t in enumerate(times):
    print(f"      pass {i:2d}  :  {t*1000:.2f} msec ({mpxs(t):.2f} MPx/sec)")

  print(f"""
      total    :  {sum(times)*1000:.2f} msec ({mpxs(sum(times)):.2f} MPx/sec)
      converged:  {ccprop.is_converged(labels, mask) if mask.size <= 512*512 else 'not checked'}
  """, flush=True)

pass_count = 11
hop_budget = 6

for parallel in [1, 0]:
  print(f"parallel: {parallel}")

  print("RANDOM NOISE 30% foreground (512x512)")
  mask = np.asfortranarray(np.random.random((512,512)) < 0.3)
  run_sample(mask, pass_count, hop_budget, parallel)

  print("RANDOM NOISE 60% foreground (2048x2048)")
  mask = np.asfortranarray(np.random.random((2048,2048)) < 0.6)
  run_sample(mask, pass_count, hop_budget, parallel)

  print("EMPTY (2048x2048)")
  mask = np.zeros((2048,2048), dtype=bool, order="F")
  run_sample(mask, pass_count, hop_budget, parallel)

  print("SOLID ONES (2048x2048)")
  mask = np.ones((2048,2048), dtype=bool, order="F")
  run_sample(mask, pass_count, hop_budget, parallel)
