import setuptools

setuptools.setup(
  name="ccprop",
  version="0.1.0",
  description="Race tolerant connected component labeling of binary images by label propagation.",
  python_requires=">=3.8",
  packages=[ "ccprop", "ccprop_cli" ],
  py_modules=[ "make_examples" ],
  install_requires=[
    "numpy",
    "fastremap",
    "tqdm",
    "click",
    "Pillow",
  ],
  extras_require={
    "ccl": [
      "connected-components-3d",
    ],
    "test": [
      "pytest",
      "connected-components-3d",
    ],
  },
  entry_points={
    "console_scripts": [
      "ccprop=ccprop_cli:main"
    ],
  },
)
