"""Robotics building blocks: matrices, shapes and figures, robust kernels, SLAM marginalization, sparse solving and time series."""

__version__ = "0.1.0"

__all__ = [
    "matrix",
    "shapes",
    "drawing",
    "robust_kernels",
    "marginalization",
    "sparse_solver",
    "timeseries",
]