[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robokit"
version = "0.1.0"
description = "Robotics building blocks: matrix helpers, plot shapes, robust kernels, SLAM marginalization and sparse solving, time series"
requires-python = ">=3.10"
keywords = ["robotics", "slam", "graph-slam", "robust-kernels", "marginalization", "time-series", "geometry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["robokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
