# robokit

Small robotics building blocks in pure Python, built on NumPy and SciPy.

## Modules

- `robokit.matrix` has terse dense-matrix helpers.
  - `block(rows)` assembles a matrix from rows of blocks.
  - `hstack`, `vstack` and `block_diag` raise `ValueError` when block shapes do not fit.
  - `diag(*values)` builds a diagonal matrix.
  - `eye(size, off_diag=0)` puts ones on a diagonal shifted above (positive) or below (negative) the main one.
  - `dot(mat, vec)` keeps the shape of `vec`.
  - `kron` gives the Kronecker product.
  - `zeros` and `ones` give a `1 x n` row vector when called with one argument.
  - `hypot` and `get_diagonal` do what their names say.
  - `join(*args)` concatenates the string forms of its arguments.
  - `disp(*args)` prints its arguments two per line.
- `robokit.shapes` has immutable 2-D plot primitives.
  - `Point` has `rotate_by`, `rotate_to`, `move_by` and an `angle` property.
  - `Rectangle`, `Ellipse` and `Circle` are `Shape` subclasses. They have the fluent builders `with_width`, `with_height`, `with_size`, `scale`, `with_angle`, `rotate_by`, `at`, `move_to`, `move_by` and `Circle.with_radius`.
  - Shapes report `local_to_global`, their four corners and `bounding_box()`.
  - `to_polygon()` turns a shape into a plain `Polygon` holding outline points, a name and colours. `Line` is an open polyline.
- `robokit.drawing` builds figures.
  - `draw_cart(x_pos, rod_angle, model, name)` returns a `CartFigure`: body, wheels, ball, rod and wheel rotation ticks. `model` needs `m_ball`, `m_cart` and `l_bar`.
  - `draw_vehicle(state, name, steering, params)` returns a `VehicleFigure`: body, heading triangle and four wheels with the front ones steered. `params` needs `lf`, `lr` and `mass`.
- `robokit.robust_kernels` has M-estimator kernels.
  - The kernel classes are `TrivialKernel`, `HuberKernel`, `CauchyKernel` and `TukeyKernel`. They provide `weight`, `cost` and `influence`. All except `TrivialKernel` also have `from_mad`.
  - `DynamicKernel(RobustKernelType, scale=None)` selects a kernel at run time.
  - `is_outlier(mahalanobis_sq, dof, confidence)` is chi-squared gating. It uses tabled values for 2 and 3 degrees of freedom at 95 % and 99 %, and the Wilson-Hilferty approximation otherwise.
  - `compute_mad(residuals)` gives the median absolute residual. It returns 1.0 for empty input and never less than 1e-6.
- `robokit.marginalization` does Schur-complement marginalization.
  - `Marginalizer.marginalize` returns `(H', b')`. It raises `numpy.linalg.LinAlgError` if the marginalized block cannot be inverted.
  - `MarginalizationConfig` holds the regularization and the optional sparsification.
  - `PriorConstraint` has `compute_error` and `dimension`.
  - `build_local_info` assembles a local information system, returned as a `LocalInfo` named tuple, around the poses to remove.
- `robokit.sparse_solver` assembles and solves a 2-D pose-graph system with landmarks.
  - `SparseSlamSolver.build_sparse_system` returns a SciPy CSR Jacobian and a residual vector.
  - `solve(jacobian, residuals, lam)` solves the damped normal equations.
  - `sparsity_stats` returns `SparsityStats`.
  - `normalize_angle` wraps an angle into `[-pi, pi]`.
- `robokit.timeseries` holds time-indexed data.
  - `ColumnData` and `Timeline` are the building blocks.
  - `TimeSeries` holds one column and its timeline.
  - `TimeTable` holds several columns sharing one timeline. It drops its oldest row once it holds more than `LIMIT` (5000) rows.
  - Both give lookups by time (`get_at_time`) and by inclusive time range (`get_range`).
  - `TimeTable.values` and `values_shifted` give plot points.
  - `vehicle_positions` extracts `(x, y)` pairs from state vectors.

## Install

```
pip install .
pip install .[test]   # with pytest
```

## Examples

Robust weighting:

```python
from robokit.robust_kernels import HuberKernel, is_outlier, compute_mad

kernel = HuberKernel(1.0)
kernel.weight(0.5)    # 1.0
kernel.weight(2.0)    # 0.5
is_outlier(6.5, 2, 0.95)                   # True
compute_mad([1.0, 2.0, 3.0, 4.0, 100.0])   # 3.0
```

Marginalizing variables out of an information matrix:

```python
import numpy as np
from robokit.marginalization import Marginalizer

h = np.array([[10, 2, 1, .5], [2, 10, .5, 1], [1, .5, 10, 2], [.5, 1, 2, 10]], float)
b = np.array([1.0, 2.0, 3.0, 4.0])
h_prime, b_prime = Marginalizer().marginalize(h, b, [0, 1], [2, 3])
```

Time lookups:

```python
from robokit.timeseries import TimeSeries

ts = TimeSeries([0.0, 1.0, 2.0, 3.0, 4.0], [0.0, 3.0, 6.0, 9.0, 12.0])
ts.get_range(1.0, 3.0)   # [3.0, 6.0, 9.0]
ts.get_at_time(1.5)      # 6.0
```

Shapes:

```python
from robokit.shapes import Rectangle

rect = Rectangle().with_width(2.0).with_height(1.0).at(1.0, 1.0)
rect.upper_left()        # Point(x=0.0, y=1.5)
```

## What it does not do

- No window and no renderer. `robokit.shapes` and `robokit.drawing` only compute outline points and colours, and plotting them is up to you.
- No full graph-SLAM optimizer. There are no pose, landmark or constraint classes. The solver and `build_local_info` accept any objects with the attributes named in their docstrings. You run the iteration loop yourself.
- `SparseSlamSolver.solve` assembles the normal equations sparsely but solves them with a dense solver.
- No command-line program.

## Tests

```
pytest
```