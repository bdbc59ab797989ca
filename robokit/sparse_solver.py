"""Sparse least-squares system assembly and solving for 2-D graph SLAM.

The Jacobian of a pose graph is sparse: each odometry constraint touches two
poses and each range-bearing observation one pose and one landmark. This
module stacks weighted residuals and Jacobian rows into a CSR matrix and
solves the damped normal equations for a state update.

Poses are any objects with ``x``, ``y`` and ``theta``; landmarks any objects
with ``x`` and ``y``. Odometry constraints carry ``from_idx``, ``to_idx``, a
3-vector ``measurement`` (dx, dy, dtheta in the frame of the first pose), a
3x3 ``information`` and a ``robust_weight``. Observation constraints carry
``pose_idx``, ``landmark_idx``, a 2-vector ``measurement`` (range, bearing),
a 2x2 ``information`` and a ``robust_weight``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy import sparse

_POSE_DIM = 3
_LANDMARK_DIM = 2
_ZERO_TOLERANCE = 1e-12
_MIN_RANGE = 1e-6


def normalize_angle(angle: float) -> float:
    """Wrap an angle into ``[-pi, pi]``."""
    a = angle
    while a > math.pi:
        a -= math.tau
    while a < -math.pi:
        a += math.tau
    return a


@dataclass(frozen=True)
class Triplet:
    """One non-zero entry of a sparse matrix."""

    row: int
    col: int
    value: float


@dataclass
class SparseSolverConfig:
    """Tuning for the sparse solver."""

    regularization: float = 1e-8


@dataclass(frozen=True)
class SparsityStats:
    """Shape and fill of a sparse matrix."""

    rows: int
    cols: int
    nnz: int
    density: float

    def __str__(self) -> str:
        return (
            f"{self.rows}x{self.cols} matrix, {self.nnz} non-zeros "
            f"({self.density * 100.0:.2f}% dense)"
        )


def _sqrt_information(information, dim: int) -> np.ndarray:
    """Lower Cholesky factor of an information matrix, or identity if it has none."""
    info = np.asarray(information, dtype=float)
    try:
        return np.linalg.cholesky(info)
    except np.linalg.LinAlgError:
        return np.eye(dim)


def _emit(triplets: list[Triplet], weighted: np.ndarray, row0: int, col0: int) -> None:
    for (i, j), value in np.ndenumerate(weighted):
        val = -float(value)
        if abs(val) > _ZERO_TOLERANCE:
            triplets.append(Triplet(row0 + i, col0 + j, val))


def _to_csr(triplets: Sequence[Triplet], rows: int, cols: int) -> sparse.csr_matrix:
    if not triplets:
        return sparse.csr_matrix((rows, cols))
    data = [t.value for t in triplets]
    row_idx = [t.row for t in triplets]
    col_idx = [t.col for t in triplets]
    return sparse.coo_matrix((data, (row_idx, col_idx)), shape=(rows, cols)).tocsr()


@dataclass
class SparseSlamSolver:
    """Builds the sparse Jacobian of a pose graph and solves for state updates."""

    config: SparseSolverConfig = field(default_factory=SparseSolverConfig)

    def build_sparse_system(
        self,
        poses: Sequence[Any],
        landmarks: Sequence[Any],
        odometry_constraints: Iterable[Any],
        observation_constraints: Iterable[Any],
        fix_first_pose: bool,
    ) -> tuple[sparse.csr_matrix, np.ndarray]:
        """Return the weighted Jacobian (CSR) and weighted residual vector.

        State layout: the free poses (3 entries each, the first pose left out
        when ``fix_first_pose``), followed by the landmarks (2 entries each).
        """
        odometry = list(odometry_constraints)
        observations = list(observation_constraints)

        n_poses = len(poses)
        pose_start = 1 if fix_first_pose and n_poses > 0 else 0
        n_pose_vars = (n_poses - pose_start) * _POSE_DIM
        n_vars = n_pose_vars + len(landmarks) * _LANDMARK_DIM
        n_residuals = len(odometry) * _POSE_DIM + len(observations) * _LANDMARK_DIM

        if n_vars == 0 or n_residuals == 0:
            return sparse.csr_matrix((0, 0)), np.zeros(0)

        def pose_state_idx(pose_idx: int) -> int | None:
            if fix_first_pose:
                return None if pose_idx == 0 else (pose_idx - 1) * _POSE_DIM
            return pose_idx * _POSE_DIM

        triplets: list[Triplet] = []
        residuals = np.zeros(n_residuals)
        res_idx = 0

        for c in odometry:
            p1 = poses[c.from_idx]
            p2 = poses[c.to_idx]
            dx = p2.x - p1.x
            dy = p2.y - p1.y
            cos_t = math.cos(p1.theta)
            sin_t = math.sin(p1.theta)

            dx_local = cos_t * dx + sin_t * dy
            dy_local = -sin_t * dx + cos_t * dy
            dtheta = normalize_angle(p2.theta - p1.theta)

            meas = np.asarray(c.measurement, dtype=float)
            error = np.array([
                meas[0] - dx_local,
                meas[1] - dy_local,
                normalize_angle(meas[2] - dtheta),
            ])

            sqrt_info = _sqrt_information(c.information, _POSE_DIM)
            sqrt_robust = math.sqrt(c.robust_weight)
            residuals[res_idx:res_idx + _POSE_DIM] = sqrt_info @ error * sqrt_robust

            idx1 = pose_state_idx(c.from_idx)
            if idx1 is not None:
                j1 = np.array([
                    [-cos_t, -sin_t, -sin_t * dx + cos_t * dy],
                    [sin_t, -cos_t, -cos_t * dx - sin_t * dy],
                    [0.0, 0.0, -1.0],
                ])
                _emit(triplets, sqrt_info @ j1 * sqrt_robust, res_idx, idx1)

            idx2 = pose_state_idx(c.to_idx)
            if idx2 is not None:
                j2 = np.array([
                    [cos_t, sin_t, 0.0],
                    [-sin_t, cos_t, 0.0],
                    [0.0, 0.0, 1.0],
                ])
                _emit(triplets, sqrt_info @ j2 * sqrt_robust, res_idx, idx2)

            res_idx += _POSE_DIM

        for c in observations:
            pose = poses[c.pose_idx]
            lm = landmarks[c.landmark_idx]
            dx = lm.x - pose.x
            dy = lm.y - pose.y
            q = dx * dx + dy * dy
            sqrt_q = max(math.sqrt(q), _MIN_RANGE)

            pred_range = sqrt_q
            pred_bearing = normalize_angle(math.atan2(dy, dx) - pose.theta)
            meas = np.asarray(c.measurement, dtype=float)
            error = np.array([
                meas[0] - pred_range,
                normalize_angle(meas[1] - pred_bearing),
            ])

            sqrt_info = _sqrt_information(c.information, _LANDMARK_DIM)
            sqrt_robust = math.sqrt(c.robust_weight)
            residuals[res_idx:res_idx + _LANDMARK_DIM] = sqrt_info @ error * sqrt_robust

            pidx = pose_state_idx(c.pose_idx)
            if pidx is not None:
                jp = np.array([
                    [-dx / sqrt_q, -dy / sqrt_q, 0.0],
                    [dy / q, -dx / q, -1.0],
                ])
                _emit(triplets, sqrt_info @ jp * sqrt_robust, res_idx, pidx)

            lm_idx = n_pose_vars + c.landmark_idx * _LANDMARK_DIM
            jl = np.array([
                [dx / sqrt_q, dy / sqrt_q],
                [-dy / q, dx / q],
            ])
            _emit(triplets, sqrt_info @ jl * sqrt_robust, res_idx, lm_idx)

            res_idx += _LANDMARK_DIM

        return _to_csr(triplets, n_residuals, n_vars), residuals

    def solve(self, jacobian, residuals, lam: float) -> np.ndarray:
        """Solve ``(J^T J + lam * (I + diag(J^T J))) dx = -J^T r`` for ``dx``.

        Raises ``numpy.linalg.LinAlgError`` if the system is singular.
        """
        j = sparse.csr_matrix(jacobian)
        n_vars = j.shape[1]
        if n_vars == 0:
            return np.zeros(0)

        r = np.asarray(residuals, dtype=float)
        jt = j.T.tocsr()
        h = (jt @ j).toarray()
        jtr = jt @ r

        damping = lam * (1.0 + np.diag(h)) + self.config.regularization
        h[np.diag_indices(n_vars)] += damping
        return np.linalg.solve(h, -jtr)

    @staticmethod
    def sparsity_stats(jacobian) -> SparsityStats:
        """Report the shape, non-zero count and density of a sparse matrix."""
        j = sparse.csr_matrix(jacobian)
        rows, cols = j.shape
        nnz = int(j.nnz)
        total = rows * cols
        density = nnz / total if total > 0 else 0.0
        return SparsityStats(rows=rows, cols=cols, nnz=nnz, density=density)