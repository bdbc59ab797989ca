import math
from dataclasses import dataclass, field

import numpy as np
import pytest

from robokit.sparse_solver import (
    SparseSlamSolver,
    SparseSolverConfig,
    SparsityStats,
    Triplet,
    normalize_angle,
)


@dataclass
class Pose:
    x: float
    y: float
    theta: float


@dataclass
class Landmark:
    x: float
    y: float


@dataclass
class Odometry:
    from_idx: int
    to_idx: int
    measurement: np.ndarray
    information: np.ndarray
    robust_weight: float = 1.0


@dataclass
class Observation:
    pose_idx: int
    landmark_idx: int
    measurement: np.ndarray
    information: np.ndarray
    robust_weight: float = 1.0


@dataclass
class Graph:
    poses: list = field(default_factory=list)
    landmarks: list = field(default_factory=list)
    odometry: list = field(default_factory=list)
    observations: list = field(default_factory=list)
    fix_first_pose: bool = True

    def add_odometry(self, i, j, meas, cov):
        self.odometry.append(Odometry(i, j, np.asarray(meas, float), np.linalg.inv(cov)))

    def add_observation(self, p, l, rng, bearing, cov):
        self.observations.append(
            Observation(p, l, np.array([rng, bearing]), np.linalg.inv(cov))
        )

    def system(self, solver):
        return solver.build_sparse_system(
            self.poses, self.landmarks, self.odometry, self.observations, self.fix_first_pose
        )


ODOM_COV = np.diag([0.1, 0.1, 0.01])


def chain_graph():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(1.0, 0.0, 0.0), Pose(2.0, 0.0, 0.0)]
    g.add_odometry(0, 1, [1.0, 0.0, 0.0], ODOM_COV)
    g.add_odometry(1, 2, [1.0, 0.0, 0.0], ODOM_COV)
    return g


def test_sparse_vs_dense_simple():
    solver = SparseSlamSolver()
    j, r = chain_graph().system(solver)
    assert r.shape == (6,)
    assert j.shape == (6, 6)
    stats = SparseSlamSolver.sparsity_stats(j)
    assert stats.nnz < stats.rows * stats.cols
    assert stats.nnz == 10
    np.testing.assert_allclose(r, np.zeros(6), atol=1e-12)


def test_stats_display():
    j, _ = chain_graph().system(SparseSlamSolver())
    stats = SparseSlamSolver.sparsity_stats(j)
    assert str(stats) == "6x6 matrix, 10 non-zeros (27.78% dense)"


def test_stats_of_empty_matrix():
    solver = SparseSlamSolver()
    j, r = solver.build_sparse_system([], [], [], [], True)
    stats = SparseSlamSolver.sparsity_stats(j)
    assert stats == SparsityStats(rows=0, cols=0, nnz=0, density=0.0)
    assert r.shape == (0,)


def test_solve_empty_system_returns_empty_update():
    solver = SparseSlamSolver()
    j, r = solver.build_sparse_system([Pose(0, 0, 0)], [], [], [], True)
    dx = solver.solve(j, r, 1e-3)
    assert dx.shape == (0,)


def test_unfixed_first_pose_adds_columns():
    g = chain_graph()
    g.fix_first_pose = False
    j, _ = g.system(SparseSlamSolver())
    assert j.shape == (6, 9)


def test_residual_uses_information_and_robust_weight():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(0.9, 0.0, 0.0)]
    g.odometry.append(Odometry(0, 1, np.array([1.0, 0.0, 0.0]), np.eye(3)))
    solver = SparseSlamSolver()
    _, r = g.system(solver)
    np.testing.assert_allclose(r, [0.1, 0.0, 0.0], atol=1e-12)

    g.odometry[0].robust_weight = 4.0
    _, r4 = g.system(solver)
    np.testing.assert_allclose(r4, [0.2, 0.0, 0.0], atol=1e-12)


def test_non_positive_information_falls_back_to_identity():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(0.5, 0.0, 0.0)]
    g.odometry.append(Odometry(0, 1, np.array([1.0, 0.0, 0.0]), -np.eye(3)))
    _, r = g.system(SparseSlamSolver())
    np.testing.assert_allclose(r, [0.5, 0.0, 0.0], atol=1e-12)


def test_single_step_solves_linear_problem():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(0.5, 0.0, 0.0)]
    g.odometry.append(Odometry(0, 1, np.array([1.0, 0.0, 0.0]), np.eye(3)))
    solver = SparseSlamSolver()
    j, r = g.system(solver)
    dx = solver.solve(j, r, 0.0)
    np.testing.assert_allclose(dx, [0.5, 0.0, 0.0], atol=1e-6)


def test_observation_rows_and_columns():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0)]
    g.landmarks = [Landmark(3.0, 4.0)]
    g.observations.append(
        Observation(0, 0, np.array([5.0, math.atan2(4.0, 3.0)]), np.eye(2))
    )
    j, r = g.system(SparseSlamSolver())
    assert j.shape == (2, 2)
    np.testing.assert_allclose(r, [0.0, 0.0], atol=1e-12)
    expected = -np.array([[3 / 5, 4 / 5], [-4 / 25, 3 / 25]])
    np.testing.assert_allclose(j.toarray(), expected, atol=1e-12)


def _error(solver, g):
    _, r = g.system(solver)
    return float(r @ r)


def test_sparse_solver_convergence():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(5.0, 0.1, 0.0), Pose(10.0, 0.2, 0.0)]
    g.landmarks = [Landmark(2.5, 5.1)]
    g.add_odometry(0, 1, [5.0, 0.0, 0.0], ODOM_COV)
    g.add_odometry(1, 2, [5.0, 0.0, 0.0], ODOM_COV)

    obs_cov = np.diag([0.1, 0.01])
    g.add_observation(0, 0, math.hypot(2.5, 5.0), math.atan2(5.0, 2.5), obs_cov)
    g.add_observation(1, 0, math.hypot(2.5, 5.0), math.atan2(5.0, -2.5), obs_cov)
    g.add_observation(2, 0, math.hypot(7.5, 5.0), math.atan2(5.0, -7.5), obs_cov)

    solver = SparseSlamSolver()
    lam = 1e-3
    initial = current = _error(solver, g)

    for _ in range(10):
        j, r = g.system(solver)
        dx = solver.solve(j, r, lam)
        backup = ([Pose(p.x, p.y, p.theta) for p in g.poses],
                  [Landmark(l.x, l.y) for l in g.landmarks])
        idx = 0
        for pose in g.poses[1:]:
            pose.x += dx[idx]
            pose.y += dx[idx + 1]
            pose.theta += dx[idx + 2]
            idx += 3
        for lm in g.landmarks:
            lm.x += dx[idx]
            lm.y += dx[idx + 1]
            idx += 2
        new = _error(solver, g)
        if new < current:
            current = new
            lam *= 0.1
        else:
            g.poses, g.landmarks = backup
            lam *= 10.0

    assert current < 1.0
    assert current < initial


@pytest.mark.parametrize("n_poses", [5, 10, 20, 50])
def test_sparsity_scales(n_poses):
    g = Graph()
    g.poses = [Pose(float(i), 0.0, 0.0) for i in range(n_poses)]
    for i in range(n_poses - 1):
        g.add_odometry(i, i + 1, [1.0, 0.0, 0.0], ODOM_COV)
    j, _ = g.system(SparseSlamSolver())
    stats = SparseSlamSolver.sparsity_stats(j)
    assert stats.density < 0.5


@pytest.mark.parametrize(
    "angle, expected",
    [(0.5, 0.5), (1.5 * math.pi, -0.5 * math.pi), (-1.5 * math.pi, 0.5 * math.pi),
     (5 * math.pi, math.pi)],
)
def test_normalize_angle(angle, expected):
    assert normalize_angle(angle) == pytest.approx(expected)


def test_regularization_from_config_damps_solution():
    g = Graph()
    g.poses = [Pose(0.0, 0.0, 0.0), Pose(0.5, 0.0, 0.0)]
    g.odometry.append(Odometry(0, 1, np.array([1.0, 0.0, 0.0]), np.eye(3)))
    solver = SparseSlamSolver(SparseSolverConfig(regularization=1.0))
    j, r = g.system(solver)
    dx = solver.solve(j, r, 0.0)
    np.testing.assert_allclose(dx, [0.25, 0.0, 0.0], atol=1e-9)


def test_triplet_fields():
    t = Triplet(row=1, col=2, value=3.5)
    assert (t.row, t.col, t.value) == (1, 2, 3.5)