"""Schur-complement marginalization for sliding-window graph SLAM.

Removing old variables by simply dropping them loses what they told us about
the variables that remain. Marginalizing them with the Schur complement keeps
that information as a prior on the remaining variables:

    H' = Hoo - Hom * Hmm^-1 * Hmo
    b' = bo  - Hom * Hmm^-1 * bm
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np

_POSE_DIM = 3
_LANDMARK_DIM = 2


@dataclass
class PriorConstraint:
    """Information left behind by marginalized variables, as a quadratic prior."""

    variable_indices: list[int]
    information: np.ndarray
    linearization_point: np.ndarray
    residual: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.information = np.asarray(self.information, dtype=float)
        self.linearization_point = np.asarray(self.linearization_point, dtype=float)
        if self.residual is None:
            self.residual = np.zeros(self.linearization_point.shape[0])
        else:
            self.residual = np.asarray(self.residual, dtype=float)

    def compute_error(self, current_state) -> float:
        """Quadratic error ``(x - x0)^T * Omega * (x - x0)`` at ``current_state``."""
        delta = np.asarray(current_state, dtype=float) - self.linearization_point
        return float(delta @ (self.information @ delta))

    def dimension(self) -> int:
        """Number of scalar variables the prior constrains."""
        return int(self.linearization_point.shape[0])


@dataclass
class MarginalizationConfig:
    """Tuning for the marginalizer."""

    min_eigenvalue: float = 1e-8
    enable_sparsification: bool = False
    sparsification_threshold: float = 1e-6


@dataclass
class Marginalizer:
    """Marginalizes variables out of an information matrix."""

    config: MarginalizationConfig = field(default_factory=MarginalizationConfig)

    def marginalize(
        self,
        full_info,
        full_residual,
        marginalize_indices: Sequence[int],
        keep_indices: Sequence[int],
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return the marginalized information matrix and residual for the kept variables.

        Raises ``numpy.linalg.LinAlgError`` if the block being marginalized
        cannot be inverted.
        """
        h = np.asarray(full_info, dtype=float)
        b = np.asarray(full_residual, dtype=float)
        marg = np.asarray(list(marginalize_indices), dtype=int)
        keep = np.asarray(list(keep_indices), dtype=int)

        h_oo = h[np.ix_(keep, keep)]
        b_o = b[keep]

        if marg.size == 0:
            return h_oo.copy(), b_o.copy()

        h_mm = h[np.ix_(marg, marg)] + self.config.min_eigenvalue * np.eye(marg.size)
        h_mo = h[np.ix_(marg, keep)]
        h_om = h_mo.T
        b_m = b[marg]

        h_mm_inv = np.linalg.inv(h_mm)
        h_prime = h_oo - h_om @ h_mm_inv @ h_mo
        b_prime = b_o - h_om @ h_mm_inv @ b_m

        if self.config.enable_sparsification:
            h_prime = self._sparsify(h_prime)

        return h_prime, b_prime

    def _sparsify(self, matrix: np.ndarray) -> np.ndarray:
        result = matrix.copy()
        result[np.abs(result) < self.config.sparsification_threshold] = 0.0
        return result

    def create_prior(
        self,
        variable_indices: Sequence[int],
        information,
        linearization_point,
    ) -> PriorConstraint:
        """Wrap a marginalization result as a prior constraint."""
        return PriorConstraint(list(variable_indices), information, linearization_point)


class LocalInfo(NamedTuple):
    """Local information system around the poses to be marginalized."""

    information: np.ndarray
    residual: np.ndarray
    marginalize_indices: list[int]
    keep_indices: list[int]


def build_local_info(
    poses: Sequence[Any],
    landmarks: Sequence[Any],
    odometry_constraints: Iterable[Any],
    observation_constraints: Iterable[Any],
    marginalize_pose_indices: Sequence[int],
    fix_first_pose: bool,
) -> LocalInfo:
    """Build the information matrix over the poses to marginalize and their neighbours.

    Odometry constraints need ``from_idx``, ``to_idx`` and a 3x3 ``information``;
    observation constraints need ``pose_idx``, ``landmark_idx`` and a 2x2
    ``information``. Observation contributions to poses are simplified to the
    pose's leading 2x2 block.
    """
    odometry = list(odometry_constraints)
    observations = list(observation_constraints)
    marg_set = set(marginalize_pose_indices)

    connected_poses: set[int] = set()
    connected_landmarks: set[int] = set()
    for c in odometry:
        if c.from_idx in marg_set or c.to_idx in marg_set:
            connected_poses.update((c.from_idx, c.to_idx))
    for c in observations:
        if c.pose_idx in marg_set:
            connected_poses.add(c.pose_idx)
            connected_landmarks.add(c.landmark_idx)

    all_poses = sorted(connected_poses)
    all_landmarks = sorted(connected_landmarks)

    skip_first = fix_first_pose and bool(all_poses) and all_poses[0] == 0
    local_poses = all_poses[1:] if skip_first else all_poses
    n_pose_vars = len(local_poses) * _POSE_DIM
    n_vars = n_pose_vars + len(all_landmarks) * _LANDMARK_DIM

    if n_vars == 0:
        return LocalInfo(np.zeros((0, 0)), np.zeros(0), [], [])

    pose_to_local = {p: i * _POSE_DIM for i, p in enumerate(local_poses)}
    lm_to_local = {l: n_pose_vars + i * _LANDMARK_DIM for i, l in enumerate(all_landmarks)}

    h = np.zeros((n_vars, n_vars))
    b = np.zeros(n_vars)

    pose_block = slice(0, _POSE_DIM)
    for c in odometry:
        if c.from_idx not in marg_set and c.to_idx not in marg_set:
            continue
        info = np.asarray(c.information, dtype=float)[pose_block, pose_block]
        i1 = pose_to_local.get(c.from_idx)
        i2 = pose_to_local.get(c.to_idx)
        if i1 is not None:
            h[i1:i1 + _POSE_DIM, i1:i1 + _POSE_DIM] += info
        if i2 is not None:
            h[i2:i2 + _POSE_DIM, i2:i2 + _POSE_DIM] += info
        if i1 is not None and i2 is not None:
            h[i1:i1 + _POSE_DIM, i2:i2 + _POSE_DIM] -= info
            h[i2:i2 + _POSE_DIM, i1:i1 + _POSE_DIM] -= info

    lm_block = slice(0, _LANDMARK_DIM)
    for c in observations:
        if c.pose_idx not in marg_set:
            continue
        info = np.asarray(c.information, dtype=float)[lm_block, lm_block]
        pi = pose_to_local.get(c.pose_idx)
        li = lm_to_local.get(c.landmark_idx)
        if pi is not None:
            h[pi:pi + _LANDMARK_DIM, pi:pi + _LANDMARK_DIM] += info
        if li is not None:
            h[li:li + _LANDMARK_DIM, li:li + _LANDMARK_DIM] += info

    marg_local = [
        start + k
        for p in marginalize_pose_indices
        if (start := pose_to_local.get(p)) is not None
        for k in range(_POSE_DIM)
    ]
    marg_lookup = set(marg_local)
    keep_local = [i for i in range(n_vars) if i not in marg_lookup]

    return LocalInfo(h, b, marg_local, keep_local)