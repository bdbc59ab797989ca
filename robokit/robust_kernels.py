"""Robust loss functions that reduce the influence of outliers in least squares.

A robust kernel turns a residual magnitude into a cost ``rho(r)``, an IRLS
weight and an influence value, so that large residuals pull less on the
solution than they would under plain squared error.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

_MIN_SCALE = 1e-6
_MAD_TO_SIGMA = 1.4826

# Chi-squared critical values used for outlier tests.
DOF_2_95 = 5.991
DOF_3_95 = 7.815
DOF_2_99 = 9.210
DOF_3_99 = 11.345

_CHI_SQUARED_TABLE = {
    (2, 95): DOF_2_95,
    (3, 95): DOF_3_95,
    (2, 99): DOF_2_99,
    (3, 99): DOF_3_99,
}


class RobustKernel(Protocol):
    """Interface shared by all robust kernels."""

    def weight(self, residual_abs: float) -> float: ...

    def cost(self, residual_abs: float) -> float: ...

    def influence(self, residual_abs: float) -> float: ...


def _clamp_scale(value: float) -> float:
    return max(abs(value), _MIN_SCALE)


@dataclass(frozen=True)
class TrivialKernel:
    """Plain least squares: every residual has weight one."""

    def weight(self, residual_abs: float) -> float:
        # IRLS weight is influence / residual; the quadratic cost makes it one.
        if residual_abs == 0.0:
            return 1.0
        return self.influence(residual_abs) / residual_abs

    def cost(self, residual_abs: float) -> float:
        return 0.5 * residual_abs * residual_abs

    def influence(self, residual_abs: float) -> float:
        # Derivative of the quadratic cost: rho'(r) = 2 * rho(r) / r = r.
        if residual_abs == 0.0:
            return 0.0
        return 2.0 * self.cost(residual_abs) / residual_abs


@dataclass(frozen=True)
class HuberKernel:
    """Quadratic inside the threshold ``k``, linear outside it."""

    k: float = 1.345

    def __post_init__(self) -> None:
        object.__setattr__(self, "k", _clamp_scale(self.k))

    @classmethod
    def from_mad(cls, mad: float) -> HuberKernel:
        """Scale the threshold from a median absolute deviation."""
        return cls(1.345 * _MAD_TO_SIGMA * mad)

    def weight(self, residual_abs: float) -> float:
        if residual_abs <= self.k:
            return 1.0
        return self.k / residual_abs

    def cost(self, residual_abs: float) -> float:
        if residual_abs <= self.k:
            return 0.5 * residual_abs * residual_abs
        return self.k * residual_abs - 0.5 * self.k * self.k

    def influence(self, residual_abs: float) -> float:
        if residual_abs <= self.k:
            return residual_abs
        return math.copysign(self.k, residual_abs)


@dataclass(frozen=True)
class CauchyKernel:
    """Heavy-tailed (Lorentzian) kernel with scale ``c``."""

    c: float = 2.3849

    def __post_init__(self) -> None:
        object.__setattr__(self, "c", _clamp_scale(self.c))

    @classmethod
    def from_mad(cls, mad: float) -> CauchyKernel:
        """Scale the kernel from a median absolute deviation."""
        return cls(2.3849 * _MAD_TO_SIGMA * mad)

    def _denominator(self, residual_abs: float) -> float:
        ratio = residual_abs / self.c
        return 1.0 + ratio * ratio

    def weight(self, residual_abs: float) -> float:
        return 1.0 / self._denominator(residual_abs)

    def cost(self, residual_abs: float) -> float:
        return 0.5 * self.c * self.c * math.log(self._denominator(residual_abs))

    def influence(self, residual_abs: float) -> float:
        return residual_abs / self._denominator(residual_abs)


@dataclass(frozen=True)
class TukeyKernel:
    """Biweight kernel that rejects residuals beyond the cutoff ``c`` entirely."""

    c: float = 4.685

    def __post_init__(self) -> None:
        object.__setattr__(self, "c", _clamp_scale(self.c))

    @classmethod
    def from_mad(cls, mad: float) -> TukeyKernel:
        """Scale the cutoff from a median absolute deviation."""
        return cls(4.685 * _MAD_TO_SIGMA * mad)

    def _term(self, residual_abs: float) -> float:
        ratio = residual_abs / self.c
        return 1.0 - ratio * ratio

    def weight(self, residual_abs: float) -> float:
        if residual_abs > self.c:
            return 0.0
        term = self._term(residual_abs)
        return term * term

    def cost(self, residual_abs: float) -> float:
        c2_6 = self.c * self.c / 6.0
        if residual_abs > self.c:
            return c2_6
        term = self._term(residual_abs)
        return c2_6 * (1.0 - term * term * term)

    def influence(self, residual_abs: float) -> float:
        if residual_abs > self.c:
            return 0.0
        term = self._term(residual_abs)
        return residual_abs * term * term


class RobustKernelType(Enum):
    """Which robust kernel to use."""

    NONE = "none"
    HUBER = "huber"
    CAUCHY = "cauchy"
    TUKEY = "tukey"

    @classmethod
    def default(cls) -> RobustKernelType:
        return cls.HUBER


class DynamicKernel:
    """A kernel chosen at run time by type, with an optional scale."""

    def __init__(
        self,
        kernel_type: RobustKernelType = RobustKernelType.HUBER,
        scale: float | None = None,
    ) -> None:
        self.kernel_type = kernel_type
        self.kernel: RobustKernel
        if kernel_type is RobustKernelType.NONE:
            self.kernel = TrivialKernel()
        elif kernel_type is RobustKernelType.HUBER:
            self.kernel = HuberKernel() if scale is None else HuberKernel(scale)
        elif kernel_type is RobustKernelType.CAUCHY:
            self.kernel = CauchyKernel() if scale is None else CauchyKernel(scale)
        elif kernel_type is RobustKernelType.TUKEY:
            self.kernel = TukeyKernel() if scale is None else TukeyKernel(scale)
        else:
            raise ValueError(f"unknown kernel type: {kernel_type!r}")

    def weight(self, residual_abs: float) -> float:
        return self.kernel.weight(residual_abs)

    def cost(self, residual_abs: float) -> float:
        return self.kernel.cost(residual_abs)


def _normal_quantile(p: float) -> float:
    """Approximate inverse CDF of the standard normal distribution."""
    if p < 0.5:
        t = math.sqrt(-2.0 * math.log(p))
    else:
        t = math.sqrt(-2.0 * math.log(1.0 - p))

    c0, c1, c2 = 2.515517, 0.802853, 0.010328
    d1, d2, d3 = 1.432788, 0.189269, 0.001308
    result = t - (c0 + c1 * t + c2 * t * t) / (1.0 + d1 * t + d2 * t * t + d3 * t * t * t)
    return -result if p < 0.5 else result


def _percent(confidence: float) -> int:
    value = confidence * 100.0
    if math.isnan(value) or value <= 0.0:
        return 0
    return int(value)


def _chi_squared_threshold(dof: int, confidence: float) -> float:
    tabled = _CHI_SQUARED_TABLE.get((dof, _percent(confidence)))
    if tabled is not None:
        return tabled
    if dof < 1:
        raise ValueError("degrees of freedom must be at least 1")
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must lie strictly between 0 and 1")
    # Wilson-Hilferty approximation.
    p = 1.0 - confidence
    z = -_normal_quantile(p) if p > 0.5 else _normal_quantile(1.0 - p)
    dof_f = float(dof)
    term = 1.0 - 2.0 / (9.0 * dof_f) + z * math.sqrt(2.0 / (9.0 * dof_f))
    return dof_f * term * term * term


def is_outlier(mahalanobis_sq: float, dof: int, confidence: float) -> bool:
    """Whether a squared Mahalanobis distance exceeds the chi-squared threshold."""
    return mahalanobis_sq > _chi_squared_threshold(dof, confidence)


def compute_mad(residuals: Iterable[float]) -> float:
    """Median of the absolute residuals, assuming they are centred on zero.

    Returns 1.0 for no residuals and never less than 1e-6.
    """
    magnitudes = [abs(r) for r in residuals]
    if not magnitudes:
        return 1.0
    return max(statistics.median(magnitudes), _MIN_SCALE)