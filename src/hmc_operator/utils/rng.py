"""Random number sources for momentum draws and step-count jitter."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..typing import Array
from .linalg import safe_cholesky


@dataclass
class RandomSource:
    """Own the NumPy generator driving one sampler instance."""

    seed: int | None = None
    numpy_rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.numpy_rng = np.random.default_rng(self.seed)

    def uniform(self) -> float:
        return float(self.numpy_rng.uniform())

    def standard_normal(self, size: int) -> Array:
        return self.numpy_rng.standard_normal(size)

    def multivariate_normal(self, mean: Array, covariance: Array) -> Array:
        return MultivariateNormalSampler(mean, covariance=covariance).draw(self)


class MultivariateNormalSampler:
    """Gaussian draw distribution with a cached Cholesky factor.

    Exactly one of ``covariance`` or ``precision`` must be supplied; the
    momentum distribution is naturally parametrised by the inverse mass, which
    plays the role of a precision.
    """

    def __init__(
        self,
        mean: Array,
        *,
        covariance: Array | None = None,
        precision: Array | None = None,
    ) -> None:
        if (covariance is None) == (precision is None):
            raise ValueError("Supply exactly one of covariance or precision")
        self.mean = np.asarray(mean, dtype=np.float64).copy()
        if covariance is None:
            covariance = np.linalg.inv(np.asarray(precision, dtype=np.float64))
        covariance = np.asarray(covariance, dtype=np.float64)
        if covariance.shape != (self.mean.size, self.mean.size):
            raise ValueError("covariance must be square and match the mean")
        self.covariance = covariance
        self.cholesky = safe_cholesky(covariance)

    @property
    def dimension(self) -> int:
        return self.mean.size

    def draw(self, rng: RandomSource) -> Array:
        z = rng.standard_normal(self.dimension)
        return self.mean + self.cholesky @ z


__all__ = ["RandomSource", "MultivariateNormalSampler"]
