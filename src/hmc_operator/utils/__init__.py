"""Utility helpers for the :mod:`hmc_operator` package."""

from .linalg import quadratic_form, safe_cholesky, spd_inverse, symmetrize
from .logging import WorkUnitLogger, setup_logging
from .rng import MultivariateNormalSampler, RandomSource

__all__ = [
    "MultivariateNormalSampler",
    "RandomSource",
    "WorkUnitLogger",
    "quadratic_form",
    "safe_cholesky",
    "setup_logging",
    "spd_inverse",
    "symmetrize",
]
