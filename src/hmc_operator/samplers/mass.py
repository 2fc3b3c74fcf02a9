"""Mass-matrix preconditioners for the HMC momentum and position updates.

All variants start from the static diagonal metric built from a scalar draw
variance. The adaptive variants replace it on :meth:`MassPreconditioner.update`,
which is only ever called by the owning sampler.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np

from ..math.transforms import IdentityTransform, Transform
from ..typing import Array, HessianProvider
from ..utils.linalg import spd_inverse, symmetrize
from .hessian import numerical_hessian_central

logger = logging.getLogger(__name__)

MASS_INVERSE_LOWER = 1e-2
MASS_INVERSE_UPPER = 1e2
MAX_EIGENVALUE = -0.5


def _read_only(matrix: Array) -> Array:
    view = matrix.view()
    view.flags.writeable = False
    return view


def bound_mass_inverse(
    diagonal_hessian: Array,
    lower: float = MASS_INVERSE_LOWER,
    upper: float = MASS_INVERSE_UPPER,
) -> Array:
    """Diagonal inverse mass from a diagonal Hessian, clamped to ``[lower, upper]``.

    ``-1/h`` is clamped entrywise, rescaled by the mean of the clamped
    precisions, and clamped again so the rescaling cannot push an entry out
    of bounds.
    """

    h = np.asarray(diagonal_hessian, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        inv = -1.0 / h
    inv = np.where(np.isnan(inv), lower, inv)
    bounded = np.clip(inv, lower, upper)
    bounded = bounded * np.mean(1.0 / bounded)
    return np.clip(bounded, lower, upper)


def normalize_eigenvalues(eigenvalues: Array, max_eigenvalue: float = MAX_EIGENVALUE) -> Array:
    """Clip eigenvalues to ``≤ max_eigenvalue`` and rescale them to mean -1."""

    bounded = np.minimum(np.asarray(eigenvalues, dtype=np.float64), max_eigenvalue)
    mean = -np.mean(bounded)
    return bounded / mean


def corrected_hessian(hessian: Array, max_eigenvalue: float = MAX_EIGENVALUE) -> Array:
    """Negative-definite Hessian with the clipped and normalised spectrum of ``hessian``."""

    eigenvalues, vectors = np.linalg.eigh(symmetrize(hessian))
    eigenvalues = normalize_eigenvalues(eigenvalues, max_eigenvalue)
    return symmetrize((vectors * eigenvalues) @ vectors.T)


class MassPreconditioner(ABC):
    """Owns the mass matrix and its inverse."""

    def __init__(self, dimension: int, draw_variance: float = 1.0) -> None:
        if dimension < 1:
            raise ValueError("dimension must be positive")
        if not draw_variance > 0.0:
            raise ValueError("draw_variance must be strictly positive")
        self.dimension = int(dimension)
        self.draw_variance = float(draw_variance)
        self._mass_inverse = np.eye(self.dimension, dtype=np.float64) * self.draw_variance
        self._mass = np.eye(self.dimension, dtype=np.float64) / self.draw_variance

    @property
    def mass(self) -> Array:
        return _read_only(self._mass)

    @property
    def mass_inverse(self) -> Array:
        return _read_only(self._mass_inverse)

    @abstractmethod
    def update(self) -> None:
        """Recompute the metric."""


class StaticMassPreconditioner(MassPreconditioner):
    """Fixed diagonal metric ``mass_inverse = draw_variance · I``."""

    def update(self) -> None:
        return None


def _require_hessian_provider(provider: object) -> HessianProvider:
    if not isinstance(provider, HessianProvider):
        raise TypeError("Must provide a HessianProvider for preconditioning")
    return provider


class DiagonalHessianPreconditioner(MassPreconditioner):
    """Diagonal metric from the model's diagonal Hessian of the log-density."""

    def __init__(
        self,
        provider: HessianProvider,
        draw_variance: float = 1.0,
        transform: Transform | None = None,
    ) -> None:
        self.provider = _require_hessian_provider(provider)
        super().__init__(self.provider.dimension, draw_variance)
        self.transform = transform

    def diagonal_hessian(self) -> Array:
        hessian = self.provider.diagonal_hessian_log_density()
        if self.transform is None:
            return np.asarray(hessian, dtype=np.float64)
        x = self.provider.parameter_values()
        gradient = self.provider.gradient_log_density()
        return self.transform.transport_diagonal_hessian(hessian, gradient, x)

    def set_mass_matrices(self, diagonal_hessian: Array) -> None:
        bounded = bound_mass_inverse(diagonal_hessian)
        self._mass_inverse = np.diag(bounded)
        self._mass = np.diag(1.0 / bounded)

    def update(self) -> None:
        self.set_mass_matrices(self.diagonal_hessian())
        logger.debug("diagonal preconditioner: mass inverse %s", np.diag(self._mass_inverse))


class DenseHessianPreconditioner(MassPreconditioner):
    """Dense metric from a finite-difference Hessian in sampling coordinates."""

    def __init__(
        self,
        provider: HessianProvider,
        transform: Transform | None = None,
        draw_variance: float = 1.0,
        max_eigenvalue: float = MAX_EIGENVALUE,
    ) -> None:
        self.provider = _require_hessian_provider(provider)
        super().__init__(self.provider.dimension, draw_variance)
        if not max_eigenvalue < 0.0:
            raise ValueError("max_eigenvalue must be negative")
        self.transform = transform or IdentityTransform()
        self.max_eigenvalue = float(max_eigenvalue)

    def numerical_hessian(self) -> Array:
        return numerical_hessian_central(self.provider, self.transform)

    def set_mass_matrices(self, hessian: Array) -> None:
        corrected = corrected_hessian(hessian, self.max_eigenvalue)
        self._mass = -corrected
        self._mass_inverse = spd_inverse(-corrected)

    def update(self) -> None:
        """Refresh the metric; a non-finite Hessian estimate keeps the current one."""

        hessian = self.numerical_hessian()
        if not np.all(np.isfinite(hessian)):
            logger.warning(
                "dense preconditioner: non-finite Hessian estimate (%d entries); keeping previous metric",
                int(np.count_nonzero(~np.isfinite(hessian))),
            )
            return
        self.set_mass_matrices(hessian)
        logger.debug("dense preconditioner: mass eigenvalues %s", np.linalg.eigvalsh(self._mass))


__all__ = [
    "MassPreconditioner",
    "StaticMassPreconditioner",
    "DiagonalHessianPreconditioner",
    "DenseHessianPreconditioner",
    "bound_mass_inverse",
    "corrected_hessian",
    "normalize_eigenvalues",
    "MASS_INVERSE_LOWER",
    "MASS_INVERSE_UPPER",
    "MAX_EIGENVALUE",
]
