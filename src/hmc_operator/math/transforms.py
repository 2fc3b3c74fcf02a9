"""Change-of-variable transforms between model and sampling coordinates.

A transform maps the model coordinate ``x`` (the values held by a
:class:`~hmc_operator.models.parameter.Parameter`) to the sampling coordinate
``y`` in which Hamiltonian dynamics are simulated. Conventions:

* ``log_jacobian(x)`` is ``log|det ∂forward/∂x|`` at the model point, which
  equals ``-log|det ∂x/∂y|`` at ``y = forward(x)``. Adding it to the kinetic
  energy yields the correct Hastings ratio.
* ``transport_gradient(g, x)`` returns the gradient of the sampling-space
  log-density ``log π(x(y)) + log|det ∂x/∂y|`` with respect to ``y``.

Every operation acts on the whole parameter block; a block of the wrong size
raises :class:`~hmc_operator.errors.DimensionMismatchError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ..errors import DimensionMismatchError, UnsupportedOperationError
from ..typing import Array


class Transform(ABC):
    """Bijection between model and sampling coordinates."""

    name: str = "transform"

    def __init__(self, dimension: int | None = None) -> None:
        if dimension is not None and dimension < 1:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    def _block(self, values: Sequence[float] | Array, label: str = "values") -> Array:
        arr = np.asarray(values, dtype=np.float64)
        if arr.ndim != 1:
            raise DimensionMismatchError(f"{self.name}: {label} must be a vector")
        if self.dimension is not None and arr.size != self.dimension:
            raise DimensionMismatchError(
                f"{self.name} acts on the whole block of {self.dimension} values; "
                f"received {arr.size}"
            )
        return arr

    def forward(self, x: Sequence[float] | Array) -> Array:
        return self._forward(self._block(x))

    def inverse(self, y: Sequence[float] | Array) -> Array:
        return self._inverse(self._block(y))

    def log_jacobian(self, x: Sequence[float] | Array) -> float:
        return float(self._log_jacobian(self._block(x)))

    def transport_gradient(self, gradient: Sequence[float] | Array, x: Sequence[float] | Array) -> Array:
        x_arr = self._block(x)
        g_arr = self._block(gradient, "gradient")
        if g_arr.size != x_arr.size:
            raise DimensionMismatchError(f"{self.name}: gradient and position sizes differ")
        return self._transport_gradient(g_arr, x_arr)

    def transport_diagonal_hessian(
        self,
        hessian: Sequence[float] | Array,
        gradient: Sequence[float] | Array,
        x: Sequence[float] | Array,
    ) -> Array:
        x_arr = self._block(x)
        h_arr = self._block(hessian, "hessian")
        g_arr = self._block(gradient, "gradient")
        if not h_arr.size == g_arr.size == x_arr.size:
            raise DimensionMismatchError(f"{self.name}: hessian, gradient and position sizes differ")
        return self._transport_diagonal_hessian(h_arr, g_arr, x_arr)

    @abstractmethod
    def _forward(self, x: Array) -> Array:
        ...

    @abstractmethod
    def _inverse(self, y: Array) -> Array:
        ...

    @abstractmethod
    def _log_jacobian(self, x: Array) -> float:
        ...

    def _transport_gradient(self, gradient: Array, x: Array) -> Array:
        raise UnsupportedOperationError(f"{self.name} does not transport gradients")

    def _transport_diagonal_hessian(self, hessian: Array, gradient: Array, x: Array) -> Array:
        raise UnsupportedOperationError(f"{self.name} does not transport Hessians")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dimension={self.dimension})"


class IdentityTransform(Transform):
    """Sampling coordinates equal model coordinates."""

    name = "identity"

    def _forward(self, x: Array) -> Array:
        return x.copy()

    def _inverse(self, y: Array) -> Array:
        return y.copy()

    def _log_jacobian(self, x: Array) -> float:
        return 0.0

    def _transport_gradient(self, gradient: Array, x: Array) -> Array:
        return gradient.copy()

    def _transport_diagonal_hessian(self, hessian: Array, gradient: Array, x: Array) -> Array:
        return hessian.copy()


class LogTransform(Transform):
    """Map positive model values to the real line with ``y = log x``."""

    name = "log"

    def _forward(self, x: Array) -> Array:
        if np.any(x <= 0.0):
            raise ValueError("log transform requires strictly positive values")
        return np.log(x)

    def _inverse(self, y: Array) -> Array:
        return np.exp(y)

    def _log_jacobian(self, x: Array) -> float:
        return -float(np.sum(np.log(x)))

    def _transport_gradient(self, gradient: Array, x: Array) -> Array:
        # d/dy [log π(e^y) + y] = g·x + 1
        return gradient * x + 1.0

    def _transport_diagonal_hessian(self, hessian: Array, gradient: Array, x: Array) -> Array:
        return hessian * x * x + gradient * x


__all__ = ["Transform", "IdentityTransform", "LogTransform"]
