"""LKJ "Cholesky" transform from canonical partial correlations to correlations.

Both the input (partial correlations ``z``) and the output (correlations
``r``) are packed row-major over the strict upper triangle of a ``dim × dim``
matrix, so entry ``(i, j)`` with ``i < j`` lives at
``i·(2·dim - i - 1)/2 + (j - i - 1)``.
"""

from __future__ import annotations

import logging

import numpy as np

from ..errors import DimensionMismatchError
from ..typing import Array
from .transforms import Transform

logger = logging.getLogger(__name__)


def num_off_diagonal(dim: int) -> int:
    return dim * (dim - 1) // 2


def upper_index(i: int, j: int, dim: int) -> int:
    """Position of entry ``(i, j)``, ``i < j``, in the packed upper triangle."""

    if not 0 <= i < j < dim:
        raise IndexError(f"({i}, {j}) is not a strict upper-triangular entry for dim={dim}")
    return i * (2 * dim - i - 1) // 2 + (j - i - 1)


def compound_correlation_matrix(values: Array, dim: int) -> Array:
    """Symmetric unit-diagonal matrix whose strict upper triangle is ``values``."""

    values = np.asarray(values, dtype=np.float64)
    if values.size != num_off_diagonal(dim):
        raise DimensionMismatchError(
            f"expected {num_off_diagonal(dim)} packed entries for dim={dim}, received {values.size}"
        )
    matrix = np.eye(dim, dtype=np.float64)
    rows, cols = np.triu_indices(dim, k=1)
    matrix[rows, cols] = values
    matrix[cols, rows] = values
    return matrix


def extract_upper_triangular(matrix: Array) -> Array:
    """Pack the strict upper triangle of a square matrix row-major."""

    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise DimensionMismatchError("matrix must be square")
    return matrix[np.triu_indices(matrix.shape[0], k=1)].copy()


class LKJTransform(Transform):
    """Map canonical partial correlations in (-1, 1) to a correlation matrix.

    The construction follows the Stan manual: the upper-triangular factor ``W``
    is filled column by column, scaling each partial correlation by the
    remaining length of the column, and ``R = WᵀW``. Every output is a valid
    correlation matrix when all inputs lie strictly inside (-1, 1).

    Gradient and Hessian transport are not available for this transform.
    """

    name = "LKJTransform"

    def __init__(self, dim: int, diagnostics: bool = False) -> None:
        if dim < 2:
            raise ValueError("LKJ transform needs a matrix dimension of at least 2")
        super().__init__(num_off_diagonal(dim))
        self.dim = dim
        self.diagnostics = diagnostics

    def _z(self, values: Array, i: int, j: int) -> float:
        if i == j:
            return 1.0
        return float(values[upper_index(i, j, self.dim)])

    def cholesky_factor(self, z: Array) -> Array:
        """Upper-triangular ``W`` with ``WᵀW`` the correlation matrix."""

        z = self._block(z)
        if np.any(np.abs(z) > 1.0):
            raise ValueError("partial correlations must lie in [-1, 1]")
        W = np.zeros((self.dim, self.dim), dtype=np.float64)
        W[0, 0] = 1.0
        for j in range(1, self.dim):
            acc = 1.0
            for i in range(j + 1):
                temp = self._z(z, i, j)
                W[i, j] = temp * acc
                acc *= np.sqrt(1.0 - temp**2)
        return W

    def correlation_matrix(self, z: Array) -> Array:
        W = self.cholesky_factor(z)
        R = W.T @ W
        if self.diagnostics:
            eigs = np.linalg.eigvalsh(R)
            logger.debug("LKJ forward: min eigenvalue %.3e", float(eigs.min()))
            if eigs.min() <= 0.0:
                raise RuntimeError("The LKJ transform should produce a positive definite matrix")
        return R

    def _forward(self, x: Array) -> Array:
        return extract_upper_triangular(self.correlation_matrix(x))

    def _inverse(self, y: Array) -> Array:
        R = compound_correlation_matrix(y, self.dim)
        L = np.linalg.cholesky(R)
        results = np.zeros(num_off_diagonal(self.dim), dtype=np.float64)
        for j in range(1, self.dim):
            acc = 1.0
            for i in range(j):
                temp = L[j, i] / acc
                results[upper_index(i, j, self.dim)] = temp
                acc *= np.sqrt(1.0 - temp**2)
        return results

    def forward_recursive(self, z: Array) -> Array:
        """Same map as :meth:`forward` via the partial-correlation recursion.

        ``z[i, j]`` is the correlation of ``i`` and ``j`` given ``0..i-1``;
        conditioning variables are peeled off from ``i-1`` down to ``0``.
        Slower and less accurate than the Cholesky route, kept as a cross-check.
        """

        z = self._block(z)
        if np.any(np.abs(z) > 1.0):
            raise ValueError("partial correlations must lie in [-1, 1]")
        Z = compound_correlation_matrix(z, self.dim)
        R = Z.copy()
        for i in range(1, self.dim - 1):
            for j in range(i + 1, self.dim):
                rho = Z[i, j]
                for m in range(i - 1, -1, -1):
                    rho = rho * np.sqrt((1.0 - Z[m, i] ** 2) * (1.0 - Z[m, j] ** 2)) + Z[m, i] * Z[m, j]
                R[i, j] = R[j, i] = rho
        return extract_upper_triangular(R)

    def inverse_recursive(self, r: Array) -> Array:
        """Partial correlations from correlations, conditioning on ``0, 1, ...`` in turn."""

        P = compound_correlation_matrix(self._block(r), self.dim)
        for m in range(self.dim - 2):
            for i in range(m + 1, self.dim - 1):
                for j in range(i + 1, self.dim):
                    P[i, j] = (P[i, j] - P[m, i] * P[m, j]) / np.sqrt((1.0 - P[m, i] ** 2) * (1.0 - P[m, j] ** 2))
                    P[j, i] = P[i, j]
        return extract_upper_triangular(P)

    def _log_jacobian(self, x: Array) -> float:
        log_jacobian = 0.0
        k = 0
        for i in range(self.dim - 2):
            for _ in range(i + 1, self.dim):
                log_jacobian += (self.dim - i - 2) * np.log(1.0 - x[k] ** 2)
                k += 1
        return 0.5 * log_jacobian


__all__ = [
    "LKJTransform",
    "compound_correlation_matrix",
    "extract_upper_triangular",
    "num_off_diagonal",
    "upper_index",
]
