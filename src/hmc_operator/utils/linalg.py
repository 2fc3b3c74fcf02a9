"""Dense linear algebra helpers used by the preconditioners and samplers."""

from __future__ import annotations

import numpy as np
from scipy import linalg

from ..typing import Array


def symmetrize(S: Array) -> Array:
    """Return the symmetric part of ``S`` as a float64 array."""
    S64 = np.asarray(S, dtype=np.float64)
    return 0.5 * (S64 + S64.T)


def safe_cholesky(S: Array, jitter: float = 1e-10, max_tries: int = 5) -> Array:
    """Return a lower-triangular ``L`` with ``S ≈ L Lᵀ``.

    Parameters
    ----------
    S:
        Symmetric positive definite matrix to factorise. The input is symmetrised
        to avoid numerical asymmetry issues and is always treated as ``float64``.
    jitter:
        Diagonal regularisation added after the first failed attempt.
    max_tries:
        Maximum number of attempts made with exponentially increasing jitter.

    Returns
    -------
    numpy.ndarray
        Lower-triangular Cholesky factor of ``S``.

    Raises
    ------
    np.linalg.LinAlgError
        If the matrix cannot be factorised after ``max_tries`` attempts.
    """

    if max_tries < 1:
        raise ValueError("max_tries must be at least 1")

    S_sym = symmetrize(S)
    if S_sym.ndim != 2 or S_sym.shape[0] != S_sym.shape[1]:
        raise ValueError("S must be a square matrix")
    n = S_sym.shape[0]

    eye = np.eye(n, dtype=np.float64)
    eps = 0.0
    for _ in range(max_tries):
        try:
            return linalg.cholesky(S_sym + eps * eye, lower=True)
        except linalg.LinAlgError:
            eps = jitter if eps == 0.0 else 10.0 * eps
    raise np.linalg.LinAlgError("Cholesky failed")


def spd_inverse(S: Array) -> Array:
    """Invert a symmetric positive definite matrix through its Cholesky factor."""
    L = safe_cholesky(S)
    eye = np.eye(L.shape[0], dtype=np.float64)
    return symmetrize(linalg.cho_solve((L, True), eye))


def quadratic_form(vector: Array, matrix: Array) -> float:
    """Return ``½ vᵀ M v``."""
    v = np.asarray(vector, dtype=np.float64)
    return 0.5 * float(v @ (np.asarray(matrix, dtype=np.float64) @ v))


__all__ = ["symmetrize", "safe_cholesky", "spd_inverse", "quadratic_form"]
