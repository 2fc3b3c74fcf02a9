"""Spherical-coordinate packing of unit vectors."""

from __future__ import annotations

import numpy as np

from ..errors import DimensionMismatchError
from ..typing import Array


def spherical_to_cartesian(angles: Array) -> Array:
    """Unit vector of length ``len(angles) + 1`` from its spherical angles.

    ``x_1 = cos φ_1``, ``x_k = sin φ_1 ⋯ sin φ_{k-1} cos φ_k``, and the last
    coordinate is the product of all sines.
    """

    angles = np.asarray(angles, dtype=np.float64).reshape(-1)
    out = np.empty(angles.size + 1, dtype=np.float64)
    sin_prod = 1.0
    for k, phi in enumerate(angles):
        out[k] = sin_prod * np.cos(phi)
        sin_prod *= np.sin(phi)
    out[-1] = sin_prod
    return out


def wrap_spherical(values: Array, dim: int) -> Array:
    """Square matrix whose column ``c`` is built from ``values[c·(dim-1):(c+1)·(dim-1)]``."""

    values = np.asarray(values, dtype=np.float64).reshape(-1)
    if values.size != dim * (dim - 1):
        raise DimensionMismatchError(
            f"expected {dim * (dim - 1)} spherical angles for dim={dim}, received {values.size}"
        )
    matrix = np.empty((dim, dim), dtype=np.float64)
    for col in range(dim):
        matrix[:, col] = spherical_to_cartesian(values[col * (dim - 1) : (col + 1) * (dim - 1)])
    return matrix


__all__ = ["spherical_to_cartesian", "wrap_spherical"]
