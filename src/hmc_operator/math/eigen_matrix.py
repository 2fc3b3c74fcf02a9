"""Square matrix parametrised by its eigenvalues and spherical eigenvectors."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..errors import DimensionMismatchError, UnsupportedOperationError
from ..models.parameter import Parameter
from ..typing import Array
from .spherical import wrap_spherical


class CompoundEigenMatrix:
    """Lazily rebuilt ``M = V · diag(λ) · V⁻¹``.

    ``eigenvalues`` holds ``λ`` (dimension ``D``); ``eigenvectors`` holds
    ``D·(D-1)`` spherical angles, ``D-1`` per column of ``V``. The matrix
    listens to both parameters and clears ``composition_known`` whenever
    either one fires a change; the next entry read rebuilds the composition.
    """

    def __init__(self, eigenvalues: Parameter, eigenvectors: Parameter) -> None:
        dim = eigenvalues.dimension
        if eigenvectors.dimension != dim * (dim - 1):
            raise DimensionMismatchError(
                f"eigenvector parameter must have {dim * (dim - 1)} entries, "
                f"received {eigenvectors.dimension}"
            )
        self.dim = dim
        self.diagonal_parameter = eigenvalues
        self.off_diagonal_parameter = eigenvectors
        self._transformed = np.zeros((dim, dim), dtype=np.float64)
        self.composition_known = False
        eigenvalues.add_listener(self._on_parameter_changed)
        eigenvectors.add_listener(self._on_parameter_changed)
        self._compute_transformed_matrix()

    def _on_parameter_changed(self, parameter: Parameter, index: Optional[int]) -> None:
        self.invalidate()

    def invalidate(self) -> None:
        self.composition_known = False

    def detach(self) -> None:
        """Stop listening to the source parameters."""

        self.diagonal_parameter.remove_listener(self._on_parameter_changed)
        self.off_diagonal_parameter.remove_listener(self._on_parameter_changed)

    def _compute_transformed_matrix(self) -> None:
        base = wrap_spherical(self.off_diagonal_parameter.get_values(), self.dim)
        scaled = base * self.diagonal_parameter.get_values()
        # M V = V D  =>  Mᵀ = V⁻ᵀ (V D)ᵀ
        self._transformed = np.linalg.solve(base.T, scaled.T).T
        self.composition_known = True

    def get(self, row: int, col: int) -> float:
        if not self.composition_known:
            self._compute_transformed_matrix()
        return float(self._transformed[row, col])

    def as_array(self) -> Array:
        if not self.composition_known:
            self._compute_transformed_matrix()
        return self._transformed.copy()

    @property
    def eigenvalues(self) -> Array:
        return self.diagonal_parameter.get_values()

    def update_gradient_diagonal(self, gradient: Array) -> Array:
        raise UnsupportedOperationError("CompoundEigenMatrix does not implement eigenvalue gradients")

    def update_gradient_off_diagonal(self, gradient: Array) -> Array:
        raise UnsupportedOperationError("CompoundEigenMatrix does not implement eigenvector gradients")

    def report(self) -> str:
        return np.array2string(self.as_array(), precision=6)

    def __repr__(self) -> str:
        return f"CompoundEigenMatrix(dim={self.dim}, eigenvalues={self.eigenvalues.tolist()!r})"


__all__ = ["CompoundEigenMatrix"]
