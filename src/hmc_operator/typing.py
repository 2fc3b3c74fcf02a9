"""Shared typing aliases and provider protocols for the hmc_operator package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

import jax.numpy as jnp
import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from .models.parameter import Parameter

Array = NDArray[np.float64]
JaxArray = jnp.ndarray
LogDensityFn = Callable[[JaxArray], jnp.float64]


@runtime_checkable
class GradientProvider(Protocol):
    """Anything that can report the gradient of a log-density at the current parameter."""

    @property
    def dimension(self) -> int:
        ...

    def gradient_log_density(self) -> Array:
        ...


@runtime_checkable
class HessianProvider(GradientProvider, Protocol):
    """Gradient provider that also exposes curvature and the underlying parameter."""

    @property
    def parameter(self) -> "Parameter":
        ...

    def diagonal_hessian_log_density(self) -> Array:
        ...

    def parameter_values(self) -> Array:
        ...

    def log_likelihood(self) -> float:
        ...


__all__ = ["Array", "JaxArray", "LogDensityFn", "GradientProvider", "HessianProvider"]
