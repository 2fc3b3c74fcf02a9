"""Gradient and Hessian providers built from JAX log-density functions."""

from __future__ import annotations

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from ..typing import Array, LogDensityFn
from ..utils import jax_setup  # noqa: F401
from .parameter import Parameter


class JaxLogDensityModel:
    """Expose a JAX log-density over a :class:`Parameter` as a Hessian provider.

    Every evaluation reads the parameter's current values, so quiet probe
    writes made by the finite-difference estimators are seen immediately.
    ``log_likelihood_fn`` defaults to ``log_density_fn``.
    """

    def __init__(
        self,
        log_density_fn: LogDensityFn,
        parameter: Parameter,
        log_likelihood_fn: Optional[LogDensityFn] = None,
    ) -> None:
        self._parameter = parameter
        self._log_density = jax.jit(log_density_fn)
        self._log_likelihood = jax.jit(log_likelihood_fn or log_density_fn)
        self._grad = jax.jit(jax.grad(log_density_fn))
        self._diag_hessian = jax.jit(lambda x: jnp.diag(jax.hessian(log_density_fn)(x)))

    @property
    def dimension(self) -> int:
        return self._parameter.dimension

    @property
    def parameter(self) -> Parameter:
        return self._parameter

    def parameter_values(self) -> Array:
        return self._parameter.get_values()

    def _position(self) -> jnp.ndarray:
        return jnp.asarray(self._parameter.get_values(), dtype=jnp.float64)

    def log_density(self) -> float:
        return float(self._log_density(self._position()))

    def log_likelihood(self) -> float:
        return float(self._log_likelihood(self._position()))

    def gradient_log_density(self) -> Array:
        return np.asarray(self._grad(self._position()), dtype=np.float64)

    def diagonal_hessian_log_density(self) -> Array:
        return np.asarray(self._diag_hessian(self._position()), dtype=np.float64)


__all__ = ["JaxLogDensityModel"]
