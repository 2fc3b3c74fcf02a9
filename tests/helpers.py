"""Shared test helpers: Gaussian models and hand-written providers."""

from __future__ import annotations

from typing import Callable, List, Optional

import jax

jax.config.update("jax_enable_x64", True)

import jax.numpy as jnp
import numpy as np

from hmc_operator.models import JaxLogDensityModel, Parameter


def perturbed_precision(dim: int, perturbation: float = 0.3) -> np.ndarray:
    prec = np.eye(dim)
    prec += perturbation * np.diag(np.ones(dim - 1), k=-1)
    prec += perturbation * np.diag(np.ones(dim - 1), k=1)
    return prec


def gaussian_model(values, precision: Optional[np.ndarray] = None) -> tuple[Parameter, JaxLogDensityModel]:
    parameter = Parameter(values, name="x")
    prec = jnp.eye(parameter.dimension) if precision is None else jnp.asarray(precision)

    def log_density(x: jnp.ndarray) -> jnp.float64:
        return -0.5 * x @ prec @ x

    return parameter, JaxLogDensityModel(log_density, parameter)


def log_normal_model(values, precision: Optional[np.ndarray] = None) -> tuple[Parameter, JaxLogDensityModel]:
    """Density over positive ``x`` whose logarithm is Gaussian."""

    parameter = Parameter(values, name="x")
    prec = jnp.eye(parameter.dimension) if precision is None else jnp.asarray(precision)

    def log_density(x: jnp.ndarray) -> jnp.float64:
        z = jnp.log(x)
        return -0.5 * z @ prec @ z - jnp.sum(z)

    return parameter, JaxLogDensityModel(log_density, parameter)


class ListenerRecorder:
    """Collects ``(parameter name, index)`` for every change notification."""

    def __init__(self) -> None:
        self.events: List[tuple[str, Optional[int]]] = []

    def __call__(self, parameter: Parameter, index: Optional[int]) -> None:
        self.events.append((parameter.name, index))


class ScriptedProvider:
    """Hessian provider whose gradient and diagonal Hessian come from callables."""

    def __init__(
        self,
        parameter: Parameter,
        gradient: Callable[[np.ndarray], np.ndarray],
        diagonal_hessian: Optional[Callable[[np.ndarray], np.ndarray]] = None,
    ) -> None:
        self._parameter = parameter
        self._gradient = gradient
        self._diagonal_hessian = diagonal_hessian
        self.gradient_calls = 0

    @property
    def dimension(self) -> int:
        return self._parameter.dimension

    @property
    def parameter(self) -> Parameter:
        return self._parameter

    def parameter_values(self) -> np.ndarray:
        return self._parameter.get_values()

    def gradient_log_density(self) -> np.ndarray:
        self.gradient_calls += 1
        return np.asarray(self._gradient(self._parameter.get_values()), dtype=float)

    def diagonal_hessian_log_density(self) -> np.ndarray:
        if self._diagonal_hessian is None:
            raise AssertionError("diagonal Hessian was not scripted")
        return np.asarray(self._diagonal_hessian(self._parameter.get_values()), dtype=float)

    def log_likelihood(self) -> float:
        return 0.0


class GradientOnlyProvider:
    """Minimal gradient provider without curvature information."""

    def __init__(self, parameter: Parameter, gradient: Callable[[np.ndarray], np.ndarray]) -> None:
        self._parameter = parameter
        self._gradient = gradient

    @property
    def dimension(self) -> int:
        return self._parameter.dimension

    def gradient_log_density(self) -> np.ndarray:
        return np.asarray(self._gradient(self._parameter.get_values()), dtype=float)
