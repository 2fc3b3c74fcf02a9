"""Finite-difference Hessian estimators in sampling coordinates.

The estimators probe the model by writing perturbed values into the shared
parameter with quiet writes only. The original values are restored on exit,
including when the gradient evaluation raises, and no change notification is
ever fired, so listeners never observe a probe.
"""

from __future__ import annotations

import contextlib
import math
from typing import Iterator

import numpy as np

from ..math.transforms import IdentityTransform, Transform
from ..models.parameter import Parameter
from ..typing import Array, HessianProvider

MACHINE_EPSILON = float(np.finfo(np.float64).eps)
SQRT_EPSILON = math.sqrt(MACHINE_EPSILON)
SQRT_SQRT_EPSILON = math.sqrt(SQRT_EPSILON)


@contextlib.contextmanager
def probing(parameter: Parameter) -> Iterator[Array]:
    """Yield the current values and restore them quietly on exit."""

    saved = parameter.get_values()
    try:
        yield saved.copy()
    finally:
        parameter.set_values_quietly(saved)


def _probe_gradient(provider: HessianProvider, transform: Transform, y: Array) -> Array:
    x = transform.inverse(y)
    provider.parameter.set_values_quietly(x)
    return transform.transport_gradient(provider.gradient_log_density(), x)


def _probe_log_likelihood(provider: HessianProvider, transform: Transform, y: Array) -> float:
    provider.parameter.set_values_quietly(transform.inverse(y))
    return float(provider.log_likelihood())


def numerical_hessian_central(provider: HessianProvider, transform: Transform | None = None) -> Array:
    """Central-difference Hessian of the sampling-space log-density.

    Each coordinate is perturbed by ``h_i = ε^{1/4}·(|y_i| + 1)`` and the two
    one-sided estimates of every cross derivative are averaged.
    """

    transform = transform or IdentityTransform()
    with probing(provider.parameter) as x0:
        y0 = transform.forward(x0)
        dim = y0.size
        h = SQRT_SQRT_EPSILON * (np.abs(y0) + 1.0)
        plus = np.empty((dim, dim), dtype=np.float64)
        minus = np.empty((dim, dim), dtype=np.float64)
        for i in range(dim):
            y = y0.copy()
            y[i] = y0[i] + h[i]
            plus[i] = _probe_gradient(provider, transform, y)
            y[i] = y0[i] - h[i]
            minus[i] = _probe_gradient(provider, transform, y)

    # diff[i, j] = g_j(y + h_i e_i) - g_j(y - h_i e_i)
    half = (plus - minus) / (4.0 * h[:, None])
    return half + half.T


def numerical_hessian_forward(provider: HessianProvider, transform: Transform | None = None) -> Array:
    """Forward-difference Hessian of the sampling-space log-density."""

    transform = transform or IdentityTransform()
    with probing(provider.parameter) as x0:
        y0 = transform.forward(x0)
        dim = y0.size
        g0 = transform.transport_gradient(provider.gradient_log_density(), x0)
        h = SQRT_EPSILON * (np.abs(y0) + 1.0)
        shifted = np.empty((dim, dim), dtype=np.float64)
        for i in range(dim):
            y = y0.copy()
            y[i] = y0[i] + h[i]
            shifted[i] = _probe_gradient(provider, transform, y)

    half = (shifted - g0[None, :]) / (2.0 * h[:, None])
    return half + half.T


def numerical_hessian_from_log_likelihood(
    provider: HessianProvider, transform: Transform | None = None
) -> Array:
    """Hessian of ``y ↦ log_likelihood(inverse(y))`` from likelihood values alone.

    Diagonal entries use the five-point stencil and off-diagonal entries the
    four-point cross difference. Only the likelihood is evaluated, so this is
    an independent check on the gradient-based estimators.
    """

    transform = transform or IdentityTransform()
    with probing(provider.parameter) as x0:
        y = transform.forward(x0)
        dim = y.size
        hessian = np.empty((dim, dim), dtype=np.float64)
        f = lambda point: _probe_log_likelihood(provider, transform, point)  # noqa: E731
        f0 = f(y)
        for i in range(dim):
            hi = SQRT_SQRT_EPSILON * (abs(y[i]) + 1.0)
            old_i = y[i]
            y[i] = old_i + hi
            fp_ = f(y)
            y[i] = old_i - hi
            fm_ = f(y)
            y[i] = old_i + 2.0 * hi
            fpp = f(y)
            y[i] = old_i - 2.0 * hi
            fmm = f(y)
            y[i] = old_i
            hessian[i, i] = (-fpp + 16.0 * fp_ - 30.0 * f0 + 16.0 * fm_ - fmm) / (12.0 * hi * hi)
            for j in range(i + 1, dim):
                hj = SQRT_SQRT_EPSILON * (abs(y[j]) + 1.0)
                old_j = y[j]
                y[i], y[j] = old_i + hi, old_j + hj
                fpp = f(y)
                y[i], y[j] = old_i + hi, old_j - hj
                fpm = f(y)
                y[i], y[j] = old_i - hi, old_j + hj
                fmp = f(y)
                y[i], y[j] = old_i - hi, old_j - hj
                fmm = f(y)
                y[i], y[j] = old_i, old_j
                hessian[i, j] = hessian[j, i] = (fpp - fpm - fmp + fmm) / (4.0 * hi * hj)
    return hessian


__all__ = [
    "MACHINE_EPSILON",
    "SQRT_EPSILON",
    "SQRT_SQRT_EPSILON",
    "numerical_hessian_central",
    "numerical_hessian_forward",
    "numerical_hessian_from_log_likelihood",
    "probing",
]
