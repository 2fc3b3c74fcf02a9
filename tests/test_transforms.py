"""Tests for the identity and log transforms."""

from __future__ import annotations

import numpy as np
import pytest

from hmc_operator.errors import DimensionMismatchError, UnsupportedOperationError
from hmc_operator.math.lkj import LKJTransform
from hmc_operator.math.transforms import IdentityTransform, LogTransform


def _sampling_log_density(transform, log_density, y):
    x = transform.inverse(y)
    return log_density(x) - transform.log_jacobian(x)


def test_identity_passes_everything_through():
    transform = IdentityTransform()
    x = np.array([0.3, -1.2, 4.0])
    g = np.array([1.0, 2.0, -3.0])

    np.testing.assert_allclose(transform.forward(x), x)
    np.testing.assert_allclose(transform.inverse(x), x)
    assert transform.log_jacobian(x) == 0.0
    np.testing.assert_allclose(transform.transport_gradient(g, x), g)


def test_log_transform_round_trip_and_jacobian():
    transform = LogTransform(3)
    x = np.array([0.5, 2.0, 7.5])

    y = transform.forward(x)
    np.testing.assert_allclose(y, np.log(x))
    np.testing.assert_allclose(transform.inverse(y), x, rtol=1e-14)
    np.testing.assert_allclose(transform.log_jacobian(x), -np.sum(np.log(x)))


def test_log_transform_gradient_matches_finite_difference():
    transform = LogTransform(2)

    def log_density(x):
        return -0.5 * x[0] ** 2 - 2.0 * x[1] + np.log(x[0]) * x[1]

    def grad(x):
        return np.array([-x[0] + x[1] / x[0], -2.0 + np.log(x[0])])

    x = np.array([1.3, 0.4])
    y = transform.forward(x)
    h = 1e-6
    fd = np.empty(2)
    for k in range(2):
        e = np.zeros(2)
        e[k] = h
        fd[k] = (
            _sampling_log_density(transform, log_density, y + e)
            - _sampling_log_density(transform, log_density, y - e)
        ) / (2.0 * h)

    np.testing.assert_allclose(transform.transport_gradient(grad(x), x), fd, atol=1e-7)


def test_log_transform_diagonal_hessian_matches_finite_difference():
    transform = LogTransform(1)

    def log_density(x):
        return -0.5 * x[0] ** 2

    x = np.array([1.7])
    y = transform.forward(x)
    h = 1e-4
    f = lambda yy: _sampling_log_density(transform, log_density, yy)  # noqa: E731
    fd = (f(y + h) - 2.0 * f(y) + f(y - h)) / h**2

    hess = transform.transport_diagonal_hessian(np.array([-1.0]), -x, x)
    np.testing.assert_allclose(hess, [fd], atol=1e-5)


def test_log_transform_rejects_non_positive_values():
    with pytest.raises(ValueError):
        LogTransform().forward(np.array([1.0, 0.0]))


def test_partial_block_is_rejected():
    transform = LogTransform(3)
    with pytest.raises(DimensionMismatchError):
        transform.forward(np.array([1.0, 2.0]))
    with pytest.raises(DimensionMismatchError):
        transform.transport_gradient(np.ones(2), np.ones(3))
    with pytest.raises(DimensionMismatchError):
        IdentityTransform().forward(np.ones((2, 2)))


def test_lkj_derivative_transport_is_unsupported():
    transform = LKJTransform(3)
    z = np.array([0.1, 0.2, 0.3])
    with pytest.raises(UnsupportedOperationError):
        transform.transport_gradient(np.ones(3), z)
    with pytest.raises(UnsupportedOperationError):
        transform.transport_diagonal_hessian(np.ones(3), np.ones(3), z)
