from __future__ import annotations

import logging

import numpy as np
import pytest

from helpers import ListenerRecorder
from hmc_operator.errors import DimensionMismatchError, NumericInstabilityError
from hmc_operator.math.transforms import LogTransform
from hmc_operator.models import Parameter
from hmc_operator.samplers import InstabilityPolicy, LeapfrogEngine, TransformedLeapfrogEngine


def test_position_update_fires_single_batched_event():
    parameter = Parameter([0.0, 1.0, 2.0], name="x")
    recorder = ListenerRecorder()
    parameter.add_listener(recorder)
    engine = LeapfrogEngine(parameter)

    position = engine.initial_position()
    momentum = np.array([1.0, -1.0, 2.0])
    engine.update_position(position, momentum, np.diag([1.0, 2.0, 0.5]), 0.1)

    np.testing.assert_allclose(position, [0.1, 0.8, 2.1])
    np.testing.assert_allclose(parameter.get_values(), position)
    assert recorder.events == [("x", None)]


def test_momentum_update_is_in_place():
    engine = LeapfrogEngine(Parameter([0.0, 0.0]))
    momentum = np.array([1.0, 2.0])
    engine.update_momentum(np.zeros(2), momentum, np.array([-2.0, 4.0]), 0.5)
    np.testing.assert_allclose(momentum, [0.0, 4.0])
    assert engine.parameter_log_jacobian() == 0.0


def test_momentum_update_rejects_mis_sized_gradient():
    engine = LeapfrogEngine(Parameter([0.0, 0.0]))
    with pytest.raises(DimensionMismatchError):
        engine.update_momentum(np.zeros(2), np.zeros(2), np.zeros(3), 0.1)


def test_reject_policy_raises_on_non_finite_momentum():
    engine = LeapfrogEngine(Parameter([0.0, 0.0]), InstabilityPolicy.REJECT)
    with pytest.raises(NumericInstabilityError) as excinfo:
        engine.update_momentum(np.zeros(2), np.zeros(2), np.array([1.0, np.inf]), 0.1)
    assert excinfo.value.index == 1


def test_debug_policy_logs_and_raises(caplog):
    engine = LeapfrogEngine(Parameter([0.0]), InstabilityPolicy.DEBUG)
    with caplog.at_level(logging.WARNING):
        with pytest.raises(NumericInstabilityError):
            engine.update_momentum(np.zeros(1), np.zeros(1), np.array([np.nan]), 0.1)
    assert "component 0" in caplog.text


def test_ignore_policy_lets_nan_through():
    engine = LeapfrogEngine(Parameter([0.0]), InstabilityPolicy.IGNORE)
    momentum = np.zeros(1)
    engine.update_momentum(np.zeros(1), momentum, np.array([np.nan]), 0.1)
    assert np.isnan(momentum[0])


def test_transformed_engine_tracks_model_coordinates():
    parameter = Parameter([1.0, 2.0], name="sigma")
    recorder = ListenerRecorder()
    parameter.add_listener(recorder)
    engine = TransformedLeapfrogEngine(parameter, LogTransform(2))

    with pytest.raises(RuntimeError):
        engine.parameter_log_jacobian()

    position = engine.initial_position()
    np.testing.assert_allclose(position, np.log([1.0, 2.0]))
    np.testing.assert_allclose(engine.untransformed_position, [1.0, 2.0])
    np.testing.assert_allclose(engine.parameter_log_jacobian(), -np.log(2.0))

    engine.update_position(position, np.array([1.0, 0.0]), np.eye(2), 0.5)
    np.testing.assert_allclose(parameter.get_values(), [np.exp(0.5), 2.0])
    np.testing.assert_allclose(engine.untransformed_position, parameter.get_values())
    assert recorder.events == [("sigma", None)]


def test_transformed_engine_transports_gradient():
    parameter = Parameter([2.0, 0.5])
    engine = TransformedLeapfrogEngine(parameter, LogTransform(2))
    position = engine.initial_position()
    momentum = np.zeros(2)

    engine.update_momentum(position, momentum, np.array([-1.0, 3.0]), 1.0)
    # g·x + 1
    np.testing.assert_allclose(momentum, [-1.0, 2.5])
