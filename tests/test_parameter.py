from __future__ import annotations

import numpy as np
import pytest

from helpers import ListenerRecorder
from hmc_operator.errors import DimensionMismatchError
from hmc_operator.models import Parameter


def test_get_values_returns_a_copy():
    parameter = Parameter([1.0, 2.0, 3.0])
    values = parameter.get_values()
    values[0] = 99.0
    assert parameter.get_value(0) == 1.0
    assert parameter.dimension == len(parameter) == 3


def test_notifying_and_quiet_writes():
    parameter = Parameter([1.0, 2.0], name="theta")
    recorder = ListenerRecorder()
    parameter.add_listener(recorder)

    parameter.set_value_quietly(0, 5.0)
    parameter.set_values_quietly([7.0, 8.0])
    assert recorder.events == []

    parameter.set_value(1, 3.0)
    parameter.fire_changed()
    assert recorder.events == [("theta", 1), ("theta", None)]
    np.testing.assert_allclose(parameter.get_values(), [7.0, 3.0])


def test_listener_registration_is_idempotent_and_removable():
    parameter = Parameter([0.0])
    recorder = ListenerRecorder()
    parameter.add_listener(recorder)
    parameter.add_listener(recorder)
    parameter.set_value(0, 1.0)
    assert len(recorder.events) == 1

    parameter.remove_listener(recorder)
    parameter.set_value(0, 2.0)
    assert len(recorder.events) == 1


def test_invalid_sizes():
    with pytest.raises(ValueError):
        Parameter([])
    with pytest.raises(DimensionMismatchError):
        Parameter([1.0, 2.0]).set_values_quietly([1.0])
