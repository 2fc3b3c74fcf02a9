"""Leapfrog engines: position and momentum updates against a shared parameter."""

from __future__ import annotations

import numpy as np

from ..errors import DimensionMismatchError
from ..math.transforms import Transform
from ..models.parameter import Parameter
from ..typing import Array
from .instability import InstabilityPolicy


class LeapfrogEngine:
    """Simulate dynamics directly in the parameter's own coordinates."""

    def __init__(self, parameter: Parameter, instability: InstabilityPolicy = InstabilityPolicy.REJECT) -> None:
        self.parameter = parameter
        self.instability = instability

    @property
    def dimension(self) -> int:
        return self.parameter.dimension

    def initial_position(self) -> Array:
        return self.parameter.get_values()

    def parameter_log_jacobian(self) -> float:
        return 0.0

    def update_momentum(self, position: Array, momentum: Array, gradient: Array, scaled_step: float) -> None:
        gradient = np.asarray(gradient, dtype=np.float64)
        if gradient.shape != momentum.shape:
            raise DimensionMismatchError(
                f"gradient has shape {gradient.shape}, momentum has shape {momentum.shape}"
            )
        momentum += scaled_step * gradient
        self.instability.check_values(momentum)

    def update_position(self, position: Array, momentum: Array, mass_inverse: Array, scaled_step: float) -> None:
        position += scaled_step * (mass_inverse @ momentum)
        self.set_parameter(position)

    def set_parameter(self, position: Array) -> None:
        """Write every component quietly, then fire a single change event."""

        for index, value in enumerate(position):
            self.parameter.set_value_quietly(index, float(value))
        self.parameter.fire_changed()


class TransformedLeapfrogEngine(LeapfrogEngine):
    """Simulate dynamics in the sampling coordinates of ``transform``.

    ``untransformed_position`` caches the model-space values. It is set by
    :meth:`initial_position` and by every position update, and read by
    :meth:`parameter_log_jacobian` and :meth:`update_momentum`.
    """

    def __init__(
        self,
        parameter: Parameter,
        transform: Transform,
        instability: InstabilityPolicy = InstabilityPolicy.REJECT,
    ) -> None:
        super().__init__(parameter, instability)
        self.transform = transform
        self._untransformed: Array | None = None

    @property
    def untransformed_position(self) -> Array:
        if self._untransformed is None:
            raise RuntimeError("untransformed position is only valid after initial_position()")
        return self._untransformed

    def initial_position(self) -> Array:
        self._untransformed = super().initial_position()
        return self.transform.forward(self._untransformed)

    def parameter_log_jacobian(self) -> float:
        return self.transform.log_jacobian(self.untransformed_position)

    def update_momentum(self, position: Array, momentum: Array, gradient: Array, scaled_step: float) -> None:
        gradient = self.transform.transport_gradient(gradient, self.untransformed_position)
        super().update_momentum(position, momentum, gradient, scaled_step)

    def set_parameter(self, position: Array) -> None:
        self._untransformed = self.transform.inverse(position)
        super().set_parameter(self._untransformed)


__all__ = ["LeapfrogEngine", "TransformedLeapfrogEngine"]
