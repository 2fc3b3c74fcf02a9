"""Mutable parameter vector shared between a model and its samplers."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import numpy as np

from ..errors import DimensionMismatchError
from ..typing import Array

ParameterListener = Callable[["Parameter", Optional[int]], None]


class Parameter:
    """Fixed-dimension real vector with change notification.

    Writers choose between notifying writes (:meth:`set_value`) and quiet
    writes followed by a single :meth:`fire_changed`. Listeners receive the
    parameter and the changed index, or ``None`` for a batched change.
    """

    def __init__(self, values: Sequence[float] | Array, name: str = "parameter") -> None:
        arr = np.array(values, dtype=np.float64).reshape(-1)
        if arr.size == 0:
            raise ValueError("Parameter must have at least one component")
        self.name = name
        self._values = arr
        self._listeners: List[ParameterListener] = []

    @property
    def dimension(self) -> int:
        return self._values.size

    def __len__(self) -> int:
        return self._values.size

    def get_values(self) -> Array:
        return self._values.copy()

    def get_value(self, index: int) -> float:
        return float(self._values[index])

    def set_value_quietly(self, index: int, value: float) -> None:
        self._values[index] = value

    def set_values_quietly(self, values: Sequence[float] | Array) -> None:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.size != self._values.size:
            raise DimensionMismatchError(
                f"{self.name}: expected {self._values.size} values, received {arr.size}"
            )
        self._values[:] = arr

    def set_value(self, index: int, value: float) -> None:
        self.set_value_quietly(index, value)
        self.fire_changed(index)

    def fire_changed(self, index: int | None = None) -> None:
        for listener in list(self._listeners):
            listener(self, index)

    def add_listener(self, listener: ParameterListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ParameterListener) -> None:
        self._listeners.remove(listener)

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r}, values={self._values.tolist()!r})"


__all__ = ["Parameter", "ParameterListener"]
