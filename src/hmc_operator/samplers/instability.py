"""Numeric-safety policies applied to every updated momentum component."""

from __future__ import annotations

import enum
import logging

import numpy as np

from ..errors import NumericInstabilityError
from ..typing import Array

logger = logging.getLogger(__name__)


class InstabilityPolicy(enum.Enum):
    """How a non-finite momentum component is treated."""

    REJECT = "reject"
    DEBUG = "debug"
    IGNORE = "ignore"

    @classmethod
    def from_name(cls, name: str | InstabilityPolicy) -> InstabilityPolicy:
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown instability policy {name!r}; expected one of {valid}") from None

    @classmethod
    def default(cls, diagnostics: bool = False) -> InstabilityPolicy:
        return cls.DEBUG if diagnostics else cls.REJECT

    def check_values(self, values: Array, offset: int = 0) -> None:
        """Raise :class:`NumericInstabilityError` at the first non-finite entry."""

        if self is InstabilityPolicy.IGNORE:
            return
        bad = np.flatnonzero(~np.isfinite(values))
        if bad.size == 0:
            return
        index = int(bad[0])
        value = float(values[index])
        if self is InstabilityPolicy.DEBUG:
            logger.warning(
                "Numerical instability in HMC momentum component %d (%r); rejecting proposal",
                offset + index,
                value,
            )
        raise NumericInstabilityError(offset + index, value)


__all__ = ["InstabilityPolicy"]
