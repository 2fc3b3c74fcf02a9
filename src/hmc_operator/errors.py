"""Exception taxonomy shared by the HMC proposal machinery."""

from __future__ import annotations


class NumericInstabilityError(ArithmeticError):
    """Raised when a momentum component becomes non-finite during integration.

    :class:`~hmc_operator.samplers.hmc_step.HMCStep` converts this into a
    rejecting log Hastings ratio of ``-inf``; it never reaches the chain.
    """

    def __init__(self, index: int | None = None, value: float | None = None) -> None:
        self.index = index
        self.value = value
        if index is None:
            message = "non-finite momentum encountered"
        else:
            message = f"non-finite momentum component {index}: {value!r}"
        super().__init__(message)


class UnsupportedOperationError(NotImplementedError):
    """Raised when a transform or matrix cannot provide the requested derivative."""


class DimensionMismatchError(ValueError):
    """Raised when an operation receives a partial or mis-sized parameter block."""


__all__ = ["NumericInstabilityError", "UnsupportedOperationError", "DimensionMismatchError"]
