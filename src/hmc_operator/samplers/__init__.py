"""HMC proposal machinery: instability policies, preconditioners, engines, and the step."""

from .hessian import (
    numerical_hessian_central,
    numerical_hessian_forward,
    numerical_hessian_from_log_likelihood,
)
from .hmc_step import HMCStep, build_hmc_step
from .instability import InstabilityPolicy
from .leapfrog import LeapfrogEngine, TransformedLeapfrogEngine
from .mass import (
    DenseHessianPreconditioner,
    DiagonalHessianPreconditioner,
    MassPreconditioner,
    StaticMassPreconditioner,
)

__all__ = [
    "DenseHessianPreconditioner",
    "DiagonalHessianPreconditioner",
    "HMCStep",
    "InstabilityPolicy",
    "LeapfrogEngine",
    "MassPreconditioner",
    "StaticMassPreconditioner",
    "TransformedLeapfrogEngine",
    "build_hmc_step",
    "numerical_hessian_central",
    "numerical_hessian_forward",
    "numerical_hessian_from_log_likelihood",
]
