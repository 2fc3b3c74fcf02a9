"""hmc_operator
=================

A Hamiltonian Monte Carlo proposal step for continuous parameter blocks inside
a larger MCMC engine. The step integrates Hamiltonian dynamics with a leapfrog
scheme, optionally in transformed coordinates and with a Hessian-adapted mass
matrix, and hands back a log Hastings ratio for the caller's accept/reject rule.
"""

from .config import HMCConfig, RuntimeOptions, load_hmc_config
from .errors import DimensionMismatchError, NumericInstabilityError, UnsupportedOperationError
from .models import JaxLogDensityModel, Parameter
from .samplers import HMCStep, InstabilityPolicy, build_hmc_step

__version__ = "0.1.0"

__all__ = [
    "DimensionMismatchError",
    "HMCConfig",
    "HMCStep",
    "InstabilityPolicy",
    "JaxLogDensityModel",
    "NumericInstabilityError",
    "Parameter",
    "RuntimeOptions",
    "UnsupportedOperationError",
    "build_hmc_step",
    "load_hmc_config",
]
