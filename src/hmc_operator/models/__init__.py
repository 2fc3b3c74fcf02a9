"""Parameter storage and log-density providers."""

from .parameter import Parameter, ParameterListener
from .providers import JaxLogDensityModel

__all__ = ["JaxLogDensityModel", "Parameter", "ParameterListener"]
