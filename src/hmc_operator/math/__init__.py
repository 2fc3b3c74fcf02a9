"""Parameter transforms and structured matrix parametrisations."""

from .eigen_matrix import CompoundEigenMatrix
from .lkj import LKJTransform, compound_correlation_matrix, extract_upper_triangular
from .spherical import spherical_to_cartesian, wrap_spherical
from .transforms import IdentityTransform, LogTransform, Transform

__all__ = [
    "CompoundEigenMatrix",
    "IdentityTransform",
    "LKJTransform",
    "LogTransform",
    "Transform",
    "compound_correlation_matrix",
    "extract_upper_triangular",
    "spherical_to_cartesian",
    "wrap_spherical",
]
