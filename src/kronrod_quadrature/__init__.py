"""Gauss--Kronrod quadrature rules for Jacobi weight functions."""

from .recurrence import jacobi_recurrence, jacobi_recurrence_unit_interval
from .extension import kronrod_extension, kronrod_table_length
from .eigen import tridiagonal_eigh
from .kronrod import (
    KronrodRule,
    check_weights,
    gauss,
    kronrod,
    multi_precision_kronrod,
    jacobi_kronrod,
)
from .errors import (
    KronrodError,
    InvalidParameterError,
    NumericOverflowError,
    SingularRecursionError,
    NumericAnomalyWarning,
)

__all__ = [
    "jacobi_recurrence",
    "jacobi_recurrence_unit_interval",
    "kronrod_extension",
    "kronrod_table_length",
    "tridiagonal_eigh",
    "KronrodRule",
    "check_weights",
    "gauss",
    "kronrod",
    "multi_precision_kronrod",
    "jacobi_kronrod",
    "KronrodError",
    "InvalidParameterError",
    "NumericOverflowError",
    "SingularRecursionError",
    "NumericAnomalyWarning",
]
