"""Exceptions and warnings raised while building Gauss--Kronrod rules."""

import numpy as np

__all__ = [
    "KronrodError",
    "InvalidParameterError",
    "NumericOverflowError",
    "SingularRecursionError",
    "NumericAnomalyWarning",
]


class KronrodError(Exception):
    """Base class of all errors raised by this package."""


class InvalidParameterError(KronrodError, ValueError):
    """Rule order, Jacobi exponents or recurrence table are not admissible."""


class NumericOverflowError(KronrodError, OverflowError):
    """A closed-form coefficient is not representable in double precision."""


class SingularRecursionError(KronrodError, np.linalg.LinAlgError):
    """The Kronrod recursion or the eigen-decomposition broke down."""


class NumericAnomalyWarning(RuntimeWarning):
    """A computed weight is negative or implausibly small."""
