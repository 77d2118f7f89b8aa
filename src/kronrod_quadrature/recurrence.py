"""Recurrence coefficients of monic Jacobi polynomials.

The monic polynomials orthogonal with respect to a weight function ``w``
satisfy the three-term recurrence

    p_{k+1}(t) = (t - alpha_k) p_k(t) - beta_k p_{k-1}(t),

where ``beta_0`` is the total mass of ``w``.  Tables are ``(count, 2)``
arrays holding the alphas in the first column and the betas in the second.
Double precision tables are ``float64``; passing ``dps`` evaluates the same
closed forms with :mod:`mpmath` and returns an ``object`` array of ``mpf``.
"""

from __future__ import annotations

import contextlib
import numbers

import mpmath
import numpy as np
from numpy.typing import ArrayLike
from scipy.special import gamma, gammaln

from .errors import InvalidParameterError, NumericOverflowError

__all__ = [
    "jacobi_recurrence",
    "jacobi_recurrence_unit_interval",
    "as_table",
    "working_precision",
]

_LOG_MAX = np.log(np.finfo(float).max)


def check_positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidParameterError(f"{name} must be positive, got {value}")
    return int(value)


def is_finite(x) -> bool:
    if isinstance(x, mpmath.mpf):
        return bool(mpmath.isfinite(x))
    return bool(np.isfinite(x))


def working_precision(dps: int | None):
    """Context in which mpmath carries ``dps`` decimal digits (no-op for ``None``)."""
    if dps is None:
        return contextlib.nullcontext()
    return mpmath.workdps(check_positive_int(dps, "dps"))


def as_table(table: ArrayLike, min_rows: int = 1) -> np.ndarray:
    """Validate a recurrence table, returning a ``float64`` or ``object`` array."""
    table = np.asarray(table)
    if table.ndim != 2 or table.shape[1] != 2:
        raise InvalidParameterError(
            f"recurrence table must have shape (k, 2), got {table.shape}"
        )
    if table.shape[0] < min_rows:
        raise InvalidParameterError(
            f"recurrence table needs at least {min_rows} rows, got {table.shape[0]}"
        )
    if table.dtype != object:
        table = table.astype(float)
    return table


def _exponents(alpha, beta, extended: bool):
    if beta is None:
        beta = alpha
    convert = mpmath.mpf if extended else float
    try:
        a, b = convert(alpha), convert(beta)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"invalid Jacobi exponents {alpha!r}, {beta!r}") from exc
    for name, value in (("alpha", a), ("beta", b)):
        if not is_finite(value) or not value > -1:
            raise InvalidParameterError(f"{name} must be a finite number > -1, got {value}")
    return a, b


def _power_of_two(x):
    if isinstance(x, mpmath.mpf):
        return mpmath.mpf(2) ** x
    with np.errstate(over="ignore"):
        p = np.exp2(x)
    if not np.isfinite(p):
        raise NumericOverflowError(f"2**{x} overflows")
    return float(p)


def _jacobi_mass(a, b):
    """Total mass ``2^(a+b+1) Gamma(a+1) Gamma(b+1) / Gamma(a+b+2)`` of the weight on [-1, 1]."""
    if isinstance(a, mpmath.mpf):
        return (
            mpmath.mpf(2) ** (a + b + 1)
            * mpmath.gamma(a + 1) * mpmath.gamma(b + 1) / mpmath.gamma(a + b + 2)
        )
    with np.errstate(over="ignore", invalid="ignore"):
        mu = np.exp2(a + b + 1) * gamma(a + 1) * gamma(b + 1) / gamma(a + b + 2)
    if np.isfinite(mu):
        return float(mu)
    # the gamma product overflows well before the ratio does
    log_mu = (a + b + 1) * np.log(2.0) + gammaln(a + 1) + gammaln(b + 1) - gammaln(a + b + 2)
    if log_mu >= _LOG_MAX:
        raise NumericOverflowError(
            f"mass of the Jacobi weight with alpha={a}, beta={b} overflows"
        )
    return float(np.exp(log_mu))


def _jacobi_table(count: int, a, b) -> np.ndarray:
    dtype = object if isinstance(a, mpmath.mpf) else float
    nu = (b - a) / (a + b + 2)
    mu = _jacobi_mass(a, b)

    table = np.zeros((count, 2), dtype=dtype)
    table[0] = nu, mu
    if count == 1:
        return table

    for i in range(1, count):
        s = 2 * i + a + b
        table[i, 0] = (b * b - a * a) / (s * (s + 2))
        if i > 1:
            table[i, 1] = (
                4 * (a + i) * (b + i) * i * (a + b + i) / (s * s * (s + 1) * (s - 1))
            )
    # the general formula is 0/0 at i = 1 when a + b = -1
    table[1, 1] = 4 * (a + 1) * (b + 1) / ((a + b + 2) ** 2 * (a + b + 3))
    return table


def jacobi_recurrence(
    count: int,
    alpha: float = 0.0,
    beta: float | None = None,
    *,
    dps: int | None = None,
) -> np.ndarray:
    """
    Recurrence coefficients of the monic Jacobi polynomials on [-1, 1].

    The polynomials are orthogonal with respect to
    ``w(t) = (1 - t)^alpha (1 + t)^beta``.

    Parameters
    ----------
    count : int
        Number of coefficient pairs, at least 1.
    alpha, beta : float, optional
        Jacobi exponents, both ``> -1``.  ``beta=None`` means ``beta = alpha``;
        the defaults give the Legendre weight.
    dps : int, optional
        Decimal digits for an mpmath evaluation.  ``None`` uses float64.

    Returns
    -------
    ndarray
        ``(count, 2)`` table.  ``table[0] == (nu, mu)`` with
        ``nu = (beta - alpha) / (alpha + beta + 2)`` and ``mu`` the total mass.

    Raises
    ------
    InvalidParameterError
        ``count`` is not a positive integer or an exponent is ``<= -1``.
    NumericOverflowError
        The mass ``mu`` is not representable in double precision.
    """
    count = check_positive_int(count, "count")
    with working_precision(dps):
        a, b = _exponents(alpha, beta, extended=dps is not None)
        return _jacobi_table(count, a, b)


def jacobi_recurrence_unit_interval(
    count: int,
    alpha: float = 0.0,
    beta: float | None = None,
    *,
    dps: int | None = None,
) -> np.ndarray:
    """
    Recurrence coefficients of the monic Jacobi polynomials on [0, 1].

    Orthogonality is with respect to ``w(t) = (1 - t)^alpha t^beta``; the
    table is the affine image of :func:`jacobi_recurrence` under
    ``t -> (1 + t) / 2``.
    """
    table = jacobi_recurrence(count, alpha, beta, dps=dps)
    with working_precision(dps):
        a, b = _exponents(alpha, beta, extended=dps is not None)
        shifted = np.empty_like(table)
        shifted[:, 0] = (1 + table[:, 0]) / 2
        shifted[0, 1] = table[0, 1] / _power_of_two(a + b + 1)
        shifted[1:, 1] = table[1:, 1] / 4
    return shifted
