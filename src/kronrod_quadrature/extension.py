"""Laurie's extension of a Jacobi matrix to the Jacobi--Kronrod matrix.

Given the recurrence coefficients of a weight function, the (2n+1)-point
Gauss--Kronrod rule is the Gauss rule of a (2n+1) x (2n+1) Jacobi matrix
whose leading ``floor(3n/2)`` alphas and ``ceil(3n/2)`` betas coincide with
those of the weight function.  The remaining entries follow from two sweeps
of a recursion on mixed moments ("sigma" sequences), see

    D. P. Laurie, Calculation of Gauss-Kronrod quadrature rules,
    Math. Comp. 66 (1997), 1133-1145.
"""

from __future__ import annotations

import mpmath
import numpy as np
from numpy.typing import ArrayLike

from .errors import SingularRecursionError
from .recurrence import as_table, check_positive_int, is_finite

__all__ = ["kronrod_extension", "kronrod_table_length"]

_TINY = np.finfo(float).tiny
# float64 sigma pairs are renormalised once their magnitude leaves this band
_SMALL = 2.0 ** -256
_LARGE = 2.0 ** 256


def kronrod_table_length(n: int) -> int:
    """Rows of input recurrence table required for the extension of order ``n``."""
    n = check_positive_int(n, "n")
    return (3 * n + 1) // 2 + 1


def _divide(num, den, where: str):
    tiny = 0 if isinstance(den, mpmath.mpf) else _TINY
    if not is_finite(den) or not abs(den) > tiny:
        raise SingularRecursionError(f"near-zero divisor {den} in the {where}")
    return num / den


def _renormalise(sigma, updated):
    """Scale the pair by a common power of two; the recursion only uses ratios."""
    if sigma.dtype == object:
        return sigma, updated
    largest = np.max(np.abs(updated))
    if largest == 0 or not np.isfinite(largest) or _SMALL <= largest <= _LARGE:
        return sigma, updated
    shift = -np.frexp(largest)[1]
    return np.ldexp(sigma, shift), np.ldexp(updated, shift)


def _sigma_pass_one(n: int, a: np.ndarray, b: np.ndarray):
    """Sweep m = 0 .. n-2; returns ``(sigma, sigma_prev)`` aligned for the second sweep."""
    size = n // 2 + 2
    sigma = np.zeros(size, dtype=a.dtype)
    sigma_prev = np.zeros(size, dtype=a.dtype)
    sigma_prev[1] = b[n + 1]

    for m in range(n - 1):
        updated = sigma.copy()
        acc = 0
        for k in range((m + 1) // 2, -1, -1):
            l = m - k
            acc += (
                (a[k + n + 1] - a[l]) * sigma_prev[k + 1]
                + b[k + n + 1] * sigma[k]
                - b[l] * sigma[k + 1]
            )
            updated[k + 1] = acc
        sigma, sigma_prev = _renormalise(sigma_prev, updated)

    sigma[1:] = sigma[:-1].copy()
    return sigma, sigma_prev


def _sigma_pass_two(n: int, a: np.ndarray, b: np.ndarray, sigma, sigma_prev):
    """Sweep m = n-1 .. 2n-3, writing the unknown alphas and betas into ``a``, ``b``."""
    for m in range(n - 1, 2 * n - 2):
        updated = sigma.copy()
        acc = 0
        for k in range(m - n + 1, (m - 1) // 2 + 1):
            l = m - k
            j = n - l - 1
            acc += (
                -(a[k + n + 1] - a[l]) * sigma_prev[j + 1]
                - b[k + n + 1] * sigma[j + 1]
                + b[l] * sigma[j + 2]
            )
            updated[j + 1] = acc

        k = (m + 1) // 2
        if m % 2 == 0:
            a[k + n + 1] = a[k] + _divide(
                updated[j + 1] - b[k + n + 1] * updated[j + 2],
                sigma_prev[j + 2],
                "alpha update",
            )
        else:
            b[k + n + 1] = _divide(updated[j + 1], updated[j + 2], "beta update")
        sigma, sigma_prev = _renormalise(sigma_prev, updated)

    return sigma, sigma_prev


def kronrod_extension(n: int, table: ArrayLike) -> np.ndarray:
    """
    Recurrence table of the Jacobi--Kronrod matrix of order ``2n + 1``.

    Parameters
    ----------
    n : int
        Number of nodes of the underlying Gauss rule.
    table : array_like
        ``(k, 2)`` recurrence table of the weight function with
        ``k >= kronrod_table_length(n)``; float64 or mpmath ``object`` array.

    Returns
    -------
    ndarray
        ``(2n + 1, 2)`` table of the same dtype as ``table``.

    Raises
    ------
    InvalidParameterError
        ``n`` is not a positive integer or ``table`` is too short.
    SingularRecursionError
        A divisor of the recursion vanished.
    """
    n = check_positive_int(n, "n")
    table = as_table(table, kronrod_table_length(n))

    a = np.zeros(2 * n + 1, dtype=table.dtype)
    b = np.zeros(2 * n + 1, dtype=table.dtype)
    a[: 3 * n // 2 + 1] = table[: 3 * n // 2 + 1, 0]
    b[: (3 * n + 1) // 2 + 1] = table[: (3 * n + 1) // 2 + 1, 1]

    sigma, sigma_prev = _sigma_pass_one(n, a, b)
    sigma, sigma_prev = _sigma_pass_two(n, a, b, sigma, sigma_prev)
    a[2 * n] = a[n - 1] - b[2 * n] * _divide(sigma[1], sigma_prev[1], "closing step")

    if not all(is_finite(v) for v in (*a, *b)):
        raise SingularRecursionError("Jacobi--Kronrod recurrence is not finite")
    return np.column_stack((a, b))
