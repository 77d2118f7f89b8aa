"""Gauss--Kronrod rules from recurrence coefficients.

:func:`kronrod` turns the recurrence table of a weight function into the
(2n+1)-point Gauss--Kronrod rule of that weight: the nodes are the
eigenvalues of the Jacobi--Kronrod matrix and the weights are ``beta_0``
times the squared first components of its normalised eigenvectors
(Golub--Welsch).  :func:`multi_precision_kronrod` is the Legendre rule on
[-1, 1], computed on [0, 1] and mapped back.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Callable

import mpmath
import numpy as np
from numpy.typing import ArrayLike

from .eigen import tridiagonal_eigh
from .errors import InvalidParameterError, NumericAnomalyWarning, SingularRecursionError
from .extension import kronrod_extension, kronrod_table_length
from .recurrence import (
    as_table,
    check_positive_int,
    jacobi_recurrence,
    jacobi_recurrence_unit_interval,
    working_precision,
)

__all__ = [
    "KronrodRule",
    "check_weights",
    "gauss",
    "kronrod",
    "multi_precision_kronrod",
    "jacobi_kronrod",
]


@dataclass(frozen=True, eq=False)
class KronrodRule:
    """(2n+1)-point Gauss--Kronrod rule and its embedded n-point Gauss rule.

    ``gauss_weights`` is aligned with ``nodes``: the Gauss nodes are the
    odd-indexed Kronrod nodes and every other entry is zero.  ``suspect``
    holds the indices of weights flagged by :func:`check_weights`.
    The rule unpacks as ``nodes, weights = rule``.
    """

    nodes: np.ndarray
    weights: np.ndarray
    gauss_weights: np.ndarray
    suspect: np.ndarray

    def __post_init__(self):
        for arr in (self.nodes, self.weights, self.gauss_weights, self.suspect):
            arr.setflags(write=False)

    def __len__(self) -> int:
        return self.nodes.size

    def __iter__(self):
        return iter((self.nodes, self.weights))

    @property
    def order(self) -> int:
        """Number of nodes of the embedded Gauss rule."""
        return self.nodes.size // 2

    @property
    def gauss_nodes(self) -> np.ndarray:
        return self.nodes[1::2]

    def integrate(self, f: Callable[[np.ndarray], np.ndarray]):
        """Kronrod estimate of the integral of ``f`` and ``|Kronrod - Gauss|``."""
        fx = f(self.nodes)
        result = np.sum(self.weights * fx)
        gauss_result = np.sum(self.gauss_weights * fx)
        return result, abs(result - gauss_result)


def check_weights(weights: ArrayLike, rtol=None, stacklevel: int = 2) -> np.ndarray:
    """
    Indices of weights that are not safely positive.

    A weight is suspect when it is ``<= rtol * max(|w|)``; ``rtol`` defaults
    to the machine epsilon of the working precision.  Suspect weights trigger
    a :class:`NumericAnomalyWarning` but are returned unchanged.  ``stacklevel``
    is forwarded to :func:`warnings.warn`.
    """
    weights = np.asarray(weights)
    if rtol is None:
        rtol = mpmath.mp.eps if weights.dtype == object else np.finfo(float).eps
    largest = max(abs(w) for w in weights)
    suspect = np.flatnonzero([w <= rtol * largest for w in weights])
    if suspect.size:
        warnings.warn(
            f"{suspect.size} weight(s) negative or below {float(rtol):.2e} relative "
            f"to the largest weight, at indices {suspect.tolist()}",
            NumericAnomalyWarning,
            stacklevel=stacklevel,
        )
    return suspect


def _sqrt_positive(beta: np.ndarray) -> np.ndarray:
    if not all(v > 0 for v in beta):
        raise SingularRecursionError(
            "non-positive recurrence coefficient: the Jacobi matrix is not real "
            "symmetric and the rule has complex nodes"
        )
    if beta.dtype == object:
        return np.array([mpmath.sqrt(v) for v in beta], dtype=object)
    return np.sqrt(beta)


def _check_mass(table: np.ndarray):
    if not table[0, 1] > 0:
        raise InvalidParameterError(f"beta_0 must be a positive mass, got {table[0, 1]}")


def gauss(n: int, table: ArrayLike, *, dps: int | None = None) -> tuple[np.ndarray, np.ndarray]:
    """
    n-point Gauss rule of the weight encoded by a recurrence table.

    Returns
    -------
    x : ndarray
        Quadrature nodes, ascending.
    w : ndarray
        Corresponding weights.
    """
    n = check_positive_int(n, "n")
    table = as_table(table, n)
    _check_mass(table)
    with working_precision(dps):
        nodes, vecs = tridiagonal_eigh(table[:n, 0], _sqrt_positive(table[1:n, 1]))
        weights = table[0, 1] * vecs[0] ** 2
    return nodes, weights


def kronrod(
    n: int,
    table: ArrayLike,
    *,
    dps: int | None = None,
    anomaly_rtol=None,
    verbose: bool = False,
) -> KronrodRule:
    """
    (2n+1)-point Gauss--Kronrod rule of the weight encoded by ``table``.

    Parameters
    ----------
    n : int
        Number of nodes of the embedded Gauss rule.
    table : array_like
        ``(k, 2)`` recurrence table with ``k >= kronrod_table_length(n)``.
        The rule lives on the interval the table is orthogonal on.
    dps : int, optional
        mpmath precision for ``object`` tables; defaults to the current one.
    anomaly_rtol : float, optional
        Threshold passed to :func:`check_weights`.
    verbose : bool, default False
        Print a one-line summary of the rule.

    Raises
    ------
    InvalidParameterError
        Bad ``n``, short table or non-positive ``beta_0``.
    SingularRecursionError
        The extension broke down, the Jacobi--Kronrod matrix is not real
        symmetric, or the eigen-solver failed.
    """
    return _kronrod_rule(n, table, dps, anomaly_rtol, verbose)


def _kronrod_rule(n, table, dps, anomaly_rtol, verbose) -> KronrodRule:
    # public entry points call this directly so stacklevel=4 reaches their caller
    n = check_positive_int(n, "n")
    table = as_table(table, kronrod_table_length(n))
    _check_mass(table)

    with working_precision(dps):
        extended = kronrod_extension(n, table)
        alpha, beta = extended[:, 0], extended[:, 1]
        nodes, vecs = tridiagonal_eigh(alpha, _sqrt_positive(beta[1:]))
        weights = beta[0] * vecs[0] ** 2

        _, gw = gauss(n, table)
        gauss_weights = np.zeros_like(weights)
        gauss_weights[1::2] = gw
        suspect = check_weights(weights, anomaly_rtol, stacklevel=4)

    if verbose:
        print(
            f"kronrod: n={n}, nodes in [{float(nodes[0]):.6g}, {float(nodes[-1]):.6g}], "
            f"weight sum={float(np.sum(weights)):.16g}, min weight={float(min(weights)):.3e}"
        )
    return KronrodRule(nodes, weights, gauss_weights, suspect)


def multi_precision_kronrod(
    n: int,
    *,
    dps: int | None = None,
    anomaly_rtol=None,
    verbose: bool = False,
) -> KronrodRule:
    """
    (2n+1)-point Gauss--Kronrod--Legendre rule on [-1, 1].

    The rule is computed for the Legendre weight on [0, 1] and mapped with
    ``x -> 2x - 1``, ``w -> 2w``.  With ``dps`` set, every stage runs in
    mpmath arithmetic with that many decimal digits and the arrays hold
    ``mpf`` values.

    Examples
    --------
    >>> x, w = multi_precision_kronrod(1)
    >>> np.allclose(x, [-np.sqrt(0.6), 0.0, np.sqrt(0.6)])
    True
    """
    n = check_positive_int(n, "n")
    count = max(2 * n, kronrod_table_length(n))
    if verbose:
        precision = "float64" if dps is None else f"{dps} digits"
        print(f"multi_precision_kronrod: n={n}, {count} recurrence terms, {precision}")

    with working_precision(dps):
        table = jacobi_recurrence_unit_interval(count, dps=dps)
        rule = _kronrod_rule(n, table, None, anomaly_rtol, verbose)
        return KronrodRule(
            2 * rule.nodes - 1,
            2 * rule.weights,
            2 * rule.gauss_weights,
            rule.suspect,
        )


def jacobi_kronrod(
    n: int,
    alpha: float = 0.0,
    beta: float | None = None,
    *,
    unit_interval: bool = False,
    dps: int | None = None,
    anomaly_rtol=None,
    verbose: bool = False,
) -> KronrodRule:
    """
    Gauss--Kronrod rule for the Jacobi weight ``(1 - t)^alpha (1 + t)^beta`` on
    [-1, 1], or ``(1 - t)^alpha t^beta`` on [0, 1] if ``unit_interval``.

    ``beta=None`` means ``beta = alpha``.
    """
    n = check_positive_int(n, "n")
    recurrence = jacobi_recurrence_unit_interval if unit_interval else jacobi_recurrence
    with working_precision(dps):
        table = recurrence(kronrod_table_length(n), alpha, beta, dps=dps)
        return _kronrod_rule(n, table, None, anomaly_rtol, verbose)
