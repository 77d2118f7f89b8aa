"""Eigen-decomposition of symmetric tridiagonal (Jacobi) matrices."""

from __future__ import annotations

import mpmath
import numpy as np
from scipy.linalg import eigh_tridiagonal

from .errors import InvalidParameterError, SingularRecursionError
from .recurrence import is_finite

__all__ = ["tridiagonal_eigh", "sort_eigenpairs"]


def sort_eigenpairs(values: np.ndarray, vectors: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Sort eigenvalues ascending, permuting the eigenvector columns alongside.

    The sort is stable, so equal eigenvalues keep their relative order.
    """
    order = sorted(range(len(values)), key=values.__getitem__)
    return values[order], vectors[:, order]


def _eigh_float(diag: np.ndarray, off: np.ndarray):
    try:
        return eigh_tridiagonal(diag, off)
    except np.linalg.LinAlgError as exc:
        raise SingularRecursionError(f"tridiagonal eigen-solver failed: {exc}") from exc


def _eigh_mp(diag: np.ndarray, off: np.ndarray):
    m = len(diag)
    J = mpmath.zeros(m, m)
    for i in range(m):
        J[i, i] = diag[i]
    for i in range(m - 1):
        J[i, i + 1] = J[i + 1, i] = off[i]
    try:
        E, Q = mpmath.eigsy(J)
    except (ValueError, RuntimeError, ZeroDivisionError) as exc:
        raise SingularRecursionError(f"mpmath eigen-solver failed: {exc}") from exc
    values = np.array([E[i] for i in range(m)], dtype=object)
    vectors = np.array(Q.tolist(), dtype=object)
    return values, vectors


def tridiagonal_eigh(diag, off) -> tuple[np.ndarray, np.ndarray]:
    """
    Eigenpairs of the symmetric tridiagonal matrix with diagonal ``diag`` and
    off-diagonal ``off``.

    float64 input goes through :func:`scipy.linalg.eigh_tridiagonal`,
    ``object`` arrays of mpmath numbers through :func:`mpmath.eigsy` at the
    current mpmath precision.

    Returns
    -------
    values : ndarray
        Eigenvalues in ascending order.
    vectors : ndarray
        Orthonormal eigenvectors; column ``i`` belongs to ``values[i]``.
    """
    diag = np.asarray(diag)
    off = np.asarray(off)
    extended = diag.dtype == object or off.dtype == object
    if not extended:
        diag, off = diag.astype(float), off.astype(float)
    if diag.ndim != 1 or off.shape != (diag.size - 1,):
        raise InvalidParameterError(f"off-diagonal must have {diag.size - 1} entries, got {off.shape}")
    if not all(is_finite(v) for v in (*diag, *off)):
        raise SingularRecursionError("Jacobi matrix has non-finite entries")

    if diag.size == 1:
        values, vectors = diag.copy(), np.ones((1, 1), dtype=diag.dtype)
    elif extended:
        values, vectors = _eigh_mp(diag, off)
    else:
        values, vectors = _eigh_float(diag, off)
    return sort_eigenpairs(values, vectors)
