# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import math
import sys

import numpy as np

from .exceptions import DimensionError, ValidationError

# Smallest double such that 1.0 + EPSILON != 1.0 (2^-53)
EPSILON: float = 1.1102230246251568e-16

# Generic near-zero threshold, much larger than machine epsilon
TOL: float = 1000.0 * EPSILON

# Cholesky diagonal residuals at or below this are floored
CHOLESKY_EPS: float = 1e-12

_MIN_NORMAL = sys.float_info.min
_MAX_VALUE = sys.float_info.max


def near_eq(x: float, y: float) -> bool:
    """
    Relative near-equality of two doubles.

    Two NaNs compare nearly equal. Note that ``near_eq(x, 0.0)`` only holds
    for (sub)normal-tiny ``x``, so it is effectively an exact zero test.
    """
    if math.isnan(x) and math.isnan(y):
        return True
    if x == y:
        return True
    diff = abs(x - y)
    norm1 = min(abs(x) + abs(y), _MAX_VALUE)
    return diff < max(_MIN_NORMAL, TOL * norm1)


def approx_equal(A, B) -> bool:
    """Return True when A and B have the same shape and are elementwise `near_eq`."""
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape != B.shape:
        return False
    return all(near_eq(x, y) for x, y in zip(A.ravel(), B.ravel()))


def sdot(v1: np.ndarray, v2: np.ndarray, start: int = 0) -> float:
    """Sliced dot product of ``v1[start:]`` and ``v2[start:]``."""
    return float(v1[start:] @ v2[start:])


def recip(d: np.ndarray) -> np.ndarray:
    """Elementwise reciprocal that leaves zeros at zero."""
    d = np.asarray(d, dtype=float)
    c = np.zeros_like(d)
    nz = d != 0.0
    c[nz] = 1.0 / d[nz]
    return c


def as_matrix(A, name: str = "A") -> np.ndarray:
    """
    Convert an array-like to a fresh 2-D float64 matrix.

    The result never shares memory with the caller's array.
    """
    try:
        M = np.array(A, dtype=float, copy=True)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: cannot convert to a float matrix: {e}") from e
    if M.ndim != 2:
        raise DimensionError(
            f"{name}: expected 2D array, got {M.ndim}D with shape {M.shape}",
            shape=M.shape,
        )
    if not np.all(np.isfinite(M)):
        raise ValidationError(f"{name}: contains non-finite values")
    return M


def as_vector(b, n: int, name: str = "b") -> np.ndarray:
    """Convert a right-hand side to a fresh 1-D float64 vector of length n."""
    try:
        v = np.array(b, dtype=float, copy=True)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: cannot convert to a float vector: {e}") from e
    if v.ndim != 1 or v.shape[0] != n:
        raise DimensionError(
            f"{name}: expected shape ({n},), got {v.shape}",
            shape=v.shape,
            expected=(n,),
        )
    return v


def reorder_cols(A: np.ndarray, piv) -> np.ndarray:
    """Return a copy of A whose j-th column is column ``piv[j]`` of A."""
    return np.asarray(A, dtype=float)[:, np.asarray(piv, dtype=int)]


def reorder_rows(A: np.ndarray, piv) -> np.ndarray:
    """Return a copy of A whose i-th row is row ``piv[i]`` of A."""
    return np.asarray(A, dtype=float)[np.asarray(piv, dtype=int)]


def is_permutation(piv, n: int) -> bool:
    """True if ``piv`` holds each of 0..n-1 exactly once."""
    piv = np.asarray(piv)
    return piv.shape == (n,) and np.array_equal(np.sort(piv), np.arange(n))


def permutation_sign(perm) -> float:
    """Return +1 or –1 depending on permutation parity."""
    perm = list(perm)
    visited = [False] * len(perm)
    cycles = 0
    for i in range(len(perm)):
        if not visited[i]:
            cycles += 1
            j = i
            while not visited[j]:
                visited[j] = True
                j = perm[j]
    swaps = len(perm) - cycles  # n − #cycles
    return -1.0 if swaps & 1 else 1.0


def random_nonsingular_upper(n, low=-100, high=100, seed=None) -> np.ndarray:
    """
    Build a matrix U that is upper-triangular with random entries
    everywhere and put only non-zero values on its diagonal

    Returns
    -------
    Matrix with float64 dtype
    """
    rng = np.random.default_rng(seed)
    U = rng.uniform(low, high, size=(n, n))
    # enforce upper-triangular
    U = np.triu(U)
    # replace any accidental zeros on the diagonal
    diag = rng.uniform(low if low != 0 else 1, high, size=n)
    diag[diag == 0.0] = 1.0
    U[np.diag_indices(n)] = diag
    return np.asarray(U)


def random_spd(n, seed=None, shift: float = 1.0) -> np.ndarray:
    """
    Symmetric positive-definite test matrix M Mᵀ + shift·I.
    """
    rng = np.random.default_rng(seed)
    M = rng.standard_normal((n, n))
    A = M @ M.T + shift * np.eye(n)
    # exact symmetry, M @ M.T can be off in the last bit
    return (A + A.T) / 2.0
