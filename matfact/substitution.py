# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Forward and backward substitution for triangular systems.
"""

import numpy as np

from .exceptions import SingularMatrixError


def back_substitute(U: np.ndarray, c: np.ndarray) -> np.ndarray:
    """
    Solve U x = c for upper-triangular U.

    Parameters
    ----------
    U : (n, n) ndarray
        Upper-triangular matrix; entries below the diagonal are ignored.
    c : (n,) or (n,k) ndarray
        Right-hand side(s).

    Returns
    -------
    x : (n,) or (n,k) ndarray

    Raises
    ------
    SingularMatrixError : if a diagonal entry of U is exactly zero.
    """
    U = np.asarray(U, dtype=float)
    c = np.asarray(c, dtype=float)
    vector = c.ndim == 1
    if vector:
        # (n,)  →  (n,1)
        c = c[:, None]
    n, k = c.shape
    x = np.zeros((n, k), dtype=float)

    for i in reversed(range(n)):
        pivot = U[i, i]
        if pivot == 0.0:
            raise SingularMatrixError(
                f"back_substitute: zero diagonal U({i}, {i})",
                matrix_name="U",
                index=i,
            )
        s = c[i] - U[i, i + 1 :] @ x[i + 1 :]
        x[i] = s / pivot

    return x.ravel() if vector else x


def forward_substitute(
    L: np.ndarray, c: np.ndarray, unit_diagonal: bool = False
) -> np.ndarray:
    """
    Solve L y = c for lower-triangular L.

    With ``unit_diagonal`` the diagonal of L is taken to be all ones (the
    stored diagonal is ignored), as for the L factor of an LU factorization.
    """
    L = np.asarray(L, dtype=float)
    c = np.asarray(c, dtype=float)
    vector = c.ndim == 1
    if vector:
        c = c[:, None]
    n, k = c.shape
    y = np.zeros((n, k), dtype=float)

    for i in range(n):
        s = c[i] - L[i, :i] @ y[:i]
        if unit_diagonal:
            y[i] = s
            continue
        pivot = L[i, i]
        if pivot == 0.0:
            raise SingularMatrixError(
                f"forward_substitute: zero diagonal L({i}, {i})",
                matrix_name="L",
                index=i,
            )
        y[i] = s / pivot

    return y.ravel() if vector else y
