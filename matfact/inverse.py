# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Matrix inversion.

- `inverse`: Gauss-Jordan elimination on [A | I] with partial pivoting.
- `inverse_lt` / `inverse_ut`: O(n³/3) inverses of lower / upper
  triangular matrices.
- `Inverse`: the factorization view  A · A⁻¹ = I.
"""

import logging
from typing import Optional

import numpy as np

from .base import Factorization
from .exceptions import DimensionError, SingularMatrixError
from .utils import as_matrix, near_eq

logger = logging.getLogger(__name__)


def _require_square(a: np.ndarray, fn: str) -> int:
    m, n = a.shape
    if m != n:
        raise DimensionError(
            f"{fn}: matrix a must be square, got {m}x{n}",
            shape=a.shape,
            expected="square",
        )
    return n


def _partial_pivoting(b: np.ndarray, i: int) -> int:
    """
    Return the row index k > i holding the largest |b[k, i]|.

    Raises
    ------
    SingularMatrixError : if no row below i has a usable pivot.
    """
    max_val = b[i, i]  # initially the (near zero) pivot itself
    k_max = i
    for k in range(i + 1, b.shape[0]):
        if abs(b[k, i]) > max_val:
            max_val = abs(b[k, i])
            k_max = k

    if k_max == i:
        raise SingularMatrixError(
            f"unable to find a non-zero pivot for row {i}",
            matrix_name="a",
            index=i,
        )
    logger.debug("partial_pivoting: replace pivot (%d, %d) with (%d, %d)", i, i, k_max, i)
    return k_max


def inverse(a) -> np.ndarray:
    """
    Invert a square matrix by Gauss-Jordan elimination.

    The augmented matrix [ b | c ] = [ a | I ] is reduced to [ I | a⁻¹ ].
    Rows are swapped only when the current pivot is (nearly) zero.

    Raises
    ------
    DimensionError : a is not square.
    SingularMatrixError : a column has no non-zero pivot.
    """
    b = as_matrix(a, "a")  # working copy, the caller's a is untouched
    n = _require_square(b, "inverse")
    c = np.eye(n)

    for i in range(n):
        pivot = b[i, i]
        if near_eq(pivot, 0.0):
            k = _partial_pivoting(b, i)
            b[[i, k]] = b[[k, i]]
            c[[i, k]] = c[[k, i]]
            pivot = b[i, i]
        b[i] /= pivot
        c[i] /= pivot

        # clear column i in every other row
        mul = b[:, i].copy()
        mul[i] = 0.0
        b -= np.outer(mul, b[i])
        c -= np.outer(mul, c[i])
    return c


def inverse_lt(a) -> np.ndarray:
    """
    Invert a lower-triangular matrix.

    Entries above the diagonal are ignored.

    Raises
    ------
    SingularMatrixError : a diagonal entry is exactly zero.
    """
    a = as_matrix(a, "a")
    n = _require_square(a, "inverse_lt")
    c = np.zeros((n, n))

    for i in range(n):
        if a[i, i] == 0.0:
            raise SingularMatrixError(
                f"inverse_lt: matrix a is singular, a({i}, {i}) = 0",
                matrix_name="a",
                index=i,
            )
        c[i, i] = 1.0 / a[i, i]
        for j in range(i):
            c[i, j] = -(a[i, j:i] @ c[j:i, j]) / a[i, i]
    return c


def inverse_ut(a) -> np.ndarray:
    """
    Invert an upper-triangular matrix.

    Entries below the diagonal are ignored.

    Raises
    ------
    SingularMatrixError : a diagonal entry is exactly zero.
    """
    a = as_matrix(a, "a")
    n = _require_square(a, "inverse_ut")
    c = np.zeros((n, n))

    for j in range(n):
        if a[j, j] == 0.0:
            raise SingularMatrixError(
                f"inverse_ut: matrix a is singular, a({j}, {j}) = 0",
                matrix_name="a",
                index=j,
            )
        c[:j, j] = c[:j, :j] @ a[:j, j]
        c[:j, j] /= -a[j, j]
        c[j, j] = 1.0 / a[j, j]
    return c


class Inverse(Factorization):
    """
    Factor the identity as I = A · A⁻¹ by computing A⁻¹ explicitly.

    Parameters
    ----------
    a : (n, n) array_like
    strict : bool | None
        Raise on flaws instead of logging them (None: global setting).
    """

    def __init__(self, a, strict: Optional[bool] = None):
        super().__init__(a, strict)
        if self.m != self.n:
            self.flaw(
                "init",
                f"matrix a must be square, got {self.m}x{self.n}",
                DimensionError,
                shape=self.a.shape,
                expected="square",
            )
        self._ai: Optional[np.ndarray] = None

    def reset(self) -> None:
        super().reset()
        self._ai = None

    def factor(self) -> "Inverse":
        if self.factored:
            return self
        self._ai = inverse(self.a)
        self.factored = True
        return self

    @property
    def factors(self):
        """Return ``(A, A⁻¹)``."""
        self.factor()
        return self.a, self._ai

    def solve(self, b) -> np.ndarray:
        """Return x = A⁻¹ b."""
        b = self._rhs(b)
        return self.inverse @ b

    @property
    def inverse(self) -> np.ndarray:
        self.factor()
        return self._ai
