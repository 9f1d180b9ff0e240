# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Householder bidiagonalization (Golub–Reinsch).

For an m-by-n matrix A (m ≥ n) compute orthogonal U (m×n), V (n×n) and an
upper-bidiagonal B (n×n) with

    Uᵀ A V = B        A = U B Vᵀ

B is kept as two vectors: the main diagonal q and the super-diagonal e
(``e[0]`` is always zero).

See Golub & Van Loan, *Matrix Computations*, Algorithm 5.4.2, and
Golub & Reinsch, "Singular value decomposition and least squares
solutions", Numer. Math. 14 (1970).
"""

import logging
from math import sqrt
from typing import Optional, Tuple

import numpy as np

from .exceptions import DimensionError
from .utils import TOL, as_matrix, sdot

logger = logging.getLogger(__name__)


class Bidiagonal:
    """
    Reduce a matrix to upper-bidiagonal form with two-sided Householder
    reflections.

    Parameters
    ----------
    a : (m, n) array_like, m >= n
        Matrix to bidiagonalize. It is copied, never modified.

    Raises
    ------
    DimensionError
        Immediately, if m < n.
    """

    def __init__(self, a):
        a = as_matrix(a, "a")
        self.m, self.n = a.shape
        if self.n > self.m:
            raise DimensionError(
                f"Bidiagonal requires m = {self.m} >= n = {self.n}",
                shape=a.shape,
                expected="m >= n",
            )
        self.a = a
        self.u = a.copy()  # working storage, becomes the left factor
        self.v = np.zeros((self.n, self.n))
        self.e = np.zeros(self.n)  # super-diagonal of b
        self.q = np.zeros(self.n)  # main diagonal of b
        self.b: Optional[np.ndarray] = None
        self._bm = 0.0

    @property
    def bmax(self) -> float:
        """Largest |q(i)| + |e(i)|, used to scale the SVD tolerance."""
        return self._bm

    @property
    def e_q(self) -> Tuple[np.ndarray, np.ndarray]:
        """Super-diagonal e and main diagonal q of the bidiagonal matrix."""
        return self.e, self.q

    sdot = staticmethod(sdot)

    def bidiagonalize(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Run the reduction (once) and return ``(u, b, v)``.
        """
        if self.b is not None:
            return self.u, self.b, self.v

        u, e, q = self.u, self.e, self.q
        m, n = self.m, self.n
        f = g = h = 0.0

        for i in range(n):
            l = i + 1
            e[i] = g

            # ---- column reflector: zero u[i+1:, i] ----------------------------
            s = sdot(u[:, i], u[:, i], i)
            if s < TOL:
                g = 0.0
            else:
                f = u[i, i]
                g = sqrt(s) if f < 0.0 else -sqrt(s)
                h = f * g - s
                u[i, i] = f - g
                proj = u[i:, i] @ u[i:, l:]
                u[i:, l:] += np.outer(u[i:, i], proj / h)
            q[i] = g

            # ---- row reflector: zero u[i, i+2:] -------------------------------
            s = sdot(u[i], u[i], l)
            if s < TOL:
                g = 0.0
            else:
                f = u[i, i + 1]
                g = sqrt(s) if f < 0.0 else -sqrt(s)
                h = f * g - s
                u[i, i + 1] = f - g
                e[l:] = u[i, l:] / h
                proj = u[l:, l:] @ u[i, l:]
                u[l:, l:] += np.outer(proj, e[l:])

            self._bm = max(self._bm, abs(q[i]) + abs(e[i]))

        self._transform_rhs(g)
        self._transform_lhs()

        b = np.diag(q)
        if n > 1:
            b[np.arange(n - 1), np.arange(1, n)] = e[1:]
        self.b = b
        logger.debug("bidiagonalize: %dx%d, bmax = %g", m, n, self._bm)
        return u, b, self.v

    def _transform_rhs(self, g: float) -> None:
        """Accumulate the right-hand reflectors into v, last to first."""
        u, v, e, n = self.u, self.v, self.e, self.n
        l = n
        for i in range(n - 1, -1, -1):
            if g != 0.0:
                h = u[i, i + 1] * g
                v[l:, i] = u[i, l:] / h
                proj = u[i, l:] @ v[l:, l:]
                v[l:, l:] += np.outer(v[l:, i], proj)
            v[i, l:] = 0.0
            v[l:, i] = 0.0
            v[i, i] = 1.0
            g = e[i]
            l = i

    def _transform_lhs(self) -> None:
        """Expand the left-hand reflectors stored in u into an explicit u."""
        u, q, n = self.u, self.q, self.n
        for i in range(n - 1, -1, -1):
            l = i + 1
            g = q[i]
            u[i, l:] = 0.0
            if g != 0.0:
                h = u[i, i] * g
                proj = u[l:, i] @ u[l:, l:]
                u[i:, l:] += np.outer(u[i:, i], proj / h)
                u[i:, i] /= g
            else:
                u[i:, i] = 0.0
            u[i, i] += 1.0
