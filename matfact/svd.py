# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Singular Value Decomposition via the Golub–Kahan–Reinsch algorithm.

For an m-by-n real matrix A (m ≥ n):

    A = U · diag(s) · Vᵀ

    U : m-by-n, orthonormal columns (left singular vectors)
    s : length-n vector of singular values, non-negative, non-increasing
    V : n-by-n orthogonal (right singular vectors)

Algorithm outline
-----------------
1.  Householder-bidiagonalize A (see `matfact.bidiagonal`).
2.  For each trailing index k = n-1 … 0, run implicitly shifted QR sweeps
    (chains of Givens rotations) on the bidiagonal until the super-diagonal
    entry e[k] vanishes, splitting the problem whenever an e[l] or q[l-1]
    becomes negligible.
3.  Make all singular values non-negative and sort them, moving the
    columns of U and V in lock step.

See Golub & Van Loan, *Matrix Computations*, Algorithms 8.6.1 and 8.6.2.
"""

import logging
from dataclasses import dataclass
from math import hypot
from typing import Optional, Tuple

import numpy as np

from .base import Factorization
from .bidiagonal import Bidiagonal
from .exceptions import ConvergenceError, DimensionError, UnsupportedOperationError
from .utils import EPSILON, TOL, recip

logger = logging.getLogger(__name__)

MAX_ITER = 100  # QR sweeps allowed per singular value

FactorType = Tuple[np.ndarray, np.ndarray, np.ndarray]


@dataclass(frozen=True)
class SVDResult:
    """
    Outcome of an SVD factorization.

    Attributes:
        U: m-by-n left singular vectors
        s: singular values, sorted non-increasing
        V: n-by-n right singular vectors
        converged: False if some block hit MAX_ITER sweeps
        iterations: sweeps used for each block k (index k)
    """

    U: np.ndarray
    s: np.ndarray
    V: np.ndarray
    converged: bool
    iterations: Tuple[int, ...]


def _rotate(M: np.ndarray, j1: int, j2: int, c: float, s: float) -> None:
    """Apply the plane rotation (c, s) to columns j1 and j2 of M in place."""
    y = M[:, j1].copy()
    z = M[:, j2]
    M[:, j1] = y * c + z * s
    M[:, j2] = -y * s + z * c


class _GolubKahanSweep:
    """
    Working state of the diagonalization of one bidiagonal matrix.

    The fields mirror the scalar registers of the Golub–Reinsch procedure:
    ``l`` is the lower index of the active block, ``f`` and ``x`` carry the
    shift from `shift_from_bottom` into `qr_transform`, ``z`` holds q[k].
    """

    def __init__(self, u, q, e, v, eps):
        self.u, self.q, self.e, self.v = u, q, e, v
        self.eps = eps
        self.l = 0
        self.split_on_e = True
        self.f = self.x = self.z = 0.0

    def iterate(self, k: int) -> Tuple[bool, int]:
        """Sweep block k until e[k] is negligible; return (converged, sweeps)."""
        for it in range(MAX_ITER):
            self.test_splitting(k)
            if not self.split_on_e:
                self.cancellation(self.l, k)
            if self.test_convergence(self.l, k):
                return True, it + 1
            self.shift_from_bottom(k)
            self.qr_transform(self.l, k)
        return False, MAX_ITER

    def test_splitting(self, k: int) -> None:
        """Find the lower index l of the unreduced block ending at k."""
        e, q, eps = self.e, self.q, self.eps
        for ll in range(k, -1, -1):
            self.l = ll
            self.split_on_e = False
            if ll == 0 or abs(e[ll]) <= eps:
                self.split_on_e = True
                return
            if abs(q[ll - 1]) <= eps:
                return

    def cancellation(self, l: int, k: int) -> None:
        """Zero e[l] when q[l-1] is negligible, rotating columns of u."""
        e, q = self.e, self.q
        c, s = 0.0, 1.0
        for j in range(l, k + 1):
            f = s * e[j]
            e[j] *= c
            if abs(f) <= self.eps:
                break
            g = q[j]
            h = hypot(f, g)
            q[j] = h
            c = g / h
            s = -f / h
            _rotate(self.u, l - 1, j, c, s)

    def test_convergence(self, l: int, k: int) -> bool:
        """True once l has reached k; makes q[k] non-negative."""
        self.z = z = self.q[k]
        if l != k:
            return False
        if z < 0.0:
            self.q[k] = -z
            self.v[:, k] *= -1.0
        return True

    def shift_from_bottom(self, k: int) -> None:
        """Wilkinson-style shift from the trailing 2×2 minor."""
        e, q, z = self.e, self.q, self.z
        x = q[self.l]
        y = q[k - 1]
        g = e[k - 1]
        h = e[k]
        f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2.0 * h * y)
        g = hypot(f, 1.0)
        if f < 0.0:
            f = ((x - z) * (x + z) + h * (y / (f - g) - h)) / x
        else:
            f = ((x - z) * (x + z) + h * (y / (f + g) - h)) / x
        self.f, self.x = f, x
        logger.debug("shift_from_bottom: k = %d, f = %g, g = %g", k, f, g)

    def qr_transform(self, l: int, k: int) -> None:
        """Chase the bulge from l to k with Givens rotations on both sides."""
        e, q = self.e, self.q
        f, x = self.f, self.x
        c = s = 1.0
        for j in range(l + 1, k + 1):
            g = e[j]
            y = q[j]
            h = s * g
            g = c * g
            z = hypot(f, h)
            e[j - 1] = z
            if z != 0.0:
                c = f / z
                s = h / z
            f = x * c + g * s
            g = -x * s + g * c
            h = y * s
            y = y * c
            _rotate(self.v, j - 1, j, c, s)

            # both f and h vanish when q[k] is zero: keep the previous rotation
            z = hypot(f, h)
            q[j - 1] = z
            if z != 0.0:
                c = f / z
                s = h / z
            f = c * g + s * y
            x = -s * g + c * y
            _rotate(self.u, j - 1, j, c, s)
        e[l] = 0.0
        e[k] = f
        q[k] = x


class SVD(Factorization):
    """
    Golub–Kahan–Reinsch Singular Value Decomposition.

    Parameters
    ----------
    a : (m, n) array_like, m >= n
        Matrix to decompose; copied on construction.
    strict : bool | None
        Raise on flaws instead of logging them (None: global setting).

    Example
    -------
    >>> svd = SVD([[1.0, 2.0], [0.0, 2.0]])
    >>> U, s, V = svd.factor123()
    >>> bool(np.allclose(U @ np.diag(s) @ V.T, svd.a))
    True
    """

    def __init__(self, a, strict: Optional[bool] = None):
        super().__init__(a, strict)
        if self.n > self.m:
            self.flaw(
                "init",
                f"SVD implementation requires m = {self.m} >= n = {self.n}",
                DimensionError,
                shape=self.a.shape,
                expected="m >= n",
            )
        self._result: Optional[SVDResult] = None

    def reset(self) -> None:
        super().reset()
        self._result = None

    def factor(self) -> "SVD":
        if self.factored:
            return self

        bid = Bidiagonal(self.a)
        u, _b, v = bid.bidiagonalize()
        e, q = bid.e_q
        eps = EPSILON * bid.bmax
        sweep = _GolubKahanSweep(u, q, e, v, eps)

        iterations = [0] * self.n
        converged = True
        for k in range(self.n - 1, -1, -1):
            ok, iters = sweep.iterate(k)
            iterations[k] = iters
            logger.debug("factor: block k = %d settled after %d sweeps", k, iters)
            if not ok:
                converged = False
                self.flaw(
                    "factor",
                    f"singular value {k} not converged after {iters} sweeps",
                    ConvergenceError,
                    iterations=iters,
                    block=k,
                )

        flip(u, q)
        reorder((u, q, v))
        self._result = SVDResult(u, q, v, converged, tuple(iterations))
        self.factored = True
        return self

    @property
    def result(self) -> SVDResult:
        """The cached `SVDResult` (factoring first if needed)."""
        self.factor()
        return self._result

    @property
    def converged(self) -> bool:
        return self.result.converged

    @property
    def factors(self):
        raise UnsupportedOperationError("SVD has three, not two factors")

    def factor12(self):
        raise UnsupportedOperationError("SVD has three, not two factors")

    def factor123(self) -> FactorType:
        """Factor and return ``(U, s, V)`` with ``A = U · diag(s) · Vᵀ``."""
        r = self.result
        return r.U, r.s, r.V

    def solve(self, b) -> np.ndarray:
        """
        Least-squares solution x = V · diag(1/s) · Uᵀ b.

        Zero singular values contribute nothing (their reciprocal is taken
        as zero), so rank-deficient systems get the minimum-norm solution.
        """
        b = self._rhs(b)
        U, s, V = self.factor123()
        alpha = U.T @ b
        return V @ (recip(s) * alpha)

    @property
    def inverse(self) -> np.ndarray:
        """Pseudo-inverse V · diag(1/s) · Uᵀ (zero singular values stay zero)."""
        U, s, V = self.factor123()
        return (V * recip(s)) @ U.T

    @property
    def condition_number(self) -> float:
        """Ratio s[0] / s[n-1]; infinite when the matrix is rank-deficient."""
        s = self.factor123()[1]
        if s[-1] == 0.0:
            return float("inf")
        return float(s[0] / s[-1])


def flip(u: np.ndarray, s: np.ndarray) -> None:
    """
    Zero out singular values below TOL and make the rest non-negative,
    negating the matching column of u.
    """
    for i in range(s.shape[0]):
        if abs(s[i]) < TOL:
            s[i] = 0.0
        if s[i] < 0.0:
            u[:, i] *= -1.0
            s[i] *= -1.0


def flip_signs(u: np.ndarray, v: np.ndarray) -> None:
    """Negate each column of u (of v) whose diagonal entry is negative."""
    for M in (u, v):
        for j in range(min(M.shape)):
            if M[j, j] < 0.0:
                M[:, j] *= -1.0


def reorder(ft: FactorType) -> None:
    """
    Sort singular values into non-increasing order in place, swapping the
    columns of u and v in lock step. Selection sort keeps the swap count
    minimal.
    """
    u, s, v = ft
    n = s.shape[0]
    for i in range(n):
        j = i + int(np.argmax(s[i:]))
        if i != j:
            u[:, [i, j]] = u[:, [j, i]]
            s[[i, j]] = s[[j, i]]
            v[:, [i, j]] = v[:, [j, i]]


def factor_full(u_s_v: FactorType) -> FactorType:
    """Return ``(U, diag(s), V)``, the singular values as a diagonal matrix."""
    u, s, v = u_s_v
    return u, np.diag(s), v


def reduce(u_s_v: FactorType, k: int) -> FactorType:
    """
    Keep the leading k singular triplets.

    When k equals the rank nothing is lost; for smaller k the product is the
    best rank-k approximation.
    """
    u, s, v = u_s_v
    return u[:, :k].copy(), s[:k].copy(), v[:, :k].copy()


def rank(s: np.ndarray) -> int:
    """Count the leading non-zero singular values (zeros are assumed last)."""
    i = 0
    while i < len(s) and s[i] != 0.0:
        i += 1
    return i


def svd(A) -> FactorType:
    """
    Economy-size SVD of an m-by-n matrix (m ≥ n).

    Returns
    -------
    U : (m, n) ndarray | orthonormal columns
    s : (n,) ndarray   | singular values, descending
    V : (n, n) ndarray | orthogonal
    """
    return SVD(A).factor123()
