# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Householder QR factorization, plain and rank-revealing.

    A   = Q R        (plain)
    A P = Q R        (rank-revealing, P from the pivot vector)

Q is m×n with orthonormal columns and R is n×n upper triangular.

The work is done on Aᵀ so that each column of A is a contiguous row.
After factoring, the k-th row of the working transpose holds the k-th
Householder vector from position k on (scaled so its leading entry is
1 + |x|/‖x‖), which is enough to apply Q or Qᵀ without forming Q.

Caveat: requires m ≥ n; wide matrices need an LQ factorization.

See Golub & Van Loan, *Matrix Computations*, 5.1–5.2 and 5.4.1, and
QRDecomposition.java in Jama.
"""

import logging
from dataclasses import dataclass
from math import sqrt
from typing import Optional, Tuple

import numpy as np

from .base import Factorization
from .exceptions import DimensionError, UnsupportedOperationError
from .inverse import inverse_ut
from .substitution import back_substitute
from .utils import EPSILON, TOL, as_matrix, near_eq

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PivotInfo:
    """
    Extra output of a rank-revealing QR.

    Attributes:
        piv: column permutation, column j of A·P is column piv[j] of A
        rank: numerical rank (number of Householder steps taken)
    """

    piv: np.ndarray
    rank: int


@dataclass(frozen=True)
class QRResult:
    """
    Result of a Householder QR factorization.

    Attributes:
        Q: orthogonal factor (m×n reduced, m×m complete), None if not formed
        R: upper-triangular factor
        pivot: pivot vector and rank for the rank-revealing variant
    """

    Q: Optional[np.ndarray]
    R: np.ndarray
    pivot: Optional[PivotInfo] = None


# ---------------------------------------------------------------------
# Kernels on the working transpose `at` (one row per column of A)
# ---------------------------------------------------------------------


def _col_house(at: np.ndarray, r: np.ndarray, k: int) -> None:
    """Build the k-th Householder vector in at[k] and reflect rows k+1.. of at."""
    at_k = at[k]
    norm = float(np.linalg.norm(at_k[k:]))  # norm of A(k:m, k)
    if norm != 0.0:
        if at_k[k] < 0.0:
            norm = -norm
        at_k[k:] /= norm
        at_k[k] += 1.0
    r[k, k] = -norm

    if at_k[k] != 0.0:
        proj = at[k + 1 :, k:] @ at_k[k:]
        proj /= -at_k[k]
        at[k + 1 :, k:] += np.outer(proj, at_k[k:])


def _fill_r(at: np.ndarray, r: np.ndarray, steps: int) -> None:
    """Copy the strictly-upper part of R out of the working transpose."""
    p, n = r.shape
    iu = np.triu_indices(p, 1, n)
    r[iu] = at[:, :p].T[iu]
    r[steps:] = 0.0  # rows past the numerical rank hold only residue


def _accumulate_q(at: np.ndarray, steps: int, m: int, cols: int) -> np.ndarray:
    """Apply the stored reflectors, last to first, to the identity (m×cols)."""
    q = np.eye(m, cols)
    for k in range(steps - 1, -1, -1):
        at_k = at[k]
        if near_eq(at_k[k], 0.0):
            continue
        proj = at_k[k:] @ q[k:, k:]
        proj /= -at_k[k]
        q[k:, k:] += np.outer(at_k[k:], proj)
    return q


def _transform_b(at: np.ndarray, steps: int, b: np.ndarray) -> np.ndarray:
    """Return Qᵀ b using the stored reflectors."""
    qt_b = b.copy()
    for j in range(steps):
        at_j = at[j]
        if at_j[j] == 0.0:
            continue
        s = (qt_b[j:] @ at_j[j:]) / -at_j[j]
        qt_b[j:] += s * at_j[j:]
    return qt_b


def _factor_plain(at: np.ndarray, r: np.ndarray) -> int:
    p = r.shape[0]
    for k in range(p):
        _col_house(at, r, k)
    return p


def _factor_pivoted(at: np.ndarray, r: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Greedy column pivoting: always reflect the remaining column with the
    largest squared norm; stop once that norm drops below TOL.

    The norms are downdated after each step. A downdate that cancels most of
    the original norm is recomputed from the column instead, as in LAPACK's
    xLAQP2.
    """
    p = r.shape[0]
    n = at.shape[0]
    piv = np.arange(n)
    c = np.einsum("ij,ij->i", at, at)  # squared column norms of A
    c0 = c.copy()
    tol3z = sqrt(EPSILON)

    rank = 0
    c_m = c.max() if n > 0 else 0.0
    while rank < p and c_m > TOL:
        k_m = rank + int(np.argmax(c[rank:]))
        if k_m != rank:
            piv[[k_m, rank]] = piv[[rank, k_m]]
            at[[k_m, rank]] = at[[rank, k_m]]
            c[[k_m, rank]] = c[[rank, k_m]]
            c0[[k_m, rank]] = c0[[rank, k_m]]
            logger.debug("factor: pivot column %d into position %d", piv[rank], rank)
        _col_house(at, r, rank)
        rest = slice(rank + 1, n)
        c[rest] -= at[rest, rank] ** 2
        rank += 1
        stale = np.flatnonzero(c[rest] <= tol3z * c0[rest]) + rank
        if stale.size:
            c[stale] = np.einsum("ij,ij->i", at[stale, rank:], at[stale, rank:])
            c0[stale] = c[stale]
        c_m = c[rank:].max() if rank < n else 0.0
    return piv, rank


def householder_qr(A, pivoting: bool = False, complete: bool = False) -> QRResult:
    """
    Compute the QR decomposition of an m-by-n matrix A using
    Householder transformations.

    Unlike `QR` this accepts any shape: R is min(m, n)-by-n upper
    trapezoidal (m-by-n with ``complete``, padded with zero rows).

    Parameters
    ----------
    A : (m, n) array_like
    pivoting : bool
        Use rank-revealing column pivoting (A P = Q R).
    complete : bool
        Return the full m×m Q instead of the m×min(m, n) one.

    Returns
    -------
    QRResult with Q always formed.
    """
    A = as_matrix(A, "A")
    m, n = A.shape
    at = A.T.copy()
    p = min(m, n)
    r = np.zeros((p, n))
    if pivoting:
        piv, steps = _factor_pivoted(at, r)
        info = PivotInfo(piv, steps)
    else:
        steps = _factor_plain(at, r)
        info = None
    _fill_r(at, r, steps)
    if complete and m > p:
        r = np.vstack([r, np.zeros((m - p, n))])
    q = _accumulate_q(at, steps, m, m if complete else p)
    return QRResult(q, r, info)


class QR(Factorization):
    """
    Householder QR factorization of an m-by-n matrix (m ≥ n).

    Parameters
    ----------
    a : (m, n) array_like
        Matrix to factor; copied on construction.
    need_q : bool
        Form Q explicitly during `factor`. Otherwise Q is only built when
        `inverse` or `compute_q` asks for it.
    pivoting : bool
        Rank-revealing variant: pivot on the largest remaining column norm
        and record `piv` and `rank`.
    strict : bool | None
        Raise on flaws instead of logging them (None: global setting).
    """

    def __init__(
        self,
        a,
        need_q: bool = False,
        pivoting: bool = False,
        strict: Optional[bool] = None,
    ):
        super().__init__(a, strict)
        if self.m < self.n:
            self.flaw(
                "init",
                f"requires m = {self.m} >= n = {self.n}, use an LQ factorization",
                DimensionError,
                shape=self.a.shape,
                expected="m >= n",
            )
        self.need_q = need_q
        self.pivoting = pivoting
        self.p = min(self.m, self.n)
        self._clear()
        logger.debug(
            "init: a = %s, need_q = %s, pivoting = %s", self.a.shape, need_q, pivoting
        )

    def _clear(self) -> None:
        self.at = self.a.T.copy()  # transpose (for efficiency) of a
        self.r = np.zeros((self.p, self.n))
        self.q: Optional[np.ndarray] = None
        self._steps = 0
        self._pivot: Optional[PivotInfo] = None

    def reset(self) -> None:
        super().reset()
        self._clear()

    def factor(self) -> "QR":
        """
        Householder-factor a, leaving the Householder vectors in the lower
        triangle of the working transpose and R in `r`.
        """
        if self.factored:
            return self

        if self.pivoting:
            piv, rank = _factor_pivoted(self.at, self.r)
            self._pivot = PivotInfo(piv, rank)
            self._steps = rank
        else:
            self._steps = _factor_plain(self.at, self.r)
        _fill_r(self.at, self.r, self._steps)
        self.factored = True
        if self.need_q:
            self.compute_q()
        return self

    def compute_q(self) -> np.ndarray:
        """Form (and cache) the m×n orthogonal factor Q."""
        self.factor()
        if self.q is None:
            self.q = _accumulate_q(self.at, self._steps, self.m, self.n)
        return self.q

    @property
    def factors(self) -> Tuple[Optional[np.ndarray], np.ndarray]:
        """Return ``(q, r)``; q is None unless `need_q` or `compute_q`."""
        self.factor()
        return self.q, self.r

    @property
    def result(self) -> QRResult:
        self.factor()
        return QRResult(self.q, self.r, self._pivot)

    # ---- rank-revealing extension ----------------------------------------

    @property
    def piv(self) -> np.ndarray:
        """Column permutation of the rank-revealing variant."""
        return self._pivot_info().piv

    @property
    def rank(self) -> int:
        """Numerical rank found by the rank-revealing variant."""
        return self._pivot_info().rank

    def _pivot_info(self) -> PivotInfo:
        if not self.pivoting:
            raise UnsupportedOperationError(
                "piv and rank require the rank-revealing variant (pivoting=True)"
            )
        self.factor()
        return self._pivot

    # ---- operations -------------------------------------------------------

    def solve(self, b) -> np.ndarray:
        """
        Solve a x = b (least squares when m > n) via r x = qᵀ b, applying
        qᵀ with the stored Householder vectors.

        For the rank-revealing variant only the leading `rank` columns are
        used (trailing components are zero) and x is returned in the
        original column order.
        """
        b = self._rhs(b)
        self.factor()
        qt_b = _transform_b(self.at, self._steps, b)
        if not self.pivoting:
            return back_substitute(self.r[: self.n, : self.n], qt_b[: self.n])

        rank = self._pivot.rank
        y = np.zeros(self.n)
        y[:rank] = back_substitute(self.r[:rank, :rank], qt_b[:rank])
        x = np.empty(self.n)
        x[self._pivot.piv] = y
        return x

    @property
    def inverse(self) -> np.ndarray:
        """
        r⁻¹ qᵀ (rows un-permuted for the rank-revealing variant), using the
        dedicated upper-triangular inverse.
        """
        q = self.compute_q()
        r_inv = inverse_ut(self.r[: self.n, : self.n])
        inv = r_inv @ q.T
        if self.pivoting:
            out = np.empty_like(inv)
            out[self._pivot.piv] = inv
            return out
        return inv

    def nullspace(self, rank: int) -> np.ndarray:
        """
        Basis of { x | a x = 0 } with n - rank orthonormal columns.

        Factors aᵀ with a complete, column-pivoted Q and returns its trailing
        n - rank columns, which are orthogonal to every row of a.
        """
        qq = householder_qr(self.a.T, pivoting=True, complete=True).Q
        ns = qq[:, rank:]
        if ns.shape[1] > 0:
            return ns
        return np.zeros((self.n, 0))

    def nullspace_v(self) -> np.ndarray:
        """
        One vector of the nullspace, by fixing x[n-1] = 1 and back-substituting
        r[:p, :p] x[:p] = -r[:p, n-1], where p = n - 1 (or the rank, for the
        rank-revealing variant).

        Without pivoting this is meaningful when the last column of r is the
        dependent one. With pivoting the free components x[p:n-1] are set to
        zero and x is permuted back to the column order of a.
        """
        self.factor()
        n = self.n
        p = min(self.rank, n - 1) if self.pivoting else n - 1
        x = np.zeros(n)
        x[n - 1] = 1.0
        x[:p] = back_substitute(self.r[:p, :p], -self.r[:p, n - 1])
        if self.pivoting:
            out = np.empty(n)
            out[self._pivot.piv] = x
            return out
        return x


def rank_revealing_qr(a, need_q: bool = True, strict: Optional[bool] = None) -> QR:
    """Build a rank-revealing (column-pivoted) `QR` for a."""
    return QR(a, need_q=need_q, pivoting=True, strict=strict)


def least_squares_qr(A, b) -> np.ndarray:
    """
    Solve min ‖Ax – b‖₂ with Householder QR (A = QR). Works for tall or
    square full-rank A.

    Returns:
    x : (n, ) ndarray
        The least squares solution to Ax = b
    """
    return QR(A).solve(b)
