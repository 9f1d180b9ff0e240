# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
LU factorization with partial (row) pivoting

    P A = L U

for square and tall (m ≥ n) matrices. L is m×n unit lower trapezoidal,
U is n×n upper triangular and P is held as the pivot vector ``piv``
(row i of P A is row piv[i] of A).

Doolittle ("left-looking") ordering, after LUDecomposition.java in Jama.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .base import Factorization
from .exceptions import DimensionError
from .substitution import back_substitute, forward_substitute
from .utils import as_matrix, as_vector

logger = logging.getLogger(__name__)


class LU(Factorization):
    """
    Factor an m-by-n matrix a (m ≥ n) into l and u with row pivoting.

    Parameters
    ----------
    a : (m, n) array_like
        Matrix to factor; copied on construction.
    strict : bool | None
        Raise on flaws instead of logging them (None: global setting).
    """

    def __init__(self, a, strict: Optional[bool] = None):
        super().__init__(a, strict)
        if self.m < self.n:
            self.flaw(
                "init",
                f"requires m = {self.m} >= n = {self.n}",
                DimensionError,
                shape=self.a.shape,
                expected="m >= n",
            )
        self._clear()

    def _clear(self) -> None:
        self.l = self.a.copy()  # holds both l and u until split
        self.u: Optional[np.ndarray] = None
        self.piv = np.arange(self.m)
        self.pivsign = 1.0

    def reset(self) -> None:
        super().reset()
        self._clear()

    def factor(self) -> "LU":
        if self.factored:
            return self
        lu = self.l
        m, n = lu.shape
        for j in range(n):
            col_j = lu[:, j].copy()
            for i in range(m):
                kmax = min(i, j)
                col_j[i] -= lu[i, :kmax] @ col_j[:kmax]
                lu[i, j] = col_j[i]

            p = j + int(np.argmax(np.abs(col_j[j:])))
            if p != j:
                logger.debug("factor: swap rows %d and %d", j, p)
                lu[[p, j]] = lu[[j, p]]
                self.piv[[p, j]] = self.piv[[j, p]]
                self.pivsign = -self.pivsign

            if lu[j, j] != 0.0:
                lu[j + 1 :, j] /= lu[j, j]

        self.factored = True
        self._split()
        return self

    def _split(self) -> None:
        """Move the upper triangle into u and leave a unit lower l behind."""
        n = self.n
        self.u = np.triu(self.l[:n, :n])
        self.l[:n, :n] = np.tril(self.l[:n, :n], -1) + np.eye(n)

    @property
    def factors(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(l, u)``."""
        self.factor()
        return self.l, self.u

    def _require_square(self, method: str) -> None:
        if self.m != self.n:
            raise DimensionError(
                f"{method}: requires a square matrix, got {self.m}x{self.n}",
                shape=self.a.shape,
                expected="square",
            )

    def solve(self, b) -> np.ndarray:
        """Solve a x = b via l y = P b (forward) and u x = y (backward)."""
        self._require_square("solve")
        b = self._rhs(b)
        self.factor()
        y = forward_substitute(self.l, b[self.piv], unit_diagonal=True)
        return back_substitute(self.u, y)

    def solve_transpose(self, b) -> np.ndarray:
        """Solve aᵀ x = b via uᵀ z = b (forward) and lᵀ w = z (backward)."""
        self._require_square("solve_transpose")
        b = self._rhs(b)
        self.factor()
        w = back_substitute(self.l.T, forward_substitute(self.u.T, b))
        x = np.empty_like(w)
        x[self.piv] = w
        return x

    @property
    def inverse(self) -> np.ndarray:
        """Solve for each column of the identity."""
        self._require_square("inverse")
        self.factor()
        eye_p = np.eye(self.n)[self.piv]
        return back_substitute(self.u, forward_substitute(self.l, eye_p, unit_diagonal=True))

    @property
    def det(self) -> float:
        """Determinant of a: pivsign · Π u(j, j)."""
        self._require_square("det")
        self.factor()
        return float(self.pivsign * np.prod(np.diag(self.u)))

    @property
    def rank(self) -> int:
        """n minus the number of exactly zero diagonal entries of u."""
        self.factor()
        return self.n - int(np.count_nonzero(np.diag(self.u) == 0.0))

    def norm1est(self, inv: bool = True, max_iter: int = 5) -> float:
        """
        Estimate ‖a⁻¹‖₁ (or ‖a‖₁ when inv is False) without forming a⁻¹.

        Hager's method with Higham's refinements (Algorithm 4.1 in Higham,
        "Fortran codes for estimating the one-norm of a real or complex
        matrix", ACM TOMS 14, 1988): climb towards the column of largest
        1-norm using products with a⁻¹ and a⁻ᵀ, which cost one pair of
        triangular solves each. The result is a lower bound, usually exact.
        """
        self._require_square("norm1est")
        self.factor()
        n = self.n
        if inv:
            apply, apply_t = self.solve, self.solve_transpose
        else:
            apply = lambda x: self.a @ x
            apply_t = lambda x: self.a.T @ x

        v = apply(np.full(n, 1.0 / n))
        if n == 1:
            return float(abs(v[0]))
        gamma = float(np.sum(np.abs(v)))
        xi = np.where(v >= 0.0, 1.0, -1.0)
        x = apply_t(xi)

        it = 1
        for it in range(2, max_iter + 1):
            j = int(np.argmax(np.abs(x)))
            v = apply(np.eye(n)[j])
            gamma_old, gamma = gamma, float(np.sum(np.abs(v)))
            sign_v = np.where(v >= 0.0, 1.0, -1.0)
            if np.array_equal(sign_v, xi) or gamma <= gamma_old:
                gamma = max(gamma, gamma_old)
                break
            xi = sign_v
            x = apply_t(xi)
            if np.max(np.abs(x)) == x[j]:
                break
        logger.debug("norm1est: n = %d, %d iterations, gamma = %g", n, it, gamma)

        # alternating-sign vector catches matrices that fool the climb
        alt = (1.0 + np.arange(n) / (n - 1)) * np.where(np.arange(n) % 2 == 0, 1.0, -1.0)
        extra = 2.0 * np.sum(np.abs(apply(alt))) / (3.0 * n)
        return max(gamma, float(extra))

    @property
    def condition_number(self) -> float:
        """1-norm condition number ‖a‖₁ ‖a⁻¹‖₁ from the explicit inverse."""
        self._require_square("condition_number")
        return float(np.linalg.norm(self.a, 1) * np.linalg.norm(self.inverse, 1))

    @property
    def condition_number_est(self) -> float:
        """1-norm condition number with ‖a⁻¹‖₁ taken from `norm1est`."""
        self._require_square("condition_number_est")
        return float(np.linalg.norm(self.a, 1) * self.norm1est())


# ---------------------------------------------------------------------
# Functional solvers
# ---------------------------------------------------------------------


def solve_over(A, b) -> np.ndarray:
    """
    Least-squares solution of an over-determined system via the normal
    equations (Aᵀ A) x = Aᵀ b.
    """
    A = as_matrix(A, "A")
    b = as_vector(b, A.shape[0], "b")
    return LU(A.T @ A).solve(A.T @ b)


def solve_under(A, b) -> np.ndarray:
    """
    Minimum-norm solution of an under-determined system,
    x = Aᵀ (A Aᵀ)⁻¹ b.
    """
    A = as_matrix(A, "A")
    b = as_vector(b, A.shape[0], "b")
    return A.T @ LU(A @ A.T).solve(b)


def lu_solve(A, b) -> np.ndarray:
    """
    Solve A x = b with LU factorization.

    Square systems are solved directly, over-determined ones in the
    least-squares sense and under-determined ones for the smallest x.
    """
    A = as_matrix(A, "A")
    m, n = A.shape
    if m == n:
        return LU(A).solve(b)
    if m > n:
        return solve_over(A, b)
    return solve_under(A, b)
