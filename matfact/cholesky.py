# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Cholesky factorization  A = L Lᵀ  of a symmetric positive-definite matrix.

Three algorithms are offered. They compute the same L on a well-posed
problem and differ only in how they treat a non-positive diagonal residual

    diff = a(j, j) - Σ_k l(j, k)²

- `factor`               outer-product, floors l(j, j) to √CHOLESKY_EPS
                         whenever diff ≤ CHOLESKY_EPS (no flaw)
- `factor_crout`         Cholesky–Crout, flaws when diff ≤ 0 and sets
                         l(j, j) = 0
- `factor_banachiewicz`  row by row, flaws on diff < 0 (l(j, j) becomes NaN)
                         and on a zero divisor, but carries on
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .base import Factorization
from .exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    NotSymmetricError,
    SingularMatrixError,
)
from .inverse import inverse_lt
from .substitution import back_substitute, forward_substitute
from .utils import CHOLESKY_EPS, approx_equal

logger = logging.getLogger(__name__)


class Cholesky(Factorization):
    """
    Factor an n-by-n symmetric, positive definite matrix a into l · lᵀ.

    Parameters
    ----------
    a : (n, n) array_like
        Matrix to factor; copied on construction.
    strict : bool | None
        Raise on flaws instead of logging them (None: global setting).

    Attributes
    ----------
    l : (n, n) ndarray
        Lower-triangular factor (zeros until factored).
    variant : str | None
        Name of the algorithm that produced ``l``.
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
        elif not approx_equal(self.a, self.a.T):
            self.flaw("init", "matrix a must be symmetric", NotSymmetricError)
        self.l = np.zeros((self.n, self.n))
        self.variant: Optional[str] = None

    def reset(self) -> None:
        super().reset()
        self.l[:] = 0.0
        self.variant = None

    def _done(self, variant: str) -> "Cholesky":
        self.variant = variant
        self.factored = True
        logger.debug("%s: factored %dx%d", variant, self.n, self.n)
        return self

    def factor(self) -> "Cholesky":
        """
        Robust outer-product algorithm, tolerating mildly indefinite input.

        A residual at or below CHOLESKY_EPS is replaced by a tiny positive
        pivot and the column below it is left at zero.
        """
        if self.factored:
            return self
        a, l = self.a, self.l
        for j in range(self.n):
            diff = a[j, j] - l[j, :j] @ l[j, :j]
            if diff > CHOLESKY_EPS:
                l[j, j] = math.sqrt(diff)
                l[j + 1 :, j] = (a[j + 1 :, j] - l[j + 1 :, :j] @ l[j, :j]) / l[j, j]
            else:
                logger.debug("factor: floor l(%d, %d), diff = %g", j, j, diff)
                l[j, j] = math.sqrt(CHOLESKY_EPS)
        return self._done("factor")

    def factor_crout(self) -> "Cholesky":
        """Cholesky–Crout algorithm; a non-positive residual zeroes l(j, j)."""
        if self.factored:
            return self
        a, l = self.a, self.l
        for j in range(self.n):
            diff = a[j, j] - l[j, :j] @ l[j, :j]
            if diff > 0.0:
                l[j, j] = math.sqrt(diff)
                l[j + 1 :, j] = (a[j + 1 :, j] - l[j + 1 :, :j] @ l[j, :j]) / l[j, j]
            else:
                self.flaw(
                    "factor_crout",
                    f"sqrt of negative diff = {diff}, setting l({j}, {j}) to zero",
                    NotPositiveDefiniteError,
                    index=j,
                    residual=float(diff),
                )
                l[j, j] = 0.0
        return self._done("factor_crout")

    def factor_banachiewicz(self) -> "Cholesky":
        """
        Cholesky–Banachiewicz algorithm, computing l one row at a time.

        See introcs.cs.princeton.edu/java/95linear
        """
        if self.factored:
            return self
        a, l = self.a, self.l
        with np.errstate(divide="ignore", invalid="ignore"):
            for i in range(self.n):
                for j in range(i + 1):
                    diff = a[i, j] - l[i, :j] @ l[j, :j]
                    if i == j:
                        if diff < 0.0:
                            self.flaw(
                                "factor_banachiewicz",
                                f"sqrt of negative diff = {diff}",
                                NotPositiveDefiniteError,
                                index=j,
                                residual=float(diff),
                            )
                        l[j, j] = np.sqrt(diff)
                    else:
                        l_jj = l[j, j]
                        if l_jj == 0.0:
                            self.flaw(
                                "factor_banachiewicz",
                                f"divide by zero l({j}, {j}) = {l_jj}",
                                SingularMatrixError,
                                matrix_name="l",
                                index=j,
                            )
                        l[i, j] = np.float64(diff) / l_jj
        return self._done("factor_banachiewicz")

    @property
    def factors(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(l, lᵀ)``, factoring with `factor` if no variant has run."""
        self.factor()
        return self.l, self.l.T

    def solve(self, b) -> np.ndarray:
        """Solve a x = b by forward substitution (l y = b) then back (lᵀ x = y)."""
        b = self._rhs(b)
        self.factor()
        y = forward_substitute(self.l, b)
        return back_substitute(self.l.T, y)

    @property
    def inverse(self) -> np.ndarray:
        """
        a⁻¹ = (l⁻¹)ᵀ l⁻¹, factoring with the Crout algorithm if a has not
        been factored yet.
        """
        self.factor_crout()
        l_inv = inverse_lt(self.l)
        return l_inv.T @ l_inv
