# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Common protocol for matrix factorizations.

Every factorization is built around a private copy of its input matrix,
does no work until `factor` is called, and caches its outputs until
`reset` is called.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from .diagnostics import flawf
from .utils import as_matrix, as_vector


class Factorization(ABC):
    """
    Abstract base for the factorization classes.

    Subclasses implement `factor`, `factors`, `solve` and `inverse` and
    set ``self.factored = True`` once their outputs are computed.
    """

    def __init__(self, a, strict: Optional[bool] = None):
        self.a = as_matrix(a, "a")
        self.m, self.n = self.a.shape
        self.strict = strict
        self.flaw = flawf(type(self).__name__, strict)
        self.factored = False

    @property
    def is_factored(self) -> bool:
        return self.factored

    def reset(self) -> None:
        """Drop cached outputs so the next `factor` call recomputes them."""
        self.factored = False

    @abstractmethod
    def factor(self) -> "Factorization":
        """Factor the matrix (idempotent) and return self."""

    @property
    @abstractmethod
    def factors(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the two factor matrices."""

    @abstractmethod
    def solve(self, b) -> np.ndarray:
        """Solve a @ x = b for x."""

    @property
    @abstractmethod
    def inverse(self) -> np.ndarray:
        """Return the inverse (or pseudo-inverse) of a."""

    def factor1(self) -> np.ndarray:
        """Factor and return the first factor."""
        return self.factor().factors[0]

    def factor12(self) -> Tuple[np.ndarray, np.ndarray]:
        """Factor and return both factors."""
        return self.factor().factors

    def _rhs(self, b, n: Optional[int] = None) -> np.ndarray:
        return as_vector(b, self.m if n is None else n, "b")

    def __repr__(self) -> str:
        state = "factored" if self.factored else "unfactored"
        return f"{type(self).__name__}({self.m}x{self.n}, {state})"
