# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Exception hierarchy for matfact.

All exceptions inherit from MatFactError so callers can catch any
library-specific error. Exceptions carry diagnostic information as
attributes; messages include the actual values that failed.
"""

from typing import Optional, Tuple


class MatFactError(Exception):
    """Base exception for all matfact errors."""

    def __init__(self, message: str, **attrs):
        super().__init__(message)
        for key, value in attrs.items():
            setattr(self, key, value)


class ValidationError(MatFactError):
    """
    Input validation failed.

    Raised when a matrix or right-hand side cannot be converted to a finite
    float array.
    """


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Attributes:
        shape: The offending shape
        expected: The expected shape or a description of it
    """

    def __init__(
        self,
        message: str,
        shape: Optional[Tuple[int, ...]] = None,
        expected: Optional[object] = None,
        **attrs,
    ):
        super().__init__(message, **attrs)
        self.shape = shape
        self.expected = expected


class NotSymmetricError(ValidationError):
    """Matrix handed to a Cholesky factorization is not symmetric."""


class NumericalError(MatFactError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical degeneracy.
    """


class SingularMatrixError(NumericalError):
    """
    Matrix is singular: a required pivot or diagonal entry is zero.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        index: Row/column index where the zero pivot was found
    """

    def __init__(
        self,
        message: str,
        matrix_name: Optional[str] = None,
        index: Optional[int] = None,
        **attrs,
    ):
        super().__init__(message, **attrs)
        self.matrix_name = matrix_name
        self.index = index


class NotPositiveDefiniteError(NumericalError):
    """
    A Cholesky diagonal residual was not positive.

    Attributes:
        index: Diagonal index of the failing residual
        residual: The residual a(j, j) - sum_k l(j, k)^2
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        residual: Optional[float] = None,
        **attrs,
    ):
        super().__init__(message, **attrs)
        self.index = index
        self.residual = residual


class ConvergenceError(NumericalError):
    """
    Iterative algorithm failed to converge.

    Attributes:
        iterations: Number of iterations completed
        block: Index of the SVD block that did not converge
    """

    def __init__(
        self,
        message: str,
        iterations: Optional[int] = None,
        block: Optional[int] = None,
        **attrs,
    ):
        super().__init__(message, **attrs)
        self.iterations = iterations
        self.block = block


class UnsupportedOperationError(MatFactError, NotImplementedError):
    """The requested operation is not defined for this factorization."""
