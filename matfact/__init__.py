# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
matfact
=======

Dense matrix factorizations written out step by step on top of NumPy.

Public API
~~~~~~~~~~
- Factorizations (``factor`` / ``factors`` / ``solve`` / ``inverse``)
    - `Bidiagonal`, `SVD`, `QR`, `Cholesky`, `LU`, `Inverse`
- Functional entry points
    - `svd`, `householder_qr`, `rank_revealing_qr`,
      `least_squares_qr`, `lu_solve`
    - `inverse`, `inverse_lt`, `inverse_ut`
- Result types
    - `SVDResult`, `QRResult`, `PivotInfo`
- Flaw reporting
    - `set_strict`, `is_strict`, `strict_mode`
- Constants and helpers
    - `EPSILON`, `TOL`, `near_eq`, `approx_equal`,
      `reorder_cols`, `reorder_rows`

Everything else lives in sub-modules and is **not** considered part of the
stable interface.

Example
-------
>>> import numpy as np, matfact as mf
>>> A = np.random.randn(5, 3)
>>> Q, R = mf.QR(A, need_q=True).factor12()
>>> np.allclose(Q @ R, A)
True
"""

from importlib.metadata import version as _pkg_version

from .base import Factorization
from .bidiagonal import Bidiagonal
from .cholesky import Cholesky
from .diagnostics import is_strict, set_strict, strict_mode
from .exceptions import (
    ConvergenceError,
    DimensionError,
    MatFactError,
    NotPositiveDefiniteError,
    NotSymmetricError,
    NumericalError,
    SingularMatrixError,
    UnsupportedOperationError,
    ValidationError,
)
from .inverse import Inverse, inverse, inverse_lt, inverse_ut
from .lu import LU, lu_solve

# ---------------------------------------------------------------------
# Re-export the high-level functions users are expected to call.
# Each of these names is implemented in one of the internal sub-modules.
# ---------------------------------------------------------------------
from .qr import (
    QR,
    PivotInfo,
    QRResult,
    householder_qr,
    least_squares_qr,
    rank_revealing_qr,
)
from .svd import SVD, SVDResult, svd
from .utils import (
    EPSILON,
    TOL,
    approx_equal,
    near_eq,
    reorder_cols,
    reorder_rows,
)

__all__ = [
    "Factorization",
    "Bidiagonal",
    "SVD",
    "SVDResult",
    "svd",
    "QR",
    "QRResult",
    "PivotInfo",
    "householder_qr",
    "rank_revealing_qr",
    "least_squares_qr",
    "Cholesky",
    "LU",
    "lu_solve",
    "Inverse",
    "inverse",
    "inverse_lt",
    "inverse_ut",
    "set_strict",
    "is_strict",
    "strict_mode",
    "MatFactError",
    "ValidationError",
    "DimensionError",
    "NotSymmetricError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
    "UnsupportedOperationError",
    "EPSILON",
    "TOL",
    "near_eq",
    "approx_equal",
    "reorder_cols",
    "reorder_rows",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show matfact”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Silent by default: flaws are only printed once the application
# configures logging.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
