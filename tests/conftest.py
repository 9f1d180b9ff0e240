# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from matfact.diagnostics import strict_mode


@pytest.fixture(autouse=True)
def log_and_continue():
    """Run every test with flaws logged, whatever MATFACT_STRICT says."""
    with strict_mode(False):
        yield


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def bidiagonal_2x2():
    """Already upper bidiagonal, A = [[1, 2], [0, 2]]."""
    return np.array([[1.0, 2.0], [0.0, 2.0]])


@pytest.fixture
def spd_system():
    """4×4 symmetric positive definite system with its right-hand side."""
    a = np.array(
        [
            [4.0, 0.4, 0.8, -0.2],
            [0.4, 1.04, -0.12, 0.28],
            [0.8, -0.12, 9.2, 1.4],
            [-0.2, 0.28, 1.4, 4.35],
        ]
    )
    b = np.array([-0.2, -0.32, 13.52, 14.17])
    return a, b


@pytest.fixture
def spd_3x3():
    """SPD matrix with the integer factor L = [[2, 0, 0], [6, 1, 0], [-8, 5, 3]]."""
    return np.array(
        [
            [4.0, 12.0, -16.0],
            [12.0, 37.0, -43.0],
            [-16.0, -43.0, 98.0],
        ]
    )


@pytest.fixture
def indefinite_3x3():
    """Symmetric but indefinite (eigenvalues of both signs)."""
    return np.array(
        [
            [1.0, 1.0, 2.0],
            [1.0, 2.0, 3.0],
            [2.0, 3.0, 1.0],
        ]
    )


@pytest.fixture
def duplicate_rows_4x4():
    """Rank 2: rows 1, 2 and 3 are identical."""
    return np.array(
        [
            [-1.0, 1.0, 2.0, 4.0],
            [2.0, 0.0, 1.0, -7.0],
            [2.0, 0.0, 1.0, -7.0],
            [2.0, 0.0, 1.0, -7.0],
        ]
    )


QR_MATRICES = {
    "a1": [[9.0, 0.0, 26.0], [12.0, 0.0, -7.0], [0.0, 4.0, 4.0], [0.0, -3.0, -3.0]],
    "a2": [[2.0, 1.0], [-4.0, -2.0]],
    "a3": [[0.0, 1.0, 1.0], [-5.0, -2.0, -2.0], [-5.0, -2.0, -2.0]],
    "a4": [
        [-1.0, 1.0, 2.0, 4.0],
        [2.0, 0.0, 1.0, -7.0],
        [2.0, 0.0, 1.0, -7.0],
        [2.0, 0.0, 1.0, -7.0],
    ],
    "a5": [
        [0.8147, 0.0975, 0.1576],
        [0.9058, 0.2785, 0.9706],
        [0.1270, 0.5469, 0.9572],
        [0.9134, 0.9575, 0.4854],
        [0.6324, 0.9649, 0.8003],
    ],
}

SVD_MATRICES = {
    "a1": [[1.0, 2.0], [0.0, 2.0]],
    "a2": [[3.0, -1.0], [1.0, 3.0], [1.0, 1.0]],
    "a3": [[1.0, 1.0, 0.0], [0.0, 2.0, 2.0], [0.0, 0.0, 3.0]],
    "a4": [[0.0, 1.0, 1.0], [np.sqrt(2.0), 2.0, 0.0], [0.0, 1.0, 1.0]],
    "a5": [
        [0.9501, 0.8913, 0.8214, 0.9218],
        [0.2311, 0.7621, 0.4447, 0.7382],
        [0.6068, 0.4565, 0.6154, 0.1763],
        [0.4860, 0.0185, 0.7919, 0.4057],
    ],
    "a6": [[4.0, 5.0], [6.0, 7.0], [9.0, 8.0]],
    "a7": [
        [1.0, 2.0, 3.0, 4.0],
        [4.0, 3.0, 2.0, 1.0],
        [5.0, 6.0, 7.0, 8.0],
        [8.0, 7.0, 6.0, 5.0],
    ],
    "a8": [
        [0.44444444, 0.3333333, -1.3333333],
        [0.41111111, -0.3166667, -0.3333333],
        [-0.18888889, 0.4833333, -0.3333333],
        [-0.03333333, -0.6500000, 1.0000000],
        [-0.63333333, 0.1500000, 1.0000000],
    ],
}


@pytest.fixture(params=sorted(QR_MATRICES))
def qr_matrix(request):
    return np.array(QR_MATRICES[request.param])


@pytest.fixture(params=sorted(SVD_MATRICES))
def svd_matrix(request):
    return np.array(SVD_MATRICES[request.param])
