# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import importlib
import logging

import numpy as np
import pytest

from matfact.diagnostics import strict_mode
from matfact.exceptions import (
    ConvergenceError,
    DimensionError,
    UnsupportedOperationError,
)
from matfact.svd import (
    SVD,
    factor_full,
    flip_signs,
    rank,
    reduce,
    svd,
)

# `matfact.svd` the attribute is the function, fetch the module itself
svd_module = importlib.import_module("matfact.svd")


def _check_svd(A, U, s, V, atol=1e-10):
    n = A.shape[1]
    np.testing.assert_allclose(U @ np.diag(s) @ V.T, A, atol=atol)
    np.testing.assert_allclose(U.T @ U, np.eye(n), atol=atol)
    np.testing.assert_allclose(V.T @ V, np.eye(n), atol=atol)
    assert np.all(s >= 0.0)
    assert np.all(np.diff(s) <= 0.0)


def test_reference_matrices(svd_matrix):
    """U Σ Vᵀ must reconstruct A and U, V must be orthonormal."""
    A = svd_matrix
    fac = SVD(A)
    U, s, V = fac.factor123()

    # a8 has a singular value near 8e-9 that the bidiagonal cut-off sends to zero
    _check_svd(A, U, s, V, atol=1e-8)
    assert fac.converged
    np.testing.assert_allclose(s, np.linalg.svd(A, compute_uv=False), atol=1e-8)


@pytest.mark.parametrize("m,n", [(1, 1), (2, 2), (8, 5), (20, 20), (50, 10)])
def test_reconstruction_and_orthogonality(m, n):
    rng = np.random.default_rng(seed=m + n)
    A = rng.normal(size=(m, n))
    U, s, V = svd(A)
    _check_svd(A, U, s, V)


def test_already_bidiagonal_2x2(bidiagonal_2x2):
    s = SVD(bidiagonal_2x2).factor123()[1]
    expected = np.sqrt(np.linalg.eigvalsh(bidiagonal_2x2.T @ bidiagonal_2x2))[::-1]
    np.testing.assert_allclose(s, expected, rtol=1e-12)
    assert 2.5 < s[0] < 3.0 and 0.6 < s[1] < 0.8


def _align_signs(X, Y):
    """Flip columns of X so that X[:,i] · Y[:,i] ≥ 0."""
    sign = np.sign(np.sum(X * Y, axis=0))
    sign[sign == 0] = 1.0
    return X * sign


@pytest.mark.parametrize("m,n", [(12, 7), (30, 15)])
def test_against_numpy_svd(m, n):
    """Singular values must match NumPy’s; singular vectors up to sign."""
    rng = np.random.default_rng(seed=4 * m + n)
    A = rng.standard_normal(size=(m, n))

    U_np, s_np, Vt_np = np.linalg.svd(A, full_matrices=False)
    U, s, V = svd(A)

    np.testing.assert_allclose(s, s_np, rtol=1e-10, atol=1e-12)
    np.testing.assert_allclose(_align_signs(U, U_np), U_np, atol=1e-8)
    np.testing.assert_allclose(_align_signs(V, Vt_np.T), Vt_np.T, atol=1e-8)


def test_rank_deficient_matrix():
    A = np.array(
        [
            [1.0, 2.0, 3.0, 4.0],
            [4.0, 3.0, 2.0, 1.0],
            [5.0, 6.0, 7.0, 8.0],
            [8.0, 7.0, 6.0, 5.0],
        ]
    )
    fac = SVD(A)
    U, s, V = fac.factor123()
    _check_svd(A, U, s, V)
    assert rank(s) == 2
    np.testing.assert_array_equal(s[2:], 0.0)
    assert fac.condition_number == float("inf")


def test_solve_least_squares(rng):
    A = rng.standard_normal((15, 4))
    b = rng.standard_normal(15)
    x = SVD(A).solve(b)
    x_np, *_ = np.linalg.lstsq(A, b, rcond=None)
    np.testing.assert_allclose(x, x_np, atol=1e-10)


def test_pseudo_inverse_and_condition_number(rng):
    A = rng.standard_normal((9, 5))
    fac = SVD(A)
    np.testing.assert_allclose(fac.inverse, np.linalg.pinv(A), atol=1e-10)
    assert fac.condition_number == pytest.approx(np.linalg.cond(A), rel=1e-10)


def test_two_factor_accessors_unsupported(rng):
    fac = SVD(rng.standard_normal((3, 2)))
    with pytest.raises(UnsupportedOperationError):
        fac.factors
    with pytest.raises(NotImplementedError):
        fac.factor12()


def test_factor_is_idempotent_until_reset(rng):
    fac = SVD(rng.standard_normal((6, 4)))
    first = fac.factor().result
    assert fac.factor() is fac
    assert fac.result is first
    assert fac.is_factored

    fac.reset()
    assert not fac.is_factored
    second = fac.result
    assert second is not first
    np.testing.assert_array_equal(second.s, first.s)


def test_iterations_reported(rng):
    result = SVD(rng.standard_normal((6, 4))).result
    assert len(result.iterations) == 4
    assert all(1 <= it <= svd_module.MAX_ITER for it in result.iterations)


def test_non_convergence_is_flagged(rng, monkeypatch, caplog):
    monkeypatch.setattr(svd_module, "MAX_ITER", 1)
    A = rng.standard_normal((6, 4))

    with caplog.at_level(logging.ERROR, logger="matfact"):
        fac = SVD(A).factor()
    assert not fac.converged
    assert "not converged" in caplog.text

    with strict_mode():
        with pytest.raises(ConvergenceError) as exc:
            SVD(A).factor()
    assert exc.value.iterations == 1
    assert exc.value.block is not None


def test_wide_matrix_flagged(caplog):
    with caplog.at_level(logging.ERROR, logger="matfact"):
        SVD(np.ones((2, 3)))
    assert "ERROR @ SVD.init" in caplog.text
    with pytest.raises(DimensionError):
        SVD(np.ones((2, 3)), strict=True)


def test_factor_full_and_reduce(rng):
    A = rng.standard_normal((8, 5))
    u_s_v = svd(A)

    U, S, V = factor_full(u_s_v)
    np.testing.assert_allclose(U @ S @ V.T, A, atol=1e-10)

    Uk, sk, Vk = reduce(u_s_v, 2)
    assert Uk.shape == (8, 2) and sk.shape == (2,) and Vk.shape == (5, 2)
    A2 = Uk @ np.diag(sk) @ Vk.T
    # Eckart–Young: error of the best rank-2 approximation is s[2]
    assert np.linalg.norm(A - A2, 2) == pytest.approx(u_s_v[1][2], rel=1e-8)


def test_flip_signs_makes_diagonals_non_negative(rng):
    U, s, V = svd(rng.standard_normal((5, 5)))
    U2, V2 = U.copy(), V.copy()
    flip_signs(U2, V2)
    assert np.all(np.diag(U2) >= 0.0) and np.all(np.diag(V2) >= 0.0)
    np.testing.assert_allclose(np.abs(U2), np.abs(U))


def test_input_not_modified(rng):
    A = rng.standard_normal((5, 3))
    A0 = A.copy()
    SVD(A).factor()
    np.testing.assert_array_equal(A, A0)


# ---------------------------------------------------------------------
# Exactly singular matrices: zero diagonals in the bidiagonal form
# ---------------------------------------------------------------------

SINGULAR_MATRICES = {
    "zero_second_row": [[1.0, 2.0], [0.0, 0.0]],
    "rank_two_3x3": [[-1.0, 2.0, 1.0], [2.0, 1.0, -2.0], [-2.0, -2.0, 2.0]],
    "repeated_row_3x3": [[1.0, 1.0, 0.0], [0.0, 0.0, 1.0], [0.0, 0.0, 1.0]],
    "zero_3x3": np.zeros((3, 3)),
    "zero_column_4x3": [[1.0, 0.0, 2.0], [3.0, 0.0, 1.0], [0.0, 0.0, 4.0], [2.0, 0.0, 0.0]],
}


@pytest.mark.parametrize("name", sorted(SINGULAR_MATRICES))
def test_exactly_singular_matrices(name):
    A = np.array(SINGULAR_MATRICES[name], dtype=float)
    fac = SVD(A)
    U, s, V = fac.factor123()

    assert fac.converged
    assert np.all(np.isfinite(s))
    _check_svd(A, U, s, V)
    np.testing.assert_allclose(s, np.linalg.svd(A, compute_uv=False), atol=1e-10)
    assert s[-1] == 0.0


def test_zero_second_row_values():
    s = SVD(np.array([[1.0, 2.0], [0.0, 0.0]])).factor123()[1]
    np.testing.assert_allclose(s, [np.sqrt(5.0), 0.0], atol=1e-12)


def test_small_integer_matrices(rng):
    """Integer entries make exact zeros on the bidiagonal common."""
    for shape in [(2, 2), (3, 3), (4, 3), (4, 4)]:
        for _ in range(100):
            A = rng.integers(-2, 3, size=shape).astype(float)
            U, s, V = svd(A)
            assert np.all(np.isfinite(s)), A
            _check_svd(A, U, s, V, atol=1e-8)
            np.testing.assert_allclose(
                s, np.linalg.svd(A, compute_uv=False), atol=1e-8
            )


def test_zero_matrix_condition_number():
    fac = SVD(np.zeros((3, 3)))
    np.testing.assert_array_equal(fac.factor123()[1], 0.0)
    # s[0] / s[n-1] would be 0 / 0; the rank-deficient answer is taken instead
    assert fac.condition_number == float("inf")
