#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Time each factorization's solver against numpy.linalg.

    python -m matfact.benchmark
"""

import time

import numpy as np
import pandas as pd

from .cholesky import Cholesky
from .inverse import Inverse
from .lu import LU
from .qr import QR, rank_revealing_qr
from .svd import SVD

REPEATS = 3  # best of 3 runs
SIZES = [(50, 50), (200, 200), (400, 100)]

COLUMNS = ["kernel", "size", "sec", "sec/NumPy", "residual/NumPy", "orth_err"]


def wall(f, *args, **kwargs):
    t0 = time.perf_counter()
    f(*args, **kwargs)
    return time.perf_counter() - t0


def _best(f, repeats):
    return min(wall(f) for _ in range(repeats))


def _ortho(Q):
    k = Q.shape[1]
    return float(np.linalg.norm(Q.T @ Q - np.eye(k), np.inf))


def run_benchmark(sizes=SIZES, repeats=REPEATS, seed=0) -> pd.DataFrame:
    """
    Benchmark the solvers on random m×n systems.

    Square sizes run every kernel; tall sizes run the least-squares ones
    (QR, rank-revealing QR, SVD). Residuals are reported relative to
    ``numpy.linalg.lstsq`` and ``orth_err`` is ‖QᵀQ – I‖∞ (NaN where no
    orthogonal factor is formed).

    Returns
    -------
    pandas.DataFrame with columns ``COLUMNS``.
    """
    rng = np.random.default_rng(seed)
    records = []
    for m, n in sizes:
        A = rng.standard_normal((m, n))
        b = rng.standard_normal(m)
        size = f"{m}×{n}"

        # reference
        t_np = _best(lambda: np.linalg.lstsq(A, b, rcond=None), repeats)
        x_ref, *_ = np.linalg.lstsq(A, b, rcond=None)
        r_ref = np.linalg.norm(A @ x_ref - b, np.inf)

        def record(kernel, t, x, ortho=np.nan):
            r = np.linalg.norm(A @ x - b, np.inf)
            with np.errstate(divide="ignore", invalid="ignore"):
                records.append((kernel, size, t, t / t_np, r / r_ref, ortho))

        if m == n:
            t = _best(lambda: LU(A).solve(b), repeats)
            record("LU", t, LU(A).solve(b))

            t = _best(lambda: Inverse(A).solve(b), repeats)
            record("GJ-Inverse", t, Inverse(A).solve(b))

            # Cholesky needs an SPD system: use the normal equations
            S = A.T @ A + np.eye(n)
            S = (S + S.T) / 2.0
            c = A.T @ b
            t = _best(lambda: Cholesky(S).factor().solve(c), repeats)
            x = Cholesky(S).factor().solve(c)
            r = np.linalg.norm(S @ x - c, np.inf)
            r_s = np.linalg.norm(S @ np.linalg.solve(S, c) - c, np.inf)
            with np.errstate(divide="ignore", invalid="ignore"):
                records.append(("Cholesky", size, t, t / t_np, r / r_s, np.nan))

        # ---------- Householder QR ---------------------------------
        t = _best(lambda: QR(A).solve(b), repeats)
        record("HH-QR", t, QR(A).solve(b), _ortho(QR(A).compute_q()))

        t = _best(lambda: rank_revealing_qr(A, need_q=False).solve(b), repeats)
        rr = rank_revealing_qr(A)
        record("RR-QR", t, rr.solve(b), _ortho(rr.compute_q()))

        # ---------- Golub-Kahan-Reinsch SVD -------------------------
        t = _best(lambda: SVD(A).solve(b), repeats)
        svd = SVD(A)
        U, _s, _V = svd.factor123()
        record("SVD", t, svd.solve(b), _ortho(U))

    return pd.DataFrame(records, columns=COLUMNS)


if __name__ == "__main__":
    df = run_benchmark()
    print(df.to_string(index=False))
    df.to_csv("bench_results.csv", index=False)
