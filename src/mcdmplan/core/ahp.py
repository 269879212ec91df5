"""Analytic Hierarchy Process: criterion weights from a pairwise-comparison matrix.

Eigenvector approximation by column normalization + row averages, with the
Saaty consistency check (CI / RI).
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Sequence

import numpy as np

from mcdmplan.core.models import AHPResult, PairwiseMatrix

logger = logging.getLogger(__name__)

RANDOM_INDEX: dict[int, float] = {1: 0.0, 2: 0.0, 3: 0.58, 4: 0.90, 5: 1.12}
RANDOM_INDEX_DEFAULT = 1.24


class AHPError(ValueError):
    """Raised when the comparison matrix cannot be used."""


def _as_grid(matrix: PairwiseMatrix | Sequence[Sequence[float]]) -> list[list[float]]:
    rows = matrix.rows if isinstance(matrix, PairwiseMatrix) else matrix
    try:
        grid = [list(r) for r in rows]
    except TypeError as ex:
        raise AHPError(f"Matrix rows must be sequences: {ex}") from ex

    n = len(grid)
    if n == 0:
        raise AHPError("Matrix is empty")
    for i, row in enumerate(grid):
        if len(row) != n:
            raise AHPError(f"Matrix is not square: row {i} has {len(row)} entries, expected {n}")
        for j, val in enumerate(row):
            if isinstance(val, bool) or not isinstance(val, numbers.Real):
                raise AHPError(f"Non-numeric entry at ({i}, {j}): {val!r}")
            if not math.isfinite(val):
                raise AHPError(f"Non-finite entry at ({i}, {j}): {val!r}")
            row[j] = float(val)
    return grid


def random_index(n: int) -> float:
    return RANDOM_INDEX.get(n, RANDOM_INDEX_DEFAULT)


def compute_weights(matrix: PairwiseMatrix | Sequence[Sequence[float]]) -> AHPResult:
    """Compute normalized weights, lambda_max, CI and CR.

    Raises:
        AHPError: matrix empty, non-square or with non-numeric entries.
    """
    M = np.asarray(_as_grid(matrix), dtype=float)
    n = M.shape[0]

    col = M.sum(axis=0)
    norm = M / np.where(col == 0, 1.0, col)
    w = norm.mean(axis=1)

    lam = (M @ w) / np.where(w == 0, 1.0, w)
    lambda_max = float(lam.mean())
    ci = (lambda_max - n) / (n - 1) if n > 1 else 0.0
    ri = random_index(n)
    cr = ci / ri if ri else 0.0

    total = w.sum()
    normalized = tuple(float(x) for x in (w / total if total else w))

    logger.debug("AHP n=%d weights=%s lambda_max=%.6f CI=%.6f CR=%.6f", n, normalized, lambda_max, ci, cr)
    return AHPResult(weights=normalized, lambda_max=lambda_max, ci=ci, cr=cr)


def consistency_label(result: AHPResult) -> str:
    return "Consistent" if result.is_consistent else "Inconsistent"
