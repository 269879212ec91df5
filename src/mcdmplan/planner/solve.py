from __future__ import annotations

import logging
import math
from typing import Sequence

from mcdmplan.core.models import AllocationResult, AllocationStyle
from mcdmplan.defaults import CUMULATIVE_CEILING

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _style_fraction(style: AllocationStyle, rank: float) -> float:
    if style is AllocationStyle.AGGRESSIVE:
        return rank ** 0.8
    if style is AllocationStyle.CONSERVATIVE:
        return 0.15
    if style is AllocationStyle.BALANCED:
        return 0.35 + 0.5 * rank
    raise ValueError(f"Unknown allocation style: {style!r}")


def solve_allocation_heuristic(
    coeffs: Sequence[float],
    lower: Sequence[float],
    upper: Sequence[float],
    *,
    maximize: bool = True,
    style: AllocationStyle = AllocationStyle.BALANCED,
    ceiling: Sequence[float] = CUMULATIVE_CEILING,
) -> AllocationResult:
    """Greedy single-pass monthly allocation (LP-like, not optimal).

    For each month, a target inside [lower, upper] is picked from the
    coefficient's normalized rank:
        rank = (coeff / max_abs + 1) / 2        # [-max_abs, max_abs] -> [0, 1]
        aggressive:   lb + (ub - lb) * rank ** 0.8
        conservative: lb + (ub - lb) * 0.15
        balanced:     lb + (ub - lb) * (0.35 + 0.5 * rank)
        minimize:     lb + (ub - lb) * (1 - rank)   (replaces the style formula)

    The target is then cut back to the cumulative ceiling (never below lb),
    clamped to [lb, ub] and rounded half up.

    Note: minimize mode deliberately overrides every style, so a conservative
    minimize run never lands on its 0.15 fraction.

    When ub < lb the upper bound wins (capacity is the physical limit).

    Raises:
        ValueError: coeffs/lower/upper lengths differ or ceiling is shorter.
    """
    n = len(coeffs)
    if len(lower) != n or len(upper) != n:
        raise ValueError(
            f"Length mismatch: coeffs={n}, lower={len(lower)}, upper={len(upper)}"
        )
    if len(ceiling) < n:
        raise ValueError(f"Ceiling schedule has {len(ceiling)} entries, need {n}")

    style = AllocationStyle(style)
    max_abs = max([abs(float(c)) for c in coeffs] + [1.0])

    solution: list[int] = []
    cumulative = 0
    for i in range(n):
        lb = float(lower[i])
        ub = float(upper[i])
        rank = (float(coeffs[i]) / max_abs + 1.0) / 2.0

        if maximize:
            x = lb + (ub - lb) * _style_fraction(style, rank)
        else:
            x = lb + (ub - lb) * (1.0 - rank)

        if cumulative + x > ceiling[i]:
            x = max(lb, ceiling[i] - cumulative)

        x = min(ub, max(lb, x))
        qty = _round_half_up(x)
        solution.append(qty)
        cumulative += qty

    objective = sum(float(c) * q for c, q in zip(coeffs, solution))
    logger.debug(
        "Heuristic style=%s maximize=%s total=%d objective=%.2f",
        style.value,
        maximize,
        cumulative,
        objective,
    )
    return AllocationResult(allocation=tuple(solution), objective=objective)
