"""Derived comparison views over the computed strategy results."""

from __future__ import annotations

import math
from typing import Mapping

from mcdmplan.core.models import ParetoPoint, StrategyKey, StrategyResult

SINGLE_OBJECTIVES: tuple[StrategyKey, ...] = (
    StrategyKey.TURNOVER,
    StrategyKey.COST,
    StrategyKey.PRODUCTIVITY,
)


def _millions(value: float) -> float:
    return value / 1e6


def build_pareto_points(results: Mapping[StrategyKey, StrategyResult]) -> list[ParetoPoint]:
    points: list[ParetoPoint] = []
    for key in StrategyKey:
        res = results.get(key)
        if res is None:
            continue
        point = ParetoPoint(
            strategy=key,
            name=key.label,
            turnover_m=_millions(res.turnover_val),
            cost_m=_millions(res.cost_val),
            productivity_m=_millions(res.productivity_val),
            weights=res.weights,
            improvements=res.improvements,
        )
        if math.isnan(point.turnover_m):
            continue
        points.append(point)
    # ascending turnover keeps the frontier line continuous
    return sorted(points, key=lambda p: p.turnover_m)


def comparison_rows(results: Mapping[StrategyKey, StrategyResult]) -> list[dict]:
    rows: list[dict] = []
    for key in StrategyKey:
        res = results.get(key)
        if res is None:
            continue
        rows.append(
            {
                "strategy": key.value,
                "name": key.label,
                "turnover_m": round(_millions(res.turnover_val), 2),
                "cost_m": round(_millions(res.cost_val), 2),
                "productivity_m": round(_millions(res.productivity_val), 2),
            }
        )
    return rows


def balance_score(results: Mapping[StrategyKey, StrategyResult]) -> float | None:
    """Mean relative deviation of the single-objective plans from the multi-objective plan.

    Lower means the multi-objective plan sits closer to every single-objective
    extreme, i.e. it is more balanced. Strategies not yet computed count as
    infinitely far away. Returns None without a multi-objective result.
    """
    multi = results.get(StrategyKey.MULTI_OBJECTIVE)
    if multi is None:
        return None
    reference = [multi.turnover_val or 1.0, multi.cost_val or 1.0, multi.productivity_val or 1.0]

    scores: list[float] = []
    for key in SINGLE_OBJECTIVES:
        res = results.get(key)
        values = [0.0, 0.0, 0.0] if res is None else [res.turnover_val, res.cost_val, res.productivity_val]
        if not any(values):
            scores.append(math.inf)
            continue
        diffs = [abs((v - ref) / ref) for v, ref in zip(values, reference)]
        scores.append(sum(diffs) / len(diffs))
    return sum(scores) / len(scores)
