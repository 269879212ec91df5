from __future__ import annotations

from typing import Sequence

from mcdmplan.core.models import Objectives
from mcdmplan.defaults import MONTHS


def _check_lengths(allocation: Sequence[float], **series: Sequence[float]) -> None:
    n = len(allocation)
    for name, values in series.items():
        if len(values) != n:
            raise ValueError(f"Length mismatch: {name}={len(values)}, allocation={n}")


def evaluate_objectives(
    turnover: Sequence[float],
    cost: Sequence[float],
    productivity: Sequence[float],
    allocation: Sequence[float],
) -> Objectives:
    """Z1 = sum(T_i * x_i), Z2 = sum(C_i * x_i), Z3 = sum(P_i * x_i)."""
    _check_lengths(allocation, turnover=turnover, cost=cost, productivity=productivity)
    return Objectives(
        z1=sum(t * x for t, x in zip(turnover, allocation)),
        z2=sum(c * x for c, x in zip(cost, allocation)),
        z3=sum(p * x for p, x in zip(productivity, allocation)),
    )


def monthly_contributions(
    turnover: Sequence[float],
    cost: Sequence[float],
    productivity: Sequence[float],
    allocation: Sequence[float],
) -> list[dict]:
    _check_lengths(allocation, turnover=turnover, cost=cost, productivity=productivity)
    rows: list[dict] = []
    for i, x in enumerate(allocation):
        rows.append(
            {
                "month": MONTHS[i] if i < len(MONTHS) else str(i + 1),
                "planned": x,
                "turnover": turnover[i] * x,
                "cost": cost[i] * x,
                "productivity": productivity[i] * x,
            }
        )
    return rows
