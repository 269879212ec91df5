from __future__ import annotations

import logging
from typing import Sequence

from mcdmplan.core.models import (
    AllocationStyle,
    Improvements,
    Objectives,
    PeriodSeries,
    StrategyKey,
    StrategyResult,
)
from mcdmplan.defaults import (
    COMPOSITE_COST_SCALE,
    COST_UNIT_SCALE,
    CUMULATIVE_CEILING,
    FALLBACK_WEIGHTS,
    PRODUCTIVITY_UNIT_SCALE,
    TURNOVER_UNIT_SCALE,
)
from mcdmplan.planner.objectives import evaluate_objectives
from mcdmplan.planner.solve import solve_allocation_heuristic

logger = logging.getLogger(__name__)


def composite_coefficients(data: PeriodSeries, weights: Sequence[float]) -> list[float]:
    """Z = w1*Z1 - w2*Z2 + w3*Z3 per month, with turnover and cost in RON magnitude."""
    w1, w2, w3 = (float(w) for w in weights)
    return [
        w1 * t * TURNOVER_UNIT_SCALE - w2 * c * COMPOSITE_COST_SCALE + w3 * p * PRODUCTIVITY_UNIT_SCALE
        for t, c, p in zip(data.turnover, data.cost, data.productivity)
    ]


def scaled_totals(objectives: Objectives) -> tuple[float, float, float]:
    """(turnover RON, cost RON, productivity) from raw Z1/Z2/Z3."""
    return (
        objectives.z1 * TURNOVER_UNIT_SCALE,
        objectives.z2 * COST_UNIT_SCALE,
        objectives.z3 * PRODUCTIVITY_UNIT_SCALE,
    )


def baseline_objectives(data: PeriodSeries) -> Objectives:
    """Objectives of the plan that produces exactly the ordered quantities."""
    return evaluate_objectives(data.turnover, data.cost, data.productivity, data.orders)


def _pct(numerator: float, baseline: float) -> float:
    if not baseline:
        return 0.0
    return round(numerator / baseline * 100.0, 2)


def compute_improvements(actual: tuple[float, float, float], baseline: tuple[float, float, float]) -> Improvements:
    """Percent change vs baseline; cost sign flipped (lower is better). Zero baseline -> 0.00."""
    turnover, cost, productivity = actual
    base_t, base_c, base_p = baseline
    return Improvements(
        turnover=_pct(turnover - base_t, base_t),
        cost=_pct(base_c - cost, base_c),
        productivity=_pct(productivity - base_p, base_p),
    )


class StrategyOrchestrator:
    """Builds coefficients per strategy, runs the heuristic and evaluates the plan.

    Stateless: every call reads only its arguments.
    """

    def __init__(self, ceiling: Sequence[float] = CUMULATIVE_CEILING):
        self.ceiling = tuple(ceiling)

    def run(
        self,
        strategy: StrategyKey | str,
        data: PeriodSeries,
        weights: Sequence[float] | None = None,
    ) -> StrategyResult:
        strategy = StrategyKey(strategy)
        if strategy is StrategyKey.TURNOVER:
            return self._single(
                strategy, data, coeffs=data.turnover, maximize=True, style=AllocationStyle.AGGRESSIVE
            )
        if strategy is StrategyKey.COST:
            # Negated cost; the minimize branch of the heuristic inverts the rank again.
            return self._single(
                strategy,
                data,
                coeffs=[-c for c in data.cost],
                maximize=False,
                style=AllocationStyle.CONSERVATIVE,
            )
        if strategy is StrategyKey.PRODUCTIVITY:
            return self._single(
                strategy, data, coeffs=data.productivity, maximize=True, style=AllocationStyle.BALANCED
            )
        if strategy is StrategyKey.MULTI_OBJECTIVE:
            return self._multi_objective(data, weights if weights is not None else FALLBACK_WEIGHTS)
        raise ValueError(f"Unknown strategy: {strategy!r}")

    def solve(
        self,
        strategy: StrategyKey | str,
        data: PeriodSeries,
        weights: Sequence[float] | None = None,
    ) -> dict:
        """Run one strategy and report instead of raising.

        Returns:
            dict with keys: status ("success"|"error"), message, result (StrategyResult | None)
        """
        try:
            result = self.run(strategy, data, weights)
        except Exception as e:
            logger.exception("Optimization failed for strategy=%s", strategy)
            return {
                "status": "error",
                "message": f"Optimization failed: {e}",
                "result": None,
            }
        logger.info(
            "Strategy %s done: turnover=%.2f cost=%.2f productivity=%.2f",
            result.strategy.value,
            result.turnover_val,
            result.cost_val,
            result.productivity_val,
        )
        return {
            "status": "success",
            "message": f"{result.strategy.value} optimization complete.",
            "result": result,
        }

    def _single(
        self,
        strategy: StrategyKey,
        data: PeriodSeries,
        *,
        coeffs: Sequence[float],
        maximize: bool,
        style: AllocationStyle,
    ) -> StrategyResult:
        solved = solve_allocation_heuristic(
            coeffs, data.orders, data.capacity, maximize=maximize, style=style, ceiling=self.ceiling
        )
        objectives = evaluate_objectives(data.turnover, data.cost, data.productivity, solved.allocation)
        turnover_val, cost_val, productivity_val = scaled_totals(objectives)
        return StrategyResult(
            strategy=strategy,
            allocation=solved.allocation,
            turnover_val=turnover_val,
            cost_val=cost_val,
            productivity_val=productivity_val,
        )

    def _multi_objective(self, data: PeriodSeries, weights: Sequence[float]) -> StrategyResult:
        weights = tuple(float(w) for w in weights)
        if len(weights) != 3:
            raise ValueError(f"Expected 3 weights, got {len(weights)}")

        combined = composite_coefficients(data, weights)
        # Composite coefficients only rank the months; reported values come from Z1/Z2/Z3.
        solved = solve_allocation_heuristic(
            combined,
            data.orders,
            data.capacity,
            maximize=True,
            style=AllocationStyle.BALANCED,
            ceiling=self.ceiling,
        )
        actual = scaled_totals(
            evaluate_objectives(data.turnover, data.cost, data.productivity, solved.allocation)
        )
        baseline = scaled_totals(baseline_objectives(data))
        return StrategyResult(
            strategy=StrategyKey.MULTI_OBJECTIVE,
            allocation=solved.allocation,
            turnover_val=actual[0],
            cost_val=actual[1],
            productivity_val=actual[2],
            improvements=compute_improvements(actual, baseline),
            weights=weights,
        )
