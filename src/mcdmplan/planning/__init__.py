from __future__ import annotations

from mcdmplan.planning.comparison import balance_score, build_pareto_points, comparison_rows
from mcdmplan.planning.orchestrator import (
    StrategyOrchestrator,
    baseline_objectives,
    composite_coefficients,
    compute_improvements,
)
from mcdmplan.planning.session import PlanningSession

__all__ = [
    "PlanningSession",
    "StrategyOrchestrator",
    "balance_score",
    "baseline_objectives",
    "build_pareto_points",
    "comparison_rows",
    "composite_coefficients",
    "compute_improvements",
]
