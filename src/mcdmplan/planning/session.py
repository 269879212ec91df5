from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from mcdmplan.core.ahp import AHPError, compute_weights, consistency_label
from mcdmplan.core.models import (
    AHPResult,
    PairwiseMatrix,
    ParetoPoint,
    PeriodSeries,
    StrategyKey,
    StrategyResult,
)
from mcdmplan.data.csv_io import DatasetParseError, export_strategy_csv, export_workbook, read_dataset_csv
from mcdmplan.defaults import (
    COST_STEP,
    EQUAL_WEIGHTS,
    FALLBACK_WEIGHTS,
    PRODUCTIVITY_STEP,
    TURNOVER_STEP,
)
from mcdmplan.planning.comparison import balance_score, build_pareto_points
from mcdmplan.planning.orchestrator import StrategyOrchestrator

logger = logging.getLogger(__name__)

EDIT_STEPS: dict[str, float] = {
    "turnover": TURNOVER_STEP,
    "cost": COST_STEP,
    "productivity": PRODUCTIVITY_STEP,
}


def parse_pairwise_value(raw) -> float:
    """Cell text -> comparison value. Empty, non-numeric, zero or non-finite -> 1."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(value) or value == 0:
        return 1.0
    return value


def _freeze(results: Mapping[StrategyKey, StrategyResult]) -> Mapping[StrategyKey, StrategyResult]:
    return MappingProxyType(dict(results))


@dataclass(frozen=True)
class PlanningSession:
    """Snapshot of one user's dashboard state.

    Every operation returns a new snapshot; a failed operation returns a
    snapshot with the previous data/results and an error ``message``.
    """

    data: PeriodSeries = field(default_factory=PeriodSeries.default)
    pairwise: PairwiseMatrix = field(default_factory=PairwiseMatrix.default)
    ahp: AHPResult | None = None
    results: Mapping[StrategyKey, StrategyResult] = field(default_factory=lambda: _freeze({}))
    message: str = ""
    ok: bool = True

    def _with_message(self, message: str, *, ok: bool = True, **changes) -> PlanningSession:
        return replace(self, message=message, ok=ok, **changes)

    # ---------------------- Data edits ----------------------

    def step_value(self, series: str, month: int, direction: int) -> PlanningSession:
        """+/- one step on an editable series, floored at 0."""
        step = EDIT_STEPS.get(series)
        if step is None:
            raise ValueError(f"Series {series!r} has no step edit")
        delta = step if direction >= 0 else -step
        current = self.data.series(series)[month]
        return self.set_value(series, month, current + delta)

    def set_value(self, series: str, month: int, value: float) -> PlanningSession:
        return self._with_message("", data=self.data.with_value(series, month, max(0.0, float(value))))

    def set_pairwise(self, i: int, j: int, raw) -> PlanningSession:
        return self._with_message("", pairwise=self.pairwise.with_entry(i, j, parse_pairwise_value(raw)))

    def reset(self) -> PlanningSession:
        return PlanningSession(message="Dataset and comparison matrix reset to defaults.")

    # ---------------------- AHP ----------------------

    def compute_ahp(self) -> PlanningSession:
        """Compute weights from the current matrix.

        On a malformed matrix the equal-weights fallback is stored (flagged)
        so downstream strategies keep working.
        """
        try:
            res = compute_weights(self.pairwise)
        except AHPError as ex:
            logger.warning("AHP failed, using equal weights: %s", ex)
            fallback = AHPResult(weights=EQUAL_WEIGHTS, lambda_max=0.0, ci=0.0, cr=0.0, is_fallback=True)
            return self._with_message(f"AHP error: {ex}", ok=False, ahp=fallback)

        if not res.is_consistent:
            logger.warning("Pairwise matrix is inconsistent (CR=%.3f)", res.cr)
        return self._with_message(f"AHP weights computed - CR: {res.cr:.3f} {consistency_label(res)}", ahp=res)

    # ---------------------- Optimization ----------------------

    def run_optimization(
        self,
        strategy: StrategyKey | str,
        orchestrator: StrategyOrchestrator | None = None,
    ) -> PlanningSession:
        """Run one strategy and store its result in its own slot.

        Without an AHP result, only a multi-objective run stores the fallback
        weights as the session's AHP result. Single-objective runs do not use
        weights and leave ``ahp`` unset.
        """
        strategy = StrategyKey(strategy)
        orchestrator = orchestrator or StrategyOrchestrator()

        ahp = self.ahp
        if ahp is None:
            # Persist the fallback so the displayed weights match the ones used.
            ahp = AHPResult(weights=FALLBACK_WEIGHTS, lambda_max=0.0, ci=0.0, cr=0.0, is_fallback=True)

        outcome = orchestrator.solve(strategy, self.data, ahp.weights)
        if outcome["status"] != "success":
            return self._with_message(outcome["message"], ok=False)

        results = dict(self.results)
        results[strategy] = outcome["result"]
        changes: dict = {"results": _freeze(results)}
        if strategy is StrategyKey.MULTI_OBJECTIVE and self.ahp is None:
            changes["ahp"] = ahp
        return self._with_message(outcome["message"], **changes)

    # ---------------------- Import / export ----------------------

    def import_csv(self, content: bytes | str) -> PlanningSession:
        try:
            data = read_dataset_csv(content, base=self.data)
        except DatasetParseError as ex:
            logger.warning("CSV rejected: %s", ex)
            return self._with_message(f"CSV parse error: {ex}", ok=False)
        return self._with_message("CSV loaded successfully.", data=data)

    def export_csv(self, strategy: StrategyKey | str) -> str | None:
        res = self.results.get(StrategyKey(strategy))
        if res is None:
            return None
        return export_strategy_csv(self.data, res)

    def export_workbook(self) -> bytes | None:
        if not self.results:
            return None
        return export_workbook(self.data, self.results)

    # ---------------------- Derived views ----------------------

    def pareto_points(self) -> list[ParetoPoint]:
        return build_pareto_points(self.results)

    def balance_score(self) -> float | None:
        return balance_score(self.results)
