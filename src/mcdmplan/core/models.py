from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from mcdmplan.defaults import (
    CONSISTENCY_THRESHOLD,
    DEFAULT_DATA,
    DEFAULT_PAIRWISE,
    PERIODS,
    SERIES_NAMES,
)


class AllocationStyle(str, Enum):
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"


class StrategyKey(str, Enum):
    TURNOVER = "turnover"
    COST = "cost"
    PRODUCTIVITY = "productivity"
    MULTI_OBJECTIVE = "multiObjective"

    @property
    def label(self) -> str:
        return STRATEGY_LABELS[self]


STRATEGY_LABELS: dict[StrategyKey, str] = {
    StrategyKey.TURNOVER: "Turnover Optimization",
    StrategyKey.COST: "Cost Minimization",
    StrategyKey.PRODUCTIVITY: "Productivity Maximization",
    StrategyKey.MULTI_OBJECTIVE: "Multi-Objective (Pareto Optimal)",
}


@dataclass(frozen=True)
class PeriodSeries:
    """Monthly input data. All five series are aligned by month index."""
    turnover: tuple[float, ...]
    cost: tuple[float, ...]
    productivity: tuple[float, ...]
    orders: tuple[float, ...]
    capacity: tuple[float, ...]

    def __post_init__(self) -> None:
        for name in SERIES_NAMES:
            values = tuple(float(v) for v in getattr(self, name))
            if len(values) != PERIODS:
                raise ValueError(f"{name}: expected {PERIODS} values, got {len(values)}")
            object.__setattr__(self, name, values)

    @classmethod
    def default(cls) -> PeriodSeries:
        return cls(**DEFAULT_DATA)

    def series(self, name: str) -> tuple[float, ...]:
        if name not in SERIES_NAMES:
            raise ValueError(f"Unknown series: {name!r}")
        return getattr(self, name)

    def with_value(self, name: str, month: int, value: float) -> PeriodSeries:
        values = list(self.series(name))
        if not 0 <= month < PERIODS:
            raise ValueError(f"Month index out of range: {month}")
        values[month] = float(value)
        return replace(self, **{name: tuple(values)})

    def as_dict(self) -> dict[str, list[float]]:
        return {name: list(getattr(self, name)) for name in SERIES_NAMES}


@dataclass(frozen=True)
class PairwiseMatrix:
    """3x3 criteria comparison (Turnover, Cost, Productivity), reciprocal on edit."""
    rows: tuple[tuple[float, ...], ...]

    @classmethod
    def default(cls) -> PairwiseMatrix:
        return cls(rows=tuple(tuple(r) for r in DEFAULT_PAIRWISE))

    @property
    def size(self) -> int:
        return len(self.rows)

    def with_entry(self, i: int, j: int, value: float) -> PairwiseMatrix:
        n = self.size
        if not (0 <= i < n and 0 <= j < n):
            raise ValueError(f"Matrix index out of range: ({i}, {j})")
        grid = [list(r) for r in self.rows]
        grid[i][j] = float(value)
        if i != j:
            grid[j][i] = 1.0 / float(value)
        return PairwiseMatrix(rows=tuple(tuple(r) for r in grid))

    def as_lists(self) -> list[list[float]]:
        return [list(r) for r in self.rows]


@dataclass(frozen=True)
class AHPResult:
    weights: tuple[float, ...]
    lambda_max: float
    ci: float
    cr: float
    is_fallback: bool = False

    @property
    def is_consistent(self) -> bool:
        return self.cr < CONSISTENCY_THRESHOLD


@dataclass(frozen=True)
class Objectives:
    """Raw objective totals Z1 (turnover), Z2 (cost), Z3 (productivity)."""
    z1: float
    z2: float
    z3: float


@dataclass(frozen=True)
class AllocationResult:
    allocation: tuple[int, ...]
    objective: float


@dataclass(frozen=True)
class Improvements:
    """Percent improvement vs the order-fulfillment baseline (2 decimals)."""
    turnover: float
    cost: float
    productivity: float

    def as_display(self) -> dict[str, str]:
        return {
            "turnover": f"{self.turnover:.2f}",
            "cost": f"{self.cost:.2f}",
            "productivity": f"{self.productivity:.2f}",
        }


@dataclass(frozen=True)
class StrategyResult:
    strategy: StrategyKey
    allocation: tuple[int, ...]
    turnover_val: float
    cost_val: float
    productivity_val: float
    improvements: Improvements | None = None
    weights: tuple[float, ...] | None = None


@dataclass(frozen=True)
class ParetoPoint:
    strategy: StrategyKey
    name: str
    turnover_m: float
    cost_m: float
    productivity_m: float
    weights: tuple[float, ...] | None = field(default=None)
    improvements: Improvements | None = field(default=None)
