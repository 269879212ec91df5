"""Fixed tables and unit conventions for the production-planning dashboard.

Raw series units:
- turnover:     thousands of RON per unit produced
- cost:         RON per unit produced
- productivity: pieces/worker per unit produced
- orders:       units (monthly lower bound)
- capacity:     units (monthly upper bound)
"""

from __future__ import annotations

MONTHS: tuple[str, ...] = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
PERIODS = len(MONTHS)

SERIES_NAMES: tuple[str, ...] = ("turnover", "cost", "productivity", "orders", "capacity")
CRITERIA: tuple[str, ...] = ("Turnover", "Cost", "Productivity")

DEFAULT_DATA: dict[str, tuple[float, ...]] = {
    "turnover": (1450, 1320, 1167, 1820, 1097, 1085, 1094, 1030, 1007, 1203, 1119, 928),
    "cost": (80, 75, 70, 65, 60, 55, 50, 45, 40, 35, 30, 25),
    "productivity": (9676, 10924, 12131, 11081, 11625, 11499, 11082, 11127, 10943, 13441, 12180, 10342),
    "orders": (
        2548556, 2550855, 2735389, 2503787, 2750643, 2624632,
        2563748, 2563748, 2451276, 2992994, 2761731, 2258991,
    ),
    "capacity": (
        2700000, 2500000, 2700000, 2800000, 2800000, 2700000,
        2800000, 3000000, 2800000, 3000000, 2800000, 2100000,
    ),
}

DEFAULT_PAIRWISE: tuple[tuple[float, ...], ...] = (
    (1.0, 0.2, 0.333),
    (5.0, 1.0, 5.0),
    (3.0, 0.2, 1.0),
)

# Total plant throughput allowed up to (and including) each month.
# Kept as a fixed schedule: it is NOT recomputed from the editable capacity series.
CUMULATIVE_CEILING: tuple[int, ...] = (
    2_700_000, 5_200_000, 7_900_000, 10_700_000, 13_500_000, 16_200_000,
    19_000_000, 22_000_000, 24_800_000, 27_800_000, 30_600_000, 32_700_000,
)

TURNOVER_UNIT_SCALE = 1000  # thousands -> RON
COST_UNIT_SCALE = 1
PRODUCTIVITY_UNIT_SCALE = 1
# Brings cost to the same magnitude as scaled turnover inside the composite coefficient.
COMPOSITE_COST_SCALE = 1000

TURNOVER_STEP = 10
COST_STEP = 10
PRODUCTIVITY_STEP = 100  # 10x the nominal step

FALLBACK_WEIGHTS: tuple[float, float, float] = (0.132, 0.612, 0.256)
EQUAL_WEIGHTS: tuple[float, float, float] = (1 / 3, 1 / 3, 1 / 3)

CONSISTENCY_THRESHOLD = 0.10
