from __future__ import annotations

import io
import math
import logging
import re
from typing import Mapping

import pandas as pd

from mcdmplan.core.models import PeriodSeries, StrategyKey, StrategyResult
from mcdmplan.defaults import MONTHS, PERIODS, SERIES_NAMES
from mcdmplan.planner.objectives import monthly_contributions

logger = logging.getLogger(__name__)

EXPORT_COLUMNS: list[str] = [
    "Month",
    "PlannedProduction",
    "TurnoverContribution",
    "CostContribution",
    "ProductivityContribution",
]

# substring -> series; a header may match more than one entry
HEADER_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("turnover", "turnover"),
    ("sales", "turnover"),
    ("cost", "cost"),
    ("product", "productivity"),
    ("order", "orders"),
    ("capacity", "capacity"),
    ("cap", "capacity"),
)

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class DatasetParseError(ValueError):
    """CSV content could not be turned into a dataset."""


def header_targets(header: str) -> list[str]:
    """Series fed by a CSV column, by case-insensitive substring match."""
    h = str(header or "").strip().lower()
    targets: list[str] = []
    for keyword, series in HEADER_KEYWORDS:
        if keyword in h and series not in targets:
            targets.append(series)
    return targets


def parse_number(value) -> float:
    """Best-effort numeric parse: leading number of the cell, else 0.

    "12.5" -> 12.5, " 7 units" -> 7.0, "abc" -> 0.0, "" -> 0.0, "1e999" -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        m = _LEADING_NUMBER_RE.match(str(value).strip())
        if not m:
            return 0.0
        number = float(m.group(0))
    return number if math.isfinite(number) else 0.0


def _decode(content: bytes | str) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as ex:
        raise DatasetParseError(f"File is not UTF-8 text: {ex}") from ex


def read_dataset_csv(content: bytes | str, *, base: PeriodSeries) -> PeriodSeries:
    """Read up to 12 data rows from CSV content on top of ``base``.

    Months without a data row keep the value from ``base``. The result is
    built completely before returning, so a failure never leaves a
    half-applied dataset.

    Raises:
        DatasetParseError: empty/undecodable content, unreadable CSV, or no
            recognised column in the header.
    """
    text = _decode(content)
    if not text.strip():
        raise DatasetParseError("File is empty")

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
            index_col=False,
            nrows=PERIODS,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as ex:
        raise DatasetParseError(f"Could not read CSV: {ex}") from ex

    mapping = {col: header_targets(col) for col in df.columns}
    if not any(mapping.values()):
        raise DatasetParseError(f"No recognised columns in header: {list(df.columns)}")

    new_data = base.as_dict()
    for r_idx, (_, row) in enumerate(df.iterrows()):
        if r_idx >= PERIODS:
            break
        for col, targets in mapping.items():
            val = parse_number(row[col])
            for series in targets:
                new_data[series][r_idx] = val

    logger.info("CSV dataset loaded: %d rows, columns=%s", min(len(df), PERIODS), list(df.columns))
    return PeriodSeries(**{name: new_data[name] for name in SERIES_NAMES})


def strategy_table(data: PeriodSeries, result: StrategyResult) -> pd.DataFrame:
    rows = monthly_contributions(data.turnover, data.cost, data.productivity, result.allocation)
    return pd.DataFrame(
        {
            "Month": [MONTHS[i] for i in range(len(rows))],
            "PlannedProduction": [int(r["planned"]) for r in rows],
            "TurnoverContribution": [r["turnover"] for r in rows],
            "CostContribution": [r["cost"] for r in rows],
            "ProductivityContribution": [r["productivity"] for r in rows],
        },
        columns=EXPORT_COLUMNS,
    )


def _summary_lines(result: StrategyResult) -> list[tuple[str, float]]:
    return [
        ("TotalTurnover", result.turnover_val),
        ("TotalCost", result.cost_val),
        ("TotalProductivity", result.productivity_val),
    ]


def export_strategy_csv(data: PeriodSeries, result: StrategyResult) -> str:
    body = strategy_table(data, result).to_csv(index=False, float_format="%.2f", lineterminator="\n")
    summary = "".join(f"{label},{value:.2f}\n" for label, value in _summary_lines(result))
    return f"{body}\n{summary}"


def export_workbook(data: PeriodSeries, results: Mapping[StrategyKey, StrategyResult]) -> bytes:
    """One sheet per computed strategy, same layout as the CSV export."""
    computed = [(key, results[key]) for key in StrategyKey if results.get(key) is not None]
    if not computed:
        raise ValueError("No results to export")

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        for key, result in computed:
            table = strategy_table(data, result)
            table.to_excel(writer, sheet_name=key.value, index=False)
            summary = pd.DataFrame(
                [(label, round(value, 2)) for label, value in _summary_lines(result)],
                columns=["Metric", "Value"],
            )
            summary.to_excel(writer, sheet_name=key.value, index=False, startrow=len(table) + 2)
    bio.seek(0)
    return bio.read()
