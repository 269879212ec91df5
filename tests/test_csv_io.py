"""Tests for dataset CSV import and result export."""

import io
import math

import openpyxl
import pytest

from mcdmplan.core.models import PeriodSeries, StrategyKey, StrategyResult
from mcdmplan.data.csv_io import (
    DatasetParseError,
    export_strategy_csv,
    export_workbook,
    header_targets,
    parse_number,
    read_dataset_csv,
)


def _csv(header: str, rows: list[str]) -> str:
    return "\n".join([header, *rows]) + "\n"


def _result(strategy=StrategyKey.TURNOVER, value: int = 1) -> StrategyResult:
    return StrategyResult(
        strategy=strategy,
        allocation=(value,) * 12,
        turnover_val=123.456,
        cost_val=7.0,
        productivity_val=0.005,
    )


@pytest.fixture()
def base() -> PeriodSeries:
    return PeriodSeries.default()


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Turnover", ["turnover"]),
        ("  SALES (kRON) ", ["turnover"]),
        ("Cost", ["cost"]),
        ("Productivity", ["productivity"]),
        ("Production Cost", ["cost", "productivity"]),
        ("Orders", ["orders"]),
        ("Capacity", ["capacity"]),
        ("Max Cap", ["capacity"]),
        ("Month", []),
    ],
)
def test_header_targets(header, expected):
    assert header_targets(header) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("12.5", 12.5), (" 7 units", 7.0), ("-3", -3.0), ("1e3", 1000.0), (".5", 0.5), ("abc", 0.0), ("", 0.0),
     (None, 0.0), (float("nan"), 0.0), (4, 4.0), ("1e999", 0.0), ("-1e999 units", 0.0), (float("inf"), 0.0)],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_read_full_dataset(base):
    rows = [f"{i},{i * 2},{i * 3},{i * 4},{i * 5}" for i in range(1, 13)]
    data = read_dataset_csv(_csv("Sales,Cost,Productivity,Orders,Capacity", rows), base=base)
    assert data.turnover == tuple(float(i) for i in range(1, 13))
    assert data.cost[0] == 2.0
    assert data.productivity[11] == 36.0
    assert data.orders[5] == 24.0
    assert data.capacity[11] == 60.0


def test_rows_after_twelve_are_ignored(base):
    rows = [str(i) for i in range(1, 20)]
    data = read_dataset_csv(_csv("turnover", rows), base=base)
    assert data.turnover == tuple(float(i) for i in range(1, 13))


def test_fewer_rows_keep_prior_values(base):
    data = read_dataset_csv(_csv("Cost", ["1", "2", "3"]), base=base)
    assert data.cost[:3] == (1.0, 2.0, 3.0)
    assert data.cost[3:] == base.cost[3:]
    # untouched series stay as they were
    assert data.turnover == base.turnover


def test_unparseable_cells_become_zero(base):
    data = read_dataset_csv(_csv("Turnover,Cost", ["abc,5", ",6", "7,"]), base=base)
    assert data.turnover[:3] == (0.0, 0.0, 7.0)
    assert data.cost[:3] == (5.0, 6.0, 0.0)


def test_overflowing_cell_becomes_zero(base):
    data = read_dataset_csv(_csv("Turnover", ["1e999", "5"]), base=base)
    assert data.turnover[:2] == (0.0, 5.0)
    assert all(math.isfinite(v) for v in data.turnover)


def test_blank_lines_are_skipped(base):
    text = "Orders\n\n10\n\n20\n"
    data = read_dataset_csv(text, base=base)
    assert data.orders[:2] == (10.0, 20.0)


def test_reads_bytes_with_bom(base):
    content = "\ufeffTurnover\n42\n".encode("utf-8")
    data = read_dataset_csv(content, base=base)
    assert data.turnover[0] == 42.0


@pytest.mark.parametrize("content", ["", "   \n\n", b"", b"\xff\xfe\x00garbage"])
def test_empty_or_undecodable_content_fails(base, content):
    with pytest.raises(DatasetParseError):
        read_dataset_csv(content, base=base)


def test_header_without_known_columns_fails(base):
    with pytest.raises(DatasetParseError):
        read_dataset_csv(_csv("Month,Notes", ["Jan,x"]), base=base)


def test_failed_import_does_not_mutate_base(base):
    before = base.as_dict()
    with pytest.raises(DatasetParseError):
        read_dataset_csv("", base=base)
    assert base.as_dict() == before


def test_export_strategy_csv_layout(base):
    text = export_strategy_csv(base, _result(value=2))
    lines = text.split("\n")
    assert lines[0] == "Month,PlannedProduction,TurnoverContribution,CostContribution,ProductivityContribution"
    assert lines[1] == "Jan,2,2900.00,160.00,19352.00"
    assert lines[12].startswith("Dec,2,")
    assert lines[13] == ""
    assert lines[14] == "TotalTurnover,123.46"
    assert lines[15] == "TotalCost,7.00"
    assert lines[16] == "TotalProductivity,0.01"


def test_export_workbook_one_sheet_per_strategy(base):
    results = {
        StrategyKey.MULTI_OBJECTIVE: _result(StrategyKey.MULTI_OBJECTIVE, 3),
        StrategyKey.TURNOVER: _result(StrategyKey.TURNOVER, 1),
    }
    content = export_workbook(base, results)
    wb = openpyxl.load_workbook(io.BytesIO(content))
    assert wb.sheetnames == ["turnover", "multiObjective"]

    ws = wb["multiObjective"]
    assert ws["A1"].value == "Month"
    assert ws["A2"].value == "Jan"
    assert ws["B2"].value == 3
    assert ws["A15"].value == "Metric"
    assert ws["A16"].value == "TotalTurnover"


def test_export_workbook_without_results(base):
    with pytest.raises(ValueError):
        export_workbook(base, {})
