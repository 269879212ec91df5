import math

import pytest

import mcdmplan.planning.orchestrator as orch_mod
from mcdmplan.core.ahp import compute_weights
from mcdmplan.core.models import PairwiseMatrix, PeriodSeries, StrategyKey
from mcdmplan.defaults import FALLBACK_WEIGHTS
from mcdmplan.planner.objectives import evaluate_objectives
from mcdmplan.planning.orchestrator import (
    StrategyOrchestrator,
    baseline_objectives,
    composite_coefficients,
    compute_improvements,
)


def _flat_data(*, orders: float = 0, capacity: float = 100, cost=None) -> PeriodSeries:
    return PeriodSeries(
        turnover=[2] * 12,
        cost=cost if cost is not None else [1] * 12,
        productivity=[3] * 12,
        orders=[orders] * 12,
        capacity=[capacity] * 12,
    )


@pytest.fixture()
def orchestrator() -> StrategyOrchestrator:
    return StrategyOrchestrator(ceiling=[10**9] * 12)


def test_turnover_strategy_scales_turnover(orchestrator):
    res = orchestrator.run(StrategyKey.TURNOVER, _flat_data())
    assert res.allocation == (100,) * 12
    assert res.turnover_val == 2 * 1200 * 1000
    assert res.cost_val == 1200
    assert res.productivity_val == 3600
    assert res.improvements is None
    assert res.weights is None


def test_cost_strategy_reports_positive_cost(orchestrator):
    data = _flat_data(orders=10, cost=[float(c) for c in range(1, 13)])
    res = orchestrator.run(StrategyKey.COST, data)
    z = evaluate_objectives(data.turnover, data.cost, data.productivity, res.allocation)
    assert res.cost_val == z.z2
    assert res.cost_val > 0
    assert res.turnover_val == z.z1 * 1000
    for x in res.allocation:
        assert 10 <= x <= 100


def test_productivity_strategy_balanced(orchestrator):
    res = orchestrator.run(StrategyKey.PRODUCTIVITY, _flat_data())
    assert res.allocation == (85,) * 12
    assert res.productivity_val == 3 * 85 * 12


def test_multi_objective_improvements(orchestrator):
    res = orchestrator.run(StrategyKey.MULTI_OBJECTIVE, _flat_data(orders=50), weights=(0.5, 0.25, 0.25))
    assert res.allocation == (93,) * 12
    assert res.weights == (0.5, 0.25, 0.25)
    assert res.improvements.turnover == pytest.approx(86.0)
    assert res.improvements.cost == pytest.approx(-86.0)
    assert res.improvements.productivity == pytest.approx(86.0)
    assert res.improvements.as_display() == {"turnover": "86.00", "cost": "-86.00", "productivity": "86.00"}


def test_multi_objective_zero_baseline_reports_zero(orchestrator):
    res = orchestrator.run(StrategyKey.MULTI_OBJECTIVE, _flat_data(orders=0), weights=(0.5, 0.25, 0.25))
    assert res.allocation == (85,) * 12
    assert res.improvements.turnover == 0.0
    assert res.improvements.cost == 0.0
    assert res.improvements.productivity == 0.0
    assert res.improvements.as_display() == {"turnover": "0.00", "cost": "0.00", "productivity": "0.00"}


def test_multi_objective_defaults_to_fallback_weights(orchestrator):
    res = orchestrator.run("multiObjective", _flat_data())
    assert res.weights == FALLBACK_WEIGHTS


def test_multi_objective_rejects_wrong_weight_count(orchestrator):
    with pytest.raises(ValueError):
        orchestrator.run(StrategyKey.MULTI_OBJECTIVE, _flat_data(), weights=(0.5, 0.5))


def test_unknown_strategy_rejected(orchestrator):
    with pytest.raises(ValueError):
        orchestrator.run("speed", _flat_data())


def test_composite_coefficients():
    coeffs = composite_coefficients(_flat_data(), (0.5, 0.25, 0.25))
    assert coeffs == [pytest.approx(750.75)] * 12


def test_compute_improvements():
    imp = compute_improvements((110.0, 90.0, 120.0), (100.0, 100.0, 100.0))
    assert (imp.turnover, imp.cost, imp.productivity) == (10.0, 10.0, 20.0)

    zero = compute_improvements((110.0, 90.0, 120.0), (0.0, 0.0, 0.0))
    assert (zero.turnover, zero.cost, zero.productivity) == (0.0, 0.0, 0.0)


def test_baseline_is_order_fulfillment():
    data = PeriodSeries.default()
    base = baseline_objectives(data)
    assert base == evaluate_objectives(data.turnover, data.cost, data.productivity, data.orders)


def test_solve_reports_errors_instead_of_raising(monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("heuristic exploded")

    monkeypatch.setattr(orch_mod, "solve_allocation_heuristic", _boom)

    result = StrategyOrchestrator().solve(StrategyKey.TURNOVER, PeriodSeries.default())

    assert result["status"] == "error"
    assert "heuristic exploded" in result["message"]
    assert result["result"] is None


def test_solve_success_message():
    result = StrategyOrchestrator().solve(StrategyKey.COST, PeriodSeries.default())
    assert result["status"] == "success"
    assert result["message"] == "cost optimization complete."
    assert result["result"].strategy is StrategyKey.COST


def test_same_inputs_same_output():
    data = PeriodSeries.default()
    o = StrategyOrchestrator()
    for key in StrategyKey:
        assert o.run(key, data, (0.2, 0.5, 0.3)) == o.run(key, data, (0.2, 0.5, 0.3))


def test_default_scenario_end_to_end():
    data = PeriodSeries.default()
    ahp = compute_weights(PairwiseMatrix.default())
    res = StrategyOrchestrator().run(StrategyKey.MULTI_OBJECTIVE, data, ahp.weights)

    low_t = high_t = low_c = high_c = low_p = high_p = 0.0
    for i, x in enumerate(res.allocation):
        lb = min(data.orders[i], data.capacity[i])
        ub = data.capacity[i]
        assert lb <= x <= ub
        low_t += data.turnover[i] * lb * 1000
        high_t += data.turnover[i] * ub * 1000
        low_c += data.cost[i] * lb
        high_c += data.cost[i] * ub
        low_p += data.productivity[i] * lb
        high_p += data.productivity[i] * ub

    assert low_t <= res.turnover_val <= high_t
    assert low_c <= res.cost_val <= high_c
    assert low_p <= res.productivity_val <= high_p
    for value in (res.improvements.turnover, res.improvements.cost, res.improvements.productivity):
        assert math.isfinite(value)
    assert res.weights == ahp.weights
