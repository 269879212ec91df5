from __future__ import annotations

import asyncio
import inspect
import logging

from nicegui import ui

from mcdmplan.core.ahp import consistency_label
from mcdmplan.core.models import StrategyKey
from mcdmplan.defaults import CRITERIA, MONTHS
from mcdmplan.planning.comparison import comparison_rows
from mcdmplan.planning.orchestrator import StrategyOrchestrator
from mcdmplan.planning.session import PlanningSession
from mcdmplan.settings import Settings
from mcdmplan.ui.widgets import metric_card, page_container, render_header, stepper

logger = logging.getLogger(__name__)

SERIES_ROWS: list[tuple[str, str]] = [
    ("turnover", "Turnover (thousand RON)"),
    ("cost", "Cost (RON)"),
    ("productivity", "Productivity (pieces/worker)"),
]

STRATEGY_BUTTONS: list[tuple[StrategyKey, str, str]] = [
    (StrategyKey.TURNOVER, "Maximize Turnover", "trending_up"),
    (StrategyKey.COST, "Minimize Cost", "savings"),
    (StrategyKey.PRODUCTIVITY, "Maximize Productivity", "bolt"),
    (StrategyKey.MULTI_OBJECTIVE, "Multi-Objective (AHP)", "hub"),
]

STRATEGY_COLORS: dict[StrategyKey, str] = {
    StrategyKey.TURNOVER: "#10b981",
    StrategyKey.COST: "#ef4444",
    StrategyKey.PRODUCTIVITY: "#8b5cf6",
    StrategyKey.MULTI_OBJECTIVE: "#3b82f6",
}


async def _read_upload(e) -> bytes:
    """Extract uploaded bytes across NiceGUI versions."""
    if hasattr(e, "content"):
        return e.content.read()
    f = getattr(e, "file", None)
    if f is not None and hasattr(f, "read"):
        if inspect.iscoroutinefunction(f.read):
            return await f.read()
        return f.read()
    raise ValueError(f"Could not extract file content. Attributes: {dir(e)}")


def _fmt_m(value: float) -> str:
    return f"{value / 1e6:.2f}M"


def register_pages(settings: Settings) -> None:
    orchestrator = StrategyOrchestrator()

    @ui.page("/")
    def dashboard() -> None:
        state = {"session": PlanningSession(), "processing": False, "selected": None}

        def session() -> PlanningSession:
            return state["session"]

        def publish(new: PlanningSession, *, notify: bool = True) -> None:
            state["session"] = new
            if notify and new.message:
                ui.notify(new.message, type="positive" if new.ok else None, color=None if new.ok else "negative")
            refresh_all()

        # ---------------------- Input tab ----------------------

        @ui.refreshable
        def data_grid() -> None:
            data = session().data
            with ui.card().classes("w-full"):
                ui.label("Monthly data").classes("text-lg font-semibold")
                for series, label in SERIES_ROWS:
                    ui.label(label).classes("text-sm font-semibold mt-2")
                    with ui.element("div").classes("mp-grid-12 w-full"):
                        for i, month in enumerate(MONTHS):
                            with ui.column().classes("items-center gap-0"):
                                ui.label(month).classes("text-xs text-slate-500")
                                stepper(
                                    data.series(series)[i],
                                    lambda d, s=series, m=i: publish(session().step_value(s, m, d), notify=False),
                                    small=True,
                                )
                for series, label in (("orders", "Orders (units)"), ("capacity", "Capacity (units)")):
                    ui.label(label).classes("text-sm font-semibold mt-2")
                    with ui.element("div").classes("mp-grid-12 w-full"):
                        for i, month in enumerate(MONTHS):
                            ui.number(
                                month,
                                value=data.series(series)[i],
                                min=0,
                                step=1000,
                                format="%.0f",
                                on_change=lambda e, s=series, m=i: _set_number(s, m, e.value),
                            ).props("dense").classes("w-full")

        def _set_number(series: str, month: int, value) -> None:
            if value is None:
                return
            # no refresh: rebuilding the grid would steal focus from the input
            state["session"] = session().set_value(series, month, value)

        @ui.refreshable
        def pairwise_card() -> None:
            s = session()
            with ui.card().classes("w-full"):
                ui.label("AHP pairwise comparison").classes("text-lg font-semibold")
                with ui.grid(columns=4).classes("items-center gap-2"):
                    ui.label("")
                    for label in CRITERIA:
                        ui.label(label).classes("text-sm font-semibold")
                    for i, row_label in enumerate(CRITERIA):
                        ui.label(row_label).classes("text-sm font-semibold")
                        for j in range(len(CRITERIA)):
                            cell = ui.input(value=f"{s.pairwise.rows[i][j]:.3g}").props(
                                "dense outlined" + (" readonly" if i == j else "")
                            ).classes("w-24")
                            if i != j:
                                # commit on blur so typing is not interrupted by the reciprocal refresh
                                cell.on(
                                    "blur",
                                    lambda _, ii=i, jj=j, el=cell: publish(
                                        session().set_pairwise(ii, jj, el.value), notify=False
                                    ),
                                )
                with ui.row().classes("items-center gap-4 mt-2"):
                    ui.button("Compute AHP", icon="calculate", on_click=lambda: publish(session().compute_ahp())).props(
                        "unelevated color=primary"
                    )
                    if s.ahp is not None:
                        weights = ", ".join(f"{w:.3f}" for w in s.ahp.weights)
                        tag = " (fallback)" if s.ahp.is_fallback else ""
                        ui.label(f"Weights: [{weights}]{tag}").classes("text-sm")
                        ui.label(
                            f"λmax={s.ahp.lambda_max:.3f}  CI={s.ahp.ci:.3f}  CR={s.ahp.cr:.3f} {consistency_label(s.ahp)}"
                        ).classes("text-sm").style(f"color: {'#10b981' if s.ahp.is_consistent else '#ef4444'}")

        def render_input() -> None:
            with ui.column().classes("w-full gap-4"):
                with ui.row().classes("items-center gap-3"):
                    ui.upload(label="Upload CSV", on_upload=handle_upload, auto_upload=True).props(
                        "accept=.csv,.txt max-files=1"
                    )
                    ui.button("Reset defaults", icon="restart_alt", on_click=lambda: publish(session().reset())).props(
                        "flat color=primary"
                    )
                data_grid()
                pairwise_card()
                with ui.card().classes("w-full"):
                    ui.label("Run optimization").classes("text-lg font-semibold")
                    with ui.row().classes("gap-2"):
                        for key, label, icon in STRATEGY_BUTTONS:
                            ui.button(label, icon=icon, on_click=lambda k=key: run_optimization(k)).props(
                                "unelevated color=primary"
                            ).bind_enabled_from(state, "processing", backward=lambda p: not p)
                    ui.spinner(size="md").bind_visibility_from(state, "processing")

        async def handle_upload(e) -> None:
            try:
                content = await _read_upload(e)
            except Exception as ex:
                logger.exception("Upload failed")
                ui.notify(f"CSV parse error: {ex}", color="negative")
                return
            publish(session().import_csv(content))

        async def run_optimization(strategy: StrategyKey) -> None:
            state["processing"] = True
            try:
                await asyncio.sleep(settings.processing_delay_seconds)
                new = session().run_optimization(strategy, orchestrator)
            finally:
                state["processing"] = False
            if new.ok and strategy is StrategyKey.MULTI_OBJECTIVE:
                state["selected"] = StrategyKey.MULTI_OBJECTIVE
            publish(new)
            if new.ok:
                panels.set_value("comparison")

        # ---------------------- Results tab ----------------------

        @ui.refreshable
        def results_view() -> None:
            s = session()
            computed = [(k, s.results[k]) for k in StrategyKey if k in s.results]
            if not computed:
                ui.label("No results yet: run a strategy from the Input tab.").classes("text-slate-500")
                return
            for key, res in computed:
                imp = res.improvements.as_display() if res.improvements else {}
                with ui.card().classes("w-full"):
                    with ui.row().classes("w-full items-center justify-between"):
                        ui.label(key.label).classes("text-lg font-semibold")
                        ui.button(
                            "Download CSV", icon="download", on_click=lambda k=key: download_csv(k)
                        ).props("flat color=primary")
                    with ui.element("div").classes("w-full grid gap-4 grid-cols-1 md:grid-cols-3"):
                        metric_card(
                            title="Total Turnover",
                            value=_fmt_m(res.turnover_val),
                            subtitle="RON",
                            color="#10b981",
                            improvement=imp.get("turnover"),
                        )
                        metric_card(
                            title="Total Cost",
                            value=_fmt_m(res.cost_val),
                            subtitle="RON",
                            color="#ef4444",
                            improvement=imp.get("cost"),
                        )
                        metric_card(
                            title="Total Productivity",
                            value=_fmt_m(res.productivity_val),
                            subtitle="pieces/worker",
                            color="#8b5cf6",
                            improvement=imp.get("productivity"),
                        )
                    ui.echart(
                        {
                            "tooltip": {"trigger": "axis"},
                            "grid": {"left": 80, "right": 20, "top": 30, "bottom": 40},
                            "xAxis": {"type": "category", "data": list(MONTHS)},
                            "yAxis": {"type": "value", "name": "units"},
                            "series": [
                                {
                                    "name": "Planned production",
                                    "type": "line",
                                    "smooth": True,
                                    "data": list(res.allocation),
                                    "itemStyle": {"color": STRATEGY_COLORS[key]},
                                },
                                {
                                    "name": "Orders",
                                    "type": "line",
                                    "lineStyle": {"type": "dashed"},
                                    "data": list(s.data.orders),
                                },
                                {
                                    "name": "Capacity",
                                    "type": "line",
                                    "lineStyle": {"type": "dotted"},
                                    "data": list(s.data.capacity),
                                },
                            ],
                            "legend": {"top": 0},
                        }
                    ).classes("w-full h-64")
            ui.button("Download all (XLSX)", icon="table_view", on_click=download_workbook).props(
                "unelevated color=secondary"
            )

        def render_results() -> None:
            results_view()

        def download_csv(key: StrategyKey) -> None:
            text = session().export_csv(key)
            if text is None:
                ui.notify("No result to export", color="warning")
                return
            ui.download(text.encode("utf-8"), f"{key.value}_results.csv")

        def download_workbook() -> None:
            try:
                content = session().export_workbook()
            except Exception as ex:
                logger.exception("Workbook export failed")
                ui.notify(f"Export failed: {ex}", color="negative")
                return
            if content is None:
                ui.notify("No results to export", color="warning")
                return
            ui.download(content, "mcdm_results.xlsx")

        # ---------------------- Comparison tab ----------------------

        @ui.refreshable
        def comparison_view() -> None:
            s = session()
            rows = comparison_rows(s.results)
            if not rows:
                ui.label("Run at least one strategy to compare.").classes("text-slate-500")
                return

            ui.label("Strategy comparison (millions)").classes("text-lg font-semibold")
            ui.echart(
                {
                    "tooltip": {"trigger": "axis"},
                    "legend": {"top": 0},
                    "grid": {"left": 60, "right": 20, "top": 40, "bottom": 60},
                    "xAxis": {"type": "category", "data": [r["name"] for r in rows]},
                    "yAxis": {"type": "value", "name": "M"},
                    "series": [
                        {"name": "Turnover", "type": "bar", "data": [r["turnover_m"] for r in rows]},
                        {"name": "Cost", "type": "bar", "data": [r["cost_m"] for r in rows]},
                        {"name": "Productivity", "type": "bar", "data": [r["productivity_m"] for r in rows]},
                    ],
                }
            ).classes("w-full h-80")

            points = s.pareto_points()
            ui.label("Pareto frontier: turnover vs cost").classes("text-lg font-semibold mt-4")

            def on_point_click(e) -> None:
                idx = getattr(e, "data_index", None)
                if idx is None or idx >= len(points):
                    return
                state["selected"] = points[idx].strategy
                pareto_detail.refresh()

            ui.echart(
                {
                    "tooltip": {"trigger": "item", "formatter": "{b}<br/>Turnover/Cost (M): {c}"},
                    "grid": {"left": 60, "right": 20, "top": 30, "bottom": 50},
                    "xAxis": {"type": "value", "name": "Turnover (M)", "scale": True},
                    "yAxis": {"type": "value", "name": "Cost (M)", "scale": True},
                    "series": [
                        {
                            "type": "line",
                            "smooth": True,
                            "showSymbol": False,
                            "lineStyle": {"type": "dashed", "color": "#94a3b8"},
                            "data": [[round(p.turnover_m, 2), round(p.cost_m, 2)] for p in points],
                        },
                        {
                            "type": "scatter",
                            "symbolSize": 18,
                            "data": [
                                {
                                    "name": p.name,
                                    "value": [round(p.turnover_m, 2), round(p.cost_m, 2)],
                                    "itemStyle": {"color": STRATEGY_COLORS[p.strategy]},
                                }
                                for p in points
                            ],
                        },
                    ],
                },
                on_point_click=on_point_click,
            ).classes("w-full h-96")
            pareto_detail()

            score = s.balance_score()
            if score is not None:
                ui.label(f"Balance score (lower = multi-objective more balanced): {score:.3f}").classes(
                    "text-sm mp-subtitle"
                )

        @ui.refreshable
        def pareto_detail() -> None:
            s = session()
            selected = state.get("selected")
            point = next((p for p in s.pareto_points() if p.strategy == selected), None)
            if point is None:
                ui.label("Click a point to see its metrics.").classes("text-sm text-slate-500")
                return
            imp = point.improvements.as_display() if point.improvements else {}
            with ui.card().classes("w-full"):
                ui.label(point.name).classes("text-lg font-semibold")
                with ui.element("div").classes("w-full grid gap-4 grid-cols-1 md:grid-cols-3"):
                    metric_card(title="Turnover", value=f"{point.turnover_m:.2f}M", improvement=imp.get("turnover"))
                    metric_card(title="Cost", value=f"{point.cost_m:.2f}M", improvement=imp.get("cost"))
                    metric_card(
                        title="Productivity", value=f"{point.productivity_m:.2f}M", improvement=imp.get("productivity")
                    )
                if point.weights:
                    weights = ", ".join(f"{label}: {w:.3f}" for label, w in zip(CRITERIA, point.weights))
                    ui.label(f"Weights used - {weights}").classes("text-sm")

        def render_comparison() -> None:
            comparison_view()

        def refresh_all() -> None:
            data_grid.refresh()
            pairwise_card.refresh()
            results_view.refresh()
            comparison_view.refresh()

        render_header(settings.title)
        with page_container():
            with ui.tabs().classes("w-full text-slate-600").props(
                "dense active-color=primary indicator-color=primary align=left"
            ) as tabs:
                t_input = ui.tab("input", label="Input")
                t_results = ui.tab("results", label="Results")
                t_comparison = ui.tab("comparison", label="Comparison")

            with ui.tab_panels(tabs, value=t_input).classes("w-full bg-transparent") as panels:
                with ui.tab_panel(t_input):
                    render_input()
                with ui.tab_panel(t_results):
                    render_results()
                with ui.tab_panel(t_comparison):
                    render_comparison()

