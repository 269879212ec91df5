from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable

from nicegui import ui

logger = logging.getLogger(__name__)

NAVY = "#1e3a8a"


def apply_theme() -> None:
    """Light theme with navy text, for the current client."""
    try:
        ui.colors(
            primary="#1e3a8a",  # navy
            secondary="#3b82f6",  # blue-500
            positive="#10b981",  # emerald-500
            negative="#ef4444",  # red-500
            warning="#f59e0b",  # amber-500
        )
    except Exception as ex:
        logger.debug("ui.colors unavailable, keeping default palette: %s", ex)

    ui.add_css(
        """
        body { background: #f8fafc; color: #1e3a8a; }
        .mp-container { max-width: 1280px; margin: 0 auto; padding: 16px; }
        .mp-subtitle { color: #475569; }
        .mp-header { border-bottom: 1px solid rgba(15, 23, 42, 0.08); }
        .mp-card { border-left: 4px solid var(--mp-accent, #1e3a8a); }
        .mp-grid-12 { display: grid; grid-template-columns: repeat(12, minmax(0, 1fr)); gap: 6px; }
        """
    )


@contextmanager
def page_container():
    with ui.element("div").classes("mp-container"):
        yield


def render_header(title: str) -> None:
    # CSS and colors are per client, so every page build re-applies them
    apply_theme()
    with ui.header().classes("mp-header bg-white text-slate-900"):
        with ui.row().classes("w-full items-center justify-between gap-4 px-4 py-2"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("insights", color="primary").classes("text-3xl")
                ui.label(title).classes("text-xl md:text-2xl font-semibold leading-none").style(f"color: {NAVY}")
            ui.label("AHP weights + LP-like heuristic").classes("text-sm mp-subtitle")


def metric_card(
    *,
    title: str,
    value: str,
    subtitle: str | None = None,
    color: str = NAVY,
    improvement: str | None = None,
) -> None:
    with ui.card().classes("mp-card w-full").style(f"--mp-accent: {color}"):
        ui.label(title).classes("text-sm font-semibold").style(f"color: {NAVY}")
        ui.label(value).classes("text-2xl font-bold").style("color: #0f172a")
        if subtitle:
            ui.label(subtitle).classes("text-xs text-slate-500")
        if improvement is not None:
            pct = float(improvement)
            arrow = "↑" if pct > 0 else "↓"
            ui.label(f"{arrow} {abs(pct):.2f}% vs baseline").classes("text-sm font-semibold").style(
                f"color: {'#10b981' if pct > 0 else '#ef4444'}"
            )


def stepper(value: float, on_change: Callable[[int], None], *, small: bool = False) -> None:
    """Value with +/- buttons; ``on_change`` receives +1 or -1."""
    with ui.column().classes("items-center gap-0"):
        ui.button(icon="expand_less", on_click=lambda: on_change(1)).props("flat dense round size=xs")
        ui.label(f"{value:,.0f}").classes("text-xs" if small else "text-sm font-medium")
        ui.button(icon="expand_more", on_click=lambda: on_change(-1)).props("flat dense round size=xs")
