import pytest

pytest.importorskip("nicegui")

import mcdmplan.ui.widgets as widgets  # noqa: E402


class _Element:
    def classes(self, *_args, **_kwargs):
        return self

    def style(self, *_args, **_kwargs):
        return self

    def props(self, *_args, **_kwargs):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        return False


class _RecordingUI:
    def __init__(self, colors_fail: bool = False):
        self.css: list[str] = []
        self.colors_fail = colors_fail

    def colors(self, **_kwargs):
        if self.colors_fail:
            raise RuntimeError("no palette")

    def add_css(self, content):
        self.css.append(content)

    def __getattr__(self, _name):
        return lambda *args, **kwargs: _Element()


def test_every_page_build_gets_the_theme(monkeypatch):
    fake = _RecordingUI()
    monkeypatch.setattr(widgets, "ui", fake)

    # two clients loading the page
    widgets.render_header("Plan")
    widgets.render_header("Plan")

    assert len(fake.css) == 2
    assert all(".mp-grid-12" in css and ".mp-container" in css for css in fake.css)


def test_theme_survives_missing_colors_api(monkeypatch):
    fake = _RecordingUI(colors_fail=True)
    monkeypatch.setattr(widgets, "ui", fake)

    widgets.apply_theme()

    assert len(fake.css) == 1
