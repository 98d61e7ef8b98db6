import pytest
from streamlit.errors import StreamlitAPIException

from taskboard import theme


@pytest.fixture
def captured(monkeypatch):
    calls = {"css": [], "config": []}
    monkeypatch.setattr(theme.st, "set_page_config", lambda **kw: calls["config"].append(kw))
    monkeypatch.setattr(theme.st, "markdown", lambda body, **kw: calls["css"].append(body))
    return calls


def test_set_theme_injects_css(captured):
    theme.set_theme(page_title="Taskboard")

    assert captured["config"][0]["page_title"] == "Taskboard"
    assert ".tb-card" in captured["css"][0]
    assert "direction: rtl" not in captured["css"][0]


def test_set_theme_rtl(captured):
    theme.set_theme(direction="rtl")
    assert "direction: rtl" in captured["css"][0]


def test_second_page_config_is_ignored(monkeypatch, captured):
    def already_set(**kw):
        raise StreamlitAPIException("set_page_config() can only be called once per app page")

    monkeypatch.setattr(theme.st, "set_page_config", already_set)
    theme.set_theme()
    assert len(captured["css"]) == 1
