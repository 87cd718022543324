from __future__ import annotations

from pathlib import Path

from gadash.page import DashboardPage


def test_surfaces_keep_first_use_order(tmp_path: Path) -> None:
    page = DashboardPage(tmp_path / "figures")

    page.surface("b")
    page.surface("a")
    again = page.surface("b")

    assert [surface.target_id for surface in page.surfaces] == ["b", "a"]
    assert again.figure_path == tmp_path / "figures" / "b.png"
    assert again.is_empty


def test_error_panel_is_created_on_first_error(tmp_path: Path) -> None:
    page = DashboardPage(tmp_path / "figures")
    assert page.errors is None

    line = page.report_error("visits", "403 Forbidden")
    page.report_error("sources", "No rows returned for that query")

    assert line == "visits error: 403 Forbidden"
    assert page.errors is not None
    assert page.errors.lines == [
        "visits error: 403 Forbidden",
        "sources error: No rows returned for that query",
    ]


def test_write_renders_surfaces_errors_and_prompt(tmp_path: Path) -> None:
    page = DashboardPage(tmp_path / "figures", title="Traffic", figures_format="svg")
    table = page.surface("table")
    table.html = "<table class='gadash-table'><tr><td>1</td></tr></table>"
    chart = page.surface("chart")
    chart.rendered_figure = chart.figure_path
    page.report_error("chart", "bad <b>thing</b>")
    page.authorize_prompt = True

    path = page.write(tmp_path / "index.html")
    html = path.read_text(encoding="utf-8")

    assert "<title>Traffic</title>" in html
    assert "ERRORS:" in html
    assert "chart error: bad &lt;b&gt;thing&lt;/b&gt;" in html
    assert "Authorization required" in html
    assert "<table class='gadash-table'>" in html
    assert 'src="figures/chart.svg"' in html
    assert html.index('id="table"') < html.index('id="chart"')


def test_write_without_errors_or_prompt(tmp_path: Path) -> None:
    page = DashboardPage(tmp_path / "figures")
    page.surface("empty")

    html = page.write(tmp_path / "index.html").read_text(encoding="utf-8")

    assert "ERRORS:" not in html
    assert "Authorization required" not in html
    assert 'id="empty"' in html
