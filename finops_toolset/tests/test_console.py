"""ReportConsole output and report mirroring."""

from __future__ import annotations

import io

from finops_toolset.console import ReportConsole, render_table


def test_lines_are_mirrored_without_color():
    term, report = io.StringIO(), io.StringIO()
    console = ReportConsole(stream=term, report=report, color=True)
    console.line("Found [3] items", style="red")
    console.rule("-", width=10)

    assert report.getvalue() == "Found [3] items\n----------\n"
    assert "Found [3] items" in term.getvalue()


def test_severity_symbols():
    out = io.StringIO()
    console = ReportConsole(stream=out, color=False)
    console.info("a")
    console.success("b")
    console.warning("c")
    console.error("d")
    assert out.getvalue().splitlines() == ["ℹ a", "✓ b", "⚠ c", "✗ d"]


def test_attach_starts_mirroring_later_lines_only():
    out, report = io.StringIO(), io.StringIO()
    console = ReportConsole(stream=out, color=False)
    console.line("before")
    console.attach(report)
    console.blank()
    console.line("after")
    assert report.getvalue() == "\nafter\n"


def test_render_table_grid_and_blanks():
    table = render_table(("Id", "Name"), [["i-1", None], ["i-2", "web"]])
    lines = table.splitlines()
    assert lines[0].startswith("+")
    assert "| Id " in lines[1]
    assert "web" in table
    assert "None" not in table
