"""Tests for the terminal report."""

from datetime import timedelta

import pytest
from rich.console import Console

from factories import NOW, OWNER_ID, REVIEWER_ID, make_change, make_message, make_votes
from gerrit_monitor.changelist import Category, Changelist
from gerrit_monitor.description import Description
from gerrit_monitor.report import build_table, format_bugs, format_size, format_subject, render
from gerrit_monitor.search import SearchResult, SearchResults

HOST = "https://gerrit.example.com"


@pytest.fixture
def console():
    return Console(record=True, width=200, color_system=None)


def detailed_change(**overrides) -> dict:
    base = make_change(
        current_revision="abc",
        revisions={"abc": {"commit": {"message": "Add the thing\n\nLonger text.\n\nBug: 1, 2\nBug: 3\nChange-Id: I1\n"}}},
    )
    base.update(overrides)
    return base


class TestFormatters:
    def test_format_subject(self):
        assert format_subject(Description("Add the thing\n\nDetails\n\nBug: 1")) == "Add the thing"

    def test_format_bugs(self):
        assert format_bugs(Description("Subject\n\nBug: 1, 2\nBug: 3")) == "1, 2, 3"
        assert format_bugs(Description("Subject")) == ""

    def test_format_size(self):
        cl = Changelist.wrap(HOST, make_change(insertions=200, deletions=100))
        assert format_size(cl) == "[red]large[/] (300)"


class TestBuildTable:
    def test_basic_columns(self):
        table = build_table(Category.STALE, [Changelist.wrap(HOST, make_change())])
        assert [c.header for c in table.columns] == ["CL", "Size"]
        assert table.row_count == 1

    def test_detailed_columns(self, console):
        table = build_table(Category.READY_TO_SUBMIT, [Changelist.wrap(HOST, detailed_change(submittable=True))])
        assert [c.header for c in table.columns] == ["CL", "Size", "Author", "Subject", "Bug"]
        console.print(table)
        output = console.export_text()
        assert "Olive Owner" in output
        assert "Add the thing" in output
        assert "1, 2, 3" in output


class TestRender:
    def test_groups_by_category(self, owner, console):
        result = SearchResult.wrap(
            HOST,
            owner,
            [
                make_change(_number=1, submittable=True),
                make_change(_number=2, labels=make_votes((OWNER_ID, 0))),
                make_change(_number=3, messages=[make_message(REVIEWER_ID, ago=timedelta(hours=1))]),
            ],
        )
        shown = render(SearchResults([result]), console, NOW)
        output = console.export_text()

        assert shown == 2
        assert "Ready to submit (1)" in output
        assert "Not mailed (1)" in output
        assert f"{HOST}/c/chromium/src/+/1" in output
        assert f"{HOST}/c/chromium/src/+/3" not in output
        assert output.index("Ready to submit") < output.index("Not mailed")

    def test_nothing_to_do(self, reviewer, console):
        result = SearchResult.wrap(HOST, reviewer, [make_change(labels=make_votes((REVIEWER_ID, 1)))])
        assert render(SearchResults([result]), console, NOW) == 0
        assert "Nothing needs your attention." in console.export_text()
