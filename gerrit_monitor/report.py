"""Terminal rendering of categorized CLs."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .changelist import Category, Changelist, SizeCategory
from .description import Description
from .search import SearchResults

# Display order and titles. NONE is never shown.
CATEGORY_TITLES = {
    Category.READY_TO_SUBMIT: "Ready to submit",
    Category.OUTGOING_NEEDS_ATTENTION: "Outgoing reviews needing attention",
    Category.INCOMING_NEEDS_ATTENTION: "Incoming reviews",
    Category.NOT_MAILED: "Not mailed",
    Category.STALE: "Stale",
}

SIZE_STYLES = {
    SizeCategory.SMALL: "green",
    SizeCategory.MEDIUM: "yellow",
    SizeCategory.LARGE: "red",
}


def format_subject(description: Description) -> str:
    """First line of the description body."""
    return description.message.split("\n", 1)[0]


def format_bugs(description: Description) -> str:
    return ", ".join(value.strip() for value in description.get("Bug"))


def format_size(cl: Changelist) -> str:
    size = cl.get_size_category()
    return f"[{SIZE_STYLES[size]}]{size.value}[/] ({cl.get_delta_size()})"


def build_table(category: Category, changelists: list[Changelist]) -> Table:
    """Build the table for one category."""
    detailed = any(cl.has_description() for cl in changelists)

    table = Table(title=f"{CATEGORY_TITLES[category]} ({len(changelists)})", title_justify="left")
    table.add_column("CL", style="cyan", no_wrap=True)
    table.add_column("Size", no_wrap=True)
    if detailed:
        table.add_column("Author")
        table.add_column("Subject")
        table.add_column("Bug")

    for cl in changelists:
        row = [cl.get_gerrit_url(), format_size(cl)]
        if detailed:
            subject = bugs = ""
            if cl.has_description():
                description = cl.get_description()
                subject, bugs = format_subject(description), format_bugs(description)
            row += [escape(cl.get_author() or ""), escape(subject), escape(bugs)]
        table.add_row(*row)

    return table


def render(results: SearchResults, console: Console, now: datetime | None = None) -> int:
    """Print one table per category that needs attention.

    Returns the number of CLs shown.
    """
    category_map = results.get_category_map(now)
    shown = 0
    for category in CATEGORY_TITLES:
        changelists = category_map.get(category)
        if not changelists:
            continue
        console.print(build_table(category, changelists))
        console.print()
        shown += len(changelists)

    if shown == 0:
        console.print("[green]Nothing needs your attention.[/]")
    return shown
