"""Listing presentation: human-readable sizes and the entry table"""

from typing import Iterable, List

from rich.console import Console
from rich.markup import escape

from .listing import DirectoryEntry

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

TYPE_WIDTH = 6
NAME_WIDTH = 40
SIZE_WIDTH = 15
RULE = "-" * (TYPE_WIDTH + NAME_WIDTH + SIZE_WIDTH)
DIR_SIZE_PLACEHOLDER = "—"


def format_size_human(size: int) -> str:
    """Format a byte count as e.g. '1023 B', '1.5 KB', '1.0 TB'"""
    if size == 0:
        return "0 B"
    unit = 0
    value = float(size)
    while value >= 1024.0 and unit < len(SIZE_UNITS) - 1:
        value /= 1024.0
        unit += 1
    precision = 0 if unit == 0 else 1
    return f"{value:.{precision}f} {SIZE_UNITS[unit]}"


def sort_entries(entries: Iterable[DirectoryEntry]) -> List[DirectoryEntry]:
    """Directories first, then by name (case-sensitive)"""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name))


def format_header() -> str:
    return f"{'Type':<{TYPE_WIDTH}}{'Name':<{NAME_WIDTH}}{'Size':>{SIZE_WIDTH}}"


def format_entry_row(entry: DirectoryEntry) -> str:
    """Plain-text table row for one entry"""
    type_str = "DIR" if entry.is_directory else "FILE"
    size_str = DIR_SIZE_PLACEHOLDER if entry.is_directory else format_size_human(entry.size)
    return (
        f"{type_str:<{TYPE_WIDTH}}{entry.name:<{NAME_WIDTH}}{size_str:>{SIZE_WIDTH}}"
    )


def _styled_row(entry: DirectoryEntry) -> str:
    type_str = "DIR" if entry.is_directory else "FILE"
    left = escape(f"{type_str:<{TYPE_WIDTH}}{entry.name:<{NAME_WIDTH}}")
    if entry.is_directory:
        return f"[bold blue]{left}[/bold blue]{DIR_SIZE_PLACEHOLDER:>{SIZE_WIDTH}}"
    size_str = format_size_human(entry.size)
    return f"{left}[cyan]{size_str:>{SIZE_WIDTH}}[/cyan]"


def print_listing(console: Console, title: str, entries: Iterable[DirectoryEntry]):
    """Print a titled, sorted table of entries"""
    console.print(f"\n--- {escape(title)} ---", highlight=False)
    console.print(format_header(), highlight=False)
    console.print(RULE, highlight=False)
    for entry in sort_entries(entries):
        console.print(_styled_row(entry), highlight=False, emoji=False, soft_wrap=True)
    console.print(RULE, highlight=False)
