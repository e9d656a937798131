"""Parsing of FTP LIST responses"""

from dataclasses import dataclass
from typing import List

# permissions, links, owner, group, size, month, day, time-or-year, name
LISTING_FIELDS = 9
_SIZE_FIELD = 4
_NAME_FIELD = 8
_ENTRY_TYPES = "-dlbcps"


@dataclass
class DirectoryEntry:
    """One row of a local or remote directory listing"""

    name: str
    is_directory: bool
    size: int = 0


def _is_number(field: str) -> bool:
    return field.isascii() and field.isdigit()


def _looks_like_permissions(field: str) -> bool:
    return len(field) >= 10 and field[0] in _ENTRY_TYPES


def parse_listing_line(line: str) -> DirectoryEntry:
    """Parse one Unix-style LIST line.

    Lines that don't fit the column layout are kept as a plain file named
    after the whole line, so one odd line never breaks a listing.
    """
    fields = line.split(None, LISTING_FIELDS - 1)
    if len(fields) == LISTING_FIELDS and _looks_like_permissions(fields[0]):
        links, size = fields[1], fields[_SIZE_FIELD]
        if _is_number(links) and _is_number(size):
            return DirectoryEntry(
                name=fields[_NAME_FIELD],
                is_directory=fields[0].startswith("d"),
                size=int(size),
            )
    return DirectoryEntry(name=line, is_directory=False, size=0)


def _is_total_line(line: str) -> bool:
    parts = line.split()
    return len(parts) == 2 and parts[0] == "total" and _is_number(parts[1])


def parse_listing(text: str) -> List[DirectoryEntry]:
    """Parse a full LIST response, one entry per non-blank line"""
    entries = []
    for raw in text.splitlines():
        line = raw.rstrip("\r")
        if not line.strip() or _is_total_line(line):
            continue
        entries.append(parse_listing_line(line))
    return entries
