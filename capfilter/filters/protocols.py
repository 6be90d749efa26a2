"""
capfilter Protocol Table

Case-insensitive IP protocol name -> number lookup, read from the system
protocol database (/etc/protocols). The process default table is loaded
once on first use and never modified afterwards.
"""

import threading
from pathlib import Path
from typing import Iterable, Protocol

import structlog

from capfilter.config import settings

logger = structlog.get_logger(__name__)


class ProtocolLookup(Protocol):
    """Anything that resolves a protocol name to its number."""

    def lookup(self, name: str) -> int | None:
        ...


class ProtocolTable:
    """
    Read-only protocol name table.

    Each database line contributes a primary name and an optional alias,
    both mapped to the same number:

        tcp     6       TCP     # transmission control protocol
    """

    def __init__(self, entries: dict[str, int] | None = None) -> None:
        self._entries: dict[str, int] = {
            name.lower(): number for name, number in (entries or {}).items()
        }

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> int | None:
        """Return the protocol number for name, or None if unknown."""
        if not name:
            return None
        return self._entries.get(name.lower())

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ProtocolTable":
        """
        Parse protocol database lines.

        Blank lines, comments and malformed lines are skipped.
        """
        entries: dict[str, int] = {}

        for line in lines:
            content = line.split("#", 1)[0].split()
            if len(content) < 2:
                continue

            name, number = content[0], content[1]
            if not number.isdigit():
                continue

            entries[name.lower()] = int(number)
            if len(content) > 2:
                entries[content[2].lower()] = int(number)

        return cls(entries)

    @classmethod
    def from_file(cls, path: Path) -> "ProtocolTable":
        """Load a protocol database file."""
        with open(path, encoding="utf-8", errors="replace") as f:
            return cls.from_lines(f)


# =============================================================================
# Process Default
# =============================================================================

_default_table: ProtocolTable | None = None
_default_lock = threading.Lock()


def get_protocol_table() -> ProtocolTable:
    """
    Get the process-wide protocol table.

    The file named by settings.protocols_file is read on first call only.
    A missing file yields an empty table (names then fail to resolve).
    """
    global _default_table
    if _default_table is None:
        with _default_lock:
            if _default_table is None:
                path = settings.protocols_file
                try:
                    table = ProtocolTable.from_file(path)
                except OSError as e:
                    logger.warning("protocol_table_unavailable", path=str(path), error=str(e))
                    table = ProtocolTable()
                else:
                    logger.info("protocol_table_loaded", path=str(path), entries=len(table))
                _default_table = table
    return _default_table


def lookup_protocol(name: str) -> int | None:
    """Resolve a protocol name with the process default table."""
    return get_protocol_table().lookup(name)
