"""
capfilter Output Generation

Console rendering for the command line interface.
"""

from capfilter.output.console import CapfilterConsole, get_console

__all__ = [
    "CapfilterConsole",
    "get_console",
]
