"""Small command-line helpers."""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Iterable, Sequence
from typing import Any

_OKAY_RESPONSES = ("y", "Y", "yes", "Yes", "YES")
_NOKAY_RESPONSES = ("n", "N", "no", "No", "NO")
_RETRY_PROMPT = "Please type Yes or no and then press enter: "
_INTEGER = re.compile(r"[+-]?\d+")


def ask_for_confirmation(
    read_line: Callable[[], str] | None = None,
    write: Callable[[str], Any] | None = None,
) -> bool:
    """Ask until the user answers yes or no; an empty answer means yes.

    ``read_line`` returns one line of input (``input`` by default) and
    ``write`` prints the retry prompt (standard output by default). End of
    input counts as an empty answer.
    """
    read_line = read_line or input
    write = write or sys.stdout.write
    while True:
        try:
            line = read_line()
        except EOFError:
            line = ""
        words = line.split()
        response = words[0] if words else ""
        if response == "" or contains_string(_OKAY_RESPONSES, response):
            return True
        if contains_string(_NOKAY_RESPONSES, response):
            return False
        write(_RETRY_PROMPT)


def _entry_name(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return entry.get("name") or ""
    return getattr(entry, "name", "") or ""


def _atoi(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def sort_directory_content(entries: Sequence[Any] | None) -> list[Any]:
    """Return the directory entries sorted by numeric name, highest first.

    Entries may be names, mappings with a ``name`` key or objects with a
    ``name`` attribute. Names that are not integers sort as zero.
    """
    if not entries:
        raise ValueError("empty repository slice")
    return sorted(entries, key=lambda e: _atoi(_entry_name(e)), reverse=True)


def pos_string(items: Iterable[str] | None, element: str) -> int:
    """Return the index of the first ``element`` in ``items``, or -1."""
    return next(
        (index for index, item in enumerate(items or ()) if item == element), -1
    )


def contains_string(items: Iterable[str] | None, element: str) -> bool:
    """Return whether ``items`` contains ``element``."""
    return pos_string(items, element) != -1