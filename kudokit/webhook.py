"""Registration of webhook setup functions with a controller manager."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

ADD_TO_MANAGER_FUNCS: list[Callable[[Any], None]] = []


def add_to_manager(manager: Any, funcs: Iterable[Callable[[Any], None]] | None = None) -> None:
    """Call every setup function with ``manager``, in order.

    When ``funcs`` is omitted the module-level ``ADD_TO_MANAGER_FUNCS`` list
    is used. The first exception raised by a function stops the run and
    propagates.
    """
    for func in ADD_TO_MANAGER_FUNCS if funcs is None else funcs:
        func(manager)