"""Parsing of multi-document Kubernetes YAML."""

from __future__ import annotations

from typing import Any

import yaml


def parse_kubernetes_objects(text: str) -> list[dict[str, Any]]:
    """Parse the objects of a YAML text whose documents are split by ``---``.

    Empty parts are skipped. Every other part must be a mapping holding
    ``apiVersion`` and ``kind``; otherwise ``ValueError`` is raised.
    """
    objects: list[dict[str, Any]] = []
    for part in text.split("---"):
        if part in ("", "\n"):
            continue
        try:
            obj = yaml.safe_load(part)
        except yaml.YAMLError as err:
            raise ValueError(f"invalid YAML document: {err}") from err
        if not isinstance(obj, dict):
            raise ValueError("document is not a Kubernetes object")
        for key in ("apiVersion", "kind"):
            if not obj.get(key):
                raise ValueError(f"Object '{key}' is missing")
        objects.append(obj)
    return objects