"""Label and annotation keys used on managed Kubernetes objects."""

from __future__ import annotations

OPERATOR_LABEL = "kudo.dev/operator"
OPERATOR_VERSION_ANNOTATION = "kudo.dev/operator-version"
INSTANCE_LABEL = "kudo.dev/instance"
HERITAGE_LABEL = "heritage"

PLAN_EXECUTION_ANNOTATION = "kudo.dev/plan-execution"
PLAN_ANNOTATION = "kudo.dev/plan"
PHASE_ANNOTATION = "kudo.dev/phase"
STEP_ANNOTATION = "kudo.dev/step"


def string_value(v: str | None) -> str:
    """Return ``v``, or an empty string when it is ``None``."""
    return "" if v is None else v