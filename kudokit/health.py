"""Health checks for Kubernetes objects and plan execution status.

Objects are plain Kubernetes-style mappings with ``kind``, ``metadata``,
``spec`` and ``status`` keys.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

log = logging.getLogger(__name__)

PHASE_STATE_COMPLETE = "COMPLETE"


class HealthError(Exception):
    """Raised when an object is not healthy."""


def _name(obj: Mapping[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("name", "")


def is_healthy(client: Any, obj: Mapping[str, Any]) -> None:
    """Raise ``HealthError`` unless ``obj`` is healthy.

    ``client`` is used only for instances: its ``get(resource, namespace,
    name)`` method must return the active plan execution. Kinds without a
    specific rule are healthy.
    """
    kind = obj.get("kind", "")
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    name = _name(obj)

    if kind == "StatefulSet":
        wanted = spec.get("replicas")
        if wanted is None:
            raise HealthError("replicas not set, so can't be healthy")
        ready = status.get("readyReplicas", 0)
        if ready == wanted:
            log.info("Statefulset %s is marked healthy", name)
            return
        log.info(
            "HealthUtil: Statefulset %s is NOT healthy. Not enough ready replicas: %s/%s",
            name, ready, status.get("replicas", 0),
        )
        raise HealthError(
            f"ready replicas ({ready}) does not equal requested replicas "
            f"({status.get('replicas', 0)})"
        )

    if kind == "Deployment":
        wanted = spec.get("replicas")
        ready = status.get("readyReplicas", 0)
        if wanted is not None and ready == wanted:
            log.info("HealthUtil: Deployment %s is marked healthy", name)
            return
        log.info(
            "HealthUtil: Deployment %s is NOT healthy. Not enough ready replicas: %s/%s",
            name, ready, wanted,
        )
        raise HealthError(
            f"ready replicas ({ready}) does not equal requested replicas ({wanted})"
        )

    if kind == "Job":
        if status.get("succeeded", 0) == 1:
            log.info('HealthUtil: Job "%s" is marked healthy', name)
            return
        raise HealthError(f'job "{name}" still running or failed')

    if kind == "Instance":
        active = status.get("activePlan") or {}
        plan_name = active.get("name", "")
        if not plan_name:
            raise HealthError(
                f"checking health of instance {name}: not healthy because does "
                "not have any active plan assigned yet"
            )
        plan_namespace = active.get("namespace", "")
        try:
            plan = client.get("planexecutions", plan_namespace, plan_name)
        except Exception as err:
            log.info(
                "Error getting PlanExecution %s/%s: %s", plan_name, plan_namespace, err
            )
            raise HealthError(f"instance active plan not found: {err}") from err
        state = (plan.get("status") or {}).get("state", "")
        log.info("HealthUtil: Instance %s is in state %s", name, state)
        if state == PHASE_STATE_COMPLETE:
            return
        raise HealthError(f"instance's active plan is in state {state}")

    log.info("HealthUtil: Unknown type is marked healthy by default")


def is_step_healthy(client: Any, step: Mapping[str, Any]) -> bool:
    """Return whether every object of the step is healthy."""
    for obj in step.get("objects") or ():
        try:
            is_healthy(client, obj)
        except HealthError:
            log.info("HealthUtil: Step %s is not healthy", step.get("name", ""))
            return False
    return True


def is_phase_healthy(phase: Mapping[str, Any]) -> bool:
    """Return whether every step of the phase is complete."""
    for step in phase.get("steps") or ():
        if step.get("state") != PHASE_STATE_COMPLETE:
            log.info(
                "HealthUtil: Phase %s is not healthy b/c step %s is not healthy",
                phase.get("name", ""), step.get("name", ""),
            )
            return False
    log.info("HealthUtil: Phase %s is healthy", phase.get("name", ""))
    return True


def is_plan_healthy(plan: Mapping[str, Any]) -> bool:
    """Return whether every phase of the plan execution status is healthy."""
    return all(is_phase_healthy(phase) for phase in plan.get("phases") or ())