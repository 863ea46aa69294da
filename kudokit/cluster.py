"""Client for the operator, operator version and instance resources of a cluster.

Objects are plain Kubernetes-style mappings with ``metadata`` and ``spec``
keys. ``KudoClient`` works on any clientset offering ``create``, ``get``,
``list`` and ``patch``; ``InMemoryClientset`` is one that keeps everything
in memory.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from kudokit.labels import OPERATOR_LABEL

API_GROUP = "kudo.dev"

OPERATORS = "operators"
OPERATOR_VERSIONS = "operatorversions"
INSTANCES = "instances"


class NotFoundError(LookupError):
    """Raised when a requested object does not exist."""


class AlreadyExistsError(ValueError):
    """Raised when an object to be created exists already."""


def _metadata(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _selector_matches(selector: str, labels: Mapping[str, str]) -> bool:
    """Return whether ``labels`` satisfy an equality-based label selector."""
    for term in (part.strip() for part in selector.split(",")):
        if not term:
            continue
        if "!=" in term:
            key, value = (s.strip() for s in term.split("!=", 1))
            if labels.get(key) == value:
                return False
        elif "==" in term or "=" in term:
            separator = "==" if "==" in term else "="
            key, value = (s.strip() for s in term.split(separator, 1))
            if labels.get(key) != value:
                return False
        elif term.startswith("!"):
            if term[1:].strip() in labels:
                return False
        elif term not in labels:
            return False
    return True


def _merge_patch(target: Any, patch: Any) -> Any:
    """Apply a JSON merge patch to ``target`` and return the result."""
    if not isinstance(patch, Mapping):
        return copy.deepcopy(patch)
    result = dict(target) if isinstance(target, Mapping) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = _merge_patch(result.get(key), value)
    return result


class InMemoryClientset:
    """Keeps objects in memory, grouped by resource, namespace and name.

    An empty namespace in ``get`` and ``list`` matches every namespace.
    """

    def __init__(self) -> None:
        self._store: dict[str, dict[tuple[str, str], dict[str, Any]]] = {}

    def _not_found(self, resource: str, name: str) -> NotFoundError:
        return NotFoundError(f'{resource}.{API_GROUP} "{name}" not found')

    def _find(self, resource: str, namespace: str, name: str) -> tuple[str, str]:
        for key in self._store.get(resource, {}):
            if key[1] == name and (namespace == "" or key[0] == namespace):
                return key
        raise self._not_found(resource, name)

    def create(self, resource: str, namespace: str, obj: Mapping[str, Any] | None) -> dict[str, Any]:
        """Store a copy of ``obj`` in ``namespace`` and return it."""
        if not isinstance(obj, Mapping):
            raise ValueError("object does not implement the Object interfaces")
        stored = copy.deepcopy(dict(obj))
        metadata = dict(stored.get("metadata") or {})
        object_namespace = metadata.get("namespace") or ""
        if object_namespace and namespace and object_namespace != namespace:
            raise ValueError(
                f"request namespace does not match object namespace, "
                f"request: {namespace!r} object: {object_namespace!r}"
            )
        if not object_namespace and namespace:
            metadata["namespace"] = namespace
        stored["metadata"] = metadata
        name = metadata.get("name") or ""
        key = (metadata.get("namespace") or "", name)
        objects = self._store.setdefault(resource, {})
        if key in objects:
            raise AlreadyExistsError(f'{resource}.{API_GROUP} "{name}" already exists')
        objects[key] = stored
        return copy.deepcopy(stored)

    def get(self, resource: str, namespace: str, name: str) -> dict[str, Any]:
        """Return a copy of the object called ``name``."""
        key = self._find(resource, namespace, name)
        return copy.deepcopy(self._store[resource][key])

    def list(self, resource: str, namespace: str, label_selector: str = "") -> list[dict[str, Any]]:
        """Return copies of the objects in ``namespace`` matching the selector."""
        return [
            copy.deepcopy(obj)
            for (obj_namespace, _), obj in self._store.get(resource, {}).items()
            if (namespace == "" or obj_namespace == namespace)
            and _selector_matches(label_selector or "", _metadata(obj).get("labels") or {})
        ]

    def patch(
        self,
        resource: str,
        namespace: str,
        name: str,
        patch: Mapping[str, Any] | str | bytes,
    ) -> dict[str, Any]:
        """Apply a JSON merge patch to an object and return the result."""
        if isinstance(patch, (str, bytes)):
            patch = json.loads(patch)
        key = self._find(resource, namespace, name)
        objects = self._store[resource]
        objects[key] = _merge_patch(objects[key], patch)
        return copy.deepcopy(objects[key])


def _wrap(err: Exception, context: str) -> Exception:
    return err.__class__(f"{context}: {err}")


class KudoClient:
    """Queries and installs operators, operator versions and instances."""

    def __init__(self, clientset: Any) -> None:
        self.clientset = clientset

    def operator_exists_in_cluster(self, name: str, namespace: str) -> bool:
        """Return whether the operator called ``name`` is installed."""
        try:
            operator = self.clientset.get(OPERATORS, namespace, name)
        except LookupError:
            return False
        print(f"operator.kudo.dev/{_metadata(operator).get('name', '')} unchanged")
        return True

    def instance_exists_in_cluster(
        self, operator_name: str, namespace: str, version: str, instance_name: str
    ) -> bool:
        """Return whether an instance of the given operator version exists."""
        instances = self.clientset.list(
            INSTANCES, namespace, f"{OPERATOR_LABEL}={operator_name}"
        )
        wanted_version = f"{operator_name}-{version}"
        return any(
            ((obj.get("spec") or {}).get("operatorVersion") or {}).get("name") == wanted_version
            and _metadata(obj).get("name") == instance_name
            for obj in instances
        )

    def get_instance(self, name: str, namespace: str) -> dict[str, Any] | None:
        """Return the instance, or ``None`` when it does not exist."""
        try:
            return self.clientset.get(INSTANCES, namespace, name)
        except NotFoundError:
            return None

    def get_operator_version(self, name: str, namespace: str) -> dict[str, Any] | None:
        """Return the operator version, or ``None`` when it does not exist."""
        try:
            return self.clientset.get(OPERATOR_VERSIONS, namespace, name)
        except NotFoundError:
            return None

    def update_instance(
        self,
        instance_name: str,
        namespace: str,
        operator_version_name: str | None = None,
        parameters: Mapping[str, str] | None = None,
    ) -> None:
        """Merge a new operator version and parameters into an instance."""
        spec: dict[str, Any] = {}
        if operator_version_name is not None:
            spec["operatorVersion"] = {"name": operator_version_name}
        if parameters is not None:
            spec["parameters"] = dict(parameters)
        self.clientset.patch(
            INSTANCES, namespace, instance_name, json.dumps({"spec": spec})
        )

    def list_instances(self, namespace: str) -> list[str]:
        """Return the names of all instances in ``namespace``."""
        return [
            _metadata(obj).get("name", "")
            for obj in self.clientset.list(INSTANCES, namespace, "")
        ]

    def operator_versions_installed(self, operator_name: str, namespace: str) -> list[str]:
        """Return the versions of the operator installed in ``namespace``."""
        return [
            (obj.get("spec") or {}).get("version", "")
            for obj in self.clientset.list(OPERATOR_VERSIONS, namespace, "")
            if _metadata(obj).get("name", "").startswith(operator_name)
        ]

    def _install(self, resource: str, obj: Any, namespace: str, what: str) -> dict[str, Any]:
        try:
            return self.clientset.create(resource, namespace, obj)
        except (LookupError, ValueError) as err:
            raise _wrap(err, f"installing {what}") from err

    def install_operator_obj_to_cluster(self, obj: Mapping[str, Any], namespace: str) -> dict[str, Any]:
        """Create an operator and return it."""
        return self._install(OPERATORS, obj, namespace, "Operator")

    def install_operator_version_obj_to_cluster(
        self, obj: Mapping[str, Any], namespace: str
    ) -> dict[str, Any]:
        """Create an operator version and return it."""
        return self._install(OPERATOR_VERSIONS, obj, namespace, "OperatorVersion")

    def install_instance_obj_to_cluster(self, obj: Mapping[str, Any], namespace: str) -> dict[str, Any]:
        """Create an instance and return it."""
        return self._install(INSTANCES, obj, namespace, "Instance")