"""The index file of an operator repository."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from os import PathLike
from pathlib import Path
from typing import IO, Any, Union

import yaml

from kudokit.repo.config import Maintainer, Metadata

StrPath = Union[str, "PathLike[str]"]

DEFAULT_URL = "http://localhost/"

_SEMVER = re.compile(
    r"v?(?P<major>[0-9]+)(?:\.(?P<minor>[0-9]+))?(?:\.(?P<patch>[0-9]+))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+(?P<meta>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
)


def _version_sort_key(version: str) -> tuple:
    """Order versions by semantic version; unparsable ones sort lowest."""
    match = _SEMVER.fullmatch(version)
    if match is None:
        return (0,)
    pre = match.group("pre")
    pre_key = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in (pre.split(".") if pre else ())
    )
    return (
        1,
        int(match.group("major")),
        int(match.group("minor") or 0),
        int(match.group("patch") or 0),
        0 if pre else 1,
        pre_key,
    )


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as err:
        raise ValueError(f"unmarshalling index file: invalid time {value!r}") from err


def _format_time(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


@dataclass
class PackageVersion:
    """One version of an operator listed in the index."""

    metadata: Metadata = field(default_factory=Metadata)
    urls: list[str] = field(default_factory=list)
    removed: bool = False
    digest: str = ""

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def app_version(self) -> str:
        return self.metadata.app_version

    def to_dict(self) -> dict[str, Any]:
        data = self.metadata.to_dict()
        data["urls"] = list(self.urls)
        if self.removed:
            data["removed"] = True
        if self.digest:
            data["digest"] = self.digest
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PackageVersion:
        data = data or {}
        return cls(
            metadata=Metadata.from_dict(data),
            urls=list(data.get("urls") or []),
            removed=bool(data.get("removed", False)),
            digest=data.get("digest") or "",
        )


@dataclass
class IndexFile:
    """Operators of a repository with all their versions."""

    api_version: str = ""
    entries: dict[str, list[PackageVersion]] = field(default_factory=dict)
    generated: datetime | None = None

    def sort_packages(self) -> None:
        """Sort the versions of every operator, newest first."""
        for name, versions in self.entries.items():
            self.entries[name] = sorted(
                versions, key=lambda pv: _version_sort_key(pv.version), reverse=True
            )

    def get_by_name_and_version(self, name: str, version: str = "") -> PackageVersion:
        """Return the given version of an operator; the first listed if ``version`` is empty."""
        versions = self.entries.get(name)
        if not versions:
            raise LookupError(f"no operator found for: {name}")
        for pv in versions:
            if version == "" or pv.version == version:
                return pv
        if version == "":
            raise LookupError(f"no operator version found for {name}")
        raise LookupError(f"no operator version found for {name}-{version}")

    def add_package_version(self, package_version: PackageVersion) -> None:
        """Add a version of an operator; duplicates are refused."""
        name = package_version.name
        version = package_version.version
        if version == "":
            raise ValueError(f"operator '{name}' is missing version")
        versions = self.entries.get(name)
        if not versions:
            self.entries[name] = [package_version]
            return
        if any(pv.version == version for pv in versions):
            raise ValueError(f"operator '{name}' version: {version} already exists")
        versions.append(package_version)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "entries": {
                name: [pv.to_dict() for pv in versions]
                for name, versions in self.entries.items()
            },
            "generated": _format_time(self.generated) if self.generated else None,
        }

    def to_yaml(self) -> str:
        """Return the index as YAML text."""
        return yaml.safe_dump(self.to_dict(), sort_keys=True, default_flow_style=False)

    def write(self, stream: IO[str]) -> None:
        """Write the index as YAML to a text stream."""
        stream.write(self.to_yaml())

    def write_file(self, path: StrPath) -> None:
        """Write the index as YAML to ``path``."""
        with open(path, "w", encoding="utf-8") as stream:
            self.write(stream)


def parse_index_file(data: bytes | str) -> IndexFile:
    """Parse an index file and sort its packages; ``apiVersion`` is required."""
    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as err:
        raise ValueError(f"unmarshalling index file: {err}") from err
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("unmarshalling index file: not a mapping")
    api_version = raw.get("apiVersion") or ""
    if not api_version:
        raise ValueError("no API version specified")
    index = IndexFile(
        api_version=str(api_version),
        entries={
            name: [PackageVersion.from_dict(pv) for pv in versions or []]
            for name, versions in (raw.get("entries") or {}).items()
        },
        generated=_parse_time(raw.get("generated")),
    )
    index.sort_packages()
    return index


def new_index_file(generated: datetime | None = None) -> IndexFile:
    """Return an empty index of the current API version."""
    return IndexFile(api_version="v1", generated=generated)


def _get(operator: Any, key: str, attr: str) -> Any:
    if isinstance(operator, Mapping):
        return operator.get(key)
    return getattr(operator, attr, None)


def to_package_version(operator: Any, digest: str, url: str = "") -> PackageVersion:
    """Build the index entry of an operator served below ``url``.

    ``operator`` is an operator.yaml mapping (``name``, ``version``,
    ``appVersion``, ``description``, ``maintainers``) or an object with the
    corresponding attributes.
    """
    name = str(_get(operator, "name", "name") or "")
    version = str(_get(operator, "version", "version") or "")
    if not url:
        url = DEFAULT_URL
    if not url.endswith("/"):
        url += "/"
    maintainers = [
        Maintainer(name=str(m)) for m in _get(operator, "maintainers", "maintainers") or []
    ]
    return PackageVersion(
        metadata=Metadata(
            name=name,
            version=version,
            description=str(_get(operator, "description", "description") or ""),
            maintainers=maintainers,
            app_version=str(_get(operator, "appVersion", "app_version") or ""),
        ),
        urls=[f"{url}{name}-{version}.tgz"],
        digest=digest,
    )


def map_packages(packages: Iterable[tuple[Any, str]], url: str = "") -> list[PackageVersion]:
    """Turn ``(operator, digest)`` pairs into index entries."""
    return [to_package_version(operator, digest, url) for operator, digest in packages]