"""Operator repository configuration and the repositories file."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

StrPath = Union[str, "PathLike[str]"]

VERSION = "v1"
DEFAULT_REPO_NAME = "community"
DEFAULT_REPO_URL = "https://kudo-repository.storage.googleapis.com"


@dataclass
class Maintainer:
    """A maintainer of an operator."""

    name: str = ""
    email: str = ""
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised form, leaving out empty fields."""
        pairs = (("name", self.name), ("email", self.email), ("url", self.url))
        return {key: value for key, value in pairs if value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Maintainer:
        data = data or {}
        return cls(
            name=data.get("name") or "",
            email=data.get("email") or "",
            url=data.get("url") or "",
        )


@dataclass
class Metadata:
    """Descriptive data of an operator, as found in an operator.yaml file."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    home: str = ""
    sources: list[str] = field(default_factory=list)
    description: str = ""
    maintainers: list[Maintainer] = field(default_factory=list)
    deprecated: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised form, leaving out empty fields."""
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "appVersion": self.app_version,
            "home": self.home,
            "sources": list(self.sources),
            "description": self.description,
            "maintainers": [m.to_dict() for m in self.maintainers],
            "deprecated": self.deprecated,
        }
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Metadata:
        data = data or {}
        return cls(
            name=str(data.get("name") or ""),
            version=str(data.get("version") or ""),
            app_version=str(data.get("appVersion") or ""),
            home=data.get("home") or "",
            sources=list(data.get("sources") or []),
            description=data.get("description") or "",
            maintainers=[Maintainer.from_dict(m) for m in data.get("maintainers") or []],
            deprecated=bool(data.get("deprecated", False)),
        )


@dataclass
class Configuration:
    """Where an operator repository lives and what it is called."""

    url: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "name": self.name}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Configuration:
        data = data or {}
        return cls(url=data.get("url") or "", name=data.get("name") or "")


DEFAULT = Configuration(name=DEFAULT_REPO_NAME, url=DEFAULT_REPO_URL)


@dataclass
class Repositories:
    """The known repositories and which one is in use."""

    repo_version: str = ""
    context: str = ""
    repositories: list[Configuration] = field(default_factory=list)

    def get_configuration(self, name: str) -> Configuration | None:
        """Return the repository called ``name``, or ``None``."""
        return next((repo for repo in self.repositories if repo.name == name), None)

    def current_configuration(self) -> Configuration | None:
        """Return the repository named by the current context."""
        return self.get_configuration(self.context)

    def add(self, *args: Configuration) -> None:
        """Append the given repository configurations."""
        self.repositories.extend(args)

    def remove(self, name: str) -> bool:
        """Remove every repository called ``name``; return whether any was."""
        kept = [repo for repo in self.repositories if repo.name != name]
        found = len(kept) != len(self.repositories)
        self.repositories = kept
        return found

    def set_context(self, context: str) -> None:
        """Switch to the repository called ``context``."""
        if self.get_configuration(context) is None:
            raise LookupError(f"no config found with name: {context}")
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "repoVersion": self.repo_version,
            "context": self.context,
            "repositories": [repo.to_dict() for repo in self.repositories],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Repositories:
        data = data or {}
        return cls(
            repo_version=data.get("repoVersion") or "",
            context=data.get("context") or "",
            repositories=[Configuration.from_dict(r) for r in data.get("repositories") or []],
        )

    def write_file(self, path: StrPath) -> None:
        """Write the repositories file to ``path`` as YAML."""
        text = yaml.safe_dump(self.to_dict(), sort_keys=True, default_flow_style=False)
        Path(path).write_text(text, encoding="utf-8")


def new_repositories() -> Repositories:
    """Return repositories holding only the default repository."""
    return Repositories(
        repo_version=VERSION,
        context=DEFAULT_REPO_NAME,
        repositories=[dataclasses.replace(DEFAULT)],
    )


def load_repositories(path: StrPath) -> Repositories:
    """Read a repositories file."""
    file = Path(path)
    if not file.exists():
        raise FileNotFoundError(
            f"could not load repositories file ({path}).\n"
            "You might need to run `kudo init` (or "
            "`kudo init --client-only` if kudo is "
            "already installed)"
        )
    try:
        data = yaml.safe_load(file.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        raise ValueError(f"invalid repositories file {path}: {err}") from err
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"invalid repositories file {path}: not a mapping")
    return Repositories.from_dict(data)


def configuration_from_settings(repository_file: StrPath, repo_name: str) -> Configuration:
    """Return the configuration of ``repo_name``.

    When the repositories file cannot be read, the defaults are used.
    """
    try:
        repositories = load_repositories(repository_file)
    except (OSError, ValueError):
        repositories = new_repositories()
    repo = repositories.get_configuration(repo_name)
    if repo is None:
        raise LookupError(f"unable to find respository for {repo_name}")
    return repo