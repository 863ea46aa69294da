"""Access to a remote operator repository."""

from __future__ import annotations

import io
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from kudokit.repo.config import Configuration, StrPath, configuration_from_settings
from kudokit.repo.index import IndexFile, parse_index_file

Fetch = Callable[[str], bytes]

_TIMEOUT = 30


def _http_get(url: str) -> bytes:
    with urllib.request.urlopen(url, timeout=_TIMEOUT) as response:
        return response.read()


def _with_path(url: str, path: str) -> str:
    parts = urlsplit(url)
    return urlunsplit(parts._replace(path=path))


class RepositoryClient:
    """Downloads the index and packages of one repository."""

    def __init__(self, config: Configuration, fetch: Fetch | None = None) -> None:
        try:
            urlsplit(config.url)
        except ValueError as err:
            raise ValueError(f"invalid repository URL: {config.url}") from err
        self.config = config
        self.fetch = fetch or _http_get

    def _get(self, url: str, what: str) -> bytes:
        try:
            return self.fetch(url)
        except OSError as err:
            raise ConnectionError(f"getting {what} url: {err}") from err

    def download_index_file(self) -> IndexFile:
        """Fetch and parse the repository's index.yaml."""
        path = urlsplit(self.config.url).path
        if path.endswith("/"):
            path = path[:-1]
        index_url = _with_path(self.config.url, f"{path}/index.yaml")
        return parse_index_file(self._get(index_url, "index"))

    def get_package_reader(self, name: str, version: str = "") -> io.BytesIO:
        """Return the package archive of an operator; the latest if ``version`` is empty."""
        try:
            index = self.download_index_file()
        except OSError as err:
            raise ConnectionError(f"could not download repository index file: {err}") from err
        except ValueError as err:
            raise ValueError(f"could not download repository index file: {err}") from err

        try:
            package_version = index.get_by_name_and_version(name, version)
        except LookupError as err:
            raise LookupError(f"getting {name} in index file: {err}") from err

        package_name = f"{package_version.name}-{package_version.version}"
        path = urlsplit(self.config.url).path
        package_url = _with_path(self.config.url, f"{path}/{package_name}.tgz")
        return io.BytesIO(self._get(package_url, "package"))


def client_from_settings(repository_file: StrPath, repo_name: str) -> RepositoryClient:
    """Return a client for the repository called ``repo_name``."""
    return RepositoryClient(configuration_from_settings(repository_file, repo_name))


def get_operator_version_dependencies(operator_version: Mapping[str, Any]) -> list[str]:
    """Return the names of the operators an operator version depends on."""
    spec = operator_version.get("spec") or {}
    return [dep.get("name", "") for dep in spec.get("dependencies") or []]