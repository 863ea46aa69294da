"""Build and runtime version information."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass

# Placeholders replaced by the release process; the "$Format" marker means
# the values were never filled in.
GIT_VERSION = "v0.0.0-master+$Format:%h$"
GIT_COMMIT = "$Format:%H$"
BUILD_DATE = "1970-01-01T00:00:00Z"

DEV_VERSION_ENV = "KUDO_DEV_VERSION"


@dataclass(frozen=True)
class Info:
    """Versioning information about the running code."""

    git_version: str
    git_commit: str
    build_date: str
    python_version: str
    compiler: str
    platform: str

    def __str__(self) -> str:
        return self.git_version

    def to_dict(self) -> dict[str, str]:
        """Return the information keyed by its serialised field names."""
        return {
            "gitVersion": self.git_version,
            "gitCommit": self.git_commit,
            "buildDate": self.build_date,
            "pythonVersion": self.python_version,
            "compiler": self.compiler,
            "platform": self.platform,
        }


def get() -> Info:
    """Return the version of the code base.

    Development builds, whose version was never stamped, report the
    ``KUDO_DEV_VERSION`` environment variable (or ``"dev"``) instead.
    """
    git_version = GIT_VERSION
    git_commit = GIT_COMMIT
    if "$Format" in git_version:
        git_version = os.environ.get(DEV_VERSION_ENV) or "dev"
        git_commit = "dev"

    return Info(
        git_version=git_version,
        git_commit=git_commit,
        build_date=BUILD_DATE,
        python_version=platform.python_version(),
        compiler=platform.python_implementation(),
        platform=f"{sys.platform}/{platform.machine()}",
    )