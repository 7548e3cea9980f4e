"""Version metadata for the web-push-testing package.

The version comes from the installed distribution metadata.  Packaged or CI
builds may pin it through ``WEBPUSH_TESTING_VERSION``; a source checkout that
was never installed falls back to the base version below.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
import os
from typing import Final


DISTRIBUTION_NAME: Final[str] = "web-push-testing"
_BASE_VERSION: Final[str] = "1.0.0"


def _compute_version() -> str:
    explicit = os.getenv("WEBPUSH_TESTING_VERSION")
    if explicit:
        return explicit
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return _BASE_VERSION


@dataclass(frozen=True, slots=True)
class BuildInfo:
    name: str
    version: str

    def describe(self) -> str:
        return f"{self.name}: {self.version}"


def _load_build_info() -> BuildInfo:
    return BuildInfo(name=DISTRIBUTION_NAME, version=_compute_version())


BUILD_INFO: Final[BuildInfo] = _load_build_info()

__all__ = ["BuildInfo", "BUILD_INFO"]
