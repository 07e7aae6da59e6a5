"""
Package version queries against the npm registry and local installs.

This module provides:
- Version: semantic version parser and comparator
- RegistryInfo: parsed ``npm info --json`` response
- read_installed_version(): version declared by an installed package.json
- VersionOracle: registry queries and exact-version installs through npm
"""

import json
import logging
import re
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

from runtimekit.core.exceptions import (
    InvalidVersionError,
    ManifestUnreadableError,
    MetadataNotFoundError,
)

logger = logging.getLogger(__name__)

# Passed to every npm call that reaches the registry
NETWORK_FLAGS = [
    "--fetch-retry-mintimeout",
    "2000",
    "--fetch-retry-maxtimeout",
    "5000",
    "--fetch-timeout",
    "5000",
]

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@total_ordering
class Version:
    """
    Semantic version parser and comparator.

    Supports the full semver 2.0 grammar: MAJOR.MINOR.PATCH with optional
    pre-release and build metadata. Build metadata is ignored for ordering.

    Example:
        >>> Version("1.0.0-beta.2") < Version("1.0.0")
        True
        >>> Version("18.1.10") > Version("18.1.8")
        True
    """

    def __init__(self, version_string: str):
        """
        Parse version string.

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        self.original = version_string
        match = _SEMVER_RE.match(version_string.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {version_string!r}")

        self.major = int(match.group(1))
        self.minor = int(match.group(2))
        self.patch = int(match.group(3))
        self.prerelease: Tuple[str, ...] = (
            tuple(match.group(4).split(".")) if match.group(4) else ()
        )
        self.build = match.group(5) or ""

    def _key(self):
        # A release sorts after all of its pre-releases
        if not self.prerelease:
            pre = (1,)
        else:
            pre = (0,) + tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease
            )
        return (self.major, self.minor, self.patch, pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.original

    def __repr__(self) -> str:
        return f"Version('{self.original}')"


@dataclass
class RegistryInfo:
    """Subset of ``npm info --json`` output."""

    latest: Optional[str] = None
    versions: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "RegistryInfo":
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")

        dist_tags = data.get("dist-tags") or {}
        if not isinstance(dist_tags, dict):
            raise ValueError("'dist-tags' is not a JSON object")
        versions = data.get("versions") or []
        # npm prints a bare string when a package has a single version
        if isinstance(versions, str):
            versions = [versions]
        if not isinstance(versions, list):
            raise ValueError("'versions' is not a JSON array")

        return cls(latest=dist_tags.get("latest"), versions=list(versions))

    def latest_version(self) -> Optional[str]:
        if self.latest:
            return self.latest
        return self.versions[-1] if self.versions else None


def package_json_path(local_package_directory: Path, name: str) -> Path:
    return Path(local_package_directory) / "node_modules" / name / "package.json"


def read_installed_version(local_package_directory: Path, name: str) -> Optional[str]:
    """
    Read the version of an installed npm package.

    Args:
        local_package_directory: Directory containing node_modules/
        name: Package name (may be scoped, e.g. '@scope/pkg')

    Returns:
        Declared version, or None if the package is not installed

    Raises:
        ManifestUnreadableError: If package.json exists but cannot be read
    """
    path = package_json_path(local_package_directory, name)

    try:
        with open(path, "r", encoding="utf-8") as f:
            package_json = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        raise ManifestUnreadableError(path, str(e)) from e

    version = package_json.get("version") if isinstance(package_json, dict) else None
    if not isinstance(version, str):
        raise ManifestUnreadableError(path, "missing 'version' field")
    return version


class VersionOracle:
    """
    Registry queries and installs via npm.

    Attributes:
        run_subcommand: Callable(directory, subcommand, args) returning a
            CompletedProcess, typically CommandRunner.run_subcommand
    """

    def __init__(self, run_subcommand: Callable[..., Any]):
        self.run_subcommand = run_subcommand

    def latest_published_version(self, name: str) -> str:
        """
        Get the latest published version of a package.

        Returns:
            The 'latest' dist-tag, else the last listed version

        Raises:
            MetadataNotFoundError: If the registry reports no usable version
        """
        output = self.run_subcommand(None, "info", [name, "--json", *NETWORK_FLAGS])

        try:
            info = RegistryInfo.from_json(json.loads(output.stdout))
        except ValueError as e:
            raise MetadataNotFoundError(name, f"invalid registry response: {e}") from e

        version = info.latest_version()
        if version is None:
            raise MetadataNotFoundError(name)
        return version

    def install_packages(
        self, directory: Path, packages: Sequence[Tuple[str, str]]
    ) -> None:
        """Install exact package versions into ``directory``."""
        specs = [f"{name}@{version}" for name, version in packages]

        logger.info(f"Installing npm packages into {directory}: {', '.join(specs)}")
        self.run_subcommand(
            directory, "install", specs + ["--save-exact", *NETWORK_FLAGS]
        )
