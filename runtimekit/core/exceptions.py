"""
Centralized exception hierarchy for RuntimeKit.

This module defines all custom exceptions used across the codebase
to eliminate duplication and provide clear exception semantics.
"""

from pathlib import Path
from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class RuntimeKitError(Exception):
    """Base exception for all RuntimeKit errors."""

    pass


class ConfigError(RuntimeKitError):
    """Settings file parsing or validation error."""

    pass


# ============================================================================
# Node Runtime Exceptions
# ============================================================================


class NodeRuntimeError(RuntimeKitError):
    """Base exception for managed Node.js runtime errors."""

    pass


class UnsupportedPlatformError(NodeRuntimeError):
    """Raised when the running OS or CPU architecture has no Node.js release."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Running on unsupported {kind}: {value}")


class OverrideInvalidError(NodeRuntimeError):
    """Raised when a user-configured node/npm path cannot be executed."""

    def __init__(self, path: Path, component: str = "node"):
        self.path = path
        self.component = component
        super().__init__(f"{component} override {str(path)!r} could not be executed")


class DownloadError(NodeRuntimeError):
    """Raised when the Node.js archive cannot be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Error downloading Node.js archive {url}: {reason}")


class ExtractError(NodeRuntimeError):
    """Raised when the Node.js archive cannot be decompressed or unpacked."""

    def __init__(self, destination: Path, reason: str):
        self.destination = destination
        super().__init__(
            f"Error extracting Node.js archive into {destination}: {reason}"
        )


class MissingManagedBinaryError(NodeRuntimeError):
    """Raised when the node binary or npm entry point is absent on disk."""

    def __init__(self, component: str, path: Path):
        self.component = component
        self.path = path
        super().__init__(f"missing {component} file: {path}")


class SpawnFailedError(NodeRuntimeError):
    """Raised when the npm process cannot be created."""

    def __init__(self, subcommand: str, reason: str):
        self.subcommand = subcommand
        super().__init__(f"failed to spawn npm {subcommand}: {reason}")


class CommandLaunchError(NodeRuntimeError):
    """Raised when both attempts to launch an npm subcommand failed."""

    def __init__(self, subcommand: str, error: Exception):
        self.subcommand = subcommand
        self.error = error
        super().__init__(
            f"failed to launch npm subcommand {subcommand} subcommand\nerr: {error}"
        )


class NonZeroExitError(NodeRuntimeError):
    """Raised when an npm subcommand ran but exited with a non-zero status."""

    def __init__(self, subcommand: str, returncode: int, stdout: str, stderr: str):
        self.subcommand = subcommand
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"failed to execute npm {subcommand} subcommand "
            f"(exit code {returncode}):\nstdout: {stdout!r}\nstderr: {stderr!r}"
        )


class MetadataNotFoundError(NodeRuntimeError):
    """Raised when the registry returns no usable version for a package."""

    def __init__(self, package_name: str, detail: Optional[str] = None):
        self.package_name = package_name
        msg = f"no version found for npm package {package_name}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ManifestUnreadableError(NodeRuntimeError):
    """Raised when an installed package.json exists but cannot be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot read package manifest {path}: {reason}")


class InvalidVersionError(NodeRuntimeError):
    """Invalid semantic version string."""

    pass
