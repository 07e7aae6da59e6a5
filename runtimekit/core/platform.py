"""
Platform detection for RuntimeKit.

This module maps the running operating system and CPU architecture onto the
naming scheme used by the published Node.js release archives
(e.g. ``node-v22.5.1-linux-x64.tar.gz``).

Features:
- Operating system token resolution ('darwin', 'linux', 'win')
- CPU architecture token resolution ('x64', 'arm64')
- Fast failure on platforms without an official release

Usage:
    from runtimekit.core.platform import resolve_release_platform

    release_platform = resolve_release_platform()
    print(f"Release suffix: {release_platform.release_string()}")
"""

import platform
from dataclasses import dataclass
from typing import Optional

from runtimekit.core.exceptions import UnsupportedPlatformError

# platform.system() value -> release OS token
_OS_TOKENS = {
    "darwin": "darwin",
    "linux": "linux",
    "windows": "win",
}

# platform.machine() value -> release architecture token
_ARCH_TOKENS = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


@dataclass(frozen=True)
class ReleasePlatform:
    """
    Platform tokens as used by the Node.js distribution.

    Attributes:
        os: Release OS token ('darwin', 'linux', 'win')
        arch: Release architecture token ('x64', 'arm64')
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "win"

    def release_string(self) -> str:
        """
        Get the platform suffix used in release file names.

        Example:
            >>> ReleasePlatform("linux", "x64").release_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.release_string()


def resolve_release_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> ReleasePlatform:
    """
    Resolve release tokens for the given (or current) platform.

    This performs no filesystem or network access.

    Args:
        system: OS name as returned by platform.system() (default: current)
        machine: Machine name as returned by platform.machine() (default: current)

    Returns:
        ReleasePlatform with the OS and architecture tokens

    Raises:
        UnsupportedPlatformError: If no release exists for the OS or architecture

    Example:
        >>> resolve_release_platform("Darwin", "arm64")
        ReleasePlatform(os='darwin', arch='arm64')
    """
    if system is None:
        system = platform.system()
    if machine is None:
        machine = platform.machine()

    os_token = _OS_TOKENS.get(system.lower())
    if os_token is None:
        raise UnsupportedPlatformError("os", system)

    arch_token = _ARCH_TOKENS.get(machine.lower())
    if arch_token is None:
        raise UnsupportedPlatformError("architecture", machine)

    return ReleasePlatform(os=os_token, arch=arch_token)


def is_supported_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> bool:
    """Check whether a Node.js release exists for the platform."""
    try:
        resolve_release_platform(system, machine)
    except UnsupportedPlatformError:
        return False
    return True


__all__ = [
    "ReleasePlatform",
    "resolve_release_platform",
    "is_supported_platform",
]
