"""
Directory structure management for RuntimeKit.

This module resolves the per-user support directory that holds managed
runtimes and lock files.

Directory Structure:
    Support dir (~/.runtimekit/ or %USERPROFILE%\\.runtimekit\\):
        - node/       : Extracted Node.js installations, one per version/platform
            - node-<version>-<os>-<arch>/
                - bin/node, bin/npm (node.exe, node_modules/npm/... on Windows)
                - cache/  : Private npm cache and blank npmrc files
        - lock/       : Concurrent access control files
"""

import os
from pathlib import Path

from runtimekit.core.exceptions import RuntimeKitError


class DirectoryError(RuntimeKitError):
    """Raised when the support directory cannot be determined."""

    pass


def get_support_dir() -> Path:
    """
    Get the platform-specific support directory path.

    Returns:
        Path: The support directory path.
            - Windows: %USERPROFILE%\\.runtimekit
            - Linux/macOS: ~/.runtimekit/

    Raises:
        DirectoryError: If USERPROFILE is not set on Windows

    Example:
        >>> support_dir = get_support_dir()
        >>> print(support_dir)
        /home/user/.runtimekit  # on Linux
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine support directory."
            )
        return Path(user_profile) / ".runtimekit"
    else:  # Linux/macOS
        return Path.home() / ".runtimekit"


def get_node_root(support_dir: Path) -> Path:
    """Directory containing all managed Node.js installations."""
    return Path(support_dir) / "node"


def get_lock_dir(support_dir: Path) -> Path:
    """Directory containing lock files."""
    return Path(support_dir) / "lock"
