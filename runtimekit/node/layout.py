"""
On-disk layout of a managed Node.js installation.

The layout is recomputed for every operation from the pinned version, the
release platform and the current settings; nothing here touches the disk.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from runtimekit.core.directory import get_node_root
from runtimekit.core.platform import ReleasePlatform
from runtimekit.node.settings import RuntimeSettings

NODE_VERSION = "v22.5.1"

DIST_URL = "https://nodejs.org/dist"

# Paths relative to the installation directory
_NODE_PATH = {"posix": "bin/node", "win": "node.exe"}
_NPM_PATH = {"posix": "bin/npm", "win": "node_modules/npm/bin/npm-cli.js"}

BLANK_USER_RC = "blank_user_npmrc"
BLANK_GLOBAL_RC = "blank_global_npmrc"


def install_dir_name(version: str, release_platform: ReleasePlatform) -> str:
    """
    Example:
        >>> install_dir_name("v22.5.1", ReleasePlatform("linux", "x64"))
        'node-v22.5.1-linux-x64'
    """
    return f"node-{version}-{release_platform.release_string()}"


@dataclass(frozen=True)
class InstallLayout:
    """
    Resolved paths of a Node.js installation.

    Attributes:
        install_dir: Directory the release archive is extracted into
        node: Node binary (override or default)
        npm: npm entry point (override or default)
        cache: Private npm cache directory
        has_override: True if node or npm was set explicitly by the user
    """

    install_dir: Path
    node: Path
    npm: Path
    cache: Path
    has_override: bool = False

    @property
    def user_rc(self) -> Path:
        return self.cache / BLANK_USER_RC

    @property
    def global_rc(self) -> Path:
        return self.cache / BLANK_GLOBAL_RC

    def node_command(self) -> List[str]:
        return [str(self.node)]

    def npm_command(self) -> List[str]:
        """
        Build the npm invocation pinned to the private cache and blank rc files.

        The returned argv must be spawned with an explicitly built environment
        so npm never sees the caller's variables or user configuration.
        """
        return self.node_command() + [
            str(self.npm),
            "--cache",
            str(self.cache),
            "--userconfig",
            str(self.user_rc),
            "--globalconfig",
            str(self.global_rc),
        ]

    def search_path(self) -> List[str]:
        """Directories that must lead PATH for node and npm."""
        return [str(self.node.parent), str(self.npm.parent)]


def compute_layout(
    version: str,
    release_platform: ReleasePlatform,
    settings: RuntimeSettings,
    support_dir: Path,
) -> InstallLayout:
    """
    Compute the installation layout for a version and platform.

    Args:
        version: Pinned Node.js version (e.g. 'v22.5.1')
        release_platform: Resolved release tokens
        settings: Current user overrides
        support_dir: Support directory root

    Returns:
        InstallLayout with absolute paths
    """
    install_dir = get_node_root(support_dir) / install_dir_name(
        version, release_platform
    )
    family = "win" if release_platform.is_windows else "posix"

    return InstallLayout(
        install_dir=install_dir,
        node=settings.node or install_dir / _NODE_PATH[family],
        npm=settings.npm or install_dir / _NPM_PATH[family],
        cache=settings.cache or install_dir / "cache",
        has_override=settings.node is not None or settings.npm is not None,
    )


def archive_url(version: str, release_platform: ReleasePlatform, extension: str) -> str:
    """
    Example:
        >>> archive_url("v22.5.1", ReleasePlatform("win", "x64"), "zip")
        'https://nodejs.org/dist/v22.5.1/node-v22.5.1-win-x64.zip'
    """
    file_name = f"{install_dir_name(version, release_platform)}.{extension}"
    return f"{DIST_URL}/{version}/{file_name}"


def build_env(
    layout: InstallLayout, inherited: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    """
    Build the subprocess environment: only PATH, with managed dirs first.

    Args:
        layout: Installation layout
        inherited: Environment to take the existing PATH from
    """
    inherited = os.environ if inherited is None else inherited
    entries = layout.search_path()
    existing = inherited.get("PATH")
    if existing:
        entries.extend(existing.split(os.pathsep))
    return {"PATH": os.pathsep.join(entries)}
