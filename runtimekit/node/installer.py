"""
Installation and repair of the managed Node.js runtime.

The installer probes the current layout with ``npm --version`` and, when the
probe fails and the user has not overridden node/npm, wipes the installation
directory and re-extracts the official release archive streamed from
nodejs.org.

Usage:
    from runtimekit.node.installer import Installer
    from runtimekit.node.settings import ConfigurationChannel

    installer = Installer(ConfigurationChannel(), support_dir)
    layout = installer.ensure_installed()
    print(layout.node)
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException

from runtimekit.core.directory import get_lock_dir
from runtimekit.core.download import open_download
from runtimekit.core.exceptions import DownloadError, ExtractError, OverrideInvalidError
from runtimekit.core.filesystem import ArchiveType, FilesystemError, safe_rmtree
from runtimekit.core.locking import LockManager
from runtimekit.core.platform import ReleasePlatform, resolve_release_platform
from runtimekit.node.layout import (
    NODE_VERSION,
    InstallLayout,
    archive_url,
    compute_layout,
    install_dir_name,
)
from runtimekit.node.settings import ConfigurationChannel, RuntimeSettings

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


def hidden_window_kwargs() -> Dict[str, Any]:
    """subprocess keyword arguments that suppress the console window on Windows."""
    if IS_WINDOWS:
        return {"creationflags": subprocess.CREATE_NO_WINDOW}
    return {}


def probe_installation(layout: InstallLayout) -> bool:
    """
    Check that npm can be launched through the layout's node binary.

    Returns:
        True if ``npm --version`` exits with status 0, False otherwise
        (including when the process cannot be spawned)
    """
    command = layout.npm_command() + ["--version"]
    logger.debug(f"Probing Node.js installation: {command}")

    try:
        result = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env={},
            **hidden_window_kwargs(),
        )
    except OSError as e:
        logger.debug(f"Probe could not start: {e}")
        return False

    return result.returncode == 0


def prepare_cache(layout: InstallLayout) -> None:
    """Create the cache directory and the blank npmrc files, ignoring failures."""
    try:
        layout.cache.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.debug(f"Could not create npm cache dir {layout.cache}: {e}")

    for rc_file in (layout.user_rc, layout.global_rc):
        try:
            rc_file.write_bytes(b"")
        except OSError as e:
            logger.debug(f"Could not write blank npmrc {rc_file}: {e}")


def _override_error(settings: RuntimeSettings) -> OverrideInvalidError:
    """Name the configured override that most likely broke the probe."""
    if settings.node is not None and (
        settings.npm is None or settings.npm.exists() or not settings.node.exists()
    ):
        return OverrideInvalidError(settings.node, "node")
    return OverrideInvalidError(settings.npm, "npm")


class Installer:
    """
    Ensures a runnable Node.js installation exists.

    All ``ensure_installed`` calls through the same channel are serialized by
    the channel lock; a file lock in the support directory serializes probes
    and repairs across processes.

    Attributes:
        channel: Configuration channel supplying the current settings
        support_dir: Root of the managed installations
        version: Pinned Node.js version
        session: requests session used for the archive download
    """

    def __init__(
        self,
        channel: ConfigurationChannel,
        support_dir: Path,
        version: str = NODE_VERSION,
        session: Optional[requests.Session] = None,
        lock_manager: Optional[LockManager] = None,
    ):
        self.channel = channel
        self.support_dir = Path(support_dir)
        self.version = version
        self.session = session
        self.lock_manager = lock_manager or LockManager(get_lock_dir(self.support_dir))

    def ensure_installed(self) -> InstallLayout:
        """
        Return a layout whose node and npm are runnable, installing if needed.

        Raises:
            UnsupportedPlatformError: If no release exists for this platform
            OverrideInvalidError: If a user-supplied node/npm path does not run
            DownloadError: If the archive cannot be fetched
            ExtractError: If the archive cannot be unpacked
        """
        with self.channel.lock:
            settings = self.channel.drain()
            logger.debug("Node runtime ensure_installed")

            release_platform = resolve_release_platform()
            layout = compute_layout(
                self.version, release_platform, settings, self.support_dir
            )

            install_id = install_dir_name(self.version, release_platform)
            with self.lock_manager.install_lock(install_id):
                if not probe_installation(layout):
                    if layout.has_override:
                        raise _override_error(settings)
                    self._install(layout, release_platform)

            # Also runs for existing installations so older ones get the rc files
            prepare_cache(layout)
            return layout

    def _install(self, layout: InstallLayout, release_platform: ReleasePlatform) -> None:
        install_dir = layout.install_dir
        logger.info(f"Installing Node.js {self.version} into {install_dir}")

        try:
            safe_rmtree(install_dir)
        except (FilesystemError, ValueError) as e:
            logger.debug(f"Could not remove {install_dir}: {e}")

        try:
            install_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractError(install_dir, f"error creating install dir: {e}") from e

        archive_type = ArchiveType.for_os(release_platform.os)
        url = archive_url(self.version, release_platform, archive_type.extension)

        with open_download(url, session=self.session) as stream:
            try:
                archive_type.extract(stream, install_dir, strip=1)
            except RequestException as e:
                raise DownloadError(url, str(e)) from e

        logger.info(f"Node.js {self.version} installed: {install_dir}")
