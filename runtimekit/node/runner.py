"""
Execution of npm subcommands through the managed runtime.

Each attempt re-validates the installation, builds an isolated environment
and runs ``node npm <subcommand> ...``. An attempt that fails before the npm
process is running is retried once; an npm process that runs and exits
non-zero is reported as is.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from runtimekit.core.exceptions import (
    CommandLaunchError,
    DownloadError,
    ExtractError,
    MissingManagedBinaryError,
    NonZeroExitError,
    SpawnFailedError,
)
from runtimekit.node.installer import IS_WINDOWS, hidden_window_kwargs
from runtimekit.node.layout import InstallLayout, build_env

logger = logging.getLogger(__name__)

# Failures of one attempt that warrant a second attempt
RETRYABLE_ERRORS = (
    SpawnFailedError,
    MissingManagedBinaryError,
    DownloadError,
    ExtractError,
)

# Windows variables without which npm cannot spawn child processes
WINDOWS_PASSTHROUGH_ENV = ("SYSTEMROOT", "ComSpec")


def remap_proxy(proxy: str) -> str:
    """
    Rewrite a proxy URL so node can use it without name resolution.

    Example:
        >>> remap_proxy("http://localhost:10809")
        'http://127.0.0.1:10809'
    """
    # TODO: map to [::1] when the proxy is reached over IPv6
    return proxy.lower().replace("localhost", "127.0.0.1")


class CommandRunner:
    """
    Runs npm subcommands with one automatic retry.

    Attributes:
        ensure_installed: Callable returning a validated InstallLayout
        proxy: Optional HTTP proxy URL passed to npm
    """

    def __init__(
        self,
        ensure_installed: Callable[[], InstallLayout],
        proxy: Optional[str] = None,
    ):
        self.ensure_installed = ensure_installed
        self.proxy = proxy

    def run_subcommand(
        self,
        directory: Optional[Path],
        subcommand: str,
        args: Sequence[str] = (),
    ) -> subprocess.CompletedProcess:
        """
        Run ``npm <subcommand> <args>`` and return the captured output.

        Args:
            directory: Working directory, also passed as ``--prefix``
            subcommand: npm subcommand (e.g. 'info', 'install')
            args: Additional arguments

        Returns:
            CompletedProcess with stdout/stderr as bytes

        Raises:
            CommandLaunchError: If both attempts failed to launch npm
            NonZeroExitError: If npm ran and exited with a non-zero status
            UnsupportedPlatformError: If no release exists for this platform
            OverrideInvalidError: If a user-supplied node/npm path does not run
        """
        try:
            result = self._attempt(directory, subcommand, args)
        except RETRYABLE_ERRORS as first_error:
            logger.warning(
                f"npm {subcommand} attempt failed, retrying: {first_error}"
            )
            try:
                result = self._attempt(directory, subcommand, args)
            except RETRYABLE_ERRORS as e:
                raise CommandLaunchError(subcommand, e) from e

        if result.returncode != 0:
            raise NonZeroExitError(
                subcommand,
                result.returncode,
                result.stdout.decode("utf-8", errors="replace"),
                result.stderr.decode("utf-8", errors="replace"),
            )

        return result

    def _attempt(
        self,
        directory: Optional[Path],
        subcommand: str,
        args: Sequence[str],
    ) -> subprocess.CompletedProcess:
        layout = self.ensure_installed()
        env = build_env(layout)

        if not layout.node.exists():
            raise MissingManagedBinaryError("node binary", layout.node)
        if not layout.npm.exists():
            raise MissingManagedBinaryError("npm", layout.npm)

        command = layout.npm_command() + [subcommand, *args]

        if directory is not None:
            command += ["--prefix", str(directory)]

        if self.proxy:
            command += ["--proxy", remap_proxy(self.proxy)]

        if IS_WINDOWS:
            for name in WINDOWS_PASSTHROUGH_ENV:
                value = os.environ.get(name)
                if value is None:
                    logger.error(f"Missing environment variable: {name}!")
                else:
                    env[name] = value

        logger.debug(f"Running npm {subcommand}: {command}")
        try:
            return subprocess.run(
                command,
                cwd=str(directory) if directory is not None else None,
                env=env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                **hidden_window_kwargs(),
            )
        except OSError as e:
            raise SpawnFailedError(subcommand, str(e)) from e
