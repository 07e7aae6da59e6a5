"""
Managed Node.js runtime for RuntimeKit.

This module provides the public runtime surface used by callers that need
node or npm without depending on a system installation.

Classes:
    NodeRuntime: Abstract runtime interface
    RealNodeRuntime: Downloads, validates and runs the pinned Node.js release
    FakeNodeRuntime: Test double that fails loudly when used

Example:
    from runtimekit.node.runtime import RealNodeRuntime

    node = RealNodeRuntime()
    print(node.binary_path())
    version = node.npm_package_latest_version("prettier")
    node.npm_install_packages(Path("/tmp/tools"), [("prettier", version)])
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Tuple

import requests

from runtimekit.core.directory import get_support_dir
from runtimekit.core.exceptions import RuntimeKitError
from runtimekit.node.installer import Installer
from runtimekit.node.layout import NODE_VERSION
from runtimekit.node.runner import CommandRunner
from runtimekit.node.settings import ConfigurationChannel, RuntimeSettings
from runtimekit.node.versions import Version, VersionOracle, read_installed_version

logger = logging.getLogger(__name__)


class NodeRuntime(ABC):
    """
    Abstract interface of a Node.js runtime.

    Abstract Methods:
        binary_path(): Path to a runnable node binary
        configure(): Publish new runtime settings
        run_npm_subcommand(): Run an npm subcommand
        npm_package_latest_version(): Latest published version of a package
        npm_install_packages(): Install exact package versions
        npm_package_installed_version(): Version of an installed package
    """

    @abstractmethod
    def binary_path(self) -> Path:
        pass

    @abstractmethod
    def configure(self, settings: RuntimeSettings) -> None:
        pass

    @abstractmethod
    def run_npm_subcommand(
        self,
        directory: Optional[Path],
        subcommand: str,
        args: Sequence[str] = (),
    ) -> subprocess.CompletedProcess:
        pass

    @abstractmethod
    def npm_package_latest_version(self, name: str) -> str:
        pass

    @abstractmethod
    def npm_install_packages(
        self, directory: Path, packages: Sequence[Tuple[str, str]]
    ) -> None:
        pass

    @abstractmethod
    def npm_package_installed_version(
        self, local_package_directory: Path, name: str
    ) -> Optional[str]:
        pass

    def should_install_npm_package(
        self,
        package_name: str,
        local_executable_path: Path,
        local_package_directory: Path,
        latest_version: str,
    ) -> bool:
        """
        Decide whether a package needs to be (re)installed.

        Installing is the answer whenever something cannot be determined:
        a missing executable, an unreadable or missing package.json, or a
        version that is not valid semver.

        Returns:
            True if the package should be installed
        """
        if not Path(local_executable_path).exists():
            return True

        try:
            installed_version = self.npm_package_installed_version(
                local_package_directory, package_name
            )
            if installed_version is None:
                return True

            return Version(installed_version) < Version(latest_version)
        except (RuntimeKitError, OSError, ValueError) as e:
            logger.warning(f"Reinstalling npm package {package_name}: {e}")
            return True


class RealNodeRuntime(NodeRuntime):
    """
    Node.js runtime installed on demand into the support directory.

    Attributes:
        channel: Configuration channel for settings updates
        installer: Installer for the pinned release
        runner: npm subcommand runner
        oracle: Registry queries and installs
    """

    def __init__(
        self,
        support_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        proxy: Optional[str] = None,
        version: str = NODE_VERSION,
    ):
        """
        Initialize runtime.

        Args:
            support_dir: Support directory (default: ~/.runtimekit)
            session: requests session for the archive download
            proxy: HTTP proxy for both the download and npm
            version: Node.js version to manage
        """
        self.channel = ConfigurationChannel()
        self.installer = Installer(
            self.channel,
            Path(support_dir) if support_dir else get_support_dir(),
            version=version,
            session=session if session is not None else requests.Session(),
        )
        self.runner = CommandRunner(self.installer.ensure_installed)
        self.oracle = VersionOracle(self.runner.run_subcommand)
        if proxy:
            self.use_proxy(proxy)

    def use_proxy(self, proxy: str) -> None:
        """Route both the archive download and npm through an HTTP proxy."""
        self.installer.session.proxies.update({"http": proxy, "https": proxy})
        self.runner.proxy = proxy

    def binary_path(self) -> Path:
        return self.installer.ensure_installed().node

    def configure(self, settings: RuntimeSettings) -> None:
        self.channel.publish(settings)

    def run_npm_subcommand(
        self,
        directory: Optional[Path],
        subcommand: str,
        args: Sequence[str] = (),
    ) -> subprocess.CompletedProcess:
        return self.runner.run_subcommand(directory, subcommand, args)

    def npm_package_latest_version(self, name: str) -> str:
        return self.oracle.latest_published_version(name)

    def npm_install_packages(
        self, directory: Path, packages: Sequence[Tuple[str, str]]
    ) -> None:
        self.oracle.install_packages(directory, packages)

    def npm_package_installed_version(
        self, local_package_directory: Path, name: str
    ) -> Optional[str]:
        return read_installed_version(local_package_directory, name)


class FakeNodeRuntime(NodeRuntime):
    """Runtime for tests whose code paths must never reach node or npm."""

    def binary_path(self) -> Path:
        raise AssertionError("Should not query the node binary path")

    def configure(self, settings: RuntimeSettings) -> None:
        pass

    def run_npm_subcommand(
        self,
        directory: Optional[Path],
        subcommand: str,
        args: Sequence[str] = (),
    ) -> subprocess.CompletedProcess:
        raise AssertionError(
            f"Should not run npm subcommand '{subcommand}' with args {list(args)}"
        )

    def npm_package_latest_version(self, name: str) -> str:
        raise AssertionError(f"Should not query npm package '{name}' for latest version")

    def npm_install_packages(
        self, directory: Path, packages: Sequence[Tuple[str, str]]
    ) -> None:
        raise AssertionError(f"Should not install packages {list(packages)}")

    def npm_package_installed_version(
        self, local_package_directory: Path, name: str
    ) -> Optional[str]:
        raise AssertionError(
            f"Should not query npm package '{name}' for installed version"
        )
