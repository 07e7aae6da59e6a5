"""
RuntimeKit CLI argument parser.

This module implements the command-line interface for RuntimeKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from runtimekit.core.exceptions import RuntimeKitError
from runtimekit.core.locking import LockTimeout

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("runtimekit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """RuntimeKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="runtimekit",
            description="RuntimeKit - Managed Node.js runtime and npm access",
            epilog='Use "runtimekit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"RuntimeKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            default=Path("runtimekit.yaml"),
            help="Path to settings file (default: ./runtimekit.yaml)",
        )
        parser.add_argument(
            "--support-dir",
            type=Path,
            metavar="PATH",
            help="Directory holding managed runtimes (default: ~/.runtimekit)",
        )
        parser.add_argument(
            "--proxy",
            metavar="URL",
            help="HTTP proxy for downloads and npm (overrides settings file)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_path_command(subparsers)
        self._add_npm_command(subparsers)
        self._add_latest_command(subparsers)
        self._add_installed_command(subparsers)
        self._add_install_command(subparsers)
        self._add_check_command(subparsers)

        return parser

    def _add_path_command(self, subparsers):
        """Add 'path' subcommand."""
        subparsers.add_parser(
            "path",
            help="Print the node binary path",
            description="Install Node.js if needed and print the node binary path",
        )

    def _add_npm_command(self, subparsers):
        """Add 'npm' subcommand."""
        parser = subparsers.add_parser(
            "npm",
            help="Run an npm subcommand",
            description="Run an npm subcommand with the managed runtime",
        )
        parser.add_argument(
            "--dir",
            type=Path,
            metavar="DIR",
            help="Working directory, also passed to npm as --prefix",
        )
        parser.add_argument("subcommand", metavar="SUBCOMMAND", help="npm subcommand")
        parser.add_argument(
            "npm_args",
            nargs=argparse.REMAINDER,
            metavar="ARGS",
            help="Arguments passed to npm",
        )

    def _add_latest_command(self, subparsers):
        """Add 'latest' subcommand."""
        parser = subparsers.add_parser(
            "latest",
            help="Print the latest published version of a package",
        )
        parser.add_argument("package", metavar="NAME", help="npm package name")

    def _add_installed_command(self, subparsers):
        """Add 'installed' subcommand."""
        parser = subparsers.add_parser(
            "installed",
            help="Print the installed version of a package",
        )
        parser.add_argument("package", metavar="NAME", help="npm package name")
        parser.add_argument(
            "--dir",
            type=Path,
            required=True,
            metavar="DIR",
            help="Directory containing node_modules/",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install exact package versions",
            description="Install packages given as NAME@VERSION with --save-exact",
        )
        parser.add_argument(
            "packages", nargs="+", metavar="NAME@VERSION", help="Packages to install"
        )
        parser.add_argument(
            "--dir",
            type=Path,
            required=True,
            metavar="DIR",
            help="Directory to install into",
        )

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        parser = subparsers.add_parser(
            "check",
            help="Report whether a package needs installing",
        )
        parser.add_argument("package", metavar="NAME", help="npm package name")
        parser.add_argument(
            "--dir",
            type=Path,
            required=True,
            metavar="DIR",
            help="Directory containing node_modules/",
        )
        parser.add_argument(
            "--bin",
            type=Path,
            required=True,
            metavar="PATH",
            help="Executable the package provides",
        )
        parser.add_argument(
            "--latest",
            metavar="VERSION",
            help="Version to compare against (default: query the registry)",
        )

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command-line arguments without running a command."""
        return self.parser.parse_args(argv)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Parse arguments and run the selected command.

        Args:
            argv: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code
        """
        args = self.parse_args(argv)
        self._configure_logging(args)

        if not args.command:
            self.parser.print_help()
            return 1

        return self._dispatch_command(args)

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "path": "runtimekit.cli.commands.path",
            "npm": "runtimekit.cli.commands.npm",
            "latest": "runtimekit.cli.commands.latest",
            "installed": "runtimekit.cli.commands.installed",
            "install": "runtimekit.cli.commands.install",
            "check": "runtimekit.cli.commands.check",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)

        try:
            return module.run(args)
        except (RuntimeKitError, LockTimeout) as e:
            logger.error(str(e))
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
