"""
Install command implementation.

Installs exact package versions into a directory.
"""

import logging

from runtimekit.cli.utils import create_runtime, parse_package_spec

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    try:
        packages = [parse_package_spec(spec) for spec in args.packages]
    except ValueError as e:
        logger.error(str(e))
        return 2

    runtime = create_runtime(args)
    runtime.npm_install_packages(args.dir, packages)
    logger.info(f"Installed {len(packages)} package(s) into {args.dir}")
    return 0
