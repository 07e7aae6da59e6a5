"""
Installed command implementation.

Prints the version of a package installed under a directory.
"""

import logging

from runtimekit.cli.utils import create_runtime

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the installed command.

    Returns:
        Exit code (0 if installed, 1 if not)
    """
    runtime = create_runtime(args)
    version = runtime.npm_package_installed_version(args.dir, args.package)

    if version is None:
        logger.error(f"{args.package} is not installed in {args.dir}")
        return 1

    print(version)
    return 0
