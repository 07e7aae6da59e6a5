"""
npm command implementation.

Runs an arbitrary npm subcommand with the managed runtime and echoes its output.
"""

import logging
import sys

from runtimekit.cli.utils import create_runtime

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the npm command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    runtime = create_runtime(args)
    logger.debug(f"npm {args.subcommand} {args.npm_args}")

    output = runtime.run_npm_subcommand(args.dir, args.subcommand, args.npm_args)
    sys.stdout.write(output.stdout.decode("utf-8", errors="replace"))
    sys.stderr.write(output.stderr.decode("utf-8", errors="replace"))
    return 0
