"""
Path command implementation.

Installs the managed Node.js release if needed and prints the node binary.
"""

from runtimekit.cli.utils import create_runtime


def run(args) -> int:
    """
    Run the path command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    runtime = create_runtime(args)
    print(runtime.binary_path())
    return 0
