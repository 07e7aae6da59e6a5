"""
Check command implementation.

Reports whether a package is missing or outdated and should be installed.
"""

from runtimekit.cli.utils import create_runtime


def run(args) -> int:
    """
    Run the check command.

    Prints 'install' or 'up-to-date'.

    Returns:
        Exit code (0 for success)
    """
    runtime = create_runtime(args)
    latest = args.latest or runtime.npm_package_latest_version(args.package)

    if runtime.should_install_npm_package(args.package, args.bin, args.dir, latest):
        print(f"install {args.package}@{latest}")
    else:
        print("up-to-date")
    return 0
