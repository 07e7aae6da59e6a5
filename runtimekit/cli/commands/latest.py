"""
Latest command implementation.

Prints the latest published version of an npm package.
"""

from runtimekit.cli.utils import create_runtime


def run(args) -> int:
    runtime = create_runtime(args)
    print(runtime.npm_package_latest_version(args.package))
    return 0
