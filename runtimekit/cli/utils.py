"""
Shared utilities for CLI commands.
"""

import logging

from runtimekit.node.runtime import RealNodeRuntime
from runtimekit.node.settings import bind_settings

logger = logging.getLogger(__name__)


def create_runtime(args) -> RealNodeRuntime:
    """
    Build a runtime from global CLI options and the settings file.

    The --proxy option takes precedence over the settings file proxy.

    Args:
        args: Parsed arguments with config, support_dir and proxy fields

    Returns:
        Configured RealNodeRuntime
    """
    runtime = RealNodeRuntime(support_dir=args.support_dir)
    config = bind_settings(runtime, args.config)

    proxy = args.proxy or config.proxy
    if proxy:
        runtime.use_proxy(proxy)
    logger.debug(f"Runtime settings: {config.settings}, proxy: {proxy}")
    return runtime


def parse_package_spec(spec: str):
    """
    Split NAME@VERSION, keeping the leading @ of scoped packages.

    Example:
        >>> parse_package_spec("@types/node@20.1.0")
        ('@types/node', '20.1.0')

    Raises:
        ValueError: If no version is given
    """
    name, sep, version = spec.rpartition("@")
    if not sep or not name or not version:
        raise ValueError(f"Expected NAME@VERSION, got '{spec}'")
    return name, version
