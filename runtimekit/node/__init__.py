"""
Managed Node.js runtime for RuntimeKit.

Available Components:
--------------------
- NodeRuntime: Abstract runtime interface
- RealNodeRuntime: On-demand installed Node.js release with npm access
- FakeNodeRuntime: Test double that must never be called
- RuntimeSettings: User overrides for node, npm and the npm cache
- InstallLayout: Resolved paths of an installation

Example Usage:
-------------
    from runtimekit.node import RealNodeRuntime, RuntimeSettings

    node = RealNodeRuntime()
    node.configure(RuntimeSettings(cache=Path("/tmp/npm-cache")))
    output = node.run_npm_subcommand(None, "--version")
"""

from runtimekit.node.layout import InstallLayout, NODE_VERSION, compute_layout
from runtimekit.node.runtime import FakeNodeRuntime, NodeRuntime, RealNodeRuntime
from runtimekit.node.settings import (
    ConfigurationChannel,
    RuntimeConfig,
    RuntimeSettings,
    bind_settings,
    load_settings_file,
)
from runtimekit.node.versions import RegistryInfo, Version

__all__ = [
    "NodeRuntime",
    "RealNodeRuntime",
    "FakeNodeRuntime",
    "RuntimeSettings",
    "RuntimeConfig",
    "ConfigurationChannel",
    "bind_settings",
    "load_settings_file",
    "InstallLayout",
    "NODE_VERSION",
    "compute_layout",
    "RegistryInfo",
    "Version",
]
