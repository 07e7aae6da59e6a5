"""
Core functionality for RuntimeKit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_support_dir,
    get_node_root,
    get_lock_dir,
    DirectoryError,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .platform import (
    ReleasePlatform,
    resolve_release_platform,
    is_supported_platform,
)

from .exceptions import (
    RuntimeKitError,
    ConfigError,
    NodeRuntimeError,
    UnsupportedPlatformError,
    OverrideInvalidError,
    DownloadError,
    ExtractError,
    MissingManagedBinaryError,
    SpawnFailedError,
    CommandLaunchError,
    NonZeroExitError,
    MetadataNotFoundError,
    ManifestUnreadableError,
    InvalidVersionError,
)

__all__ = [
    "get_support_dir",
    "get_node_root",
    "get_lock_dir",
    "DirectoryError",
    "LockManager",
    "LockTimeout",
    "ReleasePlatform",
    "resolve_release_platform",
    "is_supported_platform",
    "RuntimeKitError",
    "ConfigError",
    "NodeRuntimeError",
    "UnsupportedPlatformError",
    "OverrideInvalidError",
    "DownloadError",
    "ExtractError",
    "MissingManagedBinaryError",
    "SpawnFailedError",
    "CommandLaunchError",
    "NonZeroExitError",
    "MetadataNotFoundError",
    "ManifestUnreadableError",
    "InvalidVersionError",
]
