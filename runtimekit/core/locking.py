"""
Concurrent access control for RuntimeKit.

This module provides file-based locking so that only one process at a time
probes and repairs a managed runtime installation that lives in a shared
support directory.

Usage:
    from runtimekit.core.locking import LockManager

    lock_manager = LockManager(lock_dir)
    with lock_manager.install_lock("node-v22.5.1-linux-x64"):
        # Safely delete and re-extract the installation
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages install locks for RuntimeKit resources.

    Uses file-based locking with the `filelock` library for cross-platform
    compatibility and automatic cleanup on process death. The lock directory
    is created on first use.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)

    @contextmanager
    def install_lock(self, install_id: str, timeout: int = 600):
        """
        Acquire lock for a specific runtime installation.

        Args:
            install_id: Installation identifier (e.g., 'node-v22.5.1-linux-x64')
            timeout: Maximum wait time in seconds (default: 600 for long downloads)

        Yields:
            None

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        safe_id = install_id.replace("/", "-").replace("\\", "-").replace(":", "-")
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_dir / f"{safe_id}.lock"
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired install lock: {lock_path}")
                yield
                logger.debug(f"Released install lock: {lock_path}")
        except LockTimeout as e:
            logger.error(
                f"Could not acquire install lock for {install_id} after {timeout}s. "
                "Another process may be installing this runtime."
            )
            raise LockTimeout(
                f"Could not acquire install lock for {install_id} after {timeout}s. "
                "Another process may be installing this runtime."
            ) from e


__all__ = ["LockManager", "LockTimeout"]
