"""
Cross-platform file system utilities for RuntimeKit.

This module provides:
- Archive extraction from non-seekable streams (tar.gz, zip)
- Safe deletion of installation trees
- Path utilities for archive member validation

All extraction paths are validated to prevent directory traversal.
"""

import os
import shutil
import stat
import tarfile
import tempfile
import zipfile
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Union

from requests.exceptions import RequestException

from runtimekit.core.exceptions import ExtractError, RuntimeKitError

IS_WINDOWS = os.name == "nt"


class FilesystemError(RuntimeKitError):
    """Base exception for filesystem operations."""

    pass


class InsecureArchiveError(ExtractError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check if path is relative to parent."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def strip_components(name: str, count: int) -> str:
    """
    Drop the first ``count`` components from an archive member name.

    Example:
        >>> strip_components("node-v22.5.1-linux-x64/bin/node", 1)
        'bin/node'
    """
    parts = [p for p in PurePosixPath(name.replace("\\", "/")).parts if p != "."]
    return "/".join(parts[count:])


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            destination,
            f"archive member '{path}' attempts directory traversal",
        )


def _validate_symlink_target(path: str, target: str, destination: Path) -> None:
    """
    Validate that a symlink member points inside the destination.

    Raises:
        InsecureArchiveError: If the link target is absolute or escapes
    """
    if os.path.isabs(target) or PurePosixPath(target).is_absolute():
        raise InsecureArchiveError(
            destination, f"symlink '{path}' has absolute target '{target}'"
        )

    parent = PurePosixPath(path).parent
    _validate_archive_path(str(parent / target), destination)


# ============================================================================
# Archive Extraction
# ============================================================================


class ArchiveType(Enum):
    """Release archive formats, one per OS family."""

    TAR_GZ = "tar.gz"
    ZIP = "zip"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def for_os(cls, os_token: str) -> "ArchiveType":
        """Select the archive format published for a release OS token."""
        if os_token == "win":
            return cls.ZIP
        return cls.TAR_GZ

    def extract(
        self, stream: BinaryIO, destination: Path, strip: int = 0
    ) -> None:
        """
        Unpack an archive read from ``stream`` into ``destination``.

        Args:
            stream: Readable binary stream (need not be seekable)
            destination: Directory to extract into (created if missing)
            strip: Number of leading path components to drop from members

        Raises:
            ExtractError: If decompression, unpacking or writing fails
            RequestException: If reading the underlying HTTP stream fails
        """
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)

        try:
            if self is ArchiveType.TAR_GZ:
                _extract_tar_stream(stream, destination, "r|gz", strip)
            else:
                _extract_zip_stream(stream, destination, strip)
        except (ExtractError, RequestException):
            raise
        except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
            raise ExtractError(destination, str(e)) from e


def _extract_tar_stream(
    stream: BinaryIO, destination: Path, mode: str, strip: int
) -> None:
    """Extract a compressed tar read sequentially from a stream."""
    with tarfile.open(fileobj=stream, mode=mode) as tar:
        for member in tar:
            name = strip_components(member.name, strip)
            if not name:
                continue
            _validate_archive_path(name, destination)
            member.name = name
            if member.islnk():
                member.linkname = strip_components(member.linkname, strip)
                _validate_archive_path(member.linkname, destination)
            elif member.issym():
                _validate_symlink_target(name, member.linkname, destination)

            # The data filter is also present in later 3.9-3.11 patch releases
            if hasattr(tarfile, "data_filter"):
                tar.extract(member, destination, filter="data")
            else:
                tar.extract(member, destination)


def _extract_zip_stream(stream: BinaryIO, destination: Path, strip: int) -> None:
    """Extract a ZIP archive; the stream is spooled to disk for random access."""
    with tempfile.TemporaryFile(prefix="runtimekit_", suffix=".zip") as spool:
        shutil.copyfileobj(stream, spool)
        spool.seek(0)

        with zipfile.ZipFile(spool, "r") as zf:
            for info in zf.infolist():
                name = strip_components(info.filename, strip)
                if not name:
                    continue
                if info.is_dir():
                    name += "/"
                _validate_archive_path(name, destination)
                info.filename = name
                extracted = zf.extract(info, destination)

                # Zip files created on Unix keep the mode in the high bits
                mode = info.external_attr >> 16
                if not IS_WINDOWS and mode & 0o111:
                    os.chmod(extracted, stat.S_IMODE(mode))


# ============================================================================
# Safe Deletion
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e
