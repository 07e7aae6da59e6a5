"""
Unit tests for filesystem utilities.

Tests cover:
- Archive member path stripping and validation
- Streaming tar.gz and zip extraction
- Safe directory removal
"""

import io
import os
import sys
import tarfile

import pytest

from runtimekit.core.exceptions import ExtractError
from runtimekit.core.filesystem import (
    ArchiveType,
    FilesystemError,
    InsecureArchiveError,
    safe_rmtree,
    strip_components,
)


def _tar_with_symlink(name: str, target: str) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        content = b"#!/usr/bin/env node"
        info = tarfile.TarInfo("top/lib/cli.js")
        info.size = len(content)
        tar.addfile(info, io.BytesIO(content))

        link = tarfile.TarInfo(name)
        link.type = tarfile.SYMTYPE
        link.linkname = target
        tar.addfile(link)
    return buffer.getvalue()


class NonSeekableStream(io.RawIOBase):
    """Byte stream that refuses to seek, like an HTTP body."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)

    def readable(self):
        return True

    def readinto(self, b):
        chunk = self._data.read(len(b))
        b[: len(chunk)] = chunk
        return len(chunk)


class TestStripComponents:
    """Test strip_components()."""

    def test_strip_top_level(self):
        assert strip_components("node-v22.5.1-linux-x64/bin/node", 1) == "bin/node"

    def test_strip_top_level_directory_entry(self):
        assert strip_components("node-v22.5.1-linux-x64/", 1) == ""

    def test_strip_zero(self):
        assert strip_components("a/b", 0) == "a/b"

    def test_backslashes_normalized(self):
        assert strip_components("top\\node.exe", 1) == "node.exe"

    def test_dot_prefix_ignored(self):
        assert strip_components("./top/bin/node", 1) == "bin/node"


class TestArchiveType:
    """Test ArchiveType selection."""

    @pytest.mark.parametrize(
        "os_token,expected",
        [
            ("linux", ArchiveType.TAR_GZ),
            ("darwin", ArchiveType.TAR_GZ),
            ("win", ArchiveType.ZIP),
        ],
    )
    def test_for_os(self, os_token, expected):
        assert ArchiveType.for_os(os_token) is expected

    def test_extensions(self):
        assert ArchiveType.TAR_GZ.extension == "tar.gz"
        assert ArchiveType.ZIP.extension == "zip"


class TestTarGzExtraction:
    """Test streaming tar.gz extraction."""

    def test_extract_with_strip(self, tmp_path, make_tar_gz):
        """Test top-level folder is stripped."""
        archive = make_tar_gz(
            {
                "node-v1/bin/node": (b"binary", 0o755),
                "node-v1/lib/readme.txt": b"hello",
            }
        )
        destination = tmp_path / "out"

        ArchiveType.TAR_GZ.extract(NonSeekableStream(archive), destination, strip=1)

        assert (destination / "bin" / "node").read_bytes() == b"binary"
        assert (destination / "lib" / "readme.txt").read_text() == "hello"
        assert not (destination / "node-v1").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_extract_keeps_executable_bit(self, tmp_path, make_tar_gz):
        archive = make_tar_gz({"top/bin/node": (b"x", 0o755)})

        ArchiveType.TAR_GZ.extract(io.BytesIO(archive), tmp_path, strip=1)

        assert os.access(tmp_path / "bin" / "node", os.X_OK)

    def test_directory_traversal_blocked(self, tmp_path, make_tar_gz):
        """Test members escaping the destination are rejected."""
        archive = make_tar_gz({"top/../../evil.txt": b"evil"})

        with pytest.raises(InsecureArchiveError):
            ArchiveType.TAR_GZ.extract(io.BytesIO(archive), tmp_path / "out", strip=1)

        assert not (tmp_path / "evil.txt").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
    def test_relative_symlink_inside_destination(self, tmp_path):
        archive = _tar_with_symlink("top/bin/cli", "../lib/cli.js")

        ArchiveType.TAR_GZ.extract(io.BytesIO(archive), tmp_path, strip=1)

        assert (tmp_path / "bin" / "cli").is_symlink()
        assert (tmp_path / "bin" / "cli").read_bytes() == b"#!/usr/bin/env node"

    @pytest.mark.parametrize("target", ["../../../etc/passwd", "/etc/passwd"])
    def test_escaping_symlink_blocked(self, tmp_path, target):
        archive = _tar_with_symlink("top/bin/cli", target)
        destination = tmp_path / "out"

        with pytest.raises(InsecureArchiveError):
            ArchiveType.TAR_GZ.extract(io.BytesIO(archive), destination, strip=1)

        assert not (destination / "bin" / "cli").exists()
        assert not (destination / "bin" / "cli").is_symlink()

    def test_corrupt_archive(self, tmp_path):
        """Test non-gzip data raises ExtractError."""
        with pytest.raises(ExtractError):
            ArchiveType.TAR_GZ.extract(io.BytesIO(b"not a gzip stream"), tmp_path)

    def test_truncated_archive(self, tmp_path, make_tar_gz):
        """Test a truncated archive raises ExtractError."""
        archive = make_tar_gz({"top/bin/node": os.urandom(50000)})

        with pytest.raises(ExtractError):
            ArchiveType.TAR_GZ.extract(io.BytesIO(archive[:1000]), tmp_path, strip=1)


class TestZipExtraction:
    """Test zip extraction from a stream."""

    def test_extract_with_strip(self, tmp_path, make_zip):
        archive = make_zip(
            {
                "node-v1-win-x64/node.exe": b"exe",
                "node-v1-win-x64/node_modules/npm/bin/npm-cli.js": b"js",
            }
        )

        ArchiveType.ZIP.extract(NonSeekableStream(archive), tmp_path, strip=1)

        assert (tmp_path / "node.exe").read_bytes() == b"exe"
        assert (tmp_path / "node_modules" / "npm" / "bin" / "npm-cli.js").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_unix_mode_restored(self, tmp_path, make_zip):
        archive = make_zip({"top/bin/tool": (b"#!/bin/sh\n", 0o755)})

        ArchiveType.ZIP.extract(io.BytesIO(archive), tmp_path, strip=1)

        assert os.access(tmp_path / "bin" / "tool", os.X_OK)

    def test_corrupt_zip(self, tmp_path):
        with pytest.raises(ExtractError):
            ArchiveType.ZIP.extract(io.BytesIO(b"garbage"), tmp_path)


class TestSafeRmtree:
    """Test safe_rmtree()."""

    def test_remove_tree(self, tmp_path):
        target = tmp_path / "tree"
        (target / "sub").mkdir(parents=True)
        (target / "sub" / "file.txt").write_text("x")

        safe_rmtree(target)

        assert not target.exists()

    def test_missing_is_noop(self, tmp_path):
        safe_rmtree(tmp_path / "missing")

    def test_file_rejected(self, tmp_path):
        file = tmp_path / "file.txt"
        file.write_text("x")

        with pytest.raises(FilesystemError):
            safe_rmtree(file)

    def test_require_prefix(self, tmp_path):
        target = tmp_path / "a"
        target.mkdir()

        with pytest.raises(ValueError, match="Refusing to delete"):
            safe_rmtree(target, require_prefix=tmp_path / "b")
