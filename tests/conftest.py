"""
Pytest configuration and shared fixtures for RuntimeKit tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Tuple, Union

import pytest

from runtimekit.core.platform import ReleasePlatform
from runtimekit.node.layout import InstallLayout

# Archive member name -> content, or (content, mode)
ArchiveFiles = Dict[str, Union[bytes, Tuple[bytes, int]]]

FAKE_NODE_SCRIPT = b"#!/bin/sh\nexit 0\n"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


def _split(value) -> Tuple[bytes, int]:
    if isinstance(value, tuple):
        return value
    return value, 0o644


@pytest.fixture
def make_tar_gz() -> Callable[[ArchiveFiles], bytes]:
    """Build a .tar.gz archive in memory."""

    def build(files: ArchiveFiles) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for name, value in files.items():
                content, mode = _split(value)
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = mode
                tar.addfile(info, io.BytesIO(content))
        return buffer.getvalue()

    return build


@pytest.fixture
def make_zip() -> Callable[[ArchiveFiles], bytes]:
    """Build a .zip archive in memory, recording Unix modes."""

    def build(files: ArchiveFiles) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, value in files.items():
                content, mode = _split(value)
                info = zipfile.ZipInfo(name)
                info.external_attr = (0o100000 | mode) << 16
                zf.writestr(info, content)
        return buffer.getvalue()

    return build


@pytest.fixture
def linux_x64() -> ReleasePlatform:
    return ReleasePlatform("linux", "x64")


@pytest.fixture
def support_dir(tmp_path) -> Path:
    """Support directory that does not exist yet."""
    return tmp_path / "support"


@pytest.fixture
def installed_layout(tmp_path) -> InstallLayout:
    """Layout whose node binary and npm entry exist on disk."""
    install_dir = tmp_path / "node-install"
    node = install_dir / "bin" / "node"
    npm = install_dir / "bin" / "npm"
    node.parent.mkdir(parents=True)
    node.write_bytes(FAKE_NODE_SCRIPT)
    node.chmod(0o755)
    npm.write_text("// npm")

    return InstallLayout(
        install_dir=install_dir,
        node=node,
        npm=npm,
        cache=install_dir / "cache",
    )
