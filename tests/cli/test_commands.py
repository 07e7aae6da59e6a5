"""
Tests for CLI command implementations.
"""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from runtimekit.cli.commands import check, install, installed, latest, npm, path


def create_mock_args(**kwargs):
    """Create a Mock args object with the global options set."""
    defaults = {
        "config": Path("missing-runtimekit.yaml"),
        "support_dir": None,
        "proxy": None,
        "verbose": False,
    }
    defaults.update(kwargs)
    return Mock(**defaults)


@pytest.fixture
def runtime():
    """Mock runtime returned by create_runtime in every command module."""
    mock = Mock()
    targets = [
        f"runtimekit.cli.commands.{name}.create_runtime"
        for name in ("path", "npm", "latest", "installed", "install", "check")
    ]
    patchers = [patch(target, return_value=mock) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield mock
    for patcher in patchers:
        patcher.stop()


class TestPathCommand:
    def test_prints_binary_path(self, runtime, capsys):
        runtime.binary_path.return_value = Path("/support/node/bin/node")

        assert path.run(create_mock_args()) == 0
        assert capsys.readouterr().out.strip() == str(Path("/support/node/bin/node"))


class TestNpmCommand:
    def test_echoes_output(self, runtime, capsys):
        runtime.run_npm_subcommand.return_value = subprocess.CompletedProcess(
            [], 0, b"10.8.2\n", b"npm WARN config\n"
        )
        args = create_mock_args(dir=None, subcommand="--version", npm_args=[])

        assert npm.run(args) == 0

        captured = capsys.readouterr()
        assert captured.out == "10.8.2\n"
        assert captured.err == "npm WARN config\n"
        runtime.run_npm_subcommand.assert_called_once_with(None, "--version", [])


class TestLatestCommand:
    def test_prints_latest(self, runtime, capsys):
        runtime.npm_package_latest_version.return_value = "3.3.2"

        assert latest.run(create_mock_args(package="prettier")) == 0
        assert capsys.readouterr().out.strip() == "3.3.2"


class TestInstalledCommand:
    def test_prints_installed(self, runtime, capsys, tmp_path):
        runtime.npm_package_installed_version.return_value = "3.3.2"

        assert installed.run(create_mock_args(package="prettier", dir=tmp_path)) == 0
        assert capsys.readouterr().out.strip() == "3.3.2"

    def test_not_installed(self, runtime, tmp_path):
        runtime.npm_package_installed_version.return_value = None

        assert installed.run(create_mock_args(package="prettier", dir=tmp_path)) == 1


class TestInstallCommand:
    def test_installs_parsed_specs(self, runtime, tmp_path):
        args = create_mock_args(
            packages=["prettier@3.3.2", "@types/node@20.1.0"], dir=tmp_path
        )

        assert install.run(args) == 0
        runtime.npm_install_packages.assert_called_once_with(
            tmp_path, [("prettier", "3.3.2"), ("@types/node", "20.1.0")]
        )

    def test_invalid_spec(self, runtime, tmp_path):
        args = create_mock_args(packages=["prettier"], dir=tmp_path)

        assert install.run(args) == 2
        runtime.npm_install_packages.assert_not_called()


class TestCheckCommand:
    def test_needs_install(self, runtime, capsys, tmp_path):
        runtime.should_install_npm_package.return_value = True
        args = create_mock_args(
            package="prettier", dir=tmp_path, bin=tmp_path / "prettier", latest="3.3.2"
        )

        assert check.run(args) == 0
        assert capsys.readouterr().out.strip() == "install prettier@3.3.2"
        runtime.npm_package_latest_version.assert_not_called()

    def test_up_to_date_queries_registry(self, runtime, capsys, tmp_path):
        runtime.npm_package_latest_version.return_value = "3.3.2"
        runtime.should_install_npm_package.return_value = False
        args = create_mock_args(
            package="prettier", dir=tmp_path, bin=tmp_path / "prettier", latest=None
        )

        assert check.run(args) == 0
        assert capsys.readouterr().out.strip() == "up-to-date"
        runtime.should_install_npm_package.assert_called_once_with(
            "prettier", tmp_path / "prettier", tmp_path, "3.3.2"
        )
