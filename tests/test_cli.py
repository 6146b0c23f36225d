"""
Tests for CLI commands — session commands, install, and read-only views.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from helpers import FakeRegistry, install_fake, write_manifest

from pantry.core.registry.platform import detect_platform
from pantry.main import cli

ORIGINAL_PATH = "/usr/local/bin:/usr/bin:/bin"


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Isolated PANTRY_HOME and a clean session environment."""
    root = tmp_path / "pantry-home"
    root.mkdir()
    monkeypatch.setenv("PANTRY_HOME", str(root))
    monkeypatch.setenv("PATH", ORIGINAL_PATH)
    for var in (
        "PANTRY_ACTIVE", "PANTRY_CONFIG", "PANTRY_OLD_PATH", "PANTRY_LAST_DIR",
        "PANTRY_SETTINGS", "PANTRY_LOG_LEVEL", "PANTRY_LOG_FILE", "PANTRY_REGISTRY_URL",
        "PANTRY_BUCKET", "PANTRY_REGION", "PANTRY_TIMEOUT", "PANTRY_PATH_PRECEDENCE",
    ):
        monkeypatch.delenv(var, raising=False)
    return root


@pytest.fixture
def project(tmp_path: Path, monkeypatch, home: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestCLIGlobal:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "directory-scoped" in result.output
        for command in ("hook", "env", "deactivate", "install", "status", "list", "shellenv"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_settings(self, runner, project, monkeypatch):
        monkeypatch.setenv("PANTRY_TIMEOUT", "0")
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 1
        assert "Invalid pantry settings" in result.output


class TestEnvCommand:
    def test_no_manifest(self, runner, project):
        result = runner.invoke(cli, ["env"])
        assert result.exit_code == 1
        assert "No pantry.yaml or deps.yaml found" in result.output

    def test_no_manifest_json(self, runner, project):
        result = runner.invoke(cli, ["-q", "env", "--json"])
        assert result.exit_code == 1
        assert "No pantry.yaml" in json.loads(result.output)["error"]

    def test_cached_packages_activate(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        write_manifest(project, "dependencies:\n  node: 20\n")

        result = runner.invoke(cli, ["env"])

        assert result.exit_code == 0, result.output
        assert "cached" in result.output
        assert "1 packages activated" in result.output
        assert "PATH updated with:" in result.output
        assert f"export PATH={home}/node/20.1.0/bin:{ORIGINAL_PATH}" in result.output
        assert "export PANTRY_ACTIVE=" in result.output
        assert f"export PANTRY_OLD_PATH={ORIGINAL_PATH}" in result.output

    def test_json_report(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        write_manifest(project, "dependencies:\n  node: 20\n  ghost.dev: 1\n")

        with patch("pantry.core.registry.client.urllib.request.urlopen", FakeRegistry()):
            result = runner.invoke(cli, ["-q", "env", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["action"] == "activated"
        assert data["install"]["ok"] == 1
        assert data["install"]["failed"] == 1
        assert data["path_entries"] == [f"{home}/node/20.1.0/bin"]
        assert "export" not in result.output
        assert "unset" not in result.output

    def test_partial_failure_summary(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        write_manifest(project, "dependencies:\n  node: 20\n  ghost.dev: 1\n")

        with patch("pantry.core.registry.client.urllib.request.urlopen", FakeRegistry()):
            result = runner.invoke(cli, ["env"])

        assert result.exit_code == 0
        assert "not found" in result.output
        assert "1 packages failed" in result.output


class TestHookCommand:
    def test_enter_project(self, runner, project, home):
        install_fake(home, "bun.sh", "1.2.0")
        write_manifest(project, "dependencies:\n  bun.sh: 1\n")

        result = runner.invoke(cli, ["hook", "--shell", "zsh"])

        assert result.exit_code == 0, result.output
        assert f"export PANTRY_ACTIVE={project.resolve()}" in result.output
        assert f"export PANTRY_LAST_DIR={project.resolve()}" in result.output
        assert "export PATH=" in result.output

    def test_same_directory_emits_nothing(self, runner, project, monkeypatch):
        write_manifest(project, "dependencies:\n  node: 20\n")
        monkeypatch.setenv("PANTRY_ACTIVE", str(project.resolve()))
        monkeypatch.setenv("PANTRY_CONFIG", "pantry.yaml")
        monkeypatch.setenv("PANTRY_OLD_PATH", ORIGINAL_PATH)
        monkeypatch.setenv("PANTRY_LAST_DIR", str(project.resolve()))

        result = runner.invoke(cli, ["hook"])

        assert result.exit_code == 0
        assert "export" not in result.output
        assert "unset" not in result.output

    def test_installs_missing_packages(self, runner, project, home):
        fake = FakeRegistry()
        fake.serve_package("node", "22.0.0", platform=detect_platform())
        write_manifest(project, "dependencies:\n  node: 22\n")

        with patch("pantry.core.registry.client.urllib.request.urlopen", fake):
            result = runner.invoke(cli, ["hook"])

        assert result.exit_code == 0, result.output
        assert "Syncing packages from pantry.yaml" in result.output
        assert "installed" in result.output
        assert (home / "node" / "22.0.0" / "bin" / "node").is_file()

    def test_leaving_project_restores_path(self, runner, project, monkeypatch):
        monkeypatch.setenv("PANTRY_ACTIVE", "/somewhere/else")
        monkeypatch.setenv("PANTRY_CONFIG", "pantry.yaml")
        monkeypatch.setenv("PANTRY_OLD_PATH", ORIGINAL_PATH)
        monkeypatch.setenv("PATH", f"/cache/node/1/bin:{ORIGINAL_PATH}")

        result = runner.invoke(cli, ["hook"])

        assert result.exit_code == 0
        assert f"export PATH={ORIGINAL_PATH}" in result.output
        assert "unset PANTRY_ACTIVE" in result.output
        assert "unset PANTRY_OLD_PATH" in result.output


class TestDeactivateCommand:
    def test_restores_path(self, runner, project, monkeypatch):
        monkeypatch.setenv("PANTRY_ACTIVE", str(project))
        monkeypatch.setenv("PANTRY_CONFIG", "pantry.yaml")
        monkeypatch.setenv("PANTRY_OLD_PATH", ORIGINAL_PATH)
        monkeypatch.setenv("PATH", f"/cache/node/1/bin:{ORIGINAL_PATH}")

        result = runner.invoke(cli, ["deactivate"])

        assert result.exit_code == 0
        assert "Pantry deactivated" in result.output
        assert f"export PATH={ORIGINAL_PATH}" in result.output
        assert "unset PANTRY_CONFIG" in result.output

    def test_inactive_is_harmless(self, runner, project):
        result = runner.invoke(cli, ["-q", "deactivate"])
        assert result.exit_code == 0
        assert result.output == ""


class TestInstallCommand:
    def test_install_does_not_touch_path(self, runner, project, home):
        fake = FakeRegistry()
        fake.serve_package("node", "22.0.0", platform=detect_platform())
        write_manifest(project, "dependencies:\n  node: 22\n", name="deps.yaml")

        with patch("pantry.core.registry.client.urllib.request.urlopen", fake):
            result = runner.invoke(cli, ["install"])

        assert result.exit_code == 0, result.output
        assert "Syncing packages from deps.yaml" in result.output
        assert "node@22.0.0" in result.output
        assert "export" not in result.output
        assert (home / "node" / "22.0.0" / "bin" / "node").is_file()

    def test_sync_json(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        write_manifest(project, "dependencies:\n  node: 20\n")

        result = runner.invoke(cli, ["-q", "sync", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["ok"] == 1
        assert data["packages"][0]["status"] == "cached"

    def test_no_manifest(self, runner, project):
        result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1


class TestReadOnlyCommands:
    def test_status_inactive(self, runner, project):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "Pantry not active" in result.output

    def test_status_active(self, runner, project, home, monkeypatch):
        entry = f"{home}/node/20.1.0/bin"
        monkeypatch.setenv("PANTRY_ACTIVE", str(project))
        monkeypatch.setenv("PANTRY_CONFIG", "pantry.yaml")
        monkeypatch.setenv("PATH", f"{entry}:{ORIGINAL_PATH}")

        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert f"Pantry active in: {project}" in result.output
        assert "Config: pantry.yaml" in result.output
        assert f"  - {entry}" in result.output
        assert "/usr/bin" not in result.output

    def test_status_json(self, runner, project):
        result = runner.invoke(cli, ["status", "--json"])
        data = json.loads(result.output)
        assert data["active"] is False
        assert data["path_entries"] == []

    def test_list(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        install_fake(home, "node", "18.0.0")
        install_fake(home, "github.com/cli", "2.40.0")

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "Installed packages:" in result.output
        assert "  - node: 18.0.0, 20.1.0" in result.output
        assert "  - github.com/cli: 2.40.0" in result.output

    def test_list_json(self, runner, project, home):
        install_fake(home, "node", "20.1.0")
        result = runner.invoke(cli, ["list", "--json"])
        assert json.loads(result.output) == {"node": ["20.1.0"]}

    def test_shellenv(self, runner):
        result = runner.invoke(cli, ["shellenv", "--shell", "zsh"])
        assert result.exit_code == 0
        assert "add-zsh-hook chpwd _pantry_hook" in result.output
