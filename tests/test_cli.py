"""Smoke tests for the CLI."""

import io
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from agp_local import __version__
from agp_local.__main__ import main
from agp_local.cli.app import app
from agp_local.cli.progress_manager import InstallProgress
from agp_local.exceptions import StoreIOError
from agp_local.models.game import InstallationRecord
from agp_local.storage.installations import InstallationRepository


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "agp"


def _invoke(runner: CliRunner, data_dir: Path, *args: str, **kwargs):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args], **kwargs)


def _saved_draft_ids(data_dir: Path) -> list[str]:
    return [
        json.loads(p.read_text(encoding="utf-8"))["id"]
        for p in (data_dir / "Drafts").glob("*.json")
    ]


class TestRoot:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_writes_default_config(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "--show-config")
        assert result.exit_code == 0
        assert (data_dir / "config.ini").is_file()
        assert "server_url" in result.output

    def test_invalid_config_exits_with_error(self, runner: CliRunner, data_dir: Path):
        data_dir.mkdir(parents=True)
        (data_dir / "config.ini").write_text(
            "[DEFAULT]\nserver_url = nowhere\n", encoding="utf-8"
        )
        result = _invoke(runner, data_dir, "drafts", "list")
        assert result.exit_code == 1


class TestDraftCommands:
    def test_new_list_show_delete(self, runner: CliRunner, data_dir: Path, tmp_path: Path):
        source = tmp_path / "snake.cs"
        source.write_text("class Snake {}", encoding="utf-8")

        result = _invoke(runner, data_dir, "drafts", "new", "Snake", "--file", str(source))
        assert result.exit_code == 0, result.output
        [draft_id] = _saved_draft_ids(data_dir)

        result = _invoke(runner, data_dir, "drafts", "list")
        assert result.exit_code == 0
        assert "Snake" in result.output

        result = _invoke(runner, data_dir, "drafts", "show", draft_id)
        assert result.exit_code == 0
        assert "class Snake {}" in result.output

        result = _invoke(runner, data_dir, "drafts", "delete", draft_id, "--force")
        assert result.exit_code == 0
        assert _saved_draft_ids(data_dir) == []

    def test_edit_renames(self, runner: CliRunner, data_dir: Path):
        _invoke(runner, data_dir, "drafts", "new", "Before")
        [draft_id] = _saved_draft_ids(data_dir)

        result = _invoke(runner, data_dir, "drafts", "edit", draft_id, "--name", "After")
        assert result.exit_code == 0

        record = json.loads((data_dir / "Drafts" / f"{draft_id}.json").read_text())
        assert record["name"] == "After"

    def test_show_unknown_draft(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "drafts", "show", "missing")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_unknown_draft(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "drafts", "delete", "missing", "--force")
        assert result.exit_code == 1

    def test_empty_list(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "drafts", "list")
        assert result.exit_code == 0
        assert "No drafts" in result.output


class TestGameCommands:
    def test_installed_empty(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "games", "installed")
        assert result.exit_code == 0
        assert "No games installed" in result.output

    def test_installed_lists_records(self, runner: CliRunner, data_dir: Path):
        repo = InstallationRepository(data_dir / "Games")
        repo.save(
            InstallationRecord(
                package_id=9,
                name="Rocket",
                version="3.1",
                install_path=str(data_dir / "Games" / "Game_9"),
                entrypoint_path="",
                installed_at=datetime.now(tz=timezone.utc),
            )
        )

        result = _invoke(runner, data_dir, "games", "installed")
        assert result.exit_code == 0
        assert "Rocket" in result.output

    def test_launch_not_installed(self, runner: CliRunner, data_dir: Path):
        result = _invoke(runner, data_dir, "games", "launch", "123")
        assert result.exit_code == 1
        assert "not installed" in result.output

    def test_launch_without_entrypoint_fails(self, runner: CliRunner, data_dir: Path):
        repo = InstallationRepository(data_dir / "Games")
        repo.save(
            InstallationRecord(
                package_id=9,
                name="Rocket",
                version="3.1",
                install_path=str(data_dir / "Games" / "Game_9"),
                installed_at=datetime.now(tz=timezone.utc),
            )
        )

        result = _invoke(runner, data_dir, "games", "launch", "9")
        assert result.exit_code == 1


class TestEntryPoint:
    def test_store_error_exits_with_panel(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ):
        def failing_app():
            raise StoreIOError("disk unavailable")

        monkeypatch.setattr("agp_local.__main__.app", failing_app)

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "disk unavailable" in out
        assert "Panel object" not in out

    def test_clean_exit_passes_through(self, monkeypatch: pytest.MonkeyPatch):
        def quiet_app():
            raise SystemExit(0)

        monkeypatch.setattr("agp_local.__main__.app", quiet_app)

        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0


class TestInstallProgress:
    def test_update_moves_bar(self):
        console = Console(file=io.StringIO())
        with InstallProgress(console, "Space Miner") as progress:
            progress.update(50)
            [task] = progress.progress.tasks
            assert task.completed == 50
            assert "Extracting" in task.description
