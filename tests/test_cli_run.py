"""CLI tests for the run and inspect commands."""

import json
import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from mediastamp.cli import cli

OLD_MTIME = 1700000000


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    env["MEDIASTAMP__TIMESTAMPS__USE_EMBEDDED_METADATA"] = "false"
    return env


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"media")
    os.utime(path, (OLD_MTIME, OLD_MTIME))
    return path


def _library(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    _touch(root / "loose.jpg")
    _touch(root / "Trip 2019" / "b.jpg")
    _touch(root / "Trip 2019" / "IMG1920x1080" / "c.png")
    return root


def test_run_json_reports_decisions(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(
        cli, ["run", str(root), "--json", "--no-embedded"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["context"]["dry_run"] is False
    assert payload["counts"]["files"] == 3
    assert payload["counts"]["updated"] == 1
    assert payload["counts"]["skipped_no_timestamp"] == 2
    actions = {entry["path"]: entry["action"] for entry in payload["decisions"]}
    assert actions == {
        "Trip 2019/IMG1920x1080/c.png": "skipped_no_timestamp",
        "Trip 2019/b.jpg": "updated",
        "loose.jpg": "skipped_no_timestamp",
    }
    assert [Path(entry["directory"]).name for entry in payload["directories"]] == [
        "IMG1920x1080",
        "Trip 2019",
        "library",
    ]
    assert (root / "image_timestamp_results.txt").exists()


def test_run_prints_summary_and_result_file(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(cli, ["run", str(root), "--no-embedded"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "Run summary" in result.output
    assert "files=3," in result.output
    assert "updated=1," in result.output
    assert "Result file created" in result.output


def test_run_dry_run_writes_nothing(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(
        cli,
        ["run", str(root), "--dry-run", "--json", "--no-embedded"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["context"]["dry_run"] is True
    assert payload["counts"]["would_update"] == 1
    assert not list(root.rglob("image_timestamp_results.txt"))
    assert int((root / "Trip 2019" / "b.jpg").stat().st_mtime) == OLD_MTIME


def test_run_quiet_suppresses_output(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(
        cli, ["run", str(root), "--quiet", "--no-embedded"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert result.stdout.strip() == ""


def test_run_rejects_json_with_quiet(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(
        cli, ["run", str(root), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet" in result.output


def test_run_rejects_unknown_timezone(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _library(tmp_path)

    result = runner.invoke(
        cli,
        ["run", str(root), "--json", "--timezone", "Mars/Olympus_Mons"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "config_error"


def test_run_requires_existing_directory(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["run", str(tmp_path / "missing")], env=_env_with_home(tmp_path))

    assert result.exit_code != 0


def test_inspect_json_lists_every_source(tmp_path: Path) -> None:
    runner = CliRunner()
    media = _touch(tmp_path / "Trip 2019" / "b.jpg")

    result = runner.invoke(cli, ["inspect", str(media), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [entry["source"] for entry in payload["sources"]] == [
        "sidecar_metadata",
        "embedded_metadata",
        "directory_name",
    ]
    assert payload["chosen"] == {"source": "directory_name", "timestamp": "2019-01-01 00:00:00"}
    assert payload["directory_years"] == [
        {"token": "2019", "dimension": False, "in_range": True}
    ]
    assert int(media.stat().st_mtime) == OLD_MTIME


def test_inspect_reports_missing_timestamp(tmp_path: Path) -> None:
    runner = CliRunner()
    media = _touch(tmp_path / "IMG1920x1080" / "c.png")

    result = runner.invoke(cli, ["inspect", str(media)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "No valid timestamp found." in result.output
    assert "Ignored year-like token: 1920" in result.output
