"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from mediastamp.config import (
    ConfigError,
    ConfigManager,
    MediastampConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".mediastamp" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "mediastamp configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, MediastampConfig)
    assert config.reporting.results_filename == "image_timestamp_results.txt"
    assert config.timestamps.min_year == 1900


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"timestamps": {"min_year": 1950}, "reporting": {"write_reports": False}})

    env = {"MEDIASTAMP__TIMESTAMPS__MIN_YEAR": "1970", "MEDIASTAMP__LOGGING__LEVEL": "INFO"}
    cli = {"timestamps.min_year": 1980}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.reporting.write_reports is False
    assert config.logging.level == "INFO"
    # CLI overrides take precedence over environment
    assert config.timestamps.min_year == 1980


def test_environment_lists_are_parsed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load(
        env_overrides={"MEDIASTAMP__PROCESSING__IMAGE_EXTENSIONS": "[.JPG, png]"}
    )

    assert config.processing.image_extensions == ["jpg", "png"]
    assert "mp4" in config.processing.media_extensions


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(MediastampConfig())

    assert flat["MEDIASTAMP__TIMESTAMPS__MIN_YEAR"] == "1900"
    assert flat["MEDIASTAMP__TIMESTAMPS__USE_EMBEDDED_METADATA"] == "true"
    assert flat["MEDIASTAMP__REPORTING__RESULTS_FILENAME"] == "image_timestamp_results.txt"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediastampConfig(),
            file_overrides={"timestamps": {"min_year": "not-an-int"}},
        )


def test_unknown_timezone_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediastampConfig(),
            cli_overrides={"timestamps.timezone": "Mars/Olympus_Mons"},
        )


def test_unknown_section_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediastampConfig(),
            file_overrides={"llm": {"model": "gpt-4"}},
        )
