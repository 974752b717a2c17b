from datetime import timedelta
from pathlib import Path

import pytest

from timeline.bucketing import WeekStart
from timeline.config import Config, LayoutConfig


def test_load_full_config(tmp_path: Path) -> None:
    tasks_file = tmp_path / "tasks.json"
    path = tmp_path / "kubux-tasks.toml"
    path.write_text(f"""
[General]
timezone = "Europe/Berlin"
tasks_file = "{tasks_file.as_posix()}"

[Layout]
hour_height = 60
week_start = "Monday"
minimum_duration_minutes = 30
not_a_setting = true

[Colors]
status_completed = "#000000"

[Localization]
day_names = "So Mo Di Mi Do Fr Sa"

[Labels]
window_title = "Planung"
""")

    config = Config.load(path)
    settings = config.layout.to_settings()

    assert config.timezone == "Europe/Berlin"
    assert config.tasks_file == tasks_file
    assert settings.hour_height == 60
    assert settings.week_start == WeekStart.MONDAY
    assert settings.minimum_duration == timedelta(minutes=30)
    assert settings.default_duration == timedelta(minutes=30)
    assert config.colors.status_color("completed") == "#000000"
    assert config.colors.status_color("unknown") == config.colors.status_pending
    assert config.localization.get_day_name(1) == "Mo"
    assert config.localization.get_day_name(7) == ""
    assert config.labels.window_title == "Planung"


def test_load_minimal_config_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.toml"
    path.write_text("")

    config = Config.load(path)

    assert config.timezone == "UTC"
    assert config.tasks_file == Config.get_default_tasks_path()
    assert config.layout.hour_height == 40
    assert config.layout.click_suppress_ms == 100
    assert config.localization.get_day_name(0) == "Sun"


def test_load_missing_config(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "missing.toml")


def test_unknown_week_start_falls_back_to_sunday() -> None:
    settings = LayoutConfig(week_start="someday").to_settings()

    assert settings.week_start == WeekStart.SUNDAY


def test_default_paths_follow_xdg(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    assert Config.get_default_config_path() == tmp_path / "config" / "kubux-tasks" / "kubux-tasks.toml"
    assert Config.get_default_tasks_path() == tmp_path / "data" / "kubux-tasks" / "tasks.json"
