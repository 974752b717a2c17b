"""
Configuration parser for Kubux Tasks.

Handles TOML file parsing into typed configuration sections.
"""

import tomllib
import os
import sys
from pathlib import Path
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from .bucketing import WeekStart
from .layout import LayoutSettings


@dataclass
class LayoutConfig:
    """Configuration for the timeline grid, gestures and fonts."""
    interface_font: str = "Sans"
    interface_font_size: int = 11
    text_font: str = "Sans"
    text_font_size: int = 10
    hour_height: int = 40  # Height of an hour slot in pixels
    min_block_height: int = 10  # Smallest drawn task block (a quarter hour at the default height)
    quarter_count: int = 4  # Drop slots per hour
    minimum_duration_minutes: int = 15
    default_duration_minutes: int = 30  # Assumed length of tasks without a start
    week_start: str = "sunday"
    click_suppress_ms: int = 100  # Clicks ignored this long after a resize

    def to_settings(self) -> LayoutSettings:
        """Core layout parameters derived from this section."""
        try:
            week_start = WeekStart(self.week_start.lower())
        except ValueError:
            print(f"DEBUG: Unknown week_start '{self.week_start}', using sunday", file=sys.stderr)
            week_start = WeekStart.SUNDAY
        return LayoutSettings(
            hour_height=self.hour_height,
            min_block_height=self.min_block_height,
            quarter_count=self.quarter_count,
            minimum_duration=timedelta(minutes=self.minimum_duration_minutes),
            default_duration=timedelta(minutes=self.default_duration_minutes),
            week_start=week_start,
        )


@dataclass
class ColorsConfig:
    """Configuration for UI colors."""
    # Grid Colors
    day_column_background: str = "#ffffff"
    hour_line: str = "#e8e8e8"
    quarter_line: str = "#f4f4f4"
    cell_border: str = "#e0e0e0"
    current_time_line: str = "#d32f2f"
    drop_highlight: str = "#e3f2fd"

    # Header Colors
    header_background: str = "#f5f5f5"
    today_highlight_background: str = "#e3f2fd"
    today_highlight_text: str = "#1976d2"
    sunday_text: str = "#dc2626"
    saturday_text: str = "#2563eb"

    # Task Block Colors (by status)
    status_pending: str = "#4285f4"
    status_in_progress: str = "#fbbc05"
    status_completed: str = "#34a853"
    ghost_opacity: float = 0.5

    def status_color(self, status: str) -> str:
        return getattr(self, f"status_{status}", self.status_pending)


@dataclass
class LocalizationConfig:
    """Configuration for localized day names."""
    # Sunday first, matching date.isoweekday() % 7
    day_names: list[str] = None

    def __post_init__(self):
        if self.day_names is None:
            self.day_names = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

    def get_day_name(self, sunday_based_index: int) -> str:
        """Get localized day name (0=Sunday, 6=Saturday)."""
        if 0 <= sunday_based_index < len(self.day_names):
            return self.day_names[sunday_based_index]
        return ""


@dataclass
class LabelsConfig:
    """Configuration for UI labels."""
    window_title: str = "Kubux Tasks"
    button_prev: str = "◀"
    button_next: str = "▶"
    button_today: str = "Today"
    button_reload: str = "Reload"
    button_quit: str = "Quit"
    saving: str = "Saving…"
    save_failed: str = "Could not save task {}: {}"


def _section(data: dict, name: str, cls):
    """Build a config dataclass from a TOML table, keeping defaults for missing keys."""
    values = data.get(name, {})
    known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
    for key in values:
        if key not in known:
            print(f"DEBUG: Ignoring unknown key '{key}' in [{name}]", file=sys.stderr)
    return cls(**known)


@dataclass
class Config:
    """Main configuration container for Kubux Tasks."""

    tasks_file: Path
    timezone: str = "UTC"
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)
    labels: LabelsConfig = field(default_factory=LabelsConfig)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'kubux-tasks' / 'kubux-tasks.toml'

    @classmethod
    def get_default_tasks_path(cls) -> Path:
        """Get the default task snapshot path."""
        xdg_data = os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))
        return Path(xdg_data) / 'kubux-tasks' / 'tasks.json'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        # Parse General section
        general = data.get('General', {})
        tasks_file_str = general.get('tasks_file', str(cls.get_default_tasks_path()))
        tasks_file = Path(os.path.expanduser(tasks_file_str))
        timezone = general.get('timezone', 'UTC')

        # Day names are a single space-separated string
        localization_data = data.get('Localization', {})
        day_names_str = localization_data.get('day_names', '')
        localization = LocalizationConfig(
            day_names=day_names_str.split() if day_names_str else None
        )

        return cls(
            tasks_file=tasks_file,
            timezone=timezone,
            layout=_section(data, 'Layout', LayoutConfig),
            colors=_section(data, 'Colors', ColorsConfig),
            localization=localization,
            labels=_section(data, 'Labels', LabelsConfig),
        )


EXAMPLE_CONFIG = """
[General]
timezone = "Asia/Tokyo"
tasks_file = "~/.local/share/kubux-tasks/tasks.json"

[Layout]
hour_height = 40
minimum_duration_minutes = 15
week_start = "sunday"

[Localization]
day_names = "Sun Mon Tue Wed Thu Fri Sat"
"""
