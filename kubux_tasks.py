#!/usr/bin/env python3
"""
Kubux Tasks - A PySide6 weekly timeline for scheduling tasks.

This is the main entry point for the application.
"""

import sys
import argparse
from datetime import date
from pathlib import Path

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from timeline.config import Config, EXAMPLE_CONFIG
from timeline.layout import layout_week
from timeline.task_store import TaskStore
from timeline.timezone_utils import set_timezone, to_local_datetime


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Kubux Tasks - A weekly timeline for scheduling tasks"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--tasks",
        type=Path,
        help="Task file to show (overrides tasks_file from the configuration)"
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Show the week containing this date (YYYY-MM-DD, default: today)"
    )
    parser.add_argument(
        "--print-layout",
        action="store_true",
        help="Print the week layout to stdout instead of opening the window"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    return parser.parse_args(argv)


def load_config(args) -> Config:
    """Load the configuration; without a config file a --tasks file is enough."""
    try:
        config = Config.load(args.config)
    except FileNotFoundError as e:
        if args.tasks is None:
            print(f"Error: {e}")
            print("\nPlease create a configuration file at:")
            print(f"  - {Config.get_default_config_path()}")
            print("\nExample configuration:")
            print(EXAMPLE_CONFIG)
            sys.exit(1)
        config = Config(tasks_file=args.tasks)
    except Exception as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    if args.tasks is not None:
        config.tasks_file = args.tasks
    return config


def print_layout(config: Config, reference: date, out=sys.stdout) -> int:
    """Write one line per positioned task of the week; returns the number of lines."""
    tasks = TaskStore(config.tasks_file).load()
    week = layout_week(tasks, reference, config.layout.to_settings())
    lines = 0
    for day in sorted(week):
        for positioned in week[day]:
            start = to_local_datetime(positioned.interval.start)
            end = to_local_datetime(positioned.interval.end)
            print(
                f"{day.isoformat()} "
                f"col {positioned.column + 1}/{positioned.column_count} "
                f"top={positioned.top:g} height={positioned.height:g} "
                f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')} "
                f"#{positioned.task.id} {positioned.task.title}",
                file=out
            )
            lines += 1
    return lines


def main():
    """Main entry point."""
    args = parse_args()
    config = load_config(args)
    set_timezone(config.timezone)
    reference = args.date or date.today()

    if args.debug:
        print(f"Loaded configuration from: {args.config or Config.get_default_config_path()}")
        print(f"  Task file: {config.tasks_file}")
        print(f"  Timezone: {config.timezone}")

    if args.print_layout:
        print_layout(config, reference)
        return

    # Imported late so --print-layout works without building any widgets
    from gui.main_window import MainWindow

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Kubux Tasks")
    app.setApplicationVersion("0.1")
    app.setOrganizationName("kubux")
    app.setOrganizationDomain("kubux.net")
    app.setStyle("Fusion")

    window = MainWindow(config, initial_date=reference)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
