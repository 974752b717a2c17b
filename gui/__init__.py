"""
Kubux Tasks GUI Module

PySide6-based graphical interface for the weekly task timeline.
"""

from .main_window import MainWindow

__all__ = ['MainWindow']
