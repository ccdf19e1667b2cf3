"""Todry - a personal task tracker with spaces, archive and undo."""

__version__ = "1.0.0"
