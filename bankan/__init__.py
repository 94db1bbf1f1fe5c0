"""Kanban board with tag filtering and calendar-aware items."""

__version__ = "0.1.0"