"""Shift Tracker — employee shift attendance registration, review and export."""

__version__ = "1.0.0"
