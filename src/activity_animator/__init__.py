"""Animate recorded activity tracks and export them as animated images."""

__version__ = "0.1.0"
