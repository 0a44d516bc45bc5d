"""Multiplayer networking and isometric software rendering for an Anno 1602 style engine."""

__version__ = "0.1.0"