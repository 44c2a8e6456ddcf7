"""Salvage expedition engine: hazards, crew condition, and autonomous salvage."""

__version__ = "0.1.0"
