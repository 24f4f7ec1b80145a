"""Karmic Kitchen: meal registration, menu planning and push reminders."""

__version__ = "1.0.0"
