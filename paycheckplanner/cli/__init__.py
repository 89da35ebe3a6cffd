"""Command-line interface for paycheckplanner."""

from .commands import main

__all__ = ["main"]
