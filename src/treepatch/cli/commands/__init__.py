"""CLI commands for treepatch."""

from . import apply, diff, show

__all__ = ["apply", "diff", "show"]
