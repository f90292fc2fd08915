"""Command line interface for treepatch."""
