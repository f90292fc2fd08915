"""Main CLI entry point for treepatch."""  # pragma: no cover

from treepatch.cli.app import app  # pragma: no cover

# Register commands
from treepatch.cli.commands import apply, diff, show  # pragma: no cover

__all__ = ["app", "apply", "diff", "show"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
