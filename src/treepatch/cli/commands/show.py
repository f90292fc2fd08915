"""Command module for inspecting patches."""

import asyncio
from pathlib import Path

import typer
from loguru import logger

from treepatch.cli.app import app
from treepatch.cli.display import display_patch_summary, display_patch_tree
from treepatch.models import Manifest, PatchReport
from treepatch.patch import PatchReader


async def load_patch(patch_dir: Path) -> Manifest:
    """Read a patch, checking that every stored file is present."""
    entries = await PatchReader(patch_dir).entries()
    return {entry.path: entry.status for entry in entries}


@app.command()
def show(
    patch_dir: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Patch directory to inspect."
    ),
) -> None:
    """List the files in PATCH_DIR by status."""
    try:
        manifest = asyncio.run(load_patch(patch_dir))
        display_patch_tree(manifest, str(patch_dir))
        display_patch_summary(PatchReport.from_statuses(manifest.values()), verb="Contains")

    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Show failed")
            typer.echo(f"Error during show: {e}", err=True)
            raise typer.Exit(1)
        raise
