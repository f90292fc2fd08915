"""Command module for applying patches."""

import asyncio
from pathlib import Path
from typing import Tuple

import typer
from loguru import logger

from treepatch.cli.app import app
from treepatch.cli.display import display_patch_summary, display_patch_tree
from treepatch.models import Manifest, PatchReport
from treepatch.patch import PatchApplier, PatchReader


async def run_apply(patch_dir: Path, destination: Path) -> Tuple[PatchReport, Manifest]:
    """Apply a patch and collect what was applied."""
    reader = PatchReader(patch_dir, destination)
    applier = PatchApplier(destination)

    manifest: Manifest = {}
    async for entry in applier.stream(reader.stream(), passthrough=True):
        manifest[entry.path] = entry.status

    return applier.report, manifest


@app.command()
def apply(
    patch_dir: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Patch directory to apply."
    ),
    destination: Path = typer.Argument(
        Path("."), file_okay=False, help="Tree to patch, defaults to the current directory."
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="List every file applied.",
    ),
) -> None:
    """Apply PATCH_DIR to DESTINATION."""
    try:
        report, manifest = asyncio.run(run_apply(patch_dir, destination))

        if verbose:
            display_patch_tree(manifest, str(destination))
        display_patch_summary(report, verb="Applied")

    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Apply failed")
            typer.echo(f"Error during apply: {e}", err=True)
            raise typer.Exit(1)
        raise
