"""Command module for creating patches."""

import asyncio
from pathlib import Path
from typing import Tuple

import typer
from loguru import logger

from treepatch.cli.app import app
from treepatch.cli.display import display_patch_summary, display_patch_tree
from treepatch.models import Manifest, PatchReport
from treepatch.patch import PatchWriter, TreeDiffer
from treepatch.source import scan_tree


async def run_diff(
    incoming: Path, baseline: Path, patch_dir: Path
) -> Tuple[PatchReport, Manifest]:
    """Create a patch and collect what went into it."""
    writer = PatchWriter(patch_dir)
    entries = TreeDiffer(baseline).diff(scan_tree(incoming))

    manifest: Manifest = {}
    async for entry in writer.stream(entries, passthrough=True):
        manifest[entry.path] = entry.status

    return writer.report, manifest


@app.command()
def diff(
    incoming: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Directory holding the new tree."
    ),
    baseline: Path = typer.Argument(
        ..., file_okay=False, help="Directory holding the previous tree, may be missing."
    ),
    patch_dir: Path = typer.Argument(..., help="Patch directory to create (replaced if present)."),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="List every file in the patch.",
    ),
) -> None:
    """Create a patch that turns BASELINE into INCOMING."""
    try:
        report, manifest = asyncio.run(run_diff(incoming, baseline, patch_dir))

        if verbose:
            display_patch_tree(manifest, str(patch_dir))
        display_patch_summary(report)

    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Diff failed")
            typer.echo(f"Error during diff: {e}", err=True)
            raise typer.Exit(1)
        raise
