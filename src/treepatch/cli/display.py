"""Rich rendering of patch reports for the CLI."""

from typing import Optional

from rich.console import Console
from rich.tree import Tree

from treepatch.models import Manifest, PatchReport, Status

console = Console()

STATUS_STYLES = {
    Status.NEW: ("green", "New"),
    Status.CHANGED: ("yellow", "Changed"),
    Status.DELETED: ("red", "Deleted"),
}


def display_patch_summary(
    report: PatchReport, verb: str = "Patched", out: Optional[Console] = None
) -> None:
    """Display a one-line summary of a patch."""
    out = out or console
    if report.total_changes == 0:
        out.print("[green]Everything up to date[/green]")
        return

    # Format as: "Patched X files (A new, B changed, C deleted)"
    changes = []
    if report.new:
        changes.append(f"[green]{report.new} new[/green]")
    if report.changed:
        changes.append(f"[yellow]{report.changed} changed[/yellow]")
    if report.deleted:
        changes.append(f"[red]{report.deleted} deleted[/red]")

    out.print(f"{verb} {report.total_changes} files ({', '.join(changes)})")


def display_patch_tree(manifest: Manifest, title: str, out: Optional[Console] = None) -> None:
    """Display the files of a patch grouped by status."""
    out = out or console
    tree = Tree(f"[bold]{title}[/bold]")
    if not manifest:
        tree.add("No changes")

    for status, (style, label) in STATUS_STYLES.items():
        paths = sorted(path for path, s in manifest.items() if s is status)
        if not paths:
            continue
        branch = tree.add(f"[{style}]{label}[/{style}] ({len(paths)})")
        for path in paths:
            branch.add(f"[{style}]{path}[/{style}]")

    out.print(tree)
