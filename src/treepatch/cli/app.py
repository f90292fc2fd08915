from typing import Optional

import typer

from treepatch.config import config
from treepatch.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import treepatch

        typer.echo(f"treepatch version: {treepatch.__version__}")
        raise typer.Exit()


app = typer.Typer(name="treepatch", no_args_is_help=True)


@app.callback()
def app_callback(
    log_level: str = typer.Option(
        config.log_level,
        "--log-level",
        "-l",
        help="Log level for messages written to stderr.",
        envvar="TREEPATCH_LOG_LEVEL",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """treepatch - create and apply incremental file-tree patches."""
    setup_logging(level=log_level, log_file=config.log_file)
