"""Utility functions for treepatch."""

import os
import sys
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks for treepatch.

    Removes any existing handlers, then logs to stderr and optionally
    to a rotating file.

    Args:
        level: Minimum level for the stderr sink
        log_file: Optional path of a log file, parent directories are created
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), colorize=True, backtrace=False)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )


def posix_path(path: Union[str, Path]) -> str:
    """
    Normalize a relative path to the canonical slash-separated form.

    Used for every manifest key and every path comparison, so the same
    file is described identically on POSIX and Windows hosts.

    Args:
        path: Relative path in host or POSIX convention

    Returns:
        Path using "/" as separator, without leading "./"
    """
    text = str(path).replace(os.sep, "/")
    if os.altsep:
        text = text.replace(os.altsep, "/")
    return str(PurePosixPath(text))


def localized_path(path: str) -> Path:
    """Convert a canonical POSIX relative path to a host path."""
    return Path(*PurePosixPath(path).parts)


def relative_posix(path: Path, root: Path) -> str:
    """Return path relative to root in canonical form."""
    return posix_path(path.relative_to(root))


def safe_posix_path(path: Union[str, Path]) -> str:
    """
    Canonical form of a relative path that stays below its root.

    Raises:
        ValueError: If the path is empty, absolute or contains ".."
    """
    text = posix_path(path)
    pure = PurePosixPath(text)
    if text == "." or pure.is_absolute() or ".." in pure.parts:
        raise ValueError(f"Not a relative path inside the tree: {str(path)!r}")
    return text
