"""Exceptions raised while diffing, writing, reading and applying patches."""


class PatchError(Exception):
    """Base exception for patch operations."""

    pass


class StatError(PatchError):
    """Raised when baseline file metadata cannot be read."""

    pass


class HashError(PatchError):
    """Raised when a content digest cannot be computed."""

    pass


class InvalidInputKindError(HashError, TypeError):
    """Raised when content is neither a byte buffer nor a byte stream."""

    pass


class ManifestParseError(PatchError):
    """Raised when a patch manifest is missing or malformed."""

    pass


class PatchWriteError(PatchError):
    """Raised when a directory or file cannot be created, written or removed."""

    pass
