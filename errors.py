"""Error types raised by webfs."""


class WebFSError(Exception):
    """Base error for webfs operations."""
    pass


class SchemeMismatchError(WebFSError, ValueError):
    """Address does not use the registry's scheme."""
    pass


class AlreadyExistsError(WebFSError):
    """A mount already covers the requested address."""
    pass


class NotFoundError(WebFSError, LookupError):
    """No mount, listing entry or attributes for the requested address."""
    pass


class CorruptListingError(WebFSError, ValueError):
    """A directory listing record could not be parsed."""
    pass


class TransportError(WebFSError, OSError):
    """The remote answered with a non-success status, or the request failed."""

    def __init__(self, status: int | None, reason: str):
        super().__init__(f"{status} {reason}" if status is not None else reason)
        self.status = status
        self.reason = reason


class UnsupportedOperationError(WebFSError):
    """Operation is not meaningful for this kind of path."""
    pass


class ReadOnlyFileSystemError(UnsupportedOperationError):
    """Mutating operations are never supported."""
    pass


class PatternSyntaxError(WebFSError, ValueError):
    """Bad glob or regex pattern."""

    def __init__(self, message: str, pattern: str, index: int = -1):
        if index >= 0:
            message = f"{message} near index {index}: {pattern}"
        else:
            message = f"{message}: {pattern}"
        super().__init__(message)
        self.pattern = pattern
        self.index = index


class InvalidPathError(WebFSError, ValueError):
    """Address cannot be turned into a path of this filesystem."""
    pass
