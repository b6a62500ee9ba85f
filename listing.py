r"""Directory listing wire format.

A listing is the body returned for a directory address: one record per
line, up to three tab-separated fields.

    <name>\t<modified>\t<size>

modified is an ISO-8601 instant, or empty for the epoch. size is a
non-negative byte count for files, or "-" for directories. The record
named "." describes the listed directory itself.

    .\t2024-01-01T00:00:00Z\t-
    docs\t\t-
    readme.txt\t2024-01-02T10:30:00Z\t1432
"""

import logging
from datetime import datetime, timezone

from base import EPOCH, FileAttributes
from errors import CorruptListingError
from webpath import SEPARATOR, WebPath, sub_path

logger = logging.getLogger(__name__)

SELF = "."
DIRECTORY_SIZE = "-"
MAX_FIELDS = 3


def _parse_time(value: str) -> datetime:
    if not value:
        return EPOCH
    try:
        modified = datetime.fromisoformat(value)
    except ValueError as e:
        raise CorruptListingError(f"Bad modification time '{value}'") from e
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    return modified


def _parse_size(value: str) -> int:
    if not value or value == DIRECTORY_SIZE:
        return -1
    if not (value.isascii() and value.isdigit()):
        raise CorruptListingError(f"Bad size '{value}'")
    return int(value)


def parse_record(line: str) -> tuple[str, datetime, int]:
    """Split one listing line into (name, modified, size)."""
    fields = [f.strip() for f in line.split("\t")]
    if len(fields) > MAX_FIELDS:
        raise CorruptListingError(f"Expected at most {MAX_FIELDS} fields, got {len(fields)}: {line!r}")
    fields += [""] * (MAX_FIELDS - len(fields))

    name, modified, size = fields
    if not name:
        raise CorruptListingError(f"Blank name: {line!r}")
    return name, _parse_time(modified), _parse_size(size)


def directory_name(path: str) -> str:
    """Return the last segment of a request path, ignoring one trailing separator."""
    if path.endswith(SEPARATOR):
        path = path[:-1]
    return path.rsplit(SEPARATOR, 1)[-1]


class Listing:
    """Lazy sequence of the paths described by a listing response.

    base is the address that was listed and path the request path it was
    fetched with. When owner (the path of base) is given, its self record
    refreshes owner's attributes in place and yields owner itself; with
    skip_owner it is consumed without being yielded. Without owner the self
    record becomes a fresh path named after the last segment of path.

    The listing owns the response stream: it is closed when the sequence is
    exhausted, when a record is corrupt, or on close(). Use it in a with
    block when the sequence may be abandoned early.
    """

    def __init__(self, fs, stream, base: str, path: str, owner=None, skip_owner: bool = False):
        self.fs = fs
        self.base = base
        self.path = path
        self.owner = owner
        self.skip_owner = skip_owner
        self._stream = stream
        self._lines = iter(stream)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __iter__(self):
        return self

    def __next__(self):
        while self._stream is not None:
            try:
                entry = self._parse(next(self._lines))
            except BaseException:
                self.close()
                raise
            if not (self.skip_owner and entry is self.owner):
                return entry
        raise StopIteration

    def _parse(self, raw) -> WebPath:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        try:
            name, modified, size = parse_record(line.rstrip("\r\n"))
        except CorruptListingError:
            logger.debug("Corrupt record in listing of %s: %r", self.base, line)
            raise

        is_file = size >= 0

        if name == SELF:
            if self.owner is not None:
                return self.owner.refresh(is_file, size, modified)
            name = directory_name(self.path)
            address = sub_path(self.base, SELF, is_file)
        else:
            address = sub_path(self.base, name, is_file)

        return WebPath(self.fs, self.owner, name, address,
                       FileAttributes(is_file, size, modified))

    def close(self):
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()
