"""A remote directory tree mounted as a read-only filesystem."""

import logging
from datetime import datetime, timezone

from base import FileAttributes, MountableFileSystem
from client import WebFileClient
from errors import InvalidPathError, NotFoundError, TransportError
from listing import Listing
from pattern import path_matcher
from webpath import SEPARATOR, WebPath, relative_to

logger = logging.getLogger(__name__)


def remote_base(address: str) -> str:
    """Return the transport base URL of a mount address ("webfs:http://h/a" -> "http://h/a")."""
    _, _, ssp = address.partition(":")
    # "webfs:/http://h/a" is accepted as well
    if ssp.startswith(SEPARATOR) and not ssp.startswith(SEPARATOR * 2):
        ssp = ssp[1:]
    return ssp


class WebFileSystem(MountableFileSystem):
    """One remote base address, mounted.

    Instances are made by a WebFileSystemRegistry and stay open until
    close() removes them from it. Paths of this filesystem are only ever
    equal to paths of the same instance.
    """

    separator = SEPARATOR
    read_only = True

    def __init__(self, registry, address: str, client: WebFileClient | None = None):
        self.registry = registry
        self.sentinel = FileAttributes(False, -1, datetime.now(timezone.utc))
        self.root = WebPath(self, None, "", address, self.sentinel)
        self.client = client or WebFileClient.for_server(remote_base(address))

    def __repr__(self):
        return f"WebFileSystem({self.root.address!r})"

    # --- Lifecycle ---

    @property
    def is_open(self) -> bool:
        return self.registry.lookup(self.root.address) is self

    def close(self):
        self.registry.remove(self.root.address)
        self.client.close()
        logger.debug("Closed %s", self.root.address)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def root_directories(self) -> list[WebPath]:
        return [self.root]

    # --- Paths ---

    def get_path(self, base: str, *elems: str) -> WebPath:
        """Return the directory path for base (a scheme-specific address) joined with elems.

        The directory is listed to learn its attributes. If that fails, the
        returned path carries no attributes and attributes() on it raises
        NotFoundError.
        """
        address = f"{self.registry.scheme}:{base.strip()}"
        if address.endswith(":"):
            raise InvalidPathError(f"Blank path: {base!r}")
        if address.endswith(SEPARATOR):
            address = address[:-1]
        for elem in elems:
            address += SEPARATOR + elem
        address += SEPARATOR

        if relative_to(self.root.address, address) == "":
            return self.root

        try:
            with self._listing(None, address) as listing:
                for entry in listing:
                    if relative_to(address, entry.address) == "":
                        return entry
        except TransportError as e:
            logger.debug("Cannot list %s: %s", address, e)

        path = self.relative(address)
        return WebPath(self, None, path.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[-1],
                       address, self.sentinel)

    def relative(self, path) -> str:
        """Return the request path of a path or address, relative to the root."""
        address = path if isinstance(path, str) else path.address
        if address is None:
            raise InvalidPathError(f"Path has no address: {path!r}")
        root = self.root.address.rstrip(SEPARATOR)
        if address.rstrip(SEPARATOR) == root:
            return ""
        if not address.startswith(root + SEPARATOR):
            raise InvalidPathError(f"{address} is not below {self.root.address}")
        return address[len(root) + 1:]

    def path_matcher(self, pattern: str):
        return path_matcher(pattern)

    def is_same_file(self, first, second) -> bool:
        if first is None or second is None:
            return False
        return first == second

    # --- Listing ---

    def _listing(self, owner, address: str, skip_owner: bool = False) -> Listing:
        path = self.relative(address)
        stream = self.client.fetch(path)
        return Listing(self, stream, address, path, owner=owner, skip_owner=skip_owner)

    def list(self, path: WebPath) -> Listing:
        """List the children of a directory, refreshing its own attributes on the way."""
        return self._listing(path, path.address, skip_owner=True)

    def child(self, path: WebPath, name: str) -> WebPath:
        """Return the entry called name in the listing of path."""
        with self.list(path) as listing:
            for entry in listing:
                if entry.name == name:
                    return entry
        raise NotFoundError(f"No entry '{name}' in {path}")

    def walk(self, path: WebPath):
        """Yield every path below a directory, depth first."""
        with self.list(path) as listing:
            children = list(listing)
        for child in children:
            yield child
            if child.attributes.is_dir:
                yield from self.walk(child)

    # --- Attributes and content ---

    def attributes(self, path: WebPath) -> FileAttributes:
        attributes = path.attributes
        if path != self.root and attributes is self.sentinel:
            raise NotFoundError(f"{path} has no attributes")
        return attributes

    def attribute_map(self, path: WebPath) -> dict:
        return self.attributes(path).to_dict()

    def open(self, path: WebPath):
        """Return a stream over the content of a file."""
        return self.client.fetch(self.relative(path))
