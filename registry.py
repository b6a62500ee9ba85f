"""Table of open WebFileSystem mounts."""

import logging
import threading

from base import FileSystemRegistry
from client import WebFileClient
from errors import AlreadyExistsError, InvalidPathError, SchemeMismatchError
from filesystem import WebFileSystem, remote_base
from webpath import SEPARATOR

logger = logging.getLogger(__name__)

SCHEME = "webfs"


class WebFileSystemRegistry(FileSystemRegistry):
    """Creates, finds and forgets mounts, keyed by remote authority and base path.

    Addresses look like "webfs:http://host/base/some/dir/". The key of an
    address is its scheme-specific part without trailing separators. An
    address below an open mount's key (key + "/" + more) resolves to that
    mount, so deep addresses reuse it instead of opening another.

    Every operation holds one registry-wide lock for its whole duration.
    The lock is reentrant: get_path() looks up and creates under one hold.

    client_factory(base_url) builds the transport of each new mount; pass
    one to configure proxies, timeouts or certificate checks.
    """

    scheme = SCHEME

    def __init__(self, client_factory=None):
        self.client_factory = client_factory or WebFileClient.for_server
        self._mounts: dict[str, WebFileSystem] = {}
        self._lock = threading.RLock()

    def split(self, address: str) -> tuple[str, str]:
        """Return (scheme, key) of an address."""
        scheme, sep, ssp = address.partition(":")
        if not sep or scheme.lower() != self.scheme:
            raise SchemeMismatchError(f"Expected a {self.scheme}: address, got {address!r}")
        key = ssp.rstrip(SEPARATOR)
        if not key:
            raise InvalidPathError(f"Blank address: {address!r}")
        return scheme, key

    def _find(self, key: str) -> WebFileSystem | None:
        fs = self._mounts.get(key)
        if fs is not None:
            return fs

        best = None
        for candidate in self._mounts:
            if key.startswith(candidate + SEPARATOR):
                if best is None or len(candidate) > len(best):
                    best = candidate
        return self._mounts[best] if best is not None else None

    def lookup(self, address: str) -> WebFileSystem | None:
        with self._lock:
            _, key = self.split(address)
            if not self._mounts:
                return None
            return self._find(key)

    def create(self, address: str) -> WebFileSystem:
        with self._lock:
            _, key = self.split(address)
            existing = self._find(key)
            if existing is not None:
                raise AlreadyExistsError(f"{address} is already mounted as {existing.root.address}")

            fs = WebFileSystem(self, address, self.client_factory(remote_base(address)))
            self._mounts[key] = fs
            logger.debug("Mounted %s", key)
            return fs

    def remove(self, address: str):
        with self._lock:
            _, key = self.split(address)
            if self._mounts.pop(key, None) is not None:
                logger.debug("Unmounted %s", key)

    def get_path(self, address: str):
        """Return the path of address, mounting its remote base first if needed."""
        with self._lock:
            fs = self.lookup(address)
            if fs is None:
                fs = self.create(address)
            _, _, ssp = address.partition(":")
            return fs.get_path(ssp)

    def filesystems(self) -> list[WebFileSystem]:
        with self._lock:
            return list(self._mounts.values())
