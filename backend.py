"""Data sources for the reference listing server.

Paths are lists of segments; [] is the root, which is always a directory.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone

from errors import NotFoundError, WebFSError

Segments = list[str]


@dataclass
class ResourceInfo:
    """Metadata about a resource (file or directory)."""
    is_dir: bool
    size: int = -1
    modified: datetime | None = None


class BackendError(WebFSError):
    """A source could not be read."""
    pass


class Backend:
    """Read-only tree served by the listing server."""

    def info(self, path: Segments) -> ResourceInfo:
        """Return metadata for the resource at path."""
        raise NotImplementedError

    def list(self, path: Segments) -> list[str]:
        """Return child names for a directory. Raises NotFoundError if not a directory."""
        raise NotImplementedError

    def get(self, path: Segments) -> bytes:
        """Return the content of a file. Raises NotFoundError if not a file."""
        raise NotImplementedError


class MemoryBackend(Backend):
    """Tree held in nested dicts: dicts are directories, str/bytes values are files.

    Every resource reports the same modification time, or none.

        MemoryBackend({
            "readme.txt": "Hello, world!",
            "docs": {"guide.txt": b"A guide"},
        })
    """

    def __init__(self, tree: dict, modified: datetime | None = None):
        self._tree = tree
        self._modified = modified

    def _resolve(self, path: Segments):
        node = self._tree
        for part in path:
            if not isinstance(node, dict) or part not in node:
                raise NotFoundError(f"Not found: /{'/'.join(path)}")
            node = node[part]
        return node

    def info(self, path: Segments) -> ResourceInfo:
        node = self._resolve(path)
        if isinstance(node, dict):
            return ResourceInfo(is_dir=True, modified=self._modified)
        data = node.encode("utf-8") if isinstance(node, str) else node
        return ResourceInfo(is_dir=False, size=len(data), modified=self._modified)

    def list(self, path: Segments) -> list[str]:
        node = self._resolve(path)
        if not isinstance(node, dict):
            raise NotFoundError(f"Not a directory: /{'/'.join(path)}")
        return sorted(node)

    def get(self, path: Segments) -> bytes:
        node = self._resolve(path)
        if isinstance(node, dict):
            raise NotFoundError(f"Not a file: /{'/'.join(path)}")
        return node.encode("utf-8") if isinstance(node, str) else node


class DirectoryBackend(Backend):
    """A local directory. Entries other than regular files and directories are hidden."""

    def __init__(self, root: str):
        if not os.path.isdir(root):
            raise BackendError(f"Not a directory: {root}")
        self._root = os.path.realpath(root)

    def _local(self, path: Segments) -> str:
        if any(part in ("", ".", "..") or os.sep in part for part in path):
            raise NotFoundError(f"Not found: /{'/'.join(path)}")
        return os.path.join(self._root, *path)

    def _stat(self, path: Segments) -> os.stat_result:
        try:
            return os.stat(self._local(path))
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(f"Not found: /{'/'.join(path)}") from e
        except OSError as e:
            raise BackendError(f"Cannot stat /{'/'.join(path)}: {e}") from e

    def info(self, path: Segments) -> ResourceInfo:
        st = self._stat(path)
        modified = datetime.fromtimestamp(int(st.st_mtime), timezone.utc)
        if os.path.isdir(self._local(path)):
            return ResourceInfo(is_dir=True, modified=modified)
        if not os.path.isfile(self._local(path)):
            raise NotFoundError(f"Not found: /{'/'.join(path)}")
        return ResourceInfo(is_dir=False, size=st.st_size, modified=modified)

    def list(self, path: Segments) -> list[str]:
        if not self.info(path).is_dir:
            raise NotFoundError(f"Not a directory: /{'/'.join(path)}")
        local = self._local(path)
        try:
            names = os.listdir(local)
        except OSError as e:
            raise BackendError(f"Cannot list /{'/'.join(path)}: {e}") from e
        return sorted(n for n in names
                      if os.path.isdir(os.path.join(local, n)) or os.path.isfile(os.path.join(local, n)))

    def get(self, path: Segments) -> bytes:
        if self.info(path).is_dir:
            raise NotFoundError(f"Not a file: /{'/'.join(path)}")
        try:
            with open(self._local(path), "rb") as f:
                return f.read()
        except OSError as e:
            raise BackendError(f"Error reading /{'/'.join(path)}: {e}") from e
