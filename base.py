"""Attribute box and the capability interfaces implemented by webfs.

Three narrow interfaces describe what the rest of a program may rely on:

    AddressablePath      a node of the hierarchy (navigation, identity)
    MountableFileSystem  one mounted remote tree (listing, attributes, content)
    FileSystemRegistry   the table of open mounts

The remote implementation lives in webpath.py, filesystem.py and registry.py.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from errors import ReadOnlyFileSystemError


EPOCH = datetime.fromtimestamp(0, timezone.utc)


@dataclass(eq=False)
class FileAttributes:
    """Mutable attributes of a path.

    is_file=False means directory. size is -1 when the size is unknown,
    which is always the case for directories. Boxes are shared between a
    path and its name-only view and refreshed in place with flash(), so
    boxes compare by identity.
    """
    is_file: bool
    size: int = -1
    modified: datetime = EPOCH

    @property
    def is_dir(self) -> bool:
        return not self.is_file

    @property
    def is_symlink(self) -> bool:
        return False

    @property
    def is_other(self) -> bool:
        return False

    def flash(self, is_file: bool, size: int, modified: datetime):
        """Overwrite every field in place. Concurrent flashes race; last one wins."""
        self.is_file = is_file
        self.size = size
        self.modified = modified

    def to_dict(self) -> dict:
        return {
            "isRegularFile": self.is_file,
            "isDirectory": self.is_dir,
            "isSymbolicLink": self.is_symlink,
            "isOther": self.is_other,
            "size": self.size,
            "lastModifiedTime": self.modified,
        }


class AddressablePath:
    """A node of a hierarchical, address-resolvable namespace."""

    @property
    def parent(self):
        raise NotImplementedError

    def name_at(self, index: int):
        """Return the name-only view of the index-th segment, counted from the root."""
        raise NotImplementedError

    @property
    def file_name(self):
        """Return the name-only view of this node."""
        raise NotImplementedError

    def resolve(self, other):
        raise NotImplementedError

    def relativize(self, other):
        raise NotImplementedError

    def __iter__(self):
        """Iterate from the root down to this node."""
        raise NotImplementedError


class MountableFileSystem:
    """A read-only tree mounted from a remote base address."""

    def get_path(self, base: str, *elems: str):
        raise NotImplementedError

    def list(self, path):
        """Return an iterable of the children of a directory path."""
        raise NotImplementedError

    def attributes(self, path) -> FileAttributes:
        raise NotImplementedError

    def open(self, path):
        """Return a readable binary stream over the content of a file path."""
        raise NotImplementedError

    def close(self):
        raise NotImplementedError

    def _read_only(self, *args, **kwargs):
        raise ReadOnlyFileSystemError(f"{type(self).__name__} is read-only")

    delete = _read_only
    mkdir = _read_only
    move = _read_only
    copy = _read_only
    set_attribute = _read_only


class FileSystemRegistry:
    """Process-wide table of open mounts keyed by remote authority."""

    scheme: str

    def lookup(self, address: str):
        """Return the mount covering address, or None."""
        raise NotImplementedError

    def create(self, address: str):
        raise NotImplementedError

    def remove(self, address: str):
        raise NotImplementedError
