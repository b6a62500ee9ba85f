"""Path entities of a mounted web filesystem.

A WebPath is either addressed (it knows the absolute address it resolves
to, e.g. "webfs:http://host/base/docs/") or name-only (it only knows its
final segment, e.g. "docs"). Every addressed path carries its name-only
view in file_name; both share the same parent and attribute box.
"""

import re

from base import AddressablePath, FileAttributes
from errors import UnsupportedOperationError

SEPARATOR = "/"

# "webfs:http://host/..." or "webfs:/http://host/..."
_ABSOLUTE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:/?[A-Za-z][A-Za-z0-9+.\-]*://")


def is_absolute_address(address: str) -> bool:
    """Return True if address is a full address: a scheme wrapping a URL.

    Relative addresses never match, even when a segment contains a colon
    ("a:b/c.txt"), since segments are never empty.
    """
    return _ABSOLUTE.match(address) is not None


def sub_path(base: str, elem: str, is_file: bool) -> str:
    """Append elem to base without normalizing either.

    A separator is added between them only when base lacks one, and after
    elem unless elem is a file or already ends with one. elem "" or "."
    denotes base itself; a file address never keeps a trailing separator.

        sub_path("webfs:http://h/a", "b", False)   -> "webfs:http://h/a/b/"
        sub_path("webfs:http://h/a/", "b", True)   -> "webfs:http://h/a/b"
        sub_path("webfs:http://h/a/", ".", True)   -> "webfs:http://h/a"
    """
    is_self = elem in ("", ".")
    elem = elem.lstrip(SEPARATOR)
    base_sep = base.endswith(SEPARATOR)
    elem_sep = elem.endswith(SEPARATOR)

    path = base if base_sep else base + SEPARATOR
    if not is_self:
        path += elem
    if not (is_self or is_file or elem_sep):
        path += SEPARATOR

    if is_file and path.endswith(SEPARATOR):
        path = path[:-1]
    return path


def relative_to(base: str, target: str) -> str:
    """Return target relative to base, or target itself if it is not below base."""
    if target == base:
        return ""
    prefix = base if base.endswith(SEPARATOR) else base + SEPARATOR
    if target.startswith(prefix):
        return target[len(prefix):]
    return target


class WebPath(AddressablePath):
    """One node of a mounted tree.

    Paths are created by their WebFileSystem, either when an address is
    looked up or when a directory listing is parsed. Attributes may be
    refreshed in place later (see FileAttributes.flash); paths are not
    synchronized, so re-listing the same directory from two threads races.
    """

    def __init__(self, fs, parent, name: str, address: str | None,
                 attributes: FileAttributes):
        self.fs = fs
        self._parent = parent
        self.name = name
        self.address = address
        self.attributes = attributes

        if address is not None:
            self.depth = 1 + (parent.depth if parent is not None else 0)
            self._file_name = WebPath(fs, parent, name, None, attributes)
        else:
            self.depth = 1
            self._file_name = self

    # --- Navigation ---

    @property
    def parent(self):
        return self._parent

    @property
    def root(self):
        return self.fs.root

    @property
    def filesystem(self):
        return self.fs

    @property
    def file_name(self):
        return self._file_name

    @property
    def is_name_only(self) -> bool:
        return self.address is None

    def name_at(self, index: int):
        if index < 0 or index >= self.depth:
            raise IndexError(f"Name index {index} out of range for depth {self.depth}")
        entry = self
        for _ in range(self.depth - index - 1):
            entry = entry._parent
        return entry._file_name

    def __iter__(self):
        chain = []
        entry = self
        while entry is not None:
            chain.append(entry)
            entry = entry._parent
        return reversed(chain)

    def is_absolute(self) -> bool:
        return True

    def absolute(self):
        return self

    def normalize(self):
        return self

    def as_uri(self) -> str | None:
        return self.address

    # --- Composition ---

    def resolve(self, other):
        """Return other as a child of this directory.

        other is a WebPath (typically name-only or relative) or a directory
        name. A path that already has an absolute address is returned as is.
        """
        self._require_directory("resolve")

        if isinstance(other, str):
            other = WebPath(self.fs, None, other.strip(SEPARATOR), None, self.fs.sentinel)
        elif other.address is not None and is_absolute_address(other.address):
            return other

        address = sub_path(self.address, str(other), other.attributes.is_file)
        return WebPath(self.fs, self, other.name, address, other.attributes)

    def resolve_sibling(self, other):
        if self._parent is None:
            return other
        return self._parent.resolve(other)

    def relativize(self, other):
        """Return a path whose address is other's address relative to this directory."""
        self._require_directory("relativize")
        target = other.address if other.address is not None else other.name
        return WebPath(other.fs, other._parent, other.name,
                       relative_to(self.address, target), other.attributes)

    def _require_directory(self, operation: str):
        if self.address is None or not self.attributes.is_dir:
            raise UnsupportedOperationError(f"Cannot {operation} against {self!r}: not a directory")

    def subpath(self, start: int, end: int):
        raise UnsupportedOperationError("subpath")

    def starts_with(self, other):
        raise UnsupportedOperationError("starts_with")

    def ends_with(self, other):
        raise UnsupportedOperationError("ends_with")

    def refresh(self, is_file: bool, size: int, modified):
        """Update attributes in place. A path still sharing the sentinel gets its own box."""
        if self.attributes is self.fs.sentinel:
            self.attributes = FileAttributes(is_file, size, modified)
            self._file_name.attributes = self.attributes
        else:
            self.attributes.flash(is_file, size, modified)
        return self

    # --- Filesystem passthroughs ---

    def iterdir(self):
        return self.fs.list(self)

    def stat(self) -> FileAttributes:
        return self.fs.attributes(self)

    def open(self):
        return self.fs.open(self)

    def exists(self) -> bool:
        return self is self.fs.root or self.attributes is not self.fs.sentinel

    # --- Identity ---

    def _compare(self, other) -> int:
        """Return -1, 0 or 1. Name-only paths sort first and compare by name."""
        mine, theirs = self.address, other.address
        if mine is None and theirs is None:
            return (self.name > other.name) - (self.name < other.name)
        if mine is None:
            return -1
        if theirs is None:
            return 1
        # A trailing separator does not make a different address
        if relative_to(mine, theirs) == "" or relative_to(theirs, mine) == "":
            return 0
        return (mine > theirs) - (mine < theirs)

    def _comparable(self, other) -> bool:
        return isinstance(other, WebPath) and other.fs is self.fs

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, WebPath):
            return NotImplemented
        return self._comparable(other) and self._compare(other) == 0

    def __lt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._compare(other) < 0

    def __le__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._compare(other) <= 0

    def __gt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._compare(other) > 0

    def __ge__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._compare(other) >= 0

    def __hash__(self):
        if self.address is None:
            return hash(self.name)
        return hash(self.address.rstrip(SEPARATOR))

    def __str__(self):
        return self.name if self.address is None else self.address

    def __repr__(self):
        return f"WebPath({str(self)!r})"
