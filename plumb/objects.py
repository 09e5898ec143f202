# objects.py -- Access to base objects
# Copyright (C) 2026 The plumb contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# plumb is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Access to base objects.

Every stored object is framed as ``type SP decimal-length NUL payload``; the
SHA-1 of those framed bytes is the object's name, and the zlib-compressed
framed bytes are what ends up on disk. The object kinds form a closed set:
:class:`Blob`, :class:`Commit` and :class:`Tree`.
"""

__all__ = [
    "OBJECT_CLASSES",
    "Blob",
    "Commit",
    "ObjectID",
    "ShaFile",
    "Tree",
    "TreeEntry",
    "check_hexsha",
    "hex_to_filename",
    "hex_to_sha",
    "key_entry",
    "object_class",
    "object_header",
    "object_type_for_mode",
    "parse_object_header",
    "parse_tree",
    "serialize_tree",
    "sha_to_hex",
    "sorted_tree_items",
    "valid_hexsha",
]

import binascii
import os
import zlib
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import IO, Any, ClassVar, NamedTuple, NewType, TypeVar

from ._typing import override
from .errors import (
    MalformedObjectError,
    MissingHeaderError,
    NotBlobError,
    NotCommitError,
    NotTreeError,
    ObjectFormatException,
    UnknownObjectTypeError,
    WrongObjectException,
)
from .hash import DEFAULT_HASH_ALGORITHM, HashAlgorithm
from .kvlm import MESSAGE_KEY, parse_kvlm, serialize_kvlm

ObjectID = NewType("ObjectID", str)

# Header fields for commits
_TREE_HEADER = "tree"
_PARENT_HEADER = "parent"
_AUTHOR_HEADER = "author"
_COMMITTER_HEADER = "committer"

# Modes of the entries a tree can hold
MODE_TREE = "40000"
MODE_GITLINK = "160000"

_OCTAL_DIGITS = frozenset(b"01234567")
_HEX_DIGITS = frozenset("0123456789abcdef")

T = TypeVar("T", bound="ShaFile")


def sha_to_hex(sha: bytes) -> ObjectID:
    """Takes a raw 20-byte digest and returns its hex representation."""
    if len(sha) != DEFAULT_HASH_ALGORITHM.oid_length:
        raise ObjectFormatException(f"Incorrect length of raw sha: {len(sha)}")
    return ObjectID(binascii.hexlify(sha).decode("ascii"))


def hex_to_sha(hex: str) -> bytes:
    """Takes a hex sha and returns a binary sha."""
    check_hexsha(hex, "Invalid hexsha")
    return binascii.unhexlify(hex)


def valid_hexsha(hex: str | bytes) -> bool:
    """Check whether a value is a full lowercase hex object id."""
    if isinstance(hex, bytes):
        try:
            hex = hex.decode("ascii")
        except UnicodeDecodeError:
            return False
    return len(hex) == DEFAULT_HASH_ALGORITHM.hex_length and set(hex) <= _HEX_DIGITS


def check_hexsha(hex: str | bytes, error_msg: str) -> None:
    """Check if a string is a valid hex sha string.

    Args:
      hex: Hex string to check
      error_msg: Error message to use in exception
    Raises:
      ObjectFormatException: Raised when the string is not valid
    """
    if not valid_hexsha(hex):
        raise ObjectFormatException(f"{error_msg} {hex!r}")


def hex_to_filename(path: str | os.PathLike[str], hex: str) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    check_hexsha(hex, "Invalid object name")
    return os.path.join(path, hex[:2], hex[2:])


def object_class(type_name: str | bytes) -> "type[ShaFile]":
    """Get the object class corresponding to the given type.

    Args:
      type_name: A type name, as str or as the bytes found in a header.
    Returns: The ShaFile subclass corresponding to the given type.
    Raises:
      UnknownObjectTypeError: for anything but blob, commit or tree
    """
    if isinstance(type_name, bytes):
        try:
            key = type_name.decode("ascii")
        except UnicodeDecodeError as exc:
            raise UnknownObjectTypeError(type_name) from exc
    else:
        key = type_name
    try:
        return _TYPE_MAP[key]
    except KeyError:
        raise UnknownObjectTypeError(type_name) from None


def object_type_for_mode(mode: str) -> str:
    """Return the type of object a tree entry with the given mode points at."""
    if mode.lstrip("0") == MODE_TREE:
        return "tree"
    if mode == MODE_GITLINK:
        return "commit"
    return "blob"


def object_header(type_name: str, length: int) -> bytes:
    """Return the framing header for an object of the given type and size."""
    return f"{type_name} {length}".encode("ascii") + b"\0"


def parse_object_header(raw: bytes, sha: str | None = None) -> tuple[str, bytes]:
    """Split a decompressed object into its type and payload.

    Args:
      raw: Decompressed framed object bytes
      sha: Hex SHA of the object, used in error messages
    Returns: tuple of (type name, payload)
    Raises:
      MalformedObjectError: if the framing is missing or the declared size
        does not match the payload length
    """
    type_end = raw.find(b" ")
    if type_end < 0:
        raise MalformedObjectError(sha, "no type terminator")
    size_end = raw.find(b"\0", type_end)
    if size_end < 0:
        raise MalformedObjectError(sha, "no size terminator")
    type_name = raw[:type_end]
    size_text = raw[type_end + 1 : size_end]
    if not size_text.isdigit():
        raise MalformedObjectError(sha, f"bad size field {size_text!r}")
    payload = raw[size_end + 1 :]
    if int(size_text) != len(payload):
        raise MalformedObjectError(sha, "bad length")
    return object_class(type_name).type_name, payload


def _decompress(data: bytes) -> bytes:
    dcomp = zlib.decompressobj()
    try:
        dcomped = dcomp.decompress(data)
        dcomped += dcomp.flush()
    except zlib.error as exc:
        raise ObjectFormatException(f"corrupt compressed object: {exc}") from exc
    if not dcomp.eof:
        raise ObjectFormatException("truncated compressed object")
    return dcomped


class ShaFile:
    """A content-addressed object."""

    type_name: ClassVar[str]
    wrong_type_error: ClassVar[type[WrongObjectException]]

    def serialize(self) -> bytes:
        """Return the payload bytes for the current content."""
        raise NotImplementedError(self.serialize)

    def deserialize(self, data: bytes) -> None:
        """Replace the content by decoding payload bytes."""
        raise NotImplementedError(self.deserialize)

    def as_raw_string(self) -> bytes:
        """Return the payload bytes of this object."""
        return self.serialize()

    def raw_length(self) -> int:
        """Returns the length of the raw string of this object."""
        return len(self.serialize())

    def _header(self, length: int) -> bytes:
        return object_header(self.type_name, length)

    def as_framed_string(self) -> bytes:
        """Return the payload prefixed with its ``type SP size NUL`` header."""
        payload = self.serialize()
        return self._header(len(payload)) + payload

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the compressed representation used for loose object files.

        Args:
          compression_level: zlib compression level (-1 for the default)
        """
        return zlib.compress(self.as_framed_string(), compression_level)

    def sha(self, hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM) -> Any:  # noqa: ANN401
        """The hash object that names this object."""
        return hash_algorithm.hash_chunks([self.as_framed_string()])

    @property
    def id(self) -> ObjectID:
        """The hex SHA of this object."""
        return ObjectID(self.sha().hexdigest())

    @staticmethod
    def from_raw_string(type_name: str | bytes, string: bytes) -> "ShaFile":
        """Creates an object of the indicated type from the raw string given.

        Args:
          type_name: The type name of the object.
          string: The raw uncompressed payload.
        """
        obj = object_class(type_name)()
        obj.deserialize(string)
        return obj

    @classmethod
    def from_string(cls: type[T], string: bytes) -> T:
        """Create an object of this class from a payload string."""
        obj = cls()
        obj.deserialize(string)
        return obj

    @classmethod
    def from_file(cls: type[T], f: IO[bytes], sha: str | None = None) -> T:
        """Read an object from a file-like object holding compressed bytes.

        Args:
          f: File to read from
          sha: Expected hex SHA, used in error messages
        Raises:
          WrongObjectException: if the object is not an instance of cls
        """
        type_name, payload = parse_object_header(_decompress(f.read()), sha)
        obj = ShaFile.from_raw_string(type_name, payload)
        if not isinstance(obj, cls):
            raise cls.wrong_type_error(sha if sha is not None else obj.id)
        return obj

    @classmethod
    def from_path(cls: type[T], path: str | os.PathLike[str], sha: str | None = None) -> T:
        """Open an object file from disk."""
        with open(path, "rb") as f:
            return cls.from_file(f, sha)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"

    def __eq__(self, other: object) -> bool:
        """Return true if the sha of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Blob(ShaFile):
    """An opaque run of bytes."""

    type_name = "blob"
    wrong_type_error = NotBlobError

    def __init__(self, data: bytes = b"") -> None:
        self.data = data

    @override
    def serialize(self) -> bytes:
        return self.data

    @override
    def deserialize(self, data: bytes) -> None:
        self.data = bytes(data)


class Commit(ShaFile):
    """A commit: ordered headers plus a free-form message.

    Headers may repeat; ``parent`` repeats for merge commits. The commit
    layer does not check that ``tree`` is present; accessors that need a
    header raise MissingHeaderError when it is absent.
    """

    type_name = "commit"
    wrong_type_error = NotCommitError

    def __init__(self, kvlm: Mapping[str, Sequence[str]] | None = None) -> None:
        self._kvlm: dict[str, list[str]] = {MESSAGE_KEY: [""]}
        if kvlm is not None:
            self._kvlm.update((k, list(v)) for k, v in kvlm.items())

    @override
    def serialize(self) -> bytes:
        return serialize_kvlm(self._kvlm)

    @override
    def deserialize(self, data: bytes) -> None:
        self._kvlm = parse_kvlm(data)

    @property
    def kvlm(self) -> dict[str, list[str]]:
        """Return a copy of the full mapping, message included."""
        return {k: list(v) for k, v in self._kvlm.items()}

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Return (key, value) pairs for every header, message excluded."""
        return [
            (k, v) for k, values in self._kvlm.items() if k != MESSAGE_KEY for v in values
        ]

    def get_values(self, key: str) -> list[str]:
        """Return the values of a header.

        Raises:
          MissingHeaderError: if the header is absent
        """
        if key == MESSAGE_KEY or key not in self._kvlm:
            raise MissingHeaderError(key)
        return list(self._kvlm[key])

    def add_header(self, key: str, value: str) -> None:
        """Append a value to a header, creating it if necessary."""
        if key == MESSAGE_KEY:
            raise ValueError("the message is not a header")
        self._kvlm.setdefault(key, []).append(value)

    def _single(self, key: str) -> str:
        return self.get_values(key)[0]

    @property
    def tree(self) -> ObjectID:
        """Tree that is the state of this commit."""
        return ObjectID(self._single(_TREE_HEADER))

    @property
    def parents(self) -> list[ObjectID]:
        """Parents of this commit, in header order; empty for a root commit."""
        return [ObjectID(p) for p in self._kvlm.get(_PARENT_HEADER, [])]

    @property
    def author(self) -> str:
        """The author line of the commit."""
        return self._single(_AUTHOR_HEADER)

    @property
    def committer(self) -> str:
        """The committer line of the commit."""
        return self._single(_COMMITTER_HEADER)

    def _get_message(self) -> str:
        return self._kvlm[MESSAGE_KEY][0]

    def _set_message(self, value: str) -> None:
        self._kvlm[MESSAGE_KEY] = [value]

    message = property(_get_message, _set_message, doc="The commit message")


class TreeEntry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    mode: str
    path: str
    sha: ObjectID


def _check_mode(mode: bytes, where: str) -> None:
    if len(mode) not in (5, 6):
        raise ObjectFormatException(
            f"mode {mode!r} {where} has length {len(mode)}, expected 5 or 6"
        )
    if not set(mode) <= _OCTAL_DIGITS:
        raise ObjectFormatException(f"invalid mode {mode!r} {where}")


def parse_tree(text: bytes) -> Iterator[TreeEntry]:
    """Parse a tree payload.

    Args:
      text: Serialized tree payload
    Returns: iterator over TreeEntry tuples, in payload order
    Raises:
      ObjectFormatException: if an entry is truncated or malformed
    """
    count = 0
    length = len(text)
    oid_length = DEFAULT_HASH_ALGORITHM.oid_length
    while count < length:
        mode_end = text.find(b" ", count)
        if mode_end < 0:
            raise ObjectFormatException(f"tree entry at offset {count} has no mode")
        mode = text[count:mode_end]
        _check_mode(mode, f"at offset {count}")
        name_end = text.find(b"\0", mode_end)
        if name_end < 0:
            raise ObjectFormatException(
                f"tree entry at offset {count} has no path terminator"
            )
        try:
            name = text[mode_end + 1 : name_end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ObjectFormatException(
                f"invalid UTF-8 in tree entry path at offset {count}: {exc}"
            ) from exc
        sha = text[name_end + 1 : name_end + 1 + oid_length]
        if len(sha) != oid_length:
            raise ObjectFormatException(
                f"tree entry {name!r} has a truncated object id"
            )
        count = name_end + 1 + oid_length
        yield TreeEntry(mode.decode("ascii"), name, sha_to_hex(sha))


def serialize_tree(items: Iterable[TreeEntry]) -> Iterator[bytes]:
    """Serialize the items in a tree to a text.

    Args:
      items: Iterable over TreeEntry tuples, written in the given order
    Returns: Serialized tree payload as chunks
    """
    for mode, path, hexsha in items:
        yield (
            mode.encode("ascii")
            + b" "
            + path.encode("utf-8")
            + b"\0"
            + hex_to_sha(hexsha)
        )


def key_entry(entry: TreeEntry) -> str:
    """Sort key for tree entry.

    Args:
      entry: TreeEntry tuple
    """
    if object_type_for_mode(entry.mode) == "tree":
        return entry.path + "/"
    return entry.path


def sorted_tree_items(entries: Iterable[TreeEntry]) -> list[TreeEntry]:
    """Return tree entries in the order canonical Git trees use.

    Directories sort as if their name ended in a slash. Tree objects in this
    package keep whatever order they were built in; this helper is for
    callers who want digests that match Git's.
    """
    return sorted(entries, key=key_entry)


class Tree(ShaFile):
    """An ordered list of (mode, path, sha) entries."""

    type_name = "tree"
    wrong_type_error = NotTreeError

    def __init__(self, entries: Iterable[TreeEntry] = ()) -> None:
        self._entries: list[TreeEntry] = []
        for entry in entries:
            self.add(*entry)

    def add(self, mode: str, path: str, sha: str) -> None:
        """Append an entry.

        Args:
          mode: File mode, 5 or 6 octal digits (e.g. "100644", "40000")
          path: Entry name
          sha: Hex SHA of the entry's object
        """
        _check_mode(mode.encode("ascii", "replace"), f"for {path!r}")
        if "\0" in path:
            raise ObjectFormatException(f"NUL byte in tree entry path {path!r}")
        check_hexsha(sha, "Invalid object id for tree entry")
        self._entries.append(TreeEntry(mode, path, ObjectID(sha)))

    def entries(self) -> list[TreeEntry]:
        """Return a list of the tree entries, in stored order."""
        return list(self._entries)

    def __iter__(self) -> Iterator[TreeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return any(entry.path == path for entry in self._entries)

    def __getitem__(self, path: str) -> TreeEntry:
        for entry in self._entries:
            if entry.path == path:
                return entry
        raise KeyError(path)

    @override
    def serialize(self) -> bytes:
        return b"".join(serialize_tree(self._entries))

    @override
    def deserialize(self, data: bytes) -> None:
        self._entries = list(parse_tree(data))


OBJECT_CLASSES: tuple[type[ShaFile], ...] = (
    Commit,
    Tree,
    Blob,
)

_TYPE_MAP: dict[str, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}
