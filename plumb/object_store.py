# object_store.py -- Object store for git objects
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

"""Git object store interfaces and implementation."""

__all__ = [
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
]

import logging
import os
from collections.abc import Iterator
from typing import TypeVar

from .errors import ObjectIOError, ObjectMissing
from .file import FileLocked, GitFile, ensure_dir_exists
from .objects import (
    ObjectID,
    ShaFile,
    _decompress,
    check_hexsha,
    hex_to_filename,
    parse_object_header,
    valid_hexsha,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ShaFile)


class BaseObjectStore:
    """Object store interface."""

    def contains_loose(self, sha: str) -> bool:
        """Check if a particular object is present by SHA1 and is loose."""
        raise NotImplementedError(self.contains_loose)

    def __contains__(self, sha: object) -> bool:
        """Check if a particular object is present by SHA1."""
        return isinstance(sha, str) and valid_hexsha(sha) and self.contains_loose(sha)

    def get_raw(self, name: str) -> tuple[str, bytes]:
        """Obtain the raw text for an object.

        Args:
          name: hex sha for the object.
        Returns: tuple with numeric type and object contents.
        Raises:
          ObjectMissing: if the object is not in the store
        """
        raise NotImplementedError(self.get_raw)

    def __getitem__(self, sha: str) -> ShaFile:
        """Obtain an object by SHA1."""
        type_name, payload = self.get_raw(sha)
        return ShaFile.from_raw_string(type_name, payload)

    def resolve(self, sha: str) -> ShaFile:
        """Read and decode the object named by sha.

        Raises:
          ObjectMissing: if there is no such object
          ObjectIOError: if the object file could not be read
          ObjectFormatException: if the stored bytes are corrupt
          UnknownObjectTypeError: if the object has an unknown type tag
        """
        return self[sha]

    def get_typed(self, sha: str, cls: type[T]) -> T:
        """Resolve an object and check that it is an instance of cls.

        Raises:
          WrongObjectException: the subclass matching cls, when the object
            is of another type
        """
        obj = self[sha]
        if not isinstance(obj, cls):
            raise cls.wrong_type_error(sha)
        return obj

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def add_object(self, obj: ShaFile, write: bool = True) -> ObjectID:
        """Add a single object to this object store.

        Args:
          obj: Object to add
          write: When false, only compute the object's id
        Returns: the object's id
        """
        raise NotImplementedError(self.add_object)

    def find_object(
        self, name: str, type_name: str | None = None, follow: bool = True
    ) -> ObjectID:
        """Map a user-supplied name to an object id.

        Only full object ids are understood; refs, tags and abbreviated ids
        are not resolved, so the name is returned as given once it has been
        checked to be a well-formed id. ``type_name`` and ``follow`` are
        accepted for callers that want to request peeling; they do not
        affect the result.

        Raises:
          ObjectFormatException: if name is not a 40 character hex id
        """
        check_hexsha(name, "Not a valid object name")
        return ObjectID(name)


class DiskObjectStore(BaseObjectStore):
    """Git-style object store that exists on disk."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          loose_compression_level: zlib compression level for loose objects
          fsync_object_files: fsync object files before renaming them into
            place
        """
        self.path = os.fspath(path)
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    def _get_shafile_path(self, sha: str) -> str:
        return hex_to_filename(self.path, sha)

    def contains_loose(self, sha: str) -> bool:
        return os.path.exists(self._get_shafile_path(sha))

    def _read_loose(self, sha: str) -> bytes:
        path = self._get_shafile_path(sha)
        logger.debug("Reading object %s from %s", sha, path)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as exc:
            raise ObjectMissing(sha) from exc
        except OSError as exc:
            raise ObjectIOError(f"Unable to read object {sha}: {exc}") from exc

    def get_raw(self, name: str) -> tuple[str, bytes]:
        return parse_object_header(_decompress(self._read_loose(name)), name)

    def __iter__(self) -> Iterator[ObjectID]:
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = base + rest
                if not valid_hexsha(sha):
                    continue
                yield ObjectID(sha)

    def add_object(self, obj: ShaFile, write: bool = True) -> ObjectID:
        obj_id = obj.id
        if not write:
            return obj_id
        path = self._get_shafile_path(obj_id)
        try:
            ensure_dir_exists(os.path.dirname(path))
        except OSError as exc:
            raise ObjectIOError(f"Unable to write object {obj_id}: {exc}") from exc
        if os.path.exists(path):
            logger.debug("Object %s already present", obj_id)
            return obj_id
        try:
            with GitFile(path, "wb", fsync=self.fsync_object_files) as f:
                f.write(
                    obj.as_legacy_object(compression_level=self.loose_compression_level)
                )
        except FileLocked:
            # Same name means same content; the other writer will finish it.
            logger.debug("Object %s is being written concurrently", obj_id)
            return obj_id
        except OSError as exc:
            raise ObjectIOError(f"Unable to write object {obj_id}: {exc}") from exc
        logger.debug("Wrote %s %s to %s", obj.type_name, obj_id, path)
        return obj_id

    @classmethod
    def init(cls, path: str | os.PathLike[str]) -> "DiskObjectStore":
        """Initialize a new disk object store.

        Args:
          path: Path where the object store should be created
        Returns:
          New DiskObjectStore instance
        """
        try:
            os.mkdir(path)
        except FileExistsError:
            pass
        return cls(path)


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps all objects in memory."""

    def __init__(self) -> None:
        self._data: dict[ObjectID, tuple[str, bytes]] = {}

    def contains_loose(self, sha: str) -> bool:
        return sha in self._data

    def get_raw(self, name: str) -> tuple[str, bytes]:
        try:
            return self._data[ObjectID(name)]
        except KeyError:
            raise ObjectMissing(name) from None

    def __iter__(self) -> Iterator[ObjectID]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def add_object(self, obj: ShaFile, write: bool = True) -> ObjectID:
        obj_id = obj.id
        if write:
            self._data[obj_id] = (obj.type_name, obj.as_raw_string())
        return obj_id
