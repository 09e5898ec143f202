# errors.py -- errors for plumb
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

"""plumb-related exception classes."""

__all__ = [
    "DestinationNotEmpty",
    "FileFormatException",
    "MalformedObjectError",
    "MissingHeaderError",
    "NotBlobError",
    "NotCommitError",
    "NotGitRepository",
    "NotTreeError",
    "ObjectFormatException",
    "ObjectIOError",
    "ObjectMissing",
    "PlumbError",
    "UnknownObjectTypeError",
    "UnsupportedEntryError",
    "UnsupportedVersion",
    "WrongObjectException",
]


class PlumbError(Exception):
    """Base class for all errors raised by plumb."""


class FileFormatException(PlumbError):
    """Base class for exceptions relating to reading git file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class MalformedObjectError(ObjectFormatException):
    """The framing of a stored object is inconsistent with its payload."""

    def __init__(self, sha: str | None, reason: str) -> None:
        """Initialize a MalformedObjectError.

        Args:
            sha: Hex SHA of the offending object, if known.
            reason: Short description of what is wrong, e.g. "bad length".
        """
        self.sha = sha
        self.reason = reason
        if sha is None:
            super().__init__(f"Malformed object: {reason}")
        else:
            super().__init__(f"Malformed object {sha}: {reason}")


class UnknownObjectTypeError(PlumbError):
    """An object carries a type tag that is not blob, commit or tree."""

    def __init__(self, type_name: str | bytes) -> None:
        """Initialize an UnknownObjectTypeError.

        Args:
            type_name: The unrecognised type tag.
        """
        if isinstance(type_name, bytes):
            type_name = type_name.decode("ascii", "backslashreplace")
        self.type_name = type_name
        super().__init__(f"Unknown object type {type_name!r}")


class ObjectIOError(PlumbError):
    """Reading or writing an object file failed."""


class ObjectMissing(ObjectIOError):
    """Indicates that a requested object is missing."""

    def __init__(self, sha: str) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: The SHA of the missing object.
        """
        self.sha = sha
        super().__init__(f"{sha} is not in the object store")


class WrongObjectException(PlumbError):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: str) -> None:
        """Initialize a WrongObjectException.

        Args:
            sha: The SHA of the object that was not of the expected type.
        """
        self.sha = sha
        super().__init__(f"{sha} is not a {self.type_name}")


class NotCommitError(WrongObjectException):
    """Indicates that the sha requested does not point to a commit."""

    type_name = "commit"


class NotTreeError(WrongObjectException):
    """Indicates that the sha requested does not point to a tree."""

    type_name = "tree"


class NotBlobError(WrongObjectException):
    """Indicates that the sha requested does not point to a blob."""

    type_name = "blob"


class MissingHeaderError(PlumbError):
    """A commit lacks a header that the caller requires."""

    def __init__(self, key: str) -> None:
        """Initialize a MissingHeaderError.

        Args:
            key: Name of the missing header.
        """
        self.key = key
        super().__init__(f"Commit has no {key!r} header")


class UnsupportedEntryError(PlumbError):
    """A tree entry points at something that cannot be checked out."""

    def __init__(self, path: str, type_name: str) -> None:
        """Initialize an UnsupportedEntryError.

        Args:
            path: Path of the tree entry.
            type_name: Type of the object the entry resolved to.
        """
        self.path = path
        self.type_name = type_name
        super().__init__(f"Unsupported {type_name} entry at {path!r}")


class NotGitRepository(PlumbError):
    """Indicates that no Git repository was found."""


class UnsupportedVersion(PlumbError):
    """Unsupported repository format version."""

    def __init__(self, version: object) -> None:
        """Initialize UnsupportedVersion exception.

        Args:
            version: The unsupported repository format version.
        """
        self.version = version
        super().__init__(f"Unsupported repositoryformatversion {version!r}")


class DestinationNotEmpty(PlumbError):
    """A checkout target directory already has contents."""

    def __init__(self, path: str) -> None:
        """Initialize DestinationNotEmpty.

        Args:
            path: The offending directory.
        """
        self.path = path
        super().__init__(f"{path} is not empty")
