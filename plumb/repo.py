# repo.py -- For dealing with git repositories.
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

"""Repository access.

A repository is a working directory with a ``.git`` control directory
inside it. Only the parts needed to reach the object store are modelled:
the control directory layout, the configuration file and its format
version gate.
"""

__all__ = [
    "BASE_DIRECTORIES",
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "OBJECTDIR",
    "Repo",
]

import logging
import os
from types import TracebackType

from .config import ConfigFile
from .errors import FileFormatException, NotGitRepository, UnsupportedVersion
from .file import GitFile
from .object_store import DiskObjectStore

logger = logging.getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_TAGS = "tags"
REFSDIR_HEADS = "heads"

BASE_DIRECTORIES = [
    ["branches"],
    [REFSDIR],
    [REFSDIR, REFSDIR_TAGS],
    [REFSDIR, REFSDIR_HEADS],
]

DEFAULT_BRANCH = "master"

DEFAULT_DESCRIPTION = (
    b"Unnamed repository: edit this file 'description' to name the repository.\n"
)

SUPPORTED_FORMAT_VERSIONS = ("0",)


class Repo:
    """A git repository backed by local disk.

    To open an existing repository, call the constructor with
    the path of the working directory. To create a new repository,
    use the Repo.init class method.

    Attributes:
      path: Path to the working copy
      object_store: DiskObjectStore for the repository's objects
    """

    path: str
    object_store: DiskObjectStore

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the repository's working directory
        Raises:
          NotGitRepository: if there is no control directory or no
            configuration file
          FileFormatException: if the configuration file cannot be parsed
          UnsupportedVersion: if the repository format version is not 0
        """
        root = os.fspath(root)
        self.path = root
        self._controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(self._controldir):
            raise NotGitRepository(f"No git repository was found at {root}")

        try:
            self._config = ConfigFile.from_path(self.controldir_path("config"))
        except FileNotFoundError as exc:
            raise NotGitRepository("Configuration file missing") from exc
        except ValueError as exc:
            raise FileFormatException(f"Invalid configuration file: {exc}") from exc

        try:
            version = self._config.get("core", "repositoryformatversion")
        except KeyError:
            version = None
        if version not in SUPPORTED_FORMAT_VERSIONS:
            raise UnsupportedVersion(version)

        self.object_store = DiskObjectStore(self.controldir_path(OBJECTDIR))
        logger.debug("Opened repository at %s", root)

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def controldir_path(self, *parts: str) -> str:
        """Return a path below the control directory."""
        return os.path.join(self._controldir, *parts)

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.git/config`` file.
        """
        return self._config

    def get_description(self) -> bytes | None:
        """Retrieve the description of this repository.

        Returns: Description as bytes or None.
        """
        path = self.controldir_path("description")
        try:
            with GitFile(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    @classmethod
    def discover(
        cls, start: str | os.PathLike[str] = ".", required: bool = True
    ) -> "Repo | None":
        """Iterate parent directories to discover a repository.

        Return a Repo object for the first parent directory that holds a
        control directory.

        Args:
          start: The directory to start discovery from (defaults to '.')
          required: Raise rather than return None when no repository is found
        Raises:
          NotGitRepository: if no repository is found and required is true
        """
        path = os.path.realpath(start)
        while True:
            if os.path.isdir(os.path.join(path, CONTROLDIR)):
                return cls(path)
            new_path, _tail = os.path.split(path)
            if new_path == path:  # Root reached
                break
            path = new_path
        if required:
            raise NotGitRepository(
                f"No git repository was found at {os.fspath(start)}"
            )
        return None

    @classmethod
    def init(cls, path: str | os.PathLike[str], mkdir: bool = True) -> "Repo":
        """Create a new repository.

        Args:
          path: Path in which to create the repository; it must not exist or
            be an empty directory
          mkdir: Whether to create the directory if it does not exist
        Returns: `Repo` instance
        Raises:
          NotADirectoryError: if path exists and is not a directory
          FileExistsError: if path is a directory that is not empty
        """
        path = os.fspath(path)
        if os.path.exists(path):
            if not os.path.isdir(path):
                raise NotADirectoryError(f"{path} is not a directory")
            if os.listdir(path):
                raise FileExistsError(f"{path} is not empty")
        elif mkdir:
            os.makedirs(path)
        else:
            raise FileNotFoundError(path)

        controldir = os.path.join(path, CONTROLDIR)
        os.mkdir(controldir)
        for d in BASE_DIRECTORIES:
            os.mkdir(os.path.join(controldir, *d))
        DiskObjectStore.init(os.path.join(controldir, OBJECTDIR))

        with GitFile(os.path.join(controldir, "description"), "wb") as f:
            f.write(DEFAULT_DESCRIPTION)
        with GitFile(os.path.join(controldir, "HEAD"), "wb") as f:
            f.write(f"ref: {REFSDIR}/{REFSDIR_HEADS}/{DEFAULT_BRANCH}\n".encode())

        cf = ConfigFile()
        cf.set("core", "repositoryformatversion", "0")
        cf.set("core", "filemode", False)
        cf.set("core", "bare", False)
        cf.write_to_path(os.path.join(controldir, "config"))

        logger.debug("Initialized empty repository in %s", controldir)
        return cls(path)

    def close(self) -> None:
        """Close any files opened by this repository."""

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
