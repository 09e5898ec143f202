# walk.py -- Materialising trees and walking commit ancestry
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

"""Operations that follow references between objects.

Both walks keep their own work stack, so deep histories and deeply nested
trees do not run into the interpreter's recursion limit.
"""

__all__ = [
    "checkout_tree",
    "validate_path_element",
    "walk_ancestors",
]

import logging
import os
from collections.abc import Iterator

from .errors import ObjectFormatException, ObjectIOError, UnsupportedEntryError
from .file import ensure_dir_exists
from .object_store import BaseObjectStore
from .objects import Blob, Commit, ObjectID, Tree

logger = logging.getLogger(__name__)


INVALID_DOTNAMES = (".git", ".", "..", "")


def validate_path_element(element: str) -> bool:
    """Check that a tree entry name is safe to use as a single path element."""
    return "/" not in element and element.lower() not in INVALID_DOTNAMES


def checkout_tree(
    store: BaseObjectStore, tree: Tree, path: str | os.PathLike[str]
) -> None:
    """Write the contents of a tree below a directory.

    Subtrees become directories and their entries are written inside them;
    blobs become regular files holding the blob's bytes. Entry modes are not
    applied to the created files.

    Args:
      store: Object store used to resolve tree entries
      tree: Tree to materialise
      path: Destination directory; it must already exist
    Raises:
      ObjectFormatException: if an entry name is empty, ``.``, ``..``,
        ``.git`` or contains a slash
      ObjectIOError: if a file or directory cannot be created
      ObjectMissing: if an entry refers to an object that is not in the store
      UnsupportedEntryError: if an entry refers to something other than a
        blob or a tree, such as a submodule commit
    """
    stack: list[tuple[Tree, str]] = [(tree, os.fspath(path))]
    while stack:
        current, base = stack.pop()
        for entry in current:
            if not validate_path_element(entry.path):
                raise ObjectFormatException(
                    f"Invalid path {entry.path!r} in tree {current.id}"
                )
            dest = os.path.join(base, entry.path)
            obj = store[entry.sha]
            if isinstance(obj, Tree):
                logger.debug("Creating directory %s", dest)
                try:
                    ensure_dir_exists(dest)
                except OSError as exc:
                    raise ObjectIOError(f"Unable to create {dest}: {exc}") from exc
                stack.append((obj, dest))
            elif isinstance(obj, Blob):
                logger.debug("Writing %s (%d bytes)", dest, len(obj.data))
                try:
                    with open(dest, "wb") as f:
                        f.write(obj.data)
                except OSError as exc:
                    raise ObjectIOError(f"Unable to write {dest}: {exc}") from exc
            else:
                raise UnsupportedEntryError(dest, obj.type_name)


def walk_ancestors(
    store: BaseObjectStore, sha: str, seen: set[str] | None = None
) -> Iterator[tuple[ObjectID, ObjectID]]:
    """Walk the parent links of a commit, depth first.

    An edge is produced for every parent of every commit reached, including
    parents that have already been visited; each commit is only read and
    descended into once. Root commits end a branch of the walk.

    Args:
      store: Object store used to resolve commits
      sha: Hex SHA of the commit to start from
      seen: Commits already visited; updated in place
    Returns: iterator over (child, parent) pairs, in walk order
    Raises:
      NotCommitError: if a visited object is not a commit
      ObjectMissing: if a visited commit is not in the store
    """
    if seen is None:
        seen = set()
    if sha in seen:
        return
    seen.add(sha)

    def parents_of(commit_id: str) -> Iterator[ObjectID]:
        logger.debug("Reading commit %s", commit_id)
        return iter(store.get_typed(commit_id, Commit).parents)

    stack: list[tuple[ObjectID, Iterator[ObjectID]]] = [
        (ObjectID(sha), parents_of(sha))
    ]
    while stack:
        child, parents = stack[-1]
        parent = next(parents, None)
        if parent is None:
            stack.pop()
            continue
        yield child, parent
        if parent in seen:
            continue
        seen.add(parent)
        stack.append((parent, parents_of(parent)))
