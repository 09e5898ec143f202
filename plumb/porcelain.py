# porcelain.py -- Porcelain-like layer on top of plumb
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

"""Simple wrapper that provides porcelain-like functions on top of plumb.

Currently implemented:
 * cat-file
 * checkout
 * hash-object
 * init
 * log (as a Graphviz graph)
 * ls-tree
 * rev-parse

These functions are meant to behave similarly to the git subcommands.
Differences in behaviour are considered bugs.

Functions should generally accept both unicode strings and bytestrings
where that makes sense, and take either a path or a Repo object as the
repository argument.
"""

__all__ = [
    "cat_file",
    "checkout",
    "hash_object",
    "init",
    "log_graphviz",
    "ls_tree",
    "open_repo_closing",
    "rev_parse",
]

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import BinaryIO, TextIO, TypeVar

from .errors import DestinationNotEmpty
from .objects import (
    Commit,
    ObjectID,
    ShaFile,
    Tree,
    TreeEntry,
    object_class,
    object_type_for_mode,
)
from .repo import Repo
from .walk import checkout_tree, walk_ancestors

logger = logging.getLogger(__name__)

T = TypeVar("T")

RepoPath = str | os.PathLike[str] | Repo


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath) -> AbstractContextManager[Repo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def _resolve(repo: Repo, name: str, type_name: str | None = None) -> ShaFile:
    sha = repo.object_store.find_object(name, type_name)
    if type_name is None:
        return repo.object_store[sha]
    return repo.object_store.get_typed(sha, object_class(type_name))


def init(path: str | os.PathLike[str] = ".") -> Repo:
    """Create a new git repository.

    Args:
      path: Path to repository; must not exist or be an empty directory.
    Returns: A Repo instance
    """
    return Repo.init(path, mkdir=True)


def rev_parse(repo: RepoPath, name: str, type_name: str | None = None) -> ObjectID:
    """Resolve a name to an object id.

    Args:
      repo: Path to the repository, or a Repo
      name: Object name
      type_name: Expected object type, if any
    Returns: the object id
    """
    with open_repo_closing(repo) as r:
        return r.object_store.find_object(name, type_name)


def cat_file(
    repo: RepoPath,
    name: str,
    type_name: str | None = None,
    outstream: BinaryIO | None = None,
) -> None:
    """Write the payload of an object.

    Args:
      repo: Path to the repository, or a Repo
      name: Object name
      type_name: Expected object type; a different type raises the matching
        WrongObjectException subclass
      outstream: Stream to write to (defaults to stdout)
    """
    if outstream is None:
        outstream = sys.stdout.buffer
    with open_repo_closing(repo) as r:
        obj = _resolve(r, name, type_name)
        outstream.write(obj.as_raw_string())


def hash_object(
    data: bytes, type_name: str = "blob", repo: RepoPath | None = None
) -> ObjectID:
    """Compute the id of an object, optionally storing it.

    Args:
      data: Payload of the object
      type_name: Type of the object (blob, commit or tree)
      repo: Repository to write the object to; when None, the object is
        only hashed
    Returns: the object id
    Raises:
      UnknownObjectTypeError: if type_name is not a known type
      ObjectFormatException: if data is not a valid payload for the type
    """
    obj = ShaFile.from_raw_string(type_name, data)
    if repo is None:
        return obj.id
    with open_repo_closing(repo) as r:
        return r.object_store.add_object(obj)


def ls_tree(
    repo: RepoPath,
    treeish: str,
    outstream: TextIO = sys.stdout,
    recursive: bool = False,
    name_only: bool = False,
) -> None:
    """List contents of a tree.

    Args:
      repo: Path to the repository
      treeish: Tree id to list, or a commit id whose tree to list
      outstream: Output stream (defaults to stdout)
      recursive: Whether to recursively list files
      name_only: Only print item name
    """
    with open_repo_closing(repo) as r:
        store = r.object_store
        obj = _resolve(r, treeish)
        if isinstance(obj, Commit):
            obj = store.get_typed(obj.tree, Tree)
        elif not isinstance(obj, Tree):
            raise Tree.wrong_type_error(obj.id)

        stack: list[tuple[str, Iterator[TreeEntry]]] = [("", iter(obj))]
        while stack:
            base, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue
            mode, path, sha = entry
            if base:
                path = f"{base}/{path}"
            type_name = object_type_for_mode(mode)
            if recursive and type_name == "tree":
                stack.append((path, iter(store.get_typed(sha, Tree))))
                continue
            if name_only:
                outstream.write(path + "\n")
            else:
                outstream.write(f"{mode.zfill(6)} {type_name} {sha}\t{path}\n")


def checkout(repo: RepoPath, name: str, path: str | os.PathLike[str]) -> None:
    """Materialise a commit's tree, or a tree, into a directory.

    Args:
      repo: Path to the repository, or a Repo
      name: Commit or tree id
      path: Destination directory; created if absent
    Raises:
      NotADirectoryError: if path exists and is not a directory
      DestinationNotEmpty: if path is a directory with contents
      NotTreeError: if name is neither a commit nor a tree
    """
    path = os.path.abspath(path)
    with open_repo_closing(repo) as r:
        obj = _resolve(r, name)
        if isinstance(obj, Commit):
            obj = r.object_store.get_typed(obj.tree, Tree)
        elif not isinstance(obj, Tree):
            raise Tree.wrong_type_error(obj.id)

        if os.path.exists(path):
            if not os.path.isdir(path):
                raise NotADirectoryError(f"Not a directory {path}")
            if os.listdir(path):
                raise DestinationNotEmpty(path)
        else:
            os.makedirs(path)

        logger.debug("Checking out tree %s into %s", obj.id, path)
        checkout_tree(r.object_store, obj, path)


def log_graphviz(repo: RepoPath, name: str, outstream: TextIO = sys.stdout) -> None:
    """Write the ancestry of a commit as a Graphviz digraph.

    Every commit becomes a node named ``c_<sha>``; every parent link an
    edge from child to parent.

    Args:
      repo: Path to the repository, or a Repo
      name: Commit to start from
      outstream: Stream to write to (defaults to stdout)
    """
    with open_repo_closing(repo) as r:
        sha = r.object_store.find_object(name, "commit")
        outstream.write("digraph log{\n")
        for child, parent in walk_ancestors(r.object_store, sha):
            outstream.write(f"  c_{child} -> c_{parent};\n")
        outstream.write("}\n")
