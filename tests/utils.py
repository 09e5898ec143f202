# utils.py -- Test utilities for plumb.
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

"""Utility functions common to plumb tests."""

from collections.abc import Sequence

from plumb.object_store import BaseObjectStore
from plumb.objects import Blob, Commit, ObjectID, Tree

AUTHOR = "A U Thor <author@example.com> 1174773719 +0000"


def make_commit(
    tree: str, parents: Sequence[str] = (), message: str = "msg\n"
) -> Commit:
    """Build a commit with fixed author and committer lines."""
    c = Commit()
    c.add_header("tree", tree)
    for parent in parents:
        c.add_header("parent", parent)
    c.add_header("author", AUTHOR)
    c.add_header("committer", AUTHOR)
    c.message = message
    return c


def build_commit_graph(
    store: BaseObjectStore, commit_spec: Sequence[Sequence[int]]
) -> list[ObjectID]:
    """Build a commit graph from a list of commit numbers and their parents.

    Each entry is ``[n, p1, p2, ...]``: commit number n with the numbered
    parents, which must appear earlier in the list. Every commit points at
    a tree holding one distinct blob, so all commit ids differ.

    Returns: commit ids, in the order given
    """
    nums: dict[int, ObjectID] = {}
    ids = []
    for spec in commit_spec:
        num, parent_nums = spec[0], spec[1:]
        blob = Blob(f"content {num}\n".encode())
        store.add_object(blob)
        tree = Tree()
        tree.add("100644", "file", blob.id)
        store.add_object(tree)
        commit = make_commit(
            tree.id, [nums[p] for p in parent_nums], f"Commit {num}\n"
        )
        nums[num] = store.add_object(commit)
        ids.append(nums[num])
    return ids
