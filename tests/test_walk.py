# test_walk.py -- Tests for checkout and ancestry walks
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

"""Tests for materialising trees and walking history."""

import os

from plumb.errors import (
    NotCommitError,
    ObjectFormatException,
    ObjectIOError,
    ObjectMissing,
    UnsupportedEntryError,
)
from plumb.object_store import DiskObjectStore, MemoryObjectStore
from plumb.objects import Blob, Tree
from plumb.walk import checkout_tree, validate_path_element, walk_ancestors

from . import TestCase
from .utils import build_commit_graph, make_commit


class CheckoutTreeTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()
        self.dest = self.mkdtemp()

    def test_single_blob(self) -> None:
        blob = Blob(b"file contents\n")
        self.store.add_object(blob)
        tree = Tree()
        tree.add("100644", "a.txt", blob.id)
        checkout_tree(self.store, tree, self.dest)
        self.assertEqual(["a.txt"], os.listdir(self.dest))
        with open(os.path.join(self.dest, "a.txt"), "rb") as f:
            self.assertEqual(b"file contents\n", f.read())

    def test_nested_blob_lands_in_subdirectory(self) -> None:
        inner = Blob(b"inner\n")
        outer = Blob(b"outer\n")
        subtree = Tree()
        subtree.add("100644", "inner.txt", inner.id)
        tree = Tree()
        tree.add("100644", "outer.txt", outer.id)
        tree.add("40000", "sub", subtree.id)
        for obj in (inner, outer, subtree):
            self.store.add_object(obj)

        checkout_tree(self.store, tree, self.dest)

        self.assertEqual(["outer.txt", "sub"], sorted(os.listdir(self.dest)))
        self.assertEqual(["inner.txt"], os.listdir(os.path.join(self.dest, "sub")))
        with open(os.path.join(self.dest, "sub", "inner.txt"), "rb") as f:
            self.assertEqual(b"inner\n", f.read())

    def test_deeply_nested(self) -> None:
        blob = Blob(b"deep")
        self.store.add_object(blob)
        tree = Tree()
        tree.add("100644", "leaf", blob.id)
        for _ in range(50):
            self.store.add_object(tree)
            parent = Tree()
            parent.add("40000", "d", tree.id)
            tree = parent
        checkout_tree(self.store, tree, self.dest)
        path = os.path.join(self.dest, *(["d"] * 50), "leaf")
        with open(path, "rb") as f:
            self.assertEqual(b"deep", f.read())

    def test_empty_tree(self) -> None:
        checkout_tree(self.store, Tree(), self.dest)
        self.assertEqual([], os.listdir(self.dest))

    def test_missing_entry(self) -> None:
        tree = Tree()
        tree.add("100644", "a.txt", "c" * 40)
        self.assertRaises(ObjectMissing, checkout_tree, self.store, tree, self.dest)

    def test_commit_entry_is_unsupported(self) -> None:
        commit = make_commit(Tree().id)
        self.store.add_object(commit)
        tree = Tree()
        tree.add("160000", "submodule", commit.id)
        with self.assertRaises(UnsupportedEntryError) as cm:
            checkout_tree(self.store, tree, self.dest)
        self.assertEqual("commit", cm.exception.type_name)

    def test_disk_store(self) -> None:
        store = DiskObjectStore.init(os.path.join(self.mkdtemp(), "objects"))
        blob = Blob(b"from disk")
        store.add_object(blob)
        tree = Tree()
        tree.add("100644", "f", blob.id)
        checkout_tree(store, tree, self.dest)
        with open(os.path.join(self.dest, "f"), "rb") as f:
            self.assertEqual(b"from disk", f.read())

    def test_parent_directory_entry_rejected(self) -> None:
        dest = os.path.join(self.dest, "dest")
        os.mkdir(dest)
        blob = Blob(b"escaped\n")
        self.store.add_object(blob)
        tree = Tree()
        tree.add("100644", "../escaped.txt", blob.id)
        self.assertRaises(ObjectFormatException, checkout_tree, self.store, tree, dest)
        self.assertFalse(os.path.exists(os.path.join(self.dest, "escaped.txt")))
        self.assertEqual([], os.listdir(dest))

    def test_invalid_entry_names_rejected(self) -> None:
        blob = Blob(b"x")
        self.store.add_object(blob)
        for name in ("..", ".", ".git", ".GIT", "a/b", "/etc/passwd"):
            tree = Tree()
            tree.add("100644", name, blob.id)
            self.assertRaises(
                ObjectFormatException, checkout_tree, self.store, tree, self.dest
            )
        self.assertEqual([], os.listdir(self.dest))

    def test_invalid_name_in_subtree_rejected(self) -> None:
        blob = Blob(b"x")
        subtree = Tree()
        subtree.add("100644", "..", blob.id)
        tree = Tree()
        tree.add("40000", "sub", subtree.id)
        for obj in (blob, subtree):
            self.store.add_object(obj)
        self.assertRaises(
            ObjectFormatException, checkout_tree, self.store, tree, self.dest
        )

    def test_validate_path_element(self) -> None:
        self.assertTrue(validate_path_element("a.txt"))
        self.assertTrue(validate_path_element(".gitignore"))
        self.assertTrue(validate_path_element("..."))
        for name in ("", ".", "..", ".git", ".Git", "a/b"):
            self.assertFalse(validate_path_element(name), name)

    def test_file_in_place_of_directory(self) -> None:
        with open(os.path.join(self.dest, "sub"), "wb") as f:
            f.write(b"in the way")
        blob = Blob(b"inner\n")
        subtree = Tree()
        subtree.add("100644", "inner.txt", blob.id)
        tree = Tree()
        tree.add("40000", "sub", subtree.id)
        for obj in (blob, subtree):
            self.store.add_object(obj)
        with self.assertRaises(ObjectIOError) as cm:
            checkout_tree(self.store, tree, self.dest)
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_directory_in_place_of_file(self) -> None:
        os.mkdir(os.path.join(self.dest, "a.txt"))
        blob = Blob(b"contents")
        self.store.add_object(blob)
        tree = Tree()
        tree.add("100644", "a.txt", blob.id)
        self.assertRaises(ObjectIOError, checkout_tree, self.store, tree, self.dest)


class WalkAncestorsTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()

    def test_root_commit(self) -> None:
        (c1,) = build_commit_graph(self.store, [[1]])
        self.assertEqual([], list(walk_ancestors(self.store, c1)))

    def test_linear(self) -> None:
        c1, c2, c3 = build_commit_graph(self.store, [[1], [2, 1], [3, 2]])
        self.assertEqual(
            [(c3, c2), (c2, c1)], list(walk_ancestors(self.store, c3))
        )

    def test_merge_is_depth_first(self) -> None:
        c1, c2, c3, c4 = build_commit_graph(
            self.store, [[1], [2, 1], [3, 1], [4, 2, 3]]
        )
        self.assertEqual(
            [(c4, c2), (c2, c1), (c4, c3), (c3, c1)],
            list(walk_ancestors(self.store, c4)),
        )

    def test_seen_is_updated(self) -> None:
        c1, c2 = build_commit_graph(self.store, [[1], [2, 1]])
        seen: set[str] = set()
        list(walk_ancestors(self.store, c2, seen))
        self.assertEqual({c1, c2}, seen)
        self.assertEqual([], list(walk_ancestors(self.store, c2, seen)))

    def test_long_history(self) -> None:
        spec = [[1]] + [[i, i - 1] for i in range(2, 2001)]
        ids = build_commit_graph(self.store, spec)
        edges = list(walk_ancestors(self.store, ids[-1]))
        self.assertEqual(1999, len(edges))
        self.assertEqual((ids[1], ids[0]), edges[-1])

    def test_not_a_commit(self) -> None:
        tree = Tree()
        self.store.add_object(tree)
        self.assertRaises(NotCommitError, list, walk_ancestors(self.store, tree.id))

    def test_missing_parent(self) -> None:
        commit = make_commit(Tree().id, ["d" * 40])
        self.store.add_object(commit)
        walker = walk_ancestors(self.store, commit.id)
        self.assertEqual((commit.id, "d" * 40), next(walker))
        self.assertRaises(ObjectMissing, next, walker)
