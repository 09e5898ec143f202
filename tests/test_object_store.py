# test_object_store.py -- tests for object_store.py
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

"""Tests for the object store interface."""

import os
import stat
import zlib

from plumb.errors import (
    MalformedObjectError,
    NotBlobError,
    NotTreeError,
    ObjectFormatException,
    ObjectIOError,
    ObjectMissing,
    UnknownObjectTypeError,
)
from plumb.object_store import DiskObjectStore, MemoryObjectStore
from plumb.objects import Blob, Commit, Tree

from . import TestCase, skipIf
from .utils import make_commit

testobject = Blob(b"yummy data")
missing_sha = "b" * 40


class ObjectStoreTests:
    """Tests shared by every object store implementation."""

    store: DiskObjectStore | MemoryObjectStore

    def test_add_object(self) -> None:
        sha = self.store.add_object(testobject)
        self.assertEqual(testobject.id, sha)
        self.assertIn(sha, self.store)
        self.assertEqual(testobject, self.store[sha])

    def test_add_object_without_write(self) -> None:
        sha = self.store.add_object(testobject, write=False)
        self.assertEqual(testobject.id, sha)
        self.assertNotIn(sha, self.store)

    def test_add_object_twice(self) -> None:
        self.assertEqual(
            self.store.add_object(testobject), self.store.add_object(testobject)
        )
        self.assertEqual([testobject.id], list(self.store))

    def test_get_raw(self) -> None:
        self.store.add_object(testobject)
        self.assertEqual(("blob", b"yummy data"), self.store.get_raw(testobject.id))

    def test_resolve_kinds(self) -> None:
        tree = Tree()
        tree.add("100644", "data", testobject.id)
        commit = make_commit(tree.id)
        for obj in (testobject, tree, commit):
            self.store.add_object(obj)
        self.assertIsInstance(self.store.resolve(testobject.id), Blob)
        self.assertIsInstance(self.store.resolve(tree.id), Tree)
        resolved = self.store.resolve(commit.id)
        self.assertIsInstance(resolved, Commit)
        self.assertEqual(tree.id, resolved.tree)

    def test_get_typed(self) -> None:
        self.store.add_object(testobject)
        self.assertEqual(
            b"yummy data", self.store.get_typed(testobject.id, Blob).data
        )
        self.assertRaises(NotTreeError, self.store.get_typed, testobject.id, Tree)

    def test_get_typed_wrong_kind(self) -> None:
        tree = Tree()
        self.store.add_object(tree)
        self.assertRaises(NotBlobError, self.store.get_typed, tree.id, Blob)

    def test_missing(self) -> None:
        self.assertNotIn(missing_sha, self.store)
        self.assertRaises(ObjectMissing, self.store.__getitem__, missing_sha)

    def test_contains_invalid_name(self) -> None:
        self.assertNotIn("not-a-sha", self.store)
        self.assertNotIn(None, self.store)

    def test_find_object(self) -> None:
        self.assertEqual(missing_sha, self.store.find_object(missing_sha))
        self.assertEqual(
            missing_sha, self.store.find_object(missing_sha, "commit", follow=False)
        )

    def test_find_object_invalid(self) -> None:
        self.assertRaises(ObjectFormatException, self.store.find_object, "HEAD")


class MemoryObjectStoreTests(ObjectStoreTests, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()


class DiskObjectStoreTests(ObjectStoreTests, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store_dir = os.path.join(self.mkdtemp(), "objects")
        self.store = DiskObjectStore.init(self.store_dir)

    def _write_raw(self, sha: str, data: bytes) -> None:
        path = os.path.join(self.store_dir, sha[:2], sha[2:])
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def test_init_creates_directory(self) -> None:
        self.assertTrue(os.path.isdir(self.store_dir))

    def test_loose_object_layout(self) -> None:
        sha = self.store.add_object(testobject)
        path = os.path.join(self.store_dir, sha[:2], sha[2:])
        self.assertTrue(os.path.isfile(path))
        with open(path, "rb") as f:
            self.assertEqual(b"blob 10\x00yummy data", zlib.decompress(f.read()))
        self.assertFalse(os.path.exists(path + ".lock"))

    def test_add_object_without_write_leaves_disk_alone(self) -> None:
        self.store.add_object(testobject, write=False)
        self.assertEqual([], os.listdir(self.store_dir))

    def test_existing_object_not_rewritten(self) -> None:
        sha = self.store.add_object(testobject)
        path = os.path.join(self.store_dir, sha[:2], sha[2:])
        before = os.stat(path).st_mtime_ns
        os.utime(path, ns=(before - 10**9, before - 10**9))
        self.store.add_object(testobject)
        self.assertEqual(before - 10**9, os.stat(path).st_mtime_ns)

    def test_concurrent_writer(self) -> None:
        sha = testobject.id
        path = os.path.join(self.store_dir, sha[:2], sha[2:])
        os.makedirs(os.path.dirname(path))
        with open(path + ".lock", "wb"):
            pass
        with self.assertLogs("plumb.object_store", level="DEBUG"):
            self.assertEqual(sha, self.store.add_object(testobject))

    def test_add_object_creates_missing_store_directory(self) -> None:
        store_dir = os.path.join(self.mkdtemp(), "nested", "objects")
        store = DiskObjectStore(store_dir)
        sha = store.add_object(testobject)
        self.assertTrue(os.path.isfile(os.path.join(store_dir, sha[:2], sha[2:])))
        self.assertEqual(testobject, store[sha])

    def test_add_object_unwritable_location(self) -> None:
        blocker = os.path.join(self.mkdtemp(), "blocker")
        with open(blocker, "wb") as f:
            f.write(b"not a directory")
        store = DiskObjectStore(os.path.join(blocker, "objects"))
        with self.assertRaises(ObjectIOError) as cm:
            store.add_object(testobject)
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_bad_length(self) -> None:
        self._write_raw(missing_sha, zlib.compress(b"blob 100\x00short"))
        with self.assertRaises(MalformedObjectError) as cm:
            self.store[missing_sha]
        self.assertEqual(
            f"Malformed object {missing_sha}: bad length", str(cm.exception)
        )

    def test_corrupt_object(self) -> None:
        self._write_raw(missing_sha, b"garbage")
        self.assertRaises(ObjectFormatException, self.store.__getitem__, missing_sha)

    def test_unknown_type(self) -> None:
        self._write_raw(missing_sha, zlib.compress(b"tag 3\x00abc"))
        self.assertRaises(UnknownObjectTypeError, self.store.resolve, missing_sha)

    @skipIf(os.name != "posix" or os.getuid() == 0, "requires POSIX permissions")
    def test_unreadable_object(self) -> None:
        sha = self.store.add_object(testobject)
        path = os.path.join(self.store_dir, sha[:2], sha[2:])
        os.chmod(path, 0)
        self.addCleanup(os.chmod, path, stat.S_IRUSR | stat.S_IWUSR)
        with self.assertRaises(ObjectIOError) as cm:
            self.store[sha]
        self.assertNotIsInstance(cm.exception, ObjectMissing)
        self.assertIsInstance(cm.exception.__cause__, PermissionError)

    def test_iter_ignores_junk(self) -> None:
        sha = self.store.add_object(testobject)
        os.mkdir(os.path.join(self.store_dir, "info"))
        self._write_raw("ab" + "z" * 38, b"")
        self.assertEqual([sha], list(self.store))

    def test_reopen(self) -> None:
        sha = self.store.add_object(testobject)
        self.assertEqual(testobject, DiskObjectStore(self.store_dir)[sha])
