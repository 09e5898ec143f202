# hash.py -- Digest computation for stored objects
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

"""Digest algorithm used to name objects.

Objects are addressed by the SHA-1 of their framed representation. The
algorithm is wrapped in a small class so the object store never touches
hashlib directly.
"""

__all__ = [
    "DEFAULT_HASH_ALGORITHM",
    "SHA1",
    "HashAlgorithm",
]

from collections.abc import Callable, Iterable
from hashlib import sha1
from typing import Any


class HashAlgorithm:
    """A hash function together with the sizes of its digests."""

    def __init__(
        self,
        name: str,
        oid_length: int,
        hex_length: int,
        hash_func: Callable[[], Any],
    ) -> None:
        """Initialize a hash algorithm.

        Args:
            name: Name of the algorithm (e.g., "sha1")
            oid_length: Length of the binary object ID in bytes
            hex_length: Length of the hexadecimal object ID in characters
            hash_func: Hash constructor from hashlib
        """
        self.name = name
        self.oid_length = oid_length
        self.hex_length = hex_length
        self.hash_func = hash_func

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"HashAlgorithm({self.name!r})"

    def new_hash(self) -> Any:  # noqa: ANN401
        """Create a new hash object."""
        return self.hash_func()

    def hash_chunks(self, chunks: Iterable[bytes]) -> Any:  # noqa: ANN401
        """Feed a sequence of chunks into a fresh hash object.

        Args:
            chunks: Byte strings to hash, in order

        Returns:
            The updated hash object
        """
        h = self.new_hash()
        for chunk in chunks:
            h.update(chunk)
        return h

    def hash_object(self, data: bytes) -> bytes:
        """Hash data and return the binary digest."""
        return self.hash_chunks([data]).digest()

    def hash_object_hex(self, data: bytes) -> str:
        """Hash data and return the lowercase hexadecimal digest."""
        return self.hash_chunks([data]).hexdigest()


SHA1 = HashAlgorithm("sha1", 20, 40, sha1)

DEFAULT_HASH_ALGORITHM = SHA1
