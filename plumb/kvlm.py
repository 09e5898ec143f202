# kvlm.py -- Key-value list with message payloads
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

"""Parsing and formatting of key-value list with message (KVLM) payloads.

Commit payloads are a run of ``key SP value LF`` header lines, a blank line,
and a free-form message::

    tree 29ff16c9c14e2652b22f8b78bb08a5a07930c147
    parent 206941306e8a8af65b66eaaaea388a7ae24d49a0
    author Thibault Polge <thibault@thb.lt> 1527025023 +0200

    Create first draft

A value spanning several lines has every continuation line prefixed with a
single space. Keys may repeat; the values of a repeated key keep the order in
which they appear. The message is stored under the empty-string key.
"""

__all__ = [
    "MESSAGE_KEY",
    "parse_kvlm",
    "serialize_kvlm",
]

from collections.abc import Mapping, Sequence

from .errors import ObjectFormatException

MESSAGE_KEY = ""


def _decode(value: bytes, what: str) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ObjectFormatException(f"invalid UTF-8 in {what}: {exc}") from exc


def parse_kvlm(raw: bytes) -> dict[str, list[str]]:
    """Parse a KVLM payload.

    Args:
      raw: Payload bytes
    Returns: dict mapping header names to lists of values, in the order the
      headers first appear. The message is a one-element list under
      MESSAGE_KEY.
    Raises:
      ObjectFormatException: if the payload is not valid UTF-8, a header line
        has no value separator, or a header value is not terminated
    """
    kvlm: dict[str, list[str]] = {}
    start = 0
    while True:
        if start >= len(raw):
            # Headers ran up to the end of the payload; nothing follows them.
            kvlm[MESSAGE_KEY] = [""]
            return kvlm

        spc = raw.find(b" ", start)
        nl = raw.find(b"\n", start)

        if nl == start:
            kvlm[MESSAGE_KEY] = [_decode(raw[start + 1 :], "message")]
            return kvlm
        if spc < 0 or 0 <= nl < spc:
            raise ObjectFormatException(
                f"header line without a value at offset {start}"
            )
        if spc == start:
            raise ObjectFormatException(f"header line without a key at offset {start}")

        key = _decode(raw[start:spc], "header name")

        # A newline followed by a space continues the value.
        end = nl
        while end >= 0 and raw[end + 1 : end + 2] == b" ":
            end = raw.find(b"\n", end + 1)
        if end < 0:
            raise ObjectFormatException(f"unterminated value for header {key!r}")

        value = _decode(raw[spc + 1 : end].replace(b"\n ", b"\n"), f"header {key!r}")
        kvlm.setdefault(key, []).append(value)
        start = end + 1


def serialize_kvlm(kvlm: Mapping[str, Sequence[str]]) -> bytes:
    """Format a KVLM mapping as payload bytes.

    Headers are written in the mapping's key order, one line per value, with
    embedded newlines re-indented as continuation lines. The message follows
    a blank line, unmodified.

    Args:
      kvlm: Mapping as returned by parse_kvlm
    Returns: Payload bytes
    Raises:
      ValueError: if a header name is unusable or the message entry is not a
        single value
    """
    chunks: list[bytes] = []
    for key, values in kvlm.items():
        if key == MESSAGE_KEY:
            continue
        if " " in key or "\n" in key:
            raise ValueError(f"invalid header name {key!r}")
        encoded_key = key.encode("utf-8")
        for value in values:
            chunks.append(
                encoded_key
                + b" "
                + value.encode("utf-8").replace(b"\n", b"\n ")
                + b"\n"
            )
    message = kvlm.get(MESSAGE_KEY)
    if message is None or len(message) != 1:
        raise ValueError("a KVLM mapping needs exactly one message value")
    chunks.append(b"\n")
    chunks.append(message[0].encode("utf-8"))
    return b"".join(chunks)
