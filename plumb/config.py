# config.py -- Reading and writing repository configuration files
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

"""Reading and writing Git-style configuration files.

Only the subset of the format needed for repository metadata is supported:
sections with optional quoted subsections, ``name = value`` settings, ``#``
and ``;`` comments, quoted values with backslash escapes, bare boolean
settings and backslash line continuations. Include directives are not
processed.

Section and variable names compare case-insensitively; subsection names are
case-sensitive.
"""

__all__ = [
    "Config",
    "ConfigDict",
    "ConfigFile",
]

import logging
import os
from collections.abc import Iterator
from typing import IO

from .file import GitFile

logger = logging.getLogger(__name__)

Section = tuple[str, ...]
SectionLike = str | tuple[str, ...]

_TRUE_VALUES = ("true", "yes", "on", "1")
_FALSE_VALUES = ("false", "no", "off", "0", "")

_ESCAPE_TABLE = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "b": "\b",
}
_COMMENT_CHARS = "#;"


def _normalize_section(section: SectionLike) -> Section:
    if isinstance(section, str):
        section = (section,)
    if not section:
        raise ValueError("empty section name")
    return (section[0].lower(), *section[1:])


class Config:
    """A Git configuration."""

    def get(self, section: SectionLike, name: str) -> str:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Section name, or tuple with section name and subsection name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    def get_multivar(self, section: SectionLike, name: str) -> Iterator[str]:
        """Retrieve every value of a multivar setting, in file order."""
        raise NotImplementedError(self.get_multivar)

    def get_boolean(
        self, section: SectionLike, name: str, default: bool | None = None
    ) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Args:
          section: Section name, or tuple with section name and subsection name
          name: Variable name
          default: Default value if setting is not found
        Returns:
          Contents of the setting
        Raises:
          ValueError: if the value is not a recognised boolean
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in _TRUE_VALUES:
            return True
        if value.lower() in _FALSE_VALUES:
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def set(self, section: SectionLike, name: str, value: str | bool | int) -> None:
        """Set a configuration value, replacing any existing values."""
        raise NotImplementedError(self.set)

    def items(self, section: SectionLike) -> Iterator[tuple[str, str]]:
        """Iterate over the (name, value) pairs of a section."""
        raise NotImplementedError(self.items)

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections, as written."""
        raise NotImplementedError(self.sections)

    def has_section(self, name: SectionLike) -> bool:
        """Check if a specified section exists."""
        wanted = _normalize_section(name)
        return any(_normalize_section(s) == wanted for s in self.sections())


class ConfigDict(Config):
    """Git configuration stored in memory."""

    def __init__(self) -> None:
        # normalized section -> section as written
        self._names: dict[Section, Section] = {}
        self._values: dict[Section, list[tuple[str, str]]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigDict) and other._values == self._values

    def _section_values(self, section: SectionLike) -> list[tuple[str, str]]:
        key = _normalize_section(section)
        if key not in self._values:
            self._names[key] = (section,) if isinstance(section, str) else section
            self._values[key] = []
        return self._values[key]

    def get_multivar(self, section: SectionLike, name: str) -> Iterator[str]:
        values = self._values.get(_normalize_section(section), [])
        lowered = name.lower()
        return iter([v for (n, v) in values if n.lower() == lowered])

    def get(self, section: SectionLike, name: str) -> str:
        values = list(self.get_multivar(section, name))
        if not values:
            raise KeyError(name)
        return values[-1]

    def set(self, section: SectionLike, name: str, value: str | bool | int) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        values = self._section_values(section)
        lowered = name.lower()
        values[:] = [(n, v) for (n, v) in values if n.lower() != lowered]
        values.append((name, str(value)))

    def add(self, section: SectionLike, name: str, value: str) -> None:
        """Add a value to a setting, creating a multivar if needed."""
        self._section_values(section).append((name, value))

    def items(self, section: SectionLike) -> Iterator[tuple[str, str]]:
        return iter(list(self._values.get(_normalize_section(section), [])))

    def sections(self) -> Iterator[Section]:
        return iter(list(self._names.values()))


def _parse_value(value: str) -> str:
    ret: list[str] = []
    whitespace: list[str] = []
    in_quotes = False
    i = 0
    value = value.strip()
    while i < len(value):
        c = value[i]
        if c == "\\":
            i += 1
            if i >= len(value):
                raise ValueError("escape at end of value")
            try:
                c = _ESCAPE_TABLE[value[i]]
            except KeyError:
                raise ValueError(f"invalid escape sequence \\{value[i]}") from None
            ret.extend(whitespace)
            whitespace = []
            ret.append(c)
        elif c == '"':
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in " \t" and not in_quotes:
            whitespace.append(c)
        else:
            ret.extend(whitespace)
            whitespace = []
            ret.append(c)
        i += 1
    if in_quotes:
        raise ValueError("missing end quote")
    return "".join(ret)


def _format_value(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace('"', '\\"')
    )
    if value != value.strip() or any(c in value for c in _COMMENT_CHARS):
        return f'"{escaped}"'
    return escaped


def _strip_comments(line: str) -> str:
    in_quotes = False
    for i, c in enumerate(line):
        if c == '"':
            in_quotes = not in_quotes
        elif not in_quotes and c in _COMMENT_CHARS:
            return line[:i]
    return line


def _check_name(name: str, extra: str = "-") -> bool:
    return bool(name) and all(c.isalnum() or c in extra for c in name)


def _parse_section_header(line: str) -> tuple[Section, str]:
    """Parse a ``[section "subsection"]`` header.

    Returns: tuple of (section, rest of the line after the closing bracket)
    """
    in_quotes = False
    for i, c in enumerate(line):
        if c == '"':
            in_quotes = not in_quotes
        elif c == "]" and not in_quotes:
            last = i
            break
    else:
        raise ValueError(f"expected trailing ] in {line!r}")
    parts = line[1:last].split(" ", 1)
    rest = line[last + 1 :]
    if not _check_name(parts[0], "-."):
        raise ValueError(f"invalid section name {parts[0]!r}")
    if len(parts) == 2:
        subsection = parts[1].strip()
        if len(subsection) < 2 or subsection[0] != '"' or subsection[-1] != '"':
            raise ValueError(f"invalid subsection {parts[1]!r}")
        return (parts[0], subsection[1:-1]), rest
    if "." in parts[0]:
        name, subsection = parts[0].split(".", 1)
        return (name, subsection), rest
    return (parts[0],), rest


class ConfigFile(ConfigDict):
    """A Git configuration file, like .git/config."""

    def __init__(self) -> None:
        super().__init__()
        self.path: str | None = None

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: if the file is not a valid configuration file
        """
        ret = cls()
        section: Section | None = None
        pending: tuple[str, str] | None = None
        for lineno, raw_line in enumerate(f.readlines(), 1):
            line = raw_line.decode("utf-8")
            if lineno == 1 and line.startswith("﻿"):
                line = line[1:]
            line = line.rstrip("\r\n")
            if pending is not None:
                name, value = pending
                value += line
            else:
                line = line.lstrip()
                if line.startswith("["):
                    section, line = _parse_section_header(line)
                    ret._section_values(section)
                if not _strip_comments(line).strip():
                    continue
                if section is None:
                    raise ValueError(f"setting {line!r} without section (line {lineno})")
                if "=" in line:
                    name, value = line.split("=", 1)
                else:
                    name, value = line, "true"
                name = name.strip()
                if not _check_name(name):
                    raise ValueError(f"invalid variable name {name!r} (line {lineno})")
            if value.endswith("\\") and not value.endswith("\\\\"):
                pending = (name, value[:-1])
                continue
            pending = None
            assert section is not None
            ret._section_values(section).append((name, _parse_value(value)))
        if pending is not None:
            raise ValueError("unterminated line continuation")
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        abs_path = os.fspath(path)
        logger.debug("Reading configuration from %s", abs_path)
        with GitFile(abs_path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = abs_path
        return ret

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write configuration to a file on disk."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with GitFile(path, "wb") as f:
            self.write_to_file(f)  # type: ignore[arg-type]

    def write_to_file(self, f: IO[bytes]) -> None:
        """Write configuration to a file-like object."""
        for key, values in self._values.items():
            section = self._names[key]
            if len(section) == 1:
                header = f"[{section[0]}]\n"
            else:
                header = f'[{section[0]} "{section[1]}"]\n'
            f.write(header.encode("utf-8"))
            for name, value in values:
                f.write(f"\t{name} = {_format_value(value)}\n".encode())
