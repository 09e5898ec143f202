#!/usr/bin/env python3
#
# plumb - Simple git-like object store
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

"""Simple command-line interface to plumb.

The commands mirror the git plumbing commands of the same name. Every
command except init works on the repository found by walking up from the
current directory.
"""

__all__ = [
    "Command",
    "commands",
    "main",
]

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from . import porcelain
from .errors import PlumbError
from .log_utils import default_logging_config
from .objects import OBJECT_CLASSES
from .repo import Repo

logger = logging.getLogger(__name__)

_TYPE_CHOICES = sorted(cls.type_name for cls in OBJECT_CLASSES)


def _discover_repo() -> Repo:
    repo = Repo.discover(".")
    assert repo is not None
    return repo


class Command:
    """A plumb subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty repository."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)
        repo = porcelain.init(parsed_args.path)
        print(f"Initialized empty repository in {repo.controldir()}")


class cmd_cat_file(Command):
    """Provide content of repository objects."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the cat-file command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb cat-file")
        parser.add_argument("type", choices=_TYPE_CHOICES, help="Expected type")
        parser.add_argument("object", help="Object to show")
        parsed_args = parser.parse_args(args)
        with _discover_repo() as repo:
            porcelain.cat_file(
                repo, parsed_args.object, parsed_args.type, sys.stdout.buffer
            )


class cmd_hash_object(Command):
    """Compute object ID and optionally create an object from a file."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the hash-object command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb hash-object")
        parser.add_argument(
            "-t",
            dest="type",
            choices=_TYPE_CHOICES,
            default="blob",
            help="Type of object to create",
        )
        parser.add_argument(
            "-w",
            dest="write",
            action="store_true",
            help="Actually write the object into the object store",
        )
        parser.add_argument("path", help="File to read the object from")
        parsed_args = parser.parse_args(args)
        with open(parsed_args.path, "rb") as f:
            data = f.read()
        if parsed_args.write:
            with _discover_repo() as repo:
                sha = porcelain.hash_object(data, parsed_args.type, repo)
        else:
            sha = porcelain.hash_object(data, parsed_args.type)
        print(sha)


class cmd_ls_tree(Command):
    """List the contents of a tree object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the ls-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb ls-tree")
        parser.add_argument(
            "-r",
            "--recursive",
            action="store_true",
            help="Recursively list tree contents.",
        )
        parser.add_argument(
            "--name-only", action="store_true", help="Only display name."
        )
        parser.add_argument("treeish", help="Tree-ish to list")
        parsed_args = parser.parse_args(args)
        with _discover_repo() as repo:
            porcelain.ls_tree(
                repo,
                parsed_args.treeish,
                outstream=sys.stdout,
                recursive=parsed_args.recursive,
                name_only=parsed_args.name_only,
            )


class cmd_checkout(Command):
    """Checkout a commit or tree inside an empty directory."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the checkout command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb checkout")
        parser.add_argument("commit", help="The commit or tree to checkout")
        parser.add_argument("path", help="The EMPTY directory to checkout on")
        parsed_args = parser.parse_args(args)
        with _discover_repo() as repo:
            porcelain.checkout(repo, parsed_args.commit, parsed_args.path)


class cmd_log(Command):
    """Display history of a given commit as a Graphviz graph."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the log command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb log")
        parser.add_argument("commit", help="Commit to start at")
        parsed_args = parser.parse_args(args)
        with _discover_repo() as repo:
            porcelain.log_graphviz(repo, parsed_args.commit, outstream=sys.stdout)


class cmd_rev_parse(Command):
    """Parse revision names into object ids."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the rev-parse command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="plumb rev-parse")
        parser.add_argument(
            "--type",
            dest="type",
            choices=_TYPE_CHOICES,
            help="Specify the expected type",
        )
        parser.add_argument("name", help="The name to parse")
        parsed_args = parser.parse_args(args)
        with _discover_repo() as repo:
            print(porcelain.rev_parse(repo, parsed_args.name, parsed_args.type))


commands: dict[str, type[Command]] = {
    "cat-file": cmd_cat_file,
    "checkout": cmd_checkout,
    "hash-object": cmd_hash_object,
    "init": cmd_init,
    "log": cmd_log,
    "ls-tree": cmd_ls_tree,
    "rev-parse": cmd_rev_parse,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the plumb CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        parser = argparse.ArgumentParser(
            prog="plumb", description="Simple command-line interface to plumb"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands))}",
        )
        parser.print_help()
        return 1

    default_logging_config()

    cmd = argv[0]
    cmd_args = argv[1:]

    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logger.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(cmd_args)
    except (PlumbError, OSError) as e:
        logger.error("%s: %s", cmd, e)
        return 1


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
