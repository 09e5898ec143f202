#!/usr/bin/python3
# Setup file for plumb
# Copyright (C) 2026 The plumb contributors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

tests_require = ["pytest"]

setup(
    name="plumb",
    version="0.1.0",
    description="Minimal Git-style content-addressable object store",
    keywords="vcs git objects",
    license="Apache-2.0 OR GPL-2.0-or-later",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
    packages=["plumb"],
    package_data={"": ["py.typed"]},
    python_requires=">=3.10",
    install_requires=["typing_extensions >=4.6.0; python_version < '3.12'"],
    extras_require={"test": tests_require},
    entry_points={"console_scripts": ["plumb=plumb.cli:_main"]},
)
