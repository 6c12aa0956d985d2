#!/usr/bin/python3
# Setup file for gitpipe
# Copyright (C) 2025 The gitpipe developers
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    name="gitpipe",
    version="0.1.0",
    description="Git blobs, trees and commits through the git executable",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["gitpipe"],
    package_data={"": ["py.typed"]},
    install_requires=['typing_extensions >=4.0; python_version < "3.12"'],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
