#!/usr/bin/env python3
# coding: utf-8
"""
setup.py

Script for package installation with setuptools.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from setuptools import setup

version = {}
with open("src/biorun/_version.py") as version_file:
    exec(version_file.read(), version)

setup(
    name="BioRun",
    version=version["__version__"],
    author="ezlab",
    license="Licensed under the MIT license. See LICENSE.md file.",
    author_email="ez@ezlab.org",
    long_description="Running remote bioinformatics analyses (Soaplab services) "
    "and local HMMER programs from a single client",
    platforms="Unix like",
    python_requires=">=3.8",
    packages=["biorun", "biorun.access", "biorun.run_tools"],
    package_dir={"biorun": "src/biorun"},
    scripts=["bin/biorun"],
    install_requires=["requests", "biopython", "numpy", "pandas"],
    extras_require={"test": ["pytest"]},
)
