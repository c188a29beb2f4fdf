# coding: utf-8
"""
__init__.py

BioRun - run local and remote bioinformatics analyses.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from ._version import __version__ as version

__all__ = [
    "access",
    "Analysis",
    "AnalysisConfig",
    "AnalysisJob",
    "AnalysisLogger",
    "base",
    "ConfigManager",
    "Exceptions",
    "hmmer",
    "InputNormalizer",
    "ResultStore",
    "run_analysis",
    "soap",
    "Utils",
]
__version__ = version
