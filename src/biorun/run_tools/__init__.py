# coding: utf-8
"""
__init__.py

Runners of the bioinformatics programs installed locally.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""
