# coding: utf-8
"""
Utils.py

Small helper functions shared by the analysis client, its jobs and the command line interface.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import re
import time
import pandas as pd

NOT_AVAILABLE = -1


def format_time(value):
    """
    Slightly format a time value coming back from a job.
    :param value: seconds since the Epoch, an elapsed time in seconds, or -1 if not available
    :return: "n/a" for -1, the value unchanged if it is too small to be a date (an elapsed time),
    else a local time string
    """
    if str(value) == str(NOT_AVAILABLE):
        return "n/a"
    if value < 1000000000:
        return value
    return time.ctime(value)


def normalize_names(*selectors):
    """
    Merge result selectors into a mapping of result names to destinations.

    A selector is either a mapping {name: destination} or a string "name" or "name=destination".
    A string starting with "@" or "?" is returned as it is: it selects all results and nullifies
    any other selector.
    :return: None if there are no selectors, the special string, or a dict
    """
    if not selectors:
        return None
    names = {}
    for selector in selectors:
        if isinstance(selector, dict):
            names.update(selector)
        elif isinstance(selector, str):
            name, _, dest = (s.strip() for s in selector.partition("="))
            if name.startswith("@") or name.startswith("?"):
                return name
            names[name] = dest or None
    return names


def safe_name(name):
    """Replace characters that would cause troubles in a filename."""
    return re.sub(r"[:/]", "_", name)


def spec_table(spec):
    """
    Tabulate an input or result specification.
    :param spec: mapping of names to either a type string or a dict of properties
    :return: pandas.DataFrame indexed by name
    """
    rows = {}
    for name, info in spec.items():
        rows[name] = dict(info) if isinstance(info, dict) else {"type": info}
    table = pd.DataFrame.from_dict(rows, orient="index")
    table.index.name = "name"
    return table.sort_index()
