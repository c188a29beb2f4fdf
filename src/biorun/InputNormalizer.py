# coding: utf-8
"""
InputNormalizer.py

Turn the various shapes of input data accepted by an analysis into a single mapping of input names to values.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import os
from biorun.AnalysisLogger import AnalysisLogger
from biorun.Exceptions import InputError

logger = AnalysisLogger.get_logger(__name__)


def prepare_inputs(*descriptors):
    """
    Merge input descriptors into one dict. Later descriptors override earlier ones.

    Accepted descriptors:
        a list or tuple of "name=value" strings; a bare "name" means a boolean option set to 1,
            a bare "@path/to/file.ext" is the contents of the file under the input name "file"
        a dict of name: value
        a single string, the name of a boolean option
        None, which is ignored
    Values starting with "@" are replaced by the contents of the named file, values starting with "\\@" stand
    for a literal "@".
    :return: dict of input names to str or bytes values
    :raises InputError: if a referenced file cannot be read
    """
    inputs = {}
    for descriptor in descriptors:
        if descriptor is None:
            continue
        if isinstance(descriptor, (list, tuple)):
            for elem in descriptor:
                if not isinstance(elem, str):
                    continue
                name, sep, value = elem.partition("=")
                name = name.strip()
                if not name or name == "@":
                    continue
                if not sep and name.startswith("@"):
                    # a bare file reference is named after the file
                    inputs[_name_from_filename(name[1:])] = name
                else:
                    inputs[name] = value.strip() if sep else 1
        elif isinstance(descriptor, dict):
            inputs.update(descriptor)
        elif isinstance(descriptor, str):
            # an option name, never a filename
            inputs[descriptor.strip()] = 1
        else:
            logger.warning("Unrecognized input data type: {!r}".format(descriptor))

    return {name: read_value(value) for name, value in inputs.items()}


def _name_from_filename(filename):
    return os.path.splitext(os.path.basename(filename))[0]


def read_value(value):
    """
    Dereference one input value.
    :param value: an input value
    :return: the contents of the file if value is "@filename", "@..." if value is "\\@...", else value unchanged
    :raises InputError: if the file cannot be read
    """
    if not isinstance(value, str):
        return value
    if value.startswith("@"):
        filename = value[1:]
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as e:
            raise InputError("Cannot read from '{}' ({})".format(filename, e.strerror or e))
    elif value.startswith("\\@"):
        return value[1:]
    return value
