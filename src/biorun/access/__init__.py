# coding: utf-8
"""
__init__.py

Registry of access protocols. A protocol is looked up by name; a name that is not registered yet is imported
from the module biorun.access.<name>, which registers itself when loaded.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import importlib
from biorun.AnalysisLogger import AnalysisLogger
from biorun.Exceptions import ProtocolLoadError

logger = AnalysisLogger.get_logger(__name__)

ACCESS_PROTOCOLS = {}


def register_access_protocol(name, factory):
    """
    :param name: access name, e.g. "soap"
    :param factory: callable building an AccessProtocol from (location, http_proxy, timeout, ...)
    """
    ACCESS_PROTOCOLS[name.lower()] = factory


def get_access_protocol(name):
    """
    :return: the factory registered for the access name
    :raises ProtocolLoadError: if the protocol is not registered and cannot be imported
    """
    name = name.lower()
    if name not in ACCESS_PROTOCOLS:
        module_name = "{}.{}".format(__name__, name)
        try:
            importlib.import_module(module_name)
        except Exception as e:
            raise ProtocolLoadError(
                "{}: {} cannot be found or loaded\nException {}".format(
                    module_name, name, e
                ),
                cause=e,
            ) from e
        logger.debug("Loaded access module {}".format(module_name))
    try:
        return ACCESS_PROTOCOLS[name]
    except KeyError:
        raise ProtocolLoadError(
            "Module {}.{} does not register an access protocol named '{}'".format(
                __name__, name, name
            )
        )
