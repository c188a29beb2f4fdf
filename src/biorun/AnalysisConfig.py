# coding: utf-8
"""
AnalysisConfig.py

Configuration of remote analyses and local tools. Values come from (in increasing priority) the built-in defaults,
an optional config.ini file and the parameters given on the command line or by the caller.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from configparser import ConfigParser
from configparser import NoOptionError, NoSectionError
from configparser import ParsingError
from configparser import DuplicateOptionError
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.Exceptions import BatchFatalError
import os
import pprint

logger = AnalysisLogger.get_logger(__name__)


class AnalysisConfig(ConfigParser):

    SECTION = "analysis"

    DEFAULT_ARGS_VALUES = {
        "access": "soap",
        "location": "http://www.ebi.ac.uk/soaplab/services",
        "httpproxy": "",
        "timeout": 120,
        "destroy_on_exit": True,
        "poll_interval": 1,
        "max_poll_interval": 10,
        "result_template": "$ANALYSIS_*_$RESULT",
        "out_path": "",
        "quiet": False,
    }

    DEPENDENCY_SECTIONS = {
        "hmmalign",
        "hmmbuild",
        "hmmcalibrate",
        "hmmemit",
        "hmmfetch",
        "hmmpfam",
        "hmmpress",
        "hmmscan",
        "hmmsearch",
    }

    TOOL_OPTIONS = {
        "hmmalign": {"outformat": "stockholm"},
    }

    PERMITTED_OPTIONS = [
        "access",
        "name",
        "location",
        "httpproxy",
        "timeout",
        "destroy_on_exit",
        "poll_interval",
        "max_poll_interval",
        "result_template",
        "out_path",
        "quiet",
    ]

    def __init__(self, conf_file="local environment", params=None):
        """
        :param conf_file: a path to a config.ini file, or "local environment" to use the defaults only
        :type conf_file: str
        :param params: key and values overriding the config.ini values
        :type params: dict
        """
        super().__init__(interpolation=None)
        self.conf_file = conf_file
        self.params = params or {}
        config_dict = {type(self).SECTION: type(self).DEFAULT_ARGS_VALUES}
        for tool in type(self).DEPENDENCY_SECTIONS:
            section = {"path": "", "command": ""}
            section.update(type(self).TOOL_OPTIONS.get(tool, {}))
            config_dict[tool] = section
        self.read_dict(config_dict)

    def configure(self):
        if self.conf_file != "local environment":
            self._load_config_file()
        # Update the config with args provided by the user, else keep config
        self._update_config_with_args(self.params)

    @log("Validating BioRun configuration", logger, debug=True)
    def validate(self):
        self._check_allowed_keys()
        self._check_value_constraints()
        self.log_config()

    def log_config(self):
        logger.debug("State of BioRun config before run:")
        logger.debug(PrettyLog({s: dict(self.items(s)) for s in self.sections()}))

    def _load_config_file(self):
        """
        Load config file using ConfigParser.
        :return:
        """
        try:
            with open(self.conf_file) as cfg_file:
                self.read_file(cfg_file)
        except IOError:
            raise BatchFatalError(
                "Config file {} cannot be found".format(self.conf_file)
            )
        except ParsingError:
            raise BatchFatalError(
                "Unable to parse the contents of config file {}".format(self.conf_file)
            )
        except DuplicateOptionError:
            raise BatchFatalError(
                "Duplicated entry in config file {}. Unable to load configuration.".format(
                    self.conf_file
                )
            )
        return

    def _update_config_with_args(self, args):
        """
        Include caller arguments in config. Overwrite any values given in the config file.
        :param args: Dictionary of parameters, e.g. parsed command line arguments
        :type args: dict
        :return:
        """
        for key, val in args.items():
            if key in type(self).PERMITTED_OPTIONS and val is not None:
                self.set(type(self).SECTION, key, str(val))
        return

    def _check_allowed_keys(self):
        full_dict = {type(self).SECTION: type(self).PERMITTED_OPTIONS}
        full_dict.update(
            {
                dependency: ["path", "command"]
                + list(type(self).TOOL_OPTIONS.get(dependency, {}))
                for dependency in type(self).DEPENDENCY_SECTIONS
            }
        )

        for section_name in self.sections():
            if section_name not in full_dict:
                raise BatchFatalError(
                    "Unrecognized section '{}' in config file".format(section_name)
                )

        for section_name, options in full_dict.items():
            try:
                for option in self.options(section_name):
                    if option not in options:
                        raise BatchFatalError(
                            "Unrecognized option '{}' in config file".format(option)
                        )
            except NoSectionError:
                logger.warning("Section {} not found".format(section_name))
        return

    def _check_value_constraints(self):
        try:
            timeout = self.getint(type(self).SECTION, "timeout")
            poll_interval = self.getfloat(type(self).SECTION, "poll_interval")
            max_poll_interval = self.getfloat(type(self).SECTION, "max_poll_interval")
            self.getboolean(type(self).SECTION, "destroy_on_exit")
            self.getboolean(type(self).SECTION, "quiet")
        except ValueError as ve:
            raise BatchFatalError("Invalid value in config: {}".format(ve))

        if timeout < 0:
            raise BatchFatalError(
                "Timeout must be zero (no timeout) or a positive number of seconds (you have used: {})".format(
                    timeout
                )
            )
        if poll_interval <= 0 or max_poll_interval < poll_interval:
            raise BatchFatalError(
                "Polling intervals must be positive, with max_poll_interval not smaller than poll_interval"
            )
        if not self.get(type(self).SECTION, "access").strip():
            raise BatchFatalError("Access protocol cannot be empty")
        return

    def get_optional(self, option, section=None):
        """
        Return a value of the config, or None if the option is missing or empty.
        """
        try:
            value = self.get(section or type(self).SECTION, option)
        except (NoOptionError, NoSectionError):
            return None
        return value if value != "" else None

    def get_results_dir(self):
        out_path = self.get_optional("out_path")
        return os.path.abspath(out_path) if out_path else None


class PrettyLog:
    def __init__(self, obj):
        self.obj = obj

    def __repr__(self):
        return pprint.pformat(self.obj)
