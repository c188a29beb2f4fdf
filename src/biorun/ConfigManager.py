# coding: utf-8
"""
ConfigManager.py

ConfigManager controls which configuration should be used for a BioRun session.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from biorun.AnalysisConfig import AnalysisConfig
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
import os

logger = AnalysisLogger.get_logger(__name__)


class AnalysisConfigManager:
    def __init__(self, params):
        self.run_stats = {}
        self.params = params
        self.config_file = None
        self.config_main = None
        self.get_config_file()

    @log("Getting config file", logger, debug=True)
    def get_config_file(self):
        """
        Check for BioRun config file specified as a parameter;
        if not present check if defined as an environment variable;
        if not present use the built-in defaults.
        :return config_file: path to the config file, or "local environment"
        """
        try:
            self.config_file = self.params["config_file"]
            if self.config_file is not None:
                self.run_stats["config_file"] = "command line"
                return self.config_file
        except KeyError:
            pass
        if os.environ.get("BIORUN_CONFIG_FILE") and os.access(
            os.environ.get("BIORUN_CONFIG_FILE"), os.R_OK
        ):
            self.config_file = os.environ.get("BIORUN_CONFIG_FILE")
            self.run_stats["config_file"] = "BIORUN_CONFIG_FILE environment variable"
        else:
            self.config_file = "local environment"
            self.run_stats["config_file"] = "local environment"
        return self.config_file

    @log("Configuring BioRun with {}", logger, attr_name="config_file")
    def load_config_main(self):
        self.config_main = AnalysisConfig(self.config_file, self.params)
        self.config_main.configure()
        self.config_main.validate()
        return self.config_main
