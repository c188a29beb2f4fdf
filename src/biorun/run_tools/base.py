# coding: utf-8
"""
base.py

A collection of classes and methods used by all local tools.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import os
import subprocess
from subprocess import TimeoutExpired
from shutil import which
from abc import ABCMeta, abstractmethod
from biorun.AnalysisConfig import AnalysisConfig
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log

logger = AnalysisLogger.get_logger(__name__)


class ToolException(Exception):
    """
    Module-specific exception
    """

    def __init__(self, value=""):
        self.value = value

    def __str__(self):
        return self.value


class BaseRunner(metaclass=ABCMeta):

    tool_versions = {}

    def __init__(self, config=None, timeout=None):
        """
        :param config: the config holding a [<tool name>] section with "path" and "command"
        :type config: AnalysisConfig
        :param timeout: seconds after which a running tool is killed, None for no limit
        """
        self.config = config or AnalysisConfig()
        self.cmd = None
        self.timeout = timeout
        self.cwd = os.getcwd()

        try:
            self.check_tool_available()
        except ToolException:
            raise ToolException(
                "{} tool cannot be found. Please check the 'path' and 'command' parameters "
                "provided in the config file or make sure the tool is available in your working environment.".format(
                    self.name
                )
            )
        self.version = self.get_version()
        type(self).tool_versions[self.name] = self.version

    @property
    @abstractmethod
    def name(self):
        raise NotImplementedError

    @abstractmethod
    def get_version(self):
        return

    @abstractmethod
    def run(self, *args):
        if self.version is not None:
            logger.debug("Tool: {}".format(self.name))
            logger.debug("Version: {}".format(self.version))

    def check_tool_available(self):
        """
        Check tool's availability.

        :return: True if the tool can be run
        :raises ToolException: if neither the config nor the environment provide the tool
        """
        try:
            self.get_tool_from_config()
        except ToolException:
            self.get_tool_from_environment()

        if which(self.cmd) is None:
            raise ToolException()
        return True

    def get_tool_from_environment(self):
        which_tool = which(self.name)
        if not which_tool:
            raise ToolException()
        self.cmd = which_tool

    def get_tool_from_config(self):
        """
        1. The section ['name'] is available in the config
        2. This section contains keys 'path' and 'command'
        3. The string resulted from concatenation of values of these two keys
        represents the full path to the command
        :return:
        """
        if not self.config.has_section(self.name):
            raise ToolException()

        if not self.config.has_option(self.name, "path") or not self.config.get(
            self.name, "path"
        ):
            raise ToolException()

        if self.config.has_option(self.name, "command") and self.config.get(
            self.name, "command"
        ):
            executable = self.config.get(self.name, "command")
        else:
            executable = self.name

        self.cmd = os.path.join(self.config.get(self.name, "path"), executable)

        return

    @log("cmd call: {}", logger, func_arg=1, apply="join", debug=True)
    def run_command(self, cmd_line):
        """
        Start an external process and block until it is over.
        :param cmd_line: the command and its arguments
        :type cmd_line: list
        :return: the standard output of the process
        :raises ToolException: if the process fails or takes too long
        """
        try:
            process = subprocess.run(
                cmd_line,
                shell=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                timeout=self.timeout,
            )
        except TimeoutExpired:
            raise ToolException(
                "The following job was killed as it was taking too long (>{}s) to complete.\n{}".format(
                    self.timeout, " ".join(cmd_line)
                )
            )
        except OSError as e:
            raise ToolException(
                "{} call ({}) crashed: {}".format(self.name, " ".join(cmd_line), e)
            )

        stderr = process.stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise ToolException(
                "{} call ({}) crashed with exit code {}: {}".format(
                    self.name, " ".join(cmd_line), process.returncode, stderr.strip()
                )
            )
        if stderr.strip():
            logger.debug(stderr)
        return process.stdout.decode("utf-8", errors="replace")

    @classmethod
    def reset(cls):
        BaseRunner.tool_versions = {}
