# coding: utf-8
"""
AnalysisLogger.py

Logging utilities shared by all BioRun modules.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import functools
import logging
import os
import sys


class LogDecorator:
    """
    Log a message each time the decorated callable runs. The message is a format string that can be filled
    with attributes of the instance (attr_name) or with one of the positional arguments (func_arg).
    """

    _log_once_keywords = {}

    def __init__(
        self,
        msg,
        logger,
        on_func_exit=False,
        func_arg=None,
        attr_name=None,
        iswarn=False,
        debug=False,
        apply=None,
        log_once=False,
    ):
        self.msg = msg
        self.logger = logger
        self.on_func_exit = on_func_exit
        self.func_arg = func_arg
        self.attr_name = attr_name
        self.iswarn = iswarn
        self.debug = debug
        self.apply = apply
        self.log_once = log_once

    def __call__(self, func):
        @functools.wraps(func)
        def wrapped_func(*args, **kwargs):
            if not self.on_func_exit:
                self.format_string(*args)
            retval = func(*args, **kwargs)
            if self.on_func_exit:
                self.format_string(*args)
            return retval

        return wrapped_func

    def _apply(self, value):
        if self.apply == "join" and isinstance(value, (list, tuple)):
            return " ".join(str(v) for v in value)
        elif self.apply == "basename" and isinstance(value, str):
            return os.path.basename(value)
        return value

    def format_string(self, *args):
        if self.log_once:
            if self.msg in type(self)._log_once_keywords:
                return
            type(self)._log_once_keywords[self.msg] = True

        if self.attr_name is not None and args:
            obj = args[0]
            names = (
                self.attr_name
                if isinstance(self.attr_name, (list, tuple))
                else [self.attr_name]
            )
            values = [self._apply(getattr(obj, name, None)) for name in names]
            string = self.msg.format(*values)
        elif self.func_arg is not None and len(args) > self.func_arg:
            string = self.msg.format(self._apply(args[self.func_arg]))
        else:
            string = self.msg

        if self.iswarn:
            self.logger.warning(string)
        elif self.debug:
            self.logger.debug(string)
        else:
            self.logger.info(string)


class AnalysisLogger(logging.getLoggerClass()):
    """
    Logger for all BioRun modules. All module loggers hang below the "biorun" logger, which owns the console handler.
    """

    _level = logging.DEBUG
    _root_name = "biorun"
    _console_hdlr = None
    _has_warning = False
    quiet = False
    pid = os.getpid()

    def __init__(self, name):
        super().__init__(name)
        self.setLevel(type(self)._level)

    def warning(self, msg, *args, **kwargs):
        type(self)._has_warning = True
        super().warning(msg, *args, **kwargs)

    @classmethod
    def _init_console_handler(cls):
        if cls._console_hdlr is not None:
            return
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s:\t%(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
        cls._console_hdlr = logging.StreamHandler(sys.stdout)
        cls._console_hdlr.setFormatter(formatter)
        cls._console_hdlr.setLevel(logging.ERROR if cls.quiet else logging.INFO)
        root = logging.getLogger(cls._root_name)
        root.setLevel(cls._level)
        root.addHandler(cls._console_hdlr)

    @classmethod
    def get_logger(cls, name):
        """
        :param name: usually the __name__ of the calling module
        :return: a logger that propagates to the shared "biorun" console handler
        """
        if not name.startswith(cls._root_name):
            name = "{}.{}".format(cls._root_name, name)
        previous_class = logging.getLoggerClass()
        logging.setLoggerClass(cls)
        try:
            logger = logging.getLogger(name)
        finally:
            logging.setLoggerClass(previous_class)
        cls._init_console_handler()
        return logger

    @classmethod
    def set_quiet(cls, quiet=True):
        cls.quiet = quiet
        if cls._console_hdlr is not None:
            cls._console_hdlr.setLevel(logging.ERROR if quiet else logging.INFO)

    @classmethod
    def reset(cls):
        cls._has_warning = False
        LogDecorator._log_once_keywords = {}
