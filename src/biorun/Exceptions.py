# coding: utf-8
"""
Exceptions.py

Custom exceptions for BioRun.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""


class BatchFatalError(Exception):
    """
    Error that prevents BioRun from being configured.
    """

    def __init__(self, value):
        self.value = value

    def __str__(self):
        return self.value


class AnalysisError(Exception):
    """
    Module-specific exception
    """

    def __init__(self, value):
        self.value = value

    def __str__(self):
        return self.value


class ProtocolLoadError(AnalysisError):
    """
    The requested access protocol cannot be found or loaded.
    """

    def __init__(self, value, cause=None):
        super().__init__(value)
        self.cause = cause


class TransportError(AnalysisError):
    """
    Communication with the remote analysis service failed.
    """

    def __init__(self, value, cause=None):
        super().__init__(value)
        self.cause = cause


class WaitTimeoutError(TransportError):
    """
    A job did not reach a terminal status within the allowed time. The job is kept on the server and is
    available as the job attribute, so the caller can wait again, terminate or remove it.
    """

    def __init__(self, value, job=None):
        super().__init__(value)
        self.job = job


class InputError(AnalysisError):
    pass


class NotReadyError(AnalysisError):
    """
    A result was requested before the job finished.
    """


class NoSuchResultError(AnalysisError):
    pass


class ResultWriteError(AnalysisError):
    """
    A result could not be saved into a local file.
    """

    def __init__(self, value, name=None, path=None):
        super().__init__(value)
        self.name = name
        self.path = path
