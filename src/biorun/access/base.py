# coding: utf-8
"""
base.py

The interface every access protocol (the mechanism used to talk to a remote analysis service) implements.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from abc import ABCMeta, abstractmethod
import itertools


class JobStatus:
    """Job statuses known to the analysis client."""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TERMINATED = "TERMINATED"
    UNKNOWN = "UNKNOWN"

    TERMINAL = frozenset([COMPLETED, FAILED, TERMINATED])

    @classmethod
    def is_terminal(cls, status):
        return status in cls.TERMINAL


class AccessProtocol(metaclass=ABCMeta):
    """
    Performs the remote operations of an analysis client. Implementations must report communication
    failures as biorun.Exceptions.TransportError.
    """

    def __init__(
        self, location, http_proxy=None, timeout=120, poll_interval=1, max_poll_interval=10
    ):
        """
        :param location: the service endpoint
        :type location: str
        :param http_proxy: "http://server:port" or None
        :param timeout: seconds a single connection is kept alive, 0 means forever
        :param poll_interval: first delay between two status checks, in seconds
        :param max_poll_interval: longest delay between two status checks, in seconds
        """
        self.location = location
        self.http_proxy = http_proxy
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.max_poll_interval = max_poll_interval

    @property
    @abstractmethod
    def name(self):
        raise NotImplementedError

    @abstractmethod
    def submit(self, analysis_name, inputs):
        """
        Create and start a job.
        :return: the job id
        """
        pass

    @abstractmethod
    def status(self, job_id):
        """
        :return: one of the JobStatus values
        """
        pass

    @abstractmethod
    def fetch_result(self, job_id, name):
        pass

    @abstractmethod
    def fetch_all_results(self, job_id):
        """
        :return: dict of result names to values
        """
        pass

    @abstractmethod
    def release(self, job_id):
        pass

    @abstractmethod
    def terminate(self, job_id):
        pass

    @abstractmethod
    def last_event(self, job_id):
        pass

    @abstractmethod
    def job_times(self, job_id):
        """
        :return: dict with keys "created", "started", "ended" and "elapsed", in seconds, -1 if not available
        """
        pass

    @abstractmethod
    def describe(self, analysis_name):
        pass

    @abstractmethod
    def analysis_spec(self, analysis_name):
        pass

    @abstractmethod
    def input_spec(self, analysis_name):
        """
        :return: dict of input names to dicts of properties (at least "type")
        """
        pass

    @abstractmethod
    def result_spec(self, analysis_name):
        """
        :return: dict of result names to types
        """
        pass

    def poll_delays(self):
        """
        Delays between two status checks: start with poll_interval and double up to max_poll_interval.
        """
        delay = self.poll_interval
        while delay < self.max_poll_interval:
            yield delay
            delay *= 2
        yield from itertools.repeat(self.max_poll_interval)
