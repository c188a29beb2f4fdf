# coding: utf-8
"""
AnalysisJob.py

A job is one execution of a remote analysis. It is created by an AnalysisClient, either fresh (and then submitted
with run or wait_for) or re-attached to a job submitted earlier, using the job id.

When a job handle is closed (explicitly, at the end of a "with" block or when it is garbage collected) the remote
job is destroyed, unless destroy_on_exit is False. A job kept alive this way can be re-attached later by its id.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import time
from biorun.access.base import JobStatus
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.Exceptions import (
    AnalysisError,
    NoSuchResultError,
    NotReadyError,
    WaitTimeoutError,
)
from biorun.InputNormalizer import prepare_inputs
from biorun.Utils import NOT_AVAILABLE, format_time, normalize_names

logger = AnalysisLogger.get_logger(__name__)


class AnalysisJob:
    def __init__(self, analysis, job_id=None, destroy_on_exit=None):
        """
        :param analysis: the client this job belongs to
        :type analysis: biorun.Analysis.AnalysisClient
        :param job_id: id of an existing remote job, or None for a new, not yet submitted job
        :type job_id: str
        :param destroy_on_exit: overrides the default of the client
        :type destroy_on_exit: bool
        """
        self.analysis = analysis
        self._access = analysis.access
        self._id = job_id
        self.destroy_on_exit = (
            analysis.destroy_on_exit if destroy_on_exit is None else destroy_on_exit
        )
        self._status = JobStatus.CREATED
        self._times = None
        self._results = {}
        self._all_fetched = False
        self._removed = False
        self._closed = False

    def __repr__(self):
        return "<AnalysisJob {} [{}]>".format(self._id or "(not submitted)", self._status)

    @property
    def id(self):
        return self._id

    @property
    def analysis_name(self):
        return self.analysis.name

    def is_submitted(self):
        return self._id is not None

    @log("Job {} submitted", logger, attr_name="_id", on_func_exit=True)
    def run(self, *inputs):
        """
        Submit the job with the given input data. A job that has already been submitted is left as it is.
        :return: self
        :raises InputError: if the input data cannot be prepared
        :raises TransportError: if the job cannot be created remotely
        """
        if self._id is not None:
            logger.debug("Job {} has already been submitted".format(self._id))
            return self
        self._id = self._access.submit(self.analysis_name, prepare_inputs(*inputs))
        self._status = JobStatus.CREATED
        return self

    def status(self):
        """
        Ask for the current status. A job that reached a terminal status keeps it; a job that has not been
        submitted yet is CREATED.
        """
        if self._id is None or JobStatus.is_terminal(self._status):
            return self._status
        self._status = self._access.status(self._id)
        return self._status

    def is_finished(self):
        return JobStatus.is_terminal(self.status())

    def wait_for(self, *inputs):
        """
        Submit the job (if not done yet) and block until it reaches a terminal status.

        The status is checked with the delays given by the access protocol. The wait is limited by the timeout
        of the analysis client (0 means no limit).
        :return: self
        :raises WaitTimeoutError: if the job is still running after the timeout; the job is then no longer
            destroyed on exit
        """
        if self._id is None:
            self.run(*inputs)
        timeout = self.analysis.timeout
        deadline = time.monotonic() + timeout if timeout else None
        delays = self._access.poll_delays()
        while not self.is_finished():
            delay = next(delays)
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    # the caller decides what happens to an unfinished job
                    self.destroy_on_exit = False
                    raise WaitTimeoutError(
                        "Job {} did not finish within {} seconds (last status {})".format(
                            self._id, timeout, self._status
                        ),
                        job=self,
                    )
                delay = min(delay, remaining)
            time.sleep(delay)
        logger.debug("Job {} finished with status {}".format(self._id, self._status))
        return self

    def terminate(self):
        self._check_submitted()
        self._access.terminate(self._id)
        return self

    def last_event(self):
        self._check_submitted()
        return self._access.last_event(self._id)

    def _check_submitted(self):
        if self._id is None:
            raise NotReadyError("The job has not been submitted yet")

    def _job_times(self):
        if self._id is None:
            return {}
        if self._times is not None:
            return self._times
        times = self._access.job_times(self._id)
        if JobStatus.is_terminal(self._status):
            self._times = times
        return times

    def _time(self, key, formatted):
        value = self._job_times().get(key, NOT_AVAILABLE)
        return format_time(value) if formatted else value

    def created(self, formatted=False):
        return self._time("created", formatted)

    def started(self, formatted=False):
        return self._time("started", formatted)

    def ended(self, formatted=False):
        return self._time("ended", formatted)

    def elapsed(self, formatted=False):
        """
        :return: ended - started in seconds, or -1 ("n/a" when formatted) if either is not known
        """
        times = self._job_times()
        started = times.get("started", NOT_AVAILABLE)
        ended = times.get("ended", NOT_AVAILABLE)
        if started == NOT_AVAILABLE or ended == NOT_AVAILABLE:
            elapsed = NOT_AVAILABLE
        else:
            elapsed = ended - started
        return format_time(elapsed) if formatted else elapsed

    def _check_finished(self):
        status = self.status()
        if not JobStatus.is_terminal(status):
            raise NotReadyError(
                "Job {} has not finished yet (status {})".format(
                    self._id or "(not submitted)", status
                )
            )

    def result(self, name):
        """
        Return one result. The value is fetched once and then kept by the job.
        :raises NotReadyError: if the job has not finished
        :raises NoSuchResultError: if the analysis does not produce a result of this name
        """
        self._check_finished()
        if name not in self.analysis.result_spec():
            raise NoSuchResultError(
                "Analysis {} has no result named '{}'".format(self.analysis_name, name)
            )
        if name not in self._results:
            self._results[name] = self._access.fetch_result(self._id, name)
        return self._results[name]

    def _fetch_all(self):
        if not self._all_fetched:
            fetched = dict(self._access.fetch_all_results(self._id))
            fetched.update(self._results)
            self._results = fetched
            self._all_fetched = True
        return dict(self._results)

    def results(self, *selectors):
        """
        Return several results, optionally saving them into files.

        Selectors:
            none                all results, returned as they are
            "?" or "?template"  all results; binary ones are saved (using the template) and textual ones returned
            "@" or "@template"  all results, all saved using the template
            "name"              this result, returned as it is
            "name=destination"  this result, saved into the destination (a filename or a template)
            {name: destination} the same, for several results; a None destination means "return as it is"
        :return: dict of result names to values or to the names of the files the values were saved into
        :raises NotReadyError: if the job has not finished
        """
        self._check_finished()
        names = normalize_names(*selectors)
        if names is None:
            return self._fetch_all()

        store = self.analysis.result_store()
        results = {}
        if isinstance(names, str):
            mode, template = names[0], names[1:] or None
            for name, value in self._fetch_all().items():
                if mode == "@" or self._is_binary(name, value):
                    results[name] = self._save(store, name, value, template=template)
                else:
                    results[name] = value
            return results

        for name, destination in names.items():
            value = self.result(name)
            if destination is None:
                results[name] = value
            elif "$" in destination:
                results[name] = self._save(store, name, value, template=destination)
            else:
                results[name] = self._save(store, name, value, filename=destination)
        return results

    @staticmethod
    def _save(store, name, value, filename=None, template=None):
        if isinstance(value, (list, tuple)):
            return store.save_all(name, value, filename=filename, template=template)
        return store.save(name, value, filename=filename, template=template)

    def _is_binary(self, name, value):
        result_type = self.analysis.result_spec().get(name)
        if isinstance(result_type, dict):
            result_type = result_type.get("type")
        if result_type and "byte" in str(result_type):
            return True
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if isinstance(v, bytes):
                try:
                    v.decode("utf-8")
                except UnicodeDecodeError:
                    return True
        return False

    def remove(self):
        """
        Release the resources of the remote job. Calling it again does nothing.
        """
        if self._removed:
            return
        if self._id is not None:
            self._access.release(self._id)
            logger.debug("Job {} removed".format(self._id))
        self._removed = True

    def close(self):
        """
        Release the job handle; the remote job is removed only if destroy_on_exit is set.
        """
        if self._closed:
            return
        self._closed = True
        if self.destroy_on_exit:
            self.remove()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        if not hasattr(self, "_closed"):
            return
        try:
            self.close()
        except AnalysisError as e:
            logger.warning("Unable to remove job {}: {}".format(self._id, e))
