# coding: utf-8
"""
Analysis.py

The client of a remote analysis. It resolves which access protocol talks to the analysis service, describes the
analysis and creates its jobs:

    client = new_analysis("edit::seqret")
    job = client.wait_for({"sequence_direct_data": "ACGT", "osformat": "embl"})
    print(job.result("outseq"))

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

from collections import namedtuple
from biorun.access import get_access_protocol
from biorun.AnalysisConfig import AnalysisConfig
from biorun.AnalysisJob import AnalysisJob
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.ResultStore import ResultStore

logger = AnalysisLogger.get_logger(__name__)

AnalysisDescriptor = namedtuple(
    "AnalysisDescriptor",
    ["name", "access", "location", "http_proxy", "timeout", "destroy_on_exit"],
)


def _guess_access(params):
    """
    Guess the access protocol from the other parameters. No guess is made at the moment, so the configured
    default is used.
    """
    return None


class AnalysisClient:
    def __init__(
        self,
        name,
        access=None,
        location=None,
        http_proxy=None,
        timeout=None,
        destroy_on_exit=None,
        config=None,
    ):
        """
        :param name: name of the analysis, possibly with its category, e.g. "edit::seqret"
        :param access: access protocol name; default is guessed or taken from the config ("soap")
        :param location: service location; default from the config
        :param http_proxy: "http://server:port"
        :param timeout: seconds; used for each connection and as the limit of wait_for. 0 means no limit
        :param destroy_on_exit: default for the jobs created by this client
        :param config: an AnalysisConfig; the built-in defaults are used if None
        :raises ProtocolLoadError: if the access protocol cannot be loaded
        """
        if not name:
            raise ValueError("An analysis name is required")
        self.config = config or AnalysisConfig()
        section = AnalysisConfig.SECTION
        params = {
            "name": name,
            "location": location,
            "http_proxy": http_proxy,
            "timeout": timeout,
        }
        access = access or _guess_access(params) or self.config.get(section, "access")
        self.descriptor = AnalysisDescriptor(
            name=name,
            access=access.lower(),
            location=location or self.config.get(section, "location"),
            http_proxy=http_proxy or self.config.get_optional("httpproxy"),
            timeout=int(timeout)
            if timeout is not None
            else self.config.getint(section, "timeout"),
            destroy_on_exit=destroy_on_exit
            if destroy_on_exit is not None
            else self.config.getboolean(section, "destroy_on_exit"),
        )
        factory = get_access_protocol(self.descriptor.access)
        self.access = factory(
            self.descriptor.location,
            http_proxy=self.descriptor.http_proxy,
            timeout=self.descriptor.timeout,
            poll_interval=self.config.getfloat(section, "poll_interval"),
            max_poll_interval=self.config.getfloat(section, "max_poll_interval"),
        )
        self._specs = {}

    def __repr__(self):
        return "<AnalysisClient {} via {} at {}>".format(
            self.name, self.access_name, self.location
        )

    @property
    def name(self):
        return self.descriptor.name

    analysis_name = name

    @property
    def access_name(self):
        return self.descriptor.access

    @property
    def location(self):
        return self.descriptor.location

    @property
    def http_proxy(self):
        return self.descriptor.http_proxy

    @property
    def timeout(self):
        return self.descriptor.timeout

    @property
    def destroy_on_exit(self):
        return self.descriptor.destroy_on_exit

    def _spec(self, kind):
        if kind not in self._specs:
            self._specs[kind] = getattr(self.access, kind)(self.name)
        return self._specs[kind]

    def describe(self):
        """
        :return: a detailed description of the analysis, as given by the service (usually XML)
        """
        return self._spec("describe")

    def analysis_spec(self):
        return dict(self._spec("analysis_spec"))

    def input_spec(self):
        return dict(self._spec("input_spec"))

    def result_spec(self):
        return dict(self._spec("result_spec"))

    def create_job(self, job_id=None, destroy_on_exit=None):
        """
        :param job_id: id of a job created earlier; without it a new, not yet submitted job is returned
        :return: AnalysisJob
        """
        return AnalysisJob(self, job_id=job_id, destroy_on_exit=destroy_on_exit)

    @log("Running analysis {}", logger, attr_name="name", debug=True)
    def run(self, *inputs):
        """
        Submit a new job and return without waiting for it.
        :param inputs: input descriptors, see biorun.InputNormalizer.prepare_inputs
        :return: the submitted AnalysisJob
        """
        return self.create_job().run(*inputs)

    def wait_for(self, *inputs):
        """
        Submit a new job and block until it finishes.
        :return: the finished AnalysisJob
        """
        return self.run(*inputs).wait_for()

    def result_store(self):
        return ResultStore(
            self.name,
            directory=self.config.get_results_dir(),
            default_template=self.config.get_optional("result_template"),
        )


def new_analysis(name, **params):
    """
    Build the client of an analysis. Accepts the same parameters as AnalysisClient.
    """
    return AnalysisClient(name, **params)


def attach_job(job_id, name=None, **params):
    """
    Re-create a job from its id.
    :param job_id: the id of a job created earlier
    :param name: the analysis name; taken from the job id if not given
    :return: AnalysisJob
    """
    if name is None:
        name = job_id.partition("/")[0]
    destroy_on_exit = params.pop("destroy_on_exit", None)
    return new_analysis(name, **params).create_job(
        job_id, destroy_on_exit=destroy_on_exit
    )
