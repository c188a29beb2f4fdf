#!/usr/bin/env python3
# coding: utf-8
"""
run_analysis.py

Main run script: run a remote analysis, or inspect a job submitted earlier.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""


import argparse
from argparse import RawTextHelpFormatter
import biorun
from biorun.Analysis import new_analysis
from biorun.Exceptions import AnalysisError, BatchFatalError
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.ConfigManager import AnalysisConfigManager
from biorun.Utils import spec_table

import sys
import time

logger = AnalysisLogger.get_logger(__name__)


class AnalysisMaster:
    def __init__(self, params):
        self.start_time = time.time()
        self.params = params
        self.config_manager = AnalysisConfigManager(self.params)
        self.config = self.config_manager.config_main

    def load_config(self):
        self.config = self.config_manager.load_config_main()
        if self.config.getboolean("analysis", "quiet"):
            AnalysisLogger.set_quiet()
        logger.debug(
            "Config file taken from {}".format(
                self.config_manager.run_stats["config_file"]
            )
        )

    def create_client(self):
        name = self.params.get("name")
        if not name and self.params.get("job"):
            name = self.params["job"].partition("/")[0]
        if not name:
            raise BatchFatalError("Please name the analysis to run (-n) or give a job id (-j)")
        return new_analysis(name, config=self.config)

    def run(self):
        try:
            self.load_config()
            client = self.create_client()
            if self.describe(client):
                return
            self.run_job(client)

        except AnalysisError as ae:
            self.log_error(ae)
            raise SystemExit(1)

        except BatchFatalError as bfe:
            self.log_error(bfe)
            raise SystemExit(1)

    @staticmethod
    def log_error(err):
        logger.error(err)
        logger.debug(err, exc_info=True)
        logger.error("BioRun did not complete successfully.")

    def describe(self, client):
        """
        Print the requested descriptions of the analysis.
        :return: True if anything was printed
        """
        done = False
        if self.params.get("describe"):
            print(client.describe())
            done = True
        if self.params.get("analysis_spec"):
            for key, value in sorted(client.analysis_spec().items()):
                print("{}: {}".format(key, value))
            done = True
        if self.params.get("input_spec"):
            print(spec_table(client.input_spec()).to_string())
            done = True
        if self.params.get("result_spec"):
            print(spec_table(client.result_spec()).to_string())
            done = True
        return done

    def run_job(self, client):
        if self.params.get("job"):
            inspect_only = self.params.get("status") or self.params.get("terminate")
            job = client.create_job(
                self.params["job"], destroy_on_exit=False if inspect_only else None
            )
        else:
            job = client.run(self.params.get("inputs") or [])
            if self.params.get("no_wait"):
                if job.destroy_on_exit:
                    logger.warning(
                        "The job will be kept on the server so that it can be inspected later"
                    )
                    job.destroy_on_exit = False
                print(job.id)
                return

        with job:
            if self.params.get("remove"):
                job.remove()
                logger.info("Job {} removed".format(job.id))
                return
            if self.params.get("terminate"):
                job.terminate()
                logger.info("Job {} terminated".format(job.id))
                return
            if self.params.get("status"):
                print(job.status())
                return

            job.wait_for()
            self.log_job(job)
            results = job.results(*(self.params.get("results") or ["?"]))
            self.print_results(results)

    @staticmethod
    def log_job(job):
        logger.info("Job {} finished with status {}".format(job.id, job.status()))
        logger.info("Started: {}".format(job.started(formatted=True)))
        logger.info("Ended: {}".format(job.ended(formatted=True)))
        logger.info("Elapsed time: {}".format(job.elapsed(formatted=True)))

    @staticmethod
    def print_results(results):
        for name, value in sorted(results.items()):
            if isinstance(value, bytes):
                value = value.decode("utf-8", errors="replace")
            elif isinstance(value, (list, tuple)):
                value = "\n".join(
                    v.decode("utf-8", errors="replace") if isinstance(v, bytes) else str(v)
                    for v in value
                )
            print("--- {} ---".format(name))
            print(value)


@log("Command line: {}".format(" ".join(sys.argv[:])), logger, debug=True)
def _parse_args(args=None):
    """
    This function parses the arguments provided by the user
    :return: a dictionary having a key for each argument
    :rtype: dict
    """

    parser = argparse.ArgumentParser(
        description="BioRun {}: run remote bioinformatics analyses.\n"
        "Inputs are given as NAME=VALUE; a VALUE starting with '@' is read from the named file "
        "(use '\\@' for a literal '@').".format(biorun.__version__),
        usage="biorun -n [ANALYSIS] -i [NAME=VALUE] ... [OTHER OPTIONS]\n"
        "       biorun -j [JOB_ID] [--status | --remove | -r RESULT ...]",
        formatter_class=RawTextHelpFormatter,
    )

    optional = parser.add_argument_group("analysis arguments")

    optional.add_argument(
        "-n",
        "--name",
        dest="name",
        required=False,
        metavar="ANALYSIS",
        help="Name of the analysis, e.g. edit::seqret",
    )

    optional.add_argument(
        "-i",
        "--input",
        dest="inputs",
        action="append",
        required=False,
        metavar="NAME=VALUE",
        help="Input data; repeat for each input. A bare NAME sets a boolean option.",
    )

    optional.add_argument(
        "-r",
        "--result",
        dest="results",
        action="append",
        required=False,
        metavar="SELECTOR",
        help="Result to retrieve; repeat for each result. Accepted selectors:\n"
        "- NAME: print the result\n- NAME=FILE: save the result into FILE\n"
        "- '?' or '?TEMPLATE': print textual results, save binary ones (default)\n"
        "- '@' or '@TEMPLATE': save all results\n"
        "Templates may contain $ANALYSIS, $RESULT and '*' (a unique number).",
    )

    optional.add_argument(
        "-j",
        "--job",
        dest="job",
        required=False,
        metavar="JOB_ID",
        help="Id of a job submitted earlier",
    )

    optional.add_argument(
        "--no-wait",
        dest="no_wait",
        action="store_true",
        required=False,
        help="Submit the job, print its id and exit; the job is kept on the server",
    )

    optional.add_argument(
        "--keep",
        dest="destroy_on_exit",
        action="store_false",
        default=None,
        required=False,
        help="Do not destroy the job on the server when BioRun exits",
    )

    optional.add_argument(
        "--status",
        dest="status",
        action="store_true",
        required=False,
        help="Print the status of the job given with -j",
    )

    optional.add_argument(
        "--remove",
        dest="remove",
        action="store_true",
        required=False,
        help="Remove the job given with -j from the server",
    )

    optional.add_argument(
        "--terminate",
        dest="terminate",
        action="store_true",
        required=False,
        help="Terminate the job given with -j",
    )

    info = parser.add_argument_group("description arguments")

    info.add_argument(
        "--describe",
        dest="describe",
        action="store_true",
        required=False,
        help="Print the full description of the analysis",
    )

    info.add_argument(
        "--analysis-spec",
        dest="analysis_spec",
        action="store_true",
        required=False,
        help="Print the main properties of the analysis",
    )

    info.add_argument(
        "--input-spec",
        dest="input_spec",
        action="store_true",
        required=False,
        help="Print the inputs accepted by the analysis",
    )

    info.add_argument(
        "--result-spec",
        dest="result_spec",
        action="store_true",
        required=False,
        help="Print the results produced by the analysis",
    )

    connection = parser.add_argument_group("connection arguments")

    connection.add_argument(
        "-a",
        "--access",
        dest="access",
        required=False,
        help="Access protocol (default: soap)",
    )

    connection.add_argument(
        "-l",
        "--location",
        dest="location",
        required=False,
        metavar="URL",
        help="Location of the analysis service",
    )

    connection.add_argument(
        "--httpproxy",
        dest="httpproxy",
        required=False,
        metavar="http://server:port",
        help="HTTP proxy",
    )

    connection.add_argument(
        "-t",
        "--timeout",
        dest="timeout",
        type=int,
        required=False,
        metavar="SECONDS",
        help="Connection timeout, also the longest wait for a job (0 means no limit, default 120)",
    )

    misc = parser.add_argument_group("other arguments")

    misc.add_argument(
        "--config",
        dest="config_file",
        required=False,
        help="Provide a config file",
    )

    misc.add_argument(
        "--out_path",
        dest="out_path",
        required=False,
        metavar="OUTPUT_PATH",
        help="Directory where results are saved. Default is current working directory.",
    )

    misc.add_argument(
        "-q",
        "--quiet",
        dest="quiet",
        required=False,
        help="Disable the info logs, displays only errors",
        action="store_true",
        default=None,
    )

    misc.add_argument(
        "-v",
        "--version",
        action="version",
        help="Show this version and exit",
        version="BioRun {}".format(biorun.__version__),
    )

    if args is None:
        args = sys.argv[1:] if len(sys.argv) > 1 else ["--help"]
    return vars(parser.parse_args(args))


def main():
    """
    This function runs an analysis according to the provided parameters.
    See the help for more details:
    ``biorun -h``
    :raises SystemExit: if any errors occur
    """
    params = _parse_args()
    if params["quiet"]:
        AnalysisLogger.set_quiet()
    analysis_run = AnalysisMaster(params)
    analysis_run.run()


# Entry point
if __name__ == "__main__":
    main()
