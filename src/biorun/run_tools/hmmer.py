# coding: utf-8
"""
hmmer.py

Module for running the programs of the HMMER suite locally.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import io
import os
import subprocess
import tempfile
import numpy as np
from Bio import AlignIO, SearchIO, SeqIO
from Bio.Align import MultipleSeqAlignment
from Bio.SeqRecord import SeqRecord
from biorun.AnalysisLogger import AnalysisLogger
from biorun.run_tools.base import BaseRunner, ToolException

logger = AnalysisLogger.get_logger(__name__)


class HmmerParameters:
    """
    Options of a HMMER program. Only the options listed in PARAMS (taking a value) and SWITCHES (flags) are accepted.
    """

    PARAMS = (
        "A",
        "E",
        "T",
        "Z",
        "outformat",
        "null",
        "pam",
        "prior",
        "pbswitch",
        "archpri",
        "cfile",
        "gapmax",
        "idlevel",
        "informat",
        "pamwgt",
        "swentry",
        "swexit",
        "withali",
        "mapali",
        "cpu",
        "domE",
        "domT",
    )

    SWITCHES = (
        "n",
        "q",
        "oneline",
        "f",
        "g",
        "s",
        "fast",
        "hand",
        "F",
        "wblosum",
        "wgsc",
        "wme",
        "wpb",
        "wvoronoi",
        "wnone",
        "noeff",
        "amino",
        "nucleic",
        "binary",
        "pvm",
        "xnu",
        "null2",
        "acc",
        "compat",
        "cut_ga",
        "cut_nc",
        "cut_tc",
        "forward",
    )

    DOUBLE_DASH = frozenset(
        [
            "oneline",
            "outformat",
            "fast",
            "hand",
            "null",
            "pam",
            "prior",
            "pbswitch",
            "amino",
            "nucleic",
            "binary",
            "wblosum",
            "wgsc",
            "wme",
            "wpb",
            "wvoronoi",
            "wnone",
            "noeff",
            "archpri",
            "cfile",
            "gapmax",
            "idlevel",
            "informat",
            "pamwgt",
            "swentry",
            "swexit",
            "cpu",
            "mapali",
            "withali",
            "pvm",
            "xnu",
            "null2",
            "acc",
            "compat",
            "cut_ga",
            "cut_nc",
            "cut_tc",
            "forward",
            "domE",
            "domT",
        ]
    )

    def __init__(self, hmm=None, db=None, **options):
        """
        :param hmm: the HMM file
        :param db: the HMM database (used when no HMM file is given)
        :param options: values of PARAMS and SWITCHES
        :raises ToolException: on an unknown option
        """
        self.hmm = hmm
        self.db = db
        self._values = {}
        for name, value in options.items():
            self.set(name, value)

    def set(self, name, value):
        if name not in type(self).PARAMS and name not in type(self).SWITCHES:
            raise ToolException("Unallowed parameter: '{}' !".format(name))
        self._values[name] = value

    def get(self, name):
        if name not in type(self).PARAMS and name not in type(self).SWITCHES:
            raise ToolException("Unallowed parameter: '{}' !".format(name))
        return self._values.get(name)

    def is_set(self, name):
        return name in self._values

    def _key(self, name):
        return "--{}".format(name) if name in type(self).DOUBLE_DASH else "-{}".format(name)

    def to_args(self):
        """
        :return: the options as a list of command line arguments, followed by the HMM file or database
        :raises ToolException: if neither an HMM file nor a database is set
        """
        args = []
        for name in type(self).PARAMS:
            value = self._values.get(name)
            if value is None:
                continue
            args.extend([self._key(name), str(value)])
        for name in type(self).SWITCHES:
            if self._values.get(name):
                args.append(self._key(name))
        hmm = self.hmm or self.db
        if not hmm:
            raise ToolException("Need to specify either HMM file or Database")
        args.append(hmm)
        return args


class HMMERRunner(BaseRunner):

    PROGRAMS = (
        "hmmalign",
        "hmmbuild",
        "hmmcalibrate",
        "hmmemit",
        "hmmfetch",
        "hmmpfam",
        "hmmpress",
        "hmmscan",
        "hmmsearch",
    )

    SEARCH_FORMATS = {
        "hmmsearch": "hmmer3-text",
        "hmmscan": "hmmer3-text",
        "hmmpfam": "hmmer2-text",
    }

    # hmmalign --outformat to Bio.AlignIO format names
    ALIGNMENT_FORMATS = {
        "stockholm": "stockholm",
        "pfam": "stockholm",
        "a2m": "fasta",
        "afa": "fasta",
        "clustal": "clustal",
        "phylip": "phylip",
        "msf": "msf",
    }

    def __init__(self, program="hmmsearch", params=None, config=None, arguments=None, tmp_dir=None, **kwargs):
        """
        :param program: one of PROGRAMS
        :param params: HmmerParameters
        :param config: AnalysisConfig; its [hmmalign] section gives the default output format of hmmalign
        :param arguments: extra command line arguments, put before the options
        :param tmp_dir: where temporary input files are written
        """
        if program not in type(self).PROGRAMS:
            raise ToolException("Unknown HMMER program '{}'".format(program))
        self._name = program
        self.params = params or HmmerParameters()
        self.arguments = list(arguments or [])
        self.tmp_dir = tmp_dir
        super().__init__(config=config, **kwargs)

        if self._name == "hmmalign":
            if not self.params.is_set("q"):
                self.params.set("q", True)
            if not self.params.is_set("outformat"):
                self.params.set("outformat", self.config.get("hmmalign", "outformat"))

    @property
    def name(self):
        return self._name

    def get_version(self):
        """
        :return: the HMMER version as a float (e.g. 3.3), or None if it cannot be read
        """
        try:
            hmmer_version = subprocess.check_output(
                [self.cmd, "-h"], stderr=subprocess.STDOUT, shell=False
            )
        except (OSError, subprocess.CalledProcessError):
            return None
        hmmer_version = hmmer_version.decode("utf-8")
        try:
            hmmer_version = hmmer_version.split("\n")[1].split()[2]
            hmmer_version = float(hmmer_version[:3])
        except (ValueError, IndexError):
            # to avoid a crash with a super old version
            try:
                hmmer_version = hmmer_version.split("\n")[1].split()[1]
                hmmer_version = float(hmmer_version[:3])
            except (ValueError, IndexError):
                hmmer_version = None
        return hmmer_version

    def build_command_line(self, *input_files):
        return [self.cmd] + self.arguments + self.params.to_args() + list(input_files)

    def _write_input_file(self, records):
        suffix, fmt, writer = (
            (".sto", "stockholm", AlignIO)
            if isinstance(records[0], MultipleSeqAlignment)
            else (".fasta", "fasta", SeqIO)
        )
        with tempfile.NamedTemporaryFile(
            "w", suffix=suffix, dir=self.tmp_dir, delete=False
        ) as tmp_file:
            writer.write(records, tmp_file, fmt)
        return tmp_file.name

    def run(self, *inputs):
        """
        Run the program on sequences, alignments or a file.
        :param inputs: SeqRecord objects, MultipleSeqAlignment objects, or a single filename
        :return: an iterator of Bio.SearchIO QueryResult for hmmsearch, hmmscan and hmmpfam;
            a Bio.Align.MultipleSeqAlignment for hmmalign; True for the other programs
        :raises ToolException: if the program fails
        """
        super().run()
        tmp_filename = None
        if inputs and isinstance(inputs[0], (SeqRecord, MultipleSeqAlignment)):
            tmp_filename = self._write_input_file(list(inputs))
            input_files = [tmp_filename]
        else:
            input_files = list(inputs)

        try:
            output = self.run_command(self.build_command_line(*input_files))
        finally:
            if tmp_filename is not None:
                os.remove(tmp_filename)

        if self._name in type(self).SEARCH_FORMATS:
            return SearchIO.parse(io.StringIO(output), type(self).SEARCH_FORMATS[self._name])
        elif self._name == "hmmalign":
            outformat = str(self.params.get("outformat")).lower()
            try:
                alignment_format = type(self).ALIGNMENT_FORMATS[outformat]
            except KeyError:
                raise ToolException(
                    "Cannot parse hmmalign output in format '{}'".format(outformat)
                )
            return AlignIO.read(io.StringIO(output), alignment_format)
        else:
            logger.debug(output)
            return True


def parse_domtblout(filename):
    """
    Load a HMMER per-domain table (--domtblout) into a numpy structured array.
    """
    data = []
    with open(filename, "r") as f:
        for line in f:
            if line.startswith("#") or not line.strip():
                continue
            values = line.split()
            description = " ".join(values[22:])
            data.append(tuple(values[:22]) + (description,))

    return np.array(
        data,
        dtype=[
            ("target_name", "U500"),
            ("target_accession", "U500"),
            ("tlen", "i4"),
            ("query_name", "U500"),
            ("query_accession", "U500"),
            ("qlen", "i4"),
            ("eval", "f8"),
            ("score", "f8"),
            ("bias", "f8"),
            ("dom_num", "i4"),
            ("ndom", "i4"),
            ("c-eval", "f8"),
            ("i-eval", "f8"),
            ("dom_score", "f8"),
            ("dom_bias", "f8"),
            ("hmm_coord_from", "i4"),
            ("hmm_coord_to", "i4"),
            ("ali_coord_from", "i4"),
            ("ali_coord_to", "i4"),
            ("env_coord_from", "i4"),
            ("env_coord_to", "i4"),
            ("acc", "f8"),
            ("description", "U500"),
        ],
    )


def best_domain_hits(arr):
    """
    For each target in a domain table keep the domain hits of its best score.
    :return: dict of target names to their best-scoring rows, ordered by decreasing score
    """
    best = {}
    for target in np.unique(arr["target_name"]):
        hits = arr[arr["target_name"] == target]
        best[target] = hits[hits["score"] == np.max(hits["score"])]
    return dict(sorted(best.items(), key=lambda item: -item[1][0]["score"]))
