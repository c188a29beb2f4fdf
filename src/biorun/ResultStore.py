# coding: utf-8
"""
ResultStore.py

Save job results into local files. Filenames are either given explicitly or built from a template where
$ANALYSIS and $RESULT are replaced by the analysis and result names, and each "*" by the first number that
makes the filename unique.

Numbered files are created exclusively: when another process takes a number between the existence check and
the creation, the next free number is used. Explicit filenames and templates without "*" overwrite existing
files, and nothing guards them against concurrent writers.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import os
import re
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.Exceptions import ResultWriteError
from biorun.Utils import safe_name

logger = AnalysisLogger.get_logger(__name__)


class ResultStore:

    DEFAULT_TEMPLATE = "$ANALYSIS_*_$RESULT"

    _analysis_placeholder = re.compile(r"\$\{?ANALYSIS\}?", re.IGNORECASE)
    _result_placeholder = re.compile(r"\$\{?RESULT\}?", re.IGNORECASE)

    def __init__(self, analysis_name, directory=None, default_template=None):
        """
        :param analysis_name: name of the analysis the results belong to, e.g. "edit::seqret"
        :type analysis_name: str
        :param directory: where relative filenames are created; default is the current working directory
        :type directory: str
        :param default_template: template used when neither a filename nor a template is given
        :type default_template: str
        """
        self.analysis_name = analysis_name
        self.directory = directory
        self.default_template = default_template or type(self).DEFAULT_TEMPLATE

    def _pattern(self, name, filename=None, template=None, seq=None):
        if not filename:
            filename = template or self.default_template
            filename = type(self)._analysis_placeholder.sub(
                lambda m: safe_name(self.analysis_name), filename
            )
            filename = type(self)._result_placeholder.sub(lambda m: name, filename)
        # include the sequential number before the file extension (if any)
        if seq:
            pos = filename.rfind(".")
            if pos > -1:
                filename = "{}.{}{}".format(filename[:pos], seq, filename[pos:])
            else:
                filename = "{}.{}".format(filename, seq)
        if self.directory and not os.path.isabs(filename):
            filename = os.path.join(self.directory, filename)
        return filename

    @staticmethod
    def _fill_wildcards(pattern):
        filename = pattern
        while "*" in filename:
            number = 1
            while True:
                unique_name = filename.replace("*", str(number), 1)
                if not os.path.exists(unique_name):
                    break
                number += 1
            filename = unique_name
        return filename

    def resolve_filename(self, name, filename=None, template=None, seq=None):
        """
        :return: the name of the file a result would be saved into
        """
        return self._fill_wildcards(
            self._pattern(name, filename=filename, template=template, seq=seq)
        )

    @log("Saving result {}", logger, func_arg=1, debug=True)
    def save(self, name, value, filename=None, template=None, seq=None):
        """
        Write one result value into a file.
        :param name: result name
        :param value: result value, str or bytes
        :param filename: explicit filename; wins over the template
        :param template: filename template
        :param seq: sequential number of a multi-part result
        :return: the name of the created file
        :raises ResultWriteError: if the file cannot be opened, written or closed
        """
        name = name or "result"
        pattern = self._pattern(name, filename=filename, template=template, seq=seq)
        # numbered files are never overwritten
        mode = "xb" if "*" in pattern else "wb"
        if isinstance(value, str):
            value = value.encode("utf-8")
        elif value is None:
            value = b""
        while True:
            result_filename = self._fill_wildcards(pattern)
            try:
                with open(result_filename, mode) as result_file:
                    result_file.write(value)
            except FileExistsError:
                logger.debug(
                    "{} was created by another writer, trying the next number".format(
                        result_filename
                    )
                )
                continue
            except OSError as e:
                raise ResultWriteError(
                    "Error by saving result '{}' into '{}' ({})".format(
                        name, result_filename, e.strerror or e
                    ),
                    name=name,
                    path=result_filename,
                )
            return result_filename

    def save_all(self, name, values, filename=None, template=None):
        """
        Save a multi-part result, one file per part, numbered from 1.
        :return: list of created filenames
        """
        if len(values) == 1:
            return [self.save(name, values[0], filename=filename, template=template)]
        return [
            self.save(name, value, filename=filename, template=template, seq=i)
            for i, value in enumerate(values, 1)
        ]
