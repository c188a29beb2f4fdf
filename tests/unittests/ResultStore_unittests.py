import unittest
from unittest.mock import patch
from biorun import ResultStore
from biorun.Exceptions import ResultWriteError
import importlib
import os
import tempfile


class TestResultStore(unittest.TestCase):
    def setUp(self):
        def kill_patches():
            patch.stopall()
            importlib.reload(ResultStore)

        self.addCleanup(kill_patches)
        patch(
            "biorun.AnalysisLogger.LogDecorator", lambda *args, **kwargs: lambda f: f
        ).start()
        importlib.reload(ResultStore)

        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.store = ResultStore.ResultStore("edit::seqret", directory=self.tmp_dir.name)

    def _path(self, filename):
        return os.path.join(self.tmp_dir.name, filename)

    def test_default_template_unique_numbers(self):
        first = self.store.save("outseq", "ID   seq1")
        second = self.store.save("outseq", "ID   seq2")
        self.assertEqual(first, self._path("edit__seqret_1_outseq"))
        self.assertEqual(second, self._path("edit__seqret_2_outseq"))
        with open(second, "rb") as f:
            self.assertEqual(f.read(), b"ID   seq2")

    def test_numbered_file_taken_concurrently(self):
        taken = self._path("edit__seqret_1_outseq")
        with open(taken, "wb") as f:
            f.write(b"other writer")
        with patch("biorun.ResultStore.os.path.exists", side_effect=[False, True, False]):
            filename = self.store.save("outseq", "mine")
        self.assertEqual(filename, self._path("edit__seqret_2_outseq"))
        with open(taken, "rb") as f:
            self.assertEqual(f.read(), b"other writer")

    def test_explicit_filename_overwritten(self):
        self.store.save("outseq", "first", filename="out.txt")
        filename = self.store.save("outseq", "second", filename="out.txt")
        with open(filename) as f:
            self.assertEqual(f.read(), "second")

    def test_template_placeholders(self):
        filename = self.store.resolve_filename("report", template="${ANALYSIS}.$result.txt")
        self.assertEqual(filename, self._path("edit__seqret.report.txt"))

    def test_sequence_number_before_extension(self):
        self.assertEqual(
            self.store.resolve_filename("img", filename="picture.png", seq=2),
            self._path("picture.2.png"),
        )
        self.assertEqual(
            self.store.resolve_filename("img", filename="picture", seq=3),
            self._path("picture.3"),
        )

    def test_explicit_filename_wins(self):
        filename = self.store.save("outseq", b"\x00\x01", filename="out.bin", template="$RESULT")
        self.assertEqual(filename, self._path("out.bin"))
        with open(filename, "rb") as f:
            self.assertEqual(f.read(), b"\x00\x01")

    def test_absolute_filename_kept(self):
        absolute = self._path("abs.txt")
        store = ResultStore.ResultStore("edit::seqret", directory="/elsewhere")
        self.assertEqual(store.resolve_filename("outseq", filename=absolute), absolute)

    def test_none_value_saved_empty(self):
        filename = self.store.save("outseq", None, filename="empty.txt")
        self.assertEqual(os.path.getsize(filename), 0)

    def test_save_all_numbers_parts(self):
        filenames = self.store.save_all("img", [b"a", b"b"], filename="img.png")
        self.assertListEqual(filenames, [self._path("img.1.png"), self._path("img.2.png")])

    def test_save_all_single_part_not_numbered(self):
        filenames = self.store.save_all("img", [b"a"], filename="img.png")
        self.assertListEqual(filenames, [self._path("img.png")])

    def test_write_error(self):
        missing_dir = self._path("missing_dir")
        with self.assertRaises(ResultWriteError) as cm:
            self.store.save("outseq", "text", filename=os.path.join(missing_dir, "out.txt"))
        self.assertEqual(cm.exception.name, "outseq")
        self.assertEqual(cm.exception.path, os.path.join(missing_dir, "out.txt"))
