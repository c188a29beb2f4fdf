import unittest
from unittest.mock import patch
from biorun import Utils


class TestUtils(unittest.TestCase):
    def test_format_time_not_available(self):
        self.assertEqual(Utils.format_time(-1), "n/a")
        self.assertEqual(Utils.format_time("-1"), "n/a")

    def test_format_time_elapsed_unchanged(self):
        self.assertEqual(Utils.format_time(42), 42)
        self.assertEqual(Utils.format_time(1.5), 1.5)

    @patch("biorun.Utils.time.ctime", return_value="Thu Jan  1 00:00:00 2004")
    def test_format_time_date(self, mock_ctime):
        self.assertEqual(Utils.format_time(1072915200), "Thu Jan  1 00:00:00 2004")
        mock_ctime.assert_called_with(1072915200)

    def test_normalize_names_empty(self):
        self.assertIsNone(Utils.normalize_names())

    def test_normalize_names_strings(self):
        names = Utils.normalize_names("outseq", "report = out.txt")
        self.assertDictEqual(names, {"outseq": None, "report": "out.txt"})

    def test_normalize_names_dict(self):
        names = Utils.normalize_names({"outseq": "seq.embl"}, "report")
        self.assertDictEqual(names, {"outseq": "seq.embl", "report": None})

    def test_normalize_names_special_wins(self):
        self.assertEqual(Utils.normalize_names("outseq", "?"), "?")
        self.assertEqual(Utils.normalize_names("@$RESULT.*", "outseq"), "@$RESULT.*")

    def test_safe_name(self):
        self.assertEqual(Utils.safe_name("edit::seqret/job:1"), "edit__seqret_job_1")

    def test_spec_table(self):
        table = Utils.spec_table(
            {"report": "string", "outseq": {"type": "string", "mandatory": "false"}}
        )
        self.assertListEqual(list(table.index), ["outseq", "report"])
        self.assertEqual(table.index.name, "name")
        self.assertEqual(table.loc["report", "type"], "string")
        self.assertEqual(table.loc["outseq", "mandatory"], "false")
