import unittest
from biorun.Analysis import new_analysis
import os


@unittest.skipUnless(
    os.environ.get("BIORUN_ONLINE_TESTS"),
    "set BIORUN_ONLINE_TESTS=1 to run the tests using the EBI Soaplab services",
)
class TestOnlineSeqret(unittest.TestCase):
    def setUp(self):
        location = os.environ.get("BIORUN_ONLINE_LOCATION")
        params = {"location": location} if location else {}
        self.client = new_analysis("edit::seqret", **params)

    def test_result_spec(self):
        self.assertIn("outseq", self.client.result_spec())

    def test_seqret_to_embl(self):
        with self.client.wait_for(
            {"sequence_direct_data": "ACGTACGTACGT", "osformat": "embl"}
        ) as job:
            self.assertEqual(job.status(), "COMPLETED")
            outseq = job.result("outseq")
            if isinstance(outseq, bytes):
                outseq = outseq.decode("utf-8")
            self.assertIn("ID", outseq)
