import unittest
from unittest.mock import Mock, patch
from biorun import access
from biorun import Analysis
from biorun.AnalysisConfig import AnalysisConfig
from biorun.Exceptions import ProtocolLoadError
import importlib
import os


class TestAnalysisClient(unittest.TestCase):
    def setUp(self):
        def kill_patches():
            patch.stopall()
            importlib.reload(Analysis)

        self.addCleanup(kill_patches)
        patch(
            "biorun.AnalysisLogger.LogDecorator", lambda *args, **kwargs: lambda f: f
        ).start()
        importlib.reload(Analysis)

        self.registered = dict(access.ACCESS_PROTOCOLS)

        def restore_registry():
            access.ACCESS_PROTOCOLS.clear()
            access.ACCESS_PROTOCOLS.update(self.registered)

        self.addCleanup(restore_registry)

        self.factory = Mock()
        self.remote = self.factory.return_value
        self.remote.input_spec.return_value = {
            "sequence_direct_data": {"name": "sequence_direct_data", "type": "string"}
        }
        self.remote.result_spec.return_value = {"outseq": "string"}
        access.register_access_protocol("mock", self.factory)
        self.config = AnalysisConfig()

    def test_defaults_from_config(self):
        self.config.set("analysis", "access", "mock")
        client = Analysis.AnalysisClient("edit::seqret", config=self.config)
        self.assertEqual(client.name, "edit::seqret")
        self.assertEqual(client.analysis_name, "edit::seqret")
        self.assertEqual(client.access_name, "mock")
        self.assertEqual(client.location, "http://www.ebi.ac.uk/soaplab/services")
        self.assertIsNone(client.http_proxy)
        self.assertEqual(client.timeout, 120)
        self.assertTrue(client.destroy_on_exit)
        self.factory.assert_called_once_with(
            "http://www.ebi.ac.uk/soaplab/services",
            http_proxy=None,
            timeout=120,
            poll_interval=1.0,
            max_poll_interval=10.0,
        )
        self.assertIs(client.access, self.remote)

    def test_explicit_parameters(self):
        client = Analysis.AnalysisClient(
            "edit::seqret",
            access="MOCK",
            location="http://localhost:8080/services",
            http_proxy="http://proxy:3128",
            timeout=0,
            destroy_on_exit=False,
            config=self.config,
        )
        self.assertEqual(client.access_name, "mock")
        self.assertEqual(client.timeout, 0)
        self.assertFalse(client.destroy_on_exit)
        self.assertEqual(self.factory.call_args[0][0], "http://localhost:8080/services")
        self.assertEqual(self.factory.call_args[1]["http_proxy"], "http://proxy:3128")

    def test_default_access_is_soap(self):
        from biorun.access import soap

        client = Analysis.new_analysis("edit::seqret")
        self.assertEqual(client.access_name, "soap")
        self.assertEqual(client.access.name, soap.SoapAccess.name)

    def test_missing_name(self):
        with self.assertRaises(ValueError):
            Analysis.AnalysisClient("", access="mock", config=self.config)

    def test_unknown_access(self):
        with self.assertRaises(ProtocolLoadError):
            Analysis.AnalysisClient("edit::seqret", access="telepathy", config=self.config)

    def test_specs_fetched_once(self):
        client = Analysis.AnalysisClient("edit::seqret", access="mock", config=self.config)
        spec = client.input_spec()
        spec.clear()
        self.assertIn("sequence_direct_data", client.input_spec())
        self.assertDictEqual(client.result_spec(), {"outseq": "string"})
        self.remote.input_spec.assert_called_once_with("edit::seqret")

    def test_describe(self):
        self.remote.describe.return_value = "<analysis/>"
        client = Analysis.AnalysisClient("edit::seqret", access="mock", config=self.config)
        self.assertEqual(client.describe(), "<analysis/>")

    def test_run_submits_job(self):
        self.remote.submit.return_value = "edit::seqret/1"
        client = Analysis.AnalysisClient("edit::seqret", access="mock", config=self.config)
        job = client.run({"sequence_direct_data": "ACGT"})
        self.assertEqual(job.id, "edit::seqret/1")
        self.remote.submit.assert_called_once_with(
            "edit::seqret", {"sequence_direct_data": "ACGT"}
        )
        job.destroy_on_exit = False

    def test_attach_job(self):
        job = Analysis.attach_job(
            "edit::seqret/1", access="mock", config=self.config, destroy_on_exit=False
        )
        self.assertEqual(job.analysis_name, "edit::seqret")
        self.assertEqual(job.id, "edit::seqret/1")
        self.assertFalse(job.destroy_on_exit)
        self.remote.submit.assert_not_called()

    def test_result_store(self):
        self.config.set("analysis", "out_path", "results")
        self.config.set("analysis", "result_template", "$RESULT.txt")
        client = Analysis.AnalysisClient("edit::seqret", access="mock", config=self.config)
        store = client.result_store()
        self.assertEqual(store.directory, os.path.abspath("results"))
        self.assertEqual(store.default_template, "$RESULT.txt")
        self.assertEqual(store.analysis_name, "edit::seqret")
