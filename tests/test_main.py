import io
import os
import unittest
from contextlib import redirect_stdout
from unittest import mock

import main
from sharepoint_links.graph_api import GraphApiError

ARGV = ["main.py", "TeamSite", "contoso.sharepoint.com", "tenant", "client", "secret", "Policies"]


@mock.patch.dict(os.environ, {"DEBUG": "", "DEBUG_METADATA": ""})
@mock.patch("sharepoint_links.config.load_dotenv")
class TestMain(unittest.TestCase):
    def test_runs_provisioning_inside_session(self, _load_dotenv) -> None:
        with mock.patch("main.GraphSession") as session_cls, \
                mock.patch("main.add_anonymous_sharing_links") as provision:
            with redirect_stdout(io.StringIO()):
                code = main.main(ARGV)

        self.assertEqual(code, 0)
        session = session_cls.from_config.return_value.__enter__.return_value
        provision.assert_called_once_with(session, "Policies")
        session_cls.from_config.return_value.__exit__.assert_called_once()

    def test_invalid_configuration_exits_1(self, _load_dotenv) -> None:
        with mock.patch.dict(os.environ, {"AZURE_CLIENT_SECRET": ""}):
            out = io.StringIO()
            with redirect_stdout(out):
                code = main.main(ARGV[:5])

        self.assertEqual(code, 1)
        self.assertIn("Invalid configuration", out.getvalue())

    def test_fatal_graph_error_exits_1(self, _load_dotenv) -> None:
        with mock.patch("main.GraphSession"), \
                mock.patch("main.add_anonymous_sharing_links",
                           side_effect=GraphApiError("Graph API error 403: Access denied", 403)):
            out = io.StringIO()
            with redirect_stdout(out):
                code = main.main(ARGV)

        self.assertEqual(code, 1)
        self.assertIn("Provisioning stopped: Graph API error 403: Access denied", out.getvalue())


if __name__ == "__main__":
    unittest.main()
