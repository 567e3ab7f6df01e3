import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from sharepoint_links.auth import AuthenticationError, acquire_token


@mock.patch("sharepoint_links.auth.msal.ConfidentialClientApplication")
class TestAcquireToken(unittest.TestCase):
    def test_returns_token_for_graph_scope(self, app_cls) -> None:
        app_cls.return_value.acquire_token_for_client.return_value = {
            "access_token": "abc", "token_type": "Bearer", "expires_in": 3599,
        }

        token = acquire_token("tenant", "client", "secret", "login.microsoftonline.com", "graph.microsoft.com")

        self.assertEqual(token["access_token"], "abc")
        app_cls.assert_called_once_with(
            authority="https://login.microsoftonline.com/tenant",
            client_id="client",
            client_credential="secret",
        )
        app_cls.return_value.acquire_token_for_client.assert_called_once_with(
            scopes=["https://graph.microsoft.com/.default"])

    def test_invalid_client_raises(self, app_cls) -> None:
        app_cls.return_value.acquire_token_for_client.return_value = {
            "error": "invalid_client", "error_description": "AADSTS7000215: Invalid client secret",
            "error_codes": [7000215],
        }

        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(AuthenticationError) as ctx:
                acquire_token("tenant", "client", "bad", "login.microsoftonline.com", "graph.microsoft.com")

        self.assertEqual(ctx.exception.error, "invalid_client")
        self.assertIn("Invalid client credentials", out.getvalue())

    def test_unknown_error_raises(self, app_cls) -> None:
        app_cls.return_value.acquire_token_for_client.return_value = {"error": "temporarily_unavailable"}

        with redirect_stdout(io.StringIO()):
            with self.assertRaises(AuthenticationError):
                acquire_token("tenant", "client", "secret", "login.microsoftonline.com", "graph.microsoft.com")


if __name__ == "__main__":
    unittest.main()
