# -*- coding: utf-8 -*-
"""
Configuration management for SharePoint link provisioning.

Values come from positional command-line arguments; any argument that is
missing or empty falls back to an environment variable (a .env file in the
working directory is loaded first).
"""

import os
import sys

from dotenv import load_dotenv

DEFAULT_LIBRARY_NAME = "Baseline Library"


def _arg_or_env(argv, position, env_name, default=""):
    if len(argv) > position and argv[position]:
        return argv[position]
    return os.environ.get(env_name) or default


class Config:
    """Configuration for SharePoint link provisioning"""

    def __init__(self, argv=None):
        """
        Parse command-line arguments and initialize configuration.

        Arguments are read in the following order (environment fallback in brackets):
        1. site_name [SHAREPOINT_SITE_NAME] - SharePoint site name
        2. sharepoint_host_name [SHAREPOINT_HOST] - SharePoint domain
        3. tenant_id [AZURE_TENANT_ID] - Azure AD tenant ID
        4. client_id [AZURE_CLIENT_ID] - App registration client ID
        5. client_secret [AZURE_CLIENT_SECRET] - App registration client secret
        6. library_name [SHAREPOINT_LIBRARY] - Document library display name (default: Baseline Library)
        7. max_retry [MAX_RETRY] - Transport retry attempts for throttling (default: 3)
        8. login_endpoint [LOGIN_ENDPOINT] - Azure AD endpoint (default: login.microsoftonline.com)
        9. graph_endpoint [GRAPH_ENDPOINT] - Graph API endpoint (default: graph.microsoft.com)
        10. debug [DEBUG] - Enable general debug output (default: False)
        11. debug_metadata [DEBUG_METADATA] - Enable Graph payload debug output (default: False)
        """
        if argv is None:
            argv = sys.argv

        # Required values
        self.site_name = _arg_or_env(argv, 1, 'SHAREPOINT_SITE_NAME')
        self.sharepoint_host_name = _arg_or_env(argv, 2, 'SHAREPOINT_HOST')
        self.tenant_id = _arg_or_env(argv, 3, 'AZURE_TENANT_ID')
        self.client_id = _arg_or_env(argv, 4, 'AZURE_CLIENT_ID')
        self.client_secret = _arg_or_env(argv, 5, 'AZURE_CLIENT_SECRET')
        self.library_name = _arg_or_env(argv, 6, 'SHAREPOINT_LIBRARY', DEFAULT_LIBRARY_NAME)

        # Optional values with defaults
        self.max_retry = int(_arg_or_env(argv, 7, 'MAX_RETRY', '3'))
        self.login_endpoint = _arg_or_env(argv, 8, 'LOGIN_ENDPOINT', 'login.microsoftonline.com')
        self.graph_endpoint = _arg_or_env(argv, 9, 'GRAPH_ENDPOINT', 'graph.microsoft.com')
        self.debug = _arg_or_env(argv, 10, 'DEBUG', 'false').lower() == 'true'
        self.debug_metadata = _arg_or_env(argv, 11, 'DEBUG_METADATA', 'false').lower() == 'true'

        # Derived values
        self.tenant_url = f'https://{self.sharepoint_host_name}/sites/{self.site_name}'

    def validate(self):
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.site_name:
            raise ValueError("site_name cannot be empty")
        if not self.sharepoint_host_name:
            raise ValueError("sharepoint_host_name cannot be empty")
        if not self.tenant_id:
            raise ValueError("tenant_id cannot be empty")
        if not self.client_id:
            raise ValueError("client_id cannot be empty")
        if not self.client_secret:
            raise ValueError("client_secret cannot be empty")
        if not self.library_name:
            raise ValueError("library_name cannot be empty")
        if self.max_retry < 0:
            raise ValueError("max_retry must be non-negative")


def parse_config(argv=None):
    """
    Parse configuration from command-line arguments and the environment.

    Returns:
        Config: Configured Config object

    Raises:
        ValueError: If configuration is invalid
    """
    load_dotenv()
    config = Config(argv)
    config.validate()
    return config
