# -*- coding: utf-8 -*-
"""
Microsoft authentication module for SharePoint link provisioning.

This module handles Azure AD authentication using MSAL (Microsoft Authentication Library).
"""

import msal


class AuthenticationError(Exception):
    """Raised when Azure AD refuses to issue a Graph token."""

    def __init__(self, message, error=None, error_codes=None):
        super().__init__(message)
        self.error = error
        self.error_codes = error_codes or []


def acquire_token(tenant_id, client_id, client_secret, login_endpoint, graph_endpoint):
    """
    Acquire an authentication token from Azure Active Directory using MSAL.

    Uses the OAuth 2.0 client credentials flow (no user interaction).

    Args:
        tenant_id (str): Azure AD tenant ID (GUID format)
        client_id (str): Application (client) ID from Azure AD app registration
        client_secret (str): Client secret value from Azure AD app registration
        login_endpoint (str): Azure AD authentication endpoint (e.g., 'login.microsoftonline.com')
        graph_endpoint (str): Microsoft Graph API endpoint (e.g., 'graph.microsoft.com')

    Returns:
        dict: Token dictionary containing 'access_token', 'token_type' and 'expires_in'

    Raises:
        AuthenticationError: If authentication fails

    Note:
        The app registration needs Sites.Manage.All (column creation) and
        Files.ReadWrite.All or Sites.ReadWrite.All (sharing links, field updates).
    """
    authority_url = f'https://{login_endpoint}/{tenant_id}'

    app = msal.ConfidentialClientApplication(
        authority=authority_url,
        client_id=client_id,
        client_credential=client_secret
    )

    # '/.default' means "all application permissions granted to this app"
    token = app.acquire_token_for_client(scopes=[f"https://{graph_endpoint}/.default"])

    # MSAL returns errors in the token dict, not as exceptions
    if "access_token" not in token:
        error_msg = token.get("error", "unknown_error")
        error_desc = token.get("error_description", "No description provided")
        error_codes = token.get("error_codes", [])

        print("[!] ========================================")
        print("[!] AUTHENTICATION FAILED")
        print("[!] ========================================")

        if "invalid_client" in error_msg or 7000215 in error_codes:
            print("[!] Error: Invalid client credentials")
            print("[!] ")
            print("[!] Troubleshooting steps:")
            print("[!]   1. Verify AZURE_CLIENT_ID matches the app registration")
            print("[!]   2. Verify AZURE_CLIENT_SECRET has no trailing spaces and has not expired")
            print("[!]   3. Ensure you're using the correct AZURE_TENANT_ID")
            print(f"[!] Technical details: {error_desc}")
            raise AuthenticationError(f"Authentication failed: Invalid client credentials - {error_desc}",
                                      error_msg, error_codes)

        elif "unauthorized_client" in error_msg or 700016 in error_codes:
            print("[!] Error: Application not authorized")
            print("[!] ")
            print("[!] Troubleshooting steps:")
            print("[!]   1. Go to Azure AD portal → App registrations → Your app → API permissions")
            print("[!]   2. Add Microsoft Graph application permissions:")
            print("[!]      - Sites.Manage.All (create the Public Link column)")
            print("[!]      - Files.ReadWrite.All (create sharing links)")
            print("[!]   3. Click 'Grant admin consent'")
            print(f"[!] Technical details: {error_desc}")
            raise AuthenticationError(f"Authentication failed: Application not authorized - {error_desc}",
                                      error_msg, error_codes)

        elif "invalid_scope" in error_msg or "AADSTS70011" in error_desc:
            print("[!] Error: Invalid scope requested")
            print(f"[!] Verify Graph API endpoint is correct: {graph_endpoint}")
            print("[!]   Commercial cloud: graph.microsoft.com, GovCloud: graph.microsoft.us")
            print(f"[!] Technical details: {error_desc}")
            raise AuthenticationError(f"Authentication failed: Invalid scope - {error_desc}",
                                      error_msg, error_codes)

        else:
            print(f"[!] Error: {error_msg}")
            print(f"[!] Login endpoint: {login_endpoint}")
            print(f"[!] Technical details: {error_desc}")
            if error_codes:
                print(f"[!] Error codes: {error_codes}")
            print("[!] ========================================")
            raise AuthenticationError(f"Authentication failed: {error_msg} - {error_desc}",
                                      error_msg, error_codes)

    return token
