#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SharePoint Public Link Provisioning Script
==========================================

PURPOSE:
    Gives every file in a SharePoint document library an anonymous, view-only
    sharing link and writes the link URL into the library's
    "Public Link" column (internal name PublicLink), creating the column when
    it is missing. Safe to run repeatedly: existing links, columns and field
    values are reused.

SYNOPSIS:
    python main.py <site_name> <sharepoint_host> <tenant_id> <client_id>
                   <client_secret> [library_name] [max_retry]
                   [login_endpoint] [graph_endpoint] [debug] [debug_metadata]

    Every argument may be omitted (or passed as "") in favour of its
    environment variable, which may also come from a .env file:

        SHAREPOINT_SITE_NAME, SHAREPOINT_HOST, AZURE_TENANT_ID,
        AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, SHAREPOINT_LIBRARY,
        MAX_RETRY, LOGIN_ENDPOINT, GRAPH_ENDPOINT, DEBUG, DEBUG_METADATA

EXAMPLE:
    python main.py TeamSite company.sharepoint.com <tenant> <client> <secret> "Baseline Library"

EXIT CODES:
    0  Run finished (also when the library is missing or a link could not be created)
    1  Configuration, authentication or Graph API error ended the run
"""

import os
import sys

from sharepoint_links.config import parse_config
from sharepoint_links.graph_api import GraphSession
from sharepoint_links.provisioner import add_anonymous_sharing_links
from sharepoint_links.utils import is_debug_enabled


def main(argv=None):
    """
    Parse configuration, open a Graph session and provision the library.

    Returns:
        int: Process exit code
    """
    try:
        config = parse_config(argv)
    except ValueError as e:
        print(f"[Error] Invalid configuration: {e}")
        return 1

    # Set environment variables for debug flags (enables debug checks in utils.py)
    if config.debug:
        os.environ['DEBUG'] = 'true'
    if config.debug_metadata:
        os.environ['DEBUG_METADATA'] = 'true'

    print(f"[*] Site: {config.tenant_url}")
    print(f"[*] Library: {config.library_name}")

    try:
        with GraphSession.from_config(config) as session:
            add_anonymous_sharing_links(session, config.library_name)
            if is_debug_enabled():
                session.rate_monitor.print_summary()
    except Exception as e:
        print(f"\n[Error] Provisioning stopped: {e}")
        if is_debug_enabled():
            import traceback
            print(f"[DEBUG] Traceback: {traceback.format_exc()}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
