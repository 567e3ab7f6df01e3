# -*- coding: utf-8 -*-
"""
SharePoint Public Link Provisioning Package
===========================================

This package gives every file of a SharePoint document library an anonymous,
view-only sharing link and records the link URL in a ``PublicLink``
hyperlink column.

Modules:
--------
- config: Configuration and argument parsing
- auth: Microsoft authentication
- graph_api: Graph session, retry handling and remote operations
- models: Libraries, list items, field values and sharing links
- provisioner: The link provisioning workflow
- monitoring: Rate limiting monitoring and run statistics
- utils: Shared utility functions

Usage Example:
-------------
    from sharepoint_links.config import parse_config
    from sharepoint_links.graph_api import GraphSession
    from sharepoint_links.provisioner import add_anonymous_sharing_links

    cfg = parse_config()
    with GraphSession.from_config(cfg) as session:
        add_anonymous_sharing_links(session, cfg.library_name)
"""

__version__ = "1.0.0"

# Main exports for convenience
from .config import parse_config, Config
from .auth import acquire_token, AuthenticationError
from .graph_api import (
    GraphSession,
    GraphApiError,
    NotFoundError,
    ItemLockedError,
    FieldNotFoundError,
    get_library,
    add_url_column,
    iter_list_items,
    get_share_links,
    create_sharing_link,
    update_list_item,
)
from .models import (
    ColumnDefinition,
    Library,
    ListItem,
    FieldLookup,
    UrlFieldValue,
    SharingLink,
    LinkOptions,
)
from .provisioner import (
    PUBLIC_LINK_FIELD,
    add_anonymous_sharing_links,
    add_anonymous_link,
    add_link_to_field,
    ensure_public_link_column,
    is_anonymous_view_link,
)
from .monitoring import RateLimitMonitor, ProvisioningStatistics
from .utils import is_debug_metadata_enabled, is_debug_enabled

__all__ = [
    # Configuration
    'parse_config',
    'Config',
    # Authentication
    'acquire_token',
    'AuthenticationError',
    # Graph API
    'GraphSession',
    'GraphApiError',
    'NotFoundError',
    'ItemLockedError',
    'FieldNotFoundError',
    'get_library',
    'add_url_column',
    'iter_list_items',
    'get_share_links',
    'create_sharing_link',
    'update_list_item',
    # Models
    'ColumnDefinition',
    'Library',
    'ListItem',
    'FieldLookup',
    'UrlFieldValue',
    'SharingLink',
    'LinkOptions',
    # Provisioning
    'PUBLIC_LINK_FIELD',
    'add_anonymous_sharing_links',
    'add_anonymous_link',
    'add_link_to_field',
    'ensure_public_link_column',
    'is_anonymous_view_link',
    # Monitoring
    'RateLimitMonitor',
    'ProvisioningStatistics',
    # Utilities
    'is_debug_metadata_enabled',
    'is_debug_enabled',
]
