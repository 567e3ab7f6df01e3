# -*- coding: utf-8 -*-
"""
Anonymous sharing link provisioning for a SharePoint document library.

For every file in a library this module makes sure an anonymous view link
exists and stores the link URL in the ``PublicLink`` hyperlink column, which
is kept out of the default view. The column is created first when the
library does not have it yet.

Every step prints one progress line (``  . <action>... <status>``). Steps that
find their work already done report "skipped" and make no changes, so running
the provisioner twice is safe.
"""

import time

from .graph_api import (
    FieldNotFoundError,
    GraphApiError,
    ItemLockedError,
    add_url_column,
    create_sharing_link,
    get_library,
    get_share_links,
    iter_list_items,
    update_list_item,
)
from .models import LINK_TYPE_VIEW, SCOPE_ANONYMOUS, LinkOptions, UrlFieldValue
from .utils import begin_step, elapsed_ms, end_step, is_debug_enabled

PUBLIC_LINK_FIELD = "PublicLink"
PUBLIC_LINK_DISPLAY_NAME = "Public Link"
PUBLIC_LINK_DESCRIPTION = "List column for accessing the public view link for this document"


def has_hidden_link_column(library):
    return library.has_column(PUBLIC_LINK_FIELD)


def is_anonymous_view_link(link):
    """True for an anonymous, view-only link that still allows downloads."""
    if link.scope != SCOPE_ANONYMOUS:
        return False
    if link.link_type != LINK_TYPE_VIEW:
        return False
    if link.prevents_download:
        return False
    return True


def get_anonymous_view_link(session, list_item):
    """Return the first existing anonymous view link of a file, or None."""
    for link in get_share_links(session, list_item):
        if is_anonymous_view_link(link):
            return link
    return None


def has_anonymous_view_link(session, list_item):
    return get_anonymous_view_link(session, list_item) is not None


def ensure_public_link_column(session, library):
    """
    Create the ``PublicLink`` column on the library unless it already exists.

    Errors from the create request propagate to the caller.
    """
    begin_step(f"Adding [{PUBLIC_LINK_DISPLAY_NAME}] field")
    if has_hidden_link_column(library):
        end_step(f"already has a [{PUBLIC_LINK_DISPLAY_NAME}] field.")
        return False

    add_url_column(
        session,
        library,
        PUBLIC_LINK_DISPLAY_NAME,
        PUBLIC_LINK_FIELD,
        PUBLIC_LINK_DESCRIPTION,
        required=False,
        add_to_default_view=False,
    )
    session.stats.increment('columns_created')
    end_step("ok.")
    return True


def add_anonymous_link(session, list_item, link_options):
    """
    Make sure a file has an anonymous view link.

    An existing matching link is returned as is. Otherwise a new link is
    requested; if that request fails the error is printed and None is
    returned.

    Args:
        session (GraphSession): Open Graph session
        list_item (ListItem): A file item (not a folder)
        link_options (LinkOptions): Options for a newly created link

    Returns:
        SharingLink: The existing or newly created link
        None: If the link could not be created
    """
    begin_step(f"Creating anonymous view link for {list_item.display_name}")

    existing_link = get_anonymous_view_link(session, list_item)
    if existing_link is not None:
        session.stats.increment('links_reused')
        end_step("skipped, link already exists.")
        return existing_link

    link = None
    try:
        link = create_sharing_link(session, list_item, link_options)
        session.stats.increment('links_created')
        end_step("ok.")
    except Exception as e:
        session.stats.increment('link_failures')
        end_step("failed.")
        print(str(e))

    return link


def add_link_to_field(session, list_item, internal_name, link):
    """
    Store a link URL in a hyperlink field of a list item and save the item.

    Nothing is written when the field already holds the URL. A missing column
    or a file checked out by someone else is reported and skipped so the
    next item can still be processed.
    """
    begin_step(f"Adding link to [{internal_name}]")

    existing = list_item.get_field(internal_name).url_value()
    if existing is not None and existing.url == link.web_url:
        session.stats.increment('fields_skipped')
        end_step("skipped, link already exists")
        return

    if not list_item.set_field(internal_name, UrlFieldValue(link.web_url)):
        session.stats.increment('fields_missing')
        end_step(f"failed, no [{internal_name}] field exists.")
        return

    try:
        update_list_item(session, list_item)
    except ItemLockedError:
        session.stats.increment('fields_locked')
        end_step("failed, file is likely checked out by another user")
        return
    except FieldNotFoundError:
        session.stats.increment('fields_missing')
        end_step(f"failed, no [{internal_name}] field exists.")
        return
    except GraphApiError as e:
        session.stats.increment('fields_failed')
        end_step(f"failed, {e}")
        return
    finally:
        list_item.pending_changes.clear()

    session.stats.increment('fields_written')
    end_step("ok.")


def add_anonymous_sharing_links(session, library_name):
    """
    Give every file of a library an anonymous view link and record it.

    Process:
        1. Fetch the library by display name (stop if missing)
        2. Ensure the PublicLink column exists
        3. For each file: ensure an anonymous view link, then write its URL
           into PublicLink. Folders are skipped.

    The run stops at the first file whose link could not be created.

    Args:
        session (GraphSession): Open Graph session
        library_name (str): Display name of the document library

    Returns:
        bool: True if every file was visited, False if the run stopped early
    """
    print(f"  . Adding anonymous sharing links to all files in {library_name}")
    start = time.perf_counter()

    begin_step(f"Fetch list ({library_name})")
    library = get_library(session, library_name)
    if library is None:
        end_step("failed, no list found.")
        return False
    end_step("ok.")

    ensure_public_link_column(session, library)

    share_link_options = LinkOptions(link_type=LINK_TYPE_VIEW)

    for list_item in iter_list_items(session, library):
        begin_step(f"Current file: {list_item.display_name}")

        if not list_item.is_file:
            session.stats.increment('folders_skipped')
            end_step("is a folder, skipping file.")
            continue

        session.stats.increment('files_seen')
        end_step("ok.")

        link = add_anonymous_link(session, list_item, share_link_options)
        if link is None:
            # TODO: skip just this file once nothing depends on the run stopping here
            print("  ! Unable to get link from link creation")
            return False

        add_link_to_field(session, list_item, PUBLIC_LINK_FIELD, link)

    print(f"  . Process complete ({elapsed_ms(start)}ms)")

    if is_debug_enabled():
        session.stats.print_summary()
    return True
