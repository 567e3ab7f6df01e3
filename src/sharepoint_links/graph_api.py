# -*- coding: utf-8 -*-
"""
Microsoft Graph API operations for SharePoint link provisioning.

This module provides the Graph session, request retry logic, and the remote
operations the provisioner needs: list lookup, column creation, item
enumeration, sharing link lookup/creation and list item field updates.
"""

import time
import urllib.parse

import requests

from .auth import acquire_token
from .models import (
    ColumnDefinition,
    Library,
    ListItem,
    SharingLink,
    ODATA_NEXT_LINK,
    ODATA_VALUE,
)
from .monitoring import RateLimitMonitor, ProvisioningStatistics
from .utils import is_debug_enabled, is_debug_metadata_enabled

# Refresh the token this many seconds before Azure AD says it expires
TOKEN_EXPIRY_MARGIN = 300

# Graph error codes reported for checked-out or locked files
LOCK_ERROR_CODES = ('resourceLocked', 'lockMismatch', 'itemCheckedOut')


class GraphApiError(Exception):
    """A Graph API request returned an error response."""

    def __init__(self, message, status_code=None, code=None, url=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.url = url


class NotFoundError(GraphApiError):
    """The requested resource does not exist (HTTP 404)."""


class ItemLockedError(GraphApiError):
    """The item is locked or checked out by another user (HTTP 423, or 409 with a lock code)."""


class FieldNotFoundError(GraphApiError):
    """The list item update referenced a column the list does not have."""


def raise_for_graph_error(response):
    """
    Convert an error response into the matching GraphApiError subclass.

    Args:
        response (requests.Response): Response from a Graph API call

    Raises:
        GraphApiError: If the response status is 400 or above
    """
    if response.status_code < 400:
        return

    code = None
    message = response.text[:500] if response.text else response.reason
    try:
        error = response.json().get('error', {})
        code = error.get('code')
        message = error.get('message') or message
    except ValueError:
        pass

    status = response.status_code
    detail = f"Graph API error {status}: {message}"
    message_lower = (message or '').lower()

    if status == 404:
        raise NotFoundError(detail, status, code, response.url)
    if status == 423 or (status == 409 and (code in LOCK_ERROR_CODES or
                                            'checked out' in message_lower or
                                            'locked' in message_lower)):
        raise ItemLockedError(detail, status, code, response.url)
    if status == 400 and 'not recognized' in message_lower and 'field' in message_lower:
        raise FieldNotFoundError(detail, status, code, response.url)
    raise GraphApiError(detail, status, code, response.url)


def make_graph_request_with_retry(url, headers, method='GET', json_data=None, params=None,
                                  max_retries=3, http=None, monitor=None):
    """
    Make a Graph API request with retry handling for throttling and transient errors.

    Retry Logic:
        - 429 (Rate Limit): Waits for Retry-After header duration
        - 5xx (Server Error): Exponential backoff (1s, 3s, 7s)
        - Timeouts and connection errors: Exponential backoff
        - 4xx (Client Error, including 409/423 locks): No retry

    Args:
        url (str): The Graph API endpoint URL
        headers (dict): Request headers including Authorization
        method (str): HTTP method ('GET', 'POST', 'PATCH', ...)
        json_data (dict): JSON body for POST/PATCH requests
        params (dict): URL parameters
        max_retries (int): Maximum number of retry attempts (default: 3)
        http: Object with a requests-compatible request() method (default: requests module)
        monitor (RateLimitMonitor): Receives every response for throttling analysis

    Returns:
        requests.Response: The HTTP response object

    Raises:
        GraphApiError: If all retries are exhausted for 429 or 5xx errors
        requests.exceptions.RequestException: If the network keeps failing
    """
    http = http if http is not None else requests
    method = method.upper()

    for attempt in range(max_retries + 1):
        try:
            if monitor is not None and monitor.should_slow_down() and attempt > 0:
                delay = 2 ** attempt
                if is_debug_enabled():
                    print(f"[⚠] Proactive rate limiting delay: {delay}s")
                time.sleep(delay)

            response = http.request(method, url, headers=headers, json=json_data, params=params)

            if monitor is not None:
                monitor.analyze_response_headers(response, method=method, url=url)

            if is_debug_enabled():
                print(f"\n[DEBUG] {method} {url[:150]} -> {response.status_code}")

            if response.status_code == 429:
                retry_after = response.headers.get('Retry-After', '60')
                try:
                    wait_seconds = int(retry_after)
                except ValueError:
                    wait_seconds = 60

                if attempt < max_retries:
                    if is_debug_enabled():
                        print(f"[!] Rate limited (429). Waiting {wait_seconds} seconds before retry {attempt + 1}/{max_retries}...")
                    time.sleep(wait_seconds)
                    continue
                raise GraphApiError(f"Graph API rate limiting: 429 after {max_retries} retries",
                                    429, 'tooManyRequests', url)

            if 500 <= response.status_code < 600:
                if attempt < max_retries:
                    wait_seconds = (2 ** attempt) + 1  # 2, 3, 5 seconds
                    if is_debug_enabled():
                        print(f"[!] Server error ({response.status_code}). Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                    if is_debug_metadata_enabled():
                        print(f"[DEBUG] Server error response: {response.text[:300]}")
                    time.sleep(wait_seconds)
                    continue
                raise GraphApiError(f"Graph API server error: {response.status_code} after {max_retries} retries",
                                    response.status_code, None, url)

            return response

        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            # SSL and proxy errors are ConnectionError subclasses but never transient
            if isinstance(e, (requests.exceptions.SSLError, requests.exceptions.ProxyError)):
                print(f"[!] Connection to Microsoft Graph refused: {str(e)[:300]}")
                print("[!] Check proxy settings (HTTP_PROXY/HTTPS_PROXY) and the system certificate store")
                raise
            if attempt < max_retries:
                wait_seconds = (2 ** attempt) + 1
                print(f"[!] Network error ({str(e)[:100]}). Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                time.sleep(wait_seconds)
                continue
            print(f"[!] Network errors exhausted all retries: {str(e)[:200]}")
            raise

    # Should never reach here, but just in case
    raise GraphApiError("Unexpected error in make_graph_request_with_retry")


class GraphSession:
    """
    Authenticated connection to one SharePoint site through Microsoft Graph.

    Use as a context manager; the underlying HTTP session is closed when the
    block exits, however it exits:

        with GraphSession(cfg.tenant_id, ...) as session:
            add_anonymous_sharing_links(session, "Documents")
    """

    def __init__(self, tenant_id, client_id, client_secret, sharepoint_host_name, site_name,
                 login_endpoint='login.microsoftonline.com', graph_endpoint='graph.microsoft.com',
                 max_retry=3, http=None, token_provider=acquire_token):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.sharepoint_host_name = sharepoint_host_name
        self.site_name = site_name
        self.login_endpoint = login_endpoint
        self.graph_endpoint = graph_endpoint
        self.max_retry = max_retry
        self.http = http
        self.token_provider = token_provider

        self.rate_monitor = RateLimitMonitor()
        self.stats = ProvisioningStatistics()
        self._owns_http = http is None
        self._token = None
        self._token_expires_at = 0.0
        self._site_id = None

    @classmethod
    def from_config(cls, config):
        return cls(
            config.tenant_id,
            config.client_id,
            config.client_secret,
            config.sharepoint_host_name,
            config.site_name,
            login_endpoint=config.login_endpoint,
            graph_endpoint=config.graph_endpoint,
            max_retry=config.max_retry,
        )

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self):
        if self.http is None:
            self.http = requests.Session()
            self._owns_http = True
        return self

    def close(self):
        if self._owns_http and self.http is not None:
            self.http.close()
            self.http = None
        self._token = None

    @property
    def base_url(self):
        return f"https://{self.graph_endpoint}/v1.0"

    def _access_token(self):
        if self._token is None or time.time() >= self._token_expires_at:
            token = self.token_provider(self.tenant_id, self.client_id, self.client_secret,
                                        self.login_endpoint, self.graph_endpoint)
            self._token = token['access_token']
            expires_in = int(token.get('expires_in', 3600))
            self._token_expires_at = time.time() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    def headers(self):
        return {
            'Authorization': f"Bearer {self._access_token()}",
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        }

    def url(self, path):
        """Absolute Graph URL for a path such as ``/sites/{id}/lists``."""
        if path.startswith('https://'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, json_data=None, params=None):
        """
        Send a request and return the decoded JSON body.

        Raises:
            GraphApiError: For any error response (see raise_for_graph_error)
        """
        if self.http is None:
            self.open()
        response = make_graph_request_with_retry(
            self.url(path),
            self.headers(),
            method=method,
            json_data=json_data,
            params=params,
            max_retries=self.max_retry,
            http=self.http,
            monitor=self.rate_monitor,
        )
        raise_for_graph_error(response)
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @property
    def site_id(self):
        if self._site_id is None:
            self._site_id = get_site_id(self)
        return self._site_id


def get_site_id(session):
    """
    Resolve the Graph site ID for the session's site.

    Returns:
        str: Composite site ID (``host,site-guid,web-guid``)

    Raises:
        GraphApiError: If the site cannot be read
    """
    site_path = urllib.parse.quote(f"/sites/{session.site_name}")
    site = session.request('GET', f"/sites/{session.sharepoint_host_name}:{site_path}")
    if is_debug_enabled():
        print(f"[DEBUG] Site ID: {site['id']}")
    return site['id']


def iter_pages(session, path, params=None):
    """
    Yield the entries of a paged Graph collection, one page at a time.

    Pages are requested on demand by following ``@odata.nextLink``. Each
    call starts again from the first page.
    """
    url = path
    while url:
        page = session.request('GET', url, params=params)
        for entry in page.get(ODATA_VALUE, []):
            yield entry
        url = page.get(ODATA_NEXT_LINK)
        # nextLink already carries the query string
        params = None
        if url and is_debug_enabled():
            print(f"[DEBUG] Following nextLink: {url[:150]}")


def get_library(session, display_name):
    """
    Fetch a document library by display name, with its columns expanded.

    Args:
        session (GraphSession): Open Graph session
        display_name (str): Library display name (e.g. "Documents")

    Returns:
        Library: The library with its column definitions
        None: If no list on the site has this display name
    """
    site_id = session.site_id
    list_id = None
    for lst in iter_pages(session, f"/sites/{site_id}/lists", params={'$select': 'id,name,displayName'}):
        if lst.get('displayName') == display_name:
            list_id = lst['id']
            break

    if list_id is None:
        return None

    try:
        data = session.request('GET', f"/sites/{site_id}/lists/{list_id}", params={'$expand': 'columns'})
    except NotFoundError:
        return None

    library = Library.from_graph(data, site_id)
    if is_debug_metadata_enabled():
        print(f"\n[DEBUG] Library columns: {sorted(library.column_names)}")
    return library


def add_url_column(session, library, display_name, internal_name, description,
                   required=False, add_to_default_view=False):
    """
    Create a hyperlink column on a library.

    The column is created with the hyperlink (not picture) display format.
    Graph never adds columns created through /columns to the default view,
    so ``add_to_default_view`` can only be False.

    Returns:
        ColumnDefinition: The created column, also appended to library.columns

    Raises:
        GraphApiError: If Graph rejects the column
        ValueError: If add_to_default_view is True
    """
    if add_to_default_view:
        raise ValueError("Graph cannot add a new column to the default view")

    column_definition = {
        "name": internal_name,
        "displayName": display_name,
        "description": description,
        "enforceUniqueValues": False,
        "hidden": False,
        "indexed": False,
        "readOnly": False,
        "required": required,
        "hyperlinkOrPicture": {
            "isPicture": False
        }
    }

    if is_debug_metadata_enabled():
        print(f"\n[DEBUG] Column definition: {column_definition}")

    data = session.request('POST', f"/sites/{library.site_id}/lists/{library.id}/columns",
                           json_data=column_definition)
    column = ColumnDefinition.from_graph(data)
    library.columns.append(column)
    return column


def iter_list_items(session, library):
    """
    Lazily enumerate the items of a library, page by page.

    Each item carries its fields and drive item so it can be classified as a
    file or folder and shared without further lookups.

    Yields:
        ListItem: One entry per file or folder, in server order
    """
    schema = library.column_names
    path = f"/sites/{library.site_id}/lists/{library.id}/items"
    for entry in iter_pages(session, path, params={'$expand': 'fields,driveItem'}):
        yield ListItem.from_graph(entry, schema=schema, list_id=library.id)


def _drive_item_path(item):
    if not item.drive_id or not item.drive_item_id:
        raise GraphApiError(f"List item {item.id} has no drive item to share")
    return f"/drives/{item.drive_id}/items/{item.drive_item_id}"


def get_share_links(session, item):
    """
    List the sharing links already granted on a file.

    Permissions without a link (direct grants, inherited owners) are left out.

    Returns:
        list: SharingLink objects in the order Graph reports them
    """
    links = []
    for permission in iter_pages(session, f"{_drive_item_path(item)}/permissions"):
        link = SharingLink.from_permission(permission)
        if link is not None:
            links.append(link)
    if is_debug_metadata_enabled():
        print(f"\n[DEBUG] Sharing links for {item.display_name}: {links}")
    return links


def create_sharing_link(session, item, link_options):
    """
    Ask Graph to create a sharing link for a file.

    Returns:
        SharingLink: The link of the returned permission

    Raises:
        GraphApiError: If the link cannot be created (sharing disabled, no access, ...)
    """
    permission = session.request('POST', f"{_drive_item_path(item)}/createLink",
                                 json_data=link_options.to_request())
    link = SharingLink.from_permission(permission)
    if link is None:
        raise GraphApiError(f"createLink returned no link for {item.display_name}")
    return link


def update_list_item(session, item):
    """
    Persist the staged field changes of a list item.

    Raises:
        ItemLockedError: If the file is checked out or locked by another user
        FieldNotFoundError: If a staged field is not a column of the list
        GraphApiError: For any other error response
    """
    changes = item.changes_as_json()
    if not changes:
        return
    if is_debug_metadata_enabled():
        print(f"\n[DEBUG] Updating item {item.id} fields: {changes}")
    session.request('PATCH', f"/sites/{session.site_id}/lists/{item.list_id}/items/{item.id}/fields",
                    json_data=changes)
    item.commit_changes()
