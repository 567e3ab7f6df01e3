# -*- coding: utf-8 -*-
"""
Rate limiting monitoring and run statistics for SharePoint link provisioning.

Both trackers are owned by a single GraphSession, so every run starts from
zero and nothing is shared between sessions.
"""

from .utils import is_debug_metadata_enabled


class RateLimitMonitor:
    """
    Monitor and track Graph API rate limiting metrics.

    Analyzes response headers to detect throttling:
    - x-ms-throttle-limit-percentage: Utilization percentage (0.8-1.8 range)
    - x-ms-resource-unit: Resource units consumed per request
    - x-ms-throttle-scope: Throttling scope details

    Headers only appear when >80% of limit consumed.
    """

    def __init__(self):
        self.metrics = {
            'total_requests': 0,
            'throttled_requests': 0,
            'max_throttle_percentage': 0.0,
            'resource_units_consumed': 0,
            'alerts_triggered': 0
        }
        self.throttle_threshold = 0.8

        # Track API operation types
        self.operations = {
            'site_lookup': 0,       # GET /sites/{host}:/sites/{name}
            'list_lookup': 0,       # GET /lists, /lists/{id}?$expand=columns
            'column_create': 0,     # POST /columns
            'item_page': 0,         # GET /items (one per page)
            'link_lookup': 0,       # GET /permissions
            'link_create': 0,       # POST /createLink
            'field_update': 0,      # PATCH /items/{id}/fields
            'other': 0
        }

    def analyze_response_headers(self, response, method=None, url=None):
        """
        Analyze Graph API response headers for rate limiting info.

        Args:
            response: requests.Response object from Graph API call
            method (str): HTTP method
            url (str): Request URL for operation type detection

        Returns:
            dict: Rate limiting information extracted from headers
        """
        self.metrics['total_requests'] += 1

        if url and method:
            self.operations[categorize_operation(url, method.upper())] += 1

        headers = response.headers
        throttle_percentage = headers.get('x-ms-throttle-limit-percentage')
        resource_unit = headers.get('x-ms-resource-unit')
        throttle_scope = headers.get('x-ms-throttle-scope')

        if throttle_percentage:
            percentage = float(throttle_percentage)
            self.metrics['max_throttle_percentage'] = max(
                self.metrics['max_throttle_percentage'],
                percentage
            )

            if percentage >= 1.0:
                self.metrics['throttled_requests'] += 1
                print(f"[!] THROTTLING DETECTED: {percentage:.1%} of limit used")
                if throttle_scope:
                    print(f"[!] Throttle scope: {throttle_scope}")
            elif percentage >= self.throttle_threshold:
                self.metrics['alerts_triggered'] += 1
                print(f"[ ] Rate limit warning: {percentage:.1%} of limit used")

        if resource_unit:
            units = int(resource_unit)
            self.metrics['resource_units_consumed'] += units
            if is_debug_metadata_enabled():
                print(f"[=] Resource units consumed: {units}")

        return {
            'throttle_percentage': float(throttle_percentage) if throttle_percentage else None,
            'resource_unit': int(resource_unit) if resource_unit else None,
            'throttle_scope': throttle_scope,
            'is_throttled': response.status_code == 429
        }

    def should_slow_down(self):
        """True once any response reported more than 90% of the limit used."""
        return self.metrics['max_throttle_percentage'] >= 0.9

    def print_summary(self):
        """Print the request and throttling statistics collected so far."""
        print("\n" + "="*60)
        print("GRAPH API RATE LIMITING SUMMARY")
        print("="*60)
        print(f"   - Total API Requests:       {self.metrics['total_requests']:>6}")
        print(f"   - Throttled Requests:       {self.metrics['throttled_requests']:>6}")
        print(f"   - Max Throttle %:           {self.metrics['max_throttle_percentage']:>6.1%}")
        print(f"   - Resource Units Used:      {self.metrics['resource_units_consumed']:>6}")

        if any(self.operations.values()):
            print(f"\n[OPS] Operation Types:")
            for op_type, count in self.operations.items():
                if count > 0:
                    op_name = op_type.replace('_', ' ').title()
                    print(f"   - {f'{op_name}:':<27} {count:>6}")

        if self.metrics['max_throttle_percentage'] >= 1.0:
            print(f"\n[!] WARNING: Hit throttling limits during execution")
        elif self.metrics['max_throttle_percentage'] >= 0.8:
            print(f"\n[ ] CAUTION: Approached throttling limits")
        else:
            print(f"\n[OK] Stayed within throttling limits")
        print("="*60)


def categorize_operation(url, method):
    """
    Categorize a Graph API request by URL pattern and HTTP method.

    Args:
        url (str): Request URL
        method (str): Upper-case HTTP method

    Returns:
        str: Key into RateLimitMonitor.operations
    """
    url_lower = url.lower()

    if method == 'POST' and '/createlink' in url_lower:
        return 'link_create'
    if method == 'GET' and '/permissions' in url_lower:
        return 'link_lookup'
    if method == 'PATCH' and '/fields' in url_lower:
        return 'field_update'
    if method == 'POST' and '/columns' in url_lower:
        return 'column_create'
    if method == 'GET' and '/items' in url_lower:
        return 'item_page'
    if method == 'GET' and '/lists' in url_lower:
        return 'list_lookup'
    if method == 'GET' and '/sites/' in url_lower:
        return 'site_lookup'
    return 'other'


class ProvisioningStatistics:
    """Track what a provisioning run did to the library"""

    def __init__(self):
        self.stats = {
            'files_seen': 0,
            'folders_skipped': 0,
            'columns_created': 0,
            'links_created': 0,
            'links_reused': 0,
            'link_failures': 0,
            'fields_written': 0,
            'fields_skipped': 0,
            'fields_missing': 0,
            'fields_locked': 0,
            'fields_failed': 0
        }

    def increment(self, key, amount=1):
        self.stats[key] += amount

    def print_summary(self):
        print(f"[STATS] Provisioning Statistics:")
        print(f"   - Files processed:          {self.stats['files_seen']:>6}")
        print(f"   - Folders skipped:          {self.stats['folders_skipped']:>6}")
        print(f"   - Columns created:          {self.stats['columns_created']:>6}")
        print(f"   - Links created:            {self.stats['links_created']:>6}")
        print(f"   - Links reused:             {self.stats['links_reused']:>6}")
        if self.stats['link_failures'] > 0:
            print(f"   - Link failures:            {self.stats['link_failures']:>6}")
        print(f"   - Fields written:           {self.stats['fields_written']:>6}")
        print(f"   - Fields unchanged:         {self.stats['fields_skipped']:>6}")

        failed = self.stats['fields_missing'] + self.stats['fields_locked'] + self.stats['fields_failed']
        if failed > 0:
            print(f"\n[!] Field update failures:")
            print(f"   - Column missing:           {self.stats['fields_missing']:>6}")
            print(f"   - Checked out / locked:     {self.stats['fields_locked']:>6}")
            print(f"   - Other service errors:     {self.stats['fields_failed']:>6}")
