import io
import unittest
from contextlib import redirect_stdout

from sharepoint_links.monitoring import ProvisioningStatistics, RateLimitMonitor, categorize_operation


class FakeResponse:
    def __init__(self, headers=None, status_code=200):
        self.headers = headers or {}
        self.status_code = status_code


class TestCategorizeOperation(unittest.TestCase):
    def test_categories(self) -> None:
        base = "https://graph.microsoft.com/v1.0"
        self.assertEqual(categorize_operation(f"{base}/drives/d/items/i/createLink", "POST"), "link_create")
        self.assertEqual(categorize_operation(f"{base}/drives/d/items/i/permissions", "GET"), "link_lookup")
        self.assertEqual(categorize_operation(f"{base}/sites/s/lists/l/items/1/fields", "PATCH"), "field_update")
        self.assertEqual(categorize_operation(f"{base}/sites/s/lists/l/columns", "POST"), "column_create")
        self.assertEqual(categorize_operation(f"{base}/sites/s/lists/l/items", "GET"), "item_page")
        self.assertEqual(categorize_operation(f"{base}/sites/s/lists", "GET"), "list_lookup")
        self.assertEqual(categorize_operation(f"{base}/sites/host:/sites/team", "GET"), "site_lookup")
        self.assertEqual(categorize_operation(f"{base}/me", "DELETE"), "other")


class TestRateLimitMonitor(unittest.TestCase):
    def test_tracks_throttle_headers(self) -> None:
        monitor = RateLimitMonitor()

        with redirect_stdout(io.StringIO()):
            monitor.analyze_response_headers(FakeResponse({"x-ms-throttle-limit-percentage": "0.85"}),
                                             "GET", "https://g/v1.0/sites/s/lists")
            info = monitor.analyze_response_headers(FakeResponse({"x-ms-throttle-limit-percentage": "1.2",
                                                                  "x-ms-resource-unit": "2"}, 429))

        self.assertTrue(info["is_throttled"])
        self.assertEqual(monitor.metrics["total_requests"], 2)
        self.assertEqual(monitor.metrics["alerts_triggered"], 1)
        self.assertEqual(monitor.metrics["throttled_requests"], 1)
        self.assertEqual(monitor.metrics["resource_units_consumed"], 2)
        self.assertEqual(monitor.operations["list_lookup"], 1)
        self.assertTrue(monitor.should_slow_down())


class TestProvisioningStatistics(unittest.TestCase):
    def test_summary_lists_failures_only_when_present(self) -> None:
        stats = ProvisioningStatistics()
        stats.increment("links_created", 2)

        out = io.StringIO()
        with redirect_stdout(out):
            stats.print_summary()
        self.assertIn("Links created:                 2", out.getvalue())
        self.assertNotIn("Field update failures", out.getvalue())

        stats.increment("fields_locked")
        out = io.StringIO()
        with redirect_stdout(out):
            stats.print_summary()
        self.assertIn("Field update failures", out.getvalue())


if __name__ == "__main__":
    unittest.main()
