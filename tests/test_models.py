import unittest

from sharepoint_links.models import (
    ColumnDefinition,
    FieldLookup,
    LinkOptions,
    ListItem,
    SharingLink,
    UrlFieldValue,
)


class TestListItem(unittest.TestCase):
    def test_from_graph_uses_drive_item_facets(self) -> None:
        item = ListItem.from_graph({
            "id": "7",
            "fields": {"FileLeafRef": "report.pdf"},
            "driveItem": {"id": "di-7", "name": "report.pdf", "file": {},
                          "parentReference": {"driveId": "drive-1"}},
        }, schema={"PublicLink"}, list_id="list-1")

        self.assertTrue(item.is_file)
        self.assertEqual(item.display_name, "report.pdf")
        self.assertEqual(item.drive_item_id, "di-7")
        self.assertEqual(item.drive_id, "drive-1")

    def test_from_graph_without_drive_item_reads_fields(self) -> None:
        folder = ListItem.from_graph({"id": "8", "fields": {"FSObjType": "1", "FileLeafRef": "Archive"}})
        untitled = ListItem.from_graph({"id": "9", "fields": {}})

        self.assertFalse(folder.is_file)
        self.assertEqual(folder.name, "Archive")
        self.assertEqual(untitled.name, "9")

    def test_get_field_distinguishes_empty_from_missing(self) -> None:
        item = ListItem("1", "a.txt", True, fields={"Title": "A"}, schema=frozenset({"Title", "PublicLink"}))

        self.assertEqual(item.get_field("Title"), FieldLookup(True, "A"))
        self.assertEqual(item.get_field("PublicLink"), FieldLookup(True, None))
        self.assertFalse(item.get_field("Nope").found)

    def test_set_field_rejects_unknown_column(self) -> None:
        item = ListItem("1", "a.txt", True, schema=frozenset({"Title"}))

        self.assertFalse(item.set_field("PublicLink", UrlFieldValue("https://x")))
        self.assertEqual(item.pending_changes, {})

    def test_staged_url_value_serializes_and_commits(self) -> None:
        item = ListItem("1", "a.txt", True, schema=frozenset({"PublicLink"}))

        self.assertTrue(item.set_field("PublicLink", UrlFieldValue("https://x")))
        self.assertEqual(item.get_field("PublicLink").url_value(), UrlFieldValue("https://x"))
        self.assertEqual(item.changes_as_json(), {"PublicLink": {"Url": "https://x", "Description": "https://x"}})

        item.commit_changes()

        self.assertEqual(item.pending_changes, {})
        self.assertEqual(item.fields["PublicLink"]["Url"], "https://x")


class TestUrlFieldValue(unittest.TestCase):
    def test_from_field_accepts_only_hyperlink_values(self) -> None:
        self.assertEqual(UrlFieldValue.from_field({"Url": "https://x", "Description": "X"}),
                         UrlFieldValue("https://x", "X"))
        self.assertIsNone(UrlFieldValue.from_field("https://x"))
        self.assertIsNone(UrlFieldValue.from_field({"Description": "X"}))
        self.assertIsNone(UrlFieldValue.from_field(None))


class TestSharingLink(unittest.TestCase):
    def test_from_permission(self) -> None:
        link = SharingLink.from_permission({
            "id": "p1",
            "link": {"scope": "anonymous", "type": "view", "webUrl": "https://x/s"},
        })

        self.assertEqual(link.scope, "anonymous")
        self.assertEqual(link.link_type, "view")
        self.assertFalse(link.prevents_download)
        self.assertEqual(link.permission_id, "p1")

    def test_direct_grant_has_no_link(self) -> None:
        self.assertIsNone(SharingLink.from_permission({"id": "p2", "roles": ["owner"]}))


class TestColumnDefinition(unittest.TestCase):
    def test_from_graph_detects_type_facet(self) -> None:
        column = ColumnDefinition.from_graph({
            "name": "PublicLink", "displayName": "Public Link",
            "hyperlinkOrPicture": {"isPicture": False}, "required": False,
        })
        self.assertEqual(column.column_type, "hyperlinkOrPicture")
        self.assertEqual(column.display_name, "Public Link")


class TestLinkOptions(unittest.TestCase):
    def test_defaults_to_anonymous_view(self) -> None:
        self.assertEqual(LinkOptions().to_request(), {"type": "view", "scope": "anonymous"})

    def test_optional_settings(self) -> None:
        body = LinkOptions(password="pw", expiration="2030-01-01T00:00:00Z").to_request()
        self.assertEqual(body["password"], "pw")
        self.assertEqual(body["expirationDateTime"], "2030-01-01T00:00:00Z")


if __name__ == "__main__":
    unittest.main()
