# -*- coding: utf-8 -*-
"""
Data models for SharePoint libraries, list items and sharing links.

These wrap the JSON payloads returned by Microsoft Graph so the provisioning
workflow can work with named attributes instead of nested dictionaries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_DISPLAY_NAME = "displayName"
FIELD_FILE = "file"
FIELD_FOLDER = "folder"
FIELD_FIELDS = "fields"
FIELD_DRIVE_ITEM = "driveItem"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_LINK = "link"

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

# Sharing link scopes and types as reported by Graph
SCOPE_ANONYMOUS = "anonymous"
SCOPE_ORGANIZATION = "organization"
SCOPE_USERS = "users"
LINK_TYPE_VIEW = "view"
LINK_TYPE_EDIT = "edit"

# SharePoint list item fields used to name an item when no driveItem is expanded
_NAME_FIELDS = ("FileLeafRef", "LinkFilename", "Title")


@dataclass
class ColumnDefinition:
    """A column (field) defined on a SharePoint list."""

    name: str
    display_name: str = ""
    column_type: Optional[str] = None
    hidden: bool = False
    required: bool = False
    description: str = ""

    @classmethod
    def from_graph(cls, data: Dict[str, Any]) -> "ColumnDefinition":
        # Graph reports the column type as the single facet present on the object
        column_type = None
        for facet in ("hyperlinkOrPicture", "text", "number", "dateTime", "boolean",
                      "choice", "lookup", "personOrGroup", "calculated", "currency"):
            if facet in data:
                column_type = facet
                break
        return cls(
            name=data.get(FIELD_NAME, ""),
            display_name=data.get(FIELD_DISPLAY_NAME, ""),
            column_type=column_type,
            hidden=bool(data.get("hidden", False)),
            required=bool(data.get("required", False)),
            description=data.get("description", "") or "",
        )


@dataclass
class Library:
    """A SharePoint document library together with its column definitions."""

    id: str
    display_name: str
    site_id: str
    columns: List[ColumnDefinition] = field(default_factory=list)

    @classmethod
    def from_graph(cls, data: Dict[str, Any], site_id: str) -> "Library":
        return cls(
            id=data[FIELD_ID],
            display_name=data.get(FIELD_DISPLAY_NAME) or data.get(FIELD_NAME, ""),
            site_id=site_id,
            columns=[ColumnDefinition.from_graph(c) for c in data.get("columns", [])],
        )

    def has_column(self, internal_name: str) -> bool:
        return any(column.name == internal_name for column in self.columns)

    @property
    def column_names(self) -> frozenset:
        return frozenset(column.name for column in self.columns)


@dataclass(frozen=True)
class UrlFieldValue:
    """Value of a hyperlink column (SharePoint FieldUrlValue)."""

    url: str
    description: str = ""

    @classmethod
    def from_field(cls, raw: Any) -> Optional["UrlFieldValue"]:
        """
        Build a URL value from the raw field JSON.

        Graph returns hyperlink columns as ``{"Url": ..., "Description": ...}``.
        Anything else (plain text, numbers, missing values) is not a URL value.
        """
        if not isinstance(raw, dict):
            return None
        url = raw.get("Url")
        if not url:
            return None
        return cls(url=url, description=raw.get("Description") or "")

    def to_field(self) -> Dict[str, str]:
        return {"Url": self.url, "Description": self.description or self.url}


@dataclass(frozen=True)
class FieldLookup:
    """Result of reading a named field from a list item."""

    found: bool
    value: Any = None

    def url_value(self) -> Optional[UrlFieldValue]:
        if not self.found:
            return None
        if isinstance(self.value, UrlFieldValue):
            return self.value
        return UrlFieldValue.from_field(self.value)


MISSING_FIELD = FieldLookup(found=False)


@dataclass
class ListItem:
    """
    A file or folder entry of a document library.

    ``schema`` holds the internal names of the columns defined on the owning
    library. Graph omits empty values from ``fields``, so a key missing from
    ``fields`` only means "no value"; a name missing from ``schema`` means the
    column does not exist.
    """

    id: str
    name: str
    is_file: bool
    list_id: Optional[str] = None
    drive_id: Optional[str] = None
    drive_item_id: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    schema: frozenset = field(default_factory=frozenset)
    pending_changes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_graph(cls, data: Dict[str, Any], schema=frozenset(), list_id: Optional[str] = None) -> "ListItem":
        fields = dict(data.get(FIELD_FIELDS) or {})
        drive_item = data.get(FIELD_DRIVE_ITEM) or {}
        parent = drive_item.get(FIELD_PARENT_REFERENCE) or {}

        if drive_item:
            is_file = FIELD_FILE in drive_item and FIELD_FOLDER not in drive_item
        else:
            # FSObjType is 1 for folders, 0 for files
            is_file = str(fields.get("FSObjType", "0")) != "1" and \
                (data.get("contentType") or {}).get("name") != "Folder"

        name = drive_item.get(FIELD_NAME)
        if not name:
            name = next((fields[key] for key in _NAME_FIELDS if fields.get(key)), data[FIELD_ID])

        return cls(
            id=data[FIELD_ID],
            name=name,
            is_file=is_file,
            list_id=list_id,
            drive_id=parent.get("driveId"),
            drive_item_id=drive_item.get(FIELD_ID),
            fields=fields,
            schema=frozenset(schema),
        )

    @property
    def display_name(self) -> str:
        return self.name

    def get_field(self, internal_name: str) -> FieldLookup:
        if internal_name in self.pending_changes:
            return FieldLookup(found=True, value=self.pending_changes[internal_name])
        if internal_name in self.fields:
            return FieldLookup(found=True, value=self.fields[internal_name])
        if internal_name in self.schema:
            return FieldLookup(found=True, value=None)
        return MISSING_FIELD

    def set_field(self, internal_name: str, value: Any) -> bool:
        """
        Stage a new value for a field.

        Returns False, staging nothing, when the column is not part of the
        item's schema.
        """
        if internal_name not in self.schema and internal_name not in self.fields:
            return False
        self.pending_changes[internal_name] = value
        return True

    def changes_as_json(self) -> Dict[str, Any]:
        payload = {}
        for key, value in self.pending_changes.items():
            payload[key] = value.to_field() if isinstance(value, UrlFieldValue) else value
        return payload

    def commit_changes(self):
        self.fields.update(self.changes_as_json())
        self.pending_changes.clear()


@dataclass(frozen=True)
class SharingLink:
    """A sharing link attached to a drive item permission."""

    scope: Optional[str]
    link_type: Optional[str]
    prevents_download: bool
    web_url: Optional[str]
    permission_id: Optional[str] = None

    @classmethod
    def from_permission(cls, permission: Dict[str, Any]) -> Optional["SharingLink"]:
        """Return the link of a permission, or None for non-link permissions."""
        link = permission.get(FIELD_LINK)
        if not link:
            return None
        return cls(
            scope=link.get("scope"),
            link_type=link.get("type"),
            prevents_download=bool(link.get("preventsDownload", False)),
            web_url=link.get("webUrl"),
            permission_id=permission.get(FIELD_ID),
        )


@dataclass(frozen=True)
class LinkOptions:
    """Options sent with a createLink request."""

    link_type: str = LINK_TYPE_VIEW
    scope: str = SCOPE_ANONYMOUS
    password: Optional[str] = None
    expiration: Optional[str] = None

    def to_request(self) -> Dict[str, str]:
        body = {"type": self.link_type, "scope": self.scope}
        if self.password:
            body["password"] = self.password
        if self.expiration:
            body["expirationDateTime"] = self.expiration
        return body
