"""Data types returned by the node classifier API."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

_FRACTION = re.compile(r"\.(\d+)")


def _field(data: dict[str, Any], name: str, default: Any = None) -> Any:
    """Look a key up the way the API's JSON decoding does: exact, then case-insensitively.

    A JSON null yields the default.
    """
    if name in data:
        value = data[name]
    else:
        lowered = name.lower()
        value = next((v for k, v in data.items() if k.lower() == lowered), None)
    return default if value is None else value


def _parse_time(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp; an empty value gives None."""
    if not value:
        return None
    text = value
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class Pagination:
    """Limit and offset used when paging through results."""

    limit: int = 0
    offset: int = 0

    def to_params(self) -> dict[str, str]:
        """Query parameters for this pagination; zero values are left out."""
        params: dict[str, str] = {}
        if self.limit > 0:
            params["limit"] = str(self.limit)
        if self.offset > 0:
            params["offset"] = str(self.offset)
        return params


@dataclass
class Class:
    """A class known to the classifier."""

    name: str = ""
    environment: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Class:
        return cls(
            name=_field(data, "name", ""),
            environment=_field(data, "environment", ""),
            parameters=_field(data, "parameters", {}),
        )


@dataclass
class Group:
    """A node group as returned by the groups endpoint."""

    id: str = ""
    name: str = ""
    description: str = ""
    environment: str = ""
    environment_trumps: bool = False
    parent: str = ""
    rule: Any = None
    classes: dict[str, Any] = field(default_factory=dict)
    config_data: dict[str, Any] = field(default_factory=dict)
    deleted: dict[str, Any] = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    last_edited: datetime | None = None
    serial_number: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        return cls(
            id=_field(data, "id", ""),
            name=_field(data, "name", ""),
            description=_field(data, "description", ""),
            environment=_field(data, "environment", ""),
            environment_trumps=_field(data, "environment_trumps", False),
            parent=_field(data, "parent", ""),
            rule=_field(data, "rule"),
            classes=_field(data, "classes", {}),
            config_data=_field(data, "config_data", {}),
            deleted=_field(data, "deleted", {}),
            variables=_field(data, "variables", {}),
            last_edited=_parse_time(_field(data, "last_edited")),
            serial_number=_field(data, "serial_number", 0),
        )


@dataclass
class TranslatedRules:
    """A group rule translated into PuppetDB query formats."""

    nodes_query_format: Any = None
    inventory_query_format: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranslatedRules:
        return cls(
            nodes_query_format=_field(data, "nodes_query_format"),
            inventory_query_format=_field(data, "inventory_query_format"),
        )


@dataclass
class GroupRules:
    """The rules of a group, with and without inheritance, and their translations."""

    rule: Any = None
    rule_with_inherited: Any = None
    translated: TranslatedRules = field(default_factory=TranslatedRules)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GroupRules:
        return cls(
            rule=_field(data, "rule"),
            rule_with_inherited=_field(data, "rule_with_inherited"),
            translated=TranslatedRules.from_dict(_field(data, "translated", {})),
        )


@dataclass
class NodeGroup:
    """A group a classified node belongs to."""

    id: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeGroup:
        return cls(id=_field(data, "id", ""), name=_field(data, "name", ""))


@dataclass
class Node:
    """The classification of a single node."""

    name: str = ""
    environment: str = ""
    groups: list[NodeGroup] = field(default_factory=list)
    classes: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)
    config_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        return cls(
            name=_field(data, "name", ""),
            environment=_field(data, "environment", ""),
            groups=[NodeGroup.from_dict(g) for g in _field(data, "groups", [])],
            classes=_field(data, "classes", {}),
            parameters=_field(data, "parameters", {}),
            config_data=_field(data, "config_data", {}),
        )