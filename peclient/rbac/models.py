"""Data types used by the RBAC API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from peclient.classifier.models import _field, _parse_time


@dataclass
class Permission:
    """A permission granted by a role."""

    object_type: str = ""
    action: str = ""
    instance: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Permission:
        return cls(
            object_type=_field(data, "object_type", ""),
            action=_field(data, "action", ""),
            instance=_field(data, "instance", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the permission."""
        return {
            "object_type": self.object_type,
            "action": self.action,
            "instance": self.instance,
        }


@dataclass
class Role:
    """An RBAC role with its permissions, users and groups."""

    id: int = 0
    permissions: list[Permission] = field(default_factory=list)
    user_ids: list[str] = field(default_factory=list)
    group_ids: list[str] = field(default_factory=list)
    display_name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Role:
        return cls(
            id=int(_field(data, "id", 0)),
            permissions=[Permission.from_dict(p) for p in _field(data, "permissions", [])],
            user_ids=list(_field(data, "user_ids", [])),
            group_ids=list(_field(data, "group_ids", [])),
            display_name=_field(data, "display_name", ""),
            description=_field(data, "description", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the role; an id of 0 is left out."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        data.update(
            {
                "permissions": [p.to_dict() for p in self.permissions],
                "user_ids": list(self.user_ids),
                "group_ids": list(self.group_ids),
                "display_name": self.display_name,
                "description": self.description,
            }
        )
        return data


@dataclass
class User:
    """An RBAC user or user group."""

    id: str = ""
    login: str = ""
    email: str = ""
    display_name: str = ""
    role_ids: list[int] = field(default_factory=list)
    is_group: bool = False
    is_remote: bool = False
    is_user: bool = False
    is_superuser: bool = False
    is_revoked: bool = False
    last_login: datetime | None = None
    inherited_role_ids: list[int] = field(default_factory=list)
    group_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=_field(data, "id", ""),
            login=_field(data, "login", ""),
            email=_field(data, "email", ""),
            display_name=_field(data, "display_name", ""),
            role_ids=list(_field(data, "role_ids", [])),
            is_group=_field(data, "is_group", False),
            is_remote=_field(data, "is_remote", False),
            is_user=_field(data, "is_user", False),
            is_superuser=_field(data, "is_superuser", False),
            is_revoked=_field(data, "is_revoked", False),
            last_login=_parse_time(_field(data, "last_login")),
            inherited_role_ids=list(_field(data, "inherited_role_ids", [])),
            group_ids=list(_field(data, "group_ids", [])),
        )