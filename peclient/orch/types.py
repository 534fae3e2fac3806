"""Shared types of the orchestrator API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from peclient.classifier.models import _field


@dataclass
class Scope:
    """The targets of a job; only one field is meant to be set."""

    application: str = ""
    nodes: list[str] = field(default_factory=list)
    query: list[Any] = field(default_factory=list)
    node_group: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the scope; empty fields are left out."""
        data: dict[str, Any] = {}
        if self.application:
            data["application"] = self.application
        if self.nodes:
            data["nodes"] = list(self.nodes)
        if self.query:
            data["query"] = list(self.query)
        if self.node_group:
            data["node_group"] = self.node_group
        return data


@dataclass
class Owner:
    """The owner of a job."""

    id: str = ""
    login: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Owner:
        return cls(id=_field(data, "id", ""), login=_field(data, "login", ""))


@dataclass
class Pagination:
    """Pagination details of a response."""

    limit: int = 0
    offset: int = 0
    total: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pagination:
        return cls(
            limit=_field(data, "limit", 0),
            offset=_field(data, "offset", 0),
            total=_field(data, "total", 0),
        )


@dataclass
class Interval:
    """How often a scheduled task repeats."""

    units: str = ""
    value: int = 0

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the interval."""
        return {"units": self.units, "value": self.value}


@dataclass
class ScheduleOptions:
    """Options of a scheduled task."""

    interval: Interval = field(default_factory=Interval)

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the options."""
        return {"interval": self.interval.to_dict()}