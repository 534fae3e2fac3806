"""Data types returned by the PuppetDB query API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from peclient.classifier.models import _field, _parse_time


@dataclass
class Environment:
    """A PuppetDB environment."""

    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        return cls(name=_field(data, "name", ""))


@dataclass
class PDbStatus:
    """The status of the PuppetDB service."""

    service_version: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PDbStatus:
        return cls(service_version=_field(data, "service_version", ""))


@dataclass
class Fact:
    """A fact from the facts or fact-contents endpoint."""

    name: str = ""
    value: Any = None
    certname: str = ""
    environment: str = ""
    count: int = 0
    path: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Fact:
        return cls(
            name=_field(data, "name", ""),
            value=_field(data, "value"),
            certname=_field(data, "certname", ""),
            environment=_field(data, "environment", ""),
            count=_field(data, "count", 0),
            path=list(_field(data, "path", [])),
        )


@dataclass
class FactPath:
    """A fact path from the fact-paths endpoint."""

    name: str = ""
    path: list[Any] = field(default_factory=list)
    type: str = ""
    count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FactPath:
        return cls(
            name=_field(data, "name", ""),
            path=list(_field(data, "path", [])),
            type=_field(data, "type", ""),
            count=_field(data, "count", 0),
        )


@dataclass
class Node:
    """A PuppetDB node."""

    deactivated: Any = None
    latest_report_hash: str = ""
    facts_environment: str = ""
    cached_catalog_status: str = ""
    report_environment: str = ""
    latest_report_corrective_change: bool = False
    catalog_environment: str = ""
    facts_timestamp: str = ""
    latest_report_noop: bool = False
    expired: Any = None
    latest_report_noop_pending: bool = False
    report_timestamp: str = ""
    certname: str = ""
    catalog_timestamp: str = ""
    latest_report_job_id: str = ""
    latest_report_status: str = ""
    count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        return cls(
            deactivated=_field(data, "deactivated"),
            latest_report_hash=_field(data, "latest_report_hash", ""),
            facts_environment=_field(data, "facts_environment", ""),
            cached_catalog_status=_field(data, "cached_catalog_status", ""),
            report_environment=_field(data, "report_environment", ""),
            latest_report_corrective_change=_field(data, "latest_report_corrective_change", False),
            catalog_environment=_field(data, "catalog_environment", ""),
            facts_timestamp=_field(data, "facts_timestamp", ""),
            latest_report_noop=_field(data, "latest_report_noop", False),
            expired=_field(data, "expired"),
            latest_report_noop_pending=_field(data, "latest_report_noop_pending", False),
            report_timestamp=_field(data, "report_timestamp", ""),
            certname=_field(data, "certname", ""),
            catalog_timestamp=_field(data, "catalog_timestamp", ""),
            latest_report_job_id=_field(data, "latest_report_job_id", ""),
            latest_report_status=_field(data, "latest_report_status", ""),
            count=_field(data, "count", 0),
        )


@dataclass
class Inventory:
    """A node with its facts and trusted facts."""

    certname: str = ""
    timestamp: str = ""
    environment: str = ""
    facts: dict[str, Any] = field(default_factory=dict)
    trusted: dict[str, Any] = field(default_factory=dict)
    count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Inventory:
        return cls(
            certname=_field(data, "certname", ""),
            timestamp=_field(data, "timestamp", ""),
            environment=_field(data, "environment", ""),
            facts=_field(data, "facts", {}),
            trusted=_field(data, "trusted", {}),
            count=_field(data, "count", 0),
        )


@dataclass
class Event:
    """A change to one property of a resource."""

    timestamp: datetime | None = None
    property: str = ""
    name: str = ""
    new_value: Any = None
    old_value: Any = None
    message: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        return cls(
            timestamp=_parse_time(_field(data, "timestamp")),
            property=_field(data, "property", ""),
            name=_field(data, "name", ""),
            new_value=_field(data, "new_value"),
            old_value=_field(data, "old_value"),
            message=_field(data, "message", ""),
            status=_field(data, "status", ""),
        )


@dataclass
class ResourceEvent:
    """A resource event recorded in a report."""

    status: str = ""
    timestamp: datetime | None = None
    resource_type: str = ""
    resource_title: str = ""
    property: str = ""
    name: str = ""
    new_value: Any = None
    old_value: Any = None
    message: str = ""
    file: str = ""
    line: int = 0
    containment_path: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceEvent:
        return cls(
            status=_field(data, "status", ""),
            timestamp=_parse_time(_field(data, "timestamp")),
            resource_type=_field(data, "resource_type", ""),
            resource_title=_field(data, "resource_title", ""),
            property=_field(data, "property", ""),
            name=_field(data, "name", ""),
            new_value=_field(data, "new_value"),
            old_value=_field(data, "old_value"),
            message=_field(data, "message", ""),
            file=_field(data, "file", ""),
            line=_field(data, "line", 0),
            containment_path=list(_field(data, "containment_path", [])),
        )


@dataclass
class ResourceEvents:
    """A link to a report's resource events, with the events when expanded."""

    href: str = ""
    data: list[ResourceEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceEvents:
        return cls(
            href=_field(data, "href", ""),
            data=[ResourceEvent.from_dict(e) for e in _field(data, "data", [])],
        )


@dataclass
class Resource:
    """A resource managed during a run."""

    timestamp: datetime | None = None
    resource_type: str = ""
    resource_title: str = ""
    containment_path: list[str] = field(default_factory=list)
    skipped: bool = False
    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resource:
        return cls(
            timestamp=_parse_time(_field(data, "timestamp")),
            resource_type=_field(data, "resource_type", ""),
            resource_title=_field(data, "resource_title", ""),
            containment_path=list(_field(data, "containment_path", [])),
            skipped=_field(data, "skipped", False),
            events=[Event.from_dict(e) for e in _field(data, "events", [])],
        )


@dataclass
class Resources:
    """A link to a report's resources, with the resources when expanded."""

    href: str = ""
    data: list[Resource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resources:
        return cls(
            href=_field(data, "href", ""),
            data=[Resource.from_dict(r) for r in _field(data, "data", [])],
        )


@dataclass
class Metric:
    """A single metric of a run."""

    category: str = ""
    name: str = ""
    value: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Metric:
        return cls(
            category=_field(data, "category", ""),
            name=_field(data, "name", ""),
            value=float(_field(data, "value", 0.0)),
        )


@dataclass
class Metrics:
    """A link to a report's metrics, with the metrics when expanded."""

    href: str = ""
    data: list[Metric] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Metrics:
        return cls(
            href=_field(data, "href", ""),
            data=[Metric.from_dict(m) for m in _field(data, "data", [])],
        )


@dataclass
class LogEntry:
    """One log line of a run; file and line are empty when no resource is concerned."""

    file: str = ""
    line: int = 0
    level: str = ""
    message: str = ""
    source: str = ""
    tags: list[str] = field(default_factory=list)
    time: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        return cls(
            file=_field(data, "file", ""),
            line=_field(data, "line", 0),
            level=_field(data, "level", ""),
            message=_field(data, "message", ""),
            source=_field(data, "source", ""),
            tags=list(_field(data, "tags", [])),
            time=_parse_time(_field(data, "time")),
        )


@dataclass
class Logs:
    """A link to a report's logs, with the log lines when expanded."""

    href: str = ""
    data: list[LogEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Logs:
        return cls(
            href=_field(data, "href", ""),
            data=[LogEntry.from_dict(entry) for entry in _field(data, "data", [])],
        )


@dataclass
class Report:
    """A report submitted by an agent after a run."""

    hash: str = ""
    puppet_version: str = ""
    receive_time: datetime | None = None
    report_format: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    producer_timestamp: datetime | None = None
    producer: str = ""
    transaction_uuid: str = ""
    status: str = ""
    noop: bool = False
    noop_pending: bool = False
    environment: str = ""
    configuration_version: str = ""
    certname: str = ""
    code_id: str = ""
    catalog_uuid: str = ""
    cached_catalog_status: str = ""
    resource_events: ResourceEvents = field(default_factory=ResourceEvents)
    resources: Resources = field(default_factory=Resources)
    metrics: Metrics = field(default_factory=Metrics)
    logs: Logs = field(default_factory=Logs)
    count: int = 0
    corrective_change: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        return cls(
            hash=_field(data, "hash", ""),
            puppet_version=_field(data, "puppet_version", ""),
            receive_time=_parse_time(_field(data, "receive_time")),
            report_format=int(_field(data, "report_format", 0)),
            start_time=_parse_time(_field(data, "start_time")),
            end_time=_parse_time(_field(data, "end_time")),
            producer_timestamp=_parse_time(_field(data, "producer_timestamp")),
            producer=_field(data, "producer", ""),
            transaction_uuid=_field(data, "transaction_uuid", ""),
            status=_field(data, "status", ""),
            noop=_field(data, "noop", False),
            noop_pending=_field(data, "noop_pending", False),
            environment=_field(data, "environment", ""),
            configuration_version=_field(data, "configuration_version", ""),
            certname=_field(data, "certname", ""),
            code_id=_field(data, "code_id", ""),
            catalog_uuid=_field(data, "catalog_uuid", ""),
            cached_catalog_status=_field(data, "cached_catalog_status", ""),
            resource_events=ResourceEvents.from_dict(_field(data, "resource_events", {})),
            resources=Resources.from_dict(_field(data, "resources", {})),
            metrics=Metrics.from_dict(_field(data, "metrics", {})),
            logs=Logs.from_dict(_field(data, "logs", {})),
            count=_field(data, "count", 0),
            corrective_change=_field(data, "corrective_change", False),
        )