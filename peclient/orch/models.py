"""Requests and responses of the orchestrator API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from peclient.classifier.models import _field
from peclient.orch.types import Interval, Pagination, ScheduleOptions, Scope


def new_schedule_task_options(interval: timedelta) -> ScheduleOptions:
    """Schedule options that repeat a task every interval, counted in whole seconds."""
    return ScheduleOptions(
        interval=Interval(units="seconds", value=int(interval.total_seconds()))
    )


def _nested(data: dict[str, Any], outer: str, inner: str, default: Any) -> Any:
    return _field(_field(data, outer, {}), inner, default)


@dataclass
class JobRef:
    """The id and name of a job."""

    id: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobRef:
        return cls(id=_field(data, "id", ""), name=_field(data, "name", ""))


@dataclass
class JobID:
    """Identifies a single orchestrator job."""

    job: JobRef = field(default_factory=JobRef)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobID:
        return cls(job=JobRef.from_dict(_field(data, "job", {})))


@dataclass
class TaskRequest:
    """A task to run across a scope of nodes."""

    task: str = ""
    params: dict[str, Any] | None = None
    scope: Scope = field(default_factory=Scope)
    environment: str = ""
    description: str = ""
    noop: bool = False

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request; an empty environment is left out."""
        data: dict[str, Any] = {}
        if self.environment:
            data["environment"] = self.environment
        data.update(
            {
                "task": self.task,
                "params": self.params,
                "scope": self.scope.to_dict(),
                "description": self.description,
                "noop": self.noop,
            }
        )
        return data


@dataclass
class ScheduledJobID:
    """Identifies a single scheduled job."""

    scheduled_job: JobRef = field(default_factory=JobRef)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduledJobID:
        return cls(scheduled_job=JobRef.from_dict(_field(data, "scheduled_job", {})))


@dataclass
class ScheduleTaskRequest:
    """A task to run at a future time, optionally repeating."""

    task: str = ""
    params: dict[str, Any] | None = None
    scope: Scope = field(default_factory=Scope)
    scheduled_time: str = ""
    environment: str = ""
    schedule_options: ScheduleOptions | None = None

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request; empty environment and options are left out."""
        data: dict[str, Any] = {}
        if self.environment:
            data["environment"] = self.environment
        data.update(
            {
                "task": self.task,
                "params": self.params,
                "scope": self.scope.to_dict(),
                "scheduled_time": self.scheduled_time,
            }
        )
        if self.schedule_options is not None:
            data["schedule_options"] = self.schedule_options.to_dict()
        return data


@dataclass
class TaskTargetJobID:
    """Identifies a task-target."""

    task_target_job: JobRef = field(default_factory=JobRef)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskTargetJobID:
        return cls(task_target_job=JobRef.from_dict(_field(data, "task_target", {})))


@dataclass
class TaskTargetRequest:
    """Tasks, nodes and node groups that make up a permission group."""

    display_name: str = ""
    tasks: list[str] = field(default_factory=list)
    all_tasks: bool = False
    nodes: list[str] | None = None
    node_groups: list[str] | None = None
    pql_query: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request; empty tasks, all_tasks and query are left out."""
        data: dict[str, Any] = {"display_name": self.display_name}
        if self.tasks:
            data["tasks"] = list(self.tasks)
        if self.all_tasks:
            data["all_tasks"] = True
        data["nodes"] = None if self.nodes is None else list(self.nodes)
        data["node_groups"] = None if self.node_groups is None else list(self.node_groups)
        if self.pql_query:
            data["pql_query"] = self.pql_query
        return data


@dataclass
class PlanRunJobID:
    """Identifies a plan run."""

    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlanRunJobID:
        return cls(name=_field(data, "name", ""))


@dataclass
class PlanRunRequest:
    """A plan to run with the plan executor."""

    name: str = ""
    params: dict[str, Any] | None = None
    environment: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request; empty environment and description are left out."""
        data: dict[str, Any] = {"plan_name": self.name, "params": self.params}
        if self.environment:
            data["environment"] = self.environment
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class StopJobID:
    """A stopped job and the count of its nodes in each state."""

    job: JobRef = field(default_factory=JobRef)
    nodes: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StopJobID:
        job = _field(data, "job", {})
        return cls(job=JobRef.from_dict(job), nodes=dict(_field(job, "nodes", {})))


@dataclass
class StopRequest:
    """The job to stop."""

    job: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request."""
        return {"job": self.job}


@dataclass
class DeployRequest:
    """A Puppet run across the nodes of an environment."""

    environment: str = ""
    scope: Scope = field(default_factory=Scope)
    description: str = ""
    noop: bool = False
    no_noop: bool = False
    concurrency: int = 0
    enforce_environment: bool = False
    debug: bool = False
    trace: bool = False
    evaltrace: bool = False
    target: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the request; empty optional fields are left out."""
        data: dict[str, Any] = {
            "environment": self.environment,
            "scope": self.scope.to_dict(),
        }
        if self.description:
            data["description"] = self.description
        if self.noop:
            data["noop"] = True
        if self.no_noop:
            data["no_noop"] = True
        if self.concurrency:
            data["concurrency"] = self.concurrency
        data["enforce_environment"] = self.enforce_environment
        if self.debug:
            data["debug"] = True
        if self.trace:
            data["trace"] = True
        if self.evaltrace:
            data["evaltrace"] = True
        if self.target:
            data["target"] = self.target
        return data


@dataclass
class InventoryNode:
    """Whether a node is connected to the PCP broker."""

    name: str = ""
    connected: bool = False
    broker: str = ""
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InventoryNode:
        return cls(
            name=_field(data, "name", ""),
            connected=_field(data, "connected", False),
            broker=_field(data, "broker", ""),
            timestamp=_field(data, "timestamp", ""),
        )


@dataclass
class NodeStates:
    """The count of a job's nodes in each state."""

    finished: int = 0
    errored: int = 0
    failed: int = 0
    running: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeStates:
        return cls(
            finished=_field(data, "finished", 0),
            errored=_field(data, "errored", 0),
            failed=_field(data, "failed", 0),
            running=_field(data, "running", 0),
        )


@dataclass
class JobStatus:
    """A state a job went through, with its enter and exit times."""

    state: str = ""
    enter_time: str = ""
    exit_time: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobStatus:
        return cls(
            state=_field(data, "state", ""),
            enter_time=_field(data, "enter_time", ""),
            exit_time=_field(data, "exit_time", ""),
        )


@dataclass
class Job:
    """A single orchestrator job."""

    id: str = ""
    name: str = ""
    state: str = ""
    type: str = ""
    command: str = ""
    options: dict[str, Any] = field(default_factory=dict)
    node_count: int = 0
    node_states: NodeStates = field(default_factory=NodeStates)
    owner: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    timestamp: str = ""
    environment: str = ""
    status: list[JobStatus] = field(default_factory=list)
    nodes_id: str = ""
    events_id: str = ""
    report_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        return cls(
            id=_field(data, "id", ""),
            name=_field(data, "name", ""),
            state=_field(data, "state", ""),
            type=_field(data, "type", ""),
            command=_field(data, "command", ""),
            options=_field(data, "options", {}),
            node_count=_field(data, "node_count", 0),
            node_states=NodeStates.from_dict(_field(data, "node_states", {})),
            owner=_field(data, "owner", {}),
            description=_field(data, "description", ""),
            timestamp=_field(data, "timestamp", ""),
            environment=_nested(data, "environment", "name", ""),
            status=[JobStatus.from_dict(s) for s in _field(data, "status", [])],
            nodes_id=_nested(data, "nodes", "id", ""),
            events_id=_nested(data, "events", "id", ""),
            report_id=_nested(data, "report", "id", ""),
        )


@dataclass
class Jobs:
    """All jobs known to the orchestrator."""

    items: list[Job] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Jobs:
        return cls(
            items=[Job.from_dict(j) for j in _field(data, "items", [])],
            pagination=Pagination.from_dict(_field(data, "pagination", {})),
        )


@dataclass
class JobEvent:
    """A single event of a job."""

    id: str = ""
    type: str = ""
    timestamp: str = ""
    node: str = ""
    noop: bool = False
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobEvent:
        details = _field(data, "details", {})
        return cls(
            id=_field(data, "id", ""),
            type=_field(data, "type", ""),
            timestamp=_field(data, "timestamp", ""),
            node=_field(details, "node", ""),
            noop=_nested(details, "detail", "noop", False),
            message=_field(data, "message", ""),
        )


@dataclass
class JobReportItem:
    """The report of one node of a job."""

    node: str = ""
    state: str = ""
    timestamp: str = ""
    events: list[JobEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobReportItem:
        return cls(
            node=_field(data, "node", ""),
            state=_field(data, "state", ""),
            timestamp=_field(data, "timestamp", ""),
            events=[JobEvent.from_dict(e) for e in _field(data, "events", [])],
        )


@dataclass
class JobReport:
    """The report of a job."""

    items: list[JobReportItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobReport:
        return cls(items=[JobReportItem.from_dict(i) for i in _field(data, "items", [])])


@dataclass
class JobNode:
    """A node taking part in a job."""

    transport: str = ""
    finish_timestamp: str = ""
    transaction_uuid: str = ""
    start_timestamp: str = ""
    name: str = ""
    duration: float = 0.0
    state: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    result: dict[str, Any] = field(default_factory=dict)
    latest_event_id: int = 0
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobNode:
        return cls(
            transport=_field(data, "transport", ""),
            finish_timestamp=_field(data, "finish_timestamp", ""),
            transaction_uuid=_field(data, "transaction_uuid", ""),
            start_timestamp=_field(data, "start_timestamp", ""),
            name=_field(data, "name", ""),
            duration=float(_field(data, "duration", 0.0)),
            state=_field(data, "state", ""),
            details=_field(data, "details", {}),
            result=_field(data, "result", {}),
            latest_event_id=_field(data, "latest-event-id", 0),
            timestamp=_field(data, "timestamp", ""),
        )


@dataclass
class NextEvents:
    """Where to continue reading a job's events."""

    id: str = ""
    event: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NextEvents:
        return cls(id=_field(data, "id", ""), event=_field(data, "event", ""))


@dataclass
class JobNodes:
    """The nodes of a job."""

    items: list[JobNode] = field(default_factory=list)
    next_events: NextEvents = field(default_factory=NextEvents)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobNodes:
        return cls(
            items=[JobNode.from_dict(n) for n in _field(data, "items", [])],
            next_events=NextEvents.from_dict(_field(data, "next-events", {})),
        )


@dataclass
class TaskParam:
    """A parameter in task metadata."""

    description: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskParam:
        return cls(description=_field(data, "description", ""), type=_field(data, "type", ""))


@dataclass
class TaskImplementation:
    """An implementation in task metadata."""

    name: str = ""
    requirements: list[str] = field(default_factory=list)
    input_method: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskImplementation:
        return cls(
            name=_field(data, "name", ""),
            requirements=list(_field(data, "requirements", [])),
            input_method=_field(data, "input_method", ""),
        )


@dataclass
class TaskMetadata:
    """The metadata of a task or plan."""

    description: str = ""
    private: bool = False
    supports_noop: bool = False
    input_method: str = ""
    parameters: dict[str, TaskParam] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)
    implementations: list[TaskImplementation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskMetadata:
        return cls(
            description=_field(data, "description", ""),
            private=_field(data, "private", False),
            supports_noop=_field(data, "supports_noop", False),
            input_method=_field(data, "input_method", ""),
            parameters={
                name: TaskParam.from_dict(param or {})
                for name, param in _field(data, "parameters", {}).items()
            },
            extensions=_field(data, "extensions", {}),
            implementations=[
                TaskImplementation.from_dict(i) for i in _field(data, "implementations", [])
            ],
        )


@dataclass
class TaskFile:
    """A file belonging to a task."""

    filename: str = ""
    uri_path: str = ""
    uri_environment: str = ""
    sha256: str = ""
    size_bytes: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskFile:
        uri = _field(data, "uri", {})
        return cls(
            filename=_field(data, "filename", ""),
            uri_path=_field(uri, "path", ""),
            uri_environment=_nested(uri, "params", "environment", ""),
            sha256=_field(data, "sha256", ""),
            size_bytes=_field(data, "size_bytes", 0),
        )


@dataclass
class Task:
    """A task with its metadata and files; in a task list only id and name are set."""

    id: str = ""
    name: str = ""
    environment: str = ""
    code_id: str = ""
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    files: list[TaskFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=_field(data, "id", ""),
            name=_field(data, "name", ""),
            environment=_nested(data, "environment", "name", ""),
            code_id=_nested(data, "environment", "code_id", ""),
            metadata=TaskMetadata.from_dict(_field(data, "metadata", {})),
            files=[TaskFile.from_dict(f) for f in _field(data, "files", [])],
        )


@dataclass
class Tasks:
    """The tasks of one environment."""

    environment: str = ""
    code_id: str = ""
    items: list[Task] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tasks:
        return cls(
            environment=_nested(data, "environment", "name", ""),
            code_id=_nested(data, "environment", "code_id", ""),
            items=[Task.from_dict(t) for t in _field(data, "items", [])],
        )


@dataclass
class Plan:
    """A plan with its metadata; in a plan list only id, name and permitted are set."""

    id: str = ""
    name: str = ""
    environment: str = ""
    code_id: str = ""
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    permitted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plan:
        return cls(
            id=_field(data, "id", ""),
            name=_field(data, "name", ""),
            environment=_nested(data, "environment", "name", ""),
            code_id=_nested(data, "environment", "code_id", ""),
            metadata=TaskMetadata.from_dict(_field(data, "metadata", {})),
            permitted=_field(data, "permitted", False),
        )


@dataclass
class Plans:
    """The plans of one environment."""

    environment: str = ""
    code_id: str = ""
    items: list[Plan] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plans:
        return cls(
            environment=_nested(data, "environment", "name", ""),
            code_id=_nested(data, "environment", "code_id", ""),
            items=[Plan.from_dict(p) for p in _field(data, "items", [])],
        )