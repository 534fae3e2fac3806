"""Client for the orchestrator API."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

import requests

from peclient.orch.errors import HTTPError, OrchestratorError, process_error
from peclient.orch.models import (
    DeployRequest,
    InventoryNode,
    Job,
    JobID,
    JobNodes,
    JobReport,
    Jobs,
    Plan,
    PlanRunJobID,
    PlanRunRequest,
    Plans,
    ScheduledJobID,
    ScheduleTaskRequest,
    StopJobID,
    StopRequest,
    Task,
    TaskRequest,
    Tasks,
    TaskTargetJobID,
    TaskTargetRequest,
)

COMMAND_TASK_PATH = "/orchestrator/v1/command/task"
COMMAND_SCHEDULE_TASK_PATH = "/orchestrator/v1/command/schedule_task"
COMMAND_TASK_TARGET_PATH = "/orchestrator/v1/command/task_target"
COMMAND_PLAN_RUN_PATH = "/orchestrator/v1/command/plan_run"
COMMAND_STOP_PATH = "/orchestrator/v1/command/stop"
COMMAND_DEPLOY_PATH = "/orchestrator/v1/command/deploy"
INVENTORY_PATH = "/orchestrator/v1/inventory"
INVENTORY_NODE_PATH = "/orchestrator/v1/inventory/{node}"
JOB_PATH = "/orchestrator/v1/jobs/{job-id}"
JOB_NODES_PATH = "/orchestrator/v1/jobs/{job-id}/nodes"
JOB_REPORT_PATH = "/orchestrator/v1/jobs/{job-id}/report"
JOBS_PATH = "/orchestrator/v1/jobs"
PLANS_PATH = "/orchestrator/v1/plans"
PLAN_PATH = "/orchestrator/v1/plans/{module}/{planname}"
TASKS_PATH = "/orchestrator/v1/tasks"
TASK_PATH = "/orchestrator/v1/tasks/{module}/{taskname}"

_PLAN_ID = re.compile(r"http.*/orchestrator/v1/plans/(.*)/(.*)")
_TASK_ID = re.compile(r"http.*/orchestrator/v1/tasks/(.*)/(.*)")
# Characters left alone when a value is placed in a single path segment.
_PATH_SAFE = "-_.~$&+:=@"

_JOB_REF_KEYS = frozenset({"job"})
_SCHEDULED_JOB_KEYS = frozenset({"scheduled_job"})
_TASK_TARGET_KEYS = frozenset({"task_target"})
_PLAN_RUN_KEYS = frozenset({"name"})
_INVENTORY_NODE_KEYS = frozenset({"name", "connected", "broker", "timestamp"})
_JOBS_KEYS = frozenset({"items", "pagination"})
_JOB_KEYS = frozenset(
    {
        "id", "name", "state", "type", "command", "options", "node_count",
        "node_states", "owner", "description", "timestamp", "environment",
        "status", "nodes", "events", "report",
    }
)
_JOB_REPORT_KEYS = frozenset({"items"})
_JOB_NODES_KEYS = frozenset({"items", "next-events"})
_LISTING_KEYS = frozenset({"environment", "items"})
_PLAN_KEYS = frozenset({"id", "name", "environment", "metadata", "permitted"})
_TASK_KEYS = frozenset({"id", "name", "environment", "metadata", "files"})


def _status(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".strip()


def _message(label: str, with_status: bool, status: str) -> str:
    if not label:
        return ""
    return f"{label} error: {status}" if with_status else label


def _segment(value: str) -> str:
    return quote(value, safe=_PATH_SAFE)


def _json_object(response: requests.Response) -> dict[str, Any] | None:
    if "json" not in response.headers.get("Content-Type", ""):
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class Client:
    """Talks to the orchestrator API with an authentication token.

    In strict mode a response carrying fields the client does not know is an error.
    """

    def __init__(
        self,
        host_url: str,
        token: str,
        verify: bool | str = True,
        strict: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.host_url = host_url.rstrip("/")
        self.verify = verify
        self.strict = strict
        self._headers = {"X-Authentication": token}
        self._session = session if session is not None else requests.Session()

    def _send(
        self,
        method: str,
        path: str,
        failure: str,
        params: dict[str, str] | None = None,
        body: Any = None,
    ) -> requests.Response:
        try:
            return self._session.request(
                method,
                f"{self.host_url}{path}",
                params=params or None,
                json=body,
                headers=dict(self._headers),
                allow_redirects=False,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            raise HTTPError(msg=failure or str(exc)) from exc

    def _decode(
        self, response: requests.Response, known: frozenset[str] | None, error_string: str
    ) -> Any:
        if not response.content or "json" not in response.headers.get("Content-Type", ""):
            return None
        try:
            data = response.json()
        except ValueError as exc:
            raise HTTPError(
                msg=error_string or str(exc), status_code=response.status_code
            ) from exc
        if self.strict and known is not None and isinstance(data, dict):
            unknown = sorted(set(data) - known)
            if unknown:
                raise HTTPError(
                    msg=error_string or f'json: unknown field "{unknown[0]}"',
                    status_code=response.status_code,
                )
        return data

    def _request(
        self,
        method: str,
        path: str,
        *,
        label: str = "",
        with_status: bool = True,
        params: dict[str, str] | None = None,
        body: Any = None,
        known: frozenset[str] | None = None,
    ) -> Any:
        response = self._send(
            method, path, _message(label, with_status, ""), params=params, body=body
        )
        error_string = _message(label, with_status, _status(response))
        process_error(response, error_string)
        if response.is_redirect:
            raise HTTPError(
                msg=error_string or "auto redirect is disabled",
                status_code=response.status_code,
            )
        return self._decode(response, known, error_string)

    def command_task(self, task_request: TaskRequest) -> JobID:
        """Run a task across a set of nodes."""
        data = self._request(
            "POST", COMMAND_TASK_PATH, body=task_request.to_dict(), known=_JOB_REF_KEYS
        )
        return JobID.from_dict(data or {})

    def command_schedule_task(
        self, schedule_task_request: ScheduleTaskRequest
    ) -> ScheduledJobID:
        """Schedule a task to run at a future time."""
        data = self._request(
            "POST",
            COMMAND_SCHEDULE_TASK_PATH,
            body=schedule_task_request.to_dict(),
            known=_SCHEDULED_JOB_KEYS,
        )
        return ScheduledJobID.from_dict(data or {})

    def command_task_target(self, task_target_request: TaskTargetRequest) -> TaskTargetJobID:
        """Create a task-target."""
        data = self._request(
            "POST",
            COMMAND_TASK_TARGET_PATH,
            label=COMMAND_TASK_TARGET_PATH,
            body=task_target_request.to_dict(),
            known=_TASK_TARGET_KEYS,
        )
        return TaskTargetJobID.from_dict(data or {})

    def command_plan_run(self, plan_run_request: PlanRunRequest) -> PlanRunJobID:
        """Run a plan with the plan executor."""
        data = self._request(
            "POST",
            COMMAND_PLAN_RUN_PATH,
            label=COMMAND_PLAN_RUN_PATH,
            body=plan_run_request.to_dict(),
            known=_PLAN_RUN_KEYS,
        )
        return PlanRunJobID.from_dict(data or {})

    def command_stop(self, stop_request: StopRequest) -> StopJobID:
        """Stop a job that is in progress."""
        data = self._request(
            "POST",
            COMMAND_STOP_PATH,
            label=COMMAND_STOP_PATH,
            body=stop_request.to_dict(),
            known=_JOB_REF_KEYS,
        )
        return StopJobID.from_dict(data or {})

    def command_deploy(self, deploy_request: DeployRequest) -> JobID:
        """Run Puppet across the nodes of an environment."""
        data = self._request(
            "POST",
            COMMAND_DEPLOY_PATH,
            label=COMMAND_DEPLOY_PATH,
            body=deploy_request.to_dict(),
            known=_JOB_REF_KEYS,
        )
        return JobID.from_dict(data or {})

    def inventory(self) -> list[InventoryNode]:
        """All nodes connected to the PCP broker."""
        data = self._request("GET", INVENTORY_PATH, label=INVENTORY_PATH)
        return [InventoryNode.from_dict(n) for n in (data or {}).get("items") or []]

    def inventory_node(self, node: str) -> InventoryNode:
        """Whether the given node is connected to the PCP broker."""
        data = self._request(
            "GET",
            INVENTORY_NODE_PATH.replace("{node}", _segment(node)),
            label=INVENTORY_NODE_PATH.replace("{node}", node),
            known=_INVENTORY_NODE_KEYS,
        )
        return InventoryNode.from_dict(data or {})

    def inventory_check(self, nodes: list[str]) -> list[InventoryNode]:
        """Which of the given nodes are connected to the PCP broker."""
        data = self._request(
            "POST", INVENTORY_PATH, label=INVENTORY_PATH, body={"nodes": list(nodes)}
        )
        return [InventoryNode.from_dict(n) for n in (data or {}).get("items") or []]

    def jobs(self) -> Jobs:
        """All jobs known to the orchestrator."""
        response = self._send("GET", JOBS_PATH, "")
        if response.status_code >= 400:
            body = _json_object(response)
            if body is not None:
                raise OrchestratorError(
                    kind=str(body.get("kind") or ""),
                    msg=str(body.get("Msg") or ""),
                    status_code=int(body.get("StatusCode") or 0),
                )
            raise HTTPError(
                msg=f"{JOBS_PATH} error: {_status(response)}",
                status_code=response.status_code,
            )
        if response.is_redirect:
            raise HTTPError(
                msg="auto redirect is disabled", status_code=response.status_code
            )
        return Jobs.from_dict(self._decode(response, _JOBS_KEYS, "") or {})

    def _job_part(self, template: str, job_id: str, known: frozenset[str]) -> Any:
        return self._request(
            "GET",
            template.replace("{job-id}", _segment(job_id)),
            label=template.replace("{job-id}", job_id),
            with_status=False,
            known=known,
        )

    def job(self, job_id: str) -> Job:
        """The details of a job."""
        return Job.from_dict(self._job_part(JOB_PATH, job_id, _JOB_KEYS) or {})

    def job_report(self, job_id: str) -> JobReport:
        """The report of a job."""
        data = self._job_part(JOB_REPORT_PATH, job_id, _JOB_REPORT_KEYS)
        return JobReport.from_dict(data or {})

    def job_nodes(self, job_id: str) -> JobNodes:
        """The nodes taking part in a job."""
        data = self._job_part(JOB_NODES_PATH, job_id, _JOB_NODES_KEYS)
        return JobNodes.from_dict(data or {})

    @staticmethod
    def _environment_params(environment: str) -> dict[str, str]:
        return {"environment": environment} if environment else {}

    def plans(self, environment: str = "") -> Plans:
        """The plans of an environment; the server picks one when none is given."""
        data = self._request(
            "GET",
            PLANS_PATH,
            label=PLANS_PATH,
            params=self._environment_params(environment),
            known=_LISTING_KEYS,
        )
        return Plans.from_dict(data or {})

    def plan_by_id(self, environment: str, plan_id: str) -> Plan:
        """The plan named by a plan id URL."""
        found = _PLAN_ID.search(plan_id)
        if found is None:
            raise ValueError(f"unknown plan ID format: {plan_id}")
        return self.plan(environment, found.group(1), found.group(2))

    def plan(self, environment: str, module: str, planname: str) -> Plan:
        """A plan with its metadata."""
        path = PLAN_PATH.replace("{module}", _segment(module)).replace(
            "{planname}", _segment(planname)
        )
        label = PLAN_PATH.replace("{module}", module).replace("{planname}", planname)
        data = self._request(
            "GET",
            path,
            label=label,
            params=self._environment_params(environment),
            known=_PLAN_KEYS,
        )
        return Plan.from_dict(data or {})

    def tasks(self, environment: str = "") -> Tasks:
        """The tasks of an environment; the server picks one when none is given."""
        data = self._request(
            "GET",
            TASKS_PATH,
            label=TASKS_PATH,
            params=self._environment_params(environment),
            known=_LISTING_KEYS,
        )
        return Tasks.from_dict(data or {})

    def task_by_id(self, environment: str, task_id: str) -> Task:
        """The task named by a task id URL."""
        found = _TASK_ID.search(task_id)
        if found is None:
            raise ValueError(f"unknown task ID format: {task_id}")
        return self.task(environment, found.group(1), found.group(2))

    def task(self, environment: str, module: str, taskname: str) -> Task:
        """A task with its metadata and files; a module's default task is named init."""
        path = TASK_PATH.replace("{module}", _segment(module)).replace(
            "{taskname}", _segment(taskname)
        )
        label = TASK_PATH.replace("{module}", module).replace("{taskname}", taskname)
        data = self._request(
            "GET",
            path,
            label=label,
            params=self._environment_params(environment),
            known=_TASK_KEYS,
        )
        return Task.from_dict(data or {})