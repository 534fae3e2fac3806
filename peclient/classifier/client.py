"""Client for the node classifier API."""

from __future__ import annotations

import json
from typing import Any

import requests

from peclient.classifier.models import Class, Group, GroupRules, Node, Pagination

CLASSES_PATH = "/classifier-api/v1/classes"
GROUPS_PATH = "/classifier-api/v1/groups"
GROUP_RULES_PATH = "/classifier-api/v1/groups/{group-id}/rules"
CLASSIFIED_NODES_PATH = "/classifier-api/v2/classified/nodes"
RULES_TRANSLATE_PATH = "/classifier-api/v1/rules/translate"


class ClassifierError(Exception):
    """Raised when a classifier API request fails."""


def _status(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".strip()


class Client:
    """Talks to the classifier API with an authentication token."""

    def __init__(
        self,
        host_url: str,
        token: str,
        verify: bool | str = True,
        session: requests.Session | None = None,
    ) -> None:
        self.host_url = host_url.rstrip("/")
        self.verify = verify
        self._headers = {"X-Authentication": token}
        self._session = session if session is not None else requests.Session()

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: str | None = None,
    ) -> Any:
        where = f"{self.host_url}{path}"
        headers = dict(self._headers)
        if body is not None:
            headers["Content-Type"] = "application/json"
        try:
            response = self._session.request(
                method,
                where,
                params=params or None,
                data=body.encode() if body is not None else None,
                headers=headers,
                allow_redirects=False,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            raise ClassifierError(f"{where}: {exc}") from exc
        if response.is_redirect:
            raise ClassifierError(f"{where}: auto redirect is disabled")
        if response.status_code >= 400:
            raise ClassifierError(f'{where}: {_status(response)}: "{response.text}"')
        if not response.content or "json" not in response.headers.get("Content-Type", ""):
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ClassifierError(f"{where}: {exc}") from exc

    def post(self, uri: str) -> bytes:
        """POST to the given path without a body and return the raw response body."""
        try:
            response = self._session.post(
                f"{self.host_url}{uri}",
                headers=dict(self._headers),
                allow_redirects=False,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            raise ClassifierError(str(exc)) from exc
        if response.is_redirect:
            raise ClassifierError(f"{uri}: auto redirect is disabled")
        if response.status_code >= 400:
            raise ClassifierError(f"{uri} error: {_status(response)}")
        return response.content

    def classes(self, pagination: Pagination | None = None) -> list[Class]:
        """All classes; the endpoint is not paginated, so pagination is not sent."""
        data = self._send("GET", CLASSES_PATH)
        return [Class.from_dict(item) for item in data or []]

    def groups(self, pagination: Pagination | None = None) -> list[Group]:
        """All node groups."""
        params = pagination.to_params() if pagination is not None else None
        data = self._send("GET", GROUPS_PATH, params=params)
        return [Group.from_dict(item) for item in data or []]

    def group(self, group_id: str) -> Group:
        """The group with the given id."""
        data = self._send("GET", f"{GROUPS_PATH}/{group_id}")
        return Group.from_dict(data or {})

    def group_rules(self, group_id: str) -> GroupRules:
        """The rules of the group with the given id."""
        data = self._send("GET", GROUP_RULES_PATH.replace("{group-id}", group_id))
        return GroupRules.from_dict(data or {})

    def node(self, certname: str) -> Node:
        """The classification of the node with the given certname."""
        payload = self.post(f"{CLASSIFIED_NODES_PATH}/{certname}")
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise ClassifierError(f"{certname}: {exc}") from exc
        return Node.from_dict(data or {})

    def translate_rules(self, rule: str) -> str:
        """Translate a group rule, given as JSON text, into a PuppetDB query as JSON text."""
        data = self._send("POST", RULES_TRANSLATE_PATH, body=rule)
        query = None
        if isinstance(data, dict):
            query = next((v for k, v in data.items() if k.lower() == "query"), None)
        return json.dumps(query, separators=(",", ":"), sort_keys=True)