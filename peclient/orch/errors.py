"""Errors raised by the orchestrator client."""

from __future__ import annotations

from typing import Any

import requests

from peclient.classifier.models import _field


class OrchestratorError(Exception):
    """An error reported in the body of an orchestrator response."""

    def __init__(self, kind: str = "", msg: str = "", status_code: int = 0) -> None:
        super().__init__(msg)
        self.kind = kind
        self.msg = msg
        self.status_code = status_code

    def __str__(self) -> str:
        return self.msg

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrchestratorError):
            return NotImplemented
        return (self.kind, self.msg, self.status_code) == (
            other.kind,
            other.msg,
            other.status_code,
        )

    __hash__ = Exception.__hash__


class HTTPError(Exception):
    """An HTTP error status without an orchestrator error body."""

    def __init__(self, msg: str = "", status_code: int = 0) -> None:
        super().__init__(msg)
        self.msg = msg
        self.status_code = status_code

    def __str__(self) -> str:
        return self.msg


def _body(response: requests.Response) -> dict[str, Any] | None:
    if "json" not in response.headers.get("Content-Type", ""):
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def process_error(response: requests.Response, error_string: str = "") -> None:
    """Raise the error a response carries; return quietly on success.

    An error body becomes an OrchestratorError with the response's status code;
    otherwise an HTTPError with error_string, or the status line, as message.
    """
    if response.status_code < 400:
        return
    message = error_string or f"{response.status_code} {response.reason or ''}".strip()
    body = _body(response)
    if body is not None:
        kind = _field(body, "kind", "")
        msg = _field(body, "Msg", "")
        if kind or msg or _field(body, "StatusCode", 0):
            raise OrchestratorError(kind=kind, msg=msg, status_code=response.status_code)
    raise HTTPError(msg=message, status_code=response.status_code)