"""Client for the PuppetDB query API."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, TypeVar

import requests

from peclient.puppetdb.models import (
    Environment,
    Fact,
    FactPath,
    Inventory,
    Node,
    PDbStatus,
    Report,
)
from peclient.puppetdb.pagination import OrderBy, PageCursor, Pagination

ENVIRONMENTS_PATH = "/pdb/query/v4/environments"
PUPPETDB_STATUS_PATH = "/status/v1/services/puppetdb-status"
FACT_NAMES_PATH = "/pdb/query/v4/fact-names"
FACT_PATHS_PATH = "/pdb/query/v4/fact-paths"
FACT_CONTENTS_PATH = "/pdb/query/v4/fact-contents"
FACTS_PATH = "/pdb/query/v4/facts"
INVENTORY_PATH = "/pdb/query/v4/inventory"
NODES_PATH = "/pdb/query/v4/nodes"
NODE_PATH = "/pdb/query/v4/nodes/{certname}"
REPORTS_PATH = "/pdb/query/v4/reports"
ROOT_QUERY_PATH = "/pdb/query/v4"

# Status codes after which a retry of the same request is likely to succeed.
_TRANSIENT_STATUSES = frozenset({502, 503, 504, 408, 401, 412, 429})
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)

_log = logging.getLogger(__name__)

T = TypeVar("T")


class PuppetDBError(Exception):
    """Raised when a PuppetDB request fails."""


class TransientResponseError(PuppetDBError):
    """The API reported an error that a retry of the request is likely to get past."""

    description = "puppetdb: the api response indicates a recoverable error"


class NonTransientResponseError(PuppetDBError):
    """The API reported an error that a retry of the request will most likely hit again."""

    description = (
        "puppetdb: the api response indicates an error that cannot be recovered from"
    )


def get_total(records: str) -> int:
    """The total from an X-Records header value; 0 when missing or not a number."""
    if records:
        if _INTEGER.fullmatch(records):
            return int(records)
        _log.warning("Unable to convert X-Records %s to int", records)
    return 0


def _status(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".strip()


def _list_of(model: Callable[[dict[str, Any]], T]) -> Callable[[Any], list[T]]:
    def parse(data: Any) -> list[T]:
        return [model(item) for item in data or []]

    return parse


class Client:
    """Talks to the PuppetDB API with an authentication token.

    The timeout, in seconds, covers the whole request; None waits forever.
    """

    def __init__(
        self,
        host_url: str,
        token: str,
        verify: bool | str = True,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.host_url = host_url.rstrip("/")
        self.verify = verify
        self.timeout = timeout
        self._headers = {"X-Authentication": token}
        self._session = session if session is not None else requests.Session()

    def get(
        self,
        path: str,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> Any:
        """GET a path with the query, pagination and ordering; return the decoded JSON.

        When the pagination asks for the total, its total is set from the
        X-Records header of the response.
        """
        where = f"{self.host_url}{path}"
        params: dict[str, str] = {}
        if query:
            params["query"] = query
        if pagination is not None:
            params.update(pagination.to_params())
        if order_by is not None:
            params.update(order_by.to_params())

        try:
            response = self._session.get(
                where,
                params=params or None,
                headers=dict(self._headers),
                allow_redirects=False,
                verify=self.verify,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PuppetDBError(f"{where}: {exc}") from exc
        if response.is_redirect:
            raise PuppetDBError(f"{where}: auto redirect is disabled")
        if response.status_code >= 400:
            error = (
                TransientResponseError
                if response.status_code in _TRANSIENT_STATUSES
                else NonTransientResponseError
            )
            raise error(
                f'{where}: {_status(response)}: "{response.text}": {error.description}'
            )

        if pagination is not None and pagination.include_total:
            pagination.total = get_total(response.headers.get("X-Records", ""))

        if not response.content or "json" not in response.headers.get("Content-Type", ""):
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise PuppetDBError(f"{where}: {exc}") from exc

    def environments(self) -> list[Environment]:
        """All known environments."""
        return _list_of(Environment.from_dict)(self.get(ENVIRONMENTS_PATH))

    def pdb_status(self) -> PDbStatus:
        """The status of the PuppetDB service, including its version."""
        return PDbStatus.from_dict(self.get(PUPPETDB_STATUS_PATH) or {})

    def fact_names(
        self, pagination: Pagination | None = None, order_by: OrderBy | None = None
    ) -> list[str]:
        """All known fact names in alphabetical order, deactivated nodes included."""
        return list(self.get(FACT_NAMES_PATH, "", pagination, order_by) or [])

    def fact_paths(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[FactPath]:
        """All known fact paths for all known nodes."""
        data = self.get(FACT_PATHS_PATH, query, pagination, order_by)
        return _list_of(FactPath.from_dict)(data)

    def facts(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Fact]:
        """Facts matching the query; deactivated nodes are left out."""
        return _list_of(Fact.from_dict)(self.get(FACTS_PATH, query, pagination, order_by))

    def paginated_facts(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> PageCursor:
        """A cursor over pages of facts; each page is a list of Fact."""
        return PageCursor(
            self, FACTS_PATH, query, pagination, order_by, parse=_list_of(Fact.from_dict)
        )

    def fact_contents(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Fact]:
        """Facts matching the query on the fact-contents endpoint."""
        data = self.get(FACT_CONTENTS_PATH, query, pagination, order_by)
        return _list_of(Fact.from_dict)(data)

    def nodes(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Node]:
        """Nodes matching the query; deactivated and expired nodes are left out."""
        return _list_of(Node.from_dict)(self.get(NODES_PATH, query, pagination, order_by))

    def paginated_nodes(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> PageCursor:
        """A cursor over pages of nodes; without pagination the limit is 100."""
        return PageCursor(
            self, NODES_PATH, query, pagination, order_by, parse=_list_of(Node.from_dict)
        )

    def node(self, certname: str) -> Node:
        """The node with the given certname."""
        path = NODE_PATH.replace("{certname}", certname)
        try:
            response = self._session.get(
                f"{self.host_url}{path}",
                headers=dict(self._headers),
                allow_redirects=False,
                verify=self.verify,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PuppetDBError(str(exc)) from exc
        if response.is_redirect:
            raise PuppetDBError(f"{path}: auto redirect is disabled")
        if response.status_code >= 400:
            raise PuppetDBError(f"{path} error: {_status(response)}")
        if not response.content or "json" not in response.headers.get("Content-Type", ""):
            return Node()
        try:
            data = response.json()
        except ValueError as exc:
            raise PuppetDBError(f"{path}: {exc}") from exc
        return Node.from_dict(data or {})

    def inventory(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Inventory]:
        """Nodes with their facts and trusted facts."""
        data = self.get(INVENTORY_PATH, query, pagination, order_by)
        return _list_of(Inventory.from_dict)(data)

    def inventory_map(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        """The inventory as plain dictionaries, keeping fields such as dotted projections."""
        return list(self.get(INVENTORY_PATH, query, pagination, order_by) or [])

    def reports(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Report]:
        """Reports submitted by agents after their runs."""
        data = self.get(REPORTS_PATH, query, pagination, order_by)
        return _list_of(Report.from_dict)(data)

    def paginated_root_query(
        self,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> PageCursor:
        """A cursor over pages of a root query; each page is the decoded JSON."""
        return PageCursor(self, ROOT_QUERY_PATH, query, pagination, order_by)