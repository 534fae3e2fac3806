"""Pagination, ordering and page cursors for PuppetDB queries."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Protocol


@dataclass
class Pagination:
    """Limit and offset for a query, and the total reported by PuppetDB."""

    limit: int = 0
    offset: int = 0
    include_total: bool = False
    total: int = 0

    def to_params(self) -> dict[str, str]:
        """Query parameters for this pagination; zero and false values are left out."""
        params: dict[str, str] = {}
        if self.limit > 0:
            params["limit"] = str(self.limit)
        if self.offset > 0:
            params["offset"] = str(self.offset)
        if self.include_total:
            params["include_total"] = "true"
        return params


@dataclass(frozen=True)
class OrderBy:
    """The field and direction a response is ordered by."""

    field: str = ""
    order: str = ""

    def to_params(self) -> dict[str, str]:
        """The order_by query parameter for this ordering."""
        return {"order_by": f'[{{"field": "{self.field}", "order": "{self.order}"}}]'}


def new_default_pagination() -> Pagination:
    """Pagination with a limit of 100 that asks for the total."""
    return Pagination(limit=100, include_total=True)


class _Getter(Protocol):
    def get(
        self,
        path: str,
        query: str,
        pagination: Pagination | None,
        order_by: OrderBy | None,
    ) -> Any: ...


def _identity(data: Any) -> Any:
    return data


class PageCursor:
    """Steps through the pages of a PuppetDB query.

    Creating the cursor makes one request for a single result so that the
    total number of results, and so the number of pages, is known.
    """

    def __init__(
        self,
        client: _Getter,
        path: str,
        query: str = "",
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
        parse: Callable[[Any], Any] | None = None,
    ) -> None:
        if pagination is None:
            pagination = new_default_pagination()
        probe = Pagination(limit=1, include_total=True)
        client.get(path, query, probe, order_by)
        pagination.total = probe.total
        pagination.include_total = True

        self.pagination = pagination
        self._client = client
        self._path = path
        self._query = query
        self._order_by = order_by
        self._parse = parse if parse is not None else _identity
        self._fetched = False

    def total_pages(self) -> int:
        """The number of pages the results fill."""
        return math.ceil(self.pagination.total / self.pagination.limit)

    def current_page(self) -> int:
        """The number of the page the cursor is at, counting from 1."""
        if self.pagination.offset == 0:
            return 1
        return self.pagination.offset // self.pagination.limit + 1

    def next_page(self) -> Any:
        """Fetch the next page and move the cursor on.

        Raises StopIteration when no pages are left. If the request fails the
        cursor stays where it was.
        """
        candidate = replace(self.pagination)
        if self._fetched:
            candidate.offset = self.pagination.offset + self.pagination.limit
            if candidate.offset >= self.pagination.total:
                raise StopIteration
        data = self._client.get(self._path, self._query, candidate, self._order_by)
        self.pagination.offset = candidate.offset
        self._fetched = True
        return self._parse(data)

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                page = self.next_page()
            except StopIteration:
                return
            yield page