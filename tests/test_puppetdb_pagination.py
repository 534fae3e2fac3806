import pytest

from peclient.puppetdb.pagination import (
    OrderBy,
    PageCursor,
    Pagination,
    new_default_pagination,
)

NODES = "/pdb/query/v4/nodes"


class FakeClient:
    """Serves fixed pages keyed by offset and reports a total."""

    def __init__(self, pages, limit, total, fail_on_page=None):
        self.pages = pages
        self.limit = limit
        self.total = total
        self.fail_on_page = fail_on_page
        self.calls = []

    def get(self, path, query, pagination, order_by):
        self.calls.append((path, query, pagination.limit, pagination.offset))
        page_num = pagination.offset // self.limit if pagination.offset > 0 else 0
        if self.fail_on_page is not None and page_num == self.fail_on_page:
            raise RuntimeError("oops")
        if pagination.include_total:
            pagination.total = self.total
        return self.pages[page_num]


def make_pages():
    page1 = [{"certname": f"{i}.delivery.puppetlabs.net"} for i in range(1, 6)]
    page2 = [{"certname": f"{i}.delivery.puppetlabs.net"} for i in range(6, 11)]
    return [page1, page2]


def test_pagination_params_empty_by_default():
    assert Pagination().to_params() == {}


def test_pagination_params_all_set():
    params = Pagination(limit=10, offset=20, include_total=True).to_params()
    assert params == {"limit": "10", "offset": "20", "include_total": "true"}


def test_pagination_params_skip_non_positive():
    assert Pagination(limit=-1, offset=0).to_params() == {}


def test_order_by_params():
    params = OrderBy(field="certname", order="asc").to_params()
    assert params == {"order_by": '[{"field": "certname", "order": "asc"}]'}


def test_new_default_pagination():
    p = new_default_pagination()
    assert (p.limit, p.offset, p.include_total) == (100, 0, True)


def test_cursor_probes_total_on_creation():
    client = FakeClient(make_pages(), limit=5, total=10)
    pagination = Pagination(limit=5, include_total=True)
    PageCursor(client, NODES, "", pagination, None)
    assert client.calls == [(NODES, "", 1, 0)]
    assert pagination.total == 10


def test_paginated_nodes():
    client = FakeClient(make_pages(), limit=5, total=10)
    pagination = Pagination(limit=5, offset=0, include_total=True)
    cursor = PageCursor(client, NODES, "", pagination, None)
    assert cursor.total_pages() == 2
    assert cursor.current_page() == 1

    first = cursor.next_page()
    assert len(first) == 5
    assert first[0]["certname"] == "1.delivery.puppetlabs.net"

    second = cursor.next_page()
    assert cursor.current_page() == 2
    assert len(second) == 5
    assert second[0]["certname"] == "6.delivery.puppetlabs.net"

    with pytest.raises(StopIteration):
        cursor.next_page()


def test_paginated_nodes_with_error_keeps_offset():
    client = FakeClient(make_pages(), limit=5, total=10, fail_on_page=1)
    pagination = Pagination(limit=5, offset=0, include_total=True)
    cursor = PageCursor(client, NODES, "", pagination, None)
    assert cursor.total_pages() == 2

    first = cursor.next_page()
    assert first[0]["certname"] == "1.delivery.puppetlabs.net"

    with pytest.raises(RuntimeError):
        cursor.next_page()
    assert pagination.offset == 0
    assert cursor.current_page() == 1


def test_iteration_yields_every_page_once():
    pages = make_pages()
    client = FakeClient(pages, limit=5, total=10)
    cursor = PageCursor(client, NODES, "", Pagination(limit=5), None)
    assert list(cursor) == pages


def test_parse_is_applied_to_each_page():
    client = FakeClient(make_pages(), limit=5, total=10)
    cursor = PageCursor(
        client, NODES, "", Pagination(limit=5), None,
        parse=lambda data: [item["certname"] for item in data],
    )
    assert cursor.next_page()[0] == "1.delivery.puppetlabs.net"


def test_default_pagination_used_when_none():
    client = FakeClient([[{"a": 1}]], limit=100, total=3)
    cursor = PageCursor(client, NODES)
    assert cursor.pagination.limit == 100
    assert cursor.pagination.include_total is True
    assert cursor.total_pages() == 1
    assert cursor.next_page() == [{"a": 1}]
    with pytest.raises(StopIteration):
        cursor.next_page()


def test_query_and_order_are_passed_through():
    client = FakeClient(make_pages(), limit=5, total=10)
    order = OrderBy(field="certname", order="asc")
    seen = []
    original = client.get

    def recording_get(path, query, pagination, order_by):
        seen.append(order_by)
        return original(path, query, pagination, order_by)

    client.get = recording_get
    cursor = PageCursor(client, NODES, '["=", "certname", "x"]', Pagination(limit=5), order)
    cursor.next_page()
    assert seen == [order, order]
    assert all(call[1] == '["=", "certname", "x"]' for call in client.calls)