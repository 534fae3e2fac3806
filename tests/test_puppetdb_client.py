import json
from urllib.parse import parse_qs, urlsplit

import pytest
import responses
from responses import matchers

from peclient.puppetdb.client import (
    ENVIRONMENTS_PATH,
    FACT_CONTENTS_PATH,
    FACT_NAMES_PATH,
    FACT_PATHS_PATH,
    FACTS_PATH,
    INVENTORY_PATH,
    NODES_PATH,
    PUPPETDB_STATUS_PATH,
    REPORTS_PATH,
    ROOT_QUERY_PATH,
    Client,
    NonTransientResponseError,
    PuppetDBError,
    TransientResponseError,
    get_total,
)
from peclient.puppetdb.models import (
    Fact,
    FactPath,
    Inventory,
    Logs,
    Metrics,
    Node,
    PDbStatus,
    Report,
    ResourceEvents,
    Resources,
)
from peclient.puppetdb.pagination import OrderBy, Pagination

HOST = "https://test-host:8081"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client():
    return Client(HOST, "token", timeout=1000)


def add_json(mocked, path, payload, query=None, status=200):
    match = [matchers.query_param_matcher(query)] if query is not None else []
    mocked.add(responses.GET, HOST + path, json=payload, status=status, match=match)


def add_paginated(mocked, path, *, limit, total, pages, error_page=None):
    def callback(request):
        params = parse_qs(urlsplit(request.url).query)
        offset = int(params.get("offset", ["0"])[0])
        page = offset // limit if offset > 0 else 0
        if error_page == page:
            return 500, {}, '{"error": "oops"}'
        return 200, {"X-Records": str(total)}, json.dumps(pages[page])

    mocked.add_callback(
        responses.GET, HOST + path, callback=callback, content_type="application/json"
    )


NODES_RESPONSE = [
    {
        "deactivated": None,
        "latest_report_hash": "7ccb6fb17b3fe11cecffe00b43b44f3776bcb89d",
        "facts_environment": "production",
        "cached_catalog_status": "not_used",
        "report_environment": "production",
        "latest_report_corrective_change": False,
        "catalog_environment": "production",
        "facts_timestamp": "2020-03-20T10:17:30.394Z",
        "latest_report_noop": False,
        "expired": None,
        "latest_report_noop_pending": False,
        "report_timestamp": "2020-03-20T10:17:54.470Z",
        "certname": "lenient-veranda.delivery.puppetlabs.net",
        "catalog_timestamp": "2020-03-20T10:17:33.991Z",
        "latest_report_job_id": "1",
        "latest_report_status": "changed",
    },
    {
        "deactivated": None,
        "latest_report_hash": None,
        "facts_environment": "production",
        "cached_catalog_status": None,
        "report_environment": None,
        "latest_report_corrective_change": None,
        "catalog_environment": None,
        "facts_timestamp": "2020-03-20T10:10:28.949Z",
        "latest_report_noop": None,
        "expired": None,
        "latest_report_noop_pending": None,
        "report_timestamp": None,
        "certname": "inland-ancestor.delivery.puppetlabs.net",
        "catalog_timestamp": None,
        "latest_report_job_id": None,
        "latest_report_status": None,
    },
]

EXPECTED_NODES = [
    Node(
        latest_report_hash="7ccb6fb17b3fe11cecffe00b43b44f3776bcb89d",
        facts_environment="production",
        cached_catalog_status="not_used",
        report_environment="production",
        catalog_environment="production",
        facts_timestamp="2020-03-20T10:17:30.394Z",
        report_timestamp="2020-03-20T10:17:54.470Z",
        certname="lenient-veranda.delivery.puppetlabs.net",
        catalog_timestamp="2020-03-20T10:17:33.991Z",
        latest_report_job_id="1",
        latest_report_status="changed",
    ),
    Node(
        facts_environment="production",
        facts_timestamp="2020-03-20T10:10:28.949Z",
        certname="inland-ancestor.delivery.puppetlabs.net",
    ),
]

OS_FACT = {
    "architecture": "x86_64",
    "distro": {
        "codename": "Core",
        "description": "CentOS Linux release 7.4.1708 (Core)",
        "id": "CentOS",
        "release": {"full": "7.4.1708", "major": "7", "minor": "4"},
        "specification": ":core-4.1-amd64:core-4.1-noarch",
    },
    "family": "RedHat",
    "hardware": "x86_64",
    "name": "CentOS",
    "release": {"full": "7.4.1708", "major": "7", "minor": "4"},
    "selinux": {
        "config_mode": "permissive",
        "config_policy": "targeted",
        "current_mode": "permissive",
        "enabled": True,
        "enforced": False,
        "policy_version": "28",
    },
}


def node_page(first, count):
    return [{"certname": f"{i}.delivery.puppetlabs.net"} for i in range(first, first + count)]


def facts_page(first_node, nodes):
    return [
        {"certname": f"{i}.delivery.puppetlabs.net", "name": name, "value": "x"}
        for i in range(first_node, first_node + nodes)
        for name in ("id", "gid")
    ]


def test_get_total():
    assert get_total("") == 0
    assert get_total("20") == 20
    assert get_total("many") == 0


def test_environments(mocked, client):
    add_json(mocked, ENVIRONMENTS_PATH, [{"name": "production"}])
    actual = client.environments()
    assert len(actual) > 0
    assert actual[0].name == "production"


def test_fact_names(mocked, client):
    names = ["agent_canary", "agent_specified_environment", "aio_agent_build", "aio_agent_version"]
    add_json(mocked, FACT_NAMES_PATH, names)
    assert client.fact_names() == names


def test_fact_paths(mocked, client):
    payload = [
        {"path": ["partitions", "sda3", "mount"], "type": "string"},
        {"path": ["partitions", "sda3", "size"], "type": "string"},
        {"path": ["partitions", "sda3", "uuid"], "type": "string"},
        {"path": ["apt_package_dist_updates", 90], "type": "string"},
    ]
    add_json(mocked, FACT_PATHS_PATH, payload)
    assert client.fact_paths() == [
        FactPath(path=["partitions", "sda3", "mount"], type="string"),
        FactPath(path=["partitions", "sda3", "size"], type="string"),
        FactPath(path=["partitions", "sda3", "uuid"], type="string"),
        FactPath(path=["apt_package_dist_updates", 90], type="string"),
    ]


def test_facts(mocked, client):
    query = '["=", "certname", "foobar.puppetlabs.net"]'
    payload = [
        {"certname": "foobar.puppetlabs.net", "environment": "production", "name": "id", "value": "root"},
        {"certname": "foobar.puppetlabs.net", "environment": "production", "name": "os", "value": OS_FACT},
        {"certname": "foobar.puppetlabs.net", "environment": "production", "name": "gid", "value": "root"},
    ]
    add_json(mocked, FACTS_PATH, payload, query={"query": query})
    assert client.facts(query) == [
        Fact(name="id", value="root", certname="foobar.puppetlabs.net", environment="production"),
        Fact(name="os", value=OS_FACT, certname="foobar.puppetlabs.net", environment="production"),
        Fact(name="gid", value="root", certname="foobar.puppetlabs.net", environment="production"),
    ]


def test_fact_contents(mocked, client):
    query = (
        '[ "extract", [ "value", [ "function", "count" ] ], '
        '[ "=", "path", [ "os", "name" ] ], [ "group_by", "value" ] ]'
    )
    payload = [{"value": "CentOS", "count": 359}, {"value": "RedHat", "count": 150}]
    add_json(mocked, FACT_CONTENTS_PATH, payload, query={"query": query})
    assert client.fact_contents(query) == [
        Fact(value="CentOS", count=359),
        Fact(value="RedHat", count=150),
    ]


def test_paginated_facts(mocked, client):
    pagination = Pagination(limit=10, offset=0, include_total=True)
    add_paginated(
        mocked, FACTS_PATH, limit=10, total=20, pages=[facts_page(1, 5), facts_page(6, 5)]
    )
    cursor = client.paginated_facts("", pagination)
    assert cursor.total_pages() == 2
    assert cursor.current_page() == 1

    first = cursor.next_page()
    assert len(first) == 10
    assert first[0].certname == "1.delivery.puppetlabs.net"

    second = cursor.next_page()
    assert cursor.current_page() == 2
    assert len(second) == 10
    assert second[0].certname == "6.delivery.puppetlabs.net"

    with pytest.raises(StopIteration):
        cursor.next_page()


def test_nodes(mocked, client):
    add_json(mocked, NODES_PATH, NODES_RESPONSE)
    assert client.nodes() == EXPECTED_NODES


def test_nodes_with_query(mocked, client):
    query = '["=", "certname", "lenient-veranda.delivery.puppetlabs.net"]'
    add_json(mocked, NODES_PATH, NODES_RESPONSE, query={"query": query})
    assert client.nodes(query) == EXPECTED_NODES


def test_nodes_sends_pagination_and_order(mocked, client):
    add_json(
        mocked,
        NODES_PATH,
        NODES_RESPONSE,
        query={
            "limit": "5",
            "offset": "10",
            "order_by": '[{"field": "certname", "order": "asc"}]',
        },
    )
    actual = client.nodes("", Pagination(limit=5, offset=10), OrderBy("certname", "asc"))
    assert actual == EXPECTED_NODES


def test_include_total_reads_records_header(mocked, client):
    mocked.add(
        responses.GET, HOST + NODES_PATH, json=NODES_RESPONSE, headers={"X-Records": "42"}
    )
    pagination = Pagination(limit=2, include_total=True)
    client.nodes("", pagination)
    assert pagination.total == 42


def test_paginated_nodes(mocked, client):
    pagination = Pagination(limit=5, offset=0, include_total=True)
    add_paginated(
        mocked, NODES_PATH, limit=5, total=10, pages=[node_page(1, 5), node_page(6, 5)]
    )
    cursor = client.paginated_nodes("", pagination)
    assert cursor.total_pages() == 2
    assert cursor.current_page() == 1

    first = cursor.next_page()
    assert len(first) == 5
    assert first[0].certname == "1.delivery.puppetlabs.net"

    second = cursor.next_page()
    assert cursor.current_page() == 2
    assert len(second) == 5
    assert second[0].certname == "6.delivery.puppetlabs.net"

    with pytest.raises(StopIteration):
        cursor.next_page()


def test_paginated_nodes_iterates_all_pages(mocked, client):
    add_paginated(
        mocked, NODES_PATH, limit=5, total=10, pages=[node_page(1, 5), node_page(6, 5)]
    )
    cursor = client.paginated_nodes("", Pagination(limit=5, include_total=True))
    certnames = [node.certname for page in cursor for node in page]
    assert certnames == [f"{i}.delivery.puppetlabs.net" for i in range(1, 11)]


def test_paginated_nodes_default_pagination(mocked, client):
    add_paginated(mocked, NODES_PATH, limit=100, total=3, pages=[node_page(1, 3)])
    cursor = client.paginated_nodes()
    assert cursor.pagination.limit == 100
    assert cursor.pagination.total == 3
    assert cursor.total_pages() == 1


def test_paginated_nodes_with_error(mocked, client):
    pagination = Pagination(limit=5, offset=0, include_total=True)
    add_paginated(
        mocked,
        NODES_PATH,
        limit=5,
        total=10,
        pages=[node_page(1, 5), node_page(6, 5)],
        error_page=1,
    )
    cursor = client.paginated_nodes("", pagination)
    assert cursor.total_pages() == 2
    assert cursor.current_page() == 1

    first = cursor.next_page()
    assert len(first) == 5
    assert first[0].certname == "1.delivery.puppetlabs.net"

    with pytest.raises(NonTransientResponseError):
        cursor.next_page()
    assert pagination.offset == 0
    assert cursor.current_page() == 1


def test_paginated_root_query(mocked, client):
    add_paginated(mocked, ROOT_QUERY_PATH, limit=5, total=2, pages=[node_page(1, 2)])
    cursor = client.paginated_root_query("nodes {}", Pagination(limit=5))
    assert cursor.next_page() == node_page(1, 2)


def test_node(mocked, client):
    add_json(mocked, "/pdb/query/v4/nodes/foo", NODES_RESPONSE[1])
    assert client.node("foo") == EXPECTED_NODES[1]


def test_node_error(mocked, client):
    add_json(mocked, "/pdb/query/v4/nodes/foo", {}, status=404)
    with pytest.raises(PuppetDBError, match="/pdb/query/v4/nodes/foo error: 404"):
        client.node("foo")


def test_inventory(mocked, client):
    query = '["=", "certname", "foobar.delivery.puppetlabs.net"]'
    payload = [
        {
            "certname": "foobar.delivery.puppetlabs.net",
            "timestamp": "2020-03-30T08:55:23.348Z",
            "environment": "production",
            "facts": {
                "agent_specified_environment": "production",
                "aio_agent_build": "6.10.1",
                "architecture": "x86_64",
            },
            "trusted": {"authenticated": "remote", "domain": "delivery.puppetlabs.net"},
        }
    ]
    add_json(mocked, INVENTORY_PATH, payload, query={"query": query})
    assert client.inventory(query) == [
        Inventory(
            certname="foobar.delivery.puppetlabs.net",
            timestamp="2020-03-30T08:55:23.348Z",
            environment="production",
            facts={
                "agent_specified_environment": "production",
                "aio_agent_build": "6.10.1",
                "architecture": "x86_64",
            },
            trusted={"authenticated": "remote", "domain": "delivery.puppetlabs.net"},
        )
    ]


def test_inventory_map_keeps_dotted_fields(mocked, client):
    payload = [{"certname": "foo", "facts.os.name": "CentOS"}]
    add_json(mocked, INVENTORY_PATH, payload)
    assert client.inventory_map() == payload


def test_reports(mocked, client):
    query = '["=", "certname", "foobar.delivery.puppetlabs.net"]'
    payload = [
        {
            "hash": "4324324324324324324",
            "puppet_version": "10.0",
            "report_format": 2,
            "producer": "foobar-master.puppet.com",
            "transaction_uuid": "342343432432",
            "status": "Good",
            "noop": False,
            "noop_pending": False,
            "environment": "production",
            "configuration_version": "99",
            "certname": "foobar",
            "code_id": "2343",
            "catalog_uuid": "343243243243243243",
            "cached_catalog_status": "Good",
            "resource_events": {"href": "http://foobar.events.com"},
            "resources": {"href": "http://foobar.resources.com"},
            "metrics": {"href": "http://foobar.metrics.com"},
            "logs": {"href": "http://foobar.logs.com"},
        }
    ]
    add_json(mocked, REPORTS_PATH, payload, query={"query": query})
    assert client.reports(query) == [
        Report(
            hash="4324324324324324324",
            puppet_version="10.0",
            report_format=2,
            producer="foobar-master.puppet.com",
            transaction_uuid="342343432432",
            status="Good",
            environment="production",
            configuration_version="99",
            certname="foobar",
            code_id="2343",
            catalog_uuid="343243243243243243",
            cached_catalog_status="Good",
            resource_events=ResourceEvents(href="http://foobar.events.com"),
            resources=Resources(href="http://foobar.resources.com"),
            metrics=Metrics(href="http://foobar.metrics.com"),
            logs=Logs(href="http://foobar.logs.com"),
        )
    ]


def test_status(mocked, client):
    add_json(mocked, PUPPETDB_STATUS_PATH, {"service_version": "6.8.1-20200122_170412-gc886602"})
    assert client.pdb_status() == PDbStatus("6.8.1-20200122_170412-gc886602")


def test_status_error(mocked, client):
    body = '{"Op":"nil","URL":"https://test-host:8081","Err":null}'
    mocked.add(
        responses.GET,
        HOST + PUPPETDB_STATUS_PATH,
        body=body,
        status=404,
        content_type="application/json",
    )
    with pytest.raises(NonTransientResponseError) as info:
        client.pdb_status()
    message = str(info.value)
    assert message.startswith(
        "https://test-host:8081/status/v1/services/puppetdb-status: 404"
    )
    assert f': "{body}"' in message


@pytest.mark.parametrize("status", [401, 408, 412, 429, 502, 503, 504])
def test_transient_statuses(mocked, client, status):
    add_json(mocked, NODES_PATH, {}, status=status)
    with pytest.raises(TransientResponseError):
        client.nodes()


@pytest.mark.parametrize("status", [400, 403, 404, 500])
def test_non_transient_statuses(mocked, client, status):
    add_json(mocked, NODES_PATH, {}, status=status)
    with pytest.raises(NonTransientResponseError):
        client.nodes()


def test_connection_error_names_url(mocked, client):
    with pytest.raises(PuppetDBError) as info:
        client.environments()
    assert str(info.value).startswith(HOST + ENVIRONMENTS_PATH + ": ")
    assert not isinstance(info.value, (TransientResponseError, NonTransientResponseError))


def test_sends_authentication_header(mocked, client):
    mocked.add(
        responses.GET,
        HOST + ENVIRONMENTS_PATH,
        json=[],
        match=[matchers.header_matcher({"X-Authentication": "token"})],
    )
    assert client.environments() == []