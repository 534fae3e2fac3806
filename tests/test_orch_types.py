from peclient.orch.types import Interval, Owner, Pagination, ScheduleOptions, Scope


def test_scope_omits_empty_fields():
    assert Scope(nodes=["node1.example.com"]).to_dict() == {"nodes": ["node1.example.com"]}
    assert Scope().to_dict() == {}


def test_scope_all_fields():
    scope = Scope(
        application="Wordpress_app[demo]",
        nodes=["node1.example.com"],
        query=["from", "nodes", ["~", "certname", ".*"]],
        node_group="00000000-0000-4000-8000-000000000000",
    )
    data = scope.to_dict()
    assert data["application"] == "Wordpress_app[demo]"
    assert data["query"] == ["from", "nodes", ["~", "certname", ".*"]]
    assert data["node_group"] == "00000000-0000-4000-8000-000000000000"


def test_owner_from_dict():
    assert Owner.from_dict({"id": "a", "login": "admin"}) == Owner("a", "admin")


def test_pagination_from_dict():
    assert Pagination.from_dict({"limit": 5, "offset": 10, "total": 20}) == Pagination(5, 10, 20)
    assert Pagination.from_dict({}) == Pagination()


def test_schedule_options_to_dict():
    options = ScheduleOptions(Interval("seconds", 3600))
    assert options.to_dict() == {"interval": {"units": "seconds", "value": 3600}}