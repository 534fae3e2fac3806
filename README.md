# peclient

Python clients for Puppet Enterprise HTTP APIs, and an interactive shell
for querying PuppetDB.

| Module                        | What it holds                        | Usual port |
|-------------------------------|--------------------------------------|------------|
| `peclient.puppetdb.client`    | PuppetDB query API client            | 8081       |
| `peclient.orch.client`        | Orchestrator API client              | 8143       |
| `peclient.classifier.client`  | Node Classifier API client           | 4433       |
| `peclient.rbac.models`        | RBAC data types (no HTTP client)     | —          |
| `peclient.shell`              | The `pe-pdb` interactive shell       | —          |

Each client sends its requests to the host URL you give it and decodes the
responses into dataclasses. Failures are raised as exceptions. Redirects are
not followed. Pass `verify=False` to skip certificate checks, or pass a path
to a CA bundle.

## PuppetDB

```python
from peclient.puppetdb.client import Client, TransientResponseError
from peclient.puppetdb.pagination import Pagination, OrderBy

pdb = Client("https://pe.example.com:8081", "token", verify=False, timeout=30)

nodes = pdb.nodes('["=", "certname", "web1.example.com"]',
                  Pagination(limit=10), OrderBy(field="certname", order="asc"))
for node in nodes:
    print(node.certname, node.latest_report_status)

facts = pdb.facts('["=", "name", "os"]')
print(pdb.pdb_status().service_version)
```

The client also offers `environments`, `fact_names`, `fact_paths`,
`fact_contents`, `node`, `inventory`, `inventory_map` and `reports`.
`Client.get(path, query, pagination, order_by)` returns the decoded JSON of
any query path.

If a `Pagination` has `include_total=True`, its `total` is filled in from
the `X-Records` response header.

A failed request raises one of two errors, both subclasses of
`PuppetDBError`:

- `TransientResponseError` when the status code suggests that a retry may
  succeed: 401, 408, 412, 429, 502, 503 or 504.
- `NonTransientResponseError` for any other error status.

### Paging through results

`paginated_nodes`, `paginated_facts` and `paginated_root_query` return a
`PageCursor`. When the cursor is created, it asks PuppetDB for a single
record to learn the total. After that it fetches one page per step.

```python
cursor = pdb.paginated_nodes("", Pagination(limit=100))
print(cursor.total_pages(), cursor.current_page())
for page in cursor:
    for node in page:
        print(node.certname)
```

`next_page()` fetches a single page and raises `StopIteration` when no pages
are left. If a request fails, the cursor keeps its position.

Without a pagination argument, the cursor uses `new_default_pagination()`:
a limit of 100, with the total included. Pages from `paginated_root_query`
are the decoded JSON as returned.

## Orchestrator

```python
from peclient.orch.client import Client
from peclient.orch.models import TaskRequest, StopRequest
from peclient.orch.types import Scope
from peclient.orch.errors import OrchestratorError, HTTPError

orch = Client("https://pe.example.com:8143", "token", verify=False)

job = orch.command_task(TaskRequest(
    task="package",
    params={"action": "status", "name": "openssl"},
    scope=Scope(nodes=["web1.example.com"]),
))
report = orch.job_report(job.job.name)
orch.command_stop(StopRequest(job=job.job.name))
```

The client covers the following calls:

- Commands: `command_task`, `command_schedule_task`, `command_task_target`,
  `command_plan_run`, `command_stop` and `command_deploy`.
- Inventory: `inventory`, `inventory_node` and `inventory_check`.
- Jobs: `jobs`, `job`, `job_report` and `job_nodes`.
- Plans: `plans`, `plan` and `plan_by_id`.
- Tasks: `tasks`, `task` and `task_by_id`.

`plan_by_id` and `task_by_id` take an id URL. If the URL is not in the
expected form, they raise `ValueError`.

`peclient.orch.models.new_schedule_task_options(timedelta)` builds a
repeating interval counted in whole seconds.

When the server answers with an error document, the client raises
`OrchestratorError`, which carries `kind`, `msg` and `status_code`. Other
failures raise `HTTPError`, which carries `msg` and `status_code`. With
`strict=True`, a response that contains fields the client does not know is
also raised as `HTTPError`.

## Node Classifier

```python
from peclient.classifier.client import Client
from peclient.classifier.models import Pagination

nc = Client("https://pe.example.com:4433", "token", verify=False)
for group in nc.groups(Pagination(limit=50)):
    print(group.name, group.environment)
print(nc.translate_rules('["=", ["fact", "os"], "Linux"]'))
```

The client also offers `classes`, `group`, `group_rules` and `node`.
`translate_rules` takes a rule as JSON text and returns the PuppetDB query
as JSON text. Failures raise `ClassifierError`.

## RBAC data types

`peclient.rbac.models` defines `Role`, `Permission` and `User`. Each one
decodes API JSON with `from_dict`. `Role` and `Permission` also produce
request JSON with `to_dict`; a role whose id is 0 leaves the id out.

## Interactive PuppetDB shell

```
pe-pdb pe.example.com token
```

The shell connects to `https://<server>:8081` with a 30-second timeout and
no certificate checks. It opens a `pdb> ` prompt that completes endpoint
names and query operators. The endpoints are `nodes`, `facts`,
`factnames`, `inventory` and `reports`. After the endpoint you may give a
bracketed query, `Limit=`/`Offset=` options and an `OrderBy={...}`
ordering:

```
pdb> nodes ["=", "certname", "web1.example.com"] Limit=5 Offset=10
pdb> facts Limit=10 OrderBy={field: "certname", order: "asc"}
pdb> exit
```

Results are printed as tab-indented JSON. The command history is kept in
`~/.pdb_history`.

## What this package does not do

- There is no RBAC HTTP client. The package does not fetch or create roles
  or users. It only provides the RBAC data types described above.
- There is no client for the PE console API. The package cannot list
  environments through the console. PuppetDB's own `environments` call is
  available instead.