"""Interactive shell for querying PuppetDB."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import set_title

from peclient.cli import (
    format_json,
    init_history_file,
    parse_input,
    read_history,
    write_history,
)
from peclient.puppetdb.client import Client, PuppetDBError
from peclient.puppetdb.pagination import OrderBy, Pagination

PDB_TIMEOUT = 30.0

_log = logging.getLogger(__name__)

SUGGESTIONS: list[tuple[str, str]] = [
    ("nodes", "Get nodes"),
    ("facts", "Get facts"),
    ("factnames", "Get fact names"),
    ("inventory", "Get inventory"),
    ("reports", "Get reports"),
    ("=", "equal to"),
    (">", "greater than"),
    ("<", "less than"),
    (">=", "greater than or equal to"),
    ("<=", "less than or equal to"),
    ("~", "regexp match"),
    ("~>", "regexp array match"),
    ("null?", "is null"),
    ("and", ""),
    ("or", ""),
    ("not", ""),
    (
        "extract",
        "To reduce the keypairs returned for each result in the response, you can use extract:",
    ),
    ("exit", "Exit pdb"),
]


def suggest(word: str) -> list[tuple[str, str]]:
    """Suggestions whose text starts with word, ignoring case; none for an empty word."""
    if not word:
        return []
    lowered = word.lower()
    return [s for s in SUGGESTIONS if s[0].lower().startswith(lowered)]


class PdbCompleter(Completer):
    """Completes API names, operators and commands."""

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        word = document.get_word_before_cursor()
        for text, description in suggest(word):
            yield Completion(text, start_position=-len(word), display_meta=description)


def build_client(pe_server: str, token: str) -> Client:
    """A PuppetDB client for the server's port 8081, without certificate checks."""
    return Client(f"https://{pe_server}:8081", token, verify=False, timeout=PDB_TIMEOUT)


def run_command(
    client: Any, api: str, query: str, pagination: Pagination, order_by: OrderBy
) -> Any:
    """Run one API call, print its result as JSON and return it."""
    print(f"Executing Query '{api} {query}'")
    data: Any = None
    try:
        if api == "nodes":
            print("Nodes", end="")
            data = client.nodes(query, pagination, order_by)
        elif api == "facts":
            data = client.facts(query, pagination, order_by)
        elif api == "inventory":
            data = client.inventory(query, pagination, order_by)
        elif api == "reports":
            data = client.reports(query, pagination, order_by)
        elif api == "factnames":
            data = client.fact_names(pagination, order_by)
    except PuppetDBError as exc:
        print(f"err: {exc}")
        return None
    print(format_json(data))
    return data


def main(argv: Sequence[str] | None = None) -> int:
    """Start the shell: pdb <pe-server> <token>."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("\tusage: pdb pe.puppetlabs.net aabbccddeeff")
        sys.exit(-1)
    client = build_client(args[0], args[1])

    history_path: Path | None = None
    lines: list[str] = []
    try:
        with init_history_file() as history_file:
            history_path = Path(history_file.name)
            lines = read_history(history_file)
    except OSError as exc:
        _log.warning("Unable to create history file because : %s", exc)

    history = InMemoryHistory()
    for line in lines:
        history.append_string(line)
    set_title("puppet-db")
    session: PromptSession[str] = PromptSession(
        message="pdb> ", completer=PdbCompleter(), history=history
    )

    while True:
        try:
            text = session.prompt()
        except (EOFError, KeyboardInterrupt):
            return 0
        text = text.strip()
        parsed = parse_input(text)
        if not parsed.api:
            continue
        if history_path is not None:
            try:
                with history_path.open("a", encoding="utf-8") as handle:
                    write_history(handle, text)
            except OSError as exc:
                _log.warning("Unable to write history to %s because : %s", history_path, exc)
        run_command(client, parsed.api, parsed.query, parsed.pagination, parsed.order_by)