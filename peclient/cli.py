"""Helpers for the interactive PuppetDB shell: history, output and input parsing."""

from __future__ import annotations

import dataclasses
import json
import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any

from peclient.puppetdb.pagination import OrderBy, Pagination

HISTORY_FILENAME = ".pdb_history"

_WORD_OR_PLUS = re.compile(r"[\w+]", re.ASCII)
_OPTION = re.compile(r"(\w+)=(\w+)", re.ASCII)
_ORDER_OPTION = re.compile(r'(\w+): "(\w+)"', re.ASCII)
_LIMIT = re.compile(r"Limit=(\d*)", re.ASCII)
_OFFSET = re.compile(r"Offset=(\d*)", re.ASCII)
_INCLUDE_TOTAL = re.compile(r"Include_total=(\d*)", re.ASCII)
_ORDER_FIELD = re.compile(r'field: "(\w*)"', re.ASCII)
_ORDER_DIRECTION = re.compile(r'order: "(\w*)"', re.ASCII)
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass
class ParsedCommand:
    """A shell command split into the API, the query, pagination and ordering."""

    api: str
    query: str = ""
    pagination: Pagination = field(default_factory=Pagination)
    order_by: OrderBy = field(default_factory=OrderBy)


def init_history_file(home: str | os.PathLike[str] | None = None) -> IO[str]:
    """Open, creating if needed, the history file in the home directory for reading and writing."""
    if home is None:
        try:
            home = Path.home()
        except (KeyError, RuntimeError) as exc:
            raise OSError(
                "unable to get users home directory - the command history wont be saved"
            ) from exc
    path = os.path.normpath(os.path.join(os.fspath(home), HISTORY_FILENAME))
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    return os.fdopen(fd, "r+", encoding="utf-8")


def write_history(history_file: IO[str] | None, cmd: str) -> None:
    """Append a command to the history file; nothing happens without a file."""
    if history_file is not None:
        history_file.write(f"{cmd}\n")


def read_history(history_file: IO[str] | None) -> list[str]:
    """The remaining lines of the history file, without line endings."""
    if history_file is None:
        return []
    return [line.rstrip("\n").removesuffix("\r") for line in history_file]


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"json: unsupported type: {type(obj).__name__}")


def format_json(data: Any) -> str:
    """Tab-indented JSON for data, with HTML-sensitive characters escaped."""
    text = json.dumps(data, indent="\t", ensure_ascii=False, default=_default)
    for char, escape in _JSON_ESCAPES.items():
        text = text.replace(char, escape)
    return text


def extract_string(text: str, start: str, end: str) -> str:
    """The part of text from the first start to the last end, both kept.

    Empty when start is missing or begins the text, when end is missing, or
    when the last end comes before the start.
    """
    first = text.find(start)
    if first <= 0:
        return ""
    last = text.rfind(end)
    if last == -1:
        return ""
    begin = first - 1 + len(start)
    finish = last + 1
    if begin > finish:
        return ""
    return text[begin:finish]


def create_pagination(options: list[str]) -> Pagination:
    """Pagination from options such as "Limit=5" and "Offset=10"."""
    pagination = Pagination()
    error: str | None = None
    for option in options:
        limit = _LIMIT.search(option)
        offset = _OFFSET.search(option)
        total = _INCLUDE_TOTAL.search(option)
        if limit:
            pagination.limit, error = _atoi(limit.group(1))
        if offset:
            pagination.offset, error = _atoi(offset.group(1))
        if total:
            print("Include_total is currently not implemented")
        if error is not None:
            print(error)
    return pagination


def _atoi(digits: str) -> tuple[int, str | None]:
    if digits:
        return int(digits), None
    return 0, f'strconv.Atoi: parsing "{digits}": invalid syntax'


def create_order_by(options: list[str]) -> OrderBy:
    """Ordering from options such as 'field: "certname"' and 'order: "asc"'."""
    order_field = ""
    order = ""
    for option in options:
        found_field = _ORDER_FIELD.search(option)
        found_order = _ORDER_DIRECTION.search(option)
        if found_field:
            order_field = found_field.group(1)
        if found_order:
            order = found_order.group(1)
    return OrderBy(field=order_field, order=order)


def parse_input(command: str) -> ParsedCommand:
    """Split a shell command into the API, query, pagination and ordering.

    For example 'nodes ["=", "certname", "a.example.net"] Limit=5 Offset=10'
    gives the API "nodes", the bracketed query, a limit of 5 and an offset
    of 10. The command "exit" prints a farewell and exits.
    """
    query = ""
    if _WORD_OR_PLUS.search(command):
        query = extract_string(command, "[", "]")
        if query == "[]":
            query = ""

    queryless = command.replace(query, "", 1)
    api = queryless.split(" ")[0]

    if api == "exit":
        print("Bye!")
        raise SystemExit(0)

    options = [m.group(0) for m in _OPTION.finditer(queryless)]
    pagination = create_pagination(options)

    order = extract_string(command, "{", "}")
    order_options = [m.group(0) for m in _ORDER_OPTION.finditer(order)]
    order_by = create_order_by(order_options)

    return ParsedCommand(api=api, query=query, pagination=pagination, order_by=order_by)