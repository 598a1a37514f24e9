"""
Command line access to the document store.

Usage:
    blogstore list posts --where status=published --sort date:desc --limit 5
    blogstore get site-data menu
    blogstore add socialLinks '{"platform": "Youtube", "url": "https://youtube.com/@amaj"}'
    blogstore page posts 2 --size 10 --where status=published --sort date:desc
    blogstore check
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .collections import Collection, MENU_ID
from .config import get_config
from .content import ContentService
from .exceptions import BlogStoreError, InvalidArgument
from .logger import get_logger
from .models.menu import DEFAULT_MENU
from .store import DocumentStore, get_store

console = Console()
logger = get_logger("blogstore.cli")

# Columns shown first when a collection is listed as a table
PREFERRED_COLUMNS = ["id", "title", "slug", "status", "category", "date", "name", "platform", "url", "location"]


def _parse_value(field: str, raw: str):
    """JSON literal if it parses (numbers, booleans, null), else the string. Ids stay strings."""
    if field == "id":
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_where(items: Optional[List[str]], op: str = "==") -> list:
    filters = []
    for item in items or []:
        if "!=" in item:
            field, value = item.split("!=", 1)
            field = field.strip()
            filters.append((field, "!=", _parse_value(field, value.strip())))
            continue
        if "=" not in item:
            raise InvalidArgument(f"Filter must look like FIELD=VALUE, got '{item}'", argument="where")
        field, value = item.split("=", 1)
        field = field.strip()
        if op == "in":
            filters.append((field, "in", [_parse_value(field, v.strip()) for v in value.split(",") if v.strip()]))
        else:
            filters.append((field, "==", _parse_value(field, value.strip())))
    return filters


def parse_sort(raw: Optional[str]):
    if not raw:
        return None
    field, _, direction = raw.partition(":")
    return (field, direction or "asc")


def parse_json(raw: str) -> dict:
    text = sys.stdin.read() if raw == "-" else raw
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidArgument(f"Invalid JSON: {e}", argument="data") from e
    if not isinstance(data, dict):
        raise InvalidArgument("JSON data must be an object", argument="data")
    return data


def render_records(records: List[dict], title: str) -> None:
    if not records:
        console.print(f"[yellow]No records in {title}[/yellow]")
        return

    keys = []
    for record in records:
        for key in record:
            if key not in keys:
                keys.append(key)
    columns = [k for k in PREFERRED_COLUMNS if k in keys] or keys[:6]

    table = Table(title=title)
    for column in columns:
        table.add_column(column, overflow="fold")
    for record in records:
        table.add_row(*[_cell(record.get(c)) for c in columns])
    console.print(table)


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False)
    else:
        text = str(value)
    return text if len(text) <= 60 else text[:57] + "..."


def _print_json(data) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blogstore", description="Blog document store")
    sub = parser.add_subparsers(dest="command", required=True)

    def query_args(p):
        p.add_argument("--where", action="append", help="FIELD=VALUE or FIELD!=VALUE (repeatable)")
        p.add_argument("--where-in", action="append", help="FIELD=a,b,c (repeatable)")
        p.add_argument("--sort", help="FIELD or FIELD:desc")

    p = sub.add_parser("list", help="List records of a collection")
    p.add_argument("collection")
    query_args(p)
    p.add_argument("--limit", type=int)
    p.add_argument("--json", action="store_true", help="Print raw JSON instead of a table")

    p = sub.add_parser("get", help="Show one record")
    p.add_argument("collection")
    p.add_argument("id")

    p = sub.add_parser("add", help="Add a record (JSON object, or - for stdin)")
    p.add_argument("collection")
    p.add_argument("data")

    p = sub.add_parser("update", help="Merge fields into a record")
    p.add_argument("collection")
    p.add_argument("id")
    p.add_argument("data")

    p = sub.add_parser("set", help="Replace a record")
    p.add_argument("collection")
    p.add_argument("id")
    p.add_argument("data")

    p = sub.add_parser("delete", help="Delete a record")
    p.add_argument("collection")
    p.add_argument("id")

    p = sub.add_parser("page", help="Show one page of a collection")
    p.add_argument("collection")
    p.add_argument("page", type=int)
    p.add_argument("--size", type=int, default=None)
    query_args(p)

    sub.add_parser("seed-menu", help="Write the default menu if none is stored")
    sub.add_parser("stats", help="Post counts for the dashboard")
    sub.add_parser("check", help="Show which backend is active")

    return parser


def run(args: argparse.Namespace, store: DocumentStore) -> int:
    config = get_config()

    if args.command in ("list", "page"):
        filters = parse_where(args.where) + parse_where(args.where_in, op="in")
        sort = parse_sort(args.sort)

        if args.command == "list":
            records = store.get_many(args.collection, filters=filters, sort=sort, limit=args.limit)
            if args.json:
                _print_json(records)
            else:
                render_records(records, args.collection)
            return 0

        size = args.size if args.size is not None else config.posts_per_page
        page = store.get_page(args.collection, args.page, size, filters=filters, sort=sort)
        render_records(page.records, f"{args.collection} (page {page.page}/{page.total_pages})")
        console.print(f"{page.total_count} record(s) total")
        return 0

    if args.command == "get":
        record = store.get_one(args.collection, args.id)
        if record is None:
            console.print(f"[yellow]{args.collection}/{args.id} not found[/yellow]")
            return 1
        _print_json(record)
        return 0

    if args.command == "add":
        new_id = store.add_one(args.collection, parse_json(args.data))
        console.print(f"[green]Added[/green] {args.collection}/{new_id}")
        return 0

    if args.command == "update":
        merged = store.update_one(args.collection, args.id, parse_json(args.data))
        _print_json(merged)
        return 0

    if args.command == "set":
        store.set_one(args.collection, args.id, parse_json(args.data))
        console.print(f"[green]Saved[/green] {args.collection}/{args.id}")
        return 0

    if args.command == "delete":
        if store.delete_one(args.collection, args.id):
            console.print(f"[green]Deleted[/green] {args.collection}/{args.id}")
            return 0
        console.print(f"[yellow]{args.collection}/{args.id} not found[/yellow]")
        return 1

    if args.command == "seed-menu":
        menu = store.get_one(Collection.SITE_DATA, MENU_ID)
        if menu["data"]:
            console.print(f"Menu already has {len(menu['data'])} top-level item(s); leaving it alone")
            return 0
        store.set_one(Collection.SITE_DATA, MENU_ID, {"data": DEFAULT_MENU})
        console.print(f"[green]Seeded menu[/green] with {len(DEFAULT_MENU)} categories")
        return 0

    if args.command == "stats":
        stats = ContentService(store).dashboard_stats()
        table = Table(title="Posts")
        table.add_column("metric")
        table.add_column("count", justify="right")
        for key, value in stats.to_dict().items():
            table.add_row(key.replace("_", " "), str(value))
        console.print(table)
        return 0

    if args.command == "check":
        console.print(f"Backend: [bold]{store.mode}[/bold]")
        console.print(f"Connected: {'yes' if store.is_connected else '[red]no[/red]'}")
        if store.fallback is not None:
            console.print(f"Read fallback: {store.fallback.name} ({config.data_dir})")
        return 0 if store.is_connected else 1

    raise InvalidArgument(f"Unknown command '{args.command}'", argument="command")


def main(argv: Optional[List[str]] = None, store: Optional[DocumentStore] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run(args, store or get_store())
    except BlogStoreError as e:
        logger.error(str(e))
        console.print(f"[red]Error:[/red] {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
