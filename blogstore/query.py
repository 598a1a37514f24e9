"""
Filter, sort and pagination over in-memory record lists.

The local backend loads a whole collection and runs it through ``apply_query``;
the remote backend translates the same ``Query`` into SQL instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .exceptions import InvalidArgument

OP_EQ = "=="
OP_NE = "!="
OP_IN = "in"
OPERATORS = (OP_EQ, OP_NE, OP_IN)

ASC = "asc"
DESC = "desc"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _check_field(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidArgument("Field names must be non-empty strings", argument="field", value=name)


@dataclass(frozen=True)
class Filter:
    """A single predicate: record[field] <op> value."""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        _check_field(self.field)
        if self.op not in OPERATORS:
            raise InvalidArgument(
                f"Unsupported filter operator '{self.op}'", argument="op", value=self.op
            )
        if self.op == OP_IN:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Iterable):
                raise InvalidArgument(
                    "'in' filter needs a list of values", argument="value", value=self.value
                )
            object.__setattr__(self, "value", tuple(self.value))

    def matches(self, record: dict) -> bool:
        actual = record.get(self.field)
        if self.op == OP_EQ:
            return json_equal(actual, self.value)
        if self.op == OP_NE:
            return not json_equal(actual, self.value)
        return any(json_equal(actual, v) for v in self.value)


def json_equal(a: Any, b: Any) -> bool:
    """Equality as JSON sees it: booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(json_equal(a[k], b[k]) for k in a)
    return a == b


@dataclass(frozen=True)
class Sort:
    field: str
    direction: str = ASC

    def __post_init__(self):
        _check_field(self.field)
        direction = self.direction or ASC
        if not isinstance(direction, str) or direction.lower() not in (ASC, DESC):
            raise InvalidArgument(
                f"Sort direction must be '{ASC}' or '{DESC}'",
                argument="direction", value=self.direction,
            )
        object.__setattr__(self, "direction", direction.lower())

    @property
    def descending(self) -> bool:
        return self.direction == DESC


@dataclass(frozen=True)
class Query:
    """Normalized read options shared by every backend."""
    filters: Tuple[Filter, ...] = field(default_factory=tuple)
    sort: Optional[Sort] = None
    limit: Optional[int] = None

    @classmethod
    def build(cls, filters=None, sort=None, limit: Optional[int] = None) -> "Query":
        """
        Build a query from loose caller input.

        Filters may be Filter objects or (field, op, value) tuples; sort may
        be a Sort, a (field, direction) tuple or a bare field name. A limit of
        0 or None means no cap.
        """
        if filters is not None and not _is_sequence(filters):
            raise InvalidArgument("Filters must be a list", argument="filters", value=filters)
        parsed = []
        for f in filters or ():
            if not isinstance(f, Filter):
                if not _is_sequence(f) or len(f) != 3:
                    raise InvalidArgument("Filters are (field, op, value) triples", argument="filters", value=f)
                f = Filter(*f)
            parsed.append(f)

        if sort is None or isinstance(sort, Sort):
            parsed_sort = sort
        elif isinstance(sort, str):
            parsed_sort = Sort(sort)
        elif _is_sequence(sort) and len(sort) in (1, 2):
            parsed_sort = Sort(*sort)
        else:
            raise InvalidArgument(
                "Sort is a field name or a (field, direction) pair", argument="sort", value=sort
            )

        if limit is not None:
            if isinstance(limit, bool) or not isinstance(limit, int):
                raise InvalidArgument("Limit must be an integer", argument="limit", value=limit)
            if limit < 0:
                raise InvalidArgument("Limit cannot be negative", argument="limit", value=limit)
            if limit == 0:
                limit = None

        return cls(filters=tuple(parsed), sort=parsed_sort, limit=limit)

    def without_limit(self) -> "Query":
        return Query(filters=self.filters, sort=self.sort)


def sort_key(value: Any) -> tuple:
    """
    Total ordering across JSON values.

    Missing/None sorts lowest, then numbers (and booleans), then strings,
    then anything else by its string form.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, (bool, int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, str(value))


def apply_filters(records: Iterable[dict], filters: Sequence[Filter]) -> List[dict]:
    return [r for r in records if all(f.matches(r) for f in filters)]


def apply_sort(records: List[dict], sort: Optional[Sort]) -> List[dict]:
    if sort is None:
        return list(records)
    return sorted(
        records,
        key=lambda r: sort_key(r.get(sort.field)),
        reverse=sort.descending,
    )


def apply_query(records: Iterable[dict], query: Query) -> List[dict]:
    result = apply_sort(apply_filters(records, query.filters), query.sort)
    if query.limit:
        result = result[:query.limit]
    return result


def validate_page(page: int, page_size: int) -> None:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise InvalidArgument("Page size must be a positive integer", argument="page_size", value=page_size)
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidArgument("Page numbers start at 1", argument="page", value=page)


def page_bounds(page: int, page_size: int) -> Tuple[int, int]:
    """Slice bounds of a 1-indexed page."""
    start = (page - 1) * page_size
    return start, start + page_size


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size)
