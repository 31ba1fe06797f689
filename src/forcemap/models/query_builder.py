# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query construction for mapped types.

Provides literal formatting and equality-filter rendering, plus a fluent
builder producing complete ``SELECT`` statements.
"""

from __future__ import annotations

import datetime as _dt
import numbers
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .coercion import format_datetime


def escape_string(value: str) -> str:
    """Backslash-escape backslashes and single quotes."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def format_literal(value: Any) -> str:
    """
    Format a value as a query literal.

    :param value: Value to format.
    :return: Literal text.
    :rtype: str

    Example::

        format_literal("o'reilly")                    # "'o\\'reilly'"
        format_literal(False)                         # "false"
        format_literal(23.4)                          # "23.4"
        format_literal(datetime.date(2010, 4, 1))     # "2010-04-01"
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Number):
        return str(value)
    if isinstance(value, _dt.datetime):
        return format_datetime(value)
    if isinstance(value, _dt.date):
        return value.isoformat()
    return f"'{escape_string(str(value))}'"


def build_filter(pairs: Iterable[Tuple[str, Any]]) -> str:
    """
    Render ``field = literal`` clauses joined by ``AND``, in the given order.

    Example::

        build_filter([("Name", "Richard"), ("City", "San Francisco")])
        # "Name = 'Richard' AND City = 'San Francisco'"
    """
    return " AND ".join(f"{name} = {format_literal(value)}" for name, value in pairs)


@dataclass
class QueryBuilder:
    """
    Fluent interface for building ``SELECT`` statements.

    :param sobject_type: Record type to query.
    :type sobject_type: str
    :param fields: Fields to project. Extended with :meth:`select`.
    :type fields: list[str]

    Example::

        soql = (QueryBuilder("Account", ["Id", "Name"])
                .filter_eq("Name", "Acme")
                .order_by("Id", descending=True)
                .limit(1)
                .build())
        # "SELECT Id,Name FROM Account WHERE Name = 'Acme' ORDER BY Id DESC LIMIT 1"
    """

    sobject_type: str
    fields: List[str] = field(default_factory=list)
    _filter: List[str] = field(default_factory=list)
    _orderby: List[str] = field(default_factory=list)
    _limit: Optional[int] = None
    _count: bool = False

    def select(self, *columns: str) -> "QueryBuilder":
        self.fields.extend(columns)
        return self

    def filter_eq(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} = {format_literal(value)}")
        return self

    def filter_ne(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} != {format_literal(value)}")
        return self

    def filter_gt(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} > {format_literal(value)}")
        return self

    def filter_ge(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} >= {format_literal(value)}")
        return self

    def filter_lt(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} < {format_literal(value)}")
        return self

    def filter_le(self, column: str, value: Any) -> "QueryBuilder":
        self._filter.append(f"{column} <= {format_literal(value)}")
        return self

    def filter_like(self, column: str, pattern: str) -> "QueryBuilder":
        """Add ``column LIKE 'pattern'``; ``%`` and ``_`` keep their wildcard meaning."""
        self._filter.append(f"{column} LIKE {format_literal(pattern)}")
        return self

    def filter_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        if not values:
            raise ValueError("filter_in requires at least one value")
        rendered = ", ".join(format_literal(v) for v in values)
        self._filter.append(f"{column} IN ({rendered})")
        return self

    def filter_pairs(self, pairs: Iterable[Tuple[str, Any]]) -> "QueryBuilder":
        """Add one equality clause per ``(field, value)`` pair, in order."""
        for column, value in pairs:
            self.filter_eq(column, value)
        return self

    def filter_raw(self, conditions: str) -> "QueryBuilder":
        """
        Add a raw condition clause. The text is used verbatim.

        Example::

            QueryBuilder("Account", ["Id"]).filter_raw("Name LIKE 'A%'")
        """
        if conditions:
            self._filter.append(conditions)
        return self

    def order_by(self, column: str, descending: bool = False) -> "QueryBuilder":
        self._orderby.append(f"{column} {'DESC' if descending else 'ASC'}")
        return self

    def limit(self, count: int) -> "QueryBuilder":
        if count < 1:
            raise ValueError("limit must be at least 1")
        self._limit = count
        return self

    def count(self) -> "QueryBuilder":
        """Switch the projection to ``COUNT()``."""
        self._count = True
        return self

    def where_clause(self) -> str:
        return " AND ".join(self._filter)

    def build(self) -> str:
        """
        Render the statement.

        :raises ValueError: If no fields are selected for a non-count query.
        """
        if self._count:
            projection = "COUNT()"
        else:
            if not self.fields:
                raise ValueError(f"No fields selected for {self.sobject_type}")
            projection = ",".join(self.fields)
        parts = [f"SELECT {projection} FROM {self.sobject_type}"]
        if self._filter:
            parts.append(f"WHERE {self.where_clause()}")
        if self._orderby:
            parts.append(f"ORDER BY {', '.join(self._orderby)}")
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        return " ".join(parts)

    def __str__(self) -> str:
        return self.build()


__all__ = ["QueryBuilder", "build_filter", "escape_string", "format_literal"]
