"""
Typed builders for the variable parts of SQL statements.

Conditions and assignments are collected as ordered (column, operator, value)
entries and rendered once into SQL text with numbered named placeholders.
Values never reach the SQL text; each one becomes a bind parameter typed with
its column's SQL type.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Union

from sqlalchemy import Table, bindparam
from sqlalchemy.sql.elements import BindParameter

OPERATORS = frozenset({"=", "<=", ">=", "IS NULL"})


class SQLParams:
    """Numbered bind parameters collected while rendering one statement."""

    def __init__(self, table: Table, prefix: str = "p") -> None:
        self.table = table
        self.prefix = prefix
        self._binds: List[BindParameter] = []

    def bind(self, column: str, value: Any) -> str:
        name = f"{self.prefix}{len(self._binds) + 1}"
        self._binds.append(bindparam(name, value, type_=self.table.c[column].type))
        return f":{name}"

    @property
    def binds(self) -> List[BindParameter]:
        return list(self._binds)

    def __len__(self) -> int:
        return len(self._binds)


@dataclass(frozen=True)
class Predicate:
    column: str
    operator: str
    value: Any = None

    def render(self, params: SQLParams) -> str:
        if self.operator == "IS NULL":
            return f"{self.column} IS NULL"
        return f"{self.column} {self.operator} {params.bind(self.column, self.value)}"


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates, rendered in parentheses."""

    predicates: Sequence[Predicate]

    def render(self, params: SQLParams) -> str:
        return "(" + " OR ".join(p.render(params) for p in self.predicates) + ")"


Condition = Union[Predicate, AnyOf]


class _ColumnChecked:
    def __init__(self, table: Table) -> None:
        self.table = table

    def _check_column(self, column: str) -> None:
        if column not in self.table.c:
            raise ValueError(f"unknown column {column!r} for table {self.table.name!r}")


class QueryFilter(_ColumnChecked):
    """Ordered conditions joined with AND."""

    def __init__(self, table: Table) -> None:
        super().__init__(table)
        self._conditions: List[Condition] = []

    def predicate(self, column: str, operator: str, value: Any = None) -> Predicate:
        self._check_column(column)
        if operator not in OPERATORS:
            raise ValueError(f"unsupported operator {operator!r}")
        return Predicate(column, operator, value)

    def add(self, column: str, operator: str, value: Any = None) -> "QueryFilter":
        self._conditions.append(self.predicate(column, operator, value))
        return self

    def add_any(self, *predicates: Predicate) -> "QueryFilter":
        if not predicates:
            raise ValueError("add_any needs at least one predicate")
        self._conditions.append(AnyOf(tuple(predicates)))
        return self

    def render(self, params: SQLParams) -> str:
        return " AND ".join(c.render(params) for c in self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)


class Assignments(_ColumnChecked):
    """Ordered ``column = value`` pairs for an UPDATE statement's SET clause."""

    def __init__(self, table: Table) -> None:
        super().__init__(table)
        self._pairs: List[tuple[str, Any]] = []

    def set(self, column: str, value: Any) -> "Assignments":
        self._check_column(column)
        if any(existing == column for existing, _ in self._pairs):
            raise ValueError(f"column {column!r} assigned twice")
        self._pairs.append((column, value))
        return self

    @property
    def columns(self) -> List[str]:
        return [column for column, _ in self._pairs]

    def render(self, params: SQLParams) -> str:
        return ", ".join(f"{column} = {params.bind(column, value)}" for column, value in self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)
