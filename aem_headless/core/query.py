"""Query model and GraphQL text generation for content fragment queries.

The dataclasses in this module describe a query against a content fragment
model (selected fields, sorting, filtering and pagination). Instances are
created through ``GraphQlQuery.builder()`` and rendered with
``GraphQlQuery.generate_query()``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from numbers import Number
from typing import Any, Optional, Union

from .variables import (
    QUERY_VAR_AFTER,
    QUERY_VAR_FILTER,
    QUERY_VAR_FIRST,
    QUERY_VAR_LIMIT,
    QUERY_VAR_OFFSET,
)

SUFFIX_MODEL_FILTER = "ModelFilter"


class SortingOrder(Enum):
    """Sorting order for a sort clause."""
    ASC = "ASC"
    DESC = "DESC"


class PaginationType(Enum):
    """How a query pages through its results."""
    NONE = "none"
    CURSOR = "cursor"              # edges/node with pageInfo, $after/$first
    OFFSET_LIMIT = "offset_limit"  # items with $offset/$limit

    @property
    def is_cursor(self) -> bool:
        return self is PaginationType.CURSOR


class Operator(Enum):
    """Operators available in a field filter expression."""
    EQUALS = "EQUALS"
    EQUALS_NOT = "EQUALS_NOT"
    CONTAINS = "CONTAINS"
    CONTAINS_NOT = "CONTAINS_NOT"
    STARTS_WITH = "STARTS_WITH"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    LOWER = "LOWER"
    LOWER_EQUAL = "LOWER_EQUAL"
    AT = "AT"
    NOT_AT = "NOT_AT"
    BEFORE = "BEFORE"
    AT_OR_BEFORE = "AT_OR_BEFORE"
    AFTER = "AFTER"
    AT_OR_AFTER = "AT_OR_AFTER"


class VarType(Enum):
    """GraphQL types for variables declared by filters."""
    INT = "Int"
    FLOAT = "Float"
    STRING = "String"
    BOOLEAN = "Boolean"
    ID = "ID"
    DATE = "Date"


@dataclass(frozen=True)
class SimpleField:
    """A leaf field in the selection set."""
    name: str

    def to_query_fragment(self) -> str:
        return self.name


@dataclass(eq=False)
class SubSelection:
    """A field with its own selection set, e.g. ``author{firstName lastName}``.

    Children are added top-down through ``field()`` and ``sub_selection()``,
    so a sub-selection is owned by exactly one parent.
    """
    name: str
    children: list["Field"] = field(default_factory=list)
    _attached: bool = field(default=False, init=False, repr=False)

    def field(self, child: Union[str, "Field"]) -> "SubSelection":
        """Add a child field and return this sub-selection."""
        if isinstance(child, str):
            child = SimpleField(child)
        elif isinstance(child, SubSelection):
            child._attach_to(self)
        self.children.append(child)
        return self

    def sub_selection(self, name: str) -> "SubSelection":
        """Add a nested sub-selection and return the new child."""
        child = SubSelection(name)
        self.field(child)
        return child

    def to_query_fragment(self) -> str:
        return self.name + "{" + " ".join(c.to_query_fragment() for c in self.children) + "}"

    def _attach_to(self, parent: Optional["SubSelection"]) -> None:
        """Mark as owned by ``parent``, or by a query when ``parent`` is None."""
        if self._attached:
            raise ValueError(f"Sub-selection {self.name} already belongs to another selection")
        if parent is not None and self._contains(parent):
            raise ValueError(f"Sub-selection {self.name} cannot contain itself")
        self._attached = True

    def _contains(self, node: "SubSelection") -> bool:
        pending = [self]
        while pending:
            current = pending.pop()
            if current is node:
                return True
            pending.extend(c for c in current.children if isinstance(c, SubSelection))
        return False


Field = Union[SimpleField, SubSelection]


@dataclass(frozen=True)
class SortBy:
    """A single sort clause."""
    field: str
    order: SortingOrder = SortingOrder.ASC

    @classmethod
    def parse(cls, field_with_order: str) -> "SortBy":
        """Parse ``"title DESC"`` style clauses; the order defaults to ASC."""
        parts = field_with_order.strip().split(" ", 1)
        if len(parts) == 2:
            order = parts[1].strip().upper()
            if order not in SortingOrder.__members__:
                raise ValueError(f"Invalid sorting order in '{field_with_order}', expected ASC or DESC")
            return cls(parts[0], SortingOrder[order])
        return cls(parts[0])

    def __str__(self) -> str:
        return f"{self.field} {self.order.value}"


@dataclass(frozen=True)
class FilterOption:
    """A pre-rendered option inside a filter expression, e.g. ``_ignoreCase: true``."""
    fragment: str

    def __str__(self) -> str:
        return self.fragment


@dataclass(eq=False)
class Filter:
    """A filter expression on one field of the content fragment model.

    A filter compares against either a static ``value`` or a query variable
    (``var_name`` of type ``var_type``). The field name is bound by the query
    builder when the filter is attached to a query.
    """
    operator: Operator
    value: Any = None
    var_name: str | None = None
    var_type: VarType | str | None = None
    options: tuple[FilterOption, ...] = ()
    _field_name: str | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        uses_variable = self.var_name is not None
        if uses_variable == (self.value is not None):
            raise ValueError("A filter needs exactly one of a static value or a variable")
        if uses_variable and self.var_type is None:
            raise ValueError(f"Filter variable {self.var_name} needs a declared type")
        self.options = tuple(self.options)

    @property
    def field_name(self) -> str | None:
        return self._field_name

    @property
    def var_type_name(self) -> str | None:
        if isinstance(self.var_type, VarType):
            return self.var_type.value
        return self.var_type

    def _bind(self, field_name: str) -> "Filter":
        """Bind the filter to its field. Called once by the query builder."""
        if self._field_name is not None:
            raise RuntimeError(
                f"Filter is already bound to field {self._field_name}, create a new filter for {field_name}"
            )
        self._field_name = field_name
        return self


@dataclass(frozen=True)
class GraphQlQuery:
    """An immutable content fragment query.

    Use ``GraphQlQuery.builder()`` to create instances.
    """
    content_fragment_model_name: str
    pagination_type: PaginationType = PaginationType.NONE
    fields: tuple[Field, ...] = ()
    sort_by: tuple[SortBy, ...] = ()
    filters: tuple[Filter, ...] = ()
    declare_model_filter: bool = False

    @staticmethod
    def builder():
        """Return a new single-use ``QueryBuilder``."""
        from .query_builder import QueryBuilder
        return QueryBuilder()

    @property
    def model_filter_type(self) -> str:
        """GraphQL input type of the generic filter, e.g. ``AdventureModelFilter``."""
        name = self.content_fragment_model_name
        return name[:1].upper() + name[1:] + SUFFIX_MODEL_FILTER

    def generate_query(self) -> str:
        """Render the query as GraphQL text.

        Variable declarations and top-level arguments keep insertion order:
        pagination first, then sorting, then filtering.
        """
        var_decls: dict[str, str] = {}
        arguments: dict[str, Any] = {}

        self._add_pagination(var_decls, arguments)

        if self.sort_by:
            arguments["sort"] = ", ".join(str(s) for s in self.sort_by)

        if self.declare_model_filter:
            self._add_filtering(var_decls, arguments)

        lines = ["query "]
        if var_decls:
            lines.append("(" + ", ".join(f"{k}: {v}" for k, v in var_decls.items()) + ")")
        lines.append(" { \n")

        lines.append("  " + self.content_fragment_model_name)
        lines.append("Paginated" if self.pagination_type.is_cursor else "List")
        if arguments:
            lines.append(
                "(" + ", ".join(f"{k}: {self._render_argument(v)}" for k, v in arguments.items()) + ")"
            )
        lines.append(" {\n")

        indent = "      "
        fields_str = indent + f"\n{indent}".join(f.to_query_fragment() for f in self.fields) + "\n"
        if self.pagination_type.is_cursor:
            lines.append("    edges { node {\n" + fields_str + "    }}\n")
            lines.append("    pageInfo { hasNextPage endCursor }\n")
        else:
            lines.append("    items {\n" + fields_str + "    }\n")

        lines.append("  }\n")
        lines.append("}\n")
        return "".join(lines)

    def _add_pagination(self, var_decls: dict[str, str], arguments: dict[str, Any]):
        if self.pagination_type is PaginationType.CURSOR:
            pagination_vars = ((QUERY_VAR_AFTER, "String"), (QUERY_VAR_FIRST, "Int"))
        elif self.pagination_type is PaginationType.OFFSET_LIMIT:
            pagination_vars = ((QUERY_VAR_OFFSET, "Int"), (QUERY_VAR_LIMIT, "Int"))
        else:
            return
        for name, type_name in pagination_vars:
            var_decls[f"${name}"] = type_name
            arguments[name] = f"${name}"

    def _add_filtering(self, var_decls: dict[str, str], arguments: dict[str, Any]):
        if not self.filters:
            # generic filter, the caller passes the whole model filter as $filter
            var_decls[f"${QUERY_VAR_FILTER}"] = self.model_filter_type
            arguments[QUERY_VAR_FILTER] = f"${QUERY_VAR_FILTER}"
            return

        clauses = []
        for f in self.filters:
            clause = f"{f.field_name}: {{ _expressions: [ {{ _operator: {f.operator.value}, "
            if f.options:
                clause += ",\n".join(str(o) for o in f.options) + ", "
            if f.var_name is not None:
                var_ref = f"${f.var_name}"
                var_decls[var_ref] = f.var_type_name
                clause += f"value: {var_ref}"
            else:
                clause += f"value: {_render_literal(f.value)}"
            clause += "}]}"
            clauses.append(clause)
        arguments[QUERY_VAR_FILTER] = "{\n" + ",\n".join(clauses) + "\n}"

    @staticmethod
    def _render_argument(value: Any) -> str:
        """Variables and pre-rendered blocks go in bare, other strings are quoted."""
        if isinstance(value, Number) and not isinstance(value, bool):
            return str(value)
        text = str(value)
        if text.startswith("$") or (text.startswith("{") and text.endswith("}")):
            return text
        return _quote(text)


def _render_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Number):
        return str(value)
    return _quote(str(value))


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)
