"""Fluent builder for content fragment queries.

Example:
    query = (
        GraphQlQuery.builder()
        .content_fragment_model_name("adventure")
        .field("_path")
        .field("title", filter_value(Operator.CONTAINS, "surf", ignore_case()))
        .field(sub_selection("author").field("firstName").field("lastName"))
        .paginated()
        .sort_by("title ASC")
        .build()
    )
    print(query.generate_query())
"""

from typing import Any

from .query import (
    Field,
    Filter,
    FilterOption,
    GraphQlQuery,
    Operator,
    PaginationType,
    SimpleField,
    SortBy,
    SortingOrder,
    SubSelection,
    VarType,
)


def sub_selection(name: str) -> SubSelection:
    """Create a sub-selection, use ``field()`` and ``sub_selection()`` on it for deep structures."""
    return SubSelection(name)


def filter_value(operator: Operator, value: Any, *options: FilterOption) -> Filter:
    """Create a filter comparing against a static value.

    Numbers and booleans are rendered bare, everything else as a string.
    """
    return Filter(operator, value=value, options=options)


def filter_variable(
    operator: Operator,
    var_type: VarType | str,
    var_name: str,
    *options: FilterOption,
) -> Filter:
    """Create a filter comparing against the query variable ``$var_name``."""
    return Filter(operator, var_name=var_name, var_type=var_type, options=options)


def ignore_case() -> FilterOption:
    return FilterOption("_ignoreCase: true")


def sensitiveness(threshold: float) -> FilterOption:
    """Sensitiveness for comparing floating point values."""
    return FilterOption(f"_sensitiveness: {threshold}")


class QueryBuilder:
    """Collects the parts of a ``GraphQlQuery``.

    A builder creates exactly one query: every call after ``build()`` raises
    ``RuntimeError``. Builders are not thread-safe.
    """

    def __init__(self):
        self._model_name: str | None = None
        self._pagination_type = PaginationType.NONE
        self._fields: list[Field] = []
        self._sort_by: list[SortBy] = []
        self._filters: list[Filter] = []
        self._declare_model_filter = False
        self._sealed = False

    def content_fragment_model_name(self, name: str) -> "QueryBuilder":
        self._assert_not_sealed()
        self._model_name = name
        return self

    def field(self, field: str | Field, filter: Filter | None = None) -> "QueryBuilder":
        """Add a field to the selection.

        Args:
            field: Field name or a ``SimpleField``/``SubSelection``
            filter: Optional filter on this field, see ``filter_value()``
                and ``filter_variable()``
        """
        self._assert_not_sealed()
        if isinstance(field, str):
            field = SimpleField(field)
        elif isinstance(field, SubSelection):
            field._attach_to(None)
        self._fields.append(field)
        if filter is not None:
            self._add_filter(field.name, filter)
        return self

    def filter(
        self,
        field_name: str,
        operator: Operator,
        value: Any,
        *options: FilterOption,
    ) -> "QueryBuilder":
        """Filter on a field by a static value without selecting the field."""
        self._assert_not_sealed()
        self._add_filter(field_name, filter_value(operator, value, *options))
        return self

    def filter_variable(
        self,
        field_name: str,
        operator: Operator,
        var_type: VarType | str,
        var_name: str,
        *options: FilterOption,
    ) -> "QueryBuilder":
        """Filter on a field by a query variable that is declared by the query."""
        self._assert_not_sealed()
        self._add_filter(field_name, filter_variable(operator, var_type, var_name, *options))
        return self

    def use_filter(self) -> "QueryBuilder":
        """Declare a generic ``$filter`` variable of type ``<Model>ModelFilter``.

        Explicit filters take precedence: if any were added, they are rendered
        inline instead of the generic variable.
        """
        self._assert_not_sealed()
        self._declare_model_filter = True
        return self

    def paginated(self, pagination_type: PaginationType = PaginationType.CURSOR) -> "QueryBuilder":
        self._assert_not_sealed()
        self._pagination_type = pagination_type
        return self

    def sort_by(self, *clauses: str, order: SortingOrder | None = None) -> "QueryBuilder":
        """Add sort clauses.

        Either ``sort_by("title", order=SortingOrder.DESC)`` or clauses with
        an optional order, ``sort_by("title ASC", "_path DESC")``.
        """
        self._assert_not_sealed()
        if order is not None:
            if len(clauses) != 1:
                raise ValueError("An explicit sorting order applies to exactly one field")
            self._sort_by.append(SortBy(clauses[0], order))
        else:
            self._sort_by.extend(SortBy.parse(clause) for clause in clauses)
        return self

    def build(self) -> GraphQlQuery:
        """Create the query and seal this builder."""
        self._assert_not_sealed()
        if not self._model_name:
            raise ValueError("A content fragment model name is required")
        self._sealed = True
        return GraphQlQuery(
            content_fragment_model_name=self._model_name,
            pagination_type=self._pagination_type,
            fields=tuple(self._fields),
            sort_by=tuple(self._sort_by),
            filters=tuple(self._filters),
            declare_model_filter=self._declare_model_filter,
        )

    def generate(self) -> str:
        """Shortcut for ``build().generate_query()``."""
        return self.build().generate_query()

    def _add_filter(self, field_name: str, filter: Filter):
        self._filters.append(filter._bind(field_name))
        self._declare_model_filter = True

    def _assert_not_sealed(self):
        if self._sealed:
            raise RuntimeError("Builder can only be used to create one query instance")
