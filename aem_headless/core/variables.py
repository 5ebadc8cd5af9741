"""Query variables for GraphQL requests.

A plain ordered mapping of variable names to values, with convenience
setters for the variables used by pagination and generic filtering.
"""

from collections.abc import Iterable, Mapping
from typing import Any

QUERY_VAR_AFTER = "after"
QUERY_VAR_FIRST = "first"
QUERY_VAR_OFFSET = "offset"
QUERY_VAR_LIMIT = "limit"
QUERY_VAR_FILTER = "filter"


class QueryVariables(dict[str, Any]):
    """Variables sent along with a query.

    Example:
        variables = QueryVariables.create().after("abc").first(10)
        variables.add_var("locale", "en")
    """

    @classmethod
    def create(cls, initial: Mapping[str, Any] | None = None) -> "QueryVariables":
        """Create variables, optionally seeded with an existing mapping."""
        variables = cls()
        if initial:
            variables.update(initial)
        return variables

    def after(self, after: str | None) -> "QueryVariables":
        self[QUERY_VAR_AFTER] = after
        return self

    def first(self, first: int) -> "QueryVariables":
        self[QUERY_VAR_FIRST] = first
        return self

    def offset(self, offset: int) -> "QueryVariables":
        self[QUERY_VAR_OFFSET] = offset
        return self

    def limit(self, limit: int) -> "QueryVariables":
        self[QUERY_VAR_LIMIT] = limit
        return self

    def filter(self, model_filter: Any) -> "QueryVariables":
        """Set the value for a query declared with ``use_filter()``."""
        self[QUERY_VAR_FILTER] = model_filter
        return self

    def add_var(self, name: str, value: Any) -> "QueryVariables":
        self[name] = value
        return self


def check_query_for_vars(query: str, required_var_names: Iterable[str]) -> None:
    """Check that every variable name appears as ``$name`` in the query text.

    This is a substring check only, the query is not parsed.

    Raises:
        ValueError: If a variable is not referenced by the query
    """
    for name in required_var_names:
        query_var_name = f"${name}"
        if query_var_name not in query:
            raise ValueError(
                f"Required query variable {query_var_name} is not contained in query:\n{query}"
            )
