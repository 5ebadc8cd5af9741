"""Core modules for building and running content fragment queries."""

from .auth import (
    Auth,
    BasicAuth,
    BearerAuth,
    HeaderAuth,
    NoAuth,
)
from .client import (
    ENDPOINT_DEFAULT_GRAPHQL,
    HeadlessClient,
    HeadlessClientBuilder,
    HeadlessClientError,
)
from .cursor import CursorExhaustedError, PagingCursor, PagingNotSupportedError
from .persisted import PersistedQuery, validate_persisted_query_path
from .query import (
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
from .query_builder import (
    QueryBuilder,
    filter_value,
    filter_variable,
    ignore_case,
    sensitiveness,
    sub_selection,
)
from .response import GraphQlError, GraphQlResponse, ItemMappingError
from .variables import QueryVariables, check_query_for_vars

__all__ = [
    # Auth
    "Auth",
    "BearerAuth",
    "BasicAuth",
    "HeaderAuth",
    "NoAuth",
    # Query model
    "Filter",
    "FilterOption",
    "GraphQlQuery",
    "Operator",
    "PaginationType",
    "SimpleField",
    "SortBy",
    "SortingOrder",
    "SubSelection",
    "VarType",
    # Query Builder
    "QueryBuilder",
    "filter_value",
    "filter_variable",
    "ignore_case",
    "sensitiveness",
    "sub_selection",
    # Variables
    "QueryVariables",
    "check_query_for_vars",
    # Responses
    "GraphQlError",
    "GraphQlResponse",
    "ItemMappingError",
    # Paging
    "CursorExhaustedError",
    "PagingCursor",
    "PagingNotSupportedError",
    # Persisted queries
    "PersistedQuery",
    "validate_persisted_query_path",
    # Client
    "ENDPOINT_DEFAULT_GRAPHQL",
    "HeadlessClient",
    "HeadlessClientBuilder",
    "HeadlessClientError",
]
