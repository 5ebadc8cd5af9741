"""Cursor based paging over GraphQL query results.

A ``PagingCursor`` runs a cursor paginated query (or persisted query) page by
page, passing ``$first`` (the page size) and ``$after`` (the end cursor of the
previous page) as variables.
"""

from collections.abc import Iterator, Mapping
from typing import Any, Protocol

from .response import JSON_KEY_END_CURSOR, JSON_KEY_HAS_NEXT_PAGE, GraphQlResponse
from .variables import QueryVariables


class CursorExhaustedError(RuntimeError):
    """Raised by ``next()`` when all pages have been returned."""


class PagingNotSupportedError(RuntimeError):
    """Raised when a response has no ``pageInfo`` to continue paging from."""


class QueryRunner(Protocol):
    """What a cursor needs from a client to fetch pages."""

    def run_query(self, query: Any, variables: Mapping[str, Any] | None = None) -> GraphQlResponse:
        ...

    def run_persisted_query(self, path: Any, variables: Mapping[str, Any] | None = None) -> GraphQlResponse:
        ...


class PagingCursor:
    """Iterates over the pages of a cursor paginated query.

    ``has_next()`` fetches the first page ahead of time and keeps it until
    ``next()`` returns it, so asking twice does not fetch twice. Not
    thread-safe; one page is in flight at a time.

    Example:
        cursor = client.create_paging_cursor(query, page_size=20)
        for page in cursor:
            for item in page.items:
                ...
    """

    def __init__(
        self,
        runner: QueryRunner,
        page_size: int,
        *,
        query: str | None = None,
        persisted_query_path: str | None = None,
        variables: Mapping[str, Any] | None = None,
    ):
        if (query is None) == (persisted_query_path is None):
            raise ValueError("A cursor needs either a query or a persisted query path")
        if page_size < 1:
            raise ValueError(f"Page size must be positive, got {page_size}")

        self._runner = runner
        self._page_size = page_size
        self._query = query
        self._persisted_query_path = persisted_query_path
        self._variables = QueryVariables.create(variables)

        self._has_more: bool | None = None  # None until the first page is fetched
        self._end_cursor: str | None = None
        self._lookahead: GraphQlResponse | None = None

    @property
    def page_size(self) -> int:
        return self._page_size

    def has_next(self) -> bool:
        """True if ``next()`` will return another page."""
        if self._has_more is None:
            self._lookahead = self._fetch()
        return self._lookahead is not None or self._has_more

    def next(self) -> GraphQlResponse:
        """Return the next page.

        Raises:
            CursorExhaustedError: If the last page was already returned
            PagingNotSupportedError: If the query does not return ``pageInfo``
        """
        if self._lookahead is not None:
            page, self._lookahead = self._lookahead, None
            return page

        if self._has_more is False:
            raise CursorExhaustedError("There are no more results available")

        return self._fetch()

    def __iter__(self) -> Iterator[GraphQlResponse]:
        while self.has_next():
            yield self.next()

    def _fetch(self) -> GraphQlResponse:
        variables = QueryVariables.create(self._variables).first(self._page_size).after(self._end_cursor)

        if self._query is not None:
            response = self._runner.run_query(self._query, variables)
        else:
            response = self._runner.run_persisted_query(self._persisted_query_path, variables)

        page_info = response.page_info
        if page_info is None:
            raise PagingNotSupportedError(
                f"Query does not support paging with a cursor, could not find 'pageInfo' in response data:\n{response.data}"
            )

        self._has_more = bool(page_info.get(JSON_KEY_HAS_NEXT_PAGE))
        self._end_cursor = page_info.get(JSON_KEY_END_CURSOR)
        return response
