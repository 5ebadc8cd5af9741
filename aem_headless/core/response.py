"""GraphQL responses as returned by the headless client.

``GraphQlResponse`` wraps the parsed JSON body and locates the result items,
both for list queries (``data.<model>List.items``) and for cursor paginated
queries (``data.<model>Paginated.edges[].node``).
"""

import json
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

JSON_KEY_DATA = "data"
JSON_KEY_ERRORS = "errors"
JSON_KEY_MESSAGE = "message"
JSON_KEY_ITEMS = "items"
JSON_KEY_EDGES = "edges"
JSON_KEY_NODE = "node"
JSON_KEY_PAGE_INFO = "pageInfo"
JSON_KEY_HAS_NEXT_PAGE = "hasNextPage"
JSON_KEY_END_CURSOR = "endCursor"

T = TypeVar("T")


class ItemMappingError(ValueError):
    """Raised when a response item cannot be converted to the requested type."""

    def __init__(self, item: Any, target_type: Any):
        self.item = item
        self.target_type = target_type
        super().__init__(f"Could not convert item {json.dumps(item, default=str)} to {target_type!r}")


class GraphQlError:
    """A single entry of the ``errors`` array sent by the server."""

    __slots__ = ("_message", "_json")

    def __init__(self, error_json: dict[str, Any]):
        self._message = str(error_json.get(JSON_KEY_MESSAGE, error_json))
        self._json = error_json

    @property
    def message(self) -> str:
        return self._message

    @property
    def json(self) -> dict[str, Any]:
        """The full error, including locations and extensions if sent."""
        return self._json

    def __repr__(self) -> str:
        return f"GraphQlError({self._message!r})"


class GraphQlResponse:
    """Read-only view on a GraphQL response body.

    ``errors`` is ``None`` when the body has no ``errors`` key, which is not
    the same as an empty list. ``items`` is ``None`` when ``data`` has neither
    an ``items`` nor an ``edges`` child.
    """

    def __init__(self, response: dict[str, Any]):
        self._data = response.get(JSON_KEY_DATA)
        self._errors = self._read_errors(response)
        self._page_info: dict[str, Any] | None = None
        self._items = self._load_items()

    @staticmethod
    def _read_errors(response: dict[str, Any]) -> list[GraphQlError] | None:
        if JSON_KEY_ERRORS not in response:
            return None
        return [GraphQlError(e) for e in response[JSON_KEY_ERRORS] or []]

    def _load_items(self) -> list[Any] | None:
        if not isinstance(self._data, dict):
            return None

        for result in self._data.values():
            if not isinstance(result, dict):
                continue
            if JSON_KEY_ITEMS in result:
                return result[JSON_KEY_ITEMS]
            if JSON_KEY_EDGES in result:
                self._page_info = result.get(JSON_KEY_PAGE_INFO)
                return [
                    edge.get(JSON_KEY_NODE) if isinstance(edge, dict) else None
                    for edge in result[JSON_KEY_EDGES] or []
                ]
        return None

    @property
    def data(self) -> Any:
        """The ``data`` element, or ``None`` if the server sent no data."""
        return self._data

    @property
    def errors(self) -> list[GraphQlError] | None:
        return self._errors

    @property
    def items(self) -> list[Any] | None:
        return self._items

    @property
    def page_info(self) -> dict[str, Any] | None:
        """``pageInfo`` of a cursor paginated result, ``None`` otherwise."""
        return self._page_info

    def get_items(self, target_type: type[T]) -> list[T] | None:
        """Convert the items to ``target_type``.

        Any type pydantic can validate works: models (use
        ``Field(alias="jsonName")`` to map differently named keys),
        dataclasses or TypedDicts. Keys without a matching field are ignored.

        Raises:
            ItemMappingError: If any item does not convert; no partial list
                is returned
        """
        if self._items is None:
            return None

        adapter = TypeAdapter(target_type)
        result = []
        for item in self._items:
            try:
                result.append(adapter.validate_python(item))
            except ValidationError as e:
                raise ItemMappingError(item, target_type) from e
        return result

    def has_items(self) -> bool:
        return bool(self._items)

    def has_errors(self) -> bool:
        """True if the server sent at least one error."""
        return bool(self._errors)

    def errors_string(self) -> str | None:
        if self._errors is None:
            return None
        return ", ".join(e.message for e in self._errors)

    def __str__(self) -> str:
        parts = ["[GraphQlResponse "]
        if self._data is not None:
            parts.append("data: \n" + json.dumps(self._data, indent=2) + "\n")
        if self._errors is not None:
            parts.append("errors: " + self.errors_string())
        parts.append("]")
        return "".join(parts)
