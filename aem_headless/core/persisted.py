"""Persisted queries stored on the server."""

from dataclasses import dataclass
from typing import Any

JSON_KEY_PATH = "path"
JSON_KEY_SHORT_FORM = "shortForm"
JSON_KEY_LONG_FORM = "longForm"
JSON_KEY_DATA = "data"
JSON_KEY_QUERY = "query"


@dataclass(frozen=True)
class PersistedQuery:
    """A persisted query as listed by the server.

    Attributes:
        short_path: Path used to execute the query, e.g. ``/myproj/myquery``
        long_path: Storage path, e.g. ``/myproj/settings/graphql/persistentQueries/myquery``
        query: The GraphQL query text
    """
    short_path: str
    long_path: str
    query: str

    @classmethod
    def from_json(cls, node: dict[str, Any]) -> "PersistedQuery":
        """Create from one entry of the ``queries`` array of a listing."""
        path = node[JSON_KEY_PATH]
        return cls(
            short_path=path[JSON_KEY_SHORT_FORM],
            long_path=path[JSON_KEY_LONG_FORM],
            query=node[JSON_KEY_DATA][JSON_KEY_QUERY],
        )

    def __str__(self) -> str:
        return f"[PersistedQuery short_path={self.short_path}, long_path={self.long_path}, query={self.query}]"


def validate_persisted_query_path(path: str | None) -> None:
    """Check for a short path with exactly two segments, ``/project/queryName``.

    Trailing slashes are ignored, ``/project/queryName/`` is accepted too.

    Raises:
        ValueError: For anything else, including long form paths
    """
    if not path or not path.startswith("/") or len(path.rstrip("/").split("/")) != 3:
        raise ValueError(f"Invalid path for persisted query: {path}")
