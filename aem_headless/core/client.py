"""Headless client for the GraphQL endpoints of a content management server.

Handles HTTP communication, error handling, and response parsing for
queries, persisted queries and paging cursors.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote_plus

import httpx
from pydantic import BaseModel

from .auth import Auth, BasicAuth, BearerAuth, NoAuth
from .cursor import PagingCursor
from .persisted import PersistedQuery, validate_persisted_query_path
from .query import GraphQlQuery
from .response import GraphQlResponse
from .variables import QueryVariables, check_query_for_vars

logger = logging.getLogger(__name__)

ENDPOINT_DEFAULT_GRAPHQL = "/content/cq:graphql/global/endpoint.json"
ENDPOINT_PERSISTED_QUERIES_PERSIST = "/graphql/persist.json"
ENDPOINT_PERSISTED_QUERIES_EXECUTE = "/graphql/execute.json"
ENDPOINT_PERSISTED_QUERIES_LIST = "/graphql/list.json/"

CONTENT_TYPE_JSON = "application/json"
DEFAULT_TIMEOUT = 15.0

JSON_KEY_QUERY = "query"
JSON_KEY_QUERIES = "queries"
JSON_KEY_VARIABLES = "variables"
JSON_KEY_SHORT_PATH = "shortPath"
JSON_KEY_PATH = "path"


class HeadlessClientError(Exception):
    """Raised for any failure talking to the server.

    If the server answered with a GraphQL error response, it is available as
    ``graphql_response``; it is ``None`` if no response could be received or
    parsed.
    """

    def __init__(self, message: str, graphql_response: GraphQlResponse | None = None):
        self.message = message
        self.graphql_response = graphql_response
        super().__init__(message)

    @classmethod
    def from_response(cls, response: GraphQlResponse) -> "HeadlessClientError":
        return cls(f"GraphQL Response has error(s): {response.errors_string()}", response)


def resolve_endpoint(endpoint: str | httpx.URL) -> httpx.URL:
    """Parse the endpoint; a server URL without a path gets the default GraphQL endpoint."""
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise ValueError(f"Invalid GraphQL URI {endpoint}") from e
    if not url.scheme or not url.host:
        raise ValueError(f"Invalid GraphQL URI {endpoint}")

    if not url.path.strip() or url.path == "/":
        return url.copy_with(path=ENDPOINT_DEFAULT_GRAPHQL)
    return url


class HeadlessClient:
    """Runs GraphQL queries against a content management server.

    Supports pluggable authentication via the Auth protocol.

    Examples:
        client = HeadlessClient("http://localhost:4503")
        response = client.run_query(query)

        client = HeadlessClient(url, auth=BearerAuth(token))

        client = (
            HeadlessClient.builder()
            .endpoint("https://author.example.com")
            .basic_auth("admin", "admin")
            .build()
        )
    """

    def __init__(
        self,
        endpoint: str | httpx.URL,
        auth: Auth | None = None,
        *,
        connect_timeout: float = DEFAULT_TIMEOUT,
        read_timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            endpoint: GraphQL endpoint URL, or the server URL to use the
                default endpoint
            auth: Authentication handler (implements Auth protocol)
            connect_timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        """
        self.endpoint = resolve_endpoint(endpoint)
        self.auth = auth if auth is not None else NoAuth()
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @staticmethod
    def builder() -> "HeadlessClientBuilder":
        return HeadlessClientBuilder()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Accept": CONTENT_TYPE_JSON,
                "Content-Type": CONTENT_TYPE_JSON,
            }
            headers.update(self.auth.get_headers())

            self._client = httpx.Client(
                headers=headers,
                timeout=httpx.Timeout(self.read_timeout, connect=self.connect_timeout),
                transport=self._transport,
            )
        return self._client

    def close(self):
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HeadlessClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def run_query(
        self,
        query: str | GraphQlQuery,
        variables: Mapping[str, Any] | None = None,
    ) -> GraphQlResponse:
        """Run a GraphQL query.

        Args:
            query: Query text or a ``GraphQlQuery``
            variables: Query variables, each must be declared by the query

        Returns:
            The parsed response

        Raises:
            HeadlessClientError: If the request fails or the response contains errors
        """
        if isinstance(query, GraphQlQuery):
            query = query.generate_query()
            variables = QueryVariables.create(variables)

        payload = self.create_query_request_payload(query, variables)
        body = self.execute_request(self.endpoint, "POST", payload, 200)
        return self._to_graphql_response(body)

    def run_query_with_offset(self, query: GraphQlQuery, offset: int, limit: int) -> GraphQlResponse:
        """Run an offset/limit paginated query for one page."""
        return self.run_query(query, QueryVariables.create().offset(offset).limit(limit))

    def run_persisted_query(
        self,
        persisted_query: str | PersistedQuery,
        variables: Mapping[str, Any] | None = None,
    ) -> GraphQlResponse:
        """Run a persisted query by its short path, e.g. ``/myproj/myquery``.

        Variables are passed as ``;name=value`` path parameters.

        Raises:
            ValueError: If the path is not a short path
            HeadlessClientError: If the request fails or the response contains errors
        """
        if isinstance(persisted_query, PersistedQuery):
            path = persisted_query.short_path
        else:
            path = persisted_query
        validate_persisted_query_path(path)

        request_path = ENDPOINT_PERSISTED_QUERIES_EXECUTE + path
        if variables:
            request_path += "".join(
                f";{name}={quote_plus(self._format_param_value(value), encoding='iso-8859-1', errors='replace')}"
                for name, value in self._serialize_variables(variables).items()
            )

        body = self.execute_request(self._url_for_path(request_path), "GET", None, 200)
        return self._to_graphql_response(body)

    def list_persisted_queries(self, configuration_name: str) -> list[PersistedQuery]:
        """List the persisted queries of a configuration (usually the project name)."""
        body = self.execute_request(
            self._url_for_path(ENDPOINT_PERSISTED_QUERIES_LIST + configuration_name), "GET", None, 200
        )
        listing = self._parse_json(body)
        if not listing:
            return []
        try:
            return [PersistedQuery.from_json(node) for node in listing[0].get(JSON_KEY_QUERIES, [])]
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise HeadlessClientError(f"Unexpected persisted query listing from server: {body}") from e

    def persist_query(self, query: str, persisted_query_path: str) -> PersistedQuery:
        """Store a query on the server under a short path.

        Deploying persisted queries with the content packages is usually
        preferable to persisting them at runtime.
        """
        validate_persisted_query_path(persisted_query_path)

        body = self.execute_request(
            self._url_for_path(ENDPOINT_PERSISTED_QUERIES_PERSIST + persisted_query_path), "PUT", query, 201
        )
        result = self._parse_json(body)
        try:
            return PersistedQuery(result[JSON_KEY_SHORT_PATH], result[JSON_KEY_PATH], query)
        except (KeyError, TypeError) as e:
            raise HeadlessClientError(f"Unexpected persist query response from server: {body}") from e

    def create_paging_cursor(
        self,
        query: GraphQlQuery | PersistedQuery,
        page_size: int,
        variables: Mapping[str, Any] | None = None,
    ) -> PagingCursor:
        """Create a cursor over the pages of a cursor paginated query.

        The query must declare ``$first`` and ``$after`` and select
        ``pageInfo``, as queries built with ``paginated()`` do.
        """
        if isinstance(query, GraphQlQuery):
            return PagingCursor(self, page_size, query=query.generate_query(), variables=variables)
        if isinstance(query, PersistedQuery):
            return PagingCursor(self, page_size, persisted_query_path=query.short_path, variables=variables)
        raise TypeError(f"Cannot create a paging cursor for {type(query).__name__}")

    def create_query_request_payload(self, query: str, variables: Mapping[str, Any] | None) -> str:
        """Create the JSON request body ``{"query": ..., "variables": ...}``."""
        payload: dict[str, Any] = {JSON_KEY_QUERY: query}
        if variables is not None:
            check_query_for_vars(query, variables.keys())
            payload[JSON_KEY_VARIABLES] = self._serialize_variables(variables)
        return json.dumps(payload)

    def execute_request(
        self,
        url: httpx.URL | str,
        method: str,
        body: str | None,
        expected_status: int,
    ) -> str:
        """Send a request and return the response body.

        Raises:
            HeadlessClientError: On network failures or an unexpected status code
        """
        client = self._get_client()
        logger.debug("%s %s", method, url)

        try:
            response = client.request(method, url, content=body)
        except httpx.HTTPError as e:
            raise HeadlessClientError(f"Could not execute {method} request to {url}: {e}") from e

        logger.debug("Received status %s from %s", response.status_code, url)
        if response.status_code != expected_status:
            raise HeadlessClientError(f"Unexpected http response code {response.status_code}: {response.text}")
        return response.text

    def _url_for_path(self, path: str) -> httpx.URL:
        return self.endpoint.copy_with(path=path)

    def _to_graphql_response(self, body: str) -> GraphQlResponse:
        result = self._parse_json(body)
        if not isinstance(result, dict):
            raise HeadlessClientError(f"Unexpected GraphQL response from server: {body}")

        response = GraphQlResponse(result)
        if response.has_errors():
            raise HeadlessClientError.from_response(response)
        return response

    @staticmethod
    def _parse_json(body: str) -> Any:
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise HeadlessClientError(f"Could not parse GraphQL response from server: {e}") from e

    @staticmethod
    def _format_param_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)

    def _serialize_variables(self, variables: Mapping[str, Any]) -> dict[str, Any]:
        """Serialize variables for the GraphQL request.

        Drops None values and converts Pydantic models to dicts.
        """
        result = {}
        for key, value in variables.items():
            if value is None:
                continue  # e.g. $after on the first page
            if isinstance(value, BaseModel):
                result[key] = value.model_dump(by_alias=True, exclude_none=True)
            elif isinstance(value, list):
                result[key] = [
                    v.model_dump(by_alias=True, exclude_none=True) if isinstance(v, BaseModel) else v
                    for v in value
                ]
            else:
                result[key] = value
        return result


class HeadlessClientBuilder:
    """Configures and creates one ``HeadlessClient``."""

    def __init__(self):
        self._endpoint: str | httpx.URL | None = None
        self._auth: Auth | None = None
        self._connect_timeout = DEFAULT_TIMEOUT
        self._read_timeout = DEFAULT_TIMEOUT
        self._transport: httpx.BaseTransport | None = None
        self._sealed = False

    def endpoint(self, endpoint: str | httpx.URL) -> "HeadlessClientBuilder":
        """Set the GraphQL endpoint; a bare server URL uses the default endpoint."""
        self._assert_not_sealed()
        resolve_endpoint(endpoint)
        self._endpoint = endpoint
        return self

    def basic_auth(self, username: str, password: str) -> "HeadlessClientBuilder":
        return self.auth(BasicAuth(username, password))

    def token_auth(self, token: str) -> "HeadlessClientBuilder":
        return self.auth(BearerAuth(token))

    def auth(self, auth: Auth) -> "HeadlessClientBuilder":
        self._assert_not_sealed()
        if self._auth is not None:
            raise RuntimeError("Authentication is already configured")
        self._auth = auth
        return self

    def connect_timeout(self, seconds: float) -> "HeadlessClientBuilder":
        self._assert_not_sealed()
        self._connect_timeout = seconds
        return self

    def read_timeout(self, seconds: float) -> "HeadlessClientBuilder":
        self._assert_not_sealed()
        self._read_timeout = seconds
        return self

    def transport(self, transport: httpx.BaseTransport) -> "HeadlessClientBuilder":
        self._assert_not_sealed()
        self._transport = transport
        return self

    def build(self) -> HeadlessClient:
        self._assert_not_sealed()
        if self._endpoint is None:
            raise ValueError("An endpoint is required")
        self._sealed = True
        return HeadlessClient(
            self._endpoint,
            self._auth,
            connect_timeout=self._connect_timeout,
            read_timeout=self._read_timeout,
            transport=self._transport,
        )

    def _assert_not_sealed(self):
        if self._sealed:
            raise RuntimeError("Builder can only be used to create one instance of HeadlessClient")
