"""Authentication handlers for the headless client.

Provides pluggable authentication via the Auth protocol.
Users can implement custom auth or use built-in handlers.
"""

import base64
from typing import Dict, Protocol, runtime_checkable

HEADER_AUTHORIZATION = "Authorization"


@runtime_checkable
class Auth(Protocol):
    """Protocol for authentication handlers.

    Implement this protocol to create custom authentication.

    Example:
        class LoginTokenAuth:
            def __init__(self, login_token: str):
                self.login_token = login_token

            def get_headers(self) -> dict[str, str]:
                return {"Cookie": f"login-token={self.login_token}"}
    """

    def get_headers(self) -> Dict[str, str]:
        """Return headers to include in requests."""
        ...


class BearerAuth:
    """Bearer token authentication, e.g. with a developer or service token.

    Example:
        auth = BearerAuth("eyJhbGciOiJSUzI1NiIs...")
    """

    def __init__(self, token: str):
        self.token = token

    def get_headers(self) -> Dict[str, str]:
        return {HEADER_AUTHORIZATION: f"Bearer {self.token}"}


class BasicAuth:
    """HTTP Basic authentication.

    Credentials are encoded as ISO-8859-1, like the server expects.

    Example:
        auth = BasicAuth("admin", "admin")
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def get_headers(self) -> Dict[str, str]:
        credentials = f"{self.username}:{self.password}"
        encoded = base64.b64encode(credentials.encode("iso-8859-1")).decode("ascii")
        return {HEADER_AUTHORIZATION: f"Basic {encoded}"}


class HeaderAuth:
    """Custom headers, for setups such as a dispatcher expecting its own header.

    Example:
        auth = HeaderAuth({"X-Dispatcher-Token": "secret"})
    """

    def __init__(self, headers: Dict[str, str]):
        self._headers = headers

    def get_headers(self) -> Dict[str, str]:
        return self._headers.copy()


class NoAuth:
    """No authentication (publish instances serving public content)."""

    def get_headers(self) -> Dict[str, str]:
        return {}
