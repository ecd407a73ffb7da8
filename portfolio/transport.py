"""
Async HTTP transport for the GitHub REST API.

Handles JSON requests against the profile API and maps error responses to
typed exceptions. Each call issues exactly one request; periodic refreshes
are the caller's concern.
"""

import time
from typing import Any

import httpx

from portfolio.exceptions import (
    ApiError,
    AuthorizationError,
    NotFoundError,
    RateLimitedError,
    ServerError,
)
from portfolio.logging import log_http_request, log_http_response

GITHUB_MEDIA_TYPE = "application/vnd.github.v3+json"


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for read-only API access.

    Handles:
    - The versioned GitHub JSON media type on every request
    - Request/response debug logging with sensitive data masked
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to inject mock handlers)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": GITHUB_MEDIA_TYPE},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a GET request and return the decoded JSON body.

        Args:
            path: API path (e.g., "/users/octocat")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            ApiError: On non-2xx responses, undecodable bodies or connection errors
        """
        url = f"{self.base_url}{path}"
        log_http_request("GET", url, params=params)
        started = time.perf_counter()

        try:
            response = await self._client.get(path, params=params)
        except httpx.RequestError as e:
            raise ServerError("CONNECTION_ERROR", str(e)) from e

        elapsed_ms = (time.perf_counter() - started) * 1000

        if response.status_code >= 400:
            log_http_response(response.status_code, url, elapsed_ms=elapsed_ms)
            raise self._parse_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(
                "INVALID_RESPONSE", f"Response is not JSON: {e}", response.status_code
            ) from e

        log_http_response(response.status_code, url, body=data, elapsed_ms=elapsed_ms)
        return data

    def _parse_error_response(self, response: httpx.Response) -> ApiError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate ApiError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        status_code = response.status_code

        if status_code == 429 or (
            status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0"
        ):
            retry_after = self._retry_after(response)
            return RateLimitedError("RATE_LIMITED", message, retry_after, status_code)
        elif status_code in (401, 403):
            return AuthorizationError("FORBIDDEN", message, status_code)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, status_code)
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, status_code)
        else:
            return ApiError("API_ERROR", message, status_code)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        """Seconds until the rate limit resets, from Retry-After or X-RateLimit-Reset."""
        retry_after_str = response.headers.get("Retry-After")
        if retry_after_str is not None:
            try:
                return int(retry_after_str)
            except ValueError:
                return 60

        reset_str = response.headers.get("X-RateLimit-Reset")
        if reset_str is not None:
            try:
                return max(int(reset_str) - int(time.time()), 0)
            except ValueError:
                return 60

        return 60
