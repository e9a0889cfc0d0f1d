"""Supabase REST (PostgREST) API client."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..errors import RemoteAuthError, RemoteNotFoundError, RemoteStoreError

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Supabase REST API client.

    Provides a thin wrapper around the PostgREST and auth endpoints with:
    - API key plus optional user access token
    - Error mapping to the RemoteStoreError hierarchy
    - Request logging with latency
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the Supabase client.

        Args:
            url: Project URL, e.g. https://abcd.supabase.co
            api_key: Project anon (publishable) key
            access_token: Signed-in user's JWT; without it every call runs anonymously
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._client = httpx.Client(
            base_url=self.url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> SupabaseClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            RemoteAuthError: 401/403
            RemoteNotFoundError: 404
            RemoteStoreError: transport failure, other HTTP errors, invalid JSON
        """
        headers = {"Prefer": prefer} if prefer else None
        op_name = f"{method} {path}"

        logger.debug("%s: params=%s", op_name, params)

        start_time = time.monotonic()
        try:
            response = self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("%s failed after %.0fms: %s", op_name, elapsed_ms, e)
            raise RemoteStoreError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000

        if response.status_code in (401, 403):
            logger.error("%s: %d (%.0fms)", op_name, response.status_code, elapsed_ms)
            raise RemoteAuthError(
                f"Not authorized ({response.status_code}): {_error_message(response)}"
            )
        if response.status_code == 404:
            logger.error("%s: 404 Not Found (%.0fms)", op_name, elapsed_ms)
            raise RemoteNotFoundError(_error_message(response))
        if response.status_code >= 400:
            logger.error("%s: HTTP %d (%.0fms)", op_name, response.status_code, elapsed_ms)
            raise RemoteStoreError(f"HTTP {response.status_code}: {_error_message(response)}")

        logger.info("%s: %d (%.0fms)", op_name, response.status_code, elapsed_ms)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("%s: Invalid JSON response (%.0fms)", op_name, elapsed_ms)
            raise RemoteStoreError(f"Invalid JSON response: {e}") from e

    def get_user_id(self) -> str | None:
        """Resolve the signed-in user's id, or None without an access token."""
        if not self.access_token:
            return None
        data = self.request("GET", "/auth/v1/user")
        if not isinstance(data, dict) or not data.get("id"):
            raise RemoteAuthError("Session has no user")
        return str(data["id"])


def _error_message(response: httpx.Response) -> str:
    """Pull the message out of a PostgREST/GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text
