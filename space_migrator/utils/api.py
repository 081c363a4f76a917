"""
API utilities for the Space to Teams migration tool

Both remote systems are plain JSON-over-HTTPS APIs authenticated with the
OAuth2 client-credentials grant, so a single ``ApiClient`` built on a
``requests.Session`` serves the Space and the Microsoft Graph adapters.
Retrying is *not* done here: the migration engine owns the retry budget.
"""

from __future__ import annotations

import logging
import time
from http import HTTPStatus
from typing import Any, Callable, Iterator

import requests

from space_migrator.constants import (
    AAD_TOKEN_URL,
    GRAPH_BASE_URL,
    GRAPH_SCOPE,
    HTTP_TIMEOUT,
    SPACE_API_PATH,
    SPACE_TOKEN_PATH,
)
from space_migrator.utils.logging import (
    log_api_request,
    log_api_response,
    log_with_context,
)

# Cache for client instances
_client_cache: dict[str, ApiClient] = {}

# Refresh tokens this many seconds before they actually expire
TOKEN_EXPIRY_MARGIN = 60


class ClientCredentialsToken:
    """Fetches and caches an OAuth2 access token (client-credentials grant)."""

    def __init__(
        self,
        token_url: str,
        data: dict[str, str],
        auth: tuple[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.token_url = token_url
        self._data = data
        self._auth = auth
        self._session = session or requests.Session()
        self._token: str | None = None
        self._expires_at = 0.0

    def __call__(self) -> str:
        if self._token is None or time.monotonic() >= self._expires_at:
            self._refresh()
        assert self._token is not None
        return self._token

    def _refresh(self) -> None:
        log_with_context(logging.DEBUG, f"Requesting access token from {self.token_url}")
        response = self._session.post(
            self.token_url, data=self._data, auth=self._auth, timeout=HTTP_TIMEOUT
        )
        response.raise_for_status()
        payload = response.json()
        self._token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)


class ApiClient:
    """Minimal JSON client with bearer authentication and debug logging."""

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], str],
        session: requests.Session | None = None,
        timeout: int = HTTP_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._session = session or requests.Session()
        self._timeout = timeout

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Issue one request and return the decoded JSON body.

        Raises:
            requests.HTTPError: For non-2xx responses (carries the response).
            requests.RequestException: For transport-level failures.
        """
        url = self._url(path)
        log_api_request(method, url, json_body, params=params)

        response = self._session.request(
            method,
            url,
            params=params,
            json=json_body,
            headers={
                "Authorization": f"Bearer {self._token_provider()}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
        )

        body: dict[str, Any] = {}
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = {}
        log_api_response(response.status_code, url, body or response.text)

        response.raise_for_status()
        return body

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.request("GET", path, params=params)

    def post(
        self, path: str, json_body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return self.request("POST", path, json_body=json_body)

    def patch(self, path: str, json_body: dict[str, Any]) -> dict[str, Any]:
        return self.request("PATCH", path, json_body=json_body)

    def delete(self, path: str) -> dict[str, Any]:
        return self.request("DELETE", path)

    def iter_pages(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        items_key: str = "value",
        next_key: str = "@odata.nextLink",
    ) -> Iterator[dict[str, Any]]:
        """Yield items across pages linked by an absolute next-page URL."""
        page = self.get(path, params=params)
        while True:
            yield from page.get(items_key, [])
            next_link = page.get(next_key)
            if not next_link:
                return
            page = self.get(next_link)


def http_error_details(error: requests.HTTPError) -> tuple[int | None, str, str]:
    """Extract status code, reason phrase, and API error message from an HTTPError.

    Args:
        error: The error raised by ``Response.raise_for_status``.

    Returns:
        Tuple of (status_code, reason_phrase, message).
    """
    response = error.response
    if response is None:
        return None, "", str(error)

    status = response.status_code
    reason = response.reason or ""
    if not reason:
        try:
            reason = HTTPStatus(status).phrase
        except ValueError:
            reason = "Unknown"

    message = str(error)
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            message = err["message"]
        elif payload.get("error_description"):
            message = payload["error_description"]
        elif payload.get("message"):
            message = payload["message"]
    elif response.text:
        message = response.text

    return status, reason, message


def is_classified_error(error: BaseException) -> bool:
    """True when the failure carries an HTTP status (and so may be retried)."""
    return isinstance(error, requests.HTTPError) and error.response is not None


def get_graph_client(tenant_id: str, client_id: str, client_secret: str) -> ApiClient:
    """Get a Microsoft Graph client authenticated as the application."""
    cache_key = f"graph:{tenant_id}:{client_id}"
    if cache_key in _client_cache:
        log_with_context(logging.DEBUG, "Using cached Graph client")
        return _client_cache[cache_key]

    log_with_context(logging.DEBUG, f"Creating Graph client for tenant {tenant_id}")
    token = ClientCredentialsToken(
        AAD_TOKEN_URL.format(tenant_id=tenant_id),
        data={
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": GRAPH_SCOPE,
        },
    )
    client = ApiClient(GRAPH_BASE_URL, token)
    _client_cache[cache_key] = client
    return client


def get_space_client(space_url: str, client_id: str, client_secret: str) -> ApiClient:
    """Get a JetBrains Space client authenticated as the application."""
    base = space_url.rstrip("/")
    cache_key = f"space:{base}:{client_id}"
    if cache_key in _client_cache:
        log_with_context(logging.DEBUG, "Using cached Space client")
        return _client_cache[cache_key]

    log_with_context(logging.DEBUG, f"Creating Space client for {base}")
    token = ClientCredentialsToken(
        f"{base}{SPACE_TOKEN_PATH}",
        data={"grant_type": "client_credentials", "scope": "**"},
        auth=(client_id, client_secret),
    )
    client = ApiClient(f"{base}{SPACE_API_PATH}", token)
    _client_cache[cache_key] = client
    return client
