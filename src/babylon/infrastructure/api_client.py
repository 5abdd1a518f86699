"""Babylon REST API client (requests + retry/backoff).

Blocking HTTP calls run in a worker thread so callers stay on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import requests

from babylon.domain.config.api import ApiConfig
from babylon.domain.config.retry import RetryConfig
from babylon.domain.validation import (
    assert_eth_address,
    assert_username,
    assert_uuid,
    validate_length,
)
from babylon.infrastructure.retry import is_retryable_error, retry

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000"


class ApiRequestError(Exception):
    """Non-2xx response from the API.

    ``status`` holds the HTTP status so the default retry predicate retries
    5xx/429 and fails fast on other 4xx.
    """

    def __init__(self, message: str, code: str, status: int):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


def _is_retryable_request_error(exception: Exception) -> bool:
    if isinstance(exception, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True  # Retry network errors
    return is_retryable_error(exception)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _compact(body: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields and convert keys to the API's camelCase"""
    return {_camel(key): value for key, value in body.items() if value is not None}


class BabylonApiClient:
    """Client for the Babylon identity API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        """Initialize API client

        Args:
            base_url: Server URL (default: from BABYLON_API_URL env or localhost:3000)
            token: Bearer token for authenticated endpoints (default: BABYLON_API_TOKEN env)
            timeout: Per-request timeout in seconds
            retry_config: Retry configuration for each request
            sleep: Optional sleep override used between retries
        """
        self.base_url = (base_url or os.getenv("BABYLON_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.token = token or os.getenv("BABYLON_API_TOKEN")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self._sleep = sleep

    @classmethod
    def from_config(
        cls, api_config: ApiConfig, retry_config: Optional[RetryConfig] = None
    ) -> "BabylonApiClient":
        return cls(
            base_url=api_config.base_url,
            token=api_config.token,
            timeout=api_config.timeout,
            retry_config=retry_config,
        )

    def _send(
        self, method: str, endpoint: str, body: Optional[Dict[str, Any]], auth: bool
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug(f"HTTP {method} {url}")
        resp = requests.request(method, url, json=body, headers=headers, timeout=self.timeout)

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            error = data.get("error") if isinstance(data, dict) else None
            if not isinstance(error, dict):
                error = {}
            raise ApiRequestError(
                error.get("message") or "An error occurred",
                error.get("code") or "UNKNOWN",
                resp.status_code,
            )
        return data

    def _log_retry(self, error: Exception, attempt: int) -> None:
        logger.warning(
            f"API request failed (attempt {attempt}/{self.retry_config.max_attempts}): {error}. Retrying..."
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        """Send a request with retry on network errors, 429 and 5xx

        Args:
            method: HTTP method
            endpoint: Path starting with ``/``
            body: Optional JSON body
            auth: Attach the bearer token when one is configured

        Returns:
            Decoded JSON response (None for an empty body)

        Raises:
            ApiRequestError: On a non-2xx response
            requests.RequestException: On network failure after retries
        """
        return await retry(
            lambda: asyncio.to_thread(self._send, method, endpoint, body, auth),
            self.retry_config,
            is_retryable=_is_retryable_request_error,
            on_retry=self._log_retry,
            sleep=self._sleep,
        )

    async def check_username(self, username: str) -> bool:
        assert_username(username)
        data = await self.request(
            "GET", f"/api/identity/username/{quote(username, safe='')}/available", auth=False
        )
        return bool(data["available"])

    async def create_user(
        self,
        username: str,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        wallet_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create the current user (onboarding)

        Raises:
            ValidationError: If a field is malformed (nothing is sent)
        """
        assert_username(username)
        validate_length(display_name, "DISPLAY_NAME", "displayName")
        if wallet_address is not None:
            assert_eth_address(wallet_address, "walletAddress")
        body = _compact(
            {
                "username": username,
                "display_name": display_name,
                "avatar_url": avatar_url,
                "wallet_address": wallet_address,
            }
        )
        return await self.request("POST", "/api/identity/users", body)

    async def get_me(self) -> Dict[str, Any]:
        return await self.request("GET", "/api/identity/me")

    async def update_me(
        self,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Dict[str, Any]:
        validate_length(display_name, "DISPLAY_NAME", "displayName")
        validate_length(bio, "BIO", "bio")
        body = _compact({"display_name": display_name, "avatar_url": avatar_url, "bio": bio})
        return await self.request("PATCH", "/api/identity/me", body)

    async def update_settings(self, **settings: Any) -> Dict[str, Any]:
        """Update notification/privacy settings (snake_case keyword arguments)"""
        return await self.request("PATCH", "/api/identity/me/settings", _compact(settings))

    async def get_user_by_username(self, username: str) -> Dict[str, Any]:
        return await self.request(
            "GET", f"/api/identity/users/by-username/{quote(username, safe='')}", auth=False
        )

    async def get_user_by_id(self, user_id: str) -> Dict[str, Any]:
        assert_uuid(user_id, "id")
        return await self.request("GET", f"/api/identity/users/{quote(user_id, safe='')}", auth=False)

    async def health(self) -> Dict[str, Any]:
        return await self.request("GET", "/health", auth=False)
