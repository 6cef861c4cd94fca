"""
HTTP Utilities

Shared HTTP client used by the provider implementations. Requests are
instrumented with Prometheus metrics and transport failures are converted
into HTTPRequestError so callers only deal with one error type.
"""

import logging
import time
from typing import Optional

import httpx

from gitwebhook.core.constants import WEBHOOK_ALLOWED_URL_SCHEMES
from gitwebhook.core.exceptions import GitWebhookError
from gitwebhook.core.metrics import (
    git_api_duration_seconds,
    git_api_errors_total,
    git_api_rate_limited_total,
    git_api_requests_total,
)

logger = logging.getLogger(__name__)


class HTTPRequestError(GitWebhookError):
    """Base exception for HTTP request failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def is_absolute_http_url(url: str) -> bool:
    """True when ``url`` parses as an http(s) URL with a host."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return False
    return parsed.scheme in WEBHOOK_ALLOWED_URL_SCHEMES and bool(parsed.host)


class InstrumentedAsyncClient:
    """
    A wrapper around httpx.AsyncClient that automatically records metrics.

    Usage:
        async with InstrumentedAsyncClient("GitHub API", base_url=url) as client:
            response = await client.get("/repos/acme/widgets/hooks")
            client.ensure_success(response, "list hooks")
    """

    def __init__(
        self,
        service_name: str,
        timeout: float = 30.0,
        **kwargs,
    ):
        self.service_name = service_name
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._kwargs = kwargs
        self._NOT_STARTED_MSG = "Client not started. Use 'async with' or call start()."

    @property
    def base_url(self) -> str:
        return str(self._kwargs.get("base_url", ""))

    async def start(self) -> None:
        """Start the underlying client (for long-lived usage)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, **self._kwargs)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InstrumentedAsyncClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _record_request(self, method: str) -> None:
        git_api_requests_total.labels(service=self.service_name, method=method).inc()

    def _record_success(self, duration: float) -> None:
        git_api_duration_seconds.labels(service=self.service_name).observe(duration)

    def _record_error(self) -> None:
        git_api_errors_total.labels(service=self.service_name).inc()

    def _record_rate_limit(self, response: httpx.Response) -> None:
        if response.status_code == 429 or (
            response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            git_api_rate_limited_total.labels(service=self.service_name).inc()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make an HTTP request with metrics. Transport failures raise HTTPRequestError."""
        if self._client is None:
            raise RuntimeError(self._NOT_STARTED_MSG)

        start_time = time.time()
        self._record_request(method)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            self._record_error()
            msg = f"Timeout during {method} {url} on {self.service_name}"
            logger.warning(msg)
            raise HTTPRequestError(msg) from e
        except httpx.HTTPError as e:
            self._record_error()
            msg = f"Connection error during {method} {url} on {self.service_name}: {e}"
            logger.warning(msg)
            raise HTTPRequestError(msg) from e

        self._record_success(time.time() - start_time)
        self._record_rate_limit(response)
        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    def ensure_success(self, response: httpx.Response, operation: str) -> None:
        """Raise HTTPRequestError carrying the status code for any non-2xx response."""
        if response.is_success:
            return
        self._record_error()
        msg = f"HTTP {response.status_code} during {operation} on {self.service_name}"
        logger.warning(msg)
        raise HTTPRequestError(msg, status_code=response.status_code)
