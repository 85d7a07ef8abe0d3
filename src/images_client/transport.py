"""
HTTP transport for the Images v2 API.

Executes operation descriptors over httpx, retries timed-out requests with
tenacity, and maps HTTP failures onto the client error taxonomy. Resources
only ever talk to the ``Transport`` protocol so tests can inject a fake.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from . import __version__, media_types
from .api import Operation
from .errors import AuthError, Conflict, NotFound, RateLimited, TransportError
from .settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["Transport", "HttpTransport", "raise_for_status"]


@runtime_checkable
class Transport(Protocol):
    """Synchronous request executor used by resources."""

    def execute(self, operation: Operation, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        """
        Perform one REST call.

        Args:
            operation: Descriptor of the call
            params: Path placeholders plus an optional ``body``

        Returns:
            Response with a 2xx status

        Raises:
            TransportError: On network failure or non-2xx status
        """
        ...


_STATUS_ERRORS = {
    401: AuthError,
    403: AuthError,
    404: NotFound,
    409: Conflict,
    429: RateLimited,
}


def raise_for_status(response: httpx.Response, operation: Operation) -> None:
    """Raise the matching TransportError subclass for a non-2xx response."""
    status = response.status_code
    if 200 <= status < 300:
        return

    detail = response.text.strip()
    if len(detail) > 200:
        detail = detail[:200] + "..."
    message = f"{operation.name} failed with HTTP {status}"
    if detail:
        message = f"{message}: {detail}"

    error_cls = _STATUS_ERRORS.get(status, TransportError)
    raise error_cls(message, status_code=status)


class HttpTransport:
    """
    httpx-backed Transport.

    Only timeouts are retried (``settings.http_retry`` extra attempts);
    HTTP error statuses are surfaced immediately.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        """
        Initialize the transport.

        Args:
            settings: Endpoint, auth and timeout configuration
            client: Preconfigured client (tests pass one built on httpx.MockTransport)
        """
        self.settings = settings

        headers = {"User-Agent": f"images-client/{__version__}", "Accept": media_types.JSON}
        if settings.auth_token:
            headers["X-Auth-Token"] = settings.auth_token

        if client is None:
            client = httpx.Client(
                base_url=settings.base_url,
                timeout=httpx.Timeout(settings.http_timeout_s),
                follow_redirects=True,
                verify=not settings.insecure,
            )
        client.headers.update(headers)
        self.client = client

    def execute(self, operation: Operation, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        params = dict(params or {})
        path = operation.url_path(params)

        request_kwargs: Dict[str, Any] = {}
        if operation.json_body:
            request_kwargs["json"] = params.get("body", {})
        elif "body" in params:
            request_kwargs["content"] = params["body"]
            if operation.content_type:
                request_kwargs["headers"] = {"Content-Type": operation.content_type}

        # a streamed body is consumed by the first attempt and cannot be resent
        replayable = isinstance(request_kwargs.get("content", b""), (bytes, bytearray, str))
        attempts = self.settings.http_retry + 1 if replayable else 1

        logger.debug(f"{operation.method} {path} ({operation.name})")

        try:
            response = self._send(operation.method, path, attempts, **request_kwargs)
        except httpx.RequestError as e:
            raise TransportError(f"Network error during {operation.name}: {e}") from e

        raise_for_status(response, operation)
        return response

    def _send(self, method: str, path: str, attempts: int, **kwargs) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self.client.request(method, path, **kwargs)

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
