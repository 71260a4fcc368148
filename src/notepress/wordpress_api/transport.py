"""Sync and async HTTP transports for the WordPress REST API.

Each transport handles one request end to end:

1. Send the request to ``{site_url}/wp-json/wp/v2`` with HTTP Basic auth
   (user name plus application password).
2. On ``2xx``, return the decoded JSON body (``{}`` for an empty body).
3. On ``>= 400``, raise the typed error for the status code.  The
   message is the ``message`` field of the WordPress error body, or
   ``HTTP <status>: Request failed`` when there is none.
4. On a timeout, connection failure or any other httpx request error,
   raise :class:`NotepressNetworkError`.
5. A success response whose body is not JSON raises
   :class:`NotepressRemoteError`.

Requests are never retried; a failure is reported once to the caller.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from notepress.config import NotepressConfig
from notepress.errors import (
    NotepressAuthError,
    NotepressError,
    NotepressNetworkError,
    NotepressNotFoundError,
    NotepressPermissionError,
    NotepressRemoteError,
    NotepressValidationError,
)
from notepress.observability import fields, get_logger, resolve_metrics

log = get_logger("notepress.transport")

_STATUS_ERRORS: dict[int, type[NotepressError]] = {
    400: NotepressValidationError,
    401: NotepressAuthError,
    403: NotepressPermissionError,
    404: NotepressNotFoundError,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def error_message(response: httpx.Response) -> str:
    """Human-readable message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}: Request failed"


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`NotepressError` subclass matching a >= 400 status."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    wp_code = body.get("code", "") if isinstance(body, dict) else ""

    error_cls = _STATUS_ERRORS.get(status, NotepressRemoteError)
    raise error_cls(
        message=error_message(response),
        context={
            "status_code": status,
            "wp_code": wp_code,
            "operation": f"{method} {path}",
        },
    )


def _dump_payload(
    method: str,
    url: str,
    payload: Any | None,
    response_status: int | None,
    response_body: Any | None,
    secret: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from notepress.utils.redact import redact

    dump: dict[str, Any] = {
        "method": method,
        "url": url,
    }
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, secret)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: NotepressConfig,
    method: str,
    response: httpx.Response,
    payload: Any,
) -> None:
    if not config.debug_dump_payload:
        return
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), payload,
        response.status_code, resp_body,
        secret=config.application_password,
    )


def _network_error(metrics: Any, method: str, path: str, exc: Exception) -> NotepressNetworkError:
    metrics.increment(
        "notepress.requests_total",
        tags={"method": method, "path": path, "status": "error"},
    )
    log.warning(
        "Request network error",
        extra=fields(op="request", method=method, path=path, error=str(exc)),
    )
    return NotepressNetworkError(
        message=f"Network error on {method} {path}: {exc}",
        context={"url": path},
        cause=exc,
    )


def _handle_response(
    config: NotepressConfig,
    metrics: Any,
    method: str,
    path: str,
    response: httpx.Response,
    elapsed_ms: float,
    payload: Any,
) -> Any:
    tags = {"method": method, "path": path, "status": str(response.status_code)}
    metrics.increment("notepress.requests_total", tags=tags)
    metrics.timing("notepress.request_duration_ms", elapsed_ms, tags=tags)

    _emit_debug_dump(config, method, response, payload)

    if response.status_code >= 400:
        log.warning(
            "Request failed",
            extra=fields(op="request", method=method, path=path, status_code=response.status_code),
        )
        _raise_for_status(response, method, path)

    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise NotepressRemoteError(
            message=f"Invalid JSON in response to {method} {path}",
            context={
                "status_code": response.status_code,
                "operation": f"{method} {path}",
                "body": response.text[:200],
            },
            cause=exc,
        ) from exc


def _client_options(config: NotepressConfig) -> dict[str, Any]:
    return {
        "base_url": config.api_base,
        "auth": httpx.BasicAuth(config.username, config.application_password),
        "headers": {"Accept": "application/json"},
        "timeout": httpx.Timeout(config.timeout_seconds),
        "proxy": config.http_proxy,
    }


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class WordPressTransport:
    """Synchronous HTTP transport with Basic auth and typed errors.

    Parameters
    ----------
    config:
        A :class:`NotepressConfig` with the site URL and credentials.
    """

    def __init__(self, config: NotepressConfig) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self._client = httpx.Client(**_client_options(config))

    # -- public API --------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Execute an HTTP request against the WordPress REST API.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ``PUT``).
        path:
            API path relative to ``/wp-json/wp/v2`` (e.g. ``/posts``).
        **kwargs:
            Forwarded to :meth:`httpx.Client.request`.  Use ``json=`` for
            JSON bodies, ``content=`` for raw bytes, ``params=`` for query
            strings and ``headers=`` for per-request headers.

        Returns
        -------
        Any
            Decoded JSON: a dict for single resources, a list for
            collection endpoints.

        Raises
        ------
        NotepressValidationError
            On 400 responses.
        NotepressAuthError
            On 401 responses.
        NotepressPermissionError
            On 403 responses.
        NotepressNotFoundError
            On 404 responses.
        NotepressRemoteError
            On any other status >= 400, or a success response whose
            body is not JSON.
        NotepressNetworkError
            On timeouts, connection failures and other request errors
            (protocol, proxy, decoding).
        """
        payload = kwargs.get("json", kwargs.get("content"))
        t0 = time.monotonic()
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise _network_error(self._metrics, method, path, exc) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000
        return _handle_response(
            self._config, self._metrics, method, path, response, elapsed_ms, payload,
        )

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> WordPressTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncWordPressTransport:
    """Asynchronous HTTP transport with Basic auth and typed errors.

    Mirrors :class:`WordPressTransport` but uses ``httpx.AsyncClient``.
    """

    def __init__(self, config: NotepressConfig) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self._client = httpx.AsyncClient(**_client_options(config))

    # -- public API --------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Execute an HTTP request against the WordPress REST API (async).

        See :meth:`WordPressTransport.request`; the semantics are identical.
        """
        payload = kwargs.get("json", kwargs.get("content"))
        t0 = time.monotonic()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise _network_error(self._metrics, method, path, exc) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000
        return _handle_response(
            self._config, self._metrics, method, path, response, elapsed_ms, payload,
        )

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncWordPressTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
