"""HTTP transport for the GitHub REST API.

Services depend on the HttpClient protocol. RealHttpClient talks to the
forge over urllib; MockHttpClient answers from routes scripted by tests.

Retry policy lives here and only here: idempotent GETs are retried on
transient failures, writes never are. Callers see the final error once the
attempts are exhausted.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from time import sleep
from typing import Protocol, runtime_checkable

from autorelease import __version__
from autorelease.core.result import Err, Ok, Result
from autorelease.core.structured import as_str_dict, get_str
from autorelease.forge.timeouts import (
    HTTP_TIMEOUT_SECONDS,
    READ_RETRY_ATTEMPTS,
    READ_RETRY_DELAY_SECONDS,
)

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "is_transient",
]

# 0 is a network-level failure (DNS, reset, timeout).
_TRANSIENT_STATUSES = frozenset({0, 429, 500, 502, 503, 504})


@dataclass(frozen=True, slots=True)
class HttpError:
    """A failed request. `status` is 0 when no HTTP response arrived."""

    url: str
    status: int
    message: str
    method: str = "GET"

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.method} {self.url})"
        return f"{self.message} ({self.method} {self.url})"


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request seen by MockHttpClient."""

    method: str
    url: str
    body: object | None = None


def is_transient(error: HttpError) -> bool:
    return error.status in _TRANSIENT_STATUSES


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON requests against the forge API."""

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and parse the JSON response.

        Args:
            method: HTTP method ("GET", "POST", "DELETE", ...)
            url: Absolute URL
            body: JSON-serializable request body, if any

        Returns:
            Ok with the parsed JSON (None for an empty body), or Err with HttpError
        """
        ...


class RealHttpClient:
    """HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - GitHub token authentication
    - JSON request and response bodies
    - Retry of idempotent reads on transient failures
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        user_agent: str = f"autorelease/{__version__}",
        retry_attempts: int = READ_RETRY_ATTEMPTS,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.retry_attempts = max(1, retry_attempts)
        self._token = token
        self._ssl_context = ssl.create_default_context()

    def _headers(self, *, has_body: bool) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/vnd.github+json",
        }
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _send(self, method: str, url: str, body: object | None) -> Result[bytes, HttpError]:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        try:
            req = urllib.request.Request(
                url,
                data=data,
                method=method,
                headers=self._headers(has_body=data is not None),
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(
                HttpError(url=url, status=e.code, message=_error_message(e), method=method)
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason), method=method))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out", method=method))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e), method=method))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e), method=method))

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        method = method.upper()
        attempts = self.retry_attempts if method == "GET" else 1

        for attempt in range(attempts):
            result = self._send(method, url, body)
            if isinstance(result, Ok):
                return _decode_json(result.value, url=url, method=method)

            if attempt < attempts - 1 and is_transient(result.error):
                sleep(READ_RETRY_DELAY_SECONDS * (attempt + 1))
                continue
            return result

        return Err(HttpError(url=url, status=0, message="no attempt made", method=method))


def _error_message(e: urllib.error.HTTPError) -> str:
    # GitHub puts the useful part in the JSON body: {"message": "..."}.
    try:
        raw = e.read()
    except OSError:
        return str(e.reason)
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return str(e.reason)
    if data is None:
        return str(e.reason)
    return get_str(data, "message") or str(e.reason)


def _decode_json(raw: bytes, *, url: str, method: str) -> Result[object, HttpError]:
    if not raw.strip():
        return Ok(None)
    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}", method=method))
    return Ok(obj)


class MockHttpClient:
    """In-memory forge.

    Responses are keyed by (method, url); unknown routes answer 404.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://api.github.com/repos/o/r", {"default_branch": "main"})
        result = client.request_json("GET", "https://api.github.com/repos/o/r")
        assert result == Ok({"default_branch": "main"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object | HttpError] = {}
        self.calls: list[HttpCall] = []

    def set_response(self, method: str, url: str, response: object | HttpError = None) -> None:
        """Set the response for a route (None means an empty 2xx body)."""
        self._responses[(method.upper(), url)] = response

    def set_error(self, method: str, url: str, *, status: int, message: str = "error") -> None:
        method = method.upper()
        self._responses[(method, url)] = HttpError(
            url=url, status=status, message=message, method=method
        )

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        method = method.upper()
        self.calls.append(HttpCall(method=method, url=url, body=body))

        key = (method, url)
        if key not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)", method=method))

        response = self._responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls_for(self, method: str) -> list[HttpCall]:
        method = method.upper()
        return [c for c in self.calls if c.method == method]
