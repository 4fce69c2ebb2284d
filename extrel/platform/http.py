"""HTTP client abstraction.

This module provides:
- HttpClient: Protocol for the JSON POST the release flows need
- RealHttpClient: Implementation using urllib
- MockHttpClient: Canned responses for tests

A response with any status code is a successful *transport* result; callers
decide which statuses they accept. Only network-level failures are errors.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from extrel.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Network-level failure (no HTTP status was received).

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: str


@runtime_checkable
class HttpClient(Protocol):
    def post_json(
        self, url: str, payload: object, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        """POST ``payload`` as JSON and return status and body."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "extrel") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(
        self, url: str, payload: object, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=data,
            method="POST",
            headers={
                "User-Agent": self.user_agent,
                "Content-Type": "application/json",
                **headers,
            },
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(status=response.status, body=_decode(response.read())))
        except urllib.error.HTTPError as e:
            # Non-2xx: the server answered, so hand status and body back.
            return Ok(HttpResponse(status=e.code, body=_decode(e.read())))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, message=str(e)))


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class MockHttpClient:
    """HTTP client returning canned responses, recording every call.

    Usage:
        client = MockHttpClient()
        client.set_response("https://api.example.com/prs", HttpResponse(201, "{}"))
    """

    def __init__(self) -> None:
        self._responses: dict[str, HttpResponse | HttpError] = {}
        self.calls: list[tuple[str, object, dict[str, str]]] = []

    def set_response(self, url: str, response: HttpResponse | HttpError) -> None:
        self._responses[url] = response

    def post_json(
        self, url: str, payload: object, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append((url, payload, headers))
        response = self._responses.get(url)
        if response is None:
            return Ok(HttpResponse(status=404, body="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
