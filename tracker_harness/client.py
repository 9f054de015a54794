"""Authenticated JSON client for the health tracker backend.

Wraps an httpx client and classifies every exchange:
- A completed exchange becomes a RequestOk (2xx) or RequestErr (anything
  else, or a body that cannot be decoded).
- A transport failure (DNS, refused connection, timeout) means the server
  cannot be tested at all, so it raises ServerUnreachableError instead of
  producing an outcome.
"""

import json
import time
from typing import Any, Optional

import httpx

from tracker_harness.models import RequestErr, RequestOk, RequestOutcome, SectionResult, Session

ALLOWED_METHODS = ("GET", "POST", "PATCH", "DELETE")

NO_CONTENT = 204


class HarnessFatalError(Exception):
    """Raised when the run cannot continue.

    The runner fills in sections with everything recorded before the abort,
    including the section that was interrupted.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.sections: list[SectionResult] = []


class ServerUnreachableError(HarnessFatalError):
    """Raised when a request cannot be delivered to the server."""

    def __init__(
        self,
        method: str,
        url: str,
        duration_ms: float,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            f"Failed to connect to {url} ({method}) after {duration_ms:.0f}ms: {cause}"
        )
        self.method = method
        self.url = url
        self.duration_ms = duration_ms
        self.cause = cause


class ApiClient:
    """Issues requests against the backend on behalf of a Session.

    The bearer token is read from the session on every call, so a token
    stored by the authentication step is used by every call after it.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        base_url: str,
        session: Session,
        reporter: Optional[Any] = None,
    ):
        """Initialize the client.

        Args:
            http_client: httpx client used for all requests
            base_url: Server root, e.g. http://localhost:8080
            session: Session holding the bearer token
            reporter: Optional reporter receiving one timing callback per call
        """
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.reporter = reporter

    def build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
    ) -> RequestOutcome:
        """Send one request and classify the result.

        Args:
            endpoint: Path below the base URL, starting with "/"
            method: One of GET, POST, PATCH, DELETE
            body: Value serialized as the JSON body, omitted when None

        Returns:
            RequestOk for a 2xx status, RequestErr otherwise, including a body
            that cannot be decoded

        Raises:
            ServerUnreachableError: If the exchange could not be completed
            ValueError: If the method is not supported
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method: {method}")

        url = f"{self.base_url}{endpoint}"
        content = json.dumps(body) if body is not None else None

        start = time.perf_counter()
        try:
            response = self.http_client.request(
                method,
                url,
                content=content,
                headers=self.build_headers(),
            )
        except httpx.TransportError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self._report(method, endpoint, None, duration_ms)
            raise ServerUnreachableError(method, url, duration_ms, e) from e
        except httpx.DecodingError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self._report(method, endpoint, None, duration_ms)
            return RequestErr(status=None, duration_ms=duration_ms, error=f"Malformed body: {e}")
        duration_ms = (time.perf_counter() - start) * 1000

        self._report(method, endpoint, response.status_code, duration_ms)
        return classify_response(response, duration_ms)

    def _report(
        self,
        method: str,
        endpoint: str,
        status: Optional[int],
        duration_ms: float,
    ) -> None:
        if self.reporter:
            self.reporter.on_request(method, endpoint, status, duration_ms)


def classify_response(response: httpx.Response, duration_ms: float) -> RequestOutcome:
    """Turn a completed httpx response into a RequestOk or RequestErr.

    The body is decoded only when the server declares JSON, sent a
    non-empty body and the status is not 204 No Content.
    """
    status = response.status_code
    content_type = response.headers.get("content-type", "")

    data = None
    if status != NO_CONTENT and "application/json" in content_type and response.content:
        try:
            data = response.json()
        except ValueError as e:
            return RequestErr(
                status=status,
                duration_ms=duration_ms,
                error=f"Malformed JSON body: {e}",
            )

    if 200 <= status < 300:
        return RequestOk(status=status, duration_ms=duration_ms, body=data)

    return RequestErr(
        status=status,
        duration_ms=duration_ms,
        error=data if data is not None else response.reason_phrase,
    )
