"""HTTP client for the Maps web service APIs: authentication, rate limiting and JSON transport."""

from __future__ import annotations

import base64
import binascii
import contextvars
import hashlib
import hmac
import json
import threading
import time
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

import requests

EXPERIENCE_ID_HEADER_NAME = "X-GOOG-MAPS-EXPERIENCE-ID"
METRO_AREA_HEADER_NAME = "x-goog-maps-metro-area"
DEFAULT_REQUESTS_PER_SECOND = 50

_context_experience_ids: contextvars.ContextVar[list[str] | None] = contextvars.ContextVar(
    "maps_experience_ids", default=None
)


class MapsError(Exception):
    """Raised for invalid configuration, invalid requests and API error statuses."""


@dataclass(frozen=True)
class ApiConfig:
    """Where an API lives and which kinds of authentication it accepts."""

    host: str
    path: str
    accepts_client_id: bool = True
    accepts_signature: bool = False


@dataclass(frozen=True)
class BinaryResponse:
    """A raw, non-JSON response such as an image."""

    status_code: int
    content_type: str
    data: bytes


class RequestMetrics(Protocol):
    def end_request(self, error: BaseException | None, response: Any, metro_area: str) -> None: ...


class Reporter(Protocol):
    def new_request(self, path: str) -> RequestMetrics: ...


class NoOpRequestMetrics:
    """Request metrics that record nothing."""

    def end_request(self, error, response, metro_area):
        return None


class NoOpReporter:
    """Metric reporter that records nothing."""

    def new_request(self, path):
        return NoOpRequestMetrics()


class _RateLimiter:
    """Token bucket allowing ``rate`` events per second with bursts of ``burst``."""

    def __init__(self, rate: float, burst: int) -> None:
        self._rate = float(rate)
        self._burst = float(burst)
        self._tokens = float(burst)
        self._last = time.monotonic()
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            now = time.monotonic()
            self._tokens = min(self._burst, self._tokens + (now - self._last) * self._rate)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens / self._rate if self._tokens < 0 else 0.0
        if delay > 0:
            time.sleep(delay)


@contextmanager
def experience_id_context(*args: str) -> Iterator[list[str]]:
    """Attach experience ids to requests made inside the ``with`` block."""
    ids = list(args)
    token = _context_experience_ids.set(ids)
    try:
        yield ids
    finally:
        _context_experience_ids.reset(token)


def experience_ids_from_context() -> list[str] | None:
    """Return the experience ids set by an enclosing :func:`experience_id_context`, if any."""
    ids = _context_experience_ids.get()
    return list(ids) if ids is not None else None


def check_status(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Raise MapsError unless the payload's status is OK or ZERO_RESULTS; return the payload."""
    status = payload.get("status", "")
    if status not in ("OK", "ZERO_RESULTS"):
        raise MapsError(f"maps: {status} - {payload.get('error_message', '')}")
    return payload


def _decode_signature(signature: str) -> bytes:
    try:
        return base64.b64decode(signature, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MapsError(f"maps: invalid signature: {exc}") from exc


def _encode_query(params: Mapping[str, Any]) -> str:
    items = []
    for key in sorted(params):
        value = params[key]
        if isinstance(value, str):
            items.append((key, value))
        else:
            items.extend((key, str(v)) for v in value)
    return urlencode(items)


def _sign_url(path: str, key: bytes, params: Mapping[str, Any]) -> str:
    query = _encode_query(params)
    digest = hmac.new(key, f"{path}?{query}".encode(), hashlib.sha1).digest()
    signature = base64.urlsafe_b64encode(digest).decode("ascii")
    return f"{query}&signature={signature}"


def _decode_json(text: str) -> Any:
    decoder = json.JSONDecoder()
    try:
        value, _ = decoder.raw_decode(text.lstrip())
    except json.JSONDecodeError as exc:
        raise MapsError(f"maps: invalid JSON response: {exc}") from exc
    return value


class Client:
    """Makes authenticated, rate-limited requests to the Maps web service APIs."""

    def __init__(
        self,
        *,
        api_key: str = "",
        client_id: str = "",
        signature: str = "",
        base_url: str = "",
        channel: str = "",
        requests_per_second: int = DEFAULT_REQUESTS_PER_SECOND,
        experience_id: Sequence[str] | None = None,
        metric_reporter: Reporter | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.client_id = client_id
        self.signature = _decode_signature(signature) if signature else b""
        self.base_url = base_url
        self.channel = channel
        self.requests_per_second = requests_per_second
        self.experience_id: list[str] | None = (
            list(experience_id) if experience_id is not None else None
        )
        self.metric_reporter: Reporter = metric_reporter or NoOpReporter()
        self.session = session or requests.Session()

        if not self.api_key and (not self.client_id or not self.signature):
            raise MapsError("maps: API Key or Maps for Work credentials missing")

        self._rate_limiter = (
            _RateLimiter(requests_per_second, requests_per_second)
            if requests_per_second > 0
            else None
        )

    def set_experience_id(self, *args: str) -> None:
        """Replace the client's experience ids."""
        self.experience_id = list(args) or None

    def clear_experience_id(self) -> None:
        """Remove the client's experience ids."""
        self.experience_id = None

    def experience_id_header(self) -> str | None:
        """Value of the experience id header: client ids, then context ids, or None."""
        ids = list(self.experience_id or [])
        ids.extend(experience_ids_from_context() or [])
        return ",".join(ids) if ids else None

    def auth_query(
        self,
        path: str,
        params: Mapping[str, Any],
        accepts_client_id: bool,
        accepts_signature: bool,
    ) -> str:
        """Build the encoded query string with credentials and, where needed, a signature."""
        query = dict(params)
        if self.channel:
            query["channel"] = self.channel
        if self.api_key:
            query["key"] = self.api_key
            if accepts_signature and self.signature:
                return _sign_url(path, self.signature, query)
            return _encode_query(query)
        if accepts_client_id:
            query["client"] = self.client_id
            return _sign_url(path, self.signature, query)
        raise MapsError("maps: API Key missing")

    def _url(self, config: ApiConfig) -> str:
        return (self.base_url or config.host) + config.path

    def _headers(self) -> dict[str, str]:
        headers = {}
        value = self.experience_id_header()
        if value is not None:
            headers[EXPERIENCE_ID_HEADER_NAME] = value
        return headers

    def _await_rate_limiter(self) -> None:
        if self._rate_limiter is not None:
            self._rate_limiter.wait()

    def _get(self, config: ApiConfig, params: Mapping[str, Any]) -> requests.Response:
        self._await_rate_limiter()
        query = self.auth_query(
            config.path, params, config.accepts_client_id, config.accepts_signature
        )
        return self.session.get(f"{self._url(config)}?{query}", headers=self._headers())

    def _post(self, config: ApiConfig, body: Any) -> requests.Response:
        self._await_rate_limiter()
        data = json.dumps(body).encode("utf-8")
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        query = self.auth_query(
            config.path, {}, config.accepts_client_id, config.accepts_signature
        )
        return self.session.post(f"{self._url(config)}?{query}", data=data, headers=headers)

    def _fetch_json(self, config: ApiConfig, send) -> Any:
        metrics = self.metric_reporter.new_request(config.path)
        try:
            response = send()
        except Exception as exc:
            metrics.end_request(exc, None, "")
            raise
        metro_area = response.headers.get(METRO_AREA_HEADER_NAME, "")
        try:
            payload = _decode_json(response.text)
        except MapsError as exc:
            metrics.end_request(exc, response, metro_area)
            raise
        finally:
            response.close()
        metrics.end_request(None, response, metro_area)
        return payload

    def get_json(self, config: ApiConfig, params: Mapping[str, Any]) -> Any:
        """Send a GET request and return the decoded JSON body."""
        return self._fetch_json(config, lambda: self._get(config, params))

    def post_json(self, config: ApiConfig, body: Any) -> Any:
        """Send ``body`` as JSON in a POST request and return the decoded JSON body."""
        return self._fetch_json(config, lambda: self._post(config, body))

    def get_binary(self, config: ApiConfig, params: Mapping[str, Any]) -> BinaryResponse:
        """Send a GET request and return the raw body with its status and content type."""
        metrics = self.metric_reporter.new_request(config.path)
        try:
            response = self._get(config, params)
        except Exception as exc:
            metrics.end_request(exc, None, "")
            raise
        metrics.end_request(None, response, response.headers.get(METRO_AREA_HEADER_NAME, ""))
        return BinaryResponse(
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            data=response.content,
        )