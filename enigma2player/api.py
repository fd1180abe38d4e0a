"""HTTP client for the Enigma2 receiver's JSON and playlist endpoints."""

from __future__ import annotations

import copy
import http.client
import json
import threading
import time
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .model import (
    Bouquet,
    EpgEvent,
    attach_epg,
    parse_epg_response,
    parse_services_response,
)
from .urls import (
    epg_now_url,
    epg_service_url,
    extract_stream_url,
    normalize_base_url,
    services_url,
    stream_m3u_url,
)

# Short caches keep overlay navigation responsive without hiding receiver changes for long.
SERVICES_CACHE_TTL = 60.0
EPG_CACHE_TTL = 90.0
HTTP_TIMEOUT = 5.0

_MISSING_URL_MESSAGE = "Dreambox URL is not configured in settings"


class Enigma2Error(Exception):
    """Base class for receiver communication errors."""


class MissingSettingsError(Enigma2Error):
    """The receiver URL has not been configured."""


class HttpError(Enigma2Error):
    """A request to the receiver failed."""


class JsonError(Enigma2Error):
    """The receiver sent a body that could not be decoded."""


class InvalidResponseError(Enigma2Error):
    """The receiver sent a well-formed but unusable response."""


def http_get(url: str) -> str:
    """Fetch a URL and return its body as text."""
    try:
        with urllib.request.urlopen(url, timeout=HTTP_TIMEOUT) as response:
            return response.read().decode("utf-8")
    except (OSError, ValueError, http.client.HTTPException) as err:
        raise HttpError(f"{url}: {err}") from err


@dataclass
class _Cached:
    value: tuple[Any, ...]
    fetched_at: float


@dataclass
class _ClientState:
    base_url: str
    lock: threading.Lock = field(default_factory=threading.Lock)
    services: dict[str, _Cached] = field(default_factory=dict)
    epg: dict[str, _Cached] = field(default_factory=dict)
    service_epg: dict[str, _Cached] = field(default_factory=dict)

    def clear(self) -> None:
        self.services.clear()
        self.epg.clear()
        self.service_epg.clear()


def _require_base_url(base_url: str) -> str:
    if not base_url.strip():
        raise MissingSettingsError(_MISSING_URL_MESSAGE)
    return base_url


def _decode(body: str, parser: Callable[[Any], Any]) -> Any:
    try:
        return parser(json.loads(body))
    except (ValueError, TypeError) as err:
        raise JsonError(str(err)) from err


def _parse_bouquets(body: str) -> list[Bouquet]:
    result, bouquets = _decode(body, parse_services_response)
    if not result:
        raise InvalidResponseError("Dreambox did not accept getallservices")
    return [bouquet for bouquet in bouquets if bouquet.name.strip() and bouquet.channels]


def _parse_events(body: str) -> list[EpgEvent]:
    return _decode(body, parse_epg_response)


class Enigma2Client:
    """Receiver client with short-lived caches shared between clones."""

    def __init__(self, base_url: str = "", http_get: Callable[[str], str] = http_get) -> None:
        self._state = _ClientState(normalize_base_url(base_url))
        self._http_get = http_get

    @property
    def base_url(self) -> str:
        with self._state.lock:
            return self._state.base_url

    def clone(self) -> Enigma2Client:
        """Return a client that shares this one's URL and caches."""
        return copy.copy(self)

    def set_base_url(self, base_url: str) -> None:
        """Change the receiver URL, dropping caches if it actually changed."""
        normalized = normalize_base_url(base_url)
        with self._state.lock:
            if self._state.base_url != normalized:
                self._state.base_url = normalized
                self._state.clear()

    def clear_cache(self) -> None:
        with self._state.lock:
            self._state.clear()

    def bouquets(self) -> list[Bouquet]:
        """Bouquets that have a name and at least one channel."""
        return self._fetch_cached(
            self._state.services, "", SERVICES_CACHE_TTL, services_url, _parse_bouquets
        )

    def bouquet_with_epg(self, bouquet_index: int) -> Bouquet:
        """The bouquet at an index with current EPG events attached to its channels."""
        bouquets = self.bouquets()
        if not 0 <= bouquet_index < len(bouquets):
            raise InvalidResponseError("Bouquet not found")
        bouquet = bouquets[bouquet_index]
        return attach_epg(bouquet, self.epg_now(bouquet.service_ref))

    def epg_now(self, bouquet_ref: str) -> list[EpgEvent]:
        """Current events for every channel of a bouquet."""
        return self._fetch_cached(
            self._state.epg,
            bouquet_ref,
            EPG_CACHE_TTL,
            lambda base_url: epg_now_url(base_url, bouquet_ref),
            _parse_events,
        )

    def service_epg(self, service_ref: str) -> list[EpgEvent]:
        """Upcoming events for a single service."""
        return self._fetch_cached(
            self._state.service_epg,
            service_ref,
            EPG_CACHE_TTL,
            lambda base_url: epg_service_url(base_url, service_ref),
            _parse_events,
        )

    def resolve_stream_url(self, service_ref: str) -> str:
        """Ask the receiver for a service's playlist and return its stream URL."""
        with self._state.lock:
            base_url = _require_base_url(self._state.base_url)
        body = self._http_get(stream_m3u_url(base_url, service_ref))
        stream = extract_stream_url(body)
        if stream is None:
            raise InvalidResponseError("Dreambox stream playlist did not contain a URL")
        return stream

    def _fetch_cached(
        self,
        cache: dict[str, _Cached],
        key: str,
        ttl: float,
        url_for: Callable[[str], str],
        parse: Callable[[str], list[Any]],
    ) -> list[Any]:
        state = self._state
        with state.lock:
            entry = cache.get(key)
            if entry is not None and time.monotonic() - entry.fetched_at < ttl:
                return list(entry.value)
            base_url = _require_base_url(state.base_url)

        value = tuple(parse(self._http_get(url_for(base_url))))
        with state.lock:
            # A URL change during the request makes this response stale.
            if state.base_url == base_url:
                cache[key] = _Cached(value, time.monotonic())
        return list(value)