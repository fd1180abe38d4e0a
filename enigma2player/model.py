"""Bouquets, channels and EPG events as served by an Enigma2 receiver."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

_NAMED_ENTITIES = {
    "amp": "&",
    "apos": "'",
    "auml": "\u00e4",
    "Auml": "\u00c4",
    "gt": ">",
    "lt": "<",
    "nbsp": " ",
    "ouml": "\u00f6",
    "Ouml": "\u00d6",
    "quot": '"',
    "szlig": "\u00df",
    "uuml": "\u00fc",
    "Uuml": "\u00dc",
}
_HEX_DIGITS = re.compile(r"\+?[0-9A-Fa-f]+")
_DEC_DIGITS = re.compile(r"\+?[0-9]+")
_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_MAX_ENTITY_BYTES = 12
_DEFAULT_TZ_OFFSET_SECONDS = 2 * 3600

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class EpgEvent:
    """A single programme entry from the electronic programme guide."""

    id: int | None = None
    begin_timestamp: int = 0
    duration_sec: int = 0
    title: str = ""
    shortdesc: str = ""
    longdesc: str = ""
    genre: str = ""
    sref: str = ""
    sname: str = ""
    now_timestamp: int = 0
    remaining: int = 0

    @classmethod
    def from_api(cls, data: Any) -> EpgEvent:
        data = _mapping(data, "EPG event")
        return cls(
            id=_optional_integer(data, "id", 0, _U64_MAX),
            begin_timestamp=_integer(data, "begin_timestamp"),
            duration_sec=_integer(data, "duration_sec"),
            title=_text(data, "title"),
            shortdesc=_text(data, "shortdesc"),
            longdesc=_text(data, "longdesc"),
            genre=_text(data, "genre"),
            sref=_string(data, "sref"),
            sname=_text(data, "sname"),
            now_timestamp=_integer(data, "now_timestamp"),
            remaining=_integer(data, "remaining"),
        )

    def progress(self) -> float:
        """Fraction of the event that has elapsed, clamped to [0, 1]."""
        if self.duration_sec <= 0:
            return 0.0
        elapsed = min(max(self.now_timestamp - self.begin_timestamp, 0), self.duration_sec)
        return elapsed / self.duration_sec

    def time_range(self) -> str:
        return f"{format_time(self.begin_timestamp)} - {format_time(self.end_timestamp())}"

    def end_timestamp(self) -> int:
        return self.begin_timestamp + max(self.duration_sec, 0)

    def description(self) -> str:
        """Short and long description combined, without repeating the title."""
        title = normalize_epg_text(self.title)
        short = _without_title_duplicate(normalize_epg_text(self.shortdesc), title)
        long = _without_title_duplicate(normalize_epg_text(self.longdesc), title)
        if not short:
            return long
        if not long or short == long:
            return short
        return f"{short}\n\n{long}"


@dataclass(frozen=True)
class Channel:
    """A channel inside a bouquet, optionally with its current EPG event."""

    position: int
    name: str
    service_ref: str
    program: int | None = None
    epg: EpgEvent | None = None

    @classmethod
    def from_api(cls, data: Any) -> Channel:
        data = _mapping(data, "channel")
        return cls(
            position=_integer(data, "pos", 0, _U32_MAX),
            name=_text(data, "servicename"),
            service_ref=_string(data, "servicereference"),
            program=_optional_integer(data, "program", 0, _U32_MAX),
        )


@dataclass(frozen=True)
class Bouquet:
    """A named list of channels."""

    name: str
    service_ref: str
    channels: tuple[Channel, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "channels", tuple(self.channels))

    @classmethod
    def from_api(cls, data: Any) -> Bouquet:
        data = _mapping(data, "bouquet")
        return cls(
            name=_text(data, "servicename"),
            service_ref=_string(data, "servicereference"),
            channels=tuple(Channel.from_api(item) for item in _list(data, "subservices")),
        )


def parse_services_response(data: Any) -> tuple[bool, list[Bouquet]]:
    """Parse a decoded getallservices response into (result flag, bouquets)."""
    data = _mapping(data, "services response")
    result = data.get("result", False)
    if not isinstance(result, bool):
        raise ValueError(f"invalid boolean for 'result': {result!r}")
    return result, [Bouquet.from_api(item) for item in _list(data, "services")]


def parse_epg_response(data: Any) -> list[EpgEvent]:
    """Parse a decoded epgnow/epgservice response into its events."""
    data = _mapping(data, "EPG response")
    return [EpgEvent.from_api(item) for item in _list(data, "events")]


def normalize_epg_text(value: str) -> str:
    """Expand escaped newlines, decode entities and trim each line."""
    # Receivers often send literal "\n" escapes alongside HTML entities.
    value = value.replace("\\r\\n", "\n").replace("\\n", "\n").replace("\\r", "\n")
    return "\n".join(line.rstrip() for line in _lines(decode_html_entities(value))).strip()


def decode_html_entities(value: str) -> str:
    """Decode the small set of HTML entities receivers emit; keep the rest verbatim."""
    output: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "&":
            output.append(ch)
            continue

        entity: list[str] = []
        size = 0
        terminated = False
        for nxt in chars:
            if nxt == ";":
                terminated = True
                break
            entity.append(nxt)
            size += len(nxt.encode("utf-8", "surrogatepass"))
            if size > _MAX_ENTITY_BYTES:
                break

        name = "".join(entity)
        if terminated:
            decoded = _decode_entity(name)
            if decoded is not None:
                output.append(decoded)
                continue

        output.append("&" + name + (";" if terminated else ""))
    return "".join(output)


def attach_epg(bouquet: Bouquet, events: Iterable[EpgEvent]) -> Bouquet:
    """Return a copy of the bouquet with each channel's EPG event matched by service reference."""
    by_ref = {event.sref: event for event in events if event.sref}
    return replace(
        bouquet,
        channels=tuple(
            replace(channel, epg=by_ref.get(channel.service_ref)) for channel in bouquet.channels
        ),
    )


def format_time(timestamp: int) -> str:
    """Format a Unix timestamp as HH:MM using the configured local offset."""
    if timestamp <= 0:
        return "--:--"
    local = timestamp + _local_offset_seconds()
    return f"{local // 3600 % 24:02d}:{local // 60 % 60:02d}"


def _local_offset_seconds() -> int:
    raw = os.environ.get("TZ_OFFSET_SECONDS")
    offset = _DEFAULT_TZ_OFFSET_SECONDS
    if raw is not None and _SIGNED_INT.fullmatch(raw):
        parsed = int(raw)
        if _I64_MIN <= parsed <= _I64_MAX:
            offset = parsed
    return max(offset, 0)


def _decode_entity(entity: str) -> str | None:
    named = _NAMED_ENTITIES.get(entity)
    if named is not None:
        return named
    if entity.startswith(("#x", "#X")):
        digits, base, pattern = entity[2:], 16, _HEX_DIGITS
    elif entity.startswith("#"):
        digits, base, pattern = entity[1:], 10, _DEC_DIGITS
    else:
        return None
    if not pattern.fullmatch(digits):
        return None
    code = int(digits, base)
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        return None
    return chr(code)


def _lines(value: str) -> list[str]:
    if not value:
        return []
    parts = value.split("\n")
    if value.endswith("\n"):
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _without_title_duplicate(value: str, title: str) -> str:
    if not title:
        return value
    lines = _lines(value)
    if not lines or lines[0].strip() != title:
        return value
    return "\n".join(lines[1:]).strip()


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _check_int(key: str, value: Any, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValueError(f"invalid integer for {key!r}: {value!r}")
    return value


def _integer(data: Mapping[str, Any], key: str, low: int = _I64_MIN, high: int = _I64_MAX) -> int:
    if key not in data:
        return 0
    return _check_int(key, data[key], low, high)


def _optional_integer(data: Mapping[str, Any], key: str, low: int, high: int) -> int | None:
    value = data.get(key)
    return None if value is None else _check_int(key, value, low, high)


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"invalid string for {key!r}: {value!r}")
    return value


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"invalid string for {key!r}: {value!r}")
    return normalize_epg_text(value)


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"invalid list for {key!r}: {value!r}")
    return value