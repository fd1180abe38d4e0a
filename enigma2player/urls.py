"""URL construction and playlist parsing for the Enigma2 web interface."""

from __future__ import annotations

_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789*-._"
)


def normalize_base_url(value: str) -> str:
    """Trim surrounding whitespace and any trailing slashes."""
    return value.strip().rstrip("/")


def has_supported_url_scheme(value: str) -> bool:
    """Return True if the value starts with http:// or https://."""
    trimmed = value.strip()
    return trimmed.startswith(("http://", "https://"))


def services_url(base_url: str) -> str:
    return f"{normalize_base_url(base_url)}/api/getallservices"


def epg_now_url(base_url: str, bouquet_ref: str) -> str:
    return f"{normalize_base_url(base_url)}/api/epgnow?bRef={encode_query_value(bouquet_ref)}"


def epg_service_url(base_url: str, service_ref: str) -> str:
    return f"{normalize_base_url(base_url)}/api/epgservice?sRef={encode_query_value(service_ref)}"


def stream_m3u_url(base_url: str, service_ref: str) -> str:
    return f"{normalize_base_url(base_url)}/web/stream.m3u?ref={encode_query_value(service_ref)}"


def encode_query_value(value: str) -> str:
    """Encode a value the way HTML forms do (spaces become '+')."""
    return "".join(
        chr(byte) if byte in _UNRESERVED else "+" if byte == 0x20 else f"%{byte:02X}"
        for byte in value.encode("utf-8", "surrogatepass")
    )


def extract_stream_url(m3u: str) -> str | None:
    """Return the first non-empty, non-comment line of an M3U playlist."""
    for line in m3u.split("\n"):
        line = line.strip()
        if line and not line.startswith("#"):
            return line
    return None