"""Audio track selection from the player's track list."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AudioTrack:
    """An audio track the player can switch to."""

    id: int
    label: str
    selected: bool = False


def audio_tracks_from_track_list(tracks: Any) -> list[AudioTrack]:
    """Extract the audio tracks from a player track list, skipping album art."""
    if not isinstance(tracks, list):
        return []
    return [track for track in map(audio_track_from_node, tracks) if track is not None]


def audio_track_from_node(node: Any) -> AudioTrack | None:
    """Build an AudioTrack from one track-list entry, or None if it is not audio."""
    if not isinstance(node, Mapping):
        return None
    if _string(node, "type") != "audio":
        return None
    if _flag(node, "albumart"):
        return None
    track_id = _int(node, "id")
    if track_id is None:
        return None
    return AudioTrack(
        id=track_id,
        label=audio_track_label(node, track_id),
        selected=bool(_flag(node, "selected")),
    )


def audio_track_label(node: Mapping[str, Any], track_id: int) -> str:
    """A readable label from a track's title, language, channels and codec."""
    title = _track_string(node, "title")
    lang = _track_string(node, "lang")
    if title is not None and lang is not None and _ascii_lower(title) != _ascii_lower(lang):
        label = f"{title} ({lang})"
    elif title is not None:
        label = title
    elif lang is not None:
        label = lang
    else:
        label = f"Audio {track_id}"

    details: list[str] = []
    channels = _track_string(node, "demux-channels")
    if channels is not None:
        details.append(channels.replace("(side)", ""))
    else:
        count = _int(node, "demux-channel-count")
        if count is None:
            count = _int(node, "audio-channels")
        if count is not None and count > 0:
            details.append(f"{count}ch")
    codec = _track_string(node, "codec")
    if codec is not None:
        details.append(codec)

    if details:
        label += " - " + " ".join(details)
    return label


def audio_tracks_in_menu_order(tracks: Iterable[AudioTrack]) -> list[AudioTrack]:
    """Unselected tracks in their original order, followed by the selected ones."""
    tracks = list(tracks)
    return [t for t in tracks if not t.selected] + [t for t in tracks if t.selected]


def audio_track_button_label(track: AudioTrack) -> str:
    """Menu text for a track, marking the one currently playing."""
    return f"{track.label} (current)" if track.selected else track.label


def _ascii_lower(value: str) -> str:
    return "".join(ch.lower() if ch.isascii() else ch for ch in value)


def _string(node: Mapping[str, Any], key: str) -> str | None:
    value = node.get(key)
    return value if isinstance(value, str) else None


def _track_string(node: Mapping[str, Any], key: str) -> str | None:
    value = _string(node, key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _int(node: Mapping[str, Any], key: str) -> int | None:
    value = node.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _flag(node: Mapping[str, Any], key: str) -> bool | None:
    value = node.get(key)
    return value if isinstance(value, bool) else None