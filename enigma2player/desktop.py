"""Desktop entry generation for the player's user-level desktop identity."""

from __future__ import annotations

import os
import sys
from pathlib import Path

APP_ID = "local.enigma2-player"
APP_NAME = "Enigma2 Player"
APP_COMMENT = "Watch Dreambox and Enigma2 TV streams with mpv"
DEFAULT_EXECUTABLE = "enigma2-player"

_DESKTOP_SPECIAL = frozenset('"\\`$')


def user_data_dir() -> Path:
    """The XDG data directory, falling back to ~/.local/share."""
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg is not None:
        return Path(xdg)
    home = os.environ.get("HOME")
    if home is not None:
        return Path(home) / ".local/share"
    return Path(".local/share")


def executable_path() -> Path:
    """Absolute path of the running program, or its bare name if unknown."""
    argv0 = sys.argv[0] if sys.argv else ""
    if argv0:
        return Path(argv0).absolute()
    return Path(DEFAULT_EXECUTABLE)


def desktop_entry(exec_path: str | os.PathLike[str], icon_path: str | os.PathLike[str]) -> str:
    """Render the contents of the application's .desktop file."""
    return (
        "[Desktop Entry]\n"
        "Type=Application\n"
        f"Name={APP_NAME}\n"
        f"Comment={APP_COMMENT}\n"
        f"Exec={quote_desktop_path(exec_path)}\n"
        f"Icon={os.fspath(icon_path)}\n"
        "Terminal=false\n"
        "Categories=AudioVideo;Video;Player;TV;\n"
        "StartupNotify=true\n"
        f"StartupWMClass={APP_ID}\n"
    )


def quote_desktop_path(path: str | os.PathLike[str]) -> str:
    """Quote a path for the Exec key, escaping characters the spec reserves."""
    raw = os.fspath(path)
    escaped = "".join("\\" + ch if ch in _DESKTOP_SPECIAL else ch for ch in raw)
    return f'"{escaped}"'