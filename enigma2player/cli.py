"""Command-line option parsing for the player."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

_BOX_URL_PREFIX = "--box-url="


@dataclass
class CliOptions:
    """Launch options; unknown arguments are ignored."""

    show_picker: bool = False
    start_first: bool = False
    box_url: str | None = None


def parse_args(args: Iterable[str]) -> CliOptions:
    """Parse launch flags, ignoring anything unrecognised."""
    options = CliOptions()
    items = iter(args)
    for arg in items:
        if arg == "--show-picker":
            options.show_picker = True
        elif arg == "--start-first":
            options.start_first = True
        elif arg == "--box-url":
            value = next(items, None)
            if value is not None:
                options.box_url = value
        elif arg.startswith(_BOX_URL_PREFIX):
            options.box_url = arg[len(_BOX_URL_PREFIX):]
    return options