"""Enigma2 receiver client: bouquets, EPG, stream URLs, launch options, desktop entries, audio tracks."""

__version__ = "0.1.0"

__all__ = ["api", "cli", "desktop", "model", "tracks", "urls"]