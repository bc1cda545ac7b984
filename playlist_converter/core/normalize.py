"""
Title cleanup for Spotify search queries.

YouTube titles carry noise ("(Official Video)", "| 4K", "feat. X") that
ruins a catalog search. Each step below only removes text, so running the
whole pipeline twice gives the same result as running it once.
"""

import re

NOISE_KEYWORDS = (
    "official", "music", "video", "audio", "lyrics", "lyric", "visualizer",
    "hq", "hd", "4k", "1080p", "720p", "live", "session", "explicit",
    "remastered", "album", "ep", "single", "radio edit", "remix",
)

_NOISE_SEGMENT = re.compile(
    r"[(\[][^)\]]*?\b(?:" + "|".join(re.escape(k) for k in NOISE_KEYWORDS) + r")\b[^)\]]*[)\]]",
    re.IGNORECASE,
)
_SEPARATOR = re.compile(r"\s+[-–|/]+\s+")
_FEATURING = re.compile(r"\s*[(\[]?\b(?:feat|ft|featuring)\b\.?\s+\S.*$", re.IGNORECASE)
_TRAILING_YEAR = re.compile(r"(?:\s*\(\d{4}\))+\s*$")
_WHITESPACE = re.compile(r"\s+")

_ARTIST_SUFFIX = re.compile(r"(?:\s+-\s+topic|vevo)\s*$", re.IGNORECASE)


def normalize_title(title: str | None) -> str:
    """Clean a raw YouTube title. Empty result means unmatchable."""
    if not title:
        return ""

    query = title.lower()
    query = _NOISE_SEGMENT.sub(" ", query)
    query = _SEPARATOR.split(query, maxsplit=1)[0]
    query = _FEATURING.sub("", query)
    query = _TRAILING_YEAR.sub("", query)
    return _WHITESPACE.sub(" ", query).strip()


def normalize_artist_hint(channel: str | None) -> str | None:
    """Strip auto-generated channel suffixes (" - Topic", "VEVO")."""
    if not channel:
        return None
    cleaned = _ARTIST_SUFFIX.sub("", channel).strip()
    return cleaned or None
