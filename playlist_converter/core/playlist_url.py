"""YouTube playlist URL parsing."""

import logging
from urllib.parse import parse_qs, urlparse

from playlist_converter.core.errors import InvalidPlaylistUrl

logger = logging.getLogger(__name__)

PLAYLIST_HOSTS = {"youtube.com", "music.youtube.com"}
SHORT_LINK_HOST = "youtu.be"
SHORT_LINK_PATH = "/playlist"


def _bare_host(hostname: str) -> str:
    host = hostname.lower()
    for prefix in ("www.", "m."):
        if host.startswith(prefix):
            return host[len(prefix):]
    return host


def extract_playlist_id(playlist_url: str) -> str:
    """
    Return the ``list`` parameter of a YouTube / YouTube Music playlist URL.

    youtu.be links are only honoured on the /playlist path.
    """
    if not playlist_url or not playlist_url.strip():
        raise InvalidPlaylistUrl("Playlist URL is empty")

    try:
        parsed = urlparse(playlist_url.strip())
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidPlaylistUrl(f"Could not parse playlist URL: {e}")

    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidPlaylistUrl(f"Not a playlist URL: {playlist_url}")

    host = _bare_host(hostname)
    if host == SHORT_LINK_HOST:
        if parsed.path.rstrip("/") != SHORT_LINK_PATH:
            raise InvalidPlaylistUrl(f"Unsupported youtu.be link: {playlist_url}")
    elif host not in PLAYLIST_HOSTS:
        raise InvalidPlaylistUrl(f"Unsupported host '{hostname}'")

    values = parse_qs(parsed.query).get("list", [])
    playlist_id = values[0].strip() if values else ""
    if not playlist_id:
        raise InvalidPlaylistUrl(f"URL has no 'list' parameter: {playlist_url}")

    logger.debug(f"Extracted playlist id {playlist_id}")
    return playlist_id
