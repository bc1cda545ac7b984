"""Sequential YouTube playlist fetch."""

import logging
from typing import Protocol

from playlist_converter.core.cancel import CancelToken, check_cancelled
from playlist_converter.core.models import PlaylistPage, SourceTrack

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
UNAVAILABLE_TITLES = {"deleted video", "private video"}


class SourceCatalogProtocol(Protocol):
    def list_playlist_items(self, playlist_id: str, page_token: str | None = None,
                            max_results: int = PAGE_SIZE) -> PlaylistPage: ...


def _is_available(track: SourceTrack) -> bool:
    return bool(track.title) and track.title.strip().lower() not in UNAVAILABLE_TITLES


def fetch_source_tracks(client: SourceCatalogProtocol, playlist_id: str,
                        cancel: CancelToken | None = None,
                        page_size: int = PAGE_SIZE) -> list[SourceTrack]:
    """
    Fetch every usable track of a playlist.

    Pages are requested one after another since each page token comes from
    the previous response. Deleted/private placeholders are dropped.
    Classified client errors propagate unchanged.
    """
    tracks: list[SourceTrack] = []
    page_token = None
    pages = 0

    while True:
        check_cancelled(cancel)
        page = client.list_playlist_items(playlist_id, page_token, page_size)
        pages += 1
        tracks.extend(t for t in page.items if _is_available(t))

        page_token = page.next_page_token
        if not page_token:
            break

    logger.info(f"Retrieved {len(tracks)} tracks from YouTube playlist ({pages} pages)")
    return tracks
