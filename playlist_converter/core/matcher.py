"""
Catalog Matcher

Finds a Spotify track for each YouTube track by trying search strategies
in a fixed priority order:

1. Precise    - track:"<title>" artist:"<artist>"
2. Combined   - "<title>" "<artist>"
3. TitleOnly  - <title>

The first strategy returning a result wins. Precise and Combined need an
artist hint (the uploader channel). A rate-limit error stops the remaining
strategies for that track only.

Tracks are matched concurrently on a small thread pool, since every search
call counts against the same Spotify rate limit.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol

from playlist_converter.core.cancel import CancelToken, check_cancelled
from playlist_converter.core.errors import ConversionError, RateLimited
from playlist_converter.core.models import (
    MatchOutcome,
    SearchAttempt,
    SearchHit,
    SourceTrack,
    StrategyLabel,
)
from playlist_converter.core.normalize import normalize_artist_hint, normalize_title

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 5


class SearchCatalogProtocol(Protocol):
    def search_track(self, query: str) -> SearchHit | None: ...


def build_search_attempts(track: SourceTrack) -> list[SearchAttempt]:
    """Build the ordered query list. Empty when the title cleans to nothing."""
    title = normalize_title(track.title)
    if not title:
        return []

    artist = normalize_artist_hint(track.artist_hint)
    attempts = []
    if artist:
        attempts.append(SearchAttempt(f'track:"{title}" artist:"{artist}"', StrategyLabel.PRECISE))
        attempts.append(SearchAttempt(f'"{title}" "{artist}"', StrategyLabel.COMBINED))
    attempts.append(SearchAttempt(title, StrategyLabel.TITLE_ONLY))
    return attempts


class CatalogMatcher:
    """Matches YouTube tracks against the Spotify catalog."""

    def __init__(self, client: SearchCatalogProtocol):
        self._client = client

    def match(self, track: SourceTrack) -> MatchOutcome:
        attempts = build_search_attempts(track)
        if not attempts:
            logger.warning(f"Title '{track.title}' is empty after cleanup, skipping search")
            return MatchOutcome(track)

        for attempt in attempts:
            logger.debug(f"Searching Spotify [{attempt.strategy.value}] for {attempt.query!r}")
            try:
                hit = self._client.search_track(attempt.query)
            except RateLimited:
                logger.warning(f"Rate limited searching '{track.title}', giving up on this track")
                return MatchOutcome(track)
            except ConversionError as e:
                logger.error(f"Search failed [{attempt.strategy.value}] for '{track.title}': {e}")
                continue

            if hit:
                logger.debug(f"Found: {hit.name} by {', '.join(hit.artists)} ({hit.uri})")
                return MatchOutcome(track, hit.uri, attempt.strategy)

        logger.warning(f"No Spotify match for '{track.title}'")
        return MatchOutcome(track)

    def _match_unless_cancelled(self, track: SourceTrack,
                                cancel: CancelToken | None) -> MatchOutcome:
        check_cancelled(cancel)
        return self.match(track)

    def match_all(self, tracks: list[SourceTrack], max_workers: int = DEFAULT_MAX_WORKERS,
                  cancel: CancelToken | None = None) -> list[MatchOutcome]:
        """Match every track on a bounded pool. Results follow input order."""
        if not tracks:
            return []

        with ThreadPoolExecutor(max_workers=max(1, max_workers),
                                thread_name_prefix="match") as executor:
            futures: list[Future] = [
                executor.submit(self._match_unless_cancelled, track, cancel)
                for track in tracks
            ]
            try:
                return [future.result() for future in futures]
            except BaseException:
                # Covers ConversionCancelled and KeyboardInterrupt alike
                for future in futures:
                    future.cancel()
                raise
