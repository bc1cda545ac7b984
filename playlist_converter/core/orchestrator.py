"""
Conversion Orchestrator

Converts a YouTube playlist into a new Spotify playlist.

Stages (each one a possible exit point):
----------------------------------------
1. Extract  - parse the playlist id from the URL (no network)
2. Fetch    - page through the YouTube playlist; zero usable tracks
              ends the conversion with EmptySourcePlaylist
3. Match    - search Spotify for every track on a bounded pool; zero
              matches ends the conversion with NoMatchesFound
4. Write    - create the Spotify playlist (fatal on failure), then add
              matched tracks in chunks of 100 (chunk failures are reported)
5. Report   - totals, unmatched titles and write errors

Any ConversionError leaving convert() carries the partial report built so
far in its ``report`` attribute.

API costs:
- playlistItems.list: 1 unit per page of 50
- Spotify search: up to 3 calls per track
- Spotify playlist add: 1 call per 100 tracks
"""

import logging
import time

from playlist_converter.core.cancel import CancelToken, check_cancelled
from playlist_converter.core.errors import ConversionError, EmptySourcePlaylist, NoMatchesFound
from playlist_converter.core.fetcher import SourceCatalogProtocol, fetch_source_tracks
from playlist_converter.core.matcher import (
    DEFAULT_MAX_WORKERS,
    CatalogMatcher,
    SearchCatalogProtocol,
)
from playlist_converter.core.models import BatchWriteResult, ConversionReport, MatchOutcome
from playlist_converter.core.playlist_url import extract_playlist_id
from playlist_converter.core.writer import DestinationCatalogProtocol, PlaylistWriter

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_NAME = "Converted YouTube Playlist"


def _partition(outcomes: list[MatchOutcome]) -> tuple[list[str], list[str]]:
    """Split outcomes into matched URIs and unmatched original titles, in order."""
    uris = []
    unmatched = []
    for outcome in outcomes:
        if outcome.matched:
            uris.append(outcome.destination_uri)
        else:
            unmatched.append(outcome.source_track.title)
    return uris, unmatched


class ConversionOrchestrator:
    """Runs one conversion request through the staged pipeline."""

    def __init__(self, source: SourceCatalogProtocol, search: SearchCatalogProtocol,
                 destination: DestinationCatalogProtocol,
                 max_workers: int = DEFAULT_MAX_WORKERS, public: bool = True):
        self._source = source
        self._matcher = CatalogMatcher(search)
        self._writer = PlaylistWriter(destination)
        self._max_workers = max_workers
        self._public = public

    def convert(self, playlist_url: str, owner_id: str,
                playlist_name: str = DEFAULT_PLAYLIST_NAME,
                cancel: CancelToken | None = None) -> ConversionReport:
        """Perform a full conversion. Returns the report or raises ConversionError."""
        start = time.time()
        report = ConversionReport()

        logger.info("=" * 50)
        logger.info(f"Starting conversion of {playlist_url}")

        try:
            self._run(playlist_url, owner_id, playlist_name, cancel, report)
        except ConversionError as e:
            report.duration = time.time() - start
            e.report = report
            logger.warning(f"Conversion ended: {e.kind.value}: {e.message}")
            raise

        report.duration = time.time() - start
        logger.info(f"Completed in {report.duration:.1f}s: "
                    f"{report.tracks_written}/{report.total_source_tracks} tracks written")
        logger.info("=" * 50)
        return report

    def _run(self, playlist_url: str, owner_id: str, playlist_name: str,
             cancel: CancelToken | None, report: ConversionReport) -> None:
        # 1. Extract
        playlist_id = extract_playlist_id(playlist_url)

        # 2. Fetch
        logger.info(f"Fetching YouTube playlist: {playlist_id}")
        tracks = fetch_source_tracks(self._source, playlist_id, cancel)
        report.total_source_tracks = len(tracks)
        if not tracks:
            raise EmptySourcePlaylist(f"YouTube playlist {playlist_id} has no available tracks")

        # 3. Match
        logger.info(f"Searching Spotify for {len(tracks)} tracks "
                    f"({self._max_workers} concurrent)...")
        outcomes = self._matcher.match_all(tracks, self._max_workers, cancel)
        uris, unmatched = _partition(outcomes)
        report.matched_count = len(uris)
        report.unmatched_titles = unmatched
        logger.info(f"Found {len(uris)} of {len(tracks)} tracks on Spotify")
        if not uris:
            raise NoMatchesFound("Could not find any matching tracks on Spotify for this playlist")

        # 4. Create + write
        check_cancelled(cancel)
        playlist = self._writer.create_playlist(owner_id, playlist_name, self._public)
        report.destination_playlist_id = playlist.id
        report.destination_playlist_url = playlist.url
        report.destination_playlist_name = playlist.name

        result = BatchWriteResult()
        try:
            self._writer.add_tracks(playlist.id, uris, cancel, result)
        finally:
            # 5. Report
            report.tracks_written = result.succeeded_count
            report.write_errors = list(result.failure_messages)
