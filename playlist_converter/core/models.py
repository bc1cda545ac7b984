"""Data models for conversion operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class StrategyLabel(str, Enum):
    """Search strategies in priority order."""
    PRECISE = "Precise"
    COMBINED = "Combined"
    TITLE_ONLY = "TitleOnly"


@dataclass(frozen=True)
class SourceTrack:
    """A track from the YouTube playlist."""
    title: str
    artist_hint: str | None = None


@dataclass
class PlaylistPage:
    """One page of YouTube playlist items."""
    items: List[SourceTrack]
    next_page_token: str | None = None


@dataclass(frozen=True)
class SearchAttempt:
    query: str
    strategy: StrategyLabel


@dataclass
class SearchHit:
    """Top Spotify search result."""
    uri: str
    name: str
    artists: List[str] = field(default_factory=list)


@dataclass
class CreatedPlaylist:
    """A playlist created on Spotify."""
    id: str
    uri: str
    name: str
    url: str


@dataclass
class MatchOutcome:
    source_track: SourceTrack
    destination_uri: str | None = None
    strategy: StrategyLabel | None = None

    @property
    def matched(self) -> bool:
        return self.destination_uri is not None


@dataclass
class BatchWriteResult:
    """Result of writing track URIs in chunks."""
    attempted_count: int = 0
    succeeded_count: int = 0
    failure_messages: List[str] = field(default_factory=list)


@dataclass
class ConversionReport:
    """
    Result of a conversion.

    Counts stay None for stages that never ran, so a report attached to an
    early termination only carries what was actually computed.
    """
    total_source_tracks: int | None = None
    matched_count: int | None = None
    unmatched_titles: List[str] = field(default_factory=list)
    destination_playlist_id: str | None = None
    destination_playlist_url: str | None = None
    destination_playlist_name: str | None = None
    tracks_written: int | None = None
    write_errors: List[str] = field(default_factory=list)
    duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            "destination_playlist_id": self.destination_playlist_id,
            "destination_playlist_url": self.destination_playlist_url,
            "destination_playlist_name": self.destination_playlist_name,
            "total_source_tracks": self.total_source_tracks,
            "matched_count": self.matched_count,
            "tracks_written": self.tracks_written,
            "unmatched_titles": list(self.unmatched_titles),
            "write_errors": list(self.write_errors),
            "duration_seconds": round(self.duration, 2),
        }
