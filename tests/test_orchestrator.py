"""End-to-end conversion tests with in-memory catalogs"""

import pytest

from conftest import PLAYLIST_URL, FakeSpotify, FakeYouTube, hit, upstream_error
from playlist_converter.core.cancel import CancelToken
from playlist_converter.core.errors import (
    AccessForbidden,
    ConversionCancelled,
    EmptySourcePlaylist,
    InvalidPlaylistUrl,
    NoMatchesFound,
    PlaylistCreateFailed,
    PlaylistNotFoundOrPrivate,
)
from playlist_converter.core.models import SourceTrack
from playlist_converter.core.orchestrator import DEFAULT_PLAYLIST_NAME, ConversionOrchestrator


def make_orchestrator(youtube, spotify, max_workers=5):
    return ConversionOrchestrator(youtube, spotify, spotify, max_workers=max_workers)


def assert_invariants(report):
    assert report.matched_count == report.total_source_tracks - len(report.unmatched_titles)
    assert report.matched_count >= report.tracks_written


class TestConversionScenarios:
    """Full pipeline runs"""

    def test_all_tracks_match_on_title_only(self):
        youtube = FakeYouTube(pages=[[
            SourceTrack("First Song"), SourceTrack("Second Song"), SourceTrack("Third Song"),
        ]])
        spotify = FakeSpotify(results={
            "first song": hit("spotify:track:1"),
            "second song": hit("spotify:track:2"),
            "third song": hit("spotify:track:3"),
        })

        report = make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1")

        assert report.total_source_tracks == 3
        assert report.matched_count == 3
        assert report.tracks_written == 3
        assert report.unmatched_titles == []
        assert report.write_errors == []
        assert report.destination_playlist_id == "sp123"
        assert report.destination_playlist_name == DEFAULT_PLAYLIST_NAME
        assert spotify.added == [("sp123", ["spotify:track:1", "spotify:track:2", "spotify:track:3"])]
        assert_invariants(report)

    def test_empty_normalized_title_is_unmatched_without_search(self):
        youtube = FakeYouTube(pages=[[
            SourceTrack("(Official Video)", "Some Channel"),
            SourceTrack("Real Song"),
        ]])
        spotify = FakeSpotify(results={"real song": hit("spotify:track:1")})

        report = make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1")

        assert spotify.queries == ["real song"]
        assert report.unmatched_titles == ["(Official Video)"]
        assert report.matched_count == 1
        assert_invariants(report)

    def test_failed_write_chunk_still_reports(self):
        youtube = FakeYouTube(pages=[[SourceTrack("Song A"), SourceTrack("Song B")]])
        spotify = FakeSpotify(
            results={"song a": hit("spotify:track:a"), "song b": hit("spotify:track:b")},
            add_errors={1: upstream_error("bad gateway", 502)},
        )

        report = make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1")

        assert report.matched_count == 2
        assert report.tracks_written == 0
        assert len(report.write_errors) == 1
        assert "bad gateway" in report.write_errors[0]
        assert_invariants(report)

    def test_empty_source_stops_before_search(self):
        youtube = FakeYouTube(pages=[[SourceTrack("Deleted video")]])
        spotify = FakeSpotify()

        with pytest.raises(EmptySourcePlaylist) as exc_info:
            make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1")

        assert spotify.queries == []
        assert spotify.created == []
        assert spotify.added == []
        assert exc_info.value.report.total_source_tracks == 0


class TestConversionExits:
    """Each early exit of the pipeline"""

    def test_invalid_url_makes_no_calls(self):
        youtube = FakeYouTube()

        with pytest.raises(InvalidPlaylistUrl) as exc_info:
            make_orchestrator(youtube, FakeSpotify()).convert("https://example.com/x", "user1")

        assert youtube.calls == []
        assert exc_info.value.report.total_source_tracks is None

    def test_fetch_error_propagates(self):
        youtube = FakeYouTube(error=PlaylistNotFoundOrPrivate("gone", status=404))

        with pytest.raises(PlaylistNotFoundOrPrivate):
            make_orchestrator(youtube, FakeSpotify()).convert(PLAYLIST_URL, "user1")

    def test_no_matches_carries_unmatched_titles(self, tracks):
        youtube = FakeYouTube(pages=[tracks])
        spotify = FakeSpotify()

        with pytest.raises(NoMatchesFound) as exc_info:
            make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1")

        report = exc_info.value.report
        assert report.total_source_tracks == 3
        assert report.matched_count == 0
        assert report.unmatched_titles == [t.title for t in tracks]
        assert spotify.created == []

    def test_create_failure_keeps_match_totals(self, tracks):
        youtube = FakeYouTube(pages=[tracks])
        spotify = FakeSpotify(
            results={"untitled jam": hit("spotify:track:jam")},
            create_error=AccessForbidden("Insufficient client scope", status=403),
        )

        with pytest.raises(PlaylistCreateFailed) as exc_info:
            make_orchestrator(youtube, spotify).convert(PLAYLIST_URL, "user1", "Mix")

        report = exc_info.value.report
        assert report.total_source_tracks == 3
        assert report.matched_count == 1
        assert report.tracks_written is None
        assert spotify.added == []

    def test_cancelled(self, tracks):
        youtube = FakeYouTube(pages=[tracks])
        cancel = CancelToken()
        cancel.cancel()

        with pytest.raises(ConversionCancelled):
            make_orchestrator(youtube, FakeSpotify()).convert(PLAYLIST_URL, "user1", cancel=cancel)
        assert youtube.calls == []


class TestConversionInvariants:
    """Counting properties over larger playlists"""

    def test_counts_add_up_across_pages(self):
        pages = [
            [SourceTrack(f"Track {p}-{i}") for i in range(50)]
            for p in range(3)
        ]
        pages[1][10] = SourceTrack("Private video")
        results = {
            f"track {p}-{i}": hit(f"spotify:track:{p}-{i}")
            for p in range(3) for i in range(50) if i % 7
        }
        youtube = FakeYouTube(pages=pages)
        spotify = FakeSpotify(results=results)

        report = make_orchestrator(youtube, spotify, max_workers=8).convert(PLAYLIST_URL, "user1")

        assert report.total_source_tracks == 149
        assert report.matched_count + len(report.unmatched_titles) == 149
        assert report.tracks_written == report.matched_count
        written = [u for _, chunk in spotify.added for u in chunk]
        assert written == [
            f"spotify:track:{p}-{i}"
            for p in range(3) for i in range(50)
            if i % 7 and not (p == 1 and i == 10)
        ]
        assert all(len(chunk) <= 100 for _, chunk in spotify.added)
        assert_invariants(report)
