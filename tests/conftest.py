"""Test configuration and fixtures"""

import threading

import pytest

from playlist_converter.core.errors import ConversionError
from playlist_converter.core.models import CreatedPlaylist, PlaylistPage, SearchHit, SourceTrack

PLAYLIST_URL = "https://music.youtube.com/playlist?list=PLtest123"


class FakeYouTube:
    """Serves pre-built pages; page N is requested with token 'page-N'."""

    def __init__(self, pages=None, error=None):
        self.pages = pages if pages is not None else [[]]
        self.error = error
        self.calls = []

    def list_playlist_items(self, playlist_id, page_token=None, max_results=50):
        self.calls.append((playlist_id, page_token, max_results))
        if self.error:
            raise self.error
        index = int(page_token.split("-")[1]) if page_token else 0
        next_token = f"page-{index + 1}" if index + 1 < len(self.pages) else None
        return PlaylistPage(items=list(self.pages[index]), next_page_token=next_token)


class FakeSpotify:
    """
    In-memory Spotify.

    ``results`` maps a search query to a SearchHit, an exception to raise,
    or None. Unknown queries return None.
    """

    def __init__(self, results=None, create_error=None, add_errors=None):
        self.results = results or {}
        self.create_error = create_error
        self.add_errors = add_errors or {}
        self.queries = []
        self.created = []
        self.added = []
        self._lock = threading.Lock()

    def search_track(self, query):
        with self._lock:
            self.queries.append(query)
        result = self.results.get(query)
        if isinstance(result, Exception):
            raise result
        return result

    def create_playlist(self, owner_id, name, public=True, description=None):
        self.created.append((owner_id, name, public))
        if self.create_error:
            raise self.create_error
        return CreatedPlaylist(id="sp123", uri="spotify:playlist:sp123", name=name,
                               url="https://open.spotify.com/playlist/sp123")

    def add_tracks_to_playlist(self, playlist_id, uris):
        call_number = len(self.added) + 1
        self.added.append((playlist_id, list(uris)))
        error = self.add_errors.get(call_number)
        if error:
            raise error
        return f"snapshot-{call_number}"


def hit(uri, name="Song", artists=("Artist",)):
    return SearchHit(uri=uri, name=name, artists=list(artists))


def upstream_error(message="boom", status=500):
    return ConversionError(message, status=status, service="spotify")


@pytest.fixture
def tracks():
    return [
        SourceTrack("Hello (Official Video)", "Adele - Topic"),
        SourceTrack("Bohemian Rhapsody", "Queen Official"),
        SourceTrack("Untitled Jam", None),
    ]
