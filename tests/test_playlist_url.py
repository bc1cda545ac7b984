"""Tests for playlist URL parsing"""

import pytest

from playlist_converter.core.errors import ErrorCategory, InvalidPlaylistUrl
from playlist_converter.core.playlist_url import extract_playlist_id


class TestExtractPlaylistId:
    """Test YouTube playlist id extraction"""

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/playlist?list=PLabc123",
        "https://youtube.com/playlist?list=PLabc123",
        "https://music.youtube.com/playlist?list=PLabc123",
        "https://m.youtube.com/playlist?list=PLabc123",
        "https://www.youtube.com/watch?v=xyz&list=PLabc123&index=2",
        "https://youtu.be/playlist?list=PLabc123",
        "  https://music.youtube.com/playlist?list=PLabc123  ",
    ])
    def test_accepts_known_hosts(self, url):
        assert extract_playlist_id(url) == "PLabc123"

    @pytest.mark.parametrize("url", [
        "https://open.spotify.com/playlist/37i9dQZF1DX",
        "https://youtube.com.evil.example/playlist?list=PLabc123",
        "https://youtu.be/dQw4w9WgXcQ?list=PLabc123",
        "https://www.youtube.com/playlist",
        "https://www.youtube.com/playlist?list=",
        "ftp://youtube.com/playlist?list=PLabc123",
        "not a url",
        "",
        "http://[::1",
    ])
    def test_rejects_invalid(self, url):
        with pytest.raises(InvalidPlaylistUrl) as exc_info:
            extract_playlist_id(url)
        assert exc_info.value.category == ErrorCategory.CLIENT_INPUT
