"""Spotify Web API Client - search, playlist creation and track writes"""

import logging
import time
from typing import Any
from urllib.parse import quote

import requests

from playlist_converter.core.errors import (
    AccessForbidden,
    RateLimited,
    UpstreamUnavailable,
)
from playlist_converter.core.models import CreatedPlaylist, SearchHit

logger = logging.getLogger(__name__)

API_URL = "https://api.spotify.com/v1"
TOKEN_URL = "https://accounts.spotify.com/api/token"
PLAYLIST_URL = "https://open.spotify.com/playlist/{}"
SERVICE = "spotify"
REQUEST_TIMEOUT = 30


class SpotifyAuthError(Exception):
    pass


def request_client_credentials_token(client_id: str, client_secret: str,
                                     session: requests.Session | None = None) -> str:
    """Client-credentials grant; the token can search but not write."""
    http = session or requests.Session()
    try:
        response = http.post(
            TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(client_id, client_secret),
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        raise SpotifyAuthError(f"Token request failed: {e}")

    if response.status_code != 200:
        raise SpotifyAuthError(f"Token request failed ({response.status_code}): {response.text[:200]}")

    data = response.json()
    logger.info(f"Spotify search token expires in {data.get('expires_in')}s")
    return data["access_token"]


def _error_message(response: requests.Response) -> str:
    try:
        error = response.json().get("error")
        if isinstance(error, dict):
            return error.get("message") or str(response.status_code)
        if error:
            return str(error)
    except ValueError:
        pass
    return response.text[:200] or str(response.status_code)


class SpotifyClient:
    """Request-scoped Spotify client bound to one access token."""

    def __init__(self, access_token: str, session: requests.Session | None = None,
                 rate_limit_retries: int = 2, max_retry_wait: float = 30):
        self._session = session or requests.Session()
        self._headers = {
            "authorization": f"Bearer {access_token}",
            "content-type": "application/json",
        }
        self._rate_limit_retries = rate_limit_retries
        self._max_retry_wait = max_retry_wait

    def _retry_wait(self, response: requests.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        try:
            wait = float(retry_after) if retry_after is not None else 2 ** attempt
        except ValueError:
            wait = 2 ** attempt
        return min(wait, self._max_retry_wait)

    def _request(self, method: str, path: str, name: str, **kwargs) -> Any:
        """Send a request; back off on 429, classify every other failure."""
        attempt = 0
        while True:
            try:
                response = self._session.request(
                    method, f"{API_URL}{path}", headers=self._headers,
                    timeout=REQUEST_TIMEOUT, **kwargs
                )
            except requests.RequestException as e:
                raise UpstreamUnavailable(f"Network error on {name}: {e}", service=SERVICE) from e

            status = response.status_code
            if status == 429:
                if attempt < self._rate_limit_retries:
                    wait = self._retry_wait(response, attempt)
                    logger.warning(f"Rate limited on {name}, retrying in {wait:.0f}s...")
                    time.sleep(wait)
                    attempt += 1
                    continue
                raise RateLimited(f"Rate limited on {name}", status=status, service=SERVICE)

            if 200 <= status < 300:
                return self._payload(response, name)

            message = _error_message(response)
            if status in (401, 403):
                raise AccessForbidden(f"Spotify refused {name}: {message}",
                                      status=status, reason=message, service=SERVICE)
            raise UpstreamUnavailable(f"Spotify error on {name}: {message}",
                                      status=status, reason=message, service=SERVICE)

    def _payload(self, response: requests.Response, name: str) -> dict:
        """Decode a 2xx body; anything but a JSON object is an upstream failure."""
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Unreadable Spotify response on {name}",
                                      status=response.status_code, service=SERVICE) from e
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"Unexpected Spotify response on {name}",
                                      status=response.status_code, service=SERVICE)
        return data

    def search_track(self, query: str) -> SearchHit | None:
        """Return the top track for query, or None."""
        data = self._request("GET", "/search", f"search '{query}'",
                             params={"q": query, "type": "track", "limit": 1})
        items = (data.get("tracks") or {}).get("items") or []
        if not items:
            return None
        track = items[0]
        if not isinstance(track, dict) or not track.get("uri"):
            raise UpstreamUnavailable(f"Search result for '{query}' has no track uri",
                                      service=SERVICE)
        return SearchHit(
            uri=track["uri"],
            name=track.get("name", ""),
            artists=[a.get("name", "") for a in track.get("artists", [])]
        )

    def create_playlist(self, owner_id: str, name: str, public: bool = True,
                        description: str | None = None) -> CreatedPlaylist:
        body = {"name": name, "public": public}
        if description:
            body["description"] = description
        data = self._request("POST", f"/users/{quote(owner_id, safe='')}/playlists",
                             f"create playlist '{name}'", json=body)
        if not data.get("id"):
            raise UpstreamUnavailable(f"Spotify returned no id for playlist '{name}'",
                                      service=SERVICE)
        return CreatedPlaylist(
            id=data["id"],
            uri=data.get("uri", f"spotify:playlist:{data['id']}"),
            name=data.get("name", name),
            url=PLAYLIST_URL.format(data["id"])
        )

    def add_tracks_to_playlist(self, playlist_id: str, uris: list[str]) -> str:
        """Add up to 100 URIs in one call. Returns the snapshot id."""
        data = self._request("POST", f"/playlists/{playlist_id}/tracks",
                             f"add {len(uris)} tracks", json={"uris": uris})
        return data.get("snapshot_id", "")

    def get_current_user_id(self) -> str:
        data = self._request("GET", "/me", "get current user")
        if not data.get("id"):
            raise UpstreamUnavailable("Spotify returned no user id", service=SERVICE)
        return data["id"]
