"""
YouTube Data API v3 Client

Reads playlist items for conversion. Works with an API key for public
playlists, or OAuth refresh-token credentials for private ones.
HTTP failures are classified here into conversion errors; only
rate-limit responses are retried.
"""

import json
import logging
import os
import time
from typing import Any, Callable, TypeVar

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from playlist_converter.core.errors import (
    AccessForbidden,
    ConversionError,
    InvalidPlaylistIdFormat,
    ItemsNotAccessible,
    PlaylistNotFoundOrPrivate,
    QuotaExceeded,
    UpstreamUnavailable,
)
from playlist_converter.core.models import PlaylistPage, SourceTrack

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = ["https://www.googleapis.com/auth/youtube.readonly"]
SERVICE = "youtube"
RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded"}

T = TypeVar('T')


class YouTubeAuthError(Exception):
    """YouTube client could not be configured."""
    pass


def _error_reason(error: HttpError) -> str | None:
    """Pull ``error.errors[0].reason`` out of an HttpError body."""
    try:
        content = error.content
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        body = json.loads(content)
        errors = body.get("error", {}).get("errors") or [{}]
        return errors[0].get("reason")
    except (ValueError, AttributeError, TypeError):
        return None


def classify_http_error(error: HttpError, playlist_id: str) -> ConversionError:
    """Map a YouTube HttpError onto the conversion error taxonomy."""
    status = getattr(error.resp, "status", 0)
    reason = _error_reason(error)

    if status == 404:
        return PlaylistNotFoundOrPrivate(
            f"YouTube playlist {playlist_id} not found or private",
            status=status, reason=reason, service=SERVICE)
    if status == 403:
        if reason == "quotaExceeded":
            return QuotaExceeded("YouTube API quota exceeded",
                                 status=status, reason=reason, service=SERVICE)
        if reason == "playlistItemsNotAccessible":
            return ItemsNotAccessible(
                "Playlist items not accessible (private?)",
                status=status, reason=reason, service=SERVICE)
        return AccessForbidden(f"YouTube API access forbidden ({reason or 'forbidden'})",
                               status=status, reason=reason, service=SERVICE)
    if status == 400:
        return InvalidPlaylistIdFormat(
            f"Invalid YouTube playlist id format: {playlist_id}",
            status=status, reason=reason, service=SERVICE)
    return UpstreamUnavailable(f"YouTube API error ({status})",
                               status=status, reason=reason, service=SERVICE)


def _is_rate_limited(error: HttpError) -> bool:
    status = getattr(error.resp, "status", 0)
    return status == 429 or (status == 403 and _error_reason(error) in RATE_LIMIT_REASONS)


def _oauth_credentials(refresh_token: str) -> Credentials:
    client_id = os.environ.get("GOOGLE_CLIENT_ID")
    client_secret = os.environ.get("GOOGLE_CLIENT_SECRET")
    if not client_id or not client_secret:
        raise YouTubeAuthError(
            "OAuth refresh token given but GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET are not set"
        )
    return Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=SCOPES
    )


class YouTubeClient:
    """Read-only YouTube Data API client, one per conversion request."""

    def __init__(self, api_key: str | None = None, refresh_token: str | None = None,
                 service: Any = None, rate_limit_retries: int = 2):
        self._rate_limit_retries = rate_limit_retries

        if service is not None:
            self._service = service
            return

        try:
            if refresh_token:
                self._service = build("youtube", "v3",
                                      credentials=_oauth_credentials(refresh_token),
                                      cache_discovery=False)
            elif api_key:
                self._service = build("youtube", "v3", developerKey=api_key,
                                      cache_discovery=False)
            else:
                raise YouTubeAuthError("Set YOUTUBE_API_KEY or YOUTUBE_REFRESH_TOKEN")
            logger.info("YouTube client initialized")
        except YouTubeAuthError:
            raise
        except Exception as e:
            raise YouTubeAuthError(f"Failed to build YouTube client: {e}")

    def _retry(self, operation: Callable[[], T], name: str, playlist_id: str) -> T:
        """Execute operation, backing off on rate-limit responses only."""
        attempt = 0
        while True:
            try:
                return operation()
            except HttpError as e:
                if _is_rate_limited(e) and attempt < self._rate_limit_retries:
                    wait = 2 ** attempt
                    logger.warning(f"Rate limited on {name}, retrying in {wait}s...")
                    time.sleep(wait)
                    attempt += 1
                    continue
                raise classify_http_error(e, playlist_id) from e
            except RefreshError as e:
                raise AccessForbidden(f"YouTube credentials rejected on {name}: {e}",
                                      service=SERVICE) from e
            except TransportError as e:
                raise UpstreamUnavailable(f"Auth transport error on {name}: {e}",
                                          service=SERVICE) from e
            except (httplib2.HttpLib2Error, OSError) as e:
                raise UpstreamUnavailable(f"Network error on {name}: {e}",
                                          service=SERVICE) from e

    def list_playlist_items(self, playlist_id: str, page_token: str | None = None,
                            max_results: int = 50) -> PlaylistPage:
        """Fetch one page of playlist items."""
        def do_list():
            return self._service.playlistItems().list(
                part="snippet",
                playlistId=playlist_id,
                maxResults=max_results,
                pageToken=page_token
            ).execute()

        response = self._retry(do_list, f"list playlist {playlist_id}", playlist_id)
        items = [self._extract_item(item) for item in response.get("items", [])]
        return PlaylistPage(items=items, next_page_token=response.get("nextPageToken"))

    def _extract_item(self, item: dict) -> SourceTrack:
        """Extract title and uploader channel from an API item."""
        snippet = item.get("snippet") or {}
        return SourceTrack(
            title=snippet.get("title") or "",
            artist_hint=snippet.get("videoOwnerChannelTitle") or None
        )
