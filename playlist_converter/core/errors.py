"""
Conversion error taxonomy.

Collaborator clients translate transport failures (HTTP status codes,
nested reason strings) into these classes exactly once, so the pipeline
only ever matches on ``kind``.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playlist_converter.core.models import ConversionReport


class ErrorCategory(str, Enum):
    CLIENT_INPUT = "client_input"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    REPORTED = "reported"
    FATAL = "fatal"
    CANCELLED = "cancelled"


class ErrorKind(str, Enum):
    INVALID_PLAYLIST_URL = "InvalidPlaylistUrl"
    INVALID_PLAYLIST_ID_FORMAT = "InvalidPlaylistIdFormat"
    PLAYLIST_NOT_FOUND_OR_PRIVATE = "PlaylistNotFoundOrPrivate"
    EMPTY_SOURCE_PLAYLIST = "EmptySourcePlaylist"
    QUOTA_EXCEEDED = "QuotaExceeded"
    ITEMS_NOT_ACCESSIBLE = "ItemsNotAccessible"
    ACCESS_FORBIDDEN = "AccessForbidden"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    RATE_LIMITED = "RateLimited"
    NO_MATCHES_FOUND = "NoMatchesFound"
    PLAYLIST_CREATE_FAILED = "PlaylistCreateFailed"
    CANCELLED = "Cancelled"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorKind.INVALID_PLAYLIST_URL: ErrorCategory.CLIENT_INPUT,
    ErrorKind.INVALID_PLAYLIST_ID_FORMAT: ErrorCategory.CLIENT_INPUT,
    ErrorKind.PLAYLIST_NOT_FOUND_OR_PRIVATE: ErrorCategory.NOT_FOUND,
    ErrorKind.EMPTY_SOURCE_PLAYLIST: ErrorCategory.NOT_FOUND,
    ErrorKind.QUOTA_EXCEEDED: ErrorCategory.UPSTREAM,
    ErrorKind.ITEMS_NOT_ACCESSIBLE: ErrorCategory.UPSTREAM,
    ErrorKind.ACCESS_FORBIDDEN: ErrorCategory.UPSTREAM,
    ErrorKind.UPSTREAM_UNAVAILABLE: ErrorCategory.UPSTREAM,
    ErrorKind.RATE_LIMITED: ErrorCategory.UPSTREAM,
    ErrorKind.NO_MATCHES_FOUND: ErrorCategory.REPORTED,
    ErrorKind.PLAYLIST_CREATE_FAILED: ErrorCategory.FATAL,
    ErrorKind.CANCELLED: ErrorCategory.CANCELLED,
}


class ConversionError(Exception):
    """Base class for every classified conversion failure."""

    kind: ErrorKind = ErrorKind.UPSTREAM_UNAVAILABLE

    def __init__(self, message: str, status: int | None = None,
                 reason: str | None = None, service: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.reason = reason
        self.service = service
        # Filled in by the orchestrator before the error leaves convert()
        self.report: "ConversionReport | None" = None

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    def to_dict(self) -> dict:
        data = {
            "kind": self.kind.value,
            "category": self.category.value,
            "message": self.message,
        }
        if self.status is not None:
            data["status"] = self.status
        if self.reason:
            data["reason"] = self.reason
        if self.service:
            data["service"] = self.service
        return data


class InvalidPlaylistUrl(ConversionError):
    """URL is not a recognised YouTube playlist link."""
    kind = ErrorKind.INVALID_PLAYLIST_URL


class InvalidPlaylistIdFormat(ConversionError):
    """YouTube rejected the playlist id (400)."""
    kind = ErrorKind.INVALID_PLAYLIST_ID_FORMAT


class PlaylistNotFoundOrPrivate(ConversionError):
    kind = ErrorKind.PLAYLIST_NOT_FOUND_OR_PRIVATE


class EmptySourcePlaylist(ConversionError):
    """Fetch succeeded but produced no usable tracks."""
    kind = ErrorKind.EMPTY_SOURCE_PLAYLIST


class QuotaExceeded(ConversionError):
    kind = ErrorKind.QUOTA_EXCEEDED


class ItemsNotAccessible(ConversionError):
    kind = ErrorKind.ITEMS_NOT_ACCESSIBLE


class AccessForbidden(ConversionError):
    kind = ErrorKind.ACCESS_FORBIDDEN


class UpstreamUnavailable(ConversionError):
    """Any other upstream failure; carries the raw status when there is one."""
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class RateLimited(ConversionError):
    """Upstream kept answering 429 after backoff was exhausted."""
    kind = ErrorKind.RATE_LIMITED


class NoMatchesFound(ConversionError):
    """No source track matched; the attached report lists every title."""
    kind = ErrorKind.NO_MATCHES_FOUND


class PlaylistCreateFailed(ConversionError):
    kind = ErrorKind.PLAYLIST_CREATE_FAILED


class ConversionCancelled(ConversionError):
    kind = ErrorKind.CANCELLED
