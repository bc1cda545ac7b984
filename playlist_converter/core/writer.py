"""Spotify playlist creation and chunked track writes."""

import logging
from typing import Iterator, Protocol, Sequence, TypeVar

from playlist_converter.core.cancel import CancelToken, check_cancelled
from playlist_converter.core.errors import ConversionError, PlaylistCreateFailed
from playlist_converter.core.models import BatchWriteResult, CreatedPlaylist

logger = logging.getLogger(__name__)

CHUNK_SIZE = 100

T = TypeVar('T')


class DestinationCatalogProtocol(Protocol):
    def create_playlist(self, owner_id: str, name: str, public: bool = True,
                        description: str | None = None) -> CreatedPlaylist: ...
    def add_tracks_to_playlist(self, playlist_id: str, uris: list[str]) -> str: ...


def chunked(items: Sequence[T], size: int = CHUNK_SIZE) -> Iterator[list[T]]:
    """Yield consecutive chunks of at most size items, in order."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


class PlaylistWriter:
    """Creates the destination playlist and fills it."""

    def __init__(self, client: DestinationCatalogProtocol, chunk_size: int = CHUNK_SIZE):
        self._client = client
        self._chunk_size = chunk_size

    def create_playlist(self, owner_id: str, name: str, public: bool = True) -> CreatedPlaylist:
        logger.info(f"Creating Spotify playlist '{name}' for user {owner_id}")
        try:
            playlist = self._client.create_playlist(owner_id, name, public=public)
        except ConversionError as e:
            raise PlaylistCreateFailed(
                f"Could not create playlist: {e.message} (Status: {e.status})",
                status=e.status, reason=e.reason, service=e.service
            ) from e
        logger.info(f"Created playlist: {playlist.name} ({playlist.id})")
        return playlist

    def add_tracks(self, playlist_id: str, uris: Sequence[str],
                   cancel: CancelToken | None = None,
                   result: BatchWriteResult | None = None) -> BatchWriteResult:
        """
        Write URIs chunk by chunk.

        A failed chunk is recorded and the next chunk is still attempted;
        succeeded_count only counts chunks the API accepted. Passing
        ``result`` lets the caller keep the counts if cancellation stops
        the loop between chunks.
        """
        if result is None:
            result = BatchWriteResult()
        if not uris:
            return result

        logger.info(f"Adding {len(uris)} tracks to Spotify playlist {playlist_id}")
        for number, chunk in enumerate(chunked(uris, self._chunk_size), start=1):
            check_cancelled(cancel)
            result.attempted_count += len(chunk)
            try:
                self._client.add_tracks_to_playlist(playlist_id, chunk)
            except ConversionError as e:
                message = f"Failed adding chunk {number}: {e.message} (Status: {e.status})"
                logger.error(message)
                result.failure_messages.append(message)
                continue
            result.succeeded_count += len(chunk)
            logger.info(f"Added chunk {number}, total added: {result.succeeded_count}")

        return result
