#!/usr/bin/env python3
"""YouTube to Spotify Playlist Converter - Entry Point"""

import json
import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from playlist_converter.clients.spotify import (
    SpotifyAuthError,
    SpotifyClient,
    request_client_credentials_token,
)
from playlist_converter.clients.youtube import YouTubeAuthError, YouTubeClient
from playlist_converter.core.cancel import CancelToken
from playlist_converter.core.errors import ConversionError
from playlist_converter.core.matcher import DEFAULT_MAX_WORKERS
from playlist_converter.core.orchestrator import DEFAULT_PLAYLIST_NAME, ConversionOrchestrator
from playlist_converter.core.response import error_body, handle_convert, status_code_for, write_report

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    pass


def setup_logging() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    # googleapiclient logs every discovery fetch at INFO
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


def load_config() -> dict:
    config = {
        "SPOTIFY_ACCESS_TOKEN": os.environ.get("SPOTIFY_ACCESS_TOKEN"),
        "SPOTIFY_USER_ID": os.environ.get("SPOTIFY_USER_ID"),
        "SPOTIFY_CLIENT_ID": os.environ.get("SPOTIFY_CLIENT_ID"),
        "SPOTIFY_CLIENT_SECRET": os.environ.get("SPOTIFY_CLIENT_SECRET"),
        "YOUTUBE_API_KEY": os.environ.get("YOUTUBE_API_KEY"),
        "YOUTUBE_REFRESH_TOKEN": os.environ.get("YOUTUBE_REFRESH_TOKEN"),
    }

    missing = []
    if not config["SPOTIFY_ACCESS_TOKEN"]:
        missing.append("SPOTIFY_ACCESS_TOKEN")
    if not config["YOUTUBE_API_KEY"] and not config["YOUTUBE_REFRESH_TOKEN"]:
        missing.append("YOUTUBE_API_KEY (or YOUTUBE_REFRESH_TOKEN)")
    if missing:
        raise ConfigError(f"Missing config: {', '.join(missing)}")

    try:
        config["MATCH_WORKERS"] = int(os.environ.get("MATCH_WORKERS", DEFAULT_MAX_WORKERS))
    except ValueError:
        raise ConfigError("MATCH_WORKERS must be an integer")
    return config


def build_search_client(config: dict, user_client: SpotifyClient) -> SpotifyClient:
    """Use a client-credentials token for search when one is configured."""
    client_id = config["SPOTIFY_CLIENT_ID"]
    client_secret = config["SPOTIFY_CLIENT_SECRET"]
    if not client_id or not client_secret:
        return user_client
    try:
        return SpotifyClient(request_client_credentials_token(client_id, client_secret))
    except SpotifyAuthError as e:
        logger.warning(f"Search token unavailable, searching with user token: {e}")
        return user_client


@click.command()
@click.argument("playlist_url")
@click.option("--name", "playlist_name", default=DEFAULT_PLAYLIST_NAME, show_default=True,
              help="Name of the Spotify playlist to create.")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path),
              help="Also write the JSON report to this file.")
@click.option("--timeout", type=float, default=None,
              help="Abandon the conversion after this many seconds.")
@click.option("--workers", type=int, default=None,
              help="Concurrent Spotify searches (default: MATCH_WORKERS or 5).")
@click.option("--private", is_flag=True, help="Create the Spotify playlist as private.")
def main(playlist_url: str, playlist_name: str, output: Path | None,
         timeout: float | None, workers: int | None, private: bool) -> None:
    """Convert a YouTube playlist at PLAYLIST_URL into a new Spotify playlist."""
    load_dotenv()
    setup_logging()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        youtube = YouTubeClient(api_key=config["YOUTUBE_API_KEY"],
                                refresh_token=config["YOUTUBE_REFRESH_TOKEN"])
    except YouTubeAuthError as e:
        logger.error(f"YouTube auth failed: {e}")
        sys.exit(1)

    spotify = SpotifyClient(config["SPOTIFY_ACCESS_TOKEN"])
    search = build_search_client(config, spotify)

    owner_id = config["SPOTIFY_USER_ID"]
    if not owner_id:
        try:
            owner_id = spotify.get_current_user_id()
        except ConversionError as e:
            logger.error(f"Could not resolve Spotify user: {e}")
            status, body = status_code_for(e), error_body(e)
            _emit(status, body, output)
            sys.exit(1)

    orchestrator = ConversionOrchestrator(
        youtube, search, spotify,
        max_workers=workers or config["MATCH_WORKERS"],
        public=not private
    )
    cancel = CancelToken(timeout)
    body = {"source_playlist_url": playlist_url, "destination_playlist_name": playlist_name}

    try:
        status, response = handle_convert(body, orchestrator, owner_id, cancel)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)

    _emit(status, response, output)
    sys.exit(0 if status == 200 else 1)


def _emit(status: int, body: dict, output: Path | None) -> None:
    click.echo(json.dumps({"status_code": status, **body}, indent=2))
    if output is not None:
        write_report(output, status, body)


if __name__ == "__main__":
    main()
