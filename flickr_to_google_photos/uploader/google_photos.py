"""
Google Photos Library API client.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials

from flickr_to_google_photos.config import GooglePhotosConfig
from flickr_to_google_photos.exceptions import (
    AlbumError,
    AuthenticationError,
    ConfigurationError,
    UploadError,
)
from flickr_to_google_photos.models import DestinationAlbum
from flickr_to_google_photos.uploader.base import DestinationClient, MAX_ALBUM_BATCH_SIZE
from flickr_to_google_photos.utils.batching import chunked, dedupe_preserving_order
from flickr_to_google_photos.utils.retry import (
    RETRYABLE_STATUS_CODES,
    TRANSIENT_ERRORS,
    RetryableHTTPError,
    retry_with_backoff,
)
from flickr_to_google_photos.utils.security import sanitize_filename

logger = logging.getLogger(__name__)

BASE_URL = 'https://photoslibrary.googleapis.com/v1'

# Scopes required for creating albums and uploading into them
SCOPES = [
    'https://www.googleapis.com/auth/photoslibrary.appendonly',
    'https://www.googleapis.com/auth/photoslibrary.readonly.appcreateddata',
]


def save_credentials(creds: Credentials, token_path: Path) -> None:
    """Write the OAuth token, readable only by the owner."""
    token_path.parent.mkdir(parents=True, exist_ok=True)
    with open(token_path, 'w') as token:
        token.write(creds.to_json())
    try:
        os.chmod(token_path, 0o600)
    except OSError as e:
        logger.warning(f"Could not restrict permissions on {token_path}: {e}")


class GooglePhotosClient(DestinationClient):
    """
    DestinationClient for Google Photos.

    Handles:
    - Loading the cached OAuth token and refreshing it when expired
    - Raw byte uploads followed by media item creation
    - Album membership calls in windows of 50 ids
    - Retry with exponential backoff on network errors, 429 and 5xx responses
    """

    def __init__(self, config: GooglePhotosConfig, max_retries: int = 3,
                 retry_delay: float = 1.0,
                 session: Optional[requests.Session] = None):
        """
        Args:
            config: Google Photos configuration (client id/secret, token file)
            max_retries: Retry attempts for transient HTTP failures
            retry_delay: Initial backoff delay in seconds
            session: Already-authorized session; skips token loading
        """
        self.config = config
        self.session = session
        self.timeout = config.request_timeout_seconds
        self._send = retry_with_backoff(
            max_retries=max_retries,
            initial_delay=retry_delay,
            exceptions=TRANSIENT_ERRORS,
        )(self._send_once)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def check_credentials(self) -> None:
        if self.session is not None:
            return
        creds = self._load_credentials()
        self.session = AuthorizedSession(creds)
        logger.info("Successfully authenticated with Google Photos API")

    def _load_credentials(self) -> Credentials:
        if not self.config.has_client_credentials:
            raise ConfigurationError(
                'Google OAuth client credentials are not configured. '
                'Please run "flickr-to-google setup" first.'
            )

        token_path = self.config.token_path
        if not token_path.exists():
            raise AuthenticationError(
                'Not authenticated. Please run "flickr-to-google authenticate" first.'
            )

        try:
            creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
        except (ValueError, OSError) as e:
            raise AuthenticationError(f"Invalid token file {token_path}: {e}") from e

        if creds.valid:
            return creds

        if creds.expired and creds.refresh_token:
            logger.info("Access token expired, refreshing...")
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise AuthenticationError(
                    'Authentication expired. Please run "flickr-to-google authenticate" again.'
                ) from e
            save_credentials(creds, token_path)
            logger.info("Access token refreshed successfully")
            return creds

        raise AuthenticationError(
            'Stored token cannot be used. Please run "flickr-to-google authenticate" again.'
        )

    # ------------------------------------------------------------------
    # DestinationClient
    # ------------------------------------------------------------------
    def create_album(self, title: str) -> DestinationAlbum:
        try:
            response = self._send('POST', f'{BASE_URL}/albums', json={'album': {'title': title}})
        except TRANSIENT_ERRORS as e:
            raise AlbumError(f"Failed to create album '{title}': {e}") from e

        if response.status_code != 200:
            raise AlbumError(
                f"Failed to create album '{title}': {response.status_code} - {response.text}"
            )

        data = response.json()
        return DestinationAlbum(
            id=data['id'],
            title=data.get('title', title),
            media_items_count=int(data.get('mediaItemsCount', 0)),
            is_writeable=bool(data.get('isWriteable', False)),
            cover_photo_base_url=data.get('coverPhotoBaseUrl'),
        )

    def upload_photo(self, data: bytes, filename: str, description: str = "") -> str:
        filename = sanitize_filename(filename)
        headers = {
            'Content-Type': 'application/octet-stream',
            'X-Goog-Upload-Protocol': 'raw',
            'X-Goog-Upload-File-Name': filename,
        }
        try:
            response = self._send('POST', f'{BASE_URL}/uploads', data=data, headers=headers)
        except TRANSIENT_ERRORS as e:
            raise UploadError(f"Failed to upload {filename}: {e}") from e
        if response.status_code != 200:
            raise UploadError(
                f"Failed to upload {filename}: {response.status_code} - {response.text}"
            )
        upload_token = response.text

        new_media_item: Dict[str, Any] = {
            'simpleMediaItem': {'uploadToken': upload_token, 'fileName': filename},
        }
        if description:
            new_media_item['description'] = description

        try:
            response = self._send('POST', f'{BASE_URL}/mediaItems:batchCreate',
                                  json={'newMediaItems': [new_media_item]})
        except TRANSIENT_ERRORS as e:
            raise UploadError(f"Failed to create media item for {filename}: {e}") from e
        if response.status_code != 200:
            raise UploadError(
                f"Failed to create media item for {filename}: "
                f"{response.status_code} - {response.text}"
            )

        results = response.json().get('newMediaItemResults') or []
        if not results:
            raise UploadError(f"No media item created for {filename}")
        result = results[0]
        status = result.get('status') or {}
        if status.get('code', 0) != 0 or 'mediaItem' not in result:
            raise UploadError(
                f"Failed to create media item for {filename}: "
                f"{status.get('message', 'Unknown error')}"
            )
        return result['mediaItem']['id']

    def add_photos_to_album(self, album_id: str, photo_ids: List[str]) -> None:
        photo_ids = dedupe_preserving_order(photo_ids)
        for window in chunked(photo_ids, MAX_ALBUM_BATCH_SIZE):
            url = f'{BASE_URL}/albums/{album_id}:batchAddMediaItems'
            try:
                response = self._send('POST', url, json={'mediaItemIds': list(window)})
            except TRANSIENT_ERRORS as e:
                raise AlbumError(f"Failed to add photos to album {album_id}: {e}") from e
            if response.status_code != 200:
                raise AlbumError(
                    f"Failed to add photos to album {album_id}: "
                    f"{response.status_code} - {response.text}"
                )
            logger.debug(f"Added {len(window)} photos to album {album_id}")

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    def _send_once(self, method: str, url: str, **kwargs) -> requests.Response:
        if self.session is None:
            self.check_credentials()
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableHTTPError(response.status_code, response.text)
        return response
