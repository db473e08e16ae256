"""
Read albums and photos live from the Flickr API.
"""
import logging
from typing import Any, Dict, List, Optional

import flickrapi
import requests

from flickr_to_google_photos.exceptions import (
    AuthenticationError,
    DownloadError,
    MigrationError,
    NotFoundError,
)
from flickr_to_google_photos.models import Album, Photo
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.utils.retry import (
    RETRYABLE_STATUS_CODES,
    TRANSIENT_ERRORS,
    RetryableHTTPError,
    retry_with_backoff,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 500
PHOTO_EXTRAS = 'description,date_taken,date_upload,tags,geo,url_o,url_l,url_m,url_s,o_dims'
# Flickr error code for an unknown photoset
PHOTOSET_NOT_FOUND = 1


class FlickrApiCatalog(SourceCatalog):
    """SourceCatalog backed by the paginated Flickr REST API."""

    def __init__(self, api_key: str, api_secret: str, user_id: Optional[str] = None,
                 flickr: Optional[flickrapi.FlickrAPI] = None,
                 session: Optional[requests.Session] = None,
                 request_timeout: int = 120):
        """
        Args:
            api_key: Flickr API key
            api_secret: Flickr API secret
            user_id: NSID of the account to read; resolved from the OAuth
                token when omitted
            flickr: Preconfigured client (mainly for tests)
            session: HTTP session used for photo downloads
            request_timeout: Timeout in seconds for photo downloads
        """
        if flickr is None:
            if not api_key or not api_secret:
                raise AuthenticationError(
                    "Flickr API key and secret are required for the 'api' source. "
                    "Run \"flickr-to-google setup\" first."
                )
            flickr = flickrapi.FlickrAPI(api_key, api_secret, format='parsed-json')
        self.flickr = flickr
        self.user_id = user_id
        self.session = session or requests.Session()
        self.request_timeout = request_timeout

    def authenticate(self) -> None:
        """Run Flickr's browser OAuth flow and cache the token (read access)."""
        if self.flickr.token_valid(perms='read'):
            logger.info("Flickr token is already valid")
            return
        self.flickr.authenticate_via_browser(perms='read')
        logger.info("✓ Authenticated with Flickr")

    def get_user_id(self) -> str:
        if self.user_id:
            return self.user_id
        try:
            response = self.flickr.test.login()
        except flickrapi.exceptions.FlickrError as e:
            raise AuthenticationError(
                f"Could not identify the Flickr user ({e}). Set flickr.user_id or "
                f"run \"flickr-to-google authenticate\"."
            ) from e
        self.user_id = response['user']['id']
        return self.user_id

    # ------------------------------------------------------------------
    # SourceCatalog
    # ------------------------------------------------------------------
    def list_albums(self) -> List[Album]:
        user_id = self.get_user_id()
        albums = []
        page = 1
        while True:
            response = self._call('photosets.getList', user_id=user_id,
                                  page=page, per_page=PAGE_SIZE)
            photosets = response['photosets']
            for photoset in photosets.get('photoset', []):
                albums.append(self.get_album_details(photoset['id']))
            if page >= int(photosets.get('pages', 1)):
                break
            page += 1
        return albums

    def get_album_details(self, album_id: str) -> Album:
        info = self._call('photosets.getInfo', photoset_id=album_id)['photoset']

        photos = []
        page = 1
        while True:
            response = self._call('photosets.getPhotos', photoset_id=album_id,
                                  page=page, per_page=PAGE_SIZE, extras=PHOTO_EXTRAS)
            photoset = response['photoset']
            photos.extend(_parse_photo(raw) for raw in photoset.get('photo', []))
            if page >= int(photoset.get('pages', 1)):
                break
            page += 1

        return Album(
            id=str(info['id']),
            title=_content(info.get('title')),
            description=_content(info.get('description')),
            photo_count=int(info.get('photos', len(photos))),
            photos=photos,
            date_created=info.get('date_create'),
            date_updated=info.get('date_update'),
        )

    def get_photo_bytes(self, photo: Photo) -> bytes:
        if not photo.url:
            raise NotFoundError(f"Photo {photo.id} has no downloadable URL")
        try:
            response = self._download(photo.url)
        except RetryableHTTPError as e:
            raise DownloadError(f"Failed to download photo {photo.id}: {e}") from e
        if response.status_code == 404:
            raise NotFoundError(f"Photo {photo.id} not found at {photo.url}")
        if response.status_code != 200:
            raise DownloadError(
                f"Failed to download photo {photo.id}: HTTP {response.status_code}"
            )
        return response.content

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _call(self, method: str, **params) -> Dict[str, Any]:
        target = self.flickr
        for part in method.split('.'):
            target = getattr(target, part)
        try:
            return target(**params)
        except flickrapi.exceptions.FlickrError as e:
            if getattr(e, 'code', None) == PHOTOSET_NOT_FOUND:
                raise NotFoundError(f"Flickr {method} failed: {e}") from e
            raise MigrationError(f"Flickr {method} failed: {e}") from e

    @retry_with_backoff(max_retries=3, initial_delay=1.0, exceptions=TRANSIENT_ERRORS)
    def _download(self, url: str) -> requests.Response:
        response = self.session.get(url, timeout=self.request_timeout)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableHTTPError(response.status_code, response.reason or 'download failed')
        return response


def _content(value: Any) -> str:
    """Flickr wraps most text fields as {'_content': ...}."""
    if isinstance(value, dict):
        return value.get('_content', '') or ''
    return value or ''


def _parse_photo(raw: Dict[str, Any]) -> Photo:
    latitude = _to_float(raw.get('latitude'))
    longitude = _to_float(raw.get('longitude'))
    # Flickr reports 0/0 for photos without a location
    if not latitude and not longitude:
        latitude = longitude = None

    tags = raw.get('tags') or ''
    return Photo(
        id=str(raw['id']),
        name=raw.get('title') or '',
        description=_content(raw.get('description')),
        url=raw.get('url_o') or raw.get('url_l') or raw.get('url_m') or raw.get('url_s') or '',
        latitude=latitude,
        longitude=longitude,
        tags=tags.split() if isinstance(tags, str) else list(tags),
        width=_first_int(raw, 'width_o', 'width_l', 'width_m', 'width_s'),
        height=_first_int(raw, 'height_o', 'height_l', 'height_m', 'height_s'),
        date_taken=raw.get('datetaken'),
        date_upload=raw.get('dateupload'),
    )


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_int(raw: Dict[str, Any], *keys: str) -> int:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ''):
            try:
                return int(value)
            except (TypeError, ValueError):
                continue
    return 0
