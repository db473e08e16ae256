"""
Photo sources (Flickr export files or the live Flickr API).
"""
from typing import Optional

from flickr_to_google_photos.config import FlickrConfig
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.source.export_reader import FlickrExportCatalog


def create_source_catalog(config: FlickrConfig,
                          data_directory: Optional[str] = None) -> SourceCatalog:
    """
    Build the configured source.

    An explicit ``data_directory`` always selects the export reader.
    """
    if data_directory or config.source == 'export':
        return FlickrExportCatalog(data_directory or config.data_directory)

    from flickr_to_google_photos.source.flickr_api import FlickrApiCatalog
    return FlickrApiCatalog(config.api_key, config.api_secret, user_id=config.user_id)


__all__ = ['SourceCatalog', 'FlickrExportCatalog', 'create_source_catalog']
