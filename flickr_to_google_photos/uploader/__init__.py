"""
Photo destinations.
"""
from flickr_to_google_photos.uploader.base import DestinationClient, MAX_ALBUM_BATCH_SIZE
from flickr_to_google_photos.uploader.google_photos import GooglePhotosClient

__all__ = ['DestinationClient', 'GooglePhotosClient', 'MAX_ALBUM_BATCH_SIZE']
