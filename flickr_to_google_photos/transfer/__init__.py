"""
Transfer pipeline.
"""
from flickr_to_google_photos.transfer.batch_processor import (
    BatchProcessor,
    chunk_photos,
    create_google_description,
)
from flickr_to_google_photos.transfer.orchestrator import TransferOrchestrator

__all__ = ['BatchProcessor', 'TransferOrchestrator', 'chunk_photos', 'create_google_description']
