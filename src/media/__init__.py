"""
Media module: image processing and upload to the blob store.
"""

from media.images import ProcessedImage, remove_background, resize_for_quality
from media.service import UploadService

__all__ = [
    "ProcessedImage",
    "resize_for_quality",
    "remove_background",
    "UploadService",
]
