"""
Upload service: validate, process and store clothing images.

Processing failures never fail an upload; the original bytes are stored
instead and the response reports ``fallback: true``. Storage failures
propagate as StoreError.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from PIL import Image

from catalog.blob import BlobStore, StoredObject
from config.constants import MAX_BATCH_FILES, UPLOAD_QUALITY_HEIGHTS
from config.settings import Settings
from core.errors import AppError, ValidationError
from core.logging import get_logger
from core.utils import utc_now
from media.images import ProcessedImage, remove_background, resize_for_quality


logger = get_logger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# Errors Pillow raises for unreadable or oversized images
PROCESSING_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


class UploadService:

    def __init__(self, blob: BlobStore, settings: Settings):
        self.blob = blob
        self.settings = settings

    def validate(self, file: IncomingFile) -> None:
        if not file.data:
            raise ValidationError("Please upload an image file")
        if file.content_type not in self.settings.allowed_image_types:
            raise ValidationError(
                "Unsupported file type, supported: JPEG, PNG, WebP",
                details={"contentType": file.content_type},
            )
        if len(file.data) > self.settings.max_upload_bytes:
            raise ValidationError(
                f"File must be at most {self.settings.max_upload_bytes // (1024 * 1024)}MB",
                details={"size": len(file.data)},
            )

    @staticmethod
    def check_quality(quality: str) -> None:
        if quality not in UPLOAD_QUALITY_HEIGHTS:
            raise ValidationError(
                f"Unsupported quality, supported: {', '.join(UPLOAD_QUALITY_HEIGHTS)}",
                details={"quality": quality},
            )

    @staticmethod
    def _key(prefix: str, extension: str) -> str:
        stamp = int(utc_now().timestamp() * 1000)
        return f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}.{extension}"

    def _process(self, file: IncomingFile, quality: str) -> Tuple[ProcessedImage, bool]:
        try:
            return resize_for_quality(file.data, quality), False
        except PROCESSING_ERRORS as e:
            logger.warning("Image processing failed, storing original", filename=file.filename, error=str(e))
            return ProcessedImage(file.data, file.content_type, 0, 0), True

    def upload(self, file: IncomingFile, quality: str = "medium") -> Dict[str, Any]:
        """Resize by quality and store one image."""
        self.validate(file)
        self.check_quality(quality)

        image, fallback = self._process(file, quality)
        stored = self.blob.put(
            self._key("upload", EXTENSIONS.get(image.content_type, "bin")),
            image.data,
            image.content_type,
        )
        logger.info("Image uploaded", path=stored.path, size=stored.size, quality=quality)
        return {
            "url": stored.url,
            "path": stored.path,
            "size": stored.size,
            "contentType": image.content_type,
            "originalName": file.filename,
            "originalSize": len(file.data),
            "quality": quality,
            "fallback": fallback,
        }

    def remove_background(
        self,
        file: IncomingFile,
        quality: str = "medium",
        optimize_for_mobile: bool = True,
    ) -> Dict[str, Any]:
        """Store a background-removed PNG alongside the original upload."""
        self.validate(file)
        self.check_quality(quality)

        try:
            processed = remove_background(file.data, quality, optimize_for_mobile)
            fallback = False
        except PROCESSING_ERRORS as e:
            logger.warning("Background removal failed, storing original", filename=file.filename, error=str(e))
            processed = ProcessedImage(file.data, file.content_type, 0, 0)
            fallback = True

        original_ext = EXTENSIONS[file.content_type]
        processed_obj = self.blob.put(
            self._key("processed", EXTENSIONS.get(processed.content_type, original_ext)),
            processed.data,
            processed.content_type,
        )
        original_obj = self.blob.put(
            self._key("original", original_ext),
            file.data,
            file.content_type,
        )

        original_size = len(file.data)
        return {
            "processedImage": processed_obj.url,
            "originalImage": original_obj.url,
            "processingInfo": {
                "originalSize": original_size,
                "processedSize": len(processed.data),
                "compressionRatio": round((original_size - len(processed.data)) / original_size * 100, 2),
                "quality": quality,
                "optimizeForMobile": optimize_for_mobile,
                "fallback": fallback,
                "storage": {
                    "processed": _describe(processed_obj),
                    "original": _describe(original_obj),
                },
            },
        }

    def batch(self, files: List[IncomingFile], quality: str = "medium") -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        Upload several images, collecting a per-file outcome.

        Returns:
            (per-file results, summary of total/success/failed)
        """
        if not files:
            raise ValidationError("Please upload at least one file")
        if len(files) > MAX_BATCH_FILES:
            raise ValidationError(f"At most {MAX_BATCH_FILES} files per batch")
        self.check_quality(quality)

        results = []
        for file in files:
            try:
                stored = self.upload(file, quality)
                results.append({"success": True, **stored})
            except AppError as e:
                logger.warning("Batch file failed", filename=file.filename, error=e.message)
                results.append({"success": False, "originalName": file.filename, "error": e.message})

        succeeded = sum(1 for r in results if r["success"])
        return results, {"total": len(files), "success": succeeded, "failed": len(files) - succeeded}

    def capabilities(self) -> Dict[str, Any]:
        return {
            "supportedFormats": list(self.settings.allowed_image_types),
            "maxFileSize": self.settings.max_upload_bytes,
            "maxBatchSize": MAX_BATCH_FILES,
            "processingOptions": list(UPLOAD_QUALITY_HEIGHTS),
            "features": {
                "backgroundRemoval": True,
                "imageOptimization": True,
                "batchUpload": True,
                "mobileOptimization": True,
            },
        }


def _describe(obj: StoredObject) -> Dict[str, Any]:
    return {"url": obj.url, "path": obj.path, "size": obj.size}
