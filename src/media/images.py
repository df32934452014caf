"""
Image processing with Pillow.

- resize_for_quality: cap the height per quality level (never enlarge)
- remove_background: brightness mask; near-white pixels become transparent
"""

import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageMath

from config.constants import (
    BACKGROUND_BRIGHTNESS_THRESHOLD,
    MOBILE_MAX_HEIGHT,
    UPLOAD_QUALITY_HEIGHTS,
)


# Output encoding per quality level: (format, content type, save options)
QUALITY_ENCODING = {
    "high": ("PNG", "image/png", {"compress_level": 6}),
    "medium": ("JPEG", "image/jpeg", {"quality": 85}),
    "low": ("JPEG", "image/jpeg", {"quality": 70}),
}

# Foreground pixels keep a slightly translucent alpha
FOREGROUND_ALPHA = 200


@dataclass
class ProcessedImage:
    data: bytes
    content_type: str
    width: int
    height: int


def _fit_height(img: Image.Image, max_height: int) -> Image.Image:
    if img.height <= max_height:
        return img
    width = max(1, round(img.width * max_height / img.height))
    return img.resize((width, max_height), Image.Resampling.LANCZOS)


def _encode(img: Image.Image, fmt: str, **options) -> bytes:
    buf = io.BytesIO()
    if fmt == "JPEG" and img.mode != "RGB":
        img = img.convert("RGB")
    img.save(buf, fmt, **options)
    return buf.getvalue()


def resize_for_quality(data: bytes, quality: str = "medium") -> ProcessedImage:
    """
    Resize and re-encode an uploaded image.

    Raises:
        OSError: bytes are not a readable image
        ValueError: unknown quality level
    """
    if quality not in UPLOAD_QUALITY_HEIGHTS:
        raise ValueError(f"Unknown quality level: {quality}")
    fmt, content_type, options = QUALITY_ENCODING[quality]

    with Image.open(io.BytesIO(data)) as src:
        img = _fit_height(src, UPLOAD_QUALITY_HEIGHTS[quality])
        return ProcessedImage(
            data=_encode(img, fmt, **options),
            content_type=content_type,
            width=img.width,
            height=img.height,
        )


def brightness_mask(img: Image.Image, threshold: int = BACKGROUND_BRIGHTNESS_THRESHOLD) -> Image.Image:
    """
    Alpha mask from mean channel brightness.

    Pixels whose (r + g + b) / 3 >= threshold are background (alpha 0);
    everything else is foreground (FOREGROUND_ALPHA).
    """
    r, g, b = img.convert("RGB").split()
    # band arithmetic runs in 32-bit "I" mode, so the sum cannot wrap
    alpha = ImageMath.lambda_eval(
        lambda args: (args["r"] + args["g"] + args["b"] < threshold * 3) * FOREGROUND_ALPHA,
        r=r,
        g=g,
        b=b,
    )
    return alpha.convert("L")


def remove_background(
    data: bytes,
    quality: str = "medium",
    optimize_for_mobile: bool = True,
    threshold: Optional[int] = None,
) -> ProcessedImage:
    """
    Resize, then make the bright background transparent. Output is always PNG.

    Raises:
        OSError: bytes are not a readable image
        ValueError: unknown quality level
    """
    max_height = UPLOAD_QUALITY_HEIGHTS.get(quality)
    if max_height is None:
        raise ValueError(f"Unknown quality level: {quality}")
    if optimize_for_mobile:
        max_height = min(max_height, MOBILE_MAX_HEIGHT)

    with Image.open(io.BytesIO(data)) as src:
        img = _fit_height(src.convert("RGB"), max_height)
        mask = brightness_mask(img, BACKGROUND_BRIGHTNESS_THRESHOLD if threshold is None else threshold)
        rgba = img.convert("RGBA")
        rgba.putalpha(mask)
        return ProcessedImage(
            data=_encode(rgba, "PNG", compress_level=6),
            content_type="image/png",
            width=rgba.width,
            height=rgba.height,
        )
