"""
Image conversion to WebP before upload.
Artwork photos are large; WebP keeps them light for the gallery.
"""
import asyncio
import io
import logging
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_WEBP_QUALITY = 85  # 0-100
DEFAULT_WEBP_METHOD = 6    # 0-6, higher = smaller but slower
MAX_DIMENSION = 3840       # Longest side before downscaling, None disables


def _normalize_mode(image: Image.Image) -> Image.Image:
    # WebP keeps alpha; palette images are expanded so transparency survives
    if image.mode == 'P':
        return image.convert('RGBA')
    if image.mode in ('RGB', 'RGBA', 'LA'):
        return image
    if image.mode not in ('CMYK', 'L'):
        logger.warning(f"Unusual image mode '{image.mode}', converting to RGB")
    return image.convert('RGB')


def _downscale(image: Image.Image, max_dimension: int) -> Image.Image:
    width, height = image.size
    if width <= max_dimension and height <= max_dimension:
        return image

    scale = max_dimension / max(width, height)
    new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
    logger.info(f"Downscaling image from {width}x{height} to {new_size[0]}x{new_size[1]}")
    return image.resize(new_size, Image.Resampling.LANCZOS)


def _convert(
    image_bytes: bytes,
    quality: int,
    method: int,
    max_dimension: Optional[int],
    skip_if_webp: bool,
) -> Tuple[bytes, bool]:
    image = Image.open(io.BytesIO(image_bytes))

    if skip_if_webp and image.format == 'WEBP':
        logger.debug("Image is already WebP format, skipping conversion")
        return image_bytes, True

    image = _normalize_mode(image)
    if max_dimension:
        image = _downscale(image, max_dimension)

    save_kwargs = {'format': 'WEBP', 'quality': quality, 'method': method}
    if quality == 100:
        save_kwargs['lossless'] = True

    buffer = io.BytesIO()
    image.save(buffer, **save_kwargs)
    webp_bytes = buffer.getvalue()

    original_size = len(image_bytes)
    reduction = ((original_size - len(webp_bytes)) / original_size) * 100
    logger.info(
        f"Converted image to WebP: {original_size:,} bytes -> {len(webp_bytes):,} bytes "
        f"({reduction:.1f}% reduction, quality={quality})"
    )
    return webp_bytes, True


async def convert_to_webp(
    image_bytes: bytes,
    quality: int = DEFAULT_WEBP_QUALITY,
    method: int = DEFAULT_WEBP_METHOD,
    max_dimension: Optional[int] = MAX_DIMENSION,
    skip_if_webp: bool = True
) -> Tuple[bytes, bool]:
    """
    Convert image bytes to WebP format.

    Args:
        image_bytes: Original image file bytes
        quality: WebP quality (0-100, default: 85)
        method: WebP compression method (0-6, default: 6)
        max_dimension: Maximum width or height before downscaling (None to disable)
        skip_if_webp: Return the original bytes if already WebP

    Returns:
        Tuple[bytes, bool]:
            - Converted image bytes (or original if skipped/failed)
            - Whether conversion succeeded or was skipped (True) or failed (False)
    """
    try:
        return await asyncio.to_thread(
            _convert, image_bytes, quality, method, max_dimension, skip_if_webp
        )
    except UnidentifiedImageError as e:
        logger.warning(f"Cannot identify image format: {str(e)}")
        return image_bytes, False
    except (OSError, ValueError) as e:
        logger.error(f"Error converting image to WebP: {str(e)}", exc_info=True)
        return image_bytes, False
