"""
Cloudinary service for portfolio media storage.
Uploads images and videos, deletes them, and maps delivery URLs back to public IDs.
"""
import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from portfolio_site.config import settings
from portfolio_site.models import MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO
import logging
import asyncio
import re
from typing import Optional, Dict, Any, Tuple

logger = logging.getLogger(__name__)

# Configure Cloudinary with credentials from settings
cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True
)

# Delivery URLs look like .../{image|video}/upload[/v123]/{folder/name}.{ext}
_PUBLIC_ID_PATTERN = re.compile(r'/(image|video)/upload(?:/v\d+)?/(.+)$')


def _upload_options(media_type: str, folder: str, public_id: Optional[str]) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "folder": folder,
        "public_id": public_id,
        "resource_type": media_type,
    }
    if media_type == MEDIA_TYPE_IMAGE:
        options.update({
            "fetch_format": "auto",
            "quality": "auto",
            "transformation": [
                {"width": 2560, "height": 2560, "crop": "limit"}
            ],
        })
    return options


async def upload_media(
    file: Any,
    media_type: str = MEDIA_TYPE_IMAGE,
    folder: Optional[str] = None,
    public_id: Optional[str] = None,
    max_retries: int = 3
) -> Dict[str, Any]:
    """
    Upload an image or video to Cloudinary with retry logic.

    Args:
        file: File object, file path, or bytes to upload
        media_type: "image" or "video"
        folder: Cloudinary folder (default: settings.CLOUDINARY_FOLDER)
        public_id: Optional custom public ID
        max_retries: Maximum number of attempts for transient failures

    Returns:
        dict: url (secure URL), public_id, format, resource_type, bytes

    Raises:
        CloudinaryError: If upload fails after all retries
        ValueError: For an unknown media type
    """
    if media_type not in (MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO):
        raise ValueError(f"Unsupported media type: {media_type}")

    options = _upload_options(media_type, folder or settings.CLOUDINARY_FOLDER, public_id)

    for attempt in range(max_retries):
        try:
            result = await asyncio.to_thread(cloudinary.uploader.upload, file, **options)
            logger.info(f"Successfully uploaded {media_type}: {result['public_id']}")
            return {
                "url": result["secure_url"],
                "public_id": result["public_id"],
                "format": result.get("format"),
                "resource_type": result.get("resource_type", media_type),
                "bytes": result.get("bytes"),
            }

        except CloudinaryError as e:
            logger.warning(f"Cloudinary upload error (attempt {attempt + 1}/{max_retries}): {str(e)}")

            if attempt < max_retries - 1:
                await asyncio.sleep(2 ** attempt)  # 1s, 2s, 4s backoff
                continue

            logger.error(f"Cloudinary upload failed after {max_retries} attempts: {str(e)}")
            raise


async def delete_media(public_id: str, media_type: str = MEDIA_TYPE_IMAGE, max_retries: int = 3) -> Dict[str, Any]:
    """
    Delete an asset from Cloudinary with retry logic.

    Args:
        public_id: Cloudinary public ID
        media_type: Resource type of the asset ("image" or "video")
        max_retries: Maximum number of attempts for transient failures

    Returns:
        dict: Deletion result from Cloudinary

    Raises:
        CloudinaryError: If deletion fails after all retries
    """
    for attempt in range(max_retries):
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                invalidate=True,  # Drop the CDN copy as well
                resource_type=media_type,
            )

            if result.get('result') in ('ok', 'not found'):
                logger.info(f"Deleted {media_type} from Cloudinary: {public_id} (result: {result.get('result')})")
            else:
                logger.warning(f"Unexpected Cloudinary delete result for {public_id}: {result}")
            return result

        except CloudinaryError as e:
            logger.warning(f"Cloudinary delete error (attempt {attempt + 1}/{max_retries}) for {public_id}: {str(e)}")

            if attempt < max_retries - 1:
                await asyncio.sleep(2 ** attempt)
                continue

            logger.error(f"Cloudinary delete failed after {max_retries} attempts for {public_id}: {str(e)}")
            raise


def extract_public_id_from_url(media_url: str) -> Tuple[str, str]:
    """
    Extract the Cloudinary public ID and resource type from a delivery URL.

    Example:
        https://res.cloudinary.com/demo/video/upload/v17/portfolio/reel.mp4
        -> ("portfolio/reel", "video")

    Raises:
        ValueError: If URL is not a Cloudinary delivery URL
    """
    match = _PUBLIC_ID_PATTERN.search(media_url or "")
    if not match:
        raise ValueError(f"Invalid Cloudinary URL format: {media_url}")

    resource_type, public_id_with_ext = match.group(1), match.group(2)

    # Strip the extension of the last path segment only
    folder, _, filename = public_id_with_ext.rpartition('/')
    if '.' in filename:
        filename = filename.rsplit('.', 1)[0]
    public_id = f"{folder}/{filename}" if folder else filename

    return public_id, resource_type


async def delete_media_by_url(media_url: str) -> Optional[Dict[str, Any]]:
    """
    Delete the Cloudinary asset behind a delivery URL.
    URLs that do not point at Cloudinary are skipped and return None.
    """
    try:
        public_id, resource_type = extract_public_id_from_url(media_url)
    except ValueError as e:
        logger.warning(f"Skipping Cloudinary deletion: {str(e)}")
        return None

    return await delete_media(public_id, media_type=resource_type)


def validate_cloudinary_config() -> bool:
    """
    Validate that Cloudinary is properly configured.

    Returns:
        bool: True if Cloudinary is configured, False otherwise
    """
    if not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("CLOUDINARY_CLOUD_NAME not configured")
        return False
    if not settings.CLOUDINARY_API_KEY:
        logger.warning("CLOUDINARY_API_KEY not configured")
        return False
    if not settings.CLOUDINARY_API_SECRET:
        logger.warning("CLOUDINARY_API_SECRET not configured")
        return False

    logger.info("Cloudinary configuration validated successfully")
    return True
