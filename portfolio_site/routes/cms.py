"""
CMS API routes for categories, media and site sections.
All endpoints require an admin access token.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status, UploadFile, File, Form, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from cloudinary.exceptions import Error as CloudinaryError
from typing import Optional, List
import logging

from portfolio_site.config import settings
from portfolio_site.database import get_db
from portfolio_site.gallery.store import media_query
from portfolio_site.models import PortfolioCategory, PortfolioMedia, SiteSection, MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO
from portfolio_site.schemas import (
    BulkUploadResponse,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MediaItemResponse,
    MediaItemUpdate,
    MediaReorderRequest,
    SectionResponse,
    SectionUpdate,
    SetCoverRequest,
)
from portfolio_site.services.bulk_upload import run_bulk_upload
from portfolio_site.services.cloudinary_service import upload_media, delete_media_by_url
from portfolio_site.utils.image_converter import convert_to_webp
from portfolio_site.utils.jwt_auth import require_admin
from portfolio_site.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms", tags=["CMS"])


def require_confirmation(confirm: bool, what: str) -> None:
    """
    Destructive calls are only issued after an explicit confirmation.

    Raises:
        HTTPException: 428 if confirm is not set
    """
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail={"error": "Confirmation required", "detail": f"Repeat the request with confirm=true to delete {what}"}
        )


def detect_media_type(content_type: Optional[str]) -> str:
    """
    Map an upload content type to a media type.

    Raises:
        ValueError: For anything that is not an image or a video
    """
    if content_type and content_type.startswith("image/"):
        return MEDIA_TYPE_IMAGE
    if content_type and content_type.startswith("video/"):
        return MEDIA_TYPE_VIDEO
    raise ValueError(f"Unsupported file type: {content_type or 'unknown'}")


async def store_upload(file: UploadFile, allowed: tuple = (MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO)) -> dict:
    """
    Upload a single file to Cloudinary (no database operations).
    Images are converted to WebP first; videos are uploaded as-is.

    Returns:
        dict: url, media_type and filename

    Raises:
        ValueError: If the file type is not allowed
        CloudinaryError: If the upload fails after retries
    """
    filename = file.filename or "unknown"
    media_type = detect_media_type(file.content_type)
    if media_type not in allowed:
        raise ValueError(f"File '{filename}' must be an {' or '.join(allowed)}")

    content = await file.read()

    if media_type == MEDIA_TYPE_IMAGE:
        converted, converted_ok = await convert_to_webp(content)
        if converted_ok and len(converted) < len(content):
            content = converted
        elif not converted_ok:
            logger.warning(f"WebP conversion failed for {filename}, uploading original format")

    logger.info(f"Uploading {media_type} to Cloudinary: {filename}")
    result = await upload_media(content, media_type=media_type)

    return {"url": result["url"], "media_type": media_type, "filename": filename}


async def _upload_or_fail(file: UploadFile, allowed: tuple = (MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO)) -> dict:
    try:
        return await store_upload(file, allowed)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid file type", "detail": str(e)}
        )
    except CloudinaryError as e:
        logger.error(f"Upload of {file.filename} failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Upload failed", "detail": str(e)}
        )


async def _discard_upload(media_url: Optional[str]) -> None:
    """Remove an uploaded asset whose database record could not be saved."""
    try:
        await delete_media_by_url(media_url)
    except CloudinaryError as e:
        logger.error(f"Failed to remove orphaned upload {media_url}: {str(e)}")


async def _get_or_404(db: AsyncSession, model, object_id: int, label: str):
    result = await db.execute(select(model).where(model.id == object_id))
    obj = result.scalar_one_or_none()
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": f"{label} not found", "detail": f"{label} ID {object_id} does not exist"}
        )
    return obj


async def _next_order_index(db: AsyncSession, column, *criteria) -> int:
    query = select(func.max(column))
    if criteria:
        query = query.where(*criteria)
    current = (await db.execute(query)).scalar()
    return 0 if current is None else current + 1


def _database_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": f"Failed {action}", "detail": str(e)}
    )


def _slug_conflict(slug: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"error": "Slug already exists", "detail": f"Another category already uses slug '{slug}'"}
    )


# Categories

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Get all categories ordered for display."""
    try:
        result = await db.execute(
            select(PortfolioCategory).order_by(PortfolioCategory.order_index.asc(), PortfolioCategory.id.asc())
        )
        categories = result.scalars().all()
    except SQLAlchemyError as e:
        raise _database_error("retrieving categories", e)

    logger.info(f"Retrieved {len(categories)} categories for CMS")
    return [CategoryResponse.model_validate(category) for category in categories]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Create a category.

    Raises:
        HTTPException: 409 if the slug is taken, 500 if saving fails
    """
    try:
        data = payload.model_dump()
        if data["order_index"] is None:
            data["order_index"] = await _next_order_index(db, PortfolioCategory.order_index)

        category = PortfolioCategory(**data)
        db.add(category)
        await db.commit()
        await db.refresh(category)
    except IntegrityError:
        await db.rollback()
        raise _slug_conflict(payload.slug)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("creating category", e)

    logger.info(f"Created category {category.id} ({category.slug})")
    return CategoryResponse.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Update a category. Only the fields present in the body are changed.

    Raises:
        HTTPException: 404 if missing, 409 on slug conflict, 500 if saving fails
    """
    category = await _get_or_404(db, PortfolioCategory, category_id, "Category")

    try:
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        await db.commit()
        await db.refresh(category)
    except IntegrityError:
        await db.rollback()
        raise _slug_conflict(payload.slug)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("updating category", e)

    logger.info(f"Updated category {category_id}")
    return CategoryResponse.model_validate(category)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Delete a category together with its media.
    Stored files are removed from Cloudinary one by one; a storage failure
    is logged and does not block the database deletion.

    Raises:
        HTTPException: 428 without confirm=true, 404 if missing, 500 if deletion fails
    """
    require_confirmation(confirm, "the category and all of its media")
    category = await _get_or_404(db, PortfolioCategory, category_id, "Category")

    media_result = await db.execute(media_query(category_id))
    media_urls = [item.media_url for item in media_result.scalars().all()]

    for media_url in media_urls:
        try:
            await delete_media_by_url(media_url)
        except CloudinaryError as e:
            logger.error(f"Failed to delete {media_url} from Cloudinary: {str(e)}")

    try:
        await db.delete(category)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("deleting category", e)

    logger.info(f"Deleted category {category_id} with {len(media_urls)} media item(s)")
    return {"message": "Category deleted successfully", "category_id": category_id, "deleted_media": len(media_urls)}


@router.post("/categories/{category_id}/cover", response_model=CategoryResponse)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_category_cover(
    request: Request,
    category_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Upload a new cover image for a category."""
    category = await _get_or_404(db, PortfolioCategory, category_id, "Category")
    uploaded = await _upload_or_fail(file, allowed=(MEDIA_TYPE_IMAGE,))

    category.main_image_url = uploaded["url"]
    await db.commit()
    await db.refresh(category)

    logger.info(f"Uploaded cover for category {category_id}")
    return CategoryResponse.model_validate(category)


@router.put("/categories/{category_id}/cover", response_model=CategoryResponse)
async def set_category_cover(
    category_id: int,
    payload: SetCoverRequest,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Use one of the category's own media items as its cover.

    Raises:
        HTTPException: 404 if category or media is missing, 400 if the media
            belongs to another category
    """
    category = await _get_or_404(db, PortfolioCategory, category_id, "Category")
    media = await _get_or_404(db, PortfolioMedia, payload.media_id, "Media")

    if media.category_id != category_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Media belongs to another category", "detail": f"Media ID {media.id} is not in category {category_id}"}
        )

    category.main_image_url = media.media_url
    await db.commit()
    await db.refresh(category)

    logger.info(f"Set media {media.id} as cover of category {category_id}")
    return CategoryResponse.model_validate(category)


# Media

@router.get("/categories/{category_id}/media", response_model=List[MediaItemResponse])
async def list_category_media(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Get the media of a category in display order."""
    await _get_or_404(db, PortfolioCategory, category_id, "Category")
    try:
        result = await db.execute(media_query(category_id))
        items = result.scalars().all()
    except SQLAlchemyError as e:
        raise _database_error("retrieving media", e)

    return [MediaItemResponse.model_validate(item) for item in items]


@router.post("/categories/{category_id}/media", response_model=MediaItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["upload"])
async def create_media(
    request: Request,
    category_id: int,
    file: UploadFile = File(...),
    title_ru: Optional[str] = Form(None),
    title_en: Optional[str] = Form(None),
    description_ru: Optional[str] = Form(None),
    description_en: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Upload one image or video with its captions.

    Raises:
        HTTPException: 404 if the category is missing, 400 for a bad file type,
            502 if storage fails, 500 if saving fails
    """
    await _get_or_404(db, PortfolioCategory, category_id, "Category")
    uploaded = await _upload_or_fail(file)

    try:
        item = PortfolioMedia(
            category_id=category_id,
            media_url=uploaded["url"],
            media_type=uploaded["media_type"],
            title_ru=(title_ru or "").strip() or None,
            title_en=(title_en or "").strip() or None,
            description_ru=(description_ru or "").strip() or None,
            description_en=(description_en or "").strip() or None,
            order_index=await _next_order_index(
                db, PortfolioMedia.order_index, PortfolioMedia.category_id == category_id
            ),
        )
        db.add(item)
        await db.commit()
        await db.refresh(item)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("saving media", e)

    logger.info(f"Created media {item.id} in category {category_id}")
    return MediaItemResponse.model_validate(item)


@router.post("/categories/{category_id}/media/bulk", response_model=BulkUploadResponse)
@limiter.limit(RATE_LIMITS["upload"])
async def bulk_upload_media(
    request: Request,
    category_id: int,
    files: List[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Upload several files into a category, one at a time.

    Each file is stored and then inserted on its own. A file that fails
    either step is counted and skipped, and the remaining files are still
    uploaded. The response reports success and failure counts.

    Raises:
        HTTPException: 404 if the category is missing, 400 if too many files
    """
    await _get_or_404(db, PortfolioCategory, category_id, "Category")

    if len(files) > settings.MAX_UPLOAD_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Too many files", "detail": f"At most {settings.MAX_UPLOAD_FILES} files per upload"}
        )

    base_order = await _next_order_index(
        db, PortfolioMedia.order_index, PortfolioMedia.category_id == category_id
    )

    async def upload_one(position: int, file: UploadFile) -> PortfolioMedia:
        uploaded = await store_upload(file)
        item = PortfolioMedia(
            category_id=category_id,
            media_url=uploaded["url"],
            media_type=uploaded["media_type"],
            order_index=base_order + position,
        )
        try:
            # One savepoint per file: a failed insert only loses this file
            async with db.begin_nested():
                db.add(item)
        except SQLAlchemyError:
            await _discard_upload(uploaded["url"])
            raise
        return item

    def log_progress(current: int, total: int) -> None:
        logger.info(f"Bulk upload to category {category_id}: {current} / {total}")

    summary = await run_bulk_upload(files, upload_one, on_progress=log_progress)

    created = summary.results
    if created:
        try:
            for item in created:
                await db.refresh(item)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise _database_error("saving uploaded media", e)

    return BulkUploadResponse(
        **summary.as_dict(),
        items=[MediaItemResponse.model_validate(item) for item in created],
    )


@router.put("/categories/{category_id}/media/reorder")
async def reorder_media(
    category_id: int,
    payload: MediaReorderRequest,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Reorder the media of a category.

    The listed IDs come first in the given order; media not listed keep
    their relative order after them. order_index is rewritten as 0..n-1.

    Raises:
        HTTPException: 400 if no IDs, 404 if an ID is not in the category
    """
    media_ids = payload.media_ids
    if not media_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "No media IDs provided", "detail": "At least one media ID is required"}
        )

    await _get_or_404(db, PortfolioCategory, category_id, "Category")
    result = await db.execute(media_query(category_id))
    current = result.scalars().all()

    missing_ids = set(media_ids) - {item.id for item in current}
    if missing_ids:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Media not found", "detail": f"Media IDs not in category {category_id}: {sorted(missing_ids)}"}
        )

    requested = set(media_ids)
    final_order = list(media_ids) + [item.id for item in current if item.id not in requested]

    try:
        for position, media_id in enumerate(final_order):
            await db.execute(
                update(PortfolioMedia)
                .where(PortfolioMedia.id == media_id)
                .values(order_index=position)
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("reordering media", e)

    logger.info(f"Reordered {len(media_ids)} media item(s) in category {category_id}")
    return {"message": f"Successfully reordered {len(media_ids)} media items", "count": len(media_ids)}


@router.put("/media/{media_id}", response_model=MediaItemResponse)
async def update_media(
    media_id: int,
    payload: MediaItemUpdate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Update captions, order or type of a media item."""
    item = await _get_or_404(db, PortfolioMedia, media_id, "Media")

    try:
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        await db.commit()
        await db.refresh(item)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("updating media", e)

    logger.info(f"Updated media {media_id}")
    return MediaItemResponse.model_validate(item)


@router.delete("/media/{media_id}")
@limiter.limit(RATE_LIMITS["delete"])
async def delete_media_item(
    request: Request,
    media_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """
    Delete a media item from the database and from Cloudinary.
    A category using the item as its cover loses that cover.

    Raises:
        HTTPException: 428 without confirm=true, 404 if missing, 500 if deletion fails
    """
    require_confirmation(confirm, "the media item")
    item = await _get_or_404(db, PortfolioMedia, media_id, "Media")

    try:
        await delete_media_by_url(item.media_url)
    except CloudinaryError as e:
        # The record is removed anyway; the orphaned asset only costs storage
        logger.error(f"Failed to delete media {media_id} from Cloudinary: {str(e)}", exc_info=True)

    try:
        await db.execute(
            update(PortfolioCategory)
            .where(PortfolioCategory.id == item.category_id)
            .where(PortfolioCategory.main_image_url == item.media_url)
            .values(main_image_url=None)
        )
        await db.delete(item)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("deleting media", e)

    logger.info(f"Deleted media {media_id}")
    return {"message": "Media deleted successfully", "media_id": media_id}


# Sections

@router.get("/sections", response_model=List[SectionResponse])
async def list_sections(
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    result = await db.execute(
        select(SiteSection).order_by(SiteSection.order_index.asc(), SiteSection.id.asc())
    )
    return [SectionResponse.model_validate(section) for section in result.scalars().all()]


@router.put("/sections/{section_id}", response_model=SectionResponse)
async def update_section(
    section_id: int,
    payload: SectionUpdate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Update the texts or image of a site section."""
    section = await _get_or_404(db, SiteSection, section_id, "Section")

    try:
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(section, field, value)
        await db.commit()
        await db.refresh(section)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("updating section", e)

    logger.info(f"Updated section {section.key}")
    return SectionResponse.model_validate(section)


@router.post("/sections/{section_id}/image", response_model=SectionResponse)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_section_image(
    request: Request,
    section_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin)
):
    """Upload and attach a new image to a site section."""
    section = await _get_or_404(db, SiteSection, section_id, "Section")
    uploaded = await _upload_or_fail(file, allowed=(MEDIA_TYPE_IMAGE,))

    section.image_url = uploaded["url"]
    await db.commit()
    await db.refresh(section)

    logger.info(f"Uploaded image for section {section.key}")
    return SectionResponse.model_validate(section)
