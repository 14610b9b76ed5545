"""
Public portfolio routes: category tiles, media lists, gallery viewer and sections.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Union
import logging

from portfolio_site.database import get_db
from portfolio_site.gallery.picker import CategoryPicker, OUTCOME_EMPTY, OUTCOME_ERROR
from portfolio_site.gallery.store import MediaItemStore, STATUS_ERROR
from portfolio_site.models import PortfolioCategory, SiteSection
from portfolio_site.schemas import CategoryTile, GalleryView, MediaItemResponse, SectionView
from portfolio_site.utils.edit_mode import EditMode, get_edit_mode
from portfolio_site.utils.localization import localized, normalize_locale

logger = logging.getLogger(__name__)

router = APIRouter()

RETRIEVAL_FAILED = {"error": "Failed to load", "detail": "Content could not be loaded, please try again later"}


async def load_categories(db: AsyncSession) -> List[PortfolioCategory]:
    result = await db.execute(
        select(PortfolioCategory).order_by(PortfolioCategory.order_index.asc(), PortfolioCategory.id.asc())
    )
    return list(result.scalars().all())


def render_section(section: SiteSection, locale: str, mode: EditMode) -> SectionView:
    """
    Render a section for the public site.

    One renderer serves both paths: read-only visitors get the localized
    text, editors additionally get the raw bilingual fields and the id
    to submit changes against.
    """
    view = SectionView(
        key=section.key,
        title=localized(section, "title", locale),
        description=localized(section, "description", locale),
        image_url=section.image_url,
        editable=mode.can_edit,
    )
    if mode.can_edit:
        view.id = section.id
        view.fields = {
            "title_ru": section.title_ru,
            "title_en": section.title_en,
            "description_ru": section.description_ru,
            "description_en": section.description_en,
            "image_url": section.image_url,
            "order_index": section.order_index,
        }
    return view


@router.get("/categories", response_model=List[CategoryTile])
async def get_category_tiles(
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    mode: EditMode = Depends(get_edit_mode),
):
    """
    Get category tiles for the portfolio grid.

    Args:
        locale: Requested locale ("ru" or "en")
        db: Database session (injected by FastAPI dependency)
        mode: Edit mode of the request

    Returns:
        List[CategoryTile]: Tiles ordered by order_index

    Raises:
        HTTPException: 502 if categories cannot be retrieved
    """
    try:
        categories = await load_categories(db)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Failed to retrieve categories: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=RETRIEVAL_FAILED)

    picker = CategoryPicker(
        categories, MediaItemStore(db), edit_mode=mode, locale=normalize_locale(locale)
    )
    logger.info(f"Retrieved {len(categories)} categories")
    return [CategoryTile(**tile) for tile in picker.tiles()]


@router.get("/categories/{category_id}/media", response_model=List[MediaItemResponse])
async def get_category_media(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get the ordered media of a category.

    An empty list means the category has no items (or does not exist);
    a retrieval failure is reported as 502 so callers can tell the two apart.
    """
    result = await MediaItemStore(db).fetch(category_id)
    if result.status == STATUS_ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=RETRIEVAL_FAILED)

    return [MediaItemResponse.model_validate(item) for item in result.items]


@router.get("/categories/{category_id}/gallery", response_model=Union[GalleryView, dict])
async def get_category_gallery(
    category_id: int,
    index: int = Query(0, description="Item to show; invalid values fall back to the first item"),
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Render the gallery viewer of a category at the given index.

    Returns:
        GalleryView when the category has media, {"status": "empty"} otherwise

    Raises:
        HTTPException: 502 if media cannot be retrieved
    """
    locale = normalize_locale(locale)
    try:
        categories = await load_categories(db)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Failed to retrieve categories: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=RETRIEVAL_FAILED)

    picker = CategoryPicker(categories, MediaItemStore(db), locale=locale)
    outcome = await picker.activate(category_id, start_index=index)

    if outcome == OUTCOME_ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=RETRIEVAL_FAILED)
    if outcome == OUTCOME_EMPTY:
        return {"status": "empty", "category_id": category_id}

    return GalleryView(**picker.viewer.render(locale))


@router.get("/sections", response_model=List[SectionView])
async def get_sections(
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    mode: EditMode = Depends(get_edit_mode),
):
    """
    Get site sections rendered for the request's locale and edit mode.
    """
    locale = normalize_locale(locale)
    try:
        result = await db.execute(
            select(SiteSection).order_by(SiteSection.order_index.asc(), SiteSection.id.asc())
        )
        sections = result.scalars().all()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Failed to retrieve sections: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=RETRIEVAL_FAILED)

    return [render_section(section, locale, mode) for section in sections]
