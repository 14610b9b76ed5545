"""
Pydantic schemas for request and response data validation.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Any, Dict
import re

from portfolio_site.models import MEDIA_TYPES

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _reject_null(value: Any) -> Any:
    # Partial updates may omit a required column but never null it
    if value is None:
        raise ValueError('Field may be omitted but cannot be null')
    return value


# Categories

class CategoryResponse(BaseModel):
    """Full category record for the CMS."""
    id: int
    name_ru: str
    name_en: str
    slug: str
    main_image_url: Optional[str] = None
    order_index: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryTile(BaseModel):
    """Public category tile: cover (or placeholder glyph) and localized name."""
    id: int
    slug: str
    name: Optional[str] = None
    cover_url: Optional[str] = None
    placeholder: Optional[str] = None
    editable: bool = False


class CategoryCreate(BaseModel):
    name_ru: str = Field(min_length=1)
    name_en: str = Field(min_length=1)
    slug: str
    main_image_url: Optional[str] = None
    order_index: Optional[int] = None

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        v = v.strip().lower()
        if not SLUG_PATTERN.match(v):
            raise ValueError('Slug may only contain lowercase letters, digits and hyphens')
        return v


class CategoryUpdate(BaseModel):
    """Partial category update; omitted fields are left unchanged."""
    name_ru: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    main_image_url: Optional[str] = None
    order_index: Optional[int] = None

    @field_validator('name_ru', 'name_en', 'slug', 'order_index', mode='before')
    @classmethod
    def reject_null(cls, v):
        return _reject_null(v)

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        v = v.strip().lower()
        if not SLUG_PATTERN.match(v):
            raise ValueError('Slug may only contain lowercase letters, digits and hyphens')
        return v


class SetCoverRequest(BaseModel):
    media_id: int


# Media

class MediaItemResponse(BaseModel):
    """Media record as returned by the public and CMS APIs."""
    id: int
    category_id: int
    media_url: str
    title_ru: Optional[str] = None
    title_en: Optional[str] = None
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    order_index: int
    media_type: str

    model_config = ConfigDict(from_attributes=True)


class MediaItemUpdate(BaseModel):
    """Partial media metadata update."""
    title_ru: Optional[str] = None
    title_en: Optional[str] = None
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    order_index: Optional[int] = None
    media_type: Optional[str] = None

    @field_validator('title_ru', 'title_en', 'description_ru', 'description_en')
    @classmethod
    def strip_text(cls, v):
        return _blank_to_none(v)

    @field_validator('order_index', 'media_type', mode='before')
    @classmethod
    def reject_null(cls, v):
        return _reject_null(v)

    @field_validator('media_type')
    @classmethod
    def validate_media_type(cls, v):
        if v not in MEDIA_TYPES:
            raise ValueError(f"media_type must be one of {', '.join(MEDIA_TYPES)}")
        return v


class MediaReorderRequest(BaseModel):
    """Media IDs of one category in the desired display order."""
    media_ids: List[int]

    @field_validator('media_ids')
    @classmethod
    def validate_unique_ids(cls, v):
        if len(v) != len(set(v)):
            raise ValueError('Duplicate media IDs are not allowed')
        return v


class BulkUploadResponse(BaseModel):
    total: int
    success: int
    failed: int
    errors: List[Dict[str, str]] = []
    items: List[MediaItemResponse] = []


# Gallery

class GalleryItemView(BaseModel):
    id: int
    media_url: str
    media_type: str
    title: Optional[str] = None
    description: Optional[str] = None
    zoomable: bool
    is_zoomed: bool


class GalleryThumbnail(BaseModel):
    index: int
    id: int
    media_url: str
    media_type: str
    active: bool


class GalleryView(BaseModel):
    """Rendered state of an open gallery viewer."""
    status: str = "open"
    label: str
    counter: str
    current_index: int
    total: int
    item: GalleryItemView
    show_navigation: bool
    thumbnails: List[GalleryThumbnail] = []


# Sections

class SectionResponse(BaseModel):
    id: int
    key: str
    title_ru: Optional[str] = None
    title_en: Optional[str] = None
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    image_url: Optional[str] = None
    order_index: int

    model_config = ConfigDict(from_attributes=True)


class SectionView(BaseModel):
    """
    Public section rendering. Editable views also carry the raw bilingual
    fields so the editor can prefill its inputs.
    """
    key: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    editable: bool = False
    id: Optional[int] = None
    fields: Optional[Dict[str, Any]] = None


class SectionUpdate(BaseModel):
    title_ru: Optional[str] = None
    title_en: Optional[str] = None
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    image_url: Optional[str] = None
    order_index: Optional[int] = None

    @field_validator('title_ru', 'title_en', 'description_ru', 'description_en', 'image_url')
    @classmethod
    def strip_text(cls, v):
        return _blank_to_none(v)

    @field_validator('order_index', mode='before')
    @classmethod
    def reject_null(cls, v):
        return _reject_null(v)


# Auth

class LoginRequest(BaseModel):
    password: str


class SessionResponse(BaseModel):
    is_admin: bool
