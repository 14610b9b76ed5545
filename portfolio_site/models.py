"""
SQLAlchemy models for the portfolio site.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portfolio_site.database import Base

MEDIA_TYPE_IMAGE = "image"
MEDIA_TYPE_VIDEO = "video"
MEDIA_TYPES = (MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO)

# Fixed set of editable site sections, in display order
SECTION_KEYS = ("about", "formats", "prices", "why-me", "process", "contacts")


class PortfolioCategory(Base):
    """
    Portfolio category (a themed group of media shown as a tile).
    Names are stored per locale; main_image_url is the optional cover.
    """
    __tablename__ = "portfolio_categories"

    id = Column(Integer, primary_key=True, index=True)
    name_ru = Column(String, nullable=False)
    name_en = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    main_image_url = Column(String, nullable=True)
    order_index = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    media = relationship(
        "PortfolioMedia",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PortfolioMedia(Base):
    """
    Single image or video belonging to a category.
    Display order is order_index, then id (insertion order).
    """
    __tablename__ = "portfolio_media"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(
        Integer,
        ForeignKey("portfolio_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    media_url = Column(String, nullable=False)
    title_ru = Column(String, nullable=True)
    title_en = Column(String, nullable=True)
    description_ru = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0, index=True)
    media_type = Column(String(16), nullable=False, default=MEDIA_TYPE_IMAGE)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("PortfolioCategory", back_populates="media")


class SiteSection(Base):
    """Editable text block of the public site (about, prices, contacts, ...)."""
    __tablename__ = "site_sections"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, nullable=False, unique=True, index=True)
    title_ru = Column(String, nullable=True)
    title_en = Column(String, nullable=True)
    description_ru = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    order_index = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
