"""
Media item store: ordered media of a category from the database.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_site.models import PortfolioMedia

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"


@dataclass
class MediaFetchResult:
    """
    Outcome of a media retrieval.
    "empty" (no items) and "error" (retrieval failed) are distinct states.
    """
    category_id: int
    status: str
    items: List[PortfolioMedia] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def from_items(cls, category_id: int, items: List[PortfolioMedia]) -> "MediaFetchResult":
        return cls(
            category_id=category_id,
            status=STATUS_OK if items else STATUS_EMPTY,
            items=list(items),
        )

    @classmethod
    def failure(cls, category_id: int, error: str) -> "MediaFetchResult":
        return cls(category_id=category_id, status=STATUS_ERROR, error=error)


def media_query(category_id: int):
    """Ordered media query for one category: order_index ASC, id ASC."""
    return (
        select(PortfolioMedia)
        .where(PortfolioMedia.category_id == category_id)
        .order_by(PortfolioMedia.order_index.asc(), PortfolioMedia.id.asc())
    )


class MediaItemStore:
    """Fetches media items per category using one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch(self, category_id: int) -> MediaFetchResult:
        """
        Retrieve the ordered media of a category.

        A category without items, or one that does not exist, yields an
        "empty" result. Database failures yield an "error" result and are
        not retried.

        Args:
            category_id: Category identifier

        Returns:
            MediaFetchResult: ok/empty/error outcome with ordered items
        """
        try:
            result = await self.db.execute(media_query(category_id))
            items = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load media for category {category_id}: {str(e)}", exc_info=True)
            return MediaFetchResult.failure(category_id, "Failed to load media items")

        logger.info(f"Retrieved {len(items)} media items for category {category_id}")
        return MediaFetchResult.from_items(category_id, items)
