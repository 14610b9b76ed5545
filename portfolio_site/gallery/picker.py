"""
Category picker: category tiles and the fetch-then-open gallery flow.
"""
from typing import Any, Dict, List, Optional, Protocol, Sequence
import logging

from portfolio_site.gallery.store import MediaFetchResult, STATUS_ERROR, STATUS_EMPTY
from portfolio_site.gallery.viewer import GalleryViewer
from portfolio_site.utils.edit_mode import EditMode, READ_ONLY
from portfolio_site.utils.localization import localized

logger = logging.getLogger(__name__)

PLACEHOLDER_GLYPH = "\U0001F5BC"  # framed picture

OUTCOME_OPEN = "open"
OUTCOME_EMPTY = STATUS_EMPTY
OUTCOME_ERROR = STATUS_ERROR
OUTCOME_STALE = "stale"


class MediaSource(Protocol):
    async def fetch(self, category_id: int) -> MediaFetchResult:
        ...


class CategoryPicker:
    """
    Grid of category tiles that opens a gallery viewer for a chosen category.

    Fetch results are cached per category id. Only the response for the
    most recent selection is applied; a late response for an earlier
    selection is cached and otherwise ignored.
    """

    def __init__(
        self,
        categories: Sequence[Any],
        store: MediaSource,
        viewer: Optional[GalleryViewer] = None,
        edit_mode: EditMode = READ_ONLY,
        locale: str = "ru",
    ):
        self.categories = list(categories)
        self.store = store
        self.viewer = viewer if viewer is not None else GalleryViewer()
        self.edit_mode = edit_mode
        self.locale = locale
        self.cache: Dict[int, MediaFetchResult] = {}
        self.selected_category_id: Optional[int] = None
        self.displayed_items: List[Any] = []
        self.notice: Optional[str] = None
        self._selection_token = 0

    def tiles(self) -> List[Dict[str, Any]]:
        """One tile per category: cover (or placeholder glyph) and localized name."""
        return [
            {
                "id": category.id,
                "slug": category.slug,
                "name": localized(category, "name", self.locale),
                "cover_url": category.main_image_url,
                "placeholder": None if category.main_image_url else PLACEHOLDER_GLYPH,
                "editable": self.edit_mode.can_edit,
            }
            for category in self.categories
        ]

    def category_label(self, category_id: int) -> str:
        for category in self.categories:
            if category.id == category_id:
                return localized(category, "name", self.locale) or ""
        return ""

    async def activate(self, category_id: int, start_index: int = 0, refresh: bool = False) -> str:
        """
        Select a category, fetch its media, then open the viewer.

        The viewer stays closed until the items have arrived, and stays
        closed for an empty category or a failed retrieval. A category
        fetched before is served from the cache unless refresh is set;
        failed retrievals are never cached.

        Args:
            category_id: Category to open
            start_index: Initial viewer index
            refresh: Ignore the cached result and fetch again

        Returns:
            str: "open", "empty", "error", or "stale" when a newer
                selection superseded this one while it was in flight
        """
        self._selection_token += 1
        token = self._selection_token
        self.viewer.close()
        self.selected_category_id = category_id
        self.displayed_items = []
        self.notice = None

        cached = None if refresh else self.cache.get(category_id)
        if cached is not None:
            return self._apply(category_id, cached, start_index)

        try:
            result = await self.store.fetch(category_id)
        except Exception as e:
            logger.error(f"Media source failed for category {category_id}: {str(e)}", exc_info=True)
            result = MediaFetchResult.failure(category_id, "Failed to load media items")

        if result.status != STATUS_ERROR:
            self.cache[category_id] = result

        if token != self._selection_token or self.selected_category_id != category_id:
            logger.debug(f"Discarding stale media response for category {category_id}")
            return OUTCOME_STALE

        return self._apply(category_id, result, start_index)

    def _apply(self, category_id: int, result: MediaFetchResult, start_index: int) -> str:
        if result.status == STATUS_ERROR:
            self.notice = OUTCOME_ERROR
            return OUTCOME_ERROR

        if not result.items:
            self.notice = OUTCOME_EMPTY
            return OUTCOME_EMPTY

        self.displayed_items = list(result.items)
        self.viewer.open(self.displayed_items, start_index, self.category_label(category_id))
        return OUTCOME_OPEN

    def deselect(self) -> None:
        self._selection_token += 1
        self.viewer.close()
        self.selected_category_id = None
        self.displayed_items = []
        self.notice = None
