"""
Gallery viewer state machine.

The viewer shows one media item at a time from an ordered category
sequence. It is either Closed or Open(index, zoomed); all ephemeral
state lives in a GalleryState owned by the open instance and is dropped
on close, so reopening always starts fresh.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

from portfolio_site.config import settings
from portfolio_site.models import MEDIA_TYPE_VIDEO
from portfolio_site.utils.localization import localized

logger = logging.getLogger(__name__)

KEY_PREVIOUS = "ArrowLeft"
KEY_NEXT = "ArrowRight"
KEY_CLOSE = "Escape"


@dataclass
class GalleryState:
    """Ephemeral state of an open viewer."""
    current_index: int = 0
    is_zoomed: bool = False
    touch_start_x: Optional[float] = None
    touch_end_x: Optional[float] = None


def media_kind(item: Any) -> str:
    if isinstance(item, dict):
        return item.get("media_type") or "image"
    return getattr(item, "media_type", None) or "image"


def _attr(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


class GalleryViewer:
    """
    Modal media viewer over an ordered, non-empty item sequence.

    Items can be ORM rows, pydantic models or dicts exposing id,
    media_url, media_type and the localized title/description columns.
    """

    def __init__(
        self,
        swipe_threshold: Optional[float] = None,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.swipe_threshold = (
            settings.SWIPE_THRESHOLD_PX if swipe_threshold is None else swipe_threshold
        )
        self.on_close = on_close
        self.items: List[Any] = []
        self.label: str = ""
        self.state: Optional[GalleryState] = None

    @property
    def is_open(self) -> bool:
        return self.state is not None

    @property
    def current_item(self) -> Optional[Any]:
        if self.state is None:
            return None
        return self.items[self.state.current_index]

    def open(self, items: Sequence[Any], start_index: int = 0, label: str = "") -> bool:
        """
        Transition Closed -> Open(start_index, False).

        Args:
            items: Ordered media items of one category
            start_index: Initial index, falls back to 0 when out of range
            label: Display label (category name)

        Returns:
            bool: True if the viewer opened, False for an empty sequence
        """
        if not items:
            logger.info(f"Refusing to open gallery '{label}' with no items")
            return False

        self.items = list(items)
        self.label = label
        if not self._valid_index(start_index):
            start_index = 0
        self.state = GalleryState(current_index=start_index)
        logger.debug(f"Gallery '{label}' opened at {start_index}/{len(self.items)}")
        return True

    def close(self) -> None:
        """Transition Open -> Closed and drop all ephemeral state."""
        if self.state is None:
            return
        self.state = None
        self.items = []
        self.label = ""
        if self.on_close is not None:
            self.on_close()

    def next(self) -> None:
        if self.state is None:
            return
        self.state.current_index = (self.state.current_index + 1) % len(self.items)
        self.state.is_zoomed = False

    def previous(self) -> None:
        if self.state is None:
            return
        count = len(self.items)
        self.state.current_index = (self.state.current_index - 1 + count) % count
        self.state.is_zoomed = False

    def jump_to(self, index: int) -> None:
        """Select a thumbnail. Invalid indices are ignored."""
        if self.state is None or not self._valid_index(index):
            return
        self.state.current_index = index
        self.state.is_zoomed = False

    def toggle_zoom(self) -> None:
        # Videos have native controls and are never zoomed
        if self.state is None or media_kind(self.current_item) == MEDIA_TYPE_VIDEO:
            return
        self.state.is_zoomed = not self.state.is_zoomed

    def handle_key(self, key: str) -> None:
        """Dispatch a key-down event."""
        if key == KEY_PREVIOUS:
            self.previous()
        elif key == KEY_NEXT:
            self.next()
        elif key == KEY_CLOSE:
            self.close()

    def touch_start(self, x: float) -> None:
        if self.state is None:
            return
        self.state.touch_start_x = x
        self.state.touch_end_x = None

    def touch_move(self, x: float) -> None:
        if self.state is None:
            return
        self.state.touch_end_x = x

    def touch_end(self) -> None:
        """
        Finish a drag. A net horizontal displacement above the threshold
        navigates: leftward drag -> next, rightward drag -> previous.
        """
        if self.state is None:
            return
        start, end = self.state.touch_start_x, self.state.touch_end_x
        self.state.touch_start_x = None
        self.state.touch_end_x = None
        if start is None or end is None:
            return

        distance = start - end
        if distance > self.swipe_threshold:
            self.next()
        elif distance < -self.swipe_threshold:
            self.previous()

    def render(self, locale: str) -> Optional[Dict[str, Any]]:
        """
        Build the view model of the current item.

        Returns:
            dict: Label, counter, current item and thumbnail strip,
                or None when the viewer is closed
        """
        if self.state is None:
            return None

        item = self.current_item
        kind = media_kind(item)
        index = self.state.current_index
        return {
            "label": self.label,
            "counter": f"{index + 1} / {len(self.items)}",
            "current_index": index,
            "total": len(self.items),
            "item": {
                "id": _attr(item, "id"),
                "media_url": _attr(item, "media_url"),
                "media_type": kind,
                "title": localized(item, "title", locale),
                "description": localized(item, "description", locale),
                "zoomable": kind != MEDIA_TYPE_VIDEO,
                "is_zoomed": self.state.is_zoomed,
            },
            "show_navigation": len(self.items) > 1,
            "thumbnails": [
                {
                    "index": position,
                    "id": _attr(thumb, "id"),
                    "media_url": _attr(thumb, "media_url"),
                    "media_type": media_kind(thumb),
                    "active": position == index,
                }
                for position, thumb in enumerate(self.items)
            ] if len(self.items) > 1 else [],
        }

    def _valid_index(self, index: Any) -> bool:
        return (
            isinstance(index, int)
            and not isinstance(index, bool)
            and 0 <= index < len(self.items)
        )
