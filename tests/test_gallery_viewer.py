"""Unit tests for the gallery viewer state machine."""

import pytest

from portfolio_site.gallery.viewer import GalleryViewer
from factories import media_dict


@pytest.fixture
def items():
    return [media_dict(1), media_dict(2), media_dict(3, media_type="video"), media_dict(4)]


@pytest.fixture
def viewer(items):
    viewer = GalleryViewer(swipe_threshold=50)
    assert viewer.open(items, label="Portraits")
    return viewer


class TestOpenClose:
    def test_open_starts_at_given_index_unzoomed(self, items):
        viewer = GalleryViewer()
        assert viewer.open(items, start_index=2, label="Portraits")
        assert viewer.is_open
        assert viewer.state.current_index == 2
        assert viewer.state.is_zoomed is False

    def test_open_with_no_items_stays_closed(self):
        viewer = GalleryViewer()
        assert viewer.open([], label="Empty") is False
        assert not viewer.is_open
        assert viewer.render("en") is None
        assert viewer.current_item is None

    def test_out_of_range_start_index_falls_back_to_first(self, items):
        viewer = GalleryViewer()
        viewer.open(items, start_index=10)
        assert viewer.state.current_index == 0

    def test_close_discards_state_and_notifies(self, items):
        closed = []
        viewer = GalleryViewer(on_close=lambda: closed.append(True))
        viewer.open(items, start_index=1)
        viewer.toggle_zoom()
        viewer.close()
        assert not viewer.is_open
        assert viewer.items == []
        assert closed == [True]

    def test_reopen_starts_fresh(self, viewer, items):
        viewer.next()
        viewer.toggle_zoom()
        viewer.close()
        viewer.open(items, start_index=0)
        assert viewer.state.current_index == 0
        assert viewer.state.is_zoomed is False

    def test_operations_on_closed_viewer_are_noops(self):
        viewer = GalleryViewer()
        viewer.next()
        viewer.previous()
        viewer.jump_to(1)
        viewer.toggle_zoom()
        viewer.touch_start(100)
        viewer.touch_end()
        viewer.close()
        assert not viewer.is_open


class TestNavigation:
    def test_next_n_times_returns_to_start(self, viewer, items):
        viewer.jump_to(1)
        for _ in range(len(items)):
            viewer.next()
        assert viewer.state.current_index == 1

    def test_next_wraps_around(self, viewer, items):
        viewer.jump_to(len(items) - 1)
        viewer.next()
        assert viewer.state.current_index == 0

    def test_previous_wraps_around(self, viewer, items):
        viewer.previous()
        assert viewer.state.current_index == len(items) - 1

    def test_navigation_resets_zoom(self, viewer):
        viewer.toggle_zoom()
        viewer.next()
        assert viewer.state.is_zoomed is False
        viewer.toggle_zoom()
        viewer.previous()
        assert viewer.state.is_zoomed is False

    def test_single_item_navigation_stays_put(self):
        viewer = GalleryViewer()
        viewer.open([media_dict(1)])
        viewer.next()
        viewer.previous()
        assert viewer.state.current_index == 0

    def test_jump_to_sets_index_and_resets_zoom(self, viewer):
        viewer.toggle_zoom()
        viewer.jump_to(3)
        assert viewer.state.current_index == 3
        assert viewer.state.is_zoomed is False

    @pytest.mark.parametrize("index", [-1, 4, 100, "2", None, True])
    def test_jump_to_invalid_index_is_noop(self, viewer, index):
        viewer.jump_to(1)
        viewer.toggle_zoom()
        viewer.jump_to(index)
        assert viewer.state.current_index == 1
        assert viewer.state.is_zoomed is True


class TestZoom:
    def test_toggle_zoom_on_image(self, viewer):
        viewer.toggle_zoom()
        assert viewer.state.is_zoomed is True
        viewer.toggle_zoom()
        assert viewer.state.is_zoomed is False

    def test_toggle_zoom_on_video_has_no_effect(self, viewer):
        viewer.jump_to(2)
        viewer.toggle_zoom()
        assert viewer.state.is_zoomed is False
        assert viewer.render("en")["item"]["zoomable"] is False


class TestKeyboard:
    def test_arrow_keys_navigate(self, viewer):
        viewer.handle_key("ArrowRight")
        assert viewer.state.current_index == 1
        viewer.handle_key("ArrowLeft")
        viewer.handle_key("ArrowLeft")
        assert viewer.state.current_index == 3

    def test_escape_closes(self, viewer):
        viewer.handle_key("Escape")
        assert not viewer.is_open

    def test_other_keys_ignored(self, viewer):
        viewer.handle_key("Enter")
        viewer.handle_key("a")
        assert viewer.state.current_index == 0
        assert viewer.is_open


class TestTouch:
    def _drag(self, viewer, start, end):
        viewer.touch_start(start)
        viewer.touch_move(end)
        viewer.touch_end()

    def test_drag_of_49px_does_not_navigate(self, viewer):
        self._drag(viewer, 200, 151)
        assert viewer.state.current_index == 0
        self._drag(viewer, 200, 249)
        assert viewer.state.current_index == 0

    def test_drag_of_exactly_threshold_does_not_navigate(self, viewer):
        self._drag(viewer, 200, 150)
        assert viewer.state.current_index == 0

    def test_leftward_drag_of_51px_goes_next(self, viewer):
        self._drag(viewer, 200, 149)
        assert viewer.state.current_index == 1

    def test_rightward_drag_of_51px_goes_previous(self, viewer, items):
        self._drag(viewer, 200, 251)
        assert viewer.state.current_index == len(items) - 1

    def test_tap_without_move_does_not_navigate(self, viewer):
        viewer.touch_start(200)
        viewer.touch_end()
        assert viewer.state.current_index == 0

    def test_touch_start_at_zero_still_counts(self, viewer):
        self._drag(viewer, 0, 60)
        assert viewer.state.current_index == 3

    def test_touch_coordinates_cleared_after_release(self, viewer):
        self._drag(viewer, 200, 100)
        assert viewer.state.touch_start_x is None
        assert viewer.state.touch_end_x is None
        # A stale end position must not combine with a new start
        viewer.touch_start(300)
        viewer.touch_end()
        assert viewer.state.current_index == 1


class TestRender:
    def test_render_current_item(self, viewer):
        viewer.next()
        view = viewer.render("en")
        assert view["label"] == "Portraits"
        assert view["counter"] == "2 / 4"
        assert view["item"]["id"] == 2
        assert view["item"]["title"] == "Work 2"
        assert view["item"]["media_type"] == "image"
        assert view["item"]["zoomable"] is True
        assert view["show_navigation"] is True

    def test_render_uses_requested_locale(self, viewer):
        assert viewer.render("ru")["item"]["title"] == "Работа 1"

    def test_thumbnail_strip_marks_active(self, viewer):
        viewer.jump_to(3)
        thumbs = viewer.render("en")["thumbnails"]
        assert [t["active"] for t in thumbs] == [False, False, False, True]
        assert [t["index"] for t in thumbs] == [0, 1, 2, 3]

    def test_single_item_has_no_navigation_or_thumbnails(self):
        viewer = GalleryViewer()
        viewer.open([media_dict(7)], label="Solo")
        view = viewer.render("en")
        assert view["show_navigation"] is False
        assert view["thumbnails"] == []
        assert view["counter"] == "1 / 1"
