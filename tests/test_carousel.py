"""Unit tests for gallery construction and the image viewer."""

import pytest

from zoodex.media.carousel import (
    CLOSED,
    ESCAPE_KEY,
    CarouselState,
    KeyEventSource,
    MediaViewer,
    build_gallery,
    card_images,
    close_viewer,
    next_image,
    open_viewer,
    previous_image,
)
from zoodex.processing.records import process_all

FOTO_1 = "https://img.example/foto_1.jpg"
FOTO_2 = "https://img.example/foto_2.jpg"
FRONT = "https://img.example/front.png"
GALLERY = ("https://img.example/a.jpg", "https://img.example/b.jpg", "https://img.example/c.jpg")


def record_with(**images):
    return process_all([{"codigo": 1, "nome_tazo": "Gorila", "imagens": images}]).records[0]


class TestBuildGallery:

    def test_declaration_order(self):
        assert build_gallery(record_with(foto_2=FOTO_2, foto_1=FOTO_1)) == [FOTO_1, FOTO_2]

    def test_duplicate_url_appears_once(self):
        assert build_gallery(record_with(foto_1=FOTO_1, foto_2=FOTO_1)) == [FOTO_1]

    @pytest.mark.parametrize("value", ["", "   ", None, 42, ["x"]])
    def test_skips_blank_or_non_string(self, value):
        assert build_gallery(record_with(foto_1=value, foto_2=FOTO_2)) == [FOTO_2]

    def test_missing_images(self):
        assert build_gallery(record_with()) == []
        assert build_gallery(None) == []
        assert build_gallery({"imagens": "nope"}) == []

    def test_accepts_raw_mapping(self):
        assert build_gallery({"imagens": {"foto_1": FOTO_1}}) == [FOTO_1]

    def test_card_faces_are_not_gallery_images(self):
        record = record_with(front=FRONT, foto_1=FOTO_1)
        assert build_gallery(record) == [FOTO_1]
        assert card_images(record) == [FRONT]


class TestTransitions:

    def test_open_from_gallery(self):
        state = open_viewer(CLOSED, GALLERY[1], GALLERY)
        assert state == CarouselState(images=GALLERY, index=1)
        assert state.current == GALLERY[1]

    def test_open_non_gallery_image_is_singleton(self):
        state = open_viewer(CLOSED, FRONT, GALLERY)
        assert state == CarouselState(images=(FRONT,), index=0)
        assert not state.can_navigate
        assert next_image(state) is state

    @pytest.mark.parametrize("url", ["", "  ", None, 3])
    def test_open_with_invalid_url_is_noop(self, url):
        assert open_viewer(CLOSED, url, GALLERY) is CLOSED

    def test_close(self):
        state = open_viewer(CLOSED, GALLERY[0], GALLERY)
        closed = close_viewer(state)
        assert closed.index == -1
        assert closed.images == ()
        assert not closed.is_open

    def test_wraparound(self):
        state = open_viewer(CLOSED, GALLERY[0], GALLERY)
        for _ in range(3):
            state = next_image(state)
        assert state.index == 0
        assert previous_image(state).index == 2

    def test_navigation_while_closed_is_noop(self):
        assert next_image(CLOSED) is CLOSED
        assert previous_image(CLOSED) is CLOSED


class TestKeyEventSource:

    def test_dispatch_and_remove(self):
        events = KeyEventSource()
        received = []
        events.add_listener(received.append)
        events.dispatch("a")
        events.remove_listener(received.append)
        events.remove_listener(received.append)
        events.dispatch("b")
        assert received == ["a"]
        assert events.listener_count == 0


class TestMediaViewer:

    @pytest.fixture
    def viewer(self):
        return MediaViewer(record_with(foto_1=FOTO_1, foto_2=FOTO_2, front=FRONT))

    def test_listener_only_while_open(self, viewer):
        assert viewer.events.listener_count == 0
        viewer.open(FOTO_1)
        assert viewer.events.listener_count == 1
        viewer.close()
        assert viewer.events.listener_count == 0

    def test_escape_closes(self, viewer):
        viewer.open(FOTO_2)
        viewer.events.dispatch(ESCAPE_KEY)
        assert viewer.state.index == -1
        assert viewer.events.listener_count == 0

    def test_escape_while_closed_is_noop(self, viewer):
        viewer.events.dispatch(ESCAPE_KEY)
        assert viewer.state is CLOSED

    def test_other_keys_ignored(self, viewer):
        viewer.open(FOTO_1)
        viewer.events.dispatch("ArrowRight")
        assert viewer.state.is_open

    def test_repeated_cycles_do_not_accumulate_listeners(self, viewer):
        for _ in range(5):
            viewer.open(FOTO_1)
            viewer.open(FOTO_2)
            assert viewer.events.listener_count == 1
            viewer.events.dispatch(ESCAPE_KEY)
        assert viewer.events.listener_count == 0

    def test_navigation_does_not_close(self, viewer):
        viewer.open(FOTO_1)
        assert viewer.next().index == 1
        assert viewer.next().index == 0
        assert viewer.previous().index == 1
        assert viewer.state.is_open
        assert viewer.events.listener_count == 1

    def test_backdrop_click_closes(self, viewer):
        viewer.open(FRONT)
        assert viewer.state.images == (FRONT,)
        viewer.click_backdrop()
        assert not viewer.state.is_open

    def test_teardown_detaches_listener(self):
        events = KeyEventSource()
        with MediaViewer(record_with(foto_1=FOTO_1), events=events) as viewer:
            viewer.open(FOTO_1)
            assert events.listener_count == 1
        assert events.listener_count == 0

    def test_shared_event_source(self):
        events = KeyEventSource()
        first = MediaViewer(record_with(foto_1=FOTO_1), events=events)
        second = MediaViewer(record_with(foto_1=FOTO_2), events=events)
        first.open(FOTO_1)
        second.open(FOTO_2)
        assert events.listener_count == 2
        events.dispatch(ESCAPE_KEY)
        assert not first.state.is_open and not second.state.is_open
        assert events.listener_count == 0

    def test_constructed_open_listens_for_escape(self):
        events = KeyEventSource()
        viewer = MediaViewer(record_with(foto_1=FOTO_1), events=events, state=CarouselState(images=(FOTO_1,), index=0))
        assert events.listener_count == 1
        events.dispatch(ESCAPE_KEY)
        assert not viewer.state.is_open
        assert events.listener_count == 0
