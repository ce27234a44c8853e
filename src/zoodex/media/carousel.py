"""Gallery construction and the modal image viewer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from zoodex.processing.accessor import get

logger = logging.getLogger(__name__)

GALLERY_FIELDS: Tuple[str, ...] = ("imagens.foto_1", "imagens.foto_2")
CARD_FIELDS: Tuple[str, ...] = ("imagens.front", "imagens.back")

ESCAPE_KEY = "Escape"

KeyListener = Callable[[str], None]


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _record_data(record: Any) -> Any:
    return getattr(record, "data", record)


def build_gallery(record: Any, fields: Sequence[str] = GALLERY_FIELDS) -> List[str]:
    """Image URLs from ``fields`` in declaration order, first occurrence only."""
    if record is None:
        return []
    data = _record_data(record)
    seen = set()
    gallery: List[str] = []
    for path in fields:
        url = get(data, path, "")
        if _is_url(url) and url not in seen:
            seen.add(url)
            gallery.append(url)
    return gallery


def card_images(record: Any) -> List[str]:
    """Front and back card faces; these open as single-image views."""
    return build_gallery(record, CARD_FIELDS)


@dataclass(frozen=True)
class CarouselState:
    """``index == -1`` means the viewer is closed."""

    images: Tuple[str, ...] = ()
    index: int = -1

    @property
    def is_open(self) -> bool:
        return self.index != -1

    @property
    def current(self) -> Optional[str]:
        if 0 <= self.index < len(self.images):
            return self.images[self.index]
        return None

    @property
    def can_navigate(self) -> bool:
        return self.is_open and len(self.images) > 1


CLOSED = CarouselState()


def open_viewer(state: CarouselState, clicked_url: Any, gallery: Sequence[str]) -> CarouselState:
    """Open on ``clicked_url``: the whole gallery if it belongs there, else just that image."""
    images = tuple(gallery or ())
    if clicked_url in images:
        return CarouselState(images=images, index=images.index(clicked_url))
    if _is_url(clicked_url):
        return CarouselState(images=(clicked_url,), index=0)
    return state


def close_viewer(state: CarouselState = CLOSED) -> CarouselState:
    return CLOSED


def next_image(state: CarouselState) -> CarouselState:
    if not state.can_navigate:
        return state
    return CarouselState(images=state.images, index=(state.index + 1) % len(state.images))


def previous_image(state: CarouselState) -> CarouselState:
    if not state.can_navigate:
        return state
    length = len(state.images)
    return CarouselState(images=state.images, index=(state.index - 1 + length) % length)


class KeyEventSource:
    """In-process keyboard event dispatcher."""

    def __init__(self) -> None:
        self._listeners: List[KeyListener] = []

    def add_listener(self, listener: KeyListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: KeyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)


@dataclass
class MediaViewer:
    """Modal viewer over one record's images.

    The Escape listener is attached when the viewer opens and detached when it
    closes or the viewer is torn down, so repeated open/close cycles never leave
    more than one listener behind.
    """

    record: Any
    events: KeyEventSource = field(default_factory=KeyEventSource)
    state: CarouselState = CLOSED
    gallery: List[str] = field(init=False)
    _listening: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.gallery = build_gallery(self.record)
        self._sync_listener()

    def __enter__(self) -> "MediaViewer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.teardown()

    def _on_key(self, key: str) -> None:
        if key == ESCAPE_KEY and self.state.is_open:
            logger.debug("Escape pressed; closing viewer")
            self.close()

    def _sync_listener(self) -> None:
        if self.state.is_open and not self._listening:
            self.events.add_listener(self._on_key)
            self._listening = True
        elif not self.state.is_open and self._listening:
            self.events.remove_listener(self._on_key)
            self._listening = False

    def open(self, clicked_url: Any) -> CarouselState:
        self.state = open_viewer(self.state, clicked_url, self.gallery)
        self._sync_listener()
        return self.state

    def close(self) -> CarouselState:
        self.state = close_viewer(self.state)
        self._sync_listener()
        return self.state

    def click_backdrop(self) -> CarouselState:
        return self.close()

    def next(self) -> CarouselState:
        self.state = next_image(self.state)
        return self.state

    def previous(self) -> CarouselState:
        self.state = previous_image(self.state)
        return self.state

    def teardown(self) -> None:
        if self._listening:
            self.events.remove_listener(self._on_key)
            self._listening = False
