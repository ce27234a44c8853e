"""Filter, sort and paginate the processed dataset.

The pure functions :func:`apply_filter`, :func:`apply_sort` and :func:`paginate`
do the work; :class:`CatalogPipeline` owns the :class:`ViewState` and enforces the
rule that any change of search term or sort key sends the view back to page 1.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from zoodex.ingest.models import ProcessedRecord
from zoodex.processing.text import collation_key, contains_term

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 8


class SortKey(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    RISK_ASC = "risk-asc"
    RISK_DESC = "risk-desc"
    CODE_ASC = "codigo-asc"
    CODE_DESC = "codigo-desc"


DEFAULT_SORT = SortKey.CODE_ASC

_SORT_FIELDS: Dict[SortKey, Tuple[Callable[[ProcessedRecord], object], bool]] = {
    SortKey.NAME_ASC: (lambda r: collation_key(r.common_name), False),
    SortKey.NAME_DESC: (lambda r: collation_key(r.common_name), True),
    SortKey.RISK_ASC: (lambda r: r.risk_rank, False),
    SortKey.RISK_DESC: (lambda r: r.risk_rank, True),
    SortKey.CODE_ASC: (lambda r: r.code, False),
    SortKey.CODE_DESC: (lambda r: r.code, True),
}


def parse_sort_key(key: Union[SortKey, str, None]) -> Optional[SortKey]:
    """Return the matching :class:`SortKey`, or None for an unrecognized value."""
    if isinstance(key, SortKey):
        return key
    try:
        return SortKey(key)
    except ValueError:
        return None


def apply_filter(dataset: Sequence[ProcessedRecord], term: Optional[str]) -> List[ProcessedRecord]:
    """Records whose common or scientific name contains ``term``, ignoring case.

    Always computed from the full ``dataset``; a blank term keeps everything.
    """
    needle = term.strip().casefold() if isinstance(term, str) else ""
    if not needle:
        return list(dataset)
    return [
        record
        for record in dataset
        if contains_term(record.common_name, needle) or contains_term(record.scientific_name, needle)
    ]


def apply_sort(records: Sequence[ProcessedRecord], key: Union[SortKey, str, None]) -> List[ProcessedRecord]:
    """Stable sort by one of the six :class:`SortKey` values.

    Unknown keys fall back to ascending code with a warning.
    """
    sort_key = parse_sort_key(key)
    if sort_key is None:
        logger.warning("Unknown sort key %r; falling back to %s", key, DEFAULT_SORT.value)
        sort_key = DEFAULT_SORT
    extract, descending = _SORT_FIELDS[sort_key]
    return sorted(records, key=extract, reverse=descending)


def total_pages_for(count: int, page_size: int) -> int:
    if count <= 0 or page_size <= 0:
        return 0
    return math.ceil(count / page_size)


@dataclass(frozen=True)
class Page:
    """One slice of the current view."""

    items: List[ProcessedRecord]
    page_number: int
    page_size: int
    total_pages: int
    total_items: int

    @property
    def is_empty(self) -> bool:
        return not self.items


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def paginate(records: Sequence[ProcessedRecord], page_number: int, page_size: int) -> Page:
    """Slice ``records`` into page ``page_number`` (1-based).

    Does not clamp: a page beyond ``total_pages`` is simply empty.
    """
    if not _is_count(page_number) or not _is_count(page_size):
        logger.warning("Invalid page request: page %r, size %r", page_number, page_size)
        return Page(items=[], page_number=page_number, page_size=page_size, total_pages=0, total_items=len(records))
    total_pages = total_pages_for(len(records), page_size)
    if page_size <= 0 or page_number < 1:
        items: List[ProcessedRecord] = []
    else:
        start = (page_number - 1) * page_size
        items = list(records[start : start + page_size])
    return Page(
        items=items,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages,
        total_items=len(records),
    )


@dataclass(frozen=True)
class ViewState:
    search_term: str = ""
    sort_key: str = DEFAULT_SORT.value
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.page_number < 1:
            raise ValueError("page_number must be at least 1")


def set_search_term(state: ViewState, term: str) -> ViewState:
    """New state for ``term``; resets to page 1 when the term changes."""
    term = term or ""
    if term == state.search_term:
        return state
    return replace(state, search_term=term, page_number=1)


def set_sort_key(state: ViewState, key: Union[SortKey, str]) -> ViewState:
    """New state for ``key``; resets to page 1 when the key changes."""
    value = key.value if isinstance(key, SortKey) else str(key)
    if value == state.sort_key:
        return state
    return replace(state, sort_key=value, page_number=1)


def go_to_page(state: ViewState, requested: int, total_pages: int) -> ViewState:
    """Accept ``requested`` only when it lies within ``1..total_pages``."""
    if isinstance(requested, bool) or not isinstance(requested, int) or not 1 <= requested <= total_pages:
        logger.warning("Rejected navigation to page %r; total pages: %d", requested, total_pages)
        return state
    return replace(state, page_number=requested)


@dataclass
class CatalogPipeline:
    """Owns the view state over an immutable dataset."""

    dataset: Sequence[ProcessedRecord]
    state: ViewState = field(default_factory=ViewState)
    _view: List[ProcessedRecord] = field(init=False, repr=False)
    _by_id: Dict[str, ProcessedRecord] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.dataset = tuple(self.dataset)
        self._by_id = {record.id: record for record in self.dataset}
        self._refresh()

    @classmethod
    def from_settings(cls, dataset: Sequence[ProcessedRecord], page_size: int, default_sort: str) -> "CatalogPipeline":
        return cls(dataset, ViewState(sort_key=default_sort, page_size=page_size))

    def _refresh(self) -> None:
        filtered = apply_filter(self.dataset, self.state.search_term)
        self._view = apply_sort(filtered, self.state.sort_key)

    @property
    def view(self) -> List[ProcessedRecord]:
        return list(self._view)

    @property
    def total_pages(self) -> int:
        return total_pages_for(len(self._view), self.state.page_size)

    def set_search_term(self, term: str) -> None:
        new_state = set_search_term(self.state, term)
        if new_state is not self.state:
            self.state = new_state
            self._refresh()

    def set_sort_key(self, key: Union[SortKey, str]) -> None:
        new_state = set_sort_key(self.state, key)
        if new_state is not self.state:
            self.state = new_state
            self._refresh()

    def request_page(self, requested: int) -> bool:
        """Move to page ``requested``; returns False and keeps the state when out of range."""
        new_state = go_to_page(self.state, requested, self.total_pages)
        if new_state is self.state:
            return False
        self.state = new_state
        return True

    def next_page(self) -> bool:
        return self.request_page(self.state.page_number + 1)

    def previous_page(self) -> bool:
        return self.request_page(self.state.page_number - 1)

    @property
    def has_next(self) -> bool:
        return self.state.page_number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.state.page_number > 1

    def current_page(self) -> Page:
        return paginate(self._view, self.state.page_number, self.state.page_size)

    def page_numbers(self) -> List[int]:
        """Page links to offer; none at all when there is a single page or less."""
        total = self.total_pages
        if total <= 1:
            return []
        return list(range(1, total + 1))

    def find_by_id(self, record_id: str) -> Optional[ProcessedRecord]:
        return self._by_id.get(str(record_id))

    def random_record(self, rng: Optional[random.Random] = None) -> Optional[ProcessedRecord]:
        if not self.dataset:
            return None
        return (rng or random).choice(self.dataset)
