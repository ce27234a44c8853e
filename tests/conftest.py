from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from zoodex.config import get_settings
from zoodex.ingest.models import ProcessedRecord
from zoodex.processing.records import process_all

NAMES = [
    ("Jaguatirica", "Leopardus pardalis", "LC"),
    ("Tigre-Siberiano", "Panthera tigris", "EN"),
    ("Gorila", "Gorilla gorilla", "CR"),
    ("Urso-marrom", "Ursus arctos", "LC"),
    ("Macaco-aranha", "Ateles geoffroyi", "EN"),
    ("Onça-pintada", "Panthera onca", "NT"),
    ("Arara-azul", "Anodorhynchus hyacinthinus", "VU"),
    ("Lobo-guará", "Chrysocyon brachyurus", "NT"),
    ("Ararinha-azul", "Cyanopsitta spixii", "EW"),
    ("Peixe-boi", "Trichechus manatus", "VU"),
]


def make_raw(
    code: Optional[int],
    common: str = "",
    scientific: str = "",
    category: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    raw: Dict[str, Any] = {"nome_tazo": common, "nome_cientifico": scientific}
    if code is not None:
        raw["codigo"] = code
    if category is not None:
        raw["nivel_extincao"] = {"categoria": category}
    raw.update(extra)
    return raw


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("ZOODEX_DATA_PATH", "ZOODEX_PAGE_SIZE", "ZOODEX_DEFAULT_SORT", "ZOODEX_STRICT_IDS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def raw_records() -> List[Dict[str, Any]]:
    """Ten records, deliberately stored out of code order."""
    order = [3, 1, 2, 10, 7, 5, 4, 9, 6, 8]
    return [make_raw(code, *NAMES[code - 1]) for code in order]


@pytest.fixture
def dataset(raw_records) -> List[ProcessedRecord]:
    return process_all(raw_records).records
