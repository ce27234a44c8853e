"""Static display labels: languages, IUCN categories and their colours."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from zoodex.processing.accessor import get, is_empty

LANGUAGE_LABELS: Dict[str, str] = {
    "pt": "Português (Brasil)",
    "en": "Inglês (English)",
    "es": "Espanhol (Español)",
    "fr": "Francês (Français)",
    "de": "Alemão (Deutsch)",
}

IUCN_LABELS: Dict[str, str] = {
    "EX": "Extinct",
    "EW": "Extinct in the Wild",
    "CR": "Critically Endangered",
    "EN": "Endangered",
    "VU": "Vulnerable",
    "NT": "Near Threatened",
    "LC": "Least Concern",
    "DD": "Data Deficient",
    "NE": "Not Evaluated",
}

EXTINCTION_COLORS: Dict[str, str] = {
    "lc": "#AED581",
    "nt": "#DCE775",
    "vu": "#FFEE58",
    "en": "#FFA726",
    "cr": "#EF5350",
    "ew": "#7E57C2",
    "ex": "#616161",
    "dd": "#BDBDBD",
    "ne": "#E0E0E0",
}
DEFAULT_EXTINCTION_COLOR = "#CCCCCC"


def language_label(code: str) -> str:
    return LANGUAGE_LABELS.get(code, code.upper())


def common_names(record: Any) -> Dict[str, str]:
    """Common names keyed by display language; list values are joined."""
    names = get(getattr(record, "data", record), "nome_comum", {})
    if not isinstance(names, Mapping):
        return {}
    labelled: Dict[str, str] = {}
    for code, name in names.items():
        if is_empty(name):
            continue
        if isinstance(name, list):
            name = ", ".join(str(n) for n in name if not is_empty(n))
        labelled[language_label(str(code))] = str(name)
    return labelled


def category_label(category: str) -> str:
    return IUCN_LABELS.get(str(category).strip().upper(), "Unknown")


def extinction_color(category: Any) -> str:
    return EXTINCTION_COLORS.get(str(category).strip().lower(), DEFAULT_EXTINCTION_COLOR)
