"""Text helpers shared by record processing and catalog search."""
from __future__ import annotations

import re
import unicodedata
from typing import Optional, Tuple

WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def slugify_name(name: str) -> str:
    """Lower-case a name and replace whitespace runs with underscores.

    ``"Leopardus  pardalis"`` becomes ``"leopardus_pardalis"``.
    """
    return WHITESPACE_PATTERN.sub("_", name.strip().lower())


def fold_text(text: str) -> str:
    """Strip accents and case so that ``"Águia"`` and ``"aguia"`` compare equal."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def collation_key(text: Optional[str]) -> Tuple[str, str, str]:
    """Sort key approximating a locale-aware comparison.

    Primary strength ignores accents and case, the secondary level keeps accents,
    and the raw text breaks any remaining tie deterministically.
    """
    value = text if isinstance(text, str) else ""
    return (fold_text(value), value.casefold(), value)


def contains_term(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test; ``needle`` is expected to be casefolded already."""
    if not isinstance(haystack, str):
        return False
    return needle in haystack.casefold()
