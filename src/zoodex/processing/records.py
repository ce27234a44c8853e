"""Load-time derivation of ids, risk ranks and risk scales."""
from __future__ import annotations

import logging
import random
import string
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, List, Optional, Set

from zoodex.ingest.models import DatasetBatch, ProcessedRecord, RiskScaleEntry
from zoodex.processing.accessor import get, is_risk_scale
from zoodex.processing.text import slugify_name

logger = logging.getLogger(__name__)

# LC..EX from least to most severe; DD and NE are undetermined.
RISK_RANKS: Dict[str, int] = {
    "LC": 1,
    "NT": 2,
    "VU": 3,
    "EN": 4,
    "CR": 5,
    "EW": 6,
    "EX": 7,
    "DD": 0,
    "NE": 0,
}

RANDOM_ID_PREFIX = "animal_"
RANDOM_ID_ALPHABET = string.ascii_lowercase + string.digits


class DatasetValidationError(ValueError):
    """Raised in strict mode when a record has no natural identifier."""


def random_id() -> str:
    return RANDOM_ID_PREFIX + "".join(random.choices(RANDOM_ID_ALPHABET, k=7))


def natural_id(raw: Mapping) -> Optional[str]:
    """Id from the numeric code, else from the scientific name; None when neither exists."""
    code = get(raw, "codigo", None)
    if code is not None and not isinstance(code, bool) and code != 0:
        if isinstance(code, float) and code.is_integer():
            code = int(code)
        return str(code).strip() or None

    name = get(raw, "nome_cientifico", "")
    if isinstance(name, str):
        return slugify_name(name) or None
    return None


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def risk_rank(raw: Mapping) -> int:
    category = str(get(raw, "nivel_extincao.categoria", "")).strip().upper()
    if category in RISK_RANKS:
        return RISK_RANKS[category]
    return _to_int(get(raw, "nivel_extincao.indice_risco", 0))


def _scale_entry(entry: Mapping) -> RiskScaleEntry:
    level = get(entry, "nivel", None)
    if level is None:
        level = get(entry, "level", None)
    return RiskScaleEntry(
        code=str(get(entry, "sigla", None) or get(entry, "code", "")).strip(),
        description=str(get(entry, "descricao", None) or get(entry, "description", "")).strip(),
        level=None if level is None else _to_int(level),
    )


def risk_scale(raw: Mapping) -> List[RiskScaleEntry]:
    """Normalize ``nivel_extincao.escala`` into entries, skipping malformed ones."""
    scale = get(raw, "nivel_extincao.escala", [])
    if not isinstance(scale, list):
        return []
    if not is_risk_scale(scale):
        scale = [entry for entry in scale if is_risk_scale([entry])]
    return [_scale_entry(entry) for entry in scale]


def process_record(raw: Mapping, record_id: str) -> ProcessedRecord:
    return ProcessedRecord(
        id=record_id,
        risk_rank=risk_rank(raw),
        risk_scale=risk_scale(raw),
        data={str(key): value for key, value in raw.items()},
    )


def process_all(
    raw_records: Optional[Iterable[Any]],
    *,
    strict: bool = False,
    id_factory: Optional[Callable[[], str]] = None,
    source_name: str = "static",
) -> DatasetBatch:
    """Derive ids and risk ranks for every raw record, preserving input order.

    Entries that are not mappings cannot yield an id and are left out, with an
    issue recorded. A repeated id is disambiguated with a numeric suffix. With
    ``strict`` set, a record lacking both a code and a scientific name raises
    :class:`DatasetValidationError` instead of receiving an opaque random id.
    """
    make_id = id_factory or random_id
    records: List[ProcessedRecord] = []
    issues: List[str] = []
    seen: Set[str] = set()

    if raw_records is None:
        raw_records = []
    elif isinstance(raw_records, (str, bytes, Mapping)) or not isinstance(raw_records, Iterable):
        issues.append(f"Dataset is not a list of records ({type(raw_records).__name__}); nothing loaded")
        logger.warning("Expected a list of records, got %s", type(raw_records).__name__)
        raw_records = []

    for idx, raw in enumerate(raw_records):
        if not isinstance(raw, Mapping):
            issues.append(f"Record {idx} is not an object; skipped")
            logger.warning("Skipping record %d: expected an object, got %s", idx, type(raw).__name__)
            continue

        record_id = natural_id(raw)
        if record_id is None:
            if strict:
                raise DatasetValidationError(f"Record {idx} has neither a code nor a scientific name")
            record_id = make_id()
            issues.append(f"Record {idx} has no code or scientific name; assigned {record_id}")
            logger.warning("Record %d has no natural id; assigned %s", idx, record_id)

        if record_id in seen:
            base, suffix = record_id, 2
            while f"{base}-{suffix}" in seen:
                suffix += 1
            record_id = f"{base}-{suffix}"
            issues.append(f"Record {idx} duplicates id {base}; renamed to {record_id}")
            logger.warning("Duplicate id %s at record %d; renamed to %s", base, idx, record_id)

        seen.add(record_id)
        records.append(process_record(raw, record_id))

    logger.info("Processed %d records from %s (%d issues)", len(records), source_name, len(issues))
    return DatasetBatch(source_name=source_name, records=records, issues=issues)
