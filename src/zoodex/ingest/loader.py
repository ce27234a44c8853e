"""Loading raw animal profiles from JSON or CSV exports."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from zoodex.config import get_settings
from zoodex.ingest.models import DatasetBatch
from zoodex.processing.records import process_all

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, List[str]] = {
    "codigo": ["codigo", "code", "id"],
    "nome_tazo": ["nome_tazo", "common_name", "name"],
    "nome_cientifico": ["nome_cientifico", "scientific_name", "species"],
    "nivel_extincao.categoria": ["nivel_extincao.categoria", "category", "iucn_category"],
    "nivel_extincao.indice_risco": ["nivel_extincao.indice_risco", "risk_index"],
    "imagens.foto_1": ["imagens.foto_1", "photo_1"],
    "imagens.foto_2": ["imagens.foto_2", "photo_2"],
    "imagens.front": ["imagens.front", "front"],
    "imagens.back": ["imagens.back", "back"],
}

LIST_COLUMNS = {
    "ameacas",
    "curiosidades",
    "distribuicao.paises_nativos",
    "habitat.habitats_principais",
    "acoes_conservacao.acoes_recomendadas",
}

_IMAGE_BASE = "https://res.cloudinary.com/dfbppldw5/image/upload"

DEMO_RECORDS: List[Dict[str, Any]] = [
    {
        "codigo": 1,
        "nome_tazo": "Jaguatirica",
        "nome_cientifico": "Leopardus pardalis",
        "imagens": {
            "front": f"{_IMAGE_BASE}/v1746732357/front_sqdtux.png",
            "back": f"{_IMAGE_BASE}/v1746732357/back_dhxxg1.png",
            "foto_1": f"{_IMAGE_BASE}/v1746732357/foto_1_rtyy1q.jpg",
            "foto_2": f"{_IMAGE_BASE}/v1746732357/foto_2_hahm4z.jpg",
        },
        "nivel_extincao": {
            "categoria": "LC",
            "descricao": "Pouco Preocupante",
            "indice_risco": 1,
            "escala": [
                {"nivel": 1, "sigla": "LC", "descricao": "Pouco Preocupante"},
                {"nivel": 2, "sigla": "NT", "descricao": "Quase Ameaçado"},
                {"nivel": 3, "sigla": "VU", "descricao": "Vulnerável"},
                {"nivel": 4, "sigla": "EN", "descricao": "Em Perigo"},
                {"nivel": 5, "sigla": "CR", "descricao": "Criticamente em Perigo"},
                {"nivel": 6, "sigla": "EW", "descricao": "Extinto na Natureza"},
                {"nivel": 7, "sigla": "EX", "descricao": "Extinto"},
            ],
        },
        "nome_comum": {"pt": "Jaguatirica", "en": "Ocelot", "es": ["Gato Onza", "Ocelote", "Tigrillo"]},
        "habitat": {"descricao": "Florestas tropicais, manguezais, savanas e áreas de vegetação densa."},
        "ameacas": ["Perda e fragmentação de habitat", "Caça ilegal por pele"],
        "curiosidades": ["É o felino mais comum nas florestas tropicais das Américas."],
    },
    {
        "codigo": 2,
        "nome_tazo": "Tigre-Siberiano",
        "nome_cientifico": "Panthera tigris",
        "imagens": {
            "front": f"{_IMAGE_BASE}/v1746732408/front_czttyh.png",
            "back": f"{_IMAGE_BASE}/v1746732409/back_x4duno.png",
            "foto_1": f"{_IMAGE_BASE}/v1746732408/foto_1_maiuno.jpg",
            "foto_2": f"{_IMAGE_BASE}/v1746732408/foto_2_fduhwn.jpg",
        },
        "nivel_extincao": {"categoria": "EN", "descricao": "Em Perigo", "indice_risco": 4},
        "nome_comum": {"pt": "Tigre-siberiano", "en": "Siberian Tiger"},
    },
    {
        "codigo": 3,
        "nome_tazo": "Gorila",
        "nome_cientifico": "Gorilla gorilla",
        "imagens": {
            "front": f"{_IMAGE_BASE}/v1746734364/front_tsorsb.png",
            "back": f"{_IMAGE_BASE}/v1746734364/back_jnftmk.png",
            "foto_1": f"{_IMAGE_BASE}/v1746734364/foto_1_xbzpif.jpg",
            "foto_2": f"{_IMAGE_BASE}/v1746734365/foto_2_eknvmb.jpg",
        },
        "nivel_extincao": {"categoria": "CR", "descricao": "Criticamente em Perigo", "indice_risco": 5},
        "nome_comum": {"pt": "Gorila-ocidental", "en": "Western Gorilla"},
    },
]


class DatasetLoadError(RuntimeError):
    """Raised when a dataset file cannot be read."""


def _match_column(columns: List[str], candidates: List[str]) -> Optional[str]:
    lower = {c.lower(): c for c in columns}
    for alias in candidates:
        if alias.lower() in lower:
            return lower[alias.lower()]
    return None


def _set_nested(target: Dict[str, Any], dotted: str, value: Any) -> None:
    parts = dotted.split(".")
    node = target
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _cell_value(field: str, value: Any) -> Any:
    if field in LIST_COLUMNS:
        return [item.strip() for item in str(value).split(";") if item.strip()]
    return value


def load_records_csv(path: Path) -> List[Dict[str, Any]]:
    """Load a flat CSV export; dotted column names become nested objects."""
    df = pd.read_csv(path, dtype=str)
    columns = df.columns.tolist()

    column_map: Dict[str, str] = {}
    for field, aliases in COLUMN_ALIASES.items():
        column_name = _match_column(columns, aliases)
        if column_name is not None:
            column_map[column_name] = field
    for column_name in columns:
        column_map.setdefault(column_name, column_name.strip())

    records: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        record: Dict[str, Any] = {}
        for column_name, field in column_map.items():
            value = row.get(column_name)
            if pd.isna(value):
                continue
            _set_nested(record, field, _cell_value(field, value))
        records.append(record)
    return records


def load_records_json(path: Path) -> List[Any]:
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise DatasetLoadError(f"{path} does not contain a list of records")
    return payload


def load_raw_records(path: Path) -> List[Any]:
    """Read raw records from ``path`` based on its suffix."""
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return load_records_json(path)
        if suffix == ".csv":
            return load_records_csv(path)
    except (OSError, ValueError) as exc:
        raise DatasetLoadError(f"Could not read {path}: {exc}") from exc
    raise DatasetLoadError(f"Unsupported dataset format: {path.suffix or path.name}")


def load_dataset(path: Optional[Path] = None, strict: Optional[bool] = None) -> DatasetBatch:
    """Load and process the dataset once; falls back to the built-in demo records."""
    settings = get_settings()
    path = path or settings.data_path
    strict = settings.strict_ids if strict is None else strict

    if path is None:
        logger.info("No dataset configured; using %d demo records", len(DEMO_RECORDS))
        return process_all(DEMO_RECORDS, strict=strict, source_name="demo")

    raw_records = load_raw_records(Path(path))
    logger.info("Loaded %d raw records from %s", len(raw_records), path)
    return process_all(raw_records, strict=strict, source_name=str(path))
