"""Data models for the processed animal dataset."""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from zoodex.processing.accessor import get


class RiskScaleEntry(BaseModel):
    """One step of the extinction-risk scale shown next to a profile."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    level: Optional[int] = None


class ProcessedRecord(BaseModel):
    """A raw animal profile plus the fields derived once at load time."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Dataset-unique identifier")
    risk_rank: int = Field(default=0, description="Ordering proxy for the extinction category")
    risk_scale: List[RiskScaleEntry] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict, description="Raw record as loaded")

    def get(self, path: str, default: Any = None) -> Any:
        return get(self.data, path, default)

    def _text(self, path: str) -> str:
        value = self.get(path, "")
        if isinstance(value, (list, tuple, dict)):
            return ""
        return str(value)

    @property
    def code(self) -> float:
        """Natural numeric code, 0 when absent, not numeric or not finite."""
        value = self.get("codigo", 0)
        if isinstance(value, bool):
            return 0
        if not isinstance(value, (int, float)):
            try:
                value = float(str(value).strip())
            except ValueError:
                return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return value

    @property
    def common_name(self) -> str:
        return self._text("nome_tazo")

    @property
    def scientific_name(self) -> str:
        return self._text("nome_cientifico")

    @property
    def category(self) -> str:
        return str(self.get("nivel_extincao.categoria", "")).upper()


class DatasetBatch(BaseModel):
    """Container for the processed dataset along with load provenance."""

    source_name: str
    records: List[ProcessedRecord]
    issues: List[str] = Field(default_factory=list)

    def iter_records(self) -> Iterable[ProcessedRecord]:
        return iter(self.records)
