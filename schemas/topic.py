from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from schemas.base import ModelOutputBase


class Longevity(str, Enum):
    evergreen = "evergreen"
    seasonal = "seasonal"
    trending = "trending"


class FactCheckStatus(str, Enum):
    verified = "verified"
    needs_review = "needs_review"
    opinion = "opinion"


def _lower_enum_value(v: object) -> object:
    if isinstance(v, str):
        return v.strip().lower().replace("-", "_").replace(" ", "_")
    return v


class TopicCandidate(ModelOutputBase):
    """One topic idea as returned by the model.

    title/hook/core_value may be missing here; the deduplicator drops those
    candidates instead of failing the batch.
    """

    title: Optional[str] = None
    hook: Optional[str] = None
    core_value: Optional[str] = Field(default=None, alias="coreValue")
    emotional_driver: Optional[str] = Field(default=None, alias="emotionalDriver")
    format_type: Optional[str] = Field(default=None, alias="formatType")
    tone: Optional[str] = None
    longevity: Optional[Longevity] = None
    fact_check_status: FactCheckStatus = Field(default=FactCheckStatus.needs_review, alias="factCheckStatus")
    date_range_start: Optional[str] = Field(default=None, alias="dateRangeStart")
    date_range_end: Optional[str] = Field(default=None, alias="dateRangeEnd")
    order_index: Optional[int] = Field(default=None, alias="orderIndex")
    production_notes: Optional[str] = Field(default=None, alias="productionNotes")

    @field_validator("title", "hook", "core_value", "emotional_driver", "format_type", "tone", "production_notes")
    @classmethod
    def _strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return str(v).strip()

    @field_validator("longevity", mode="before")
    @classmethod
    def _longevity(cls, v: object) -> object:
        v = _lower_enum_value(v)
        # Labels such as "evergreen/seasonal" drop the field, not the topic.
        if not isinstance(v, str) or v not in {m.value for m in Longevity}:
            return None
        return v

    @field_validator("order_index", mode="before")
    @classmethod
    def _order_index(cls, v: object) -> object:
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return None

    @field_validator("fact_check_status", mode="before")
    @classmethod
    def _fact_check(cls, v: object) -> object:
        v = _lower_enum_value(v)
        return v or FactCheckStatus.needs_review

    @field_validator("date_range_start", "date_range_end")
    @classmethod
    def _iso_date(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        # Models sometimes emit impossible days such as 2025-11-31; keep the topic, drop the date.
        try:
            date.fromisoformat(v)
        except ValueError:
            return None
        return v

    def is_complete(self) -> bool:
        return bool(self.title and self.hook and self.core_value)
