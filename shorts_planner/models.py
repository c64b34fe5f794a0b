from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import Field, field_validator, model_validator

from schemas.base import SchemaBase
from schemas.topic import TopicCandidate

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

DEFAULT_TONE_MIX: Dict[str, float] = {
    "emotional": 30,
    "calming": 25,
    "storytelling": 20,
    "educational": 15,
    "humor": 10,
}


def parse_month(value: str) -> tuple[int, int]:
    """Split a `YYYY-MM` project month into (year, month)."""
    m = _MONTH_RE.match((value or "").strip())
    if not m:
        raise ValueError(f"month must be YYYY-MM, got {value!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if month < 1 or month > 12:
        raise ValueError(f"month must be YYYY-MM with MM in 01-12, got {value!r}")
    return year, month


class ProductionMode(str, Enum):
    traditional = "traditional"
    ai_voice_stock = "ai-voice-stock"
    fully_ai = "fully-ai"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ProductionMode"]:
        # Older clients sent "ai-voice" for voiceover + stock footage.
        if isinstance(value, str):
            v = value.strip().lower().replace("_", "-")
            if v == "ai-voice":
                return cls.ai_voice_stock
            for member in cls:
                if member.value == v:
                    return member
        return None


class SignatureTone(SchemaBase):
    primary: str
    secondary: Optional[str] = None
    accent: Optional[str] = None


class ContentBoundaries(SchemaBase):
    wont_cover: List[str] = Field(default_factory=list)
    privacy_limits: List[str] = Field(default_factory=list)


class CreatorProfile(SchemaBase):
    profile_id: str
    name: str = ""
    channel_name: str = ""
    niche: str
    unique_angle: str = ""
    signature_tone: SignatureTone
    catchphrases: List[str] = Field(default_factory=list)
    boundaries: ContentBoundaries = Field(default_factory=ContentBoundaries)

    location: str = ""
    creator_country: str = "US"
    target_country: str = "US"

    @field_validator("creator_country", "target_country")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return (v or "").strip().upper()


class CustomEvent(SchemaBase):
    date: str = Field(..., description="ISO date YYYY-MM-DD")
    name: str
    description: str = ""

    @field_validator("date")
    @classmethod
    def _iso_date(cls, v: str) -> str:
        v = (v or "").strip()
        date.fromisoformat(v)
        return v

    def bullet(self) -> str:
        return f"- {self.name} ({self.date}): {self.description}"


class ProjectRequest(SchemaBase):
    project_id: str
    profile_id: str
    name: str = ""
    month: str = Field(..., description="YYYY-MM")
    videos_needed: int = Field(..., ge=1)
    tone_mix: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TONE_MIX))
    production_mode: ProductionMode = ProductionMode.traditional
    custom_events: List[CustomEvent] = Field(default_factory=list)
    existing_topics: List[str] = Field(default_factory=list)

    @field_validator("month")
    @classmethod
    def _month_shape(cls, v: str) -> str:
        parse_month(v)
        return v.strip()

    @property
    def year_month(self) -> tuple[int, int]:
        return parse_month(self.month)


class ScriptRequest(SchemaBase):
    topic_id: str
    topic: TopicCandidate
    production_mode: ProductionMode = ProductionMode.ai_voice_stock
    month: Optional[str] = Field(default=None, description="YYYY-MM; defaults to the topic's start date")

    @field_validator("month")
    @classmethod
    def _month_shape(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        parse_month(v)
        return v.strip()

    def resolve_month(self, today: Optional[date] = None) -> tuple[int, int]:
        if self.month:
            return parse_month(self.month)
        start = self.topic.date_range_start
        if start:
            return int(start[:4]), int(start[5:7])
        today = today or date.today()
        return today.year, today.month


class ScriptSummary(SchemaBase):
    """What the batch planner needs to know about one finished script."""

    script_id: str
    topic_title: str
    tone: str = "conversational"
    production_mode: ProductionMode = ProductionMode.traditional
    reading_time: int = Field(default=60, ge=1)
    energy: Union[int, str, None] = None
    framing: str = "medium shot"
    lighting: str = "natural"


class BatchPlanRequest(SchemaBase):
    project_id: str
    scripts: List[ScriptSummary]
    profile: Optional[CreatorProfile] = None
    filming_hours: float = Field(default=8, gt=0)

    @model_validator(mode="after")
    def _unique_script_ids(self) -> "BatchPlanRequest":
        if not self.scripts:
            raise ValueError("scripts must not be empty")
        ids = [s.script_id for s in self.scripts]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate script_id values: {dupes}")
        return self
