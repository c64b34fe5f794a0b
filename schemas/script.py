from __future__ import annotations

import re
from typing import Any, Dict

from pydantic import Field, field_validator

from schemas.base import ModelOutputBase


class ScriptDraft(ModelOutputBase):
    hook: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    reading_time: int = Field(default=60, alias="readingTime", ge=1)
    delivery_notes: Dict[str, Any] = Field(default_factory=dict, alias="deliveryNotes")
    visual_cues: Dict[str, Any] = Field(default_factory=dict, alias="visualCues")
    fact_check_notes: Dict[str, Any] = Field(default_factory=dict, alias="factCheckNotes")

    @field_validator("hook", "content", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("reading_time", mode="before")
    @classmethod
    def _reading_time(cls, v: Any) -> Any:
        # "52 seconds", 52.4, null all show up in practice.
        if v is None or v == "":
            return 60
        if isinstance(v, float):
            return max(1, round(v))
        if isinstance(v, str):
            m = re.search(r"\d+", v)
            return int(m.group(0)) if m else 60
        return v

    @field_validator("delivery_notes", "visual_cues", "fact_check_notes", mode="before")
    @classmethod
    def _mapping_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}
