from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from pydantic import Field, field_validator

from schemas.base import ModelOutputBase, SchemaBase


class PlanStrategy(str, Enum):
    primary = "primary"
    fallback = "fallback"


class FilmingCluster(ModelOutputBase):
    """A group of scripts to film back to back with one setup."""

    name: str = Field(..., min_length=1)
    description: str = ""
    script_ids: List[str] = Field(default_factory=list, alias="scriptIds")
    outfit: str = ""
    location: str = ""
    lighting: str = ""
    props: List[str] = Field(default_factory=list)
    # 1-10, or a descriptive band such as "low-medium (3-5)".
    energy: Union[int, str] = 5
    estimated_minutes: int = Field(default=0, alias="estimatedMinutes", ge=0)

    @field_validator("script_ids", mode="before")
    @classmethod
    def _ids_as_strings(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [str(x).strip() for x in v if x is not None and str(x).strip()]
        return v

    @field_validator("props", mode="before")
    @classmethod
    def _props_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("outfit", "location", "lighting", "description", mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("energy")
    @classmethod
    def _energy_range(cls, v: Union[int, str]) -> Union[int, str]:
        if isinstance(v, int) and not 1 <= v <= 10:
            raise ValueError("energy must be between 1 and 10")
        if isinstance(v, str) and not v.strip():
            raise ValueError("energy must not be blank")
        return v

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _minutes(cls, v: Any) -> Any:
        if v is None:
            return 0
        if isinstance(v, float):
            return round(v)
        return v


class TimelineKind(str, Enum):
    setup = "setup"
    filming = "filming"
    change = "change"
    break_ = "break"


_CLOCK_SPAN_RE = re.compile(r"^\s*(\d+):([0-5]\d)\s*-\s*(\d+):([0-5]\d)\s*$")


def format_clock(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


class TimelineEntry(ModelOutputBase):
    """One slot of the filming day; `time` is "H:MM-H:MM" from the start of the day."""

    time: str = Field(..., min_length=1)
    activity: str = Field(..., min_length=1)
    type: TimelineKind
    cluster_name: Optional[str] = Field(default=None, alias="clusterName")

    @field_validator("type", mode="before")
    @classmethod
    def _kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def span(self) -> Optional[Tuple[int, int]]:
        m = _CLOCK_SPAN_RE.match(self.time)
        if not m:
            return None
        start = int(m.group(1)) * 60 + int(m.group(2))
        end = int(m.group(3)) * 60 + int(m.group(4))
        if end < start:
            return None
        return start, end


class FilmingChecklist(ModelOutputBase):
    pre_filming: List[str] = Field(default_factory=list, alias="preFilming")
    per_cluster: List[str] = Field(default_factory=list, alias="perCluster")
    post_filming: List[str] = Field(default_factory=list, alias="postFilming")

    @field_validator("pre_filming", "per_cluster", "post_filming", mode="before")
    @classmethod
    def _items(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return [str(x).strip() for x in v if x is not None and str(x).strip()]
        return v

    def is_empty(self) -> bool:
        return not (self.pre_filming or self.per_cluster or self.post_filming)


class PlanDraft(SchemaBase):
    """What a cluster generator hands back before totals are computed.

    An empty timeline or a missing checklist is filled in deterministically.
    """

    clusters: List[FilmingCluster]
    timeline: List[TimelineEntry] = Field(default_factory=list)
    checklist: Optional[FilmingChecklist] = None


class BatchPlan(SchemaBase):
    clusters: List[FilmingCluster]
    total_scripts: int
    total_clusters: int
    estimated_hours: float
    strategy: PlanStrategy
    timeline: List[TimelineEntry] = Field(default_factory=list)
    checklist: FilmingChecklist = Field(default_factory=FilmingChecklist)
    break_count: int = 0
    # Length of the scheduled day, setup and breaks included.
    day_minutes: int = 0
    warning: Optional[str] = None

    @classmethod
    def from_clusters(
        cls,
        clusters: List[FilmingCluster],
        *,
        strategy: PlanStrategy,
        timeline: Optional[List[TimelineEntry]] = None,
        checklist: Optional[FilmingChecklist] = None,
        warning: Optional[str] = None,
    ) -> "BatchPlan":
        total_minutes = sum(c.estimated_minutes for c in clusters)
        timeline = list(timeline or [])
        ends = [span[1] for span in (e.span() for e in timeline) if span is not None]
        return cls(
            clusters=list(clusters),
            total_scripts=sum(len(c.script_ids) for c in clusters),
            total_clusters=len(clusters),
            estimated_hours=round(total_minutes / 60, 1),
            strategy=strategy,
            timeline=timeline,
            checklist=checklist or FilmingChecklist(),
            break_count=sum(1 for e in timeline if e.type == TimelineKind.break_),
            day_minutes=max(ends, default=0),
            warning=warning,
        )
