from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from schemas.cluster import FilmingChecklist, FilmingCluster, PlanDraft, TimelineEntry
from shorts_planner.completion import CompletionService
from shorts_planner.config import Settings
from shorts_planner.errors import ParseError
from shorts_planner.models import BatchPlanRequest
from shorts_planner.prompts import build_clustering_prompt
from shorts_planner.regional import RegionalPromptContext
from shorts_planner.response_parser import extract_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchPlanAgentConfig:
    model_id: str = Settings.batch_plan_model
    max_tokens: int = Settings.batch_plan_max_tokens
    temperature: float = Settings.batch_plan_temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "BatchPlanAgentConfig":
        return cls(
            model_id=settings.batch_plan_model,
            max_tokens=settings.batch_plan_max_tokens,
            temperature=settings.batch_plan_temperature,
        )


class BatchPlanAgent:
    """
    Asks the model to group scripts into filming clusters.

    Returns the clusters exactly as the model described them; membership
    (unknown ids, repeats, forgotten scripts) is checked by the caller.
    """

    def __init__(self, *, completion: CompletionService, config: BatchPlanAgentConfig | None = None) -> None:
        self._completion = completion
        self._cfg = config or BatchPlanAgentConfig()

    def run(self, *, request: BatchPlanRequest, regional: Optional[RegionalPromptContext]) -> PlanDraft:
        prompt = build_clustering_prompt(
            scripts=request.scripts,
            profile=request.profile,
            regional=regional,
            filming_hours=request.filming_hours,
        )
        logger.info("Requesting filming clusters for %d scripts (%s)", len(request.scripts), request.project_id)
        raw = self._completion.complete(
            prompt=prompt,
            model_id=self._cfg.model_id,
            max_tokens=self._cfg.max_tokens,
            temperature=self._cfg.temperature,
        )

        payload = extract_json(raw)
        if isinstance(payload, list):
            items, extras = payload, {}
        elif isinstance(payload, dict) and isinstance(payload.get("clusters"), list):
            items, extras = payload["clusters"], payload
        else:
            raise ParseError("Response missing clusters array", raw_text=raw)

        clusters: list[FilmingCluster] = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                logger.info("Dropping cluster #%d: not an object", i + 1)
                continue
            try:
                clusters.append(FilmingCluster.model_validate(item))
            except ValidationError as e:
                logger.info("Dropping malformed cluster #%d: %s", i + 1, e.errors()[0].get("msg", e))

        return PlanDraft(
            clusters=clusters,
            timeline=self._timeline(extras.get("timeline")),
            checklist=self._checklist(extras.get("checklist")),
        )

    @staticmethod
    def _timeline(raw: Any) -> list[TimelineEntry]:
        if not isinstance(raw, list):
            return []
        entries: list[TimelineEntry] = []
        for i, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            try:
                entries.append(TimelineEntry.model_validate(item))
            except ValidationError as e:
                logger.info("Dropping malformed timeline entry #%d: %s", i + 1, e.errors()[0].get("msg", e))
        return entries

    @staticmethod
    def _checklist(raw: Any) -> Optional[FilmingChecklist]:
        if not isinstance(raw, dict):
            return None
        try:
            checklist = FilmingChecklist.model_validate(raw)
        except ValidationError as e:
            logger.info("Ignoring malformed checklist: %s", e.errors()[0].get("msg", e))
            return None
        return None if checklist.is_empty() else checklist
