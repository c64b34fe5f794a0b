from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from schemas.topic import TopicCandidate
from shorts_planner.completion import CompletionService
from shorts_planner.config import Settings
from shorts_planner.models import CreatorProfile, ProjectRequest
from shorts_planner.prompts import build_topic_prompt
from shorts_planner.regional import RegionalPromptContext
from shorts_planner.response_parser import extract_list

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicAgentConfig:
    model_id: str = Settings.topic_model
    max_tokens: int = Settings.topic_max_tokens
    temperature: float = Settings.topic_temperature
    prior_topics_limit: int = Settings.prior_topics_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> "TopicAgentConfig":
        return cls(
            model_id=settings.topic_model,
            max_tokens=settings.topic_max_tokens,
            temperature=settings.topic_temperature,
            prior_topics_limit=settings.prior_topics_limit,
        )


def coerce_topics(items: Sequence[Any]) -> list[TopicCandidate]:
    """Shape-check raw topic dicts; entries that do not validate are dropped."""
    out: list[TopicCandidate] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            logger.info("Dropping topic #%d: not an object (%s)", i + 1, type(item).__name__)
            continue
        try:
            out.append(TopicCandidate.model_validate(item))
        except ValidationError as e:
            logger.info("Dropping malformed topic #%d: %s", i + 1, e.errors()[0].get("msg", e))
    return out


class TopicAgent:
    """Asks the model for a month of topic ideas and returns shape-checked candidates."""

    def __init__(self, *, completion: CompletionService, config: TopicAgentConfig | None = None) -> None:
        self._completion = completion
        self._cfg = config or TopicAgentConfig()

    def run(
        self,
        *,
        profile: CreatorProfile,
        project: ProjectRequest,
        regional: RegionalPromptContext,
        prior_titles: Optional[Sequence[str]] = None,
    ) -> list[TopicCandidate]:
        prompt = build_topic_prompt(
            profile=profile,
            project=project,
            regional=regional,
            prior_titles=prior_titles,
            prior_limit=self._cfg.prior_topics_limit,
        )
        logger.info(
            "Requesting %d topics for %s (%s, %s)",
            project.videos_needed,
            project.project_id,
            project.month,
            project.production_mode.value,
        )
        raw = self._completion.complete(
            prompt=prompt,
            model_id=self._cfg.model_id,
            max_tokens=self._cfg.max_tokens,
            temperature=self._cfg.temperature,
        )
        items = extract_list(raw, key="topics")
        topics = coerce_topics(items)
        logger.info("Model returned %d topics, %d well-formed", len(items), len(topics))
        return topics
