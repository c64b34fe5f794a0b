from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from schemas.script import ScriptDraft
from shorts_planner.completion import CompletionService
from shorts_planner.config import Settings
from shorts_planner.errors import ParseError
from shorts_planner.models import CreatorProfile, ScriptRequest
from shorts_planner.prompts import build_script_prompt
from shorts_planner.regional import RegionalPromptContext
from shorts_planner.response_parser import extract_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptAgentConfig:
    model_id: str = Settings.script_model
    max_tokens: int = Settings.script_max_tokens
    temperature: float = Settings.script_temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScriptAgentConfig":
        return cls(
            model_id=settings.script_model,
            max_tokens=settings.script_max_tokens,
            temperature=settings.script_temperature,
        )


class ScriptAgent:
    """
    Writes one 45-60 second script for a topic.
    Cue vocabulary depends on production mode (delivery cues, stock footage, AI images).
    """

    def __init__(self, *, completion: CompletionService, config: ScriptAgentConfig | None = None) -> None:
        self._completion = completion
        self._cfg = config or ScriptAgentConfig()

    def run(
        self,
        *,
        profile: Optional[CreatorProfile],
        request: ScriptRequest,
        regional: RegionalPromptContext,
    ) -> ScriptDraft:
        prompt = build_script_prompt(
            profile=profile,
            topic=request.topic,
            production_mode=request.production_mode,
            regional=regional,
        )
        logger.info("Requesting %s script for topic %s", request.production_mode.value, request.topic_id)
        raw = self._completion.complete(
            prompt=prompt,
            model_id=self._cfg.model_id,
            max_tokens=self._cfg.max_tokens,
            temperature=self._cfg.temperature,
        )
        data = extract_json(raw, expect="object")
        try:
            return ScriptDraft.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Script response failed validation: {e}", raw_text=raw) from e
