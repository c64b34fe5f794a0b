from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Union

from agents.batch_plan_agent import BatchPlanAgent, BatchPlanAgentConfig
from agents.script_agent import ScriptAgent, ScriptAgentConfig
from agents.topic_agent import TopicAgent, TopicAgentConfig
from schemas.cluster import BatchPlan, PlanDraft, PlanStrategy
from schemas.script import ScriptDraft
from schemas.topic import TopicCandidate
from shorts_planner.clustering import ClusterGenerator, FallbackClusterGenerator, PrimaryClusterGenerator
from shorts_planner.completion import CompletionService
from shorts_planner.config import Settings
from shorts_planner.dedup import filter_unique
from shorts_planner.errors import (
    ConfigurationMissing,
    GenerationFailure,
    ParseError,
    ShortsPlannerError,
    UpstreamFailure,
)
from shorts_planner.models import BatchPlanRequest, CreatorProfile, ProductionMode, ProjectRequest, ScriptRequest
from shorts_planner.regional import build_prompt_context
from shorts_planner.schedule import build_timeline, day_overrun_warning, default_checklist

logger = logging.getLogger(__name__)

# kind -> (user-facing error, hint)
_UPSTREAM_MESSAGES: dict[str, tuple[str, str]] = {
    "auth": ("Invalid API key", "Please check your OPENAI_API_KEY environment variable"),
    "rate_limit": ("Rate limit exceeded", "Please wait a moment and try again"),
    "timeout": ("Request timed out", "The AI took too long to respond. Try requesting fewer videos."),
    "network": ("AI service unreachable", "Check your network connection and try again"),
    "service": ("AI service error", "The AI service returned an error. Please try again."),
}


def failure_from_error(exc: ShortsPlannerError, *, task: str) -> GenerationFailure:
    """Translate a pipeline exception into the structured failure callers receive."""
    if isinstance(exc, ConfigurationMissing):
        logger.error("%s generation not configured: %s", task, exc)
        return GenerationFailure(error="AI service not configured", details=str(exc))

    if isinstance(exc, ParseError):
        logger.warning("%s generation: unparseable model output: %s | preview=%r", task, exc, exc.preview(200))
        return GenerationFailure(
            error="Failed to parse AI response",
            details=f"{exc} The AI returned invalid JSON. Please try again.",
        )

    if isinstance(exc, UpstreamFailure):
        error, hint = _UPSTREAM_MESSAGES.get(exc.kind, _UPSTREAM_MESSAGES["service"])
        logger.warning("%s generation upstream failure (%s): %s", task, exc.kind, exc)
        return GenerationFailure(error=error, details=f"{hint}. {exc}")

    logger.error("%s generation failed: %s", task, exc)
    return GenerationFailure(error=f"Failed to generate {task}", details=str(exc))


@dataclass(frozen=True)
class TopicGenerationResult:
    project_id: str
    month: str
    topics: tuple[TopicCandidate, ...]
    requested: int
    returned_by_model: int
    holidays_included: tuple[str, ...]

    @property
    def generated(self) -> int:
        return len(self.topics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "topics": [t.to_dict(by_alias=True) for t in self.topics],
            "metadata": {
                "project_id": self.project_id,
                "month": self.month,
                "requested": self.requested,
                "generated": self.generated,
                "returned_by_model": self.returned_by_model,
                "holidays_included": list(self.holidays_included),
            },
        }


@dataclass(frozen=True)
class ScriptRecord:
    topic_id: str
    topic_title: str
    production_mode: ProductionMode
    draft: ScriptDraft
    verification_status: str = "needs_review"
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "topic_title": self.topic_title,
            "production_mode": self.production_mode.value,
            "hook": self.draft.hook,
            "content": self.draft.content,
            "full_script": self.draft.content,
            "reading_time": self.draft.reading_time,
            "delivery_notes": dict(self.draft.delivery_notes),
            "visual_cues": dict(self.draft.visual_cues),
            "fact_check_notes": dict(self.draft.fact_check_notes),
            "verification_status": self.verification_status,
            "version": self.version,
        }


def generate_topics(
    *,
    profile: CreatorProfile,
    project: ProjectRequest,
    completion: CompletionService,
    settings: Optional[Settings] = None,
) -> Union[TopicGenerationResult, GenerationFailure]:
    """Region -> prompt -> model -> parse -> dedup for one project month.

    Fewer topics than requested is still a success; callers must read
    `generated` rather than assume `requested`.
    """
    settings = settings or Settings()
    year, month = project.year_month
    regional = build_prompt_context(
        profile.creator_country,
        profile.target_country,
        month,
        year,
        project.custom_events,
    )

    agent = TopicAgent(completion=completion, config=TopicAgentConfig.from_settings(settings))
    try:
        candidates = agent.run(
            profile=profile,
            project=project,
            regional=regional,
            prior_titles=project.existing_topics,
        )
    except ShortsPlannerError as e:
        return failure_from_error(e, task="topics")

    if not candidates:
        logger.warning("No usable topics in model output for %s", project.project_id)
        return GenerationFailure(
            error="Failed to generate any topics. Please try again.",
            details="The AI response contained no well-formed topics",
        )

    unique = filter_unique(candidates, project.existing_topics, threshold=settings.similarity_threshold)
    topics = tuple(t.model_copy(update={"order_index": i}) for i, t in enumerate(unique, start=1))
    if not topics:
        logger.warning("Every generated topic duplicated an existing one for %s", project.project_id)

    logger.info(
        "Topics for %s: requested=%d returned=%d accepted=%d",
        project.project_id,
        project.videos_needed,
        len(candidates),
        len(topics),
    )
    return TopicGenerationResult(
        project_id=project.project_id,
        month=project.month,
        topics=topics,
        requested=project.videos_needed,
        returned_by_model=len(candidates),
        holidays_included=tuple(h.name for h in regional.holidays),
    )


def generate_script(
    *,
    profile: Optional[CreatorProfile],
    request: ScriptRequest,
    completion: CompletionService,
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> Union[ScriptRecord, GenerationFailure]:
    settings = settings or Settings()
    if not request.topic.title:
        return GenerationFailure(error="Topic is required", details="The topic has no title")

    year, month = request.resolve_month(today)
    regional = build_prompt_context(
        profile.creator_country if profile else None,
        profile.target_country if profile else None,
        month,
        year,
    )

    agent = ScriptAgent(completion=completion, config=ScriptAgentConfig.from_settings(settings))
    try:
        draft = agent.run(profile=profile, request=request, regional=regional)
    except ShortsPlannerError as e:
        return failure_from_error(e, task="script")

    logger.info("Script for %s: %ds reading time", request.topic_id, draft.reading_time)
    return ScriptRecord(
        topic_id=request.topic_id,
        topic_title=request.topic.title,
        production_mode=request.production_mode,
        draft=draft,
    )


def generate_batch_plan(
    *,
    request: BatchPlanRequest,
    completion: CompletionService,
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
    primary: Optional[ClusterGenerator] = None,
    fallback: Optional[ClusterGenerator] = None,
) -> Union[BatchPlan, GenerationFailure]:
    """Model-planned filming clusters, or deterministic grouping when the model output is unusable.

    Only ParseError and UpstreamFailure switch to the fallback; a missing
    credential is reported as a failure.
    """
    settings = settings or Settings()

    if primary is None:
        regional = None
        if request.profile is not None:
            today = today or date.today()
            regional = build_prompt_context(
                request.profile.creator_country,
                request.profile.target_country,
                today.month,
                today.year,
            )
        agent = BatchPlanAgent(completion=completion, config=BatchPlanAgentConfig.from_settings(settings))
        primary = PrimaryClusterGenerator(agent=agent, regional=regional)
    if fallback is None:
        fallback = FallbackClusterGenerator(chunk_size=settings.cluster_size)

    try:
        draft = primary.generate(request)
    except ConfigurationMissing as e:
        return failure_from_error(e, task="batch plan")
    except (ParseError, UpstreamFailure) as e:
        logger.warning("Batch plan for %s falling back to simple grouping: %s", request.project_id, e)
        return _finish_plan(
            fallback.generate(request),
            request=request,
            strategy=PlanStrategy.fallback,
            warnings=[f"AI planning unavailable, grouped by production mode and tone instead ({e})"],
        )

    return _finish_plan(draft, request=request, strategy=PlanStrategy.primary)


def _finish_plan(
    draft: PlanDraft,
    *,
    request: BatchPlanRequest,
    strategy: PlanStrategy,
    warnings: Optional[list[str]] = None,
) -> BatchPlan:
    """Fill in a missing timeline or checklist, total the plan and flag an overlong day."""
    warnings = list(warnings or [])
    timeline = draft.timeline or build_timeline(draft.clusters)
    checklist = draft.checklist or default_checklist(draft.clusters)
    plan = BatchPlan.from_clusters(draft.clusters, strategy=strategy, timeline=timeline, checklist=checklist)

    overrun = day_overrun_warning(plan.day_minutes, request.filming_hours)
    if overrun:
        logger.warning("Batch plan for %s: %s", request.project_id, overrun)
        warnings.append(overrun)
    if warnings:
        plan = plan.model_copy(update={"warning": "; ".join(warnings)})
    return plan


def topic_records(project_id: str, topics: Iterable[TopicCandidate]) -> list[dict[str, Any]]:
    """Plain dicts ready for RecordStore.create_many("topics", ...)."""
    records = []
    for t in topics:
        rec = t.to_dict()
        rec["project_id"] = project_id
        records.append(rec)
    return records


def batch_plan_record(project_id: str, plan: BatchPlan) -> dict[str, Any]:
    rec = plan.to_dict()
    rec["project_id"] = project_id
    return rec
