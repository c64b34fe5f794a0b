from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from agents.batch_plan_agent import BatchPlanAgent
from schemas.cluster import FilmingCluster, PlanDraft, TimelineEntry
from shorts_planner.errors import ParseError
from shorts_planner.models import BatchPlanRequest, ProductionMode, ScriptSummary
from shorts_planner.regional import RegionalPromptContext

logger = logging.getLogger(__name__)

MINUTES_PER_SCRIPT = 5
REMAINING_CLUSTER_NAME = "Remaining scripts"

_DEFAULT_SETUP = {
    "outfit": "Casual, comfortable",
    "location": "Indoor setup",
    "lighting": "Natural light",
}
_AI_SETUP = {
    "outfit": "N/A (AI Generated)",
    "location": "N/A (AI Generated)",
    "lighting": "N/A (AI Generated)",
}
_MODE_LABELS = {
    ProductionMode.traditional: "Traditional filming",
    ProductionMode.ai_voice_stock: "AI voiceover + stock footage",
    ProductionMode.fully_ai: "AI-generated",
}


class ClusterGenerator(Protocol):
    def generate(self, request: BatchPlanRequest) -> PlanDraft:
        ...


def reconcile_clusters(
    clusters: Sequence[FilmingCluster],
    scripts: Sequence[ScriptSummary],
    *,
    minutes_per_script: int = MINUTES_PER_SCRIPT,
) -> list[FilmingCluster]:
    """Make model clusters cover every script exactly once.

    Unknown ids and repeats are dropped, empty clusters go, blank setup fields
    get defaults, and anything the model forgot lands in a trailing
    "Remaining scripts" cluster. No usable cluster at all is a ParseError.
    """
    known = [s.script_id for s in scripts]
    known_set = set(known)
    placed: set[str] = set()
    out: list[FilmingCluster] = []

    for cluster in clusters:
        ids: list[str] = []
        for sid in cluster.script_ids:
            if sid not in known_set:
                logger.info("Cluster %r references unknown script %r; ignoring", cluster.name, sid)
                continue
            if sid in placed:
                logger.info("Script %r already placed; dropping it from cluster %r", sid, cluster.name)
                continue
            ids.append(sid)
            placed.add(sid)

        if not ids:
            logger.info("Dropping empty cluster %r", cluster.name)
            continue

        update: dict = {"script_ids": ids}
        for field, default in _DEFAULT_SETUP.items():
            if not getattr(cluster, field).strip():
                update[field] = default
        if cluster.estimated_minutes <= 0:
            update["estimated_minutes"] = len(ids) * minutes_per_script
        out.append(cluster.model_copy(update=update))

    if not out:
        raise ParseError("Model returned no usable filming clusters")

    missing = [sid for sid in known if sid not in placed]
    if missing:
        logger.warning("Model left %d scripts unclustered; adding %r", len(missing), REMAINING_CLUSTER_NAME)
        out.append(
            FilmingCluster(
                name=REMAINING_CLUSTER_NAME,
                description="Scripts the filming plan did not place",
                script_ids=missing,
                props=["Script printout"],
                energy=5,
                estimated_minutes=len(missing) * minutes_per_script,
                **_DEFAULT_SETUP,
            )
        )
    return out


def _usable_timeline(draft: PlanDraft, clusters: Sequence[FilmingCluster]) -> list[TimelineEntry]:
    """The model's timeline, or [] when it no longer matches the reconciled clusters."""
    if not draft.timeline:
        return []
    if [c.name for c in clusters] != [c.name for c in draft.clusters]:
        logger.info("Clusters were dropped or added during reconciliation; rebuilding the timeline")
        return []
    if any(entry.span() is None for entry in draft.timeline):
        logger.info("Model timeline has unreadable time slots; rebuilding it")
        return []
    return list(draft.timeline)


class PrimaryClusterGenerator:
    """Model-planned clusters, reconciled against the actual script list."""

    def __init__(
        self,
        *,
        agent: BatchPlanAgent,
        regional: Optional[RegionalPromptContext] = None,
        minutes_per_script: int = MINUTES_PER_SCRIPT,
    ) -> None:
        self._agent = agent
        self._regional = regional
        self._minutes = minutes_per_script

    def generate(self, request: BatchPlanRequest) -> PlanDraft:
        draft = self._agent.run(request=request, regional=self._regional)
        clusters = reconcile_clusters(draft.clusters, request.scripts, minutes_per_script=self._minutes)
        return PlanDraft(
            clusters=clusters,
            timeline=_usable_timeline(draft, clusters),
            checklist=draft.checklist,
        )


class FallbackClusterGenerator:
    """Deterministic grouping: scripts sharing production mode and tone, in chunks."""

    def __init__(self, *, chunk_size: int = 3, minutes_per_script: int = MINUTES_PER_SCRIPT) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._chunk_size = chunk_size
        self._minutes = minutes_per_script

    def generate(self, request: BatchPlanRequest) -> PlanDraft:
        groups: dict[tuple[ProductionMode, str], list[ScriptSummary]] = {}
        for script in request.scripts:
            key = (script.production_mode, (script.tone or "mixed").strip().lower() or "mixed")
            groups.setdefault(key, []).append(script)

        clusters: list[FilmingCluster] = []
        for (mode, tone), members in groups.items():
            for i in range(0, len(members), self._chunk_size):
                chunk = members[i : i + self._chunk_size]
                clusters.append(self._cluster(mode, tone, chunk))
        return PlanDraft(clusters=clusters)

    def _cluster(self, mode: ProductionMode, tone: str, chunk: Sequence[ScriptSummary]) -> FilmingCluster:
        is_ai = mode == ProductionMode.fully_ai
        setup = _AI_SETUP if is_ai else _DEFAULT_SETUP
        return FilmingCluster(
            name=f"{tone.capitalize()} Videos ({len(chunk)})",
            description=f"{_MODE_LABELS[mode]} cluster with {tone} tone",
            script_ids=[s.script_id for s in chunk],
            props=[] if is_ai else ["Script printout"],
            energy=4 if tone == "emotional" else 6,
            estimated_minutes=len(chunk) * self._minutes,
            **setup,
        )
