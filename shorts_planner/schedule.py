from __future__ import annotations

import logging
from typing import Optional, Sequence

from schemas.cluster import FilmingChecklist, FilmingCluster, TimelineEntry, TimelineKind, format_clock

logger = logging.getLogger(__name__)

SETUP_MINUTES = 15
BREAK_EVERY_MINUTES = 90
BREAK_MINUTES = 15
# Between clusters: a new outfit or location takes the longer change.
CHANGE_MINUTES = 10
WARDROBE_CHANGE_MINUTES = 15

_AI_PLACEHOLDER = "N/A (AI Generated)"


def _needs_wardrobe_change(prev: FilmingCluster, nxt: FilmingCluster) -> bool:
    return (
        prev.outfit.strip().lower() != nxt.outfit.strip().lower()
        or prev.location.strip().lower() != nxt.location.strip().lower()
    )


def build_timeline(clusters: Sequence[FilmingCluster]) -> list[TimelineEntry]:
    """Lay the clusters out over one filming day, in the order given.

    The day opens with setup. Clusters are never split; between two clusters
    there is either a change (10 min, 15 when outfit or location differs) or,
    once 90 minutes have passed since the last rest, a 15 min break that also
    covers the change.
    """
    if not clusters:
        return []

    entries: list[TimelineEntry] = []
    clock = 0

    def add(minutes: int, activity: str, kind: TimelineKind, cluster_name: Optional[str] = None) -> None:
        nonlocal clock
        start, clock = clock, clock + minutes
        entries.append(
            TimelineEntry(
                time=f"{format_clock(start)}-{format_clock(clock)}",
                activity=activity,
                type=kind,
                cluster_name=cluster_name,
            )
        )

    add(SETUP_MINUTES, "Setup & Equipment Check", TimelineKind.setup)
    since_rest = SETUP_MINUTES

    for i, cluster in enumerate(clusters):
        if i > 0:
            prev = clusters[i - 1]
            if since_rest >= BREAK_EVERY_MINUTES:
                add(BREAK_MINUTES, "Break & Outfit Change", TimelineKind.break_)
                since_rest = 0
            else:
                minutes = WARDROBE_CHANGE_MINUTES if _needs_wardrobe_change(prev, cluster) else CHANGE_MINUTES
                add(minutes, f"Reset for {cluster.name}", TimelineKind.change)
                since_rest += minutes

        n = len(cluster.script_ids)
        add(
            cluster.estimated_minutes,
            f"Cluster {i + 1}: {cluster.name} ({n} video{'s' if n != 1 else ''})",
            TimelineKind.filming,
            cluster_name=cluster.name,
        )
        since_rest += cluster.estimated_minutes

    logger.debug("Timeline: %d entries over %d minutes", len(entries), clock)
    return entries


def default_checklist(clusters: Sequence[FilmingCluster]) -> FilmingChecklist:
    props: list[str] = []
    outfits: list[str] = []
    for c in clusters:
        for p in c.props:
            if p not in props:
                props.append(p)
        if c.outfit and c.outfit != _AI_PLACEHOLDER and c.outfit not in outfits:
            outfits.append(c.outfit)

    total = sum(len(c.script_ids) for c in clusters)
    pre = ["Charge camera, microphone and lights", "Free up storage space", f"Review all {total} scripts"]
    if props:
        pre.append("Gather props: " + ", ".join(props))
    if len(outfits) > 1:
        pre.append(f"Lay out {len(outfits)} outfits in filming order")

    return FilmingChecklist(
        pre_filming=pre,
        per_cluster=[
            "Check framing and focus",
            "Test audio levels",
            "Match lighting to the cluster setup",
            "Say the script id at the start of each take",
        ],
        post_filming=[
            "Back up footage to two locations",
            "Review clips and note reshoots",
            "Rename files by script id",
        ],
    )


def day_overrun_warning(day_minutes: int, filming_hours: float) -> Optional[str]:
    budget = round(filming_hours * 60)
    if day_minutes <= budget:
        return None
    return (
        f"Filming day needs {format_clock(day_minutes)} but only {filming_hours:g} hours are available; "
        "split the batch or drop a cluster"
    )
