from __future__ import annotations

import logging
from typing import Iterable, Sequence

from schemas.topic import TopicCandidate

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.80


def normalize_title(title: str) -> str:
    return (title or "").strip().lower()


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance: insert, delete and substitute all cost 1."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """(longer - distance) / longer, over the full strings. Two empty strings are identical."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(a, b)) / longer


def filter_unique(
    candidates: Iterable[TopicCandidate],
    existing_titles: Sequence[str] = (),
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[TopicCandidate]:
    """Keep complete, non-duplicate candidates in input order.

    A candidate is dropped when it lacks title/hook/core value, when its
    normalized title matches a seen title exactly, or when it is more than
    `threshold` similar to one. Seen titles start as `existing_titles` and grow
    with every accepted candidate.
    """
    seen: list[str] = []
    seen_set: set[str] = set()
    for title in existing_titles:
        norm = normalize_title(title)
        if norm and norm not in seen_set:
            seen.append(norm)
            seen_set.add(norm)

    accepted: list[TopicCandidate] = []
    for candidate in candidates:
        if not candidate.is_complete():
            logger.info("Dropping incomplete topic: %r", candidate.title)
            continue

        norm = normalize_title(candidate.title or "")
        if norm in seen_set:
            logger.info("Dropping duplicate topic: %r", candidate.title)
            continue

        match = next((s for s in seen if similarity(norm, s) > threshold), None)
        if match is not None:
            logger.info(
                "Dropping near-duplicate topic %r (%.2f similar to %r)",
                candidate.title,
                similarity(norm, match),
                match,
            )
            continue

        accepted.append(candidate)
        seen.append(norm)
        seen_set.add(norm)

    return accepted
