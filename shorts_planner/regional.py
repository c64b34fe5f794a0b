from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from shorts_planner.models import CustomEvent
from shorts_planner.regional_catalog import (
    DateFormat,
    Hemisphere,
    Holiday,
    RegionalConfig,
    all_configs,
    default_country_code,
    get_config,
    is_supported,
    normalize_country_code,
)

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Meteorological seasons: (Northern, Southern) per month.
_SEASONS: dict[int, tuple[str, str]] = {
    12: ("Winter", "Summer"),
    1: ("Winter", "Summer"),
    2: ("Winter", "Summer"),
    3: ("Spring", "Autumn"),
    4: ("Spring", "Autumn"),
    5: ("Spring", "Autumn"),
    6: ("Summer", "Winter"),
    7: ("Summer", "Winter"),
    8: ("Summer", "Winter"),
    9: ("Autumn", "Spring"),
    10: ("Autumn", "Spring"),
    11: ("Autumn", "Spring"),
}

TERMINOLOGY_LIMIT = 10
CULTURAL_NOTES_LIMIT = 5

_LOCATION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "GB": (
        "united kingdom",
        "great britain",
        "britain",
        "england",
        "scotland",
        "wales",
        "northern ireland",
        "london",
        "manchester",
        "birmingham",
        "leeds",
        "glasgow",
        "edinburgh",
        "cardiff",
        "belfast",
        "bristol",
        "liverpool",
    ),
    "US": (
        "united states",
        "america",
        "new york",
        "los angeles",
        "chicago",
        "houston",
        "texas",
        "california",
        "florida",
        "seattle",
        "boston",
        "miami",
        "atlanta",
        "san francisco",
    ),
    "CA": (
        "canada",
        "toronto",
        "vancouver",
        "montreal",
        "ottawa",
        "calgary",
        "edmonton",
        "ontario",
        "quebec",
        "alberta",
        "british columbia",
        "nova scotia",
        "manitoba",
    ),
    "AU": (
        "australia",
        "sydney",
        "melbourne",
        "brisbane",
        "perth",
        "adelaide",
        "canberra",
        "hobart",
        "queensland",
        "new south wales",
        "tasmania",
    ),
}


@dataclass(frozen=True)
class RegionalPromptContext:
    """Everything the prompt builders need about creator and audience locale for one request."""

    creator: RegionalConfig
    target: RegionalConfig
    year: int
    month: int
    holidays: tuple[Holiday, ...]
    terminology: tuple[str, ...]
    cultural_context: tuple[str, ...]
    cultural_notes: tuple[str, ...]
    custom_events: tuple[CustomEvent, ...] = ()

    @property
    def same_region(self) -> bool:
        return self.creator.country_code == self.target.country_code


def _check_month(month: int) -> int:
    m = int(month)
    if m < 1 or m > 12:
        raise ValueError(f"month must be 1-12, got {month!r}")
    return m


def holidays_in_month(country_code: Optional[str], year: int, month: int) -> list[Holiday]:
    """Target-region holidays whose date falls in the given year/month, in catalog order."""
    cfg = get_config(country_code)
    prefix = f"{int(year):04d}-{_check_month(month):02d}"
    return [h for h in cfg.holidays if h.date[:7] == prefix]


def holidays_in_range(country_code: Optional[str], start: object, end: object) -> list[Holiday]:
    """Holidays with start <= date <= end (ISO strings compare chronologically).

    Anything that is not an ISO date string yields no matches.
    """
    if not isinstance(start, str) or not isinstance(end, str):
        return []
    start, end = start.strip(), end.strip()
    if not _ISO_DATE_RE.match(start) or not _ISO_DATE_RE.match(end):
        logger.debug("Ignoring malformed holiday range %r..%r", start, end)
        return []
    cfg = get_config(country_code)
    return [h for h in cfg.holidays if start <= h.date <= end]


def season_for_month(month: int, hemisphere: Hemisphere) -> str:
    northern, southern = _SEASONS[_check_month(month)]
    return northern if hemisphere == Hemisphere.northern else southern


def cultural_context(country_code: Optional[str], month: int, year: Optional[int] = None) -> list[str]:
    """Readable context lines: the month's holidays (if any), then one season label."""
    cfg = get_config(country_code)
    year = date.today().year if year is None else int(year)

    lines: list[str] = []
    month_holidays = holidays_in_month(cfg.country_code, year, month)
    if month_holidays:
        lines.append(f"Important dates in {cfg.country}:")
        lines.extend(h.bullet() for h in month_holidays)

    lines.append(f"{season_for_month(month, cfg.hemisphere)} season")
    return lines


def _match_case(source: str, word: str) -> str:
    if source[:1].isupper() and word:
        return word[:1].upper() + word[1:]
    return word


def _canonical_key(term_lower: str, config: RegionalConfig) -> Optional[str]:
    for key, word in config.terminology.items():
        if word.lower() == term_lower:
            return key
    if term_lower in config.terminology:
        return term_lower
    return None


def translate_term(term: str, from_code: Optional[str], to_code: Optional[str]) -> str:
    """Swap a word for the target region's equivalent, e.g. "fall" (US) -> "autumn" (GB).

    Unknown words come back unchanged; that is the normal case, not an error.
    """
    if not isinstance(term, str):
        return term
    term_lower = term.strip().lower()
    if not term_lower:
        return term

    key = _canonical_key(term_lower, get_config(from_code))
    if key is None:
        return term

    translated = get_config(to_code).terminology.get(key)
    if translated is None:
        return term
    return _match_case(term.strip(), translated)


def terminology_substitutions(
    creator: RegionalConfig,
    target: RegionalConfig,
    limit: int = TERMINOLOGY_LIMIT,
) -> list[str]:
    """Prompt lines telling the model which audience word to use instead of which other word."""
    lines: list[str] = []
    for key, target_word in target.terminology.items():
        creator_word = creator.terminology.get(key, key)
        if creator_word.lower() != target_word.lower():
            avoid = creator_word
        elif key != target_word.lower():
            avoid = key
        else:
            continue
        lines.append(f'- Use "{target_word}" not "{avoid}"')
        if len(lines) >= limit:
            break
    return lines


def build_prompt_context(
    creator_code: Optional[str],
    target_code: Optional[str],
    month: int,
    year: int,
    custom_events: Optional[Iterable[CustomEvent]] = None,
) -> RegionalPromptContext:
    creator = get_config(creator_code)
    target = get_config(target_code)
    month = _check_month(month)

    ctx = RegionalPromptContext(
        creator=creator,
        target=target,
        year=int(year),
        month=month,
        holidays=tuple(holidays_in_month(target.country_code, year, month)),
        terminology=tuple(terminology_substitutions(creator, target)),
        cultural_context=tuple(cultural_context(target.country_code, month, year)),
        cultural_notes=tuple(target.cultural_notes[:CULTURAL_NOTES_LIMIT]),
        custom_events=tuple(custom_events or ()),
    )
    logger.debug(
        "Regional context %s -> %s for %04d-%02d: %d holidays, %d custom events",
        creator.country_code,
        target.country_code,
        ctx.year,
        ctx.month,
        len(ctx.holidays),
        len(ctx.custom_events),
    )
    return ctx


def format_date(d: date, country_code: Optional[str]) -> str:
    cfg = get_config(country_code)
    if cfg.date_format == DateFormat.day_first:
        return f"{d.day:02d}/{d.month:02d}/{d.year}"
    return f"{d.month:02d}/{d.day:02d}/{d.year}"


def _keyword_hits(text: str, keywords: Sequence[str]) -> int:
    best = 0
    for kw in keywords:
        if re.search(rf"\b{re.escape(kw)}\b", text):
            best = max(best, len(kw))
    return best


def detect_country_from_location(location: Optional[str]) -> str:
    """Best guess of a catalog country code from free text such as "Leeds, UK".

    A bare code or alias wins; otherwise the longest matching place keyword
    decides ("New South Wales" is AU, not GB). Defaults to the catalog default.
    """
    text = (location or "").strip()
    if not text:
        return default_country_code()

    for part in reversed(re.split(r"[,/]", text)):
        if part.strip() and is_supported(part):
            return normalize_country_code(part)

    lowered = text.lower()
    best_code, best_len = None, 0
    for cfg in all_configs():
        hit = _keyword_hits(lowered, _LOCATION_KEYWORDS.get(cfg.country_code, ()))
        if hit > best_len:
            best_code, best_len = cfg.country_code, hit

    if best_code is None:
        logger.info("Could not place location %r; using default region", location)
        return default_country_code()
    return best_code
