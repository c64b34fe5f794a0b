from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from shorts_planner.models import DEFAULT_TONE_MIX, ProductionMode, parse_month
from shorts_planner.regional import detect_country_from_location
from shorts_planner.regional_catalog import normalize_country_code


@dataclass(frozen=True)
class OnboardPaths:
    profile_path: Path
    project_path: Path


def _ensure_nonempty(value: str, field_name: str) -> str:
    v = (value or "").strip()
    if not v:
        raise ValueError(f"{field_name} must not be empty")
    return v


def scaffold_profile_dict(
    *,
    creator_id: str,
    niche: str,
    location: str,
    name: str = "",
    target_country: Optional[str] = None,
) -> dict:
    creator_id = _ensure_nonempty(creator_id, "creator_id")
    niche = _ensure_nonempty(niche, "niche")

    creator_country = detect_country_from_location(location)
    target = normalize_country_code(target_country) if target_country else creator_country

    # Valid shape, placeholder values the creator is expected to edit.
    return {
        "profile_id": creator_id,
        "name": name.strip(),
        "channel_name": "",
        "niche": niche,
        "unique_angle": "Replace with what makes this channel different",
        "signature_tone": {
            "primary": "Conversational",
            "secondary": "Direct",
            "accent": "Friendly",
        },
        "catchphrases": [],
        "boundaries": {
            "wont_cover": [],
            "privacy_limits": [],
        },
        "location": (location or "").strip(),
        "creator_country": creator_country,
        "target_country": target,
    }


def scaffold_project_dict(
    *,
    creator_id: str,
    month: str,
    videos_needed: int = 20,
) -> dict:
    creator_id = _ensure_nonempty(creator_id, "creator_id")
    parse_month(month)
    if videos_needed < 1:
        raise ValueError("videos_needed must be >= 1")

    return {
        "project_id": f"{creator_id}_{month}",
        "profile_id": creator_id,
        "name": f"{month} shorts",
        "month": month,
        "videos_needed": videos_needed,
        "tone_mix": dict(DEFAULT_TONE_MIX),
        "production_mode": ProductionMode.traditional.value,
        "custom_events": [],
        "existing_topics": [],
    }


def write_onboarding_files(
    *,
    root: Path,
    creator_id: str,
    niche: str,
    location: str,
    month: str,
    name: str = "",
    target_country: Optional[str] = None,
    videos_needed: int = 20,
) -> OnboardPaths:
    profiles_dir = root / "profiles"
    projects_dir = root / "projects"
    profiles_dir.mkdir(parents=True, exist_ok=True)
    projects_dir.mkdir(parents=True, exist_ok=True)

    profile_path = profiles_dir / f"{creator_id}.yaml"
    project_path = projects_dir / f"{creator_id}_{month}.yaml"

    profile_dict = scaffold_profile_dict(
        creator_id=creator_id,
        niche=niche,
        location=location,
        name=name,
        target_country=target_country,
    )
    project_dict = scaffold_project_dict(
        creator_id=creator_id,
        month=month,
        videos_needed=videos_needed,
    )

    profile_path.write_text(yaml.safe_dump(profile_dict, sort_keys=False, allow_unicode=True), encoding="utf-8")
    project_path.write_text(yaml.safe_dump(project_dict, sort_keys=False, allow_unicode=True), encoding="utf-8")

    return OnboardPaths(profile_path=profile_path, project_path=project_path)
