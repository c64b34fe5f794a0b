from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml

from shorts_planner.config import Settings
from shorts_planner.models import BatchPlanRequest, CreatorProfile, ProjectRequest, ScriptRequest
from shorts_planner.regional_catalog import all_country_codes, is_supported


def load_yaml_file(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping: {p}")
    return data


def load_creator_profile(path: str | Path) -> CreatorProfile:
    data = load_yaml_file(path)
    return CreatorProfile.model_validate(data)


def load_project_request(path: str | Path) -> ProjectRequest:
    data = load_yaml_file(path)
    return ProjectRequest.model_validate(data)


def load_script_request(path: str | Path) -> ScriptRequest:
    data = load_yaml_file(path)
    return ScriptRequest.model_validate(data)


def load_batch_plan_request(path: str | Path) -> BatchPlanRequest:
    data = load_yaml_file(path)
    return BatchPlanRequest.model_validate(data)


def validate_profile(profile: CreatorProfile) -> None:
    errors: list[str] = []

    if not profile.niche.strip():
        errors.append("niche must not be empty")
    if not profile.signature_tone.primary.strip():
        errors.append("signature_tone.primary must not be empty")

    # Unknown codes would silently resolve to the default region; make that a visible error here.
    for field_name in ("creator_country", "target_country"):
        code = getattr(profile, field_name)
        if not is_supported(code):
            errors.append(f"{field_name} {code!r} is not supported; supported={list(all_country_codes())}")

    if errors:
        msg = "\n".join(f"- {e}" for e in errors)
        raise ValueError(f"Profile validation failed:\n{msg}")


def validate_project_request(
    project: ProjectRequest,
    settings: Optional[Settings] = None,
    *,
    profile: Optional[CreatorProfile] = None,
) -> None:
    settings = settings or Settings()
    errors: list[str] = []

    if profile is not None and project.profile_id != profile.profile_id:
        errors.append(f"profile_id mismatch: project={project.profile_id} profile={profile.profile_id}")

    if not project.tone_mix:
        errors.append("tone_mix must not be empty")
    else:
        negative = sorted(t for t, pct in project.tone_mix.items() if pct < 0)
        if negative:
            errors.append(f"tone_mix percentages must not be negative: {negative}")
        total = sum(project.tone_mix.values())
        if abs(total - 100) > settings.tone_mix_tolerance:
            errors.append(f"tone_mix must sum to 100 (got {total:g})")

    year, _ = project.year_month
    for event in project.custom_events:
        if not event.name.strip():
            errors.append(f"custom event on {event.date} has no name")
        # Lead-up events outside the project month are fine; dates years away are not.
        if abs(int(event.date[:4]) - year) > 1:
            errors.append(f"custom event {event.name!r} date {event.date} is far from project month {project.month}")

    if errors:
        msg = "\n".join(f"- {e}" for e in errors)
        raise ValueError(f"Project validation failed:\n{msg}")
