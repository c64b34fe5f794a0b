from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from integrations.openai_adapters import OpenAICompletionService
from shorts_planner.config import load_settings
from shorts_planner.errors import ConfigurationMissing, GenerationFailure
from shorts_planner.generation import failure_from_error, generate_topics
from shorts_planner.validation import (
    load_creator_profile,
    load_project_request,
    validate_profile,
    validate_project_request,
)


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a month of short-form video topics for a creator.")
    parser.add_argument("--profile", required=True, help="Path to profile YAML")
    parser.add_argument("--project", required=True, help="Path to project YAML")
    parser.add_argument("--settings", required=False, help="Optional settings overrides YAML")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    repo_root = _repo_root()

    profile_path = Path(args.profile)
    if not profile_path.is_absolute():
        profile_path = repo_root / profile_path

    project_path = Path(args.project)
    if not project_path.is_absolute():
        project_path = repo_root / project_path

    settings = load_settings(args.settings)
    profile = load_creator_profile(profile_path)
    project = load_project_request(project_path)
    validate_profile(profile)
    validate_project_request(project, settings, profile=profile)

    try:
        completion = OpenAICompletionService()
    except ConfigurationMissing as e:
        result = failure_from_error(e, task="topics")
    else:
        result = generate_topics(profile=profile, project=project, completion=completion, settings=settings)
    if isinstance(result, GenerationFailure):
        print(json.dumps(result.to_dict(), indent=2))
        return 1

    out_dir = repo_root / "outputs" / "topics"
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{project.project_id}.json"
    out_path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    print(f"Generated {result.generated}/{result.requested} topics")
    print(f"Wrote topics: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
