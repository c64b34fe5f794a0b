from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from shorts_planner.completion import CompletionService
from shorts_planner.config import Settings, load_settings
from shorts_planner.errors import ConfigurationMissing, GenerationFailure
from shorts_planner.generation import (
    batch_plan_record,
    failure_from_error,
    generate_batch_plan,
    generate_script,
    generate_topics,
    topic_records,
)
from shorts_planner.models import CustomEvent, parse_month
from shorts_planner.onboarding import write_onboarding_files
from shorts_planner.prompts import render_regional_context
from shorts_planner.regional import build_prompt_context
from shorts_planner.regional_catalog import all_configs, describe
from shorts_planner.storage import JsonFileStore
from shorts_planner.validation import (
    load_batch_plan_request,
    load_creator_profile,
    load_project_request,
    load_script_request,
    validate_profile,
    validate_project_request,
)

logger = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> Settings:
    return load_settings(getattr(args, "settings", None))


def _completion_service() -> CompletionService:
    from integrations.openai_adapters import OpenAICompletionService

    return OpenAICompletionService()


def _emit(payload: dict[str, Any], out: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        print(f"Wrote: {out_path}")
    else:
        print(text)


def _fail(failure: GenerationFailure) -> int:
    print(json.dumps(failure.to_dict(), indent=2, ensure_ascii=False))
    return 1


def cmd_onboard(args: argparse.Namespace) -> int:
    month = args.month or date.today().strftime("%Y-%m")
    paths = write_onboarding_files(
        root=Path(args.root),
        creator_id=args.creator_id,
        niche=args.niche,
        location=args.location,
        month=month,
        name=args.name or "",
        target_country=args.target_country,
        videos_needed=args.videos,
    )

    print(f"Wrote profile: {paths.profile_path}")
    print(f"Wrote project: {paths.project_path}")
    print("Next: edit the unique angle, tones and boundaries; then generate topics.")
    return 0


def cmd_regions(args: argparse.Namespace) -> int:
    for cfg in all_configs():
        d = describe(cfg)
        print(
            f"{d['country_code']}  {d['country']:<16} {d['language']:<20} {d['hemisphere']:<9} "
            f"{d['date_format']}  {d['currency']:<10} {d['holidays']} holidays"
        )
    return 0


def _parse_event(raw: str) -> CustomEvent:
    # DATE:NAME[:DESCRIPTION]
    parts = raw.split(":", 2)
    if len(parts) < 2:
        raise ValueError(f"--event must look like YYYY-MM-DD:Name[:Description], got {raw!r}")
    return CustomEvent(date=parts[0], name=parts[1], description=parts[2] if len(parts) > 2 else "")


def cmd_context(args: argparse.Namespace) -> int:
    year, month = parse_month(args.month)
    events = [_parse_event(e) for e in (args.event or [])]
    ctx = build_prompt_context(args.creator, args.target or args.creator, month, year, events)
    print(render_regional_context(ctx))
    return 0


def cmd_topics(args: argparse.Namespace) -> int:
    settings = _settings(args)
    profile = load_creator_profile(args.profile)
    project = load_project_request(args.project)
    validate_profile(profile)
    validate_project_request(project, settings, profile=profile)

    store = JsonFileStore(args.store) if args.store else None
    if store is not None:
        stored = [r.get("title") for r in store.find_by_parent_id("topics", project.project_id)]
        known = list(project.existing_topics) + [t for t in stored if isinstance(t, str)]
        logger.info("Checking against %d existing titles (%d from %s)", len(known), len(stored), store.root)
        project = project.model_copy(update={"existing_topics": known})

    try:
        completion = _completion_service()
    except ConfigurationMissing as e:
        return _fail(failure_from_error(e, task="topics"))

    result = generate_topics(profile=profile, project=project, completion=completion, settings=settings)
    if isinstance(result, GenerationFailure):
        return _fail(result)

    if store is not None and result.topics:
        saved = store.create_many("topics", topic_records(project.project_id, result.topics))
        print(f"Stored {len(saved)} topics in {store.root}")

    _emit(result.to_dict(), args.out)
    return 0


def cmd_script(args: argparse.Namespace) -> int:
    settings = _settings(args)
    profile = load_creator_profile(args.profile) if args.profile else None
    request = load_script_request(args.request)

    try:
        completion = _completion_service()
    except ConfigurationMissing as e:
        return _fail(failure_from_error(e, task="script"))

    result = generate_script(profile=profile, request=request, completion=completion, settings=settings)
    if isinstance(result, GenerationFailure):
        return _fail(result)

    record = result.to_dict()
    if args.store:
        record = JsonFileStore(args.store).create("scripts", record)
        print(f"Stored script {record['id']} in {args.store}")

    _emit({"success": True, "script": record}, args.out)
    return 0


def cmd_batch_plan(args: argparse.Namespace) -> int:
    settings = _settings(args)
    request = load_batch_plan_request(args.request)

    try:
        completion = _completion_service()
    except ConfigurationMissing as e:
        return _fail(failure_from_error(e, task="batch plan"))

    plan = generate_batch_plan(request=request, completion=completion, settings=settings)
    if isinstance(plan, GenerationFailure):
        return _fail(plan)

    if plan.warning:
        print(f"WARN: {plan.warning}")

    record = batch_plan_record(request.project_id, plan)
    if args.store:
        record = JsonFileStore(args.store).create("batch_plans", record)
        print(f"Stored batch plan {record['id']} in {args.store}")

    _emit({"success": True, "batch_plan": record}, args.out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="shorts-planner", description="Short-form video content planner")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    onboard = sub.add_parser("onboard", help="Scaffold profile + project YAML for a new creator")
    onboard.add_argument("--creator-id", required=True)
    onboard.add_argument("--niche", required=True)
    onboard.add_argument("--location", required=True, help='Free text, e.g. "Leeds, UK"')
    onboard.add_argument("--name", required=False)
    onboard.add_argument("--target-country", required=False, help="Audience country code (defaults to yours)")
    onboard.add_argument("--month", required=False, help="YYYY-MM (defaults to this month)")
    onboard.add_argument("--videos", type=int, default=20)
    onboard.add_argument("--root", default=".", help="Directory to write profiles/ and projects/ into")
    onboard.set_defaults(func=cmd_onboard)

    regions = sub.add_parser("regions", help="List supported regions")
    regions.set_defaults(func=cmd_regions)

    ctx = sub.add_parser("context", help="Print the regional prompt context for a month")
    ctx.add_argument("--creator", required=True, help="Creator country code")
    ctx.add_argument("--target", required=False, help="Audience country code (defaults to --creator)")
    ctx.add_argument("--month", required=True, help="YYYY-MM")
    ctx.add_argument("--event", action="append", help="Custom event YYYY-MM-DD:Name[:Description]; repeatable")
    ctx.set_defaults(func=cmd_context)

    for name, helptext in (
        ("topics", "Generate topic ideas for a project month"),
        ("script", "Generate a script for one topic"),
        ("batch-plan", "Group finished scripts into filming clusters"),
    ):
        cmd = sub.add_parser(name, help=helptext)
        cmd.add_argument("--settings", required=False, help="YAML settings overrides")
        cmd.add_argument("--store", required=False, help="JsonFileStore directory for reading/persisting records")
        cmd.add_argument("--out", required=False, help="Write JSON output here instead of stdout")
        if name == "topics":
            cmd.add_argument("--profile", required=True)
            cmd.add_argument("--project", required=True)
            cmd.set_defaults(func=cmd_topics)
        elif name == "script":
            cmd.add_argument("--profile", required=False)
            cmd.add_argument("--request", required=True)
            cmd.set_defaults(func=cmd_script)
        else:
            cmd.add_argument("--request", required=True)
            cmd.set_defaults(func=cmd_batch_plan)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
