from __future__ import annotations

import calendar
import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional, Sequence

from shorts_planner.models import CreatorProfile, ProductionMode, ProjectRequest, ScriptSummary
from shorts_planner.regional import RegionalPromptContext
from shorts_planner.schedule import (
    BREAK_EVERY_MINUTES,
    BREAK_MINUTES,
    CHANGE_MINUTES,
    SETUP_MINUTES,
    WARDROBE_CHANGE_MINUTES,
)
from schemas.topic import TopicCandidate

PRIOR_TOPICS_LIMIT = 20

_SPELLING_EXAMPLES: dict[str, str] = {
    "American English": '"color" not "colour", "organize" not "organise", "center" not "centre"',
    "Canadian English": '"colour" not "color", "centre" not "center", "organize" is fine',
}
_DEFAULT_SPELLING_EXAMPLE = '"colour" not "color", "organise" not "organize", "centre" not "center"'

_TOPIC_PRODUCTION_CONTEXT: dict[ProductionMode, str] = {
    ProductionMode.traditional: "Creator will film themselves. Suggest topics for authentic, personal delivery.",
    ProductionMode.ai_voice_stock: "Creator will use AI voiceover with stock footage. Topics should be visual.",
    ProductionMode.fully_ai: "Creator will create fully AI-generated videos. Topics should be visually creative.",
}

_SCRIPT_ROLE: dict[ProductionMode, str] = {
    ProductionMode.traditional: (
        "You are an expert YouTube Shorts scriptwriter specializing in traditional on-camera filming.\n"
        "Create scripts optimized for a creator filming themselves with physical presence, gestures, "
        "and direct camera engagement.\n"
        "Focus on natural delivery cues, physical actions, and camera-friendly pacing."
    ),
    ProductionMode.ai_voice_stock: (
        "You are an expert YouTube Shorts scriptwriter specializing in AI voiceover + stock footage content.\n"
        "Create scripts optimized for AI text-to-speech narration paired with relevant stock video footage.\n"
        "Focus on:\n"
        "- Natural, conversational narration that sounds good when synthesized\n"
        "- Specific stock footage keywords that match the narration\n"
        "- Clear visual-audio synchronization\n"
        "- Avoiding complex punctuation that might confuse TTS"
    ),
    ProductionMode.fully_ai: (
        "You are an expert YouTube Shorts scriptwriter specializing in fully AI-generated content.\n"
        "Create scripts optimized for AI voiceover paired with AI-generated images.\n"
        "Focus on:\n"
        "- Natural AI voiceover narration\n"
        "- Highly detailed image generation prompts that create a cohesive visual story\n"
        "- Scene-by-scene visual descriptions in a consistent style"
    ),
}

_SCRIPT_STRUCTURE: dict[ProductionMode, str] = {
    ProductionMode.traditional: (
        "REQUIRED STRUCTURE:\n"
        "- Hook (0-3s): Opening line that stops the scroll\n"
        "- Setup (3-8s): Problem or context\n"
        "- Value Delivery (8-50s): Main content with [DELIVERY CUES]\n"
        "- CTA (50-60s): Call to action\n"
        "\n"
        "Use delivery cues like:\n"
        "[PAUSE] - Brief pause for emphasis\n"
        "[EMPHASIZE] - Stress this word/phrase\n"
        "[SMILE] - Friendly expression\n"
        "[SHOW: item] - Show physical object\n"
        "[GESTURE] - Hand movement\n"
        "[LEAN IN] - Move closer to camera"
    ),
    ProductionMode.ai_voice_stock: (
        "REQUIRED STRUCTURE FOR AI VOICE + STOCK FOOTAGE:\n"
        "- Hook (0-3s): Opening voiceover line that stops the scroll\n"
        "- Setup (3-8s): Problem statement or context\n"
        "- Value Delivery (8-50s): Main content with [STOCK FOOTAGE] cues\n"
        "- CTA (50-60s): Clear call to action\n"
        "\n"
        "Use [STOCK FOOTAGE: keyword] cues to indicate what stock video should play, e.g.:\n"
        "[STOCK FOOTAGE: person working on laptop]\n"
        "[STOCK FOOTAGE: sunrise timelapse]\n"
        "\n"
        "Keep narration natural for AI voice synthesis; avoid complex punctuation."
    ),
    ProductionMode.fully_ai: (
        "REQUIRED STRUCTURE FOR FULLY AI GENERATED:\n"
        "- Hook (0-3s): Opening voiceover line\n"
        "- Setup (3-8s): Problem statement\n"
        "- Value Delivery (8-50s): Main content with [AI IMAGE] prompts\n"
        "- CTA (50-60s): Call to action\n"
        "\n"
        "Use [AI IMAGE: detailed prompt] for each visual, e.g.:\n"
        "[AI IMAGE: modern minimalist home office with laptop, soft lighting]\n"
        "[AI IMAGE: infographic showing 3 steps, clean design, blue and white colour scheme]"
    ),
}

_CUE_REQUIREMENT: dict[ProductionMode, str] = {
    ProductionMode.traditional: "delivery cues [IN BRACKETS]",
    ProductionMode.ai_voice_stock: "[STOCK FOOTAGE: keywords] cues",
    ProductionMode.fully_ai: "[AI IMAGE: detailed prompts]",
}

_VISUAL_CUES_SHAPE: dict[ProductionMode, str] = {
    ProductionMode.traditional: (
        '"bRoll": ["Close-up on face for hook", "Show item at 20s"], "textOverlays": ["Key stat at 15s"]'
    ),
    ProductionMode.ai_voice_stock: (
        '"stockFootageKeywords": ["morning routine", "coffee"], '
        '"timing": [{"time": "0-5s", "footage": "person waking up"}]'
    ),
    ProductionMode.fully_ai: (
        '"imagePrompts": [{"time": "0-5s", "prompt": "detailed scene description"}], '
        '"style": "photorealistic OR illustrated OR minimal"'
    ),
}


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def tone_targets(tone_mix: Mapping[str, float], total: int) -> dict[str, int]:
    """Videos per tone: round(pct / 100 * total), halves rounded away from zero.

    The counts are not forced to add up to `total`; 30/25/20/15/10 over 10
    videos gives 3/3/2/2/1 = 11.
    """
    total_d = Decimal(int(total))
    return {
        tone: _round_half_up(Decimal(str(pct)) * total_d / Decimal(100))
        for tone, pct in tone_mix.items()
    }


def _bullets(items: Iterable[str], placeholder: str) -> str:
    lines = [f"- {it}" for it in items if (it or "").strip()]
    return "\n".join(lines) if lines else f"- {placeholder}"


def _spelling_example(language: str) -> str:
    return _SPELLING_EXAMPLES.get(language, _DEFAULT_SPELLING_EXAMPLE)


def _month_bounds(year: int, month: int) -> tuple[str, str]:
    last_day = calendar.monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}"


def _joined(lines: Iterable[str], placeholder: str) -> str:
    lines = list(lines)
    return "\n".join(lines) if lines else f"- {placeholder}"


def render_regional_context(ctx: RegionalPromptContext) -> str:
    """Regional block shared by every prompt. Section headers are always present."""
    creator, target = ctx.creator, ctx.target

    if ctx.same_region:
        audience_rule = f"Keep references local to {target.country}"
    else:
        audience_rule = f"Avoid assuming {creator.country}-centric content"

    critical = [
        f"DO NOT mention holidays that don't apply to {target.country}",
        f"Use {target.country}-appropriate cultural references",
        audience_rule,
    ]
    if target.holiday_meaning:
        critical.append(f'When saying "holiday" in {target.country}, it means {target.holiday_meaning}')

    terminology = _joined(ctx.terminology, "No terminology changes needed")
    holidays = _joined((h.bullet() for h in ctx.holidays), "None this month")
    custom_events = _joined((e.bullet() for e in ctx.custom_events), "No custom events")
    cultural = _joined(ctx.cultural_context, "No cultural context")

    return (
        "REGIONAL CONTEXT:\n"
        "\n"
        f"Creator Location: {creator.country} ({creator.country_code})\n"
        f"- Language: {creator.language}\n"
        f"- Use {creator.language} spelling (e.g., {_spelling_example(creator.language)})\n"
        f"- Date format: {creator.date_format.value}\n"
        f"- Time format: {creator.time_format.value}\n"
        f"- Currency: {creator.currency} ({creator.currency_symbol})\n"
        "\n"
        f"Target Audience: {target.country} ({target.country_code})\n"
        f"- Create content relevant to {target.country} culture\n"
        f"- Reference {target.country} holidays and events\n"
        "\n"
        "IMPORTANT TERMINOLOGY:\n"
        f"{terminology}\n"
        "\n"
        "HOLIDAYS & EVENTS THIS MONTH:\n"
        f"{holidays}\n"
        "\n"
        "CUSTOM EVENTS:\n"
        f"{custom_events}\n"
        "\n"
        "CULTURAL CONTEXT:\n"
        f"{cultural}\n"
        "\n"
        f"CULTURAL NOTES FOR {target.country}:\n"
        f"{_bullets(ctx.cultural_notes, 'None')}\n"
        "\n"
        "CRITICAL INSTRUCTIONS:\n"
        f"{_bullets(critical, 'None')}"
    )


def _creator_block(profile: CreatorProfile) -> str:
    tone = profile.signature_tone
    lines = []
    if profile.name:
        lines.append(f"- Name: {profile.name}")
    if profile.channel_name:
        lines.append(f"- Channel: {profile.channel_name}")
    lines.extend(
        [
            f"- Niche: {profile.niche}",
            f"- Unique Angle: {profile.unique_angle or 'Not specified'}",
            f"- Primary Tone: {tone.primary}",
            f"- Secondary Tone: {tone.secondary or 'Not specified'}",
            f"- Accent Tone: {tone.accent or 'Not specified'}",
        ]
    )
    catchphrases = [f'"{c}"' for c in profile.catchphrases if c.strip()]
    return (
        "CREATOR PROFILE:\n"
        + "\n".join(lines)
        + "\n\n"
        + "Signature Catchphrases:\n"
        + _bullets(catchphrases, "None")
        + "\n\n"
        + "CONTENT BOUNDARIES:\n"
        + "Won't Cover:\n"
        + _bullets(profile.boundaries.wont_cover, "No restrictions listed")
        + "\n"
        + "Privacy Limits:\n"
        + _bullets(profile.boundaries.privacy_limits, "No restrictions listed")
    )


def build_topic_prompt(
    *,
    profile: CreatorProfile,
    project: ProjectRequest,
    regional: RegionalPromptContext,
    prior_titles: Optional[Sequence[str]] = None,
    prior_limit: int = PRIOR_TOPICS_LIMIT,
) -> str:
    year, month = project.year_month
    month_name = calendar.month_name[month]
    n = project.videos_needed
    start, end = _month_bounds(year, month)
    mode = project.production_mode

    targets = tone_targets(project.tone_mix, n)
    tone_lines = [f"{tone}: {targets[tone]} videos ({pct:g}%)" for tone, pct in project.tone_mix.items()]
    tone_names = "|".join(project.tone_mix) or "emotional|calming|storytelling|educational|humor"

    recent = [t for t in (prior_titles or []) if (t or "").strip()]
    recent = recent[-prior_limit:] if prior_limit > 0 else []

    language = regional.creator.language
    return (
        f"You are an expert YouTube Shorts content strategist for {month_name} {year}. "
        f"Generate exactly {n} high-potential YouTube Shorts topic ideas customized for this creator.\n"
        "\n"
        f"{_creator_block(profile)}\n"
        "\n"
        f"{render_regional_context(regional)}\n"
        "\n"
        "LANGUAGE:\n"
        f"- Write every title, hook and note in {language} spelling and terminology\n"
        f"- Currency: {regional.creator.currency} ({regional.creator.currency_symbol})\n"
        "\n"
        "PRODUCTION MODE:\n"
        f"{_TOPIC_PRODUCTION_CONTEXT[mode]}\n"
        "\n"
        "TONE DISTRIBUTION (distribute topics accordingly):\n"
        f"{_bullets(tone_lines, 'Any tone')}\n"
        "\n"
        "EXISTING TOPICS (do not duplicate or closely paraphrase these):\n"
        f"{_bullets(recent, 'None yet')}\n"
        "\n"
        "TASK:\n"
        f"Generate exactly {n} YouTube Shorts topic ideas that:\n"
        "1. Match the creator's niche and unique angle\n"
        "2. Follow the tone distribution above\n"
        "3. Are culturally appropriate for the target audience\n"
        f"4. Use {language} throughout\n"
        f"5. Are optimised for {mode.value} production\n"
        "6. Are clearly different from each other and from the existing topics\n"
        "\n"
        "Return ONLY valid JSON (no markdown, no code fences, no text before or after) in exactly this shape:\n"
        "{\n"
        '  "topics": [\n'
        "    {\n"
        '      "title": "clear, specific title (50-80 chars)",\n'
        '      "hook": "attention-grabbing first 3 seconds",\n'
        '      "coreValue": "what the viewer gains",\n'
        '      "emotionalDriver": "curiosity|surprise|nostalgia|inspiration|humor|relief",\n'
        '      "formatType": "story|list|tutorial|comparison|challenge|myth-busting",\n'
        f'      "tone": "{tone_names}",\n'
        '      "longevity": "evergreen|seasonal|trending",\n'
        '      "factCheckStatus": "verified|needs_review|opinion",\n'
        f'      "dateRangeStart": "{start}",\n'
        f'      "dateRangeEnd": "{end}",\n'
        '      "orderIndex": 1,\n'
        f'      "productionNotes": "specific tips for {mode.value} mode"\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def build_script_prompt(
    *,
    profile: Optional[CreatorProfile],
    topic: TopicCandidate,
    production_mode: ProductionMode,
    regional: RegionalPromptContext,
) -> str:
    mode = production_mode
    if profile is not None:
        tone = profile.signature_tone
        voice = (
            f"Tone: {tone.primary}\n"
            f"Style: {tone.secondary or 'Direct'}\n"
            f"Accent: {tone.accent or 'Friendly'}"
        )
        if profile.catchphrases:
            voice += "\nCatchphrases (use sparingly): " + ", ".join(f'"{c}"' for c in profile.catchphrases)
    else:
        voice = "Use a clear, engaging conversational tone"

    if mode == ProductionMode.traditional:
        delivery_requirement = "Include physical delivery notes"
    else:
        delivery_requirement = (
            "Optimize narration for AI voice synthesis: avoid complex punctuation, use natural speech patterns"
        )

    return (
        f"{_SCRIPT_ROLE[mode]}\n"
        "\n"
        f"{_SCRIPT_STRUCTURE[mode]}\n"
        "\n"
        "TOPIC DETAILS:\n"
        f"Title: {topic.title}\n"
        f"Hook: {topic.hook}\n"
        f"Core Value: {topic.core_value or 'Provide practical value'}\n"
        f"Tone: {topic.tone or 'Conversational'}\n"
        f"Emotional Driver: {topic.emotional_driver or 'Helpful'}\n"
        "\n"
        "USER VOICE PROFILE:\n"
        f"{voice}\n"
        "\n"
        f"{render_regional_context(regional)}\n"
        "\n"
        "REQUIREMENTS:\n"
        "1. Script must be 45-60 seconds when read aloud at natural pace\n"
        "2. Hook must grab attention in the first 3 seconds\n"
        f"3. Include appropriate {_CUE_REQUIREMENT[mode]}\n"
        "4. End with a clear, specific call to action\n"
        f"5. Use {regional.creator.language} spelling and terminology\n"
        f"6. {delivery_requirement}\n"
        "\n"
        "Return ONLY valid JSON (no markdown, no code fences, no text before or after) in exactly this shape:\n"
        "{\n"
        '  "hook": "3-second opening line",\n'
        '  "content": "Full script with appropriate cues in [BRACKETS]",\n'
        '  "readingTime": 52,\n'
        '  "deliveryNotes": {"pacing": "Medium-fast with strategic pauses", "energy": "7/10", "tone": "..."},\n'
        f'  "visualCues": {{{_VISUAL_CUES_SHAPE[mode]}}},\n'
        '  "factCheckNotes": {"claims": ["Any factual claims to verify"]}\n'
        "}"
    )


def _script_listing(scripts: Sequence[ScriptSummary]) -> str:
    rows = [
        {
            "id": s.script_id,
            "title": s.topic_title,
            "tone": s.tone,
            "productionMode": s.production_mode.value,
            "readingTime": s.reading_time,
            "energy": s.energy if s.energy is not None else 5,
            "framing": s.framing,
            "lighting": s.lighting,
        }
        for s in scripts
    ]
    return json.dumps(rows, indent=2, ensure_ascii=False)


def build_clustering_prompt(
    *,
    scripts: Sequence[ScriptSummary],
    profile: Optional[CreatorProfile],
    regional: Optional[RegionalPromptContext],
    filming_hours: float,
) -> str:
    n = len(scripts)

    if profile is not None:
        creator = (
            "CREATOR PROFILE:\n"
            f"- Name: {profile.name or profile.profile_id}\n"
            f"- Niche: {profile.niche}\n"
            f"- Primary Tone: {profile.signature_tone.primary}\n"
            f"- Location: {profile.location or 'Not specified'}\n"
        )
    else:
        creator = "CREATOR PROFILE:\n- Not provided\n"

    if regional is not None:
        region_lines = [
            f"Use {regional.creator.language} terminology",
            f"Currency: {regional.creator.currency} ({regional.creator.currency_symbol})",
        ]
        if regional.creator.holiday_meaning:
            region_lines.append(
                f'Remember: "holiday" in {regional.creator.country} means {regional.creator.holiday_meaning}'
            )
    else:
        region_lines = []

    return (
        "You are a production planning expert for YouTube Shorts creators. "
        f"Create an efficient filming plan for {n} video scripts in {filming_hours:g} hours.\n"
        "\n"
        f"{creator}"
        "\n"
        "REGIONAL CONTEXT:\n"
        f"{_bullets(region_lines, 'Not provided')}\n"
        "\n"
        f"SCRIPTS TO FILM ({n} total):\n"
        f"{_script_listing(scripts)}\n"
        "\n"
        "TASK: Group the scripts into filming clusters that:\n"
        "1. Hold between 2 and 6 scripts each (a single leftover script may stand alone)\n"
        "2. Share a similar tone and energy level\n"
        "3. Share visual requirements (framing, lighting) so outfit and location changes are minimal\n"
        "4. Use every script id from the list above exactly once; do not invent ids\n"
        "\n"
        "For each cluster suggest an outfit, a location, a lighting setup, props, an energy level "
        "(1-10) and the minutes needed to film every script in it.\n"
        "\n"
        "Then lay out a realistic timeline for the filming day, in cluster order, with:\n"
        f"- Setup time ({SETUP_MINUTES} min at the start)\n"
        "- Filming time per cluster\n"
        f"- A {BREAK_MINUTES} min break at least every {BREAK_EVERY_MINUTES} min\n"
        f"- Outfit/location change time ({CHANGE_MINUTES}-{WARDROBE_CHANGE_MINUTES} min between clusters)\n"
        "Times are H:MM-H:MM from the start of the day; type is setup, filming, change or break.\n"
        "\n"
        "Finish with a filming checklist in the shape below.\n"
        "\n"
        "Return ONLY valid JSON (no markdown, no code fences, no text before or after) in exactly this shape:\n"
        "{\n"
        '  "clusters": [\n'
        "    {\n"
        '      "name": "Cluster name (e.g. \'Calm & Reflective\')",\n'
        '      "description": "Brief description of the cluster theme",\n'
        '      "scriptIds": ["id-from-list", "another-id"],\n'
        '      "outfit": "Outfit description",\n'
        '      "location": "Location description",\n'
        '      "lighting": "Lighting setup",\n'
        '      "props": ["prop1", "prop2"],\n'
        '      "energy": 6,\n'
        '      "estimatedMinutes": 45\n'
        "    }\n"
        "  ],\n"
        '  "timeline": [\n'
        '    {"time": "0:00-0:15", "activity": "Setup & Equipment Check", "type": "setup"},\n'
        '    {"time": "0:15-1:00", "activity": "Cluster 1: Calm & Reflective (3 videos)", '
        '"type": "filming", "clusterName": "Calm & Reflective"},\n'
        '    {"time": "1:00-1:15", "activity": "Break & Outfit Change", "type": "break"}\n'
        "  ],\n"
        '  "checklist": {\n'
        '    "preFilming": ["Equipment charged", "Scripts reviewed"],\n'
        '    "perCluster": ["Check framing", "Test audio"],\n'
        '    "postFilming": ["Back up footage", "Review clips"]\n'
        "  }\n"
        "}"
    )
