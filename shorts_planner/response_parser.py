from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from shorts_planner.errors import ParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)
_OPEN_FENCE_RE = re.compile(r"^```(?:json|JSON)?[ \t]*\r?\n?")

_EXPECTED_TYPES = {"object": dict, "array": list}


def _strip_fences(text: str) -> str:
    m = _FENCE_RE.search(text)
    if m:
        return m.group(1).strip()
    # Truncated responses can open a fence and never close it.
    if text.startswith("```"):
        return _OPEN_FENCE_RE.sub("", text, count=1).strip()
    return text


def _outermost_spans(text: str, *, expect: Optional[str]) -> list[str]:
    """First `{` to last `}`, then first `[` to last `]` (arrays first when an array is expected)."""
    pairs = [("{", "}"), ("[", "]")]
    if expect == "array":
        pairs.reverse()
    spans = []
    for opener, closer in pairs:
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            spans.append(text[start : end + 1])
    return spans


def _decode_span(text: str, *, raw: str, expect: Optional[str], direct_err: json.JSONDecodeError) -> Any:
    spans = _outermost_spans(text, expect=expect)
    if not spans:
        raise ParseError(f"No JSON found in model output: {direct_err}", raw_text=raw) from direct_err

    last_err: Optional[json.JSONDecodeError] = None
    fallback: Any = None
    found = False
    for span in spans:
        try:
            value = json.loads(span)
        except json.JSONDecodeError as e:
            last_err = last_err or e
            continue
        logger.debug("Recovered JSON from surrounding text (%d of %d chars)", len(span), len(raw))
        if expect is None or isinstance(value, _EXPECTED_TYPES[expect]):
            return value
        if not found:
            fallback, found = value, True

    if found:
        # Wrong shape; the caller's shape check reports it.
        return fallback
    raise ParseError(f"Model did not return valid JSON: {last_err}", raw_text=raw) from last_err


def extract_json(raw_text: Any, *, expect: Optional[str] = None) -> Any:
    """Decode JSON from model output that may be fenced or wrapped in prose.

    Order: trim, take the fenced interior if any, try a direct parse, then the
    outermost {...} span and the outermost [...] span in turn, keeping the
    first that decodes to the expected shape. `expect` ("object" or "array")
    checks the decoded shape. Raises ParseError carrying the raw text.
    """
    if expect is not None and expect not in _EXPECTED_TYPES:
        raise ValueError(f"expect must be 'object' or 'array', got {expect!r}")

    if not isinstance(raw_text, str):
        raise ParseError("Model output is not text", raw_text=repr(raw_text))

    raw = raw_text
    text = _strip_fences(raw.strip())
    if not text:
        raise ParseError("Model output was empty", raw_text=raw)

    try:
        value = json.loads(text)
    except json.JSONDecodeError as direct_err:
        value = _decode_span(text, raw=raw, expect=expect, direct_err=direct_err)

    if expect is not None and not isinstance(value, _EXPECTED_TYPES[expect]):
        raise ParseError(
            f"Expected a JSON {expect}, got {type(value).__name__}",
            raw_text=raw,
        )
    return value


def extract_list(raw_text: Any, *, key: str) -> list[Any]:
    """Decode `{key: [...]}` or a bare array; anything else is a ParseError."""
    value = extract_json(raw_text)
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get(key), list):
        return value[key]
    raise ParseError(f"Response missing {key} array", raw_text=str(raw_text))
