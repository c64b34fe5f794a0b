from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ShortsPlannerError(Exception):
    """Base class for errors raised by the planning pipeline."""


class ConfigurationMissing(ShortsPlannerError):
    """A required credential or setting is absent. Fatal for the request."""


class ParseError(ShortsPlannerError, ValueError):
    """Model output did not decode to the expected JSON shape."""

    def __init__(self, message: str, *, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text

    def preview(self, limit: int = 500) -> str:
        return (self.raw_text or "")[:limit]


class UpstreamFailure(ShortsPlannerError, RuntimeError):
    """The completion service failed (network, auth, rate limit, service error).

    `kind` is one of: auth, rate_limit, timeout, network, service.
    """

    def __init__(self, message: str, *, kind: str = "service") -> None:
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class GenerationFailure:
    """Structured failure returned by generation entry points instead of raising."""

    error: str
    details: Optional[str] = None

    def to_dict(self) -> dict:
        return {"success": False, "error": self.error, "details": self.details}
