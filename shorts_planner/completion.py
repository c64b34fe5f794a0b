from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CompletionService(Protocol):
    """Outbound text-completion call.

    Implementations return the model's raw text (possibly fenced) and raise
    UpstreamFailure for transport/service errors or ConfigurationMissing when
    credentials are absent.
    """

    def complete(self, *, prompt: str, model_id: str, max_tokens: int, temperature: float) -> str:
        ...
