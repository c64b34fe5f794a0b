from __future__ import annotations

import logging
from typing import Any

import openai
from dotenv import load_dotenv
from openai import OpenAI

from shorts_planner.config import require_api_key
from shorts_planner.errors import UpstreamFailure

load_dotenv()

logger = logging.getLogger(__name__)


class OpenAICompletionService:
    """
    Plain-text completion adapter with compatibility across openai-python SDK versions.

    We prefer the Responses API and fall back to Chat Completions when the
    installed SDK rejects the Responses call signature or returns no text.
    SDK errors surface as UpstreamFailure with a `kind` the orchestrator can
    turn into a user-facing message.
    """

    def __init__(self, *, api_key: str | None = None, client: Any | None = None) -> None:
        if client is not None:
            self.client = client
        else:
            self.client = OpenAI(api_key=api_key or require_api_key())

    def complete(self, *, prompt: str, model_id: str, max_tokens: int, temperature: float) -> str:
        try:
            text = self._complete(prompt=prompt, model_id=model_id, max_tokens=max_tokens, temperature=temperature)
        except openai.AuthenticationError as e:
            raise UpstreamFailure(f"Invalid API key: {e}", kind="auth") from e
        except openai.RateLimitError as e:
            raise UpstreamFailure(f"Rate limit exceeded: {e}", kind="rate_limit") from e
        except openai.APITimeoutError as e:
            raise UpstreamFailure(f"Request timed out: {e}", kind="timeout") from e
        except openai.APIConnectionError as e:
            raise UpstreamFailure(f"Could not reach the completion service: {e}", kind="network") from e
        except openai.APIError as e:
            raise UpstreamFailure(f"Completion service error: {e}", kind="service") from e

        if not text or not text.strip():
            raise UpstreamFailure("Model returned empty output", kind="service")
        return text

    def _complete(self, *, prompt: str, model_id: str, max_tokens: int, temperature: float) -> str | None:
        messages = [{"role": "user", "content": prompt}]

        # 1) Responses API
        text: str | None = None
        try:
            resp = self.client.responses.create(
                model=model_id,
                input=messages,
                max_output_tokens=max_tokens,
                temperature=temperature,
            )
            text = getattr(resp, "output_text", None) or None
        except TypeError:
            # SDK predates Responses or its signature differs
            text = None

        if text:
            return text

        # 2) Fallback: Chat Completions
        logger.debug("Responses API gave no text for %s; falling back to Chat Completions", model_id)
        resp2 = self.client.chat.completions.create(
            model=model_id,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not resp2.choices:
            raise UpstreamFailure("Chat Completions returned no choices", kind="service")
        return resp2.choices[0].message.content
