from __future__ import annotations

import os
import unittest
from types import SimpleNamespace
from unittest import mock

import httpx
import openai

from integrations.openai_adapters import OpenAICompletionService
from shorts_planner.completion import CompletionService
from shorts_planner.errors import ConfigurationMissing, UpstreamFailure

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


def _status_error(cls, status: int):
    return cls(f"HTTP {status}", response=httpx.Response(status, request=_REQUEST), body=None)


def _chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAICompletionService(unittest.TestCase):
    def _service(self) -> tuple[OpenAICompletionService, mock.MagicMock]:
        client = mock.MagicMock()
        return OpenAICompletionService(client=client), client

    def _complete(self, service: OpenAICompletionService) -> str:
        return service.complete(prompt="hi", model_id="gpt-test", max_tokens=100, temperature=0.5)

    def test_is_a_completion_service(self) -> None:
        service, _ = self._service()
        self.assertIsInstance(service, CompletionService)

    def test_responses_api(self) -> None:
        service, client = self._service()
        client.responses.create.return_value = SimpleNamespace(output_text='{"topics": []}')

        self.assertEqual(self._complete(service), '{"topics": []}')
        kwargs = client.responses.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertEqual(kwargs["max_output_tokens"], 100)
        client.chat.completions.create.assert_not_called()

    def test_falls_back_to_chat_completions(self) -> None:
        service, client = self._service()
        client.responses.create.side_effect = TypeError("unexpected keyword argument")
        client.chat.completions.create.return_value = _chat_response("from chat")

        self.assertEqual(self._complete(service), "from chat")
        self.assertEqual(client.chat.completions.create.call_args.kwargs["max_tokens"], 100)

    def test_empty_output_is_a_service_failure(self) -> None:
        service, client = self._service()
        client.responses.create.return_value = SimpleNamespace(output_text="")
        client.chat.completions.create.return_value = _chat_response(None)

        with self.assertRaises(UpstreamFailure) as ctx:
            self._complete(service)
        self.assertEqual(ctx.exception.kind, "service")

    def test_no_choices_is_a_service_failure(self) -> None:
        service, client = self._service()
        client.responses.create.return_value = SimpleNamespace(output_text=None)
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with self.assertRaises(UpstreamFailure) as ctx:
            self._complete(service)
        self.assertEqual(ctx.exception.kind, "service")

    def test_sdk_errors_map_to_kinds(self) -> None:
        cases = [
            (_status_error(openai.AuthenticationError, 401), "auth"),
            (_status_error(openai.RateLimitError, 429), "rate_limit"),
            (_status_error(openai.InternalServerError, 500), "service"),
            (openai.APITimeoutError(request=_REQUEST), "timeout"),
            (openai.APIConnectionError(request=_REQUEST), "network"),
        ]
        for error, kind in cases:
            service, client = self._service()
            client.responses.create.side_effect = error
            with self.assertRaises(UpstreamFailure) as ctx:
                self._complete(service)
            self.assertEqual(ctx.exception.kind, kind)
            self.assertIs(ctx.exception.__cause__, error)

    def test_missing_api_key(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigurationMissing):
                OpenAICompletionService()


if __name__ == "__main__":
    unittest.main()
