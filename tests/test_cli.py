from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

import yaml

from shorts_planner import cli


def _run(argv: list[str]) -> tuple[int, str]:
    buf = io.StringIO()
    with redirect_stdout(buf):
        code = cli.main(argv)
    return code, buf.getvalue()


class FakeCompletion:
    def __init__(self, text: str) -> None:
        self.text = text

    def complete(self, *, prompt: str, model_id: str, max_tokens: int, temperature: float) -> str:
        return self.text


class TestCli(unittest.TestCase):
    def test_regions(self) -> None:
        code, out = _run(["regions"])
        self.assertEqual(code, 0)
        for cc in ("GB", "US", "CA", "AU"):
            self.assertIn(cc, out)

    def test_context(self) -> None:
        code, out = _run(
            ["context", "--creator", "uk", "--target", "US", "--month", "2025-11", "--event", "2025-11-20:Launch:Big day"]
        )
        self.assertEqual(code, 0)
        self.assertIn("Target Audience: United States (US)", out)
        self.assertIn("- Thanksgiving (2025-11-27)", out)
        self.assertIn("- Launch (2025-11-20): Big day", out)

    def test_bad_event(self) -> None:
        with self.assertRaises(ValueError):
            cli._parse_event("Launch")

    def test_onboard_then_topics_with_store(self) -> None:
        topics = {"topics": [{"title": "Stuffing three ways", "hook": "h", "coreValue": "v"}]}
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            code, _ = _run(
                [
                    "onboard", "--creator-id", "jane", "--niche", "cooking",
                    "--location", "Leeds, UK", "--month", "2025-11", "--root", tmp,
                ]
            )
            self.assertEqual(code, 0)

            argv = [
                "topics",
                "--profile", str(root / "profiles" / "jane.yaml"),
                "--project", str(root / "projects" / "jane_2025-11.yaml"),
                "--store", str(root / "store"),
                "--out", str(root / "out.json"),
            ]
            with mock.patch.object(cli, "_completion_service", return_value=FakeCompletion(json.dumps(topics))):
                code, out = _run(argv)
            self.assertEqual(code, 0)
            self.assertIn("Stored 1 topics", out)

            payload = json.loads((root / "out.json").read_text(encoding="utf-8"))
            self.assertEqual(payload["metadata"]["generated"], 1)

            # The stored title now counts as existing, so a rerun accepts nothing new.
            with mock.patch.object(cli, "_completion_service", return_value=FakeCompletion(json.dumps(topics))):
                code, _ = _run(argv)
            payload = json.loads((root / "out.json").read_text(encoding="utf-8"))
            self.assertEqual(payload["topics"], [])

    def test_batch_plan_fallback(self) -> None:
        request = {
            "project_id": "p",
            "scripts": [
                {"script_id": "s1", "topic_title": "One", "tone": "humor"},
                {"script_id": "s2", "topic_title": "Two", "tone": "humor"},
            ],
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "batch.yaml"
            path.write_text(yaml.safe_dump(request), encoding="utf-8")
            with mock.patch.object(cli, "_completion_service", return_value=FakeCompletion("not json")):
                code, out = _run(["batch-plan", "--request", str(path)])

        self.assertEqual(code, 0)
        self.assertIn("WARN: AI planning unavailable", out)
        body = json.loads(out[out.index("{"):])
        self.assertEqual(body["batch_plan"]["strategy"], "fallback")
        self.assertEqual(body["batch_plan"]["total_scripts"], 2)
        self.assertEqual(body["batch_plan"]["timeline"][0]["type"], "setup")
        self.assertEqual(body["batch_plan"]["break_count"], 0)

    def test_missing_key_reports_failure(self) -> None:
        request = {"topic_id": "t1", "topic": {"title": "T", "hook": "h"}}
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "script.yaml"
            path.write_text(yaml.safe_dump(request), encoding="utf-8")
            with mock.patch.dict("os.environ", {}, clear=True), mock.patch(
                "integrations.openai_adapters.require_api_key", side_effect=cli.ConfigurationMissing("no key")
            ):
                code, out = _run(["script", "--request", str(path)])

        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["error"], "AI service not configured")


if __name__ == "__main__":
    unittest.main()
