from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from shorts_planner.config import Settings, load_settings, require_api_key
from shorts_planner.errors import ConfigurationMissing


@mock.patch("shorts_planner.config.load_dotenv", lambda: None)
class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            s = load_settings()
        self.assertEqual(s, Settings())
        self.assertEqual(s.similarity_threshold, 0.80)
        self.assertEqual(s.prior_topics_limit, 20)

    def test_environment_overrides(self) -> None:
        env = {"OPENAI_MODEL": "gpt-test", "SHORTS_SIMILARITY_THRESHOLD": "0.9", "SHORTS_BATCH_PLAN_MODEL": "mini"}
        with mock.patch.dict(os.environ, env, clear=True):
            s = load_settings()
        self.assertEqual(s.topic_model, "gpt-test")
        self.assertEqual(s.script_model, "gpt-test")
        self.assertEqual(s.batch_plan_model, "mini")
        self.assertEqual(s.similarity_threshold, 0.9)

    def test_yaml_file_wins_over_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "settings.yaml"
            p.write_text("topic_model: from-file\ncluster_size: 4\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {"OPENAI_MODEL": "from-env"}, clear=True):
                s = load_settings(p)
        self.assertEqual(s.topic_model, "from-file")
        self.assertEqual(s.script_model, "from-env")
        self.assertEqual(s.cluster_size, 4)

    def test_unknown_setting(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "settings.yaml"
            p.write_text("colour: blue\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {}, clear=True):
                with self.assertRaises(ValueError):
                    load_settings(p)

    def test_threshold_range(self) -> None:
        with mock.patch.dict(os.environ, {"SHORTS_SIMILARITY_THRESHOLD": "1.5"}, clear=True):
            with self.assertRaises(ValueError):
                load_settings()


class TestApiKey(unittest.TestCase):
    def test_missing_key(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigurationMissing):
                require_api_key()

    def test_present_key(self) -> None:
        with mock.patch.dict(os.environ, {"OPENAI_API_KEY": " sk-test "}, clear=True):
            self.assertEqual(require_api_key(), "sk-test")


if __name__ == "__main__":
    unittest.main()
