from __future__ import annotations

import unittest

from shorts_planner.errors import ParseError
from shorts_planner.response_parser import extract_json, extract_list


class TestExtractJson(unittest.TestCase):
    def test_fenced_equals_unwrapped(self) -> None:
        body = '{"topics": [{"title": "A"}]}'
        self.assertEqual(extract_json(f"```json\n{body}\n```"), extract_json(body))
        self.assertEqual(extract_json(f"```\n{body}\n```"), extract_json(body))

    def test_prose_around_object(self) -> None:
        raw = 'Sure! Here are your topics:\n{"topics": []}\nLet me know if you want more.'
        self.assertEqual(extract_json(raw), {"topics": []})

    def test_bracket_in_prose_before_object(self) -> None:
        raw = 'Here are your [2] topic ideas:\n{"topics": [{"title": "a"}, {"title": "b"}]}'
        expected = {"topics": [{"title": "a"}, {"title": "b"}]}
        self.assertEqual(extract_json(raw, expect="object"), expected)
        self.assertEqual(extract_json(raw), expected)

    def test_prose_around_array(self) -> None:
        raw = 'Clusters below:\n[{"name": "A"}, {"name": "B"}]\nThanks'
        self.assertEqual(extract_json(raw), [{"name": "A"}, {"name": "B"}])
        self.assertEqual(extract_json(raw, expect="array"), [{"name": "A"}, {"name": "B"}])

    def test_fence_inside_prose(self) -> None:
        raw = 'Here you go:\n```json\n{"a": 1}\n```\nEnjoy'
        self.assertEqual(extract_json(raw), {"a": 1})

    def test_unterminated_fence(self) -> None:
        self.assertEqual(extract_json('```json\n{"a": 1}'), {"a": 1})

    def test_bare_array(self) -> None:
        self.assertEqual(extract_json("  [1, 2, 3]  "), [1, 2, 3])

    def test_malformed_raises_with_raw_text(self) -> None:
        raw = "I could not think of any topics this time."
        with self.assertRaises(ParseError) as ctx:
            extract_json(raw)
        self.assertEqual(ctx.exception.raw_text, raw)

    def test_truncated_object_raises(self) -> None:
        with self.assertRaises(ParseError):
            extract_json('{"topics": [{"title": "A"')

    def test_empty_and_non_text(self) -> None:
        with self.assertRaises(ParseError):
            extract_json("   ")
        with self.assertRaises(ParseError):
            extract_json(None)

    def test_expected_shape(self) -> None:
        self.assertEqual(extract_json('{"a": 1}', expect="object"), {"a": 1})
        with self.assertRaises(ParseError):
            extract_json("[1]", expect="object")
        with self.assertRaises(ValueError):
            extract_json("[1]", expect="tuple")

    def test_parse_error_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            extract_json("nope")


class TestExtractList(unittest.TestCase):
    def test_wrapped_and_bare(self) -> None:
        self.assertEqual(extract_list('{"clusters": [{"name": "A"}]}', key="clusters"), [{"name": "A"}])
        self.assertEqual(extract_list('[{"name": "A"}]', key="clusters"), [{"name": "A"}])

    def test_bracket_in_prose_before_wrapped_list(self) -> None:
        raw = 'Sure [note]: {"topics": [{"title": "a"}]} done'
        self.assertEqual(extract_list(raw, key="topics"), [{"title": "a"}])

    def test_missing_key(self) -> None:
        with self.assertRaises(ParseError):
            extract_list('{"groups": []}', key="clusters")


if __name__ == "__main__":
    unittest.main()
