from __future__ import annotations

import unittest
from datetime import date

from shorts_planner.models import CustomEvent
from shorts_planner.regional import (
    build_prompt_context,
    cultural_context,
    detect_country_from_location,
    format_date,
    holidays_in_month,
    holidays_in_range,
    season_for_month,
    terminology_substitutions,
    translate_term,
)
from shorts_planner.regional_catalog import (
    Hemisphere,
    all_country_codes,
    default_country_code,
    get_config,
    is_supported,
    normalize_country_code,
)


class TestRegionalCatalog(unittest.TestCase):
    def test_every_supported_code_resolves_to_itself(self) -> None:
        codes = all_country_codes()
        self.assertEqual(set(codes), {"GB", "US", "CA", "AU"})
        for code in codes:
            self.assertEqual(get_config(code).country_code, code)
            self.assertEqual(get_config(code.lower()).country_code, code)

    def test_unknown_or_empty_code_falls_back_to_default(self) -> None:
        self.assertEqual(default_country_code(), "US")
        for code in ("", "ZZ", None, "  "):
            self.assertEqual(get_config(code).country_code, "US")

    def test_aliases(self) -> None:
        self.assertEqual(normalize_country_code("uk"), "GB")
        self.assertEqual(get_config("UK").country, "United Kingdom")
        self.assertTrue(is_supported("usa"))
        self.assertFalse(is_supported("FR"))

    def test_all_country_codes_is_stable(self) -> None:
        self.assertEqual(all_country_codes(), all_country_codes())

    def test_terminology_is_read_only(self) -> None:
        cfg = get_config("GB")
        with self.assertRaises(TypeError):
            cfg.terminology["fall"] = "harvest"  # type: ignore[index]

    def test_hemispheres(self) -> None:
        self.assertEqual(get_config("AU").hemisphere, Hemisphere.southern)
        self.assertEqual(get_config("GB").hemisphere, Hemisphere.northern)


class TestHolidays(unittest.TestCase):
    def test_month_filter_matches_prefix_for_every_region(self) -> None:
        for code in all_country_codes():
            for year in (2025, 2026, 2030):
                for month in range(1, 13):
                    prefix = f"{year:04d}-{month:02d}"
                    for h in holidays_in_month(code, year, month):
                        self.assertTrue(h.date.startswith(prefix), (code, prefix, h.date))

    def test_month_filter_keeps_catalog_order(self) -> None:
        names = [h.name for h in holidays_in_month("GB", 2025, 12)]
        self.assertEqual(names, ["Christmas Eve", "Christmas Day", "Boxing Day", "New Year's Eve"])

    def test_month_without_data_is_empty(self) -> None:
        self.assertEqual(holidays_in_month("GB", 2030, 12), [])

    def test_range_is_inclusive(self) -> None:
        names = [h.name for h in holidays_in_range("GB", "2025-12-24", "2025-12-26")]
        self.assertEqual(names, ["Christmas Eve", "Christmas Day", "Boxing Day"])

    def test_malformed_range_matches_nothing(self) -> None:
        self.assertEqual(holidays_in_range("GB", "Dec 1", "2025-12-31"), [])
        self.assertEqual(holidays_in_range("GB", None, None), [])
        self.assertEqual(holidays_in_range("GB", 20251201, "2025-12-31"), [])


class TestSeasonsAndContext(unittest.TestCase):
    def test_season_buckets(self) -> None:
        expected_north = {
            12: "Winter", 1: "Winter", 2: "Winter",
            3: "Spring", 4: "Spring", 5: "Spring",
            6: "Summer", 7: "Summer", 8: "Summer",
            9: "Autumn", 10: "Autumn", 11: "Autumn",
        }
        flip = {"Winter": "Summer", "Summer": "Winter", "Spring": "Autumn", "Autumn": "Spring"}
        for month, season in expected_north.items():
            self.assertEqual(season_for_month(month, Hemisphere.northern), season)
            self.assertEqual(season_for_month(month, Hemisphere.southern), flip[season])

    def test_gb_december_is_winter(self) -> None:
        lines = cultural_context("GB", 12, 2025)
        self.assertEqual(lines[0], "Important dates in United Kingdom:")
        self.assertIn("- Christmas Day (2025-12-25): Major Christian holiday", lines)
        self.assertEqual(lines[-1], "Winter season")

    def test_au_december_is_summer(self) -> None:
        self.assertEqual(cultural_context("AU", 12, 2025)[-1], "Summer season")

    def test_no_holidays_gives_only_season(self) -> None:
        self.assertEqual(cultural_context("GB", 7, 2030), ["Summer season"])

    def test_bad_month(self) -> None:
        with self.assertRaises(ValueError):
            season_for_month(13, Hemisphere.northern)


class TestTerminology(unittest.TestCase):
    def test_round_trip(self) -> None:
        self.assertEqual(translate_term("fall", "US", "GB"), "autumn")
        self.assertEqual(translate_term("autumn", "GB", "US"), "fall")
        self.assertEqual(translate_term("zzz-unknown", "US", "GB"), "zzz-unknown")

    def test_case_and_shared_words(self) -> None:
        self.assertEqual(translate_term("Fall", "US", "GB"), "Autumn")
        self.assertEqual(translate_term("chips", "GB", "US"), "fries")
        self.assertEqual(translate_term("restroom", "US", "CA"), "washroom")
        self.assertEqual(translate_term("", "US", "GB"), "")

    def test_substitutions_between_regions(self) -> None:
        lines = terminology_substitutions(get_config("GB"), get_config("US"))
        self.assertIn('- Use "fall" not "autumn"', lines)
        self.assertLessEqual(len(lines), 10)

    def test_same_region_needs_no_substitutions_when_words_match(self) -> None:
        self.assertEqual(terminology_substitutions(get_config("US"), get_config("US")), [])


class TestBuildPromptContext(unittest.TestCase):
    def test_composes_target_region_data(self) -> None:
        event = CustomEvent(date="2025-11-20", name="Channel birthday", description="Two years online")
        ctx = build_prompt_context("GB", "US", 11, 2025, [event])

        self.assertEqual(ctx.creator.country_code, "GB")
        self.assertEqual(ctx.target.country_code, "US")
        self.assertFalse(ctx.same_region)
        self.assertIn("Thanksgiving", [h.name for h in ctx.holidays])
        self.assertEqual(ctx.cultural_context[-1], "Autumn season")
        self.assertEqual(ctx.custom_events, (event,))

    def test_unknown_codes_fall_back(self) -> None:
        ctx = build_prompt_context("XX", None, 3, 2025)
        self.assertEqual(ctx.creator.country_code, "US")
        self.assertTrue(ctx.same_region)

    def test_cultural_notes_are_capped(self) -> None:
        ctx = build_prompt_context("GB", "GB", 6, 2025)
        self.assertEqual(len(ctx.cultural_notes), 5)

    def test_month_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            build_prompt_context("GB", "GB", 0, 2025)


class TestLocaleHelpers(unittest.TestCase):
    def test_format_date(self) -> None:
        d = date(2025, 12, 5)
        self.assertEqual(format_date(d, "GB"), "05/12/2025")
        self.assertEqual(format_date(d, "US"), "12/05/2025")

    def test_detect_country(self) -> None:
        self.assertEqual(detect_country_from_location("Leeds, UK"), "GB")
        self.assertEqual(detect_country_from_location("Sydney"), "AU")
        self.assertEqual(detect_country_from_location("Newcastle, New South Wales"), "AU")
        self.assertEqual(detect_country_from_location("Toronto, Ontario"), "CA")
        self.assertEqual(detect_country_from_location("Austin, Texas"), "US")

    def test_detect_country_defaults(self) -> None:
        self.assertEqual(detect_country_from_location(""), "US")
        self.assertEqual(detect_country_from_location("Atlantis"), "US")


if __name__ == "__main__":
    unittest.main()
