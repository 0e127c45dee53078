"""Natural-key normalization and last-wins deduplication."""

import pytest

from catalog import dedup, keys


class TestNormalizeKey:
    def test_case_and_whitespace_collapse(self):
        assert keys.normalize_key("  Widget A ") == keys.normalize_key("widget a")

    def test_none_is_empty(self):
        assert keys.normalize_key(None) == ""

    def test_inner_whitespace_is_kept(self):
        assert keys.normalize_key("Widget  A") != keys.normalize_key("Widget A")


class TestCompositeKey:
    def test_parts_normalized_independently(self):
        assert keys.composite_key(" SKU-1", "Amazon", "us ") == keys.composite_key("sku-1", "AMAZON", "US")

    def test_part_order_matters(self):
        assert keys.composite_key("a", "b") != keys.composite_key("b", "a")

    def test_blank_part_makes_key_empty(self):
        assert keys.composite_key("SKU-1", "  ", "US") == ""

    def test_delimiter_inside_part_rejected(self):
        with pytest.raises(ValueError):
            keys.composite_key("a" + keys.KEY_DELIMITER + "b", "US")


class TestCountryCode:
    def test_trimmed_upper_case(self):
        assert keys.country_code(" us ") == "US"

    def test_blank_is_none(self):
        assert keys.country_code("  ") is None
        assert keys.country_code(None) is None


class TestCleanText:
    def test_trims(self):
        assert keys.clean_text("  PX1 ") == "PX1"

    def test_blank_is_none(self):
        assert keys.clean_text("   ") is None
        assert keys.clean_text(None) is None


class TestDedupeLastWins:
    @staticmethod
    def _key(record):
        return keys.normalize_key(record.get("name"))

    def test_last_occurrence_wins(self):
        records = [
            {"name": "Widget A", "base_cost": 1},
            {"name": "Gadget"},
            {"name": "widget a ", "base_cost": 5},
        ]
        out = dedup.dedupe_last_wins(records, key=self._key)

        assert len(out) == 2
        widget = next(r for r in out if self._key(r) == "widget a")
        assert widget == {"name": "widget a ", "base_cost": 5}

    def test_empty_keys_dropped(self):
        records = [{"name": ""}, {"name": None}, {"name": "   "}, {"name": "ok"}]
        assert dedup.dedupe_last_wins(records, key=self._key) == [{"name": "ok"}]

    def test_idempotent(self):
        records = [{"name": n} for n in ["a", "B", "b", " A", "c", "C "]]
        once = dedup.dedupe_last_wins(records, key=self._key)
        twice = dedup.dedupe_last_wins(once, key=self._key)
        assert twice == once

    def test_empty_input(self):
        assert dedup.dedupe_last_wins([], key=self._key) == []
