"""
LawDesk Backend — Slug Derivation Unit Tests
==============================================

What we test:
    ✅ Lower-casing and whitespace → hyphen
    ✅ Disallowed characters stripped, repeated/edge hyphens cleaned
    ✅ Timestamp suffix keeps identical titles distinct
"""

import re

import pytest

from lawdesk.services.slug import build_slug, now_millis, slugify


class TestSlugify:
    """Tests for slugify()."""

    def test_basic_title(self):
        assert slugify("Contract Law Basics") == "contract-law-basics"

    def test_whitespace_runs_become_single_hyphen(self):
        assert slugify("Estate \t Planning\n101") == "estate-planning-101"

    def test_punctuation_stripped(self):
        assert slugify("What's New? (2024 Edition)!") == "whats-new-2024-edition"

    def test_repeated_hyphens_collapsed(self):
        assert slugify("Tax -- Planning") == "tax-planning"

    def test_edge_hyphens_trimmed(self):
        assert slugify("  - Divorce Law -  ") == "divorce-law"

    def test_underscore_kept(self):
        assert slugify("snake_case title") == "snake_case-title"

    def test_non_ascii_letters_stripped(self):
        assert slugify("Café Law") == "caf-law"

    def test_only_symbols_yields_empty(self):
        assert slugify("!!! ???") == ""

    @pytest.mark.parametrize("title", ["Contract Law Basics", "Hello,   World!", "A--B"])
    def test_output_alphabet(self, title):
        """Slugs only ever contain [a-z0-9_-] with no leading/trailing hyphen."""
        slug = slugify(title)
        assert re.fullmatch(r"[a-z0-9_]+(-[a-z0-9_]+)*", slug)

    def test_deterministic(self):
        assert slugify("Property Disputes") == slugify("Property Disputes")


class TestBuildSlug:
    """Tests for the timestamp-suffixed slug."""

    def test_suffix_appended(self):
        assert build_slug("Contract Law Basics", 1700000000000) == "contract-law-basics-1700000000000"

    def test_same_title_different_instants_differ(self):
        first = build_slug("Contract Law Basics", 1700000000000)
        second = build_slug("Contract Law Basics", 1700000000001)
        assert first != second
        assert second == "contract-law-basics-1700000000001"

    def test_now_millis_is_epoch_milliseconds(self):
        value = now_millis()
        assert isinstance(value, int)
        # 13 digits until the year 2286
        assert len(str(value)) == 13
