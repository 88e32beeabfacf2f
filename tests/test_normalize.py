"""
Tests for name and category normalization.
"""

from refpay.normalize import (
    name_parts,
    normalize_category_counts,
    normalize_category_label,
    normalize_name,
    normalize_text,
    strip_accents,
)


class TestNormalizeName:
    """Test the lenient comparison form of a person's name."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_name("  JOHN    SMITH ") == "john smith"

    def test_strips_accents(self):
        assert normalize_name("José Pérez") == "jose perez"
        assert normalize_name("RAFAEL QUIÑONES") == "rafael quinones"

    def test_punctuation_becomes_separator(self):
        """Commas, periods and hyphens split tokens."""
        assert normalize_name("Smith, John") == "smith john"
        assert normalize_name("CESAR O. QUIÑONES") == "cesar o quinones"
        assert normalize_name("TEJEDA-DE LA ROSA") == "tejeda de la rosa"

    def test_empty_and_symbol_only(self):
        assert normalize_name("") == ""
        assert normalize_name("---") == ""

    def test_idempotent(self):
        once = normalize_name("Ángel  M. Rivera-Benítez")
        assert normalize_name(once) == once

    def test_name_parts(self):
        assert name_parts("Smith, John") == ["smith", "john"]
        assert name_parts("   ") == []


class TestTextHelpers:
    """Test the building blocks."""

    def test_normalize_text(self):
        assert normalize_text("  Hello   World  ") == "hello world"

    def test_strip_accents_keeps_base_letters(self):
        assert strip_accents("ñÁü") == "nAu"


class TestCategoryLabels:
    """Test category label canonicalization."""

    def test_bare_age_gets_suffix(self):
        assert normalize_category_label("12") == "12u"
        assert normalize_category_label("12 U") == "12u"
        assert normalize_category_label("12u") == "12u"

    def test_girls_bracket(self):
        assert normalize_category_label("14UF") == "14uF"
        assert normalize_category_label("14uf") == "14uF"

    def test_named_categories_untouched(self):
        assert normalize_category_label(" Senior ") == "Senior"
        assert normalize_category_label("Mini") == "Mini"

    def test_counts_merge_after_normalizing(self):
        counts = normalize_category_counts({"12": 2, "12u": 1, "Mini": 3})
        assert counts == {"12u": 3, "Mini": 3}
