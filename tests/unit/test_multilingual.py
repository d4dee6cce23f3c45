"""
Unit Tests - Multilingual Fields and Formatting
"""
import pytest

from backoffice.errors import EntityValidationError
from backoffice.formatting import format_experience, format_months, format_percent, format_price, render_stars
from backoffice.multilingual import Locale, missing_translations, normalize_multilingual, resolve_text


class TestResolveText:
    """Tests for display value fallback"""

    def test_english_falls_back_to_indonesian(self):
        """A title with only "id" still renders in English"""
        assert resolve_text({"id": "Judul"}, Locale.EN) == "Judul"

    def test_requested_locale_wins(self):
        assert resolve_text({"id": "Judul", "en": "Title"}, Locale.EN) == "Title"
        assert resolve_text({"id": "Judul", "en": "Title"}, "id") == "Judul"

    def test_blank_translation_is_skipped(self):
        assert resolve_text({"en": "  ", "id": "Judul"}, Locale.EN) == "Judul"

    @pytest.mark.parametrize("field", [None, {}, "not a mapping", {"en": None}, {"en": 5}])
    def test_never_raises_and_returns_string(self, field):
        value = resolve_text(field, Locale.EN)
        assert value == ""
        assert isinstance(value, str)

    def test_placeholder(self):
        assert resolve_text(None, Locale.ID, placeholder="-") == "-"


class TestNormalize:
    """Tests for multilingual payload validation"""

    def test_accepts_supported_locales(self):
        assert normalize_multilingual({"id": "Halo", Locale.EN: None}, "title") == {"id": "Halo", "en": ""}

    def test_none_passes_through(self):
        assert normalize_multilingual(None, "title") is None

    def test_rejects_unknown_locale(self):
        with pytest.raises(EntityValidationError) as exc_info:
            normalize_multilingual({"fr": "Bonjour"}, "title")
        assert exc_info.value.field == "title"

    def test_rejects_plain_string(self):
        with pytest.raises(EntityValidationError):
            normalize_multilingual("Title", "title")

    def test_missing_translations(self):
        assert missing_translations({"id": "Judul", "en": ""}) == ["en"]


class TestFormatting:
    """Tests for price, duration and rating display"""

    def test_format_price(self):
        assert format_price(1500000) == "Rp 1.500.000,00"
        assert format_price(None) == "Rp 0,00"

    def test_format_months(self):
        assert format_months(12) == "1 year"
        assert format_months(24) == "2 years"
        assert format_months(18) == "18 months"
        assert format_months(1) == "1 month"

    def test_format_experience(self):
        assert format_experience(None) == "0 years"
        assert format_experience(0.5) == "6 months"
        assert format_experience(1) == "1 year"
        assert format_experience(2.5) == "2.5 years"

    def test_format_percent(self):
        assert format_percent(None) == "0%"
        assert format_percent(85) == "85%"

    def test_render_stars(self):
        assert render_stars(3) == "⭐⭐⭐"
        assert render_stars(9) == "⭐" * 5
        assert render_stars(-1) == ""
