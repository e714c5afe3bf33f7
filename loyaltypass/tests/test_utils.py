"""Tests for phone and locale helpers."""

import pytest

from loyaltypass.utils import normalize_phone, resolve_locale


class TestNormalizePhone:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("+14155552671", "+14155552671"),
            ("+1 415 555 2671", "+14155552671"),
            ("(415) 555-2671", "+14155552671"),
            ("415-555-2671", "+14155552671"),
            ("+34 612 345 678", "+34612345678"),
        ],
    )
    def test_normalizes_to_e164(self, value, expected):
        assert normalize_phone(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["", None, "abc", "415.555.2671", "123", "+", 4155552671, ["+14155552671"]],
    )
    def test_invalid_returns_empty(self, value):
        assert normalize_phone(value) == ""

    def test_explicit_region(self):
        assert normalize_phone("612 345 678", region="ES") == "+34612345678"

    def test_default_region_from_settings(self, settings):
        settings.LOYALTYPASS = {"DEFAULT_REGION": "ES"}
        assert normalize_phone("612345678") == "+34612345678"


class TestResolveLocale:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("en", "en"),
            ("es", "es"),
            ("ES", "es"),
            ("es-MX", "es"),
            ("es_AR", "es"),
            ("fr", "en"),
            ("", "en"),
            (None, "en"),
            (7, "en"),
            (["es"], "en"),
        ],
    )
    def test_resolve(self, value, expected):
        assert resolve_locale(value) == expected

    def test_default_locale_from_settings(self, settings):
        settings.LOYALTYPASS = {"DEFAULT_LOCALE": "es"}
        assert resolve_locale("de") == "es"
