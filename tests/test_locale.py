"""Tests for perch.filters.locale — Accept-Language injection."""

import logging

import pytest

from perch.errors import ConfigurationError
from perch.filters.locale import LocaleNormalizer, canonical_language_tag
from perch.http.request import Request


class TestCanonicalLanguageTag:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("fr-FR", "fr-FR"),
            ("fr_fr", "fr-FR"),
            ("EN-us", "en-US"),
            ("de", "de"),
            ("zh-hant-tw", "zh-Hant-TW"),
            ("es-419", "es-419"),
            ("en-US-x-Twain", "en-US-x-twain"),
            ("  it-IT ", "it-IT"),
        ],
    )
    def test_canonical(self, tag: str, expected: str) -> None:
        assert canonical_language_tag(tag) == expected

    @pytest.mark.parametrize("tag", ["", "f", "fr--FR", "fr-FR;q=0.8", "12-34", "<script>"])
    def test_malformed(self, tag: str) -> None:
        assert canonical_language_tag(tag) is None


class TestLocaleNormalizer:
    def test_locale_param_becomes_header(self) -> None:
        request = Request.build("GET", "http://www.example.com/shop?locale=fr-FR")
        result = LocaleNormalizer("en-US")(request)
        assert result.headers["accept-language"] == "fr-FR"

    def test_default_when_no_param(self) -> None:
        request = Request.build("GET", "http://www.example.com/shop")
        result = LocaleNormalizer("en-US")(request)
        assert result.headers["accept-language"] == "en-US"

    def test_existing_header_kept(self) -> None:
        request = Request.build(
            "GET", "/shop?locale=fr-FR", headers={"Accept-Language": "de-DE,de;q=0.9"}
        )
        result = LocaleNormalizer("en-US")(request)
        assert result.headers.get_list("accept-language") == ["de-DE,de;q=0.9"]

    def test_blank_header_replaced(self) -> None:
        request = Request.build("GET", "/shop?locale=pt-BR", headers={"Accept-Language": "  "})
        result = LocaleNormalizer()(request)
        assert result.headers.get_list("accept-language") == ["pt-BR"]

    def test_param_canonicalised(self) -> None:
        request = Request.build("GET", "/shop?locale=fr_fr")
        assert LocaleNormalizer()(request).headers["accept-language"] == "fr-FR"

    def test_malformed_param_falls_back_to_default(self) -> None:
        request = Request.build("GET", "/shop?locale=not%20a%20locale")
        assert LocaleNormalizer("en-GB")(request).headers["accept-language"] == "en-GB"

    def test_first_param_wins(self) -> None:
        request = Request.build("GET", "/shop?locale=fr-FR&locale=de-DE")
        assert LocaleNormalizer()(request).headers["accept-language"] == "fr-FR"

    def test_custom_param_name(self) -> None:
        request = Request.build("GET", "/shop?lang=ja-JP&locale=fr-FR")
        result = LocaleNormalizer(param="lang")(request)
        assert result.headers["accept-language"] == "ja-JP"

    def test_query_left_alone(self) -> None:
        request = Request.build("GET", "/shop?locale=fr-FR")
        assert LocaleNormalizer()(request).query["locale"] == "fr-FR"

    def test_original_untouched(self) -> None:
        request = Request.build("GET", "/shop?locale=fr-FR")
        LocaleNormalizer()(request)
        assert "accept-language" not in request.headers

    def test_default_canonicalised(self) -> None:
        assert LocaleNormalizer("en_us").default_locale == "en-US"

    def test_invalid_default_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="default locale"):
            LocaleNormalizer("not a locale")

    def test_logs_header(self, caplog: pytest.LogCaptureFixture) -> None:
        request = Request.build("GET", "/shop?locale=fr-FR")
        with caplog.at_level(logging.INFO, logger="perch.filters"):
            LocaleNormalizer()(request)
        assert "Request contains Accept-Language header: fr-FR" in caplog.text
