"""Tests for locale parsing and detection."""

import pytest
from starlette.requests import Request

from src.utils.locale import Locale, detect_locale, get_message, parse_locale


def _request(query: str = "", accept_language: str | None = None) -> Request:
    headers = []
    if accept_language is not None:
        headers.append((b"accept-language", accept_language.encode()))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": query.encode(),
            "headers": headers,
        }
    )


@pytest.mark.parametrize(
    "value,expected",
    [
        ("ru", Locale.ru),
        ("RU-ru", Locale.ru),
        ("ru_RU", Locale.ru),
        ("en", Locale.en),
        ("en-GB", Locale.en),
        ("de", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_locale(value, expected):
    assert parse_locale(value) == expected


class TestDetectLocale:
    def test_query_param_wins_over_header(self):
        assert detect_locale(_request("lang=en", "ru-RU")) == Locale.en

    def test_accept_language_ru_prefix(self):
        assert detect_locale(_request(accept_language="ru-RU,ru;q=0.9")) == Locale.ru

    def test_other_languages_default_to_english(self):
        assert detect_locale(_request(accept_language="fr-FR")) == Locale.en

    def test_unsupported_query_param_falls_through(self):
        assert detect_locale(_request("lang=xx", "ru")) == Locale.ru

    def test_nothing_is_english(self):
        assert detect_locale(_request()) == Locale.en


class TestGetMessage:
    def test_localized(self):
        assert get_message("default-business-type", Locale.ru) == "общий бизнес"

    def test_unknown_key_returns_key(self):
        assert get_message("nope", Locale.en) == "nope"
