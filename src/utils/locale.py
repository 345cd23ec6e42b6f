"""Locale detection and user-facing message strings.

Two locales are supported. Locale only selects message strings and the
advisor prompt language; it never changes behavior.
"""

from enum import Enum

from fastapi import Request


class Locale(str, Enum):
    """Supported user-facing locales."""

    en = "en"
    ru = "ru"


def parse_locale(value: str | None) -> Locale | None:
    """Map a language tag like 'ru', 'ru-RU' or 'en-US' to a Locale.

    Returns None for empty or unsupported tags.
    """
    if not value:
        return None
    tag = value.strip().lower().replace("_", "-")
    if tag == "ru" or tag.startswith("ru-"):
        return Locale.ru
    if tag == "en" or tag.startswith("en-"):
        return Locale.en
    return None


def detect_locale(request: Request) -> Locale:
    """Pick a locale from ?lang=, then Accept-Language, else English."""
    explicit = parse_locale(request.query_params.get("lang"))
    if explicit is not None:
        return explicit

    accept = request.headers.get("accept-language", "").strip().lower()
    if accept.startswith("ru"):
        return Locale.ru
    return Locale.en


MESSAGES: dict[str, dict[Locale, str]] = {
    "advisor-fallback": {
        Locale.en: "Sorry, an error occurred while processing your request",
        Locale.ru: "Извините, произошла ошибка при обработке запроса",
    },
    "default-business-type": {
        Locale.en: "general business",
        Locale.ru: "общий бизнес",
    },
}


def get_message(key: str, locale: Locale) -> str:
    """Look up a message string, falling back to English, then the key."""
    entry = MESSAGES.get(key)
    if not entry:
        return key
    return entry.get(locale) or entry[Locale.en]
