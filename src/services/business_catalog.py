"""Static catalog of advice categories and starter resources.

The category ids match the categories the advisor prompt specializes
for. Texts are localized; unknown categories have no resources.
"""

from typing import Any

from src.utils.locale import Locale

CATEGORIES: list[dict[str, Any]] = [
    {
        "id": "legal",
        "icon": "⚖️",
        "name": {Locale.en: "Legal", Locale.ru: "Юридические вопросы"},
        "description": {
            Locale.en: "Registration, taxes, contracts, employment law",
            Locale.ru: "Регистрация, налоги, договоры, трудовое право",
        },
    },
    {
        "id": "marketing",
        "icon": "📊",
        "name": {Locale.en: "Marketing and sales", Locale.ru: "Маркетинг и продажи"},
        "description": {
            Locale.en: "Promotion, SMM, targeting, analytics",
            Locale.ru: "Продвижение, SMM, таргетинг, аналитика",
        },
    },
    {
        "id": "finance",
        "icon": "💰",
        "name": {Locale.en: "Finance", Locale.ru: "Финансы"},
        "description": {
            Locale.en: "Accounting, planning, cost optimization",
            Locale.ru: "Учет, планирование, оптимизация расходов",
        },
    },
    {
        "id": "management",
        "icon": "👥",
        "name": {Locale.en: "Management", Locale.ru: "Управление"},
        "description": {
            Locale.en: "Staff, processes, scaling",
            Locale.ru: "Персонал, процессы, масштабирование",
        },
    },
    {
        "id": "general",
        "icon": "💼",
        "name": {Locale.en: "General questions", Locale.ru: "Общие вопросы"},
        "description": {
            Locale.en: "Miscellaneous business questions",
            Locale.ru: "Разные бизнес-вопросы",
        },
    },
]

RESOURCES: dict[str, list[dict[str, Any]]] = {
    "legal": [
        {
            "type": "guide",
            "title": {Locale.en: "Registering a business", Locale.ru: "Регистрация бизнеса"},
            "description": {
                Locale.en: "Step-by-step guide to choosing a legal form",
                Locale.ru: "Пошаговое руководство по выбору формы собственности",
            },
        },
        {
            "type": "checklist",
            "title": {Locale.en: "Tax obligations", Locale.ru: "Налоговые обязательства"},
            "description": {
                Locale.en: "Mandatory taxes and their payment deadlines",
                Locale.ru: "Список обязательных налогов и сроков уплаты",
            },
        },
    ],
    "marketing": [
        {
            "type": "template",
            "title": {Locale.en: "SMM strategy", Locale.ru: "SMM стратегия"},
            "description": {
                Locale.en: "Ready-made social media promotion plan",
                Locale.ru: "Готовый план продвижения в социальных сетях",
            },
        },
        {
            "type": "worksheet",
            "title": {Locale.en: "Target audience", Locale.ru: "Целевая аудитория"},
            "description": {
                Locale.en: "Questionnaire for building a customer profile",
                Locale.ru: "Анкета для определения портрета клиента",
            },
        },
    ],
    "finance": [
        {
            "type": "template",
            "title": {Locale.en: "Financial plan", Locale.ru: "Финансовый план"},
            "description": {
                Locale.en: "Template for financial planning",
                Locale.ru: "Шаблон для финансового планирования",
            },
        },
        {
            "type": "checklist",
            "title": {Locale.en: "Expense tracking", Locale.ru: "Отслеживание расходов"},
            "description": {
                Locale.en: "Checklist for keeping costs under control",
                Locale.ru: "Чек-лист для контроля затрат",
            },
        },
    ],
}


def _localize(entry: dict[str, Any], locale: Locale) -> dict[str, Any]:
    return {
        key: value[locale] if isinstance(value, dict) else value
        for key, value in entry.items()
    }


def get_categories(locale: Locale = Locale.en) -> list[dict[str, Any]]:
    """Return every advice category with localized name and description."""
    return [_localize(category, locale) for category in CATEGORIES]


def get_resources(category: str, locale: Locale = Locale.en) -> list[dict[str, Any]]:
    """Return the starter resources for a category; empty if unknown."""
    return [_localize(resource, locale) for resource in RESOURCES.get(category, [])]
