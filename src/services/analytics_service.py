"""Trend figures for the analytics dashboard.

Two datasets:
    - the leading trend (the most recently updated analytics_trends row)
    - per-niche popularity movement (popularity_trends, one row per niche)

Each base row keeps numeric fields plus fallback text. Localized text
lives in a *_i18n table keyed by (name, locale) and is overlaid with
COALESCE on read, so a missing translation falls back to the base text.

Writes are coalescing upserts: a field left out of an update keeps its
stored value. The base row is the primary write; the translation row is
best-effort.
"""

import logging
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import (
    AnalyticsTrend,
    AnalyticsTrendTranslation,
    PopularityTrend,
    PopularityTrendTranslation,
    TrendDirection,
    utc_now_iso,
)
from src.errors.domain import PersistenceFailure, ValidationError
from src.utils.locale import Locale

logger = logging.getLogger(__name__)

DEFAULT_TOP_TRENDS: list[dict[str, Any]] = [
    {
        "name": "online education",
        "percent_change": 18.5,
        "description": (
            "Leading trend driven by the growth of remote learning platforms "
            "and digital courses."
        ),
        "why_popular": (
            "Online education took off thanks to wide internet access, "
            "flexible schedules, lower cost than offline options and a "
            "pandemic that normalized remote upskilling."
        ),
        "translations": {
            Locale.ru: {
                "description": (
                    "Лидирующий тренд, отражающий рост дистанционных "
                    "образовательных платформ и цифровых курсов."
                ),
                "why_popular": (
                    "Онлайн-образование стало популярным благодаря широкой "
                    "доступности интернета, гибкому формату обучения, более "
                    "низкой стоимости по сравнению с офлайн-вариантами и "
                    "пандемии, которая нормализовала дистанционное "
                    "повышение квалификации."
                ),
            },
        },
    },
]

DEFAULT_POPULARITY_TRENDS: list[dict[str, Any]] = [
    {
        "name": "auto service",
        "direction": "growing",
        "percent_change": 4.2,
        "notes": "Ageing vehicle fleet and a shift from DIY repairs to services",
        "translations": {
            Locale.ru: {
                "notes": "Спрос из-за старения автопарка и перехода от DIY к сервисам"
            }
        },
    },
    {
        "name": "coffee shops",
        "direction": "growing",
        "percent_change": 3.5,
        "notes": "Experience-led spending and local places to meet",
        "translations": {
            Locale.ru: {
                "notes": "Опытное потребление и роль локальных пространств для общения"
            }
        },
    },
    {
        "name": "marketplaces",
        "direction": "growing",
        "percent_change": 6.8,
        "notes": "Omnichannel retail, long-tail sellers and aggregator effects",
        "translations": {
            Locale.ru: {
                "notes": (
                    "Переход к омниканальности, рост продавцов long-tail "
                    "и эффект агрегаторов"
                )
            }
        },
    },
    {
        "name": "beauty",
        "direction": "decreasing",
        "percent_change": -2.1,
        "notes": "Post-pandemic normalization and budgets moving elsewhere",
        "translations": {
            Locale.ru: {
                "notes": (
                    "Нормализация постпандемийного периода и "
                    "перераспределение бюджета"
                )
            }
        },
    },
]


class AnalyticsService:
    """Read and upsert dashboard trend figures.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_top_trend(self, locale: Locale = Locale.en) -> dict[str, Any] | None:
        """Return the most recently updated leading trend, localized.

        Returns:
            Trend dict, or None when no trend has been recorded.
        """
        i18n = AnalyticsTrendTranslation
        stmt = (
            select(
                AnalyticsTrend.name,
                AnalyticsTrend.percent_change,
                func.coalesce(i18n.description, AnalyticsTrend.description).label(
                    "description"
                ),
                func.coalesce(i18n.why_popular, AnalyticsTrend.why_popular).label(
                    "why_popular"
                ),
                AnalyticsTrend.created_at,
            )
            .outerjoin(
                i18n,
                and_(i18n.name == AnalyticsTrend.name, i18n.locale == locale.value),
            )
            .order_by(AnalyticsTrend.created_at.desc())
            .limit(1)
        )
        row = self._db.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def list_popularity_trends(self, locale: Locale = Locale.en) -> list[dict[str, Any]]:
        """Return every niche's popularity movement, ordered by name."""
        i18n = PopularityTrendTranslation
        stmt = (
            select(
                PopularityTrend.name,
                PopularityTrend.direction,
                PopularityTrend.percent_change,
                func.coalesce(i18n.notes, PopularityTrend.notes).label("notes"),
                PopularityTrend.created_at,
            )
            .outerjoin(
                i18n,
                and_(i18n.name == PopularityTrend.name, i18n.locale == locale.value),
            )
            .order_by(PopularityTrend.name)
        )
        return [dict(row) for row in self._db.execute(stmt).mappings()]

    def upsert_top_trend(
        self,
        name: str,
        percent_change: float | None = None,
        description: str | None = None,
        why_popular: str | None = None,
        locale: Locale = Locale.en,
    ) -> None:
        """Record a leading trend and make it the current one.

        A new row stores the given texts as its fallback. An existing row
        only takes a provided percent_change; its texts change through the
        locale's translation row.

        Raises:
            ValidationError: If name is blank.
            PersistenceFailure: If the base row cannot be written.
        """
        name = _require_name(name)
        stmt = sqlite_insert(AnalyticsTrend).values(
            name=name,
            percent_change=percent_change,
            description=description,
            why_popular=why_popular,
            created_at=utc_now_iso(),
        )
        table = AnalyticsTrend.__table__
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.name],
            set_={
                "percent_change": func.coalesce(
                    stmt.excluded.percent_change, table.c.percent_change
                ),
                "created_at": stmt.excluded.created_at,
            },
        )
        self._write_base(stmt, f"upsert top trend '{name}'")

        self._write_translation(
            AnalyticsTrendTranslation,
            name,
            locale,
            {"description": description, "why_popular": why_popular},
        )
        logger.info("Top trend '%s' updated (%s)", name, locale.value)

    def upsert_popularity_trend(
        self,
        name: str,
        direction: str,
        percent_change: float | None = None,
        notes: str | None = None,
        locale: Locale = Locale.en,
    ) -> None:
        """Record a niche's popularity movement.

        Direction is always overwritten; percent_change only when provided.

        Raises:
            ValidationError: If name is blank or direction is not
                'growing' or 'decreasing'.
            PersistenceFailure: If the base row cannot be written.
        """
        name = _require_name(name)
        if direction not in {d.value for d in TrendDirection}:
            raise ValidationError("direction must be 'growing' or 'decreasing'")

        stmt = sqlite_insert(PopularityTrend).values(
            name=name,
            direction=direction,
            percent_change=percent_change,
            notes=notes,
            created_at=utc_now_iso(),
        )
        table = PopularityTrend.__table__
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.name],
            set_={
                "direction": stmt.excluded.direction,
                "percent_change": func.coalesce(
                    stmt.excluded.percent_change, table.c.percent_change
                ),
                "created_at": stmt.excluded.created_at,
            },
        )
        self._write_base(stmt, f"upsert popularity trend '{name}'")

        self._write_translation(
            PopularityTrendTranslation, name, locale, {"notes": notes}
        )
        logger.info("Popularity trend '%s' updated (%s)", name, locale.value)

    def seed_defaults(self) -> None:
        """Insert the default trends unless rows with those names exist."""
        for trend in DEFAULT_TOP_TRENDS:
            self._seed_row(AnalyticsTrend, AnalyticsTrendTranslation, trend)
        for trend in DEFAULT_POPULARITY_TRENDS:
            self._seed_row(PopularityTrend, PopularityTrendTranslation, trend)
        self._db.commit()

    def _seed_row(self, model, translation_model, trend: dict[str, Any]) -> None:
        base = {k: v for k, v in trend.items() if k != "translations"}
        self._db.execute(sqlite_insert(model).values(**base).on_conflict_do_nothing())
        for locale, texts in trend.get("translations", {}).items():
            self._db.execute(
                sqlite_insert(translation_model)
                .values(name=trend["name"], locale=locale.value, **texts)
                .on_conflict_do_nothing()
            )

    def _write_base(self, stmt, operation: str) -> None:
        try:
            self._db.execute(stmt)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceFailure(operation, e) from e

    def _write_translation(
        self,
        model,
        name: str,
        locale: Locale,
        texts: dict[str, str | None],
    ) -> None:
        stmt = sqlite_insert(model).values(name=name, locale=locale.value, **texts)
        table = model.__table__
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.name, table.c.locale],
            set_={
                field: func.coalesce(stmt.excluded[field], table.c[field])
                for field in texts
            },
        )
        try:
            self._db.execute(stmt)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.warning(
                "Translation for '%s' (%s) not saved: %s", name, locale.value, e
            )


def _require_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required")
    return name
