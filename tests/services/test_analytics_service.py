"""Tests for AnalyticsService."""

import pytest

from src.db.models import AnalyticsTrendTranslation, PopularityTrend
from src.errors.domain import ValidationError
from src.services.analytics_service import (
    DEFAULT_POPULARITY_TRENDS,
    AnalyticsService,
)
from src.utils.locale import Locale


@pytest.fixture
def svc(test_db):
    """Service under test."""
    return AnalyticsService(test_db)


class TestSeedDefaults:
    def test_seeds_top_and_popularity_trends(self, svc):
        svc.seed_defaults()

        assert svc.get_top_trend()["name"] == "online education"
        names = [t["name"] for t in svc.list_popularity_trends()]
        assert names == sorted(t["name"] for t in DEFAULT_POPULARITY_TRENDS)

    def test_seeding_twice_keeps_edits(self, svc):
        svc.seed_defaults()
        svc.upsert_popularity_trend("beauty", "growing", 1.0)

        svc.seed_defaults()

        beauty = next(t for t in svc.list_popularity_trends() if t["name"] == "beauty")
        assert beauty["direction"] == "growing"
        assert beauty["percent_change"] == 1.0


class TestTopTrend:
    def test_none_when_empty(self, svc):
        assert svc.get_top_trend() is None

    def test_translation_overlays_base_text(self, svc):
        svc.seed_defaults()

        en = svc.get_top_trend(Locale.en)
        ru = svc.get_top_trend(Locale.ru)

        assert en["description"].startswith("Leading trend")
        assert ru["description"].startswith("Лидирующий тренд")
        assert en["percent_change"] == ru["percent_change"] == 18.5

    def test_latest_upsert_becomes_current(self, svc):
        svc.seed_defaults()

        svc.upsert_top_trend("ai tools", 25.0, "Assistants everywhere", "Cheap models")

        trend = svc.get_top_trend()
        assert trend["name"] == "ai tools"
        assert trend["why_popular"] == "Cheap models"

    def test_update_keeps_omitted_fields(self, svc, test_db):
        svc.upsert_top_trend("ai tools", 25.0, "Assistants", "Cheap models")

        svc.upsert_top_trend("ai tools", description="Copilots")

        trend = svc.get_top_trend()
        assert trend["percent_change"] == 25.0
        assert trend["description"] == "Copilots"
        assert trend["why_popular"] == "Cheap models"

    def test_texts_stored_per_locale(self, svc, test_db):
        svc.upsert_top_trend("ai tools", 25.0, "Assistants", None)
        svc.upsert_top_trend("ai tools", description="Ассистенты", locale=Locale.ru)

        assert svc.get_top_trend(Locale.ru)["description"] == "Ассистенты"
        assert svc.get_top_trend(Locale.en)["description"] == "Assistants"
        assert test_db.get(AnalyticsTrendTranslation, ("ai tools", "ru")) is not None

    def test_blank_name_rejected(self, svc):
        with pytest.raises(ValidationError):
            svc.upsert_top_trend("  ")


class TestPopularityTrends:
    def test_upsert_overwrites_direction_and_coalesces_percent(self, svc, test_db):
        svc.upsert_popularity_trend("cafes", "growing", 3.0, "Meeting places")

        svc.upsert_popularity_trend("cafes", "decreasing")

        [trend] = svc.list_popularity_trends()
        assert trend["direction"] == "decreasing"
        assert trend["percent_change"] == 3.0
        assert trend["notes"] == "Meeting places"

    def test_missing_translation_falls_back_to_base_notes(self, svc):
        svc.upsert_popularity_trend("cafes", "growing", notes="Meeting places")
        [trend] = svc.list_popularity_trends(Locale.ru)
        assert trend["notes"] == "Meeting places"

    def test_invalid_direction_rejected(self, svc, test_db):
        with pytest.raises(ValidationError) as exc_info:
            svc.upsert_popularity_trend("cafes", "flat")

        assert exc_info.value.code == "E-2002"
        assert test_db.get(PopularityTrend, "cafes") is None
