"""
Unit Tests - View State
"""
from datetime import date, datetime, timezone

import pytest

from backoffice.errors import EntityValidationError, GatewayError
from backoffice.state import AnalyticsState, ListState, SingletonState


class TestListState:
    """Tests for ListState"""

    async def test_refresh_loads_rows(self, registry):
        await registry.faqs.create({"title": {"en": "One"}})
        state = ListState(registry.faqs)

        await state.refresh()

        assert state.total_count == 1
        assert state.loading is False
        assert state.error is None

    async def test_mutations_refetch(self, registry):
        state = ListState(registry.faqs)

        row = await state.create({"title": {"en": "One"}})
        assert [item["id"] for item in state.data] == [row["id"]]

        await state.update(row["id"], {"title": {"en": "Uno"}})
        assert state.data[0]["title"] == {"en": "Uno"}

        await state.delete(row["id"])
        assert state.data == []
        assert state.total_count == 0

    async def test_failed_mutation_records_error(self, registry):
        state = ListState(registry.skills)

        with pytest.raises(EntityValidationError):
            await state.create({"title": {"en": "Go"}, "percent_skills": 101})

        assert "between 0 and 100" in state.error
        assert state.loading is False

    async def test_failed_refresh_keeps_rows(self, registry, gateway):
        await registry.faqs.create({"title": {"en": "One"}})
        state = ListState(registry.faqs)
        await state.refresh()
        gateway.fail_next("faqs", "select")

        await state.refresh()

        assert state.error == "Simulated select failure on faqs"
        assert len(state.data) == 1

    async def test_set_filters(self, registry):
        await registry.articles.create({"title": {"en": "Python tips"}})
        await registry.articles.create({"title": {"en": "Cooking"}})
        state = ListState(registry.articles)

        await state.set_filters(search="python")
        assert state.total_count == 1

        await state.set_filters(search=None)
        assert state.total_count == 2
        assert "search" not in state.filters

    async def test_get_with_relations(self, registry):
        skill_id = (await registry.skills.create({"title": {"en": "Python"}}))["id"]
        state = ListState(registry.projects)
        row = await state.create({"title": {"en": "P"}}, related_ids={"skill_ids": [skill_id]})

        fetched = await state.get(row["id"])

        assert fetched["skill_ids"] == [skill_id]


class TestSingletonState:
    """Tests for SingletonState"""

    async def test_save_reloads(self, registry):
        state = SingletonState(registry.about)
        assert await state.load() is None

        await state.save({"title": {"en": "About"}})

        assert state.data["title"] == {"en": "About"}

    async def test_save_failure(self, registry, gateway):
        state = SingletonState(registry.contact)
        gateway.fail_next("contacts", "insert")

        with pytest.raises(GatewayError):
            await state.save({"email": "hi@example.com"})

        assert state.error is not None
        assert state.data is None


class TestAnalyticsState:
    """Tests for AnalyticsState"""

    async def test_default_period(self, registry):
        state = AnalyticsState(registry.visitors)
        assert state.period.days == registry.visitors.settings.default_period_days

    async def test_set_period_loads_snapshot(self, registry):
        await registry.visitors.track_page_view("/")
        state = AnalyticsState(registry.visitors)
        today = datetime.now(timezone.utc).date()

        snapshot = await state.set_period(today, today, group_by="month")

        assert state.group_by == "month"
        assert snapshot.unique_visitors == 1
        assert snapshot.comparison is not None

    async def test_apply_preset(self, registry):
        state = AnalyticsState(registry.visitors, compare_with_previous=False)

        await state.apply_preset("last_month", today=date(2024, 3, 15))

        assert state.period.start_date == date(2024, 2, 1)
        assert state.period.end_date == date(2024, 2, 29)
        assert state.snapshot.comparison is None

    async def test_unknown_preset(self, registry):
        state = AnalyticsState(registry.visitors)
        with pytest.raises(KeyError):
            await state.apply_preset("next_decade")

    async def test_invalid_grouping_recorded(self, registry):
        state = AnalyticsState(registry.visitors, group_by="hour")

        assert await state.load() is None
        assert "group_by" in state.error
