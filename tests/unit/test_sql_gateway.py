"""
Unit Tests - SQLAlchemy Gateway
"""
from backoffice.gateway import InMemoryObjectStorage
from backoffice.gateway.base import Order, any_of, eq, gte, ilike, in_
from backoffice.services.registry import ServiceRegistry


async def seed_faqs(gateway, *titles):
    rows = [{"title": {"en": title, "id": title.upper()}} for title in titles]
    return (await gateway.insert("faqs", rows)).data


class TestSQLAlchemyGateway:
    """Tests for the SQL gateway over SQLite"""

    async def test_insert_returns_rows(self, sql_gateway):
        rows = await seed_faqs(sql_gateway, "alpha", "beta")

        assert [row["title"]["en"] for row in rows] == ["alpha", "beta"]
        assert all(row["id"] for row in rows)

    async def test_select_with_order_range_and_count(self, sql_gateway):
        await seed_faqs(sql_gateway, "a", "b", "c")

        response = await sql_gateway.select(
            "faqs", order=[Order("id", ascending=False)], range=(0, 1), count=True
        )

        assert response.error is None
        assert response.count == 3
        assert [row["title"]["en"] for row in response.data] == ["c", "b"]

    async def test_json_key_search(self, sql_gateway):
        await seed_faqs(sql_gateway, "pricing", "delivery")

        response = await sql_gateway.select(
            "faqs",
            filters=[any_of(ilike("title", "%PRIC%", key="en"), ilike("title", "%nothing%", key="id"))],
        )

        assert [row["title"]["en"] for row in response.data] == ["pricing"]

    async def test_in_and_range_filters(self, sql_gateway):
        rows = await seed_faqs(sql_gateway, "a", "b", "c")
        ids = [row["id"] for row in rows]

        response = await sql_gateway.select(
            "faqs", columns=["id"], filters=[in_("id", ids[:2]), gte("id", ids[1])]
        )

        assert response.data == [{"id": ids[1]}]

    async def test_update_and_delete(self, sql_gateway):
        (row,) = await seed_faqs(sql_gateway, "old")

        updated = await sql_gateway.update("faqs", {"title": {"en": "new"}}, [eq("id", row["id"])])
        deleted = await sql_gateway.delete("faqs", [eq("id", row["id"])])
        remaining = await sql_gateway.select("faqs", count=True)

        assert updated.first["title"] == {"en": "new"}
        assert deleted.count == 1
        assert remaining.count == 0

    async def test_unknown_table_is_reported(self, sql_gateway):
        response = await sql_gateway.select("no_such_table")

        assert response.error is not None
        assert response.error.code == "unknown_table"

    async def test_constraint_violation_is_reported(self, sql_gateway):
        await sql_gateway.insert("skills", {"title": {"en": "Go"}, "slug": "go"})

        response = await sql_gateway.insert("skills", {"title": {"en": "Go"}, "slug": "go"})

        assert response.error is not None
        assert response.data == []

    async def test_ping(self, sql_gateway):
        assert await sql_gateway.ping() is True


class TestServicesOverSQL:
    """Domain services against a real database"""

    async def test_project_with_links(self, sql_gateway):
        registry = ServiceRegistry(sql_gateway, InMemoryObjectStorage())
        skill = await registry.skills.create({"title": {"en": "Python"}, "percent_skills": 80})
        project = await registry.projects.create(
            {"title": {"en": "Portfolio"}, "link_demo": "https://example.com"},
            related_ids={"skill_ids": [skill["id"], skill["id"]]},
        )

        listed = await registry.projects.get_all({"skill_id": str(skill["id"]), "search": "portfolio"})
        detail = await registry.projects.get_by_id(project["id"], with_relations=True)

        assert listed.count == 1
        assert detail["skill_ids"] == [skill["id"]]

        await registry.projects.delete(project["id"])
        assert (await sql_gateway.select("project_skills", count=True)).count == 0

    async def test_certificate_dates_round_trip(self, sql_gateway):
        registry = ServiceRegistry(sql_gateway, InMemoryObjectStorage())

        row = await registry.certificates.create(
            {"title": {"en": "AWS"}, "issued_date": "2023-01-10", "valid_until": "2026-01-10"}
        )

        assert row["issued_date"].isoformat() == "2023-01-10"
