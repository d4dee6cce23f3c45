"""
Unit Tests - HTTP API
"""
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backoffice.gateway import InMemoryGateway, InMemoryObjectStorage
from backoffice.main import create_app
from backoffice.serving.api.middleware import RateLimitMiddleware

API = "/api/v1"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def storage():
    return InMemoryObjectStorage()


@pytest.fixture
def client(gateway, storage):
    app = create_app(gateway=gateway, storage=storage)
    with TestClient(app) as test_client:
        yield test_client


def create_skill(client, title):
    response = client.post(f"{API}/skills", json={"data": {"title": {"en": title}}})
    assert response.status_code == 201
    return response.json()["id"]


class TestHealthEndpoints:
    """Tests for health probes"""

    def test_health(self, client):
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["redis"]["status"] == "disabled"

    def test_liveness_and_readiness(self, client):
        assert client.get(f"{API}/health/live").json() == {"status": "alive"}
        assert client.get(f"{API}/health/ready").json() == {"status": "ready"}

    def test_not_ready_when_gateway_down(self, client, gateway, monkeypatch):
        async def down():
            return False

        monkeypatch.setattr(gateway, "ping", down)

        response = client.get(f"{API}/health/ready")

        assert response.status_code == 503

    def test_security_headers(self, client):
        response = client.get(f"{API}/info")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers


class TestEntityEndpoints:
    """Tests for collection CRUD over HTTP"""

    def test_crud_round(self, client):
        created = client.post(f"{API}/faqs", json={"data": {"title": {"en": "Why?"}}})
        assert created.status_code == 201
        faq_id = created.json()["id"]

        listed = client.get(f"{API}/faqs", params={"search": "why"})
        assert listed.json()["count"] == 1

        updated = client.put(f"{API}/faqs/{faq_id}", json={"data": {"title": {"en": "How?"}}})
        assert updated.json()["title"] == {"en": "How?"}

        assert client.delete(f"{API}/faqs/{faq_id}").status_code == 204
        assert client.get(f"{API}/faqs/{faq_id}").status_code == 404

    def test_validation_error_body(self, client):
        response = client.post(f"{API}/skills", json={"data": {"title": {"en": "Go"}, "percent_skills": 120}})

        assert response.status_code == 422
        assert response.json() == {
            "detail": "Percent skills must be between 0 and 100",
            "field": "percent_skills",
        }

    def test_reference_in_use_conflict(self, client):
        category = client.post(f"{API}/skill-categories", json={"data": {"title": {"en": "Backend"}}}).json()
        client.post(f"{API}/skills", json={"data": {"title": {"en": "Go"}, "skill_category_id": category["id"]}})

        response = client.delete(f"{API}/skill-categories/{category['id']}")

        assert response.status_code == 409
        assert response.json()["detail"] == "Cannot delete: Category has associated skills"

    def test_non_numeric_limit(self, client):
        response = client.get(f"{API}/faqs", params={"limit": "abc"})

        assert response.status_code == 422
        assert response.json() == {"detail": "limit must be a number", "field": "limit"}

    def test_delete_missing(self, client):
        assert client.delete(f"{API}/brands/999").status_code == 404

    def test_gateway_failure_is_bad_gateway(self, client, gateway):
        gateway.fail_next("faqs", "insert")
        response = client.post(f"{API}/faqs", json={"data": {"title": {"en": "x"}}})
        assert response.status_code == 502

    def test_links(self, client):
        first, second = create_skill(client, "Python"), create_skill(client, "Rust")
        project = client.post(
            f"{API}/projects", json={"data": {"title": {"en": "P"}}, "related_ids": {"skill_ids": [first]}}
        ).json()

        replaced = client.put(f"{API}/projects/{project['id']}/links/skill_ids", json={"ids": [second, second]})
        detail = client.get(f"{API}/projects/{project['id']}").json()

        assert replaced.json() == {"skill_ids": [second]}
        assert detail["skill_ids"] == [second]

    def test_unknown_link_child(self, client):
        response = client.post(
            f"{API}/projects", json={"data": {"title": {"en": "P"}}, "related_ids": {"skill_ids": [42]}}
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Skill with id 42 does not exist"

    def test_asset_upload(self, client, storage):
        brand = client.post(f"{API}/brands", json={"data": {"title": {"en": "Acme"}}}).json()

        response = client.post(
            f"{API}/brands/{brand['id']}/assets/image",
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 200
        assert response.json()["image"].startswith("/uploads/brand/")
        assert len(storage.objects) == 1

    def test_bulk_endpoints(self, client):
        created = client.post(
            f"{API}/faqs/bulk", json={"items": [{"title": {"en": "a"}}, {"title": {"en": "b"}}]}
        ).json()
        ids = [row["id"] for row in created]

        updated = client.put(
            f"{API}/faqs/bulk", json={"updates": [{"id": ids[0], "data": {"title": {"en": "A"}}}]}
        )
        deleted = client.post(f"{API}/faqs/bulk-delete", json={"ids": ids})

        assert updated.json()[0]["title"] == {"en": "A"}
        assert deleted.json() == {"deleted": 2}


class TestSingletonAndActionEndpoints:
    """Tests for singleton pages and entity actions"""

    def test_singleton_save(self, client):
        assert client.get(f"{API}/about").status_code == 404

        saved = client.put(f"{API}/about", json={"title": {"en": "About me"}})

        assert saved.status_code == 200
        assert client.get(f"{API}/about").json()["title"] == {"en": "About me"}

    def test_article_counters(self, client):
        article = client.post(f"{API}/articles", json={"data": {"title": {"en": "A"}}}).json()

        client.post(f"{API}/articles/{article['id']}/view")
        liked = client.post(f"{API}/articles/{article['id']}/like", json={"liked": True}).json()

        assert liked["total_views"] == 1
        assert liked["like"] == 1

    def test_reorder_processes(self, client):
        first = client.post(f"{API}/service-processes", json={"data": {"title": {"en": "A"}}}).json()
        second = client.post(f"{API}/service-processes", json={"data": {"title": {"en": "B"}}}).json()

        response = client.put(
            f"{API}/service-processes/order",
            json={"items": [{"id": first["id"], "order_no": 2}, {"id": second["id"], "order_no": 1}]},
        )
        listed = client.get(f"{API}/service-processes").json()["data"]

        assert response.status_code == 204
        assert [row["title"]["en"] for row in listed] == ["B", "A"]

    def test_testimonial_facets(self, client):
        client.post(f"{API}/testimonials", json={"data": {"name": "A", "star": 5, "year": 2023}})

        assert client.get(f"{API}/testimonials/years").json() == [2023]


class TestAnalyticsEndpoints:
    """Tests for tracking and analytics reads"""

    def test_track_then_read(self, client):
        tracked = client.post(
            f"{API}/track/page-view",
            json={"page_url": "/blog"},
            headers={"user-agent": "Mozilla/5.0 Firefox/121.0"},
        )
        assert tracked.status_code == 201
        visitor_id = tracked.json()["id"]

        duration = client.post(f"{API}/track/duration", json={"visitor_id": visitor_id, "read_minutes": 1.5})
        assert duration.json()["duration_seconds"] == 90

        today = datetime.now(timezone.utc).date().isoformat()
        pages = client.get(f"{API}/analytics/top-pages", params={"start_date": today, "end_date": today})
        unique = client.get(f"{API}/analytics/unique-visitors", params={"start_date": today, "end_date": today})

        assert pages.json() == [{"page_url": "/blog", "count": 1, "avg_duration": 90}]
        assert unique.json() == {"unique_visitors": 1}

    def test_anonymous_views_share_session(self, client):
        first = client.post(f"{API}/track/page-view", json={"page_url": "/"}).json()
        second = client.post(f"{API}/track/page-view", json={"page_url": "/about"}).json()

        assert first["session_id"] == second["session_id"]

    def test_duration_without_value(self, client):
        visitor_id = client.post(f"{API}/track/page-view", json={"page_url": "/"}).json()["id"]

        response = client.post(f"{API}/track/duration", json={"visitor_id": visitor_id})

        assert response.status_code == 422
        assert response.json() == {
            "detail": "Missing required field: duration_seconds",
            "field": "duration_seconds",
        }

    def test_comparison(self, client):
        response = client.get(
            f"{API}/analytics/comparison", params={"start_date": "2024-03-01", "end_date": "2024-03-07"}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["comparison"]["visits_percent"] == 0.0
        assert [metric["name"] for metric in body["metrics"]] == ["Bounce Rate", "Pages / Visit", "New Visitors"]

    def test_reversed_period(self, client):
        response = client.get(
            f"{API}/analytics/stats", params={"start_date": "2024-03-07", "end_date": "2024-03-01"}
        )
        assert response.status_code == 422

    def test_invalid_group_by(self, client):
        assert client.get(f"{API}/analytics/stats", params={"group_by": "hour"}).status_code == 422

    def test_presets(self, client):
        presets = client.get(f"{API}/analytics/presets", params={"today": "2024-03-15"}).json()
        assert presets["this_month"] == {"start_date": "2024-03-01", "end_date": "2024-03-15"}

    def test_missing_page_url(self, client):
        response = client.post(f"{API}/track/page-view", json={"page_url": ""})
        assert response.status_code == 422


class TestRateLimit:
    """Tests for RateLimitMiddleware"""

    def test_limits_only_matching_paths(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, max_requests=2, window_seconds=60, path_prefixes=("/track",))

        @app.get("/track")
        async def track():
            return {"ok": True}

        @app.get("/other")
        async def other():
            return {"ok": True}

        client = TestClient(app)
        statuses = [client.get("/track").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
        assert client.get("/other").status_code == 200
