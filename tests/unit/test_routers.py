"""End-to-end tests of the HTTP surface against a mocked proxy chain."""

from pathlib import Path

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient

from acquisition.config.settings import AcquisitionSettings
from acquisition.main import create_app
from acquisition.storage.kv_store import MemoryStore
from helpers import make_html

NEWS_PAGE = make_html(
    20000,
    body=(
        "<table>"
        '<tr><td>01.03.2025</td><td><a href="/en/news/spring.html">Spring school opens</a></td></tr>'
        '<tr><td>15.01.2025</td><td><a href="/en/news/phd.html">New doctoral researchers</a></td></tr>'
        "</table>"
    ),
)


def _origin(request: httpx.Request) -> httpx.Response:
    """Proxies answer probes; only news pages are reachable through them."""
    if request.method == "HEAD":
        return httpx.Response(200)
    target = request.url.params.get("url", "")
    if "/news/" in target or target.endswith("/en/"):
        return httpx.Response(200, text=NEWS_PAGE)
    return httpx.Response(503)


@pytest.fixture
def app_settings_for_api(tmp_path: Path) -> AcquisitionSettings:
    proxies_path = tmp_path / "proxies.yaml"
    proxies_path.write_text(
        yaml.dump({
            "proxies": [
                {"name": "alpha", "url_template": "https://alpha.proxy.test/?url={url_encoded}"},
                {"name": "beta", "url_template": "https://beta.proxy.test/?url={url_encoded}"},
            ]
        }),
        encoding="utf-8",
    )
    return AcquisitionSettings(
        proxies_path=str(proxies_path),
        proxy_retry_delay_ms=0,
        retry_backoff_ms=0,
        log_export_dir=str(tmp_path / "logs"),
        storage_dir=str(tmp_path / "state"),
        log_level="WARNING",
    )


@pytest.fixture
def client(app_settings_for_api, mock_client) -> TestClient:
    app = create_app(app_settings_for_api, store=MemoryStore(), client=mock_client(_origin))
    return TestClient(app)


class TestHealthEndpoints:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"
        assert body["data"]["proxy_pool"]["configured"] == 2

    def test_not_ready_before_first_probe(self, client):
        response = client.get("/readiness")
        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_ready_after_health_check(self, client):
        checked = client.post("/api/v1/proxies/health-check").json()
        assert checked["data"] == {"healthy": 2, "total": 2}

        response = client.get("/readiness")

        assert response.status_code == 200
        assert response.json()["data"]["proxy_healthy"] == 2

    def test_metrics(self, client):
        data = client.get("/metrics").json()["data"]
        assert data["cache"]["valid"] is False
        assert len(data["proxy_scores"]) == 2
        assert data["seen_items"]["total"] == 0


class TestContentEndpoints:
    def test_scrape_all(self, client):
        body = client.get("/api/v1/content", params={"use_cache": "false"}).json()

        assert body["success"] is True
        assert [i["title"] for i in body["data"]["news"]] == [
            "Spring school opens",
            "New doctoral researchers",
        ]
        assert body["data"]["events"] == []
        assert body["meta"]["counts"]["news"] == 2

    def test_category_items(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})

        body = client.get("/api/v1/content/news").json()

        assert body["meta"] == {"category": "news", "total": 2}
        assert body["data"][0]["category"] == "news"

    def test_unknown_category(self, client):
        response = client.get("/api/v1/content/gallery")
        assert response.status_code == 404
        assert response.json()["error"] == "Unknown category 'gallery'"

    def test_new_and_seen(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})
        items = client.get("/api/v1/content/items").json()["data"]
        first_id = items[0]["id"]

        marked = client.post("/api/v1/content/seen", json={"ids": [first_id, "nope"]}).json()
        fresh = client.get("/api/v1/content/new").json()

        assert marked["data"] == {"marked": 1}
        assert marked["meta"] == {"unknown_ids": ["nope"]}
        assert first_id not in [i["id"] for i in fresh["data"]]
        assert fresh["meta"]["total"] == len(items) - 1

    def test_seen_requires_ids(self, client):
        response = client.post("/api/v1/content/seen", json={"ids": []})
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_retry_failed_category(self, client):
        body = client.post("/api/v1/content/events/retry").json()

        assert body["success"] is False
        assert body["data"]["status"] == "failed"
        assert body["error"] == "empty result"

    def test_retry_successful_category(self, client):
        body = client.post("/api/v1/content/news/retry").json()

        assert body["success"] is True
        assert body["data"]["source"] == "fresh"
        assert len(client.get("/api/v1/content/news").json()["data"]) == 2


class TestDiagnosticsEndpoints:
    def test_logs_and_report(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})

        logs = client.get("/api/v1/logs").json()
        report = client.get("/api/v1/logs/report").json()["data"]

        assert logs["data"][0]["category"] == "system"
        assert report["by_category"]["news"]["last_status"] == "success"
        assert report["by_category"]["events"]["last_status"] == "failed"

    def test_export_writes_file(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})

        body = client.get("/api/v1/logs/export").json()

        assert Path(body["meta"]["path"]).exists()
        assert body["data"]["logs"]

    def test_clear_logs(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})
        client.delete("/api/v1/logs")
        assert client.get("/api/v1/logs").json()["data"] == []

    def test_proxies_and_reset(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})

        body = client.get("/api/v1/proxies").json()

        assert [row["name"] for row in body["data"]] == ["alpha", "beta"]
        assert body["data"][0]["tested"] is True
        assert sorted(body["meta"]["order"]) == [0, 1]
        assert body["meta"]["preferred_proxy"] in (0, 1)

        client.delete("/api/v1/proxies/scores")
        assert all(not row["tested"] for row in client.get("/api/v1/proxies").json()["data"])

    def test_dashboard(self, client):
        client.get("/api/v1/content", params={"use_cache": "false"})

        data = client.get("/api/v1/dashboard").json()["data"]

        assert data["categories"]["news"]["status"] == "success"
        assert data["progress"]["percent"] == 100


class TestLifespan:
    def test_startup_and_shutdown(self, app_settings_for_api, mock_client):
        app = create_app(app_settings_for_api, store=MemoryStore(), client=mock_client(_origin))

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
