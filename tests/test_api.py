"""Tests for the HTTP surface in privacy_guard.main."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import testclient

from privacy_guard import engine, main


@pytest.fixture()
def client(privacy_engine: engine.PrivacyEngine) -> Iterator[testclient.TestClient]:
    app = main.create_app(privacy_engine, load_catalog=False)
    with testclient.TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def tab(client: testclient.TestClient) -> str:
    response = client.post("/api/sessions/tab-1/navigate", json={"url": "https://www.shop.example/"})
    assert response.status_code == 200
    return "tab-1"


class TestRequests:
    """POST /api/requests and the header endpoints."""

    def test_tracker_blocked(self, client: testclient.TestClient, tab: str) -> None:
        response = client.post(
            "/api/requests",
            json={"sessionId": tab, "url": "https://ads.tracker.net/p.gif", "resourceType": "image"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["action"] == "block"
        assert body["isThirdParty"] is True
        assert body["matchedDomain"] == "tracker.net"

    def test_benign_allowed(self, client: testclient.TestClient, tab: str) -> None:
        response = client.post("/api/requests", json={"sessionId": tab, "url": "https://www.shop.example/app.js"})
        assert response.json()["action"] == "allow"

    def test_unknown_session_gets_decision(self, client: testclient.TestClient) -> None:
        response = client.post(
            "/api/requests",
            json={"sessionId": "ghost", "url": "https://tracker.net/", "documentUrl": "https://shop.example/"},
        )
        assert response.status_code == 200
        assert response.json()["action"] == "block"

    def test_missing_fields_rejected(self, client: testclient.TestClient) -> None:
        assert client.post("/api/requests", json={"url": "https://tracker.net/"}).status_code == 422

    def test_response_headers(self, client: testclient.TestClient, tab: str) -> None:
        response = client.post(
            "/api/response-headers",
            json={
                "sessionId": tab,
                "url": "https://www.shop.example/",
                "responseHeaders": [{"name": "set-cookie", "value": "cart=1; Expires=Thu, 01 Jan 2099 00:00:00 GMT"}],
            },
        )
        assert response.status_code == 202
        assert response.json() == {"applied": True}

        stats = client.get(f"/api/sessions/{tab}/stats").json()
        assert stats["firstPartyCookieSets"] == 1
        assert stats["persistentCookieSets"] == 1

    def test_request_headers_unknown_session(self, client: testclient.TestClient) -> None:
        response = client.post(
            "/api/request-headers",
            json={"sessionId": "ghost", "requestHeaders": [{"name": "Cookie", "value": "a=1"}]},
        )
        assert response.status_code == 202
        assert response.json() == {"applied": False}


class TestSessions:
    """Session lifecycle and read endpoints."""

    def test_navigate_returns_stats(self, client: testclient.TestClient) -> None:
        body = client.post("/api/sessions/tab-2/navigate", json={"url": "https://shop.example.co.uk/"}).json()
        assert body["sessionId"] == "tab-2"
        assert body["topDomain"] == "example.co.uk"
        assert body["privacyScore"] == 100

    def test_stats_after_events(self, client: testclient.TestClient, tab: str) -> None:
        client.post("/api/requests", json={"sessionId": tab, "url": "https://ads.tracker.net/p.gif"})
        client.post(f"/api/sessions/{tab}/fingerprint")
        client.post(f"/api/sessions/{tab}/storage", json={"local": {"keys": 12, "bytes": 300}})

        stats = client.get(f"/api/sessions/{tab}/stats").json()
        assert stats["blockedTrackers"] == {"tracker.net": 1}
        assert stats["blockedTrackersThird"] == {"tracker.net": 1}
        assert stats["canvasFingerprintEvents"] == 1
        assert stats["storage"]["local"] == {"keys": 12, "bytes": 300}
        # 100 - 2 (tracker) - 15 (canvas) - 1 (storage)
        assert stats["privacyScore"] == 82

    def test_cookie_snapshot(self, client: testclient.TestClient, tab: str) -> None:
        response = client.post(
            f"/api/sessions/{tab}/cookies", json={"cookies": [{"name": "vid", "value": "0123456789abcdef"}]}
        )
        assert response.json() == {"applied": True}

        client.post("/api/requests", json={"sessionId": tab, "url": "https://partner.io/s?x=0123456789abcdef"})
        stats = client.get(f"/api/sessions/{tab}/stats").json()
        assert stats["cookieSyncTotal"] == 1
        assert stats["cookieSyncEvents"][0]["matches"][0]["type"] == "value-match"

    def test_summary(self, client: testclient.TestClient, tab: str) -> None:
        client.post("/api/requests", json={"sessionId": tab, "url": "https://ads.tracker.net/p.gif"})
        summary = client.get(f"/api/sessions/{tab}/summary").json()

        assert summary["scoreBand"] == "good"
        assert summary["blockedTotal"] == 1
        assert summary["topBlocked"] == [{"domain": "tracker.net", "count": 1}]
        assert summary["breakdown"]["blockedTrackers"] == {"points": 2, "maxPoints": 40}

    @pytest.mark.parametrize("path", ["/api/sessions/ghost/stats", "/api/sessions/ghost/summary"])
    def test_unknown_session_404(self, client: testclient.TestClient, path: str) -> None:
        assert client.get(path).status_code == 404

    def test_close_session(self, client: testclient.TestClient, tab: str) -> None:
        assert client.delete(f"/api/sessions/{tab}").status_code == 204
        assert client.get(f"/api/sessions/{tab}/stats").status_code == 404


class TestAdministration:
    """User lists, catalog reloads, and health."""

    def test_user_lists_normalised(self, client: testclient.TestClient) -> None:
        response = client.put(
            "/api/user-lists",
            json={"userBlocklist": [" Widgets.IO ", "widgets.io", ""], "userAllowlist": ["tracker.net"]},
        )
        assert response.status_code == 200
        assert response.json() == {"userBlocklist": ["widgets.io"], "userAllowlist": ["tracker.net"]}

    def test_invalid_user_list(self, client: testclient.TestClient) -> None:
        response = client.put("/api/user-lists", json={"userBlocklist": ["not a domain"], "userAllowlist": []})

        assert response.status_code == 422
        assert response.json()["invalidEntries"] == ["not a domain"]

    def test_reload_catalog(self, client: testclient.TestClient) -> None:
        response = client.post("/api/catalog/reload")
        assert response.json() == {"trackerDomains": 3}

    def test_health(self, client: testclient.TestClient, tab: str) -> None:
        assert client.get("/api/health").json() == {"status": "ok", "sessions": 1, "trackerDomains": 3}
