"""
Tests for the dictionary API client, using httpx.MockTransport.
"""

import httpx
import pytest

from scoresheet.clients.dict_client import (
    DictClient,
    DictClientAuthError,
    DictClientError,
)
from scoresheet.models.enums import CompetitionLevel

PAYLOADS = {
    "/dict/teams": {
        "data": [
            {"team_id": 1, "team_name": "阪神タイガース", "league": "Central", "level": "First", "club_id": 10},
            {"team_id": 11, "team_name": "阪神タイガース（ファーム）", "league": "Western", "level": "Farm", "club_id": 10},
        ]
    },
    "/dict/stadiums": {"data": [{"stadium_id": 100, "stadium_name": "阪神甲子園球場", "is_dome": False}]},
    "/dict/clubs": {"data": [{"club_id": 10, "club_name": "阪神"}]},
}


def make_client(handler):
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://dict.test")
    return DictClient("http://dict.test", client=http)


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr(DictClient._get_json.retry, "sleep", lambda seconds: None)


class TestDictClient:
    def test_load_catalog(self):
        def handler(request):
            return httpx.Response(200, json=PAYLOADS[request.url.path])

        with make_client(handler) as client:
            catalog = client.load_catalog()

        assert [t.id for t in catalog.teams] == [1, 11]
        assert catalog.teams[1].level == CompetitionLevel.FARM
        assert catalog.stadiums[0].name == "阪神甲子園球場"
        assert catalog.clubs[0].id == 10

    def test_auth_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(401)

        client = make_client(handler)
        with pytest.raises(DictClientAuthError):
            client.teams()
        assert len(calls) == 1

    def test_server_errors_retried_then_fail(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(503)

        client = make_client(handler)
        with pytest.raises(DictClientError):
            client.clubs()
        assert len(calls) == 4

    def test_transient_error_recovers(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            if len(calls) == 1:
                return httpx.Response(502)
            return httpx.Response(200, json=PAYLOADS["/dict/clubs"])

        client = make_client(handler)
        assert [c.name for c in client.clubs()] == ["阪神"]
        assert len(calls) == 2

    def test_unexpected_shape(self):
        def handler(request):
            return httpx.Response(200, json={"items": []})

        client = make_client(handler)
        with pytest.raises(DictClientError):
            client.stadiums()

    def test_token_sent_as_bearer(self):
        client = DictClient("http://dict.test/", token="secret-token-value")
        assert client.client.headers["Authorization"] == "Bearer secret-token-value"
        assert client.base_url == "http://dict.test"
        client.close()
