import asyncio

import pytest
from fastapi.testclient import TestClient

from taixiu.api.main import create_app, poll_forever
from taixiu.config import Settings
from taixiu.services import Feed


def _client(**settings):
    app = create_app(feed=Feed(Settings(**settings)), poll=False)
    return TestClient(app)


@pytest.fixture
def client():
    with _client(api_key=None) as c:
        yield c


def _ingest(client, session, dice=(4, 4, 3), side=None, **kw):
    body = {"session": session, "d1": dice[0], "d2": dice[1], "d3": dice[2], "side": side}
    return client.post("/ingest", json=body, **kw)


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_predict_waiting(client):
    data = client.get("/predict").json()
    assert data["result"] == "waiting"
    assert data["prediction"] is None


def test_ingest_and_predict(client):
    for s in range(1, 26):
        assert _ingest(client, s, (4, 4, 3) if s % 2 else (1, 2, 3)).status_code == 200
    data = client.get("/predict").json()
    assert data["previous_session"] == 25 and data["current_session"] == 26
    assert data["prediction"] in ("tài", "xỉu")
    assert data["confidence"].endswith("%")

    hist = client.get("/history", params={"limit": 3}).json()
    assert [h["session"] for h in hist] == [25, 24, 23]

    stats = client.get("/stats").json()
    assert stats["total_predictions"] == 24
    assert sum(stats["weights"].values()) == pytest.approx(1.0)

    ledger = client.get("/ledger", params={"limit": 2}).json()
    assert ledger[0]["target_session"] == 26 and ledger[0]["actual"] is None


def test_ingest_rejects_stale_and_invalid(client):
    assert _ingest(client, 5).status_code == 200
    assert _ingest(client, 5).status_code == 409
    assert _ingest(client, 6, (7, 1, 1)).status_code == 422
    assert _ingest(client, 6, side=2).status_code == 422
    assert _ingest(client, -1).status_code == 422
    assert _ingest(client, 6, side=1).status_code == 200


def test_api_key():
    with _client(api_key="secret") as c:
        assert _ingest(c, 1).status_code == 401
        assert _ingest(c, 1, headers={"X-API-Key": "secret"}).status_code == 200


class FlakyFeed:
    def __init__(self):
        self.calls = 0
        self.synced = []

    def fetch(self):
        self.calls += 1
        if self.calls == 1:
            raise ValueError("malformed batch")
        return []

    def sync(self, records):
        self.synced.append(records)
        return 0


def test_poller_survives_unexpected_errors():
    feed = FlakyFeed()

    async def run():
        task = asyncio.create_task(poll_forever(feed, 0))
        while feed.calls < 3:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(asyncio.wait_for(run(), timeout=5))
    assert feed.calls >= 3
    assert feed.synced
