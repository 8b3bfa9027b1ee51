"""Tests for the dashboard HTTP API."""

import json

import pytest
from fastapi.testclient import TestClient

from tgraph.models.display import Accumulate
from tgraph.models.metric import MetricSelector
from tgraph.services.demo import generate_records
from tgraph.services.session import ViewerConfig
from tgraph.web_service import create_app


@pytest.fixture
def demo_log(write_log):
    return write_log(generate_records(1200, start_ms=0, seed=3))


@pytest.fixture
def client(demo_log):
    config = ViewerConfig(log_file=str(demo_log), retention=Accumulate())
    app = create_app(config, tail_interval_ms=50)
    with TestClient(app) as client:
        yield client


def test_dashboard_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "EventSource" in response.text


def test_data_payload(client):
    response = client.get("/data")
    assert response.status_code == 200
    payload = response.json()

    assert payload["type"] == "update"
    assert payload["metric"] == "heapUsed"
    assert payload["metricLabel"] == "Heap Used (MB)"
    assert payload["accumulate"] is True
    assert payload["resolution"] == 100
    assert payload["totalPoints"] == 1200
    assert len(payload["dataPoints"]) <= 100
    assert set(payload["allMetricsData"]) == {m.value for m in MetricSelector}
    assert set(payload["stats"]) == {"current", "average", "min", "max"}
    point = payload["dataPoints"][0]
    assert set(point) == {"timestamp", "value", "time"}


def test_resolution_rejected_then_accepted(client):
    """Out-of-range values leave the resolution alone; valid ones apply."""
    response = client.post("/resolution", json={"resolution": 2000})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "between 50 and 1000" in detail["error"]
    assert detail["resolution"] == 100
    assert client.get("/config").json()["resolution"] == 100

    response = client.post("/resolution", json={"resolution": 500})
    assert response.status_code == 200
    assert response.json() == {"success": True, "resolution": 500}

    payload = client.get("/data").json()
    assert payload["resolution"] == 500
    assert 100 < len(payload["dataPoints"]) <= 500


@pytest.mark.parametrize("body", [{"resolution": "abc"}, {"resolution": None}, {}, {"resolution": 49}])
def test_resolution_rejects_invalid_values(client, body):
    response = client.post("/resolution", json=body)
    assert response.status_code == 400
    assert client.get("/config").json()["resolution"] == 100


def test_config(client, demo_log):
    config = client.get("/config").json()
    assert config == {
        "metric": "heapUsed",
        "metricLabel": "Heap Used (MB)",
        "accumulate": True,
        "maxDataPoints": 100,
        "refreshRate": 100,
        "style": "line",
        "logFile": str(demo_log),
        "resolution": 100,
    }


def test_reload_replays_file(client, demo_log):
    with demo_log.open("a") as f:
        for record in generate_records(30, start_ms=10_000_000, seed=4):
            f.write(json.dumps(record) + "\n")

    response = client.post("/reload")
    assert response.status_code == 200
    assert response.json() == {"success": True, "loaded": 1230}
    assert client.get("/data").json()["totalPoints"] == 1230


def test_health(client, demo_log):
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["service"] == "tgraph"
    assert health["session"] == {
        "state": "live",
        "metric": "heapUsed",
        "mode": "Accumulate",
        "samples": 1200,
    }
    assert health["source"]["exists"] is True
    assert health["source"]["waiting_for_data"] is False


def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "tgraph_lines_ingested_total" in response.text


def test_missing_source_waits_for_data(log_path):
    app = create_app(ViewerConfig(log_file=str(log_path)), tail_interval_ms=50)
    with TestClient(app) as client:
        payload = client.get("/data").json()
        assert payload["totalPoints"] == 0
        assert payload["dataPoints"] == []
        assert payload["stats"]["current"] == "0.00"

        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["source"] == {
            "path": str(log_path),
            "exists": False,
            "waiting_for_data": True,
        }


def test_requests_after_shutdown_are_unavailable(demo_log):
    app = create_app(ViewerConfig(log_file=str(demo_log)), tail_interval_ms=50)
    with TestClient(app):
        pass
    # The lifespan has stopped the session; a new client without lifespan
    # events sees the stopped state.
    client = TestClient(app)
    response = client.get("/data")
    assert response.status_code == 503
    assert "stopped" in response.json()["error"]


# ============================================================================
# Push channel
# ============================================================================

def _subscribe(client):
    broadcaster = client.app.state.services.broadcaster
    return broadcaster, broadcaster.subscribe()


def test_accepted_resolution_is_pushed(client):
    broadcaster, queue = _subscribe(client)
    try:
        assert client.post("/resolution", json={"resolution": 2000}).status_code == 400
        assert queue.empty()

        assert client.post("/resolution", json={"resolution": 500}).status_code == 200
        payload = json.loads(queue.get_nowait())
    finally:
        broadcaster.unsubscribe(queue)

    assert payload["resolution"] == 500
    assert 100 < len(payload["dataPoints"]) <= 500
    assert payload["totalPoints"] == 1200


def test_reload_is_pushed(client, demo_log):
    client.post("/resolution", json={"resolution": 500})
    with demo_log.open("a") as f:
        for record in generate_records(30, start_ms=10_000_000, seed=4):
            f.write(json.dumps(record) + "\n")

    broadcaster, queue = _subscribe(client)
    try:
        assert client.post("/reload").status_code == 200
        payload = json.loads(queue.get_nowait())
    finally:
        broadcaster.unsubscribe(queue)

    assert payload["totalPoints"] == 1230
    assert payload["resolution"] == 500
    assert len(payload["dataPoints"]) <= 500


def test_sse_sends_full_payload_then_ends_when_closed(client):
    client.post("/resolution", json={"resolution": 250})
    # A closed broadcaster hands new subscribers the end-of-stream sentinel,
    # so the stream stops after its first frame.
    client.app.state.services.broadcaster.close()

    response = client.get("/sse")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"

    frames = [frame for frame in response.text.split("\n\n") if frame]
    assert len(frames) == 1
    assert frames[0].startswith("data: ")
    payload = json.loads(frames[0][len("data: "):])
    assert payload["type"] == "update"
    assert payload["totalPoints"] == 1200
    assert payload["resolution"] == 250
    assert len(payload["dataPoints"]) <= 250
