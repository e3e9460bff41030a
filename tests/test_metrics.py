from fastapi.testclient import TestClient

import agentgate.config as config
from agentgate.app import create_app


def test_metrics_use_route_templates_for_path_labels():
    config._settings = None

    app = create_app()
    with TestClient(app) as client:
        resp = client.get("/api/traces", params={"kind": "backend", "limit": 3})
        assert resp.status_code == 200

        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        body = metrics.text

        assert 'path="/api/traces"' in body
        assert "limit=3" not in body


def test_unmatched_paths_share_one_label():
    config._settings = None

    app = create_app()
    with TestClient(app) as client:
        client.get("/no/such/route/abc123")
        body = client.get("/metrics").text

        assert 'path="unmatched"' in body
        assert "abc123" not in body
