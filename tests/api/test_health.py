from facescan import __version__


def test_health_check(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


def test_correlation_id_is_echoed(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"


def test_correlation_id_is_generated_when_missing(client):
    response = client.get("/api/v1/health")

    assert response.headers["X-Correlation-ID"]


def test_unsafe_correlation_id_is_replaced(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "bad id with spaces"})

    assert response.headers["X-Correlation-ID"] != "bad id with spaces"
