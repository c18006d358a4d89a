from flask.testing import FlaskClient


def test_health_reports_service_name(client: FlaskClient):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json == {"status": "ok", "service": "Field Service Test"}
