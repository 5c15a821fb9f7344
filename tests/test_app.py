from clinic_api.main import database_health


class TestApplication:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")
        assert response.status_code == 404
        assert response.json()["message"] == "Not Found - /api/v1/nowhere"

    def test_process_time_header(self, client):
        response = client.get("/")
        assert "X-Process-Time" in response.headers

    def test_database_unreachable(self, client, patient, monkeypatch):
        monkeypatch.setattr(database_health, "is_healthy", lambda: False)

        response = client.get("/api/v1/auth/me", headers=patient.headers)
        assert response.status_code == 503
        assert "Database connection error" in response.json()["message"]
