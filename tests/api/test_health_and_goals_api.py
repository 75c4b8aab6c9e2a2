"""API tests for health checks and the goal catalog."""


class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_degraded_without_credentials(self, client):
        response = client.get("/health/ready")

        data = response.json()
        checks = {c["name"]: c["status"] for c in data["checks"]}
        assert response.status_code == 200
        assert data["status"] == "ready"
        assert checks["sessions"] == "ok"
        assert checks["anthropic"] == "degraded"
        assert checks["video"] == "ok"

    def test_readiness_reports_missing_video(self, client, fakes):
        fakes.video = None

        checks = {c["name"]: c["status"] for c in client.get("/health/ready").json()["checks"]}

        assert checks["video"] == "degraded"


class TestGoals:

    def test_ski_catalog_is_default(self, client):
        data = client.get("/api/v1/goals").json()

        assert data["discipline"] == "SKI"
        assert [g["category"] for g in data["categories"]] == ["beginner", "intermediate", "advanced"]
        assert data["categories"][0]["goals"][0]["id"] == "ski-beg-adapt"

    def test_snowboard_catalog(self, client):
        data = client.get("/api/v1/goals", params={"discipline": "SNOWBOARD"}).json()

        goals = [g for group in data["categories"] for g in group["goals"]]
        assert len(goals) == 8
        assert all(g["discipline"] == "SNOWBOARD" for g in goals)

    def test_unknown_discipline(self, client):
        assert client.get("/api/v1/goals", params={"discipline": "SLED"}).status_code == 422

    def test_requires_api_key(self, client):
        assert client.get("/api/v1/goals", headers={"X-API-Key": "wrong"}).status_code == 403
