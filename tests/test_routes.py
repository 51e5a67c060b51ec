from app.api.routes.comments import get_client
from app.collectors.models import ReviewRecord
from app.core.config import Settings

from conftest import REVIEW_PAGE, offline, serve


class FakePlayStore:
    """Stands in for PlayStoreClient; fails for the ids in `failing`."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def fetch_comments(self, app_id, options):
        self.calls.append((app_id, options))
        if app_id in self.failing:
            raise ConnectionError(f"upstream unreachable for {app_id}")
        return [ReviewRecord(text=f"review of {app_id}", rating=4, date="2024-05-01", source="api")]


# ---- single app ----
def test_get_comments_from_page(make_client):
    client = make_client(serve(REVIEW_PAGE))

    resp = client.get("/api/comments/com.whatsapp", params={"limit": 5})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["appId"] == "com.whatsapp"
    assert len(data["comments"]) <= 5
    assert data["totalComments"] == len(data["comments"])
    for comment in data["comments"]:
        assert comment["text"]
        assert 0 <= comment["rating"] <= 5
    assert data["metadata"]["limit"] == 5
    assert data["metadata"]["sort"] == "recent"
    assert data["metadata"]["fetchedAt"]


def test_get_comments_falls_back_to_samples(make_client):
    client = make_client(offline())

    resp = client.get("/api/comments/com.whatsapp", params={"limit": 3, "sort": "helpfulness"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [c["source"] for c in data["comments"]] == ["sample"] * 3
    assert data["metadata"]["sort"] == "helpfulness"


def test_invalid_app_id(make_client):
    client = make_client(offline())

    resp = client.get("/api/comments/invalid..id")

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "Invalid app ID format"
    assert resp.json()["message"]


def test_app_id_with_trailing_newline_is_rejected(make_client):
    client = make_client(offline())

    resp = client.get("/api/comments/com.whatsapp%0A", params={"limit": 1})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid app ID format"


def test_limit_and_sort_validation(make_client):
    client = make_client(offline())

    for bad in ("0", "201", "999", "ten"):
        resp = client.get("/api/comments/com.whatsapp", params={"limit": bad})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid limit parameter"

    for ok in ("1", "200"):
        assert client.get("/api/comments/com.whatsapp", params={"limit": ok}).status_code == 200

    resp = client.get("/api/comments/com.whatsapp", params={"sort": "newest"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid sort parameter"


def test_unexpected_handler_error_is_500(make_client):
    client = make_client(offline())
    client.app.dependency_overrides[get_client] = lambda: FakePlayStore(failing={"com.whatsapp"})

    resp = client.get("/api/comments/com.whatsapp")

    assert resp.status_code == 500
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "Failed to fetch comments"
    assert resp.json()["message"] == "Internal server error"
    assert "upstream unreachable" not in resp.text


# ---- stats ----
def test_stats(make_client):
    client = make_client(offline())

    resp = client.get("/api/comments/com.whatsapp/stats")

    assert resp.status_code == 200
    data = resp.json()["data"]
    stats = data["stats"]
    assert stats["totalComments"] == 10
    assert sum(stats["ratingDistribution"].values()) == stats["totalComments"]
    assert stats["ratingDistribution"]["5"] == 5
    assert stats["dateDistribution"] == {"2024-01": 10}
    assert stats["averageRating"] == 4.1
    assert data["metadata"]["sampleSize"] == 10


def test_stats_limit_validation(make_client):
    client = make_client(offline())
    assert client.get("/api/comments/com.whatsapp/stats", params={"limit": 201}).status_code == 400
    assert client.get("/api/comments/com.whatsapp/stats", params={"limit": 200}).status_code == 200
    assert client.get("/api/comments/bad__id/stats").status_code == 400


def test_stats_forwards_limit(make_client):
    client = make_client(offline())
    fake = FakePlayStore()
    client.app.dependency_overrides[get_client] = lambda: fake

    client.get("/api/comments/com.whatsapp/stats", params={"limit": 7})

    (_app_id, options), = fake.calls
    assert options.limit == 7
    assert options.sort == "recent"


# ---- app info ----
def test_app_info(make_client):
    client = make_client(offline())

    resp = client.get("/api/comments/com.whatsapp/info")

    assert resp.status_code == 200
    info = resp.json()["data"]["appInfo"]
    assert info["name"] == "WhatsApp Messenger"
    assert info["downloads"] == "1B+"


# ---- batch ----
def test_batch(make_client):
    client = make_client(offline())

    resp = client.post("/api/comments/batch", json={
        "appIds": ["com.whatsapp", "com.instagram.android"], "limit": 3, "sort": "recent"
    })

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["totalApps"] == 2
    assert data["successful"] == 2
    assert data["failed"] == 0
    assert [r["appId"] for r in data["results"]] == ["com.whatsapp", "com.instagram.android"]
    assert all(r["totalComments"] == 3 for r in data["results"])
    assert data["metadata"]["limit"] == 3


def test_batch_isolates_failures(make_client):
    client = make_client(offline())
    ids = [f"com.example.app{i}" for i in range(10)]
    fake = FakePlayStore(failing={ids[4]})
    client.app.dependency_overrides[get_client] = lambda: fake

    resp = client.post("/api/comments/batch", json={"appIds": ids})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["totalApps"] == 10
    assert data["successful"] == 9
    assert data["failed"] == 1
    assert data["successful"] + data["failed"] == data["totalApps"]
    assert data["errors"] == [{
        "appId": ids[4], "success": False, "error": f"upstream unreachable for {ids[4]}"
    }]
    assert len(fake.calls) == 10
    assert all(options.limit == 20 for _app_id, options in fake.calls)


def test_batch_too_many_apps(make_client):
    client = make_client(offline())

    resp = client.post("/api/comments/batch", json={"appIds": [f"com.app{i}" for i in range(11)]})

    assert resp.status_code == 400
    assert "Maximum 10 apps" in resp.json()["error"]


def test_batch_structural_errors(make_client):
    client = make_client(offline())

    resp = client.post("/api/comments/batch", json={"appIds": "com.whatsapp"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "appIds must be an array"

    resp = client.post("/api/comments/batch", json=["com.whatsapp"])
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    resp = client.post("/api/comments/batch", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400

    resp = client.post("/api/comments/batch", json={"appIds": ["com.whatsapp"], "limit": 101})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid limit parameter"


# ---- service surface ----
def test_health_and_index(make_client):
    client = make_client(offline())

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "OK"
    assert health.json()["environment"] == "development"

    index = client.get("/")
    assert index.status_code == 200
    assert "batch" in index.json()["endpoints"]


def test_unknown_endpoint(make_client):
    client = make_client(offline())

    resp = client.get("/api/nonexistent")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": "Endpoint not found",
        "message": "The requested endpoint /api/nonexistent does not exist",
    }


def test_rate_limit(make_client):
    client = make_client(offline(), Settings(rate_limit_max=2, enable_cors=False))

    assert client.get("/api/comments/com.whatsapp?limit=1").status_code == 200
    assert client.get("/api/comments/com.whatsapp?limit=1").status_code == 200
    resp = client.get("/api/comments/com.whatsapp?limit=1")
    assert resp.status_code == 429
    assert resp.json()["error"] == Settings().rate_limit_message
    assert "Retry-After" in resp.headers

    # only /api/* is limited
    assert client.get("/health").status_code == 200
