"""
Exercise a running API instance end to end.

    python -m app.scripts.example_usage [base_url] [app_id ...]
"""
import sys
from typing import List

import httpx

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_APP_IDS = [
    "com.whatsapp",
    "com.instagram.android",
    "com.twitter.android",
]


def show_comments(client: httpx.Client, app_id: str) -> None:
    resp = client.get(f"/api/comments/{app_id}", params={"limit": 10, "sort": "rating"})
    resp.raise_for_status()
    data = resp.json()["data"]
    print(f"{app_id}: {data['totalComments']} comments")
    for c in data["comments"][:3]:
        text = c["text"] if len(c["text"]) <= 100 else c["text"][:100] + "..."
        print(f"  [{c['rating']}/5] {c['author']} ({c['date']}, {c['source']}): {text}")


def show_stats(client: httpx.Client, app_id: str) -> None:
    resp = client.get(f"/api/comments/{app_id}/stats", params={"limit": 50})
    resp.raise_for_status()
    stats = resp.json()["data"]["stats"]
    print(f"{app_id}: avg {stats['averageRating']} over {stats['totalComments']} comments")
    for rating, count in sorted(stats["ratingDistribution"].items(), reverse=True):
        print(f"  {rating}: {'#' * count}")


def show_batch(client: httpx.Client, app_ids: List[str]) -> None:
    resp = client.post("/api/comments/batch", json={"appIds": app_ids, "limit": 5})
    resp.raise_for_status()
    data = resp.json()["data"]
    print(f"batch: {data['successful']}/{data['totalApps']} ok, {data['failed']} failed")
    for err in data["errors"]:
        print(f"  {err['appId']}: {err['error']}")


def show_validation(client: httpx.Client) -> None:
    resp = client.get("/api/comments/invalid..id")
    print(f"invalid id -> {resp.status_code} {resp.json().get('error')}")


def main(argv: List[str]) -> int:
    base_url = argv[1] if len(argv) > 1 else DEFAULT_BASE_URL
    app_ids = argv[2:] or DEFAULT_APP_IDS

    with httpx.Client(base_url=base_url, timeout=60) as client:
        try:
            health = client.get("/health").json()
        except httpx.HTTPError as e:
            print(f"API not reachable at {base_url}: {e}")
            return 1
        print(f"health: {health['status']} ({health['environment']})")

        show_comments(client, app_ids[0])
        show_stats(client, app_ids[0])
        show_batch(client, app_ids)
        show_validation(client)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
