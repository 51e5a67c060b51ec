from typing import Dict, List, Sequence

from app.collectors.models import ReviewRecord


def average_rating(scores: List[int]) -> float:
    if not scores:
        return 0
    return round(sum(scores) / len(scores), 2)


def rating_distribution(scores: List[int]) -> Dict[int, int]:
    """
    Count per rating value, 0 (unknown) included.
    Example: {5: 12, 4: 3, 0: 1}
    """
    dist: Dict[int, int] = {}
    for s in scores:
        dist[s] = dist.get(s, 0) + 1
    return dist


def date_distribution(dates: List[str]) -> Dict[str, int]:
    """Count per month, keyed "YYYY-MM"."""
    dist: Dict[str, int] = {}
    for d in dates:
        if d:
            month = d[:7]
            dist[month] = dist.get(month, 0) + 1
    return dist


def comment_stats(comments: Sequence[ReviewRecord]) -> dict:
    ratings = [c.rating or 0 for c in comments]
    return {
        "totalComments": len(comments),
        "ratingDistribution": rating_distribution(ratings),
        "dateDistribution": date_distribution([c.date for c in comments]),
        "averageRating": average_rating(ratings),
        "totalRating": sum(ratings),
    }
