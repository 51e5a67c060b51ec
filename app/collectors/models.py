from dataclasses import dataclass, field
from datetime import date
from typing import Optional

SORT_CODES = {
    "recent": "0",
    "rating": "1",
    "helpfulness": "2",
}


def today_iso() -> str:
    return date.today().isoformat()


def normalize_rating(value) -> int:
    """Coerce a raw rating into 1..5, or 0 when unknown/out of range."""
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return 0
    return rating if 1 <= rating <= 5 else 0


@dataclass
class ReviewRecord:
    """Single user review."""
    text: str
    rating: int = 0
    date: str = field(default_factory=today_iso)
    author: str = "Unknown"
    helpful: int = 0
    source: str = "html"  # "api" | "html" | "sample"


@dataclass
class AppInfo:
    name: str = "Unknown"
    developer: str = "Unknown"
    category: str = "Unknown"
    rating: float = 0.0
    totalRatings: int = 0
    downloads: str = "Unknown"
    size: str = "Unknown"
    version: str = "Unknown"


@dataclass(frozen=True)
class FetchOptions:
    limit: int = 50
    sort: str = "recent"
    language: Optional[str] = None  # None -> configured default
    country: Optional[str] = None

    @property
    def sort_code(self) -> str:
        return SORT_CODES.get(self.sort, "0")
