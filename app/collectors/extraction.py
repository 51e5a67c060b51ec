"""
Heuristic review extraction from Play Store markup.

The page structure is not a contract, so extraction runs a list of
independent strategies and keeps whatever each one manages to recover:

- review_containers: <div class="...review..."> blocks, tags stripped
- embedded_reviews: a JSON array keyed by "reviews" inside <script> tags
- testid_containers: <div data-testid="...review..."> blocks
- review_text_fields: bare "reviewText": "..." values

Results are accumulated in strategy order and cut at `limit`. The same
review can be recovered by more than one strategy; nothing is de-duplicated.
"""
import json
import logging
import re
from itertools import islice
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from app.collectors.models import ReviewRecord, normalize_rating, today_iso
from app.utils.text import clean_text, strip_tags

log = logging.getLogger(__name__)

ExtractionStrategy = Callable[[str], Iterable[ReviewRecord]]

MIN_BLOCK_TEXT_LENGTH = 10
_NAVIGATION_MARKERS = ("Games", "Apps", "Movies")

_REVIEW_CLASS_RE = re.compile(
    r'<div[^>]*class="[^"]*review[^"]*"[^>]*>.*?</div>', re.IGNORECASE | re.DOTALL
)
_REVIEW_TESTID_RE = re.compile(
    r'<div[^>]*data-testid="[^"]*review[^"]*"[^>]*>.*?</div>', re.IGNORECASE | re.DOTALL
)
_SCRIPT_RE = re.compile(r"<script[^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL)
_REVIEWS_KEY_RE = re.compile(r'"reviews"\s*:\s*(?=\[)')
_REVIEW_TEXT_FIELD_RE = re.compile(r'"reviewText"\s*:\s*"([^"]+)"', re.IGNORECASE)

_BLOCK_RATING_RE = re.compile(r'rating["\s]*:["\s]*(\d+)', re.IGNORECASE)
_BLOCK_AUTHOR_RE = re.compile(r'author["\s]*:["\s]*"([^"]+)"', re.IGNORECASE)

_json_decoder = json.JSONDecoder()


# -------------------------------
# Container blocks
# -------------------------------
def _looks_like_navigation(text: str) -> bool:
    return all(marker in text for marker in _NAVIGATION_MARKERS)


def record_from_block(block: str) -> Optional[ReviewRecord]:
    """Build a record from one matched container, or None if it isn't a review."""
    text = strip_tags(block)
    if len(text) < MIN_BLOCK_TEXT_LENGTH or _looks_like_navigation(text):
        return None

    rating_match = _BLOCK_RATING_RE.search(block)
    author_match = _BLOCK_AUTHOR_RE.search(block)
    return ReviewRecord(
        text=text,
        rating=normalize_rating(rating_match.group(1)) if rating_match else 0,
        author=author_match.group(1).strip() if author_match else "Unknown",
        source="html",
    )


def _containers(pattern: re.Pattern, markup: str) -> Iterator[ReviewRecord]:
    for match in pattern.finditer(markup):
        record = record_from_block(match.group(0))
        if record is not None:
            yield record


def review_containers(markup: str) -> Iterator[ReviewRecord]:
    return _containers(_REVIEW_CLASS_RE, markup)


def testid_containers(markup: str) -> Iterator[ReviewRecord]:
    return _containers(_REVIEW_TESTID_RE, markup)


# -------------------------------
# Embedded JSON
# -------------------------------
def _first(entry: dict, *keys):
    for key in keys:
        value = entry.get(key)
        if value:
            return value
    return None


def _helpful_count(value) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def record_from_entry(entry) -> Optional[ReviewRecord]:
    """Map one embedded review object onto a record; None when it has no text."""
    if not isinstance(entry, dict):
        return None
    text = clean_text(str(_first(entry, "text", "reviewText") or ""))
    if not text:
        return None
    return ReviewRecord(
        text=text,
        rating=normalize_rating(_first(entry, "rating", "starRating")),
        date=str(_first(entry, "date", "reviewDate") or today_iso()),
        author=str(_first(entry, "author", "userName") or "Unknown"),
        helpful=_helpful_count(_first(entry, "helpful", "helpfulCount")),
        source="api",
    )


def _embedded_arrays(markup: str) -> Iterator[list]:
    for script in _SCRIPT_RE.finditer(markup):
        body = script.group(1)
        for key in _REVIEWS_KEY_RE.finditer(body):
            try:
                value, _end = _json_decoder.raw_decode(body, key.end())
            except ValueError:
                log.debug("embedded_reviews_parse_failed", extra={"offset": key.end()})
                continue
            if isinstance(value, list):
                yield value


def embedded_reviews(markup: str) -> Iterator[ReviewRecord]:
    for entries in _embedded_arrays(markup):
        for entry in entries:
            record = record_from_entry(entry)
            if record is not None:
                yield record


# -------------------------------
# Bare text fields
# -------------------------------
def review_text_fields(markup: str) -> Iterator[ReviewRecord]:
    # group(1) only: the whole match is the key/value pair, not review text
    for match in _REVIEW_TEXT_FIELD_RE.finditer(markup):
        text = clean_text(match.group(1))
        if text:
            yield ReviewRecord(text=text, source="api")


STRATEGIES: Tuple[Tuple[str, ExtractionStrategy], ...] = (
    ("review_containers", review_containers),
    ("embedded_reviews", embedded_reviews),
    ("testid_containers", testid_containers),
    ("review_text_fields", review_text_fields),
)


def extract_reviews(
        markup: Optional[str],
        limit: int,
        strategies: Iterable[Tuple[str, ExtractionStrategy]] = STRATEGIES,
) -> List[ReviewRecord]:
    """
    Run every strategy in order until `limit` records are collected.

    Never raises: a failing strategy contributes nothing and the
    remaining strategies still run.
    """
    if not markup or limit < 1:
        return []

    records: List[ReviewRecord] = []
    for strategy_name, strategy in strategies:
        remaining = limit - len(records)
        if remaining <= 0:
            break
        try:
            found = list(islice(
                (r for r in strategy(markup) if r.text and r.text.strip()), remaining
            ))
        except Exception:
            log.warning("extraction_strategy_failed", extra={"strategy": strategy_name}, exc_info=True)
            continue
        if found:
            log.debug("extraction_strategy_matched", extra={
                "strategy": strategy_name, "found": len(found)
            })
        records.extend(found)

    return records[:limit]
