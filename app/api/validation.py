"""
Request validation for the comments API.

Everything here runs before a request reaches the Play Store client.
Failures raise RequestValidationFailed, which the app turns into
HTTP 400 `{success: false, error, message}`.
"""
import re
from typing import Any, Optional

from fastapi import Path, Query

from app.api.schemas import BatchRequest
from app.collectors.models import FetchOptions, SORT_CODES

APP_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{2,99}$")
_REPEATED_SEPARATORS = ("..", "__", "--")
_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")

MAX_COMMENT_LIMIT = 200
MAX_BATCH_LIMIT = 100
MAX_BATCH_APPS = 10
DEFAULT_COMMENT_LIMIT = 50
DEFAULT_STATS_LIMIT = 100
DEFAULT_BATCH_LIMIT = 20
SORT_OPTIONS = tuple(SORT_CODES)

APP_ID_FORMAT_MESSAGE = (
    "App ID should contain only letters, numbers, dots, underscores, and hyphens, "
    "starting with a letter or number"
)
APP_ID_REPEAT_MESSAGE = "App ID cannot contain consecutive dots, underscores, or hyphens"


class RequestValidationFailed(Exception):
    """Malformed identifier, out-of-range parameter or malformed batch body."""

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.message = message


def app_id_problem(app_id: Any) -> Optional[str]:
    """Message describing why `app_id` is invalid, or None if it is fine."""
    if not isinstance(app_id, str) or not APP_ID_RE.fullmatch(app_id):
        return APP_ID_FORMAT_MESSAGE
    if any(sep in app_id for sep in _REPEATED_SEPARATORS):
        return APP_ID_REPEAT_MESSAGE
    return None


def is_valid_app_id(app_id: Any) -> bool:
    return app_id_problem(app_id) is None


def parse_limit(raw: Any, default: int, maximum: int, message: str) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INTEGER_RE.match(raw):
        value = int(raw)
    else:
        value = None

    if value is None or not (1 <= value <= maximum):
        raise RequestValidationFailed("Invalid limit parameter", message)
    return value


def parse_sort(raw: Any, default: str = "recent") -> str:
    if raw is None:
        return default
    if raw not in SORT_OPTIONS:
        raise RequestValidationFailed(
            "Invalid sort parameter",
            f"Sort must be one of: {', '.join(SORT_OPTIONS)}",
        )
    return raw


# ---- FastAPI dependencies ----
def valid_app_id(app_id: str = Path(..., description="Google Play app ID")) -> str:
    problem = app_id_problem(app_id)
    if problem:
        raise RequestValidationFailed("Invalid app ID format", problem)
    return app_id


def comment_options(
        limit: Optional[str] = Query(None, description=f"1-{MAX_COMMENT_LIMIT}"),
        sort: Optional[str] = Query(None, description="recent | rating | helpfulness"),
) -> FetchOptions:
    return FetchOptions(
        limit=parse_limit(limit, DEFAULT_COMMENT_LIMIT, MAX_COMMENT_LIMIT,
                          f"Limit must be a number between 1 and {MAX_COMMENT_LIMIT}"),
        sort=parse_sort(sort),
    )


def stats_options(
        limit: Optional[str] = Query(None, description=f"1-{MAX_COMMENT_LIMIT}"),
) -> FetchOptions:
    return FetchOptions(
        limit=parse_limit(limit, DEFAULT_STATS_LIMIT, MAX_COMMENT_LIMIT,
                          f"Limit must be a number between 1 and {MAX_COMMENT_LIMIT}"),
        sort="recent",
    )


def validate_batch_request(body: Any) -> BatchRequest:
    if not isinstance(body, dict):
        raise RequestValidationFailed("Invalid request body", "Request body must be a JSON object")

    app_ids = body.get("appIds")
    if not isinstance(app_ids, list):
        raise RequestValidationFailed("appIds must be an array")
    if not app_ids:
        raise RequestValidationFailed("appIds array cannot be empty")
    if len(app_ids) > MAX_BATCH_APPS:
        raise RequestValidationFailed(f"Maximum {MAX_BATCH_APPS} apps allowed per batch request")

    cleaned = []
    for i, app_id in enumerate(app_ids):
        if not isinstance(app_id, str) or not app_id.strip():
            raise RequestValidationFailed(f"Invalid app ID at index {i}", "App ID must be a non-empty string")
        problem = app_id_problem(app_id.strip())
        if problem:
            raise RequestValidationFailed(f"Invalid app ID format at index {i}", problem)
        cleaned.append(app_id.strip())

    return BatchRequest(
        app_ids=cleaned,
        limit=parse_limit(body.get("limit"), DEFAULT_BATCH_LIMIT, MAX_BATCH_LIMIT,
                          f"Limit must be a number between 1 and {MAX_BATCH_LIMIT} for batch requests"),
        sort=parse_sort(body.get("sort")),
    )
