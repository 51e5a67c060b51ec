import asyncio
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.api.schemas import (
    AppInfoResponse,
    BatchResponse,
    CommentsResponse,
    ErrorResponse,
    StatsResponse,
)
from app.api.validation import comment_options, stats_options, valid_app_id, validate_batch_request
from app.collectors.google_play import PlayStoreClient
from app.collectors.models import FetchOptions
from app.utils.metrics import comment_stats

router = APIRouter(prefix="/api/comments", tags=["comments"])
log = logging.getLogger(__name__)


def get_client(request: Request) -> PlayStoreClient:
    return request.app.state.play_store


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _server_error(error: str) -> JSONResponse:
    body = ErrorResponse(error=error, message="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump())


@router.post("/batch", response_model=BatchResponse)
async def batch_comments(
        body: Dict[str, Any] = Body(..., examples=[{"appIds": ["com.whatsapp"], "limit": 20}]),
        client: PlayStoreClient = Depends(get_client),
):
    """
    POST /api/comments/batch
    - Validates the body before any fetch starts
    - Fetches every app concurrently; one app failing never fails the batch
    """
    batch = validate_batch_request(body)
    log.info("batch_comments_start", extra={"apps": len(batch.app_ids), "limit": batch.limit})

    try:
        options = FetchOptions(limit=batch.limit, sort=batch.sort)
        outcomes = await asyncio.gather(
            *(client.fetch_comments(app_id, options) for app_id in batch.app_ids),
            return_exceptions=True,
        )

        results, errors = [], []
        for app_id, outcome in zip(batch.app_ids, outcomes):
            if isinstance(outcome, BaseException):
                log.warning("batch_item_failed", extra={"app_id": app_id, "error": str(outcome)})
                errors.append({"appId": app_id, "success": False, "error": str(outcome) or "Fetch failed"})
            else:
                results.append({
                    "appId": app_id,
                    "success": True,
                    "totalComments": len(outcome),
                    "comments": [asdict(c) for c in outcome],
                })

        log.info("batch_comments_success", extra={"successful": len(results), "failed": len(errors)})
        return BatchResponse(data={
            "totalApps": len(batch.app_ids),
            "successful": len(results),
            "failed": len(errors),
            "results": results,
            "errors": errors,
            "metadata": {"fetchedAt": _now(), "limit": batch.limit, "sort": batch.sort},
        })

    except Exception:
        log.exception("batch_comments_unexpected_error")
        return _server_error("Failed to process batch request")


@router.get("/{app_id}", response_model=CommentsResponse)
async def get_comments(
        app_id: str = Depends(valid_app_id),
        options: FetchOptions = Depends(comment_options),
        client: PlayStoreClient = Depends(get_client),
):
    log.info("get_comments_start", extra={"app_id": app_id, "limit": options.limit, "sort": options.sort})
    try:
        comments = await client.fetch_comments(app_id, options)
        return CommentsResponse(data={
            "appId": app_id,
            "totalComments": len(comments),
            "comments": [asdict(c) for c in comments],
            "metadata": {"fetchedAt": _now(), "limit": options.limit, "sort": options.sort},
        })
    except Exception:
        log.exception("get_comments_unexpected_error", extra={"app_id": app_id})
        return _server_error("Failed to fetch comments")


@router.get("/{app_id}/stats", response_model=StatsResponse)
async def get_comment_stats(
        app_id: str = Depends(valid_app_id),
        options: FetchOptions = Depends(stats_options),
        client: PlayStoreClient = Depends(get_client),
):
    log.info("get_comment_stats_start", extra={"app_id": app_id, "limit": options.limit})
    try:
        comments = await client.fetch_comments(app_id, options)
        stats = comment_stats(comments)
        log.info("comment_stats_computed", extra={
            "app_id": app_id,
            "average_rating": stats["averageRating"],
            "sample_size": len(comments),
        })
        return StatsResponse(data={
            "appId": app_id,
            "stats": stats,
            "metadata": {"fetchedAt": _now(), "sampleSize": len(comments)},
        })
    except Exception:
        log.exception("get_comment_stats_unexpected_error", extra={"app_id": app_id})
        return _server_error("Failed to fetch comment statistics")


@router.get("/{app_id}/info", response_model=AppInfoResponse)
async def get_app_info(
        app_id: str = Depends(valid_app_id),
        client: PlayStoreClient = Depends(get_client),
):
    log.info("get_app_info_start", extra={"app_id": app_id})
    try:
        info = await client.get_app_info(app_id)
        return AppInfoResponse(data={
            "appId": app_id,
            "appInfo": asdict(info),
            "metadata": {"fetchedAt": _now()},
        })
    except Exception:
        log.exception("get_app_info_unexpected_error", extra={"app_id": app_id})
        return _server_error("Failed to fetch app info")
