import logging
import re
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import httpx

from app.collectors.extraction import extract_reviews
from app.collectors.models import AppInfo, FetchOptions, ReviewRecord
from app.collectors.samples import generate_sample_app_info, generate_sample_reviews
from app.core.config import Settings
from app.utils.text import clean_text

log = logging.getLogger(__name__)

ReviewProvider = Callable[[str, FetchOptions], Awaitable[List[ReviewRecord]]]

DETAILS_PATH = "/store/apps/details"

_H1_RE = re.compile(r"<h1[^>]*>([^<]+)</h1>", re.IGNORECASE)
_DEVELOPER_RE = re.compile(r'developer["\s]*:["\s]*"([^"]+)"', re.IGNORECASE)
_APP_RATING_RE = re.compile(r'rating["\s]*:["\s]*(\d+\.?\d*)', re.IGNORECASE)
_TOTAL_RATINGS_RE = re.compile(r'totalRatings["\s]*:["\s]*(\d+)', re.IGNORECASE)


class UpstreamError(Exception):
    """Storefront answered with a non-2xx status."""
    pass


def extract_app_info(markup: Optional[str]) -> Optional[AppInfo]:
    """
    Pull the few metadata fields we can find from an app details page.

    Returns None when none of them could be found.
    """
    if not markup:
        return None
    info = AppInfo()
    found = False

    name_match = _H1_RE.search(markup)
    if name_match and clean_text(name_match.group(1)):
        info.name = clean_text(name_match.group(1))
        found = True

    developer_match = _DEVELOPER_RE.search(markup)
    if developer_match:
        info.developer = developer_match.group(1)
        found = True

    rating_match = _APP_RATING_RE.search(markup)
    if rating_match:
        info.rating = min(max(float(rating_match.group(1)), 0.0), 5.0)
        found = True

    total_match = _TOTAL_RATINGS_RE.search(markup)
    if total_match:
        info.totalRatings = int(total_match.group(1))
        found = True

    return info if found else None


class PlayStoreClient:
    """
    Review retrieval against the Play Store web pages.

    `fetch_comments` tries the details page, then the expanded reviews
    view, then the canned sample reviews, and never raises. Pass
    `transport` to route requests somewhere other than the network.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    # ---- HTTP ----
    def _locale(self, options: FetchOptions) -> Tuple[str, str]:
        return (options.language or self.settings.language,
                options.country or self.settings.country)

    def _headers(self, language: str, country: str) -> dict:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": f"{language}-{country},{language};q=0.9,en;q=0.8",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        }

    async def _get_page(self, params: dict, language: str, country: str) -> str:
        async with httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                follow_redirects=True,
                max_redirects=self.settings.max_redirects,
                transport=self.transport,
        ) as client:
            response = await client.get(
                f"{self.settings.base_url}{DETAILS_PATH}",
                params=params,
                headers=self._headers(language, country),
            )
        if not response.is_success:
            raise UpstreamError(f"HTTP {response.status_code} for {response.url}")
        return response.text

    # ---- Retrieval strategies ----
    async def fetch_reviews_from_page(self, app_id: str, options: FetchOptions) -> List[ReviewRecord]:
        """Primary: the details page with sort and locale parameters."""
        language, country = self._locale(options)
        params = {"id": app_id, "hl": language, "gl": country, "sort": options.sort_code}
        try:
            markup = await self._get_page(params, language, country)
            return extract_reviews(markup, options.limit)
        except (httpx.HTTPError, UpstreamError) as e:
            log.warning("fetch_page_failed", extra={"app_id": app_id, "error": str(e)})
            return []
        except Exception:
            log.exception("fetch_page_unexpected_error", extra={"app_id": app_id})
            return []

    async def fetch_reviews_alternative(self, app_id: str, options: FetchOptions) -> List[ReviewRecord]:
        """Secondary: the expanded "all reviews" view of the details page."""
        language, country = self._locale(options)
        params = {"id": app_id, "showAllReviews": "true", "hl": language, "gl": country}
        try:
            markup = await self._get_page(params, language, country)
            return extract_reviews(markup, options.limit)
        except (httpx.HTTPError, UpstreamError) as e:
            log.warning("fetch_alternative_failed", extra={"app_id": app_id, "error": str(e)})
            return []
        except Exception:
            log.exception("fetch_alternative_unexpected_error", extra={"app_id": app_id})
            return []

    async def sample_reviews(self, app_id: str, options: FetchOptions) -> List[ReviewRecord]:
        log.info("using_sample_reviews", extra={"app_id": app_id, "limit": options.limit})
        return generate_sample_reviews(options.limit)

    def providers(self) -> Sequence[Tuple[str, ReviewProvider]]:
        chain = [("page", self.fetch_reviews_from_page)]
        if self.settings.enable_fallback_parsing:
            chain.append(("alternative", self.fetch_reviews_alternative))
        chain.append(("sample", self.sample_reviews))
        return chain

    # ---- Orchestration ----
    async def fetch_comments(self, app_id: str, options: FetchOptions) -> List[ReviewRecord]:
        """
        Fetch up to `options.limit` reviews for `app_id`.

        Providers are tried in order and the first non-empty result wins.
        Any unexpected failure skips the remaining providers and falls
        straight through to the sample reviews.
        """
        log.info("fetch_comments_start", extra={
            "app_id": app_id,
            "limit": options.limit,
            "sort": options.sort,
        })

        try:
            for provider_name, provider in self.providers():
                comments = await provider(app_id, options)
                if comments:
                    comments = comments[:options.limit]
                    log.info("fetch_comments_success", extra={
                        "app_id": app_id,
                        "provider": provider_name,
                        "returned": len(comments),
                    })
                    return comments
                log.info("review_provider_empty", extra={"app_id": app_id, "provider": provider_name})
        except Exception:
            log.exception("fetch_comments_unexpected_error", extra={"app_id": app_id})

        return generate_sample_reviews(options.limit)

    # ---- App metadata ----
    async def get_app_info(self, app_id: str) -> AppInfo:
        """Details page metadata, or the canned sample metadata if nothing usable came back."""
        language, country = self.settings.language, self.settings.country
        try:
            markup = await self._get_page({"id": app_id, "hl": language, "gl": country}, language, country)
            info = extract_app_info(markup)
        except (httpx.HTTPError, UpstreamError) as e:
            log.warning("fetch_app_info_failed", extra={"app_id": app_id, "error": str(e)})
            info = None
        except Exception:
            log.exception("fetch_app_info_unexpected_error", extra={"app_id": app_id})
            info = None

        if info is None:
            log.info("using_sample_app_info", extra={"app_id": app_id})
            return generate_sample_app_info(app_id)
        return info
