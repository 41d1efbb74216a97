"""Public entry points: project-wide duplicate detection and single-slug lookup.

Neither operation raises.  Missing configuration and fetch failures are
reported through the ``error`` field of the returned result.
"""

import logging
from typing import Optional

import httpx

from slugscan.config import Settings
from slugscan.models.duplicates import DuplicateResult
from slugscan.models.search import SearchResult
from slugscan.services import strategy
from slugscan.services.delivery import DeliveryClient
from slugscan.services.grouping import filter_duplicates, group_by_slug
from slugscan.services.management import ManagementClient

logger = logging.getLogger(__name__)

MISSING_PROJECT_ERROR = (
    "Missing Kontent.ai Project ID configuration. Set KONTENT_PROJECT_ID and retry."
)


class SlugFinder:
    """Runs duplicate and slug searches for one configured project.

    A fresh HTTP client is opened per call; *transport* lets tests route
    requests to an in-process handler.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
            transport=self.transport,
        )

    async def find_duplicate_slugs(self) -> DuplicateResult:
        """Return every slug used by two or more distinct content items."""
        if not self.settings.is_valid:
            return DuplicateResult(error=MISSING_PROJECT_ERROR)

        try:
            async with self._client() as client:
                delivery = DeliveryClient(self.settings, client)
                items = await delivery.fetch_all_languages()
        except Exception as exc:
            logger.error("Duplicate search failed: %s", exc)
            return DuplicateResult(error=f"Unexpected error: {exc}")

        groups = group_by_slug(items)
        duplicates = filter_duplicates(groups)
        logger.info(
            "Duplicate search: %d items, %d unique slugs, %d duplicated, %d requests",
            len(items), len(groups), len(duplicates), delivery.request_count,
        )

        return DuplicateResult(
            duplicates=duplicates,
            total_items=len(items),
            total_requests=delivery.request_count,
            unique_slugs=len(groups),
        )

    async def search_specific_slug(self, slug: str) -> SearchResult:
        """Find all items published under *slug* in any configured language."""
        if not self.settings.is_valid:
            return SearchResult(success=False, method="none", error=MISSING_PROJECT_ERROR)

        try:
            async with self._client() as client:
                delivery = DeliveryClient(self.settings, client)
                management = (
                    ManagementClient(self.settings, client)
                    if self.settings.management_api_key
                    else None
                )
                return await strategy.search_specific_slug(delivery, slug, management)
        except Exception as exc:
            logger.exception("Slug search for %r failed", slug)
            return SearchResult(success=False, method="error", error=f"Unexpected error: {exc}")
