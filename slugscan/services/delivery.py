"""Kontent.ai Delivery API client: paginated page listing and equality filters."""

import logging
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from slugscan.config import Settings
from slugscan.models.content_item import ContentItem, DeliveryPage, SlugField
from slugscan.services.normalizer import PAGE_TYPE, filter_page_items_with_slugs, normalize

logger = logging.getLogger(__name__)

_LISTED_ELEMENTS = "url_slug,slug,system"
_FILTER_LIMIT = 100


class FetchError(RuntimeError):
    """A Delivery API request failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


def api_headers(api_key: str = "") -> Dict[str, str]:
    """Return request headers, adding a bearer token when *api_key* is set."""
    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def filter_params(field: SlugField, slug: str, language: str, with_type: bool) -> Dict[str, str]:
    """Query parameters for an equality lookup on one slug element."""
    params: Dict[str, str] = {}
    if with_type:
        params["system.type"] = PAGE_TYPE
    params[f"elements.{field}"] = slug
    params["depth"] = "0"
    params["limit"] = str(_FILTER_LIMIT)
    params["language"] = language
    return params


class DeliveryClient:
    """Issues Delivery API requests for one project.

    The caller owns *client* and its lifetime; every request made through this
    instance is counted in :attr:`request_count`.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.log = log or logger
        self.request_count = 0
        self._headers = api_headers(settings.delivery_api_key)

    @property
    def items_url(self) -> str:
        base = self.settings.delivery_api_base.rstrip("/")
        return f"{base}/{self.settings.project_id}/items"

    def url_for(self, params: Dict[str, str]) -> str:
        return str(httpx.URL(self.items_url, params=params))

    async def get_page(self, params: Dict[str, str]) -> DeliveryPage:
        """GET ``/items`` with *params* and decode the response.

        Raises:
            FetchError: on a non-2xx status or a payload that is not a listing.
            httpx.HTTPError: on transport failures.
        """
        self.request_count += 1
        resp = await self.client.get(self.items_url, params=params, headers=self._headers)
        url = str(resp.request.url)
        if not resp.is_success:
            raise FetchError(
                f"API Error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
                url=url,
            )
        try:
            return DeliveryPage.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise FetchError(f"Malformed response from {url}: {exc}", url=url) from exc

    async def fetch_all_page_items(self, language: str) -> List[ContentItem]:
        """Return every page item with a slug for *language*.

        Pages of ``page_size`` items are requested until the API stops
        reporting a next page.  After ``max_requests`` requests the loop gives
        up and returns what it has collected so far; that is logged, not
        raised.
        """
        page_size = self.settings.page_size
        max_requests = self.settings.max_requests
        skip = 0
        requests = 0
        collected: List[ContentItem] = []

        while True:
            requests += 1
            page = await self.get_page(
                {
                    "system.type": PAGE_TYPE,
                    "elements": _LISTED_ELEMENTS,
                    "limit": str(page_size),
                    "skip": str(skip),
                    "language": language,
                }
            )
            batch = [normalize(item) for item in filter_page_items_with_slugs(page.items)]
            collected.extend(batch)
            self.log.debug(
                "Language %s request %d: %d of %d items kept, %d total",
                language, requests, len(batch), len(page.items), len(collected),
            )

            if not page.pagination.next_page:
                break
            if requests >= max_requests:
                self.log.warning(
                    "Safety limit of %d requests reached for language %s; "
                    "returning %d items collected so far",
                    max_requests, language, len(collected),
                )
                break
            skip += page_size

        self.log.info(
            "Fetched %d page items for language %s in %d requests",
            len(collected), language, requests,
        )
        return collected

    async def fetch_all_languages(self) -> List[ContentItem]:
        """Run :meth:`fetch_all_page_items` for each configured language in turn."""
        items: List[ContentItem] = []
        for language in self.settings.languages:
            items.extend(await self.fetch_all_page_items(language))
        return items

    async def filter_by_slug(
        self, field: SlugField, slug: str, language: str, with_type: bool
    ) -> DeliveryPage:
        return await self.get_page(filter_params(field, slug, language, with_type))
