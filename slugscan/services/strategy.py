"""Lookup strategies for a single slug.

:func:`search_specific_slug` runs every strategy and merges what they find:

1. Equality filters on the Delivery API, for each language, trying both slug
   element names with and without a ``system.type`` filter.
2. A full scan of all page items with client-side matching, which also
   reports case-insensitive and substring matches as diagnostics.
3. A Management API check, only when a management key is configured.

The API is not trusted to apply filters correctly, so every item returned by
an equality filter is re-checked locally.
"""

import logging
from typing import List, Optional, Tuple

import httpx

from slugscan.models.content_item import ContentItem, SlugField
from slugscan.models.search import SearchResult, StrategyResult
from slugscan.services.delivery import DeliveryClient, FetchError, filter_params
from slugscan.services.management import ManagementApiError, ManagementClient
from slugscan.services.normalizer import (
    count_by_slug_field,
    find_similar_slugs,
    matches_slug,
    normalize,
    remove_duplicate_items,
    unique_slug_values,
)

logger = logging.getLogger(__name__)

# (element, with system.type filter)
_FILTER_VARIANTS: Tuple[Tuple[SlugField, bool], ...] = (
    ("slug", True),
    ("url_slug", True),
    ("slug", False),
    ("url_slug", False),
)


async def search_with_delivery_api(delivery: DeliveryClient, target_slug: str) -> StrategyResult:
    """Strategy 1: equality-filter requests for every language and variant.

    A variant that fails is logged and skipped; the strategy only fails when
    no request succeeded at all.
    """
    found: List[ContentItem] = []
    urls: List[str] = []
    matched_fields: List[str] = []
    failures: List[str] = []

    for language in delivery.settings.languages:
        for field, with_type in _FILTER_VARIANTS:
            params = filter_params(field, target_slug, language, with_type)
            url = delivery.url_for(params)
            urls.append(url)
            try:
                page = await delivery.get_page(params)
            except (FetchError, httpx.HTTPError) as exc:
                logger.warning("Filter request failed (%s, %s): %s", field, language, exc)
                failures.append(f"{url}: {exc}")
                continue

            matches = [normalize(item) for item in page.items if matches_slug(item, target_slug)]
            logger.debug(
                "Filter %s=%s [%s, type filter=%s]: %d returned, %d matched",
                field, target_slug, language, with_type, len(page.items), len(matches),
            )
            if matches:
                found.extend(matches)
                if field not in matched_fields:
                    matched_fields.append(field)

    items = remove_duplicate_items(found)
    if failures and len(failures) == len(urls):
        return StrategyResult(
            success=False,
            method="delivery-api-direct",
            error=f"All {len(urls)} filter requests failed; last error: {failures[-1]}",
            urls=urls,
        )

    return StrategyResult(
        success=True,
        method="delivery-api-direct",
        items=items,
        field=matched_fields[0] if matched_fields else None,
        url=urls[0] if urls else None,
        urls=urls,
        matched_fields=matched_fields,
    )


async def search_all_items(delivery: DeliveryClient, target_slug: str) -> StrategyResult:
    """Strategy 2: fetch every page item and match client-side."""
    requests_before = delivery.request_count
    try:
        all_items = await delivery.fetch_all_languages()
    except (FetchError, httpx.HTTPError) as exc:
        logger.error("Full scan for slug %r failed: %s", target_slug, exc)
        return StrategyResult(success=False, method="delivery-api-all-items", error=str(exc))

    all_slugs = unique_slug_values(all_items)
    lowered = target_slug.lower()
    exact = [item for item in all_items if item.slug == target_slug]
    case_insensitive = [item for item in all_items if item.slug.lower() == lowered]
    field_counts = count_by_slug_field(all_items)
    similar = find_similar_slugs(all_slugs, target_slug)

    logger.info(
        "Full scan: %d items, %d unique slugs, %d exact and %d case-insensitive matches for %r",
        len(all_items), len(all_slugs), len(exact), len(case_insensitive), target_slug,
    )

    return StrategyResult(
        success=True,
        method="delivery-api-all-items",
        items=exact,
        total_items=len(all_items),
        total_requests=delivery.request_count - requests_before,
        all_slugs_count=len(all_slugs),
        exact_matches=len(exact),
        case_insensitive_matches=len(case_insensitive),
        similar_slugs=similar,
        url_slug_count=field_counts["url_slug"],
        slug_count=field_counts["slug"],
    )


async def search_with_management_api(management: ManagementClient, project_id: str) -> StrategyResult:
    """Strategy 3: authenticate against the Management API.

    Item listings there are not resolved into language variants yet, so no
    items are returned.
    """
    url = management.items_url(project_id)
    try:
        await management.list_items(project_id)
    except (ManagementApiError, httpx.HTTPError, ValueError) as exc:
        logger.warning("Management API search failed: %s", exc)
        return StrategyResult(success=False, method="management-api", error=str(exc), url=url)

    return StrategyResult(
        success=True,
        method="management-api",
        url=url,
        note="Management API integration needs additional implementation for language variants",
    )


async def search_specific_slug(
    delivery: DeliveryClient,
    target_slug: str,
    management: Optional[ManagementClient] = None,
) -> SearchResult:
    """Run all strategies for *target_slug* and merge their items.

    Items are deduplicated by ``(codename, language)`` so each language
    variant of a matching item is listed once.
    """
    logger.info("Searching for slug %r across %s", target_slug, delivery.settings.languages)

    direct = await search_with_delivery_api(delivery, target_slug)
    full_scan = await search_all_items(delivery, target_slug)
    managed = (
        await search_with_management_api(management, delivery.settings.project_id)
        if management is not None
        else None
    )

    attempted = [r for r in (direct, full_scan, managed) if r is not None]
    combined: List[ContentItem] = []
    for result in attempted:
        combined.extend(result.items)
    items = remove_duplicate_items(combined)

    error = None
    success = bool(items) or any(r.success for r in attempted)
    if not success:
        error = "; ".join(f"{r.method}: {r.error}" for r in attempted if r.error)

    return SearchResult(
        success=success,
        method="combined",
        items=items,
        total_items=len(items),
        error=error,
        delivery_api=direct,
        delivery_api_all_items=full_scan,
        management_api=managed,
    )
