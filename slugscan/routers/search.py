import logging

from fastapi import APIRouter, Depends, Request

from slugscan.config import Settings, get_settings
from slugscan.models.search import SearchRequest, SearchResult
from slugscan.ratelimit import limiter
from slugscan.services.finder import SlugFinder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])


@router.post(
    "/search",
    response_model=SearchResult,
    summary="Find every item published under one slug",
    description=(
        "Combines equality filters on both slug element names, a full scan with "
        "client-side matching and, when a management key is configured, a "
        "Management API check.  Items are listed once per language variant.\n\n"
        "Failures are returned in the `error` field with status 200."
    ),
)
@limiter.limit("10/minute")
async def search_slug(
    request: Request, body: SearchRequest, settings: Settings = Depends(get_settings)
) -> SearchResult:
    slug = body.slug
    logger.info("Slug search requested", extra={"slug": slug})
    return await SlugFinder(settings).search_specific_slug(slug)
