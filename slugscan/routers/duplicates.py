import logging

from fastapi import APIRouter, Depends, Request

from slugscan.config import Settings, get_settings
from slugscan.models.duplicates import DuplicateResult
from slugscan.ratelimit import limiter
from slugscan.services.finder import SlugFinder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Duplicates"])


@router.post(
    "/duplicates",
    response_model=DuplicateResult,
    summary="Find slugs shared by different content items",
    description=(
        "Pages through every `page` item of the configured project, once per "
        "configured language, and returns each slug that is used by two or more "
        "distinct content items.  Language variants of one item sharing a slug "
        "are not reported.\n\n"
        "Failures are returned in the `error` field with status 200."
    ),
)
@limiter.limit("5/minute")
async def find_duplicates(
    request: Request, settings: Settings = Depends(get_settings)
) -> DuplicateResult:
    logger.info("Duplicate search requested", extra={"project_id": settings.project_id})
    result = await SlugFinder(settings).find_duplicate_slugs()
    if result.error:
        logger.warning("Duplicate search returned an error: %s", result.error)
    return result
