"""Duplicate check over Management API language variants of one content type."""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from slugscan.config import Settings, get_settings
from slugscan.models.management import ManagementDuplicatesRequest, ManagementDuplicatesResponse
from slugscan.ratelimit import limiter
from slugscan.services.management import ManagementApiError, find_type_duplicates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/management", tags=["Management"])


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "error_code": status_code, **extra},
    )


@router.post(
    "/duplicates",
    response_model=ManagementDuplicatesResponse,
    summary="Find duplicate slugs among the variants of one content type",
    description=(
        "Lists every language variant of `contentType` in `environmentId` through "
        "the Management API and returns slugs (read from `slugElement`) that occur "
        "more than once.  Unlike `POST /duplicates`, no distinction is made between "
        "language variants of the same item."
    ),
)
@limiter.limit("5/minute")
async def management_duplicates(request: Request, settings: Settings = Depends(get_settings)):
    try:
        body = ManagementDuplicatesRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _error(400, "Invalid JSON body")

    if not (body.environment_id and body.content_type and body.slug_element):
        return _error(400, "Missing environmentId, contentType, or slugElement")

    if not settings.management_api_key:
        return _error(500, "Missing Management API key")

    logger.info(
        "Management duplicate search requested",
        extra={"environment_id": body.environment_id, "content_type": body.content_type},
    )
    try:
        duplicates = await find_type_duplicates(
            settings, body.environment_id, body.content_type, body.slug_element
        )
    except ManagementApiError as exc:
        logger.warning("Management API error: %s", exc)
        return JSONResponse(
            status_code=400,
            content={
                "message": str(exc),
                "error_code": exc.error_code,
                "details": exc.validation_errors,
                "request_id": exc.request_id,
            },
        )
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Management API request failed: %s", exc)
        return _error(500, str(exc) or "Unknown API error")

    return ManagementDuplicatesResponse(duplicates=duplicates)


@router.api_route(
    "/duplicates",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def management_duplicates_wrong_method(request: Request) -> JSONResponse:
    return _error(405, f"Method Not Allowed: {request.method}")
