"""Kontent.ai Management API access.

Two uses:

* a connectivity check run as part of the targeted slug search, which
  authenticates and lists items but does not resolve language variants yet;
* the per-content-type duplicate check behind ``POST /management/duplicates``,
  which lists every language variant of a type and groups them by one slug
  element.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from slugscan.config import Settings
from slugscan.models.management import SimpleDuplicate
from slugscan.services.delivery import api_headers
from slugscan.services.grouping import find_simple_duplicates

logger = logging.getLogger(__name__)

_CONTINUATION_HEADER = "x-continuation"


class ManagementApiError(RuntimeError):
    """The Management API answered with an error payload."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: Optional[int] = None,
        request_id: Optional[str] = None,
        validation_errors: Optional[List[Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code if error_code is not None else status_code
        self.request_id = request_id
        self.validation_errors = validation_errors or []


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        raise ManagementApiError(
            str(payload["message"]),
            status_code=resp.status_code,
            error_code=payload.get("error_code"),
            request_id=payload.get("request_id"),
            validation_errors=payload.get("validation_errors"),
        )
    raise ManagementApiError(
        f"Management API Error: {resp.status_code} {resp.reason_phrase}",
        status_code=resp.status_code,
    )


def _json_object(resp: httpx.Response) -> Dict[str, Any]:
    """Decode a successful response that must be a JSON object.

    Raises:
        ValueError: when the body is not JSON or not an object.
    """
    try:
        data = resp.json()
    except ValueError as exc:
        raise ValueError(f"Malformed Management API response from {resp.request.url}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected Management API payload from {resp.request.url}")
    return data


class ManagementClient:
    def __init__(self, settings: Settings, client: httpx.AsyncClient, api_key: str = "") -> None:
        self.settings = settings
        self.client = client
        self._headers = api_headers(api_key or settings.management_api_key)

    def _project_url(self, environment_id: str) -> str:
        return f"{self.settings.management_api_base.rstrip('/')}/projects/{environment_id}"

    def items_url(self, environment_id: str) -> str:
        return f"{self._project_url(environment_id)}/items"

    async def list_items(self, environment_id: str) -> Dict[str, Any]:
        """Return the first page of ``/items`` for *environment_id*."""
        resp = await self.client.get(self.items_url(environment_id), headers=self._headers)
        _raise_for_error(resp)
        return _json_object(resp)

    async def list_type_variants(self, environment_id: str, content_type: str) -> List[Dict[str, Any]]:
        """Return every language variant of *content_type*, following continuation tokens."""
        url = f"{self._project_url(environment_id)}/types/codename/{content_type}/variants"
        variants: List[Dict[str, Any]] = []
        continuation: Optional[str] = None

        for _ in range(self.settings.max_requests):
            headers = dict(self._headers)
            if continuation:
                headers[_CONTINUATION_HEADER] = continuation
            resp = await self.client.get(url, headers=headers)
            _raise_for_error(resp)
            data = _json_object(resp)
            page = data.get("variants") or []
            if not isinstance(page, list):
                raise ValueError(f"Unexpected variants payload from {url}")
            variants.extend(page)
            pagination = data.get("pagination")
            continuation = pagination.get("continuation_token") if isinstance(pagination, dict) else None
            if not continuation:
                break
        else:
            logger.warning(
                "Safety limit of %d requests reached listing variants of %s",
                self.settings.max_requests, content_type,
            )

        logger.info("Listed %d variants of type %s", len(variants), content_type)
        return variants


def variant_slug(variant: Dict[str, Any], slug_element: str) -> Optional[str]:
    """Return the value of *slug_element* in a variant, matched by codename or id."""
    for element in variant.get("elements") or []:
        if not isinstance(element, dict):
            continue
        ref = element.get("element")
        if not isinstance(ref, dict):
            continue
        if slug_element in (ref.get("codename"), ref.get("id")):
            value = element.get("value")
            return value if isinstance(value, str) and value else None
    return None


def variant_name(variant: Dict[str, Any]) -> str:
    item = variant.get("item")
    if not isinstance(item, dict):
        return "Unknown"
    return item.get("name") or item.get("codename") or item.get("id") or "Unknown"


def slug_pairs(variants: List[Dict[str, Any]], slug_element: str) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for variant in variants:
        if not isinstance(variant, dict):
            continue
        slug = variant_slug(variant, slug_element)
        if slug:
            pairs.append((slug, variant_name(variant)))
    return pairs


async def find_type_duplicates(
    settings: Settings,
    environment_id: str,
    content_type: str,
    slug_element: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[SimpleDuplicate]:
    """List all variants of *content_type* and report slugs used more than once.

    Raises:
        ManagementApiError: when the Management API reports an error.
        ValueError: when a successful response is not a variant listing.
        httpx.HTTPError: on transport failures.
    """
    async with httpx.AsyncClient(timeout=settings.request_timeout, transport=transport) as client:
        management = ManagementClient(settings, client)
        variants = await management.list_type_variants(environment_id, content_type)
    return find_simple_duplicates(slug_pairs(variants, slug_element))
