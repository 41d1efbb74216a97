"""Tests for the Management API variant listing and duplicate check."""

import httpx
import pytest

from slugscan.config import Settings
from slugscan.services.management import (
    ManagementApiError,
    find_type_duplicates,
    slug_pairs,
    variant_name,
    variant_slug,
)

_SETTINGS = Settings(management_api_key="m-key", _env_file=None)


def _variant(item_id: str, slug, element_codename: str = "url_slug", name=None) -> dict:
    item = {"id": item_id}
    if name:
        item["name"] = name
    return {
        "item": item,
        "language": {"id": "00000000-0000-0000-0000-000000000000"},
        "elements": [
            {"element": {"id": "title-id", "codename": "title"}, "value": "Title"},
            {"element": {"id": f"{element_codename}-id", "codename": element_codename}, "value": slug},
        ],
    }


class TestVariantHelpers:
    def test_slug_matched_by_codename(self):
        assert variant_slug(_variant("a", "home"), "url_slug") == "home"

    def test_slug_matched_by_element_id(self):
        assert variant_slug(_variant("a", "home"), "url_slug-id") == "home"

    def test_missing_or_empty_slug(self):
        assert variant_slug(_variant("a", ""), "url_slug") is None
        assert variant_slug(_variant("a", "home"), "slug") is None

    def test_name_falls_back_to_id(self):
        assert variant_name(_variant("item-1", "x")) == "item-1"
        assert variant_name(_variant("item-1", "x", name="Home")) == "Home"
        assert variant_name({}) == "Unknown"

    def test_slug_pairs_skip_variants_without_slug(self):
        variants = [_variant("a", "home"), _variant("b", None), _variant("c", "about")]
        assert slug_pairs(variants, "url_slug") == [("home", "a"), ("about", "c")]


class TestFindTypeDuplicates:
    @pytest.mark.asyncio
    async def test_follows_continuation_and_groups(self):
        requests = []

        def handler(request):
            requests.append(request)
            if "x-continuation" not in request.headers:
                return httpx.Response(
                    200,
                    json={
                        "variants": [_variant("a", "home"), _variant("b", "about")],
                        "pagination": {"continuation_token": "token-1", "next_page": "next"},
                    },
                )
            return httpx.Response(
                200,
                json={"variants": [_variant("c", "home")], "pagination": {"continuation_token": None}},
            )

        duplicates = await find_type_duplicates(
            _SETTINGS, "env-1", "page", "url_slug", transport=httpx.MockTransport(handler)
        )

        assert len(requests) == 2
        assert requests[0].url.path == "/v2/projects/env-1/types/codename/page/variants"
        assert requests[0].headers["Authorization"] == "Bearer m-key"
        assert requests[1].headers["x-continuation"] == "token-1"
        assert [(d.slug, d.items) for d in duplicates] == [("home", ["a", "c"])]

    @pytest.mark.asyncio
    async def test_error_payload_raises_management_error(self):
        def handler(request):
            return httpx.Response(
                404,
                json={
                    "request_id": "req-9",
                    "error_code": 100,
                    "message": "The requested content type 'nope' was not found.",
                    "validation_errors": [],
                },
            )

        with pytest.raises(ManagementApiError) as exc_info:
            await find_type_duplicates(_SETTINGS, "env-1", "nope", "url_slug", transport=httpx.MockTransport(handler))

        error = exc_info.value
        assert error.status_code == 404
        assert error.error_code == 100
        assert error.request_id == "req-9"
        assert "nope" in str(error)

    @pytest.mark.asyncio
    async def test_error_without_payload_uses_status(self):
        with pytest.raises(ManagementApiError) as exc_info:
            await find_type_duplicates(
                _SETTINGS, "env-1", "page", "url_slug", transport=httpx.MockTransport(lambda r: httpx.Response(500))
            )
        assert exc_info.value.error_code == 500

    @pytest.mark.asyncio
    async def test_non_json_success_body_raises_value_error(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(ValueError):
            await find_type_duplicates(_SETTINGS, "env-1", "page", "url_slug", transport=transport)

    @pytest.mark.asyncio
    async def test_non_object_success_body_raises_value_error(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=[{"variants": []}]))
        with pytest.raises(ValueError):
            await find_type_duplicates(_SETTINGS, "env-1", "page", "url_slug", transport=transport)

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self):
        payload = {
            "variants": ["junk", {"item": "junk", "elements": ["junk"]}, _variant("a", "home"), _variant("b", "home")],
            "pagination": "junk",
        }
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=payload))
        duplicates = await find_type_duplicates(_SETTINGS, "env-1", "page", "url_slug", transport=transport)
        assert [(d.slug, d.items) for d in duplicates] == [("home", ["a", "b"])]
