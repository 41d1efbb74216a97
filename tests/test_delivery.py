"""Tests for the paginated Delivery API fetch loop.

Requests are answered in-process by an ``httpx.MockTransport`` so no network
access is needed.
"""

import httpx
import pytest

from slugscan.config import Settings
from slugscan.services.delivery import DeliveryClient, FetchError, api_headers, filter_params

_SETTINGS = Settings(project_id="proj-123", _env_file=None)


def _raw(codename: str, language: str = "en", slug: str = "foo", field: str = "url_slug", type_: str = "page") -> dict:
    return {
        "system": {"name": codename.title(), "codename": codename, "type": type_, "language": language},
        "elements": {field: {"type": "text", "name": "Slug", "value": slug}},
    }


def _listing(items, next_page: str = "") -> dict:
    return {"items": items, "pagination": {"skip": 0, "limit": 1000, "count": len(items), "next_page": next_page}}


class _Recorder:
    """Mock transport handler that records every request it answers."""

    def __init__(self, responder):
        self.responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


async def _fetch(responder, language="en", settings=_SETTINGS):
    recorder = _Recorder(responder)
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
        delivery = DeliveryClient(settings, client)
        items = await delivery.fetch_all_page_items(language)
    return items, recorder, delivery


class TestHelpers:
    def test_headers_without_key(self):
        assert "Authorization" not in api_headers("")

    def test_headers_with_key(self):
        assert api_headers("secret")["Authorization"] == "Bearer secret"

    def test_filter_params_with_type(self):
        params = filter_params("url_slug", "about", "de", with_type=True)
        assert params == {
            "system.type": "page",
            "elements.url_slug": "about",
            "depth": "0",
            "limit": "100",
            "language": "de",
        }

    def test_filter_params_without_type(self):
        assert "system.type" not in filter_params("slug", "about", "de", with_type=False)


class TestFetchAllPageItems:
    @pytest.mark.asyncio
    async def test_single_page_without_next_makes_one_request(self):
        items, recorder, _ = await _fetch(lambda r: httpx.Response(200, json=_listing([_raw("a")], next_page=None)))
        assert len(recorder.requests) == 1
        assert [i.codename for i in items] == ["a"]

    @pytest.mark.asyncio
    async def test_request_shape(self):
        _, recorder, _ = await _fetch(lambda r: httpx.Response(200, json=_listing([])), language="zh")
        request = recorder.requests[0]
        assert request.url.path == "/proj-123/items"
        assert request.url.host == "deliver.kontent.ai"
        params = request.url.params
        assert params["system.type"] == "page"
        assert params["elements"] == "url_slug,slug,system"
        assert params["limit"] == "1000"
        assert params["skip"] == "0"
        assert params["language"] == "zh"

    @pytest.mark.asyncio
    async def test_follows_next_page_and_advances_skip(self):
        def responder(request):
            skip = int(request.url.params["skip"])
            if skip < 2000:
                return httpx.Response(200, json=_listing([_raw(f"item{skip}")], next_page="more"))
            return httpx.Response(200, json=_listing([_raw("last")]))

        items, recorder, delivery = await _fetch(responder)
        assert [r.url.params["skip"] for r in recorder.requests] == ["0", "1000", "2000"]
        assert [i.codename for i in items] == ["item0", "item1000", "last"]
        assert delivery.request_count == 3

    @pytest.mark.asyncio
    async def test_stops_at_exactly_fifty_requests(self):
        items, recorder, _ = await _fetch(
            lambda r: httpx.Response(200, json=_listing([_raw("a")], next_page="always"))
        )
        assert len(recorder.requests) == 50
        # partial results are returned rather than raised
        assert len(items) == 50

    @pytest.mark.asyncio
    async def test_ceiling_follows_settings(self):
        settings = Settings(project_id="p", max_requests=3, _env_file=None)
        _, recorder, _ = await _fetch(
            lambda r: httpx.Response(200, json=_listing([], next_page="always")), settings=settings
        )
        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_filters_non_pages_and_slugless_items(self):
        payload = _listing(
            [
                _raw("page-a"),
                _raw("page-b", field="slug", slug="bar"),
                _raw("article", type_="article"),
                _raw("empty", slug=""),
                {"system": {"codename": "no-elements", "type": "page"}},
            ]
        )
        items, _, _ = await _fetch(lambda r: httpx.Response(200, json=payload))
        assert [(i.codename, i.slug_field) for i in items] == [("page-a", "url_slug"), ("page-b", "slug")]

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self):
        with pytest.raises(FetchError) as exc_info:
            await _fetch(lambda r: httpx.Response(401, json={"message": "unauthorised"}))
        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_on_later_page_discards_partial_results(self):
        def responder(request):
            if request.url.params["skip"] == "0":
                return httpx.Response(200, json=_listing([_raw("a")], next_page="more"))
            return httpx.Response(503)

        with pytest.raises(FetchError):
            await _fetch(responder)

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_fetch_error(self):
        with pytest.raises(FetchError):
            await _fetch(lambda r: httpx.Response(200, text="<html>not json</html>"))

    @pytest.mark.asyncio
    async def test_non_object_payload_raises_fetch_error(self):
        with pytest.raises(FetchError):
            await _fetch(lambda r: httpx.Response(200, json=["not", "a", "listing"]))

    @pytest.mark.asyncio
    async def test_bearer_header_sent_when_key_configured(self):
        settings = Settings(project_id="p", delivery_api_key="d-key", _env_file=None)
        _, recorder, _ = await _fetch(lambda r: httpx.Response(200, json=_listing([])), settings=settings)
        assert recorder.requests[0].headers["Authorization"] == "Bearer d-key"

    @pytest.mark.asyncio
    async def test_no_auth_header_for_public_projects(self):
        _, recorder, _ = await _fetch(lambda r: httpx.Response(200, json=_listing([])))
        assert "Authorization" not in recorder.requests[0].headers


class TestFetchAllLanguages:
    @pytest.mark.asyncio
    async def test_languages_fetched_in_order_and_concatenated(self):
        def responder(request):
            language = request.url.params["language"]
            return httpx.Response(200, json=_listing([_raw("home", language=language)]))

        recorder = _Recorder(responder)
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            items = await DeliveryClient(_SETTINGS, client).fetch_all_languages()

        assert [r.url.params["language"] for r in recorder.requests] == ["de", "en", "zh"]
        assert [(i.codename, i.language) for i in items] == [("home", "de"), ("home", "en"), ("home", "zh")]

    @pytest.mark.asyncio
    async def test_safety_ceiling_applies_per_language(self):
        recorder = _Recorder(lambda r: httpx.Response(200, json=_listing([], next_page="always")))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            delivery = DeliveryClient(_SETTINGS, client)
            await delivery.fetch_all_languages()

        assert len(recorder.requests) == 150
        assert delivery.request_count == 150
