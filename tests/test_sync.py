import json

import pytest
import httpx
from fastapi import FastAPI

from shopify_gmc_sync.auth import AccessToken
from shopify_gmc_sync.config import SyncConfig, CONTENT_API_BASE
from shopify_gmc_sync.exceptions import FetchError
from shopify_gmc_sync.handler import create_app, get_sync_router
from shopify_gmc_sync.sync import BundleSync, NO_BUNDLES_MESSAGE, DONE_MESSAGE


def make_config(**overrides):
    data = {
        "shopify": {
            "store_domain": "mystore.myshopify.com",
            "access_token": "shpat_test",
            "bundle_tag": "Bundle",
        },
        "google": {
            "client_id": "client",
            "client_secret": "secret",
            "refresh_token": "refresh",
            "merchant_id": "123456",
        },
    }
    data.update(overrides)
    return SyncConfig(**data)


def product(pid, tags, variants=True):
    return {
        "id": pid,
        "title": f"Bundle {pid}",
        "body_html": "<p>Two <em>great</em> things</p>",
        "vendor": "BrandX",
        "product_type": "Bundle",
        "tags": tags,
        "handle": f"bundle-{pid}",
        "images": [{"src": f"https://cdn.shopify.com/{pid}.jpg"}],
        "variants": [
            {"id": pid * 10, "sku": f"B-{pid}", "barcode": "", "price": "25.00", "inventory_quantity": 2}
        ] if variants else [],
    }


class CountingTokenProvider:
    def __init__(self):
        self.calls = 0

    async def acquire_access_token(self) -> AccessToken:
        self.calls += 1
        return AccessToken(access_token="tok")


def shopify_client(pages):
    def handler(request: httpx.Request) -> httpx.Response:
        cursor = request.url.params.get("page_info")
        products, next_cursor = pages[cursor]
        headers = {}
        if next_cursor:
            headers["Link"] = (
                f'<https://mystore.myshopify.com/admin/api/2024-04/products.json?page_info={next_cursor}>; rel="next"'
            )
        return httpx.Response(200, json={"products": products}, headers=headers)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://mystore.myshopify.com")


def gmc_client(requests, conflicts=()):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        if request.method == "POST" and body["offerId"] in conflicts:
            return httpx.Response(409, json={"error": {"message": "exists"}})
        return httpx.Response(200, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=CONTENT_API_BASE)


def make_sync(pages, requests, conflicts=(), tokens=None, **config):
    return BundleSync(
        make_config(**config),
        token_provider=tokens or CountingTokenProvider(),
        shopify_client=shopify_client(pages),
        gmc_client=gmc_client(requests, conflicts),
    )


@pytest.mark.asyncio
async def test_no_matching_bundles_skips_merchant_center():
    requests = []
    tokens = CountingTokenProvider()
    sync = make_sync({None: ([product(1, "summer")], None)}, requests, tokens=tokens)

    result = await sync.run()

    assert result.matched == 0
    assert result.outcomes == []
    assert requests == []
    assert tokens.calls == 0


@pytest.mark.asyncio
async def test_run_syncs_bundles_from_every_page():
    requests = []
    tokens = CountingTokenProvider()
    pages = {
        None: ([product(1, "bundle"), product(2, "other")], "p2"),
        "p2": ([product(3, "sale, BUNDLE"), product(4, "bundle", variants=False)], None),
    }
    sync = make_sync(pages, requests, conflicts={"B-3"}, tokens=tokens)

    result = await sync.run()

    assert result.matched == 3
    assert result.details == [
        "Pushed: Bundle 1",
        "Updated: Bundle 3",
        "Error for Bundle 4: Product 4 (Bundle 4) has no variants",
    ]
    assert result.failed == 1
    assert tokens.calls == 1
    assert [(r.method, r.url.path) for r in requests] == [
        ("POST", "/content/v2.1/123456/products"),
        ("POST", "/content/v2.1/123456/products"),
        ("PATCH", "/content/v2.1/123456/products/online:en:US:B-3"),
    ]
    first = json.loads(requests[0].content)
    assert first["description"] == "Two great things"
    assert first["link"] == "https://mystore.myshopify.com/products/bundle-1"


@pytest.mark.asyncio
async def test_fetch_failure_aborts_before_token():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    tokens = CountingTokenProvider()
    sync = BundleSync(
        make_config(),
        token_provider=tokens,
        shopify_client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://mystore.myshopify.com"),
    )

    with pytest.raises(FetchError):
        await sync.run()
    assert tokens.calls == 0


@pytest.mark.asyncio
async def test_preview_maps_without_pushing():
    requests = []
    tokens = CountingTokenProvider()
    pages = {None: ([product(1, "bundle"), product(2, "bundle", variants=False)], None)}
    sync = make_sync(pages, requests, tokens=tokens)

    products, errors = await sync.preview()

    assert [p.offer_id for p in products] == ["B-1"]
    assert [e.title for e in errors] == ["Bundle 2"]
    assert requests == []
    assert tokens.calls == 0


@pytest.mark.asyncio
async def test_handler_reports_details():
    requests = []
    pages = {None: ([product(1, "bundle")], None)}
    app = create_app(sync_factory=lambda: make_sync(pages, requests))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/sync")

    assert response.status_code == 200
    assert response.json() == {"status": DONE_MESSAGE, "details": ["Pushed: Bundle 1"]}


@pytest.mark.asyncio
async def test_handler_without_bundles():
    requests = []
    app = FastAPI()
    app.include_router(get_sync_router(lambda: make_sync({None: ([], None)}, requests)))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/sync")

    assert response.status_code == 200
    assert response.json() == {"status": NO_BUNDLES_MESSAGE, "details": []}
    assert requests == []


@pytest.mark.asyncio
async def test_handler_returns_500_on_fatal_error():
    def failing_factory():
        raise FetchError("Shopify returned HTTP 401")

    app = create_app(sync_factory=failing_factory)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/sync")
        health = await client.get("/health")

    assert response.status_code == 500
    assert response.json() == {"error": "Shopify returned HTTP 401"}
    assert health.json() == {"status": "healthy"}
