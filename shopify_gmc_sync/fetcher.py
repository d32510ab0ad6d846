"""Fetch tagged bundle products from the Shopify Admin REST API."""

import logging
import re
from typing import List, Optional, Any

import httpx
from pydantic import ValidationError

from .config import ShopifyConfig
from .exceptions import FetchError
from .models.shopify_models import ShopifyProduct, ProductPage

logger = logging.getLogger(__name__)

PAGE_SIZE = 250
PRODUCT_FIELDS = "id,title,body_html,variants,images,product_type,tags,vendor,handle"

_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel="?([^";,]+)"?')
_PAGE_INFO_RE = re.compile(r"[?&]page_info=([^&>#]+)")


def next_page_cursor(link_header: Optional[str]) -> Optional[str]:
    """
    Extract the ``page_info`` cursor of the ``rel="next"`` relation.

    Args:
        link_header: Raw ``Link`` response header (RFC 8288)

    Returns:
        The opaque cursor, or None when there is no next page
    """
    if not link_header:
        return None
    for url, rels in _LINK_RE.findall(link_header):
        if "next" not in rels.split():
            continue
        match = _PAGE_INFO_RE.search(url)
        return match.group(1) if match else None
    return None


class ShopifyBundleFetcher:
    """
    Pages through ``products.json`` and keeps products carrying a tag.

    Pages are requested one at a time; the run stops as soon as a response
    has no ``rel="next"`` link.
    """

    def __init__(self, config: ShopifyConfig, client: Optional[Any] = None):
        """
        Initialize the fetcher.

        Args:
            config: Shopify configuration
            client: Optional preconfigured ``httpx.AsyncClient``
        """
        self.config = config
        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(
                base_url=f"https://{config.store_domain}",
                timeout=30.0,
            )
            self._owns_client = True

    async def close(self):
        """Close HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def endpoint(self) -> str:
        return f"/admin/api/{self.config.api_version}/products.json"

    async def fetch_page(self, cursor: Optional[str] = None) -> ProductPage:
        """
        Fetch a single page of products.

        Args:
            cursor: ``page_info`` cursor from the previous page's Link header

        Returns:
            Parsed products and the cursor of the next page, if any

        Raises:
            FetchError: On transport errors, non-2xx responses or malformed payloads
        """
        params = {"limit": PAGE_SIZE, "fields": PRODUCT_FIELDS}
        if cursor:
            params["page_info"] = cursor

        try:
            response = await self.client.get(
                self.endpoint,
                params=params,
                headers={"X-Shopify-Access-Token": self.config.access_token},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Shopify returned HTTP {e.response.status_code} for {self.endpoint}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise FetchError(f"Could not reach Shopify: {e}") from e

        try:
            data = response.json()
            products = [ShopifyProduct(**p) for p in data["products"]]
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            raise FetchError(f"Unexpected products payload: {e}") from e

        return ProductPage(
            products=products,
            next_cursor=next_page_cursor(response.headers.get("link")),
        )

    async def fetch_bundles(self, tag: str) -> List[ShopifyProduct]:
        """
        Fetch every product carrying ``tag`` across all pages.

        Args:
            tag: Tag to match (case-insensitive, trimmed)

        Returns:
            Matching products in catalog order
        """
        bundles: List[ShopifyProduct] = []
        cursor: Optional[str] = None
        pages = 0

        while True:
            page = await self.fetch_page(cursor)
            pages += 1
            matched = [p for p in page.products if p.has_tag(tag)]
            bundles.extend(matched)
            logger.debug(
                "Fetched page %d: %d products, %d tagged '%s'",
                pages, len(page.products), len(matched), tag,
            )
            if not page.next_cursor:
                break
            cursor = page.next_cursor

        logger.info("Found %d bundles tagged '%s' across %d pages", len(bundles), tag, pages)
        return bundles
