"""Map Shopify bundle products to Merchant Center product records."""

import re
from typing import Optional

from .exceptions import MissingVariantError
from .models.shopify_models import ShopifyProduct
from .models.gmc_models import GMCProduct, GMCPrice

CURRENCY = "USD"
CONTENT_LANGUAGE = "en"
TARGET_COUNTRY = "US"
CONDITION = "new"
DEFAULT_BRAND = "YourBrand"
OFFER_ID_PREFIX = "shopify-"

_TAG_RE = re.compile(r"<[^>]*>?")


def strip_html(value: Optional[str]) -> str:
    """Remove HTML tags. Entities are left as-is."""
    if not value:
        return ""
    return _TAG_RE.sub("", value)


def build_gmc_product(product: ShopifyProduct, store_domain: str) -> GMCProduct:
    """
    Convert a Shopify product to a Merchant Center product.

    Only the first variant is used; multi-variant bundles produce a single
    listing.

    Args:
        product: Shopify product
        store_domain: Bare store host used for the product link

    Returns:
        Merchant Center product record

    Raises:
        MissingVariantError: If the product has no variants
    """
    if not product.variants:
        raise MissingVariantError(product.id, product.title)

    variant = product.variants[0]
    image = product.images[0].src if product.images else ""
    has_barcode = bool(variant.barcode and variant.barcode.strip())

    in_stock = variant.inventory_quantity is not None and variant.inventory_quantity > 0

    return GMCProduct(
        offer_id=variant.sku or f"{OFFER_ID_PREFIX}{product.id}",
        title=product.title,
        description=strip_html(product.body_html),
        link=f"https://{store_domain}/products/{product.handle}",
        image_link=image,
        availability="in stock" if in_stock else "out of stock",
        price=GMCPrice(value=variant.price, currency=CURRENCY),
        brand=product.vendor or DEFAULT_BRAND,
        gtin=variant.barcode if has_barcode else None,
        identifier_exists=has_barcode,
        content_language=CONTENT_LANGUAGE,
        target_country=TARGET_COUNTRY,
        condition=CONDITION,
    )
