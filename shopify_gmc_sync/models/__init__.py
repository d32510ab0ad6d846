"""Data models for Shopify products and Google Merchant Center payloads."""

from .shopify_models import (
    ShopifyProduct,
    ShopifyVariant,
    ShopifyImage,
    ProductPage,
)
from .gmc_models import (
    GMCProduct,
    GMCPrice,
    PushOutcome,
    SyncResult,
)

__all__ = [
    "ShopifyProduct",
    "ShopifyVariant",
    "ShopifyImage",
    "ProductPage",
    "GMCProduct",
    "GMCPrice",
    "PushOutcome",
    "SyncResult",
]
