"""
Shopify bundles to Google Merchant Center

Fetches products carrying a bundle tag from the Shopify Admin API, maps them
to Content API products and inserts or updates them in Merchant Center.
"""

__version__ = "0.1.0"

from .config import SyncConfig, ShopifyConfig, GoogleConfig
from .sync import BundleSync
from .mapper import build_gmc_product
from .handler import create_app, get_sync_router

__all__ = [
    "SyncConfig",
    "ShopifyConfig",
    "GoogleConfig",
    "BundleSync",
    "build_gmc_product",
    "create_app",
    "get_sync_router",
]
