"""Exceptions raised by the bundle sync."""

from typing import Optional, Any


class SyncError(Exception):
    """Base class for sync errors."""


class ConfigError(SyncError):
    """Raised when the environment does not yield a usable configuration."""


class FetchError(SyncError):
    """Raised when the Shopify catalog cannot be read. Aborts the run."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TokenError(SyncError):
    """Raised when the Google access token cannot be obtained."""


class MissingVariantError(SyncError):
    """Raised when a Shopify product has no variant to map."""

    def __init__(self, product_id: int, title: str):
        self.product_id = product_id
        self.title = title
        super().__init__(f"Product {product_id} ({title}) has no variants")


class UpdateFallbackError(SyncError):
    """
    Raised when the PATCH issued after a 409 conflict fails.

    Unless update failures are isolated, this stops the remaining batch.
    """

    def __init__(self, offer_id: str, title: str, detail: Any):
        self.offer_id = offer_id
        self.title = title
        self.detail = detail
        super().__init__(f"Update failed for {title} ({offer_id}): {detail}")
