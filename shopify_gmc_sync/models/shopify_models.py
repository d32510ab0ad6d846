"""Pydantic models for Shopify Admin REST API product responses."""

from typing import Optional, List, Any
from pydantic import BaseModel, Field, ConfigDict, field_validator


class ShopifyImage(BaseModel):
    """Shopify product image."""
    id: Optional[int] = None
    src: str

    model_config = ConfigDict(extra="ignore")


class ShopifyVariant(BaseModel):
    """Shopify product variant."""
    id: Optional[int] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    price: str
    inventory_quantity: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_string(cls, value: Any) -> Any:
        # Shopify REST returns "29.99", but older payloads carry numbers
        if isinstance(value, (int, float)):
            return str(value)
        return value


class ShopifyProduct(BaseModel):
    """Shopify product as returned by ``products.json``."""
    id: int
    title: str
    body_html: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    handle: str
    images: List[ShopifyImage] = Field(default_factory=list)
    variants: List[ShopifyVariant] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        """REST returns tags as one comma-joined string."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [tag.strip() for tag in value if tag and tag.strip()]

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive exact tag match after trimming."""
        wanted = tag.strip().lower()
        if not wanted:
            return False
        return any(t.lower() == wanted for t in self.tags)


class ProductPage(BaseModel):
    """One page of ``products.json`` plus its continuation cursor."""
    products: List[ShopifyProduct] = Field(default_factory=list)
    next_cursor: Optional[str] = None
