"""Pydantic models for Google Merchant Center Content API payloads."""

from typing import Optional, List, Literal, Dict, Any
from pydantic import BaseModel, Field, ConfigDict


class GMCPrice(BaseModel):
    """Content API Price."""
    value: str
    currency: str


class GMCProduct(BaseModel):
    """Content API Product - one listing per Shopify bundle."""
    offer_id: str = Field(alias="offerId")
    title: str
    description: str
    link: str
    image_link: str = Field(alias="imageLink")
    availability: Literal["in stock", "out of stock"]
    price: GMCPrice
    brand: str
    gtin: Optional[str] = None
    identifier_exists: bool = Field(alias="identifierExists")
    content_language: str = Field(alias="contentLanguage")
    target_country: str = Field(alias="targetCountry")
    condition: Literal["new"] = "new"

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "offerId": "BNDL-001",
                "title": "Starter Bundle",
                "description": "Everything you need to get going",
                "link": "https://mystore.myshopify.com/products/starter-bundle",
                "imageLink": "https://cdn.shopify.com/s/files/bundle.jpg",
                "availability": "in stock",
                "price": {"value": "49.99", "currency": "USD"},
                "brand": "BrandX",
                "gtin": "012345678905",
                "identifierExists": True,
                "contentLanguage": "en",
                "targetCountry": "US",
                "condition": "new",
            }
        },
    )

    def to_payload(self, channel: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the JSON request body.

        Args:
            channel: Added for insert requests; updates address the channel in the URL

        Returns:
            Dict ready to send as JSON (gtin omitted when absent)
        """
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if channel:
            payload["channel"] = channel
        return payload


OutcomeStatus = Literal["pushed", "updated", "error"]


class PushOutcome(BaseModel):
    """Result of pushing a single bundle."""
    status: OutcomeStatus
    offer_id: Optional[str] = None
    title: str
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        if self.status == "pushed":
            return f"Pushed: {self.title}"
        if self.status == "updated":
            return f"Updated: {self.title}"
        return f"Error for {self.title}: {self.detail}"


class SyncResult(BaseModel):
    """Outcome of one sync run."""
    matched: int = 0
    outcomes: List[PushOutcome] = Field(default_factory=list)

    @property
    def details(self) -> List[str]:
        return [outcome.message for outcome in self.outcomes]

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == "error")
