"""Insert-or-update bundles in Google Merchant Center."""

import json
import logging
from time import perf_counter
from typing import Iterable, List, Optional, Any
from urllib.parse import quote

import httpx

from .auth import AccessToken
from .config import GoogleConfig
from .exceptions import UpdateFallbackError
from .mapper import CONTENT_LANGUAGE, TARGET_COUNTRY
from .models.gmc_models import GMCProduct, PushOutcome
from .telemetry import get_push_duration_histogram, get_outcome_counter

logger = logging.getLogger(__name__)

CHANNEL = "online"


def _error_detail(error: httpx.HTTPError) -> str:
    """Structured error body when the API sent one, else the message."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            return json.dumps(error.response.json(), separators=(",", ":"))
        except ValueError:
            return error.response.text or str(error)
    return str(error)


class GMCUpsertPusher:
    """
    Push Merchant Center products one at a time.

    Each product is inserted first; a 409 conflict means the listing exists
    and it is patched instead.
    """

    def __init__(
        self,
        config: GoogleConfig,
        token: AccessToken,
        client: Optional[Any] = None,
        isolate_update_failures: bool = False,
        enable_metrics: bool = False,
        meter_provider: Optional[Any] = None,
    ):
        """
        Initialize the pusher.

        Args:
            config: Google configuration (merchant ID, API base URL)
            token: Bearer token reused for every request of the batch
            client: Optional preconfigured ``httpx.AsyncClient``
            isolate_update_failures: Record a failed post-conflict update as an
                error outcome instead of raising ``UpdateFallbackError``
            enable_metrics: Record push durations and outcome counts
            meter_provider: OpenTelemetry provider to record into instead of the global one
        """
        self.config = config
        self.token = token
        self.isolate_update_failures = isolate_update_failures
        self.duration_histogram = get_push_duration_histogram(enable_metrics, meter_provider)
        self.outcome_counter = get_outcome_counter(enable_metrics, meter_provider)

        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(base_url=config.content_api_base, timeout=30.0)
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
    def headers(self) -> dict:
        return {
            "Authorization": self.token.authorization,
            "Content-Type": "application/json",
        }

    @property
    def products_path(self) -> str:
        return f"{self.config.merchant_id}/products"

    def product_path(self, offer_id: str) -> str:
        """Content API REST ID: ``channel:contentLanguage:targetCountry:offerId``."""
        rest_id = f"{CHANNEL}:{CONTENT_LANGUAGE}:{TARGET_COUNTRY}:{offer_id}"
        return f"{self.products_path}/{quote(rest_id, safe=':')}"

    async def _insert(self, product: GMCProduct) -> None:
        response = await self.client.post(
            self.products_path,
            json=product.to_payload(channel=CHANNEL),
            headers=self.headers,
        )
        response.raise_for_status()

    async def _update(self, product: GMCProduct) -> None:
        response = await self.client.patch(
            self.product_path(product.offer_id),
            json=product.to_payload(),
            headers=self.headers,
        )
        response.raise_for_status()

    async def push(self, product: GMCProduct) -> PushOutcome:
        """
        Insert a product, falling back to an update on conflict.

        Args:
            product: Merchant Center product

        Returns:
            Outcome of the push

        Raises:
            UpdateFallbackError: If the update after a conflict fails and
                update failures are not isolated
        """
        start = perf_counter()
        try:
            await self._insert(product)
            outcome = PushOutcome(status="pushed", offer_id=product.offer_id, title=product.title)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 409:
                outcome = await self._update_after_conflict(product)
            else:
                outcome = self._failed(product, e)
        except httpx.RequestError as e:
            outcome = self._failed(product, e)

        self._record(outcome, start)
        return outcome

    async def _update_after_conflict(self, product: GMCProduct) -> PushOutcome:
        logger.debug("Offer %s already exists, updating", product.offer_id)
        try:
            await self._update(product)
        except httpx.HTTPError as e:
            if not self.isolate_update_failures:
                raise UpdateFallbackError(product.offer_id, product.title, _error_detail(e)) from e
            return self._failed(product, e)
        return PushOutcome(status="updated", offer_id=product.offer_id, title=product.title)

    def _failed(self, product: GMCProduct, error: httpx.HTTPError) -> PushOutcome:
        outcome = PushOutcome(
            status="error",
            offer_id=product.offer_id,
            title=product.title,
            detail=_error_detail(error),
        )
        logger.error(outcome.message)
        return outcome

    def _record(self, outcome: PushOutcome, start: float) -> None:
        duration_ms = (perf_counter() - start) * 1000
        if self.duration_histogram is not None:
            self.duration_histogram.record(duration_ms, attributes={"status": outcome.status})
        if self.outcome_counter is not None:
            self.outcome_counter.add(1, attributes={"status": outcome.status})
        if outcome.status != "error":
            logger.info(outcome.message, extra={"offer_id": outcome.offer_id, "duration_ms": duration_ms})

    async def push_all(self, products: Iterable[GMCProduct]) -> List[PushOutcome]:
        """Push products sequentially, returning outcomes in input order."""
        return [await self.push(product) for product in products]
