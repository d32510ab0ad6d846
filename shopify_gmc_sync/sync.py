"""Bundle sync: Shopify fetch, GMC mapping and upsert in one run."""

import logging
from typing import List, Optional, Any, Tuple

from .auth import TokenProvider, GoogleRefreshTokenProvider
from .config import SyncConfig
from .exceptions import MissingVariantError
from .fetcher import ShopifyBundleFetcher
from .mapper import build_gmc_product
from .models.gmc_models import GMCProduct, PushOutcome, SyncResult
from .models.shopify_models import ShopifyProduct
from .pusher import GMCUpsertPusher

logger = logging.getLogger(__name__)

NO_BUNDLES_MESSAGE = "No bundles found with the specified tag."
DONE_MESSAGE = "Done syncing bundles!"


class BundleSync:
    """
    One sync run. Nothing is kept between runs.

    Steps run strictly in sequence:
    - Fetch every Shopify product tagged with the bundle tag
    - Map each to a Merchant Center product (first variant only)
    - Insert each, updating on conflict
    """

    def __init__(
        self,
        config: SyncConfig,
        token_provider: Optional[TokenProvider] = None,
        shopify_client: Optional[Any] = None,
        gmc_client: Optional[Any] = None,
    ):
        """
        Initialize the sync.

        Args:
            config: Sync configuration
            token_provider: Source of the Google access token
            shopify_client: Optional HTTP client for the Shopify Admin API
            gmc_client: Optional HTTP client for the Content API
        """
        self.config = config
        self.token_provider = token_provider or GoogleRefreshTokenProvider(config.google)
        self.shopify_client = shopify_client
        self.gmc_client = gmc_client

    async def fetch_bundles(self) -> List[ShopifyProduct]:
        async with ShopifyBundleFetcher(self.config.shopify, client=self.shopify_client) as fetcher:
            return await fetcher.fetch_bundles(self.config.shopify.bundle_tag)

    def _map(self, product: ShopifyProduct) -> Tuple[Optional[GMCProduct], Optional[PushOutcome]]:
        try:
            return build_gmc_product(product, self.config.shopify.store_domain), None
        except MissingVariantError as e:
            logger.error("Skipping %s: %s", product.title, e)
            return None, PushOutcome(
                status="error",
                offer_id=None,
                title=product.title,
                detail=str(e),
            )

    async def preview(self) -> Tuple[List[GMCProduct], List[PushOutcome]]:
        """
        Fetch and map bundles without touching Merchant Center.

        Returns:
            Mapped products and the mapping failures
        """
        products: List[GMCProduct] = []
        errors: List[PushOutcome] = []
        for bundle in await self.fetch_bundles():
            gmc_product, error = self._map(bundle)
            if error:
                errors.append(error)
            else:
                products.append(gmc_product)
        return products, errors

    async def run(self) -> SyncResult:
        """
        Run the sync once.

        Returns:
            Matched count and per-bundle outcomes in catalog order

        Raises:
            FetchError: If Shopify cannot be read
            TokenError: If no Google access token can be obtained
            UpdateFallbackError: If an update after a conflict fails and
                update failures are not isolated
        """
        bundles = await self.fetch_bundles()
        if not bundles:
            logger.info(NO_BUNDLES_MESSAGE)
            return SyncResult(matched=0)

        token = await self.token_provider.acquire_access_token()
        outcomes: List[PushOutcome] = []

        async with GMCUpsertPusher(
            self.config.google,
            token,
            client=self.gmc_client,
            isolate_update_failures=self.config.isolate_update_failures,
            enable_metrics=self.config.enable_metrics,
        ) as pusher:
            for bundle in bundles:
                gmc_product, error = self._map(bundle)
                if error:
                    outcomes.append(error)
                    continue
                outcomes.append(await pusher.push(gmc_product))

        result = SyncResult(matched=len(bundles), outcomes=outcomes)
        logger.info(
            "%s %d bundles, %d failed",
            DONE_MESSAGE, result.matched, result.failed,
        )
        return result
