"""Marketplace order integration runner."""

import logging

from awt.feed.log_feed import BundleFetcher, ProcessLogFeed
from awt.models.integration import IntegrationRequest
from awt.models.logs import XMLIntegrationResult
from awt.models.product import build_request
from awt.services.jobs import JobFeedService

logger = logging.getLogger(__name__)


class MarketplaceIntegrationService(JobFeedService):
    """Integrates marketplace orders and follows the latest one until it finishes."""

    def bundle_source(self) -> BundleFetcher:
        return self.client.fetch_integration_bundle

    def launch(self, conta: str, marketplace: str, num_pedido: str) -> tuple[XMLIntegrationResult, ProcessLogFeed]:
        """Integrate an order and open its feed.

        Returns:
            The integration result and a feed keyed by the order number

        Raises:
            ValidationError: If a field is blank or names an unknown account or marketplace
        """
        request = build_request(IntegrationRequest, conta=conta, marketplace=marketplace, num_pedido=num_pedido)
        self.stop()

        result = self.client.execute_integration(request)
        logger.info(
            f"Order {request.num_pedido} on {request.conta}/{request.marketplace}: "
            f"{result.success_count} ok, {result.error_count} failed"
        )
        return result, self.open_feed(request.num_pedido, result)
