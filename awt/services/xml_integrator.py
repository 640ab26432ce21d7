"""XML integration job runner."""

import logging

from awt.feed.log_feed import BundleFetcher, ProcessLogFeed
from awt.models.logs import XMLIntegrationResult
from awt.services.jobs import JobFeedService, required

logger = logging.getLogger(__name__)


class XMLIntegrationService(JobFeedService):
    """Runs XML integrations and keeps one live log feed for the latest job."""

    def bundle_source(self) -> BundleFetcher:
        return self.client.fetch_job_log_bundle

    def launch(self, num_pedido: str) -> tuple[XMLIntegrationResult, ProcessLogFeed]:
        """Run the integration for an order.

        The previous job's feed is stopped first. The returned feed replays
        the log bundle embedded in the result, or polls for it when the
        backend has not produced one yet.

        Args:
            num_pedido: Order number to integrate

        Returns:
            The integration result and the job's log feed

        Raises:
            ValidationError: If the order number is blank
        """
        num_pedido = required("num_pedido", num_pedido, "Order number is required")
        self.stop()

        result = self.client.process_xml_integration(num_pedido)
        logger.info(
            f"Order {num_pedido}: {result.total_processed} processed, "
            f"{result.success_count} ok, {result.error_count} failed"
        )

        # The backend keys job logs by order number
        return result, self.open_feed(num_pedido, result)
