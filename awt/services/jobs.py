"""Shared plumbing for services that follow a backend job through a log feed."""

from typing import Any

from awt.api.client import PortalAPIClient
from awt.core.constants import PollingConstants
from awt.exceptions import ValidationError
from awt.feed.log_feed import BundleFetcher, ProcessLogFeed
from awt.models.logs import XMLIntegrationResult


def required(field: str, value: str | None, message: str) -> str:
    """Trim a required identifier, rejecting blanks."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(field, value, message)
    return value


class JobFeedService:
    """Keeps one live log feed for the latest job launched or followed."""

    def __init__(
        self,
        client: PortalAPIClient,
        poll_interval: float = PollingConstants.INTERVAL_SECONDS,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.feed: ProcessLogFeed | None = None

    def __enter__(self) -> "JobFeedService":
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def bundle_source(self) -> BundleFetcher:
        raise NotImplementedError

    def open_feed(self, job_id: str, result: XMLIntegrationResult | None = None) -> ProcessLogFeed:
        """Replace the current feed with one for ``job_id``.

        The feed replays the log bundle embedded in ``result`` when there is
        one, and polls the backend for it otherwise.
        """
        self.stop()
        feed = ProcessLogFeed(job_id, self.bundle_source(), self.poll_interval)
        if result is not None and result.has_log_bundle:
            feed.deliver(result.log_events(job_id))
        else:
            feed.start()

        self.feed = feed
        return feed

    def follow(self, job_id: str) -> ProcessLogFeed:
        """Open a polling feed for a job that is already running."""
        return self.open_feed(required("process_id", job_id, "Process id is required"))

    def stop(self) -> None:
        if self.feed is not None:
            self.feed.stop()
