"""Job log feed module for AWT."""

from awt.feed.log_feed import BundleFetcher, FeedListener, FeedMode, ProcessLogFeed
from awt.feed.polling import PollingTask

__all__ = [
    "BundleFetcher",
    "FeedListener",
    "FeedMode",
    "PollingTask",
    "ProcessLogFeed",
]
