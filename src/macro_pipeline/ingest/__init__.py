"""Ingest package for the World Bank, OECD and IMF source pipelines.

All four sources share one streaming pipeline; what differs between them
lives in a ``SourceProfile`` selected by name.
"""

import logging

logger = logging.getLogger(__name__)


def init_ingest_package() -> None:
    """Initialize the ingest package and log package details."""
    logger.debug("🚢 Initializing Macro Indicator Ingest Package")
    logger.debug("   🔍 Sources: WB (CSV, API), OECD (CSV), IMF (CSV)")


init_ingest_package()
