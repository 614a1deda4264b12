"""Validation package for the merged tri-source indicator store."""

import logging

logger = logging.getLogger(__name__)


def init_validation_package() -> None:
    """Initialize the validation package and log package details."""
    logger.debug("🔎 Initializing Macro Indicator Validation Package")
    logger.debug("   📏 Checks: counts, ranges, cross-source, coverage, anomalies, mappings")


init_validation_package()
