"""Macro indicator pipeline package.

This package ingests World Bank, OECD and IMF indicator data, maps every
source-native code onto unified country and indicator identities, persists
observations per source and validates the merged store.
"""

import os

from macro_pipeline.logging_config import create_logger

__version__ = "1.0.0"

logger = create_logger(__name__)


def init_pipeline_package() -> None:
    """Initialize the package and log package details."""
    logger.debug("🚀 Initializing Macro Indicator Pipeline Package")
    logger.debug("   📦 Modules: registry, ingest, persistence, validation")

    package_path = os.path.dirname(os.path.abspath(__file__))
    logger.debug(f"   📂 Package Path: {package_path}")


init_pipeline_package()
