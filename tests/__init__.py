"""Test suite for the tri-source macro indicator pipeline.

This package contains tests for the pipeline including:
- Unit tests for individual modules
- Integration tests for complete ingestion and validation workflows
"""

__version__ = "1.0.0"
