"""
Pytest configuration for unit tests.

Provides fixtures that apply to all unit tests. Charts render with the
non-interactive Agg backend.
"""

from typing import Dict

import matplotlib
matplotlib.use("Agg")

import pytest

from re3data_explorer.config import AppConfig
from registry_documents import (
    DETAIL_TEMPLATE,
    LISTING_URL,
    build_detail_xml,
    build_listing_xml,
    detail_url,
)


@pytest.fixture
def app_config() -> AppConfig:
    """AppConfig pointing at the fake registry endpoints."""
    return AppConfig(
        registry_listing_url=LISTING_URL,
        registry_detail_url_template=DETAIL_TEMPLATE,
        request_timeout=5,
        output_dir="data/test-output",
        multivalue_delimiter=" || "
    )


@pytest.fixture
def scenario_a_documents() -> Dict[str, bytes]:
    """Two repositories: X1 without certificate, X2 certified."""
    return {
        LISTING_URL: build_listing_xml(["X1", "X2"]),
        detail_url("X1"): build_detail_xml(
            "X1",
            name="Institutional Archive",
            types=["institutional", "disciplinary"]
        ),
        detail_url("X2"): build_detail_xml(
            "X2",
            name="Other Archive",
            types=["other"],
            certificates=["CoreTrustSeal"]
        ),
    }
