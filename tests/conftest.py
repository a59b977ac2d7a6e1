"""Fixtures: settings overrides, network stubs."""

from unittest.mock import patch

import pytest
import requests

from app.config import settings


@pytest.fixture(autouse=True)
def unconfigured_answer_engine(monkeypatch):
    """Tests run without a Perplexity key unless they set one explicitly."""
    monkeypatch.setattr(settings, "perplexity_api_key", None)


@pytest.fixture
def offline():
    """Every page fetch fails as if DNS resolution did."""
    with patch(
        "services.crawler.requests.get",
        side_effect=requests.ConnectionError("Name or service not known"),
    ) as mock_get:
        yield mock_get
