"""Shared fixtures for ratekeeper tests."""

from unittest.mock import Mock

import pytest

from ratekeeper.core.store import PriceStore
from ratekeeper.parser_service.config import ParserConfig

RATES_URL = "https://rates.test/api/latest.json"
CRYPTO_URL = "https://crypto.test/v1/ticker/ethereum/"


def make_response(payload=None, status: int = 200, text: str = "") -> Mock:
    """Build a requests.Response stand-in returning *payload* from json()."""
    resp = Mock()
    resp.status_code = status
    resp.text = text
    if isinstance(payload, Exception):
        resp.json = Mock(side_effect=payload)
    else:
        resp.json = Mock(return_value=payload)
    return resp


@pytest.fixture
def store() -> PriceStore:
    return PriceStore()


@pytest.fixture
def config() -> ParserConfig:
    return ParserConfig(
        OPENEXCHANGERATES_APP_ID="test-key",
        rates_url=RATES_URL,
        crypto_url=CRYPTO_URL,
        update_interval_ms=0,
        request_timeout=1.0,
    )
