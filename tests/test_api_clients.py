"""Unit tests for the OpenExchangeRates and CoinMarketCap clients."""

from unittest.mock import patch

import pytest
import requests

from conftest import CRYPTO_URL, RATES_URL, make_response
from ratekeeper.core.exceptions import DataError, DecodeError, TransportError
from ratekeeper.parser_service.api_clients import (
    CoinMarketCapClient,
    FetchResult,
    OpenExchangeRatesClient,
)

GET_PATH = "ratekeeper.parser_service.api_clients.requests.get"


# ---------------------------------------------------------------------------
# OpenExchangeRates
# ---------------------------------------------------------------------------


class TestOpenExchangeRatesClient:
    def test_request_uses_app_id(self, config):
        payload = {"rates": {"USD": 1.0}}
        with patch(GET_PATH, return_value=make_response(payload)) as mock_get:
            OpenExchangeRatesClient(config).fetch()

        mock_get.assert_called_once_with(
            RATES_URL,
            params={"app_id": "test-key"},
            timeout=1.0,
        )

    def test_unsupported_codes_are_dropped(self, config, store):
        payload = {"rates": {"USD": 1.0, "BRL": 5.0, "XYZ": 9.9}}
        with patch(GET_PATH, return_value=make_response(payload)):
            result = OpenExchangeRatesClient(config).update(store)

        assert result == FetchResult(
            source="OpenExchangeRates",
            prices={"USD": 1.0, "BRL": 5.0},
            inverted=False,
        )
        assert store.get("USD") == 1.0
        assert store.get("BRL") == 5.0
        assert "XYZ" not in store

    def test_eth_is_left_to_crypto_feed(self, config, store):
        payload = {"rates": {"USD": 1.0, "ETH": 0.1}}
        with patch(GET_PATH, return_value=make_response(payload)):
            OpenExchangeRatesClient(config).update(store)

        assert "ETH" not in store

    def test_integer_rates_are_stored_as_float(self, config, store):
        payload = {"rates": {"USD": 1}}
        with patch(GET_PATH, return_value=make_response(payload)):
            OpenExchangeRatesClient(config).update(store)

        assert isinstance(store.get("USD"), float)

    def test_absent_codes_are_not_cleared(self, config, store):
        store.save("EUR", 0.9)
        payload = {"rates": {"USD": 1.0}}
        with patch(GET_PATH, return_value=make_response(payload)):
            OpenExchangeRatesClient(config).update(store)

        assert store.get("EUR") == 0.9

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_value_rejects_whole_payload(self, config, store, bad):
        # json.loads turns the NaN/Infinity literals into floats
        payload = {"rates": {"USD": bad, "BRL": 5.0}}
        with patch(GET_PATH, return_value=make_response(payload)):
            with pytest.raises(DecodeError):
                OpenExchangeRatesClient(config).update(store)

        assert store.get("USD") is None
        assert len(store) == 0

    def test_bad_value_rejects_whole_payload(self, config, store):
        payload = {"rates": {"USD": 1.0, "BRL": 5.0, "EUR": "oops"}}
        with patch(GET_PATH, return_value=make_response(payload)):
            with pytest.raises(DecodeError):
                OpenExchangeRatesClient(config).update(store)

        assert len(store) == 0

    def test_malformed_json(self, config, store):
        resp = make_response(ValueError("Expecting value"))
        with patch(GET_PATH, return_value=resp):
            with pytest.raises(DecodeError):
                OpenExchangeRatesClient(config).update(store)

        assert len(store) == 0

    @pytest.mark.parametrize("payload", [[], {"base": "USD"}, {"rates": [1.0]}])
    def test_unexpected_shape(self, config, payload):
        with patch(GET_PATH, return_value=make_response(payload)):
            with pytest.raises(DecodeError):
                OpenExchangeRatesClient(config).fetch()

    def test_network_error(self, config):
        with patch(GET_PATH, side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(TransportError, match="down"):
                OpenExchangeRatesClient(config).fetch()

    def test_non_2xx_status(self, config):
        resp = make_response({"error": True}, status=401, text="invalid_app_id")
        with patch(GET_PATH, return_value=resp):
            with pytest.raises(TransportError, match="401"):
                OpenExchangeRatesClient(config).fetch()


# ---------------------------------------------------------------------------
# CoinMarketCap
# ---------------------------------------------------------------------------


class TestCoinMarketCapClient:
    def test_request_has_no_credentials(self, config):
        payload = [{"price_usd": "2000.0"}]
        with patch(GET_PATH, return_value=make_response(payload)) as mock_get:
            CoinMarketCapClient(config).fetch()

        mock_get.assert_called_once_with(CRYPTO_URL, params=None, timeout=1.0)

    def test_price_is_inverted(self, config, store):
        payload = [{"price_usd": "2000.0"}]
        with patch(GET_PATH, return_value=make_response(payload)):
            result = CoinMarketCapClient(config).update(store)

        assert result.inverted is True
        assert store.get("ETH") == pytest.approx(0.0005)

    def test_first_element_is_used(self, config, store):
        payload = [{"price_usd": "2500.00"}, {"price_usd": "1.0"}]
        with patch(GET_PATH, return_value=make_response(payload)):
            CoinMarketCapClient(config).update(store)

        assert store.get("ETH") == pytest.approx(0.0004)

    def test_negative_price_is_accepted(self, config, store):
        payload = [{"price_usd": "-4.0"}]
        with patch(GET_PATH, return_value=make_response(payload)):
            CoinMarketCapClient(config).update(store)

        assert store.get("ETH") == pytest.approx(-0.25)

    @pytest.mark.parametrize("raw", ["0", "0.0", "abc", "nan", "inf"])
    def test_unusable_price(self, config, store, raw):
        payload = [{"price_usd": raw}]
        with patch(GET_PATH, return_value=make_response(payload)):
            with pytest.raises(DataError):
                CoinMarketCapClient(config).update(store)

        assert "ETH" not in store

    def test_empty_array(self, config, store):
        with patch(GET_PATH, return_value=make_response([])):
            with pytest.raises(DataError):
                CoinMarketCapClient(config).update(store)

        assert len(store) == 0

    @pytest.mark.parametrize(
        "payload",
        [{"price_usd": "1"}, ["2000"], [{"symbol": "ETH"}], [{"price_usd": 2000.0}]],
    )
    def test_unexpected_shape(self, config, payload):
        with patch(GET_PATH, return_value=make_response(payload)):
            with pytest.raises(DecodeError):
                CoinMarketCapClient(config).fetch()

    def test_timeout(self, config):
        with patch(GET_PATH, side_effect=requests.exceptions.Timeout()):
            with pytest.raises(TransportError):
                CoinMarketCapClient(config).fetch()
