"""
Tests for the batch payment request handler.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from btcsigner.errors import InsufficientFunds, PaymentError, ValidationError
from btcsigner.handler import UNKNOWN_ERROR, handle_pay_batch
from btcsigner.models import CommandResponse, PayBatchResult


class TestHandlePayBatch:
    def test_success(self, testnet_service, sample_request: dict[str, Any]) -> None:
        response = handle_pay_batch({"data": sample_request}, testnet_service)

        assert response.ok
        assert response.error is None
        body = response.to_dict()
        assert set(body) == {"result"}
        assert set(body["result"]) == {
            "txHex",
            "txId",
            "recipientCount",
            "fee",
            "totalAmount",
            "walletAddress",
        }
        assert body["result"]["fee"] == 705

    def test_validation_errors(self, testnet_service, monkeypatch) -> None:
        def must_not_run(*args, **kwargs):
            raise AssertionError("service called for invalid request")

        monkeypatch.setattr(testnet_service, "create_and_sign_transaction", must_not_run)
        response = handle_pay_batch(
            {"data": {"recipients": [], "utxos": [], "recommendedFees": {}}}, testnet_service
        )

        assert not response.ok
        assert response.error is not None
        assert "recipients must be a non-empty array" in response.error
        assert "utxos must be a non-empty array" in response.error

    @pytest.mark.parametrize("payload", [None, {}, {"data": None}, {"data": []}, "data"])
    def test_malformed_payload(self, testnet_service, payload: Any) -> None:
        response = handle_pay_batch(payload, testnet_service)
        assert response.error == ["data must be an object"]

    def test_amount_below_minimum(self, testnet_service, sample_request) -> None:
        sample_request["recipients"][0]["amount"] = 545
        response = handle_pay_batch({"data": sample_request}, testnet_service)
        assert response.error == ["recipients[0].amount is below the minimum payment threshold"]

    def test_invalid_address(self, testnet_service, sample_request) -> None:
        sample_request["recipients"][0]["address"] = "nope"
        response = handle_pay_batch({"data": sample_request}, testnet_service)
        assert response.error == ["Invalid Bitcoin address: nope"]

    def test_invalid_address_reported_before_funds(self, testnet_service, sample_request) -> None:
        sample_request["recipients"][0] = {"address": "tb1-malformed", "amount": 100_000}
        response = handle_pay_batch({"data": sample_request}, testnet_service)
        assert response.error == ["Invalid Bitcoin address: tb1-malformed"]

    def test_insufficient_funds(self, testnet_service, sample_request) -> None:
        sample_request["recipients"][0]["amount"] = 100_000
        response = handle_pay_batch({"data": sample_request}, testnet_service)
        assert response.error == ["Insufficient funds for batch payment"]
        assert response.result is None

    def test_unexpected_error_is_hidden(self, testnet_service, sample_request, monkeypatch) -> None:
        def explode(*args, **kwargs):
            raise RuntimeError("secret internal detail")

        monkeypatch.setattr(testnet_service, "create_and_sign_transaction", explode)
        response = handle_pay_batch({"data": sample_request}, testnet_service)

        assert response.error == [UNKNOWN_ERROR]
        assert "secret internal detail" not in json.dumps(response.to_dict())


class TestCommandResponse:
    def test_requires_exactly_one(self) -> None:
        with pytest.raises(ValueError):
            CommandResponse()

    def test_cannot_have_both(self) -> None:
        result = PayBatchResult(
            tx_hex="00",
            tx_id="11" * 32,
            recipient_count=1,
            fee=1,
            total_amount=546,
            wallet_address="tb1q",
        )
        with pytest.raises(ValueError):
            CommandResponse(result=result, error=["x"])


class TestPaymentErrors:
    def test_context_in_str(self) -> None:
        error = InsufficientFunds("Insufficient funds for batch payment", {"availableSat": 1})

        assert isinstance(error, PaymentError)
        assert error.code == 1070
        assert error.message == "Insufficient funds for batch payment"
        assert str(error) == "Insufficient funds for batch payment (availableSat=1)"

    def test_validation_error_keeps_messages(self) -> None:
        error = ValidationError(["a must be an object", "b must be an integer"])

        assert error.errors == ["a must be an object", "b must be an integer"]
        assert error.context == {"errors": error.errors}
        assert str(error).startswith("Invalid payment request")
