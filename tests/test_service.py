"""
Tests for BitcoinService.
"""

from __future__ import annotations

from typing import Any

import pytest
from conftest import TESTNET_RECIPIENT

from btcsigner.errors import InsufficientFunds, InvalidAddress, InvalidMnemonic, PaymentError
from btcsigner.models import NetworkType, PayBatchParams
from btcsigner.service import BitcoinService
from btcsigner.tx_builder import decode_transaction_outputs
from btcsigner.wallet.signing import deserialize_transaction


class TestBitcoinServiceInit:
    def test_wallet_initialized_once(self, testnet_service: BitcoinService, testnet_wallet) -> None:
        assert testnet_service.network == NetworkType.TESTNET
        assert testnet_service.wallet_address == testnet_wallet.address

    def test_invalid_mnemonic(self) -> None:
        with pytest.raises(InvalidMnemonic):
            BitcoinService("correct horse battery staple", NetworkType.TESTNET)


class TestCreateAndSignTransaction:
    def test_scenario(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        result = testnet_service.create_and_sign_transaction(
            PayBatchParams.model_validate(sample_request)
        )

        assert result.fee == 705
        assert result.total_amount == 10_000
        assert result.recipient_count == 1
        assert result.wallet_address == testnet_service.wallet_address
        assert decode_transaction_outputs(result.tx_hex, NetworkType.TESTNET) == [
            (TESTNET_RECIPIENT, 10_000),
            (testnet_service.wallet_address, 39_295),
        ]
        assert deserialize_transaction(bytes.fromhex(result.tx_hex)).txid() == result.tx_id

    def test_satoshis_accounted_for(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        sample_request["recipients"] = [
            {"address": TESTNET_RECIPIENT, "amount": 1_000 * (i + 1)} for i in range(5)
        ]
        sample_request["utxos"].append(
            {"txid": "b" * 64, "vout": 2, "value": 7_000, "confirmations": 0}
        )
        params = PayBatchParams.model_validate(sample_request)

        result = testnet_service.create_and_sign_transaction(params)
        outputs = decode_transaction_outputs(result.tx_hex, NetworkType.TESTNET)

        assert result.total_amount == 15_000
        assert params.total_input == sum(value for _, value in outputs) + result.fee

    def test_dust_change_output_dropped(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        # 705 sat fee with change output would leave 200 sats of change
        sample_request["utxos"][0]["value"] = 10_905
        result = testnet_service.create_and_sign_transaction(
            PayBatchParams.model_validate(sample_request)
        )

        outputs = decode_transaction_outputs(result.tx_hex, NetworkType.TESTNET)
        assert outputs == [(TESTNET_RECIPIENT, 10_000)]
        # size-model fee for a single output; the other 355 sats go to the miner
        assert result.fee == 550

    def test_insufficient_funds(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        sample_request["recipients"][0]["amount"] = 100_000
        with pytest.raises(InsufficientFunds) as exc_info:
            testnet_service.create_and_sign_transaction(
                PayBatchParams.model_validate(sample_request)
            )

        assert exc_info.value.context["availableSat"] == 50_000
        assert exc_info.value.context["requiredSat"] == 100_705

    def test_invalid_address(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        sample_request["recipients"][0]["address"] = "tb1-malformed"
        with pytest.raises(InvalidAddress):
            testnet_service.create_and_sign_transaction(
                PayBatchParams.model_validate(sample_request)
            )

    @pytest.mark.parametrize(
        "address", ["tb1-malformed", "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"]
    )
    def test_invalid_address_wins_over_insufficient_funds(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any], address: str
    ) -> None:
        sample_request["recipients"][0] = {"address": address, "amount": 100_000}
        with pytest.raises(InvalidAddress, match="Invalid Bitcoin address"):
            testnet_service.create_and_sign_transaction(
                PayBatchParams.model_validate(sample_request)
            )

    def test_bad_address_after_good_ones(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any]
    ) -> None:
        sample_request["recipients"] = [
            {"address": TESTNET_RECIPIENT, "amount": 1_000},
            {"address": "nope", "amount": 1_000_000},
        ]
        with pytest.raises(InvalidAddress, match="nope"):
            testnet_service.create_and_sign_transaction(
                PayBatchParams.model_validate(sample_request)
            )

    def test_unexpected_error_is_wrapped(
        self, testnet_service: BitcoinService, sample_request: dict[str, Any], monkeypatch
    ) -> None:
        def explode(*args, **kwargs):
            raise KeyError("internal")

        monkeypatch.setattr("btcsigner.service.build_transaction", explode)
        with pytest.raises(PaymentError) as exc_info:
            testnet_service.create_and_sign_transaction(
                PayBatchParams.model_validate(sample_request)
            )

        assert type(exc_info.value) is PaymentError
        assert exc_info.value.message == "Batch payment failed"
        assert isinstance(exc_info.value.__cause__, KeyError)
