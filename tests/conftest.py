"""
Test configuration for btcsigner tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from btcsigner.models import NetworkType
from btcsigner.service import BitcoinService
from btcsigner.wallet.service import Wallet, initialize_wallet

# BIP173 test vector, P2WPKH on testnet
TESTNET_RECIPIENT = "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"
# BIP173 test vector, P2WSH on testnet
TESTNET_P2WSH_RECIPIENT = "tb1qrp33g0q5c5txsp9arysrx4k6zdkfs4nce4xj0gdcccefvpysxf3q0sl5k7"
MAINNET_RECIPIENT = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"

SAMPLE_TXID = "a" * 64


@pytest.fixture(scope="session")
def sample_mnemonic() -> str:
    """Test mnemonic (not for production use!)."""
    return (
        "abandon abandon abandon abandon abandon abandon "
        "abandon abandon abandon abandon abandon about"
    )


@pytest.fixture(scope="session")
def testnet_wallet(sample_mnemonic: str) -> Wallet:
    return initialize_wallet(sample_mnemonic, NetworkType.TESTNET)


@pytest.fixture(scope="session")
def mainnet_wallet(sample_mnemonic: str) -> Wallet:
    return initialize_wallet(sample_mnemonic, NetworkType.MAINNET)


@pytest.fixture(scope="session")
def testnet_service(sample_mnemonic: str) -> BitcoinService:
    return BitcoinService(sample_mnemonic, NetworkType.TESTNET)


@pytest.fixture
def sample_request() -> dict[str, Any]:
    """50000 sat in, 10000 sat out at 5 sat/vB."""
    return {
        "recipients": [{"address": TESTNET_RECIPIENT, "amount": 10_000}],
        "utxos": [{"txid": SAMPLE_TXID, "vout": 0, "value": 50_000, "confirmations": 3}],
        "recommendedFees": {
            "fastestFee": 10,
            "halfHourFee": 5,
            "hourFee": 2,
            "minimumFee": 1,
        },
    }
