"""
Single-key signing wallet derived from a BIP39 mnemonic.

Derivation path: m/84'/{coin_type}'/0'/0/0
- coin_type: 0 (mainnet), 1 (testnet)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from coincurve import PrivateKey
from loguru import logger
from mnemonic import Mnemonic

from btcsigner.constants import DERIVATION_PATHS
from btcsigner.errors import AddressGenerationFailed, InvalidMnemonic, PaymentError
from btcsigner.models import NetworkType
from btcsigner.wallet.address import pubkey_to_p2wpkh_address, pubkey_to_p2wpkh_script
from btcsigner.wallet.bip32 import HDKey


@dataclass(frozen=True)
class Wallet:
    """
    Immutable key material for one network.
    The private key is excluded from repr and comparison.
    """

    network: NetworkType
    derivation_path: str
    public_key: bytes
    address: str
    private_key: PrivateKey = field(repr=False, compare=False)

    @property
    def script_pubkey(self) -> bytes:
        return pubkey_to_p2wpkh_script(self.public_key)


def validate_mnemonic(mnemonic: str) -> bool:
    return Mnemonic("english").check(mnemonic)


def generate_mnemonic(strength: int = 128) -> str:
    """Generate a BIP39 mnemonic (128 bits -> 12 words, 256 bits -> 24 words)."""
    return Mnemonic("english").generate(strength=strength)


def initialize_wallet(mnemonic: str, network: NetworkType) -> Wallet:
    """
    Derive the signing wallet from a mnemonic.

    Raises:
        InvalidMnemonic: If the phrase fails the BIP39 wordlist/checksum check
        AddressGenerationFailed: If no address could be encoded for the key
        PaymentError: On any other derivation failure
    """
    network = NetworkType(network)
    normalized = " ".join(mnemonic.split()) if isinstance(mnemonic, str) else ""
    if not normalized or not validate_mnemonic(normalized):
        raise InvalidMnemonic("Invalid mnemonic phrase")

    path = DERIVATION_PATHS[network.value]
    try:
        seed = Mnemonic.to_seed(normalized)
        key = HDKey.from_seed(seed).derive(path)
        public_key = key.public_key_bytes()
        address = pubkey_to_p2wpkh_address(public_key, network)
    except Exception as e:
        raise PaymentError(f"Failed to initialize wallet: {e}") from e

    if not address:
        raise AddressGenerationFailed("Failed to generate wallet address")

    logger.info(f"Initialized {network.value} wallet at {path}: {address}")
    return Wallet(
        network=network,
        derivation_path=path,
        public_key=public_key,
        address=address,
        private_key=key.private_key,
    )
