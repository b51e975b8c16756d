"""
Bitcoin constants for batch payments.

Size model is the native segwit single-key spend (P2WPKH in, P2WPKH out).
"""

from __future__ import annotations

# Standard P2PKH dust limit in Bitcoin Core; smallest payment we accept
STANDARD_DUST_LIMIT = 546  # satoshis
MIN_PAYMENT_SAT = STANDARD_DUST_LIMIT

# P2WPKH dust limit; change at or below this is not worth an output
CHANGE_DUST_LIMIT_SAT = 294  # satoshis

# Virtual size estimates (vbytes)
INPUT_VBYTES = 68
OUTPUT_VBYTES = 31
OVERHEAD_VBYTES = 11

# Used when the fee estimates carry neither halfHourFee nor hourFee (sat/vB)
FALLBACK_FEE_RATES: dict[str, int] = {
    "mainnet": 5,
    "testnet": 1,
}

# BIP84 external chain, first index
DERIVATION_PATHS: dict[str, str] = {
    "mainnet": "m/84'/0'/0'/0/0",
    "testnet": "m/84'/1'/0'/0/0",
}

BECH32_HRP: dict[str, str] = {
    "mainnet": "bc",
    "testnet": "tb",
}

# Base58check version bytes: (P2PKH, P2SH)
BASE58_VERSIONS: dict[str, tuple[int, int]] = {
    "mainnet": (0x00, 0x05),
    "testnet": (0x6F, 0xC4),
}

TX_VERSION = 2
SEQUENCE_FINAL = 0xFFFFFFFF
SIGHASH_ALL = 1
