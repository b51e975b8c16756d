"""
Bitcoin address utilities.

Supports decoding to scriptPubKey, checked against the configured network:
- P2WPKH / P2WSH (bech32, witness v0)
- P2PKH / P2SH (base58check)
"""

from __future__ import annotations

import hashlib

import base58
import bech32

from btcsigner.constants import BASE58_VERSIONS, BECH32_HRP
from btcsigner.models import NetworkType


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    return hashlib.new("ripemd160", hashlib.sha256(data).digest()).digest()


def pubkey_to_p2wpkh_script(pubkey: bytes) -> bytes:
    """P2WPKH scriptPubKey: OP_0 <20-byte-pubkeyhash>"""
    return bytes([0x00, 0x14]) + hash160(pubkey)


def pubkey_to_p2wpkh_address(pubkey: bytes, network: NetworkType) -> str | None:
    """
    BIP173 address for a compressed public key.
    Returns None if the encoder rejects the program.
    """
    if len(pubkey) != 33:
        raise ValueError(f"Invalid compressed pubkey length: {len(pubkey)}")
    return bech32.encode(BECH32_HRP[NetworkType(network).value], 0, hash160(pubkey))


def address_to_scriptpubkey(address: str, network: NetworkType) -> bytes:
    """
    Convert an address to its scriptPubKey.

    Raises:
        ValueError: If the address is malformed or belongs to another network
    """
    network = NetworkType(network)
    hrp = BECH32_HRP[network.value]

    if address.lower().startswith(hrp + "1"):
        witver, witprog = bech32.decode(hrp, address)
        if witver is None or witprog is None:
            raise ValueError(f"Invalid bech32 address: {address}")

        program = bytes(witprog)
        if witver == 0 and len(program) in (20, 32):
            return bytes([0x00, len(program)]) + program
        raise ValueError(f"Unsupported witness program v{witver} in {address}")

    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise ValueError(f"Invalid address for {network.value}: {address}") from e

    if len(decoded) != 21:
        raise ValueError(f"Invalid base58 payload length in {address}")

    p2pkh_version, p2sh_version = BASE58_VERSIONS[network.value]
    version, payload = decoded[0], decoded[1:]
    if version == p2pkh_version:
        # OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG
        return bytes([0x76, 0xA9, 0x14]) + payload + bytes([0x88, 0xAC])
    if version == p2sh_version:
        # OP_HASH160 <20-byte-scripthash> OP_EQUAL
        return bytes([0xA9, 0x14]) + payload + bytes([0x87])

    raise ValueError(f"Address version {version:#04x} is not valid on {network.value}")


def scriptpubkey_to_address(scriptpubkey: bytes, network: NetworkType) -> str:
    """Inverse of address_to_scriptpubkey for the standard output types."""
    network = NetworkType(network)
    hrp = BECH32_HRP[network.value]
    p2pkh_version, p2sh_version = BASE58_VERSIONS[network.value]

    result: str | None = None
    if (
        len(scriptpubkey) in (22, 34)
        and scriptpubkey[0] == 0x00
        and scriptpubkey[1] == len(scriptpubkey) - 2
    ):
        result = bech32.encode(hrp, 0, scriptpubkey[2:])
    elif (
        len(scriptpubkey) == 25
        and scriptpubkey[:3] == bytes([0x76, 0xA9, 0x14])
        and scriptpubkey[23:] == bytes([0x88, 0xAC])
    ):
        result = base58.b58encode_check(bytes([p2pkh_version]) + scriptpubkey[3:23]).decode()
    elif (
        len(scriptpubkey) == 23
        and scriptpubkey[:2] == bytes([0xA9, 0x14])
        and scriptpubkey[22] == 0x87
    ):
        result = base58.b58encode_check(bytes([p2sh_version]) + scriptpubkey[2:22]).decode()

    if result is None:
        raise ValueError(f"Unsupported scriptPubKey: {scriptpubkey.hex()}")
    return result
