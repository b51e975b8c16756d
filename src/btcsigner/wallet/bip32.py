"""
BIP32 HD key derivation for the signing wallet.
Only private derivation is needed: the wallet holds the seed.
"""

from __future__ import annotations

import hashlib
import hmac

from coincurve import PrivateKey, PublicKey

# secp256k1 curve order
SECP256K1_N = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)

HARDENED_OFFSET = 0x80000000


def parse_path(path: str) -> list[int]:
    """
    Parse a derivation path like "m/84'/1'/0'/0/0" into child indexes.
    Both ' and h mark hardened levels.
    """
    parts = path.split("/")
    if parts[0] != "m":
        raise ValueError(f"Path must start with 'm': {path}")

    indexes = []
    for part in parts[1:]:
        if not part:
            continue
        hardened = part.endswith(("'", "h"))
        index = int(part.rstrip("'h"))
        if not 0 <= index < HARDENED_OFFSET:
            raise ValueError(f"Path index out of range: {part}")
        indexes.append(index + HARDENED_OFFSET if hardened else index)
    return indexes


class HDKey:
    """Extended private key (BIP32)."""

    def __init__(self, private_key: PrivateKey, chain_code: bytes, depth: int = 0):
        self._private_key = private_key
        self.chain_code = chain_code
        self.depth = depth

    @property
    def private_key(self) -> PrivateKey:
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        return self._private_key.public_key

    @classmethod
    def from_seed(cls, seed: bytes) -> HDKey:
        """Create master key from a BIP39 seed"""
        digest = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        return cls(PrivateKey(digest[:32]), digest[32:], depth=0)

    def derive(self, path: str) -> HDKey:
        key = self
        for index in parse_path(path):
            key = key.child(index)
        return key

    def child(self, index: int) -> HDKey:
        if index >= HARDENED_OFFSET:
            data = b"\x00" + self._private_key.secret + index.to_bytes(4, "big")
        else:
            data = self.public_key_bytes() + index.to_bytes(4, "big")

        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        tweak = int.from_bytes(digest[:32], "big")
        if tweak >= SECP256K1_N:
            raise ValueError(f"Invalid child key at index {index}")

        child_int = (int.from_bytes(self._private_key.secret, "big") + tweak) % SECP256K1_N
        if child_int == 0:
            raise ValueError(f"Invalid child key at index {index}")

        return HDKey(PrivateKey(child_int.to_bytes(32, "big")), digest[32:], self.depth + 1)

    def public_key_bytes(self) -> bytes:
        """Compressed SEC public key (33 bytes)"""
        return self.public_key.format(compressed=True)
