"""
Bitcoin transaction serialization and BIP143 signing for P2WPKH inputs.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field

from coincurve import PrivateKey

from btcsigner.constants import SEQUENCE_FINAL, SIGHASH_ALL, TX_VERSION
from btcsigner.wallet.address import hash160


class TransactionSigningError(Exception):
    pass


@dataclass
class TxInput:
    """Transaction input. txid is hex in display (big-endian) order."""

    txid: str
    vout: int
    value: int = 0
    script_pubkey: bytes = b""
    sequence: int = SEQUENCE_FINAL
    witness: list[bytes] = field(default_factory=list)

    def outpoint(self) -> bytes:
        return bytes.fromhex(self.txid)[::-1] + struct.pack("<I", self.vout)


@dataclass
class TxOutput:
    value: int
    script: bytes

    def serialize(self) -> bytes:
        return struct.pack("<Q", self.value) + encode_varint(len(self.script)) + self.script


@dataclass
class Transaction:
    inputs: list[TxInput]
    outputs: list[TxOutput]
    version: int = TX_VERSION
    locktime: int = 0

    @property
    def has_witness(self) -> bool:
        return any(inp.witness for inp in self.inputs)

    def serialize(self, include_witness: bool = True) -> bytes:
        """Serialize; witness data (BIP144) only if present and requested."""
        segwit = include_witness and self.has_witness

        result = struct.pack("<I", self.version)
        if segwit:
            result += bytes([0x00, 0x01])

        result += encode_varint(len(self.inputs))
        for inp in self.inputs:
            # scriptSig is always empty for native segwit spends
            result += inp.outpoint() + b"\x00" + struct.pack("<I", inp.sequence)

        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()

        if segwit:
            for inp in self.inputs:
                result += encode_varint(len(inp.witness))
                for item in inp.witness:
                    result += encode_varint(len(item)) + item

        result += struct.pack("<I", self.locktime)
        return result

    def txid(self) -> str:
        """Double SHA256 of the non-witness serialization, byte-reversed."""
        return hash256(self.serialize(include_witness=False))[::-1].hex()


def hash256(data: bytes) -> bytes:
    """SHA256d, used for txids and BIP143 digests."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


# CompactSize prefixes and the struct format of the value that follows
_VARINT_WIDTHS = {0xFD: "<H", 0xFE: "<I", 0xFF: "<Q"}


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Decode a CompactSize integer at offset. Returns (value, next offset)."""
    prefix = data[offset]
    fmt = _VARINT_WIDTHS.get(prefix)
    if fmt is None:
        return prefix, offset + 1
    (value,) = struct.unpack_from(fmt, data, offset + 1)
    return value, offset + 1 + struct.calcsize(fmt)


def encode_varint(value: int) -> bytes:
    if value < 0xFD:
        return struct.pack("<B", value)
    for prefix, fmt in _VARINT_WIDTHS.items():
        if value < 1 << (8 * struct.calcsize(fmt)):
            return struct.pack("<B", prefix) + struct.pack(fmt, value)
    raise ValueError(f"Value too large for a varint: {value}")


class _Cursor:
    """Forward-only reader over a raw transaction."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def read(self, size: int) -> bytes:
        chunk = self.data[self.pos : self.pos + size]
        if len(chunk) != size:
            raise ValueError(f"Truncated data at byte {self.pos}")
        self.pos += size
        return chunk

    def read_uint(self, fmt: str) -> int:
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))[0]

    def read_varint(self) -> int:
        value, self.pos = read_varint(self.data, self.pos)
        return value

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_varint())

    def peek(self, size: int) -> bytes:
        return self.data[self.pos : self.pos + size]


def deserialize_transaction(tx_bytes: bytes) -> Transaction:
    """
    Parse a raw transaction, with or without BIP144 witness data.

    Raises:
        TransactionSigningError: Malformed, truncated or with trailing bytes
    """
    cursor = _Cursor(tx_bytes)
    try:
        version = cursor.read_uint("<I")
        has_witness = cursor.peek(2) == b"\x00\x01"
        if has_witness:
            cursor.read(2)

        inputs = []
        for _ in range(cursor.read_varint()):
            prev_txid = cursor.read(32)[::-1].hex()
            prev_vout = cursor.read_uint("<I")
            cursor.read_var_bytes()  # scriptSig
            inputs.append(
                TxInput(txid=prev_txid, vout=prev_vout, sequence=cursor.read_uint("<I"))
            )

        outputs = []
        for _ in range(cursor.read_varint()):
            amount = cursor.read_uint("<Q")
            outputs.append(TxOutput(value=amount, script=cursor.read_var_bytes()))

        if has_witness:
            for inp in inputs:
                inp.witness = [cursor.read_var_bytes() for _ in range(cursor.read_varint())]

        locktime = cursor.read_uint("<I")
        leftover = len(tx_bytes) - cursor.pos
        if leftover:
            raise ValueError(f"{leftover} trailing bytes")
    except (ValueError, IndexError, struct.error) as e:
        raise TransactionSigningError(f"Malformed transaction: {e}") from e

    return Transaction(inputs=inputs, outputs=outputs, version=version, locktime=locktime)


def compute_sighash_segwit(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """BIP143 digest for SIGHASH_ALL over every input and output."""
    if not 0 <= input_index < len(tx.inputs):
        raise TransactionSigningError(
            f"Input index {input_index} out of range for {len(tx.inputs)} inputs"
        )

    spent = tx.inputs[input_index]
    prevouts = b"".join(inp.outpoint() for inp in tx.inputs)
    sequences = b"".join(struct.pack("<I", inp.sequence) for inp in tx.inputs)
    outputs = b"".join(out.serialize() for out in tx.outputs)

    return hash256(
        b"".join(
            [
                struct.pack("<I", tx.version),
                hash256(prevouts),
                hash256(sequences),
                spent.outpoint(),
                encode_varint(len(script_code)) + script_code,
                struct.pack("<QI", value, spent.sequence),
                hash256(outputs),
                struct.pack("<II", tx.locktime, sighash_type),
            ]
        )
    )


def sign_p2wpkh_input(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    private_key: PrivateKey,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """
    Produce the witness signature for one P2WPKH input.

    value must be the exact amount of the output being spent; BIP143 commits
    to it. Returns the DER signature followed by the sighash type byte.
    """
    digest = compute_sighash_segwit(tx, input_index, script_code, value, sighash_type)
    # digest is already SHA256d, so coincurve must not hash again
    der = private_key.sign(digest, hasher=None)
    return der + struct.pack("<B", sighash_type)


def create_p2wpkh_script_code(pubkey_bytes: bytes) -> bytes:
    """BIP143 scriptCode of a P2WPKH output: the equivalent P2PKH script."""
    return b"\x76\xa9\x14" + hash160(pubkey_bytes) + b"\x88\xac"


def create_witness_stack(signature: bytes, pubkey_bytes: bytes) -> list[bytes]:
    return [signature, pubkey_bytes]
