"""
Transaction builder for batch payments.

Builds and signs the payment transaction from:
- The wallet's UTXOs (all assumed to pay the wallet's own P2WPKH address)
- The recipients, in caller order
- An optional trailing change output back to the wallet address

Outputs are never shuffled: recipients first, change last.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from btcsigner.constants import CHANGE_DUST_LIMIT_SAT
from btcsigner.errors import InvalidAddress, PaymentError, SigningFailed
from btcsigner.models import UTXO, NetworkType, Recipient
from btcsigner.wallet.address import address_to_scriptpubkey, scriptpubkey_to_address
from btcsigner.wallet.service import Wallet
from btcsigner.wallet.signing import (
    Transaction,
    TxInput,
    TxOutput,
    create_p2wpkh_script_code,
    create_witness_stack,
    deserialize_transaction,
    sign_p2wpkh_input,
)

TXID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class SignedTransaction:
    tx_hex: str
    txid: str


def resolve_output_script(address: str, network: NetworkType) -> bytes:
    """
    Decode an address to its scriptPubKey on the given network.

    Raises:
        InvalidAddress: If the address does not decode for the network
    """
    try:
        return address_to_scriptpubkey(address, network)
    except (ValueError, TypeError) as e:
        logger.debug(f"Address rejected: {e}")
        raise InvalidAddress(f"Invalid Bitcoin address: {address}") from e


def build_inputs(wallet: Wallet, utxos: list[UTXO]) -> list[TxInput]:
    spent_script = resolve_output_script(wallet.address, wallet.network)
    inputs = []
    for utxo in utxos:
        if not TXID_RE.match(utxo.txid):
            raise PaymentError(f"Invalid UTXO txid: {utxo.txid}")
        inputs.append(
            TxInput(
                txid=utxo.txid.lower(),
                vout=utxo.vout,
                value=utxo.value,
                script_pubkey=spent_script,
            )
        )
    return inputs


def build_outputs(wallet: Wallet, recipients: list[Recipient], change: int) -> list[TxOutput]:
    outputs = [
        TxOutput(value=r.amount, script=resolve_output_script(r.address, wallet.network))
        for r in recipients
    ]
    if change > CHANGE_DUST_LIMIT_SAT:
        outputs.append(
            TxOutput(value=change, script=resolve_output_script(wallet.address, wallet.network))
        )
    return outputs


def sign_all_inputs(tx: Transaction, wallet: Wallet) -> None:
    """
    Sign every input with the wallet key and attach the witnesses.

    Raises:
        SigningFailed: If any input cannot be signed
    """
    script_code = create_p2wpkh_script_code(wallet.public_key)
    signatures: list[list[bytes]] = []

    for index, inp in enumerate(tx.inputs):
        if inp.script_pubkey != wallet.script_pubkey:
            raise SigningFailed(f"Input {index} is not spendable by the wallet key")
        try:
            signature = sign_p2wpkh_input(
                tx=tx,
                input_index=index,
                script_code=script_code,
                value=inp.value,
                private_key=wallet.private_key,
            )
        except Exception as e:
            raise SigningFailed(f"Failed to sign input {index}: {e}") from e
        signatures.append(create_witness_stack(signature, wallet.public_key))

    # Finalize only once every input signed
    for inp, witness in zip(tx.inputs, signatures, strict=True):
        inp.witness = witness

    logger.debug(f"Signed {len(signatures)} inputs")


def build_transaction(
    wallet: Wallet,
    utxos: list[UTXO],
    recipients: list[Recipient],
    change: int,
) -> SignedTransaction:
    """
    Build, sign and serialize the batch payment.

    Args:
        wallet: Signing wallet
        utxos: Outputs to spend, all owned by the wallet address
        recipients: Payments, kept in order
        change: Change amount; an output is only created above the dust limit

    Returns:
        Serialized transaction hex and its txid

    Raises:
        InvalidAddress: If a recipient or the wallet address does not decode
        SigningFailed: If any input fails to sign
    """
    tx = Transaction(
        inputs=build_inputs(wallet, utxos),
        outputs=build_outputs(wallet, recipients, change),
    )
    sign_all_inputs(tx, wallet)

    return SignedTransaction(tx_hex=tx.serialize().hex(), txid=tx.txid())


def decode_transaction_outputs(tx_hex: str, network: NetworkType) -> list[tuple[str, int]]:
    """Decode a serialized transaction to its (address, value) outputs."""
    tx = deserialize_transaction(bytes.fromhex(tx_hex))
    return [(scriptpubkey_to_address(out.script, network), out.value) for out in tx.outputs]
