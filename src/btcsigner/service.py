"""
Batch payment service.

Holds the wallet derived at construction and turns a validated payment
request into a signed transaction. No network access, no persistent state.
"""

from __future__ import annotations

from loguru import logger

from btcsigner.errors import PaymentError
from btcsigner.fees import estimate_change_and_fee
from btcsigner.models import NetworkType, PayBatchParams, PayBatchResult
from btcsigner.tx_builder import build_transaction, resolve_output_script
from btcsigner.wallet.service import Wallet, initialize_wallet


class BitcoinService:
    def __init__(self, mnemonic: str, network: NetworkType = NetworkType.TESTNET):
        self.network = NetworkType(network)
        self.wallet: Wallet = initialize_wallet(mnemonic, self.network)

    @property
    def wallet_address(self) -> str:
        return self.wallet.address

    def create_and_sign_transaction(self, params: PayBatchParams) -> PayBatchResult:
        """
        Estimate fees, build and sign the batch payment.

        UTXOs are trusted to be unspent outputs of the wallet address; no
        ownership proof is attempted.

        Raises:
            PaymentError: Any failure; unexpected errors are wrapped with the
                cause chained
        """
        recipients, utxos = params.recipients, params.utxos
        try:
            if not recipients:
                raise PaymentError("No recipients provided")

            logger.info(
                f"Building batch payment: {len(recipients)} recipients, {len(utxos)} inputs"
            )

            # Addresses are checked before any fee arithmetic
            for recipient in recipients:
                resolve_output_script(recipient.address, self.network)
            resolve_output_script(self.wallet.address, self.network)

            estimate = estimate_change_and_fee(
                utxos, recipients, params.recommended_fees, self.network
            )
            signed = build_transaction(self.wallet, utxos, recipients, estimate.change)

            logger.info(
                f"Signed transaction {signed.txid}: fee={estimate.fee} sats, "
                f"change={estimate.change} sats"
            )
            return PayBatchResult(
                tx_hex=signed.tx_hex,
                tx_id=signed.txid,
                recipient_count=len(recipients),
                fee=estimate.fee,
                total_amount=params.total_amount,
                wallet_address=self.wallet.address,
            )
        except PaymentError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure while building batch payment")
            raise PaymentError("Batch payment failed") from e
