"""
btcsigner - Build and sign Bitcoin batch payments

Derives a single P2WPKH key from a BIP39 mnemonic and spends caller-supplied
UTXOs to a list of recipients.
"""

__version__ = "0.1.0"

from btcsigner.constants import (
    CHANGE_DUST_LIMIT_SAT,
    MIN_PAYMENT_SAT,
    STANDARD_DUST_LIMIT,
)
from btcsigner.errors import (
    AddressGenerationFailed,
    InsufficientFunds,
    InvalidAddress,
    InvalidMnemonic,
    PaymentError,
    SigningFailed,
    ValidationError,
)
from btcsigner.fees import ChangeAndFee, estimate_change_and_fee
from btcsigner.handler import handle_pay_batch
from btcsigner.models import (
    UTXO,
    CommandResponse,
    FeeEstimates,
    NetworkType,
    PayBatchParams,
    PayBatchResult,
    Recipient,
)
from btcsigner.service import BitcoinService
from btcsigner.tx_builder import SignedTransaction, build_transaction
from btcsigner.validator import validate_pay_batch_params
from btcsigner.wallet.service import Wallet, initialize_wallet

__all__ = [
    "AddressGenerationFailed",
    "BitcoinService",
    "CHANGE_DUST_LIMIT_SAT",
    "ChangeAndFee",
    "CommandResponse",
    "FeeEstimates",
    "InsufficientFunds",
    "InvalidAddress",
    "InvalidMnemonic",
    "MIN_PAYMENT_SAT",
    "NetworkType",
    "PayBatchParams",
    "PayBatchResult",
    "PaymentError",
    "Recipient",
    "STANDARD_DUST_LIMIT",
    "SignedTransaction",
    "SigningFailed",
    "UTXO",
    "ValidationError",
    "Wallet",
    "build_transaction",
    "estimate_change_and_fee",
    "handle_pay_batch",
    "initialize_wallet",
    "validate_pay_batch_params",
]
