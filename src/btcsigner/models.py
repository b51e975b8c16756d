"""
Request and response models using Pydantic for validation and serialization.

Wire names are camelCase (the payment request arrives as JSON); attributes are
snake_case.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NetworkType(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Amount in sats")


class UTXO(BaseModel):
    """A caller-supplied spendable output of the wallet address."""

    model_config = ConfigDict(frozen=True)

    txid: str = Field(..., min_length=1)
    vout: int = Field(..., ge=0)
    value: int = Field(..., ge=1, description="Value in sats")
    confirmations: int = Field(default=0, ge=0)


class FeeEstimates(BaseModel):
    """Recommended fee rates in sat/vB, mempool.space style."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fastest_fee: float = Field(default=0, ge=0, alias="fastestFee")
    half_hour_fee: float = Field(default=0, ge=0, alias="halfHourFee")
    hour_fee: float = Field(default=0, ge=0, alias="hourFee")
    minimum_fee: float = Field(default=0, ge=0, alias="minimumFee")


class PayBatchParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recipients: list[Recipient] = Field(..., min_length=1)
    utxos: list[UTXO] = Field(..., min_length=1)
    recommended_fees: FeeEstimates = Field(
        default_factory=FeeEstimates, alias="recommendedFees"
    )

    @property
    def total_amount(self) -> int:
        return sum(r.amount for r in self.recipients)

    @property
    def total_input(self) -> int:
        return sum(u.value for u in self.utxos)


class PayBatchResult(BaseModel):
    """Signed batch payment, ready for broadcast by the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tx_hex: str = Field(..., alias="txHex")
    tx_id: str = Field(..., alias="txId")
    recipient_count: int = Field(..., alias="recipientCount")
    fee: int
    total_amount: int = Field(..., alias="totalAmount")
    wallet_address: str = Field(..., alias="walletAddress")


class CommandResponse(BaseModel):
    """Either a result or a list of error messages, never both."""

    result: PayBatchResult | None = None
    error: list[str] | None = None

    @model_validator(mode="after")
    def check_exclusive(self) -> CommandResponse:
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of result or error must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
