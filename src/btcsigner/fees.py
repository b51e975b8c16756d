"""
Fee and change estimation for batch payments.

Virtual size model for a P2WPKH-only transaction:
    vsize = inputs * 68 + outputs * 31 + 11

The fee rate comes from the caller's recommended fees (halfHourFee, then
hourFee) with a per-network fallback. Fees are rounded up to whole sats.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal

from loguru import logger

from btcsigner.constants import (
    CHANGE_DUST_LIMIT_SAT,
    FALLBACK_FEE_RATES,
    INPUT_VBYTES,
    OUTPUT_VBYTES,
    OVERHEAD_VBYTES,
)
from btcsigner.errors import InsufficientFunds
from btcsigner.models import UTXO, FeeEstimates, NetworkType, Recipient


@dataclass(frozen=True)
class ChangeAndFee:
    """Outcome of fee estimation."""

    fee: int
    change: int
    vsize: int
    fee_rate: float
    num_outputs: int

    @property
    def has_change_output(self) -> bool:
        return self.change > CHANGE_DUST_LIMIT_SAT


def estimate_vsize(num_inputs: int, num_outputs: int) -> int:
    return num_inputs * INPUT_VBYTES + num_outputs * OUTPUT_VBYTES + OVERHEAD_VBYTES


def resolve_fee_rate(fee_estimates: FeeEstimates | None, network: NetworkType) -> float:
    """Pick halfHourFee, else hourFee, else the network fallback (sat/vB)."""
    if fee_estimates is not None:
        if fee_estimates.half_hour_fee:
            return fee_estimates.half_hour_fee
        if fee_estimates.hour_fee:
            return fee_estimates.hour_fee
    fallback = FALLBACK_FEE_RATES[NetworkType(network).value]
    logger.debug(f"No usable fee estimate, falling back to {fallback} sat/vB")
    return fallback


def calculate_fee(vsize: int, fee_rate: float) -> int:
    """vsize * fee_rate in sats, rounded up. Decimal avoids float artifacts."""
    fee = Decimal(vsize) * Decimal(str(fee_rate))
    return int(fee.to_integral_value(rounding=ROUND_CEILING))


def estimate_change_and_fee(
    utxos: list[UTXO],
    recipients: list[Recipient],
    fee_estimates: FeeEstimates | None,
    network: NetworkType = NetworkType.MAINNET,
) -> ChangeAndFee:
    """
    Compute the fee and change for spending all utxos to the recipients.

    Assumes a change output first. If the resulting change is dust
    (1..294 sats) the change output is dropped, the fee recomputed for one
    output less, and the leftover dust goes to the miner on top of it. The
    returned fee is always the size-model fee, so

        total_input == total_amount + fee + change

    holds exactly whenever no dust was dropped.

    Raises:
        InsufficientFunds: If the inputs cannot cover amounts plus fee
    """
    total_input = sum(u.value for u in utxos)
    total_amount = sum(r.amount for r in recipients)
    fee_rate = resolve_fee_rate(fee_estimates, network)

    num_outputs = len(recipients) + 1
    vsize = estimate_vsize(len(utxos), num_outputs)
    fee = calculate_fee(vsize, fee_rate)
    change = total_input - total_amount - fee

    if 0 < change <= CHANGE_DUST_LIMIT_SAT:
        logger.debug(f"Change of {change} sats is dust, dropping change output")
        num_outputs = len(recipients)
        vsize = estimate_vsize(len(utxos), num_outputs)
        fee = calculate_fee(vsize, fee_rate)
        change = 0

    total_needed = total_amount + fee
    if total_input < total_needed:
        raise InsufficientFunds(
            "Insufficient funds for batch payment",
            {
                "availableSat": total_input,
                "requiredSat": total_needed,
                "totalAmountSat": total_amount,
                "feeInSat": fee,
                "recipientCount": len(recipients),
            },
        )

    logger.debug(
        f"Estimated vsize={vsize} vB at {fee_rate} sat/vB: fee={fee}, change={change}, "
        f"outputs={num_outputs}"
    )
    return ChangeAndFee(
        fee=fee, change=change, vsize=vsize, fee_rate=fee_rate, num_outputs=num_outputs
    )
