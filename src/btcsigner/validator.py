"""
Structural validation of incoming payment requests.

Pure functions over untyped (JSON-decoded) data. Each check returns a list of
error messages, or None when the value passes. Messages are prefixed with the
path of the offending field, e.g. ``recipients[0].amount must be a number > 0``.

This is a shape/range gate only: address decoding and fee arithmetic happen
later, and only once the request passed here.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from btcsigner.constants import MIN_PAYMENT_SAT

ValidationResult = list[str] | None

FEE_FIELDS = ("fastestFee", "halfHourFee", "hourFee", "minimumFee")


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true is not a number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _collect(*results: ValidationResult) -> ValidationResult:
    errors = [error for result in results if result for error in result]
    return errors or None


def is_condition(condition: bool, error: str) -> ValidationResult:
    return None if condition else [error]


def is_object(key: str, data: Any) -> ValidationResult:
    return is_condition(isinstance(data, dict), f"{key} must be an object")


def is_non_empty_string(key: str, data: Any) -> ValidationResult:
    return is_condition(
        isinstance(data, str) and data.strip() != "", f"{key} must be a non-empty string"
    )


def is_number(key: str, data: Any) -> ValidationResult:
    return is_condition(_is_number(data), f"{key} must be a number")


def is_integer(key: str, data: Any) -> ValidationResult:
    """Accept ints and integral floats (JSON does not distinguish 1 from 1.0)."""
    ok = _is_number(data) and (isinstance(data, int) or float(data).is_integer())
    return is_condition(ok, f"{key} must be an integer")


def is_positive(key: str, data: Any, include_zero: bool = False) -> ValidationResult:
    if include_zero:
        return is_condition(_is_number(data) and data >= 0, f"{key} must be a number >= 0")
    return is_condition(_is_number(data) and data > 0, f"{key} must be a number > 0")


def is_non_empty_record_array(
    key: str,
    data: Any,
    validator: Callable[[Any, str], ValidationResult] | None = None,
) -> ValidationResult:
    """
    Check that data is a non-empty list and validate every item.

    Errors from all items are collected, in item order.
    """
    if not isinstance(data, list) or not data:
        return [f"{key} must be a non-empty array"]
    if validator is None:
        return None
    return _collect(*(validator(item, f"{key}[{i}]") for i, item in enumerate(data)))


def validate_recipient(data: Any, path: str = "") -> ValidationResult:
    error = is_object(path or "recipient", data)
    if error:
        return error

    amount_key = _join(path, "amount")
    amount = data.get("amount")
    below_minimum = None
    if _is_number(amount) and amount < MIN_PAYMENT_SAT:
        below_minimum = [f"{amount_key} is below the minimum payment threshold"]

    return _collect(
        is_non_empty_string(_join(path, "address"), data.get("address")),
        is_positive(amount_key, amount),
        is_integer(amount_key, amount),
        below_minimum,
    )


def validate_utxo(data: Any, path: str = "") -> ValidationResult:
    error = is_object(path or "utxo", data)
    if error:
        return error

    return _collect(
        is_non_empty_string(_join(path, "txid"), data.get("txid")),
        is_positive(_join(path, "vout"), data.get("vout"), include_zero=True),
        is_integer(_join(path, "vout"), data.get("vout")),
        is_positive(_join(path, "value"), data.get("value")),
        is_integer(_join(path, "value"), data.get("value")),
        is_positive(_join(path, "confirmations"), data.get("confirmations"), include_zero=True),
        is_integer(_join(path, "confirmations"), data.get("confirmations")),
    )


def validate_recommended_fees(data: Any, path: str = "") -> ValidationResult:
    error = is_object(path or "recommendedFees", data)
    if error:
        return error

    return _collect(*(is_positive(_join(path, field), data.get(field)) for field in FEE_FIELDS))


def validate_pay_batch_params(data: Any) -> ValidationResult:
    """
    Validate a complete payment request.

    A non-object request short-circuits; otherwise every problem found in
    recipients, utxos and recommendedFees is reported, in that order.
    """
    error = is_object("data", data)
    if error:
        return error

    return _collect(
        is_non_empty_record_array("recipients", data.get("recipients"), validate_recipient),
        is_non_empty_record_array("utxos", data.get("utxos"), validate_utxo),
        validate_recommended_fees(data.get("recommendedFees"), "recommendedFees"),
    )
