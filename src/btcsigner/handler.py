"""
Request envelope for batch payments.

Validates the raw payload, runs the service and maps every outcome onto a
CommandResponse. Callers only ever see error text, never internal exception
types or partial transaction data.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from btcsigner.errors import PaymentError, ValidationError
from btcsigner.models import CommandResponse, PayBatchParams
from btcsigner.service import BitcoinService
from btcsigner.validator import validate_pay_batch_params

UNKNOWN_ERROR = "Unknown error"


def handle_pay_batch(payload: Any, service: BitcoinService) -> CommandResponse:
    """
    Handle one {"data": <payment request>} invocation.

    Args:
        payload: Decoded invocation payload
        service: Service holding the signing wallet

    Returns:
        CommandResponse with either the result or the error messages
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    try:
        errors = validate_pay_batch_params(data)
        if errors:
            raise ValidationError(errors)

        logger.info("Attempting to create and sign batch transaction")
        params = PayBatchParams.model_validate(data)
        return CommandResponse(result=service.create_and_sign_transaction(params))
    except ValidationError as e:
        logger.warning(f"Rejected payment request with {len(e.errors)} validation errors")
        return CommandResponse(error=e.errors)
    except PaymentError as e:
        logger.error(f"Batch payment failed: {e}")
        return CommandResponse(error=[e.message])
    except PydanticValidationError as e:
        # validate_pay_batch_params should have caught this already
        logger.error(f"Payment request failed model validation: {e}")
        return CommandResponse(error=[err["msg"] for err in e.errors()])
    except Exception:
        logger.exception("Unhandled error in batch payment handler")
        return CommandResponse(error=[UNKNOWN_ERROR])
