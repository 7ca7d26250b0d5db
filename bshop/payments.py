# bshop/payments.py
# Simulated charge collaborator. No real processor is contacted.

import asyncio
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    id: Optional[str] = None
    message: Optional[str] = None


async def charge(
    amount: Decimal,
    description: Optional[str] = None,
    threshold: Decimal = Decimal("1000"),
    latency_seconds: float = 0.8,
) -> PaymentResult:
    """Succeeds for amounts up to ``threshold``, fails above it."""
    if amount < 0:
        raise ValidationError("Amount cannot be negative", context={"amount": str(amount)})

    await asyncio.sleep(latency_seconds)

    if amount <= threshold:
        result = PaymentResult(success=True, id=f"pm_{int(time.time() * 1000)}", message="Simulated charge completed")
    else:
        result = PaymentResult(success=False, message="Simulated charge failed")

    logger.info(
        "Simulated charge %s",
        "succeeded" if result.success else "failed",
        extra={"penalty": amount, "reason": description},
    )
    return result
