# app/services/payment_client.py
"""
Payment collaborator used by the session service.

    charge(amount, reference)          -> processor transaction id
    refund(transaction_id, amount, reference) -> processor refund id

PAYMENT_MODE=demo  → DemoPaymentProcessor: always succeeds, issues demo_pi_* / demo_re_* ids.
PAYMENT_MODE=http  → HttpPaymentProcessor: calls the external payment service at PAYMENT_SERVICE_URL.
"""

import uuid
from decimal import Decimal

import httpx

from app.config import settings
from app.services.exceptions import PaymentFailedError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class PaymentProcessor:
    async def charge(self, amount: Decimal, reference: str) -> str:
        raise NotImplementedError

    async def refund(self, transaction_id: str, amount: Decimal, reference: str) -> str:
        raise NotImplementedError


class DemoPaymentProcessor(PaymentProcessor):
    """No money moves. Used for local runs and the demo kiosk."""

    async def charge(self, amount: Decimal, reference: str) -> str:
        transaction_id = f"demo_pi_{uuid.uuid4().hex[:16]}"
        logger.info(f"[CHARGE] demo {amount} for {reference} → {transaction_id}")
        return transaction_id

    async def refund(self, transaction_id: str, amount: Decimal, reference: str) -> str:
        refund_id = f"demo_re_{uuid.uuid4().hex[:16]}"
        logger.info(f"[REFUND] demo {amount} on {transaction_id} for {reference} → {refund_id}")
        return refund_id


class HttpPaymentProcessor(PaymentProcessor):
    """Thin client for the card-processing service. Amounts are sent in cents."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _post(self, path: str, payload: dict, id_field: str) -> str:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Payment service unreachable at {url}: {e}")
            raise PaymentFailedError("Payment service unavailable")

        if response.status_code >= 400:
            logger.warning(f"Payment service {path} returned HTTP {response.status_code}: {response.text}")
            raise PaymentFailedError(f"Payment declined (HTTP {response.status_code})")

        data = response.json()
        if not data.get(id_field):
            raise PaymentFailedError(f"Payment service response missing '{id_field}'")
        return data[id_field]

    async def charge(self, amount: Decimal, reference: str) -> str:
        transaction_id = await self._post(
            "/charges",
            {"amount": _to_cents(amount), "currency": "usd", "reference": reference},
            "transaction_id",
        )
        logger.info(f"[CHARGE] {amount} for {reference} → {transaction_id}")
        return transaction_id

    async def refund(self, transaction_id: str, amount: Decimal, reference: str) -> str:
        refund_id = await self._post(
            "/refunds",
            {"transaction_id": transaction_id, "amount": _to_cents(amount), "reference": reference},
            "refund_id",
        )
        logger.info(f"[REFUND] {amount} on {transaction_id} for {reference} → {refund_id}")
        return refund_id


def _to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).to_integral_value())


def get_payment_processor() -> PaymentProcessor:
    """FastAPI dependency — returns the processor selected by PAYMENT_MODE."""
    if settings.PAYMENT_MODE == "http":
        if not settings.PAYMENT_SERVICE_URL:
            raise RuntimeError("PAYMENT_MODE=http requires PAYMENT_SERVICE_URL")
        return HttpPaymentProcessor(settings.PAYMENT_SERVICE_URL, settings.PAYMENT_TIMEOUT_SECONDS)
    return DemoPaymentProcessor()
