"""
Razorpay payments.

Talks to the Razorpay REST API (https://api.razorpay.com/v1) with the key
id / secret as HTTP basic auth. Amounts sent to Razorpay are in paise.

Checkout flow:
  1. create_order()              -- server creates an order, client opens checkout
  2. Razorpay checkout returns order_id, payment_id and a signature
  3. verify_payment_signature()  -- HMAC-SHA256(order_id|payment_id, key secret)

Gateway failures are raised as PaymentGatewayError; the routes map them to
a generic 400.
"""

import hashlib
import hmac
import logging
import os
import time

import httpx

from lumina.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID") or os.getenv("RAZORPAY_ID") or ""
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET") or os.getenv("RAZORPAY_SECRET") or ""
RAZORPAY_BASE_URL = os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1")
DEFAULT_CURRENCY = "INR"


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=RAZORPAY_BASE_URL,
        auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET),
        timeout=30.0,
    )


async def _call(method: str, path: str, action: str, payload: dict | None = None) -> dict:
    if not RAZORPAY_KEY_ID or not RAZORPAY_KEY_SECRET:
        raise PaymentGatewayError(f"Failed to {action}: Razorpay is not configured")

    try:
        async with _client() as client:
            resp = await client.request(method, path, json=payload)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error("Razorpay %s %s returned %d: %s", method, path, e.response.status_code, e.response.text)
        raise PaymentGatewayError(f"Failed to {action}", body=e.response.text) from e
    except httpx.HTTPError as e:
        logger.error("Razorpay %s %s failed: %s", method, path, e)
        raise PaymentGatewayError(f"Failed to {action}") from e

    return resp.json()


async def create_order(
    amount_paise: int,
    currency: str = DEFAULT_CURRENCY,
    receipt: str | None = None,
    notes: dict[str, str] | None = None,
) -> dict:
    """Create a checkout order. Returns Razorpay's order object as-is."""
    payload = {
        "amount": amount_paise,
        "currency": currency,
        "receipt": receipt or f"receipt_{int(time.time() * 1000)}",
        "notes": notes or {},
    }
    order = await _call("POST", "/orders", "create payment order", payload)
    logger.info("Created Razorpay order %s for %d paise", order.get("id"), amount_paise)
    return order


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    expected = hmac.new(
        RAZORPAY_KEY_SECRET.encode(),
        f"{order_id}|{payment_id}".encode(),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, signature or "")


async def capture_payment(payment_id: str, amount_paise: int, currency: str = DEFAULT_CURRENCY) -> dict:
    return await _call(
        "POST", f"/payments/{payment_id}/capture", "capture payment",
        {"amount": amount_paise, "currency": currency},
    )


async def refund_payment(payment_id: str, amount_paise: int | None = None) -> dict:
    """Refund a captured payment. Omitting the amount refunds it in full."""
    payload = {"amount": amount_paise} if amount_paise else {}
    refund = await _call("POST", f"/payments/{payment_id}/refund", "refund payment", payload)
    logger.info("Refund %s issued for payment %s", refund.get("id"), payment_id)
    return refund


async def fetch_payment(payment_id: str) -> dict:
    return await _call("GET", f"/payments/{payment_id}", "get payment details")
