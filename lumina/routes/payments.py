"""
/api/payments -- Razorpay checkout.

create-order opens a checkout; verify records the payment once the
client hands back Razorpay's signature. Payments against a request count
towards its target_amount, and reaching the target completes the request.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from lumina.auth import get_current_user
from lumina.errors import ConflictError
from lumina.models.schemas import (
    CreateOrderRequest,
    Payment,
    PaymentVerifyResponse,
    RefundRequest,
    VerifyPaymentRequest,
)
from lumina.services import payments, sms
from lumina.store import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/create-order", summary="Create a Razorpay order")
async def create_order(body: CreateOrderRequest, user: dict = Depends(get_current_user)) -> dict:
    return await payments.create_order(
        amount_paise=payments.to_paise(body.amount),
        receipt=f"donation_{int(time.time() * 1000)}",
        notes={
            "user_id": user["id"],
            "donation_id": body.donation_id or "",
            "request_id": body.request_id or "",
        },
    )


def _apply_to_request(request_id: str, amount: float) -> dict | None:
    """Add amount to the request's raised total.

    Returns the request when this payment is the one that reached the target."""
    request = storage.get_request(request_id)
    if not request:
        logger.warning("Payment names unknown request %s", request_id)
        return None

    raised = request["raised_amount"] + amount
    changes = {"raised_amount": raised}
    target = request.get("target_amount")
    reached = bool(target) and raised >= target and request["status"] != "completed"
    if reached:
        changes["status"] = "completed"
    storage.update_request(request_id, changes)

    if not reached:
        return None

    logger.info("Request %s reached its target of %s", request_id, target)
    storage.create_notification({
        "user_id": request["requester_id"],
        "title": "Request fulfilled",
        "message": f"Your request \"{request['title']}\" has reached its goal.",
        "type": "request_fulfilled",
        "metadata": {"request_id": request_id},
    })
    return request


@router.post("/verify", response_model=PaymentVerifyResponse, summary="Verify and record a payment")
async def verify_payment(
    body: VerifyPaymentRequest,
    user: dict = Depends(get_current_user),
) -> PaymentVerifyResponse:
    if not payments.verify_payment_signature(
        body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature,
    ):
        logger.warning("Invalid payment signature for order %s", body.razorpay_order_id)
        raise HTTPException(status_code=400, detail="Invalid payment signature")

    if storage.get_payment_by_razorpay_id(body.razorpay_payment_id):
        logger.warning("Replayed verification for payment %s", body.razorpay_payment_id)
        raise ConflictError("Payment already recorded")

    payment = storage.create_payment({
        "payer_id": user["id"],
        "recipient_id": body.recipient_id,
        "donation_id": body.donation_id,
        "request_id": body.request_id,
        "amount": body.amount,
        "razorpay_payment_id": body.razorpay_payment_id,
        "razorpay_order_id": body.razorpay_order_id,
        "status": "completed",
    })

    storage.create_notification({
        "user_id": body.recipient_id,
        "title": "Payment received",
        "message": f"{user['name']} sent you {sms.format_rupees(body.amount)}.",
        "type": "payment",
        "metadata": {"payment_id": payment["id"]},
    })

    fulfilled = _apply_to_request(body.request_id, body.amount) if body.request_id else None
    if fulfilled:
        requester = storage.get_user(fulfilled["requester_id"])
        if requester and requester.get("phone"):
            await sms.send_request_fulfilled(requester["phone"], fulfilled["title"], user["name"])

    return PaymentVerifyResponse(payment=Payment(**payment), verified=True)


def _visible_payment(payment_id: str, user: dict) -> dict:
    payment = storage.get_payment(payment_id)
    if not payment or user["id"] not in (payment["payer_id"], payment["recipient_id"]):
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.get("/{payment_id}", response_model=Payment, summary="Get a payment you made or received")
async def get_payment(payment_id: str, user: dict = Depends(get_current_user)) -> Payment:
    return Payment(**_visible_payment(payment_id, user))


@router.post("/{payment_id}/refund", response_model=Payment, summary="Refund a payment you made")
async def refund_payment(
    payment_id: str,
    body: RefundRequest | None = None,
    user: dict = Depends(get_current_user),
) -> Payment:
    payment = _visible_payment(payment_id, user)
    if payment["payer_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Only the payer can refund a payment")
    if payment["status"] != "completed" or not payment["razorpay_payment_id"]:
        raise HTTPException(status_code=409, detail="Payment cannot be refunded")

    amount = body.amount if body and body.amount else payment["amount"]
    if amount > payment["amount"]:
        raise HTTPException(status_code=400, detail="Refund exceeds the payment amount")

    await payments.refund_payment(payment["razorpay_payment_id"], payments.to_paise(amount))
    updated = storage.update_payment(payment_id, {"status": "refunded"})

    if payment["request_id"]:
        request = storage.get_request(payment["request_id"])
        if request:
            storage.update_request(
                payment["request_id"],
                {"raised_amount": max(0.0, request["raised_amount"] - amount)},
            )

    return Payment(**updated)
