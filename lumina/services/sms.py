"""
SMS notifications (Twilio).

send_sms() posts to Twilio's Messages resource over httpx. Without
credentials it only logs the message and returns a fake SID, so local runs
and tests never need a Twilio account.

The send_* helpers below are the message templates the routes use. They
never raise: a failed delivery is logged and reported as None, so a dead
SMS gateway can't fail the donation or payment that triggered it.
"""

import logging
import os

import httpx

from lumina.errors import SMSDeliveryError

logger = logging.getLogger(__name__)

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID") or os.getenv("TWILIO_SID") or ""
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN") or os.getenv("TWILIO_TOKEN") or ""
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER") or os.getenv("TWILIO_PHONE") or ""
TWILIO_BASE_URL = os.getenv("TWILIO_BASE_URL", "https://api.twilio.com/2010-04-01")
PUBLIC_URL = os.getenv("LUMINA_PUBLIC_URL", "https://lumina.app")

MOCK_SID = "mock_message_sid"


def is_configured() -> bool:
    return bool(TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=TWILIO_BASE_URL,
        auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
        timeout=15.0,
    )


async def send_sms(to: str, message: str, media_url: str | None = None) -> str:
    """Send one SMS and return the Twilio message SID."""
    if not is_configured():
        logger.info("Twilio not configured, SMS simulation to %s: %s", to, message)
        return MOCK_SID

    form = {"To": to, "From": TWILIO_PHONE_NUMBER, "Body": message}
    if media_url:
        form["MediaUrl"] = media_url

    try:
        async with _client() as client:
            resp = await client.post(f"/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json", data=form)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("SMS sending to %s failed: %s", to, e)
        raise SMSDeliveryError("Failed to send SMS notification") from e

    return resp.json()["sid"]


async def _deliver(to: str, message: str) -> str | None:
    try:
        return await send_sms(to, message)
    except SMSDeliveryError as e:
        logger.warning("Dropping SMS to %s: %s", to, e)
        return None


# ── Message templates ─────────────────────────────────────────────

def format_rupees(amount: float) -> str:
    """Rupees with thousands separators and paise, e.g. ₹1,234,567.00."""
    return f"₹{amount:,.2f}"


def donation_alert_text(title: str, amount: str) -> str:
    return (
        "Thank you for your generous donation!\n\n"
        f'Your donation "{title}" of {amount} has been received and will make '
        "a real difference in someone's life.\n\n"
        f"Track your impact: {PUBLIC_URL}/donations\n\n"
        "- Lumina Team"
    )


def match_notification_text(name: str, match_type: str, match_title: str) -> str:
    return (
        f"Hi {name}!\n\n"
        "We found a perfect match for you:\n"
        f'{match_type}: "{match_title}"\n\n'
        f"Check it out: {PUBLIC_URL}/matches\n\n"
        "Help is just a click away!\n- Lumina"
    )


def volunteer_reminder_text(title: str, start_time: str, location: str) -> str:
    return (
        "Volunteer Reminder!\n\n"
        f'"{title}"\n'
        f"When: {start_time}\n"
        f"Where: {location}\n\n"
        "Your time and effort will make a real difference. Thank you for being a changemaker!\n\n"
        "- Lumina Team"
    )


def emergency_alert_text(alert_type: str, location: str, instructions: str) -> str:
    return (
        "EMERGENCY ALERT\n\n"
        f"{alert_type.upper()}\n"
        f"Location: {location}\n\n"
        f"{instructions}\n\n"
        f"Stay safe! More info: {PUBLIC_URL}/emergency\n\n"
        "- Lumina Emergency Response"
    )


def request_fulfilled_text(title: str, donor_name: str) -> str:
    return (
        "Great news!\n\n"
        f'Your request "{title}" has been fulfilled by {donor_name}.\n\n'
        "You'll be contacted soon for coordination.\n\n"
        "Thank you for being part of our community!\n- Lumina"
    )


async def send_donation_alert(phone: str, title: str, amount: str) -> str | None:
    return await _deliver(phone, donation_alert_text(title, amount))


async def send_match_notification(phone: str, name: str, match_type: str, match_title: str) -> str | None:
    return await _deliver(phone, match_notification_text(name, match_type, match_title))


async def send_volunteer_reminder(phone: str, title: str, start_time: str, location: str) -> str | None:
    return await _deliver(phone, volunteer_reminder_text(title, start_time, location))


async def send_emergency_alert(phone: str, alert_type: str, location: str, instructions: str) -> str | None:
    return await _deliver(phone, emergency_alert_text(alert_type, location, instructions))


async def send_request_fulfilled(phone: str, title: str, donor_name: str) -> str | None:
    return await _deliver(phone, request_fulfilled_text(title, donor_name))
