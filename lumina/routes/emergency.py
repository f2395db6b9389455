"""
POST /api/emergency/alert -- Disaster-relief broadcast.

Files an emergency-urgency request at the reported location, then alerts
everyone who should know:
  - the reporter, by SMS
  - every other user within EMERGENCY_RADIUS_KM, by SMS (if they have a
    phone) and in-app notification
  - realtime clients, as an "emergency" event
"""

import asyncio
import logging
import os

from fastapi import APIRouter, Depends

from lumina.auth import get_current_user
from lumina.models.schemas import DonationRequest, EmergencyAlertRequest
from lumina.services import realtime, sms
from lumina.store import distance_km, storage

logger = logging.getLogger(__name__)

EMERGENCY_RADIUS_KM = float(os.getenv("EMERGENCY_RADIUS_KM", "50"))

router = APIRouter(prefix="/api/emergency", tags=["Emergency"])


def nearby_users(location: dict, exclude_id: str, radius_km: float = EMERGENCY_RADIUS_KM) -> list[dict]:
    return [
        u for u in storage.list_users()
        if u["id"] != exclude_id
        and u.get("location")
        and distance_km(location, u["location"]) <= radius_km
    ]


@router.post("/alert", response_model=DonationRequest, status_code=201, summary="Raise an emergency alert")
async def emergency_alert(
    body: EmergencyAlertRequest,
    user: dict = Depends(get_current_user),
) -> DonationRequest:
    location = body.location.model_dump()
    request = storage.create_request({
        "requester_id": user["id"],
        "type": "other",
        "title": f"EMERGENCY: {body.alert_type}",
        "description": body.instructions,
        "urgency": "emergency",
        "location": location,
    })

    neighbours = nearby_users(location, user["id"])
    for neighbour in neighbours:
        storage.create_notification({
            "user_id": neighbour["id"],
            "title": f"Emergency near you: {body.alert_type}",
            "message": body.instructions,
            "type": "emergency",
            "metadata": {"request_id": request["id"], "location": location},
        })

    # one text per number, even when accounts share a phone
    phones = list(dict.fromkeys(u["phone"] for u in [user, *neighbours] if u.get("phone")))
    await asyncio.gather(*(
        sms.send_emergency_alert(phone, body.alert_type, body.location.address, body.instructions)
        for phone in phones
    ))
    logger.info(
        "Emergency %s raised by %s: %d nearby user(s), %d SMS",
        request["id"], user["id"], len(neighbours), len(phones),
    )

    await realtime.broadcast_activity("emergency", "request", request, user)
    return DonationRequest(**request)
