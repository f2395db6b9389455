"""
/api/donations -- Items, goods and money offered by donors.

Posting a donation also runs the AI matcher, texts the donor a receipt for
monetary donations, and broadcasts the donation to realtime clients.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from lumina.auth import get_current_user
from lumina.errors import PermissionDeniedError
from lumina.models.schemas import Donation, DonationCreate, DonationType, DonationUpdate
from lumina.routes.matches import record_matches
from lumina.services import realtime, sms, uploads
from lumina.store import location_filter, storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/donations", tags=["Donations"])


def _owned_donation(donation_id: str, user: dict) -> dict:
    donation = storage.get_donation(donation_id)
    if not donation:
        raise HTTPException(status_code=404, detail="Donation not found")
    if donation["donor_id"] != user["id"]:
        raise PermissionDeniedError("Only the donor can change this donation")
    return donation


@router.post("", response_model=Donation, status_code=201, summary="Post a donation")
async def create_donation(body: DonationCreate, user: dict = Depends(get_current_user)) -> Donation:
    donation = storage.create_donation({**body.model_dump(), "donor_id": user["id"]})
    logger.info("Donation %s posted by %s", donation["id"], user["id"])

    await record_matches(user, donation, "donation_id")

    if user.get("phone") and body.amount:
        await sms.send_donation_alert(user["phone"], donation["title"], sms.format_rupees(body.amount))

    await realtime.broadcast_activity("donation", "donation", donation, user)
    return Donation(**donation)


@router.get("", response_model=list[Donation], summary="Browse donations")
async def list_donations(
    type: DonationType | None = Query(default=None, description="Only this donation type."),
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius: float | None = Query(default=None, gt=0, description="Search radius in km (default 25)."),
) -> list[Donation]:
    donations = storage.get_donations(type=type, location=location_filter(lat, lng, radius))
    return [Donation(**d) for d in donations]


@router.get("/{donation_id}", response_model=Donation, summary="Get one donation")
async def get_donation(donation_id: str) -> Donation:
    donation = storage.get_donation(donation_id)
    if not donation:
        raise HTTPException(status_code=404, detail="Donation not found")
    return Donation(**donation)


@router.patch("/{donation_id}", response_model=Donation, summary="Update your donation")
async def update_donation(
    donation_id: str,
    body: DonationUpdate,
    user: dict = Depends(get_current_user),
) -> Donation:
    _owned_donation(donation_id, user)
    updated = storage.update_donation(donation_id, body.model_dump(exclude_unset=True))
    return Donation(**updated)


@router.post(
    "/{donation_id}/images",
    response_model=Donation,
    summary="Attach photos to your donation",
    description=f"Up to {uploads.MAX_IMAGES} images per upload.",
)
async def upload_donation_images(
    donation_id: str,
    images: list[UploadFile] = File(...),
    user: dict = Depends(get_current_user),
) -> Donation:
    donation = _owned_donation(donation_id, user)
    urls = await uploads.upload_images(images, "donations")
    updated = storage.update_donation(donation_id, {"images": donation["images"] + urls})
    return Donation(**updated)
