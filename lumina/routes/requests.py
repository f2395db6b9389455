"""
/api/requests -- Needs posted by recipients and organizations.

A request may carry a funding target; verified payments count towards it
(see routes/payments.py) and complete the request once it is reached.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from lumina.auth import get_current_user
from lumina.errors import PermissionDeniedError
from lumina.models.schemas import DonationRequest, DonationRequestCreate, DonationType, Urgency
from lumina.routes.matches import record_matches
from lumina.services import realtime, uploads
from lumina.store import location_filter, storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["Requests"])


@router.post("", response_model=DonationRequest, status_code=201, summary="Post a request")
async def create_request(
    body: DonationRequestCreate,
    user: dict = Depends(get_current_user),
) -> DonationRequest:
    request = storage.create_request({**body.model_dump(), "requester_id": user["id"]})
    logger.info("Request %s (%s) posted by %s", request["id"], body.urgency.value, user["id"])

    await record_matches(user, request, "request_id")
    await realtime.broadcast_activity("request", "request", request, user)
    return DonationRequest(**request)


@router.get("", response_model=list[DonationRequest], summary="Browse requests")
async def list_requests(
    type: DonationType | None = Query(default=None),
    urgency: Urgency | None = Query(default=None),
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius: float | None = Query(default=None, gt=0, description="Search radius in km (default 25)."),
) -> list[DonationRequest]:
    requests = storage.get_requests(
        type=type,
        urgency=urgency,
        location=location_filter(lat, lng, radius),
    )
    return [DonationRequest(**r) for r in requests]


@router.get("/{request_id}", response_model=DonationRequest, summary="Get one request")
async def get_request(request_id: str) -> DonationRequest:
    request = storage.get_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return DonationRequest(**request)


@router.post("/{request_id}/images", response_model=DonationRequest, summary="Attach photos to your request")
async def upload_request_images(
    request_id: str,
    images: list[UploadFile] = File(...),
    user: dict = Depends(get_current_user),
) -> DonationRequest:
    request = storage.get_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    if request["requester_id"] != user["id"]:
        raise PermissionDeniedError("Only the requester can change this request")

    urls = await uploads.upload_images(images, "requests")
    updated = storage.update_request(request_id, {"images": request["images"] + urls})
    return DonationRequest(**updated)
