"""
/api/activities -- Volunteer opportunities and sign-ups.

Registration is where the only real rules live: the activity has to exist,
a volunteer can sign up once, and max_volunteers (when set) is a hard cap.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from lumina.auth import get_current_user
from lumina.errors import ConflictError
from lumina.models.schemas import (
    Activity,
    ActivityCreate,
    RegistrationCreate,
    VolunteerRegistration,
)
from lumina.services import realtime, sms
from lumina.store import location_filter, storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Volunteering"])


@router.post("/api/activities", response_model=Activity, status_code=201, summary="Post a volunteer activity")
async def create_activity(body: ActivityCreate, user: dict = Depends(get_current_user)) -> Activity:
    activity = storage.create_activity({**body.model_dump(), "organizer_id": user["id"]})
    await realtime.broadcast_activity("volunteer", "activity", activity, user)
    return Activity(**activity)


@router.get("/api/activities", response_model=list[Activity], summary="Browse activities by start time")
async def list_activities(
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius: float | None = Query(default=None, gt=0, description="Search radius in km (default 25)."),
) -> list[Activity]:
    activities = storage.get_activities(location=location_filter(lat, lng, radius))
    return [Activity(**a) for a in activities]


@router.get("/api/activities/{activity_id}", response_model=Activity, summary="Get one activity")
async def get_activity(activity_id: str) -> Activity:
    activity = storage.get_activity(activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return Activity(**activity)


@router.post(
    "/api/activities/{activity_id}/register",
    response_model=VolunteerRegistration,
    status_code=201,
    summary="Sign up for an activity",
)
async def register_for_activity(
    activity_id: str,
    body: RegistrationCreate | None = None,
    user: dict = Depends(get_current_user),
) -> VolunteerRegistration:
    activity = storage.get_activity(activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")

    if any(r["volunteer_id"] == user["id"] for r in storage.get_activity_registrations(activity_id)):
        raise ConflictError("Already registered for this activity")

    capacity = activity.get("max_volunteers")
    if capacity is not None and activity["current_volunteers"] >= capacity:
        raise ConflictError("Activity is full")

    registration = storage.create_volunteer_registration({
        "activity_id": activity_id,
        "volunteer_id": user["id"],
        "message": body.message if body else None,
    })
    storage.update_activity(activity_id, {"current_volunteers": activity["current_volunteers"] + 1})

    storage.create_notification({
        "user_id": activity["organizer_id"],
        "title": "New volunteer",
        "message": f"{user['name']} signed up for \"{activity['title']}\".",
        "type": "volunteer",
        "metadata": {"activity_id": activity_id, "registration_id": registration["id"]},
    })

    if user.get("phone"):
        await sms.send_volunteer_reminder(
            user["phone"],
            activity["title"],
            activity["start_time"].strftime("%d %b %Y, %H:%M %Z").strip(),
            activity["location"]["address"],
        )

    return VolunteerRegistration(**registration)


@router.get(
    "/api/registrations/my",
    response_model=list[VolunteerRegistration],
    summary="Activities you signed up for",
)
async def my_registrations(user: dict = Depends(get_current_user)) -> list[VolunteerRegistration]:
    return [VolunteerRegistration(**r) for r in storage.get_volunteer_registrations(user["id"])]
