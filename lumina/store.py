"""
In-memory data store.

One plain dict per entity, keyed by a random UUID4 string. Updates are
shallow merges, lookups by anything other than id are linear scans, and
everything is lost on restart. Methods never await, so on the single
event loop each call runs to completion before another request gets in.
"""

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from lumina.errors import NotFoundError

DEFAULT_RADIUS_KM = 25.0
EARTH_RADIUS_KM = 6371.0


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def distance_km(a: dict, b: dict) -> float:
    """Great-circle (haversine) distance between two {lat, lng} points."""
    lat1, lat2 = math.radians(a["lat"]), math.radians(b["lat"])
    dlat = lat2 - lat1
    dlng = math.radians(b["lng"] - a["lng"])
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def within_radius(records: Iterable[dict], location: dict | None) -> list[dict]:
    """Keep records whose location lies inside the filter circle.

    location is {lat, lng, radius?}; radius is in km and defaults to
    DEFAULT_RADIUS_KM. Records without a location never match."""
    records = list(records)
    if not location:
        return records
    radius = location.get("radius") or DEFAULT_RADIUS_KM
    return [
        r for r in records
        if r.get("location") and distance_km(location, r["location"]) <= radius
    ]


def location_filter(lat: float | None, lng: float | None, radius: float | None = None) -> dict | None:
    """Build the filter circle from query params. Both coordinates are needed."""
    if lat is None or lng is None:
        return None
    return {"lat": lat, "lng": lng, "radius": radius}


def _newest_first(records: Iterable[dict]) -> list[dict]:
    # dicts keep insertion order; reversing first makes equal timestamps
    # come out newest-first too
    return sorted(reversed(list(records)), key=lambda r: r["created_at"], reverse=True)


class MemStorage:
    """All Lumina records, held in memory."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.users: dict[str, dict] = {}
        self.organizations: dict[str, dict] = {}
        self.donations: dict[str, dict] = {}
        self.requests: dict[str, dict] = {}
        self.activities: dict[str, dict] = {}
        self.volunteer_registrations: dict[str, dict] = {}
        self.matches: dict[str, dict] = {}
        self.activity_feed: dict[str, dict] = {}
        self.payments: dict[str, dict] = {}
        self.notifications: dict[str, dict] = {}

    def counts(self) -> dict[str, int]:
        return {
            "users": len(self.users),
            "donations": len(self.donations),
            "requests": len(self.requests),
            "activities": len(self.activities),
            "payments": len(self.payments),
        }

    @staticmethod
    def _merge(table: dict[str, dict], record_id: str, changes: dict, label: str) -> dict:
        record = table.get(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        updated = {**record, **changes}
        table[record_id] = updated
        return updated

    # ── Users ─────────────────────────────────────────────────────────

    def get_user(self, user_id: str) -> dict | None:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> dict | None:
        email = email.strip().lower()
        return next((u for u in self.users.values() if u["email"] == email), None)

    def list_users(self) -> list[dict]:
        return list(self.users.values())

    def create_user(self, data: dict) -> dict:
        user = {
            "phone": None,
            "bio": None,
            "location": None,
            **data,
            "id": _new_id(),
            "avatar": None,
            "verified": False,
            "created_at": _now(),
        }
        self.users[user["id"]] = user
        return user

    def update_user(self, user_id: str, changes: dict) -> dict:
        return self._merge(self.users, user_id, changes, "User")

    # ── Organizations ─────────────────────────────────────────────────

    def create_organization(self, data: dict) -> dict:
        org = {
            **data,
            "id": _new_id(),
            "documents": data.get("documents") or [],
            "verified": False,
            "created_at": _now(),
        }
        self.organizations[org["id"]] = org
        return org

    def get_organization_by_user_id(self, user_id: str) -> dict | None:
        return next((o for o in self.organizations.values() if o["user_id"] == user_id), None)

    # ── Donations ─────────────────────────────────────────────────────

    def create_donation(self, data: dict) -> dict:
        donation = {
            **data,
            "id": _new_id(),
            "recipient_id": None,
            "images": data.get("images") or [],
            "status": "active",
            "created_at": _now(),
        }
        self.donations[donation["id"]] = donation

        self.create_activity_feed_item({
            "user_id": data["donor_id"],
            "type": "donation",
            "title": f"New donation: {donation['title']}",
            "description": donation.get("description") or "",
            "metadata": {"donation_id": donation["id"], "type": _value(donation["type"])},
        })
        return donation

    def get_donations(self, type: str | None = None, location: dict | None = None) -> list[dict]:
        donations = self.donations.values()
        if type:
            donations = [d for d in donations if d["type"] == type]
        return _newest_first(within_radius(donations, location))

    def get_donation(self, donation_id: str) -> dict | None:
        return self.donations.get(donation_id)

    def update_donation(self, donation_id: str, changes: dict) -> dict:
        return self._merge(self.donations, donation_id, changes, "Donation")

    # ── Requests ──────────────────────────────────────────────────────

    def create_request(self, data: dict) -> dict:
        request = {
            "urgency": "medium",
            "target_amount": None,
            "target_quantity": None,
            "location": None,
            "deadline": None,
            **data,
            "id": _new_id(),
            "raised_amount": 0.0,
            "received_quantity": 0,
            "images": data.get("images") or [],
            "status": "active",
            "created_at": _now(),
        }
        self.requests[request["id"]] = request

        self.create_activity_feed_item({
            "user_id": data["requester_id"],
            "type": "request",
            "title": f"New request: {request['title']}",
            "description": request["description"],
            "metadata": {"request_id": request["id"], "urgency": _value(request["urgency"])},
        })
        return request

    def get_requests(
        self,
        type: str | None = None,
        urgency: str | None = None,
        location: dict | None = None,
    ) -> list[dict]:
        requests = self.requests.values()
        if type:
            requests = [r for r in requests if r["type"] == type]
        if urgency:
            requests = [r for r in requests if r["urgency"] == urgency]
        return _newest_first(within_radius(requests, location))

    def get_request(self, request_id: str) -> dict | None:
        return self.requests.get(request_id)

    def update_request(self, request_id: str, changes: dict) -> dict:
        return self._merge(self.requests, request_id, changes, "Request")

    # ── Activities ────────────────────────────────────────────────────

    def create_activity(self, data: dict) -> dict:
        activity = {
            **data,
            "id": _new_id(),
            "current_volunteers": 0,
            "skills": data.get("skills") or [],
            "status": "active",
            "created_at": _now(),
        }
        self.activities[activity["id"]] = activity

        self.create_activity_feed_item({
            "user_id": data["organizer_id"],
            "type": "volunteer",
            "title": f"New volunteer opportunity: {activity['title']}",
            "description": activity["description"],
            "metadata": {"activity_id": activity["id"], "location": activity["location"]},
        })
        return activity

    def get_activities(self, location: dict | None = None) -> list[dict]:
        return sorted(within_radius(self.activities.values(), location), key=lambda a: a["start_time"])

    def get_activity(self, activity_id: str) -> dict | None:
        return self.activities.get(activity_id)

    def update_activity(self, activity_id: str, changes: dict) -> dict:
        return self._merge(self.activities, activity_id, changes, "Activity")

    # ── Volunteer registrations ───────────────────────────────────────

    def create_volunteer_registration(self, data: dict) -> dict:
        registration = {
            "message": None,
            **data,
            "id": _new_id(),
            "status": "pending",
            "created_at": _now(),
        }
        self.volunteer_registrations[registration["id"]] = registration
        return registration

    def get_volunteer_registrations(self, volunteer_id: str) -> list[dict]:
        return [r for r in self.volunteer_registrations.values() if r["volunteer_id"] == volunteer_id]

    def get_activity_registrations(self, activity_id: str) -> list[dict]:
        return [r for r in self.volunteer_registrations.values() if r["activity_id"] == activity_id]

    # ── Matches ───────────────────────────────────────────────────────

    def get_matches(self, user_id: str) -> list[dict]:
        return [m for m in self.matches.values() if m["user_id"] == user_id]

    def create_match(self, data: dict) -> dict:
        match = {
            "donation_id": None,
            "request_id": None,
            "activity_id": None,
            "reason": None,
            "status": "pending",
            **data,
            "id": _new_id(),
            "created_at": _now(),
        }
        self.matches[match["id"]] = match
        return match

    # ── Activity feed ─────────────────────────────────────────────────

    def get_activity_feed(self, limit: int = 50) -> list[dict]:
        return _newest_first(self.activity_feed.values())[:limit]

    def create_activity_feed_item(self, data: dict) -> dict:
        item = {
            "description": None,
            "metadata": {},
            "likes": 0,
            "comments": 0,
            **data,
            "id": _new_id(),
            "created_at": _now(),
        }
        self.activity_feed[item["id"]] = item
        return item

    def like_activity_feed_item(self, item_id: str) -> dict:
        item = self.activity_feed.get(item_id)
        if item is None:
            raise NotFoundError("Feed item not found")
        return self._merge(self.activity_feed, item_id, {"likes": item["likes"] + 1}, "Feed item")

    # ── Payments ──────────────────────────────────────────────────────

    def create_payment(self, data: dict) -> dict:
        payment = {
            "donation_id": None,
            "request_id": None,
            "razorpay_payment_id": None,
            "razorpay_order_id": None,
            **data,
            "id": _new_id(),
            "created_at": _now(),
        }
        self.payments[payment["id"]] = payment
        return payment

    def get_payment(self, payment_id: str) -> dict | None:
        return self.payments.get(payment_id)

    def get_payment_by_razorpay_id(self, razorpay_payment_id: str) -> dict | None:
        return next(
            (p for p in self.payments.values() if p["razorpay_payment_id"] == razorpay_payment_id),
            None,
        )

    def update_payment(self, payment_id: str, changes: dict) -> dict:
        return self._merge(self.payments, payment_id, changes, "Payment")

    # ── Notifications ─────────────────────────────────────────────────

    def get_notifications(self, user_id: str) -> list[dict]:
        return _newest_first(n for n in self.notifications.values() if n["user_id"] == user_id)

    def create_notification(self, data: dict) -> dict:
        notification = {
            "metadata": {},
            **data,
            "id": _new_id(),
            "read": False,
            "created_at": _now(),
        }
        self.notifications[notification["id"]] = notification
        return notification

    def get_notification(self, notification_id: str) -> dict | None:
        return self.notifications.get(notification_id)

    def mark_notification_as_read(self, notification_id: str) -> dict:
        return self._merge(self.notifications, notification_id, {"read": True}, "Notification")


def _value(field: Any) -> Any:
    """Enum members arrive from model_dump(); feed metadata wants plain strings."""
    return getattr(field, "value", field)


storage = MemStorage()
