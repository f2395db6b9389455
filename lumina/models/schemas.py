"""
Lumina API -- Pydantic Data Models

Every request and response body the API accepts or returns is defined here.
Records live in the store as plain dicts; routes rebuild these models from
them on the way out, which is also where the password hash gets dropped.

The Field() descriptions and examples show up in the interactive docs at /docs.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class UserType(str, Enum):
    """The kinds of accounts that can sign up. Drives the category pages
    and the AI suggestions a user gets."""

    donor = "donor"
    volunteer = "volunteer"
    ngo = "ngo"
    business = "business"
    medical = "medical"
    farmer = "farmer"
    clothing = "clothing"
    event_host = "event_host"
    vacant_home = "vacant_home"
    disaster_relief = "disaster_relief"


class DonationType(str, Enum):
    monetary = "monetary"
    food = "food"
    clothing = "clothing"
    medical = "medical"
    educational = "educational"
    shelter = "shelter"
    other = "other"


class Status(str, Enum):
    active = "active"
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"


class Urgency(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    emergency = "emergency"


class Location(BaseModel):
    """A point on the map plus the human-readable address shown next to it."""

    lat: float = Field(ge=-90.0, le=90.0, examples=[12.9716])
    lng: float = Field(ge=-180.0, le=180.0, examples=[77.5946])
    address: str = Field(default="", examples=["MG Road, Bengaluru"])


# ---------------------------------------------------------------------------
# Users & auth
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, examples=["asha@example.org"])
    password: str = Field(min_length=6, description="Plain text; stored as a bcrypt hash.")
    name: str = Field(min_length=1, examples=["Asha Rao"])
    user_type: UserType = Field(examples=["donor"])
    phone: str | None = Field(default=None, examples=["+919800000000"])
    bio: str | None = None
    location: Location | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: str
    password: str


class User(BaseModel):
    """Public view of a user. Never carries the password hash."""

    id: str
    email: str
    name: str
    user_type: UserType
    phone: str | None = None
    avatar: str | None = None
    bio: str | None = None
    location: Location | None = None
    verified: bool = False
    created_at: datetime


class ProfileUpdate(BaseModel):
    """Partial update. Omitted fields are left alone; the nullable ones can
    be cleared with null, but name can only be replaced."""

    name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    avatar: str | None = None
    bio: str | None = None
    location: Location | None = None

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value


class AuthResponse(BaseModel):
    user: User
    token: str = Field(description="Bearer token for the Authorization header.")


class MeResponse(BaseModel):
    user: User


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, examples=["Annapurna Food Bank"])
    description: str | None = None
    website: str | None = Field(default=None, examples=["https://annapurna.example.org"])
    documents: list[str] = Field(default=[], description="URLs of registration documents.")


class Organization(OrganizationCreate):
    id: str
    user_id: str
    verified: bool = False
    created_at: datetime


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------

class DonationCreate(BaseModel):
    """What a donor posts. Monetary donations carry an amount, goods carry
    a quantity; nothing forces either."""

    type: DonationType = Field(examples=["food"])
    title: str = Field(min_length=1, examples=["20 kg of rice"])
    description: str | None = None
    amount: float | None = Field(default=None, ge=0, description="Rupees, for monetary donations.")
    quantity: int | None = Field(default=None, ge=0)
    location: Location | None = None
    images: list[str] = Field(default=[], description="Already-uploaded image URLs.")
    expiry_date: datetime | None = None


class Donation(DonationCreate):
    id: str
    donor_id: str
    recipient_id: str | None = None
    status: Status = Status.active
    created_at: datetime


class DonationUpdate(BaseModel):
    status: Status | None = None
    recipient_id: str | None = None
    description: str | None = None

    @field_validator("status")
    @classmethod
    def _status_not_null(cls, value: Status | None) -> Status:
        if value is None:
            raise ValueError("status cannot be null")
        return value


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class DonationRequestCreate(BaseModel):
    """A need posted by a recipient. target_amount / target_quantity are
    optional goals that payments and deliveries count towards."""

    type: DonationType = Field(examples=["medical"])
    title: str = Field(min_length=1, examples=["Insulin for 30 patients"])
    description: str = Field(min_length=1)
    urgency: Urgency = Urgency.medium
    target_amount: float | None = Field(default=None, ge=0)
    target_quantity: int | None = Field(default=None, ge=0)
    location: Location | None = None
    images: list[str] = []
    deadline: datetime | None = None


class DonationRequest(DonationRequestCreate):
    id: str
    requester_id: str
    raised_amount: float = 0.0
    received_quantity: int = 0
    status: Status = Status.active
    created_at: datetime


# ---------------------------------------------------------------------------
# Volunteer activities
# ---------------------------------------------------------------------------

class ActivityCreate(BaseModel):
    title: str = Field(min_length=1, examples=["Beach clean-up"])
    description: str = Field(min_length=1)
    location: Location
    start_time: datetime
    end_time: datetime
    max_volunteers: int | None = Field(default=None, ge=1)
    skills: list[str] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # activities are sorted by start_time; naive and aware values can't be compared
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_window(self) -> "ActivityCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class Activity(ActivityCreate):
    id: str
    organizer_id: str
    current_volunteers: int = 0
    status: Status = Status.active
    created_at: datetime


class RegistrationCreate(BaseModel):
    message: str | None = Field(default=None, examples=["I can bring gloves."])


class VolunteerRegistration(BaseModel):
    id: str
    activity_id: str
    volunteer_id: str
    status: Status = Status.pending
    message: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------

class MatchSuggestion(BaseModel):
    """One entry of the matcher's answer. The LLM decides all of it."""

    type: Literal["donation", "request", "volunteer"] = "donation"
    score: float = Field(ge=0.0, le=1.0)
    reason: str = ""
    item_id: str | None = None


class Match(BaseModel):
    id: str
    donation_id: str | None = None
    request_id: str | None = None
    activity_id: str | None = None
    user_id: str
    score: float = Field(ge=0.0, le=1.0)
    reason: str | None = None
    status: Status = Status.pending
    created_at: datetime


# ---------------------------------------------------------------------------
# Activity feed
# ---------------------------------------------------------------------------

class ActivityFeedItem(BaseModel):
    id: str
    user_id: str
    type: str = Field(examples=["donation"])
    title: str
    description: str | None = None
    metadata: dict[str, Any] = {}
    likes: int = 0
    comments: int = 0
    created_at: datetime


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

class CreateOrderRequest(BaseModel):
    amount: float = Field(gt=0, description="Rupees. Converted to paise for Razorpay.", examples=[500])
    donation_id: str | None = None
    request_id: str | None = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    amount: float = Field(gt=0)
    recipient_id: str
    donation_id: str | None = None
    request_id: str | None = None


class Payment(BaseModel):
    id: str
    payer_id: str
    recipient_id: str
    donation_id: str | None = None
    request_id: str | None = None
    amount: float
    razorpay_payment_id: str | None = None
    razorpay_order_id: str | None = None
    status: str = Field(examples=["completed"])
    created_at: datetime


class PaymentVerifyResponse(BaseModel):
    payment: Payment
    verified: bool


class RefundRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0, description="Partial refund in rupees. Omit for full.")


# ---------------------------------------------------------------------------
# AI assistant
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, examples=["Where can I donate winter clothes?"])


class ChatResponse(BaseModel):
    message: str
    suggestions: list[MatchSuggestion] | None = None


class ImageAnalysisResponse(BaseModel):
    analysis: str


class SuggestionsResponse(BaseModel):
    suggestions: list[str]


# ---------------------------------------------------------------------------
# Notifications & emergency
# ---------------------------------------------------------------------------

class Notification(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    read: bool = False
    metadata: dict[str, Any] = {}
    created_at: datetime


class SuccessResponse(BaseModel):
    success: bool


class EmergencyAlertRequest(BaseModel):
    alert_type: str = Field(min_length=1, examples=["flood"])
    location: Location
    instructions: str = Field(min_length=1, examples=["Move to higher ground near the school."])
