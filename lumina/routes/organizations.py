"""
/api/organizations -- NGO / business profile attached to a user account.
"""

from fastapi import APIRouter, Depends

from lumina.auth import get_current_user
from lumina.models.schemas import Organization, OrganizationCreate
from lumina.store import storage

router = APIRouter(prefix="/api/organizations", tags=["Organizations"])


@router.post("", response_model=Organization, status_code=201, summary="Create your organization")
async def create_organization(
    body: OrganizationCreate,
    user: dict = Depends(get_current_user),
) -> Organization:
    org = storage.create_organization({**body.model_dump(), "user_id": user["id"]})
    return Organization(**org)


@router.get(
    "/my",
    response_model=Organization | None,
    summary="Your organization",
    description="Returns null when the caller has not created one yet.",
)
async def my_organization(user: dict = Depends(get_current_user)) -> Organization | None:
    org = storage.get_organization_by_user_id(user["id"])
    return Organization(**org) if org else None
