"""
/api/auth -- Registration, login, and the current user's profile.

Tokens returned here go in the Authorization header as "Bearer <token>".
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from lumina.auth import create_access_token, get_current_user, hash_password, verify_password
from lumina.models.schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    ProfileUpdate,
    RegisterRequest,
    User,
)
from lumina.store import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    summary="Create an account",
)
async def register(body: RegisterRequest) -> AuthResponse:
    if storage.get_user_by_email(body.email):
        raise HTTPException(status_code=409, detail="User already exists")

    data = body.model_dump(exclude={"password"})
    data["password_hash"] = hash_password(body.password)
    user = storage.create_user(data)
    logger.info("Registered %s user %s", body.user_type.value, user["id"])

    return AuthResponse(user=User(**user), token=create_access_token(user["id"]))


@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
async def login(body: LoginRequest) -> AuthResponse:
    user = storage.get_user_by_email(body.email)
    if not user or not verify_password(body.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return AuthResponse(user=User(**user), token=create_access_token(user["id"]))


@router.get("/me", response_model=MeResponse, summary="The authenticated user")
async def me(user: dict = Depends(get_current_user)) -> MeResponse:
    return MeResponse(user=User(**user))


@router.patch("/me", response_model=MeResponse, summary="Update your profile")
async def update_me(body: ProfileUpdate, user: dict = Depends(get_current_user)) -> MeResponse:
    changes = body.model_dump(exclude_unset=True)
    updated = storage.update_user(user["id"], changes)
    return MeResponse(user=User(**updated))
