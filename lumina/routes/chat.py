"""
AI assistant endpoints: chat, image analysis, and donation suggestions.

All three are straight pass-throughs to services/ai.py, which already
falls back to canned answers when OpenAI is unavailable.
"""

import base64

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from lumina.auth import get_current_user
from lumina.models.schemas import ChatRequest, ChatResponse, ImageAnalysisResponse, SuggestionsResponse
from lumina.services import ai

router = APIRouter(prefix="/api", tags=["AI Assistant"])


@router.post("/chat", response_model=ChatResponse, summary="Talk to the Lumina assistant")
async def chat(body: ChatRequest, user: dict = Depends(get_current_user)) -> ChatResponse:
    return await ai.chat_with_ai(body.message, user)


@router.post(
    "/analyze-image",
    response_model=ImageAnalysisResponse,
    summary="Describe a donation photo",
)
async def analyze_image(
    image: UploadFile | None = File(default=None),
    user: dict = Depends(get_current_user),
) -> ImageAnalysisResponse:
    data = await image.read() if image else b""
    if not data:
        raise HTTPException(status_code=400, detail="No image provided")

    encoded = base64.b64encode(data).decode("ascii")
    analysis = await ai.analyze_image(encoded, image.content_type or "image/jpeg")
    return ImageAnalysisResponse(analysis=analysis)


@router.get("/suggestions", response_model=SuggestionsResponse, summary="Donation ideas for you")
async def suggestions(user: dict = Depends(get_current_user)) -> SuggestionsResponse:
    user_type = getattr(user["user_type"], "value", user["user_type"])
    return SuggestionsResponse(
        suggestions=await ai.generate_donation_suggestions(user_type, user.get("location")),
    )
