"""
/api/matches -- AI-suggested pairings for the authenticated user.

Matches are written when a donation or request is posted: the new record
goes to the LLM matcher together with the poster's profile, and every
suggestion that comes back is stored against the poster, who gets a text
naming the best-scoring matched item when they have a phone on file.
"""

import logging

from fastapi import APIRouter, Depends

from lumina.auth import get_current_user
from lumina.models.schemas import Match, MatchSuggestion
from lumina.services import ai, sms
from lumina.store import storage

logger = logging.getLogger(__name__)

GENERIC_MATCH_TITLE = "New listings in your area"

router = APIRouter(prefix="/api/matches", tags=["Matches"])


def matched_title(suggestion: MatchSuggestion) -> str | None:
    """Title of the record a suggestion points at, if it still exists."""
    lookup = {
        "donation": storage.get_donation,
        "request": storage.get_request,
        "volunteer": storage.get_activity,
    }[suggestion.type]
    record = lookup(suggestion.item_id) if suggestion.item_id else None
    return record["title"] if record else None


async def record_matches(user: dict, item: dict, field: str) -> list[dict]:
    """Ask the matcher about one new item and store what it suggests.

    field is the Match column the item id goes in ("donation_id" or "request_id")."""
    suggestions = await ai.generate_smart_matches(user, [item])
    matches = [
        storage.create_match({
            field: item["id"],
            "user_id": user["id"],
            "score": s.score,
            "reason": s.reason,
            "status": "pending",
        })
        for s in suggestions
    ]
    if matches:
        logger.info("Stored %d match(es) for %s %s", len(matches), field, item["id"])
        if user.get("phone"):
            best = max(suggestions, key=lambda s: s.score)
            await sms.send_match_notification(
                user["phone"], user["name"], best.type.title(), matched_title(best) or GENERIC_MATCH_TITLE,
            )
    return matches


@router.get("", response_model=list[Match], summary="Your matches")
async def list_matches(user: dict = Depends(get_current_user)) -> list[Match]:
    return [Match(**m) for m in storage.get_matches(user["id"])]
