"""
/api/activity-feed -- The public "what's happening" stream.

Feed items are written by the store itself whenever a donation, request,
or volunteer activity is created.
"""

from fastapi import APIRouter, Query

from lumina.models.schemas import ActivityFeedItem
from lumina.store import storage

router = APIRouter(prefix="/api/activity-feed", tags=["Activity Feed"])


@router.get("", response_model=list[ActivityFeedItem], summary="Latest feed items, newest first")
async def activity_feed(
    limit: int = Query(default=50, ge=1, le=200, description="Maximum number of items."),
) -> list[ActivityFeedItem]:
    return [ActivityFeedItem(**item) for item in storage.get_activity_feed(limit)]


@router.post("/{item_id}/like", response_model=ActivityFeedItem, summary="Like a feed item")
async def like_item(item_id: str) -> ActivityFeedItem:
    return ActivityFeedItem(**storage.like_activity_feed_item(item_id))
