"""
AI assistant (OpenAI chat completions).

Four calls, all of them thin prompts around the chat completions API:
  - generate_smart_matches: score a user against donations/requests
  - chat_with_ai:            the Lumina chat assistant
  - analyze_image:           describe an uploaded donation photo
  - generate_donation_suggestions: ideas for a user type + location

None of these ever raise. With no API key configured, or when the call
fails, each returns a fallback and logs a warning -- the route that asked
carries on without AI output.
"""

import json
import logging
import os

from openai import AsyncOpenAI

from lumina.models.schemas import ChatResponse, MatchSuggestion

logger = logging.getLogger(__name__)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_KEY") or ""
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "30"))

CHAT_FALLBACK = (
    "I'm having trouble responding right now, but I'm here to help you "
    "connect with your community and make a difference!"
)
CHAT_EMPTY = "I'm here to help you make a positive impact in your community!"
IMAGE_FALLBACK = "Image analysis temporarily unavailable"

MATCHING_SYSTEM_PROMPT = (
    "You are an AI matching expert for a donation and volunteering platform. "
    "Provide intelligent matching suggestions."
)

SUGGESTIONS_SYSTEM_PROMPT = (
    "Generate relevant donation suggestions based on user type and location. "
    'Respond with JSON of the form {"suggestions": ["..."]}.'
)


def _client() -> AsyncOpenAI | None:
    if not OPENAI_API_KEY:
        return None
    return AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=OPENAI_TIMEOUT)


def _value(field):
    return getattr(field, "value", field)


def _matching_prompt(user: dict, items: list[dict]) -> str:
    location = user.get("location")
    return (
        "Analyze the user profile and available items to generate smart matching suggestions.\n\n"
        "User Profile:\n"
        f"- Type: {_value(user.get('user_type'))}\n"
        f"- Location: {json.dumps(location)}\n"
        f"- Bio: {user.get('bio') or 'No bio provided'}\n\n"
        "Available Items:\n"
        f"{json.dumps(items, indent=2, default=str)}\n\n"
        "Generate matching suggestions with scores (0-1) and reasons. Consider:\n"
        "1. Geographic proximity\n"
        "2. User type compatibility\n"
        "3. Item relevance to user's interests/needs\n"
        "4. Urgency levels\n"
        "5. Capacity matching\n\n"
        "Respond with JSON in this format:\n"
        '{"matches": [{"type": "donation", "score": 0.95, '
        '"reason": "High compatibility reason", "item_id": "item-id"}]}'
    )


def parse_matches(content: str | None) -> list[MatchSuggestion]:
    """Turn the model's JSON answer into suggestions.

    Entries that are not objects are skipped; scores are clamped to 0-1 and
    an unknown type falls back to "donation". Anything unparseable yields []."""
    try:
        data = json.loads(content or '{"matches": []}')
    except json.JSONDecodeError:
        logger.warning("Matcher returned non-JSON content: %.120s", content)
        return []

    raw = data.get("matches") if isinstance(data, dict) else None
    suggestions: list[MatchSuggestion] = []
    for entry in raw or []:
        if not isinstance(entry, dict):
            continue
        try:
            score = max(0.0, min(1.0, float(entry.get("score", 0))))
        except (TypeError, ValueError):
            continue
        kind = entry.get("type")
        suggestions.append(MatchSuggestion(
            type=kind if kind in ("donation", "request", "volunteer") else "donation",
            score=score,
            reason=str(entry.get("reason") or ""),
            item_id=entry.get("item_id") or entry.get("itemId"),
        ))
    return suggestions


async def generate_smart_matches(user: dict, items: list[dict]) -> list[MatchSuggestion]:
    client = _client()
    if client is None:
        logger.info("OpenAI not configured, skipping smart matching")
        return []

    try:
        response = await client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": MATCHING_SYSTEM_PROMPT},
                {"role": "user", "content": _matching_prompt(user, items)},
            ],
            response_format={"type": "json_object"},
        )
    except Exception as e:
        logger.warning("Smart matching failed: %s", e)
        return []

    return parse_matches(response.choices[0].message.content)


def chat_system_prompt(user: dict | None) -> str:
    context = ""
    if user:
        location = user.get("location") or {}
        context = (
            "\nUser Context:\n"
            f"- Type: {_value(user.get('user_type'))}\n"
            f"- Location: {location.get('address') or 'Not specified'}\n"
        )
    return (
        "You are Lumina's AI assistant, helping users with donations, volunteering, "
        "and community engagement. Be helpful, empathetic, and provide actionable advice."
        f"{context}\n"
        "You can help with:\n"
        "- Finding donation opportunities\n"
        "- Suggesting volunteer activities\n"
        "- Connecting users with NGOs\n"
        "- Emergency disaster relief coordination\n"
        "- Donation tracking and impact measurement\n\n"
        "Always be encouraging and focus on the positive impact users can make."
    )


async def chat_with_ai(message: str, user: dict | None = None) -> ChatResponse:
    client = _client()
    if client is None:
        logger.info("OpenAI not configured, returning chat fallback")
        return ChatResponse(message=CHAT_FALLBACK)

    try:
        response = await client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": chat_system_prompt(user)},
                {"role": "user", "content": message},
            ],
        )
    except Exception as e:
        logger.warning("AI chat failed: %s", e)
        return ChatResponse(message=CHAT_FALLBACK)

    return ChatResponse(message=response.choices[0].message.content or CHAT_EMPTY)


async def analyze_image(base64_image: str, mime_type: str = "image/jpeg") -> str:
    client = _client()
    if client is None:
        return IMAGE_FALLBACK

    try:
        response = await client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": (
                            "Analyze this donation/request image. Identify what items are shown, "
                            "their condition, quantity, and any relevant details for donation matching."
                        ),
                    },
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{base64_image}"},
                    },
                ],
            }],
            max_completion_tokens=1024,
        )
    except Exception as e:
        logger.warning("Image analysis failed: %s", e)
        return IMAGE_FALLBACK

    return response.choices[0].message.content or "Unable to analyze image"


async def generate_donation_suggestions(user_type: str, location: dict | None = None) -> list[str]:
    client = _client()
    if client is None:
        return []

    try:
        response = await client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": SUGGESTIONS_SYSTEM_PROMPT},
                {"role": "user", "content": f"User type: {user_type}, Location: {json.dumps(location)}"},
            ],
            response_format={"type": "json_object"},
        )
        data = json.loads(response.choices[0].message.content or '{"suggestions": []}')
    except Exception as e:
        logger.warning("Donation suggestions failed: %s", e)
        return []

    suggestions = data.get("suggestions") if isinstance(data, dict) else None
    return [str(s) for s in suggestions or []]
