"""
Lumina API -- Application entry point.

Run with:
    uvicorn lumina.main:app --reload

Then open http://localhost:8000/docs for the interactive Swagger UI.

This file:
  1. Configures logging
  2. Creates the FastAPI application and its CORS middleware
  3. Mounts all route modules (one per resource)
  4. Maps domain errors and unexpected exceptions to JSON responses
  5. Defines the health check and the realtime WebSocket
"""

import logging
import os

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lumina.errors import LuminaError
from lumina.routes import (
    activities,
    auth,
    chat,
    donations,
    emergency,
    feed,
    matches,
    notifications,
    organizations,
    payments,
    requests,
)
from lumina.services import ai, realtime, sms, uploads
from lumina.services import payments as gateway
from lumina.store import storage

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Create the FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Lumina API",
    version=VERSION,
    description=(
        "Community donation and volunteering platform. Donors, NGOs, businesses, "
        "farmers, medical providers and relief coordinators post and browse "
        "donations, requests and volunteer activities.\n\n"
        "Authenticate with `POST /api/auth/login` and send the token as "
        "`Authorization: Bearer <token>`.\n\n"
        "Realtime activity is pushed to WebSocket clients on `/ws`."
    ),
)

# ---------------------------------------------------------------------------
# CORS Middleware
#
# CORS_ORIGINS is a comma-separated list; "*" (the default) allows any origin.
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Mount route modules
# ---------------------------------------------------------------------------

app.include_router(auth.router)
app.include_router(organizations.router)
app.include_router(donations.router)
app.include_router(requests.router)
app.include_router(activities.router)
app.include_router(matches.router)
app.include_router(feed.router)
app.include_router(payments.router)
app.include_router(chat.router)
app.include_router(notifications.router)
app.include_router(emergency.router)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@app.exception_handler(LuminaError)
async def lumina_error_handler(request: Request, exc: LuminaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get(
    "/api/health",
    summary="Health check",
    description="Returns the current status of the API and which integrations are configured.",
    tags=["System"],
)
async def health():
    return {
        "status": "healthy",
        "version": VERSION,
        "integrations": {
            "openai": bool(ai.OPENAI_API_KEY),
            "razorpay": bool(gateway.RAZORPAY_KEY_ID and gateway.RAZORPAY_KEY_SECRET),
            "twilio": sms.is_configured(),
            "supabase": bool(uploads.SUPABASE_URL and uploads.SUPABASE_SERVICE_KEY),
        },
        "realtime_clients": len(realtime.hub.connections),
        "records": storage.counts(),
    }


# ---------------------------------------------------------------------------
# Realtime
# ---------------------------------------------------------------------------

@app.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
    """Push channel for new donations, requests, activities and emergencies.
    Anything the client sends is ignored."""
    await realtime.hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        realtime.hub.disconnect(websocket)
