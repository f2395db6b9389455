"""
Shared fixtures.

Every test starts from an empty store with all outbound integrations
unconfigured: no OpenAI key, no Razorpay keys, no Twilio account, no
Supabase project. SMS sends are recorded instead of just logged.
"""

import pytest
from fastapi.testclient import TestClient

from lumina.main import app
from lumina.services import ai, payments, sms, uploads
from lumina.store import storage


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    storage.reset()
    monkeypatch.setattr(ai, "OPENAI_API_KEY", "")
    monkeypatch.setattr(payments, "RAZORPAY_KEY_ID", "")
    monkeypatch.setattr(payments, "RAZORPAY_KEY_SECRET", "test-secret")
    monkeypatch.setattr(sms, "TWILIO_ACCOUNT_SID", "")
    monkeypatch.setattr(sms, "TWILIO_AUTH_TOKEN", "")
    monkeypatch.setattr(sms, "TWILIO_PHONE_NUMBER", "")
    monkeypatch.setattr(uploads, "SUPABASE_URL", "")
    monkeypatch.setattr(uploads, "SUPABASE_SERVICE_KEY", "")
    yield
    storage.reset()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sent_sms(monkeypatch):
    """Capture (to, message) for every SMS the app sends."""
    sent = []

    async def fake_send_sms(to, message, media_url=None):
        sent.append((to, message))
        return sms.MOCK_SID

    monkeypatch.setattr(sms, "send_sms", fake_send_sms)
    return sent


def register(client, email="asha@example.org", user_type="donor", **extra):
    """Create an account and return (user, auth headers)."""
    body = {"email": email, "password": "secret123", "name": extra.pop("name", "Asha Rao"), "user_type": user_type}
    body.update(extra)
    resp = client.post("/api/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


BENGALURU = {"lat": 12.9716, "lng": 77.5946, "address": "MG Road, Bengaluru"}
MYSURU = {"lat": 12.2958, "lng": 76.6394, "address": "Mysuru"}
