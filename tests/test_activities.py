"""
Tests for volunteer activities and sign-ups.
"""

from conftest import BENGALURU, MYSURU, register


def _post(client, headers, **extra):
    body = {
        "title": "Beach clean-up",
        "description": "Bring gloves",
        "location": BENGALURU,
        "start_time": "2027-03-01T09:00:00Z",
        "end_time": "2027-03-01T12:00:00Z",
    }
    body.update(extra)
    resp = client.post("/api/activities", headers=headers, json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestActivities:

    def test_create_then_get(self, client):
        user, headers = register(client, user_type="ngo")
        activity = _post(client, headers, max_volunteers=10, skills=["lifting"])
        assert activity["organizer_id"] == user["id"]
        assert activity["current_volunteers"] == 0
        assert client.get(f"/api/activities/{activity['id']}").json() == activity

    def test_end_must_follow_start(self, client):
        _, headers = register(client, user_type="ngo")
        resp = client.post("/api/activities", headers=headers, json={
            "title": "Backwards", "description": "x", "location": BENGALURU,
            "start_time": "2027-03-01T12:00:00Z", "end_time": "2027-03-01T09:00:00Z",
        })
        assert resp.status_code == 422

    def test_listed_by_start_time(self, client):
        _, headers = register(client, user_type="ngo")
        later = _post(client, headers, start_time="2027-04-01T09:00:00Z", end_time="2027-04-01T10:00:00Z")
        sooner = _post(client, headers)
        ids = [a["id"] for a in client.get("/api/activities").json()]
        assert ids == [sooner["id"], later["id"]]

    def test_geofilter(self, client):
        _, headers = register(client, user_type="ngo")
        near = _post(client, headers)
        _post(client, headers, location=MYSURU)
        found = client.get("/api/activities", params={"lat": 12.97, "lng": 77.59}).json()
        assert [a["id"] for a in found] == [near["id"]]

    def test_missing(self, client):
        assert client.get("/api/activities/nope").status_code == 404


class TestRegistration:

    def test_sign_up(self, client, sent_sms):
        organizer, org_headers = register(client, user_type="ngo")
        volunteer, vol_headers = register(
            client, email="ravi@example.org", name="Ravi", user_type="volunteer", phone="+919811111111",
        )
        activity = _post(client, org_headers, max_volunteers=2)

        resp = client.post(
            f"/api/activities/{activity['id']}/register", headers=vol_headers, json={"message": "I can drive"},
        )
        assert resp.status_code == 201
        registration = resp.json()
        assert registration["volunteer_id"] == volunteer["id"]
        assert registration["status"] == "pending"
        assert registration["message"] == "I can drive"

        assert client.get(f"/api/activities/{activity['id']}").json()["current_volunteers"] == 1

        mine = client.get("/api/registrations/my", headers=vol_headers).json()
        assert [r["id"] for r in mine] == [registration["id"]]

        notes = client.get("/api/notifications", headers=org_headers).json()
        assert len(notes) == 1
        assert "Ravi" in notes[0]["message"]

        assert len(sent_sms) == 1
        assert sent_sms[0][0] == "+919811111111"
        assert "Beach clean-up" in sent_sms[0][1]
        assert "MG Road, Bengaluru" in sent_sms[0][1]

    def test_without_body(self, client):
        _, org_headers = register(client, user_type="ngo")
        _, vol_headers = register(client, email="ravi@example.org", user_type="volunteer")
        activity = _post(client, org_headers)
        resp = client.post(f"/api/activities/{activity['id']}/register", headers=vol_headers)
        assert resp.status_code == 201
        assert resp.json()["message"] is None

    def test_twice_is_conflict(self, client):
        _, org_headers = register(client, user_type="ngo")
        _, vol_headers = register(client, email="ravi@example.org", user_type="volunteer")
        activity = _post(client, org_headers)
        url = f"/api/activities/{activity['id']}/register"
        assert client.post(url, headers=vol_headers).status_code == 201

        resp = client.post(url, headers=vol_headers)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Already registered for this activity"
        assert client.get(f"/api/activities/{activity['id']}").json()["current_volunteers"] == 1

    def test_capacity(self, client):
        _, org_headers = register(client, user_type="ngo")
        _, first = register(client, email="a@example.org", user_type="volunteer")
        _, second = register(client, email="b@example.org", user_type="volunteer")
        activity = _post(client, org_headers, max_volunteers=1)
        url = f"/api/activities/{activity['id']}/register"

        assert client.post(url, headers=first).status_code == 201
        resp = client.post(url, headers=second)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Activity is full"

    def test_unknown_activity(self, client):
        _, headers = register(client, user_type="volunteer")
        assert client.post("/api/activities/nope/register", headers=headers).status_code == 404
