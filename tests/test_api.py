import pytest

from tests.conftest import PASSCODE


async def _add(client, slug, name, poker_enabled=False):
    response = await client.post(
        f"/api/rooms/{slug}/participants", json={"name": name, "pokerEnabled": poker_enabled}
    )
    assert response.status_code == 201
    return response.json()["data"]


# ═══════════════════════════════════════════════════════════════
#  Rooms & session gate
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_create_room_and_read_it_back(client):
    response = await client.post(
        "/api/rooms", json={"name": "Daily FE", "slug": "daily-fe", "passcode": PASSCODE}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["ok"] is True
    assert body["data"]["slug"] == "daily-fe"
    assert "passcode" not in body["data"]
    assert "passcodeHash" not in body["data"]

    response = await client.get("/api/rooms/daily-fe")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Daily FE"
    assert data["count"] == {"participants": 0, "spinHistory": 0}


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(client, authed_slug):
    response = await client.post(
        "/api/rooms", json={"name": "Again", "slug": authed_slug, "passcode": "x"}
    )
    assert response.status_code == 409
    assert response.json() == {
        "ok": False,
        "code": "CONFLICT",
        "error": "A room with this slug already exists",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Bad", "slug": "Daily FE", "passcode": "1"},
        {"name": "", "slug": "daily", "passcode": "1"},
        {"name": "No passcode", "slug": "daily"},
    ],
)
async def test_invalid_room_payloads(client, payload):
    response = await client.post("/api/rooms", json=payload)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_unknown_room(client):
    response = await client.get("/api/rooms/nope")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_session_gate(client):
    await client.post("/api/rooms", json={"name": "Daily", "slug": "daily", "passcode": PASSCODE})

    response = await client.post("/api/rooms/daily/participants", json={"name": "Ana"})
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"

    response = await client.post("/api/rooms/daily/auth", json={"passcode": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Incorrect passcode"

    response = await client.post("/api/rooms/daily/auth", json={"passcode": PASSCODE})
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"].lower()
    assert "room_session=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "max-age=604800" in set_cookie

    assert (await client.get("/api/rooms/daily/check-session")).status_code == 200

    await client.post("/api/rooms/daily/logout")
    response = await client.get("/api/rooms/daily/check-session")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_is_scoped_to_its_room(client, authed_slug):
    await client.post("/api/rooms", json={"name": "Other", "slug": "other", "passcode": "other"})

    response = await client.get("/api/rooms/other/check-session")
    assert response.status_code == 401

    response = await client.delete("/api/rooms/other")
    assert response.status_code == 401


# ═══════════════════════════════════════════════════════════════
#  Roster & roulette
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_roulette_scenario(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana")
    bea = await _add(client, authed_slug, "  Bea  ")
    caio = await _add(client, authed_slug, "Caio")
    assert bea["name"] == "Bea"
    assert ana["isPresent"] is True and ana["winCount"] == 0

    response = await client.patch(f"/api/rooms/{authed_slug}/participants/{caio['id']}")
    assert response.json()["data"]["isPresent"] is False

    response = await client.post(f"/api/rooms/{authed_slug}/spin")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["winner"]["id"] in {ana["id"], bea["id"]}
    assert data["winner"]["winCount"] == 1
    assert data["spinHistory"]["participant"]["id"] == data["winner"]["id"]

    response = await client.get(f"/api/rooms/{authed_slug}/history")
    history = response.json()["data"]
    assert len(history) == 1
    assert history[0]["participantId"] == data["winner"]["id"]

    response = await client.get(f"/api/rooms/{authed_slug}")
    assert response.json()["data"]["count"] == {"participants": 3, "spinHistory": 1}

    response = await client.post(f"/api/rooms/{authed_slug}/reset")
    assert response.status_code == 200
    assert (await client.get(f"/api/rooms/{authed_slug}/history")).json()["data"] == []
    participants = (await client.get(f"/api/rooms/{authed_slug}/participants")).json()["data"]
    assert [p["winCount"] for p in participants] == [0, 0, 0]


@pytest.mark.asyncio
async def test_absent_participant_never_wins(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana")
    bea = await _add(client, authed_slug, "Bea")
    caio = await _add(client, authed_slug, "Caio")
    await client.patch(f"/api/rooms/{authed_slug}/participants/{caio['id']}")

    winners = set()
    for _ in range(200):
        response = await client.post(f"/api/rooms/{authed_slug}/spin")
        assert response.status_code == 200
        winners.add(response.json()["data"]["winner"]["id"])

    assert caio["id"] not in winners
    assert winners <= {ana["id"], bea["id"]}
    participants = (await client.get(f"/api/rooms/{authed_slug}/participants")).json()["data"]
    wins = {p["id"]: p["winCount"] for p in participants}
    assert wins[caio["id"]] == 0
    assert wins[ana["id"]] + wins[bea["id"]] == 200


@pytest.mark.asyncio
async def test_spin_with_nobody_present(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana")
    await client.patch(f"/api/rooms/{authed_slug}/participants/{ana['id']}")

    response = await client.post(f"/api/rooms/{authed_slug}/spin")
    assert response.status_code == 400
    assert response.json()["code"] == "NO_PRESENT_PARTICIPANTS"


@pytest.mark.asyncio
async def test_participant_name_validation(client, authed_slug):
    response = await client.post(f"/api/rooms/{authed_slug}/participants", json={"name": "   "})
    assert response.status_code == 400
    assert "Name is required" in response.json()["error"]

    response = await client.post(f"/api/rooms/{authed_slug}/participants", json={"name": "x" * 101})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_history_limit_must_be_positive(client, authed_slug):
    response = await client.get(f"/api/rooms/{authed_slug}/history", params={"limit": 0})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_participant_of_other_room_is_forbidden(client, authed_slug):
    await client.post("/api/rooms", json={"name": "Other", "slug": "other", "passcode": "other"})
    await client.post("/api/rooms/other/auth", json={"passcode": "other"})
    stranger = await _add(client, "other", "Dani")

    await client.post(f"/api/rooms/{authed_slug}/auth", json={"passcode": PASSCODE})
    response = await client.patch(f"/api/rooms/{authed_slug}/participants/{stranger['id']}")
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_remove_participant_and_delete_room(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana", poker_enabled=True)
    await client.post(f"/api/rooms/{authed_slug}/spin")
    await client.post(
        f"/api/rooms/{authed_slug}/poker/claim", json={"participantId": ana["id"], "sessionId": "s-1"}
    )
    await client.post(
        f"/api/rooms/{authed_slug}/impediments",
        json={"participantId": ana["id"], "status": "RED", "description": "blocked"},
    )

    response = await client.delete(f"/api/rooms/{authed_slug}/participants/{ana['id']}")
    assert response.status_code == 200
    assert (await client.get(f"/api/rooms/{authed_slug}/participants")).json()["data"] == []
    assert (await client.get(f"/api/rooms/{authed_slug}/history")).json()["data"] == []

    await _add(client, authed_slug, "Bea")
    response = await client.delete(f"/api/rooms/{authed_slug}")
    assert response.status_code == 200
    assert (await client.get(f"/api/rooms/{authed_slug}")).status_code == 404


# ═══════════════════════════════════════════════════════════════
#  Planning poker
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_poker_scenario(client, authed_slug):
    slug = authed_slug
    ana = await _add(client, slug, "Ana", poker_enabled=True)
    bea = await _add(client, slug, "Bea", poker_enabled=True)
    caio = await _add(client, slug, "Caio")

    response = await client.get(f"/api/rooms/{slug}/poker")
    assert response.status_code == 200
    state = response.json()["data"]
    round_id = state["round"]["id"]
    assert state["round"]["status"] == "VOTING"
    assert state["eligibleCount"] == 2
    assert state["stats"] is None

    claim = await client.post(
        f"/api/rooms/{slug}/poker/claim", json={"participantId": ana["id"], "sessionId": "browser-a"}
    )
    assert claim.status_code == 200
    assert "expiresAt" in claim.json()["data"]["claim"]

    taken = await client.post(
        f"/api/rooms/{slug}/poker/claim", json={"participantId": ana["id"], "sessionId": "browser-x"}
    )
    assert taken.status_code == 409
    assert taken.json()["code"] == "NAME_TAKEN"

    await client.post(
        f"/api/rooms/{slug}/poker/claim", json={"participantId": bea["id"], "sessionId": "browser-b"}
    )

    vote = {"roundId": round_id, "participantId": ana["id"], "sessionId": "browser-a", "value": "5"}
    assert (await client.post(f"/api/rooms/{slug}/poker/vote", json=vote)).status_code == 200

    response = await client.post(f"/api/rooms/{slug}/poker/vote", json={**vote, "value": "7"})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    response = await client.post(f"/api/rooms/{slug}/poker/vote", json={**vote, "sessionId": "browser-b"})
    assert response.status_code == 401

    state = (await client.get(f"/api/rooms/{slug}/poker")).json()["data"]
    summary = {s["participantId"]: s for s in state["voteSummary"]}
    assert summary[ana["id"]] == {"participantId": ana["id"], "hasVoted": True, "value": None}
    assert summary[bea["id"]]["hasVoted"] is False
    assert caio["id"] not in summary

    response = await client.post(f"/api/rooms/{slug}/poker/reveal", json={"roundId": round_id})
    assert response.status_code == 400
    assert response.json()["code"] == "INCOMPLETE_VOTES"

    await client.post(
        f"/api/rooms/{slug}/poker/vote",
        json={"roundId": round_id, "participantId": bea["id"], "sessionId": "browser-b", "value": "8"},
    )
    response = await client.post(f"/api/rooms/{slug}/poker/reveal", json={"roundId": round_id})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["round"]["status"] == "REVEALED"
    assert "alreadyRevealed" not in data
    assert data["stats"] == {
        "average": 6.5,
        "median": 6.5,
        "recommendation": 5,
        "hasCoffee": False,
        "numericCount": 2,
    }

    again = await client.post(f"/api/rooms/{slug}/poker/reveal", json={"roundId": round_id})
    assert again.json()["data"]["alreadyRevealed"] is True

    state = (await client.get(f"/api/rooms/{slug}/poker")).json()["data"]
    assert {s["participantId"]: s["value"] for s in state["voteSummary"]} == {
        ana["id"]: "5",
        bea["id"]: "8",
    }
    assert state["stats"]["recommendation"] == 5

    response = await client.post(f"/api/rooms/{slug}/poker/vote", json=vote)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATE"

    response = await client.post(f"/api/rooms/{slug}/poker/new-round")
    new_round = response.json()["data"]["round"]
    assert new_round["id"] != round_id
    assert new_round["status"] == "VOTING"

    response = await client.post(f"/api/rooms/{slug}/poker/reset")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_toggle_poker_eligibility(client, authed_slug):
    caio = await _add(client, authed_slug, "Caio")
    response = await client.patch(
        f"/api/rooms/{authed_slug}/poker/participants/{caio['id']}", json={"pokerEnabled": True}
    )
    assert response.status_code == 200
    assert response.json()["data"]["pokerEnabled"] is True

    state = (await client.get(f"/api/rooms/{authed_slug}/poker")).json()["data"]
    assert state["eligibleCount"] == 1


@pytest.mark.asyncio
async def test_poker_requires_session(client, authed_slug):
    await client.post(f"/api/rooms/{authed_slug}/logout")
    response = await client.get(f"/api/rooms/{authed_slug}/poker")
    assert response.status_code == 401


# ═══════════════════════════════════════════════════════════════
#  Impediments
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_impediments_flow(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana")

    response = await client.post(
        f"/api/rooms/{authed_slug}/impediments",
        json={"participantId": ana["id"], "status": "YELLOW", "description": "y" * 120},
    )
    assert response.status_code == 201
    entry = response.json()["data"]
    assert entry["status"] == "YELLOW"
    assert len(entry["description"]) == 100

    response = await client.get(f"/api/rooms/{authed_slug}/impediments")
    data = response.json()["data"]
    assert data["todayByParticipant"][str(ana["id"])]["status"] == "YELLOW"
    assert data["previousDayActive"] == []

    response = await client.post(
        f"/api/rooms/{authed_slug}/impediments/resolve", json={"participantId": ana["id"]}
    )
    assert response.status_code == 200

    today = (await client.get(f"/api/rooms/{authed_slug}/impediments")).json()["data"]
    assert today["todayByParticipant"][str(ana["id"])] == {
        "id": entry["id"],
        "status": "GREEN",
        "description": None,
    }

    response = await client.post(
        f"/api/rooms/{authed_slug}/impediments/resolve", json={"participantId": ana["id"]}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_impediments_for_explicit_date(client, authed_slug):
    ana = await _add(client, authed_slug, "Ana")
    await client.post(
        f"/api/rooms/{authed_slug}/impediments",
        json={"participantId": ana["id"], "status": "RED", "description": "db", "date": "2026-03-09"},
    )

    data = (
        await client.get(f"/api/rooms/{authed_slug}/impediments", params={"date": "2026-03-10"})
    ).json()["data"]
    assert data["todayByParticipant"] == {}
    assert [e["participantId"] for e in data["previousDayActive"]] == [ana["id"]]

    response = await client.post(
        f"/api/rooms/{authed_slug}/impediments",
        json={"participantId": ana["id"], "status": "PURPLE"},
    )
    assert response.status_code == 400
