# tests/test_api_matches.py

"""Tests for the Match API endpoints."""

import pytest
from httpx import AsyncClient

# =============================================================================
# Helper Functions
# =============================================================================


async def create_player(client: AsyncClient, name: str) -> int:
    """Helper to create a player and return its ID."""
    res = await client.post("/players/", json={"name": name})
    assert res.status_code == 201
    return int(res.json()["id"])


async def create_players(client: AsyncClient, *names: str) -> list[int]:
    return [await create_player(client, name) for name in names]


# =============================================================================
# Create
# =============================================================================


@pytest.mark.asyncio
async def test_create_match(async_client: AsyncClient):
    """A match recorded now rates both players through the fast path."""
    # 1. SETUP
    alice, bob = await create_players(async_client, "Alice", "Bob")

    # 2. EXECUTE
    response = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice}
    )

    # 3. ASSERT
    assert response.status_code == 201
    data = response.json()
    assert data["winner_id"] == alice
    assert data["points"] == 20
    assert data["is_rated"] is True
    assert "recorded_at" in data
    assert len(data["match_date"]) == 10
    assert data["player_a"]["rating"] == pytest.approx(1662.3, abs=0.1)
    assert data["player_a"]["rd"] == pytest.approx(290.3, abs=0.1)
    assert data["player_b"]["rating"] == pytest.approx(1337.7, abs=0.1)
    assert data["player_b"]["total_rated_matches"] == 1


@pytest.mark.asyncio
async def test_create_short_format_match(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")

    response = await async_client.post(
        "/matches/",
        json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice, "points": 10},
    )

    assert response.status_code == 201
    assert 1500.0 < response.json()["player_a"]["rating"] < 1662.0


@pytest.mark.asyncio
async def test_create_backdated_match(async_client: AsyncClient):
    """A backdated match is replayed; RD has since grown back to the ceiling."""
    alice, bob = await create_players(async_client, "Alice", "Bob")

    response = await async_client.post(
        "/matches/",
        json={
            "player_a_id": alice,
            "player_b_id": bob,
            "winner_id": bob,
            "recorded_at": "2020-06-01T12:00:00Z",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["match_date"] == "2020-06-01"
    assert data["player_b"]["rating"] == pytest.approx(1662.3, abs=0.1)
    assert data["player_b"]["rd"] == pytest.approx(350.0)
    assert data["player_b"]["total_rated_matches"] == 1


@pytest.mark.asyncio
async def test_create_casual_match(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")

    response = await async_client.post(
        "/matches/",
        json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice, "is_rated": False},
    )

    assert response.status_code == 201
    assert response.json()["player_a"]["rating"] == 1500.0
    assert response.json()["player_a"]["total_rated_matches"] == 0


@pytest.mark.asyncio
async def test_create_match_against_self(async_client: AsyncClient):
    (alice,) = await create_players(async_client, "Alice")

    response = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": alice, "winner_id": alice}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "SamePlayerError"


@pytest.mark.asyncio
async def test_create_match_with_outside_winner(async_client: AsyncClient):
    alice, bob, carol = await create_players(async_client, "Alice", "Bob", "Carol")

    response = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": carol}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidWinnerError"


@pytest.mark.asyncio
async def test_create_match_with_unknown_player(async_client: AsyncClient):
    (alice,) = await create_players(async_client, "Alice")

    response = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": 999, "winner_id": alice}
    )

    assert response.status_code == 404
    assert "999" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_match_with_invalid_format(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")

    response = await async_client.post(
        "/matches/",
        json={"player_a_id": alice, "player_b_id": bob, "winner_id": bob, "points": 15},
    )

    assert response.status_code == 422


# =============================================================================
# Read and List
# =============================================================================


@pytest.mark.asyncio
async def test_read_match(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")
    created = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": bob}
    )
    match_id = created.json()["id"]

    response = await async_client.get(f"/matches/{match_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == match_id
    assert data["player_a"]["name"] == "Alice"
    assert data["player_b"]["name"] == "Bob"


@pytest.mark.asyncio
async def test_read_match_not_found(async_client: AsyncClient):
    response = await async_client.get("/matches/999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_matches_filters(async_client: AsyncClient):
    alice, bob, carol = await create_players(async_client, "Alice", "Bob", "Carol")
    for a, b, rated in ((alice, bob, True), (bob, carol, True), (alice, carol, False)):
        res = await async_client.post(
            "/matches/",
            json={"player_a_id": a, "player_b_id": b, "winner_id": a, "is_rated": rated},
        )
        assert res.status_code == 201

    everything = await async_client.get("/matches/")
    for_carol = await async_client.get("/matches/", params={"player_id": carol})
    casual = await async_client.get("/matches/", params={"is_rated": False})
    oldest_first = await async_client.get(
        "/matches/", params={"sort_order": "asc", "limit": 1}
    )

    assert everything.json()["total"] == 3
    assert for_carol.json()["total"] == 2
    assert casual.json()["total"] == 1
    assert casual.json()["items"][0]["player_b"]["name"] == "Carol"
    assert oldest_first.json()["items"][0]["player_b"]["name"] == "Bob"
    assert oldest_first.json()["has_more"] is True


# =============================================================================
# Update and Delete
# =============================================================================


@pytest.mark.asyncio
async def test_update_match_result(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")
    created = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice}
    )
    match_id = created.json()["id"]

    response = await async_client.put(f"/matches/{match_id}", json={"winner_id": bob})

    assert response.status_code == 200
    data = response.json()
    assert data["winner_id"] == bob
    assert data["player_b"]["rating"] > 1600.0
    assert data["player_a"]["rating"] < 1400.0


@pytest.mark.asyncio
async def test_update_match_to_same_player_rejected(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")
    created = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice}
    )

    response = await async_client.put(
        f"/matches/{created.json()['id']}", json={"player_b_id": alice}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_match_restores_ratings(async_client: AsyncClient):
    alice, bob = await create_players(async_client, "Alice", "Bob")
    created = await async_client.post(
        "/matches/", json={"player_a_id": alice, "player_b_id": bob, "winner_id": alice}
    )
    match_id = created.json()["id"]

    response = await async_client.delete(f"/matches/{match_id}")

    assert response.status_code == 204
    assert (await async_client.get(f"/matches/{match_id}")).status_code == 404
    player = (await async_client.get(f"/players/{alice}")).json()
    assert player["rating"] == 1500.0
    assert player["total_rated_matches"] == 0
    assert (await async_client.delete(f"/matches/{match_id}")).status_code == 404
