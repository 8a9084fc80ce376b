"""Service-layer tests — called directly, without HTTP.

These cover what the API tests can't reach easily: sort parsing on its
own, and the unique-constraint fallback when a pre-check loses a race.
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from plant_tracker.auth.jwt import TokenService
from plant_tracker.auth.password import PasswordHasher
from plant_tracker.errors import (
    EmailExists,
    InvalidCredentials,
    InvalidSort,
    PlantAlreadyExists,
    PlantNotFound,
    UserNotFound,
    UsernameExists,
)
from plant_tracker.services.auth_service import AuthService
from plant_tracker.services.plant_service import PlantService, PlantSort

PASSWORD = "password_123"


@pytest.fixture()
def auth_svc(db_session):
    return AuthService(
        db_session,
        PasswordHasher(rounds=4),
        TokenService(secret="service-test-secret"),
    )


@pytest.fixture()
def plant_svc(db_session):
    return PlantService(db_session)


# ─── Sort parsing ───────────────────────────────────────


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, PlantSort("name", "asc")),
        ("", PlantSort("name", "asc")),
        ("name", PlantSort("name", "asc")),
        ("name,desc", PlantSort("name", "desc")),
        ("lastWateredAt,ASC", PlantSort("lastWateredAt", "asc")),
        (" id , desc ", PlantSort("id", "desc")),
    ],
)
def test_sort_parse(raw, expected):
    assert PlantSort.parse(raw) == expected


@pytest.mark.parametrize("raw", ["password,asc", "name,sideways", "name,asc,id"])
def test_sort_parse_rejects(raw):
    with pytest.raises(InvalidSort):
        PlantSort.parse(raw)


# ─── Auth ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_then_login(auth_svc):
    registered = await auth_svc.register("carol@example.com", "carol", PASSWORD)
    assert isinstance(registered.user_id, uuid.UUID)
    assert auth_svc.tokens.validate(registered.jwt) == "carol@example.com"

    logged_in = await auth_svc.login("carol@example.com", PASSWORD)
    assert logged_in.user_id is None
    assert auth_svc.tokens.validate(logged_in.jwt) == "carol@example.com"


@pytest.mark.asyncio
async def test_login_failures_are_uniform(auth_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)

    with pytest.raises(InvalidCredentials) as wrong:
        await auth_svc.login("carol@example.com", "not_the_password")
    with pytest.raises(InvalidCredentials) as unknown:
        await auth_svc.login("nobody@example.com", PASSWORD)
    assert wrong.value.message == unknown.value.message


@pytest.mark.asyncio
async def test_register_race_maps_to_email_exists(auth_svc):
    """If the pre-check misses a concurrent insert, the constraint still wins."""
    await auth_svc.register("carol@example.com", "carol", PASSWORD)

    # First call is the pre-check (pretend it raced), then the real lookup.
    real = auth_svc.users.email_exists
    auth_svc.users.email_exists = AsyncMock(side_effect=[False, True])

    with pytest.raises(EmailExists):
        await auth_svc.register("carol@example.com", "carol2", PASSWORD)

    auth_svc.users.email_exists = real
    assert await auth_svc.users.email_exists("carol@example.com")


@pytest.mark.asyncio
async def test_register_race_maps_to_username_exists(auth_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)

    auth_svc.users.username_exists = AsyncMock(side_effect=[False, True])

    with pytest.raises(UsernameExists):
        await auth_svc.register("other@example.com", "carol", PASSWORD)

    assert auth_svc.users.username_exists.await_count == 2
    assert not await auth_svc.users.email_exists("other@example.com")


# ─── Plants ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_race_maps_to_plant_exists(auth_svc, plant_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)
    await plant_svc.create_plant("Oleander", "carol@example.com")

    plant_svc._name_taken = AsyncMock(return_value=False)
    with pytest.raises(PlantAlreadyExists):
        await plant_svc.create_plant("Oleander", "carol@example.com")


@pytest.mark.asyncio
async def test_unknown_owner(plant_svc):
    with pytest.raises(UserNotFound):
        await plant_svc.list_plants("ghost@example.com")


@pytest.mark.asyncio
async def test_ownership_scoping(auth_svc, plant_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)
    await auth_svc.register("dave@example.com", "dave", PASSWORD)
    plant = await plant_svc.create_plant("Fern", "carol@example.com")

    assert await plant_svc.list_plants("dave@example.com") == []

    for op in (
        plant_svc.update_last_watered(plant.id, "dave@example.com"),
        plant_svc.rename_plant(plant.id, "Stolen", "dave@example.com"),
        plant_svc.delete_plant(plant.id, "dave@example.com"),
    ):
        with pytest.raises(PlantNotFound):
            await op

    [still_there] = await plant_svc.list_plants("carol@example.com")
    assert still_there.id == plant.id
    assert still_there.name == "Fern"
    assert still_there.last_watered_at is None


@pytest.mark.asyncio
async def test_rename_to_same_name_is_noop(auth_svc, plant_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)
    plant = await plant_svc.create_plant("Fern", "carol@example.com")

    renamed = await plant_svc.rename_plant(plant.id, "Fern", "carol@example.com")
    assert renamed.id == plant.id
    assert renamed.name == "Fern"


@pytest.mark.asyncio
async def test_list_sorted_by_last_watered(auth_svc, plant_svc):
    await auth_svc.register("carol@example.com", "carol", PASSWORD)
    first = await plant_svc.create_plant("Basil", "carol@example.com")
    second = await plant_svc.create_plant("Oleander", "carol@example.com")
    await plant_svc.update_last_watered(second.id, "carol@example.com")
    await plant_svc.update_last_watered(first.id, "carol@example.com")

    plants = await plant_svc.list_plants(
        "carol@example.com", PlantSort("lastWateredAt", "desc")
    )
    assert [p.name for p in plants] == ["Basil", "Oleander"]
