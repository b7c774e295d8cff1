"""Tests for the resource ledger.

Covers:
- add / consume / adjust through the service layer
- all-or-nothing adjustments and deterministic error reporting
- military power cannot be consumed
- the preserved clamp-at-zero quirk of add
- the /civilization/resources endpoints
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.errors import InsufficientResource, InvalidOperation, NotFound
from civmanager.models.civilization import Civilization
from civmanager.models.civilization_resources import MAX_RESOURCE_VALUE, CivilizationResources
from civmanager.models.user import User
from civmanager.services.resource_service import (
    add_resource,
    adjust_resources,
    consume_resource,
    get_resources,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_civilization(db: AsyncSession, tag: str = "ledger", **balance) -> Civilization:
    user = User(email=f"{tag}@example.com", username=tag, hashed_password="pw")
    db.add(user)
    await db.flush()
    civ = Civilization(user_id=user.id, name=f"{tag} realm")
    db.add(civ)
    await db.flush()
    db.add(CivilizationResources(civilization_id=civ.id, **balance))
    await db.commit()
    return civ


async def _balance(db: AsyncSession, civilization_id: int) -> dict[str, int]:
    resources = await get_resources(civilization_id, db)
    return resources.as_dict()


async def register_and_login(
    client: AsyncClient, email: str, username: str, password: str = "pass1234"
) -> str:
    await client.post(
        "/auth/register",
        json={"email": email, "username": username, "password": password},
    )
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    return resp.json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def setup_founded_player(client: AsyncClient, tag: str = "res") -> str:
    token = await register_and_login(client, f"{tag}@example.com", tag)
    resp = await client.post(
        "/civilization", json={"name": f"{tag} kingdom"}, headers=auth_headers(token)
    )
    assert resp.status_code == 201
    return token


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAddResource:
    async def test_add_increases_counter(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        resources = await add_resource(civ.id, "gold", 25, db_session)
        assert resources.gold == 75
        assert await _balance(db_session, civ.id) == {
            "food": 100,
            "gold": 75,
            "materials": 30,
            "military_power": 0,
        }

    async def test_add_military_power_allowed(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        resources = await add_resource(civ.id, "military_power", 5, db_session)
        assert resources.military_power == 5

    async def test_negative_add_clamps_at_zero(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, materials=4)
        resources = await add_resource(civ.id, "materials", -10, db_session)
        assert resources.materials == 0

    async def test_negative_add_above_zero_subtracts(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, materials=4)
        resources = await add_resource(civ.id, "materials", -3, db_session)
        assert resources.materials == 1

    async def test_unknown_resource_rejected(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await add_resource(civ.id, "mana", 1, db_session)

    async def test_missing_balance_is_not_found(self, db_session: AsyncSession):
        with pytest.raises(NotFound):
            await add_resource(9999, "food", 1, db_session)

    @pytest.mark.parametrize("amount", [2**63, MAX_RESOURCE_VALUE + 1, -(2**63)])
    async def test_out_of_range_amount_rejected(self, db_session: AsyncSession, amount: int):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await add_resource(civ.id, "food", amount, db_session)
        assert (await _balance(db_session, civ.id))["food"] == 100

    async def test_add_past_maximum_fails_unchanged(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, gold=MAX_RESOURCE_VALUE - 10)
        with pytest.raises(InvalidOperation):
            await add_resource(civ.id, "gold", 11, db_session)
        assert (await _balance(db_session, civ.id))["gold"] == MAX_RESOURCE_VALUE - 10

        resources = await add_resource(civ.id, "gold", 10, db_session)
        assert resources.gold == MAX_RESOURCE_VALUE


# ---------------------------------------------------------------------------
# consume
# ---------------------------------------------------------------------------


class TestConsumeResource:
    async def test_consume_within_balance(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=40)
        resources = await consume_resource(civ.id, "food", 40, db_session)
        assert resources.food == 0

    async def test_consume_more_than_balance_fails_unchanged(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=40, gold=10, materials=5, military_power=0)
        with pytest.raises(InsufficientResource) as exc_info:
            await consume_resource(civ.id, "food", 50, db_session)

        assert exc_info.value.resource == "food"
        assert exc_info.value.requested == 50
        assert exc_info.value.available == 40
        assert await _balance(db_session, civ.id) == {
            "food": 40,
            "gold": 10,
            "materials": 5,
            "military_power": 0,
        }

    @pytest.mark.parametrize("amount,balance", [(1, 0), (5, 4), (5, 5), (3, 30)])
    async def test_consume_succeeds_iff_amount_within_balance(
        self, db_session: AsyncSession, amount: int, balance: int
    ):
        civ = await _make_civilization(db_session, gold=balance)
        if amount <= balance:
            resources = await consume_resource(civ.id, "gold", amount, db_session)
            assert resources.gold == balance - amount
        else:
            with pytest.raises(InsufficientResource):
                await consume_resource(civ.id, "gold", amount, db_session)
            assert (await _balance(db_session, civ.id))["gold"] == balance

    async def test_military_power_never_consumable(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, military_power=500)
        with pytest.raises(InvalidOperation):
            await consume_resource(civ.id, "military_power", 1, db_session)
        assert (await _balance(db_session, civ.id))["military_power"] == 500

    async def test_military_power_rejected_before_lookup(self, db_session: AsyncSession):
        # No balance row exists; the operation still fails as invalid, not missing
        with pytest.raises(InvalidOperation):
            await consume_resource(12345, "military_power", 1, db_session)

    async def test_non_positive_amount_rejected(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await consume_resource(civ.id, "food", 0, db_session)

    async def test_missing_balance_is_not_found(self, db_session: AsyncSession):
        with pytest.raises(NotFound):
            await consume_resource(9999, "food", 1, db_session)

    async def test_out_of_range_amount_rejected(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await consume_resource(civ.id, "food", 2**63, db_session)
        assert (await _balance(db_session, civ.id))["food"] == 100


# ---------------------------------------------------------------------------
# adjust
# ---------------------------------------------------------------------------


class TestAdjustResources:
    async def test_adjust_applies_all_deltas(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=40, gold=10, materials=5, military_power=0)
        resources = await adjust_resources(civ.id, {"food": -20, "gold": 5}, db_session)
        assert resources.as_dict() == {
            "food": 20,
            "gold": 15,
            "materials": 5,
            "military_power": 0,
        }

    async def test_adjust_is_all_or_nothing(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=40, gold=10, materials=5, military_power=0)
        with pytest.raises(InsufficientResource):
            await adjust_resources(
                civ.id, {"food": -10, "gold": 100, "materials": -6}, db_session
            )
        assert await _balance(db_session, civ.id) == {
            "food": 40,
            "gold": 10,
            "materials": 5,
            "military_power": 0,
        }

    async def test_adjust_reports_first_counter_in_declaration_order(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=1, gold=1, materials=1, military_power=1)
        with pytest.raises(InsufficientResource) as exc_info:
            await adjust_resources(
                civ.id, {"military_power": -5, "materials": -5, "gold": -5}, db_session
            )
        assert exc_info.value.resource == "gold"
        assert exc_info.value.requested == 5
        assert exc_info.value.available == 1

    async def test_adjust_may_lower_military_power(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, military_power=10)
        resources = await adjust_resources(civ.id, {"military_power": -4}, db_session)
        assert resources.military_power == 6

    async def test_adjust_to_exactly_zero(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=7)
        resources = await adjust_resources(civ.id, {"food": -7}, db_session)
        assert resources.food == 0

    async def test_empty_adjustment_is_noop(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        resources = await adjust_resources(civ.id, {}, db_session)
        assert resources.as_dict()["food"] == 100

    async def test_unknown_counter_rejected(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await adjust_resources(civ.id, {"food": 1, "stone": -1}, db_session)
        assert (await _balance(db_session, civ.id))["food"] == 100

    async def test_out_of_range_delta_rejected(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session)
        with pytest.raises(InvalidOperation):
            await adjust_resources(civ.id, {"food": 1, "gold": 2**63}, db_session)
        assert (await _balance(db_session, civ.id))["food"] == 100

    async def test_adjust_past_maximum_is_all_or_nothing(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, materials=MAX_RESOURCE_VALUE)
        with pytest.raises(InvalidOperation):
            await adjust_resources(civ.id, {"food": -10, "materials": 1}, db_session)
        balance = await _balance(db_session, civ.id)
        assert balance["food"] == 100
        assert balance["materials"] == MAX_RESOURCE_VALUE

    async def test_counters_stay_non_negative_over_sequence(self, db_session: AsyncSession):
        civ = await _make_civilization(db_session, food=10, gold=10, materials=10, military_power=0)
        operations = [
            lambda: consume_resource(civ.id, "food", 7, db_session),
            lambda: consume_resource(civ.id, "food", 7, db_session),
            lambda: adjust_resources(civ.id, {"gold": -11, "materials": 3}, db_session),
            lambda: adjust_resources(civ.id, {"gold": -10, "materials": -13}, db_session),
            lambda: add_resource(civ.id, "materials", -50, db_session),
            lambda: adjust_resources(civ.id, {"food": -3, "gold": -10}, db_session),
        ]
        for operation in operations:
            try:
                await operation()
            except InsufficientResource:
                pass
            balance = await _balance(db_session, civ.id)
            assert all(value >= 0 for value in balance.values())


# ---------------------------------------------------------------------------
# HTTP endpoints
# ---------------------------------------------------------------------------


class TestResourceEndpoints:
    async def test_get_starting_balance(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.get("/civilization/resources", headers=auth_headers(token))
        assert resp.status_code == 200
        data = resp.json()
        assert data["food"] == 100
        assert data["gold"] == 50
        assert data["materials"] == 30
        assert data["military_power"] == 0

    async def test_add_endpoint(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/add",
            json={"resource": "military_power", "amount": 3},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        assert resp.json()["military_power"] == 3

    async def test_add_requires_positive_amount(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/add",
            json={"resource": "food", "amount": -5},
            headers=auth_headers(token),
        )
        assert resp.status_code == 422

    async def test_consume_endpoint(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/consume",
            json={"resource": "gold", "amount": 20},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        assert resp.json()["gold"] == 30

    async def test_consume_insufficient_reports_amounts(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/consume",
            json={"resource": "materials", "amount": 31},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["resource"] == "materials"
        assert detail["requested"] == 31
        assert detail["available"] == 30

    async def test_consume_military_power_rejected(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/consume",
            json={"resource": "military_power", "amount": 1},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400
        assert "Military power" in resp.json()["detail"]

    async def test_adjust_endpoint(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/adjust",
            json={"deltas": {"food": -20, "gold": 5}},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["food"] == 80
        assert data["gold"] == 55

    @pytest.mark.parametrize(
        "path, payload",
        [
            ("add", {"resource": "food", "amount": 2**31}),
            ("consume", {"resource": "food", "amount": 2**63}),
            ("adjust", {"deltas": {"gold": -(2**40)}}),
        ],
    )
    async def test_out_of_range_amounts_are_validation_errors(
        self, db_client: AsyncClient, path: str, payload: dict
    ):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            f"/civilization/resources/{path}", json=payload, headers=auth_headers(token)
        )
        assert resp.status_code == 422

    async def test_add_past_maximum_is_400(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/add",
            json={"resource": "food", "amount": MAX_RESOURCE_VALUE},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400
        resp = await db_client.get("/civilization/resources", headers=auth_headers(token))
        assert resp.json()["food"] == 100

    async def test_adjust_unknown_counter_is_validation_error(self, db_client: AsyncClient):
        token = await setup_founded_player(db_client)
        resp = await db_client.post(
            "/civilization/resources/adjust",
            json={"deltas": {"stone": 5}},
            headers=auth_headers(token),
        )
        assert resp.status_code == 422

    async def test_resources_require_civilization(self, db_client: AsyncClient):
        token = await register_and_login(db_client, "nociv@example.com", "nociv")
        resp = await db_client.get("/civilization/resources", headers=auth_headers(token))
        assert resp.status_code == 404

    async def test_resources_require_auth(self, db_client: AsyncClient):
        resp = await db_client.get("/civilization/resources")
        assert resp.status_code == 401
