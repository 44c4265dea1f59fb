"""
Tests for the asset store.

Tests:
- Ownership context checked before any gateway call
- Request shapes of list / create / update / delete
- Local collection and position projection after each operation
- Failures leave the collection untouched and record the error
- Filtered refresh replaces only the matching records
- Asset refresh and delete never drop the schedule of an active plan
- Asset types cached (TTL) unless forced
"""
import pytest

from client.app.errors import NotAuthenticated, RemoteCallFailed
from client.app.services.gateway import Command
from client.test_scripts.test_utils import asset_record, plan_record

ASSET_TYPES = [{"id": 1, "name": "Stock"}, {"id": 2, "name": "Crypto", "description": "Coins"}]


def assert_untouched(store, before):
    assert [item.model_dump() for item in store.items] == before


# ============================================================================
# OWNERSHIP CONTEXT
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["list", "create", "update", "delete"])
async def test_operations_require_user(state, gateway, anonymous, operation):
    store = state.assets
    calls = {
        "list": lambda: store.fetch_user_assets(anonymous),
        "create": lambda: store.create_asset(anonymous, asset_type_id=1, code="AAA", name="A"),
        "update": lambda: store.update(anonymous, 1, None),
        "delete": lambda: store.delete(anonymous, 1),
        }

    with pytest.raises(NotAuthenticated):
        await calls[operation]()

    assert gateway.calls == []
    assert isinstance(store.error, NotAuthenticated)
    assert store.loading is False


# ============================================================================
# ASSET TYPES
# ============================================================================

@pytest.mark.asyncio
async def test_asset_types_are_cached(state, gateway):
    gateway.script(Command.ASSET_GET_ASSET_TYPES, ASSET_TYPES)

    first = await state.assets.fetch_asset_types()
    second = await state.assets.fetch_asset_types()

    assert [t.name for t in first] == ["Stock", "Crypto"]
    assert second == first
    assert len(gateway.calls_for(Command.ASSET_GET_ASSET_TYPES)) == 1

    await state.assets.fetch_asset_types(force=True)
    assert len(gateway.calls_for(Command.ASSET_GET_ASSET_TYPES)) == 2


@pytest.mark.asyncio
async def test_asset_types_cache_dropped_on_reset(state, gateway):
    gateway.script(Command.ASSET_GET_ASSET_TYPES, ASSET_TYPES)

    await state.assets.fetch_asset_types()
    state.reset()
    assert state.assets.asset_types == []

    await state.assets.fetch_asset_types()
    assert len(gateway.calls_for(Command.ASSET_GET_ASSET_TYPES)) == 2


@pytest.mark.asyncio
async def test_init_asset_data_loads_types_then_assets(state, gateway, ctx):
    gateway.script(Command.ASSET_GET_ASSET_TYPES, ASSET_TYPES)
    gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA", amount=10, cost=100)])

    assets = await state.assets.init_asset_data(ctx)

    assert gateway.commands == ["asset_get_asset_types", "asset_get_user_assets"]
    assert [a.code for a in assets] == ["AAA"]
    assert state.positions == {"AAA": {"cost": 100.0, "amount": 10.0}}


@pytest.mark.asyncio
async def test_init_asset_data_fails_fast(state, gateway, ctx):
    gateway.script(Command.ASSET_GET_ASSET_TYPES, RemoteCallFailed("asset_get_asset_types", "down"))

    with pytest.raises(RemoteCallFailed):
        await state.assets.init_asset_data(ctx)

    assert gateway.commands == ["asset_get_asset_types"]
    assert state.assets.loading is False


# ============================================================================
# LIST
# ============================================================================

class TestList:

    @pytest.mark.asyncio
    async def test_list_payload_and_projection(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [
            asset_record(1, "AAA", amount=10, cost=100),
            asset_record(2, "BBB"),
            ])

        assets = await state.assets.fetch_user_assets(ctx, asset_type_id=1)

        assert gateway.calls_for(Command.ASSET_GET_USER_ASSETS) == [
            {"request": {"user_id": 1, "asset_type_id": 1, "group_id": None}}
            ]
        assert [a.code for a in assets] == ["AAA", "BBB"]
        assert state.positions == {"AAA": {"cost": 100.0, "amount": 10.0}}
        assert state.assets.error is None
        assert state.assets.loading is False

    @pytest.mark.asyncio
    async def test_list_is_idempotent(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA"), asset_record(2, "BBB")])

        await state.assets.fetch_user_assets(ctx)
        first = {a.id for a in state.assets}
        await state.assets.fetch_user_assets(ctx)

        assert {a.id for a in state.assets} == first
        assert len(state.assets) == 2

    @pytest.mark.asyncio
    async def test_filtered_list_replaces_only_matching_records(self, state, gateway, ctx):
        gateway.script(
            Command.ASSET_GET_USER_ASSETS,
            [asset_record(1, "AAA", group_id=5), asset_record(2, "BBB", group_id=5), asset_record(3, "CCC", group_id=6)],
            [asset_record(2, "BBB", group_id=5, name="Renamed")],
            )
        await state.assets.fetch_user_assets(ctx)

        await state.assets.fetch_user_assets(ctx, group_id=5)

        assert sorted(a.code for a in state.assets) == ["BBB", "CCC"]
        assert state.assets.get(2).name == "Renamed"
        assert state.assets.get(3).group_id == 6

    @pytest.mark.asyncio
    async def test_vanished_asset_loses_its_position(self, state, gateway, ctx):
        gateway.script(
            Command.ASSET_GET_USER_ASSETS,
            [asset_record(1, "AAA", amount=1, cost=2), asset_record(2, "BBB", amount=3, cost=4)],
            [asset_record(2, "BBB", amount=3, cost=4)],
            )
        await state.assets.fetch_user_assets(ctx)
        await state.assets.fetch_user_assets(ctx)

        assert list(state.positions) == ["BBB"]

    @pytest.mark.asyncio
    async def test_refresh_keeps_schedule_of_active_plan(self, state, gateway, ctx):
        """AAA moves from group 5 to group 6 between two filtered refreshes."""
        gateway.script(
            Command.ASSET_GET_USER_ASSETS,
            [asset_record(1, "AAA", amount=10, cost=100, group_id=5)],
            [],
            [asset_record(1, "AAA", amount=10, cost=100, group_id=6)],
            )
        gateway.script(Command.PLAN_GET_USER_PLANS, [plan_record(7, 1, "AAA")])
        await state.assets.fetch_user_assets(ctx)
        await state.plans.fetch_user_plans(ctx)

        await state.assets.fetch_user_assets(ctx, group_id=5)
        assert state.positions["AAA"] == {"investmentType": "monthly", "dayOfMonth": 1, "investmentAmount": 50.0}

        await state.assets.fetch_user_assets(ctx, group_id=6)
        assert state.positions["AAA"] == {
            "cost": 100.0,
            "amount": 10.0,
            "investmentType": "monthly",
            "dayOfMonth": 1,
            "investmentAmount": 50.0,
            }

    @pytest.mark.asyncio
    async def test_delete_keeps_schedule_of_active_plan(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA", amount=10, cost=100)])
        gateway.script(Command.PLAN_GET_USER_PLANS, [plan_record(7, 1, "AAA")])
        gateway.script(Command.ASSET_DELETE_ASSET, {"message": "Asset deleted"})
        await state.assets.fetch_user_assets(ctx)
        await state.plans.fetch_user_plans(ctx)

        await state.assets.delete(ctx, 1)

        assert state.positions["AAA"] == {"investmentType": "monthly", "dayOfMonth": 1, "investmentAmount": 50.0}

    @pytest.mark.asyncio
    async def test_list_failure_keeps_data(self, state, gateway, ctx):
        gateway.script(
            Command.ASSET_GET_USER_ASSETS,
            [asset_record(1, "AAA")],
            RemoteCallFailed("asset_get_user_assets", "timeout"),
            )
        await state.assets.fetch_user_assets(ctx)
        before = [item.model_dump() for item in state.assets.items]

        with pytest.raises(RemoteCallFailed):
            await state.assets.fetch_user_assets(ctx)

        assert_untouched(state.assets, before)
        assert isinstance(state.assets.error, RemoteCallFailed)
        assert state.assets.loading is False

        state.assets.clear_error()
        assert state.assets.error is None

    @pytest.mark.asyncio
    async def test_malformed_record_is_remote_failure(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [{"id": 1, "code": "AAA"}])

        with pytest.raises(RemoteCallFailed, match="malformed FAAsset"):
            await state.assets.fetch_user_assets(ctx)
        assert len(state.assets) == 0


# ============================================================================
# CREATE / UPDATE / DELETE
# ============================================================================

class TestWrites:

    @pytest.mark.asyncio
    async def test_create_appends_and_applies_position(self, state, gateway, ctx):
        gateway.script(Command.ASSET_CREATE_ASSET, asset_record(9, "AAA", amount=10, cost=100))

        asset = await state.assets.create_asset(ctx, asset_type_id=1, code="AAA", name="Asset AAA")

        assert gateway.calls_for(Command.ASSET_CREATE_ASSET) == [{
            "request": {
                "user_id": 1,
                "group_id": None,
                "asset_type_id": 1,
                "code": "AAA",
                "name": "Asset AAA",
                "current_price": None,
                }
            }]
        assert state.assets.items == [asset]
        assert state.positions["AAA"] == {"cost": 100.0, "amount": 10.0}

    @pytest.mark.asyncio
    async def test_create_failure_leaves_store_untouched(self, state, gateway, ctx):
        gateway.script(Command.ASSET_CREATE_ASSET, RemoteCallFailed("asset_create_asset", "duplicate code"))

        with pytest.raises(RemoteCallFailed, match="duplicate code"):
            await state.assets.create_asset(ctx, asset_type_id=1, code="AAA", name="A")

        assert len(state.assets) == 0
        assert state.positions == {}

    @pytest.mark.asyncio
    async def test_update_position(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA", amount=10, cost=100)])
        gateway.script(Command.ASSET_UPDATE_ASSET, asset_record(1, "AAA", amount=15, cost=160))
        await state.assets.fetch_user_assets(ctx)

        updated = await state.assets.update_position(ctx, "AAA", cost=160, amount=15)

        payload = gateway.calls_for(Command.ASSET_UPDATE_ASSET)[0]["request"]
        assert payload["id"] == 1
        assert payload["user_id"] == 1
        assert payload["position_cost"] == 160
        assert payload["position_amount"] == 15
        assert payload["name"] == "Asset AAA"
        assert updated.position_amount == 15
        assert len(state.assets) == 1
        assert state.positions["AAA"] == {"cost": 160.0, "amount": 15.0}

    @pytest.mark.asyncio
    async def test_update_position_unknown_code_is_noop(self, state, gateway, ctx):
        assert await state.assets.update_position(ctx, "ZZZ", cost=1, amount=1) is None
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_update_failure_keeps_previous_record(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA", amount=10, cost=100)])
        gateway.script(Command.ASSET_UPDATE_ASSET, RemoteCallFailed("asset_update_asset", "conflict"))
        await state.assets.fetch_user_assets(ctx)

        with pytest.raises(RemoteCallFailed):
            await state.assets.update_position(ctx, "AAA", cost=1, amount=1)

        assert state.assets.get(1).position_cost == 100
        assert state.positions["AAA"] == {"cost": 100.0, "amount": 10.0}

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_position(self, state, gateway, ctx):
        gateway.script(Command.ASSET_GET_USER_ASSETS, [asset_record(1, "AAA", amount=10, cost=100), asset_record(2, "BBB")])
        gateway.script(Command.ASSET_DELETE_ASSET, {"message": "Asset deleted"})
        await state.assets.fetch_user_assets(ctx)

        response = await state.assets.delete(ctx, 1)

        assert response == {"message": "Asset deleted"}
        assert gateway.calls_for(Command.ASSET_DELETE_ASSET) == [{"request": {"id": 1, "user_id": 1}}]
        assert [a.code for a in state.assets] == ["BBB"]
        assert "AAA" not in state.positions


# ============================================================================
# LOCAL QUERIES
# ============================================================================

@pytest.mark.asyncio
async def test_local_queries_and_orphaning(state, gateway, ctx):
    gateway.script(Command.ASSET_GET_USER_ASSETS, [
        asset_record(1, "AAA", group_id=5, group_name="Tech"),
        asset_record(2, "BBB", group_id=5, group_name="Tech"),
        asset_record(3, "CCC"),
        ])
    await state.assets.fetch_user_assets(ctx)

    assert state.assets.get_by_code("CCC").id == 3
    assert state.assets.get_by_code("ZZZ") is None
    assert [a.code for a in state.assets.by_group(5)] == ["AAA", "BBB"]

    assert state.assets.orphan_group(5) == 2
    assert [a.code for a in state.assets.by_group(None)] == ["AAA", "BBB", "CCC"]
    assert state.assets.get(1).group_name is None
