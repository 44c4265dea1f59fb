"""
Tests for the view registry.

Tests:
- Default view, non-closable, at index 0
- One view per key: re-opening activates in place and updates props
- Active index arithmetic on close
- Generated keys and the per-user profile view
"""
import pytest

from client.app.services.view_registry import ViewRegistry


@pytest.fixture
def registry() -> ViewRegistry:
    return ViewRegistry("market-watchlist", "MarketWatchlist")


def keys(registry: ViewRegistry) -> list[str]:
    return [view.id for view in registry.views]


def test_default_view(registry):
    assert keys(registry) == ["market-watchlist"]
    assert registry.active_index == 0
    assert registry.active_view.closable is False
    assert registry.close(0) is False
    assert keys(registry) == ["market-watchlist"]


# ============================================================================
# OPEN
# ============================================================================

class TestOpen:

    def test_open_appends_and_activates(self, registry):
        registry.open("chart:AAA", "AAA", props={"code": "AAA"})

        assert keys(registry) == ["market-watchlist", "chart:AAA"]
        assert registry.active_index == 1
        assert registry.active_props == {"code": "AAA"}

    def test_open_same_key_twice_keeps_one_view(self, registry):
        registry.open("profile", "Profile", props={"tab": "general"})
        registry.open("chart:AAA", "AAA")
        registry.open("profile", "Profile", props={"tab": "security"})

        assert keys(registry).count("profile") == 1
        assert registry.active_view.id == "profile"
        assert registry.active_index == 1
        assert registry.active_props == {"tab": "security"}

    def test_reopen_replaces_props(self, registry):
        registry.open("settings", "Settings", props={"a": 1, "nested": {"x": 1}})
        registry.open("settings", "Settings", props={"nested": {"y": 2}})

        assert registry.active_props == {"nested": {"y": 2}}

    def test_reopen_with_merge_deep_merges_props(self, registry):
        registry.open("settings", "Settings", props={"a": 1, "nested": {"x": 1}})
        registry.open("settings", "Settings", props={"nested": {"y": 2}}, merge=True)

        assert registry.active_props == {"a": 1, "nested": {"x": 1, "y": 2}}

    def test_reopen_without_props_keeps_them(self, registry):
        registry.open("settings", "Settings", props={"a": 1})
        registry.switch_to(0)
        registry.open("settings", "Other title")

        assert registry.active_index == 1
        assert registry.active_view.title == "Settings"
        assert registry.active_props == {"a": 1}

    def test_caller_props_are_copied(self, registry):
        props = {"a": 1}
        registry.open("settings", "Settings", props=props)
        props["a"] = 2
        assert registry.active_props == {"a": 1}

    def test_add_new_view_generates_unique_keys(self, registry):
        first = registry.add_new_view("New tab")
        second = registry.add_new_view("New tab")

        assert first.id.startswith("tab-")
        assert second.id.startswith("tab-")
        assert first.id != second.id
        assert len(registry) == 3
        assert registry.active_view.id == second.id

    def test_user_profile_is_singleton_per_user(self, registry):
        registry.open_user_profile({"id": 7, "username": "bob"})
        registry.open("chart:AAA", "AAA")
        view = registry.open_user_profile({"id": 7, "username": "bob"})

        assert view.id == "profile:7"
        assert view.title == "bob"
        assert keys(registry).count("profile:7") == 1
        assert registry.active_view.id == "profile:7"

        registry.open_user_profile({"id": 8, "username": "carol"})
        assert "profile:8" in registry
        assert len(registry) == 4


# ============================================================================
# SWITCH / CLOSE
# ============================================================================

class TestClose:

    @pytest.fixture
    def four_views(self, registry) -> ViewRegistry:
        for key in ("a", "b", "c"):
            registry.open(key, key.upper())
        return registry

    def test_close_active_activates_first(self, four_views):
        four_views.switch_to(2)
        assert four_views.close(2) is True
        assert keys(four_views) == ["market-watchlist", "a", "c"]
        assert four_views.active_index == 0

    def test_close_before_active_shifts_down(self, four_views):
        four_views.switch_to(3)
        four_views.close(1)
        assert four_views.active_index == 2
        assert four_views.active_view.id == "c"

    def test_close_after_active_keeps_index(self, four_views):
        four_views.switch_to(1)
        four_views.close(3)
        assert four_views.active_index == 1
        assert four_views.active_view.id == "a"

    def test_non_closable_view_stays(self, registry):
        registry.open("pinned", "Pinned", closable=False)
        assert registry.close(1) is False
        assert keys(registry) == ["market-watchlist", "pinned"]
        assert registry.active_index == 1

    def test_active_index_always_valid(self, four_views):
        for index in (3, 1, 1, 1):
            four_views.switch_to(min(2, len(four_views) - 1))
            four_views.close(min(index, len(four_views) - 1))
            assert 0 <= four_views.active_index < len(four_views)
        assert keys(four_views) == ["market-watchlist"]

    @pytest.mark.parametrize("index", [-1, 4, 10])
    def test_out_of_range_index_raises(self, four_views, index):
        with pytest.raises(IndexError):
            four_views.close(index)
        with pytest.raises(IndexError):
            four_views.switch_to(index)


def test_reset(registry):
    registry.open("a", "A")
    registry.reset()
    assert keys(registry) == ["market-watchlist"]
    assert registry.active_index == 0
