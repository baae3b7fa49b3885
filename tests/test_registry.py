"""Tests for the user registry."""

from dosewatch.core.dosage.constants import USER_AVATARS, USER_COLORS
from dosewatch.core.dosage.models import IntakeEvent, User, UserDosageState
from dosewatch.core.dosage.registry import UserRegistry


def _user(name: str) -> User:
    return User(display_name=name, color_tag="#22C55E", avatar_tag="x")


class TestConstruction:
    def test_empty_registry_gets_default_user(self):
        registry = UserRegistry()
        users = registry.list()
        assert len(users) == 1
        assert users[0].display_name == "User 1"
        assert users[0].color_tag == USER_COLORS[0]
        assert users[0].avatar_tag == USER_AVATARS[0]
        assert registry.current() == users[0]

    def test_unknown_current_id_falls_back_to_first(self):
        a, b = _user("A"), _user("B")
        registry = UserRegistry(users=[a, b], current_user_id="missing")
        assert registry.current() == a

    def test_orphan_states_dropped(self):
        a = _user("A")
        registry = UserRegistry(
            users=[a],
            states={a.id: UserDosageState(), "ghost": UserDosageState()},
        )
        assert set(registry.states()) == {a.id}


class TestMutations:
    def test_add_uses_palette_and_activates(self):
        registry = UserRegistry()
        added = registry.add()
        assert added.display_name == "User 2"
        assert added.color_tag == USER_COLORS[1]
        assert added.avatar_tag == USER_AVATARS[1]
        assert registry.current() == added

    def test_add_with_name(self):
        registry = UserRegistry()
        assert registry.add("Sam").display_name == "Sam"

    def test_dangling_current_id_falls_back_to_first(self):
        registry = UserRegistry()
        first = registry.current()
        registry.add()
        registry._current_id = "ghost"

        assert registry.current() == first
        assert registry.to_record().current_user_id == first.id

    def test_switch_to_unknown(self):
        registry = UserRegistry()
        assert registry.switch_to("nope") is False

    def test_remove_last_user_is_noop(self):
        registry = UserRegistry()
        only = registry.current()
        assert registry.remove(only.id) is False
        assert registry.list() == [only]

    def test_remove_unknown_is_noop(self):
        registry = UserRegistry()
        registry.add()
        assert registry.remove("nope") is False
        assert len(registry.list()) == 2

    def test_remove_active_user_activates_first(self):
        registry = UserRegistry()
        first = registry.current()
        second = registry.add()
        registry.set_state(
            second.id,
            UserDosageState(events=[IntakeEvent(timestamp_ms=1, amount_ml=1.0)]),
        )

        assert registry.remove(second.id) is True
        assert registry.current() == first
        assert second.id not in registry.states()

    def test_update_only_editable_truthy_fields(self):
        registry = UserRegistry()
        user = registry.current()
        updated = registry.update(
            user.id,
            {"display_name": "Alex", "color_tag": "", "id": "hijack"},
        )
        assert updated.id == user.id
        assert updated.display_name == "Alex"
        assert updated.color_tag == user.color_tag

    def test_update_unknown(self):
        assert UserRegistry().update("nope", {"display_name": "X"}) is None


class TestState:
    def test_state_for_creates_default(self):
        registry = UserRegistry()
        user = registry.current()
        state = registry.state_for(user.id)
        assert state == UserDosageState()
        assert registry.state_for(user.id) is state

    def test_set_state_ignores_unknown_user(self):
        registry = UserRegistry()
        registry.set_state("ghost", UserDosageState())
        assert "ghost" not in registry.states()

    def test_to_record(self):
        registry = UserRegistry()
        added = registry.add("Sam")
        record = registry.to_record()
        assert record.current_user_id == added.id
        assert [u.display_name for u in record.users] == ["User 1", "Sam"]
