"""Tests for ActionBuilder and the action wire model."""

import re

import pytest
from pydantic import ValidationError

from src.transpiler.builders import ActionBuilder, generate_action_id
from src.transpiler.context import CompilationContext
from src.transpiler.ir import ActionDescriptor, ActionType, StoreDescriptor, StoreScope, StoreStorage

APP_STORE = StoreDescriptor(scope=StoreScope.APP, storage=StoreStorage.USER_PREFS)


@pytest.fixture
def builder(ctx):
    return ActionBuilder(ctx)


class TestActionIds:
    """generate_action_id."""

    def test_format(self):
        """Operation prefix plus 12 hex digits."""
        action_id = generate_action_id("store.set", "app", "memory", "a.b", 0)
        assert re.fullmatch(r"store_set_[0-9a-f]{12}", action_id)

    def test_deterministic(self):
        """Same inputs, same id."""
        assert generate_action_id("store.set", "app", "memory", "k", 0) == generate_action_id(
            "store.set", "app", "memory", "k", 0
        )

    @pytest.mark.parametrize(
        "args",
        [
            ("store.merge", "app", "memory", "k", 0),
            ("store.set", "scenario", "memory", "k", 0),
            ("store.set", "app", "file", "k", 0),
            ("store.set", "app", "memory", "other", 0),
            ("store.set", "app", "memory", "k", 1),
        ],
    )
    def test_every_component_matters(self, args):
        """Changing any tuple member changes the id."""
        assert generate_action_id(*args) != generate_action_id("store.set", "app", "memory", "k", 0)

    def test_ordinals_count_per_signature(self, builder):
        """The builder numbers repeated signatures within one context."""
        first = builder.store_mutation(ActionType.STORE_SET, APP_STORE, "k", 1)
        second = builder.store_mutation(ActionType.STORE_SET, APP_STORE, "k", 2)
        other = builder.store_mutation(ActionType.STORE_SET, APP_STORE, "j", 1)

        assert first.id == generate_action_id("store.set", "app", "userPrefs", "k", 0)
        assert second.id == generate_action_id("store.set", "app", "userPrefs", "k", 1)
        assert other.id == generate_action_id("store.set", "app", "userPrefs", "j", 0)

    def test_fresh_context_restarts_ordinals(self):
        """Ids do not leak between compiles."""
        one = ActionBuilder(CompilationContext()).sequence([])
        two = ActionBuilder(CompilationContext()).sequence([])
        assert one.id == two.id


class TestBuilders:
    """Descriptor construction."""

    def test_store_mutation_fields(self, builder):
        """Store mutations carry the store identity and keyPath."""
        action = builder.store_mutation(ActionType.STORE_MERGE, APP_STORE, "profile", {"a": 1})
        assert action.to_dict() == {
            "id": action.id,
            "type": "store.merge",
            "scope": "app",
            "storage": "userPrefs",
            "keyPath": "profile",
            "value": {"a": 1},
        }

    def test_remove_omits_value(self, builder):
        """has_value=False leaves value unset."""
        action = builder.store_mutation(ActionType.STORE_REMOVE, APP_STORE, "profile", has_value=False)
        assert "value" not in action.to_dict()

    def test_single(self, builder):
        """One action passes through; several are wrapped."""
        pop = builder.effect(ActionType.NAVIGATION_POP)
        assert builder.single([pop]) is pop
        wrapped = builder.single([pop, builder.effect(ActionType.UI_HIDE_LOADING)])
        assert wrapped.type == ActionType.SEQUENCE
        assert len(wrapped.actions) == 2

    def test_effect_id_uses_screen(self, builder):
        """Navigation to different screens gets different ids."""
        home = builder.effect(ActionType.NAVIGATION_PUSH, {"screenId": "Home"})
        cart = builder.effect(ActionType.NAVIGATION_PUSH, {"screenId": "Cart"})
        assert home.id != cart.id
        assert home.value == {"screenId": "Home"}

    def test_conditional_without_else(self, builder):
        """The else branch is omitted rather than empty."""
        pop = builder.effect(ActionType.NAVIGATION_POP)
        action = builder.conditional({"type": "truthy", "value": True}, pop)
        assert action.actions == [pop]
        assert action.value == {"condition": {"type": "truthy", "value": True}}

    def test_nested_composites_serialize(self, builder):
        """Composites nest their actions on the wire in order."""
        inner = builder.store_mutation(ActionType.STORE_SET, APP_STORE, "a", 1)
        transaction = builder.transaction(APP_STORE, [inner])
        outer = builder.sequence([transaction])
        document = outer.to_dict()
        assert document["type"] == "sequence"
        assert document["actions"][0]["type"] == "store.transaction"
        assert document["actions"][0]["actions"][0]["keyPath"] == "a"


class TestDescriptorValidation:
    """Shape rules enforced by the model."""

    def test_store_kind_requires_store(self):
        with pytest.raises(ValidationError, match="requires scope and storage"):
            ActionDescriptor(id="x", type=ActionType.STORE_SET, key_path="a", value=1)

    def test_composite_requires_actions(self):
        with pytest.raises(ValidationError, match="requires an actions list"):
            ActionDescriptor(id="x", type=ActionType.SEQUENCE)

    def test_leaf_rejects_actions(self):
        with pytest.raises(ValidationError, match="cannot carry nested actions"):
            ActionDescriptor(id="x", type=ActionType.NAVIGATION_POP, actions=[])

    def test_round_trip_by_alias(self):
        """Wire documents load back through their camelCase aliases."""
        data = {"id": "x", "type": "store.set", "scope": "app", "storage": "memory", "keyPath": "a", "value": None}
        assert ActionDescriptor.model_validate(data).to_dict() == data
