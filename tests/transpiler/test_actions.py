"""Tests for store declarations and store actions."""

import pytest

from src.transpiler import DiagnosticCode
from tests.conftest import actions_of, compile_err, compile_ok, scenario_source

MAIN = "export default () => <View />"


def stores_of(body: str) -> list[dict]:
    return compile_ok(scenario_source(body)).to_dict().get("stores", [])


# =============================================================================
# Store declarations
# =============================================================================


class TestStoreDeclarations:
    """store({...}) calls become StoreDescriptors."""

    def test_defaults(self):
        """Scope defaults to scenario and storage to memory."""
        assert stores_of(f"const s = store()\n{MAIN}") == [{"scope": "scenario", "storage": "memory"}]

    def test_string_config_with_initial_value(self):
        """initialValue is serialized as an object."""
        stores = stores_of(
            "const prefs = store({ scope: 'app', storage: 'userPrefs', initialValue: { theme: 'dark', n: 1 } })\n"
            + MAIN
        )
        assert stores == [
            {"scope": "app", "storage": "userPrefs", "initialValue": {"theme": "dark", "n": 1}}
        ]

    def test_enum_member_config(self):
        """StoreScope.App / StoreStorage.File spellings are accepted."""
        stores = stores_of(f"const s = store({{ scope: StoreScope.App, storage: StoreStorage.File }})\n{MAIN}")
        assert stores == [{"scope": "app", "storage": "file"}]

    def test_generic_declaration(self):
        """Type arguments on store<T>(...) are ignored."""
        stores = stores_of(f"const s = store<CartState>({{ scope: 'app' }})\n{MAIN}")
        assert stores == [{"scope": "app", "storage": "memory"}]

    def test_one_entry_per_call_site(self):
        """Identical declarations are not deduplicated."""
        stores = stores_of(f"const a = store({{ scope: 'app' }})\nconst b = store({{ scope: 'app' }})\n{MAIN}")
        assert len(stores) == 2

    def test_declaration_inside_component(self):
        """Stores declared in a component body are collected too."""
        stores = stores_of(
            "export default function Main() {\n"
            "  const local = store({ storage: 'backend' })\n"
            "  return <View />\n"
            "}"
        )
        assert stores == [{"scope": "scenario", "storage": "backend"}]

    @pytest.mark.parametrize(
        "config,message",
        [
            ("{ scope: 'global' }", "unknown scope 'global'"),
            ("{ storage: dynamicStorage }", "storage must be a string literal"),
            ("{ initialValue: 42 }", "initialValue must be an object literal"),
            ("'app'", "config must be an object literal"),
            ("{ ...defaults }", "only plain properties"),
        ],
    )
    def test_invalid_declarations(self, config, message):
        """Declarations without a static shape are errors."""
        error = compile_err(scenario_source(f"const s = store({config})\n{MAIN}"))
        assert error.codes == [DiagnosticCode.UNSUPPORTED_ACTION_EXPRESSION]
        assert message in error.diagnostics[0].message
        assert error.diagnostics[0].line == 3


# =============================================================================
# Mutations
# =============================================================================


class TestStoreMutations:
    """set / remove / merge call sites."""

    def test_set(self):
        """set carries the store identity, keyPath and serialized value."""
        [action] = actions_of(
            "const cart = store({ scope: 'app', storage: 'memory' })\n"
            "cart.set('items.count', 3)\n" + MAIN
        )
        assert action["type"] == "store.set"
        assert action["scope"] == "app"
        assert action["storage"] == "memory"
        assert action["keyPath"] == "items.count"
        assert action["value"] == 3
        assert action["id"].startswith("store_set_")
        assert "actions" not in action

    def test_remove_has_no_value(self):
        """remove takes only a keyPath."""
        [action] = actions_of(f"const cart = store()\ncart.remove('items')\n{MAIN}")
        assert action["type"] == "store.remove"
        assert "value" not in action

    def test_explicit_null_value_is_kept(self):
        """A null value was set, so it is serialized."""
        [action] = actions_of(f"const cart = store()\ncart.set('items', null)\n{MAIN}")
        assert "value" in action
        assert action["value"] is None

    def test_merge_with_object_value(self):
        """merge values serialize like any other value."""
        [action] = actions_of(f"const cart = store()\ncart.merge('meta', {{ seen: true, tags: ['a'] }})\n{MAIN}")
        assert action["type"] == "store.merge"
        assert action["value"] == {"seen": True, "tags": ["a"]}

    def test_inline_declaration_receiver(self):
        """A store(...) call used directly as a receiver resolves to its declaration."""
        [action] = actions_of(f"store({{ scope: 'app' }}).set('k', 'v')\n{MAIN}")
        assert action["scope"] == "app"

    def test_alias_resolves_to_declaration(self):
        """Aliases of a store binding trace back to the same store."""
        [action] = actions_of(
            f"const prefs = store({{ storage: 'userPrefs' }})\nconst alias = prefs\nalias.set('x', 1)\n{MAIN}"
        )
        assert action["storage"] == "userPrefs"

    def test_shadowed_binding_is_not_a_store(self):
        """A parameter with the same name hides the outer store."""
        actions = actions_of(
            "const cart = store()\n"
            "function update(cart) { cart.set('x', 1) }\n" + MAIN
        )
        assert actions == []

    def test_get_is_a_read_not_an_action(self):
        """Reads produce no descriptor."""
        assert actions_of(f"const cart = store()\nconst n = cart.get('n')\n{MAIN}") == []

    def test_actions_in_source_order(self):
        """Top-level actions keep the order of their call sites."""
        actions = actions_of(
            f"const s = store()\ns.set('a', 1)\ns.remove('b')\ns.merge('c', {{}})\n{MAIN}"
        )
        assert [a["type"] for a in actions] == ["store.set", "store.remove", "store.merge"]

    def test_value_references_component_prop(self):
        """Values inside a component can reference its props."""
        [action] = actions_of(
            "const s = store()\n"
            "export default ({ rating }) => <Button onPress={() => s.set('rating', rating)} />"
        )
        assert action["value"] == {"type": "prop", "key": "rating"}

    @pytest.mark.parametrize(
        "call,message",
        [
            ("s.set(key, 1)", "keyPath must be a string literal"),
            ("s.set('a')", "requires keyPath and value"),
            ("s.remove('a', 1)", "exactly one keyPath"),
            ("s.set()", "requires a keyPath"),
            ("s.clear('a')", "Unknown store method: clear"),
            ("s['set']('a', 1)", "Computed store method"),
            ("s.set(...args)", "spread arguments"),
        ],
    )
    def test_unsupported_shapes(self, call, message):
        """Mutations without a static shape are reported at the call site."""
        error = compile_err(scenario_source(f"const s = store()\n{call}\n{MAIN}"))
        assert error.codes == [DiagnosticCode.UNSUPPORTED_ACTION_EXPRESSION]
        assert message in error.diagnostics[0].message
        assert error.diagnostics[0].line == 4

    def test_all_failures_are_reported(self):
        """Every unsupported call site yields its own diagnostic."""
        error = compile_err(scenario_source(f"const s = store()\ns.set(a, 1)\ns.remove(b)\n{MAIN}"))
        assert error.codes == [DiagnosticCode.UNSUPPORTED_ACTION_EXPRESSION] * 2


# =============================================================================
# Transactions
# =============================================================================


class TestTransactions:
    """store.transaction(tx => {...})."""

    def test_two_sets_in_order(self):
        """A transaction holds its mutations in source order."""
        [action] = actions_of(
            "const cart = store({ scope: 'app' })\n"
            "cart.transaction(s => { s.set('a', 1); s.set('b', 2) })\n" + MAIN
        )
        assert action["type"] == "store.transaction"
        assert action["scope"] == "app"
        assert [(a["type"], a["keyPath"], a["value"]) for a in action["actions"]] == [
            ("store.set", "a", 1),
            ("store.set", "b", 2),
        ]
        assert all(a["scope"] == "app" and a["storage"] == "memory" for a in action["actions"])

    def test_mixed_mutations_and_nested_blocks(self):
        """Blocks are flattened and await is unwrapped."""
        [action] = actions_of(
            "const cart = store()\n"
            "cart.transaction(async (tx) => {\n"
            "  tx.remove('old')\n"
            "  {\n"
            "    await tx.merge('meta', { v: 2 })\n"
            "  }\n"
            "  const ignored = 1\n"
            "})\n" + MAIN
        )
        assert [a["type"] for a in action["actions"]] == ["store.remove", "store.merge"]

    def test_expression_body(self):
        """An expression-bodied callback is one mutation."""
        [action] = actions_of(f"const cart = store()\ncart.transaction(tx => tx.set('x', true))\n{MAIN}")
        assert len(action["actions"]) == 1

    @pytest.mark.parametrize(
        "callback,message",
        [
            ("tx => {}", "contains no mutations"),
            ("handler", "requires a function callback"),
            ("() => {}", "must take the store as its first parameter"),
            ("tx => { if (ok) { tx.set('a', 1) } }", "must be mutations on 'tx'"),
            ("tx => { navigate.pop() }", "must be mutations on 'tx'"),
            ("tx => { tx.set(k, 1) }", "keyPath must be a string literal"),
        ],
    )
    def test_invalid_transactions(self, callback, message):
        """Transactions must be straight-line mutation lists on the proxy."""
        error = compile_err(scenario_source(f"const cart = store()\ncart.transaction({callback})\n{MAIN}"))
        assert error.codes == [DiagnosticCode.UNSUPPORTED_ACTION_EXPRESSION]
        assert message in error.diagnostics[0].message


# =============================================================================
# Ids
# =============================================================================


def test_ids_are_deterministic_across_compiles():
    """The same source always yields the same ids."""
    body = f"const s = store()\ns.set('a', 1)\ns.set('a', 2)\n{MAIN}"
    first = [a["id"] for a in actions_of(body)]
    second = [a["id"] for a in actions_of(body)]
    assert first == second


def test_repeated_mutations_get_distinct_ids():
    """Identical (store, op, keyPath) tuples are told apart by their ordinal."""
    ids = [a["id"] for a in actions_of(f"const s = store()\ns.set('a', 1)\ns.set('a', 1)\n{MAIN}")]
    assert ids[0] != ids[1]


def test_ids_do_not_depend_on_value():
    """Changing a value keeps the id stable."""
    [one] = actions_of(f"const s = store()\ns.set('a', 1)\n{MAIN}")
    [two] = actions_of(f"const s = store()\ns.set('a', 'changed')\n{MAIN}")
    assert one["id"] == two["id"]
