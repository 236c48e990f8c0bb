"""Tests for the component tree builder."""

import logging

import pytest

from src.transpiler import DiagnosticCode, Severity
from src.transpiler.builders import clean_jsx_text
from tests.conftest import compile_err, compile_ok, main_of, scenario_source

# =============================================================================
# Attributes
# =============================================================================


def test_style_and_prop_reference():
    """Example: a Row with a style and a Text bound to a prop."""
    main = main_of(
        """
export default ({ rating }) => (
  <Row style={{ alignItems: 'center' }}>
    <Text properties={{ text: rating }} />
  </Row>
)
"""
    )
    assert main == {
        "type": "Row",
        "style": {"alignItems": "center"},
        "children": [{"type": "Text", "properties": {"text": {"type": "prop", "key": "rating"}}}],
    }


def test_bare_element_has_only_type():
    """Empty style, properties and children are omitted."""
    assert main_of("export default () => <View />") == {"type": "View"}


def test_nested_values_in_properties():
    """Arrays and nested objects serialize with prop references inside."""
    main = main_of(
        "export default function Main({ title }) {\n"
        "  return <List properties={{ data: [title, 2], options: { dense: true } }} />\n"
        "}"
    )
    assert main["properties"] == {
        "data": [{"type": "prop", "key": "title"}, 2],
        "options": {"dense": True},
    }


def test_non_object_style_is_ignored():
    """A style bound to a prop or variable is not a static object."""
    main = main_of("export default ({ s }) => <View style={s} properties={'x'} />")
    assert main == {"type": "View"}


def test_unrecognized_attributes_are_dropped():
    """Only style and properties reach the wire."""
    main = main_of("export default () => <Button title=\"Go\" disabled properties={{ title: 'Go' }} />")
    assert main == {"type": "Button", "properties": {"title": "Go"}}


def test_identifiers_outside_props_are_null():
    """Local variables are not props."""
    main = main_of(
        "export default function Main({ a }) {\n"
        "  const b = 1\n"
        "  return <View properties={{ a, b }} />\n"
        "}"
    )
    assert main["properties"] == {"a": {"type": "prop", "key": "a"}, "b": None}


# =============================================================================
# Children
# =============================================================================


def test_comment_children_are_skipped():
    """`{/* ... */}` and `{}` render nothing."""
    main = main_of(
        """
export default () => (
  <View>
    {/* <Text>old</Text> */}
    <Text />
    {}
  </View>
)
"""
    )
    assert main["children"] == [{"type": "Text"}]


def test_fragments_are_flattened():
    """Fragment children join the parent's children in order."""
    main = main_of("export default () => <Column><Text /><><Image /><Divider /></><Spacer /></Column>")
    assert [c["type"] for c in main["children"]] == ["Text", "Image", "Divider", "Spacer"]


def test_conditional_and_list_rendering_are_skipped():
    """Expressions that build elements at runtime are not part of the static tree."""
    main = main_of(
        "export default ({ show, items }) => (\n"
        "  <View>{show && <Text />}{items.map((i) => <Text />)}<Image /></View>\n"
        ")"
    )
    assert main["children"] == [{"type": "Image"}]


def test_children_dropped_for_leaf_types(caplog):
    """Types that take no children lose them with a warning log."""
    with caplog.at_level(logging.WARNING, logger="src.transpiler.builders.tree_builder"):
        main = main_of("export default () => <Image><View /></Image>")
    assert main == {"type": "Image"}
    assert "does not accept children" in caplog.text


# =============================================================================
# Text
# =============================================================================


def test_text_children_become_text_property():
    """Text content of a Text element is collapsed into properties.text."""
    main = main_of(
        """
export default () => (
  <Text>
    Hello
    world
  </Text>
)
"""
    )
    assert main == {"type": "Text", "properties": {"text": "Hello world"}}


def test_static_expression_text_joins():
    """String and number expressions concatenate with surrounding text."""
    main = main_of("export default () => <Text>Count: {3}{'!'}</Text>")
    assert main["properties"] == {"text": "Count: 3!"}


def test_single_prop_text_is_prop_ref():
    """A lone prop child binds the text to the prop."""
    main = main_of("export default ({ name }) => <Text>{name}</Text>")
    assert main["properties"] == {"text": {"type": "prop", "key": "name"}}


def test_mixed_prop_and_static_text_keeps_static_text():
    """Static text next to a prop keeps the static part and warns."""
    scenario = compile_ok(scenario_source("export default ({ name }) => <Text>Hello {name}</Text>"))
    assert scenario.to_dict()["main"] == {"type": "Text", "properties": {"text": "Hello"}}
    [warning] = scenario.warnings
    assert warning.code == DiagnosticCode.MIXED_TEXT_CHILDREN
    assert warning.severity == Severity.WARNING
    assert "<Text>" in warning.message


def test_several_prop_pieces_are_dropped():
    """Several props cannot share the text property; nothing is attached."""
    scenario = compile_ok(scenario_source("export default ({ a, b }) => <Text>{a}{b}</Text>"))
    assert scenario.to_dict()["main"] == {"type": "Text"}
    assert [w.code for w in scenario.warnings] == [DiagnosticCode.MIXED_TEXT_CHILDREN]


def test_text_ignored_for_non_text_types():
    """Only types accepting text children keep text."""
    assert main_of("export default () => <Row>loose text</Row>") == {"type": "Row"}


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Hello", "Hello"),
        ("Hello\n   world\n", "Hello world"),
        ("\n   \n  ", ""),
        ("a\t b", "a  b"),
        ("one\r\ntwo", "one two"),
    ],
)
def test_clean_jsx_text(raw, expected):
    """Whitespace rules for JSX text."""
    assert clean_jsx_text(raw) == expected


# =============================================================================
# Registry handling
# =============================================================================


def test_unknown_component_is_warning_by_default():
    """Unknown types compile with a warning diagnostic."""
    scenario = compile_ok(scenario_source("export default () => <Fancy />"))
    assert scenario.main.type == "Fancy"
    [warning] = scenario.warnings
    assert warning.code == DiagnosticCode.UNKNOWN_COMPONENT
    assert warning.severity == Severity.WARNING
    assert "warnings" not in scenario.to_dict()


def test_unknown_component_is_error_in_strict_mode():
    """Strict mode fails on unknown types."""
    error = compile_err(scenario_source("export default () => <Fancy />"), strict_mode=True)
    assert error.codes == [DiagnosticCode.UNKNOWN_COMPONENT]
    assert error.diagnostics[0].line == 3


def test_allow_unknown_components_is_silent():
    """With allow_unknown_components no diagnostic is produced."""
    scenario = compile_ok(scenario_source("export default () => <Fancy />"), allow_unknown_components=True)
    assert scenario.warnings == ()


def test_local_components_are_known():
    """Functions in the same file that return JSX are valid element types."""
    scenario = compile_ok(
        scenario_source(
            "function Card() { return <View /> }\n"
            "export default () => <Column><Card /></Column>"
        ),
        strict_mode=True,
    )
    assert scenario.main.children[0].type == "Card"


def test_default_styles_not_emitted_by_default():
    """Registry defaults stay with the runtime unless asked for."""
    assert main_of("export default () => <Row />") == {"type": "Row"}


def test_default_styles_emitted_on_request():
    """Explicit style keys override registry defaults."""
    main = main_of(
        "export default () => <Row style={{ padding: 4 }}><Column style={{ flexDirection: 'row' }} /></Row>",
        emit_default_styles=True,
    )
    assert main["style"] == {"flexDirection": "row", "padding": 4}
    assert main["children"][0]["style"] == {"flexDirection": "row"}
