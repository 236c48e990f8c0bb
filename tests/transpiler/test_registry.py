"""Tests for the component registry."""

import pytest

from src.transpiler.errors import ComponentNotFoundError, RegistrationError
from src.transpiler.registries import ComponentDefinition, ComponentRegistry, create_default_registry


class TestDefaultRegistry:
    """The shipped default component set."""

    def test_layout_defaults(self):
        """Row and Column carry their flex direction as default style."""
        registry = create_default_registry()
        assert registry.default_styles("Row") == {"flexDirection": "row"}
        assert registry.default_styles("Column") == {"flexDirection": "column"}
        assert registry.default_styles("View") == {}

    def test_text_accepts_text_children(self):
        """Text is the text container; Image takes no children."""
        registry = create_default_registry()
        assert registry.get_definition("Text").text_children_allowed
        assert not registry.get_definition("Image").children_allowed

    def test_lookup_is_case_sensitive(self):
        """Names match exactly."""
        registry = create_default_registry()
        assert registry.is_registered("Text")
        assert not registry.is_registered("text")
        assert "TEXT" not in registry

    def test_registries_are_independent(self):
        """Each call returns a fresh registry."""
        first = create_default_registry()
        first.register(ComponentDefinition("Custom"))
        assert not create_default_registry().is_registered("Custom")


def test_unknown_lookup_raises():
    """get_definition on an unknown name raises ComponentNotFoundError."""
    with pytest.raises(ComponentNotFoundError, match="Component not found: Nope"):
        ComponentRegistry().get_definition("Nope")


def test_find_returns_none_for_unknown():
    """find() is the non-raising lookup."""
    assert ComponentRegistry().find("Nope") is None


def test_duplicate_registration_raises():
    """A name can be registered once."""
    registry = ComponentRegistry([ComponentDefinition("Card")])
    with pytest.raises(RegistrationError, match="already registered"):
        registry.register(ComponentDefinition("Card"))


@pytest.mark.parametrize("name", ["card", "my-card", "", "1Card", "UI..Button"])
def test_invalid_names_rejected(name):
    """Names must be PascalCase, optionally dotted."""
    with pytest.raises(RegistrationError, match="Invalid component name"):
        ComponentRegistry().register(ComponentDefinition(name))


def test_dotted_names_accepted():
    """Namespaced names like UI.Button register and resolve by full name."""
    registry = ComponentRegistry([ComponentDefinition("UI.Button")])
    assert registry.get_definition("UI.Button").name == "UI.Button"


def test_definitions_are_immutable():
    """Definitions and their default styles cannot be changed."""
    definition = ComponentDefinition("Box", {"padding": 4})
    with pytest.raises(AttributeError):
        definition.name = "Other"
    with pytest.raises(TypeError):
        definition.default_styles["padding"] = 8


def test_config_round_trip():
    """Definitions load from their camelCase config form."""
    registry = ComponentRegistry.from_config(
        [{"name": "Badge", "defaultStyles": {"borderRadius": 8}, "supportedProps": ["label"], "childrenAllowed": False}]
    )
    definition = registry.get_definition("Badge")
    assert definition.default_styles == {"borderRadius": 8}
    assert definition.supported_props == ("label",)
    assert not definition.children_allowed
    assert registry.to_list()[0]["name"] == "Badge"


def test_config_without_name_raises():
    """A config entry needs a name."""
    with pytest.raises(RegistrationError):
        ComponentRegistry.from_config([{"defaultStyles": {}}])
