"""Component registry - known UI element types.

Each definition lists the default styles a runtime applies to the type,
the properties it understands, and whether it accepts element and text
children. Lookups are exact-name and case-sensitive.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..errors import ComponentNotFoundError, RegistrationError

# PascalCase, optionally namespaced: Text, UI.Button
COMPONENT_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*(\.[A-Z][A-Za-z0-9]*)*$")


@dataclass(frozen=True)
class ComponentDefinition:
    """Registry entry for one element type."""

    name: str
    default_styles: Mapping[str, Any] = field(default_factory=dict)
    supported_props: tuple[str, ...] = ()
    children_allowed: bool = True
    text_children_allowed: bool = False

    def __post_init__(self):
        object.__setattr__(self, "default_styles", MappingProxyType(dict(self.default_styles)))
        object.__setattr__(self, "supported_props", tuple(self.supported_props))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "defaultStyles": dict(self.default_styles),
            "supportedProps": list(self.supported_props),
            "childrenAllowed": self.children_allowed,
            "textChildrenAllowed": self.text_children_allowed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ComponentDefinition:
        """Build a definition from its camelCase config form."""
        if "name" not in data:
            raise RegistrationError(f"Component definition without a name: {dict(data)}")
        return cls(
            name=data["name"],
            default_styles=data.get("defaultStyles", {}),
            supported_props=tuple(data.get("supportedProps", ())),
            children_allowed=bool(data.get("childrenAllowed", True)),
            text_children_allowed=bool(data.get("textChildrenAllowed", False)),
        )


class ComponentRegistry:
    """Table of known element types."""

    def __init__(self, definitions: Iterable[ComponentDefinition] = ()):
        self._definitions: dict[str, ComponentDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ComponentDefinition) -> None:
        """Add a definition.

        Raises:
            RegistrationError: If the name is not PascalCase or already registered
        """
        if not isinstance(definition.name, str) or not COMPONENT_NAME_PATTERN.match(definition.name):
            raise RegistrationError(f"Invalid component name '{definition.name}': must be PascalCase")
        if definition.name in self._definitions:
            raise RegistrationError(f"Component '{definition.name}' is already registered")
        self._definitions[definition.name] = definition

    def is_registered(self, name: str) -> bool:
        return name in self._definitions

    def find(self, name: str) -> ComponentDefinition | None:
        return self._definitions.get(name)

    def get_definition(self, name: str) -> ComponentDefinition:
        """Look up a definition.

        Raises:
            ComponentNotFoundError: If the name is not registered
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise ComponentNotFoundError(name)
        return definition

    def default_styles(self, name: str) -> dict[str, Any]:
        """Default styles for a type; empty for unknown types."""
        definition = self._definitions.get(name)
        return dict(definition.default_styles) if definition else {}

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def to_list(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self]

    @classmethod
    def from_config(cls, entries: Iterable[Mapping[str, Any]]) -> ComponentRegistry:
        """Build a registry from already-loaded config entries."""
        return cls(ComponentDefinition.from_dict(entry) for entry in entries)


# =============================================================================
# Default component set
# =============================================================================

DEFAULT_COMPONENTS: tuple[ComponentDefinition, ...] = (
    # Layout
    ComponentDefinition("View", supported_props=("id",)),
    ComponentDefinition("Row", {"flexDirection": "row"}, ("id",)),
    ComponentDefinition("Column", {"flexDirection": "column"}, ("id",)),
    ComponentDefinition("Stack", supported_props=("id",)),
    ComponentDefinition("ScrollView", supported_props=("horizontal", "showsScrollIndicator")),
    ComponentDefinition("SafeArea", supported_props=("edges",)),
    ComponentDefinition("Spacer", {"flex": 1}, children_allowed=False),
    ComponentDefinition("Divider", supported_props=("color", "thickness"), children_allowed=False),
    # Content
    ComponentDefinition("Text", supported_props=("text",), text_children_allowed=True),
    ComponentDefinition("Image", supported_props=("source", "resizeMode"), children_allowed=False),
    # Controls
    ComponentDefinition("Button", supported_props=("title", "image", "titleStyle", "disabled"), children_allowed=False),
    ComponentDefinition("Touchable", supported_props=("onPress",)),
    ComponentDefinition("Checkbox", supported_props=("checked", "disabled"), children_allowed=False),
    ComponentDefinition(
        "Stepper",
        supported_props=("value", "minimumValue", "maximumValue", "step", "disabled"),
        children_allowed=False,
    ),
    ComponentDefinition("Rating", supported_props=("value", "maximumValue"), children_allowed=False),
    ComponentDefinition("Input", supported_props=("value", "placeholder", "disabled"), children_allowed=False),
    # Runtime-bound lists render their item template per data element
    ComponentDefinition("List", supported_props=("data", "keyPath", "itemTemplate")),
)


def create_default_registry() -> ComponentRegistry:
    """Create a registry holding the default component set."""
    return ComponentRegistry(DEFAULT_COMPONENTS)
