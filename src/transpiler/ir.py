"""Wire models for compiled scenarios.

This module defines the JSON document that native runtimes consume.
Uses Pydantic for serialization; every model is frozen once built.

Serialization rule: a field appears on the wire only if the compiler set it.
Optional collections (style, properties, children, stores, actions) are never
emitted empty, and an explicit null value (e.g. ``store.set('k', null)``) is
kept because it was set.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Values
# =============================================================================

# A serialized expression: str | int | float | bool | None | PropRef | dict | list.
Value = Any


class PropRef(TypedDict):
    """Reference to a component input, resolved by the runtime."""

    type: Literal["prop"]
    key: str


def prop_ref(key: str) -> PropRef:
    return {"type": "prop", "key": key}


def is_prop_ref(value: Value) -> bool:
    return isinstance(value, dict) and value.get("type") == "prop" and set(value) == {"type", "key"}


# =============================================================================
# Enums
# =============================================================================


class StoreScope(str, Enum):
    """Lifetime of a store."""

    APP = "app"
    SCENARIO = "scenario"


class StoreStorage(str, Enum):
    """Persistence backend of a store."""

    MEMORY = "memory"
    USER_PREFS = "userPrefs"
    FILE = "file"
    BACKEND = "backend"


class ActionType(str, Enum):
    """Kinds of action descriptors."""

    STORE_SET = "store.set"
    STORE_REMOVE = "store.remove"
    STORE_MERGE = "store.merge"
    STORE_TRANSACTION = "store.transaction"

    NAVIGATION_PUSH = "navigation.push"
    NAVIGATION_POP = "navigation.pop"
    NAVIGATION_REPLACE = "navigation.replace"
    NAVIGATION_MODAL = "navigation.modal"
    NAVIGATION_DISMISS_MODAL = "navigation.dismissModal"
    NAVIGATION_POP_TO = "navigation.popTo"
    NAVIGATION_RESET = "navigation.reset"

    UI_SHOW_TOAST = "ui.showToast"
    UI_SHOW_ALERT = "ui.showAlert"
    UI_SHOW_SHEET = "ui.showSheet"
    UI_DISMISS_SHEET = "ui.dismissSheet"
    UI_SHOW_LOADING = "ui.showLoading"
    UI_HIDE_LOADING = "ui.hideLoading"

    SYSTEM_SHARE = "system.share"
    SYSTEM_OPEN_URL = "system.openUrl"
    SYSTEM_HAPTIC = "system.haptic"
    SYSTEM_COPY_TO_CLIPBOARD = "system.copyToClipboard"
    SYSTEM_REQUEST_PERMISSION = "system.requestPermission"

    API_REQUEST = "api.request"

    SEQUENCE = "sequence"
    CONDITIONAL = "conditional"
    SWITCH = "switch"

    @property
    def is_store(self) -> bool:
        return self.value.startswith("store.")

    @property
    def is_composite(self) -> bool:
        return self in _COMPOSITE_TYPES


_COMPOSITE_TYPES = frozenset(
    {
        ActionType.STORE_TRANSACTION,
        ActionType.API_REQUEST,
        ActionType.SEQUENCE,
        ActionType.CONDITIONAL,
        ActionType.SWITCH,
    }
)


# =============================================================================
# Models
# =============================================================================


class WireModel(BaseModel):
    """Base for frozen models serialized with only the fields that were set."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(indent=indent, by_alias=True, exclude_unset=True)


def _drop_empty(data: Any, keys: tuple[str, ...]) -> Any:
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if k not in keys or v}
    return data


class ComponentNode(WireModel):
    """One node of the compiled UI tree."""

    type: str
    style: dict[str, Value] | None = None
    properties: dict[str, Value] | None = None
    children: list[ComponentNode] | None = None

    @model_validator(mode="before")
    @classmethod
    def _omit_empty_collections(cls, data: Any) -> Any:
        return _drop_empty(data, ("style", "properties", "children"))


class StoreDescriptor(WireModel):
    """A scoped state container declared with store(...)."""

    scope: StoreScope
    storage: StoreStorage
    initial_value: dict[str, Value] | None = Field(default=None, alias="initialValue")


class ActionDescriptor(WireModel):
    """Data-only description of a state mutation or side effect.

    Store kinds carry scope/storage/keyPath; composite kinds carry an ordered
    ``actions`` list (empty lists are kept for composites).
    """

    id: str
    type: ActionType
    scope: StoreScope | None = None
    storage: StoreStorage | None = None
    key_path: str | None = Field(default=None, alias="keyPath")
    value: Value = None
    actions: list[ActionDescriptor] | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> ActionDescriptor:
        if self.type.is_store and (self.scope is None or self.storage is None):
            raise ValueError(f"{self.type.value} requires scope and storage")
        if self.type.is_composite and self.actions is None:
            raise ValueError(f"{self.type.value} requires an actions list")
        if not self.type.is_composite and self.actions is not None:
            raise ValueError(f"{self.type.value} cannot carry nested actions")
        return self


class TranspiledScenario(WireModel):
    """Top-level compiled scenario document."""

    key: str
    version: str
    build_number: int = Field(alias="buildNumber")
    main: ComponentNode
    components: dict[str, ComponentNode]
    stores: list[StoreDescriptor] | None = None
    actions: list[ActionDescriptor] | None = None

    # Non-fatal diagnostics; never serialized.
    warnings: tuple[Any, ...] = Field(default=(), exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _omit_empty_collections(cls, data: Any) -> Any:
        return _drop_empty(data, ("stores", "actions"))

    @classmethod
    def from_json(cls, json_str: str) -> TranspiledScenario:
        """Deserialize from JSON string."""
        return cls.model_validate_json(json_str)
