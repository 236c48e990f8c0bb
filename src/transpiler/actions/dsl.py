"""Static shapes of the scenario action DSL.

Recognizes calls to the DSL namespaces without executing them:

  store({scope, storage, initialValue})        -> StoreDescriptor
  <store>.set|merge(keyPath, value)            -> store.set / store.merge
  <store>.remove(keyPath)                      -> store.remove
  <store>.transaction(tx => {...})             -> store.transaction
  navigate.<method>(...)                       -> navigation.*
  ui.<method>(...)                             -> ui.*
  system.<method>(...)                         -> system.*
  api.request({...})                           -> api.request

Navigation, ui and system methods may also be called directly
(``push('Home')``), as may ``apiRequest({...})``.

Every helper here either returns a fully-resolved value or raises
UnsupportedExpressionError; nothing is silently dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import UnsupportedExpressionError
from ..ir import ActionType, StoreDescriptor, StoreScope, StoreStorage, Value, is_prop_ref
from ..serializer import ValueSerializer, property_key
from ..syntax.nodes import (
    CallExpression,
    Expression,
    Identifier,
    MemberExpression,
    ObjectExpression,
    Property,
    SpreadElement,
    static_string,
    unwrap,
)

STORE_FACTORY = "store"

STORE_METHODS: dict[str, ActionType] = {
    "set": ActionType.STORE_SET,
    "remove": ActionType.STORE_REMOVE,
    "merge": ActionType.STORE_MERGE,
    "transaction": ActionType.STORE_TRANSACTION,
}

STORE_READ_METHODS = frozenset({"get"})

NAVIGATE_NAMESPACE = "navigate"
UI_NAMESPACE = "ui"
SYSTEM_NAMESPACE = "system"
API_NAMESPACE = "api"

DSL_NAMESPACES = frozenset({NAVIGATE_NAMESPACE, UI_NAMESPACE, SYSTEM_NAMESPACE, API_NAMESPACE})


@dataclass(frozen=True)
class EffectSignature:
    """Positional arguments accepted by a navigation, ui or system method.

    ``positional`` names the leading arguments in order; the first
    ``required`` of them must be present. ``options`` names a trailing object
    argument whose properties are merged into the payload. ``fixed`` entries
    are always part of the payload.
    """

    action_type: ActionType
    positional: tuple[str, ...] = ()
    required: int = 0
    options: str | None = None
    fixed: tuple[tuple[str, str], ...] = ()


NAVIGATE_METHODS: dict[str, EffectSignature] = {
    "push": EffectSignature(ActionType.NAVIGATION_PUSH, ("screenId", "params"), 1),
    "replace": EffectSignature(ActionType.NAVIGATION_REPLACE, ("screenId", "params"), 1),
    "modal": EffectSignature(ActionType.NAVIGATION_MODAL, ("screenId", "params"), 1),
    "reset": EffectSignature(ActionType.NAVIGATION_RESET, ("screenId", "params"), 1),
    "popTo": EffectSignature(ActionType.NAVIGATION_POP_TO, ("screenId",), 1),
    "pop": EffectSignature(ActionType.NAVIGATION_POP),
    "dismissModal": EffectSignature(ActionType.NAVIGATION_DISMISS_MODAL),
}

UI_METHODS: dict[str, EffectSignature] = {
    "showToast": EffectSignature(ActionType.UI_SHOW_TOAST, ("message",), 1, options="options"),
    "showAlert": EffectSignature(ActionType.UI_SHOW_ALERT, ("title",), 1, options="options"),
    "showSheet": EffectSignature(ActionType.UI_SHOW_SHEET, ("screenId", "params"), 1),
    "dismissSheet": EffectSignature(ActionType.UI_DISMISS_SHEET),
    "showLoading": EffectSignature(ActionType.UI_SHOW_LOADING, ("message",)),
    "hideLoading": EffectSignature(ActionType.UI_HIDE_LOADING),
}

SYSTEM_METHODS: dict[str, EffectSignature] = {
    "share": EffectSignature(ActionType.SYSTEM_SHARE, ("content",), 1),
    "openUrl": EffectSignature(ActionType.SYSTEM_OPEN_URL, ("url",), 1),
    "haptic": EffectSignature(ActionType.SYSTEM_HAPTIC, ("style",), 1),
    "copyToClipboard": EffectSignature(ActionType.SYSTEM_COPY_TO_CLIPBOARD, ("text",), 1),
    "requestCameraPermission": EffectSignature(
        ActionType.SYSTEM_REQUEST_PERMISSION, fixed=(("permission", "camera"),)
    ),
    "requestPhotoLibraryPermission": EffectSignature(
        ActionType.SYSTEM_REQUEST_PERMISSION, fixed=(("permission", "photoLibrary"),)
    ),
    "requestLocationPermission": EffectSignature(
        ActionType.SYSTEM_REQUEST_PERMISSION, fixed=(("permission", "location"),)
    ),
    "requestNotificationPermission": EffectSignature(
        ActionType.SYSTEM_REQUEST_PERMISSION, fixed=(("permission", "notification"),)
    ),
}

EFFECT_METHODS: dict[str, dict[str, EffectSignature]] = {
    NAVIGATE_NAMESPACE: NAVIGATE_METHODS,
    UI_NAMESPACE: UI_METHODS,
    SYSTEM_NAMESPACE: SYSTEM_METHODS,
}

API_METHODS = frozenset({"request"})

# push('Home') is navigate.push('Home'); apiRequest({...}) is api.request({...}).
DIRECT_CALLS: dict[str, tuple[str, str]] = {
    **{name: (namespace, name) for namespace, methods in EFFECT_METHODS.items() for name in methods},
    "apiRequest": (API_NAMESPACE, "request"),
}

# Arguments that must be string literals rather than arbitrary values.
LITERAL_ARGUMENTS = frozenset({"screenId", "style"})

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})
DEFAULT_HTTP_METHOD = "GET"

# Serialized into the request payload as-is.
REQUEST_OPTIONS = ("headers", "body", "responseMapping")
REQUEST_CALLBACKS = ("onSuccess", "onError")

# ``StoreScope.App`` / ``StoreStorage.UserPrefs`` member spellings.
_SCOPE_ENUM = "StoreScope"
_STORAGE_ENUM = "StoreStorage"


# =============================================================================
# Call shape helpers
# =============================================================================


def method_call(call: CallExpression) -> tuple[Expression, str | None] | None:
    """Split ``receiver.method(...)`` into (receiver, method name).

    The method name is None for computed access (``receiver[name](...)``).
    Returns None when the callee is not a member expression.
    """
    callee = unwrap(call.callee)
    if not isinstance(callee, MemberExpression):
        return None
    return unwrap(callee.object), callee.property_name


def direct_call(call: CallExpression) -> tuple[str, str] | None:
    """(namespace, method) of a direct call such as ``push('Home')``, or None."""
    callee = unwrap(call.callee)
    if isinstance(callee, Identifier):
        return DIRECT_CALLS.get(callee.name)
    return None


def is_store_factory_call(call: CallExpression) -> bool:
    callee = unwrap(call.callee)
    return isinstance(callee, Identifier) and callee.name == STORE_FACTORY


def plain_arguments(call: CallExpression, what: str) -> tuple[Expression, ...]:
    """Call arguments, rejecting spreads."""
    for arg in call.arguments:
        if isinstance(arg, SpreadElement):
            raise UnsupportedExpressionError(f"{what}: spread arguments are not supported", call.line)
    return call.arguments


def literal_key_path(node: Expression | None, what: str, line: int) -> str:
    """A key path must be a string literal (or a template without substitutions)."""
    if node is None:
        raise UnsupportedExpressionError(f"{what} requires a keyPath argument", line)
    key_path = static_string(node)
    if key_path is None:
        raise UnsupportedExpressionError(f"{what}: keyPath must be a string literal", line)
    return key_path


def object_members(node: ObjectExpression, what: str, line: int) -> dict[str, Expression]:
    """Properties of an object literal by key, rejecting spreads."""
    members: dict[str, Expression] = {}
    for member in node.properties or ():
        if not isinstance(member, Property):
            raise UnsupportedExpressionError(f"{what}: only plain properties are supported", line)
        members[property_key(member)] = member.value
    return members


# =============================================================================
# Store declarations
# =============================================================================


def _enum_value(node: Expression, enum_name: str, enum_cls, what: str, line: int):
    text = static_string(node)
    if text is None:
        node = unwrap(node)
        if (
            isinstance(node, MemberExpression)
            and isinstance(unwrap(node.object), Identifier)
            and unwrap(node.object).name == enum_name
            and node.property_name
        ):
            # App -> app, UserPrefs -> userPrefs
            name = node.property_name
            text = name[:1].lower() + name[1:]
    if text is None:
        raise UnsupportedExpressionError(f"store(): {what} must be a string literal or {enum_name} member", line)
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise UnsupportedExpressionError(
            f"store(): unknown {what} '{text}' (expected one of: {allowed})", line
        ) from None


def parse_store_declaration(call: CallExpression, serializer: ValueSerializer) -> StoreDescriptor:
    """Build a StoreDescriptor from a ``store(...)`` call.

    Raises:
        UnsupportedExpressionError: If the config is not a static object literal
    """
    args = plain_arguments(call, "store()")
    scope = StoreScope.SCENARIO
    storage = StoreStorage.MEMORY
    fields: dict = {}

    if args:
        config = unwrap(args[0])
        if not isinstance(config, ObjectExpression):
            raise UnsupportedExpressionError("store(): config must be an object literal", call.line)
        members = object_members(config, "store()", call.line)

        if "scope" in members:
            scope = _enum_value(members["scope"], _SCOPE_ENUM, StoreScope, "scope", call.line)
        if "storage" in members:
            storage = _enum_value(members["storage"], _STORAGE_ENUM, StoreStorage, "storage", call.line)
        if "initialValue" in members:
            initial = serializer.visit(members["initialValue"])
            if not isinstance(initial, dict) or is_prop_ref(initial):
                raise UnsupportedExpressionError("store(): initialValue must be an object literal", call.line)
            fields["initial_value"] = initial

    return StoreDescriptor(scope=scope, storage=storage, **fields)


# =============================================================================
# Effects
# =============================================================================


def effect_payload(
    signature: EffectSignature,
    call: CallExpression,
    serializer: ValueSerializer,
    what: str,
) -> dict[str, Value]:
    """Payload for a navigation/ui/system call from its positional arguments."""
    args = plain_arguments(call, what)
    accepted = len(signature.positional) + (1 if signature.options else 0)
    if len(args) < signature.required:
        names = ", ".join(signature.positional[: signature.required])
        raise UnsupportedExpressionError(f"{what} requires: {names}", call.line)
    if len(args) > accepted:
        raise UnsupportedExpressionError(f"{what} takes at most {accepted} argument(s)", call.line)

    payload: dict[str, Value] = dict(signature.fixed)
    for name, arg in zip(signature.positional, args):
        if name in LITERAL_ARGUMENTS:
            text = static_string(arg)
            if text is None:
                raise UnsupportedExpressionError(f"{what}: {name} must be a string literal", call.line)
            payload[name] = text
        elif name == "content":
            # share('hi') is share({ text: 'hi' })
            content = serializer.visit(arg)
            payload[name] = content if isinstance(content, dict) and not is_prop_ref(content) else {"text": content}
        else:
            payload[name] = serializer.visit(arg)

    if signature.options and len(args) == accepted:
        options = unwrap(args[-1])
        if not isinstance(options, ObjectExpression):
            raise UnsupportedExpressionError(f"{what}: {signature.options} must be an object literal", call.line)
        for key, value in object_members(options, what, call.line).items():
            payload[key] = serializer.visit(value)

    return payload


def api_request_config(call: CallExpression, serializer: ValueSerializer) -> tuple[dict[str, Value], dict[str, Expression]]:
    """Split ``api.request({...})`` into its request payload and callbacks.

    Returns:
        (request payload, {"onSuccess": node, "onError": node} for present callbacks)
    """
    what = "api.request()"
    args = plain_arguments(call, what)
    if len(args) != 1 or not isinstance(unwrap(args[0]), ObjectExpression):
        raise UnsupportedExpressionError(f"{what} requires a single object literal argument", call.line)
    members = object_members(unwrap(args[0]), what, call.line)

    endpoint = members.get("endpoint")
    if endpoint is None:
        raise UnsupportedExpressionError(f"{what} requires an endpoint", call.line)
    endpoint_value = serializer.visit(endpoint)
    if not isinstance(endpoint_value, str) and not is_prop_ref(endpoint_value):
        raise UnsupportedExpressionError(f"{what}: endpoint must be a string literal or prop", call.line)

    method = DEFAULT_HTTP_METHOD
    if "method" in members:
        method = static_string(members["method"])
        if method is None or method.upper() not in HTTP_METHODS:
            raise UnsupportedExpressionError(f"{what}: method must be one of {', '.join(sorted(HTTP_METHODS))}", call.line)
        method = method.upper()

    request: dict[str, Value] = {"endpoint": endpoint_value, "method": method}
    for name in REQUEST_OPTIONS:
        if name in members:
            request[name] = serializer.visit(members[name])

    callbacks = {name: members[name] for name in REQUEST_CALLBACKS if name in members}
    unknown = set(members) - {"endpoint", "method", *REQUEST_OPTIONS, *REQUEST_CALLBACKS}
    if unknown:
        raise UnsupportedExpressionError(f"{what}: unsupported option(s): {', '.join(sorted(unknown))}", call.line)
    return request, callbacks
