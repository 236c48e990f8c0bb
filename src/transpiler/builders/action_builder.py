"""Action descriptor builders.

Every ActionDescriptor the compiler emits is created here so ids are
assigned in one place. Ids are a hash over
``(scope, storage, operation, keyPath, ordinal)`` where the ordinal counts
earlier actions with the same tuple in the same compile, so repeated
identical mutations get distinct but reproducible ids.
"""

from __future__ import annotations

import hashlib
from typing import Any

from ..context import CompilationContext
from ..ir import ActionDescriptor, ActionType, StoreDescriptor, Value

ID_DIGEST_LENGTH = 12


def generate_action_id(
    operation: str,
    scope: str | None,
    storage: str | None,
    key_path: str | None,
    ordinal: int,
) -> str:
    """Generate a deterministic action id.

    Format: {operation with dots as underscores}_{first 12 hex of sha256}.
    """
    payload = "\x1f".join([scope or "", storage or "", operation, key_path or "", str(ordinal)])
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:ID_DIGEST_LENGTH]
    return f"{operation.replace('.', '_')}_{digest}"


class ActionBuilder:
    """Builds action descriptors with stable ids."""

    def __init__(self, ctx: CompilationContext):
        self.ctx = ctx

    def _id(
        self,
        action_type: ActionType,
        scope: str | None = None,
        storage: str | None = None,
        key_path: str | None = None,
    ) -> str:
        signature = (scope or "", storage or "", action_type.value, key_path or "")
        ordinal = self.ctx.next_ordinal(signature)
        return generate_action_id(action_type.value, scope, storage, key_path, ordinal)

    # -------------------------------------------------------------------------
    # Store actions
    # -------------------------------------------------------------------------

    def store_mutation(
        self,
        action_type: ActionType,
        store: StoreDescriptor,
        key_path: str,
        value: Value = None,
        has_value: bool = True,
    ) -> ActionDescriptor:
        """Build store.set / store.merge (with value) or store.remove (without)."""
        fields: dict[str, Any] = {
            "id": self._id(action_type, store.scope.value, store.storage.value, key_path),
            "type": action_type,
            "scope": store.scope,
            "storage": store.storage,
            "key_path": key_path,
        }
        if has_value:
            fields["value"] = value
        return ActionDescriptor(**fields)

    def transaction(self, store: StoreDescriptor, actions: list[ActionDescriptor]) -> ActionDescriptor:
        return ActionDescriptor(
            id=self._id(ActionType.STORE_TRANSACTION, store.scope.value, store.storage.value),
            type=ActionType.STORE_TRANSACTION,
            scope=store.scope,
            storage=store.storage,
            actions=list(actions),
        )

    # -------------------------------------------------------------------------
    # Side effects
    # -------------------------------------------------------------------------

    def effect(self, action_type: ActionType, payload: dict[str, Value] | None = None) -> ActionDescriptor:
        """Build a navigation.*, ui.* or system.* action; the payload travels in ``value``."""
        discriminator = None
        for name in ("screenId", "permission"):
            if payload and isinstance(payload.get(name), str):
                discriminator = payload[name]
                break
        fields: dict[str, Any] = {
            "id": self._id(action_type, key_path=discriminator),
            "type": action_type,
        }
        if payload:
            fields["value"] = payload
        return ActionDescriptor(**fields)

    def api_request(
        self,
        request: dict[str, Value],
        on_success: ActionDescriptor,
        on_error: ActionDescriptor,
    ) -> ActionDescriptor:
        """Build api.request; ``actions`` is always [onSuccess, onError]."""
        endpoint = request.get("endpoint")
        return ActionDescriptor(
            id=self._id(ActionType.API_REQUEST, key_path=endpoint if isinstance(endpoint, str) else None),
            type=ActionType.API_REQUEST,
            value=request,
            actions=[on_success, on_error],
        )

    # -------------------------------------------------------------------------
    # Control flow
    # -------------------------------------------------------------------------

    def sequence(self, actions: list[ActionDescriptor]) -> ActionDescriptor:
        return ActionDescriptor(
            id=self._id(ActionType.SEQUENCE),
            type=ActionType.SEQUENCE,
            actions=list(actions),
        )

    def single(self, actions: list[ActionDescriptor]) -> ActionDescriptor:
        """One action as-is; zero or several wrapped in a sequence."""
        if len(actions) == 1:
            return actions[0]
        return self.sequence(actions)

    def conditional(
        self,
        condition: dict[str, Value],
        then_action: ActionDescriptor,
        else_action: ActionDescriptor | None = None,
    ) -> ActionDescriptor:
        actions = [then_action] if else_action is None else [then_action, else_action]
        return ActionDescriptor(
            id=self._id(ActionType.CONDITIONAL),
            type=ActionType.CONDITIONAL,
            value={"condition": condition},
            actions=actions,
        )

    def switch(
        self,
        discriminant: Value,
        cases: list[Value],
        branches: list[ActionDescriptor],
    ) -> ActionDescriptor:
        """``cases[i]`` selects ``branches[i]``; a None case is ``default``."""
        return ActionDescriptor(
            id=self._id(ActionType.SWITCH),
            type=ActionType.SWITCH,
            value={"discriminant": discriminant, "cases": list(cases)},
            actions=list(branches),
        )
