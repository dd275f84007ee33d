from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from typing import Any

from marketplace.application.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from marketplace.application.ports.attribute_store import AttributeStorePort
from marketplace.application.utils.coalesce import coalesce
from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, FieldGroup, ServiceType
from marketplace.domain.entities.form_field import ResolvedField
from marketplace.domain.entities.input_spec import parse_input_spec
from marketplace.domain.entities.mandatory_fields import MANDATORY_FIELDS, is_mandatory

_OVERRIDE_KEYS = ("override_label", "override_placeholder", "override_help_text")
_PATCHABLE_KEYS = frozenset(_OVERRIDE_KEYS + ("is_required", "field_group"))


def effective_label(binding: AttributeBinding, definition: AttributeDefinition) -> str:
    return coalesce(binding.override_label, definition.label, definition.name)


def effective_placeholder(binding: AttributeBinding, definition: AttributeDefinition) -> str:
    return coalesce(
        binding.override_placeholder,
        definition.placeholder,
        f"Enter {coalesce(definition.label, definition.name)}",
    )


def effective_help_text(binding: AttributeBinding, definition: AttributeDefinition) -> str:
    return coalesce(binding.override_help_text, definition.help_text, default="")


def mandatory_prefix() -> list[ResolvedField]:
    return [
        ResolvedField(
            name=f.name,
            label=f.label,
            placeholder=f.placeholder,
            help_text=f.help_text,
            input=parse_input_spec(f.input_type),
            required=True,
            visible=True,
            locked=True,
            display_order=None,
            field_group=FieldGroup.general,
        )
        for f in MANDATORY_FIELDS
    ]


def normalize_order(bindings: list[AttributeBinding]) -> list[AttributeBinding]:
    """Sort by stored display_order (ties broken by id) and renumber 0..n-1."""
    ordered = sorted(bindings, key=lambda b: (b.display_order, b.id))
    return [b if b.display_order == i else replace(b, display_order=i) for i, b in enumerate(ordered)]


class AttributeBindingResolver:
    """Binds registry definitions to a service type and resolves the product form fields."""

    def __init__(self, store: AttributeStorePort) -> None:
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, service_type_id: str) -> asyncio.Lock:
        if service_type_id not in self._locks:
            self._locks[service_type_id] = asyncio.Lock()
        return self._locks[service_type_id]

    async def resolve_bindings(self, service_type_id: str) -> list[ResolvedField]:
        """
        Mandatory fields first (locked), then custom fields in display order.
        Bindings to inactive definitions are skipped; stored orders are renumbered
        0..n-1 on every read and never trusted as-is.
        """
        await self._require_service_type(service_type_id, active=True)

        definitions = {d.id: d for d in await self._store.list_definitions()}
        bindings = await self._store.list_bindings(service_type_id)
        active = [b for b in bindings if b.attribute_id in definitions and definitions[b.attribute_id].is_active]

        custom: list[ResolvedField] = []
        for binding in normalize_order(active):
            definition = definitions[binding.attribute_id]
            custom.append(
                ResolvedField(
                    name=definition.name,
                    label=effective_label(binding, definition),
                    placeholder=effective_placeholder(binding, definition),
                    help_text=effective_help_text(binding, definition),
                    input=parse_input_spec(
                        definition.input_type,
                        definition.data_type,
                        definition.options,
                        definition.validation_rules,
                    ),
                    required=binding.is_required,
                    visible=binding.is_visible,
                    locked=False,
                    display_order=binding.display_order,
                    field_group=binding.field_group,
                    attribute_id=definition.id,
                    binding_id=binding.id,
                    default_value=definition.default_value,
                )
            )

        self._logger.debug(
            "Resolved bindings",
            extra={"service_type_id": service_type_id, "custom": len(custom)},
        )
        return mandatory_prefix() + custom

    async def add_bindings(self, service_type_id: str, attribute_ids: list[str]) -> list[AttributeBinding]:
        """
        Attach definitions in the given order after the current last binding.
        The whole batch is rejected if any attribute is already configured or repeated.
        """
        await self._require_service_type(service_type_id)
        if not attribute_ids:
            return []

        forbidden = [a for a in attribute_ids if is_mandatory(a)]
        if forbidden:
            raise ForbiddenError(f"Mandatory fields cannot be bound: {', '.join(forbidden)}")

        definitions = {d.id: d for d in await self._store.list_definitions()}
        for attribute_id in attribute_ids:
            definition = definitions.get(attribute_id)
            if definition is None:
                raise NotFoundError(f"Attribute definition '{attribute_id}' not found")
            if is_mandatory(definition.name):
                raise ForbiddenError(f"'{definition.name}' is a mandatory field")
            if not definition.is_active:
                raise ValidationError(f"Attribute '{definition.name}' is inactive")

        async with self._get_lock(service_type_id):
            existing = await self._store.list_bindings(service_type_id)
            configured = {b.attribute_id for b in existing}
            seen: set[str] = set()
            duplicates: list[str] = []
            for attribute_id in attribute_ids:
                if attribute_id in configured or attribute_id in seen:
                    duplicates.append(attribute_id)
                seen.add(attribute_id)
            if duplicates:
                raise ConflictError(
                    f"Attributes already configured for '{service_type_id}': {', '.join(dict.fromkeys(duplicates))}"
                )

            start = max((b.display_order for b in existing), default=-1) + 1
            new_bindings = [
                AttributeBinding(
                    id=str(uuid.uuid4()),
                    service_type_id=service_type_id,
                    attribute_id=attribute_id,
                    display_order=start + i,
                )
                for i, attribute_id in enumerate(attribute_ids)
            ]
            created = await self._store.insert_bindings(new_bindings)

        self._logger.info(
            "Bindings added",
            extra={"service_type_id": service_type_id, "count": len(created)},
        )
        return created

    async def update_binding(self, binding_id: str, patch: dict[str, Any]) -> AttributeBinding:
        """Partial update of overrides, is_required and field_group. Never touches display_order."""
        if is_mandatory(binding_id):
            raise ForbiddenError(f"'{binding_id}' is a mandatory field")
        if not isinstance(patch, dict) or not patch:
            raise ValidationError("Patch must be a non-empty object")

        unknown = set(patch) - _PATCHABLE_KEYS
        if unknown:
            raise ValidationError(f"Unsupported binding fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        for key in _OVERRIDE_KEYS:
            if key in patch:
                value = patch[key]
                if value is not None and not isinstance(value, str):
                    raise ValidationError(f"{key} must be a string or null")
                changes[key] = value.strip() if value and value.strip() else None
        if "is_required" in patch:
            if not isinstance(patch["is_required"], bool):
                raise ValidationError("is_required must be a boolean")
            changes["is_required"] = patch["is_required"]
        if "field_group" in patch:
            try:
                changes["field_group"] = FieldGroup(patch["field_group"])
            except ValueError:
                raise ValidationError(f"Unknown field group {patch['field_group']!r}") from None

        current = await self._store.get_binding(binding_id)
        if current is None:
            raise NotFoundError(f"Binding '{binding_id}' not found")

        updated = await self._store.update_binding(replace(current, **changes))
        self._logger.info(
            "Binding updated",
            extra={"service_type_id": current.service_type_id, "attribute_id": current.attribute_id},
        )
        return updated

    async def reorder(self, service_type_id: str, attribute_id: str, direction: str) -> bool:
        """
        Swap the binding with its neighbour among the bindings the form shows.
        Returns False at either boundary. Every binding of the service type is
        rewritten 0..n-1 in a single store call.
        """
        if is_mandatory(attribute_id):
            raise ForbiddenError(f"'{attribute_id}' is a mandatory field and cannot be reordered")
        if direction not in ("up", "down"):
            raise ValidationError(f"Direction must be 'up' or 'down', got {direction!r}")
        await self._require_service_type(service_type_id)

        async with self._get_lock(service_type_id):
            definitions = {d.id: d for d in await self._store.list_definitions()}
            ordered = normalize_order(await self._store.list_bindings(service_type_id))
            index = next((i for i, b in enumerate(ordered) if b.attribute_id == attribute_id), None)
            if index is None:
                raise NotFoundError(f"Attribute '{attribute_id}' is not bound to '{service_type_id}'")

            # Neighbours are taken from the visible sequence; hidden bindings keep their slots.
            visible = [
                i
                for i, b in enumerate(ordered)
                if i == index or (b.attribute_id in definitions and definitions[b.attribute_id].is_active)
            ]
            position = visible.index(index)
            neighbour = position - 1 if direction == "up" else position + 1
            if neighbour < 0 or neighbour >= len(visible):
                return False

            swap = visible[neighbour]
            ordered[index], ordered[swap] = ordered[swap], ordered[index]
            renumbered = [replace(b, display_order=i) for i, b in enumerate(ordered)]
            await self._store.update_display_orders(renumbered)

        self._logger.info(
            "Binding moved",
            extra={"service_type_id": service_type_id, "attribute_id": attribute_id, "direction": direction},
        )
        return True

    async def remove_bindings(self, service_type_id: str, attribute_ids: list[str]) -> int:
        forbidden = [a for a in attribute_ids if is_mandatory(a)]
        if forbidden:
            raise ForbiddenError(f"Mandatory fields cannot be removed: {', '.join(forbidden)}")
        await self._require_service_type(service_type_id)
        if not attribute_ids:
            return 0

        async with self._get_lock(service_type_id):
            removed = await self._store.delete_bindings(service_type_id, list(attribute_ids))

        self._logger.info(
            "Bindings removed",
            extra={"service_type_id": service_type_id, "count": removed},
        )
        return removed

    async def _require_service_type(self, service_type_id: str, active: bool = False) -> ServiceType:
        service_type = await self._store.get_service_type(service_type_id)
        if service_type is None or (active and not service_type.is_active):
            raise NotFoundError(f"Service type '{service_type_id}' not found")
        return service_type
