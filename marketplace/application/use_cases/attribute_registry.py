from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping

from marketplace.application.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from marketplace.application.ports.attribute_store import AttributeStorePort
from marketplace.domain.attribute_presets import ATTRIBUTE_PRESETS, AttributePreset
from marketplace.domain.entities.attribute import AttributeDefinition
from marketplace.domain.entities.mandatory_fields import is_mandatory

NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

KNOWN_INPUT_TYPES = frozenset(
    {
        "text", "textarea", "email", "url", "tel", "date", "time", "datetime", "color",
        "number", "integer", "decimal", "float", "currency",
        "select", "dropdown", "radio", "multiselect", "multi_select",
        "boolean", "bool", "checkbox", "switch", "toggle",
    }
)

_UPDATABLE_KEYS = frozenset(
    {
        "name", "label", "data_type", "input_type", "placeholder", "help_text", "group_name",
        "default_value", "options", "validation_rules", "applicable_entity_types", "is_active",
    }
)


@dataclass(frozen=True)
class SyncResult:
    service_type_id: str
    created: int
    updated: int


class AttributeRegistry:
    """Catalog of attribute definitions, independent of any service type."""

    def __init__(
        self,
        store: AttributeStorePort,
        presets: Mapping[str, tuple[AttributePreset, ...]] | None = None,
    ) -> None:
        self._store = store
        self._presets = presets if presets is not None else ATTRIBUTE_PRESETS
        self._logger = logging.getLogger(__name__)

    async def snapshot(self) -> Mapping[str, AttributeDefinition]:
        """Read-only view of the registry keyed by definition id, fresh on every call."""
        definitions = await self._store.list_definitions()
        return MappingProxyType({d.id: d for d in definitions})

    async def list_definitions(
        self,
        entity_type: str | None = None,
        active_only: bool = True,
    ) -> list[AttributeDefinition]:
        definitions = await self._store.list_definitions()
        result = [
            d
            for d in definitions
            if (not active_only or d.is_active)
            and (entity_type is None or entity_type in d.applicable_entity_types)
        ]
        return sorted(result, key=lambda d: d.name)

    async def create_definition(
        self,
        name: str,
        label: str | None = None,
        data_type: str = "text",
        input_type: str | None = None,
        placeholder: str | None = None,
        help_text: str | None = None,
        group_name: str | None = None,
        default_value: str | None = None,
        options: Any = None,
        validation_rules: dict[str, Any] | None = None,
        applicable_entity_types: list[str] | None = None,
        is_active: bool = True,
    ) -> AttributeDefinition:
        name = _validate_name(name)
        if is_mandatory(name):
            raise ForbiddenError(f"'{name}' is reserved for a mandatory field")

        existing = await self._store.list_definitions()
        if any(d.name == name for d in existing):
            raise ConflictError(f"Attribute '{name}' already exists")

        definition = AttributeDefinition(
            id=str(uuid.uuid4()),
            name=name,
            label=label,
            data_type=_validate_type(data_type),
            input_type=_validate_type(input_type or data_type),
            placeholder=placeholder,
            help_text=help_text,
            group_name=group_name,
            default_value=default_value,
            options=options,
            validation_rules=dict(validation_rules or {}),
            applicable_entity_types=frozenset(applicable_entity_types or ()),
            is_active=is_active,
        )
        created = await self._store.insert_definition(definition)
        self._logger.info("Attribute definition created", extra={"attribute_id": created.id, "attribute_name": name})
        return created

    async def update_definition(self, definition_id: str, patch: dict[str, Any]) -> AttributeDefinition:
        current = await self._store.get_definition(definition_id)
        if current is None:
            raise NotFoundError(f"Attribute definition '{definition_id}' not found")

        unknown = set(patch) - _UPDATABLE_KEYS
        if unknown:
            raise ValidationError(f"Unsupported definition fields: {', '.join(sorted(unknown))}")

        changes = dict(patch)
        if "name" in changes:
            new_name = _validate_name(changes["name"])
            changes["name"] = new_name
            if new_name != current.name:
                # Name is immutable once bound: display logic keys off it.
                if await self._store.count_bindings_for_definition(definition_id) > 0:
                    raise ConflictError(
                        f"Attribute '{current.name}' is bound to a service type and cannot be renamed"
                    )
                if is_mandatory(new_name):
                    raise ForbiddenError(f"'{new_name}' is reserved for a mandatory field")
                existing = await self._store.list_definitions()
                if any(d.name == new_name and d.id != definition_id for d in existing):
                    raise ConflictError(f"Attribute '{new_name}' already exists")
        for key in ("data_type", "input_type"):
            if key in changes:
                changes[key] = _validate_type(changes[key])
        if "applicable_entity_types" in changes:
            changes["applicable_entity_types"] = frozenset(changes["applicable_entity_types"] or ())
        if "validation_rules" in changes:
            changes["validation_rules"] = dict(changes["validation_rules"] or {})

        updated = await self._store.update_definition(replace(current, **changes))
        self._logger.info("Attribute definition updated", extra={"attribute_id": definition_id})
        return updated

    async def sync_presets(self, service_type_id: str) -> SyncResult:
        """Create missing preset definitions and widen applicable types of existing ones."""
        service_type = await self._store.get_service_type(service_type_id)
        if service_type is None:
            raise NotFoundError(f"Service type '{service_type_id}' not found")

        presets = self._presets.get(service_type_id, ())
        if not presets:
            self._logger.info("No presets for service type", extra={"service_type_id": service_type_id})
            return SyncResult(service_type_id=service_type_id, created=0, updated=0)

        by_name = {d.name: d for d in await self._store.list_definitions()}
        created = updated = 0
        for preset in presets:
            existing = by_name.get(preset.name)
            if existing is None:
                await self._store.insert_definition(
                    AttributeDefinition(
                        id=str(uuid.uuid4()),
                        name=preset.name,
                        data_type=preset.data_type,
                        input_type=preset.data_type,
                        help_text=preset.description,
                        applicable_entity_types=frozenset(preset.applicable_types),
                    )
                )
                created += 1
                continue
            merged = existing.applicable_entity_types | frozenset(preset.applicable_types)
            if merged != existing.applicable_entity_types:
                await self._store.update_definition(replace(existing, applicable_entity_types=merged))
                updated += 1

        self._logger.info(
            "Synced attribute presets",
            extra={"service_type_id": service_type_id, "created_count": created, "updated_count": updated},
        )
        return SyncResult(service_type_id=service_type_id, created=created, updated=updated)


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not NAME_PATTERN.match(name.strip()):
        raise ValidationError(f"Invalid attribute name {name!r}: use lowercase letters, digits and underscores")
    return name.strip()


def _validate_type(value: Any) -> str:
    kind = str(value or "").strip().lower()
    if kind not in KNOWN_INPUT_TYPES:
        raise ValidationError(f"Unknown input type {value!r}")
    return kind
