from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldGroup(str, Enum):
    general = "general"
    custom = "custom"
    specifications = "specifications"
    pricing = "pricing"
    features = "features"


@dataclass(frozen=True)
class ServiceType:
    id: str
    title: str
    is_active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class AttributeDefinition:
    id: str
    name: str  # machine key, unique across the registry
    label: str | None = None
    data_type: str = "text"
    input_type: str = "text"
    placeholder: str | None = None
    help_text: str | None = None
    group_name: str | None = None
    default_value: str | None = None
    options: Any = None  # raw payload, normalised by parse_input_spec
    validation_rules: dict[str, Any] = field(default_factory=dict)
    applicable_entity_types: frozenset[str] = frozenset()
    is_active: bool = True


@dataclass(frozen=True)
class AttributeBinding:
    id: str
    service_type_id: str
    attribute_id: str
    display_order: int
    is_required: bool = False
    is_visible: bool = True
    field_group: FieldGroup = FieldGroup.custom
    override_label: str | None = None
    override_placeholder: str | None = None
    override_help_text: str | None = None
