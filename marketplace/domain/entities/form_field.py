from __future__ import annotations

from dataclasses import dataclass

from marketplace.domain.entities.attribute import FieldGroup
from marketplace.domain.entities.input_spec import InputSpec, SelectOption


@dataclass(frozen=True)
class ResolvedField:
    name: str
    label: str
    placeholder: str
    help_text: str
    input: InputSpec
    required: bool
    visible: bool = True
    locked: bool = False
    display_order: int | None = None  # None for mandatory fields
    field_group: FieldGroup = FieldGroup.general
    attribute_id: str | None = None
    binding_id: str | None = None
    default_value: str | None = None


@dataclass(frozen=True)
class PreviewField:
    name: str
    label: str
    type: str
    required: bool
    placeholder: str
    help_text: str
    locked: bool
    options: tuple[SelectOption, ...] = ()
    multiple: bool = False


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    type: str  # "required" | "validation"
