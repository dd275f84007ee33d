from pydantic import BaseModel, Field, model_validator
from typing import Any, Literal

from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, FieldGroup
from marketplace.domain.entities.catalog import CatalogEntry
from marketplace.domain.entities.form_field import FieldError, PreviewField, ResolvedField
from marketplace.domain.entities.input_spec import (
    BooleanInput,
    InputSpec,
    NumberInput,
    SelectInput,
    TextareaInput,
    TextInput,
)
from marketplace.domain.entities.location_session import LocationResolution
from marketplace.domain.entities.service_area import ServiceArea


class OptionSchema(BaseModel):
    value: str
    label: str


class InputSpecSchema(BaseModel):
    kind: Literal["text", "number", "select", "textarea", "boolean"]
    format: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    options: list[OptionSchema] = Field(default_factory=list)
    multiple: bool = False

    @classmethod
    def from_spec(cls, spec: InputSpec) -> "InputSpecSchema":
        if isinstance(spec, TextInput):
            return cls(kind="text", format=spec.format)
        if isinstance(spec, NumberInput):
            return cls(kind="number", minimum=spec.minimum, maximum=spec.maximum)
        if isinstance(spec, SelectInput):
            return cls(
                kind="select",
                options=[OptionSchema(value=o.value, label=o.label) for o in spec.options],
                multiple=spec.multiple,
            )
        if isinstance(spec, TextareaInput):
            return cls(kind="textarea")
        if isinstance(spec, BooleanInput):
            return cls(kind="boolean")
        raise TypeError(f"Unhandled input spec: {spec!r}")


class ResolvedFieldSchema(BaseModel):
    name: str
    label: str
    placeholder: str
    help_text: str
    input: InputSpecSchema
    required: bool
    visible: bool
    locked: bool
    display_order: int | None = None
    field_group: FieldGroup
    attribute_id: str | None = None
    binding_id: str | None = None
    default_value: str | None = None

    @classmethod
    def from_field(cls, f: ResolvedField) -> "ResolvedFieldSchema":
        return cls(
            name=f.name,
            label=f.label,
            placeholder=f.placeholder,
            help_text=f.help_text,
            input=InputSpecSchema.from_spec(f.input),
            required=f.required,
            visible=f.visible,
            locked=f.locked,
            display_order=f.display_order,
            field_group=f.field_group,
            attribute_id=f.attribute_id,
            binding_id=f.binding_id,
            default_value=f.default_value,
        )


class PreviewFieldSchema(BaseModel):
    name: str
    label: str
    type: str
    required: bool
    placeholder: str
    help_text: str
    locked: bool
    options: list[OptionSchema] = Field(default_factory=list)
    multiple: bool = False

    @classmethod
    def from_preview(cls, p: PreviewField) -> "PreviewFieldSchema":
        return cls(
            name=p.name,
            label=p.label,
            type=p.type,
            required=p.required,
            placeholder=p.placeholder,
            help_text=p.help_text,
            locked=p.locked,
            options=[OptionSchema(value=o.value, label=o.label) for o in p.options],
            multiple=p.multiple,
        )


class FormValuesSchema(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class FieldErrorSchema(BaseModel):
    field: str
    message: str
    type: str

    @classmethod
    def from_error(cls, e: FieldError) -> "FieldErrorSchema":
        return cls(field=e.field, message=e.message, type=e.type)


class FormValidationSchema(BaseModel):
    valid: bool
    errors: list[FieldErrorSchema] = Field(default_factory=list)


class AddBindingsSchema(BaseModel):
    attribute_ids: list[str] = Field(default_factory=list)


class BindingPatchSchema(BaseModel):
    override_label: str | None = None
    override_placeholder: str | None = None
    override_help_text: str | None = None
    is_required: bool | None = None
    field_group: FieldGroup | None = None


class BindingSchema(BaseModel):
    id: str
    service_type_id: str
    attribute_id: str
    display_order: int
    is_required: bool
    is_visible: bool
    field_group: FieldGroup
    override_label: str | None = None
    override_placeholder: str | None = None
    override_help_text: str | None = None

    @classmethod
    def from_binding(cls, b: AttributeBinding) -> "BindingSchema":
        return cls(
            id=b.id,
            service_type_id=b.service_type_id,
            attribute_id=b.attribute_id,
            display_order=b.display_order,
            is_required=b.is_required,
            is_visible=b.is_visible,
            field_group=b.field_group,
            override_label=b.override_label,
            override_placeholder=b.override_placeholder,
            override_help_text=b.override_help_text,
        )


class MoveBindingSchema(BaseModel):
    direction: Literal["up", "down"]


class MoveResultSchema(BaseModel):
    moved: bool


class RemoveResultSchema(BaseModel):
    removed: int


class DefinitionCreateSchema(BaseModel):
    name: str
    label: str | None = None
    data_type: str = "text"
    input_type: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    group_name: str | None = None
    default_value: str | None = None
    options: Any = None
    validation_rules: dict[str, Any] = Field(default_factory=dict)
    applicable_entity_types: list[str] = Field(default_factory=list)
    is_active: bool = True


class DefinitionPatchSchema(BaseModel):
    name: str | None = None
    label: str | None = None
    data_type: str | None = None
    input_type: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    group_name: str | None = None
    default_value: str | None = None
    options: Any = None
    validation_rules: dict[str, Any] | None = None
    applicable_entity_types: list[str] | None = None
    is_active: bool | None = None


class DefinitionSchema(BaseModel):
    id: str
    name: str
    label: str | None = None
    data_type: str
    input_type: str
    placeholder: str | None = None
    help_text: str | None = None
    group_name: str | None = None
    default_value: str | None = None
    options: Any = None
    validation_rules: dict[str, Any] = Field(default_factory=dict)
    applicable_entity_types: list[str] = Field(default_factory=list)
    is_active: bool

    @classmethod
    def from_definition(cls, d: AttributeDefinition) -> "DefinitionSchema":
        return cls(
            id=d.id,
            name=d.name,
            label=d.label,
            data_type=d.data_type,
            input_type=d.input_type,
            placeholder=d.placeholder,
            help_text=d.help_text,
            group_name=d.group_name,
            default_value=d.default_value,
            options=d.options,
            validation_rules=dict(d.validation_rules),
            applicable_entity_types=sorted(d.applicable_entity_types),
            is_active=d.is_active,
        )


class SyncResultSchema(BaseModel):
    service_type_id: str
    created: int
    updated: int


class LocationQuerySchema(BaseModel):
    pincode: str | None = None
    city: str | None = None
    lat: float | None = None
    lng: float | None = None

    @model_validator(mode="after")
    def _coordinates_pair(self) -> "LocationQuerySchema":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be given together")
        return self


class ServiceAreaSchema(BaseModel):
    id: str
    pincode: str
    city: str
    state: str
    country: str
    is_serviceable: bool
    delivery_time_hours: int | None = None
    delivery_charge: float | None = None

    @classmethod
    def from_area(cls, a: ServiceArea) -> "ServiceAreaSchema":
        return cls(
            id=a.id,
            pincode=a.pincode,
            city=a.city,
            state=a.state,
            country=a.country,
            is_serviceable=a.is_serviceable,
            delivery_time_hours=a.delivery_time_hours,
            delivery_charge=a.delivery_charge,
        )


class LocationResolutionSchema(BaseModel):
    status: str
    is_serviceable: bool
    service_area: ServiceAreaSchema | None = None
    available_service_types: list[str] = Field(default_factory=list)

    @classmethod
    def from_resolution(cls, r: LocationResolution) -> "LocationResolutionSchema":
        return cls(
            status=r.status.value,
            is_serviceable=r.is_serviceable,
            service_area=ServiceAreaSchema.from_area(r.service_area) if r.service_area else None,
            available_service_types=list(r.available_service_types),
        )


class CatalogEntrySchema(BaseModel):
    offering_id: str
    name: str
    category_name: str | None = None
    location_price: float | None = None
    location_stock: int | None = None
    is_available: bool
    custom_fields: dict[str, str] = Field(default_factory=dict)
    image_url: str | None = None
    price_source: str
    display: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_entry(cls, e: CatalogEntry) -> "CatalogEntrySchema":
        return cls(
            offering_id=e.offering_id,
            name=e.name,
            category_name=e.category_name,
            location_price=e.location_price,
            location_stock=e.location_stock,
            is_available=e.is_available,
            custom_fields=dict(e.custom_fields),
            image_url=e.image_url,
            price_source=e.price_source,
            display=dict(e.display),
        )
