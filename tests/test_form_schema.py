"""
Tests for the form preview and submitted-value validation.
"""

from __future__ import annotations

import asyncio

from marketplace.application.use_cases.binding_resolver import AttributeBindingResolver
from marketplace.application.use_cases.form_schema import generate_preview, render_type, validate_values
from marketplace.domain.entities.attribute import FieldGroup
from marketplace.domain.entities.form_field import ResolvedField
from marketplace.domain.entities.input_spec import (
    NumberInput,
    SelectInput,
    SelectOption,
    TextInput,
    parse_input_spec,
)
from marketplace.infrastructure.store.seed_data import build_memory_stores


def _fields(service_type_id: str) -> list[ResolvedField]:
    attributes, _, _ = build_memory_stores()
    return asyncio.run(AttributeBindingResolver(store=attributes).resolve_bindings(service_type_id))


def _field(name: str, spec, required: bool = False, visible: bool = True) -> ResolvedField:
    return ResolvedField(
        name=name,
        label=name.title(),
        placeholder="",
        help_text="",
        input=spec,
        required=required,
        visible=visible,
        field_group=FieldGroup.custom,
    )


def test_preview_is_idempotent():
    """Previewing the same resolved form twice gives equal results."""
    fields = _fields("fashion")

    assert generate_preview(fields) == generate_preview(fields)
    assert generate_preview(_fields("fashion")) == generate_preview(fields)


def test_preview_render_types():
    preview = {p.name: p for p in generate_preview(_fields("fashion"))}

    assert preview["product_name"].type == "text"
    assert preview["product_description"].type == "textarea"
    assert preview["price"].type == "number"
    assert preview["material"].type == "select"
    assert [o.value for o in preview["material"].options] == ["Cotton", "Linen", "Silk", "Polyester"]
    assert preview["care_instructions"].type == "textarea"
    assert preview["care_instructions"].help_text == "Washing and storage guidance"
    assert preview["product_name"].locked is True


def test_select_without_options_degrades_to_placeholder():
    """The vendor select has no static options, so it shows one placeholder entry."""
    preview = {p.name: p for p in generate_preview(_fields("grocery"))}

    assert preview["vendor"].options == (SelectOption(value="", label="Select vendor"),)


def test_hidden_fields_are_left_out_of_preview():
    fields = [_field("shown", TextInput()), _field("hidden", TextInput(), visible=False)]

    assert [p.name for p in generate_preview(fields)] == ["shown"]


def test_render_type_keeps_text_format():
    assert render_type(parse_input_spec("email")) == "email"
    assert render_type(parse_input_spec("date")) == "date"
    assert render_type(parse_input_spec("toggle")) == "checkbox"
    assert render_type(parse_input_spec(None, data_type="currency")) == "number"


def test_parse_options_shapes():
    assert [o.value for o in parse_input_spec("select", options="S, M ,L,,M").options] == ["S", "M", "L"]
    wrapped = parse_input_spec("dropdown", options={"choices": [{"value": "x", "label": "Ex"}]})
    assert wrapped.options == (SelectOption(value="x", label="Ex"),)
    mapping = parse_input_spec("radio", options={"veg": "Vegetarian", "non_veg": "Non-vegetarian"})
    assert mapping.options[0] == SelectOption(value="veg", label="Vegetarian")
    assert parse_input_spec("multiselect", options=["a"]).multiple is True


def test_required_fields_are_reported():
    errors = validate_values(_fields("grocery"), {"product_name": "Rice", "price": "  "})
    by_field = {e.field: e for e in errors}

    assert set(by_field) == {"product_description", "price", "vendor", "net_quantity"}
    assert all(e.type == "required" for e in errors)
    assert by_field["net_quantity"].message == "Net Weight (g) is required"


def test_number_bounds_and_types():
    fields = [_field("qty", NumberInput(minimum=1, maximum=10))]

    assert validate_values(fields, {"qty": "5"}) == []
    assert validate_values(fields, {"qty": 0})[0].message == "Qty must be at least 1"
    assert validate_values(fields, {"qty": 10.5})[0].message == "Qty must not exceed 10"
    assert validate_values(fields, {"qty": "lots"})[0].message == "Qty must be a number"
    assert validate_values(fields, {"qty": True})[0].type == "validation"


def test_select_membership():
    options = (SelectOption("s", "Small"), SelectOption("m", "Medium"))
    single = [_field("size", SelectInput(options=options))]
    multi = [_field("size", SelectInput(options=options, multiple=True))]

    assert validate_values(single, {"size": "m"}) == []
    assert validate_values(single, {"size": "xl"})[0].message == "Size has an invalid choice"
    assert validate_values(single, {"size": ["s", "m"]})[0].message == "Size accepts a single choice"
    assert validate_values(multi, {"size": ["s", "m"]}) == []


def test_boolean_and_email_values():
    fields = [
        _field("organic", parse_input_spec("checkbox")),
        _field("contact", parse_input_spec("email")),
    ]

    assert validate_values(fields, {"organic": "yes", "contact": "shop@example.com"}) == []
    errors = validate_values(fields, {"organic": "maybe", "contact": "not-an-email"})
    assert [e.field for e in errors] == ["organic", "contact"]


def test_hidden_fields_are_not_validated():
    fields = [_field("secret", TextInput(), required=True, visible=False)]

    assert validate_values(fields, {}) == []


if __name__ == "__main__":
    test_preview_is_idempotent()
    test_preview_render_types()
    test_select_without_options_degrades_to_placeholder()
    test_hidden_fields_are_left_out_of_preview()
    test_render_type_keeps_text_format()
    test_parse_options_shapes()
    test_required_fields_are_reported()
    test_number_bounds_and_types()
    test_select_membership()
    test_boolean_and_email_values()
    test_hidden_fields_are_not_validated()
    print("All tests passed!")
