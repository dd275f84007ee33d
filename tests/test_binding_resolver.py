"""
Tests for attribute bindings: resolution, ordering, overrides and mandatory fields.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import replace

import pytest

from marketplace.application.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from marketplace.application.use_cases.binding_resolver import (
    AttributeBindingResolver,
    effective_help_text,
    effective_label,
    effective_placeholder,
)
from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, FieldGroup
from marketplace.domain.entities.input_spec import BooleanInput, NumberInput, SelectInput, TextareaInput
from marketplace.domain.entities.mandatory_fields import MANDATORY_FIELDS
from marketplace.infrastructure.store.seed_data import build_memory_stores

MANDATORY_NAMES = [f.name for f in MANDATORY_FIELDS]


def _resolver():
    attributes, _, _ = build_memory_stores()
    return AttributeBindingResolver(store=attributes), attributes


def test_mandatory_fields_come_first_and_are_locked():
    """Mandatory prefix is fixed, required and locked; custom fields follow in order."""
    resolver, _ = _resolver()
    fields = asyncio.run(resolver.resolve_bindings("grocery"))

    assert [f.name for f in fields[:4]] == MANDATORY_NAMES
    assert all(f.locked and f.required and f.display_order is None for f in fields[:4])
    assert [f.name for f in fields[4:]] == ["brand", "organic", "net_quantity"]
    assert [f.display_order for f in fields[4:]] == [0, 1, 2]
    assert not any(f.locked for f in fields[4:])


def test_resolved_fields_carry_typed_inputs():
    resolver, _ = _resolver()
    fields = {f.name: f for f in asyncio.run(resolver.resolve_bindings("grocery"))}

    assert isinstance(fields["organic"].input, BooleanInput)
    assert fields["organic"].field_group is FieldGroup.features
    assert isinstance(fields["net_quantity"].input, NumberInput)
    assert fields["net_quantity"].input.minimum == 0
    assert fields["net_quantity"].label == "Net Weight (g)"
    assert fields["net_quantity"].required is True
    assert isinstance(fields["product_description"].input, TextareaInput)
    assert isinstance(fields["vendor"].input, SelectInput)


def test_label_falls_back_to_definition_label():
    """A binding without an override label shows the definition's label."""
    resolver, _ = _resolver()
    fields = {f.name: f for f in asyncio.run(resolver.resolve_bindings("grocery"))}

    assert fields["brand"].label == "Brand"


def test_override_precedence_never_missing():
    """Label: override, then definition label, then name. Blank strings count as missing."""
    definition = AttributeDefinition(id="d1", name="colour")
    binding = AttributeBinding(id="b1", service_type_id="fashion", attribute_id="d1", display_order=0)

    assert effective_label(binding, definition) == "colour"
    assert effective_placeholder(binding, definition) == "Enter colour"
    assert effective_help_text(binding, definition) == ""

    labelled = AttributeDefinition(id="d1", name="colour", label="Colour", placeholder="  ")
    assert effective_label(binding, labelled) == "Colour"
    assert effective_placeholder(binding, labelled) == "Enter Colour"

    overridden = AttributeBinding(
        id="b1",
        service_type_id="fashion",
        attribute_id="d1",
        display_order=0,
        override_label="Shade",
        override_help_text="Primary colour",
    )
    assert effective_label(overridden, labelled) == "Shade"
    assert effective_help_text(overridden, labelled) == "Primary colour"


def test_move_down_swaps_with_next():
    """Moving urgency down puts the service address before it."""
    resolver, _ = _resolver()
    moved = asyncio.run(resolver.reorder("handyman", "attr-urgency", "down"))
    fields = asyncio.run(resolver.resolve_bindings("handyman"))

    assert moved is True
    assert [f.name for f in fields] == MANDATORY_NAMES + ["service_address", "urgency"]
    assert [f.display_order for f in fields[4:]] == [0, 1]


def test_move_at_boundary_is_a_no_op():
    resolver, _ = _resolver()

    assert asyncio.run(resolver.reorder("handyman", "attr-urgency", "up")) is False
    assert asyncio.run(resolver.reorder("handyman", "attr-addr", "down")) is False
    names = [f.name for f in asyncio.run(resolver.resolve_bindings("handyman"))]
    assert names[4:] == ["urgency", "service_address"]


def test_move_skips_bindings_to_inactive_definitions():
    """An inactive binding between two visible ones is not a swap target and keeps its slot."""
    resolver, store = _resolver()
    organic = asyncio.run(store.get_definition("attr-organic"))
    asyncio.run(store.update_definition(replace(organic, is_active=False)))

    moved = asyncio.run(resolver.reorder("grocery", "attr-brand", "down"))
    fields = asyncio.run(resolver.resolve_bindings("grocery"))
    stored = sorted(asyncio.run(store.list_bindings("grocery")), key=lambda b: b.display_order)

    assert moved is True
    assert [f.name for f in fields[4:]] == ["net_quantity", "brand"]
    assert [b.attribute_id for b in stored] == ["attr-net-quantity", "attr-organic", "attr-brand"]
    assert asyncio.run(resolver.reorder("grocery", "attr-brand", "down")) is False


def test_orders_stay_contiguous_after_random_moves():
    """Any sequence of moves leaves display orders as 0..n-1."""
    resolver, store = _resolver()
    asyncio.run(resolver.add_bindings("grocery", ["attr-material", "attr-care"]))
    attribute_ids = ["attr-brand", "attr-organic", "attr-net-quantity", "attr-material", "attr-care"]
    rng = random.Random(7)

    async def shuffle() -> None:
        await asyncio.gather(
            *(
                resolver.reorder("grocery", rng.choice(attribute_ids), rng.choice(["up", "down"]))
                for _ in range(40)
            )
        )

    asyncio.run(shuffle())
    fields = asyncio.run(resolver.resolve_bindings("grocery"))
    stored = asyncio.run(store.list_bindings("grocery"))

    assert [f.name for f in fields[:4]] == MANDATORY_NAMES
    assert sorted(f.display_order for f in fields[4:]) == [0, 1, 2, 3, 4]
    assert sorted(b.display_order for b in stored) == [0, 1, 2, 3, 4]


def test_stored_gaps_are_renumbered_on_read():
    resolver, store = _resolver()
    asyncio.run(
        store.update_display_orders(
            [
                AttributeBinding(id="bind-grocery-brand", service_type_id="grocery", attribute_id="attr-brand", display_order=10),
                AttributeBinding(id="bind-grocery-organic", service_type_id="grocery", attribute_id="attr-organic", display_order=3),
                AttributeBinding(id="bind-grocery-qty", service_type_id="grocery", attribute_id="attr-net-quantity", display_order=3),
            ]
        )
    )
    fields = asyncio.run(resolver.resolve_bindings("grocery"))

    assert [f.display_order for f in fields[4:]] == [0, 1, 2]
    assert fields[-1].name == "brand"


def test_mandatory_fields_cannot_be_moved_or_removed():
    resolver, _ = _resolver()
    for name in MANDATORY_NAMES:
        with pytest.raises(ForbiddenError):
            asyncio.run(resolver.reorder("grocery", name, "down"))
        with pytest.raises(ForbiddenError):
            asyncio.run(resolver.remove_bindings("grocery", [name]))

    fields = asyncio.run(resolver.resolve_bindings("grocery"))
    assert [f.name for f in fields[:4]] == MANDATORY_NAMES


def test_duplicate_add_is_rejected_without_partial_insert():
    """A batch repeating an already-configured attribute fails and writes nothing."""
    resolver, store = _resolver()
    before = asyncio.run(store.list_bindings("grocery"))

    with pytest.raises(ConflictError):
        asyncio.run(resolver.add_bindings("grocery", ["attr-material", "attr-brand", "attr-brand"]))

    assert asyncio.run(store.list_bindings("grocery")) == before


def test_repeated_id_in_one_call_is_rejected():
    resolver, store = _resolver()

    with pytest.raises(ConflictError):
        asyncio.run(resolver.add_bindings("grocery", ["attr-material", "attr-material"]))
    assert len(asyncio.run(store.list_bindings("grocery"))) == 3


def test_added_bindings_append_after_last():
    resolver, _ = _resolver()
    created = asyncio.run(resolver.add_bindings("grocery", ["attr-material", "attr-care"]))

    assert [b.display_order for b in created] == [3, 4]
    fields = asyncio.run(resolver.resolve_bindings("grocery"))
    assert [f.name for f in fields[-2:]] == ["material", "care_instructions"]


def test_add_rejects_unknown_and_inactive_definitions():
    resolver, store = _resolver()
    asyncio.run(store.insert_definition(AttributeDefinition(id="attr-old", name="old_code", is_active=False)))

    with pytest.raises(NotFoundError):
        asyncio.run(resolver.add_bindings("grocery", ["attr-missing"]))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.add_bindings("grocery", ["attr-old"]))
    with pytest.raises(ForbiddenError):
        asyncio.run(resolver.add_bindings("grocery", ["price"]))


def test_inactive_definitions_are_skipped():
    resolver, store = _resolver()
    brand = asyncio.run(store.get_definition("attr-brand"))
    asyncio.run(store.update_definition(replace(brand, is_active=False)))
    fields = asyncio.run(resolver.resolve_bindings("grocery"))

    assert "brand" not in [f.name for f in fields]
    assert [f.display_order for f in fields[4:]] == [0, 1]


def test_unknown_or_inactive_service_type_is_not_found():
    resolver, _ = _resolver()

    with pytest.raises(NotFoundError):
        asyncio.run(resolver.resolve_bindings("spaceships"))
    with pytest.raises(NotFoundError):
        asyncio.run(resolver.resolve_bindings("liquor"))


def test_deleted_service_type_cascades_bindings():
    resolver, store = _resolver()
    store.delete_service_type("fashion")

    assert asyncio.run(store.list_bindings("fashion")) == []
    assert asyncio.run(store.get_definition("attr-material")) is not None
    with pytest.raises(NotFoundError):
        asyncio.run(resolver.resolve_bindings("fashion"))


def test_update_binding_applies_overrides_only():
    resolver, store = _resolver()
    updated = asyncio.run(
        resolver.update_binding(
            "bind-grocery-brand",
            {"override_label": "Maker", "override_placeholder": "   ", "is_required": True, "field_group": "specifications"},
        )
    )

    assert updated.override_label == "Maker"
    assert updated.override_placeholder is None
    assert updated.is_required is True
    assert updated.field_group is FieldGroup.specifications
    assert updated.display_order == 0


def test_update_binding_rejects_bad_patches():
    resolver, _ = _resolver()

    with pytest.raises(ValidationError):
        asyncio.run(resolver.update_binding("bind-grocery-brand", {"display_order": 5}))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.update_binding("bind-grocery-brand", {"is_visible": False}))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.update_binding("bind-grocery-brand", {"is_required": "yes"}))
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(resolver.update_binding("bind-grocery-brand", {"field_group": "misc"}))
    assert excinfo.value.__suppress_context__ is True
    with pytest.raises(NotFoundError):
        asyncio.run(resolver.update_binding("bind-missing", {"override_label": "X"}))
    with pytest.raises(ForbiddenError):
        asyncio.run(resolver.update_binding("vendor", {"override_label": "Seller"}))


def test_remove_bindings_reports_count():
    resolver, store = _resolver()
    removed = asyncio.run(resolver.remove_bindings("grocery", ["attr-brand", "attr-material"]))

    assert removed == 1
    assert [b.attribute_id for b in asyncio.run(store.list_bindings("grocery"))] == ["attr-organic", "attr-net-quantity"]


def test_move_unbound_attribute_is_not_found():
    resolver, _ = _resolver()

    with pytest.raises(NotFoundError):
        asyncio.run(resolver.reorder("handyman", "attr-brand", "up"))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.reorder("handyman", "attr-urgency", "sideways"))


if __name__ == "__main__":
    test_mandatory_fields_come_first_and_are_locked()
    test_resolved_fields_carry_typed_inputs()
    test_label_falls_back_to_definition_label()
    test_override_precedence_never_missing()
    test_move_down_swaps_with_next()
    test_move_at_boundary_is_a_no_op()
    test_move_skips_bindings_to_inactive_definitions()
    test_orders_stay_contiguous_after_random_moves()
    test_stored_gaps_are_renumbered_on_read()
    test_mandatory_fields_cannot_be_moved_or_removed()
    test_duplicate_add_is_rejected_without_partial_insert()
    test_repeated_id_in_one_call_is_rejected()
    test_added_bindings_append_after_last()
    test_add_rejects_unknown_and_inactive_definitions()
    test_inactive_definitions_are_skipped()
    test_unknown_or_inactive_service_type_is_not_found()
    test_deleted_service_type_cascades_bindings()
    test_update_binding_applies_overrides_only()
    test_update_binding_rejects_bad_patches()
    test_remove_bindings_reports_count()
    test_move_unbound_attribute_is_not_found()
    print("All tests passed!")
