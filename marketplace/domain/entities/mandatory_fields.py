from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MandatoryField:
    name: str
    label: str
    input_type: str
    placeholder: str
    help_text: str


# Always present, always required, always first. Not stored as bindings.
MANDATORY_FIELDS: tuple[MandatoryField, ...] = (
    MandatoryField(
        name="product_name",
        label="Product Name",
        input_type="text",
        placeholder="Enter product name",
        help_text="The name of your product",
    ),
    MandatoryField(
        name="product_description",
        label="Description",
        input_type="textarea",
        placeholder="Describe the product...",
        help_text="Detailed description",
    ),
    MandatoryField(
        name="price",
        label="Price",
        input_type="number",
        placeholder="Enter price",
        help_text="Product price",
    ),
    MandatoryField(
        name="vendor",
        label="Vendor",
        input_type="select",
        placeholder="Select vendor",
        help_text="Choose a vendor",
    ),
)

MANDATORY_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in MANDATORY_FIELDS)


def is_mandatory(identifier: str | None) -> bool:
    return bool(identifier) and identifier.strip().lower() in MANDATORY_FIELD_NAMES
