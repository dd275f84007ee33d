from __future__ import annotations

import re
from typing import Any

from marketplace.domain.entities.form_field import FieldError, PreviewField, ResolvedField
from marketplace.domain.entities.input_spec import (
    BooleanInput,
    InputSpec,
    NumberInput,
    SelectInput,
    SelectOption,
    TextareaInput,
    TextInput,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def generate_preview(fields: list[ResolvedField]) -> list[PreviewField]:
    """Map resolved fields to preview descriptors. Pure; hidden fields are dropped."""
    preview: list[PreviewField] = []
    for f in fields:
        if not f.visible:
            continue
        options: tuple[SelectOption, ...] = ()
        multiple = False
        if isinstance(f.input, SelectInput):
            options = f.input.options or (SelectOption(value="", label=f.placeholder or f"Select {f.label}"),)
            multiple = f.input.multiple
        preview.append(
            PreviewField(
                name=f.name,
                label=f.label,
                type=render_type(f.input),
                required=f.required,
                placeholder=f.placeholder,
                help_text=f.help_text,
                locked=f.locked,
                options=options,
                multiple=multiple,
            )
        )
    return preview


def render_type(spec: InputSpec) -> str:
    if isinstance(spec, TextareaInput):
        return "textarea"
    if isinstance(spec, SelectInput):
        return "select"
    if isinstance(spec, BooleanInput):
        return "checkbox"
    if isinstance(spec, NumberInput):
        return "number"
    if isinstance(spec, TextInput):
        return spec.format
    raise TypeError(f"Unhandled input spec: {spec!r}")


def validate_values(fields: list[ResolvedField], values: dict[str, Any]) -> list[FieldError]:
    """Check submitted values against the resolved form. Hidden fields are not validated."""
    errors: list[FieldError] = []
    for f in fields:
        if not f.visible:
            continue
        value = values.get(f.name)
        if _is_empty(value):
            if f.required:
                errors.append(FieldError(field=f.name, message=f"{f.label} is required", type="required"))
            continue
        message = _check_value(f, value)
        if message:
            errors.append(FieldError(field=f.name, message=message, type="validation"))
    return errors


def _check_value(f: ResolvedField, value: Any) -> str | None:
    spec = f.input
    if isinstance(spec, NumberInput):
        if isinstance(value, bool):
            return f"{f.label} must be a number"
        try:
            number = float(value)
        except (TypeError, ValueError):
            return f"{f.label} must be a number"
        if spec.minimum is not None and number < spec.minimum:
            return f"{f.label} must be at least {_fmt(spec.minimum)}"
        if spec.maximum is not None and number > spec.maximum:
            return f"{f.label} must not exceed {_fmt(spec.maximum)}"
        return None
    if isinstance(spec, BooleanInput):
        if isinstance(value, bool) or str(value).strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
            return None
        return f"{f.label} must be true or false"
    if isinstance(spec, SelectInput):
        if not spec.options:
            return None
        allowed = {o.value for o in spec.options}
        chosen = value if isinstance(value, (list, tuple)) else [value]
        if not spec.multiple and len(chosen) > 1:
            return f"{f.label} accepts a single choice"
        if any(str(v) not in allowed for v in chosen):
            return f"{f.label} has an invalid choice"
        return None
    if isinstance(spec, TextInput) and spec.format == "email":
        if not EMAIL_PATTERN.match(str(value)):
            return f"{f.label} must be a valid email"
        return None
    if isinstance(spec, (TextInput, TextareaInput)):
        return None
    raise TypeError(f"Unhandled input spec: {spec!r}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple)) and not value:
        return True
    return False


def _fmt(number: float) -> str:
    return str(int(number)) if number == int(number) else str(number)
