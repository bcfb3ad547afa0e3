"""Custom field schema handling for ``Visitor.additional_data``.

The descriptor set in ``custom_field_config`` is the schema. It is applied
when data is written (required check + type coercion) and when it is shown
(ordering + display formatting). Keys without a descriptor are left alone.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from domain.errors import ValidationError
from domain.models.custom_field import CustomFieldConfig

FIELD_NAME_RE = re.compile(r"^[a-z0-9_]+$")
_NO_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def normalize_field_name(raw: str) -> str:
    name = re.sub(r"\s+", "_", (raw or "").strip().lower())
    if not name or not FIELD_NAME_RE.match(name):
        raise ValidationError("Solo letras minúsculas, números y guiones bajos")
    return name


def _created_key(created_at: Optional[datetime]) -> datetime:
    if created_at is None:
        return _NO_TIMESTAMP
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def sort_descriptors(descriptors: Sequence[CustomFieldConfig]) -> List[CustomFieldConfig]:
    # sorted() is stable, created_at keeps insertion order on ties
    return sorted(
        descriptors,
        key=lambda d: (d.display_order, _created_key(d.created_at)),
    )


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce(descriptor: CustomFieldConfig, value: Any) -> Any:
    label = descriptor.field_label
    field_type = descriptor.field_type

    if field_type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise ValidationError(f"{label}: debe ser Sí o No")

    if field_type == "number":
        if isinstance(value, bool):
            raise ValidationError(f"{label}: debe ser un número")
        if isinstance(value, (int, float)):
            number = value
        else:
            try:
                text = str(value).strip()
                number = int(text) if re.fullmatch(r"-?\d+", text) else float(text)
            except ValueError:
                raise ValidationError(f"{label}: debe ser un número") from None
        # JSON columns cannot hold NaN or infinities
        if isinstance(number, float) and not math.isfinite(number):
            raise ValidationError(f"{label}: debe ser un número")
        return number

    if field_type == "date":
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value).strip()).isoformat()
        except ValueError:
            raise ValidationError(f"{label}: fecha inválida (AAAA-MM-DD)") from None

    return str(value)


def validate_additional_data(
    data: Optional[Dict[str, Any]],
    descriptors: Sequence[CustomFieldConfig],
) -> Dict[str, Any]:
    """Return a cleaned copy of ``data`` or raise ValidationError."""
    cleaned: Dict[str, Any] = dict(data or {})

    for descriptor in sort_descriptors(descriptors):
        name = descriptor.field_name
        value = cleaned.get(name)

        if _is_empty(value):
            if descriptor.is_required:
                raise ValidationError(f"El campo '{descriptor.field_label}' es requerido")
            cleaned.pop(name, None)
            continue

        cleaned[name] = _coerce(descriptor, value)

    return cleaned


def render_additional_data(
    data: Optional[Dict[str, Any]],
    descriptors: Sequence[CustomFieldConfig],
) -> List[Dict[str, str]]:
    """Label/value pairs for display, in descriptor order; blank values are skipped"""
    data = data or {}
    rendered = []
    for descriptor in sort_descriptors(descriptors):
        value = data.get(descriptor.field_name)
        if not value:
            continue
        # false booleans are skipped like any other blank value
        shown = "Sí" if descriptor.field_type == "boolean" else str(value)
        rendered.append({
            "name": descriptor.field_name,
            "label": descriptor.field_label,
            "value": shown,
        })
    return rendered
