from __future__ import annotations

from typing import Any, Mapping

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_fields(config: Mapping[str, Any], *field_names: str) -> None:
    for name in field_names:
        require_non_empty(config.get(name), name)
