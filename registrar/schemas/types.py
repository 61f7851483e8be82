"""Shared field helpers for request schemas."""

from typing import Any, Optional


def blank_to_none(value: Any) -> Optional[Any]:
    """Forms send "" for an unselected option; treat it as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def strip_required(value: Any, field_name: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    return text


def strip_optional(value: Any) -> str:
    return "" if value is None else str(value).strip()
