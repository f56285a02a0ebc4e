"""Data models for ClickUp API responses.

ClickUp task payloads are loosely typed: nested objects for status and list,
timestamps as numeric strings, and custom field values that are sometimes
plain scalars and sometimes dropdown/label objects. The models here parse only
what the gateway reads and normalize the rest defensively.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


@dataclass(frozen=True, slots=True)
class PlainValue:
    """A scalar custom field value (string, number, boolean)."""

    text: str


@dataclass(frozen=True, slots=True)
class StructuredValue:
    """An object custom field value exposing ``label`` and/or ``name``."""

    label: str | None = None
    name: str | None = None

    @property
    def text(self) -> str:
        return self.label or self.name or ""


FieldValue = PlainValue | StructuredValue


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def normalize_field_value(value: Any) -> FieldValue | None:
    """Normalize a raw custom field value into a FieldValue.

    Args:
        value: The ``value`` entry of a ClickUp custom field, of any shape

    Returns:
        FieldValue | None: ``None`` when the field has no value
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return StructuredValue(
            label=_optional_text(value.get("label")),
            name=_optional_text(value.get("name")),
        )
    if isinstance(value, Sequence) and not isinstance(value, str):
        # Multi-select/label fields: join item texts like a CSV
        parts = (normalize_field_value(item) for item in value)
        return PlainValue(",".join(part.text for part in parts if part is not None))
    if isinstance(value, bool):
        return PlainValue("true" if value else "false")
    return PlainValue(str(value))


class CustomField(BaseModel):
    """ClickUp custom field entry attached to a task.

    Unknown upstream keys (``id``, ``type``, ``type_config``...) are kept so the
    field can be echoed back to callers unchanged.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, description="Custom field display name")
    value: Any = Field(default=None, description="Raw custom field value")

    @property
    def field_value(self) -> FieldValue | None:
        return normalize_field_value(self.value)

    @property
    def value_text(self) -> str:
        """Value as text; empty string when the field has no value."""
        normalized = self.field_value
        return normalized.text if normalized is not None else ""


def _empty_custom_fields() -> list[CustomField]:
    """Return an empty list typed for CustomField default factory."""

    return []


class TaskResponse(BaseModel):
    """Response model for ClickUp task data.

    Nested ``status`` and ``list`` objects are flattened to their labels, and
    ``date_created`` is parsed to integer epoch milliseconds (``None`` when it
    is missing or not numeric).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Task ID")
    name: str = Field(default="", description="Task name")
    url: str | None = Field(default=None, description="Canonical ClickUp URL for the task")
    status: str | None = Field(default=None, description="Status label (status.status)")
    list_name: str | None = Field(
        default=None, validation_alias="list", description="Name of the owning list"
    )
    date_created: int | None = Field(
        default=None, description="Creation timestamp in epoch milliseconds"
    )
    text_content: str | None = Field(default=None, description="Plain-text task description")
    description: str | None = Field(default=None, description="Task description")
    custom_fields: list[CustomField] = Field(
        default_factory=_empty_custom_fields, description="Custom fields in upstream order"
    )

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _flatten_status(cls, value: Any) -> str | None:
        if isinstance(value, Mapping):
            return _optional_text(value.get("status"))
        return _optional_text(value)

    @field_validator("list_name", mode="before")
    @classmethod
    def _flatten_list(cls, value: Any) -> str | None:
        if isinstance(value, Mapping):
            return _optional_text(value.get("name"))
        return _optional_text(value)

    @field_validator("date_created", mode="before")
    @classmethod
    def _parse_epoch(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return None

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _default_custom_fields(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def description_text(self) -> str:
        """Free-text description, preferring ClickUp's plain-text rendering."""
        return self.text_content or self.description or ""

    @property
    def created_sort_key(self) -> int:
        """Creation timestamp for ordering; missing timestamps count as zero."""
        return self.date_created if self.date_created is not None else 0
