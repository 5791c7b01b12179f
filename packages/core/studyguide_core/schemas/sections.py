"""Wire and persisted shape of guide content.

A ``Section`` is the unit the generation service emits and the persistence
layer stores; it maps one-to-one onto a ``Block``. ``content`` is kept as a
raw mapping here so that sections of an unknown kind survive extraction and
can be degraded by the converter instead of being rejected. A section only
needs an ``id`` and a ``type`` to be accepted.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator

from studyguide_core.schemas.blocks import Difficulty, WireModel


class Section(WireModel):
    """A section as emitted by the generation service."""

    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    title: str | None = None
    content: dict[str, Any] = Field(default_factory=dict)
    children: list[Section] | None = None
    collapsed: bool | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        # Models sometimes number their sections
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: object) -> object:
        # null or non-object content degrades in the converter
        return value if isinstance(value, dict) else {}


class GuideContentMetadata(WireModel):
    """Metadata stored alongside the sections of a guide."""

    estimated_duration: int | None = None
    difficulty: Difficulty | None = None
    tags: list[str] | None = None

    @classmethod
    def parse_lenient(cls, raw: object) -> GuideContentMetadata | None:
        """Validate generated metadata, dropping fields that do not fit.

        Args:
            raw: Metadata value from a generated document

        Returns:
            Metadata with only the valid fields, or None if it is not an object
        """
        if not isinstance(raw, dict):
            return None
        data = dict(raw)
        while True:
            try:
                return cls.model_validate(data)
            except ValidationError as e:
                invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
                dropped = [key for key in invalid if key in data]
                if not dropped:
                    return None
                for key in dropped:
                    del data[key]


class GuideContent(WireModel):
    """Version-tagged guide document."""

    version: Literal["1.0"] = "1.0"
    sections: list[Section] = Field(default_factory=list)
    metadata: GuideContentMetadata | None = None

    def to_json(self) -> str:
        """Serialize using wire (camelCase) keys."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def to_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> GuideContent:
        """Parse a serialized guide document."""
        return cls.model_validate(json.loads(raw))


Section.model_rebuild()
