"""Events emitted while a guide is being generated."""

from enum import Enum

from pydantic import Field

from studyguide_core.schemas.blocks import WireModel
from studyguide_core.schemas.sections import GuideContent, Section


class GenerationEventType(str, Enum):
    """Kinds of generation event."""

    PROGRESS = "progress"
    SECTION = "section"
    COMPLETE = "complete"
    ERROR = "error"


class GenerationEvent(WireModel):
    """A single update from an in-progress generation."""

    type: GenerationEventType
    message: str | None = None
    section: Section | None = None
    content: GuideContent | None = Field(None, description="Final parsed guide")
    section_count: int | None = None
    raw_content: str | None = Field(
        None, description="Unparseable buffer, surfaced for manual recovery"
    )

    def to_sse(self) -> str:
        """Render as a server-sent-events ``data:`` frame."""
        payload = self.model_dump_json(by_alias=True, exclude_none=True)
        return f"data: {payload}\n\n"
