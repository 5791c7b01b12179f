"""Incremental extraction of sections from a growing JSON buffer.

The generation service writes one large JSON object of the form
``{"sections": [{...}, {...}, ...], ...}`` a few characters at a time.
Waiting for the whole object before showing anything makes the editor feel
frozen, so every time the buffer grows we scan the ``sections`` array and
surface each element as soon as its closing brace arrives.

The scanner is not a JSON parser. It tracks three things:

- object nesting depth (``{`` / ``}`` outside strings)
- whether it is inside a quoted string
- whether the previous character was an escaping backslash

which is enough to find textually complete top-level objects. Each complete
object is then handed to ``json.loads`` and validated as a ``Section``.

The caller threads a cursor (the number of sections already surfaced)
between calls; the buffer must only ever be appended to.
"""

import json
from dataclasses import dataclass, field

from pydantic import ValidationError

from studyguide_core.schemas.sections import (
    GuideContent,
    GuideContentMetadata,
    Section,
)
from studyguide_core.utils.logging import get_logger

logger = get_logger(__name__)

SECTIONS_KEY = "sections"

_WHITESPACE = " \t\r\n"


class MalformedGuideError(ValueError):
    """Raised when a finished generation does not parse as a guide."""

    def __init__(self, message: str, raw_content: str):
        super().__init__(message)
        self.raw_content = raw_content


@dataclass(frozen=True)
class ExtractionResult:
    """Sections found by one extraction pass and the advanced cursor."""

    sections: list[Section] = field(default_factory=list)
    new_extracted_count: int = 0


def _skip_whitespace(buffer: str, index: int) -> int:
    while index < len(buffer) and buffer[index] in _WHITESPACE:
        index += 1
    return index


def find_sections_array(buffer: str) -> int | None:
    """Locate the opening bracket of the top-level ``sections`` array.

    Only a ``"sections"`` string in key position of the outermost object
    counts; the same literal inside a string value or a nested object is
    ignored.

    Args:
        buffer: Accumulated generation output

    Returns:
        Index of the ``[`` character, or None if it has not arrived yet
    """
    containers: list[str] = []
    in_string = False
    escape_next = False
    string_start = -1

    for i, char in enumerate(buffer):
        if in_string:
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
                if containers == ["{"] and buffer[string_start + 1 : i] == SECTIONS_KEY:
                    colon = _skip_whitespace(buffer, i + 1)
                    if colon < len(buffer) and buffer[colon] == ":":
                        bracket = _skip_whitespace(buffer, colon + 1)
                        if bracket < len(buffer) and buffer[bracket] == "[":
                            return bracket
            continue

        if char == '"':
            in_string = True
            string_start = i
        elif char in "{[":
            containers.append(char)
        elif char in "}]" and containers:
            containers.pop()

    return None


def _parse_candidate(candidate: str) -> Section | None:
    """Parse a well-bracketed candidate; None if it is not a section yet."""
    try:
        raw = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(raw, dict):
        return None
    try:
        return Section.model_validate(raw)
    except ValidationError:
        logger.debug("section_candidate_incomplete", preview=candidate[:80])
        return None


def extract_complete_sections(buffer: str, already_extracted: int) -> ExtractionResult:
    """Extract sections completed since the last call.

    Args:
        buffer: Accumulated generation output (only ever appended to)
        already_extracted: Number of sections surfaced by earlier calls

    Returns:
        Newly completed sections and the updated cursor
    """
    start = find_sections_array(buffer)
    if start is None:
        return ExtractionResult(sections=[], new_extracted_count=already_extracted)

    sections: list[Section] = []
    new_extracted_count = already_extracted
    depth = 0
    object_start = -1
    in_string = False
    escape_next = False
    ordinal = 0

    for i in range(start + 1, len(buffer)):
        char = buffer[i]

        if in_string:
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            if depth == 0:
                object_start = i
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                ordinal += 1
                if ordinal > already_extracted:
                    section = _parse_candidate(buffer[object_start : i + 1])
                    if section is not None:
                        sections.append(section)
                        new_extracted_count = ordinal
                        logger.debug(
                            "section_extracted",
                            section_id=section.id,
                            section_type=section.type,
                            ordinal=ordinal,
                        )
                object_start = -1
        elif char == "]" and depth == 0:
            break

    return ExtractionResult(sections=sections, new_extracted_count=new_extracted_count)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around model output."""
    content = text.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def parse_guide_content(text: str) -> GuideContent:
    """Parse a finished generation buffer as a guide document.

    Sections are validated strictly. Metadata is best effort: fields that do
    not validate are dropped, and the document is always tagged as the
    current version.

    Args:
        text: Full generation output, optionally fenced

    Returns:
        Parsed guide content

    Raises:
        MalformedGuideError: If the buffer is not a valid guide
    """
    try:
        raw = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise MalformedGuideError(
            f"Generated content is not valid JSON: {e.msg}", raw_content=text
        ) from e
    if not isinstance(raw, dict):
        raise MalformedGuideError(
            "Generated content is not a JSON object", raw_content=text
        )

    try:
        return GuideContent.model_validate(
            {
                SECTIONS_KEY: raw.get(SECTIONS_KEY, []),
                "metadata": GuideContentMetadata.parse_lenient(raw.get("metadata")),
            }
        )
    except ValidationError as e:
        raise MalformedGuideError(
            f"Generated content is not a valid guide: {e.error_count()} error(s)",
            raw_content=text,
        ) from e
