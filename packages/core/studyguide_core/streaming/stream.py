"""Generation stream session.

Holds the growing buffer and the extraction cursor for one generation and
turns a stream of text chunks into generation events. Nothing here owns a
resource: cancelling a generation means simply no longer feeding chunks.
"""

import time
from collections.abc import AsyncIterable, AsyncIterator, Callable

from studyguide_core.schemas.events import GenerationEvent, GenerationEventType
from studyguide_core.schemas.sections import GuideContent, Section
from studyguide_core.settings import settings
from studyguide_core.streaming.extractor import (
    MalformedGuideError,
    extract_complete_sections,
    parse_guide_content,
)
from studyguide_core.utils.logging import get_logger
from studyguide_core.utils.retry import describe_exception

logger = get_logger(__name__)


class SectionStream:
    """Buffer and cursor for a single generation stream."""

    def __init__(self) -> None:
        self.buffer = ""
        self.extracted_count = 0

    def feed(self, chunk: str) -> list[Section]:
        """Append a chunk and return sections completed by it.

        Args:
            chunk: Next piece of generation output

        Returns:
            Sections that became complete (possibly empty)
        """
        self.buffer += chunk
        result = extract_complete_sections(self.buffer, self.extracted_count)
        self.extracted_count = result.new_extracted_count
        return result.sections

    async def consume(self, chunks: AsyncIterable[str]) -> AsyncIterator[list[Section]]:
        """Feed every text chunk and yield the sections each one completed.

        One list is yielded per text chunk, empty when the chunk closed no
        section, so callers can do per-chunk work such as progress reporting.
        Non-text chunks are skipped.

        Args:
            chunks: Async iterable of text chunks from the generation service

        Yields:
            Sections completed by each chunk
        """
        async for chunk in chunks:
            if not isinstance(chunk, str):
                continue
            sections = self.feed(chunk)
            for section in sections:
                logger.info(
                    "section_streamed",
                    section_id=section.id,
                    section_type=section.type,
                    count=self.extracted_count,
                )
            yield sections

    def finish(self) -> GuideContent:
        """Parse the whole buffer once the stream has ended.

        Raises:
            MalformedGuideError: If the buffer is not a valid guide
        """
        return parse_guide_content(self.buffer)


def _progress(message: str) -> GenerationEvent:
    return GenerationEvent(type=GenerationEventType.PROGRESS, message=message)


async def stream_guide_events(
    chunks: AsyncIterable[str],
    progress_interval: float | None = None,
    clock: Callable[[], float] = time.monotonic,
    initial_message: str = "Generating your study guide...",
) -> AsyncIterator[GenerationEvent]:
    """Turn generation output into section, progress and completion events.

    Sections already emitted stay valid even if the final buffer turns out
    to be malformed; in that case an error event carries the raw buffer.

    Args:
        chunks: Async iterable of text chunks from the generation service
        progress_interval: Seconds between progress events
        clock: Monotonic clock, injectable for tests
        initial_message: Text of the first progress event

    Yields:
        Generation events, ending with exactly one complete or error event
    """
    interval = (
        settings.progress_interval if progress_interval is None else progress_interval
    )
    stream = SectionStream()
    last_progress = clock()

    yield _progress(initial_message)

    try:
        async for sections in stream.consume(chunks):
            for section in sections:
                yield GenerationEvent(type=GenerationEventType.SECTION, section=section)

            now = clock()
            if now - last_progress > interval:
                count = stream.extracted_count
                if count > 0:
                    message = f"Generated {count} section{'s' if count > 1 else ''}..."
                else:
                    message = "Generating content..."
                yield _progress(message)
                last_progress = now
    except Exception as e:
        logger.error(
            "generation_stream_failed",
            error=describe_exception(e),
            sections_emitted=stream.extracted_count,
        )
        yield GenerationEvent(
            type=GenerationEventType.ERROR,
            message=describe_exception(e) or "Failed to generate study guide",
        )
        return

    try:
        content = stream.finish()
    except MalformedGuideError as e:
        logger.warning(
            "generation_final_parse_failed",
            error=str(e),
            sections_emitted=stream.extracted_count,
        )
        yield GenerationEvent(
            type=GenerationEventType.ERROR,
            message=(
                "Content generation completed but final validation failed. "
                "Some sections may have been added."
            ),
            raw_content=e.raw_content,
        )
        return

    logger.info("generation_complete", section_count=len(content.sections))
    yield GenerationEvent(
        type=GenerationEventType.COMPLETE,
        content=content,
        section_count=len(content.sections),
    )
