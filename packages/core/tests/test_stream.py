"""Tests for the generation stream session and its events."""

import json
from collections.abc import AsyncIterator, Iterable

import pytest

from studyguide_core.schemas import GenerationEvent, GenerationEventType
from studyguide_core.streaming.extractor import MalformedGuideError
from studyguide_core.streaming.stream import SectionStream, stream_guide_events

SECTION_CHUNKS = [
    '{"sections":[',
    '{"id":"a","type":"text","content":{"markdown":"A"}}',
    ',{"id":"b","type":"text"}',
    "]}",
]


async def chunk_stream(chunks: Iterable[object]) -> AsyncIterator[object]:
    for chunk in chunks:
        yield chunk


async def failing_stream() -> AsyncIterator[str]:
    yield '{"sections":[{"id":"a","type":"text"}'
    raise ConnectionError("connection reset")


def fake_clock(*times: float):
    ticks = iter(times)
    return lambda: next(ticks)


async def collect(events: AsyncIterator[GenerationEvent]) -> list[GenerationEvent]:
    return [event async for event in events]


class TestSectionStream:
    """Tests for SectionStream."""

    def test_feed_returns_completed_sections(self) -> None:
        """Each chunk yields exactly the sections it completed."""
        stream = SectionStream()
        results = [stream.feed(chunk) for chunk in SECTION_CHUNKS]

        assert [[s.id for s in sections] for sections in results] == [
            [],
            ["a"],
            ["b"],
            [],
        ]
        assert stream.extracted_count == 2

    def test_finish(self) -> None:
        """The finished buffer parses as a guide."""
        stream = SectionStream()
        for chunk in SECTION_CHUNKS:
            stream.feed(chunk)

        assert len(stream.finish().sections) == 2

    def test_finish_truncated(self) -> None:
        """An unfinished buffer raises."""
        stream = SectionStream()
        stream.feed(SECTION_CHUNKS[0])

        with pytest.raises(MalformedGuideError):
            stream.finish()

    @pytest.mark.asyncio
    async def test_consume_yields_one_batch_per_text_chunk(self) -> None:
        """Batches line up with text chunks; non-text chunks are skipped."""
        stream = SectionStream()
        chunks = [SECTION_CHUNKS[0], None, *SECTION_CHUNKS[1:]]

        batches = [
            [s.id for s in sections]
            async for sections in stream.consume(chunk_stream(chunks))
        ]

        assert batches == [[], ["a"], ["b"], []]
        assert stream.buffer == "".join(SECTION_CHUNKS)
        assert stream.finish().sections[1].id == "b"


class TestStreamGuideEvents:
    """Tests for stream_guide_events."""

    @pytest.mark.asyncio
    async def test_event_sequence(self) -> None:
        """Sections stream out, progress is throttled, completion comes last."""
        events = await collect(
            stream_guide_events(
                chunk_stream(SECTION_CHUNKS),
                progress_interval=2.0,
                clock=fake_clock(0.0, 1.0, 3.0, 3.5, 6.0),
            )
        )

        assert [e.type for e in events] == [
            GenerationEventType.PROGRESS,
            GenerationEventType.SECTION,
            GenerationEventType.PROGRESS,
            GenerationEventType.SECTION,
            GenerationEventType.PROGRESS,
            GenerationEventType.COMPLETE,
        ]
        assert events[0].message == "Generating your study guide..."
        assert events[1].section.id == "a"
        assert events[2].message == "Generated 1 section..."
        assert events[4].message == "Generated 2 sections..."
        assert events[5].section_count == 2
        assert len(events[5].content.sections) == 2

    @pytest.mark.asyncio
    async def test_non_text_chunks_ignored(self) -> None:
        """Empty or non-string chunks are skipped."""
        chunks = [None, *SECTION_CHUNKS[:2], "", *SECTION_CHUNKS[2:]]
        events = await collect(
            stream_guide_events(chunk_stream(chunks), progress_interval=1000)
        )
        sections = [e.section.id for e in events if e.type == "section"]

        assert sections == ["a", "b"]
        assert events[-1].type == GenerationEventType.COMPLETE

    @pytest.mark.asyncio
    async def test_malformed_final_buffer(self) -> None:
        """Truncated output ends with an error carrying the raw buffer."""
        events = await collect(
            stream_guide_events(
                chunk_stream(['{"sections":[{"id":"a","type":"text"}', ',{"id"']),
                progress_interval=2.0,
                clock=fake_clock(0.0, 0.5, 5.0),
            )
        )

        assert [e.type for e in events] == [
            GenerationEventType.PROGRESS,
            GenerationEventType.SECTION,
            GenerationEventType.PROGRESS,
            GenerationEventType.ERROR,
        ]
        assert events[-1].message.startswith("Content generation completed")
        assert events[-1].raw_content.endswith(',{"id"')

    @pytest.mark.asyncio
    async def test_no_sections_progress_message(self) -> None:
        """Before any section arrives progress is generic."""
        events = await collect(
            stream_guide_events(
                chunk_stream(['{"version":']),
                progress_interval=2.0,
                clock=fake_clock(0.0, 5.0),
            )
        )

        assert events[1].message == "Generating content..."
        assert events[-1].type == GenerationEventType.ERROR

    @pytest.mark.asyncio
    async def test_stream_failure(self) -> None:
        """An upstream failure ends the stream with its message."""
        events = await collect(
            stream_guide_events(failing_stream(), progress_interval=1000)
        )

        assert events[1].type == GenerationEventType.SECTION
        assert events[-1].type == GenerationEventType.ERROR
        assert events[-1].message == "connection reset"
        assert events[-1].raw_content is None


class TestEventWireFormat:
    """Tests for GenerationEvent serialization."""

    def test_sse_frame(self) -> None:
        """Events render as data frames with camelCase keys."""
        event = GenerationEvent(type=GenerationEventType.COMPLETE, section_count=3)
        frame = event.to_sse()

        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame[len("data: ") :]) == {
            "type": "complete",
            "sectionCount": 3,
        }
