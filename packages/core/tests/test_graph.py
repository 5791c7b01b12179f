"""Tests for the guide generation pipeline."""

import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from studyguide_core.config import GenerationConfig
from studyguide_core.graph import build_guide_graph, build_guide_prompt
from studyguide_core.model_adapters.base import BaseModelAdapter
from studyguide_core.schemas import (
    Block,
    BlockType,
    ChecklistBlockData,
    ChecklistItem,
    Section,
    TextBlockData,
)

GUIDE = {
    "version": "1.0",
    "sections": [
        {
            "id": "intro",
            "type": "text",
            "title": "Introduction",
            "content": {"type": "text", "markdown": "Cells are the unit of life."},
        },
        {
            "id": "def",
            "type": "definition",
            "content": {
                "type": "definition",
                "term": "Osmosis",
                "definition": "Diffusion of water across a membrane",
            },
        },
        {
            "id": "def-again",
            "type": "definition",
            "content": {
                "type": "definition",
                "term": "osmosis",
                "definition": "Water movement",
            },
        },
        {
            "id": "todo",
            "type": "checklist",
            "content": {
                "type": "checklist",
                "items": [
                    {"id": "i1", "label": "Define osmosis"},
                    {"id": "i2", "label": "Explain diffusion"},
                ],
            },
        },
    ],
}


def chunked(text: str, size: int = 7) -> list[str]:
    return [text[i : i + size] for i in range(0, len(text), size)]


class FakeAdapter(BaseModelAdapter):
    """Adapter that streams a fixed response in small chunks."""

    def __init__(self, response: str, fail_after: int | None = None) -> None:
        self.response = response
        self.fail_after = fail_after
        self.prompts: list[str] = []

    async def stream_text(
        self,
        prompt: str,
        system: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield the response, optionally failing partway through."""
        self.prompts.append(prompt)
        for index, chunk in enumerate(chunked(self.response)):
            if self.fail_after is not None and index >= self.fail_after:
                raise ConnectionError("stream dropped")
            yield chunk


@pytest.fixture
def guide_response() -> str:
    """The fixed guide, serialized the way a model would write it."""
    return "```json\n" + json.dumps(GUIDE, indent=2) + "\n```"


@pytest.fixture
def existing_blocks() -> list[Block]:
    """A guide that already has an intro and a checklist."""
    return [
        Block(
            id="old-intro",
            type=BlockType.TEXT,
            data=TextBlockData(markdown="Existing notes"),
        ),
        Block(
            id="old-todo",
            type=BlockType.CHECKLIST,
            data=ChecklistBlockData(
                items=[
                    ChecklistItem(id="old-1", label="Define osmosis"),
                    ChecklistItem(id="old-2", label="Draw a cell"),
                ]
            ),
        ),
    ]


class TestGuideGraph:
    """Tests for build_guide_graph."""

    @pytest.mark.asyncio
    async def test_replace_mode(self, guide_response: str) -> None:
        """Sections stream through the callback and come out cleaned."""
        seen: list[tuple[str, bool]] = []

        def on_section(section: Section, is_first: bool) -> None:
            seen.append((section.id, is_first))

        graph = build_guide_graph(FakeAdapter(guide_response), on_section=on_section)
        result: dict[str, Any] = await graph.ainvoke(
            {"description": "Cell biology basics", "mode": "replace"}
        )

        assert seen == [
            ("intro", True),
            ("def", False),
            ("def-again", False),
            ("todo", False),
        ]
        assert result["guide_content"] is not None
        assert not result.get("errors")
        assert [b.type for b in result["blocks"]] == [
            BlockType.TEXT,
            BlockType.DEFINITION,
            BlockType.CHECKLIST,
        ]
        assert all(b.id.startswith("block-") for b in result["blocks"])
        assert result["progress"] == 100

    @pytest.mark.asyncio
    async def test_async_callback(self, guide_response: str) -> None:
        """Async callbacks are awaited."""
        seen: list[str] = []

        async def on_section(section: Section, is_first: bool) -> None:
            seen.append(section.id)

        graph = build_guide_graph(FakeAdapter(guide_response), on_section=on_section)
        await graph.ainvoke({"description": "Cells", "mode": "replace"})

        assert seen == ["intro", "def", "def-again", "todo"]

    @pytest.mark.asyncio
    async def test_add_mode_merges(
        self, guide_response: str, existing_blocks: list[Block]
    ) -> None:
        """Add mode folds generated content into the existing guide."""
        adapter = FakeAdapter(guide_response)
        graph = build_guide_graph(adapter)
        result = await graph.ainvoke(
            {
                "description": "More on cells",
                "mode": "add",
                "existing_blocks": existing_blocks,
            }
        )
        blocks = result["blocks"]

        assert [b.id for b in blocks[:2]] == ["old-intro", "old-todo"]
        assert [i.label for i in blocks[1].data.items] == [
            "Define osmosis",
            "Draw a cell",
            "Explain diffusion",
        ]
        assert sum(1 for b in blocks if b.type == BlockType.DEFINITION) == 1
        assert "Existing notes" in adapter.prompts[0]
        assert existing_blocks[1].data.items[-1].label == "Draw a cell"

    @pytest.mark.asyncio
    async def test_without_dedupe(self, guide_response: str) -> None:
        """Dedupe can be switched off."""
        config = GenerationConfig(dedupe_on_merge=False)
        graph = build_guide_graph(FakeAdapter(guide_response), config=config)
        result = await graph.ainvoke({"description": "Cells", "mode": "replace"})

        assert len(result["blocks"]) == 4

    @pytest.mark.asyncio
    async def test_original_ids_kept_when_requested(self, guide_response: str) -> None:
        """Id regeneration can be switched off."""
        config = GenerationConfig(regenerate_ids=False, dedupe_on_merge=False)
        graph = build_guide_graph(FakeAdapter(guide_response), config=config)
        result = await graph.ainvoke({"description": "Cells", "mode": "replace"})

        assert [b.id for b in result["blocks"]] == [
            "intro",
            "def",
            "def-again",
            "todo",
        ]

    @pytest.mark.asyncio
    async def test_malformed_final_output(self, guide_response: str) -> None:
        """Sections already streamed survive a truncated response."""
        truncated = guide_response[: guide_response.index('"id": "todo"')]
        graph = build_guide_graph(FakeAdapter(truncated))
        result = await graph.ainvoke({"description": "Cells", "mode": "replace"})

        assert result["guide_content"] is None
        assert result["raw_content"] == truncated
        assert any("final validation failed" in e for e in result["errors"])
        assert len(result["blocks"]) == 2

    @pytest.mark.asyncio
    async def test_stream_failure(self, guide_response: str) -> None:
        """A dropped stream is reported and keeps what arrived."""
        graph = build_guide_graph(FakeAdapter(guide_response, fail_after=40))
        result = await graph.ainvoke({"description": "Cells", "mode": "replace"})

        assert result["generation_failed"] is True
        assert result["guide_content"] is None
        assert any("stream dropped" in e for e in result["errors"])
        assert len(result["blocks"]) >= 1

    @pytest.mark.asyncio
    async def test_empty_description(self, guide_response: str) -> None:
        """Nothing is generated without a description."""
        adapter = FakeAdapter(guide_response)
        graph = build_guide_graph(adapter)
        result = await graph.ainvoke({"description": "  ", "mode": "replace"})

        assert adapter.prompts == []
        assert result["blocks"] == []
        assert "No description provided" in result["errors"]


class TestPrompt:
    """Tests for build_guide_prompt."""

    def test_replace_prompt(self) -> None:
        """The request and audience are included."""
        prompt = build_guide_prompt(
            "  Photosynthesis  ", subject="science", grade_level="7th-8th"
        )

        assert "Photosynthesis" in prompt
        assert "Subject: science" in prompt
        assert "Grade level: 7th-8th" in prompt
        assert '"sections": [<section>, <section>, ...]' in prompt

    def test_add_prompt_includes_existing_content(
        self, existing_blocks: list[Block]
    ) -> None:
        """Add mode shows the model what is already there."""
        prompt = build_guide_prompt(
            "More", mode="add", existing_blocks=existing_blocks
        )
        assert "Draw a cell" in prompt

    def test_add_prompt_without_content_is_replace(self) -> None:
        """Add mode over an empty guide behaves like replace."""
        assert build_guide_prompt("x", mode="add") == build_guide_prompt("x")
