"""Prompts for guide generation."""

from studyguide_core.editor.converter import blocks_to_content
from studyguide_core.schemas.blocks import Block

SYSTEM_PROMPT = """You are an experienced teacher who writes structured study guides.
You always answer with a single JSON object and nothing else."""

GUIDE_PROMPT = """Create study guide content for the request below.

Subject: {subject}
Grade level: {grade_level}

Request:
{description}

{mode_instructions}

OUTPUT FORMAT:
Return one JSON object:
{{
  "version": "1.0",
  "sections": [<section>, <section>, ...]
}}

Every section has a unique "id", a "type", an optional "title" and a
"content" object whose "type" equals the section type:

- text:       {{"type": "text", "markdown": "<markdown>"}}
- definition: {{"type": "definition", "term": "...", "definition": "...", "examples": ["..."]}}
- alert:      {{"type": "alert", "variant": "info|warning|success|exam-tip", "title": "...", "message": "..."}}
- table:      {{"type": "table", "headers": ["..."], "rows": [["..."]]}}
- quiz:       {{"type": "quiz", "questions": [{{"id": "...", "questionType": "multiple-choice|true-false|short-answer|calculation", "question": "...", "options": ["..."], "correctAnswer": "...", "explanation": "..."}}]}}
- checklist:  {{"type": "checklist", "items": [{{"id": "...", "label": "..."}}]}}
- section:    a titled container; put its content in "children" (a list of sections)

Write the sections in reading order. Do not repeat a definition, question or
checklist item that already appears.
"""

ADD_INSTRUCTIONS = """The guide already contains the content below. Add NEW material that
complements it; do not repeat existing definitions, questions or items.

Existing content:
{existing_content}"""

REPLACE_INSTRUCTIONS = "Write a complete guide from scratch."

# Keep the prompt bounded for long guides
MAX_EXISTING_CONTENT_CHARS = 12000


def build_guide_prompt(
    description: str,
    subject: str = "other",
    grade_level: str = "9th-10th",
    mode: str = "replace",
    existing_blocks: list[Block] | None = None,
) -> str:
    """Build the generation prompt.

    Args:
        description: What the user asked for
        subject: Guide subject
        grade_level: Target grade level
        mode: "add" to extend existing content, "replace" to start over
        existing_blocks: Current guide content, used in add mode

    Returns:
        Prompt text
    """
    if mode == "add" and existing_blocks:
        existing = blocks_to_content(existing_blocks).to_json()
        if len(existing) > MAX_EXISTING_CONTENT_CHARS:
            existing = existing[:MAX_EXISTING_CONTENT_CHARS] + "..."
        mode_instructions = ADD_INSTRUCTIONS.format(existing_content=existing)
    else:
        mode_instructions = REPLACE_INSTRUCTIONS

    return GUIDE_PROMPT.format(
        subject=subject,
        grade_level=grade_level,
        description=description.strip(),
        mode_instructions=mode_instructions,
    )
