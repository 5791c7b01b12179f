"""Pipeline nodes for guide generation.

Nodes:
    - generate: Stream guide JSON from the model, surfacing sections as
      they complete
    - finalize: Validate the complete output
    - convert: Sections to editor blocks
    - merge: Combine with the existing guide
"""

from studyguide_core.graph.nodes import convert, finalize, generate, merge

__all__ = ["convert", "finalize", "generate", "merge"]
