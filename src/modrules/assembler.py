"""Budgeted assembly of detected references into one context block.

The budget is advisory: each entry costs its declared ``maxTokens``, not the
real size of its body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modrules.catalog.models import DetectionResult
from modrules.catalog.parser import parse_frontmatter

logger = logging.getLogger(__name__)

DIVIDER = "\n\n---\n\n"


@dataclass
class PackedReferences:
    """What made it into the block, and what did not."""

    sections: list[str] = field(default_factory=list)
    loaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # over budget
    failed: list[str] = field(default_factory=list)  # body unreadable
    tokens_used: int = 0

    @property
    def text(self) -> str | None:
        if not self.sections:
            return None
        header = f"## Module Rules (Auto-detected: {', '.join(self.loaded)})"
        return f"{header}\n\n{DIVIDER.join(self.sections)}"


def render_section(result: DetectionResult, body: str) -> str:
    return f"### {result.module.upper()}\n_Triggered by: {', '.join(result.triggers)}_\n\n{body}"


def pack_references(results: list[DetectionResult], max_total_tokens: int) -> PackedReferences:
    """Accept results in order while their maxTokens fit under the ceiling."""
    packed = PackedReferences()

    for result in results:
        if packed.tokens_used + result.max_tokens > max_total_tokens:
            logger.info(
                "Token budget exceeded, skipping %s (%d + %d > %d)",
                result.module,
                packed.tokens_used,
                result.max_tokens,
                max_total_tokens,
            )
            packed.skipped.append(result.module)
            continue

        try:
            content = Path(result.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to load %s from %s: %s", result.module, result.path, exc)
            packed.failed.append(result.module)
            continue

        _, body = parse_frontmatter(content)
        packed.sections.append(render_section(result, body))
        packed.loaded.append(result.module)
        packed.tokens_used += result.max_tokens

    return packed


def load_references(results: list[DetectionResult], max_total_tokens: int = 8000) -> str | None:
    """Return the combined block, or None when nothing was loaded."""
    return pack_references(results, max_total_tokens).text
