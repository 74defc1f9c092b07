"""Scaffold new reference documents with a front-matter header."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import frontmatter

from modrules.catalog.loader import references_dir
from modrules.catalog.models import DEFAULT_MAX_TOKENS, DEFAULT_PRIORITY

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    """Minimal slug: strip illegal chars, spaces to hyphens, lower-case."""
    slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", name)
    return slug.strip().replace(" ", "-").lower() or "unnamed"


def _render_body(name: str, description: str) -> str:
    lines = [f"# {name}", ""]
    if description:
        lines += [description, ""]
    lines += ["## Rules", "", "- "]
    return "\n".join(lines)


def new_reference(
    base_dir: Path | str,
    name: str,
    *,
    description: str = "",
    keywords: Sequence[str] = (),
    file_patterns: Sequence[str] = (),
    imports: Sequence[str] = (),
    dependencies: Sequence[str] = (),
    priority: int = DEFAULT_PRIORITY,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    body: str | None = None,
) -> Path:
    """Write ``references/<slug>.md`` under base_dir and return its path.

    With no triggers given, the lower-cased name becomes the only keyword so
    the document is still a valid catalog entry.
    """
    name = name.strip()
    if not name:
        raise ValueError("reference name must not be empty")

    ref_dir = references_dir(base_dir)
    ref_dir.mkdir(parents=True, exist_ok=True)
    path = ref_dir / f"{_slugify(name)}.md"
    if path.exists():
        raise FileExistsError(f"{path} already exists")

    triggers = {
        kind: list(values)
        for kind, values in (
            ("filePatterns", file_patterns),
            ("imports", imports),
            ("dependencies", dependencies),
            ("keywords", keywords),
        )
        if values
    }
    if not triggers:
        triggers = {"keywords": [name.lower()]}

    metadata: dict = {"name": name}
    if description:
        metadata["description"] = description
    metadata.update(priority=priority, maxTokens=max_tokens, triggers=triggers)

    post = frontmatter.Post(body if body is not None else _render_body(name, description), **metadata)
    # Block style, no folding: the catalog parser has no multi-line scalars.
    text = frontmatter.dumps(post, sort_keys=False, width=4096)
    path.write_text(text + "\n", encoding="utf-8")
    logger.info("Created reference %s at %s", name, path)
    return path
