"""Evaluate every catalog entry's triggers against the working tree and prompt.

Entries are independent: each is an asyncio task, and the blocking checks run
in worker threads bounded by a semaphore. Results are joined and then sorted
by priority, so completion order never affects the outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from modrules.catalog.models import Catalog, DetectionResult, ReferenceEntry
from modrules.config import DetectionSettings
from modrules.detection.triggers import (
    check_dependencies,
    check_file_patterns,
    check_imports,
    check_keywords,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _guarded(
    semaphore: asyncio.Semaphore,
    kind: str,
    module: str,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T | None:
    """Run one blocking check in a thread; any failure is "no match"."""
    async with semaphore:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except Exception:
            logger.warning("%s check failed for %s", kind, module, exc_info=True)
            return None


async def _evaluate_entry(
    module: str,
    entry: ReferenceEntry,
    cwd: Path,
    prompt: str | None,
    settings: DetectionSettings,
    semaphore: asyncio.Semaphore,
) -> DetectionResult | None:
    triggers = entry.triggers

    async def _none() -> None:
        return None

    files_task = (
        _guarded(
            semaphore,
            "filePatterns",
            module,
            check_file_patterns,
            triggers.file_patterns,
            cwd,
            excluded_dirs=settings.excluded_dirs,
            max_matches=settings.max_file_matches,
        )
        if triggers.file_patterns
        else _none()
    )
    imports_task = (
        _guarded(
            semaphore,
            "imports",
            module,
            check_imports,
            triggers.imports,
            cwd,
            source_extensions=settings.source_extensions,
            excluded_dirs=settings.excluded_dirs,
            max_file_bytes=settings.max_file_bytes,
        )
        if triggers.imports
        else _none()
    )
    deps_task = (
        _guarded(semaphore, "dependencies", module, check_dependencies, triggers.dependencies, cwd)
        if triggers.dependencies
        else _none()
    )

    file_matches, import_match, dep_match = await asyncio.gather(
        files_task, imports_task, deps_task
    )

    keyword_match = None
    if triggers.keywords and prompt:
        keyword_match = check_keywords(triggers.keywords, prompt)

    evidence: list[str] = []
    if file_matches:
        evidence.append(f"files: {', '.join(file_matches[:2])}")
    if import_match:
        evidence.append(f"import: {import_match}")
    if dep_match:
        evidence.append(f"dependency: {dep_match}")
    if keyword_match:
        evidence.append(f"keyword: {keyword_match}")

    if not evidence:
        return None
    return DetectionResult(
        module=module,
        name=entry.name,
        path=entry.path,
        priority=entry.priority,
        max_tokens=entry.max_tokens,
        triggers=evidence,
    )


async def detect_modules(
    catalog: Catalog,
    cwd: Path | str,
    prompt: str | None = None,
    settings: DetectionSettings | None = None,
) -> list[DetectionResult]:
    """Return a DetectionResult per entry with at least one firing trigger.

    Ordered by descending priority; ties keep catalog order.
    """
    settings = settings or DetectionSettings()
    semaphore = asyncio.Semaphore(max(1, settings.max_concurrency))
    root = Path(cwd)

    evaluated = await asyncio.gather(
        *(
            _evaluate_entry(module, entry, root, prompt, settings, semaphore)
            for module, entry in catalog.items()
        )
    )
    results = [r for r in evaluated if r is not None]
    results.sort(key=lambda r: r.priority, reverse=True)
    logger.debug("Detected %d of %d modules", len(results), len(catalog))
    return results
