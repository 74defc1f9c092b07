"""Module rules engine — the single entry point hooks and the CLI call.

Pipeline:
1. Load the user and project catalogs (each may be absent)
2. Cascade-merge them
3. Detect which entries apply to cwd + prompt
4. Pack the detected bodies under the token ceiling

Nothing here raises to the caller: the worst case is ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from modrules.assembler import load_references
from modrules.catalog.loader import load_catalog
from modrules.catalog.merge import merge_catalogs
from modrules.config import DetectionSettings
from modrules.detection.evaluator import detect_modules

logger = logging.getLogger(__name__)


async def detect_and_load_module_rules(
    user_dir: Path | str,
    project_dir: Path | str,
    cwd: Path | str,
    prompt: str | None = None,
    settings: DetectionSettings | None = None,
) -> str | None:
    """Detect and load module rules for the current session."""
    settings = settings or DetectionSettings()
    try:
        user_catalog = load_catalog(user_dir)
        project_catalog = load_catalog(project_dir)
        if user_catalog is None and project_catalog is None:
            logger.debug("No module rules configured")
            return None

        merged = merge_catalogs(user_catalog, project_catalog)
        if not merged:
            return None

        detected = await detect_modules(merged, cwd, prompt, settings)
        if not detected:
            logger.debug("No modules detected for %s", cwd)
            return None

        return load_references(detected, settings.max_total_tokens)
    except Exception:
        logger.exception("Module rules detection failed")
        return None


def load_module_rules(
    user_dir: Path | str,
    project_dir: Path | str,
    cwd: Path | str,
    prompt: str | None = None,
    settings: DetectionSettings | None = None,
) -> str | None:
    """Blocking wrapper around detect_and_load_module_rules."""
    return asyncio.run(detect_and_load_module_rules(user_dir, project_dir, cwd, prompt, settings))
