"""Session-start hook entry point — print detected module rules.

Usage (Claude Code SessionStart / UserPromptSubmit hook):
    python -m modrules hook

Reads the hook payload (JSON with optional ``cwd`` and ``prompt``) from stdin
and writes the assembled context block to stdout. Always exits 0: a broken
catalog must never block the session.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from modrules.config import ModuleRulesConfig, load_config
from modrules.engine import load_module_rules

logger = logging.getLogger(__name__)


def _read_payload(raw: str) -> dict:
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Hook payload is not JSON, ignoring it")
        return {}
    return payload if isinstance(payload, dict) else {}


def run_hook(raw: str, config: ModuleRulesConfig | None = None) -> str | None:
    """Resolve cwd/prompt from a hook payload and return the context block.

    The project level is the configured project dir when one is set,
    otherwise ``<payload cwd>/.claude``.
    """
    config = config or load_config()
    payload = _read_payload(raw)

    cwd = Path(payload.get("cwd") or Path.cwd())
    prompt = payload.get("prompt")
    if not isinstance(prompt, str):
        prompt = None

    return load_module_rules(
        user_dir=config.user_dir,
        project_dir=config.project_dir_for(cwd),
        cwd=cwd,
        prompt=prompt,
        settings=config.detection,
    )


def main() -> None:
    try:
        content = run_hook(sys.stdin.read())
    except Exception:
        logger.exception("Module rules hook failed")
        return
    if content:
        sys.stdout.write(content + "\n")


if __name__ == "__main__":
    main()
