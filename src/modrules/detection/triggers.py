"""The four trigger checks.

Each check is synchronous, reads the working tree in-process and returns its
evidence, or an empty value when nothing matched. Failures reading a single
file or manifest are logged and treated as "no match" for that source.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from modrules.detection.walk import iter_tree

logger = logging.getLogger(__name__)

_PACKAGE_JSON_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)
_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


# ── File patterns ─────────────────────────────────────────────


def _compile_pattern(pattern: str) -> pathspec.GitIgnoreSpec | None:
    """Compile a glob anchored at cwd: only ``**`` crosses directories."""
    anchored = pattern.strip().removeprefix("./").lstrip("/")
    if not anchored:
        return None
    try:
        return pathspec.GitIgnoreSpec.from_lines([f"/{anchored}"])
    except (ValueError, TypeError) as exc:
        logger.warning("Invalid file pattern %r: %s", pattern, exc)
        return None


def check_file_patterns(
    patterns: Sequence[str],
    cwd: Path | str,
    *,
    excluded_dirs: Iterable[str] = (),
    max_matches: int = 3,
) -> list[str]:
    """Return up to max_matches paths for the first pattern that hits anything.

    Patterns are globs relative to cwd: ``*.ts`` and ``package.json`` only
    look at the top level, ``**`` spans directories. Directories match too;
    paths below an already matched directory are not reported again.
    """
    excluded = list(excluded_dirs)
    for pattern in patterns:
        spec = _compile_pattern(pattern)
        if spec is None:
            continue

        matches: list[str] = []
        for rel, is_dir in iter_tree(cwd, excluded):
            if any(rel.startswith(f"{m}/") for m in matches):
                continue
            if spec.match_file(f"{rel}/" if is_dir else rel):
                matches.append(rel)
                if len(matches) >= max_matches:
                    break
        if matches:
            return matches
    return []


# ── Imports ───────────────────────────────────────────────────


def check_imports(
    patterns: Sequence[str],
    cwd: Path | str,
    *,
    source_extensions: Iterable[str],
    excluded_dirs: Iterable[str] = (),
    max_file_bytes: int = 1024 * 1024,
) -> str | None:
    """Find the first source file containing any import string.

    Import strings are literals. The evidence is the first string, in trigger
    order, that occurs in that file.
    """
    literals = [p for p in patterns if p]
    if not literals:
        return None

    combined = re.compile("|".join(re.escape(p) for p in literals))
    suffixes = {f".{ext.lstrip('.')}" for ext in source_extensions}
    root = Path(cwd)

    for rel, is_dir in iter_tree(root, excluded_dirs):
        if is_dir or Path(rel).suffix not in suffixes:
            continue
        path = root / rel
        try:
            if path.stat().st_size > max_file_bytes:
                continue
            text = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.debug("Cannot read %s: %s", path, exc)
            continue
        if combined.search(text):
            for literal in literals:
                if literal in text:
                    return literal
    return None


# ── Dependencies ──────────────────────────────────────────────


def _normalize_name(name: str) -> str:
    return re.sub(r"[-_.]+", "-", name).lower()


def _requirement_name(requirement: str) -> str | None:
    match = _REQUIREMENT_NAME_RE.match(requirement)
    return _normalize_name(match.group(1)) if match else None


def _package_json_deps(path: Path) -> set[str]:
    data = json.loads(path.read_text(encoding="utf-8"))
    deps: set[str] = set()
    if not isinstance(data, dict):
        return deps
    for section in _PACKAGE_JSON_SECTIONS:
        value = data.get(section)
        if isinstance(value, dict):
            deps.update(value)
    return deps


def _pyproject_deps(path: Path) -> set[str]:
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    names: set[str] = set()

    project = data.get("project", {})
    requirements = list(project.get("dependencies", []))
    for group in project.get("optional-dependencies", {}).values():
        requirements.extend(group)
    for requirement in requirements:
        name = _requirement_name(str(requirement))
        if name:
            names.add(name)

    poetry = data.get("tool", {}).get("poetry", {})
    tables = [poetry.get("dependencies", {}), poetry.get("dev-dependencies", {})]
    tables.extend(g.get("dependencies", {}) for g in poetry.get("group", {}).values())
    for table in tables:
        names.update(_normalize_name(n) for n in table if n.lower() != "python")
    return names


def check_dependencies(packages: Sequence[str], cwd: Path | str) -> str | None:
    """Return the first package (trigger order) declared by a manifest in cwd.

    Looks at package.json, then pyproject.toml, then requirements.txt.
    """
    root = Path(cwd)

    pkg_path = root / "package.json"
    if pkg_path.is_file():
        try:
            declared = _package_json_deps(pkg_path)
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring %s: %s", pkg_path, exc)
        else:
            for name in packages:
                if name in declared:
                    return name

    pyproject_path = root / "pyproject.toml"
    if pyproject_path.is_file():
        try:
            declared = _pyproject_deps(pyproject_path)
        except (OSError, ValueError, AttributeError, TypeError) as exc:
            logger.debug("Ignoring %s: %s", pyproject_path, exc)
        else:
            for name in packages:
                if _normalize_name(name) in declared:
                    return name

    req_path = root / "requirements.txt"
    if req_path.is_file():
        try:
            content = req_path.read_text(encoding="utf-8").lower()
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Ignoring %s: %s", req_path, exc)
        else:
            for name in packages:
                if name.lower() in content:
                    return name

    return None


# ── Keywords ──────────────────────────────────────────────────


def check_keywords(keywords: Sequence[str], prompt: str) -> str | None:
    """Return the first keyword found in prompt (case-insensitive)."""
    prompt_lower = prompt.lower()
    for keyword in keywords:
        if keyword and keyword.lower() in prompt_lower:
            return keyword
    return None
