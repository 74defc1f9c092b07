"""Shared fixtures: reference documents on disk."""

from __future__ import annotations

from pathlib import Path

import pytest


def write_reference(
    base_dir: Path,
    filename: str,
    name: str | None,
    *,
    keywords: list[str] | None = None,
    file_patterns: list[str] | None = None,
    imports: list[str] | None = None,
    dependencies: list[str] | None = None,
    priority: int | None = None,
    max_tokens: int | None = None,
    extra: str = "",
    body: str = "Reference body.",
    with_triggers: bool = True,
) -> Path:
    """Write ``<base_dir>/references/<filename>`` with a front-matter block."""
    lines = ["---"]
    if name is not None:
        lines.append(f"name: {name}")
    if priority is not None:
        lines.append(f"priority: {priority}")
    if max_tokens is not None:
        lines.append(f"maxTokens: {max_tokens}")
    if extra:
        lines.append(extra)
    if with_triggers:
        lines.append("triggers:")
        for kind, values in (
            ("filePatterns", file_patterns),
            ("imports", imports),
            ("dependencies", dependencies),
            ("keywords", keywords),
        ):
            if values:
                lines.append(f"  {kind}:")
                lines.extend(f'    - "{v}"' for v in values)
    lines.append("---")
    lines.append(body)

    ref_dir = base_dir / "references"
    ref_dir.mkdir(parents=True, exist_ok=True)
    path = ref_dir / filename
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def user_dir(tmp_path: Path) -> Path:
    path = tmp_path / "user" / ".claude"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def project_dir(project: Path) -> Path:
    path = project / ".claude"
    path.mkdir()
    return path
