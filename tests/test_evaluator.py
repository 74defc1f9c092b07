"""Tests for the trigger evaluator."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from modrules.catalog.models import ReferenceEntry, TriggerSet
from modrules.config import DetectionSettings
from modrules.detection.evaluator import detect_modules


def _entry(name: str, priority: int = 50, **triggers) -> ReferenceEntry:
    return ReferenceEntry(
        name=name,
        path=f"/refs/{name}.md",
        priority=priority,
        triggers=TriggerSet(**triggers),
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / "src" / "auth").mkdir(parents=True)
    (root / "src" / "auth" / "oauth.ts").write_text("import NextAuth from 'next-auth'\n")
    (root / "src" / "db.py").write_text("from sqlalchemy import create_engine\n")
    (root / "package.json").write_text(json.dumps({"dependencies": {"next-auth": "^4"}}))
    return root


class TestDetectModules:
    @pytest.mark.asyncio
    async def test_keyword_evidence(self, repo: Path):
        catalog = {"auth": _entry("auth", keywords=["oauth"])}
        results = await detect_modules(catalog, repo, "please add oauth support")
        assert len(results) == 1
        assert results[0].module == "auth"
        assert results[0].triggers == ["keyword: oauth"]

    @pytest.mark.asyncio
    async def test_keywords_need_prompt(self, repo: Path):
        catalog = {"auth": _entry("auth", keywords=["oauth"])}
        assert await detect_modules(catalog, repo) == []
        assert await detect_modules(catalog, repo, "") == []

    @pytest.mark.asyncio
    async def test_all_evidence_kinds(self, repo: Path):
        catalog = {
            "auth": _entry(
                "auth",
                file_patterns=["**/*.ts"],
                imports=["next-auth"],
                dependencies=["next-auth"],
                keywords=["login"],
            )
        }
        [result] = await detect_modules(catalog, repo, "fix the LOGIN page")
        assert result.triggers == [
            "files: src/auth/oauth.ts",
            "import: next-auth",
            "dependency: next-auth",
            "keyword: login",
        ]

    @pytest.mark.asyncio
    async def test_file_evidence_shows_two_paths(self, repo: Path):
        (repo / "src" / "a.ts").write_text("")
        (repo / "src" / "b.ts").write_text("")
        catalog = {"ts": _entry("ts", file_patterns=["**/*.ts"])}
        [result] = await detect_modules(catalog, repo)
        assert result.triggers == ["files: src/a.ts, src/b.ts"]

    @pytest.mark.asyncio
    async def test_no_trigger_fired(self, repo: Path):
        catalog = {
            "rails": _entry("rails", file_patterns=["Gemfile"], dependencies=["rails"]),
            "empty": _entry("empty"),
        }
        assert await detect_modules(catalog, repo, "anything") == []

    @pytest.mark.asyncio
    async def test_priority_order_is_stable(self, repo: Path):
        catalog = {
            "low": _entry("low", priority=10, keywords=["x"]),
            "first50": _entry("first50", priority=50, keywords=["x"]),
            "high": _entry("high", priority=90, keywords=["x"]),
            "second50": _entry("second50", priority=50, keywords=["x"]),
        }
        results = await detect_modules(catalog, repo, "x")
        assert [r.module for r in results] == ["high", "first50", "second50", "low"]
        priorities = [r.priority for r in results]
        assert priorities == sorted(priorities, reverse=True)

    @pytest.mark.asyncio
    async def test_result_carries_entry_fields(self, repo: Path):
        entry = _entry("Auth", priority=70, keywords=["x"])
        entry.max_tokens = 1200
        [result] = await detect_modules({"auth": entry}, repo, "x")
        assert result.module == "auth"
        assert result.name == "Auth"
        assert result.path == "/refs/Auth.md"
        assert result.priority == 70
        assert result.max_tokens == 1200

    @pytest.mark.asyncio
    async def test_failing_check_does_not_abort_other_kinds(self, repo: Path):
        catalog = {
            "auth": _entry("auth", imports=["next-auth"], keywords=["oauth"]),
            "db": _entry("db", imports=["sqlalchemy"]),
        }
        with patch(
            "modrules.detection.evaluator.check_imports", side_effect=RuntimeError("boom")
        ):
            results = await detect_modules(catalog, repo, "oauth")
        assert [r.module for r in results] == ["auth"]
        assert results[0].triggers == ["keyword: oauth"]

    @pytest.mark.asyncio
    async def test_catalog_not_mutated(self, repo: Path):
        entry = _entry("auth", file_patterns=["**/*.ts"], keywords=["oauth"])
        catalog = {"auth": entry}
        await detect_modules(catalog, repo, "oauth")
        assert catalog == {"auth": entry}
        assert entry.triggers.file_patterns == ["**/*.ts"]

    @pytest.mark.asyncio
    async def test_idempotent(self, repo: Path):
        catalog = {
            "auth": _entry("auth", priority=60, file_patterns=["src/auth"]),
            "db": _entry("db", priority=60, imports=["sqlalchemy"]),
            "pkg": _entry("pkg", priority=80, dependencies=["next-auth"]),
        }
        first = await detect_modules(catalog, repo)
        second = await detect_modules(catalog, repo)
        assert first == second
        assert [r.module for r in first] == ["pkg", "auth", "db"]

    @pytest.mark.asyncio
    async def test_settings_are_honoured(self, repo: Path):
        catalog = {"db": _entry("db", imports=["sqlalchemy"])}
        settings = DetectionSettings(source_extensions=["ts"], max_concurrency=1)
        assert await detect_modules(catalog, repo, settings=settings) == []
