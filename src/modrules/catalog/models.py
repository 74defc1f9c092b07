"""Reference catalog data model.

The index document (``references/index.json``) stores entries with camelCase
keys; the dataclasses here use snake_case and convert at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TRIGGER_KINDS = ("filePatterns", "imports", "dependencies", "keywords")

DEFAULT_PRIORITY = 50
DEFAULT_MAX_TOKENS = 2000


def _as_list(value: Any) -> list[str]:
    """Normalize a trigger value: None → [], scalar → [scalar]."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


@dataclass
class TriggerSet:
    """Four independent OR-lists of triggers."""

    file_patterns: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TriggerSet:
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"triggers must be a mapping, got {type(data).__name__}")
        return cls(
            file_patterns=_as_list(data.get("filePatterns")),
            imports=_as_list(data.get("imports")),
            dependencies=_as_list(data.get("dependencies")),
            keywords=_as_list(data.get("keywords")),
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "filePatterns": list(self.file_patterns),
            "imports": list(self.imports),
            "dependencies": list(self.dependencies),
            "keywords": list(self.keywords),
        }

    def count(self) -> int:
        return (
            len(self.file_patterns)
            + len(self.imports)
            + len(self.dependencies)
            + len(self.keywords)
        )

    def summary(self) -> str:
        parts = []
        if self.file_patterns:
            parts.append(f"{len(self.file_patterns)} file patterns")
        if self.imports:
            parts.append(f"{len(self.imports)} imports")
        if self.dependencies:
            parts.append(f"{len(self.dependencies)} deps")
        if self.keywords:
            parts.append(f"{len(self.keywords)} keywords")
        return ", ".join(parts) or "none"


@dataclass
class ReferenceEntry:
    """One unit of loadable reference documentation."""

    name: str
    path: str
    description: str = ""
    triggers: TriggerSet = field(default_factory=TriggerSet)
    priority: int = DEFAULT_PRIORITY
    max_tokens: int = DEFAULT_MAX_TOKENS
    disabled: bool = False
    override_triggers: bool = False

    @property
    def key(self) -> str:
        return self.name.lower()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReferenceEntry:
        """Build an entry from index-document / front-matter shaped data.

        Raises ValueError (or TypeError) when required fields are missing or
        have the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"entry must be a mapping, got {type(data).__name__}")
        name = data.get("name")
        if name is None or str(name) == "":
            raise ValueError("entry is missing 'name'")
        priority = data.get("priority")
        max_tokens = data.get("maxTokens")
        return cls(
            name=str(name),
            path=str(data.get("path") or ""),
            description=str(data.get("description") or ""),
            triggers=TriggerSet.from_dict(data.get("triggers")),
            priority=DEFAULT_PRIORITY if priority is None else int(priority),
            max_tokens=DEFAULT_MAX_TOKENS if max_tokens is None else int(max_tokens),
            disabled=bool(data.get("disabled", False)),
            override_triggers=bool(data.get("overrideTriggers", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "description": self.description,
            "triggers": self.triggers.to_dict(),
            "priority": self.priority,
            "maxTokens": self.max_tokens,
        }
        if self.disabled:
            data["disabled"] = True
        if self.override_triggers:
            data["overrideTriggers"] = True
        return data


# Lower-cased entry name → entry. An absent catalog is represented by None.
Catalog = dict[str, ReferenceEntry]


@dataclass
class DetectionResult:
    """A catalog entry whose triggers fired, plus the evidence."""

    module: str
    name: str
    path: str
    priority: int
    max_tokens: int
    triggers: list[str] = field(default_factory=list)
