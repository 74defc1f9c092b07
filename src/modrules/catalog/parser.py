"""Restricted front-matter parser for reference documents.

Accepted grammar (much narrower than YAML)::

    ---
    # whole-line comment
    name: Auth
    priority: 80
    tags: [a, "b"]
    triggers:
      keywords:
        - oauth
      filePatterns: [src/auth]
    ---
    body...

- ``key: value`` scalars lose one matching pair of quotes; ``true``/``false`` and
  numeric strings are coerced.
- ``[a, b]`` is an inline array.
- ``triggers:`` ensures a trigger object exists.
- ``keywords:`` (or any other trigger kind) with no value opens an array that
  the following ``- item`` lines append to. Any other ``key:`` line closes it.
- Trigger kinds always nest under ``triggers``, even without a
  ``triggers:`` line, and a scalar becomes a one-element list.

There is no nesting beyond ``triggers``, no inline comments and no multi-line
scalars. Lines the grammar does not recognise are dropped without error.
"""

from __future__ import annotations

import re
from typing import Any

from modrules.catalog.models import TRIGGER_KINDS

_BLOCK_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n(.*))?\Z", re.DOTALL)
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _strip_quotes(value: str) -> str:
    """Remove one matching pair of surrounding quotes.

    A single-quoted value also turns ``''`` back into ``'``, which is how
    YAML writers escape it.
    """
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        inner = value[1:-1]
        return inner.replace("''", "'") if value[0] == "'" else inner
    return value


def _coerce(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    if _NUMBER_RE.match(value):
        try:
            return int(value)
        except ValueError:
            return float(value)
    return value


def _split_inline_array(value: str) -> list[str]:
    items = (_strip_quotes(item.strip()) for item in value[1:-1].split(","))
    return [item for item in items if item]


class _FrontmatterParser:
    """Line parser with two states: top-level and array-context."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self._array: list[str] | None = None

    def _triggers(self) -> dict[str, Any]:
        triggers = self.data.get("triggers")
        if not isinstance(triggers, dict):
            triggers = {}
            self.data["triggers"] = triggers
        return triggers

    def feed(self, line: str) -> None:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return

        if stripped.startswith("- ") or stripped == "-":
            if self._array is not None:
                item = _strip_quotes(stripped[2:].strip())
                if item:
                    self._array.append(item)
            return

        colon = line.find(":")
        if colon <= 0:
            return
        key = line[:colon].strip()
        value = line[colon + 1 :].strip()
        if not key:
            return

        if value in ("", "{"):
            self._open(key)
        else:
            self._assign(key, value)

    def _open(self, key: str) -> None:
        if key in TRIGGER_KINDS:
            self._array = []
            self._triggers()[key] = self._array
        elif key == "triggers":
            self._array = None
            self._triggers()
        else:
            self._array = None

    def _assign(self, key: str, raw: str) -> None:
        self._array = None

        # A quoted value is always a scalar, even when it looks like [..]
        if raw.startswith("[") and raw.endswith("]"):
            items = _split_inline_array(raw)
            if key in TRIGGER_KINDS:
                self._triggers()[key] = items
            else:
                self.data[key] = items
            return

        value = _strip_quotes(raw)
        if key in TRIGGER_KINDS:
            self._triggers()[key] = [value]
            return

        self.data[key] = _coerce(value)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split a document into (metadata, body).

    Documents that do not open with a ``---`` delimited block come back as
    ``({}, content)`` unchanged.
    """
    match = _BLOCK_RE.match(content)
    if not match:
        return {}, content

    block, body = match.group(1), match.group(2) or ""
    parser = _FrontmatterParser()
    for line in block.splitlines():
        parser.feed(line)
    return parser.data, body.strip()
