"""Load a reference catalog from ``<base>/references``.

A precomputed ``index.json`` is used when it parses; otherwise the markdown
documents in the directory are scanned and their front-matter read.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from modrules.catalog.models import Catalog, ReferenceEntry
from modrules.catalog.parser import parse_frontmatter

logger = logging.getLogger(__name__)

REFERENCES_DIRNAME = "references"
INDEX_FILENAME = "index.json"
_README = "README.md"


def references_dir(base_dir: Path | str) -> Path:
    return Path(base_dir) / REFERENCES_DIRNAME


def load_catalog(base_dir: Path | str) -> Catalog | None:
    """Load the catalog under base_dir, or None if there is no references dir."""
    ref_dir = references_dir(base_dir)
    if not ref_dir.is_dir():
        return None

    index_path = ref_dir / INDEX_FILENAME
    if index_path.exists():
        try:
            return _load_index(index_path)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Failed to parse %s, scanning documents instead: %s", index_path, exc)

    return scan_references(ref_dir)


def _load_index(index_path: Path) -> Catalog:
    data = json.loads(index_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"index must be a JSON object, got {type(data).__name__}")

    catalog: Catalog = {}
    for key, raw in data.items():
        entry = ReferenceEntry.from_dict(raw)
        if entry.path and not Path(entry.path).is_absolute():
            entry.path = str(index_path.parent / entry.path)
        catalog[str(key).lower()] = entry
    logger.debug("Loaded %d entries from %s", len(catalog), index_path)
    return catalog


def _reference_documents(ref_dir: Path) -> list[Path]:
    return sorted(p for p in ref_dir.glob("*.md") if p.is_file() and p.name != _README)


def _entry_from_document(path: Path) -> ReferenceEntry | None:
    """Parse one document. None means "not a catalog entry"."""
    meta, _ = parse_frontmatter(path.read_text(encoding="utf-8"))
    if not meta.get("name") or "triggers" not in meta:
        return None
    return ReferenceEntry.from_dict({**meta, "path": str(path)})


def scan_references(ref_dir: Path) -> Catalog:
    """Build a catalog from the front-matter of every document in ref_dir."""
    catalog: Catalog = {}
    for path in _reference_documents(ref_dir):
        try:
            entry = _entry_from_document(path)
        except (OSError, UnicodeDecodeError, ValueError, TypeError) as exc:
            logger.warning("Failed to parse %s: %s", path, exc)
            continue
        if entry is None:
            logger.debug("Skipping %s: no name/triggers front-matter", path.name)
            continue
        catalog[entry.key] = entry
    return catalog


# ── Index regeneration ─────────────────────────────────────────


@dataclass
class IndexReport:
    """Outcome of regenerating an index: per-document status lines."""

    ref_dir: Path
    catalog: Catalog = field(default_factory=dict)
    ok: list[str] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)  # (file, reason)
    errors: list[tuple[str, str]] = field(default_factory=list)  # (file, message)
    written: Path | None = None

    @property
    def error_count(self) -> int:
        return len(self.skipped) + len(self.errors)


def build_index(base_dir: Path | str) -> IndexReport:
    """Scan the documents under base_dir and report what would be indexed."""
    ref_dir = references_dir(base_dir)
    report = IndexReport(ref_dir=ref_dir)
    if not ref_dir.is_dir():
        return report

    for path in _reference_documents(ref_dir):
        try:
            meta, _ = parse_frontmatter(path.read_text(encoding="utf-8"))
            if not meta.get("name"):
                report.skipped.append((path.name, "missing 'name' in frontmatter"))
                continue
            if "triggers" not in meta:
                report.skipped.append((path.name, "missing 'triggers' in frontmatter"))
                continue
            entry = ReferenceEntry.from_dict({**meta, "path": str(path)})
        except (OSError, UnicodeDecodeError, ValueError, TypeError) as exc:
            report.errors.append((path.name, str(exc)))
            continue
        report.catalog[entry.key] = entry
        report.ok.append(path.name)
    return report


def write_index(base_dir: Path | str) -> IndexReport:
    """Regenerate ``references/index.json`` from the documents beside it."""
    ref_dir = references_dir(base_dir)
    if not ref_dir.is_dir():
        logger.info("Creating %s", ref_dir)
        ref_dir.mkdir(parents=True, exist_ok=True)

    report = build_index(base_dir)
    if not (report.ok or report.skipped or report.errors):
        return report

    index = {key: entry.to_dict() for key, entry in report.catalog.items()}
    index_path = ref_dir / INDEX_FILENAME
    index_path.write_text(json.dumps(index, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    report.written = index_path
    logger.info("Wrote %s (%d entries)", index_path, len(index))
    return report
