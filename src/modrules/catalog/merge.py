"""Cascade merge of the user-level and project-level catalogs.

- Same name, plain project entry: project fields win, triggers are combined.
- Same name, ``overrideTriggers``: project entry replaces the user entry.
- ``disabled``: the name is removed from the merged catalog.
- Different names: both included.
"""

from __future__ import annotations

import dataclasses

from modrules.catalog.models import Catalog, TriggerSet


def merge_triggers(user: TriggerSet, project: TriggerSet) -> TriggerSet:
    """Concatenate each trigger kind, user list first. Duplicates are kept."""
    return TriggerSet(
        file_patterns=[*user.file_patterns, *project.file_patterns],
        imports=[*user.imports, *project.imports],
        dependencies=[*user.dependencies, *project.dependencies],
        keywords=[*user.keywords, *project.keywords],
    )


def merge_catalogs(user: Catalog | None, project: Catalog | None) -> Catalog:
    """Return a new catalog; neither input is modified."""
    merged: Catalog = {
        key: dataclasses.replace(entry)
        for key, entry in (user or {}).items()
        if not entry.disabled
    }

    for key, project_entry in (project or {}).items():
        if project_entry.disabled:
            merged.pop(key, None)
            continue

        existing = merged.get(key)
        if existing is not None and not project_entry.override_triggers:
            merged[key] = dataclasses.replace(
                project_entry,
                triggers=merge_triggers(existing.triggers, project_entry.triggers),
            )
        else:
            merged[key] = dataclasses.replace(project_entry)

    return merged
