"""Entry point: python -m modrules <command>

- index:   Regenerate references/index.json (user and/or project level)
- detect:  Show which modules match the current directory (and prompt)
- list:    List configured references at both levels
- new:     Scaffold a reference document
- hook:    Session-start hook (stdin payload → context block on stdout)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from modrules.config import ModuleRulesConfig, load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


# ── index ─────────────────────────────────────────────────────


def _generate_index(base_dir: Path, label: str) -> None:
    from modrules.catalog.loader import write_index

    report = write_index(base_dir)
    if report.written is None:
        print(f"No reference files found in {report.ref_dir}")
        print("Create .md files with front-matter (name, triggers) to define references.")
        return

    print(f"\nScanning {label} references in {report.ref_dir}...\n")
    for entry in report.catalog.values():
        print(
            f"  [OK] {entry.name} ({entry.triggers.count()} triggers, priority {entry.priority})"
        )
    for filename, reason in report.skipped:
        print(f"  [SKIP] {filename} - {reason}")
    for filename, message in report.errors:
        print(f"  [ERROR] {filename} - {message}")

    print(f"\n{label} index generated: {report.written}")
    print(f"  Success: {len(report.ok)}, Errors: {report.error_count}")


def _cmd_index(args: argparse.Namespace, config: ModuleRulesConfig) -> int:
    if args.user or not args.project:
        _generate_index(config.user_dir, "User")
    if args.project or not args.user:
        _generate_index(config.project_dir_for(Path.cwd()), "Project")
    return 0


# ── detect ────────────────────────────────────────────────────


def _cmd_detect(args: argparse.Namespace, config: ModuleRulesConfig) -> int:
    from modrules.assembler import pack_references
    from modrules.catalog.loader import load_catalog, references_dir
    from modrules.catalog.merge import merge_catalogs
    from modrules.catalog.parser import parse_frontmatter
    from modrules.detection.evaluator import detect_modules

    cwd = Path.cwd()
    print("\nModule Rules Detection\n")
    print(f"Working directory: {cwd}")
    if args.prompt:
        print(f'Prompt: "{args.prompt}"')
    print()

    user_catalog = load_catalog(config.user_dir)
    project_dir = config.project_dir_for(cwd)
    project_catalog = load_catalog(project_dir)
    if user_catalog is None and project_catalog is None:
        print("No module rules configured.")
        print(f"  User: {references_dir(config.user_dir)} - not found")
        print(f"  Project: {references_dir(project_dir)} - not found")
        print("\nRun `modrules index` to generate reference indices.")
        return 0

    def _status(catalog: dict | None) -> str:
        return "not found" if catalog is None else f"{len(catalog)} modules"

    merged = merge_catalogs(user_catalog, project_catalog)
    print("Index Status:")
    print(f"  User: {_status(user_catalog)}")
    print(f"  Project: {_status(project_catalog)}")
    print(f"  Merged: {len(merged)} modules\n")

    detected = asyncio.run(detect_modules(merged, cwd, args.prompt, config.detection))
    if not detected:
        print("No modules detected for current context.")
        print("\nAvailable modules:")
        for name, entry in merged.items():
            print(f"  - {name}: {entry.description or 'No description'}")
        return 0

    print(f"Detected {len(detected)} module(s):\n")
    for result in detected:
        print(f"  [{result.priority}] {result.module}")
        print(f"      Path: {result.path}")
        print(f"      Triggers: {', '.join(result.triggers)}")
        print()

    packed = pack_references(detected, config.detection.max_total_tokens)
    print(
        f"Budget: {packed.tokens_used}/{config.detection.max_total_tokens} tokens, "
        f"loaded {len(packed.loaded)}, skipped {len(packed.skipped)}, failed {len(packed.failed)}\n"
    )

    print("Content preview (first 200 chars per module):\n")
    for result in detected:
        try:
            _, body = parse_frontmatter(Path(result.path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            print(f"  {result.module}: <unreadable: {exc}>")
            continue
        preview = body[:200].replace("\n", " ")
        print(f"  {result.module}: {preview}...")
    return 0


# ── list ──────────────────────────────────────────────────────


def _cmd_list(args: argparse.Namespace, config: ModuleRulesConfig) -> int:
    from modrules.catalog.loader import load_catalog

    print("\nModule Rules - Configured References\n")
    project_dir = config.project_dir_for(Path.cwd())
    levels = [
        ("User", config.user_dir, load_catalog(config.user_dir)),
        ("Project", project_dir, load_catalog(project_dir)),
    ]
    for label, base_dir, catalog in levels:
        if not catalog:
            print(f"{label}: No references configured\n")
            continue
        print(f"{label} ({base_dir / 'references'}):")
        for entry in catalog.values():
            status = "[DISABLED] " if entry.disabled else ""
            print(f"  {status}[{entry.priority}] {entry.name}")
            print(f"       {entry.description or 'No description'}")
            print(f"       Triggers: {entry.triggers.summary()}")
        print()
    return 0


# ── new ───────────────────────────────────────────────────────


def _cmd_new(args: argparse.Namespace, config: ModuleRulesConfig) -> int:
    from modrules.scaffold import new_reference

    base_dir = config.project_dir_for(Path.cwd()) if args.project else config.user_dir
    try:
        path = new_reference(
            base_dir,
            args.name,
            description=args.description,
            keywords=args.keyword,
            file_patterns=args.file_pattern,
            imports=args.imports,
            dependencies=args.dependency,
            priority=args.priority,
            max_tokens=args.max_tokens,
        )
    except (FileExistsError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Created {path}")
    print("Run `modrules index` to refresh the index.")
    return 0


# ── hook ──────────────────────────────────────────────────────


def _cmd_hook(args: argparse.Namespace) -> int:
    from modrules.hook import main as hook_main

    hook_main()
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modrules", description="Module rules reference loader")
    sub = parser.add_subparsers(dest="command")

    index = sub.add_parser("index", help="Generate index.json from reference documents")
    scope = index.add_mutually_exclusive_group()
    scope.add_argument("--user", action="store_true", help="User level only")
    scope.add_argument("--project", action="store_true", help="Project level only")
    index.set_defaults(func=_cmd_index)

    detect = sub.add_parser("detect", help="Detect modules for the current directory")
    detect.add_argument("--prompt", default=None, help="Prompt text for keyword matching")
    detect.set_defaults(func=_cmd_detect)

    listing = sub.add_parser("list", help="List configured references")
    listing.set_defaults(func=_cmd_list)

    new = sub.add_parser("new", help="Scaffold a reference document")
    new.add_argument("name")
    new.add_argument("--project", action="store_true", help="Create under the project level")
    new.add_argument("--description", default="")
    new.add_argument("--keyword", action="append", default=[])
    new.add_argument("--file-pattern", action="append", default=[])
    new.add_argument("--import", dest="imports", action="append", default=[])
    new.add_argument("--dependency", action="append", default=[])
    new.add_argument("--priority", type=int, default=50)
    new.add_argument("--max-tokens", type=int, default=2000)
    new.set_defaults(func=_cmd_new)

    hook = sub.add_parser("hook", help="Session-start hook: read payload on stdin")
    hook.set_defaults(func=_cmd_hook)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    if args.command == "hook":
        # Loads its own config inside the hook's error guard: always exit 0
        return _cmd_hook(args)

    config = load_config()
    _setup_logging(config.log_level)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
