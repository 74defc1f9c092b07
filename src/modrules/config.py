"""Configuration loading from environment variables and modrules.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "modrules.toml"

DEFAULT_SOURCE_EXTENSIONS = ["ts", "tsx", "js", "jsx", "py", "go", "rs", "java"]
DEFAULT_EXCLUDED_DIRS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "__pycache__",
    ".venv",
    "venv",
    "target",
    ".next",
    "coverage",
]


def real_home() -> Path:
    """Home directory, ignoring a snap sandbox HOME."""
    home = os.getenv("HOME", "")
    if "/snap/" in home:
        user = os.getenv("USER")
        if user:
            return Path("/home") / user
    return Path(home) if home else Path.home()


@dataclass
class DetectionSettings:
    """Per-call knobs for detection and assembly."""

    max_total_tokens: int = 8000
    source_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    excluded_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))
    max_file_matches: int = 3
    max_file_bytes: int = 1024 * 1024
    max_concurrency: int = 8


@dataclass
class ModuleRulesConfig:
    """Top-level configuration.

    project_dir stays None unless set in modrules.toml or the environment;
    callers then fall back to the working directory's own .claude/.
    """

    user_dir: Path = field(default_factory=lambda: real_home() / ".claude")
    project_dir: Path | None = None
    detection: DetectionSettings = field(default_factory=DetectionSettings)
    log_level: str = "WARNING"

    def project_dir_for(self, cwd: Path | str) -> Path:
        """Configured project dir, else <cwd>/.claude."""
        return self.project_dir or Path(cwd) / ".claude"


def load_config(config_path: Path | None = None) -> ModuleRulesConfig:
    """Load configuration from environment variables and optional modrules.toml.

    Priority: environment variables > modrules.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and the user-level .claude/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, real_home() / ".claude" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    detection_data = file_data.get("detection", {})
    defaults = DetectionSettings()

    user_dir = os.getenv("MODRULES_USER_DIR", file_data.get("user_dir"))
    project_dir = os.getenv("MODRULES_PROJECT_DIR", file_data.get("project_dir"))

    config = ModuleRulesConfig(
        detection=DetectionSettings(
            max_total_tokens=int(
                os.getenv(
                    "MODRULES_MAX_TOKENS",
                    detection_data.get("max_total_tokens", defaults.max_total_tokens),
                )
            ),
            source_extensions=list(
                detection_data.get("source_extensions", defaults.source_extensions)
            ),
            excluded_dirs=list(detection_data.get("excluded_dirs", defaults.excluded_dirs)),
            max_file_matches=int(
                detection_data.get("max_file_matches", defaults.max_file_matches)
            ),
            max_file_bytes=int(detection_data.get("max_file_bytes", defaults.max_file_bytes)),
            max_concurrency=int(
                os.getenv(
                    "MODRULES_MAX_CONCURRENCY",
                    detection_data.get("max_concurrency", defaults.max_concurrency),
                )
            ),
        ),
        log_level=os.getenv("MODRULES_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
    if user_dir:
        config.user_dir = Path(user_dir).expanduser()
    if project_dir:
        config.project_dir = Path(project_dir).expanduser()
    return config
