"""modrules — detect and load reference documentation for a coding session."""

from modrules.engine import detect_and_load_module_rules, load_module_rules

__all__ = ["detect_and_load_module_rules", "load_module_rules"]
