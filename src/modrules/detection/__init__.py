"""Trigger evaluation: which catalog entries apply to this cwd and prompt."""
