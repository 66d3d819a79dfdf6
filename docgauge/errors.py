"""Error types raised by docgauge."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or validated."""


class InvalidRuleError(ConfigError):
    """Raised when a rule identity does not match any registered rule."""


class ExtractionError(RuntimeError):
    """Raised when a source file cannot be read or parsed."""
