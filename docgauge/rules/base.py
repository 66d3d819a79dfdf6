"""Base rule protocol and per-rule configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

from docgauge.document import Document, EntityKind
from docgauge.measurement import Measurement


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Configuration slice for a single rule."""

    enabled: bool = True
    weight: int = 1
    exclude: tuple[str, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def excludes(self, identifier: str) -> bool:
        """Return True when the identifier or one of its owners is excluded."""
        return any(
            identifier == item or identifier.startswith(f"{item}.") for item in self.exclude
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "weight": self.weight,
            "exclude": list(self.exclude),
            **self.options,
        }


class Rule(Protocol):
    """Protocol for documentation rules."""

    rule_id: str

    def evaluate(self, document: Document, config: RuleConfig) -> list[Measurement]:
        """Evaluate one document and return measurements in sub-check order."""


class DocumentRule:
    """Shared evaluation flow for the built-in rules.

    Subclasses declare ``rule_id``, ``description`` and the entity ``kinds``
    they apply to, and implement :meth:`check`. Disabled rules, excluded
    identifiers and inapplicable documents produce no measurements.
    """

    rule_id: ClassVar[str] = ""
    description: ClassVar[str] = ""
    kinds: ClassVar[frozenset[EntityKind]] = frozenset(EntityKind)
    option_defaults: ClassVar[dict[str, Any]] = {}

    def evaluate(self, document: Document, config: RuleConfig) -> list[Measurement]:
        if not config.enabled or config.excludes(document.identifier):
            return []
        if document.kind not in self.kinds or not self.applies_to(document, config):
            return []
        return [
            Measurement.for_document(
                document,
                rule_id=self.rule_id,
                ok=ok,
                description=description,
                weight=config.weight,
            )
            for ok, description in self.check(document, config)
        ]

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return True

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        """Return ``(ok, failure description)`` pairs, one per sub-check."""
        raise NotImplementedError

    def option(self, config: RuleConfig, name: str) -> Any:
        return config.option(name, self.option_defaults[name])
