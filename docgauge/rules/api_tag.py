"""``:api:`` tag rules."""

from __future__ import annotations

from docgauge.document import Document, EntityKind, Visibility
from docgauge.rules.base import DocumentRule, RuleConfig

API_VALUES = ("public", "semipublic", "private")


class ApiTagPresenceRule(DocumentRule):
    """Every entity should declare its api level."""

    rule_id = "api_tag.presence"
    description = "The :api: tag should be specified"

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.has_tag("api"), self.description)]


class _TaggedRule(DocumentRule):
    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return document.api is not None


class ApiTagInclusionRule(_TaggedRule):
    """The api tag must name a known api level."""

    rule_id = "api_tag.inclusion"
    description = "The :api: tag must be either public, semipublic or private"

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.api in API_VALUES, f"{self.description} (got {document.api!r})")]


class ApiTagProtectedMethodRule(_TaggedRule):
    """Protected methods should not be part of the public api."""

    rule_id = "api_tag.protected_method"
    description = "A protected method should have an :api: tag of semipublic or private"
    kinds = frozenset({EntityKind.METHOD})

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return document.visibility is Visibility.PROTECTED and super().applies_to(
            document, config
        )

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.api in {"semipublic", "private"}, self.description)]


class ApiTagPrivateMethodRule(_TaggedRule):
    """Private methods should be tagged private."""

    rule_id = "api_tag.private_method"
    description = "A private method should have an :api: tag of private"
    kinds = frozenset({EntityKind.METHOD})

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return document.visibility is Visibility.PRIVATE and super().applies_to(document, config)

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.api == "private", self.description)]
