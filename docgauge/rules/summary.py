"""Summary line rules."""

from __future__ import annotations

from docgauge.document import Document
from docgauge.rules.base import DocumentRule, RuleConfig


class SummaryPresenceRule(DocumentRule):
    """The docstring summary should be specified."""

    rule_id = "summary.presence"
    description = "The summary should be specified"

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return not document.has_tag("see")

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.summary_text != "", self.description)]


class _NonEmptySummaryRule(DocumentRule):
    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return document.summary_text != ""


class SummarySingleLineRule(_NonEmptySummaryRule):
    """The docstring summary should be a single line."""

    rule_id = "summary.single_line"
    description = "The summary should be a single line"

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [("\n" not in document.summary_text, self.description)]


class SummaryLengthRule(_NonEmptySummaryRule):
    """The docstring summary should fit within the configured length."""

    rule_id = "summary.length"
    description = "The summary should be at most {max_length} characters"
    option_defaults = {"max_length": 79}

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        max_length = int(self.option(config, "max_length"))
        length = len(document.summary_text)
        return [
            (
                length <= max_length,
                f"{self.description.format(max_length=max_length)} (got {length})",
            )
        ]


class SummaryDelimiterRule(_NonEmptySummaryRule):
    """The docstring summary should end with sentence punctuation."""

    rule_id = "summary.delimiter"
    description = "The summary should end with one of {terminators!r}"
    option_defaults = {"terminators": ".!?"}

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        terminators = str(self.option(config, "terminators"))
        ok = document.summary_text[-1:] in set(terminators)
        return [(ok, self.description.format(terminators=terminators))]
