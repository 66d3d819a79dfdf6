"""Signature-aware tag rules for methods."""

from __future__ import annotations

from docgauge.document import Document, EntityKind, Visibility
from docgauge.rules.base import DocumentRule, RuleConfig

_METHODS = frozenset({EntityKind.METHOD})


class _SignatureRule(DocumentRule):
    kinds = _METHODS

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return document.signature is not None


class ParamTagPresenceRule(_SignatureRule):
    """Every parameter should have a ``:param:`` tag."""

    rule_id = "param_tag.presence"
    description = "The parameter {name!r} should have a :param: tag"

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        documented = {tag.param for tag in document.tags_named("param")}
        return [
            (name in documented, self.description.format(name=name))
            for name in _parameters(document)
        ]


class ParamTagConsistencyRule(_SignatureRule):
    """``:param:`` and ``:type:`` tags should name real parameters."""

    rule_id = "param_tag.consistency"
    description = "The :{tag}: tag names {name!r}, which is not a parameter"

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        parameters = set(_parameters(document))
        return [
            (
                tag.param in parameters,
                self.description.format(tag=tag.name, name=tag.param),
            )
            for tag in document.tags_named("param", "type")
        ]


class ReturnTagRule(_SignatureRule):
    """Methods returning a value should document it."""

    rule_id = "return_tag"
    description = "The method should have a :returns: or :rtype: tag"

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        return super().applies_to(document, config) and bool(
            document.signature and document.signature.returns_value
        )

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(bool(document.tags_named("return", "rtype")), self.description)]


class ExampleTagRule(DocumentRule):
    """Public api methods should carry an example."""

    rule_id = "example_tag"
    description = "The public method should have an example"
    kinds = _METHODS
    option_defaults = {"skip_private": True}

    def applies_to(self, document: Document, config: RuleConfig) -> bool:
        if not self.option(config, "skip_private"):
            return True
        api = document.api
        return document.visibility is Visibility.PUBLIC and api in {None, "public"}

    def check(self, document: Document, config: RuleConfig) -> list[tuple[bool, str]]:
        return [(document.has_tag("example"), self.description)]


def _parameters(document: Document) -> tuple[str, ...]:
    return document.signature.parameters if document.signature is not None else ()
