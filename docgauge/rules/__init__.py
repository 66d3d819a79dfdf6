"""Rules package."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from docgauge.errors import InvalidRuleError
from docgauge.rules.api_tag import (
    ApiTagInclusionRule,
    ApiTagPresenceRule,
    ApiTagPrivateMethodRule,
    ApiTagProtectedMethodRule,
)
from docgauge.rules.base import DocumentRule, Rule, RuleConfig
from docgauge.rules.summary import (
    SummaryDelimiterRule,
    SummaryLengthRule,
    SummaryPresenceRule,
    SummarySingleLineRule,
)
from docgauge.rules.tags import (
    ExampleTagRule,
    ParamTagConsistencyRule,
    ParamTagPresenceRule,
    ReturnTagRule,
)

RULE_ID_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)?$")

__all__ = [
    "RULE_ID_RE",
    "Rule",
    "RuleConfig",
    "RuleInfo",
    "build_rules",
    "get_rule_spec",
    "list_rule_info",
    "rule_ids",
]


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing."""

    rule_id: str
    name: str
    description: str
    kinds: tuple[str, ...]
    options: dict[str, Any]


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], Rule]
    name: str
    description: str
    kinds: tuple[str, ...]
    option_defaults: dict[str, Any]


def _spec(rule_cls: type[DocumentRule]) -> _RuleSpec:
    return _RuleSpec(
        rule_id=rule_cls.rule_id,
        factory=rule_cls,
        name=rule_cls.__name__,
        description=(rule_cls.__doc__ or "").strip(),
        kinds=tuple(sorted(kind.value for kind in rule_cls.kinds)),
        option_defaults=dict(rule_cls.option_defaults),
    )


# Registration order is the canonical rule order for measurements and reports.
_RULE_SPECS: tuple[_RuleSpec, ...] = (
    _spec(SummaryPresenceRule),
    _spec(SummarySingleLineRule),
    _spec(SummaryLengthRule),
    _spec(SummaryDelimiterRule),
    _spec(ApiTagPresenceRule),
    _spec(ApiTagInclusionRule),
    _spec(ApiTagProtectedMethodRule),
    _spec(ApiTagPrivateMethodRule),
    _spec(ParamTagPresenceRule),
    _spec(ParamTagConsistencyRule),
    _spec(ReturnTagRule),
    _spec(ExampleTagRule),
)
_REGISTRY = {spec.rule_id: spec for spec in _RULE_SPECS}


def rule_ids() -> list[str]:
    """Return registered rule identities in canonical order."""
    return [spec.rule_id for spec in _RULE_SPECS]


def get_rule_spec(rule_id: str) -> _RuleSpec:
    """Look up a registered rule, failing with a descriptive error."""
    spec = _REGISTRY.get(rule_id)
    if spec is not None:
        return spec
    if not isinstance(rule_id, str) or not RULE_ID_RE.match(rule_id):
        raise InvalidRuleError(
            f"Invalid rule identity {rule_id!r}: rule identities are lowercase dotted names "
            "such as 'summary.presence'"
        )
    known = ", ".join(rule_ids())
    raise InvalidRuleError(f"Unknown rule {rule_id!r}. Expected one of: {known}")


def build_rules() -> list[Rule]:
    """Instantiate every registered rule in canonical order.

    Disabled rules are still built; they return no measurements when evaluated.
    """
    return [spec.factory() for spec in _RULE_SPECS]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all registered rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            description=spec.description,
            kinds=spec.kinds,
            options=dict(spec.option_defaults),
        )
        for spec in _RULE_SPECS
    ]
