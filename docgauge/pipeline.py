"""Measurement orchestration."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from docgauge.config import Config
from docgauge.document import Document
from docgauge.extractor import Extractor, PythonExtractor
from docgauge.measurement import MeasurementSet, threshold_met
from docgauge.rules import build_rules
from docgauge.rules.base import Rule

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunResult:
    """Outcome of a measurement run."""

    measurements: MeasurementSet
    coverage: int
    threshold: int
    passed: bool
    report: str


def measure_documents(
    documents: Iterable[Document],
    config: Config,
    rules: list[Rule] | None = None,
) -> MeasurementSet:
    """Run every rule against every document in canonical order.

    Rule configuration is resolved before evaluation so that an invalid rule
    identity aborts the run before any measurement is taken.
    """
    active_rules = rules if rules is not None else build_rules()
    rule_configs = [(rule, config.for_rule(rule.rule_id)) for rule in active_rules]

    measurements = MeasurementSet()
    for document in documents:
        for rule, rule_config in rule_configs:
            measurements.extend(rule.evaluate(document, rule_config))
    logger.debug("Produced %d measurements", len(measurements))
    return measurements


def measure(
    config: Config,
    extractor: Extractor | None = None,
    rules: list[Rule] | None = None,
) -> MeasurementSet:
    """Extract documents for the configured paths and measure them."""
    source = extractor if extractor is not None else PythonExtractor()
    documents = source.extract(config.path)
    return measure_documents(documents, config, rules=rules)


def run(
    config: Config,
    extractor: Extractor | None = None,
    rules: list[Rule] | None = None,
) -> RunResult:
    """Measure, write the report to the configured output, and decide the threshold."""
    measurements = measure(config, extractor=extractor, rules=rules)
    report = measurements.render(
        threshold=config.threshold,
        require_exact_threshold=config.require_exact_threshold,
        verbose=config.verbose,
    )
    config.output.write(report)
    logger.debug("Wrote report to %s", config.output)

    coverage = measurements.coverage
    return RunResult(
        measurements=measurements,
        coverage=coverage,
        threshold=config.threshold,
        passed=threshold_met(coverage, config.threshold, config.require_exact_threshold),
        report=report,
    )
