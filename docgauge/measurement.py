"""Measurement records, aggregation and report rendering."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from docgauge.document import Document, Location


@dataclass(frozen=True, slots=True)
class Measurement:
    """Result of one rule sub-check applied to one document."""

    rule_id: str
    identifier: str
    ok: bool
    description: str = ""
    weight: int = 1
    location: Location = Location("<unknown>", 0)

    @classmethod
    def for_document(
        cls,
        document: Document,
        *,
        rule_id: str,
        ok: bool,
        description: str,
        weight: int = 1,
    ) -> Measurement:
        """Build a measurement; passing measurements carry no description."""
        return cls(
            rule_id=rule_id,
            identifier=document.identifier,
            ok=ok,
            description="" if ok else description,
            weight=weight,
            location=document.location,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "identifier": self.identifier,
            "ok": self.ok,
            "description": self.description,
            "weight": self.weight,
            "path": self.location.path,
            "line": self.location.line,
        }


class MeasurementSet:
    """Ordered collection of measurements with weighted coverage."""

    def __init__(self, measurements: Iterable[Measurement] = ()) -> None:
        self._measurements: list[Measurement] = list(measurements)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(self._measurements)

    def __len__(self) -> int:
        return len(self._measurements)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MeasurementSet):
            return NotImplemented
        return self._measurements == other._measurements

    def append(self, measurement: Measurement) -> None:
        self._measurements.append(measurement)

    def extend(self, measurements: Iterable[Measurement]) -> None:
        self._measurements.extend(measurements)

    @property
    def total(self) -> int:
        return len(self._measurements)

    @property
    def successful(self) -> int:
        return sum(1 for item in self._measurements if item.ok)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def total_weight(self) -> int:
        return sum(item.weight for item in self._measurements)

    @property
    def passed_weight(self) -> int:
        return sum(item.weight for item in self._measurements if item.ok)

    @property
    def coverage(self) -> int:
        """Weighted pass percentage, rounded half up.

        An empty set is vacuously covered and reports 100. A set whose
        measurements all carry weight 0 has nothing to weigh and is treated the
        same way, so disabling a rule by weight never fails the gate.
        """
        total = self.total_weight
        if total <= 0:
            return 100
        return _clamp(round_half_up(100 * self.passed_weight, total))

    def failures(self) -> list[Measurement]:
        return [item for item in self._measurements if not item.ok]

    def render(
        self,
        *,
        threshold: int,
        require_exact_threshold: bool = True,
        verbose: bool = True,
    ) -> str:
        """Render failing measurements grouped by location, then the summary lines."""
        lines: list[str] = []
        for location, identifier, group in _group_failures(self.failures()):
            lines.append(f"{location}: {identifier}")
            for item in group:
                lines.append(f"  {item.rule_id}: {item.description}")
        if lines:
            lines.append("")

        coverage = self.coverage
        if verbose:
            lines.append(
                f"Total: {self.total} Successful: {self.successful} Failed: {self.failed}"
            )
        lines.append(f"Coverage: {coverage}% (threshold: {threshold}%)")
        lines.append(threshold_message(coverage, threshold, require_exact_threshold))
        return "\n".join(lines) + "\n"

    def to_dict(self, *, threshold: int, require_exact_threshold: bool = True) -> dict[str, Any]:
        coverage = self.coverage
        return {
            "coverage": coverage,
            "threshold": threshold,
            "require_exact_threshold": require_exact_threshold,
            "passed": threshold_met(coverage, threshold, require_exact_threshold),
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "measurements": [item.to_dict() for item in self._measurements],
        }


def threshold_met(coverage: int, threshold: int, require_exact_threshold: bool) -> bool:
    """Exact mode requires equality; otherwise the threshold is a floor."""
    if require_exact_threshold:
        return coverage == threshold
    return coverage >= threshold


def threshold_message(coverage: int, threshold: int, require_exact_threshold: bool) -> str:
    if threshold_met(coverage, threshold, require_exact_threshold):
        return "Threshold met."
    if coverage < threshold:
        return f"Coverage {coverage}% is below threshold {threshold}%."
    return (
        f"Coverage {coverage}% is above threshold {threshold}%. "
        f"Raise the threshold to {coverage}."
    )


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding .5 upward."""
    return (2 * numerator + denominator) // (2 * denominator)


def _group_failures(
    failures: list[Measurement],
) -> list[tuple[Location, str, list[Measurement]]]:
    groups: dict[tuple[Location, str], list[Measurement]] = {}
    for item in failures:
        groups.setdefault((item.location, item.identifier), []).append(item)
    return [(location, identifier, group) for (location, identifier), group in groups.items()]


def _clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))
