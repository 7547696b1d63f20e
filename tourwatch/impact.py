"""
Tour impact analysis for Tourwatch.

Given the files a pull request changes and the loaded tours:
1. Impacted files: changed files referenced by some tour step
2. Impacted tours: tours with a step on an impacted file
3. Missing tour updates: impacted tours the pull request leaves untouched
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .tours import TourDefinition


@dataclass(frozen=True)
class ImpactResult:
    """Outcome of analyzing one pull request against the tours."""
    impacted_files: list[str] = field(default_factory=list)
    impacted_tours: list[str] = field(default_factory=list)  # discovery order
    missing_tour_updates: list[str] = field(default_factory=list)

    @property
    def has_impact(self) -> bool:
        return bool(self.impacted_tours)

    def as_outputs(self) -> dict[str, list[str]]:
        """The three action outputs, keyed by their names in action.yml."""
        return {
            "impactedFiles": list(self.impacted_files),
            "impactedTours": list(self.impacted_tours),
            "missingTourUpdates": list(self.missing_tour_updates),
        }


def analyze_impact(
    changed_files: Iterable[str],
    covered: set[str],
    tours: Iterable[TourDefinition],
) -> ImpactResult:
    """Compute which tours a set of changed files affects."""
    changed = set(changed_files)
    impacted_files = sorted(path for path in changed if path in covered)
    if not impacted_files:
        return ImpactResult()

    impacted = set(impacted_files)
    impacted_tours: list[str] = []
    seen: set[str] = set()
    for tour in tours:
        if tour.filename in seen:
            continue
        if any(step.file in impacted for step in tour.steps):
            impacted_tours.append(tour.filename)
            seen.add(tour.filename)

    missing = [name for name in impacted_tours if name not in changed]

    return ImpactResult(
        impacted_files=impacted_files,
        impacted_tours=impacted_tours,
        missing_tour_updates=missing,
    )
