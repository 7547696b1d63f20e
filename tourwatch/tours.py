"""
Tour document loading for Tourwatch.

A tour is a JSON document (CodeTour format) with a ``steps`` array; each
step may point at a source file via its ``file`` field. Tours are found by
walking the tour directory recursively and picking files ending with the
tour suffix.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .config import TOUR_SUFFIX
from .errors import DirectoryReadError, LoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TourStep:
    """One step of a tour. Only ``file`` matters here; the rest is kept as-is."""
    file: str | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TourDefinition:
    """A parsed tour document, identified by its on-disk path."""
    filename: str
    steps: tuple[TourStep, ...] = ()

    @property
    def files(self) -> set[str]:
        return {step.file for step in self.steps if step.file is not None}


def load_tours(root: str | Path, suffix: str = TOUR_SUFFIX) -> list[TourDefinition]:
    """
    Load every tour under ``root``.

    Directories are walked depth-first with entries in lexical order, so
    the result is stable across runs.

    Raises:
        DirectoryReadError: ``root`` or a nested directory cannot be listed
        LoadError: a tour file cannot be read or is not a valid tour
    """
    tours = [parse_tour(path) for path in _find_tour_files(Path(root), suffix)]
    logger.info("Loaded %d tour(s) from %s", len(tours), root)
    return tours


def _find_tour_files(directory: Path, suffix: str) -> list[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise DirectoryReadError(directory.as_posix(), e) from e

    found: list[Path] = []
    for entry in entries:
        if entry.is_dir():
            found.extend(_find_tour_files(entry, suffix))
        elif entry.name.endswith(suffix):
            found.append(entry)
    return found


def parse_tour(path: Path) -> TourDefinition:
    """Read and parse a single tour file."""
    filename = path.as_posix()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(filename, str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(filename, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise LoadError(filename, "document is not a JSON object")

    raw_steps = data.get("steps", [])
    if not isinstance(raw_steps, list):
        raise LoadError(filename, "'steps' is not an array")

    steps = []
    for index, raw_step in enumerate(raw_steps):
        if not isinstance(raw_step, dict):
            raise LoadError(filename, f"step {index} is not an object")
        step_file = raw_step.get("file")
        if step_file is not None and not isinstance(step_file, str):
            raise LoadError(filename, f"step {index} has a non-string 'file'")
        steps.append(TourStep(file=step_file, raw=raw_step))

    logger.debug("Parsed %s (%d steps)", filename, len(steps))
    return TourDefinition(filename=filename, steps=tuple(steps))


def covered_files(tours: Iterable[TourDefinition]) -> set[str]:
    """All distinct source files referenced by any step of any tour."""
    covered: set[str] = set()
    for tour in tours:
        covered |= tour.files
    return covered
