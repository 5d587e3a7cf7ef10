"""
Scoring Rubrics.

Declarative signal -> points tables used by the content analyzers and the
quality scorer. Analyzers only compute signals; the point values and caps
live here so scoring policy can be audited and tested on its own.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple, Union

RUBRIC_VERSION = "1"

Signal = Union[bool, int]


@dataclass(frozen=True)
class RubricItem:
    """
    One rubric line.

    Attributes:
        signal (str): Signal name looked up in the analyzer's signal map
        points (int): Points for a truthy signal, or per unit when ``per_unit``
        per_unit (bool): Multiply ``points`` by the signal's integer value
    """

    signal: str
    points: int
    per_unit: bool = False


@dataclass(frozen=True)
class Rubric:
    """Additive rubric with an explicit cap; scores are clamped to [0, cap]."""

    name: str
    items: Tuple[RubricItem, ...]
    cap: int = 100

    @property
    def signals(self) -> Tuple[str, ...]:
        return tuple(item.signal for item in self.items)

    def score(self, signals: Mapping[str, Signal]) -> int:
        total = 0
        for item in self.items:
            value = signals.get(item.signal, 0)
            if item.per_unit:
                total += item.points * int(value)
            elif value:
                total += item.points
        return max(0, min(self.cap, total))


README_RUBRIC = Rubric(
    name="readme",
    items=(
        RubricItem("length_over_500", 5),
        RubricItem("length_over_1500", 5),
        RubricItem("length_over_3000", 10),
        RubricItem("length_under_10000", 5),
        RubricItem("three_or_more_sections", 10),
        RubricItem("has_badges", 10),
        RubricItem("has_install_instructions", 15),
        RubricItem("has_usage_examples", 15),
        RubricItem("has_contributing", 10),
        RubricItem("has_license", 5),
        RubricItem("has_images", 5),
        RubricItem("two_or_more_code_blocks", 5),
    ),
)

WORKFLOW_RUBRIC = Rubric(
    name="workflow",
    items=(
        RubricItem("job_count", 10, per_unit=True),
        RubricItem("trigger_count", 5, per_unit=True),
        RubricItem("has_test_job", 15),
        RubricItem("has_lint_job", 10),
        RubricItem("has_build_job", 10),
        RubricItem("has_deploy_job", 15),
        RubricItem("uses_secrets", 10),
        RubricItem("matrix_strategy", 20),
    ),
)

STRUCTURE_RUBRIC = Rubric(
    name="structure",
    items=(
        RubricItem("has_tests", 20),
        RubricItem("has_documentation", 10),
        RubricItem("has_examples", 10),
        RubricItem("three_or_more_directories", 10),
        RubricItem("has_config_files", 10),
        RubricItem("balanced_root_file_count", 10),
        RubricItem("two_or_more_extensions", 10),
        RubricItem("moderate_extension_diversity", 10),
    ),
)

# Weights of the composite repository quality score; they sum to 1.0
QUALITY_WEIGHTS: Dict[str, float] = {
    "readme_quality": 0.25,
    "has_ci": 0.15,
    "has_tests": 0.15,
    "has_linting": 0.10,
    "dependency_health": 0.10,
    "community_files": 0.15,
    "recent_activity": 0.10,
}
