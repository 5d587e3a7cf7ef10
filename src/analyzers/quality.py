"""
Repository Quality Scoring Module.

Combines the content analyses of a repository into a weighted composite
quality score, and averages repository scores into an account-level score.
"""

import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from analyzers.models import (
    CodeStructureAnalysis,
    PackageAnalysis,
    QualityBreakdown,
    QualityScore,
    ReadmeAnalysis,
    WorkflowAnalysis,
)
from analyzers.rubric import QUALITY_WEIGHTS
from miners.models import Repository

SECONDS_PER_WEEK = 7 * 24 * 60 * 60
UNKNOWN_DEPENDENCY_HEALTH = 50


def _round(value: float) -> int:
    """Round half up, matching how scores are reported."""
    return int(math.floor(value + 0.5))


class QualityScorer:
    """
    Scores repositories from their content analyses.

    Attributes:
        weights (Dict[str, float]): Weight per breakdown field
    """

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the scorer.

        Args:
            weights (Optional[Dict[str, float]]): Composite weights, defaults to QUALITY_WEIGHTS
            now (Optional[Callable[[], datetime]]): Clock used for recency
        """
        self.weights = weights or QUALITY_WEIGHTS
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _recent_activity(self, repository: Repository) -> int:
        if repository.updated_at is None:
            return 0
        elapsed = (self._now() - repository.updated_at).total_seconds()
        weeks = math.floor(elapsed / SECONDS_PER_WEEK)
        return max(0, min(100, 100 - weeks))

    @staticmethod
    def _dependency_health(package: Optional[PackageAnalysis]) -> int:
        if package is None:
            return UNKNOWN_DEPENDENCY_HEALTH
        return max(0, 100 - (package.outdated_dependencies or 0) * 10)

    def breakdown(
        self,
        repository: Repository,
        readme: ReadmeAnalysis,
        package: Optional[PackageAnalysis],
        workflows: List[WorkflowAnalysis],
        structure: CodeStructureAnalysis,
    ) -> QualityBreakdown:
        return QualityBreakdown(
            readme_quality=readme.quality_score,
            has_ci=100 if workflows else 0,
            has_tests=100 if structure.has_tests else 0,
            has_linting=100 if package is not None and package.has_linting else 0,
            dependency_health=self._dependency_health(package),
            community_files=(50 if readme.has_contributing else 0)
            + (50 if readme.has_license else 0),
            recent_activity=self._recent_activity(repository),
        )

    def score_repository(
        self,
        repository: Repository,
        readme: ReadmeAnalysis,
        package: Optional[PackageAnalysis],
        workflows: List[WorkflowAnalysis],
        structure: CodeStructureAnalysis,
    ) -> QualityScore:
        """
        Score one repository.

        Args:
            repository (Repository): Repository metadata
            readme (ReadmeAnalysis): README analysis
            package (Optional[PackageAnalysis]): Manifest analysis, None when absent
            workflows (List[WorkflowAnalysis]): Workflow analyses
            structure (CodeStructureAnalysis): Root layout analysis

        Returns:
            QualityScore: Weighted composite plus derived dimensions
        """
        breakdown = self.breakdown(repository, readme, package, workflows, structure)
        values = breakdown.model_dump()
        overall = sum(values[key] * weight for key, weight in self.weights.items())

        if structure.has_documentation:
            documentation = 80
        elif readme.exists:
            documentation = 60
        else:
            documentation = 0

        return QualityScore(
            overall=_round(overall),
            readme=readme.quality_score,
            code_organization=structure.organization_score,
            cicd=_round(sum(w.complexity for w in workflows) / len(workflows))
            if workflows
            else 0,
            documentation=documentation,
            maintenance=_round(
                (breakdown.recent_activity + breakdown.dependency_health) / 2
            ),
            community=_round(
                (breakdown.community_files + (20 if repository.stars > 10 else 0)) / 2
            ),
            breakdown=breakdown,
        )

    @staticmethod
    def score_account(scores: List[QualityScore]) -> Optional[QualityScore]:
        """
        Average repository scores into an account-level score.

        Only repositories that completed content analysis should be passed;
        they alone form the denominator.

        Args:
            scores (List[QualityScore]): Scores of analyzed repositories

        Returns:
            Optional[QualityScore]: Field-wise rounded means, None when empty
        """
        if not scores:
            return None

        count = len(scores)

        def mean(field: str) -> int:
            return _round(sum(getattr(score, field) for score in scores) / count)

        def mean_breakdown(field: str) -> int:
            return _round(sum(getattr(score.breakdown, field) for score in scores) / count)

        return QualityScore(
            overall=mean("overall"),
            readme=mean("readme"),
            code_organization=mean("code_organization"),
            cicd=mean("cicd"),
            documentation=mean("documentation"),
            maintenance=mean("maintenance"),
            community=mean("community"),
            breakdown=QualityBreakdown(
                **{field: mean_breakdown(field) for field in QualityBreakdown.model_fields}
            ),
        )
