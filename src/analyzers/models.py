"""
Account Analysis Data Models.

Defines the analysis results produced from mined account data: language
statistics, per-repository content analyses, quality scores, contribution
estimates and the final account snapshot.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from miners.models import Organization, Repository


class AnalysisOptions(BaseModel):
    """Caller-supplied knobs for one account analysis run."""

    max_repos: int = Field(default=100, ge=1)
    include_organizations: bool = True
    analyze_content: bool = False
    max_content_analysis: int = Field(default=10, ge=0)
    content_concurrency: int = 4

    @field_validator("content_concurrency")
    def clamp_concurrency(cls, v: int) -> int:
        """Keep the content worker pool small: 1 to 5 workers."""
        return max(1, min(5, v))


class LanguageStat(BaseModel):
    """Share of repository bytes attributed to one language."""

    language: str
    bytes: int
    percentage: float


class ReadmeAnalysis(BaseModel):
    """README signals and rubric score."""

    exists: bool = False
    length: int = 0
    sections: List[str] = []
    has_badges: bool = False
    has_install_instructions: bool = False
    has_usage_examples: bool = False
    has_contributing: bool = False
    has_license: bool = False
    image_count: int = 0
    link_count: int = 0
    code_block_count: int = 0
    quality_score: int = 0


class PackageAnalysis(BaseModel):
    """Dependency manifest signals."""

    manifest: str
    exists: bool = True
    has_scripts: bool = False
    script_count: int = 0
    dependency_count: int = 0
    dev_dependency_count: int = 0
    has_linting: bool = False
    has_testing: bool = False
    has_type_checking: bool = False
    has_documentation: bool = False
    has_valid_license: bool = False
    outdated_dependencies: Optional[int] = None


class WorkflowAnalysis(BaseModel):
    """Signals extracted from one CI workflow file."""

    name: str
    file_name: str
    triggers: List[str] = []
    jobs: List[str] = []
    has_test_job: bool = False
    has_lint_job: bool = False
    has_build_job: bool = False
    has_deploy_job: bool = False
    uses_secrets: bool = False
    matrix_strategy: bool = False
    complexity: int = 0


class CodeStructureAnalysis(BaseModel):
    """Root layout signals of a repository."""

    file_count: int = 0
    directory_count: int = 0
    language_files: Dict[str, int] = {}
    has_tests: bool = False
    has_documentation: bool = False
    has_examples: bool = False
    has_config_files: bool = False
    organization_score: int = 0


class QualityBreakdown(BaseModel):
    """The seven weighted sub-scores of the composite quality score."""

    readme_quality: int = 0
    has_ci: int = 0
    has_tests: int = 0
    has_linting: int = 0
    dependency_health: int = 0
    community_files: int = 0
    recent_activity: int = 0


class QualityScore(BaseModel):
    """Composite quality score with derived dimensions, all 0-100."""

    overall: int = 0
    readme: int = 0
    code_organization: int = 0
    cicd: int = 0
    documentation: int = 0
    maintenance: int = 0
    community: int = 0
    breakdown: QualityBreakdown = Field(default_factory=QualityBreakdown)


class RepositoryContentAnalysis(BaseModel):
    """All content analyses of one repository."""

    repository: str
    readme: ReadmeAnalysis
    package: Optional[PackageAnalysis] = None
    workflows: List[WorkflowAnalysis] = []
    code_structure: CodeStructureAnalysis
    quality_score: QualityScore


class ContributionStats(BaseModel):
    """
    Heuristic activity figures.

    Commit, pull request, issue and streak counts are placeholders: the
    API surface used exposes no commit graph, so zero means "not measured".
    """

    total_commits: int = 0
    total_pull_requests: int = 0
    total_issues: int = 0
    total_repositories: int = 0
    total_stars: int = 0
    total_forks: int = 0
    streak_days: int = 0
    contributions_last_year: int = 0
    most_active_day: str = ""
    most_used_language: str = ""


class AccountSnapshot(BaseModel):
    """Complete, immutable output of one account analysis run."""

    model_config = ConfigDict(frozen=True)

    username: str
    name: str = ""
    bio: str = ""
    location: str = ""
    email: str = ""
    blog: str = ""
    company: str = ""
    profile_url: str = ""
    avatar_url: str = ""
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    public_gists: int = 0
    account_creation_date: Optional[datetime] = None
    last_activity_date: Optional[datetime] = None
    repositories: List[Repository] = []
    repository_content: List[RepositoryContentAnalysis] = []
    languages: List[LanguageStat] = []
    contributions: ContributionStats = Field(default_factory=ContributionStats)
    starred_repos: int = 0
    forked_repos: int = 0
    organizations: List[Organization] = []
    overall_quality_score: Optional[QualityScore] = None
    partial: bool = False
    partial_reasons: List[str] = []
    other: Dict[str, Any] = {}
