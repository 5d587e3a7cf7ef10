"""
Account Snapshot Assembly Module.

Merges the outputs of every pipeline stage into one ``AccountSnapshot``.
Optional parts default to explicit empty values, and upstream emails and
URLs are checked without ever rejecting the snapshot.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

from analyzers.models import (
    AccountSnapshot,
    AnalysisOptions,
    ContributionStats,
    LanguageStat,
    QualityScore,
    RepositoryContentAnalysis,
)
from analyzers.plugins.capability_rules import CAPABILITY_RULES_VERSION
from analyzers.rubric import RUBRIC_VERSION
from config import logger
from miners.models import AccountProfile, Organization, RepositoryListing

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

API_VERSION = "v3"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


class SnapshotAssembler:
    """Builds the immutable snapshot of one analysis run."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now

    def _validate(self, profile: AccountProfile) -> None:
        """Log malformed upstream values; never rejects them."""
        if profile.email and not is_valid_email(profile.email):
            logger.warning(
                {"message": "Invalid email format", "account": profile.username, "email": profile.email}
            )
        if profile.profile_url and not is_valid_url(profile.profile_url):
            logger.warning(
                {"message": "Invalid profile URL", "account": profile.username, "url": profile.profile_url}
            )
        if profile.blog and not is_valid_url(profile.blog):
            logger.warning(
                {"message": "Invalid blog URL", "account": profile.username, "url": profile.blog}
            )

    def assemble(
        self,
        profile: AccountProfile,
        listing: RepositoryListing,
        languages: List[LanguageStat],
        contributions: ContributionStats,
        options: AnalysisOptions,
        organizations: Optional[List[Organization]] = None,
        repository_content: Optional[List[RepositoryContentAnalysis]] = None,
        overall_quality_score: Optional[QualityScore] = None,
        cancelled: bool = False,
    ) -> AccountSnapshot:
        """
        Merge all stage outputs into a snapshot.

        Args:
            profile (AccountProfile): Account profile
            listing (RepositoryListing): Repository listing with truncation flags
            languages (List[LanguageStat]): Language statistics
            contributions (ContributionStats): Contribution estimate
            options (AnalysisOptions): Options the run used
            organizations (Optional[List[Organization]]): Organizations, if fetched
            repository_content (Optional[List[RepositoryContentAnalysis]]): Content analyses
            overall_quality_score (Optional[QualityScore]): Account-level score
            cancelled (bool): Whether the run was cancelled

        Returns:
            AccountSnapshot: The assembled snapshot, flagged partial when the
                listing was truncated or the run was cancelled
        """
        self._validate(profile)

        repositories = listing.repositories
        repository_content = repository_content or []

        partial_reasons = []
        if listing.truncated:
            partial_reasons.append("repository_listing_truncated")
        if cancelled or listing.cancelled:
            partial_reasons.append("cancelled")

        processed_at = self.now or datetime.now(timezone.utc)

        return AccountSnapshot(
            **profile.model_dump(),
            repositories=repositories,
            repository_content=repository_content,
            languages=languages,
            contributions=contributions,
            starred_repos=sum(repo.stars for repo in repositories),
            forked_repos=len([repo for repo in repositories if repo.is_fork]),
            organizations=organizations or [],
            overall_quality_score=overall_quality_score,
            partial=bool(partial_reasons),
            partial_reasons=partial_reasons,
            other={
                "processing_date": processed_at.isoformat(),
                "api_version": API_VERSION,
                "processing_options": options.model_dump(),
                "content_analysis_enabled": options.analyze_content,
                "repositories_analyzed": len(repository_content),
                "rubric_version": RUBRIC_VERSION,
                "capability_rules_version": CAPABILITY_RULES_VERSION,
            },
        )
