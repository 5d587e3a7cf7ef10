"""
Contribution Estimation Module.

Heuristic activity figures derived from the repository listing. The REST
surface used exposes no commit graph, so commit, pull request, issue and
streak counts stay zero placeholders.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from analyzers.models import ContributionStats, LanguageStat
from miners.models import Repository

ACTIVITY_WINDOW = timedelta(days=365)


def estimate_contributions(
    repositories: List[Repository],
    language_stats: List[LanguageStat],
    now: Optional[datetime] = None,
) -> ContributionStats:
    """
    Estimate contribution statistics.

    Args:
        repositories (List[Repository]): Listed repositories
        language_stats (List[LanguageStat]): Sorted language statistics
        now (Optional[datetime]): Reference time, defaults to the current UTC time

    Returns:
        ContributionStats: Totals plus the count of repositories updated
            within the last 365 days as the activity proxy
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - ACTIVITY_WINDOW

    recently_updated = len(
        [repo for repo in repositories if repo.updated_at and repo.updated_at > cutoff]
    )

    return ContributionStats(
        total_repositories=len(repositories),
        total_stars=sum(repo.stars for repo in repositories),
        total_forks=sum(repo.forks for repo in repositories),
        contributions_last_year=recently_updated,
        most_used_language=language_stats[0].language if language_stats else "",
    )
