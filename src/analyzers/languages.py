"""
Language Statistics Module.

Aggregates platform-reported primary languages across an account's
repositories, weighting each repository by its reported size.
"""

from typing import List

import pandas as pd

from analyzers.models import LanguageStat
from miners.models import Repository


def calculate_language_stats(repositories: List[Repository]) -> List[LanguageStat]:
    """
    Calculate the share of repository bytes per primary language.

    Only repositories with a language and a positive size count. Percentages
    sum to 100 whenever at least one repository qualifies.

    Args:
        repositories (List[Repository]): Listed repositories

    Returns:
        List[LanguageStat]: Stats sorted by percentage descending, stable on
            ties (first-seen language first); empty if nothing qualifies
    """
    rows = [
        {"language": repo.language, "bytes": repo.size}
        for repo in repositories
        if repo.language and repo.size > 0
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    totals = df.groupby("language", sort=False)["bytes"].sum().reset_index()
    total_bytes = totals["bytes"].sum()
    if total_bytes <= 0:
        return []

    totals["percentage"] = totals["bytes"] / total_bytes * 100
    totals = totals.sort_values("percentage", ascending=False, kind="stable")

    return [
        LanguageStat(
            language=row.language,
            bytes=int(row.bytes),
            percentage=float(row.percentage),
        )
        for row in totals.itertuples(index=False)
    ]
