"""
Account Analysis Module.

Coordinates the analysis of one GitHub account: profile and repository
listing first, then organizations, language and contribution statistics,
and optionally content analysis with quality scoring. The outcome is a
complete snapshot, a snapshot flagged partial, or one fatal error.
"""

import asyncio
from typing import List, Optional

from analyzers.content import RepositoryContentAnalyzer
from analyzers.contributions import estimate_contributions
from analyzers.languages import calculate_language_stats
from analyzers.models import AccountSnapshot, AnalysisOptions, RepositoryContentAnalysis
from analyzers.quality import QualityScorer
from analyzers.snapshot import SnapshotAssembler
from config import logger
from miners.base import AccountMiner
from miners.errors import AnalysisCancelledError
from miners.github_miner import GitHubMiner, extract_handle
from miners.models import Organization
from miners.transport import GitHubTransport


class AccountAnalyzer:
    """
    Runs the account analysis pipeline.

    Each call to ``analyze`` is independent: no state is kept between runs.

    The cancellation event reaches the transport only when the miner is
    built per run. An injected miner owns its transport, so the event is
    then checked between pipeline stages and in-flight requests finish;
    pass the same event to that miner's ``GitHubTransport`` to abort them.

    Attributes:
        miner (Optional[AccountMiner]): Miner to use; when None a GitHub miner
            with a fresh transport bound to the run's cancellation event is
            built per run
        scorer (QualityScorer): Repository quality scorer
        assembler (SnapshotAssembler): Snapshot assembler
    """

    def __init__(
        self,
        miner: Optional[AccountMiner] = None,
        scorer: Optional[QualityScorer] = None,
        assembler: Optional[SnapshotAssembler] = None,
    ):
        self.miner = miner
        self.scorer = scorer or QualityScorer()
        self.assembler = assembler or SnapshotAssembler()

    def _miner_for_run(self, cancel_event: Optional[asyncio.Event]) -> AccountMiner:
        if self.miner is not None:
            return self.miner
        return GitHubMiner(GitHubTransport.from_settings(cancel_event=cancel_event))

    async def analyze(
        self,
        account: str,
        options: Optional[AnalysisOptions] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AccountSnapshot:
        """
        Analyze one account.

        Args:
            account (str): Account handle or GitHub profile URL
            options (Optional[AnalysisOptions]): Run options, defaults apply when None
            cancel_event (Optional[asyncio.Event]): External cancellation signal

        Returns:
            AccountSnapshot: Snapshot of the account, ``partial`` when the
                repository listing was truncated or the run was cancelled

        Raises:
            InvalidHandleError: If the input is not a handle or profile URL
            AccountNotFoundError: If the account does not exist
            AnalysisCancelledError: If cancelled before the profile was fetched
            TransportError: If the profile request fails
        """
        options = options or AnalysisOptions()
        handle = extract_handle(account)

        def is_cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        if is_cancelled():
            raise AnalysisCancelledError("analysis cancelled before start")

        logger.info({"message": "Starting account analysis", "account": handle})
        miner = self._miner_for_run(cancel_event)

        profile = await miner.fetch_profile(handle)
        listing = await miner.list_repositories(handle, options.max_repos)
        cancelled = listing.cancelled or is_cancelled()

        organizations: List[Organization] = []
        if options.include_organizations and not cancelled:
            try:
                organizations = await miner.list_organizations(handle)
            except AnalysisCancelledError:
                cancelled = True

        repository_content: List[RepositoryContentAnalysis] = []
        if options.analyze_content and listing.repositories and not cancelled:
            content_analyzer = RepositoryContentAnalyzer(
                miner, self.scorer, options.content_concurrency
            )
            selected = content_analyzer.select_repositories(
                listing.repositories, options.max_content_analysis
            )
            result = await content_analyzer.analyze_repositories(selected)
            repository_content = result.analyses
            cancelled = cancelled or result.cancelled

        languages = calculate_language_stats(listing.repositories)
        contributions = estimate_contributions(listing.repositories, languages)
        overall_quality_score = self.scorer.score_account(
            [analysis.quality_score for analysis in repository_content]
        )

        snapshot = self.assembler.assemble(
            profile=profile,
            listing=listing,
            languages=languages,
            contributions=contributions,
            options=options,
            organizations=organizations,
            repository_content=repository_content,
            overall_quality_score=overall_quality_score,
            cancelled=cancelled,
        )

        logger.info(
            {
                "message": "Account analysis completed",
                "account": handle,
                "repositories": len(snapshot.repositories),
                "repositories_analyzed": len(repository_content),
                "partial": snapshot.partial,
                "partial_reasons": snapshot.partial_reasons,
            }
        )
        return snapshot
