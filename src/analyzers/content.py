"""
Repository Content Analysis Module.

Runs the README, manifest, workflow and structure analyses for a capped
subset of an account's repositories and scores each repository. A bounded
pool of workers analyzes repositories concurrently; all workers share the
miner's transport, and therefore one rate-limit backoff state.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from analyzers.models import (
    CodeStructureAnalysis,
    PackageAnalysis,
    ReadmeAnalysis,
    RepositoryContentAnalysis,
    WorkflowAnalysis,
)
from analyzers.plugins.manifest import MANIFEST_PARSERS, analyze_manifest
from analyzers.plugins.readme import README_VARIANTS, analyze_readme
from analyzers.plugins.structure import analyze_structure
from analyzers.plugins.workflow import WORKFLOWS_DIR, analyze_workflow, is_workflow_file
from analyzers.quality import QualityScorer
from config import logger
from miners.base import AccountMiner
from miners.errors import AnalysisCancelledError
from miners.models import Repository


@dataclass
class ContentAnalysisResult:
    """Outcome of analyzing a batch of repositories."""

    analyses: List[RepositoryContentAnalysis] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    cancelled: bool = False


class RepositoryContentAnalyzer:
    """
    Analyzes repository contents through an account miner.

    Attributes:
        miner (AccountMiner): Source of file contents and directory listings
        scorer (QualityScorer): Scores each analyzed repository
        max_concurrency (int): Repositories analyzed at once
    """

    def __init__(
        self, miner: AccountMiner, scorer: QualityScorer, max_concurrency: int = 4
    ):
        self.miner = miner
        self.scorer = scorer
        self.max_concurrency = max(1, max_concurrency)

    @staticmethod
    def select_repositories(repositories: List[Repository], limit: int) -> List[Repository]:
        """
        Pick repositories for content analysis.

        Forks are skipped; listing order (most recently updated first) is kept.

        Args:
            repositories (List[Repository]): Listed repositories
            limit (int): Maximum number of repositories to select

        Returns:
            List[Repository]: Selected repositories
        """
        return [repo for repo in repositories if not repo.is_fork][: max(0, limit)]

    async def _analyze_readme(self, full_name: str) -> ReadmeAnalysis:
        for variant in README_VARIANTS:
            content = await self.miner.fetch_file(full_name, variant)
            if content:
                return analyze_readme(content)
        return analyze_readme(None)

    async def _analyze_manifest(self, full_name: str) -> Optional[PackageAnalysis]:
        for parser in MANIFEST_PARSERS:
            content = await self.miner.fetch_file(full_name, parser.file_name)
            if content is not None:
                return analyze_manifest(parser, content)
        return None

    async def _analyze_workflows(self, full_name: str) -> List[WorkflowAnalysis]:
        entries = await self.miner.list_directory(full_name, WORKFLOWS_DIR)
        workflows = []
        for entry in entries:
            if entry.type != "file" or not is_workflow_file(entry.name):
                continue
            content = await self.miner.fetch_file(full_name, f"{WORKFLOWS_DIR}/{entry.name}")
            if content:
                workflows.append(analyze_workflow(entry.name, content))
        return workflows

    async def _analyze_structure(self, full_name: str) -> CodeStructureAnalysis:
        return analyze_structure(await self.miner.list_directory(full_name))

    async def analyze_repository(self, repository: Repository) -> RepositoryContentAnalysis:
        """
        Run all content analyses for one repository and score it.

        The four sub-analyses run concurrently. Missing files yield their
        absent defaults; any other failure cancels the remaining
        sub-analyses and propagates to the caller.

        Args:
            repository (Repository): Repository to analyze

        Returns:
            RepositoryContentAnalysis: Analyses and quality score
        """
        full_name = repository.full_name
        logger.info({"message": "Analyzing repository content", "repository": full_name})

        tasks = [
            asyncio.ensure_future(self._analyze_readme(full_name)),
            asyncio.ensure_future(self._analyze_manifest(full_name)),
            asyncio.ensure_future(self._analyze_workflows(full_name)),
            asyncio.ensure_future(self._analyze_structure(full_name)),
        ]
        try:
            readme, package, workflows, structure = await asyncio.gather(*tasks)
        except BaseException:
            # Siblings must stop before the worker's pool slot is released
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        quality_score = self.scorer.score_repository(
            repository, readme, package, workflows, structure
        )
        return RepositoryContentAnalysis(
            repository=full_name,
            readme=readme,
            package=package,
            workflows=workflows,
            code_structure=structure,
            quality_score=quality_score,
        )

    async def analyze_repositories(
        self, repositories: List[Repository]
    ) -> ContentAnalysisResult:
        """
        Analyze repositories with a bounded worker pool.

        A repository whose analysis fails is logged and omitted; the batch
        continues. Results keep the input order.

        Args:
            repositories (List[Repository]): Repositories to analyze

        Returns:
            ContentAnalysisResult: Completed analyses, failed repositories and
                whether cancellation cut the batch short
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        result = ContentAnalysisResult()

        async def worker(repository: Repository) -> Optional[RepositoryContentAnalysis]:
            async with semaphore:
                if result.cancelled:
                    return None
                try:
                    return await self.analyze_repository(repository)
                except AnalysisCancelledError:
                    result.cancelled = True
                    return None
                except Exception as e:
                    logger.error(
                        {
                            "message": "Failed to analyze repository",
                            "repository": repository.full_name,
                            "error": str(e),
                        }
                    )
                    result.failed.append(repository.full_name)
                    return None

        analyses = await asyncio.gather(*(worker(repo) for repo in repositories))
        result.analyses = [analysis for analysis in analyses if analysis is not None]

        logger.info(
            {
                "message": "Repository content analysis finished",
                "analyzed": len(result.analyses),
                "failed": len(result.failed),
                "cancelled": result.cancelled,
            }
        )
        return result
