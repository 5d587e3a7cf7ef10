"""
Account Analysis Test Suite.

End-to-end tests of AccountAnalyzer against an in-memory miner:
- Complete snapshots with and without content analysis
- Partial snapshots for truncated listings and cancellation
- Fatal errors before any data is collected
"""

import asyncio
from unittest.mock import Mock, patch

import pytest
from github import GithubException

from analyzers.account import AccountAnalyzer
from analyzers.models import AnalysisOptions
from analyzers.quality import QualityScorer
from analyzers.snapshot import SnapshotAssembler
from miners.errors import AccountNotFoundError, AnalysisCancelledError, InvalidHandleError
from miners.github_miner import GitHubMiner
from miners.models import Organization, RepositoryListing
from miners.transport import BackoffGate, GitHubTransport


@pytest.fixture
def make_analyzer(now):
    def _make(miner):
        return AccountAnalyzer(
            miner=miner,
            scorer=QualityScorer(now=lambda: now),
            assembler=SnapshotAssembler(now=now),
        )

    return _make


@pytest.fixture
def go_repositories(make_repository):
    return [
        make_repository("a", language="Go", size=1000, stars=2),
        make_repository("b", language="Go", size=1000, stars=3),
        make_repository("c", language="Go", size=2000, is_fork=True),
    ]


@pytest.mark.asyncio
async def test_go_account_with_content_analysis(
    make_miner, make_analyzer, profile, go_repositories
):
    """Test a complete run: fork listed and counted, but not content-analyzed."""
    miner = make_miner(
        profile=profile,
        listing=RepositoryListing(repositories=go_repositories),
        organizations=[Organization(login="acme", name="Acme")],
        files={("octocat/a", "README.md"): "# A\n\nInstall with go get.\n"},
    )
    options = AnalysisOptions(analyze_content=True)

    snapshot = await make_analyzer(miner).analyze("https://github.com/octocat", options)

    assert snapshot.username == "octocat"
    assert [repo.name for repo in snapshot.repositories] == ["a", "b", "c"]
    assert [(stat.language, stat.percentage) for stat in snapshot.languages] == [
        ("Go", pytest.approx(100.0))
    ]
    assert snapshot.forked_repos == 1
    assert snapshot.starred_repos == 5
    assert [org.login for org in snapshot.organizations] == ["acme"]
    assert [analysis.repository for analysis in snapshot.repository_content] == [
        "octocat/a",
        "octocat/b",
    ]
    assert snapshot.overall_quality_score is not None
    assert snapshot.contributions.most_used_language == "Go"
    assert snapshot.partial is False
    assert snapshot.partial_reasons == []
    assert snapshot.other["repositories_analyzed"] == 2
    assert snapshot.other["content_analysis_enabled"] is True
    assert ("profile", "octocat") in miner.calls
    assert ("repositories", "octocat", 100) in miner.calls


@pytest.mark.asyncio
async def test_defaults_without_content_analysis(
    make_miner, make_analyzer, profile, go_repositories
):
    miner = make_miner(profile=profile, listing=RepositoryListing(repositories=go_repositories))

    snapshot = await make_analyzer(miner).analyze("octocat")

    assert snapshot.repository_content == []
    assert snapshot.overall_quality_score is None
    assert snapshot.other["content_analysis_enabled"] is False
    assert snapshot.other["repositories_analyzed"] == 0
    assert snapshot.other["processing_options"]["max_repos"] == 100


@pytest.mark.asyncio
async def test_organizations_can_be_skipped(make_miner, make_analyzer, profile):
    miner = make_miner(profile=profile, organizations=[Organization(login="acme")])

    snapshot = await make_analyzer(miner).analyze(
        "octocat", AnalysisOptions(include_organizations=False)
    )

    assert snapshot.organizations == []
    assert ("organizations", "octocat") not in miner.calls


@pytest.mark.asyncio
async def test_truncated_listing_marks_snapshot_partial(
    make_miner, make_analyzer, profile, make_repository
):
    repositories = [make_repository(f"repo-{i}") for i in range(100)]
    miner = make_miner(
        profile=profile,
        listing=RepositoryListing(repositories=repositories, truncated=True),
    )

    snapshot = await make_analyzer(miner).analyze("octocat", AnalysisOptions(max_repos=250))

    assert len(snapshot.repositories) == 100
    assert snapshot.partial is True
    assert snapshot.partial_reasons == ["repository_listing_truncated"]


@pytest.mark.asyncio
async def test_invalid_handle_fails_before_any_request(make_miner, make_analyzer, profile):
    miner = make_miner(profile=profile)

    with pytest.raises(InvalidHandleError):
        await make_analyzer(miner).analyze("not a handle!")

    assert miner.calls == []


@pytest.mark.asyncio
async def test_unknown_account(make_miner, make_analyzer):
    miner = make_miner(profile=None)

    with pytest.raises(AccountNotFoundError):
        await make_analyzer(miner).analyze("ghost")

    assert miner.calls == [("profile", "ghost")]


@pytest.mark.asyncio
async def test_cancelled_before_start(make_miner, make_analyzer, profile):
    miner = make_miner(profile=profile)
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(AnalysisCancelledError):
        await make_analyzer(miner).analyze("octocat", cancel_event=cancel_event)

    assert miner.calls == []


@pytest.mark.asyncio
async def test_cancelled_after_listing_returns_partial_snapshot(
    make_miner, make_analyzer, profile, go_repositories
):
    cancel_event = asyncio.Event()
    miner = make_miner(
        profile=profile,
        listing=RepositoryListing(repositories=go_repositories),
        organizations=[Organization(login="acme")],
        on_list=cancel_event.set,
    )

    snapshot = await make_analyzer(miner).analyze(
        "octocat", AnalysisOptions(analyze_content=True), cancel_event
    )

    assert snapshot.partial is True
    assert snapshot.partial_reasons == ["cancelled"]
    assert len(snapshot.repositories) == 3
    assert snapshot.organizations == []
    assert snapshot.repository_content == []
    assert ("organizations", "octocat") not in miner.calls


@pytest.mark.asyncio
async def test_failed_repository_excluded_from_account_score(
    make_miner, make_analyzer, profile, make_repository
):
    repositories = [make_repository("good"), make_repository("broken")]
    miner = make_miner(
        profile=profile,
        listing=RepositoryListing(repositories=repositories),
        files={("octocat/good", "README.md"): "# Good\n\n## Installation\n\npip install good\n"},
        failing=["octocat/broken"],
    )

    snapshot = await make_analyzer(miner).analyze(
        "octocat", AnalysisOptions(analyze_content=True)
    )

    assert [analysis.repository for analysis in snapshot.repository_content] == ["octocat/good"]
    assert snapshot.other["repositories_analyzed"] == 1
    assert snapshot.overall_quality_score == snapshot.repository_content[0].quality_score
    assert snapshot.partial is False


@pytest.mark.asyncio
async def test_content_analysis_cap(make_miner, make_analyzer, profile, make_repository):
    repositories = [make_repository(f"repo-{i}") for i in range(5)]
    miner = make_miner(profile=profile, listing=RepositoryListing(repositories=repositories))

    snapshot = await make_analyzer(miner).analyze(
        "octocat", AnalysisOptions(analyze_content=True, max_content_analysis=3)
    )

    assert [analysis.repository for analysis in snapshot.repository_content] == [
        "octocat/repo-0",
        "octocat/repo-1",
        "octocat/repo-2",
    ]


@pytest.mark.asyncio
async def test_rate_limited_second_page_yields_partial_snapshot(fake_clock, make_analyzer):
    """Test a page that stays rate limited through every retry truncates the listing."""

    def respond(verb, path, parameters=None):
        if path == "/users/octocat":
            return {}, {"login": "octocat"}
        if path == "/users/octocat/repos":
            if parameters["page"] == 1:
                return {}, [
                    {"name": f"repo-{i}", "full_name": f"octocat/repo-{i}"}
                    for i in range(100)
                ]
            raise GithubException(403, {"message": "API rate limit exceeded"}, None)
        if path == "/users/octocat/orgs":
            return {}, []
        raise AssertionError(f"unexpected request {path}")

    requester = Mock()
    requester.requestJsonAndCheck.side_effect = respond
    gate = BackoffGate(sleep=fake_clock.sleep, clock=fake_clock.time)
    miner = GitHubMiner(GitHubTransport(requester, gate=gate, max_attempts=3, base_delay=2.0))

    snapshot = await make_analyzer(miner).analyze("octocat", AnalysisOptions(max_repos=250))

    assert len(snapshot.repositories) == 100
    assert snapshot.partial is True
    assert snapshot.partial_reasons == ["repository_listing_truncated"]
    assert fake_clock.sleeps == [2.0, 4.0]


def test_run_miner_is_bound_to_cancel_event():
    cancel_event = asyncio.Event()

    with patch("analyzers.account.GitHubTransport.from_settings") as from_settings:
        miner = AccountAnalyzer()._miner_for_run(cancel_event)

    from_settings.assert_called_once_with(cancel_event=cancel_event)
    assert isinstance(miner, GitHubMiner)
    assert miner.transport is from_settings.return_value


def test_injected_miner_is_used_as_is(make_miner):
    miner = make_miner()

    with patch("analyzers.account.GitHubTransport.from_settings") as from_settings:
        assert AccountAnalyzer(miner=miner)._miner_for_run(asyncio.Event()) is miner

    from_settings.assert_not_called()
