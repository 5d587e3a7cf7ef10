"""
Snapshot Assembly Test Suite.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from analyzers.models import AnalysisOptions, ContributionStats
from analyzers.snapshot import SnapshotAssembler, is_valid_email, is_valid_url
from miners.models import AccountProfile, RepositoryListing


@pytest.fixture
def assembler(now):
    return SnapshotAssembler(now=now)


def assemble(assembler, profile, listing=None, **kwargs):
    return assembler.assemble(
        profile=profile,
        listing=listing or RepositoryListing(repositories=[]),
        languages=[],
        contributions=ContributionStats(),
        options=AnalysisOptions(),
        **kwargs,
    )


@pytest.mark.parametrize(
    "email, expected",
    [("octocat@github.com", True), ("octocat", False), ("a@b", False), ("a b@c.d", False)],
)
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


@pytest.mark.parametrize(
    "url, expected",
    [("https://github.blog", True), ("github.blog", False), ("mailto:", False)],
)
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


def test_defaults_and_metadata(assembler, profile, now):
    snapshot = assemble(assembler, profile)

    assert snapshot.repositories == []
    assert snapshot.repository_content == []
    assert snapshot.organizations == []
    assert snapshot.overall_quality_score is None
    assert snapshot.partial is False
    assert snapshot.other == {
        "processing_date": now.isoformat(),
        "api_version": "v3",
        "processing_options": AnalysisOptions().model_dump(),
        "content_analysis_enabled": False,
        "repositories_analyzed": 0,
        "rubric_version": "1",
        "capability_rules_version": "1",
    }


def test_totals(assembler, profile, make_repository):
    listing = RepositoryListing(
        repositories=[
            make_repository("a", stars=4),
            make_repository("b", stars=6, is_fork=True),
        ]
    )

    snapshot = assemble(assembler, profile, listing)

    assert snapshot.starred_repos == 10
    assert snapshot.forked_repos == 1


def test_partial_reasons(assembler, profile):
    listing = RepositoryListing(repositories=[], truncated=True)

    snapshot = assemble(assembler, profile, listing, cancelled=True)

    assert snapshot.partial is True
    assert snapshot.partial_reasons == ["repository_listing_truncated", "cancelled"]


def test_invalid_contact_details_are_logged_not_rejected(assembler):
    profile = AccountProfile(
        username="octocat",
        email="not-an-email",
        blog="octocat.dev",
        profile_url="https://github.com/octocat",
    )

    with patch("analyzers.snapshot.logger") as mock_logger:
        snapshot = assemble(assembler, profile)

    assert mock_logger.warning.call_count == 2
    messages = [call.args[0]["message"] for call in mock_logger.warning.call_args_list]
    assert messages == ["Invalid email format", "Invalid blog URL"]
    assert snapshot.email == "not-an-email"
    assert snapshot.blog == "octocat.dev"


def test_snapshot_is_immutable(assembler, profile):
    snapshot = assemble(assembler, profile)

    with pytest.raises(ValidationError):
        snapshot.partial = True
