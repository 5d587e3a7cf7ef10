"""
Shared test fixtures.

Provides repository factories, a deterministic clock for backoff tests and
an in-memory account miner.
"""

import asyncio
import os
import tempfile
from datetime import datetime, timezone

# Keep log files out of the working tree; must run before config is imported
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="devyzer-logs-"))

import pytest  # noqa: E402

from miners.base import AccountMiner  # noqa: E402
from miners.errors import AccountNotFoundError  # noqa: E402
from miners.models import (  # noqa: E402
    AccountProfile,
    Repository,
    RepositoryListing,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock whose sleep advances time instantly and records delays."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeMiner(AccountMiner):
    """In-memory account miner keyed by (repository, path)."""

    def __init__(
        self,
        profile=None,
        listing=None,
        organizations=None,
        files=None,
        directories=None,
        failing=None,
        on_list=None,
    ):
        self.profile = profile
        self.listing = listing or RepositoryListing(repositories=[])
        self.organizations = organizations or []
        self.files = files or {}
        self.directories = directories or {}
        self.failing = set(failing or [])
        self.on_list = on_list
        self.calls = []
        self.in_flight = {}
        self.max_repositories_in_flight = 0

    async def _touch(self, full_name: str) -> None:
        if full_name in self.failing:
            raise RuntimeError(f"unexpected failure for {full_name}")
        self.in_flight[full_name] = self.in_flight.get(full_name, 0) + 1
        active = len([name for name, count in self.in_flight.items() if count > 0])
        self.max_repositories_in_flight = max(self.max_repositories_in_flight, active)
        await asyncio.sleep(0)
        self.in_flight[full_name] -= 1

    async def fetch_profile(self, handle):
        self.calls.append(("profile", handle))
        if self.profile is None:
            raise AccountNotFoundError(handle)
        return self.profile

    async def list_repositories(self, handle, max_repos):
        self.calls.append(("repositories", handle, max_repos))
        if self.on_list:
            self.on_list()
        return self.listing

    async def list_organizations(self, handle):
        self.calls.append(("organizations", handle))
        return self.organizations

    async def fetch_file(self, full_name, path):
        await self._touch(full_name)
        return self.files.get((full_name, path))

    async def list_directory(self, full_name, path=""):
        await self._touch(full_name)
        return self.directories.get((full_name, path), [])


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_repository():
    """Factory for repositories with sensible defaults."""

    def _make(name="repo", **overrides):
        data = {
            "name": name,
            "full_name": f"octocat/{name}",
            "language": "Python",
            "size": 100,
            "updated_at": NOW,
            "created_at": NOW,
        }
        data.update(overrides)
        return Repository(**data)

    return _make


@pytest.fixture
def profile():
    return AccountProfile(
        username="octocat",
        name="The Octocat",
        email="octocat@github.com",
        blog="https://github.blog",
        profile_url="https://github.com/octocat",
        followers=10,
        public_repos=3,
    )


@pytest.fixture
def make_miner():
    """Factory for in-memory miners."""
    return FakeMiner
