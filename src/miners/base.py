"""
Abstract Base Class for Account Miners.

Defines the interface for account data mining implementations.
All account miners (GitHub, GitLab, etc.) should implement this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from miners.models import AccountProfile, ContentEntry, Organization, RepositoryListing


class AccountMiner(ABC):
    """
    Abstract base class for account miners.

    Defines the contract for mining account data from different sources.
    Implementations should handle:
    - Authentication with the hosting service
    - Data extraction and pagination
    - Data transformation to common models
    """

    @abstractmethod
    async def fetch_profile(self, handle: str) -> AccountProfile:
        """
        Fetch the public profile of an account.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        pass

    @abstractmethod
    async def list_repositories(self, handle: str, max_repos: int) -> RepositoryListing:
        """List repositories, most recently updated first, up to ``max_repos``."""
        pass

    @abstractmethod
    async def list_organizations(self, handle: str) -> List[Organization]:
        """List organization memberships with their details."""
        pass

    @abstractmethod
    async def fetch_file(self, full_name: str, path: str) -> Optional[str]:
        """Return a repository file's text, or None when it does not exist."""
        pass

    @abstractmethod
    async def list_directory(self, full_name: str, path: str = "") -> List[ContentEntry]:
        """Return the entries of a repository directory, empty when absent."""
        pass
