"""
Account Mining Data Models.

Defines the raw account data collected from GitHub: profile, repositories,
organizations and repository directory entries.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class AccountProfile(BaseModel):
    """Public profile of one GitHub account."""

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


class Repository(BaseModel):
    """Repository metadata as listed for an account."""

    model_config = ConfigDict(frozen=True)

    name: str
    full_name: str  # owner/name
    description: str = ""
    language: str = ""
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    size: int = 0  # KB, as reported upstream
    is_private: bool = False
    is_fork: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    topics: List[str] = []
    url: str = ""
    clone_url: str = ""
    license: str = ""
    has_issues: bool = False
    has_projects: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    open_issues: int = 0
    default_branch: str = "main"


class RepositoryListing(BaseModel):
    """
    Result of paginated repository listing.

    ``truncated`` means a page request failed and the list stops early, so
    its length is not the account's true total.
    """

    repositories: List[Repository]
    truncated: bool = False
    cancelled: bool = False


class Organization(BaseModel):
    """Organization membership of an account."""

    model_config = ConfigDict(frozen=True)

    login: str
    name: str = ""
    description: str = ""
    url: str = ""
    avatar_url: str = ""
    public_repos: int = 0
    location: str = ""
    blog: str = ""
    email: str = ""
    created_at: Optional[datetime] = None
    degraded: bool = False


class ContentEntry(BaseModel):
    """One entry of a repository directory listing."""

    name: str
    path: str = ""
    type: str  # "file", "dir", "symlink" or "submodule"
    size: int = 0
