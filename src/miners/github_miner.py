"""
GitHub Account Data Mining Module.

This module handles the extraction of raw GitHub account data: profile,
paginated repository listing, organization memberships and repository
contents. It focuses on tolerant data collection while maintaining type
safety through Pydantic models.
"""

import base64
import binascii
import re
from typing import Any, Dict, List, Optional

from config import logger
from miners.base import AccountMiner
from miners.errors import (
    AccountNotFoundError,
    AnalysisCancelledError,
    InvalidHandleError,
    MalformedResponseError,
    NotFoundError,
    TransportError,
)
from miners.models import (
    AccountProfile,
    ContentEntry,
    Organization,
    Repository,
    RepositoryListing,
)
from miners.transport import GitHubTransport

MAX_PAGE_SIZE = 100

HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
PROFILE_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/?#]+)", re.IGNORECASE
)


def extract_handle(value: str) -> str:
    """
    Extract the account handle from a bare handle or a GitHub profile URL.

    Args:
        value (str): Handle (``octocat``) or URL (``https://github.com/octocat``)

    Returns:
        str: The account handle

    Raises:
        InvalidHandleError: If no valid handle can be extracted
    """
    candidate = (value or "").strip()
    match = PROFILE_URL_PATTERN.match(candidate)
    if match:
        candidate = match.group(1)
    if not HANDLE_PATTERN.match(candidate):
        raise InvalidHandleError(f"Invalid GitHub handle or profile URL: {value!r}")
    return candidate


class GitHubMiner(AccountMiner):
    """
    GitHubMiner is responsible for mining account data from the GitHub REST API.
    It pages through repositories, resolves organizations and reads repository
    contents, transforming raw payloads into Pydantic models.
    """

    def __init__(self, transport: GitHubTransport):
        """Initialize GitHub miner with a transport.

        Args:
            transport (GitHubTransport): Shared transport; one per pipeline run.
        """
        self.transport = transport

    def _get_profile_data(self, user: Dict[str, Any]) -> AccountProfile:
        """Convert a ``/users/{handle}`` payload to a Pydantic model."""
        return AccountProfile(
            username=user["login"],
            name=user.get("name") or "",
            bio=user.get("bio") or "",
            location=user.get("location") or "",
            email=user.get("email") or "",
            blog=user.get("blog") or "",
            company=user.get("company") or "",
            profile_url=user.get("html_url") or f"https://github.com/{user['login']}",
            avatar_url=user.get("avatar_url") or "",
            followers=user.get("followers") or 0,
            following=user.get("following") or 0,
            public_repos=user.get("public_repos") or 0,
            public_gists=user.get("public_gists") or 0,
            account_creation_date=user.get("created_at") or None,
            last_activity_date=user.get("updated_at") or None,
        )

    def _get_repository_data(self, repo: Dict[str, Any]) -> Repository:
        """Convert one repository listing item to a Pydantic model."""
        license_info = repo.get("license") or {}
        return Repository(
            name=repo["name"],
            full_name=repo.get("full_name") or repo["name"],
            description=repo.get("description") or "",
            language=repo.get("language") or "",
            stars=repo.get("stargazers_count") or 0,
            forks=repo.get("forks_count") or 0,
            watchers=repo.get("watchers_count") or 0,
            size=repo.get("size") or 0,
            is_private=bool(repo.get("private")),
            is_fork=bool(repo.get("fork")),
            created_at=repo.get("created_at") or None,
            updated_at=repo.get("updated_at") or None,
            topics=repo.get("topics") or [],
            url=repo.get("html_url") or "",
            clone_url=repo.get("clone_url") or "",
            license=license_info.get("name") or "",
            has_issues=bool(repo.get("has_issues")),
            has_projects=bool(repo.get("has_projects")),
            has_wiki=bool(repo.get("has_wiki")),
            has_pages=bool(repo.get("has_pages")),
            open_issues=repo.get("open_issues_count") or 0,
            default_branch=repo.get("default_branch") or "main",
        )

    def _get_organization_data(self, org: Dict[str, Any]) -> Organization:
        """Convert an ``/orgs/{login}`` payload to a Pydantic model."""
        return Organization(
            login=org["login"],
            name=org.get("name") or org["login"],
            description=org.get("description") or "",
            url=org.get("html_url") or "",
            avatar_url=org.get("avatar_url") or "",
            public_repos=org.get("public_repos") or 0,
            location=org.get("location") or "",
            blog=org.get("blog") or "",
            email=org.get("email") or "",
            created_at=org.get("created_at") or None,
        )

    async def fetch_profile(self, handle: str) -> AccountProfile:
        """
        Fetch the public profile of an account.

        Args:
            handle (str): Account handle

        Returns:
            AccountProfile: The account profile

        Raises:
            AccountNotFoundError: If the account does not exist
            TransportError: If the request fails for any other reason
        """
        logger.info({"message": "Fetching account profile", "account": handle})
        try:
            user = await self.transport.request("user.profile", f"/users/{handle}")
        except NotFoundError as e:
            raise AccountNotFoundError(handle) from e

        if not isinstance(user, dict) or "login" not in user:
            raise MalformedResponseError("user.profile", "profile payload has no login")
        return self._get_profile_data(user)

    async def list_repositories(self, handle: str, max_repos: int) -> RepositoryListing:
        """
        Page through an account's repositories, most recently updated first.

        Pagination stops at ``max_repos`` or on an empty page. A failed page
        stops pagination and returns what was collected with ``truncated``
        set; the returned count is then not the account's true total.

        Args:
            handle (str): Account handle
            max_repos (int): Maximum number of repositories to collect

        Returns:
            RepositoryListing: Collected repositories and truncation flags
        """
        repositories: List[Repository] = []
        page = 1

        while len(repositories) < max_repos:
            try:
                items = await self.transport.request(
                    "user.repos",
                    f"/users/{handle}/repos",
                    {
                        "page": page,
                        "per_page": MAX_PAGE_SIZE,
                        "sort": "updated",
                        "direction": "desc",
                    },
                )
                if not isinstance(items, list):
                    raise MalformedResponseError("user.repos", "page is not a list")
            except AnalysisCancelledError:
                logger.warning(
                    {
                        "message": "Repository listing cancelled",
                        "account": handle,
                        "collected": len(repositories),
                    }
                )
                return RepositoryListing(repositories=repositories, cancelled=True)
            except TransportError as e:
                logger.warning(
                    {
                        "message": "Repository page failed, returning partial listing",
                        "account": handle,
                        "page": page,
                        "collected": len(repositories),
                        "error": str(e),
                    }
                )
                return RepositoryListing(repositories=repositories, truncated=True)

            if not items:
                break

            for item in items:
                if len(repositories) >= max_repos:
                    break
                repositories.append(self._get_repository_data(item))

            logger.debug(
                {"message": "Fetched repository page", "page": page, "items": len(items)}
            )
            page += 1

        return RepositoryListing(repositories=repositories)

    async def list_organizations(self, handle: str) -> List[Organization]:
        """
        List organization memberships and fetch each organization's details.

        A failed detail lookup is replaced by a login-only record; a failed
        membership listing yields an empty list.

        Args:
            handle (str): Account handle

        Returns:
            List[Organization]: Organizations in membership order
        """
        try:
            memberships = await self.transport.request(
                "user.orgs", f"/users/{handle}/orgs"
            )
        except TransportError as e:
            logger.error(
                {
                    "message": "Failed to list organizations",
                    "account": handle,
                    "error": str(e),
                }
            )
            return []

        organizations = []
        for membership in memberships if isinstance(memberships, list) else []:
            login = membership.get("login") if isinstance(membership, dict) else None
            if not login:
                continue
            try:
                detail = await self.transport.request("org.detail", f"/orgs/{login}")
                organizations.append(self._get_organization_data(detail))
            except AnalysisCancelledError:
                raise
            except Exception as e:
                logger.warning(
                    {
                        "message": "Organization detail lookup failed, using basic record",
                        "organization": login,
                        "error": str(e),
                    }
                )
                organizations.append(
                    Organization(
                        login=login,
                        name=login,
                        url=membership.get("url") or "",
                        avatar_url=membership.get("avatar_url") or "",
                        degraded=True,
                    )
                )
        return organizations

    async def fetch_file(self, full_name: str, path: str) -> Optional[str]:
        """
        Read a repository file through the contents API.

        Args:
            full_name (str): Repository as ``owner/name``
            path (str): File path inside the repository

        Returns:
            Optional[str]: Decoded file text, None if the file does not exist

        Raises:
            MalformedResponseError: If the content is not valid base64
        """
        try:
            payload = await self.transport.request(
                "repo.contents", f"/repos/{full_name}/contents/{path}"
            )
        except NotFoundError:
            return None

        if not isinstance(payload, dict) or payload.get("type") != "file":
            return None
        content = payload.get("content")
        if content is None:
            return None
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise MalformedResponseError(
                "repo.contents", f"{full_name}/{path}: {e}"
            ) from e

    async def list_directory(self, full_name: str, path: str = "") -> List[ContentEntry]:
        """
        List a repository directory through the contents API.

        Args:
            full_name (str): Repository as ``owner/name``
            path (str): Directory path, empty for the root

        Returns:
            List[ContentEntry]: Directory entries, empty if the directory is absent
        """
        try:
            payload = await self.transport.request(
                "repo.contents", f"/repos/{full_name}/contents/{path}"
            )
        except NotFoundError:
            return []

        if not isinstance(payload, list):
            return []
        return [
            ContentEntry(
                name=item["name"],
                path=item.get("path") or item["name"],
                type=item.get("type") or "file",
                size=item.get("size") or 0,
            )
            for item in payload
            if isinstance(item, dict) and item.get("name")
        ]
