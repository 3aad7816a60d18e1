"""
GitHub API Module

Lists the repositories visible to a personal access token.
"""
import logging
from typing import List, Optional
from urllib.parse import urlencode

import requests

from octopulse import config
from octopulse.schemas import GitHubRepo

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when GitHub answers with a non-2xx status or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _headers(token: str) -> dict:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": config.GITHUB_USER_AGENT,
    }


def list_repositories(token: str) -> List[GitHubRepo]:
    """
    Fetch the token owner's repositories, most recently updated first.

    Args:
        token: GitHub personal access token

    Returns:
        List of repositories reduced to id and full name

    Raises:
        GitHubAPIError: on a non-2xx response or a transport failure
    """
    url = (
        f"{config.GITHUB_API_URL}/user/repos?"
        f"{urlencode({'sort': 'updated', 'per_page': config.REPOS_PER_PAGE})}"
    )
    try:
        response = requests.get(
            url, headers=_headers(token), timeout=config.HTTP_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        logger.error(f"Error fetching GitHub repos: {str(e)}")
        raise GitHubAPIError(str(e)) from e

    if not response.ok:
        logger.error(f"GitHub API error: {response.status_code} {response.reason}")
        raise GitHubAPIError(
            f"GitHub API returned {response.status_code}", response.status_code
        )

    try:
        return [
            GitHubRepo(id=repo["id"], full_name=repo["full_name"])
            for repo in response.json()
        ]
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Unexpected repository list from GitHub: {str(e)}")
        raise GitHubAPIError(str(e)) from e
