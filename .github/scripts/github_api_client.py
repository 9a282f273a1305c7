#!/usr/bin/env python3

"""
GitHub API Client
-----------------
Provides the GitHub REST API operations used by the semver labeling script.

This includes:
- Listing, creating, adding and removing labels on a pull request
- Finding pull requests by head branch or by commit
- Fetching a single pull request

Failed requests are logged and raised as requests.HTTPError so the retry
policy can tell transient server errors apart from real failures.

Requires:
    A token with `pull-requests: write` and `issues: write` permissions
    (the `github-token` input, usually secrets.GITHUB_TOKEN).
"""

import requests
import logging
import re
from typing import Dict, List, Optional
from urllib.parse import quote
from semver_models import PullRequestSummary

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30

class GitHubAPIClient:

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL) -> None:
        """Initialize the GitHub API client with a token."""
        self.api_url = api_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def _get_total_pages(self, response) -> int:
        """Extract the total number of pages from the response's Link header."""
        # Example: <https://api.github.com/repositories/1/issues?page=2>; rel="next", <...?page=5>; rel="last"
        link_header = response.headers.get("link", "")
        match = re.search(r'[?&]page=(\d+)[^>]*>;\s*rel="last"', link_header)
        if match:
            return int(match.group(1))
        return 1

    def _raise_for_status(self, response, error_msg: str) -> None:
        if not response.ok:
            logger.error(f"{error_msg}: {response.status_code} {response.text}")
            response.raise_for_status()

    def _get_json(self, url: str, error_msg: str, params: Optional[Dict[str, str]] = None) -> list:
        """Perform a paginated GET request and return the concatenated JSON list."""
        query = dict(params or {}, per_page=100)
        response = self.session.get(url, params=dict(query, page=1), timeout=REQUEST_TIMEOUT)
        self._raise_for_status(response, error_msg)
        all_results = list(response.json())
        total_pages = self._get_total_pages(response)
        for page in range(2, total_pages + 1):
            response = self.session.get(url, params=dict(query, page=page), timeout=REQUEST_TIMEOUT)
            self._raise_for_status(response, error_msg)
            all_results.extend(response.json())
        return all_results

    def _request_json(self, method: str, url: str, json: Optional[dict], error_msg: str) -> dict:
        """Perform a request and return its JSON body, or an empty dict for empty responses."""
        response = self.session.request(method, url, json=json, timeout=REQUEST_TIMEOUT)
        self._raise_for_status(response, error_msg)
        if not response.content:
            return {}
        return response.json()

    def _label_url(self, repo: str, name: str) -> str:
        return f"{self.api_url}/repos/{repo}/labels/{quote(name, safe='')}"

    def get_existing_labels_on_pr(self, repo: str, pr: int) -> List[str]:
        """Fetch current labels on a PR."""
        url = f"{self.api_url}/repos/{repo}/issues/{pr}/labels"
        labels_data = self._get_json(url, f"Failed to fetch labels for PR #{pr} in {repo}")
        labels = [label["name"] for label in labels_data]
        logger.debug(f"Existing labels on PR #{pr}: {labels}")
        return labels

    def get_label(self, repo: str, name: str) -> Optional[dict]:
        """Return the label definition, or None if the repository does not define it."""
        response = self.session.get(self._label_url(repo, name), timeout=REQUEST_TIMEOUT)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, f"Failed to fetch label '{name}' from {repo}")
        return response.json()

    def create_label(self, repo: str, name: str, color: str, description: str) -> dict:
        """Create a label in the repository."""
        url = f"{self.api_url}/repos/{repo}/labels"
        payload = {"name": name, "color": color, "description": description}
        label = self._request_json("POST", url, payload, f"Failed to create label '{name}' in {repo}")
        logger.info(f"Created label '{name}' in {repo}.")
        return label

    def add_labels(self, repo: str, pr: int, labels: List[str]) -> None:
        """Add labels to a PR."""
        url = f"{self.api_url}/repos/{repo}/issues/{pr}/labels"
        self._request_json("POST", url, {"labels": labels}, f"Failed to apply labels to PR #{pr} in {repo}")
        logger.debug(f"Applied labels {labels} to PR #{pr} in {repo}.")

    def remove_label(self, repo: str, pr: int, name: str) -> None:
        """Remove a label from a PR. A label that is already gone is not an error."""
        url = f"{self.api_url}/repos/{repo}/issues/{pr}/labels/{quote(name, safe='')}"
        response = self.session.delete(url, timeout=REQUEST_TIMEOUT)
        if response.status_code == 404:
            logger.debug(f"Label '{name}' was not on PR #{pr} in {repo}.")
            return
        self._raise_for_status(response, f"Failed to remove label '{name}' from PR #{pr} in {repo}")

    def get_prs_by_head_branch(self, repo: str, owner: str, branch: str) -> List[PullRequestSummary]:
        """List open PRs in `repo` whose head is `owner:branch`."""
        url = f"{self.api_url}/repos/{repo}/pulls"
        head = f"{owner}:{branch}"
        data = self._get_json(url, f"Failed to get PRs for {repo} with head {head}", params={"head": head, "state": "open"})
        return [PullRequestSummary.from_api(pr) for pr in data]

    def get_prs_for_commit(self, repo: str, sha: str) -> List[PullRequestSummary]:
        """List PRs associated with a commit."""
        url = f"{self.api_url}/repos/{repo}/commits/{sha}/pulls"
        data = self._get_json(url, f"Failed to get PRs for {repo}@{sha}")
        return [PullRequestSummary.from_api(pr) for pr in data]

    def get_pr(self, repo: str, pr_number: int) -> PullRequestSummary:
        """Fetch a single PR."""
        url = f"{self.api_url}/repos/{repo}/pulls/{pr_number}"
        data = self._request_json("GET", url, None, f"Failed to fetch PR #{pr_number} in {repo}")
        return PullRequestSummary.from_api(data)
