# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Async GitHub REST API client for repository license lookups.

Only two endpoints are used:

- ``GET /rate_limit``: once at start-up, to report the remaining quota
  and decide whether the API is worth using at all.
- ``GET /repos/{owner}/{repo}/license``: once per dependency whose
  license could not be found on disk.

Responses are turned into a :class:`~licensekit._types.RepoLicenseResult`
so callers branch on a tag instead of poking at JSON fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

import httpx

from licensekit._types import RepoLicenseKind, RepoLicenseResult
from licensekit.errors import GitHubAuthError
from licensekit.logging import get_logger

log = get_logger('licensekit.clients.github')

GITHUB_API_URL: Final[str] = 'https://api.github.com'

_NO_ASSERTION: Final[str] = 'NOASSERTION'


@dataclass(frozen=True)
class RateLimitStatus:
    """Core API quota as reported by ``/rate_limit``."""

    limit: int
    remaining: int
    reset: datetime


class GitHubClient:
    """Thin async wrapper around the parts of the GitHub API we need.

    Args:
        http: Shared HTTP client for the run.
        token: Optional token; without one GitHub applies the much
            lower unauthenticated quota.
        base_url: API root, overridable for tests.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str | None = None,
        *,
        base_url: str = GITHUB_API_URL,
    ) -> None:
        self._http = http
        self._token = token
        self._base_url = base_url.rstrip('/')

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
        }
        if self._token:
            headers['Authorization'] = f'token {self._token}'
        return headers

    async def _get(self, path: str) -> httpx.Response:
        return await self._http.get(f'{self._base_url}{path}', headers=self._headers())

    async def rate_limit(self) -> RateLimitStatus | None:
        """Return the current core quota, or ``None`` if unavailable.

        Raises:
            GitHubAuthError: If the token was rejected.
        """
        try:
            resp = await self._get('/rate_limit')
        except httpx.HTTPError as exc:
            log.warning('github_unreachable', error=str(exc))
            return None
        if resp.status_code == 401:
            raise GitHubAuthError(_error_message(resp))
        if resp.status_code != 200:
            log.warning('github_rate_limit_failed', status=resp.status_code)
            return None
        try:
            rate = resp.json()['rate']
            return RateLimitStatus(
                limit=int(rate['limit']),
                remaining=int(rate['remaining']),
                reset=datetime.fromtimestamp(int(rate['reset'])),
            )
        except (ValueError, KeyError, TypeError):
            log.warning('github_rate_limit_malformed')
            return None

    async def get_repo_license(self, owner: str, repo: str) -> RepoLicenseResult:
        """Look up the license GitHub detected for ``owner/repo``."""
        try:
            resp = await self._get(f'/repos/{owner}/{repo}/license')
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug('github_license_error', repo=f'{owner}/{repo}', error=str(exc))
            return RepoLicenseResult(RepoLicenseKind.NOT_FOUND)

        status = resp.status_code
        if status == 200:
            return _parse_license(resp)
        if status == 401:
            return RepoLicenseResult(RepoLicenseKind.AUTH_ERROR, message=_error_message(resp))
        if status == 429 or (status == 403 and _quota_exhausted(resp)):
            return RepoLicenseResult(RepoLicenseKind.RATE_LIMITED, message=_error_message(resp))
        if status == 403:
            return RepoLicenseResult(RepoLicenseKind.AUTH_ERROR, message=_error_message(resp))
        return RepoLicenseResult(RepoLicenseKind.NOT_FOUND)


async def connect_github(
    http: httpx.AsyncClient,
    token: str | None,
    *,
    base_url: str = GITHUB_API_URL,
) -> tuple[GitHubClient, RateLimitStatus | None]:
    """Create a client and read the quota, dropping a rejected token.

    An invalid token degrades to unauthenticated access instead of
    failing the run.
    """
    client = GitHubClient(http, token, base_url=base_url)
    try:
        return client, await client.rate_limit()
    except GitHubAuthError as exc:
        log.warning('github_token_rejected', error=str(exc))
    client = GitHubClient(http, None, base_url=base_url)
    try:
        return client, await client.rate_limit()
    except GitHubAuthError:
        return client, None


def _parse_license(resp: httpx.Response) -> RepoLicenseResult:
    try:
        data: Any = resp.json()
    except ValueError:
        return RepoLicenseResult(RepoLicenseKind.NOT_FOUND)
    if not isinstance(data, dict) or not isinstance(data.get('license'), dict):
        return RepoLicenseResult(RepoLicenseKind.NOT_FOUND)

    spdx_id = data['license'].get('spdx_id') or ''
    if spdx_id == _NO_ASSERTION:
        spdx_id = ''
    return RepoLicenseResult(
        RepoLicenseKind.FOUND,
        license=str(spdx_id),
        download_url=str(data.get('download_url') or ''),
    )


def _quota_exhausted(resp: httpx.Response) -> bool:
    return resp.headers.get('X-RateLimit-Remaining') == '0' or 'Retry-After' in resp.headers


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get('message'):
        return str(data['message'])
    return f'GitHub API returned HTTP {resp.status_code}'


__all__ = [
    'GITHUB_API_URL',
    'GitHubClient',
    'RateLimitStatus',
    'connect_github',
]
