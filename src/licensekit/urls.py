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

"""Repository reference normalization.

Package manifests spell repository locations in many ways::

    git+https://github.com/acme/widget.git
    git+ssh://git@github.com/acme/widget.git
    git@github.com:acme/widget.git
    github:acme/widget
    bitbucket:acme/widget

:func:`pretty_git_url` rewrites all of them into the browsing form
``https://<host>/<owner>/<repo>``.  The rewrite is a fixed sequence of
literal substitutions, so anything it does not recognise passes through
unchanged and fails later at URL parsing (see :func:`safe_url`).
"""

from __future__ import annotations

import re
from typing import Final, NamedTuple
from urllib.parse import urlsplit

__all__ = [
    'UrlParts',
    'github_owner_repo',
    'pretty_git_url',
    'safe_url',
]

# Applied in order; each replaces the first occurrence only.
_REWRITES: Final[tuple[tuple[str, str], ...]] = (
    ('git+', ''),
    ('ssh://git@', 'https://'),
    ('git@', 'https://'),
    ('git://', 'https://'),
    ('github.com:', 'github.com/'),
    ('github:', 'github.com/'),
    ('gitlab.com:', 'gitlab.com/'),
    ('gitlab:', 'gitlab.com/'),
    ('bitbucket.org:', 'bitbucket.org/'),
    ('bitbucket:', 'bitbucket.org/'),
)

_KNOWN_HOSTS: Final[tuple[str, ...]] = ('github.com/', 'gitlab.com/', 'bitbucket.org/')

_GITHUB_REPO_RE: Final[re.Pattern[str]] = re.compile(
    r'^(?:https://github\.com/|github:)(?P<owner>[^/]+)/(?P<repo>[^/#?]+)',
)


class UrlParts(NamedTuple):
    """Pieces of a parsed URL; every field is ``None`` if parsing failed."""

    scheme: str | None = None
    host: str | None = None
    port: int | None = None
    path: str | None = None


def pretty_git_url(value: str | None) -> str | None:
    """Rewrite a repository reference into its ``https://`` browsing URL.

    Never raises. ``None`` and empty input are returned as-is, and
    already-canonical URLs come back unchanged.

    >>> pretty_git_url('git+https://github.com/acme/widget.git')
    'https://github.com/acme/widget'
    >>> pretty_git_url('github:acme/widget')
    'https://github.com/acme/widget'
    """
    if not value:
        return value
    url = value.strip()
    for old, new in _REWRITES:
        url = url.replace(old, new, 1)
    if url.endswith('.git'):
        url = url[: -len('.git')]
    if url.startswith(_KNOWN_HOSTS):
        url = f'https://{url}'
    return url


def safe_url(value: str | None) -> UrlParts:
    """Parse *value* as an absolute URL without raising.

    Returns a :class:`UrlParts` with every field ``None`` when *value*
    is missing a scheme or host, or is otherwise malformed.
    """
    if not value:
        return UrlParts()
    try:
        parts = urlsplit(value)
        port = parts.port
    except ValueError:
        return UrlParts()
    if not parts.scheme or not parts.hostname:
        return UrlParts()
    return UrlParts(
        scheme=parts.scheme,
        host=parts.hostname,
        port=port,
        path=parts.path or '/',
    )


def github_owner_repo(url: str | None) -> tuple[str, str] | None:
    """Return ``(owner, repo)`` for a GitHub repository URL, else ``None``."""
    if not url:
        return None
    match = _GITHUB_REPO_RE.match(url)
    if match is None:
        return None
    return match.group('owner'), match.group('repo')
