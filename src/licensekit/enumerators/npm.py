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

"""Node dependency enumeration via ``npm ls``.

``npm ls --prod --json`` prints the installed production dependency tree
as nested ``dependencies`` objects::

    {"dependencies": {"express": {"dependencies": {"accepts": {...}}}}}

With ``--deep`` the whole tree is requested (``--depth Infinity``);
otherwise only direct dependencies.  Every package is assumed to be
installed flat under ``<cwd>/node_modules/<name>``.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from licensekit._types import DependencyRecord
from licensekit.config import RunConfig
from licensekit.errors import EnumerationError
from licensekit.logging import get_logger

log = get_logger('licensekit.enumerators.npm')

_NPM = 'npm.cmd' if sys.platform == 'win32' else 'npm'


def npm_ls_args(*, deep: bool) -> list[str]:
    return ['ls', '--prod', '--json', '--depth', 'Infinity' if deep else '0']


async def run_npm_ls(cwd: Path, *, deep: bool) -> str:
    """Run ``npm ls`` in *cwd* and return its stdout.

    ``npm ls`` exits non-zero for problems like missing peer
    dependencies while still printing a usable tree, so the exit code
    is only logged.

    Raises:
        EnumerationError: If npm cannot be started.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            _NPM,
            *npm_ls_args(deep=deep),
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise EnumerationError('node', f'cannot run npm: {exc}') from exc
    stdout, stderr = await proc.communicate()
    if proc.returncode:
        log.debug('npm_ls_exit', returncode=proc.returncode, stderr=stderr.decode(errors='replace').strip())
    return stdout.decode(errors='replace')


def walk_dependency_tree(dependencies: Mapping[str, Any] | None) -> list[str]:
    """Return every package name in an ``npm ls`` tree, pre-order, once.

    Uses an explicit stack of iterators instead of recursion so deeply
    nested trees cannot exhaust the call stack.
    """
    names: list[str] = []
    seen: set[str] = set()
    if not dependencies:
        return names

    stack: list[Iterator[tuple[str, Any]]] = [iter(dependencies.items())]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        name, node = entry
        if name not in seen:
            seen.add(name)
            names.append(name)
        children = node.get('dependencies') if isinstance(node, dict) else None
        if children:
            stack.append(iter(children.items()))
    return names


def parse_npm_ls(output: str) -> list[str]:
    """Parse ``npm ls --json`` output into package names.

    Raises:
        EnumerationError: If the output is not a JSON object.
    """
    try:
        data = json.loads(output)
    except ValueError as exc:
        raise EnumerationError('node', 'npm ls printed invalid JSON') from exc
    if not isinstance(data, dict):
        raise EnumerationError('node', 'npm ls printed an unexpected document')
    return walk_dependency_tree(data.get('dependencies'))


async def enumerate_npm(config: RunConfig) -> list[DependencyRecord]:
    """List the project's installed node dependencies."""
    output = await run_npm_ls(config.cwd, deep=config.deep)
    modules = config.cwd / 'node_modules'
    return [DependencyRecord(name=name, install_location=modules / name) for name in parse_npm_ls(output)]


__all__ = [
    'enumerate_npm',
    'npm_ls_args',
    'parse_npm_ls',
    'run_npm_ls',
    'walk_dependency_tree',
]
