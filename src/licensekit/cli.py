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

"""Command-line entry point.

Usage::

    licensekit [--deep] [--verbose] [--cwd DIR] [--json-log] [--quiet]

Status lines go to stdout; the structured log goes to stderr.  The exit
code is 0 on every path, including when some or all dependencies could
not be resolved.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence

import httpx
from rich.console import Console
from rich.markup import escape

from licensekit import __version__
from licensekit.clients.github import GITHUB_API_URL, GitHubClient, RateLimitStatus, connect_github
from licensekit.config import RunConfig, RunContext
from licensekit.enumerators import detect_ecosystem
from licensekit.errors import EnumerationError
from licensekit.ignore import apply_ignore, load_ignore_patterns
from licensekit.logging import configure_logging, get_logger
from licensekit.net import http_client
from licensekit.progress import ResolutionProgress
from licensekit.report import print_summary, write_report
from licensekit.resolver import LicenseResolver
from licensekit.scheduler import ResolutionScheduler

log = get_logger('licensekit.cli')

_TOKEN_HINT = "Hint: If you set a GITHUB_TOKEN env. You'll get more requests (and more accurate results)."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='licensekit',
        description='Write a license report for the dependencies of a node or dart project.',
    )
    parser.add_argument(
        '--deep',
        action='store_true',
        help='Include transitive dependencies (node only).',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Trace every dependency instead of showing a progress bar.',
    )
    parser.add_argument(
        '--cwd',
        default=os.getcwd(),
        help='Project root to scan (default: current directory).',
    )
    parser.add_argument(
        '--json-log',
        action='store_true',
        help='Emit log lines as JSON.',
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Only log warnings and errors.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def report_quota(
    console: Console,
    context: RunContext,
    github: GitHubClient,
    status: RateLimitStatus | None,
) -> None:
    """Print the GitHub quota and close the API latch if it is unusable."""
    if status is None:
        context.api.disable()
        console.print('[red]Error connecting to the GitHub api.[/]')
        return
    if status.remaining <= 0:
        context.api.disable()
    console.print(
        f'[yellow]You have {status.remaining} Github api requests left. '
        f"They'll reset to {status.limit} at {status.reset:%Y-%m-%d %H:%M:%S}[/]",
        highlight=False,
    )
    if not github.authenticated:
        console.print(_TOKEN_HINT, highlight=False)


async def run(
    config: RunConfig,
    *,
    console: Console | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    github_api_url: str = GITHUB_API_URL,
) -> int:
    """Scan ``config.cwd`` and write its license report.

    Args:
        config: Settings for this run.
        console: Where status lines go; defaults to stdout.
        transport: HTTP transport override, used by tests.
        github_api_url: GitHub API root.

    Returns:
        The process exit code (always 0).
    """
    console = console or Console()
    context = RunContext(config)

    ecosystem = detect_ecosystem(config.cwd)
    if ecosystem is None:
        console.print('[bold red]No supported dependencies file found. Exiting.[/]')
        return 0
    console.print(f'[bold green]Found a {ecosystem.name} project.[/]')

    async with http_client(transport=transport) as http:
        github, status = await connect_github(http, config.github_token, base_url=github_api_url)
        report_quota(console, context, github, status)

        try:
            records = await ecosystem.dependencies(config)
        except EnumerationError as exc:
            log.error('enumeration_failed', ecosystem=exc.ecosystem, error=exc.reason)
            records = []

        records, ignored = apply_ignore(records, load_ignore_patterns(config.ignore_path))
        if ignored:
            console.print(f'[yellow]Ignoring {len(ignored)} packages:[/]')
            for record in ignored:
                console.print(f'  {escape(record.name)}', highlight=False)

        if not records:
            console.print('[bold red]No dependencies found. Exiting.[/]')
            return 0
        console.print(f'[yellow]Processing {len(records)} packages.[/]')

        resolver = LicenseResolver(context, http, github)
        with ResolutionProgress(len(records), verbose=config.verbose) as progress:
            scheduler = ResolutionScheduler(
                resolver.resolve,
                concurrency=config.concurrency,
                on_result=progress.advance,
            )
            scheduler.push(records)
            results = await scheduler.drain()

    try:
        out_path = write_report(config.report_path, results)
    except OSError as exc:
        log.error('report_write_failed', path=str(config.report_path), error=str(exc))
        console.print(f'[bold red]Could not write {escape(str(config.report_path))}: {escape(str(exc))}[/]')
        out_path = None
    console.print()
    print_summary(console, results, out_path, context.messages)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging and run."""
    args = build_parser().parse_args(argv)
    config = RunConfig.from_args(args)
    configure_logging(verbose=config.verbose, quiet=config.quiet, json_log=config.json_log)
    log.debug('starting', cwd=str(config.cwd), deep=config.deep)
    return asyncio.run(run(config))


if __name__ == '__main__':
    sys.exit(main())
