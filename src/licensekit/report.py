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

"""Report rendering and the console summary.

Report format (``installed-packages.txt``)::

    express (MIT)
    Fast, unopinionated, minimalist web framework
    https://github.com/expressjs/express
    https://github.com/expressjs/express/blob/master/LICENSE

    left-pad (no license found)
    https://github.com/stevemao/left-pad

Records are sorted by name with a stable sort, so duplicates keep the
order in which they completed.  Empty fields are omitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from io import StringIO
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.markup import escape

from licensekit._types import DependencyRecord, MissingReason
from licensekit.logging import get_logger

log = get_logger('licensekit.report')

NO_LICENSE: Final[str] = 'no license found'

#: Console explanation for each failure reason.
REASON_TEXT: Final[dict[MissingReason, str]] = {
    MissingReason.NO_REPOSITORY: 'Cannot find valid git repository path.',
    MissingReason.NO_LOCAL_MANIFEST: 'Cannot find a license on your disk.',
    MissingReason.NO_WEB_MATCH: 'Cannot find a license on the web.',
    MissingReason.NONE: 'Found a license file, but not its license name.',
}


def _header(record: DependencyRecord) -> str:
    lic = record.license or NO_LICENSE
    if lic.startswith('('):
        # SPDX expressions such as "(MIT OR Apache-2.0)" carry their own.
        return f'{record.name} {lic}'
    return f'{record.name} ({lic})'


def render_record(record: DependencyRecord) -> str:
    lines = [_header(record)]
    lines.extend(v for v in (record.description, record.repository_url, record.license_url) if v)
    return '\n'.join(lines)


def render_report(records: Iterable[DependencyRecord]) -> str:
    """Render the report text; deterministic for a given input order."""
    ordered = sorted(records, key=lambda r: r.name)
    return '\n\n'.join(render_record(r) for r in ordered) + ('\n' if ordered else '')


def write_report(path: Path, records: Iterable[DependencyRecord]) -> Path:
    """Write the rendered report to *path* and return it."""
    path.write_text(render_report(records), encoding='utf-8')
    log.info('report_written', path=str(path))
    return path


def print_summary(
    console: Console,
    records: Sequence[DependencyRecord],
    out_path: Path | None,
    messages: Sequence[str] = (),
) -> None:
    """Print totals and an itemized list of unresolved dependencies.

    Args:
        console: Rich console to print to.
        records: Every finalized record.
        out_path: Where the report was saved, if it was.
        messages: Hosting-API messages collected during the run.
    """
    for message in messages:
        console.print(f'[yellow]{escape(message)}[/]', highlight=False)
    if out_path is not None:
        console.print(f'Saved to: {escape(str(out_path))}', highlight=False)

    missing = [r for r in records if not r.resolved]
    console.print(f'Processed {len(records)} packages.')
    if not missing:
        console.print('[bold green]Found licenses for all the packages.[/]')
        return

    console.print(f'[green]Found {len(records) - len(missing)} licenses.[/]')
    console.print(f"[bold red]Can't find {len(missing)} licenses![/]")
    for record in sorted(missing, key=lambda r: r.name):
        reason = REASON_TEXT[record.missing_reason]
        console.print()
        console.print(f'[bold]{escape(record.name)}[/]: {reason}', highlight=False)
        console.print(f'  [cyan]repo url[/]: {escape(record.repository_url or "-")}', highlight=False)
        console.print(f'  [cyan]license url[/]: {escape(record.license_url or "-")}', highlight=False)


def format_summary(
    records: Sequence[DependencyRecord],
    out_path: Path | None = None,
    messages: Sequence[str] = (),
    *,
    color: bool = False,
) -> str:
    """Capture :func:`print_summary` output as a string."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, width=120)
    print_summary(console, records, out_path, messages)
    return buf.getvalue().rstrip('\n')


__all__ = [
    'NO_LICENSE',
    'REASON_TEXT',
    'format_summary',
    'print_summary',
    'render_record',
    'render_report',
    'write_report',
]
