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

"""Tests for licensekit.cli module."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from io import StringIO
from pathlib import Path
from typing import TypeVar
from unittest.mock import AsyncMock, patch

import httpx
from licensekit.cli import build_parser, main, run
from licensekit.config import RunConfig
from licensekit.errors import EnumerationError
from rich.console import Console

_T = TypeVar('_T')

_RATE = {'rate': {'limit': 60, 'remaining': 42, 'reset': 1_700_000_000}}

_WIDGET_LICENSE = 'https://github.com/acme/widget/blob/main/LICENSE'

_PUBSPEC = """\
name: app
dependencies:
  http: ^1.0.0
  widget:
    git: https://github.com/acme/widget.git
"""


def _run(coro: Coroutine[object, object, _T]) -> _T:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


class _FakeInternet:
    """MockTransport handler standing in for GitHub, pub.dev and friends."""

    def __init__(self, *, github_up: bool = True) -> None:
        self.github_up = github_up
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        host, path = request.url.host, request.url.path
        if host == 'api.github.com':
            if not self.github_up:
                raise httpx.ConnectError('down', request=request)
            if path == '/rate_limit':
                return httpx.Response(200, json=_RATE)
            return httpx.Response(404, json={'message': 'Not Found'})
        if host == 'pub.dev' and path == '/api/packages/http':
            pubspec = {
                'name': 'http',
                'description': 'A composable HTTP library.',
                'repository': 'https://github.com/dart-lang/http',
            }
            return httpx.Response(200, json={'latest': {'pubspec': pubspec}})
        if host == 'pub.dev' and path == '/packages/http':
            return httpx.Response(200, text='<h3>License</h3><p>MIT (LICENSE)</p>')
        if str(request.url) == _WIDGET_LICENSE:
            return httpx.Response(200)
        return httpx.Response(404)


def _invoke(cwd: Path, internet: _FakeInternet | None = None, **kwargs: object) -> tuple[int, str]:
    buf = StringIO()
    console = Console(file=buf, force_terminal=False, width=200)
    config = RunConfig(cwd=cwd, **kwargs)  # type: ignore[arg-type]
    code = _run(run(config, console=console, transport=httpx.MockTransport(internet or _FakeInternet())))
    return code, buf.getvalue()


class TestBuildParser:
    """Tests for build_parser()."""

    def test_defaults(self) -> None:
        """All flags default to off."""
        args = build_parser().parse_args([])
        assert not args.deep
        assert not args.verbose
        assert not args.quiet
        assert not args.json_log
        assert args.cwd

    def test_flags(self, tmp_path: Path) -> None:
        """Flags are parsed."""
        args = build_parser().parse_args(['--deep', '--verbose', '--cwd', str(tmp_path), '--json-log'])
        assert args.deep
        assert args.verbose
        assert args.json_log
        assert args.cwd == str(tmp_path)


class TestRun:
    """Tests for run()."""

    def test_no_manifest(self, tmp_path: Path) -> None:
        """A directory without a manifest exits early with 0."""
        code, out = _invoke(tmp_path)
        assert code == 0
        assert 'No supported dependencies file found. Exiting.' in out
        assert not (tmp_path / 'installed-packages.txt').exists()

    def test_no_dependencies(self, tmp_path: Path) -> None:
        """Zero dependencies print a message and write no report."""
        (tmp_path / 'pubspec.yaml').write_text('name: app\n', encoding='utf-8')
        code, out = _invoke(tmp_path)
        assert code == 0
        assert 'Found a dart project.' in out
        assert 'No dependencies found. Exiting.' in out
        assert not (tmp_path / 'installed-packages.txt').exists()

    def test_full_run(self, tmp_path: Path) -> None:
        """A dart project is resolved, reported and summarized."""
        (tmp_path / 'pubspec.yaml').write_text(_PUBSPEC, encoding='utf-8')
        code, out = _invoke(tmp_path)
        assert code == 0
        assert 'You have 42 Github api requests left.' in out
        assert 'Hint: If you set a GITHUB_TOKEN env.' in out
        assert 'Processing 2 packages.' in out
        assert 'Processed 2 packages.' in out
        assert 'Found 1 licenses.' in out
        assert 'widget: Found a license file, but not its license name.' in out

        report = (tmp_path / 'installed-packages.txt').read_text(encoding='utf-8')
        assert report == (
            'http (MIT)\n'
            'A composable HTTP library.\n'
            'https://github.com/dart-lang/http\n'
            '\n'
            'widget (no license found)\n'
            'https://github.com/acme/widget\n'
            f'{_WIDGET_LICENSE}\n'
        )

    def test_ignore_file(self, tmp_path: Path) -> None:
        """Ignored names are listed and never resolved."""
        (tmp_path / 'pubspec.yaml').write_text(_PUBSPEC, encoding='utf-8')
        (tmp_path / '.licenseignore').write_text('# not ours\nhttp\n', encoding='utf-8')
        internet = _FakeInternet()
        _, out = _invoke(tmp_path, internet)
        assert 'Ignoring 1 packages:' in out
        assert 'Processing 1 packages.' in out
        assert all('pub.dev' not in url for url in internet.requests)
        assert 'http (' not in (tmp_path / 'installed-packages.txt').read_text(encoding='utf-8')

    def test_github_unreachable(self, tmp_path: Path) -> None:
        """An unreachable API is reported and never used for lookups."""
        (tmp_path / 'pubspec.yaml').write_text(_PUBSPEC, encoding='utf-8')
        internet = _FakeInternet(github_up=False)
        code, out = _invoke(tmp_path, internet)
        assert code == 0
        assert 'Error connecting to the GitHub api.' in out
        assert not any('/repos/' in url for url in internet.requests)
        assert (tmp_path / 'installed-packages.txt').exists()

    def test_enumeration_error(self, tmp_path: Path) -> None:
        """A failing npm ends in the no-dependencies path."""
        (tmp_path / 'package.json').write_text('{}', encoding='utf-8')
        with patch('licensekit.enumerators.npm.run_npm_ls', AsyncMock(side_effect=EnumerationError('node', 'no npm'))):
            code, out = _invoke(tmp_path)
        assert code == 0
        assert 'Found a node project.' in out
        assert 'No dependencies found. Exiting.' in out

    def test_unwritable_report(self, tmp_path: Path) -> None:
        """A report that cannot be written is reported and still exits 0."""
        (tmp_path / 'pubspec.yaml').write_text(_PUBSPEC, encoding='utf-8')
        with patch('licensekit.cli.write_report', side_effect=PermissionError('read-only file system')):
            code, out = _invoke(tmp_path)
        assert code == 0
        assert 'Could not write' in out
        assert 'read-only file system' in out
        assert 'Saved to:' not in out
        assert 'Processed 2 packages.' in out


class TestMain:
    """Tests for main()."""

    def test_builds_config_and_runs(self, tmp_path: Path) -> None:
        """main() parses flags, configures logging and returns run()'s code."""
        with (
            patch('licensekit.cli.run', AsyncMock(return_value=0)) as fake_run,
            patch('licensekit.cli.configure_logging') as fake_logging,
            patch.dict('os.environ', {'GITHUB_TOKEN': 'ghp_from_env'}),
        ):
            assert main(['--cwd', str(tmp_path), '--deep', '--quiet']) == 0
        config = fake_run.await_args.args[0]
        assert config.cwd == tmp_path.resolve()
        assert config.deep
        assert config.github_token == 'ghp_from_env'
        fake_logging.assert_called_once_with(verbose=False, quiet=True, json_log=False)
